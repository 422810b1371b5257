"""
Common Error Constants

Centralized user-facing error messages shared by the cart, checkout and
payment-session layers.
"""

# Cart errors
ERROR_CART_EMPTY = "Cart is empty"

# Checkout errors
ERROR_CHECKOUT_IN_PROGRESS = "Checkout already in progress"
ERROR_SESSION_CREATION_FAILED = "Could not start checkout"
ERROR_SESSION_ID_MISSING = "Payment provider returned no session id"
ERROR_REDIRECT_FAILED = "Could not open the payment page"

# Payment provider errors
ERROR_PAYMENT_NOT_CONFIGURED = "Payment provider is not configured"

# Generic errors
ERROR_INTERNAL = "Internal server error"
