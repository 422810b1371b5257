"""
Storefront - Main FastAPI Application

Single entry point for the cart, checkout and payment-session routes.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront import __version__
from storefront.config import get_settings
from storefront.logging import get_logger
from storefront.routers import router as storefront_router
from storefront.routers.deps import close_dependencies

logger = get_logger(__name__)


# ==================== FASTAPI APP ====================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    settings = get_settings()
    if not settings.is_payment_configured:
        logger.warning("STRIPE_SECRET_KEY is not set; checkout sessions will fail")
    yield
    await close_dependencies()


app = FastAPI(
    title="Storefront",
    description="Shopping cart and hosted checkout API",
    version=__version__,
    lifespan=lifespan,
)

# The frontend runs on its own origin and sends the cart cookie
app.add_middleware(
    CORSMiddleware,
    allow_origins=[get_settings().storefront_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(storefront_router)


# ==================== HEALTH CHECK ====================

@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok", "service": "storefront"}
