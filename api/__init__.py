"""Vercel entry points."""
