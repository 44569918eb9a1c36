"""Redirect and QR image routes."""

from .routes import router as web_router

__all__ = ["web_router"]
