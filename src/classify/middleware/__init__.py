"""
Middleware Module
"""

from .api_key import ApiKeyMiddleware, API_KEY_HEADER

__all__ = ["ApiKeyMiddleware", "API_KEY_HEADER"]
