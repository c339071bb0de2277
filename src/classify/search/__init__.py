"""
Search Module for tag queries
"""

from .service import SearchService

__all__ = ["SearchService"]
