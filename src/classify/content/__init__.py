"""
Content Module
Content records, their wire schemas and the content-addressable stores
"""

from .models import (
    Content,
    ClassifyRequest,
    ClassifyResponse,
    DeleteContentResponse,
    ErrorResponse
)
from .storage import ContentStorage, create_content_storage

__all__ = [
    "Content",
    "ClassifyRequest",
    "ClassifyResponse",
    "DeleteContentResponse",
    "ErrorResponse",
    "ContentStorage",
    "create_content_storage"
]
