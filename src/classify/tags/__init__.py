"""
Tags Module
Inverted tag index and tag response schemas
"""

from .models import (
    TagsResponse,
    ContentQueryResponse,
    normalize_tag,
    normalize_tags
)
from .storage import TagStorage, create_tag_storage

__all__ = [
    "TagsResponse",
    "ContentQueryResponse",
    "normalize_tag",
    "normalize_tags",
    "TagStorage",
    "create_tag_storage"
]
