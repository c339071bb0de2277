"""
Tags Pydantic Models
Tag normalisation and response schemas for tag listing and tag queries
"""

from typing import Iterable, List, Optional

from pydantic import BaseModel

from ..content.models import Content


def normalize_tag(tag: str) -> str:
    """Trim surrounding whitespace and lower-case"""
    return tag.strip().lower()


def normalize_tags(tags: Iterable[str]) -> List[str]:
    """Normalise every tag, dropping empties and repeats but keeping first-seen order"""
    seen = set()
    result = []
    for tag in tags:
        normalized = normalize_tag(tag)
        if normalized and normalized not in seen:
            seen.add(normalized)
            result.append(normalized)
    return result


class TagsResponse(BaseModel):
    """Response for GET /tags"""
    tags: List[str]
    count: int
    success: bool = True
    error: Optional[str] = None


class ContentQueryResponse(BaseModel):
    """Response for GET /query"""
    items: List[Content]
    tags: List[str]
    count: int
    success: bool = True
    error: Optional[str] = None
