"""
Content Pydantic Models
The stored content entity and its request/response schemas
"""

import hashlib
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

URL_PREFIXES = ("http://", "https://")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Content(BaseModel):
    """A piece of classified text or URL"""
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    content: str
    content_hash: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def new(cls, text: str) -> "Content":
        """Create a fresh record with a new id and the hash of its text"""
        now = _utcnow()
        return cls(
            content=text,
            content_hash=cls.generate_hash(text),
            created_at=now,
            updated_at=now,
        )

    @staticmethod
    def generate_hash(text: str) -> str:
        """SHA-256 hex digest of the UTF-8 encoded text"""
        return hashlib.sha256(text.encode("utf-8")).hexdigest()

    def with_tags(self, tags: List[str]) -> "Content":
        """Return a copy carrying the given tags, with updated_at advanced"""
        return self.model_copy(update={"tags": list(tags), "updated_at": _utcnow()})

    def is_url(self) -> bool:
        return self.content.startswith(URL_PREFIXES)

    def to_json(self) -> str:
        return self.model_dump_json()

    def __str__(self) -> str:
        preview = self.content if len(self.content) <= 30 else f"{self.content[:30]}..."
        return f"Content {{ id: {self.id}, content: {preview}, tags: {self.tags} }}"


# =============================================
# Request/Response Models
# =============================================
class ClassifyRequest(BaseModel):
    """Schema for classifying a piece of text or a URL"""
    content: str


class ClassifyResponse(BaseModel):
    """Response for POST /classify, also used for the duplicate (409) case and failures"""
    content: Optional[Content] = None
    success: bool = True
    error: Optional[str] = None


class DeleteContentResponse(BaseModel):
    """Response for DELETE /content/{id}"""
    success: bool
    id: str
    removed_tags: List[str] = Field(default_factory=list)
    error: Optional[str] = None


class ErrorResponse(BaseModel):
    """Body returned for any failed request"""
    success: bool = False
    error: str
