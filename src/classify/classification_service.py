"""
Classification Service
Drives one classification request:
  hash lookup -> (duplicate | classify -> persist -> index tags)
"""

import logging
from dataclasses import dataclass
from enum import Enum

from .classifier import Classifier
from .content import Content, ContentStorage
from .errors import ClassifyError, InvalidContentError
from .tags import TagStorage, normalize_tags

logger = logging.getLogger(__name__)


class ClassificationStatus(str, Enum):
    CREATED = "created"
    DUPLICATE = "duplicate"


@dataclass
class ClassificationOutcome:
    """Result of a classification request; a duplicate carries the pre-existing record"""
    status: ClassificationStatus
    content: Content

    @property
    def is_duplicate(self) -> bool:
        return self.status == ClassificationStatus.DUPLICATE


class ClassificationService:
    """
    Classifies new content and writes it to both stores.

    Nothing is written when classification fails, and the tag index is not
    touched when persisting fails. If indexing fails after the record was
    persisted, the record keeps its embedded tags but the index does not
    reflect them; the error propagates and IndexReconciler repairs the gap.
    """

    def __init__(self, content_storage: ContentStorage, tag_storage: TagStorage, classifier: Classifier):
        self.content_storage = content_storage
        self.tag_storage = tag_storage
        self.classifier = classifier

    async def classify(self, text: str) -> ClassificationOutcome:
        """
        Classify text (or the page behind a URL) unless identical text is already stored.

        Raises:
            InvalidContentError: If text is empty or whitespace
            ClassifyError: If classification, persistence or indexing fails
        """
        if not text or not text.strip():
            raise InvalidContentError("Content must not be empty")

        content_hash = Content.generate_hash(text)
        existing = await self.content_storage.find_by_hash(content_hash)
        if existing is not None:
            logger.info(f"Duplicate content {existing.id} for hash {content_hash[:12]}")
            return ClassificationOutcome(ClassificationStatus.DUPLICATE, existing)

        content = Content.new(text)
        if content.is_url():
            logger.debug(f"Classifying URL for new content {content.id}")
            raw_tags = await self.classifier.classify_url(text)
        else:
            logger.debug(f"Classifying text for new content {content.id}")
            raw_tags = await self.classifier.classify(text)

        content = content.with_tags(normalize_tags(raw_tags))

        await self.content_storage.store(content)
        logger.debug(f"Persisted content {content.id}")

        try:
            await self.tag_storage.add_tags(str(content.id), content.tags)
        except ClassifyError as e:
            logger.error(
                f"Content {content.id} persisted but its tags {content.tags} were not indexed: {e}. "
                f"Run the index reconciler to repair it."
            )
            raise

        logger.info(f"Classified content {content.id} with tags {content.tags}")
        return ClassificationOutcome(ClassificationStatus.CREATED, content)
