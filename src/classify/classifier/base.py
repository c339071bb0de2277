"""
Classifier base
Shared prompt, reply parsing and URL handling for the LLM-backed classifiers
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from ..errors import ClassificationError, ClassifierTimeoutError, ClassifyError
from ..web_scraper import WebScraper, truncate_text

logger = logging.getLogger(__name__)

MAX_TAGS = 5

SYSTEM_PROMPT = (
    "You are a helpful content tagger that analyzes text and extracts relevant tags. "
    f"Provide exactly up to {MAX_TAGS} descriptive tags that categorize the content. "
    "Return ONLY the tags separated by commas, nothing else. "
    "Tags should be single words or short phrases."
)

USER_PROMPT = "Please analyze the following content and provide up to {max_tags} descriptive tags: \n\n{content}"


def parse_tags(reply: str) -> List[str]:
    """Split a comma-separated model reply into at most MAX_TAGS trimmed tags"""
    tags = [tag.strip() for tag in reply.split(",")]
    return [tag for tag in tags if tag][:MAX_TAGS]


class Classifier(ABC):
    """Maps text, or the page behind a URL, to a short list of tags"""

    name = "classifier"

    def __init__(
        self,
        max_prompt_length: int = 200000,
        timeout: Optional[float] = None,
        scraper: Optional[WebScraper] = None,
    ):
        self.max_prompt_length = max_prompt_length
        self.timeout = timeout
        self.scraper = scraper or WebScraper(max_length=max_prompt_length)

    def truncate_content(self, content: str) -> str:
        return truncate_text(content, self.max_prompt_length)

    def build_user_prompt(self, content: str) -> str:
        return USER_PROMPT.format(max_tags=MAX_TAGS, content=self.truncate_content(content))

    async def classify(self, content: str) -> List[str]:
        """
        Classify text.

        Raises:
            ClassifierTimeoutError: The backend did not answer in time
            ClassificationError: The backend failed or returned nothing usable
        """
        try:
            if self.timeout:
                tags = await asyncio.wait_for(self._classify(content), self.timeout)
            else:
                tags = await self._classify(content)
        except ClassifyError:
            raise
        except asyncio.TimeoutError:
            raise ClassifierTimeoutError(f"{self.name} did not respond within {self.timeout}s")
        except Exception as e:
            raise ClassificationError(f"Failed to call {self.name}: {e}") from e

        logger.debug(f"[{self.name}] Classified content into {tags}")
        return tags

    async def classify_url(self, url: str) -> List[str]:
        """Fetch the page behind url and classify its text"""
        text = await self.scraper.fetch_text(url)
        return await self.classify(text)

    @abstractmethod
    async def _classify(self, content: str) -> List[str]:
        ...
