"""
ChatGPT Classifier
Tags content with the OpenAI Chat Completions API
"""

from typing import List, Optional

from openai import AsyncOpenAI

from ..errors import ClassificationError
from ..web_scraper import WebScraper
from .base import Classifier, SYSTEM_PROMPT, parse_tags

DEFAULT_MODEL = "gpt-4o-mini"


class ChatGptClassifier(Classifier):
    """OpenAI-backed classifier; an API key is required"""

    name = "ChatGPT"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        max_prompt_length: int = 200000,
        timeout: Optional[float] = None,
        scraper: Optional[WebScraper] = None,
        client=None,
    ):
        super().__init__(max_prompt_length=max_prompt_length, timeout=timeout, scraper=scraper)
        self.model = model
        self.client = client
        if self.client is None and api_key:
            self.client = AsyncOpenAI(api_key=api_key, max_retries=0)

    async def _classify(self, content: str) -> List[str]:
        if self.client is None:
            raise ClassificationError("OpenAI API key is required for classification")

        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": self.build_user_prompt(content)},
            ],
            temperature=0.3,
            max_tokens=100,
        )

        if not response.choices:
            raise ClassificationError("Empty response from OpenAI API")

        return parse_tags(response.choices[0].message.content or "")
