"""
Claude Classifier
Tags content with the Anthropic Messages API, falling back to keyword rules
when no API key is configured
"""

from typing import List, Optional

from anthropic import AsyncAnthropic

from ..web_scraper import WebScraper
from .base import Classifier, MAX_TAGS, SYSTEM_PROMPT, parse_tags

DEFAULT_MODEL = "claude-3-haiku-20240307"

# (keywords, tags added when any keyword appears)
KEYWORD_RULES = [
    (("rust",), ["programming", "rust"]),
    (("web", "http", "html"), ["web"]),
    (("api", "rest", "graphql"), ["api"]),
    (("database", "sql", "redis"), ["database"]),
    (("ai", "machine learning", "ml"), ["ai"]),
]


def keyword_classify(content: str) -> List[str]:
    """Offline classification by substring match"""
    lowered = content.lower()
    tags = []
    for keywords, rule_tags in KEYWORD_RULES:
        if any(keyword in lowered for keyword in keywords):
            tags.extend(rule_tags)
    return (tags or ["unclassified"])[:MAX_TAGS]


class ClaudeClassifier(Classifier):
    """Anthropic-backed classifier"""

    name = "Claude"

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
            self.client = AsyncAnthropic(api_key=api_key, max_retries=0)

    async def _classify(self, content: str) -> List[str]:
        if self.client is None:
            return keyword_classify(content)

        response = await self.client.messages.create(
            model=self.model,
            max_tokens=100,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": self.build_user_prompt(content)}],
        )

        reply = "".join(block.text for block in response.content if block.type == "text")
        return parse_tags(reply)
