"""
Classifier Module
LLM-backed taggers and the factory that selects one from configuration
"""

from ..config import ClassifierConfig, ClassifierType
from ..web_scraper import WebScraper
from .base import Classifier, MAX_TAGS, parse_tags
from .chatgpt import ChatGptClassifier
from .claude import ClaudeClassifier, keyword_classify


def create_classifier(config: ClassifierConfig) -> Classifier:
    """Build the configured classifier, typed as the Classifier abstraction"""
    scraper = WebScraper(timeout=config.url_fetch_timeout_seconds, max_length=config.max_prompt_length)

    if config.classifier_type == ClassifierType.CHATGPT:
        return ChatGptClassifier(
            config.openai_api_key,
            model=config.openai_model,
            max_prompt_length=config.max_prompt_length,
            timeout=config.timeout_seconds,
            scraper=scraper,
        )

    return ClaudeClassifier(
        config.anthropic_api_key,
        model=config.anthropic_model,
        max_prompt_length=config.max_prompt_length,
        timeout=config.timeout_seconds,
        scraper=scraper,
    )


__all__ = [
    "Classifier",
    "ChatGptClassifier",
    "ClaudeClassifier",
    "MAX_TAGS",
    "create_classifier",
    "keyword_classify",
    "parse_tags"
]
