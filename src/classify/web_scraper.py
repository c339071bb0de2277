"""
Web Scraper Module
Fetches a URL and extracts the text the classifier sees for it
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from .errors import HttpError, UrlError

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (compatible; classify/1.0; +https://github.com/)',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,text/plain;q=0.8,*/*;q=0.5',
    'Accept-Language': 'en-US,en;q=0.5',
}


def truncate_text(text: str, max_length: int) -> str:
    """Cut text to max_length characters, noting the original length"""
    if len(text) <= max_length:
        return text
    return f"{text[:max_length]}... [content truncated, original length: {len(text)}]"


def validate_url(url: str) -> str:
    """
    Check that url is an absolute http(s) URL.

    Raises:
        UrlError: If the scheme is not http/https or the host is missing
    """
    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https"):
        raise UrlError(f"Invalid URL: unsupported scheme in '{url}'")
    if not parsed.netloc:
        raise UrlError(f"Invalid URL: missing host in '{url}'")
    return parsed.geturl()


@dataclass
class WebContent:
    """Extracted content from a web page"""
    url: str
    title: str
    description: str
    content: str  # Main text content

    def as_text(self) -> str:
        parts = [self.title, self.description, self.content]
        return "\n\n".join(part for part in parts if part)


class WebScraper:
    """Fetches pages over HTTP and reduces them to classifiable text"""

    def __init__(
        self,
        timeout: float = 30,
        max_length: int = 200000,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.max_length = max_length
        self.transport = transport

    async def fetch(self, url: str) -> WebContent:
        """
        Fetch and extract content from a URL

        Args:
            url: The URL to fetch

        Returns:
            WebContent with title, description and main text

        Raises:
            UrlError: If the URL is malformed
            HttpError: If the request fails or returns a non-2xx status
        """
        url = validate_url(url)
        logger.info(f"Fetching: {url}")

        try:
            async with httpx.AsyncClient(
                headers=DEFAULT_HEADERS,
                timeout=self.timeout,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                response = await client.get(url)
        except httpx.TimeoutException as e:
            raise HttpError(f"Timed out fetching {url}: {e}") from e
        except httpx.HTTPError as e:
            raise HttpError(f"Failed to fetch URL: {e}") from e

        if not response.is_success:
            raise HttpError(f"Failed to fetch URL: HTTP status {response.status_code}")

        content_type = response.headers.get("content-type", "")
        if "html" not in content_type:
            return WebContent(url=url, title="", description="", content=response.text.strip())

        soup = BeautifulSoup(response.text, 'html.parser')
        return WebContent(
            url=url,
            title=self._extract_title(soup),
            description=self._extract_description(soup),
            content=self._extract_content(soup),
        )

    async def fetch_text(self, url: str) -> str:
        """Fetch a URL and return its text, truncated to max_length"""
        page = await self.fetch(url)
        return truncate_text(page.as_text(), self.max_length)

    def _extract_title(self, soup: BeautifulSoup) -> str:
        """Extract page title"""
        og_title = soup.find('meta', property='og:title')
        if og_title and og_title.get('content'):
            return og_title['content'].strip()

        title_tag = soup.find('title')
        if title_tag:
            return title_tag.get_text().strip()

        h1 = soup.find('h1')
        if h1:
            return h1.get_text().strip()

        return ""

    def _extract_description(self, soup: BeautifulSoup) -> str:
        """Extract page description"""
        og_desc = soup.find('meta', property='og:description')
        if og_desc and og_desc.get('content'):
            return og_desc['content'].strip()

        meta_desc = soup.find('meta', attrs={'name': 'description'})
        if meta_desc and meta_desc.get('content'):
            return meta_desc['content'].strip()

        return ""

    def _extract_content(self, soup: BeautifulSoup) -> str:
        """Extract main text content"""
        for element in soup.find_all(['script', 'style', 'nav', 'header', 'footer',
                                      'aside', 'form', 'noscript', 'iframe']):
            element.decompose()

        content_elem = soup.find('article') or soup.find('main') or soup.find('body') or soup
        text = content_elem.get_text(separator='\n')

        # Collapse the whitespace left behind by markup
        text = re.sub(r'[ \t]+', ' ', text)
        text = re.sub(r'\n\s*\n+', '\n\n', text)
        return text.strip()
