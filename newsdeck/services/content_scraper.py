"""Best-effort article body extraction.

Used by adapters whose providers only return truncated content. Every
failure path returns an empty string: callers treat that as "no
enhancement", never as an error.
"""

import re

import httpx
from bs4 import BeautifulSoup, Tag

from newsdeck.core.config import settings
from newsdeck.utils.formatting import collapse_whitespace
from newsdeck.utils.logging import get_logger

logger = get_logger(__name__)

_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+")
_AD_CLASS_TOKENS = {"ad", "ads", "advert", "advertisement", "advertising", "sponsored"}


def _is_ad_class(css_class: str | None) -> bool:
    if not css_class:
        return False
    token = css_class.lower()
    return token in _AD_CLASS_TOKENS or token.startswith(("ad-", "ads-", "advert"))


class ContentScraper:
    """Fetch a page and pull the main body text out of it.

    Attributes:
        timeout: Page fetch timeout in seconds
        user_agent: Browser-like user agent sent with the request
        min_segment_length: Shortest sentence kept
        max_segments: Number of sentences returned at most
    """

    # Tried in order; first non-empty match wins
    CONTENT_SELECTORS = (
        "article",
        '[class*="content"]',
        '[class*="story"]',
        '[class*="article"]',
        "main",
    )

    REMOVE_TAGS = ("script", "style", "nav", "header", "footer", "aside", "noscript", "form")

    def __init__(
        self,
        timeout: float | None = None,
        user_agent: str | None = None,
        min_segment_length: int = 50,
        max_segments: int = 10,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the scraper.

        Args:
            timeout: Page fetch timeout (default from settings)
            user_agent: User agent (default from settings)
            min_segment_length: Sentences this short or shorter are dropped
            max_segments: Maximum number of sentences kept
            transport: Optional httpx transport, used by tests
        """
        self.timeout = timeout or settings.scraper_timeout
        self.user_agent = user_agent or settings.scraper_user_agent
        self.min_segment_length = min_segment_length
        self.max_segments = max_segments
        self._transport = transport

    async def scrape(self, url: str | None) -> str:
        """Return the extracted body text of ``url`` or an empty string."""
        if not url or not url.startswith(("http://", "https://")):
            return ""

        headers = {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml",
            "Accept-Language": "en-GB,en;q=0.9",
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(url, headers=headers)

            if not response.is_success:
                logger.debug(f"Scrape skipped, HTTP {response.status_code} for {url}")
                return ""

            content_type = response.headers.get("Content-Type", "")
            if content_type and "html" not in content_type:
                return ""

            return self.extract_text(response.text)

        except httpx.HTTPError as e:
            logger.debug(f"Request error scraping {url}: {e}")
        except Exception as e:
            logger.debug(f"Error scraping {url}: {e}")

        return ""

    def extract_text(self, page_html: str) -> str:
        """Extract main-body sentences from an HTML document."""
        soup = BeautifulSoup(page_html, "html.parser")

        for tag in soup.find_all(list(self.REMOVE_TAGS)) + soup.find_all(class_=_is_ad_class):
            # Nested matches are already gone with their parent
            if not tag.decomposed:
                tag.decompose()

        container = self._find_container(soup)
        if container is None:
            return ""

        text = collapse_whitespace(container.get_text(" "))
        segments = [
            segment.strip()
            for segment in _SENTENCE_SPLIT_RE.split(text)
            if len(segment.strip()) > self.min_segment_length
        ]
        return " ".join(segments[: self.max_segments])

    def _find_container(self, soup: BeautifulSoup) -> Tag | None:
        for selector in self.CONTENT_SELECTORS:
            for candidate in soup.select(selector):
                if candidate.get_text(strip=True):
                    return candidate
        return soup.body if soup.body is not None else soup
