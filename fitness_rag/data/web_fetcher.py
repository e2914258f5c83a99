"""Web fetcher for fitness articles.

Downloads pages with a browser-like ``requests`` session, strips page chrome
with BeautifulSoup and extracts the article text and metadata.
"""

import logging
import time
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import requests
from bs4 import BeautifulSoup

from ..common.exceptions import FetchError
from ..common.utils import clean_whitespace, normalize_text
from ..domain.models import DocumentMetadata, RawDocument

logger = logging.getLogger(__name__)

# Constants
REQUEST_TIMEOUT = 10
MAX_REDIRECTS = 5
BATCH_SIZE = 3
BATCH_DELAY_MS = 1000
DESCRIPTION_FALLBACK_CHARS = 200
UNTITLED = "Untitled"

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)
DEFAULT_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
}

# Page chrome removed before any text is read
NON_CONTENT_SELECTORS = (
    "script, style, noscript, iframe, nav, header, footer, aside, "
    ".advertisement, .ads, .social-share, .share, .comments, .comment"
)

# Tried in order; the first selector that matches provides the article text
CONTENT_SELECTORS = (
    "main",
    "article",
    ".content",
    ".post-content",
    ".entry-content",
    ".article-content",
    ".workout-content",
    ".exercise-content",
    "#content",
    ".main-content",
)

Extractor = Callable[[BeautifulSoup], str | None]


def _element_text(selector: str) -> Extractor:
    def extract(soup: BeautifulSoup) -> str | None:
        element = soup.select_one(selector)
        return element.get_text(" ", strip=True) if element else None

    return extract


def _meta_content(attr: str, value: str) -> Extractor:
    def extract(soup: BeautifulSoup) -> str | None:
        element = soup.find("meta", attrs={attr: value})
        if element is None:
            return None
        content = element.get("content")
        return str(content).strip() if content else None

    return extract


def _first_paragraph(limit: int) -> Extractor:
    def extract(soup: BeautifulSoup) -> str | None:
        paragraph = soup.find("p")
        return paragraph.get_text(" ", strip=True)[:limit] if paragraph else None

    return extract


TITLE_STRATEGIES: tuple[Extractor, ...] = (
    _element_text("title"),
    _element_text("h1"),
    _meta_content("property", "og:title"),
)
DESCRIPTION_STRATEGIES: tuple[Extractor, ...] = (
    _meta_content("name", "description"),
    _meta_content("property", "og:description"),
    _first_paragraph(DESCRIPTION_FALLBACK_CHARS),
)
AUTHOR_STRATEGIES: tuple[Extractor, ...] = (
    _meta_content("name", "author"),
    _element_text(".author"),
    _element_text('[rel="author"]'),
)
PUBLISH_DATE_STRATEGIES: tuple[Extractor, ...] = (
    _meta_content("property", "article:published_time"),
    _element_text(".publish-date"),
    _element_text(".date"),
)


def first_match(soup: BeautifulSoup, strategies: Iterable[Extractor]) -> str | None:
    """Run extraction strategies in order and return the first non-empty result."""
    for strategy in strategies:
        value = normalize_text(strategy(soup))
        if value:
            return value
    return None


def extract_content(soup: BeautifulSoup) -> str:
    """Return cleaned text of the first content container, else the whole body."""
    for selector in CONTENT_SELECTORS:
        element = soup.select_one(selector)
        if element is not None:
            return clean_whitespace(element.get_text("\n"))

    body = soup.body or soup
    return clean_whitespace(body.get_text("\n"))


def extract_tags(soup: BeautifulSoup) -> tuple[str, ...]:
    """Split ``meta[name=keywords]`` into a de-duplicated, ordered tag tuple."""
    keywords = _meta_content("name", "keywords")(soup)
    if not keywords:
        return ()
    tags = (normalize_text(tag) for tag in keywords.split(","))
    return tuple(dict.fromkeys(tag for tag in tags if tag))


def parse_html(url: str, html: str) -> RawDocument:
    """Turn an HTML page into a :class:`RawDocument`.

    Args:
        url: Address the page was fetched from.
        html: Raw page markup.

    Returns:
        The cleaned document with best-effort metadata.
    """
    soup = BeautifulSoup(html, "lxml")

    for element in soup.select(NON_CONTENT_SELECTORS):
        element.decompose()

    title = first_match(soup, TITLE_STRATEGIES) or UNTITLED
    content = normalize_text(extract_content(soup))

    metadata = DocumentMetadata(
        description=first_match(soup, DESCRIPTION_STRATEGIES),
        author=first_match(soup, AUTHOR_STRATEGIES),
        publish_date=first_match(soup, PUBLISH_DATE_STRATEGIES),
        tags=extract_tags(soup),
    )
    return RawDocument(url=url, title=title, content=content, metadata=metadata)


class WebFetcher:
    """Fetches fitness articles and converts them to :class:`RawDocument`."""

    def __init__(
        self,
        timeout: float = REQUEST_TIMEOUT,
        max_redirects: int = MAX_REDIRECTS,
        batch_size: int = BATCH_SIZE,
        batch_delay_ms: int = BATCH_DELAY_MS,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            timeout: Per-request timeout in seconds.
            max_redirects: Redirects followed before a request fails.
            batch_size: URLs fetched concurrently per batch.
            batch_delay_ms: Pause after each batch, in milliseconds.
            session: Optional pre-configured session (used by tests).
        """
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")

        self.timeout = timeout
        self.batch_size = batch_size
        self.batch_delay_ms = batch_delay_ms
        self.session = session or requests.Session()
        self.session.headers.update(DEFAULT_HEADERS)
        self.session.max_redirects = max_redirects

    def __enter__(self) -> "WebFetcher":
        """Enter context manager."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context manager and close session."""
        self.close()

    def close(self) -> None:
        """Close the HTTP session."""
        if self.session:
            self.session.close()

    def fetch(self, url: str) -> RawDocument:
        """Fetch and clean a single page.

        Args:
            url: Page to fetch.

        Returns:
            The parsed document.

        Raises:
            FetchError: Network error, timeout, too many redirects, non-2xx
                response or markup that could not be parsed.
        """
        logger.info("Fetching %s", url)
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"Failed to fetch {url}", cause=e, context={"url": url}) from e

        try:
            return parse_html(url, response.text)
        except Exception as e:  # noqa: BLE001
            raise FetchError(f"Failed to parse {url}", cause=e, context={"url": url}) from e

    def fetch_one(self, url: str) -> RawDocument | None:
        """Fetch a single page, reporting any failure as ``None``.

        Args:
            url: Page to fetch.

        Returns:
            The parsed document, or ``None`` when the page is unavailable.
        """
        try:
            return self.fetch(url)
        except FetchError as e:
            logger.warning("%s: %s", e.message, e.cause)
            return None

    def fetch_many(self, urls: Sequence[str]) -> list[RawDocument]:
        """Fetch pages in fixed-size concurrent batches.

        Each batch is fully resolved before the next one starts and is
        followed by ``batch_delay_ms`` of sleep, so a crawl of N batches waits
        N delays. Failed URLs are dropped; within a batch, results keep the
        order the URLs were given in.

        Args:
            urls: Pages to fetch.

        Returns:
            Successfully fetched documents (possibly fewer than ``urls``).
        """
        documents: list[RawDocument] = []
        if not urls:
            return documents

        batch_count = (len(urls) + self.batch_size - 1) // self.batch_size
        with ThreadPoolExecutor(max_workers=self.batch_size) as executor:
            for batch_number, start in enumerate(range(0, len(urls), self.batch_size), 1):
                batch = list(urls[start : start + self.batch_size])
                logger.info("Fetching batch %d/%d (%d URLs)", batch_number, batch_count, len(batch))

                results = list(executor.map(self.fetch_one, batch))
                for url, document in zip(batch, results, strict=True):
                    if document is None:
                        logger.warning("Skipping %s: no content", url)
                        continue
                    documents.append(document)

                time.sleep(self.batch_delay_ms / 1000)

        logger.info("Fetched %d of %d URLs", len(documents), len(urls))
        return documents
