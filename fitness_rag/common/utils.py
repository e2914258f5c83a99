"""Text helpers shared by the crawler, the index and the answerer.

Text handling contract
----------------------
* Crawled pages and user questions have BOM and replacement characters
  stripped at the boundary, then NFKC-normalised.
* Page text is whitespace-normalised once, by the fetcher; later stages
  treat ``RawDocument.content`` as clean.
"""

import re
import unicodedata

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_text(text: str | None) -> str:
    """Remove BOM markers, apply NFKC normalization and trim.

    Args:
        text: Input text that may contain BOM or special characters.

    Returns:
        Cleaned text, or an empty string for ``None``.
    """
    if not text:
        return ""

    cleaned = text.replace("\ufeff", "").replace("\ufffd", "")
    cleaned = unicodedata.normalize("NFKC", cleaned)
    return cleaned.strip()


def clean_whitespace(text: str) -> str:
    """Collapse whitespace runs within each line and drop empty lines.

    Args:
        text: Raw text extracted from HTML.

    Returns:
        Text with single-spaced lines and no blank lines.
    """
    lines = (_WHITESPACE_RUN.sub(" ", line).strip() for line in text.splitlines())
    return "\n".join(line for line in lines if line)


def truncate(text: str, limit: int, marker: str = "...") -> str:
    """Cut ``text`` to ``limit`` characters, appending ``marker`` when cut.

    Args:
        text: Text to shorten.
        limit: Maximum number of characters kept from ``text``.
        marker: Suffix signalling the text was truncated.

    Returns:
        The original text when short enough, otherwise the prefix plus marker.
    """
    if limit < 0:
        raise ValueError("limit must be non-negative")
    if len(text) <= limit:
        return text
    return text[:limit] + marker
