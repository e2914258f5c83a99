"""Keyword-based relevance filter for crawled pages."""

import logging
from collections.abc import Iterable

from ..domain.models import RawDocument

logger = logging.getLogger(__name__)

FITNESS_KEYWORDS: frozenset[str] = frozenset(
    {
        "workout",
        "exercise",
        "fitness",
        "training",
        "gym",
        "muscle",
        "strength",
        "cardio",
        "weight",
        "lifting",
        "squat",
        "push-up",
        "pull-up",
        "deadlift",
        "bench press",
        "running",
        "yoga",
        "pilates",
        "crossfit",
        "bodybuilding",
        "reps",
        "sets",
        "form",
        "technique",
        "routine",
        "program",
        "diet",
        "nutrition",
    }
)

MIN_KEYWORD_MATCHES = 2
MIN_CONTENT_LENGTH = 500


class RelevanceFilter:
    """Accepts pages that look like fitness content and are long enough.

    A page is relevant when at least ``min_keyword_matches`` distinct terms
    from the vocabulary appear in its title, content or description.
    """

    def __init__(
        self,
        min_keyword_matches: int = MIN_KEYWORD_MATCHES,
        min_content_length: int = MIN_CONTENT_LENGTH,
        keywords: Iterable[str] = FITNESS_KEYWORDS,
    ) -> None:
        self.min_keyword_matches = min_keyword_matches
        self.min_content_length = min_content_length
        self.keywords = frozenset(keyword.lower() for keyword in keywords)

    def matched_keywords(self, doc: RawDocument) -> set[str]:
        """Return the distinct vocabulary terms present in the document."""
        text = " ".join(
            [doc.title, doc.content, doc.metadata.description or ""]
        ).lower()
        return {keyword for keyword in self.keywords if keyword in text}

    def is_relevant(self, doc: RawDocument) -> bool:
        return len(self.matched_keywords(doc)) >= self.min_keyword_matches

    def is_acceptable(self, doc: RawDocument, min_length: int | None = None) -> bool:
        """Relevant and at least ``min_length`` characters of content."""
        required = self.min_content_length if min_length is None else min_length
        return self.is_relevant(doc) and len(doc.content) >= required

    def filter(self, docs: Iterable[RawDocument]) -> list[RawDocument]:
        """Keep acceptable documents, logging why the others were dropped."""
        accepted: list[RawDocument] = []
        for doc in docs:
            if not self.is_relevant(doc):
                logger.info("Rejected %s: not fitness content", doc.url)
            elif len(doc.content) < self.min_content_length:
                logger.info(
                    "Rejected %s: %d chars of content (minimum %d)",
                    doc.url,
                    len(doc.content),
                    self.min_content_length,
                )
            else:
                accepted.append(doc)
        return accepted
