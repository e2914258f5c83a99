"""Crawling and content filtering."""

from .relevance import FITNESS_KEYWORDS, RelevanceFilter
from .sources import DEFAULT_SOURCES
from .web_fetcher import WebFetcher, parse_html

__all__ = ["DEFAULT_SOURCES", "FITNESS_KEYWORDS", "RelevanceFilter", "WebFetcher", "parse_html"]
