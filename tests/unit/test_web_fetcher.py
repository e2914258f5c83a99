"""Tests for page extraction and batched fetching."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from fitness_rag.common.exceptions import FetchError
from fitness_rag.data.web_fetcher import WebFetcher, parse_html
from fitness_rag.domain.models import DocumentMetadata, RawDocument

pytestmark = pytest.mark.unit


class TestParseHtml:
    def test_extracts_title_and_metadata(self, sample_html):
        doc = parse_html("https://example.com/plan", sample_html)

        assert doc.url == "https://example.com/plan"
        assert doc.title == "Beginner Workout Plan"
        assert doc.metadata.description == "A four week plan for new lifters"
        assert doc.metadata.author == "Jane Coach"
        assert doc.metadata.publish_date == "2024-01-15"

    def test_tags_are_deduplicated_in_order(self, sample_html):
        doc = parse_html("https://example.com/plan", sample_html)

        assert doc.metadata.tags == ("workout", "beginner", "strength")

    def test_content_comes_from_main_without_chrome(self, sample_html):
        doc = parse_html("https://example.com/plan", sample_html)

        assert "Start with three full-body sessions." in doc.content
        assert "Focus on squat and push-up form." in doc.content
        for chrome in ("Home | Workouts", "Site Banner", "Buy supplements", "Related posts", "Copyright"):
            assert chrome not in doc.content
        assert "tracking" not in doc.content

    def test_content_has_no_blank_lines_or_double_spaces(self, sample_html):
        doc = parse_html("https://example.com/plan", sample_html)

        assert "\n\n" not in doc.content
        assert "  " not in doc.content

    def test_missing_title_falls_back(self):
        doc = parse_html("https://example.com/x", "<html><body><p>Just text</p></body></html>")

        assert doc.title == "Untitled"
        assert doc.content == "Just text"

    def test_h1_used_when_title_missing(self):
        html = "<html><body><h1>Deadlift Guide</h1><article>Hinge at the hips</article></body></html>"

        doc = parse_html("https://example.com/x", html)

        assert doc.title == "Deadlift Guide"
        assert doc.content == "Hinge at the hips"

    def test_description_falls_back_to_first_paragraph(self):
        html = "<html><body><p>" + "x" * 300 + "</p></body></html>"

        doc = parse_html("https://example.com/x", html)

        assert doc.metadata.description == "x" * 200

    def test_body_used_without_content_container(self):
        html = "<html><body><div>Row</div><div>Press</div></body></html>"

        doc = parse_html("https://example.com/x", html)

        assert doc.content == "Row\nPress"
        assert doc.metadata.tags == ()

    def test_body_wrapped_in_form_keeps_content(self):
        html = (
            "<html><body><form id='aspnetForm' method='post'>"
            "<div id='main-content'><p>Regular exercise and workout training build strength.</p></div>"
            "</form></body></html>"
        )

        doc = parse_html("https://example.com/aspx", html)

        assert "workout" in doc.content
        assert doc.content == "Regular exercise and workout training build strength."


def _response(html: str = "<html><title>T</title><body>Body</body></html>") -> MagicMock:
    response = MagicMock()
    response.text = html
    response.raise_for_status.return_value = None
    return response


class TestFetchOne:
    def test_returns_document(self):
        session = MagicMock()
        session.headers = {}
        session.get.return_value = _response()

        fetcher = WebFetcher(session=session, timeout=7)
        doc = fetcher.fetch_one("https://example.com/a")

        assert isinstance(doc, RawDocument)
        assert doc.title == "T"
        session.get.assert_called_once_with("https://example.com/a", timeout=7)

    @pytest.mark.parametrize(
        "error",
        [
            requests.ConnectionError("refused"),
            requests.Timeout("slow"),
            requests.TooManyRedirects("loop"),
        ],
    )
    def test_network_errors_return_none(self, error):
        session = MagicMock()
        session.headers = {}
        session.get.side_effect = error

        assert WebFetcher(session=session).fetch_one("https://example.com/a") is None

    def test_http_error_returns_none(self):
        session = MagicMock()
        session.headers = {}
        response = _response()
        response.raise_for_status.side_effect = requests.HTTPError("404")
        session.get.return_value = response

        assert WebFetcher(session=session).fetch_one("https://example.com/a") is None

    def test_fetch_raises_typed_error(self):
        session = MagicMock()
        session.headers = {}
        session.get.side_effect = requests.Timeout("slow")

        with pytest.raises(FetchError) as exc_info:
            WebFetcher(session=session).fetch("https://example.com/a")

        assert exc_info.value.extra_context["url"] == "https://example.com/a"
        assert isinstance(exc_info.value.cause, requests.Timeout)

    def test_session_configured_with_headers_and_redirect_limit(self):
        session = MagicMock()
        session.headers = {}

        WebFetcher(session=session, max_redirects=2)

        assert "Mozilla" in session.headers["User-Agent"]
        assert session.max_redirects == 2

    def test_rejects_invalid_batch_size(self):
        with pytest.raises(ValueError):
            WebFetcher(session=MagicMock(headers={}), batch_size=0)


class TestFetchMany:
    @patch("fitness_rag.data.web_fetcher.time.sleep")
    def test_failed_urls_dropped_and_delay_after_each_batch(self, mock_sleep):
        urls = [f"https://example.com/u{i}" for i in range(1, 7)]
        fetcher = WebFetcher(session=MagicMock(headers={}), batch_size=3, batch_delay_ms=1000)

        def fake_fetch(url):
            if url.endswith(("u3", "u5")):
                return None
            return RawDocument(url=url, title=url[-2:], content="c", metadata=DocumentMetadata())

        with patch.object(fetcher, "fetch_one", side_effect=fake_fetch):
            docs = fetcher.fetch_many(urls)

        assert [doc.url for doc in docs] == [urls[0], urls[1], urls[3], urls[5]]
        assert mock_sleep.call_count == 2
        mock_sleep.assert_called_with(1.0)

    @patch("fitness_rag.data.web_fetcher.time.sleep")
    def test_partial_batch_counts_as_batch(self, mock_sleep):
        fetcher = WebFetcher(session=MagicMock(headers={}), batch_size=3, batch_delay_ms=250)

        with patch.object(fetcher, "fetch_one", return_value=None):
            docs = fetcher.fetch_many([f"https://example.com/{i}" for i in range(7)])

        assert docs == []
        assert mock_sleep.call_count == 3
        mock_sleep.assert_called_with(0.25)

    @patch("fitness_rag.data.web_fetcher.time.sleep")
    def test_empty_input_does_nothing(self, mock_sleep):
        fetcher = WebFetcher(session=MagicMock(headers={}))

        assert fetcher.fetch_many([]) == []
        mock_sleep.assert_not_called()
