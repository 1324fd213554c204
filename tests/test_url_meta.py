"""Tests for link preview extraction."""
from unittest.mock import MagicMock, patch

import httpx

from spark.ingest.url_meta import UrlMeta, fetch_url_meta, get_domain, parse_url_meta


class TestParseUrlMeta:
    def test_open_graph_preferred(self):
        html = """<html><head>
            <title>Plain title</title>
            <meta property="og:title" content="OG title">
            <meta name="twitter:title" content="Twitter title">
            <meta property="og:description" content="OG &amp; description">
            <meta name="description" content="Plain description">
        </head></html>"""
        assert parse_url_meta(html) == UrlMeta(title="OG title", description="OG & description")

    def test_attribute_order_does_not_matter(self):
        html = '<meta content="Reversed" property="og:title">'
        assert parse_url_meta(html).title == "Reversed"

    def test_twitter_fallback(self):
        html = '<meta name="twitter:title" content="T"><meta name="twitter:description" content="D">'
        assert parse_url_meta(html) == UrlMeta(title="T", description="D")

    def test_plain_html_fallback(self):
        html = "<title>\n  Spaced   out \n</title><meta name=\"description\" content=\"desc\">"
        assert parse_url_meta(html) == UrlMeta(title="Spaced out", description="desc")

    def test_nothing_found(self):
        assert parse_url_meta("<p>no head</p>") == UrlMeta()


class TestGetDomain:
    def test_strips_www(self):
        assert get_domain("https://www.example.com/a") == "example.com"

    def test_without_scheme(self):
        assert get_domain("www.example.org/x") == "example.org"


class TestFetchUrlMeta:
    @patch("spark.ingest.url_meta.httpx.get")
    def test_fetches_and_parses(self, mock_get, tmp_settings):
        resp = MagicMock()
        resp.text = '<meta property="og:title" content="Hello">'
        mock_get.return_value = resp

        assert fetch_url_meta("https://example.com") == UrlMeta(title="Hello")
        kwargs = mock_get.call_args.kwargs
        assert kwargs["timeout"] == tmp_settings.url_meta_timeout
        assert kwargs["follow_redirects"] is True
        assert "Mozilla" in kwargs["headers"]["User-Agent"]

    @patch("spark.ingest.url_meta.httpx.get")
    def test_failure_returns_empty(self, mock_get, tmp_settings):
        mock_get.side_effect = httpx.ReadTimeout("slow")
        assert fetch_url_meta("https://example.com") == UrlMeta()
