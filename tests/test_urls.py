"""
Tests for URL normalization and filename encoding.
"""
import pytest

from depthcrawl.urls import MAX_STEM_LENGTH, encode_filename, normalize_url


class TestNormalizeUrl:
    def test_bare_host_gets_www_and_scheme(self):
        assert normalize_url("example.com") == "https://www.example.com"

    def test_protocol_relative(self):
        assert normalize_url("//example.com/path") == "https://www.example.com/path"

    def test_protocol_relative_with_www(self):
        assert normalize_url("//www.example.com/path") == "https://www.example.com/path"

    def test_existing_www_kept(self):
        assert normalize_url("www.example.com/a") == "https://www.example.com/a"

    def test_http_with_www_upgraded(self):
        assert normalize_url("http://www.example.com/a") == "https://www.example.com/a"

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.example.com",
            "https://www.example.com/",
            "https://www.example.com/a/b.html",
            "https://www.example.com/search?q=python&page=2",
        ],
    )
    def test_idempotent_on_normalized_urls(self, url):
        once = normalize_url(url)
        assert once == url
        assert normalize_url(once) == once

    def test_www_inside_query_truncates(self):
        # Textual rewrite: the first "www." wins even inside a query string
        url = "https://www.example.com/go?to=www.other.org/x"
        assert normalize_url(url) == "https://www.example.com/go?to=www.other.org/x"
        assert normalize_url("https://example.com/go?to=www.other.org/x") == "https://www.other.org/x"

    def test_scheme_without_www_is_prefixed(self):
        assert normalize_url("https://example.com/a") == "https://www.https://example.com/a"

    def test_relative_path_gets_bare_www_host(self):
        assert normalize_url("/about") == "https://www./about"

    @pytest.mark.parametrize("raw", ["@", "user@", "www.[broken"])
    def test_no_host_returns_none(self, raw):
        assert normalize_url(raw) is None


class TestEncodeFilename:
    def test_scheme_stripped_and_separators_replaced(self):
        assert encode_filename("https://www.example.com/a/b.html") == "www_example_com_a_b_html.html"

    def test_http_scheme_stripped(self):
        assert encode_filename("http://www.example.com") == "www_example_com.html"

    def test_query_characters_replaced(self):
        assert encode_filename("https://www.example.com/s?q=a&b=c") == "www_example_com_s_q_a_b_c.html"

    def test_hyphen_and_digits_kept(self):
        assert encode_filename("https://www.my-site2.com") == "www_my-site2_com.html"

    def test_deterministic(self):
        url = "https://www.example.com/x"
        assert encode_filename(url) == encode_filename(url)

    def test_distinct_urls_can_collide(self):
        assert encode_filename("https://www.a.b/c") == encode_filename("https://www.a/b.c")

    def test_long_url_is_shortened_with_digest(self):
        base = "https://www.example.com/" + "a" * 300
        first = encode_filename(base + "1")
        second = encode_filename(base + "2")
        assert first != second
        assert first.endswith(".html")
        assert len(first) == MAX_STEM_LENGTH + 1 + 16 + len(".html")
