"""Tests for graphgarden.services.classifier.classify_href."""

import pytest

from graphgarden.services.classifier import DROPPED, classify_href

BASE_URL = "https://alice.dev/"
FRIENDS = ["https://bob.dev/", "https://carol.dev"]


def _classify(href: str, page_url: str = "/"):
    return classify_href(href, page_url, BASE_URL, FRIENDS)


class TestDropped:
    @pytest.mark.parametrize(
        "href",
        [
            "",
            "   ",
            "#section",
            "?x=1",
            "mailto:a@b.com",
            "tel:+123",
            "javascript:void(0)",
            "data:text/plain,hi",
        ],
    )
    def test_non_navigational(self, href):
        assert _classify(href) == DROPPED

    def test_external_non_friend(self):
        assert _classify("https://random.com/page") == DROPPED

    def test_prefix_lookalike_is_not_a_friend(self):
        assert _classify("https://bob.dev.evil.com/") == DROPPED

    def test_prefix_lookalike_is_not_internal(self):
        assert _classify("https://alice.devious.com/") == DROPPED


class TestInternal:
    def test_site_absolute_path(self):
        result = _classify("/about")
        assert result.kind == "internal"
        assert result.target == "/about"

    def test_base_url_is_root(self):
        assert _classify("https://alice.dev").target == "/"
        assert _classify("https://alice.dev/").target == "/"

    def test_absolute_url_on_own_site(self):
        result = _classify("https://alice.dev/about?ref=x#top")
        assert result.kind == "internal"
        assert result.target == "/about"

    def test_relative_path(self):
        result = _classify("../about/index.html", page_url="/posts/hello")
        assert result.kind == "internal"
        assert result.target == "/about/"

    def test_href_is_trimmed(self):
        assert _classify("  /about  ").target == "/about"

    @pytest.mark.parametrize(
        "href",
        [
            "/about/index.html",
            "/about/",
            "https://alice.dev/about/index.html",
            "https://alice.dev/about/",
            "//alice.dev/about/",
            "../about/index.html",
        ],
    )
    def test_variants_converge_on_page_url(self, href):
        result = _classify(href, page_url="/posts/hello")
        assert result.kind == "internal"
        assert result.target == "/about/"

    def test_html_extension_converges(self):
        assert _classify("/posts/hello.html").target == "/posts/hello"
        assert _classify("hello.html", page_url="/posts/world").target == "/posts/hello"


class TestFriend:
    def test_friend_root(self):
        result = _classify("https://bob.dev/")
        assert result.kind == "friend"
        assert result.target == "https://bob.dev/"

    def test_friend_without_trailing_slash_in_config(self):
        result = _classify("https://carol.dev/post/1")
        assert result.kind == "friend"
        assert result.target == "https://carol.dev/post/1"

    def test_friend_target_keeps_original_form(self):
        result = _classify("https://bob.dev/posts/hello.html?utm=1#c")
        assert result.target == "https://bob.dev/posts/hello.html"

    def test_protocol_relative_matches_https(self):
        assert _classify("//bob.dev/page") == _classify("https://bob.dev/page")

    def test_http_friend(self):
        result = classify_href("http://dave.dev/x", "/", BASE_URL, ["http://dave.dev/"])
        assert result.kind == "friend"
        assert result.target.startswith("http://")


class TestPartition:
    @pytest.mark.parametrize(
        "href",
        ["/a", "b", "https://alice.dev/c", "https://bob.dev/d", "https://x.org/", "weird:thing"],
    )
    def test_every_href_lands_in_one_bucket(self, href):
        result = _classify(href, page_url="/posts/hello")
        assert result.kind in ("internal", "friend", "dropped")
        if result.kind == "internal":
            assert result.target.startswith("/")
        elif result.kind == "friend":
            assert result.target.startswith(("http://", "https://"))
        else:
            assert result.target is None
