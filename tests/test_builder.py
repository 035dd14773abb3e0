"""Tests for graphgarden.services.builder and graphgarden.services.walker."""

import json
import re
from pathlib import Path
from unittest.mock import patch

import pytest
from lxml import etree

from graphgarden.config import Config
from graphgarden.errors import PageExtractionError, PageReadError
from graphgarden.models.graph import PROTOCOL_VERSION, Edge, SiteMetadata
from graphgarden.services.builder import build_graph, build_site, read_public_file, write_public_file
from graphgarden.services.walker import is_selected, iter_pages

BASE_URL = "https://alice.dev/"
SITE = SiteMetadata(title="Alice's Garden")

_HOME = """<html><head><title>Home</title></head><body>
  <a href="/about/">About</a>
  <a href="https://bob.dev/">Bob</a>
</body></html>"""

_ABOUT = """<html><head><title>About</title></head><body>
  <a href="/">Home</a>
</body></html>"""


def _write(root: Path, relative: str, content: str) -> None:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _config(output_dir: Path, **parse) -> Config:
    return Config.model_validate(
        {
            "site": {"base_url": BASE_URL, "title": "Alice's Garden"},
            "friends": ["https://bob.dev/"],
            "output": {"dir": str(output_dir)},
            "parse": parse,
        }
    )


class TestBuildGraph:
    def test_two_page_site(self):
        pages = [("index.html", _HOME), ("about/index.html", _ABOUT)]
        document = build_graph(pages, BASE_URL, SITE, friends=["https://bob.dev/"])

        assert document.version == PROTOCOL_VERSION
        assert document.base_url == BASE_URL
        assert document.friends == ["https://bob.dev/"]
        assert [(n.url, n.title) for n in document.nodes] == [("/", "Home"), ("/about/", "About")]
        assert document.edges == [
            Edge(source="/", target="/about/", type="internal"),
            Edge(source="/", target="https://bob.dev/", type="friend"),
            Edge(source="/about/", target="/", type="internal"),
        ]

    def test_generated_at_format(self):
        document = build_graph([], BASE_URL, SITE)
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z", document.generated_at)

    def test_empty_input(self):
        document = build_graph([], BASE_URL, SITE)
        assert document.nodes == []
        assert document.edges == []

    def test_duplicate_targets_across_pages_not_merged(self):
        pages = [
            ("a.html", '<a href="/shared">x</a>'),
            ("b.html", '<a href="/shared">x</a>'),
        ]
        document = build_graph(pages, BASE_URL, SITE)
        assert [(e.source, e.target) for e in document.edges] == [
            ("/a", "/shared"),
            ("/b", "/shared"),
        ]

    def test_exclude_selectors_applied(self):
        html = '<body><nav><a href="/hidden">x</a></nav><a href="/visible">y</a></body>'
        document = build_graph([("index.html", html)], BASE_URL, SITE, exclude_selectors=["nav"])
        assert [e.target for e in document.edges] == ["/visible"]

    def test_extraction_failure_names_path(self):
        with pytest.raises(PageExtractionError) as exc_info:
            build_graph([("posts/x.html", "<p></p>")], BASE_URL, SITE, exclude_selectors=["[[["])
        assert exc_info.value.path == "posts/x.html"
        assert "posts/x.html" in str(exc_info.value)

    @pytest.mark.parametrize("error", [etree.ParserError("parser broke"), ValueError("bad value")])
    def test_parser_failure_names_path(self, error):
        with patch("graphgarden.services.builder.extract_page", side_effect=error):
            with pytest.raises(PageExtractionError) as exc_info:
                build_graph([("index.html", _HOME), ("posts/y.html", "<p></p>")], BASE_URL, SITE)
        assert exc_info.value.path == "index.html"
        assert exc_info.value.cause is error
        assert str(error) in str(exc_info.value)

    def test_site_metadata_copied(self):
        site = SiteMetadata(title="T", description="D", language="en")
        document = build_graph([], BASE_URL, site)
        assert document.site == site


class TestWalker:
    def test_is_selected_top_level_double_star(self):
        assert is_selected("index.html", ["**/*.html"])
        assert is_selected("a/b/c.html", ["**/*.html"])
        assert not is_selected("style.css", ["**/*.html"])

    def test_is_selected_exclude(self):
        assert not is_selected("admin/index.html", ["**/*.html"], ["admin/**"])
        assert is_selected("administrator.html", ["**/*.html"], ["admin/**"])

    def test_iter_pages_sorted_and_filtered(self, tmp_path):
        _write(tmp_path, "posts/b.html", "B")
        _write(tmp_path, "index.html", "I")
        _write(tmp_path, "posts/a.html", "A")
        _write(tmp_path, "style.css", "body {}")

        pages = list(iter_pages(tmp_path, ["**/*.html"]))
        assert pages == [("index.html", "I"), ("posts/a.html", "A"), ("posts/b.html", "B")]

    def test_iter_pages_missing_dir(self, tmp_path):
        with pytest.raises(PageReadError):
            list(iter_pages(tmp_path / "nope", ["**/*.html"]))

    def test_iter_pages_undecodable_file(self, tmp_path):
        (tmp_path / "bad.html").write_bytes(b"\xff\xfe\xfa")
        with pytest.raises(PageReadError) as exc_info:
            list(iter_pages(tmp_path, ["**/*.html"]))
        assert "bad.html" in str(exc_info.value)


class TestBuildSite:
    def test_end_to_end(self, tmp_path):
        _write(tmp_path, "index.html", _HOME)
        _write(tmp_path, "about/index.html", _ABOUT)
        _write(tmp_path, "style.css", "body { color: red; }")

        document = build_site(_config(tmp_path))
        assert [n.url for n in document.nodes] == ["/about/", "/"]
        assert len(document.edges) == 3

    def test_exclude_patterns(self, tmp_path):
        _write(tmp_path, "index.html", "<title>Home</title>")
        _write(tmp_path, "admin/index.html", "<title>Admin</title>")

        document = build_site(_config(tmp_path, exclude=["admin/**"]))
        assert [(n.url, n.title) for n in document.nodes] == [("/", "Home")]

    def test_read_failure_aborts(self, tmp_path):
        (tmp_path / "index.html").write_bytes(b"\xff\xfe\xfa")
        with pytest.raises(PageReadError):
            build_site(_config(tmp_path))

    def test_write_public_file(self, tmp_path):
        _write(tmp_path, "index.html", _HOME)
        document = build_site(_config(tmp_path))

        destination = write_public_file(document, tmp_path)
        assert destination == tmp_path / ".well-known" / "graphgarden.json"

        data = json.loads(destination.read_text())
        assert data["base_url"] == BASE_URL
        assert "description" not in data["site"]
        assert read_public_file(tmp_path) == document

    def test_rebuild_ignores_written_file(self, tmp_path):
        _write(tmp_path, "index.html", _HOME)
        write_public_file(build_site(_config(tmp_path)), tmp_path)
        assert len(build_site(_config(tmp_path)).nodes) == 1

    def test_read_public_file_before_build(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_public_file(tmp_path)
