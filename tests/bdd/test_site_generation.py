"""Behaviour tests for generating a small blog.

The scenarios in ``site_generation.feature`` build a site in a temporary
directory and inspect the written pages and feed, covering ``LIST`` ordering,
stylesheet links and Atom feed entries end to end.
"""

from __future__ import annotations

import typing as typ
import xml.etree.ElementTree as ET  # noqa: N817
from pathlib import Path

import pytest
from bs4 import BeautifulSoup
from pytest_bdd import given, scenarios, then, when

from pagong.config import load_site_config
from pagong.generator import SiteGenerator

FEATURE_FILE = Path(__file__).resolve().parents[2] / "features" / "site_generation.feature"
scenarios(FEATURE_FILE)

LIST_TEMPLATE = """<html><head><!--P/ CSS /P--></head>
<body><section class="posts"><!--P/ LIST /blog sort date desc /P--></section></body></html>
"""


@pytest.fixture
def scenario_state() -> dict[str, object]:
    """Return a mutable dict used to share scenario state across BDD steps."""
    return {}


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@given("a site with a blog index and two dated posts")
def given_blog(tmp_path: Path, scenario_state: dict[str, object]) -> None:
    """Create a blog index using a listing template and two posts."""
    content = tmp_path / "content"
    _write(content / "style.css", "body { margin: 0; }")
    _write(content / "layouts" / "list.html", LIST_TEMPLATE)
    _write(
        content / "blog" / "index.md",
        "```meta\ntitle = Blog\ndate = 2019-01-01\ntemplate = /layouts/list.html\n```\n",
    )
    _write(content / "blog" / "older.md", "```meta\ndate = 2020-05-01\n```\n# Older\n")
    _write(content / "blog" / "newer.md", "```meta\ndate = 2022-05-01\n```\n# Newer\n")
    scenario_state["root"] = tmp_path


@given("an Atom feed description in the blog directory")
def given_feed(scenario_state: dict[str, object]) -> None:
    """Place a minimal feed description next to the posts."""
    root = typ.cast("Path", scenario_state["root"])
    _write(
        root / "content" / "blog" / "feed.atom",
        '<feed xmlns="http://www.w3.org/2005/Atom"><title>Blog</title>'
        '<link href="https://blog.example"/></feed>',
    )


@when("I generate the site")
def when_generate(scenario_state: dict[str, object]) -> None:
    """Run the generator over the scenario's site."""
    root = typ.cast("Path", scenario_state["root"])
    scenario_state["written"] = SiteGenerator(load_site_config(root)).run()
    scenario_state["target"] = root / "dist"


@then("the blog index links the posts newest first")
def then_listing_order(scenario_state: dict[str, object]) -> None:
    """Check the listing on the blog index."""
    target = typ.cast("Path", scenario_state["target"])
    soup = BeautifulSoup((target / "blog" / "index.html").read_text(encoding="utf-8"), "html.parser")
    links = [(a["href"], a.get_text()) for a in soup.select("section.posts a")]
    assert links == [("newer.html", "Newer"), ("older.html", "Older"), ("index.html", "Blog")], (
        "expected posts below /blog sorted by date, newest first"
    )


@then("every page links the site stylesheet")
def then_stylesheets(scenario_state: dict[str, object]) -> None:
    """Check each written page references the root stylesheet."""
    written = typ.cast("list[Path]", scenario_state["written"])
    pages = [path for path in written if path.suffix == ".html"]
    assert len(pages) == 3, "expected the index and both posts to be written"
    for page in pages:
        soup = BeautifulSoup(page.read_text(encoding="utf-8"), "html.parser")
        hrefs = [link["href"] for link in soup.find_all("link", rel="stylesheet")]
        assert hrefs == ["/style.css"], f"expected {page.name} to link the site stylesheet"


@then("the generated feed has an entry per blog post")
def then_feed_entries(scenario_state: dict[str, object]) -> None:
    """Parse the written feed and compare its entry ids."""
    target = typ.cast("Path", scenario_state["target"])
    root = ET.fromstring((target / "blog" / "feed.atom").read_bytes())  # noqa: S314
    ids = sorted(
        entry.findtext("{http://www.w3.org/2005/Atom}id") or ""
        for entry in root.findall("{http://www.w3.org/2005/Atom}entry")
    )
    assert ids == [
        "https://blog.example/blog/index.html",
        "https://blog.example/blog/newer.html",
        "https://blog.example/blog/older.html",
    ], "expected one entry for every post below the feed"
