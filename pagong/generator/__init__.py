"""Render markdown posts and assemble them into a generated site."""

from .anchors import FootnoteNumbers, HeadingAnchors
from .models import Scan
from .page_generator import SiteGenerator, plan_actions, scan_dir
from .renderer import HtmlContentRenderer, push_html, render_html

__all__ = [
    "FootnoteNumbers",
    "HeadingAnchors",
    "HtmlContentRenderer",
    "Scan",
    "SiteGenerator",
    "plan_actions",
    "push_html",
    "render_html",
    "scan_dir",
]
