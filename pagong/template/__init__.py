"""Parse and apply ``<!--P/ ... /P-->`` HTML templates.

A template is plain HTML with directives that are replaced per post:
``CONTENTS``, ``CSS``, ``TOC [depth]``, ``LIST path [sort key asc|desc]``,
``META key`` and ``INCLUDE path``. :class:`Template` parses them once and
:meth:`Template.apply` fills them in.
"""

from .engine import Template
from .helpers import SortKey, build_toc, relative_uri, sort_posts
from .rules import Replacement, parse_rule, parse_template

__all__ = [
    "Replacement",
    "SortKey",
    "Template",
    "build_toc",
    "parse_rule",
    "parse_template",
    "relative_uri",
    "sort_posts",
]
