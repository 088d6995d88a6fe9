"""Template tree materialization and per-document rewrites.

Quick Start::

    from docsgen.cache import PositionCache
    from docsgen.content import Materializer

    cache = PositionCache.load(out / ".sidebar-positions.json")
    Materializer(cache).materialize(template, out, exclude={"docs-base.json"})
"""

from . import frontmatter, links
from .edit_page import EditPageInjector
from .materialize import CopyDecision, EntryKind, MaterializeStats, Materializer, PathEntry

__all__ = [
    "Materializer",
    "MaterializeStats",
    "PathEntry",
    "EntryKind",
    "CopyDecision",
    "EditPageInjector",
    "frontmatter",
    "links",
]
