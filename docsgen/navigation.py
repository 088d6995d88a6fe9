"""
Navigation synthesis.

Expands ``autogenerate`` directives against the *materialized* output tree
and splices sub-navigation documents found in vendored folders into the host
navigation, prefixing their pages with the folder they were mounted from.

Folder resolution for ``autogenerate: <folder>``:

    inside a sub-document (prefix set)    at the root (no prefix)
    ==================================    =======================
    1. <root>/<prefix>/<folder>           1. <root>/<folder>
    2. <root>/<prefix>                    2. <root>

Pages derived from a folder are ordered: README/index first, then by cached
``sidebar_position`` (pages without one last), then alphabetically;
subdirectories follow as nested groups, alphabetically, and only when they
contain at least one page.
"""

from __future__ import annotations

import math
import os
import re
from collections.abc import Iterable
from dataclasses import replace
from pathlib import Path

from ._logging import scoped_logger
from .cache import PositionCache
from .config import ConfigDocument, load_config
from .exceptions import NavigationError, SourceReadError
from .settings import MARKUP_EXTENSIONS
from .types import Group, Navigation, NavItem, Page, Tab

__all__ = ["Synthesizer", "flatten_to_group", "count_pages", "describe"]

log = scoped_logger("navigation")

_INDEX_PAGE_RE = re.compile(r"^(readme|index)\.(md|mdx)$", re.IGNORECASE)
_MARKUP_SUFFIX_RE = re.compile(r"\.(md|mdx)$")


def _alphabetical(name: str) -> tuple[str, str]:
    return name.casefold(), name


def _join(prefix: str | None, name: str) -> str:
    return f"{prefix}/{name}" if prefix else name


class Synthesizer:
    """
    Builds the final navigation tree from a materialized output directory.

    Args:
        root: Materialized output directory.
        cache: Sidebar positions keyed by output-relative path.
        nested_config_name: Sub-navigation document name inside source folders.

    Example:
        >>> synth = Synthesizer(Path("docs-generated"), cache)
        >>> nav = synth.synthesize(base.navigation)
        >>> nav.to_json()["groups"][0]["pages"]
        ['guides/index', 'guides/install', ...]
    """

    def __init__(
        self,
        root: Path,
        cache: PositionCache | None = None,
        nested_config_name: str = "docs.json",
    ) -> None:
        self.root = Path(root)
        self.cache = cache if cache is not None else PositionCache()
        self.nested_config_name = nested_config_name
        self._expanding: set[Path] = set()

    def synthesize(self, navigation: Navigation, prefix: str | None = None) -> Navigation:
        """
        Expand every directive in ``navigation``.

        Args:
            navigation: Parsed root navigation.
            prefix: Output-relative folder the navigation is mounted at; every
                authored page is prefixed with it.

        Raises:
            NavigationError: The root has none of tabs, groups or pages.
        """
        if navigation.tabs is not None:
            log.debug("Processing tabs navigation structure")
            return Navigation(
                tabs=tuple(self._tab(tab, prefix) for tab in navigation.tabs),
                extra=navigation.extra,
                key_order=navigation.key_order,
            )
        if navigation.groups is not None:
            log.debug("Processing groups navigation structure")
            return Navigation(
                groups=tuple(self._group(group, prefix) for group in navigation.groups),
                extra=navigation.extra,
                key_order=navigation.key_order,
            )
        if navigation.pages is not None:
            log.debug("Processing pages navigation structure")
            return Navigation(
                pages=self._items(navigation.pages, prefix),
                extra=navigation.extra,
                key_order=navigation.key_order,
                raw_list=navigation.raw_list,
            )
        raise NavigationError("Invalid navigation structure: expected 'tabs', 'groups', or 'pages'")

    # =========================================================================
    # Nodes
    # =========================================================================

    def _items(self, items: Iterable[NavItem], prefix: str | None) -> tuple[NavItem, ...]:
        result: list[NavItem] = []
        for item in items:
            if isinstance(item, Page):
                result.append(Page(_join(prefix, item.path)))
            elif isinstance(item, Group):
                result.append(self._group(item, prefix))
            else:
                raise TypeError(f"Unexpected navigation item: {item!r}")
        return tuple(result)

    def _group(self, group: Group, prefix: str | None) -> Group:
        if group.autogenerate is not None:
            return replace(group, pages=self.autogenerate(group.autogenerate, prefix), autogenerate=None)
        if group.pages is not None:
            return replace(group, pages=self._items(group.pages, prefix))
        return group

    def _tab(self, tab: Tab, prefix: str | None) -> Tab:
        log.debug(f"Processing tab: {tab.name}")
        if tab.autogenerate is not None:
            return replace(tab, pages=self.autogenerate(tab.autogenerate, prefix), autogenerate=None)
        return replace(
            tab,
            groups=None if tab.groups is None else tuple(self._group(g, prefix) for g in tab.groups),
            pages=None if tab.pages is None else self._items(tab.pages, prefix),
        )

    # =========================================================================
    # Auto-generation
    # =========================================================================

    def resolve_folder(self, folder: str, prefix: str | None) -> tuple[Path, str | None]:
        """
        Locate an ``autogenerate`` folder, applying the fallback chain.

        Returns:
            (folder path, page prefix for pages found there)
        """
        if prefix:
            path = self.root / prefix / folder
            if path.is_dir():
                return path, f"{prefix}/{folder}"
            log.warning(f"Auto-generate folder '{folder}' not found under '{prefix}', using '{prefix}'")
            return self.root / prefix, prefix

        path = self.root / folder
        if path.is_dir():
            return path, folder
        log.warning(f"Auto-generate folder '{folder}' not found, using the output root")
        return self.root, None

    def autogenerate(self, folder: str, prefix: str | None = None) -> tuple[NavItem, ...]:
        """Produce the pages of an ``autogenerate: <folder>`` directive."""
        path, page_prefix = self.resolve_folder(folder, prefix)
        if not path.is_dir():
            log.warning(f"Auto-generate folder '{folder}' does not exist, no pages generated")
            return ()

        nested = path / self.nested_config_name
        # The output root's own docs.json is the generated config, not a sub-document
        if path != self.root and nested.is_file() and path.resolve() not in self._expanding:
            log.info(f"Found {self.nested_config_name} in {path}, using it for navigation")
            return self._splice(load_config(nested), path, page_prefix)

        pages = self.pages_from_folder(path, page_prefix)
        log.info(f"Auto-generated {count_pages(pages)} pages from folder: {folder}")
        return pages

    def _splice(self, document: ConfigDocument, path: Path, prefix: str | None) -> tuple[NavItem, ...]:
        key = path.resolve()
        self._expanding.add(key)
        try:
            processed = self.synthesize(document.navigation, prefix)
        finally:
            self._expanding.discard(key)
        return flatten_to_group(processed, document.name).pages or ()

    def pages_from_folder(self, folder: Path, prefix: str | None = None) -> tuple[NavItem, ...]:
        """
        Derive pages from a folder's markup files and subdirectories.

        Files named ``docs.json`` or starting with ``_`` are left out.
        """
        if not folder.is_dir():
            return ()

        try:
            with os.scandir(folder) as it:
                entries = list(it)
        except OSError as e:
            raise SourceReadError(
                f"Cannot read output directory {folder}: {e.strerror or e}",
                details={"path": str(folder)},
            ) from e

        files = [
            entry.name
            for entry in entries
            if entry.is_file()
            and entry.name.endswith(MARKUP_EXTENSIONS)
            and entry.name != self.nested_config_name
            and not entry.name.startswith("_")
        ]
        files.sort(key=lambda name: self._file_sort_key(folder, name))

        pages: list[NavItem] = [Page(_join(prefix, _MARKUP_SUFFIX_RE.sub("", name))) for name in files]

        directories = sorted((entry.name for entry in entries if entry.is_dir()), key=_alphabetical)
        for name in directories:
            children = self.pages_from_folder(folder / name, _join(prefix, name))
            if children:
                pages.append(Group(name=name, pages=children))

        return tuple(pages)

    def _file_sort_key(self, folder: Path, name: str) -> tuple[int, float, tuple[str, str]]:
        if _INDEX_PAGE_RE.match(name):
            return 0, 0, _alphabetical(name)
        position = self.cache.get((folder / name).relative_to(self.root).as_posix())
        return 1, math.inf if position is None else position, _alphabetical(name)


# =============================================================================
# Helpers
# =============================================================================


def flatten_to_group(navigation: Navigation, name: str = "Documentation") -> Group:
    """
    Collapse a sub-document's navigation into one group.

    Tabs contribute their groups (or a group built from their pages), groups
    are taken as they are, and a plain page list becomes a group called
    ``name``. A single resulting group is returned directly; several are
    wrapped in a group called ``name``.
    """
    items: list[Group] = []
    if navigation.tabs is not None:
        for tab in navigation.tabs:
            if tab.groups is not None:
                items.extend(tab.groups)
            elif tab.pages is not None:
                items.append(Group(name=tab.name, pages=tab.pages, icon=tab.icon, tag=tab.tag))
    elif navigation.groups is not None:
        items.extend(navigation.groups)
    elif navigation.pages:
        items.append(Group(name=name, pages=navigation.pages))

    if len(items) == 1:
        return items[0]
    return Group(name=name, pages=tuple(items))


def count_pages(items: Iterable[NavItem] | None) -> int:
    """Count leaf pages, recursing into groups."""
    count = 0
    for item in items or ():
        if isinstance(item, Page):
            count += 1
        elif isinstance(item, Group):
            count += count_pages(item.pages)
    return count


def _describe_items(items: Iterable[NavItem], indent: str) -> list[str]:
    lines: list[str] = []
    for item in items:
        if isinstance(item, Page):
            lines.append(f"{indent}- {item.path}")
        elif isinstance(item, Group):
            lines.extend(_describe_group(item, indent))
    return lines


def _describe_group(group: Group, indent: str) -> list[str]:
    lines = [f"{indent}[{group.name}]"]
    if group.pages:
        lines.extend(_describe_items(group.pages, indent + "  "))
    else:
        lines.append(f"{indent}  (no pages generated)")
    return lines


def describe(navigation: Navigation) -> list[str]:
    """Render the navigation tree as indented text lines for logging."""
    lines: list[str] = []
    if navigation.tabs is not None:
        for tab in navigation.tabs:
            lines.append(f"Tab: {tab.name}")
            if tab.groups is not None:
                for group in tab.groups:
                    lines.extend(_describe_group(group, "    "))
            elif tab.pages is not None:
                lines.extend(_describe_items(tab.pages, "    "))
    elif navigation.groups is not None:
        for group in navigation.groups:
            lines.extend(_describe_group(group, "  "))
    elif navigation.pages is not None:
        lines.extend(_describe_items(navigation.pages, "  "))
    return lines
