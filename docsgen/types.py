"""
Typed navigation nodes for Mintlify ``docs.json``.

Navigation Shapes:
    JSON                                  Python
    ======================================================
    "guides/intro"                   <--  Page
    {"group": ..., "pages": [...]}   <--  Group
    {"tab": ..., "groups": [...]}    <--  Tab
    {"tabs" | "groups" | "pages"}    <--  Navigation (root)
    [...]                            <--  Navigation(raw_list=True)

Any group or tab may carry the custom ``autogenerate: <folder>`` field, in
which case its pages are derived from the materialized folder and the node
must not list pages of its own.

Keys docsgen doesn't interpret (``expanded``, ``global``, ...) are kept in
``extra`` and written back unchanged.
Parsed nodes remember the order their keys were written in, and
``to_json()`` emits keys in that order. Keys a node gains later (``pages``
filled in for an ``autogenerate`` directive) are written last.

Example:
    >>> nav = parse_navigation({"groups": [{"group": "Intro", "pages": ["index"]}]})
    >>> nav.groups[0].pages
    (Page(path='index'),)
    >>> nav.to_json()
    {'groups': [{'group': 'Intro', 'pages': ['index']}]}
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .exceptions import NavigationError

__all__ = [
    "Page",
    "Group",
    "Tab",
    "Navigation",
    "NavItem",
    "parse_navigation",
    "parse_item",
    "parse_group",
    "parse_tab",
]


# =============================================================================
# Nodes
# =============================================================================


@dataclass(frozen=True)
class Page:
    """A leaf page, referenced by its extension-less output path."""

    path: str

    def to_json(self) -> str:
        return self.path


@dataclass(frozen=True)
class Group:
    """
    A named group of pages and nested groups.

    Attributes:
        name: Sidebar label (``group`` key).
        pages: Children; None when the node didn't list any.
        autogenerate: Folder to derive ``pages`` from.
        icon: Optional icon name.
        tag: Optional badge text.
        extra: Uninterpreted keys, in input order.
        key_order: Keys as they appeared in the source object.
    """

    name: str
    pages: tuple[NavItem, ...] | None = None
    autogenerate: str | None = None
    icon: str | None = None
    tag: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)
    key_order: tuple[str, ...] = field(default=(), compare=False, repr=False)

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {"group": self.name}
        if self.icon is not None:
            data["icon"] = self.icon
        if self.tag is not None:
            data["tag"] = self.tag
        if self.autogenerate is not None:
            data["autogenerate"] = self.autogenerate
        data.update(self.extra)
        if self.pages is not None:
            data["pages"] = [item.to_json() for item in self.pages]
        return _in_key_order(data, self.key_order)


@dataclass(frozen=True)
class Tab:
    """
    A top-level tab holding either groups or pages.

    Attributes:
        name: Tab label (``tab`` key).
        groups: Child groups, if the tab is organized by group.
        pages: Child pages/groups, if the tab lists pages directly.
        autogenerate: Folder to derive ``pages`` from.
        href: External link tabs point elsewhere instead of holding pages.
        icon: Optional icon name.
        tag: Optional badge text.
        extra: Uninterpreted keys, in input order.
        key_order: Keys as they appeared in the source object.
    """

    name: str
    groups: tuple[Group, ...] | None = None
    pages: tuple[NavItem, ...] | None = None
    autogenerate: str | None = None
    href: str | None = None
    icon: str | None = None
    tag: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)
    key_order: tuple[str, ...] = field(default=(), compare=False, repr=False)

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {"tab": self.name}
        if self.href is not None:
            data["href"] = self.href
        if self.icon is not None:
            data["icon"] = self.icon
        if self.tag is not None:
            data["tag"] = self.tag
        if self.autogenerate is not None:
            data["autogenerate"] = self.autogenerate
        data.update(self.extra)
        if self.groups is not None:
            data["groups"] = [group.to_json() for group in self.groups]
        if self.pages is not None:
            data["pages"] = [item.to_json() for item in self.pages]
        return _in_key_order(data, self.key_order)


NavItem = Page | Group


@dataclass(frozen=True)
class Navigation:
    """
    Root navigation of a configuration document.

    Exactly one of ``tabs``, ``groups``, ``pages`` is used, in that order of
    precedence.

    Attributes:
        tabs: Tab list.
        groups: Group list.
        pages: Page list.
        extra: Other root keys (``global``, ``anchors``, ...).
        raw_list: The document gave navigation as a bare list of pages.
        key_order: Keys as they appeared in the source object.
    """

    tabs: tuple[Tab, ...] | None = None
    groups: tuple[Group, ...] | None = None
    pages: tuple[NavItem, ...] | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)
    raw_list: bool = False
    key_order: tuple[str, ...] = field(default=(), compare=False, repr=False)

    def to_json(self) -> dict[str, Any] | list[Any]:
        if self.raw_list:
            return [item.to_json() for item in self.pages or ()]

        data: dict[str, Any] = {}
        if self.tabs is not None:
            data["tabs"] = [tab.to_json() for tab in self.tabs]
        elif self.groups is not None:
            data["groups"] = [group.to_json() for group in self.groups]
        elif self.pages is not None:
            data["pages"] = [item.to_json() for item in self.pages]
        data.update(self.extra)
        return _in_key_order(data, self.key_order)


def _in_key_order(data: dict[str, Any], key_order: tuple[str, ...]) -> dict[str, Any]:
    if not key_order:
        return data
    ordered = {key: data[key] for key in key_order if key in data}
    ordered.update((key, value) for key, value in data.items() if key not in ordered)
    return ordered


# =============================================================================
# Parsing
# =============================================================================

_GROUP_KEYS = {"group", "pages", "autogenerate", "icon", "tag"}
_TAB_KEYS = {"tab", "groups", "pages", "autogenerate", "href", "icon", "tag"}
_ROOT_KEYS = {"tabs", "groups", "pages"}


def _optional_str(raw: Mapping[str, Any], key: str) -> str | None:
    value = raw.get(key)
    if value is None or isinstance(value, str):
        return value
    raise NavigationError(
        f"'{key}' must be a string, got {type(value).__name__}",
        details={"key": key},
    )


def _list(raw: Mapping[str, Any], key: str) -> list[Any] | None:
    value = raw.get(key)
    if value is None or isinstance(value, list):
        return value
    raise NavigationError(
        f"'{key}' must be a list, got {type(value).__name__}",
        details={"key": key},
    )


def parse_item(raw: Any) -> NavItem:
    """Parse one entry of a ``pages`` list."""
    if isinstance(raw, str):
        return Page(raw)
    if isinstance(raw, Mapping) and "group" in raw:
        return parse_group(raw)
    raise NavigationError(
        "Page entries must be strings or group objects",
        details={"entry": repr(raw)[:200]},
    )


def _parse_pages(raw: Mapping[str, Any]) -> tuple[NavItem, ...] | None:
    pages = _list(raw, "pages")
    return None if pages is None else tuple(parse_item(item) for item in pages)


def parse_group(raw: Mapping[str, Any]) -> Group:
    name = raw.get("group")
    if not isinstance(name, str):
        raise NavigationError("Group requires a string 'group' name", details={"entry": repr(raw)[:200]})

    autogenerate = _optional_str(raw, "autogenerate")
    if autogenerate is not None and raw.get("pages") is not None:
        raise NavigationError(
            f"Group '{name}' has both 'autogenerate' and 'pages'",
            details={"group": name},
        )

    return Group(
        name=name,
        pages=_parse_pages(raw),
        autogenerate=autogenerate,
        icon=_optional_str(raw, "icon"),
        tag=_optional_str(raw, "tag"),
        extra={k: v for k, v in raw.items() if k not in _GROUP_KEYS},
        key_order=tuple(raw),
    )


def parse_tab(raw: Mapping[str, Any]) -> Tab:
    name = raw.get("tab")
    if not isinstance(name, str):
        raise NavigationError("Tab requires a string 'tab' name", details={"entry": repr(raw)[:200]})

    autogenerate = _optional_str(raw, "autogenerate")
    if autogenerate is not None and (raw.get("pages") is not None or raw.get("groups") is not None):
        raise NavigationError(
            f"Tab '{name}' has both 'autogenerate' and authored pages or groups",
            details={"tab": name},
        )

    groups = _list(raw, "groups")
    return Tab(
        name=name,
        groups=None if groups is None else tuple(parse_group(g) for g in groups),
        pages=_parse_pages(raw),
        autogenerate=autogenerate,
        href=_optional_str(raw, "href"),
        icon=_optional_str(raw, "icon"),
        tag=_optional_str(raw, "tag"),
        extra={k: v for k, v in raw.items() if k not in _TAB_KEYS},
        key_order=tuple(raw),
    )


def parse_navigation(raw: Any) -> Navigation:
    """
    Parse the ``navigation`` value of a configuration document.

    Raises:
        NavigationError: If the value isn't a list or an object, or any
            node inside it is malformed.
    """
    if isinstance(raw, list):
        return Navigation(pages=tuple(parse_item(item) for item in raw), raw_list=True)
    if not isinstance(raw, Mapping):
        raise NavigationError(
            f"Navigation must be an object or a list, got {type(raw).__name__}",
        )

    tabs = _list(raw, "tabs")
    groups = _list(raw, "groups")
    return Navigation(
        tabs=None if tabs is None else tuple(parse_tab(t) for t in tabs),
        groups=None if groups is None else tuple(parse_group(g) for g in groups),
        pages=_parse_pages(raw),
        extra={k: v for k, v in raw.items() if k not in _ROOT_KEYS},
        key_order=tuple(raw),
    )
