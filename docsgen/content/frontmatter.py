"""
Frontmatter normalization for Mintlify pages.

Two rewrites are applied to a document's YAML frontmatter:

- A missing ``title`` is taken from the first ``# Heading`` of the body, and
  that heading line is removed so the page doesn't render its title twice.
- Docusaurus ``sidebar_label`` is renamed to Mintlify ``sidebarTitle``.

``sidebar_position`` is reported back to the caller for navigation sorting
but left in place.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import frontmatter
import yaml
from frontmatter import Post
from frontmatter.default_handlers import YAMLHandler

from ..exceptions import FrontmatterError

__all__ = ["TransformedDocument", "transform", "transform_document", "extract_first_heading"]

# First H1 line, plus the newlines that follow it
_H1_LINE_RE = re.compile(r"^[ \t]*#[ \t]+(.+?)[ \t]*$\n*", re.MULTILINE)


class StableYAMLHandler(YAMLHandler):
    """Frontmatter YAML handler with stable ordering and wide line width."""

    def export(self, metadata: dict[str, object], **kwargs: object) -> str:
        return yaml.safe_dump(
            metadata,
            sort_keys=False,
            width=1000,
            default_flow_style=False,
            allow_unicode=True,
        ).rstrip()


_FRONTMATTER_HANDLER = StableYAMLHandler()


@dataclass(frozen=True)
class TransformedDocument:
    """Result of :func:`transform_document`.

    Attributes:
        text: Rewritten document, or the input itself when ``changed`` is False.
        changed: Whether any rewrite rule applied.
        sidebar_position: Numeric ``sidebar_position`` from the frontmatter, if any.
    """

    text: str
    changed: bool
    sidebar_position: float | None = None


def extract_first_heading(body: str) -> str | None:
    """Return the text of the first ``# Heading`` line, or None."""
    match = _H1_LINE_RE.search(body)
    return match.group(1).strip() if match else None


def _sidebar_position(metadata: dict[str, object]) -> float | None:
    value = metadata.get("sidebar_position")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return None


def transform_document(text: str) -> TransformedDocument:
    """
    Normalize a document's frontmatter.

    Args:
        text: Full document source, frontmatter included.

    Returns:
        TransformedDocument with the rewritten text.

    Raises:
        FrontmatterError: If the frontmatter block isn't valid YAML.
    """
    try:
        post = frontmatter.loads(text)
    except yaml.YAMLError as e:
        raise FrontmatterError(f"Invalid frontmatter: {e}", details={"error": str(e)}) from e

    metadata = dict(post.metadata)
    body = post.content
    position = _sidebar_position(metadata)
    changed = False

    if metadata.get("sidebar_label") and not metadata.get("sidebarTitle"):
        metadata["sidebarTitle"] = metadata.pop("sidebar_label")
        changed = True

    if not metadata.get("title"):
        match = _H1_LINE_RE.search(body)
        if match:
            metadata["title"] = match.group(1).strip()
            body = body[: match.start()] + body[match.end() :]
            changed = True

    if not changed:
        return TransformedDocument(text=text, changed=False, sidebar_position=position)

    # metadata keys may collide with Post's own keyword arguments ("content", "handler")
    updated = Post(body)
    updated.metadata.update(metadata)
    rendered = frontmatter.dumps(updated, handler=_FRONTMATTER_HANDLER)
    return TransformedDocument(text=rendered + "\n", changed=True, sidebar_position=position)


def transform(text: str) -> str:
    """Normalize a document's frontmatter; returns ``text`` itself when nothing changes."""
    return transform_document(text).text
