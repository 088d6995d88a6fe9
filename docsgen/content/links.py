"""
Local markdown link rewriting.

Mintlify resolves pages without their extension and treats links that
aren't explicitly relative as external, so local links are normalized::

    [text](README.md)        -> [text](./README)
    [text](file.mdx)         -> [text](./file)
    [text](file.md#section)  -> [text](./file#section)
    [text](folder/file.md)   -> [text](./folder/file)
    [text](../README.md)     -> [text](../README)
    [text](./other.md)       -> [text](./other)
    [text](README)           -> [text](./README)
    [text](https://example.com/file.md)  (unchanged)

Rewriting is idempotent.
"""

from __future__ import annotations

import re

__all__ = ["rewrite", "rewrite_target"]

_LINK_RE = re.compile(r"\[([^\]]*)\]\(([^)]+)\)")
_MARKUP_SUFFIX_RE = re.compile(r"\.mdx?(?=#|$)")
# mailto:, tel:, data: ... (two letters minimum so Windows drive letters don't count)
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]+:")

_RELATIVE_PREFIXES = ("./", "../", "/")


def _is_foreign(target: str) -> bool:
    if target.startswith("#"):
        # in-page anchor
        return True
    if "://" in target or "?" in target or "=" in target:
        return True
    return bool(_SCHEME_RE.match(target))


def rewrite_target(target: str) -> str:
    """Rewrite one link target; external targets and anchors are returned unchanged."""
    if _is_foreign(target):
        return target

    converted = _MARKUP_SUFFIX_RE.sub("", target, count=1)
    if not converted.startswith(_RELATIVE_PREFIXES):
        converted = "./" + converted
    return converted


def rewrite(text: str) -> str:
    """Rewrite every inline ``[label](target)`` link in ``text``."""

    def _replace(match: re.Match) -> str:
        label, target = match.group(1), match.group(2)
        converted = rewrite_target(target)
        if converted == target:
            return match.group(0)
        return f"[{label}]({converted})"

    return _LINK_RE.sub(_replace, text)
