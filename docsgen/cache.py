"""
Persistent sidebar position cache.

Maps output-relative page paths (``guides/intro.mdx``) to the
``sidebar_position`` declared in their frontmatter. Positions are only seen
when a file is actually transformed, so they must survive runs in which the
file is skipped as unchanged.

The cache file is disposable: deleting it only loses ordering hints for
pages that aren't re-copied on the next run.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path

from ._logging import scoped_logger

__all__ = ["PositionCache"]

log = scoped_logger("cache")


def _is_position(value: object) -> bool:
    # bool is an int subclass, but `sidebar_position: true` isn't an ordering hint
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class PositionCache:
    """
    Key -> number store persisted as JSON.

    Args:
        path: Cache file location. None keeps the cache in memory only.
        positions: Initial entries.

    Example:
        >>> cache = PositionCache.load(Path("docs-generated/.sidebar-positions.json"))
        >>> cache.set("guides/intro.mdx", 1)
        >>> cache.get("guides/intro.mdx")
        1
        >>> cache.save()
    """

    def __init__(
        self,
        path: Path | None = None,
        positions: dict[str, float] | None = None,
    ) -> None:
        self.path = path
        self._positions: dict[str, float] = dict(positions or {})

    @classmethod
    def load(cls, path: Path) -> PositionCache:
        """Load the cache from ``path``; a missing or corrupt file yields an empty cache."""
        cache = cls(path)
        if not path.exists():
            return cache

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            log.warning("Failed to load sidebar positions cache", extra={"path": str(path), "error": str(e)})
            return cache

        if not isinstance(data, dict):
            log.warning("Ignoring sidebar positions cache that isn't an object", extra={"path": str(path)})
            return cache

        for key, value in data.items():
            if _is_position(value):
                cache._positions[key] = value

        log.info(f"Loaded {len(cache)} cached sidebar positions")
        return cache

    def get(self, key: str) -> float | None:
        return self._positions.get(key)

    def set(self, key: str, position: float) -> None:
        if not _is_position(position):
            raise TypeError(f"sidebar position must be a number, got {type(position).__name__}")
        self._positions[key] = position

    def serialize(self) -> str:
        """Serialize entries in insertion order."""
        return json.dumps(self._positions, indent=2)

    def save(self) -> bool:
        """
        Write the cache if its serialized content differs from the file on disk.

        Returns:
            True if the file was written.
        """
        if self.path is None:
            return False

        content = self.serialize()
        try:
            existing = self.path.read_text(encoding="utf-8") if self.path.exists() else ""
            if content == existing:
                return False
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(content, encoding="utf-8")
        except OSError as e:
            log.warning("Failed to save sidebar positions cache", extra={"path": str(self.path), "error": str(e)})
            return False

        log.info(f"Saved {len(self)} sidebar positions to cache")
        return True

    def __len__(self) -> int:
        return len(self._positions)

    def __contains__(self, key: object) -> bool:
        return key in self._positions

    def __iter__(self) -> Iterator[str]:
        return iter(self._positions)

    def __repr__(self) -> str:
        return f"PositionCache(path={self.path!r}, entries={len(self)})"
