"""
Configuration documents (``docs-base.json``, nested ``docs.json``).

The merged document keeps the base document's key order; only the
``navigation`` value is replaced. Writes are skipped when the serialized
text equals the file already on disk, so a no-op run doesn't touch mtimes.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ._logging import scoped_logger
from .exceptions import ConfigError, ConfigNotFoundError, NavigationError, OutputError
from .types import Navigation, parse_navigation

__all__ = ["ConfigDocument", "load_config", "serialize_config", "write_config"]

log = scoped_logger("config")

DEFAULT_GROUP_NAME = "Documentation"


@dataclass(frozen=True)
class ConfigDocument:
    """
    A parsed configuration document.

    Attributes:
        data: Top-level mapping exactly as read (theme, name, colors, ...).
        navigation: Parsed root navigation.
        path: Where the document was read from, if anywhere.
    """

    data: Mapping[str, Any]
    navigation: Navigation
    path: Path | None = field(default=None, compare=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], path: Path | None = None) -> ConfigDocument:
        if "navigation" not in data:
            raise ConfigError(
                "Configuration document has no 'navigation'",
                details={"path": str(path) if path else None},
            )
        try:
            navigation = parse_navigation(data["navigation"])
        except NavigationError as e:
            if path is not None:
                e.details.setdefault("path", str(path))
            raise
        return cls(data=dict(data), navigation=navigation, path=path)

    @property
    def name(self) -> str:
        value = self.data.get("name")
        return value if isinstance(value, str) and value else DEFAULT_GROUP_NAME

    def with_navigation(self, navigation: Navigation) -> ConfigDocument:
        """Return a copy whose navigation is replaced in place (key order kept)."""
        return ConfigDocument(data={**self.data}, navigation=navigation, path=self.path)

    def to_json(self) -> dict[str, Any]:
        return {**self.data, "navigation": self.navigation.to_json()}


def load_config(path: Path) -> ConfigDocument:
    """
    Read a configuration document.

    Raises:
        ConfigNotFoundError: ``path`` doesn't exist.
        ConfigError: The file isn't a JSON object with a valid navigation.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigNotFoundError(f"Config file not found: {path}", details={"path": str(path)})

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigError(f"Error reading {path}: {e}", details={"path": str(path)}) from e

    if not isinstance(data, dict):
        raise ConfigError(
            f"Config file {path} must contain a JSON object",
            details={"path": str(path)},
        )

    document = ConfigDocument.from_dict(data, path)
    log.info(f"Read config: {len(data)} keys", extra={"path": str(path)})
    return document


def serialize_config(document: ConfigDocument) -> str:
    return json.dumps(document.to_json(), indent=2, ensure_ascii=False) + "\n"


def write_config(path: Path, document: ConfigDocument) -> bool:
    """
    Write ``document`` to ``path`` unless the file already holds the same text.

    Returns:
        True if the file was written.

    Raises:
        OutputError: The file or its directory can't be written.
    """
    path = Path(path)
    content = serialize_config(document).encode("utf-8")

    if path.is_file():
        try:
            if path.read_bytes() == content:
                log.info("No changes to config, skipping write", extra={"path": str(path)})
                return False
        except OSError:
            # Unreadable existing file gets overwritten
            pass

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
    except OSError as e:
        raise OutputError(
            f"Cannot write config {path}: {e.strerror or e}",
            details={"path": str(path)},
        ) from e
    log.info("Generated config", extra={"path": str(path)})
    return True
