"""
Global pytest fixtures for docsgen tests.

This module provides:
- ``write_tree``: build a directory tree from a {relative path: content} dict
- ``workspace``: a workspace root with a docs template, a vendored
  submodule linked into it, and a base config
- ``snapshot_tree``: capture bytes and mtimes of every file in a tree
"""

import json
import os
from pathlib import Path

import pytest

# Fixed source mtime (whole seconds, so coarse filesystems agree)
SOURCE_MTIME_NS = 1_700_000_000 * 1_000_000_000


def _write_tree(root: Path, files: dict[str, str | bytes]) -> Path:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        os.utime(path, ns=(SOURCE_MTIME_NS, SOURCE_MTIME_NS))
    return root


@pytest.fixture
def source_mtime_ns() -> int:
    """mtime every file written by ``write_tree`` carries."""
    return SOURCE_MTIME_NS


@pytest.fixture
def write_tree():
    """Return a helper writing ``files`` below ``root`` with a fixed mtime."""
    return _write_tree


def _snapshot(root: Path) -> dict[str, tuple[bytes, int]]:
    snapshot = {}
    for path in sorted(root.rglob("*")):
        if path.is_file():
            snapshot[path.relative_to(root).as_posix()] = (path.read_bytes(), path.stat().st_mtime_ns)
    return snapshot


@pytest.fixture
def snapshot_tree():
    """Return a helper mapping every file below ``root`` to (bytes, mtime_ns)."""
    return _snapshot


BASE_CONFIG = {
    "$schema": "https://mintlify.com/docs.json",
    "theme": "mint",
    "name": "Example Docs",
    "colors": {"primary": "#0D9373"},
    "navigation": {
        "groups": [
            {"group": "Home", "pages": ["index"]},
            {"group": "Guides", "icon": "book", "autogenerate": "guides"},
            {"group": "Protocol", "autogenerate": "protocol"},
        ]
    },
    "footer": {"socials": {"x": "https://x.com/example"}},
}

PROTOCOL_CONFIG = {
    "name": "Protocol",
    "navigation": {
        "groups": [
            {"group": "Protocol", "pages": ["overview", {"group": "Contracts", "pages": ["contracts/registry"]}]},
        ]
    },
}


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """
    Workspace laid out like a real docs repository::

        docs-template/
            docs-base.json
            index.md
            guides/ (readme, two ordered pages, an unordered page, a partial)
            protocol -> ../submodules/protocol/docs
        submodules/protocol/docs/
            docs.json, overview.md, contracts/registry.md
    """
    _write_tree(
        tmp_path / "docs-template",
        {
            "docs-base.json": json.dumps(BASE_CONFIG, indent=2),
            "index.md": "# Welcome\n\nStart with the [guides](guides/README.md).\n",
            "guides/README.md": "# Guides\n\nOverview of the guides.\n",
            "guides/install.md": "---\nsidebar_position: 1\n---\n# Install\n\nRun the installer.\n",
            "guides/configure.md": "---\nsidebar_position: 2\nsidebar_label: Config\n---\n# Configure\n",
            "guides/appendix.md": "# Appendix\n",
            "guides/_partial.md": "Shared snippet\n",
            "images/logo.png": b"\x89PNG\r\n\x1a\nfake",
        },
    )
    _write_tree(
        tmp_path / "submodules" / "protocol" / "docs",
        {
            "docs.json": json.dumps(PROTOCOL_CONFIG, indent=2),
            "overview.md": "---\ntitle: Protocol Overview\n---\nSee [registry](contracts/registry.md#usage).\n",
            "contracts/registry.md": "# Registry\n\n## Usage\n",
        },
    )
    os.symlink(
        Path("..") / "submodules" / "protocol" / "docs",
        tmp_path / "docs-template" / "protocol",
        target_is_directory=True,
    )
    return tmp_path


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep DOCSGEN_* variables from the caller's environment out of tests."""
    for name in ("DOCSGEN_TEMPLATE_DIR", "DOCSGEN_OUTPUT_DIR", "DOCSGEN_EDIT_BASE_URL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _restore_logging():
    """Undo handler and level changes made by setup_logging()."""
    from docsgen._logging import logger

    handlers, level = logger.handlers[:], logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
