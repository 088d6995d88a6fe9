"""
docsgen: Mintlify docs tree and navigation generator.

Mirrors a docs template (hand-authored pages plus symlinked vendored docs)
into a publishable output directory and builds its ``docs.json``, expanding
``autogenerate`` folders and merging the sub-navigation of vendored docs.

Quick Start::

    from pathlib import Path
    from docsgen import Settings, generate_docs

    result = generate_docs(Settings(root=Path(".")), clean=False)
    print(result.page_count, result.config_written)

Command line::

    docsgen --clean
"""

from ._logging import setup_logging
from .cache import PositionCache
from .config import ConfigDocument, load_config, write_config
from .content import Materializer
from .exceptions import (
    ConfigError,
    ConfigNotFoundError,
    DocsgenError,
    FrontmatterError,
    NavigationError,
    OutputError,
    SourceError,
    SourceNotFoundError,
    SourceReadError,
)
from .navigation import Synthesizer
from .pipeline import GenerateResult, generate_docs
from .settings import Settings
from .types import Group, Navigation, Page, Tab

__all__ = [
    # Pipeline
    "generate_docs",
    "GenerateResult",
    "Settings",
    # Components
    "Materializer",
    "Synthesizer",
    "PositionCache",
    # Config
    "ConfigDocument",
    "load_config",
    "write_config",
    # Navigation nodes
    "Navigation",
    "Tab",
    "Group",
    "Page",
    # Logging
    "setup_logging",
    # Errors
    "DocsgenError",
    "ConfigError",
    "ConfigNotFoundError",
    "SourceError",
    "SourceNotFoundError",
    "SourceReadError",
    "OutputError",
    "NavigationError",
    "FrontmatterError",
]
