"""
Docsgen exceptions.

This module defines the exception hierarchy for docsgen:

    DocsgenError (base)
    ├── ConfigError - Base or nested configuration document is invalid
    │   └── ConfigNotFoundError - Required configuration document missing
    ├── SourceError - Problems with the template/source tree
    │   ├── SourceNotFoundError - Source directory doesn't exist
    │   └── SourceReadError - Source directory or file can't be read
    ├── OutputError - Output tree can't be written
    ├── NavigationError - Malformed navigation structure
    └── FrontmatterError - A document's frontmatter can't be parsed
"""

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

__all__ = [
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
