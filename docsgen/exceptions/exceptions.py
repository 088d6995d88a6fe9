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

Usage:
    try:
        generate_docs(settings)
    except docsgen.ConfigNotFoundError:
        print("Create docs-template/docs-base.json first")
    except docsgen.DocsgenError as e:
        print(f"Error {e.code}: {e}")
        print(f"Details: {e.details}")

See Also
--------
    DocsgenError : Base exception for all docsgen errors.
"""

from typing import Any

__all__ = [
    # Base
    "DocsgenError",
    # Config
    "ConfigError",
    "ConfigNotFoundError",
    # Source
    "SourceError",
    "SourceNotFoundError",
    "SourceReadError",
    # Output
    "OutputError",
    # Navigation
    "NavigationError",
    # Frontmatter
    "FrontmatterError",
]


class DocsgenError(Exception):
    """
    Base exception for all docsgen errors.

    All docsgen-specific exceptions inherit from this class, enabling:
    - Catch-all handling: ``except docsgen.DocsgenError``
    - Stable string-based error codes for programmatic handling
    - Structured details for debugging and logging

    Attributes
    ----------
    message : str
        Human-readable error description.
    code : str
        Stable, string-based error code (e.g., "CONFIG_NOT_FOUND").
        Use this for programmatic error handling.
    details : dict[str, Any]
        Structured context (e.g., {"path": "..."}).

    Example
    -------
    >>> try:
    ...     load_config(Path("missing.json"))
    ... except DocsgenError as e:
    ...     print(f"Error code: {e.code}")
    Error code: CONFIG_NOT_FOUND
    """

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.details = details or {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.args[0]!r}, code={self.code!r})"


# =============================================================================
# Config Errors
# =============================================================================


class ConfigError(DocsgenError, ValueError):
    """
    Configuration document is invalid.

    Raised when a base or nested ``docs.json`` cannot be parsed as JSON,
    or when its top level is not an object.
    """

    def __init__(
        self,
        message: str,
        code: str = "CONFIG_INVALID",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


class ConfigNotFoundError(ConfigError, FileNotFoundError):
    """Required configuration document does not exist."""

    def __init__(
        self,
        message: str,
        code: str = "CONFIG_NOT_FOUND",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


# =============================================================================
# Source Errors
# =============================================================================


class SourceError(DocsgenError, OSError):
    """
    Error reading the template/source tree.

    Source errors are fatal: the run aborts and any partially
    materialized output is left in place for a later ``--clean`` run.
    """

    def __init__(
        self,
        message: str,
        code: str = "SOURCE_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


class SourceNotFoundError(SourceError, FileNotFoundError):
    """Source directory does not exist."""

    def __init__(
        self,
        message: str,
        code: str = "SOURCE_NOT_FOUND",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


class SourceReadError(SourceError):
    """A source directory can't be listed or a source file can't be read."""

    def __init__(
        self,
        message: str,
        code: str = "SOURCE_UNREADABLE",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


# =============================================================================
# Output Errors
# =============================================================================


class OutputError(DocsgenError, OSError):
    """
    Output tree can't be written.

    Raised when a directory or file under the output root can't be
    created, written or removed, for example when the output path is an
    existing regular file. ``details["path"]`` names the offending path.
    """

    def __init__(
        self,
        message: str,
        code: str = "OUTPUT_UNWRITABLE",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


# =============================================================================
# Navigation Errors
# =============================================================================


class NavigationError(DocsgenError, ValueError):
    """
    Navigation structure is malformed.

    Common causes:
    - Root navigation has none of ``tabs``, ``groups`` or ``pages``
    - A node carries both ``autogenerate`` and authored pages
    - A page entry is neither a string nor a group object
    """

    def __init__(
        self,
        message: str,
        code: str = "NAVIGATION_INVALID",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


# =============================================================================
# Frontmatter Errors
# =============================================================================


class FrontmatterError(DocsgenError, ValueError):
    """
    A document's frontmatter block can't be parsed.

    The materializer recovers from this error by writing the
    document's original content.
    """

    def __init__(
        self,
        message: str,
        code: str = "FRONTMATTER_INVALID",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)
