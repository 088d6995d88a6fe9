"""Append an "Edit this page" snippet to generated pages."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path, PurePosixPath

from ..history import git_last_modified, resolve_repository
from ..settings import Settings

__all__ = ["EditPageInjector"]

LastModified = Callable[[Path], "str | None"]


class EditPageInjector:
    """
    Builds edit URLs from a page's real source location.

    Files under ``submodules/<name>/`` link to repository ``<name>``;
    everything else links to the docs repository.

    Args:
        settings: Run settings; ``edit_base_url`` must be set.
        last_modified: History lookup, defaults to :func:`git_last_modified`.
    """

    def __init__(self, settings: Settings, last_modified: LastModified | None = None) -> None:
        if not settings.edit_base_url:
            raise ValueError("edit_base_url is required for edit page links")
        self.settings = settings
        self._base_url = settings.edit_base_url.rstrip("/")
        self._last_modified = last_modified or (
            lambda path: git_last_modified(path, settings.root, settings.submodules_path)
        )

    def edit_url(self, source: Path) -> str:
        submodule, _, relative = resolve_repository(source, self.settings.root, self.settings.submodules_path)
        repository = submodule or self.settings.docs_repository
        return f"{self._base_url}/{repository}/edit/{self.settings.edit_branch}/{relative.as_posix()}"

    def inject(self, content: str, dest_relative: str, source: Path) -> str:
        """Return ``content`` with the edit component appended; snippets are left alone."""
        if PurePosixPath(dest_relative).parts[:1] == ("snippets",):
            return content

        last_modified = self._last_modified(source) or ""
        component = (
            "\n\n"
            f"import {{ EditPage }} from '{self.settings.snippet_import}';\n"
            "\n"
            f'<EditPage editUrl="{self.edit_url(source)}" lastModified="{last_modified}" />'
        )
        return content + component
