"""Run settings: where the template lives, where output goes, file names."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path

__all__ = ["Settings"]

# Markup extension converted on copy (source -> destination)
CONVERTIBLE_EXTENSIONS = {".md": ".mdx"}

# Extensions whose content is transformed and which appear in navigation
MARKUP_EXTENSIONS = (".md", ".mdx")


@dataclass(frozen=True)
class Settings:
    """
    Paths and options for one generation run.

    Relative directory names are resolved against ``root``.

    Attributes:
        root: Workspace root (also the git working tree for history lookups).
        template_dir: Hand-authored template directory (may contain symlinks).
        output_dir: Materialized output directory.
        base_config_name: Base configuration document inside ``template_dir``.
        output_config_name: Merged configuration written inside ``output_dir``.
        nested_config_name: Sub-navigation document looked up in source folders.
        cache_name: Position cache file inside ``output_dir``.
        edit_base_url: Owner URL for "edit this page" links; None disables them.
        docs_repository: Repository holding files outside ``submodules_dir``.
        edit_branch: Branch used in edit links.
        submodules_dir: Directory (under ``root``) holding vendored repositories.
        snippet_import: Import path of the edit-page snippet component.
    """

    root: Path = field(default_factory=Path.cwd)
    template_dir: str = "docs-template"
    output_dir: str = "docs-generated"
    base_config_name: str = "docs-base.json"
    output_config_name: str = "docs.json"
    nested_config_name: str = "docs.json"
    cache_name: str = ".sidebar-positions.json"
    edit_base_url: str | None = None
    docs_repository: str = "docs"
    edit_branch: str = "main"
    submodules_dir: str = "submodules"
    snippet_import: str = "/snippets/edit-page.jsx"

    @classmethod
    def from_env(cls, root: Path | None = None) -> Settings:
        """Build settings from ``DOCSGEN_*`` environment variables."""
        settings = cls(root=Path(root) if root is not None else Path.cwd())
        overrides: dict[str, str] = {}
        if os.environ.get("DOCSGEN_TEMPLATE_DIR"):
            overrides["template_dir"] = os.environ["DOCSGEN_TEMPLATE_DIR"]
        if os.environ.get("DOCSGEN_OUTPUT_DIR"):
            overrides["output_dir"] = os.environ["DOCSGEN_OUTPUT_DIR"]
        if os.environ.get("DOCSGEN_EDIT_BASE_URL"):
            overrides["edit_base_url"] = os.environ["DOCSGEN_EDIT_BASE_URL"]
        return replace(settings, **overrides) if overrides else settings

    @property
    def template_path(self) -> Path:
        return self.root / self.template_dir

    @property
    def output_path(self) -> Path:
        return self.root / self.output_dir

    @property
    def base_config_path(self) -> Path:
        return self.template_path / self.base_config_name

    @property
    def output_config_path(self) -> Path:
        return self.output_path / self.output_config_name

    @property
    def cache_path(self) -> Path:
        return self.output_path / self.cache_name

    @property
    def submodules_path(self) -> Path:
        return self.root / self.submodules_dir
