"""
End-to-end generation: materialize, synthesize navigation, write config.

Order matters: navigation is built from the materialized output tree, and
the position cache filled during materialization is read while sorting.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass

from ._logging import scoped_logger
from .cache import PositionCache
from .config import load_config, write_config
from .content import EditPageInjector, Materializer, MaterializeStats
from .exceptions import OutputError, SourceNotFoundError
from .navigation import Synthesizer, count_pages, describe
from .settings import Settings
from .types import Navigation

__all__ = ["GenerateResult", "clean_output", "generate_docs"]

log = scoped_logger("pipeline")


@dataclass(frozen=True)
class GenerateResult:
    """Outcome of :func:`generate_docs`.

    Attributes:
        stats: File counters from materialization.
        navigation: Final navigation tree.
        page_count: Leaf pages in the final navigation.
        config_written: False when the output config was already up to date.
    """

    stats: MaterializeStats
    navigation: Navigation
    page_count: int
    config_written: bool


def clean_output(settings: Settings) -> None:
    """Delete the output directory, cache included."""
    if settings.output_path.exists():
        log.info("Cleaning output directory", extra={"path": str(settings.output_path)})
        try:
            shutil.rmtree(settings.output_path)
        except OSError as e:
            raise OutputError(
                f"Cannot clean output directory {settings.output_path}: {e.strerror or e}",
                details={"path": str(settings.output_path)},
            ) from e


def _count_navigation(navigation: Navigation) -> int:
    if navigation.tabs is not None:
        return sum(count_pages(tab.groups) + count_pages(tab.pages) for tab in navigation.tabs)
    return count_pages(navigation.groups) + count_pages(navigation.pages)


def generate_docs(settings: Settings, clean: bool = False) -> GenerateResult:
    """
    Run one generation.

    Args:
        settings: Paths and options.
        clean: Delete the output directory first.

    Returns:
        GenerateResult describing what happened.

    Raises:
        SourceNotFoundError: The template directory doesn't exist.
        ConfigNotFoundError: The base config is missing.
        ConfigError: The base config or a nested config is invalid.
        SourceReadError: A source directory or file can't be read.
        OutputError: The output tree can't be written or cleaned.
    """
    log.info("Generating docs")

    if not settings.template_path.is_dir():
        raise SourceNotFoundError(
            f"Template directory not found: {settings.template_path}",
            details={"path": str(settings.template_path)},
        )

    if clean:
        clean_output(settings)

    cache = PositionCache.load(settings.cache_path)
    base = load_config(settings.base_config_path)

    edit_page = EditPageInjector(settings) if settings.edit_base_url else None
    materializer = Materializer(cache, settings.output_path, edit_page=edit_page)
    stats = materializer.materialize(
        settings.template_path,
        settings.output_path,
        exclude={settings.base_config_name},
    )

    synthesizer = Synthesizer(settings.output_path, cache, settings.nested_config_name)
    navigation = synthesizer.synthesize(base.navigation)

    log.info("Final navigation structure:")
    for line in describe(navigation):
        log.info(line)

    written = write_config(settings.output_config_path, base.with_navigation(navigation))
    cache.save()

    page_count = _count_navigation(navigation)
    log.info(f"Docs generation complete: {page_count} pages in navigation")
    return GenerateResult(stats=stats, navigation=navigation, page_count=page_count, config_written=written)
