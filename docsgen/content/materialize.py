"""
Content materialization.

Mirrors a template tree into the output directory:

- symlinks are followed and their targets copied under the link's name,
  so the output never contains a symlink;
- ``.md`` files become ``.mdx``; markup files get their frontmatter and
  local links rewritten;
- a file whose destination already carries the source's exact mtime is
  skipped. Every write forces the destination mtime to the source mtime,
  which keeps that check valid even though transformed content differs.
"""

from __future__ import annotations

import os
import shutil
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .._logging import scoped_logger
from ..cache import PositionCache
from ..exceptions import FrontmatterError, OutputError, SourceNotFoundError, SourceReadError
from ..settings import CONVERTIBLE_EXTENSIONS, MARKUP_EXTENSIONS
from .edit_page import EditPageInjector
from .frontmatter import transform_document
from .links import rewrite

__all__ = ["EntryKind", "CopyDecision", "PathEntry", "MaterializeStats", "Materializer"]

log = scoped_logger("materialize")


class EntryKind(str, Enum):
    """What a (symlink-resolved) source entry is."""

    DIRECTORY = "directory"
    MARKUP_FILE = "markup-file"
    OTHER_FILE = "other-file"


class CopyDecision(str, Enum):
    """What to do with one file."""

    SKIP = "skip"
    COPY = "copy"
    TRANSFORM = "transform"


@dataclass(frozen=True)
class PathEntry:
    """
    One entry of the source tree.

    Attributes:
        source: Real location (symlinks already resolved).
        destination: Output location, extension converted for markup.
        kind: Entry classification.
        relative: Logical path below the source root (POSIX separators).
    """

    source: Path
    destination: Path
    kind: EntryKind
    relative: str

    @classmethod
    def classify(cls, source: Path, destination: Path, relative: str) -> PathEntry | None:
        """Classify a resolved ``source``; returns None for anything that isn't a file or directory."""
        if source.is_dir():
            return cls(source, destination, EntryKind.DIRECTORY, relative)
        if not source.is_file():
            return None

        # Symlinked files are typed by the link name, not the target
        suffix = destination.suffix
        if suffix in CONVERTIBLE_EXTENSIONS:
            destination = destination.with_suffix(CONVERTIBLE_EXTENSIONS[suffix])
        kind = EntryKind.MARKUP_FILE if suffix in MARKUP_EXTENSIONS else EntryKind.OTHER_FILE
        return cls(source, destination, kind, relative)

    @property
    def converted(self) -> bool:
        return self.destination.suffix != Path(self.relative).suffix


@dataclass
class MaterializeStats:
    """Counters for one materialization run."""

    copied: int = 0
    transformed: int = 0
    skipped: int = 0
    fallbacks: int = 0

    @property
    def written(self) -> int:
        return self.copied + self.transformed


class Materializer:
    """
    Copies a template tree into the output directory.

    Args:
        cache: Receives ``sidebar_position`` hints keyed by output-relative path.
        output_root: Directory cache keys are relative to. Defaults to the
            ``dest_root`` of each :meth:`materialize` call.
        edit_page: Optional injector appending edit links to transformed pages.

    Example:
        >>> cache = PositionCache.load(out / ".sidebar-positions.json")
        >>> stats = Materializer(cache).materialize(template, out, exclude={"docs-base.json"})
        >>> stats.skipped
        12
    """

    def __init__(
        self,
        cache: PositionCache,
        output_root: Path | None = None,
        edit_page: EditPageInjector | None = None,
    ) -> None:
        self.cache = cache
        self.output_root = output_root
        self.edit_page = edit_page
        self.stats = MaterializeStats()

    def materialize(self, source_root: Path, dest_root: Path, exclude: Iterable[str] = ()) -> MaterializeStats:
        """
        Mirror ``source_root`` into ``dest_root``.

        Args:
            source_root: Template directory.
            dest_root: Output directory, created if absent.
            exclude: Entry names skipped at the top level of ``source_root``.

        Returns:
            Counters for this call.

        Raises:
            SourceNotFoundError: ``source_root`` doesn't exist.
            SourceReadError: A source directory or file can't be read.
            OutputError: The output tree can't be written.
        """
        source_root = Path(source_root)
        dest_root = Path(dest_root)
        if not source_root.is_dir():
            raise SourceNotFoundError(
                f"Source directory not found: {source_root}",
                details={"path": str(source_root)},
            )

        if self.output_root is None:
            self.output_root = dest_root
        self.stats = MaterializeStats()

        self._mkdir(dest_root)
        skip = set(exclude)
        root = source_root.resolve()
        for name in self._list(root):
            if name in skip:
                continue
            self._visit(source_root / name, dest_root / name, name, {root})

        log.info(
            f"Materialized {self.stats.written} files ({self.stats.skipped} unchanged)",
            extra={"path": str(dest_root)},
        )
        return self.stats

    def decide(self, entry: PathEntry) -> CopyDecision:
        """Apply the mtime skip rule to a file entry."""
        try:
            if entry.destination.stat().st_mtime_ns == entry.source.stat().st_mtime_ns:
                return CopyDecision.SKIP
        except FileNotFoundError:
            pass
        if entry.kind is EntryKind.MARKUP_FILE:
            return CopyDecision.TRANSFORM
        return CopyDecision.COPY

    # =========================================================================
    # Traversal
    # =========================================================================

    def _list(self, directory: Path) -> list[str]:
        try:
            return sorted(os.listdir(directory))
        except OSError as e:
            raise SourceReadError(
                f"Cannot read source directory {directory}: {e.strerror or e}",
                details={"path": str(directory)},
            ) from e

    def _mkdir(self, directory: Path) -> None:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise _output_error(directory, e) from e

    def _visit(self, source: Path, dest: Path, relative: str, ancestors: set[Path]) -> None:
        if source.is_symlink():
            target = source.resolve()
            if not target.exists():
                log.warning("Skipping broken symlink", extra={"path": relative})
                return
            log.info(f"Following symlink {relative} -> {os.readlink(source)}")
            source = target

        entry = PathEntry.classify(source, dest, relative)
        if entry is None:
            log.warning("Skipping entry that is neither file nor directory", extra={"path": relative})
            return

        if entry.kind is EntryKind.DIRECTORY:
            real = source.resolve()
            if real in ancestors:
                log.warning("Skipping symlink cycle", extra={"path": relative})
                return
            self._mkdir(dest)
            for name in self._list(source):
                self._visit(source / name, dest / name, f"{relative}/{name}", ancestors | {real})
            return

        decision = self.decide(entry)
        if decision is CopyDecision.SKIP:
            self.stats.skipped += 1
            return

        note = " (.md -> .mdx)" if entry.converted else ""
        log.debug(f"Copying {relative}{note}")
        self._mkdir(entry.destination.parent)

        if decision is CopyDecision.TRANSFORM:
            self._transform(entry)
        else:
            self._copy(entry)
            self.stats.copied += 1

    # =========================================================================
    # Files
    # =========================================================================

    def _cache_key(self, entry: PathEntry) -> str:
        return entry.destination.relative_to(self.output_root).as_posix()

    def _copy(self, entry: PathEntry) -> None:
        try:
            shutil.copy2(entry.source, entry.destination)
        except OSError as e:
            if e.filename is not None and Path(e.filename) == entry.source:
                raise _read_error(entry.source, e) from e
            raise _output_error(entry.destination, e) from e

    def _transform(self, entry: PathEntry) -> None:
        try:
            src_stat = entry.source.stat()
            text = entry.source.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            log.warning("Markup file isn't valid UTF-8, copying as-is", extra={"path": entry.relative})
            self._copy(entry)
            self.stats.fallbacks += 1
            self.stats.copied += 1
            return
        except OSError as e:
            raise _read_error(entry.source, e) from e

        content = self._render(entry, text)
        try:
            entry.destination.write_text(content, encoding="utf-8")
            os.utime(entry.destination, ns=(src_stat.st_atime_ns, src_stat.st_mtime_ns))
        except OSError as e:
            raise _output_error(entry.destination, e) from e
        self.stats.transformed += 1

    def _render(self, entry: PathEntry, text: str) -> str:
        try:
            document = transform_document(text)
        except FrontmatterError as e:
            log.warning(
                "Failed to process frontmatter, using original content",
                extra={"path": entry.relative, "error": str(e)},
            )
            self.stats.fallbacks += 1
            return text

        key = self._cache_key(entry)
        if document.sidebar_position is not None:
            self.cache.set(key, document.sidebar_position)

        content = rewrite(document.text)
        if self.edit_page is not None:
            content = self.edit_page.inject(content, key, entry.source)
        return content


def _read_error(path: Path, error: OSError) -> SourceReadError:
    return SourceReadError(f"Cannot read source file {path}: {error.strerror or error}", details={"path": str(path)})


def _output_error(path: Path, error: OSError) -> OutputError:
    return OutputError(f"Cannot write {path}: {error.strerror or error}", details={"path": str(path)})
