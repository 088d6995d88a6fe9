"""
Materializer tests.

Tests for docsgen.content.materialize:
- Extension conversion and content rewriting
- The mtime skip rule and timestamp coupling
- Symlink handling (transparency, broken links, cycles)
- Error reporting for missing or unreadable sources and unwritable output
"""

import os
from pathlib import Path

import frontmatter
import pytest

from docsgen.cache import PositionCache
from docsgen.content import CopyDecision, EditPageInjector, EntryKind, Materializer, PathEntry
from docsgen.exceptions import OutputError, SourceNotFoundError, SourceReadError
from docsgen.settings import Settings


def _materialize(workspace: Path, cache: PositionCache | None = None, **kwargs):
    materializer = Materializer(cache if cache is not None else PositionCache(), **kwargs)
    out = workspace / "docs-generated"
    stats = materializer.materialize(workspace / "docs-template", out, exclude={"docs-base.json"})
    return out, stats


class TestPathEntry:
    """Entry classification."""

    def test_markdown_converted(self, tmp_path: Path) -> None:
        """.md files are markup and get an .mdx destination."""
        source = tmp_path / "a.md"
        source.write_text("x")

        entry = PathEntry.classify(source, tmp_path / "out" / "a.md", "a.md")

        assert entry.kind is EntryKind.MARKUP_FILE
        assert entry.destination.name == "a.mdx"
        assert entry.converted

    def test_mdx_kept(self, tmp_path: Path) -> None:
        """.mdx files keep their name."""
        source = tmp_path / "a.mdx"
        source.write_text("x")

        entry = PathEntry.classify(source, tmp_path / "out" / "a.mdx", "a.mdx")

        assert entry.kind is EntryKind.MARKUP_FILE
        assert not entry.converted

    def test_other_file(self, tmp_path: Path) -> None:
        """Non-markup files are copied verbatim."""
        source = tmp_path / "logo.png"
        source.write_bytes(b"png")

        entry = PathEntry.classify(source, tmp_path / "out" / "logo.png", "logo.png")

        assert entry.kind is EntryKind.OTHER_FILE

    def test_directory(self, tmp_path: Path) -> None:
        """Directories are classified as such."""
        entry = PathEntry.classify(tmp_path, tmp_path / "out", "dir")

        assert entry.kind is EntryKind.DIRECTORY

    def test_missing_source(self, tmp_path: Path) -> None:
        """Something that doesn't exist can't be classified."""
        assert PathEntry.classify(tmp_path / "gone", tmp_path / "out", "gone") is None


class TestCopy:
    """What ends up in the output tree."""

    def test_markdown_becomes_mdx(self, workspace: Path) -> None:
        """Every .md file is written as .mdx."""
        out, _ = _materialize(workspace)

        assert (out / "index.mdx").is_file()
        assert (out / "guides" / "install.mdx").is_file()
        assert not list(out.rglob("*.md"))

    def test_content_rewritten(self, workspace: Path) -> None:
        """Titles are extracted and local links rewritten."""
        out, _ = _materialize(workspace)

        post = frontmatter.loads((out / "index.mdx").read_text())
        assert post["title"] == "Welcome"
        assert "[guides](./guides/README)" in post.content

    def test_sidebar_label_renamed(self, workspace: Path) -> None:
        """sidebar_label reaches the output as sidebarTitle."""
        out, _ = _materialize(workspace)

        post = frontmatter.loads((out / "guides" / "configure.mdx").read_text())
        assert post["sidebarTitle"] == "Config"
        assert "sidebar_label" not in post.metadata

    def test_binary_copied_verbatim(self, workspace: Path) -> None:
        """Non-markup files are byte-identical copies."""
        out, _ = _materialize(workspace)

        assert (out / "images" / "logo.png").read_bytes() == b"\x89PNG\r\n\x1a\nfake"

    def test_exclude_applies_to_top_level(self, workspace: Path) -> None:
        """Excluded names aren't copied."""
        out, _ = _materialize(workspace)

        assert not (out / "docs-base.json").exists()

    def test_stats(self, workspace: Path) -> None:
        """Counters reflect what was written."""
        _, stats = _materialize(workspace)

        # index, 5 guides, overview, registry
        assert stats.transformed == 8
        # logo.png and the vendored docs.json
        assert stats.copied == 2
        assert stats.skipped == 0

    def test_non_utf8_markup_copied(self, tmp_path: Path, write_tree) -> None:
        """Markup that isn't valid UTF-8 is copied as-is."""
        write_tree(tmp_path / "src", {"latin.md": "caf\xe9".encode("latin-1")})

        stats = Materializer(PositionCache()).materialize(tmp_path / "src", tmp_path / "out")

        assert (tmp_path / "out" / "latin.mdx").read_bytes() == b"caf\xe9"
        assert stats.fallbacks == 1

    def test_invalid_frontmatter_falls_back(self, tmp_path: Path, write_tree) -> None:
        """Broken YAML writes the original content."""
        original = "---\ntitle: [unclosed\n---\n[link](other.md)\n"
        write_tree(tmp_path / "src", {"broken.md": original})

        stats = Materializer(PositionCache()).materialize(tmp_path / "src", tmp_path / "out")

        assert (tmp_path / "out" / "broken.mdx").read_text() == original
        assert stats.fallbacks == 1
        assert stats.transformed == 1


class TestSkipRule:
    """Files whose destination carries the source mtime are skipped."""

    def test_destination_mtime_matches_source(self, workspace: Path, source_mtime_ns: int) -> None:
        """Transformed and copied files both take the source mtime."""
        out, _ = _materialize(workspace)

        assert (out / "index.mdx").stat().st_mtime_ns == source_mtime_ns
        assert (out / "images" / "logo.png").stat().st_mtime_ns == source_mtime_ns

    def test_second_run_skips_everything(self, workspace: Path) -> None:
        """An unchanged tree is not rewritten."""
        _materialize(workspace)

        _, stats = _materialize(workspace)

        assert stats.written == 0
        assert stats.skipped == 10

    def test_touched_source_is_rewritten(self, workspace: Path, source_mtime_ns: int) -> None:
        """A changed source mtime triggers a rewrite of that file only."""
        _materialize(workspace)
        source = workspace / "docs-template" / "guides" / "appendix.md"
        source.write_text("# Appendix\n\nMore.\n")
        os.utime(source, ns=(source_mtime_ns + 10**9, source_mtime_ns + 10**9))

        out, stats = _materialize(workspace)

        assert stats.transformed == 1
        assert "More." in (out / "guides" / "appendix.mdx").read_text()

    def test_decide(self, tmp_path: Path) -> None:
        """decide() picks transform, copy or skip."""
        source = tmp_path / "a.md"
        source.write_text("x")
        entry = PathEntry.classify(source, tmp_path / "a.mdx", "a.md")
        materializer = Materializer(PositionCache())

        assert materializer.decide(entry) is CopyDecision.TRANSFORM

        entry.destination.write_text("y")
        st = source.stat()
        os.utime(entry.destination, ns=(st.st_atime_ns, st.st_mtime_ns))

        assert materializer.decide(entry) is CopyDecision.SKIP


class TestSymlinks:
    """Symlinks are followed and never reproduced."""

    def test_linked_directory_materialized(self, workspace: Path) -> None:
        """A linked directory becomes a real directory under the link's name."""
        out, _ = _materialize(workspace)

        assert (out / "protocol").is_dir()
        assert not (out / "protocol").is_symlink()
        assert (out / "protocol" / "overview.mdx").is_file()
        assert (out / "protocol" / "docs.json").is_file()

    def test_no_symlinks_in_output(self, workspace: Path) -> None:
        """Nothing in the output is a symlink."""
        out, _ = _materialize(workspace)

        assert not [path for path in out.rglob("*") if path.is_symlink()]

    def test_linked_file_uses_link_name(self, tmp_path: Path, write_tree) -> None:
        """A file link is named after the link, with the extension converted."""
        write_tree(tmp_path / "shared", {"notes.md": "# Notes\n"})
        (tmp_path / "src").mkdir()
        os.symlink(tmp_path / "shared" / "notes.md", tmp_path / "src" / "alias.md")

        Materializer(PositionCache()).materialize(tmp_path / "src", tmp_path / "out")

        assert (tmp_path / "out" / "alias.mdx").is_file()
        assert not (tmp_path / "out" / "notes.mdx").exists()

    def test_link_name_decides_markup(self, tmp_path: Path, write_tree) -> None:
        """A .md link to a plain-text file is treated as markup."""
        write_tree(tmp_path / "shared", {"notes.txt": "# Notes\n\nSee [setup](setup.md).\n"})
        (tmp_path / "src").mkdir()
        os.symlink(tmp_path / "shared" / "notes.txt", tmp_path / "src" / "alias.md")

        stats = Materializer(PositionCache()).materialize(tmp_path / "src", tmp_path / "out")

        post = frontmatter.load(tmp_path / "out" / "alias.mdx")
        assert post["title"] == "Notes"
        assert "[setup](./setup)" in post.content
        assert stats.transformed == 1

    def test_link_name_decides_plain_copy(self, tmp_path: Path, write_tree) -> None:
        """A non-markup link to a .md file is copied verbatim under its own name."""
        write_tree(tmp_path / "shared", {"page.md": "# Page\n"})
        (tmp_path / "src").mkdir()
        os.symlink(tmp_path / "shared" / "page.md", tmp_path / "src" / "data.txt")

        stats = Materializer(PositionCache()).materialize(tmp_path / "src", tmp_path / "out")

        assert (tmp_path / "out" / "data.txt").read_text() == "# Page\n"
        assert not (tmp_path / "out" / "data.mdx").exists()
        assert stats.copied == 1

    def test_broken_symlink_skipped(self, workspace: Path) -> None:
        """Dangling links are skipped without failing the run."""
        os.symlink("does-not-exist", workspace / "docs-template" / "dangling.md")

        out, _ = _materialize(workspace)

        assert not (out / "dangling.mdx").exists()
        assert (out / "index.mdx").is_file()

    def test_cycle_skipped(self, workspace: Path) -> None:
        """A link back to an ancestor isn't followed forever."""
        os.symlink("..", workspace / "docs-template" / "guides" / "loop", target_is_directory=True)

        out, _ = _materialize(workspace)

        assert not (out / "guides" / "loop").exists()
        assert (out / "guides" / "install.mdx").is_file()


class TestPositions:
    """sidebar_position hints are recorded in the cache."""

    def test_positions_keyed_by_output_path(self, workspace: Path) -> None:
        """Keys are output-relative with the converted extension."""
        cache = PositionCache()

        _materialize(workspace, cache)

        assert cache.get("guides/install.mdx") == 1
        assert cache.get("guides/configure.mdx") == 2
        assert cache.get("guides/appendix.mdx") is None

    def test_skipped_files_keep_cached_positions(self, workspace: Path) -> None:
        """A skipped file leaves its cached position untouched."""
        _materialize(workspace)
        cache = PositionCache(positions={"guides/install.mdx": 7})

        _materialize(workspace, cache)

        assert cache.get("guides/install.mdx") == 7


class TestEditPage:
    """Optional edit-page snippet injection."""

    def test_snippet_appended(self, workspace: Path) -> None:
        """Pages end with the edit component."""
        settings = Settings(root=workspace, edit_base_url="https://github.com/example")
        injector = EditPageInjector(settings, last_modified=lambda path: "2024-01-01T00:00:00.000Z")

        out, _ = _materialize(workspace, edit_page=injector)

        text = (out / "protocol" / "overview.mdx").read_text()
        assert text.rstrip().endswith(
            '<EditPage editUrl="https://github.com/example/protocol/edit/main/docs/overview.md"'
            ' lastModified="2024-01-01T00:00:00.000Z" />'
        )

    def test_non_markup_untouched(self, workspace: Path) -> None:
        """Copied assets don't get a snippet."""
        settings = Settings(root=workspace, edit_base_url="https://github.com/example")
        injector = EditPageInjector(settings, last_modified=lambda path: None)

        out, _ = _materialize(workspace, edit_page=injector)

        assert (out / "images" / "logo.png").read_bytes() == b"\x89PNG\r\n\x1a\nfake"


class TestErrors:
    """Fatal source problems."""

    def test_missing_source_root(self, tmp_path: Path) -> None:
        """A missing template raises SourceNotFoundError."""
        with pytest.raises(SourceNotFoundError) as exc_info:
            Materializer(PositionCache()).materialize(tmp_path / "missing", tmp_path / "out")

        assert exc_info.value.details["path"] == str(tmp_path / "missing")

    def test_unreadable_directory(self, workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """A directory that can't be listed raises SourceReadError."""
        real_listdir = os.listdir
        blocked = (workspace / "docs-template" / "guides").resolve()

        def listdir(path):
            if Path(path).resolve() == blocked:
                raise PermissionError(13, "Permission denied")
            return real_listdir(path)

        monkeypatch.setattr(os, "listdir", listdir)

        with pytest.raises(SourceReadError) as exc_info:
            _materialize(workspace)

        assert exc_info.value.code == "SOURCE_UNREADABLE"

    def test_output_root_is_a_file(self, workspace: Path) -> None:
        """An output path taken by a regular file raises OutputError."""
        (workspace / "docs-generated").write_text("stale")

        with pytest.raises(OutputError) as exc_info:
            _materialize(workspace)

        assert exc_info.value.code == "OUTPUT_UNWRITABLE"
        assert exc_info.value.details["path"] == str(workspace / "docs-generated")

    def test_output_subdirectory_is_a_file(self, workspace: Path) -> None:
        """A file where an output directory belongs raises OutputError."""
        (workspace / "docs-generated").mkdir()
        (workspace / "docs-generated" / "guides").write_text("stale")

        with pytest.raises(OutputError) as exc_info:
            _materialize(workspace)

        assert exc_info.value.details["path"] == str(workspace / "docs-generated" / "guides")

    def test_unwritable_page(self, workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """A failed page write raises OutputError naming the destination."""
        real_write_text = Path.write_text

        def write_text(self, *args, **kwargs):
            if self.name == "index.mdx":
                raise PermissionError(13, "Permission denied")
            return real_write_text(self, *args, **kwargs)

        monkeypatch.setattr(Path, "write_text", write_text)

        with pytest.raises(OutputError) as exc_info:
            _materialize(workspace)

        assert exc_info.value.details["path"] == str(workspace / "docs-generated" / "index.mdx")
