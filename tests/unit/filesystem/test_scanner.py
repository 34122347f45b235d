"""Unit tests for the snapshot scanner."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from filetidy.filesystem.scanner import SnapshotScanner, snapshot_entry


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    """A small folder tree.

    root/
        b.txt
        .hidden
        a.pdf
        sub/
            c.png
    """
    root = tmp_path / "root"
    root.mkdir()
    (root / "b.txt").write_text("bb")
    (root / ".hidden").write_text("h")
    (root / "a.pdf").write_text("aaaa")
    (root / "sub").mkdir()
    (root / "sub" / "c.png").write_text("c")
    return root


class TestSnapshotEntry:
    """Tests for snapshot_entry()."""

    def test_file(self, tree: Path) -> None:
        """Files get name, extension and size."""
        snapshot = snapshot_entry(tree / "a.pdf")

        assert snapshot.path == str(tree / "a.pdf")
        assert snapshot.name == "a.pdf"
        assert snapshot.extension == "pdf"
        assert snapshot.size_bytes == 4
        assert snapshot.modified_at is not None
        assert snapshot.modified_at.tzinfo is not None
        assert not snapshot.is_directory
        assert snapshot.is_readable

    def test_directory(self, tree: Path) -> None:
        """Directories have no size and no extension."""
        snapshot = snapshot_entry(tree / "sub")

        assert snapshot.is_directory
        assert snapshot.size_bytes is None
        assert snapshot.extension == ""

    def test_no_extension(self, tree: Path) -> None:
        """Dotfiles have no extension."""
        assert snapshot_entry(tree / ".hidden").extension == ""

    def test_symlink_not_followed(self, tree: Path) -> None:
        """Symlinks are reported as links, not as their target."""
        link = tree / "link"
        link.symlink_to(tree / "sub")

        snapshot = snapshot_entry(link)

        assert snapshot.is_symlink
        assert not snapshot.is_directory

    def test_missing_entry_raises(self, tree: Path) -> None:
        """Vanished entries raise OSError."""
        with pytest.raises(FileNotFoundError):
            snapshot_entry(tree / "nope")


class TestSnapshotScanner:
    """Tests for SnapshotScanner.scan()."""

    def test_walk_order(self, tree: Path) -> None:
        """Entries are sorted by name within a folder, parents before children."""
        result = SnapshotScanner().scan(tree)

        assert [Path(s.path).relative_to(tree).as_posix() for s in result.files] == [
            ".hidden",
            "a.pdf",
            "b.txt",
            "sub",
            "sub/c.png",
        ]
        assert result.errors == ()
        assert result.root == str(tree)

    def test_exclude_hidden(self, tree: Path) -> None:
        """Hidden entries can be left out."""
        result = SnapshotScanner(include_hidden=False).scan(tree)

        assert ".hidden" not in [s.name for s in result.files]

    def test_non_recursive(self, tree: Path) -> None:
        """Subfolders are listed but not entered."""
        result = SnapshotScanner(recursive=False).scan(tree)

        assert "c.png" not in [s.name for s in result.files]
        assert "sub" in [s.name for s in result.files]

    def test_symlinked_directory_not_entered(self, tree: Path, tmp_path: Path) -> None:
        """Symlinked folders are reported but never walked."""
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "secret.txt").write_text("s")
        (tree / "shortcut").symlink_to(outside)

        result = SnapshotScanner().scan(tree)

        names = [s.name for s in result.files]
        assert "shortcut" in names
        assert "secret.txt" not in names

    def test_missing_root(self, tmp_path: Path) -> None:
        """A missing root is an error, not an exception."""
        result = SnapshotScanner().scan(tmp_path / "missing")

        assert result.files == ()
        assert result.errors[0].message == "Not a folder or not accessible."

    def test_unlistable_subfolder_is_recorded(self, tree: Path) -> None:
        """A folder that cannot be listed becomes a scan error and the walk continues."""
        real_iterdir = Path.iterdir

        def flaky_iterdir(self: Path):
            if self.name == "sub":
                raise PermissionError(os.strerror(13))
            return real_iterdir(self)

        with patch.object(Path, "iterdir", flaky_iterdir):
            result = SnapshotScanner().scan(tree)

        assert [e.message for e in result.errors] == ["Permission denied."]
        assert "a.pdf" in [s.name for s in result.files]

    def test_vanished_entry_is_recorded(self, tree: Path) -> None:
        """An entry removed between listing and stat is reported."""
        with patch("filetidy.filesystem.scanner.snapshot_entry", side_effect=FileNotFoundError()):
            result = SnapshotScanner().scan(tree)

        assert result.files == ()
        assert {e.message for e in result.errors} == {"Entry disappeared during the scan."}
