"""Best-effort filesystem enumeration.

Walks a root folder recursively and captures one FileSnapshot per entry.
Entries that cannot be inspected are recorded as ScanError values and the
walk continues. Symbolic links are reported but never followed.
"""

import logging
import os
import stat
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from filetidy.models.snapshot import FileSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ScanError:
    """An entry that could not be enumerated.

    Attributes:
        path: Path that failed.
        message: Short description of the failure.
    """

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Snapshots and errors from one scan.

    Attributes:
        root: Folder that was scanned.
        files: Snapshots in walk order (parents before children, names sorted).
        errors: Entries that could not be enumerated.
    """

    root: str
    files: tuple[FileSnapshot, ...] = ()
    errors: tuple[ScanError, ...] = ()


def _timestamp(value: float | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(value, tz=UTC)


def snapshot_entry(path: Path) -> FileSnapshot:
    """Capture a snapshot of a single entry without following symlinks.

    Args:
        path: Entry to inspect.

    Returns:
        Snapshot of the entry.

    Raises:
        OSError: If the entry cannot be stat'ed.
    """
    info = path.lstat()
    is_symlink = stat.S_ISLNK(info.st_mode)
    is_directory = stat.S_ISDIR(info.st_mode)
    suffix = path.suffix if not is_directory else ""

    return FileSnapshot(
        path=str(path),
        name=path.name,
        extension=suffix[1:] if suffix.startswith(".") else suffix,
        size_bytes=None if is_directory else info.st_size,
        # Creation time is only reported on some platforms; absent elsewhere.
        created_at=_timestamp(getattr(info, "st_birthtime", None)),
        modified_at=_timestamp(info.st_mtime),
        is_directory=is_directory,
        is_symlink=is_symlink,
        is_readable=os.access(path, os.R_OK),
    )


class SnapshotScanner:
    """Enumerates a folder into immutable snapshots.

    Args:
        include_hidden: Include entries whose name starts with a dot.
        recursive: Descend into subdirectories.
    """

    def __init__(self, *, include_hidden: bool = True, recursive: bool = True) -> None:
        self._include_hidden = include_hidden
        self._recursive = recursive

    def scan(self, root: Path) -> ScanResult:
        """Scan a folder.

        The root itself is not included in the result.

        Args:
            root: Folder to enumerate.

        Returns:
            ScanResult with every snapshot and every error encountered.
        """
        files: list[FileSnapshot] = []
        errors: list[ScanError] = []

        if not root.is_dir():
            errors.append(ScanError(path=str(root), message="Not a folder or not accessible."))
            return ScanResult(root=str(root), errors=tuple(errors))

        pending = [root]
        while pending:
            directory = pending.pop()
            try:
                entries = sorted(directory.iterdir(), key=lambda p: p.name)
            except OSError as e:
                logger.warning("Cannot list %s: %s", directory, e)
                errors.append(ScanError(path=str(directory), message=_describe(e)))
                continue

            subdirectories: list[Path] = []
            for entry in entries:
                if not self._include_hidden and entry.name.startswith("."):
                    continue
                try:
                    snapshot = snapshot_entry(entry)
                except OSError as e:
                    logger.debug("Cannot stat %s: %s", entry, e)
                    errors.append(ScanError(path=str(entry), message=_describe(e)))
                    continue
                files.append(snapshot)
                if self._recursive and snapshot.is_directory and not snapshot.is_symlink:
                    subdirectories.append(entry)

            # Reversed so the stack pops subdirectories in name order.
            pending.extend(reversed(subdirectories))

        logger.info("Scanned %s: %d entries, %d errors", root, len(files), len(errors))
        return ScanResult(root=str(root), files=tuple(files), errors=tuple(errors))


def _describe(error: OSError) -> str:
    if isinstance(error, PermissionError):
        return "Permission denied."
    if isinstance(error, FileNotFoundError):
        return "Entry disappeared during the scan."
    return "Could not be read."
