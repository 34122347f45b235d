"""File snapshot model.

A snapshot is evidence captured by the scanner at one instant. It is
never refreshed, so it may be stale by the time it is planned against
or executed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class FileSnapshot:
    """Immutable record of a filesystem entry at enumeration time.

    Attributes:
        path: Absolute path of the entry.
        name: Final path component, including extension.
        extension: Extension without the leading dot ("" if none).
        size_bytes: Size in bytes, None if it could not be read.
        created_at: Creation time, None if unavailable on this platform.
        modified_at: Last modification time, None if unavailable.
        is_directory: Whether the entry is a directory.
        is_symlink: Whether the entry is a symbolic link.
        is_readable: Whether the scanning user could read the entry.
    """

    path: str
    name: str
    extension: str = ""
    size_bytes: int | None = None
    created_at: datetime | None = None
    modified_at: datetime | None = None
    is_directory: bool = False
    is_symlink: bool = False
    is_readable: bool = True

    def __post_init__(self) -> None:
        """Validate snapshot data after initialization."""
        if not self.path:
            msg = "Snapshot path cannot be empty"
            raise ValueError(msg)
        if not self.name:
            msg = "Snapshot name cannot be empty"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage.

        Returns:
            Dictionary representation of the snapshot.
        """
        return {
            "path": self.path,
            "name": self.name,
            "extension": self.extension,
            "size_bytes": self.size_bytes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "modified_at": self.modified_at.isoformat() if self.modified_at else None,
            "is_directory": self.is_directory,
            "is_symlink": self.is_symlink,
            "is_readable": self.is_readable,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileSnapshot:
        """Deserialize from dictionary.

        Args:
            data: Dictionary containing snapshot data.

        Returns:
            FileSnapshot instance.

        Raises:
            KeyError: If path or name is missing.
        """
        created = data.get("created_at")
        modified = data.get("modified_at")
        return cls(
            path=data["path"],
            name=data["name"],
            extension=data.get("extension", ""),
            size_bytes=data.get("size_bytes"),
            created_at=datetime.fromisoformat(created) if created else None,
            modified_at=datetime.fromisoformat(modified) if modified else None,
            is_directory=data.get("is_directory", False),
            is_symlink=data.get("is_symlink", False),
            is_readable=data.get("is_readable", True),
        )
