"""Recoverable trash bin.

"Delete" in filetidy always means "move to the trash bin". Each trashed
entry gets its own token directory, so two files with the same name can
be trashed without colliding and restored independently.
"""

import logging
import shutil
import uuid
from pathlib import Path

from filetidy.core.paths import get_trash_dir

logger = logging.getLogger(__name__)


class TrashBin:
    """Moves entries into, and back out of, a trash directory.

    Attributes:
        root: Directory holding trashed entries.
    """

    def __init__(self, root: Path | None = None) -> None:
        """Initialize the TrashBin.

        Args:
            root: Trash directory. Defaults to ~/.local/share/filetidy/trash.
        """
        self._root = root if root is not None else get_trash_dir()

    @property
    def root(self) -> Path:
        """Directory holding trashed entries."""
        return self._root

    def put(self, path: Path) -> Path:
        """Move an entry into the trash.

        Args:
            path: File, directory or symlink to trash.

        Returns:
            Location of the entry inside the trash.

        Raises:
            OSError: If the entry cannot be moved.
        """
        slot = self._root / uuid.uuid4().hex[:12]
        slot.mkdir(parents=True, exist_ok=False)
        destination = slot / path.name
        try:
            shutil.move(str(path), str(destination))
        except OSError:
            self._discard_slot(slot)
            raise
        logger.debug("Trashed %s -> %s", path, destination)
        return destination

    def restore(self, trashed: Path, original: Path) -> None:
        """Move a trashed entry back to its original location.

        The caller is responsible for checking that ``original`` is free.

        Raises:
            OSError: If the entry cannot be moved.
        """
        original.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(trashed), str(original))
        self._discard_slot(trashed.parent)
        logger.debug("Restored %s -> %s", trashed, original)

    def _discard_slot(self, slot: Path) -> None:
        # Only empty token directories are removed.
        if slot.parent == self._root:
            try:
                slot.rmdir()
            except OSError as e:
                logger.debug("Leaving trash slot %s in place: %s", slot, e)
