"""
FileWorkspace: Documents backed by files on disk.

Used by the command-line front end, where there is no editor holding the
buffer. A file's version is its modification time in nanoseconds, so an edit
is rejected if the file changed after it was read.
"""

import os
import tempfile
from pathlib import Path
from typing import List, NamedTuple

from orthros.exceptions import DocumentNotFoundError
from orthros.logging_config import logger
from orthros.mutation.editor import EditSynthesizer
from orthros.paths import uri_to_path
from orthros.schemas import DocumentEdit
from .base import DocumentStore, EditApplier


class PendingChange(NamedTuple):
    """An edit that dry-run mode computed but did not write."""
    path: Path
    original: str
    modified: str


class FileWorkspace(DocumentStore, EditApplier):
    """
    Read and edit files with optimistic locking and atomic writes.

    Features:
    - Version = st_mtime_ns, captured at read time
    - Atomic writes (temp file + rename)
    - Line endings preserved (files are read and written untranslated)
    - Dry-run mode collects changes instead of writing them
    - Edits that were not written are kept in `rejected`
    """

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run
        self.pending: List[PendingChange] = []
        self.rejected: List[DocumentEdit] = []
        self._synthesizer = EditSynthesizer()

    def _path(self, uri: str) -> Path:
        path = uri_to_path(uri)
        if not path.is_file():
            raise DocumentNotFoundError(uri)
        return path

    def get_text(self, uri: str) -> str:
        path = self._path(uri)
        with open(path, 'r', encoding='utf-8', newline='') as f:
            return f.read()

    def get_version(self, uri: str) -> int:
        return self._path(uri).stat().st_mtime_ns

    async def apply_edit(self, edit: DocumentEdit) -> bool:
        try:
            path = self._path(edit.uri)
            if path.stat().st_mtime_ns != edit.version:
                logger.warning(f"File modified externally, edit rejected: {path}")
                self.rejected.append(edit)
                return False
            original = self.get_text(edit.uri)
        except (DocumentNotFoundError, OSError) as e:
            logger.error(f"Cannot apply edit to {edit.uri}: {e}")
            self.rejected.append(edit)
            return False

        modified = original
        for text_edit in edit.edits:
            modified = self._synthesizer.apply_edit(modified, text_edit)

        if self.dry_run:
            self.pending.append(PendingChange(path, original, modified))
            return True

        if not self._atomic_write(path, modified):
            self.rejected.append(edit)
            return False

        logger.info(f"Updated imports in {path}")
        return True

    def _atomic_write(self, path: Path, content: str) -> bool:
        """
        Write file atomically using temp file + rename.

        Args:
            path: Target file path
            content: Content to write

        Returns:
            True if successful
        """
        try:
            # Temp file in the target's directory keeps the rename on one filesystem
            fd, temp_path = tempfile.mkstemp(
                dir=str(path.parent),
                prefix=f".{path.name}.",
                suffix=".tmp"
            )
        except OSError as e:
            logger.error(f"Failed to create temp file: {e}")
            return False

        try:
            with os.fdopen(fd, 'w', encoding='utf-8', newline='') as f:
                f.write(content)
            os.replace(temp_path, str(path))
            logger.debug(f"Atomic write completed: {path}")
            return True
        except OSError as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            logger.error(f"Failed during atomic write: {e}")
            return False
