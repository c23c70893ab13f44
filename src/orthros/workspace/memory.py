"""
In-memory document store, the shape an editor host keeps for open buffers.
"""

from typing import Dict, List, Tuple

from orthros.exceptions import DocumentNotFoundError
from orthros.logging_config import logger
from orthros.mutation.editor import EditSynthesizer
from orthros.schemas import DocumentEdit
from .base import DocumentStore, EditApplier


class InMemoryDocumentStore(DocumentStore, EditApplier):
    """
    Open documents held as (text, version) pairs.

    Applying an edit bumps the version by one, the way an editor does after
    any change. Edits computed against an older version are rejected.
    """

    def __init__(self):
        self._documents: Dict[str, Tuple[str, int]] = {}
        self._synthesizer = EditSynthesizer()
        self.applied: List[DocumentEdit] = []

    def open(self, uri: str, text: str, version: int = 1) -> None:
        self._documents[uri] = (text, version)

    def update(self, uri: str, text: str) -> int:
        """Replace a document's text, returning the new version."""
        _, version = self._entry(uri)
        self._documents[uri] = (text, version + 1)
        return version + 1

    def close(self, uri: str) -> None:
        self._documents.pop(uri, None)

    def _entry(self, uri: str) -> Tuple[str, int]:
        try:
            return self._documents[uri]
        except KeyError:
            raise DocumentNotFoundError(uri) from None

    def get_text(self, uri: str) -> str:
        return self._entry(uri)[0]

    def get_version(self, uri: str) -> int:
        return self._entry(uri)[1]

    async def apply_edit(self, edit: DocumentEdit) -> bool:
        if edit.uri not in self._documents:
            logger.warning(f"Edit for unknown document {edit.uri} dropped")
            return False

        text, version = self._documents[edit.uri]
        if version != edit.version:
            logger.warning(
                f"Stale edit for {edit.uri} rejected "
                f"(edit version {edit.version}, document version {version})"
            )
            return False

        for text_edit in edit.edits:
            text = self._synthesizer.apply_edit(text, text_edit)
        self._documents[edit.uri] = (text, version + 1)
        self.applied.append(edit)
        return True
