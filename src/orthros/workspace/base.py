"""
Interfaces for the editor-side collaborators: where document text comes from
and where edits go.
"""

from abc import ABC, abstractmethod

from orthros.schemas import DocumentEdit


class DocumentStore(ABC):
    """Read-only view of open documents, keyed by URI."""

    @abstractmethod
    def get_text(self, uri: str) -> str:
        """Current text of the document.

        Raises:
            DocumentNotFoundError: If the URI is unknown
        """

    @abstractmethod
    def get_version(self, uri: str) -> int:
        """Current version of the document.

        Raises:
            DocumentNotFoundError: If the URI is unknown
        """


class EditApplier(ABC):
    """Applies edits to live documents."""

    @abstractmethod
    async def apply_edit(self, edit: DocumentEdit) -> bool:
        """Apply `edit` if its version still matches the document.

        Returns:
            True if applied, False if rejected (stale version, unknown
            document, write failure)
        """
