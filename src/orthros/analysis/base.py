"""
Interface to the external analysis server.

The analysis server owns import parsing and rewriting. Orthros only decides
which operation to ask for and what to do with the answer.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from orthros.schemas import ExistingImport, ImportReply, Namespace


class AnalysisService(ABC):
    """Base class for analysis server sessions.

    Every call is a single request/response round trip with no partial
    results and no retry. Implementations raise AnalysisError on transport
    or protocol failure.
    """

    @abstractmethod
    async def list_imports(self, file_path: Path, text: str) -> List[ExistingImport]:
        """Parse the import block of `text` and return the imports present."""

    @abstractmethod
    async def add_qualified_import(
        self,
        file_path: Path,
        text: str,
        module: str,
        qualifier: str,
    ) -> ImportReply:
        """Add `import module as qualifier`."""

    @abstractmethod
    async def add_open_import(
        self,
        file_path: Path,
        text: str,
        module: str,
    ) -> Optional[str]:
        """Add an open import of `module`.

        Returns:
            The new file text, or None when there is nothing to do.
        """

    @abstractmethod
    async def add_explicit_import(
        self,
        file_path: Path,
        text: str,
        identifier: str,
        module: Optional[str] = None,
        qualifier: Optional[str] = None,
        namespace: Optional[Namespace] = None,
    ) -> ImportReply:
        """Import `identifier` explicitly, letting the server pick the module if none is given."""

    @abstractmethod
    async def organise_imports(self, file_path: Path, text: str) -> Optional[str]:
        """Return the file text with a canonical import block, or None if the server has no answer."""

    @abstractmethod
    async def list_modules(self) -> List[str]:
        """List module names known to the analysis server."""
