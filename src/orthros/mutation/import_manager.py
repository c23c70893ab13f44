"""
ImportManager: Decide which import mutation a request needs.

Three strategies, tried in order:
1. Qualified  - module and qualifier given
2. Open       - module given, no qualifier, module is the implicitly-open one
3. Explicit   - everything else, module optional

Qualified and open imports are checked against the existing imports first
and never reach the analysis server when already present. Explicit imports
leave duplicate detection to the analysis server.
"""

from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from orthros.analysis.base import AnalysisService
from orthros.logging_config import logger
from orthros.schemas import (
    ExistingImport,
    ImportRequest,
    MutationOutcome,
    NotApplicable,
    Updated,
)
from .config import MUTATION_CONFIG


class ImportStrategy(str, Enum):
    QUALIFIED = "qualified"
    OPEN = "open"
    EXPLICIT = "explicit"


class ImportManager:
    """
    Resolve import requests against the existing imports of one file.

    Holds no per-file state; every input is passed to each call.
    """

    def __init__(self, service: AnalysisService, implicit_open_module: Optional[str] = None):
        """
        Initialize import manager.

        Args:
            service: Analysis server session that performs the rewrites
            implicit_open_module: Module imported open rather than explicitly
        """
        self.service = service
        self.implicit_open_module = implicit_open_module or MUTATION_CONFIG["implicit_open_module"]

    def select_strategy(self, request: ImportRequest) -> ImportStrategy:
        """Pick the mutation strategy for a request."""
        if request.module and request.qualifier:
            return ImportStrategy.QUALIFIED
        if request.module and not request.qualifier and request.module == self.implicit_open_module:
            return ImportStrategy.OPEN
        return ImportStrategy.EXPLICIT

    @staticmethod
    def has_qualified_import(existing: Iterable[ExistingImport], module: str, qualifier: str) -> bool:
        return ExistingImport(module_name=module, qualifier=qualifier) in set(existing)

    @staticmethod
    def has_open_import(existing: Iterable[ExistingImport], module: str) -> bool:
        return any(imp.module_name == module and imp.qualifier is None for imp in existing)

    async def resolve(
        self,
        request: ImportRequest,
        file_path: Path,
        text: str,
        existing: Iterable[ExistingImport],
    ) -> MutationOutcome:
        """
        Carry out one import request.

        Args:
            request: Symbol to import
            file_path: Path the analysis server knows the file by
            text: Current file text
            existing: Imports currently in the file

        Returns:
            Updated, Ambiguous or NotApplicable

        Raises:
            AnalysisError: If the analysis server call fails
        """
        strategy = self.select_strategy(request)

        if strategy is ImportStrategy.QUALIFIED:
            return await self._add_qualified(file_path, text, existing, request.module, request.qualifier)

        if strategy is ImportStrategy.OPEN:
            return await self._add_open(file_path, text, existing, request.module)

        logger.info(
            f"Adding import of '{request.identifier}' from "
            f"{request.module or '<any module>'} "
            f"(namespace: {request.namespace.value if request.namespace else 'any'})"
        )
        reply = await self.service.add_explicit_import(
            file_path,
            text,
            request.identifier,
            module=request.module,
            qualifier=request.qualifier,
            namespace=request.namespace,
        )
        return reply.outcome

    async def resolve_module(
        self,
        module: str,
        qualifier: Optional[str],
        file_path: Path,
        text: str,
        existing: Iterable[ExistingImport],
    ) -> MutationOutcome:
        """
        Import a whole module, qualified if a qualifier is given, open otherwise.

        Raises:
            AnalysisError: If the analysis server call fails
        """
        if qualifier:
            return await self._add_qualified(file_path, text, existing, module, qualifier)
        return await self._add_open(file_path, text, existing, module)

    async def _add_qualified(
        self,
        file_path: Path,
        text: str,
        existing: Iterable[ExistingImport],
        module: str,
        qualifier: str,
    ) -> MutationOutcome:
        if self.has_qualified_import(existing, module, qualifier):
            logger.debug(f"'{module}' already imported as {qualifier}")
            return NotApplicable()

        reply = await self.service.add_qualified_import(file_path, text, module, qualifier)
        return reply.outcome

    async def _add_open(
        self,
        file_path: Path,
        text: str,
        existing: Iterable[ExistingImport],
        module: str,
    ) -> MutationOutcome:
        if self.has_open_import(existing, module):
            logger.debug(f"'{module}' already imported open")
            return NotApplicable()

        new_text = await self.service.add_open_import(file_path, text, module)
        if not new_text or new_text == text:
            return NotApplicable()
        return Updated(text=new_text)
