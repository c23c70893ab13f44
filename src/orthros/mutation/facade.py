"""
ImportFacade: Orchestrate import operations for one document at a time.

Main entry point for add-import, organise-imports and the import-block check.
"""

from pathlib import Path
from typing import Awaitable, Callable, List, Optional

from orthros.exceptions import AnalysisError, DocumentNotFoundError
from orthros.logging_config import logger
from orthros.paths import uri_to_path
from orthros.schemas import (
    Ambiguous,
    Diagnostic,
    DocumentEdit,
    EditResult,
    ExistingImport,
    ImportRequest,
    MutationOutcome,
    NoEdit,
    NotApplicable,
    Updated,
)

from .context import ServerContext
from .detector import ImportBlockDetector
from .editor import EditSynthesizer
from .import_manager import ImportManager


Mutation = Callable[[Path, str, List[ExistingImport]], Awaitable[MutationOutcome]]


class ImportFacade:
    """
    Main facade for import operations.

    Pipeline for an import request:
    1. Snapshot text and version (DocumentStore)
    2. Read the existing imports (AnalysisService)
    3. Pick and run a strategy (ImportManager)
    4. Build the edit against the snapshot version (EditSynthesizer)
    5. Hand the edit to the editor (EditApplier), without retry

    No operation raises: failures are logged and end as a no-op.
    """

    def __init__(self):
        self.synthesizer = EditSynthesizer()
        self.detector = ImportBlockDetector()

    async def add_completion_import(
        self,
        ctx: ServerContext,
        request: ImportRequest,
        uri: str,
    ) -> MutationOutcome:
        """
        Import a symbol picked from completion or a quick-fix.

        Args:
            ctx: Server context
            request: Symbol, optional module/qualifier, optional namespace
            uri: Document to edit

        Returns:
            The mutation outcome. Ambiguous outcomes carry the candidate
            modules for the host to offer; no edit is made for them.
        """
        if not ctx.settings.auto_add_import:
            logger.debug(f"Automatic imports disabled, ignoring '{request.identifier}'")
            return NotApplicable()

        if ctx.service is None:
            logger.debug(f"No analysis session, cannot import '{request.identifier}'")
            return NotApplicable()

        manager = ImportManager(ctx.service, ctx.settings.implicit_open_module)

        async def mutation(file_path, text, existing):
            return await manager.resolve(request, file_path, text, existing)

        return await self._mutate(ctx, uri, mutation)

    async def add_module_import(
        self,
        ctx: ServerContext,
        module: str,
        qualifier: Optional[str],
        uri: str,
    ) -> MutationOutcome:
        """
        Import a whole module, qualified when `qualifier` is given.

        Args:
            ctx: Server context
            module: Module name
            qualifier: Alias, or None for an open import
            uri: Document to edit

        Returns:
            The mutation outcome
        """
        if ctx.service is None:
            logger.debug(f"No analysis session, cannot import module '{module}'")
            return NotApplicable()

        manager = ImportManager(ctx.service, ctx.settings.implicit_open_module)

        async def mutation(file_path, text, existing):
            return await manager.resolve_module(module, qualifier, file_path, text, existing)

        return await self._mutate(ctx, uri, mutation)

    async def organise_imports(self, ctx: ServerContext, uri: str) -> EditResult:
        """
        Rewrite the import block of a document into canonical form.

        Returns:
            The edit handed to the editor, or NoEdit
        """
        if ctx.service is None:
            logger.debug(f"No analysis session, cannot organise imports in {uri}")
            return NoEdit()

        try:
            text = ctx.documents.get_text(uri)
            version = ctx.documents.get_version(uri)
        except DocumentNotFoundError as e:
            logger.warning(str(e))
            return NoEdit()

        try:
            canonical = await ctx.service.organise_imports(uri_to_path(uri), text)
        except AnalysisError as e:
            logger.warning(f"Organise imports failed for {uri}: {e}")
            return NoEdit()

        if canonical is None:
            return NoEdit()

        edit = self.synthesizer.make_edit(uri, version, text, canonical)
        await self._apply(ctx, edit)
        return edit

    async def check_imports(self, ctx: ServerContext, uri: str) -> List[Diagnostic]:
        """
        Check whether a document's import block is already canonical.

        Returns:
            No diagnostics, or one organise-imports hint
        """
        if not ctx.settings.organise_imports_hint or ctx.service is None:
            return []

        try:
            text = ctx.documents.get_text(uri)
            canonical = await ctx.service.organise_imports(uri_to_path(uri), text)
        except DocumentNotFoundError as e:
            logger.warning(str(e))
            return []
        except AnalysisError as e:
            logger.debug(f"Import check skipped for {uri}: {e}")
            return []

        return self.detector.detect(uri, text, canonical)

    async def list_modules(self, ctx: ServerContext) -> List[str]:
        """
        List the modules the analysis server knows about.

        Returns:
            Module names, or an empty list when there is no session
        """
        if ctx.service is None:
            logger.error("No analysis session, cannot list modules")
            return []

        try:
            return await ctx.service.list_modules()
        except AnalysisError as e:
            logger.error(f"Listing modules failed: {e}")
            return []

    async def _mutate(self, ctx: ServerContext, uri: str, mutation: Mutation) -> MutationOutcome:
        # Text and version are read once, before any analysis call, and the
        # edit is built against that version even if the document moves on.
        try:
            text = ctx.documents.get_text(uri)
            version = ctx.documents.get_version(uri)
        except DocumentNotFoundError as e:
            logger.warning(str(e))
            return NotApplicable()

        file_path = uri_to_path(uri)

        try:
            existing = await ctx.service.list_imports(file_path, text)
            outcome = await mutation(file_path, text, existing)
        except AnalysisError as e:
            logger.warning(f"Import update failed for {uri}: {e}")
            return NotApplicable()

        if isinstance(outcome, Updated):
            edit = self.synthesizer.make_edit(uri, version, text, outcome.text)
            await self._apply(ctx, edit)
        elif isinstance(outcome, Ambiguous):
            logger.info(
                f"Ambiguous import in {uri}, candidates: {', '.join(outcome.candidate_modules)}"
            )

        return outcome

    async def _apply(self, ctx: ServerContext, edit: EditResult) -> bool:
        if not isinstance(edit, DocumentEdit):
            return False

        try:
            applied = await ctx.applier.apply_edit(edit)
        except Exception as e:
            logger.error(f"Applying edit to {edit.uri} failed: {e}")
            return False

        if not applied:
            logger.info(f"Edit to {edit.uri}@{edit.version} was not applied")
        return applied
