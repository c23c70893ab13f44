"""
Host command surface.

Maps the commands an editor host sends (workspace/executeCommand) to import
operations. Arguments arrive as loosely-typed positional lists; they are
validated here and anything malformed becomes a logged no-op.
"""

from typing import Any, Callable, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError, field_validator

from orthros.exceptions import MalformedCommandError
from orthros.logging_config import logger
from orthros.mutation import ImportFacade, ServerContext
from orthros.schemas import (
    Ambiguous,
    Diagnostic,
    DocumentEdit,
    ImportRequest,
    Namespace,
    ORGANISE_IMPORTS_CODE,
)


ADD_COMPLETION_IMPORT = "orthros.addCompletionImport"
ADD_MODULE_IMPORT = "orthros.addModuleImport"
ORGANISE_IMPORTS = "orthros.organiseImports"
GET_AVAILABLE_MODULES = "orthros.getAvailableModules"

ArgsT = TypeVar("ArgsT", bound=BaseModel)


# === Argument shapes (positional order = field order) ===

class CompletionImportArgs(BaseModel):
    identifier: str
    module: Optional[str] = None
    qualifier: Optional[str] = None
    uri: str
    namespace: Optional[Namespace] = None

    @field_validator("module", "qualifier", mode="before")
    @classmethod
    def _blank_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("namespace", mode="before")
    @classmethod
    def _namespace_any_case(cls, value):
        # Hosts send "value", "Value" or "NSValue"
        if isinstance(value, str):
            value = value.strip().lower()
            if value.startswith("ns"):
                value = value[2:]
            return value or None
        return value


class ModuleImportArgs(BaseModel):
    module: str
    qualifier: Optional[str] = None
    uri: str

    @field_validator("qualifier", mode="before")
    @classmethod
    def _blank_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class DocumentArgs(BaseModel):
    uri: str


def bind_arguments(
    command: str,
    model: Type[ArgsT],
    arguments: Union[List[Any], Dict[str, Any], None],
) -> ArgsT:
    """
    Validate host arguments against an argument model.

    Args:
        command: Command name (for error messages)
        model: Argument model; positional arguments bind in field order
        arguments: Positional list, or a single keyword object

    Returns:
        Validated arguments

    Raises:
        MalformedCommandError: If the arguments do not fit the model
    """
    if arguments is None:
        arguments = []

    if isinstance(arguments, list) and len(arguments) == 1 and isinstance(arguments[0], dict):
        arguments = arguments[0]

    if isinstance(arguments, list):
        fields = list(model.model_fields)
        if len(arguments) > len(fields):
            raise MalformedCommandError(
                command,
                f"expected at most {len(fields)} arguments, got {len(arguments)}",
                arguments,
            )
        arguments = dict(zip(fields, arguments))

    if not isinstance(arguments, dict):
        raise MalformedCommandError(command, f"unexpected argument type {type(arguments).__name__}")

    try:
        return model.model_validate(arguments)
    except ValidationError as e:
        raise MalformedCommandError(command, str(e), list(arguments.values())) from e


class CommandRegistry:
    """
    Registry of commands the host can execute.

    Every command returns None on success or no-op, except:
    - addCompletionImport returns the candidate modules when ambiguous
    - getAvailableModules returns the module list
    """

    def __init__(self, ctx: ServerContext, facade: Optional[ImportFacade] = None):
        """
        Initialize command registry.

        Args:
            ctx: Server context passed to every operation
            facade: Import facade (a fresh one by default)
        """
        self.ctx = ctx
        self.facade = facade or ImportFacade()

        # Command registry: command name -> handler
        self.commands: Dict[str, Callable] = {
            ADD_COMPLETION_IMPORT: self.add_completion_import,
            ADD_MODULE_IMPORT: self.add_module_import,
            ORGANISE_IMPORTS: self.organise_imports,
            GET_AVAILABLE_MODULES: self.get_available_modules,
        }

    def list_commands(self) -> List[str]:
        """Command names to advertise in executeCommandProvider."""
        return sorted(self.commands)

    async def execute(self, command: str, arguments: Union[List[Any], Dict[str, Any], None] = None) -> Any:
        """
        Execute a host command.

        Args:
            command: Command name
            arguments: Raw command arguments

        Returns:
            Command result (usually None)
        """
        handler = self.commands.get(command)
        if handler is None:
            logger.warning(f"Unknown command: {command}")
            return None

        try:
            return await handler(arguments)
        except MalformedCommandError as e:
            logger.warning(str(e))
            return None

    async def add_completion_import(self, arguments) -> Optional[List[str]]:
        args = bind_arguments(ADD_COMPLETION_IMPORT, CompletionImportArgs, arguments)
        request = ImportRequest(
            identifier=args.identifier,
            module=args.module,
            qualifier=args.qualifier,
            namespace=args.namespace,
        )
        outcome = await self.facade.add_completion_import(self.ctx, request, args.uri)
        if isinstance(outcome, Ambiguous):
            return list(outcome.candidate_modules)
        return None

    async def add_module_import(self, arguments) -> None:
        args = bind_arguments(ADD_MODULE_IMPORT, ModuleImportArgs, arguments)
        await self.facade.add_module_import(self.ctx, args.module, args.qualifier, args.uri)
        return None

    async def organise_imports(self, arguments) -> None:
        args = bind_arguments(ORGANISE_IMPORTS, DocumentArgs, arguments)
        await self.facade.organise_imports(self.ctx, args.uri)
        return None

    async def get_available_modules(self, arguments) -> List[str]:
        return await self.facade.list_modules(self.ctx)

    def workspace_edit(self, edit: DocumentEdit) -> Dict[str, Any]:
        """Render an edit in the WorkspaceEdit shape the client supports."""
        return edit.to_workspace_edit(document_changes=self.ctx.settings.document_changes)

    def code_actions(self, uri: str, diagnostics: List[Union[Diagnostic, Dict[str, Any]]]) -> List[Dict[str, Any]]:
        """
        Quick-fix actions for organise-imports hints.

        Args:
            uri: Document the diagnostics belong to
            diagnostics: Diagnostics from the code-action request context

        Returns:
            One "Organise imports" CodeAction per matching diagnostic
        """
        actions = []
        for diagnostic in diagnostics:
            if isinstance(diagnostic, Diagnostic):
                diagnostic = diagnostic.to_lsp()
            if diagnostic.get("code") != ORGANISE_IMPORTS_CODE:
                continue
            actions.append({
                "title": "Organise imports",
                "kind": "source.organizeImports",
                "diagnostics": [diagnostic],
                "command": {
                    "title": "Organise imports",
                    "command": ORGANISE_IMPORTS,
                    "arguments": [uri],
                },
            })
        return actions
