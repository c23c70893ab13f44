from enum import Enum, IntEnum
from pydantic import BaseModel, ConfigDict, Field
from typing import Annotated, Any, Dict, List, Optional, Literal, Union


ORGANISE_IMPORTS_CODE = "HintOrganiseImports"


class Namespace(str, Enum):
    """
    Layer a symbol lives in when a name is overloaded across layers.
    """
    VALUE = "value"
    TYPE = "type"
    KIND = "kind"


class ImportRequest(BaseModel):
    """
    One user-initiated "add this symbol" action from completion or quick-fix.
    """
    model_config = ConfigDict(frozen=True)

    identifier: str
    module: Optional[str] = None
    qualifier: Optional[str] = None
    namespace: Optional[Namespace] = None


class ExistingImport(BaseModel):
    """
    One import currently present in a file, as parsed by the analysis server.
    """
    model_config = ConfigDict(frozen=True)

    module_name: str
    qualifier: Optional[str] = None


# === Mutation outcomes ===

class Updated(BaseModel):
    """The file text after the import was added."""
    kind: Literal["updated"] = "updated"
    text: str


class Ambiguous(BaseModel):
    """
    The identifier is exported by several modules.

    candidate_modules keeps the analysis server's order.
    """
    kind: Literal["ambiguous"] = "ambiguous"
    candidate_modules: List[str]


class NotApplicable(BaseModel):
    """Nothing to do (already imported, or the server declined)."""
    kind: Literal["not_applicable"] = "not_applicable"


MutationOutcome = Annotated[
    Union[Updated, Ambiguous, NotApplicable],
    Field(discriminator="kind"),
]


class ImportReply(BaseModel):
    """
    Reply to an import mutation: the updated import set plus the outcome.
    """
    imports: List[ExistingImport] = Field(default_factory=list)
    outcome: MutationOutcome


# === Text coordinates and edits ===

class Position(BaseModel):
    """
    Zero-based line and UTF-16 character offset.
    """
    model_config = ConfigDict(frozen=True)

    line: int
    character: int


class Range(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: Position
    end: Position


class TextEdit(BaseModel):
    """
    Replacement of a range with new text.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    range: Range
    new_text: str = Field(alias="newText")


class NoEdit(BaseModel):
    """Old and new text were identical."""
    kind: Literal["none"] = "none"


class DocumentEdit(BaseModel):
    """
    A single edit to one document, valid only against `version`.
    """
    kind: Literal["document"] = "document"
    uri: str
    version: int
    edits: List[TextEdit] = Field(min_length=1, max_length=1)

    @property
    def text_edit(self) -> TextEdit:
        return self.edits[0]

    def to_workspace_edit(self, document_changes: bool = True) -> Dict[str, Any]:
        """
        Render as an LSP WorkspaceEdit.

        Args:
            document_changes: Client supports versioned documentChanges.
                When False, falls back to the unversioned `changes` map.

        Returns:
            WorkspaceEdit JSON object
        """
        edits = [e.model_dump(by_alias=True) for e in self.edits]
        if document_changes:
            return {
                "documentChanges": [{
                    "textDocument": {"uri": self.uri, "version": self.version},
                    "edits": edits,
                }]
            }
        return {"changes": {self.uri: edits}}


EditResult = Annotated[
    Union[NoEdit, DocumentEdit],
    Field(discriminator="kind"),
]


# === Diagnostics ===

class DiagnosticSeverity(IntEnum):
    ERROR = 1
    WARNING = 2
    INFORMATION = 3
    HINT = 4


class Diagnostic(BaseModel):
    """
    An LSP diagnostic. Only the organise-imports hint is produced here.
    """
    range: Range
    severity: DiagnosticSeverity = DiagnosticSeverity.HINT
    code: str = ORGANISE_IMPORTS_CODE
    source: str = "orthros"
    message: str

    def to_lsp(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
