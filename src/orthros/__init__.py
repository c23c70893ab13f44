"""
Orthros - Import management for editor actions

Decides how to add or reorganise imports on behalf of completion, quick-fix
and organise-imports, and turns the result into minimal versioned edits.
"""

__version__ = "0.1.0"

from orthros.schemas import (
    Ambiguous,
    Diagnostic,
    DocumentEdit,
    ExistingImport,
    ImportRequest,
    Namespace,
    NoEdit,
    NotApplicable,
    Updated,
)
from orthros.mutation import (
    EditSynthesizer,
    ImportBlockDetector,
    ImportFacade,
    ImportManager,
    ImportSettings,
    ServerContext,
)
from orthros.commands import CommandRegistry

__all__ = [
    "__version__",
    "Ambiguous",
    "Diagnostic",
    "DocumentEdit",
    "ExistingImport",
    "ImportRequest",
    "Namespace",
    "NoEdit",
    "NotApplicable",
    "Updated",
    "EditSynthesizer",
    "ImportBlockDetector",
    "ImportFacade",
    "ImportManager",
    "ImportSettings",
    "ServerContext",
    "CommandRegistry",
]
