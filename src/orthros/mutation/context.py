"""
Per-call context for import operations.

Everything an operation needs from its surroundings (document store, edit
applier, analysis session, settings) travels in a ServerContext, so the
operations themselves hold no state.
"""

from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from orthros.analysis.base import AnalysisService
from orthros.exceptions import ConfigError
from orthros.user_config import UserConfig
from orthros.workspace.base import DocumentStore, EditApplier
from .config import MUTATION_CONFIG


class ImportSettings(BaseModel):
    """
    Typed view of the settings import operations read. Values are not
    coerced, so a string "false" in a config file is an error.
    """
    model_config = ConfigDict(strict=True)

    auto_add_import: bool = MUTATION_CONFIG["auto_add_import"]
    implicit_open_module: str = MUTATION_CONFIG["implicit_open_module"]
    organise_imports_hint: bool = True
    document_changes: bool = True

    @classmethod
    def from_config(cls, config: UserConfig) -> "ImportSettings":
        """
        Read import settings from user configuration.

        Raises:
            ConfigError: If a configured value has the wrong type
        """
        defaults = cls()
        try:
            return cls(
                auto_add_import=config.get("imports.auto_add", defaults.auto_add_import),
                implicit_open_module=config.get("imports.implicit_open_module", defaults.implicit_open_module),
                organise_imports_hint=config.get("diagnostics.organise_imports_hint", defaults.organise_imports_hint),
                document_changes=config.get("edits.document_changes", defaults.document_changes),
            )
        except ValidationError as e:
            raise ConfigError(f"Invalid import settings: {e}") from e


@dataclass(frozen=True)
class ServerContext:
    """
    Capabilities handed to each import operation.

    Attributes:
        documents: Source of document text and version
        applier: Destination for computed edits
        service: Active analysis session, or None when there is none
        settings: Import settings
    """
    documents: DocumentStore
    applier: EditApplier
    service: Optional[AnalysisService] = None
    settings: ImportSettings = field(default_factory=ImportSettings)
