"""
Mutation package: import requests, edits and import-block diagnostics.

Decides which import change a request needs, turns the analysis server's
full-file answer into a minimal versioned edit, and flags import blocks that
are not in canonical form.
"""

from .config import MUTATION_CONFIG, IMPORT_BLOCK_CONFIG
from .editor import EditSynthesizer, split_lines, utf16_length
from .detector import ImportBlockDetector
from .import_manager import ImportManager, ImportStrategy
from .context import ImportSettings, ServerContext
from .facade import ImportFacade

__all__ = [
    # Main facade
    "ImportFacade",

    # Components
    "ImportManager",
    "ImportStrategy",
    "EditSynthesizer",
    "ImportBlockDetector",

    # Context
    "ImportSettings",
    "ServerContext",

    # Helpers
    "split_lines",
    "utf16_length",

    # Configuration
    "MUTATION_CONFIG",
    "IMPORT_BLOCK_CONFIG",
]
