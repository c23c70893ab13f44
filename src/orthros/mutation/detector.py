"""
ImportBlockDetector: Flag files whose import block is not in canonical form.

Detects the issue without changing anything; the fix is the organise-imports
command.
"""

from typing import List, Optional

from orthros.logging_config import logger
from orthros.schemas import (
    Diagnostic,
    DiagnosticSeverity,
    ORGANISE_IMPORTS_CODE,
    Position,
    Range,
)
from .config import IMPORT_BLOCK_CONFIG


class ImportBlockDetector:
    """
    Compare a file against its canonical import block.

    The span is found with a line-prefix scan, not a parser: any line whose
    trimmed text starts with the import keyword counts, wherever it occurs.
    """

    def __init__(self, import_keyword: Optional[str] = None, message: Optional[str] = None):
        self.import_keyword = import_keyword or IMPORT_BLOCK_CONFIG["import_keyword"]
        self.message = message or IMPORT_BLOCK_CONFIG["diagnostic_message"]

    def last_import_line(self, text: str) -> Optional[int]:
        """
        Find the index of the last line starting with the import keyword.

        Args:
            text: File content

        Returns:
            Zero-based line index, or None if no line matches
        """
        last_import_line = None
        for i, line in enumerate(text.split("\n")):
            if line.strip().startswith(self.import_keyword):
                last_import_line = i
        return last_import_line

    def detect(self, uri: str, text: str, canonical_text: Optional[str]) -> List[Diagnostic]:
        """
        Check `text` against the canonical rendering of its imports.

        Args:
            uri: Document identity (for logging)
            text: Current file content
            canonical_text: Same file with a canonical import block, or None
                if the analysis server had no answer

        Returns:
            Empty list if already canonical, otherwise one hint diagnostic
            spanning line 0 to the last import line
        """
        if canonical_text is None or canonical_text == text:
            return []

        end_line = self.last_import_line(text) or 0
        logger.debug(f"Import block of {uri} differs from canonical (lines 0-{end_line})")

        return [
            Diagnostic(
                range=Range(
                    start=Position(line=0, character=0),
                    end=Position(line=end_line, character=0),
                ),
                severity=DiagnosticSeverity.HINT,
                code=ORGANISE_IMPORTS_CODE,
                message=self.message,
            )
        ]
