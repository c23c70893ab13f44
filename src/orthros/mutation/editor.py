"""
EditSynthesizer: Turn a full-file rewrite into a minimal, versioned edit.

The analysis server always answers with the whole new file text. Editors
want the smallest edit that gets them there, tagged with the document
version it was computed against.
"""

import difflib
from typing import List

from orthros.logging_config import logger
from orthros.schemas import (
    DocumentEdit,
    EditResult,
    NoEdit,
    Position,
    Range,
    TextEdit,
)


def split_lines(text: str) -> List[str]:
    """
    Split text into lines, keeping each line's terminator.

    "A\\nB\\nC" -> ["A\\n", "B\\n", "C"]; "A\\n" -> ["A\\n"]; "" -> [].
    Carriage returns stay attached, so CRLF files compare correctly.
    """
    lines = text.split("\n")
    terminated = [line + "\n" for line in lines[:-1]]
    if lines[-1]:
        terminated.append(lines[-1])
    return terminated


def utf16_length(text: str) -> int:
    """Length of `text` in UTF-16 code units (LSP character offsets)."""
    return len(text.encode("utf-16-le")) // 2


class EditSynthesizer:
    """
    Compute single-range edits between two versions of a file.

    Features:
    - No edit when the texts are identical
    - Unchanged leading and trailing lines are left out of the edit
    - Positions in UTF-16 code units, as LSP expects
    - Line endings preserved (lines are compared with their terminators)
    """

    def make_edit(self, uri: str, version: int, old_text: str, new_text: str) -> EditResult:
        """
        Build the edit that turns `old_text` into `new_text`.

        Args:
            uri: Document identity the edit targets
            version: Document version captured when `old_text` was read
            old_text: Text the edit applies to
            new_text: Desired text

        Returns:
            NoEdit, or a DocumentEdit carrying exactly one TextEdit
        """
        if old_text == new_text:
            return NoEdit()

        old_lines = split_lines(old_text)
        new_lines = split_lines(new_text)

        prefix = self._common_prefix(old_lines, new_lines)
        suffix = self._common_suffix(old_lines, new_lines, prefix)

        old_end = len(old_lines) - suffix
        new_end = len(new_lines) - suffix

        edit = TextEdit(
            range=Range(
                start=self._position_after(old_lines, prefix),
                end=self._position_after(old_lines, old_end),
            ),
            new_text="".join(new_lines[prefix:new_end]),
        )

        logger.debug(
            f"Edit for {uri}@{version}: lines {prefix}-{old_end} "
            f"replaced by {new_end - prefix} line(s)"
        )

        return DocumentEdit(uri=uri, version=version, edits=[edit])

    @staticmethod
    def _common_prefix(old_lines: List[str], new_lines: List[str]) -> int:
        count = 0
        for old, new in zip(old_lines, new_lines):
            if old != new:
                break
            count += 1
        return count

    @staticmethod
    def _common_suffix(old_lines: List[str], new_lines: List[str], prefix: int) -> int:
        # Suffix may not overlap the prefix in either text
        limit = min(len(old_lines), len(new_lines)) - prefix
        count = 0
        while count < limit and old_lines[-1 - count] == new_lines[-1 - count]:
            count += 1
        return count

    @staticmethod
    def _position_after(lines: List[str], count: int) -> Position:
        """Position just past the first `count` lines."""
        if count == 0:
            return Position(line=0, character=0)
        last = lines[count - 1]
        if last.endswith("\n"):
            return Position(line=count, character=0)
        return Position(line=count - 1, character=utf16_length(last))

    def apply_edit(self, text: str, edit: TextEdit) -> str:
        """
        Apply a TextEdit to `text`.

        Args:
            text: Current document text
            edit: Edit whose range is valid for `text`

        Returns:
            Text with the range replaced by the edit's new text
        """
        start = self.offset_at(text, edit.range.start)
        end = self.offset_at(text, edit.range.end)
        if end < start:
            raise ValueError(f"Edit range ends before it starts: {edit.range}")
        return text[:start] + edit.new_text + text[end:]

    @staticmethod
    def offset_at(text: str, position: Position) -> int:
        """
        Convert an LSP position to a string index into `text`.

        Positions past the end of a line clamp to the line's end; positions
        past the last line clamp to the end of the text.
        """
        lines = split_lines(text)
        if position.line >= len(lines):
            return len(text)

        offset = sum(len(line) for line in lines[:position.line])
        line = lines[position.line].rstrip("\n")

        units = 0
        for index, char in enumerate(line):
            if units >= position.character:
                return offset + index
            units += utf16_length(char)
        return offset + len(line)

    def unified_diff(
        self,
        file_path: str,
        original_content: str,
        modified_content: str,
        max_diff_lines: int = 100
    ) -> str:
        """
        Generate a unified diff between original and modified content.

        Args:
            file_path: Path to file (for diff header)
            original_content: Original file content
            modified_content: Modified file content
            max_diff_lines: Maximum diff lines before truncation

        Returns:
            Unified diff string (possibly truncated)
        """
        diff_lines = list(difflib.unified_diff(
            original_content.splitlines(keepends=True),
            modified_content.splitlines(keepends=True),
            fromfile=f"a/{file_path}",
            tofile=f"b/{file_path}",
        ))

        if len(diff_lines) > max_diff_lines:
            hidden = len(diff_lines) - max_diff_lines
            diff_lines = diff_lines[:max_diff_lines]
            diff_lines.append(f"\n[... {hidden} diff lines truncated ...]\n")

        return "".join(diff_lines)
