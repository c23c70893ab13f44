"""
Workspace package: document stores and edit appliers.

- InMemoryDocumentStore: open editor buffers
- FileWorkspace: files on disk (command-line use)
"""

from .base import DocumentStore, EditApplier
from .memory import InMemoryDocumentStore
from .files import FileWorkspace, PendingChange

__all__ = [
    "DocumentStore",
    "EditApplier",
    "InMemoryDocumentStore",
    "FileWorkspace",
    "PendingChange",
]
