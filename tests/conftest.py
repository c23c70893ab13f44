"""
Pytest configuration for the Orthros test suite.

This conftest.py provides:
- Machine-mode logging (suppresses console output)
- A loguru capture fixture for asserting on log lines
- A recording fake analysis server
- In-memory documents and a ready-made ServerContext
"""

import os
from pathlib import Path
from typing import Any, Callable, List, Optional

import pytest
from loguru import logger

from orthros.analysis.base import AnalysisService
from orthros.cli.config import CLIConfig
from orthros.exceptions import AnalysisError
from orthros.logging_config import setup_logging
from orthros.mutation import ImportSettings, ServerContext
from orthros.paths import reset_paths
from orthros.schemas import ExistingImport, ImportReply, Namespace, NotApplicable
from orthros.user_config import reset_user_config
from orthros.workspace import InMemoryDocumentStore


MAIN_URI = "file:///project/src/Main.purs"

MAIN_TEXT = """module Main where

import Prelude

import Data.Maybe (Maybe(..))
import Effect (Effect)

main :: Effect Unit
main = pure unit
"""


# ============================================================================
# GLOBAL CONFIGURATION
# ============================================================================

def pytest_configure(config):
    """Configure pytest for quiet operation."""
    os.environ.setdefault("ORTHROS_MACHINE_MODE", "1")


@pytest.fixture(autouse=True)
def setup_test_logging():
    """
    Machine mode by default - suppress console logs for clean test output.
    """
    setup_logging(level="DEBUG", suppress_console=True, force=True)


@pytest.fixture(autouse=True)
def reset_globals():
    """Reset module-level singletons between tests."""
    reset_user_config()
    reset_paths()
    CLIConfig.reset()
    yield
    reset_user_config()
    reset_paths()
    CLIConfig.reset()


@pytest.fixture
def log_messages():
    """
    Capture loguru messages as "LEVEL message" strings.

    Usage:
        def test_something(log_messages):
            do_work()
            assert any("INFO" in m for m in log_messages)
    """
    messages: List[str] = []
    handler_id = logger.add(lambda m: messages.append(f"{m.record['level'].name} {m.record['message']}"), level="DEBUG")
    yield messages
    logger.remove(handler_id)


# ============================================================================
# FAKE ANALYSIS SERVER
# ============================================================================

class FakeAnalysisService(AnalysisService):
    """
    Scripted analysis server that records every call.

    Set the reply attributes before use; `on_call` runs before each
    mutation reply (to simulate a document changing mid-request) and
    `error` makes every call raise AnalysisError.
    """

    def __init__(self):
        self.imports: List[ExistingImport] = []
        self.qualified_reply: ImportReply = ImportReply(outcome=NotApplicable())
        self.open_text: Optional[str] = None
        self.explicit_reply: ImportReply = ImportReply(outcome=NotApplicable())
        self.organised_text: Optional[str] = None
        self.modules: List[str] = []
        self.error: Optional[AnalysisError] = None
        self.on_call: Optional[Callable[[], Any]] = None
        self.calls: List[tuple] = []

    def _record(self, method: str, **params):
        self.calls.append((method, params))
        if self.error is not None:
            raise self.error
        if self.on_call is not None:
            self.on_call()

    def called(self, method: str) -> bool:
        return any(name == method for name, _ in self.calls)

    def params(self, method: str) -> dict:
        return next(params for name, params in self.calls if name == method)

    async def list_imports(self, file_path: Path, text: str) -> List[ExistingImport]:
        self.calls.append(("list_imports", {"file_path": file_path}))
        if self.error is not None:
            raise self.error
        return list(self.imports)

    async def add_qualified_import(self, file_path, text, module, qualifier):
        self._record("add_qualified_import", module=module, qualifier=qualifier)
        return self.qualified_reply

    async def add_open_import(self, file_path, text, module):
        self._record("add_open_import", module=module)
        return self.open_text

    async def add_explicit_import(
        self,
        file_path,
        text,
        identifier,
        module=None,
        qualifier=None,
        namespace: Optional[Namespace] = None,
    ):
        self._record(
            "add_explicit_import",
            identifier=identifier,
            module=module,
            qualifier=qualifier,
            namespace=namespace,
        )
        return self.explicit_reply

    async def organise_imports(self, file_path, text):
        self._record("organise_imports")
        return self.organised_text

    async def list_modules(self):
        self._record("list_modules")
        return list(self.modules)


@pytest.fixture
def service():
    return FakeAnalysisService()


@pytest.fixture
def documents():
    store = InMemoryDocumentStore()
    store.open(MAIN_URI, MAIN_TEXT, version=7)
    return store


@pytest.fixture
def ctx(documents, service):
    return ServerContext(documents=documents, applier=documents, service=service)


@pytest.fixture
def make_ctx(documents, service):
    """Build a ServerContext with overridden settings or no service."""
    def _make(service=service, **settings):
        return ServerContext(
            documents=documents,
            applier=documents,
            service=service,
            settings=ImportSettings(**settings),
        )
    return _make


@pytest.fixture
def main_uri():
    return MAIN_URI


@pytest.fixture
def main_text():
    return MAIN_TEXT
