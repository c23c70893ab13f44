"""
Tests for ImportFacade: the full import pipeline against in-memory documents.
"""

import pytest

from orthros.exceptions import AnalysisError
from orthros.mutation import ImportFacade
from orthros.schemas import (
    Ambiguous,
    DocumentEdit,
    ExistingImport,
    ImportReply,
    ImportRequest,
    NoEdit,
    NotApplicable,
    Updated,
)

ADDED = """module Main where

import Prelude

import Data.Array (head)
import Data.Maybe (Maybe(..))
import Effect (Effect)

main :: Effect Unit
main = pure unit
"""


@pytest.fixture
def facade():
    return ImportFacade()


class TestAddCompletionImport:
    """Import a symbol chosen from completion."""

    @pytest.mark.asyncio
    async def test_updated_text_becomes_applied_edit(self, facade, ctx, service, documents, main_uri):
        service.explicit_reply = ImportReply(outcome=Updated(text=ADDED))

        outcome = await facade.add_completion_import(ctx, ImportRequest(identifier="head", module="Data.Array"), main_uri)

        assert isinstance(outcome, Updated)
        assert documents.get_text(main_uri) == ADDED
        assert documents.get_version(main_uri) == 8
        edit = documents.applied[0]
        assert edit.version == 7
        assert edit.text_edit.new_text == "import Data.Array (head)\n"

    @pytest.mark.asyncio
    async def test_existing_imports_read_before_mutation(self, facade, ctx, service, main_uri):
        await facade.add_completion_import(ctx, ImportRequest(identifier="head"), main_uri)

        assert [name for name, _ in service.calls] == ["list_imports", "add_explicit_import"]

    @pytest.mark.asyncio
    async def test_ambiguous_makes_no_edit(self, facade, ctx, service, documents, main_uri, main_text, log_messages):
        service.explicit_reply = ImportReply(outcome=Ambiguous(candidate_modules=["Data.Map", "Data.HashMap"]))

        outcome = await facade.add_completion_import(ctx, ImportRequest(identifier="lookup"), main_uri)

        assert outcome.candidate_modules == ["Data.Map", "Data.HashMap"]
        assert documents.applied == []
        assert documents.get_text(main_uri) == main_text
        assert any("Data.Map, Data.HashMap" in m for m in log_messages)

    @pytest.mark.asyncio
    async def test_disabled_does_nothing(self, facade, make_ctx, service, main_uri):
        ctx = make_ctx(auto_add_import=False)

        outcome = await facade.add_completion_import(ctx, ImportRequest(identifier="head"), main_uri)

        assert isinstance(outcome, NotApplicable)
        assert service.calls == []

    @pytest.mark.asyncio
    async def test_no_session_does_nothing(self, facade, make_ctx, documents, main_uri):
        ctx = make_ctx(service=None)

        outcome = await facade.add_completion_import(ctx, ImportRequest(identifier="head"), main_uri)

        assert isinstance(outcome, NotApplicable)
        assert documents.applied == []

    @pytest.mark.asyncio
    async def test_unknown_document(self, facade, ctx, service):
        outcome = await facade.add_completion_import(ctx, ImportRequest(identifier="head"), "file:///nowhere.purs")

        assert isinstance(outcome, NotApplicable)
        assert service.calls == []

    @pytest.mark.asyncio
    async def test_analysis_failure_is_not_applicable(self, facade, ctx, service, documents, main_uri, log_messages):
        service.error = AnalysisError("imports/list", "server went away")

        outcome = await facade.add_completion_import(ctx, ImportRequest(identifier="head"), main_uri)

        assert isinstance(outcome, NotApplicable)
        assert documents.applied == []
        assert any(m.startswith("WARNING") and "server went away" in m for m in log_messages)

    @pytest.mark.asyncio
    async def test_edit_against_stale_version_is_rejected(self, facade, ctx, service, documents, main_uri):
        # The user types while the analysis call is in flight
        service.explicit_reply = ImportReply(outcome=Updated(text=ADDED))
        service.on_call = lambda: documents.update(main_uri, "module Main where\n-- typing\n")

        outcome = await facade.add_completion_import(ctx, ImportRequest(identifier="head"), main_uri)

        assert isinstance(outcome, Updated)
        assert documents.applied == []
        assert documents.get_text(main_uri) == "module Main where\n-- typing\n"

    @pytest.mark.asyncio
    async def test_applier_failure_is_logged(self, facade, ctx, service, documents, main_uri, log_messages, monkeypatch):
        service.explicit_reply = ImportReply(outcome=Updated(text=ADDED))

        async def broken(edit):
            raise RuntimeError("editor closed")

        monkeypatch.setattr(documents, "apply_edit", broken)

        outcome = await facade.add_completion_import(ctx, ImportRequest(identifier="head"), main_uri)

        assert isinstance(outcome, Updated)
        assert any(m.startswith("ERROR") and "editor closed" in m for m in log_messages)

    @pytest.mark.asyncio
    async def test_duplicate_qualified_import_skips_server(self, facade, ctx, service, documents, main_uri):
        service.imports = [ExistingImport(module_name="Data.Map", qualifier="M")]

        outcome = await facade.add_completion_import(
            ctx, ImportRequest(identifier="lookup", module="Data.Map", qualifier="M"), main_uri
        )

        assert isinstance(outcome, NotApplicable)
        assert not service.called("add_qualified_import")
        assert documents.applied == []


class TestAddModuleImport:

    @pytest.mark.asyncio
    async def test_qualified_module(self, facade, ctx, service, documents, main_uri, main_text):
        new_text = main_text.replace("import Effect", "import Data.Array as A\nimport Effect")
        service.qualified_reply = ImportReply(outcome=Updated(text=new_text))

        outcome = await facade.add_module_import(ctx, "Data.Array", "A", main_uri)

        assert isinstance(outcome, Updated)
        assert service.params("add_qualified_import") == {"module": "Data.Array", "qualifier": "A"}
        assert documents.get_text(main_uri) == new_text

    @pytest.mark.asyncio
    async def test_open_module(self, facade, ctx, service, main_uri, main_text):
        service.open_text = main_text.replace("import Effect", "import Data.Array\nimport Effect")

        outcome = await facade.add_module_import(ctx, "Data.Array", None, main_uri)

        assert isinstance(outcome, Updated)
        assert service.called("add_open_import")

    @pytest.mark.asyncio
    async def test_not_gated_by_auto_add(self, facade, make_ctx, service, main_uri, main_text):
        service.open_text = "import Data.Array\n" + main_text
        ctx = make_ctx(auto_add_import=False)

        outcome = await facade.add_module_import(ctx, "Data.Array", None, main_uri)

        assert isinstance(outcome, Updated)


class TestOrganiseImports:

    @pytest.mark.asyncio
    async def test_canonical_text_applied(self, facade, ctx, service, documents, main_uri):
        service.organised_text = ADDED

        edit = await facade.organise_imports(ctx, main_uri)

        assert isinstance(edit, DocumentEdit)
        assert edit.version == 7
        assert documents.get_text(main_uri) == ADDED

    @pytest.mark.asyncio
    async def test_already_organised_is_no_edit(self, facade, ctx, service, documents, main_uri, main_text):
        service.organised_text = main_text

        assert isinstance(await facade.organise_imports(ctx, main_uri), NoEdit)
        assert documents.applied == []

    @pytest.mark.asyncio
    async def test_no_answer_is_no_edit(self, facade, ctx, main_uri):
        assert isinstance(await facade.organise_imports(ctx, main_uri), NoEdit)

    @pytest.mark.asyncio
    async def test_failure_is_no_edit(self, facade, ctx, service, main_uri):
        service.error = AnalysisError("imports/organise", "parse error")

        assert isinstance(await facade.organise_imports(ctx, main_uri), NoEdit)

    @pytest.mark.asyncio
    async def test_no_session_is_no_edit(self, facade, make_ctx, main_uri):
        assert isinstance(await facade.organise_imports(make_ctx(service=None), main_uri), NoEdit)


class TestCheckImports:

    @pytest.mark.asyncio
    async def test_flags_non_canonical_block(self, facade, ctx, service, main_uri):
        service.organised_text = ADDED

        diagnostics = await facade.check_imports(ctx, main_uri)

        assert len(diagnostics) == 1
        assert diagnostics[0].range.end.line == 5

    @pytest.mark.asyncio
    async def test_canonical_block_is_clean(self, facade, ctx, service, main_uri, main_text):
        service.organised_text = main_text

        assert await facade.check_imports(ctx, main_uri) == []

    @pytest.mark.asyncio
    async def test_hint_disabled(self, facade, make_ctx, service, main_uri):
        service.organised_text = ADDED

        assert await facade.check_imports(make_ctx(organise_imports_hint=False), main_uri) == []
        assert service.calls == []

    @pytest.mark.asyncio
    async def test_failure_gives_no_diagnostics(self, facade, ctx, service, main_uri):
        service.error = AnalysisError("imports/organise", "parse error")

        assert await facade.check_imports(ctx, main_uri) == []

    @pytest.mark.asyncio
    async def test_check_does_not_edit(self, facade, ctx, service, documents, main_uri):
        service.organised_text = ADDED

        await facade.check_imports(ctx, main_uri)

        assert documents.applied == []


class TestListModules:

    @pytest.mark.asyncio
    async def test_lists_modules(self, facade, ctx, service):
        service.modules = ["Data.Array", "Data.Maybe", "Prelude"]

        assert await facade.list_modules(ctx) == ["Data.Array", "Data.Maybe", "Prelude"]

    @pytest.mark.asyncio
    async def test_no_session_logs_error(self, facade, make_ctx, log_messages):
        assert await facade.list_modules(make_ctx(service=None)) == []
        assert any(m.startswith("ERROR") for m in log_messages)

    @pytest.mark.asyncio
    async def test_failure_gives_empty_list(self, facade, ctx, service):
        service.error = AnalysisError("modules/list", "timeout")

        assert await facade.list_modules(ctx) == []
