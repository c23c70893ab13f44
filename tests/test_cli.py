import json
import os

import pytest
import requests
from typer.testing import CliRunner

from orthros.cli.common import build_context, connect_analysis
from orthros.cli.config import CLIConfig
from orthros.exceptions import AnalysisUnavailableError
from orthros.main import app
from orthros.schemas import Ambiguous, ImportReply, Updated
from orthros.user_config import UserConfig

runner = CliRunner()

SOURCE = """module Main where

import Prelude
import Effect (Effect)

main :: Effect Unit
main = pure unit
"""

WITH_ARRAY = """module Main where

import Prelude
import Data.Array (head)
import Effect (Effect)

main :: Effect Unit
main = pure unit
"""


@pytest.fixture
def source(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "Main.purs"
    path.write_text(SOURCE)
    return path


@pytest.fixture
def session(service, monkeypatch):
    """Make every CLI command talk to the fake analysis server."""
    monkeypatch.setattr("orthros.cli.common.connect_analysis", lambda config: service)
    return service


@pytest.fixture
def no_session(monkeypatch):
    def unavailable(config):
        raise AnalysisUnavailableError("Analysis server not reachable")

    monkeypatch.setattr("orthros.cli.common.connect_analysis", unavailable)


def test_add_import_json(source, session):
    session.explicit_reply = ImportReply(outcome=Updated(text=WITH_ARRAY))

    result = runner.invoke(app, ["add-import", str(source), "head", "--module", "Data.Array", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["status"] == "updated"
    assert payload["identifier"] == "head"
    assert source.read_text() == WITH_ARRAY


def test_add_import_dry_run_shows_diff(source, session):
    session.explicit_reply = ImportReply(outcome=Updated(text=WITH_ARRAY))

    result = runner.invoke(app, ["add-import", str(source), "head", "--dry-run", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert "+import Data.Array (head)" in payload["diff"]
    assert source.read_text() == SOURCE


def test_add_import_ambiguous_lists_candidates(source, session):
    session.explicit_reply = ImportReply(outcome=Ambiguous(candidate_modules=["Data.Map", "Data.HashMap"]))

    result = runner.invoke(app, ["imports", "add-import", str(source), "lookup", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["status"] == "ambiguous"
    assert payload["candidates"] == ["Data.Map", "Data.HashMap"]
    assert source.read_text() == SOURCE


def test_add_import_namespace_option(source, session):
    result = runner.invoke(app, ["add-import", str(source), "Maybe", "--namespace", "type", "--json"])

    assert result.exit_code == 0
    assert session.params("add_explicit_import")["namespace"].value == "type"


def test_add_import_disabled_by_local_config(source, session, tmp_path):
    config_dir = tmp_path / ".orthros"
    config_dir.mkdir()
    (config_dir / "config.json").write_text(json.dumps({"imports": {"auto_add": False}}))
    session.explicit_reply = ImportReply(outcome=Updated(text=WITH_ARRAY))

    result = runner.invoke(app, ["add-import", str(source), "head", "--json"])

    assert result.exit_code == 0
    assert json.loads(result.stdout)["status"] == "not_applicable"
    assert source.read_text() == SOURCE


def test_add_module_qualified(source, session):
    session.qualified_reply = ImportReply(outcome=Updated(text=SOURCE.replace("import Effect", "import Data.Array as A\nimport Effect")))

    result = runner.invoke(app, ["add-module", str(source), "Data.Array", "--qualifier", "A", "--json"])

    assert result.exit_code == 0
    assert json.loads(result.stdout)["status"] == "updated"
    assert "import Data.Array as A\n" in source.read_text()


def test_organise(source, session):
    organised = SOURCE.replace("import Prelude\nimport Effect (Effect)", "import Effect (Effect)\nimport Prelude")
    session.organised_text = organised

    result = runner.invoke(app, ["organise", str(source), "--json"])

    assert result.exit_code == 0
    assert json.loads(result.stdout)["status"] == "updated"
    assert source.read_text() == organised


def test_check_flags_file(source, session):
    session.organised_text = SOURCE.replace("import Prelude\n", "")

    result = runner.invoke(app, ["check", str(source), "--json"])

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["checked"] == 1
    [diagnostic] = payload["flagged"][str(source)]
    assert diagnostic["code"] == "HintOrganiseImports"
    assert diagnostic["range"]["end"]["line"] == 3


def test_check_clean_file(source, session):
    session.organised_text = SOURCE

    result = runner.invoke(app, ["check", str(source), "--json"])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"checked": 1, "flagged": {}}


def test_modules(session):
    session.modules = ["Data.Array", "Prelude"]

    result = runner.invoke(app, ["modules", "--json"])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"modules": ["Data.Array", "Prelude"]}


def test_missing_file(tmp_path, session):
    result = runner.invoke(app, ["organise", str(tmp_path / "Nope.purs"), "--json"])

    assert result.exit_code == 1
    assert json.loads(result.stdout)["code"] == "FILE_NOT_FOUND"


def test_no_analysis_server(source, no_session):
    result = runner.invoke(app, ["organise", str(source), "--json"])

    assert result.exit_code == 1
    assert json.loads(result.stdout)["code"] == "ANALYSIS_UNAVAILABLE"


def test_status_offline(source):
    result = runner.invoke(app, ["--offline", "status", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["available"] is False
    assert payload["implicit_open_module"] == "Prelude"
    assert payload["analysis_server"] == "http://127.0.0.1:4242"


def test_rejected_edit_is_reported(source, session):
    # The file is touched while the analysis server is answering
    session.explicit_reply = ImportReply(outcome=Updated(text=WITH_ARRAY))
    later = source.stat().st_mtime_ns + 1_000_000_000
    session.on_call = lambda: os.utime(source, ns=(later, later))

    result = runner.invoke(app, ["add-import", str(source), "head", "--json"])

    assert result.exit_code == 1
    assert json.loads(result.stdout)["status"] == "rejected"
    assert source.read_text() == SOURCE


def test_invalid_config_value(source, session, tmp_path):
    config_dir = tmp_path / ".orthros"
    config_dir.mkdir()
    (config_dir / "config.json").write_text(json.dumps({"imports": {"auto_add": "yes"}}))

    result = runner.invoke(app, ["add-import", str(source), "head", "--json"])

    assert result.exit_code == 1
    assert json.loads(result.stdout)["code"] == "CONFIG_ERROR"
    assert session.calls == []


class TestConnectAnalysis:

    def test_offline_raises(self):
        CLIConfig.set_offline(True)

        with pytest.raises(AnalysisUnavailableError, match="offline"):
            connect_analysis(UserConfig())

    def test_unreachable_raises(self, monkeypatch):
        def refuse(url, timeout=None):
            raise requests.ConnectionError("refused")

        monkeypatch.setattr(requests, "get", refuse)

        with pytest.raises(AnalysisUnavailableError, match="not reachable"):
            connect_analysis(UserConfig())

    def test_build_context_without_server(self, source, monkeypatch, log_messages):
        CLIConfig.set_offline(True)

        ctx, workspace = build_context()

        assert ctx.service is None
        assert workspace.dry_run is False
        assert any(m.startswith("WARNING") and "offline" in m for m in log_messages)
