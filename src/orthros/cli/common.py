"""
Common CLI helpers shared by the command modules.

Builds the ServerContext a command runs with: files on disk as documents,
settings from the user config, and an analysis session when one is reachable.
"""

from pathlib import Path
from typing import Optional, Tuple

import typer

from orthros.analysis import AnalysisClient, AnalysisService
from orthros.exceptions import AnalysisUnavailableError, ConfigError
from orthros.logging_config import logger
from orthros.mutation import ImportSettings, ServerContext
from orthros.paths import path_to_uri
from orthros.user_config import UserConfig, get_user_config
from orthros.workspace import FileWorkspace
from .config import CLIConfig
from .output import print_error


def connect_analysis(config: UserConfig) -> AnalysisService:
    """
    Connect to the configured analysis server.

    Returns:
        A client whose server answered its health check

    Raises:
        AnalysisUnavailableError: If running offline or the server is unreachable
    """
    if CLIConfig.is_offline():
        raise AnalysisUnavailableError("Running offline, analysis server not contacted")

    client = AnalysisClient(
        host=config.get("analysis.host"),
        port=config.get("analysis.port"),
        timeout_ms=config.get("analysis.timeout_ms"),
    )
    if not client.is_available():
        raise AnalysisUnavailableError(f"Analysis server not reachable at {client.base_url}")
    return client


def build_context(dry_run: bool = False, project_root: Optional[Path] = None,
                  json_output: bool = False) -> Tuple[ServerContext, FileWorkspace]:
    """
    Build the context for one CLI command.

    Args:
        dry_run: Collect edits instead of writing them
        project_root: Project whose .orthros/config.json applies
        json_output: Report configuration errors as JSON

    Returns:
        (context, workspace); the workspace holds pending changes in dry-run mode
    """
    config = get_user_config(project_root)
    try:
        settings = ImportSettings.from_config(config)
    except ConfigError as e:
        print_error(str(e), code="CONFIG_ERROR", json_output=json_output)
        raise typer.Exit(code=1)

    try:
        service = connect_analysis(config)
    except AnalysisUnavailableError as e:
        logger.warning(str(e))
        service = None

    workspace = FileWorkspace(dry_run=dry_run)
    ctx = ServerContext(
        documents=workspace,
        applier=workspace,
        service=service,
        settings=settings,
    )
    return ctx, workspace


def file_uri_or_exit(file: Path, json_output: bool = False) -> str:
    """Resolve a file argument to a document URI, exiting if it is missing."""
    if not file.is_file():
        print_error(f"File not found: {file}", code="FILE_NOT_FOUND", json_output=json_output)
        raise typer.Exit(code=1)
    return path_to_uri(file)


def require_session(ctx: ServerContext, json_output: bool = False) -> None:
    """Exit with an error when no analysis session is available."""
    if ctx.service is None:
        print_error(
            "No analysis server available",
            code="ANALYSIS_UNAVAILABLE",
            json_output=json_output,
            suggest=["start the analysis server", "check analysis.host / analysis.port in .orthros/config.json"],
        )
        raise typer.Exit(code=1)
