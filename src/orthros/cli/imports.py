"""
CLI Import Commands

add-import, add-module, organise, check, modules
"""

import asyncio
from pathlib import Path
from typing import List, Optional

import typer

from orthros.mutation import EditSynthesizer, ImportFacade
from orthros.schemas import Ambiguous, ImportRequest, Namespace, Updated
from orthros.workspace import FileWorkspace
from .common import build_context, file_uri_or_exit, require_session
from .output import get_console, print_json

app = typer.Typer()
console = get_console()


def _report_changes(workspace: FileWorkspace, status: str, json_output: bool, extra: Optional[dict] = None) -> None:
    """
    Print the outcome of a mutating command, with diffs in dry-run mode.

    An edit the workspace refused to write (file changed since it was read,
    or the write failed) is reported as "rejected" and exits with code 1.
    """
    if workspace.rejected:
        status = "rejected"

    synthesizer = EditSynthesizer()
    diffs = [
        synthesizer.unified_diff(str(change.path), change.original, change.modified)
        for change in workspace.pending
    ]

    if json_output:
        payload = {"status": status, **(extra or {})}
        if workspace.dry_run:
            payload["diff"] = "".join(diffs)
        print_json(payload)
    else:
        for diff in diffs:
            typer.echo(diff, nl=False)

        if status == "updated":
            verb = "Would update" if workspace.dry_run else "Updated"
            console.print(f"[green]{verb} imports[/green]")
        elif status == "rejected":
            console.print("[red]Edit not written: file changed after it was read, or the write failed[/red]")
        elif status == "ambiguous":
            console.print("[yellow]Several modules export this name:[/yellow]")
            for module in (extra or {}).get("candidates", []):
                typer.echo(f"  {module}")
        else:
            console.print("[dim]Nothing to do[/dim]")

    if status == "rejected":
        raise typer.Exit(code=1)


def _outcome_status(outcome) -> str:
    if isinstance(outcome, Updated):
        return "updated"
    if isinstance(outcome, Ambiguous):
        return "ambiguous"
    return "not_applicable"


@app.command("add-import")
def add_import_cmd(
    file: Path = typer.Argument(..., help="Source file to add the import to"),
    identifier: str = typer.Argument(..., help="Identifier to import"),
    module: Optional[str] = typer.Option(None, "--module", "-m", help="Module to import from (default: let the analysis server choose)"),
    qualifier: Optional[str] = typer.Option(None, "--qualifier", "-q", help="Import qualified under this alias"),
    namespace: Optional[Namespace] = typer.Option(None, "--namespace", "-n", help="Restrict to the value, type or kind namespace"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the diff without writing"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Import an identifier into a file.

    When several modules export the identifier, the candidates are listed
    and the file is left unchanged; rerun with --module to choose.
    """
    uri = file_uri_or_exit(file, json_output)
    ctx, workspace = build_context(dry_run=dry_run, json_output=json_output)
    require_session(ctx, json_output)

    request = ImportRequest(identifier=identifier, module=module, qualifier=qualifier, namespace=namespace)
    outcome = asyncio.run(ImportFacade().add_completion_import(ctx, request, uri))

    extra = {"file": str(file), "identifier": identifier}
    if isinstance(outcome, Ambiguous):
        extra["candidates"] = outcome.candidate_modules
    _report_changes(workspace, _outcome_status(outcome), json_output, extra)


@app.command("add-module")
def add_module_cmd(
    file: Path = typer.Argument(..., help="Source file to add the import to"),
    module: str = typer.Argument(..., help="Module to import"),
    qualifier: Optional[str] = typer.Option(None, "--qualifier", "-q", help="Import qualified under this alias"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the diff without writing"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Import a whole module, qualified or open.
    """
    uri = file_uri_or_exit(file, json_output)
    ctx, workspace = build_context(dry_run=dry_run, json_output=json_output)
    require_session(ctx, json_output)

    outcome = asyncio.run(ImportFacade().add_module_import(ctx, module, qualifier, uri))
    _report_changes(workspace, _outcome_status(outcome), json_output, {"file": str(file), "module": module})


@app.command("organise")
def organise_cmd(
    file: Path = typer.Argument(..., help="Source file whose imports to organise"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the diff without writing"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Rewrite a file's import block into canonical form.
    """
    uri = file_uri_or_exit(file, json_output)
    ctx, workspace = build_context(dry_run=dry_run, json_output=json_output)
    require_session(ctx, json_output)

    edit = asyncio.run(ImportFacade().organise_imports(ctx, uri))
    status = "not_applicable" if edit.kind == "none" else "updated"
    _report_changes(workspace, status, json_output, {"file": str(file)})


@app.command("check")
def check_cmd(
    files: List[Path] = typer.Argument(..., help="Source files to check"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Report files whose import block is not in canonical form.

    Exits with code 1 if any file needs organising.
    """
    uris = [file_uri_or_exit(file, json_output) for file in files]
    ctx, _ = build_context(json_output=json_output)
    require_session(ctx, json_output)

    facade = ImportFacade()

    async def check_all():
        return [await facade.check_imports(ctx, uri) for uri in uris]

    results = asyncio.run(check_all())
    flagged = {
        str(file): [d.to_lsp() for d in diagnostics]
        for file, diagnostics in zip(files, results)
        if diagnostics
    }

    if json_output:
        print_json({"checked": len(files), "flagged": flagged})
    else:
        for file, diagnostics in flagged.items():
            for diagnostic in diagnostics:
                end_line = diagnostic["range"]["end"]["line"]
                typer.echo(f"{file}:1-{end_line + 1}: {diagnostic['message']} [{diagnostic['code']}]")
        if not flagged:
            console.print(f"[green]{len(files)} file(s) already organised[/green]")

    if flagged:
        raise typer.Exit(code=1)


@app.command("modules")
def modules_cmd(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    List the modules known to the analysis server.
    """
    ctx, _ = build_context(json_output=json_output)
    require_session(ctx, json_output)

    modules = asyncio.run(ImportFacade().list_modules(ctx))
    if json_output:
        print_json({"modules": modules})
    else:
        for module in modules:
            typer.echo(module)
