import typer

from orthros import __version__
from orthros.analysis import AnalysisClient
from orthros.logging_config import configure_from_config
from orthros.cli import imports
from orthros.cli.config import CLIConfig
from orthros.cli.output import get_console, print_json
from orthros.user_config import get_user_config

app = typer.Typer()
console = get_console()


@app.callback()
def global_options(
    human: bool = typer.Option(
        False,
        "--human",
        "-H",
        help="Enable human mode: pretty output with colors (also via ORTHROS_HUMAN_MODE env var)"
    ),
    offline: bool = typer.Option(
        False,
        "--offline",
        help="Do not contact the analysis server"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log debug output to stderr"
    ),
):
    """
    Orthros: import management for editor actions.

    Machine mode is DEFAULT (pure data, no formatting).
    Use --human/-H for pretty output.
    """
    if human:
        CLIConfig.set_machine_mode(False)
    CLIConfig.set_offline(offline)

    configure_from_config(
        get_user_config(),
        verbose=verbose,
        suppress_console=CLIConfig.is_machine_mode(),
    )


app.add_typer(imports.app, name="imports", help="Import commands (add-import, add-module, organise, check, modules)")

# Import commands are also available at top level
app.command(name="add-import")(imports.add_import_cmd)
app.command(name="add-module")(imports.add_module_cmd)
app.command(name="organise")(imports.organise_cmd)
app.command(name="check")(imports.check_cmd)
app.command(name="modules")(imports.modules_cmd)


@app.command()
def status(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Show the configured analysis server and whether it is reachable.
    """
    config = get_user_config()
    client = AnalysisClient(
        host=config.get("analysis.host"),
        port=config.get("analysis.port"),
        timeout_ms=config.get("analysis.timeout_ms"),
    )
    available = not CLIConfig.is_offline() and client.is_available()

    data = {
        "version": __version__,
        "analysis_server": client.base_url,
        "available": available,
        "auto_add_import": config.get("imports.auto_add"),
        "implicit_open_module": config.get("imports.implicit_open_module"),
    }

    if json_output:
        print_json(data)
    else:
        state = "[green]reachable[/green]" if available else "[red]unreachable[/red]"
        console.print(f"Analysis server {data['analysis_server']}: {state}")
        console.print(f"Automatic imports: {data['auto_add_import']}")
        console.print(f"Implicitly-open module: {data['implicit_open_module']}")


if __name__ == "__main__":
    app()
