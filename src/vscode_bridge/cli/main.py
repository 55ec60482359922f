"""
CLI for vscode-bridge.

Runs single tool calls against the configured allowed directories and
shows the effective configuration.
"""

import asyncio
import json
import logging
import sys
from typing import Optional

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from vscode_bridge import __version__
from vscode_bridge.filesystem.exceptions import BridgeError
from vscode_bridge.settings.config import BridgeConfig
from vscode_bridge.tools.workspace import WorkspaceTools

# Load environment variables
load_dotenv()

console = Console()
err_console = Console(stderr=True)


def setup_logging(debug: bool = False) -> None:
    """Setup rich logging on stderr."""
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True)],
    )


def load_config(
    config_path: Optional[str],
    allowed_dirs: tuple[str, ...],
    workspace: Optional[str],
    debug: Optional[bool],
    auto_open: Optional[bool],
) -> BridgeConfig:
    """Build the configuration: file or environment, then command line overrides."""
    if config_path:
        config = BridgeConfig.from_file(config_path)
    else:
        config = BridgeConfig.from_env()

    return config.with_overrides(
        allowed_directories=list(allowed_dirs) or None,
        default_workspace=workspace,
        debug=debug,
        auto_open_editor=auto_open,
    )


def parse_arguments(pairs: tuple[str, ...], raw_json: Optional[str]) -> dict:
    """
    Merge ``--json`` arguments with ``--arg key=value`` pairs.

    Values of ``--arg`` are decoded as JSON when possible, so ``true``,
    ``3`` and ``["a"]`` become booleans, numbers and lists.
    """
    arguments = json.loads(raw_json) if raw_json else {}
    if not isinstance(arguments, dict):
        raise click.BadParameter("must be a JSON object", param_hint="--json")

    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {pair!r}", param_hint="--arg")
        try:
            arguments[key] = json.loads(value)
        except json.JSONDecodeError:
            arguments[key] = value
    return arguments


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to a YAML or JSON config file",
)
@click.option(
    "--allowed-dir",
    "-d",
    "allowed_dirs",
    multiple=True,
    help="Allowed directory (repeatable; default: ~/Code, ~/Documents, ~/Desktop)",
)
@click.option("--workspace", "-w", default=None, help="Default workspace for new projects")
@click.option("--debug/--no-debug", default=None, help="Enable debug logging")
@click.option(
    "--auto-open/--no-auto-open",
    default=None,
    help="Open created projects in the editor",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Optional[str],
    allowed_dirs: tuple[str, ...],
    workspace: Optional[str],
    debug: Optional[bool],
    auto_open: Optional[bool],
):
    """vscode-bridge - file, project and editor tools for agents."""
    try:
        config = load_config(config_path, allowed_dirs, workspace, debug, auto_open)
        tools = WorkspaceTools(config)
    except (BridgeError, ValueError, FileNotFoundError) as e:
        err_console.print(f"[bold red]Configuration error:[/bold red] {escape(str(e))}")
        sys.exit(1)

    setup_logging(config.debug)
    logging.getLogger(__name__).debug(f"Configuration: {config.to_dict()}")
    ctx.obj = tools


@cli.command()
@click.pass_obj
def config(tools: WorkspaceTools):
    """Show the effective configuration."""
    summary = tools.get_summary()
    lines = []
    for key, value in summary.items():
        if isinstance(value, list):
            value = ", ".join(str(v) for v in value) or "-"
        lines.append(f"{key}: [green]{value}[/green]")
    console.print(Panel("\n".join(lines), title="vscode-bridge"))


@cli.command(name="tools")
@click.pass_obj
def list_tools(tools: WorkspaceTools):
    """List available tools."""
    table = Table(title="Tools")
    table.add_column("Name", style="green")
    table.add_column("Description")
    for schema in tools.get_tool_schemas():
        function = schema["function"]
        table.add_row(function["name"], function["description"])
    console.print(table)


@cli.command()
@click.argument("tool_name")
@click.option("--arg", "-a", "pairs", multiple=True, help="Tool argument as key=value")
@click.option("--json", "raw_json", default=None, help="Tool arguments as a JSON object")
@click.option("--raw", is_flag=True, help="Print the full result as JSON")
@click.pass_obj
def call(
    tools: WorkspaceTools,
    tool_name: str,
    pairs: tuple[str, ...],
    raw_json: Optional[str],
    raw: bool,
):
    """
    Execute a single tool call.

    Examples:

        vscode-bridge call list_files -a path=~/Code -a recursive=true

        vscode-bridge call search_files --json '{"directory": "~/Code", "pattern": "TODO"}'
    """
    try:
        arguments = parse_arguments(pairs, raw_json)
    except json.JSONDecodeError as e:
        raise click.BadParameter(str(e), param_hint="--json")

    try:
        result = asyncio.run(tools.execute_tool(tool_name, arguments))
    except ValueError as e:
        err_console.print(f"[bold red]Error:[/bold red] {e}")
        sys.exit(2)

    _print_result(result, raw)


@cli.command()
@click.argument("path")
@click.option("--all", "-a", "include_hidden", is_flag=True, help="Include hidden entries")
@click.option("--recursive", "-r", is_flag=True, help="List recursively")
@click.pass_obj
def ls(tools: WorkspaceTools, path: str, include_hidden: bool, recursive: bool):
    """List a directory."""
    result = asyncio.run(
        tools.execute_tool(
            "list_files",
            {"path": path, "include_hidden": include_hidden, "recursive": recursive},
        )
    )
    _print_result(result, raw=False)


@cli.command()
@click.argument("pattern")
@click.argument("directory")
@click.option("--ext", "-e", "extensions", multiple=True, help="File extension filter")
@click.option("--case-sensitive", "-s", is_flag=True, help="Case sensitive search")
@click.option("--no-recursive", is_flag=True, help="Only search the top directory")
@click.pass_obj
def grep(
    tools: WorkspaceTools,
    pattern: str,
    directory: str,
    extensions: tuple[str, ...],
    case_sensitive: bool,
    no_recursive: bool,
):
    """Search files for a regular expression."""
    result = asyncio.run(
        tools.execute_tool(
            "search_files",
            {
                "directory": directory,
                "pattern": pattern,
                "extensions": list(extensions),
                "recursive": not no_recursive,
                "case_sensitive": case_sensitive,
            },
        )
    )
    _print_result(result, raw=False)


def _print_result(result: dict, raw: bool) -> None:
    if raw:
        console.print_json(json.dumps(result, default=str))
    elif result.get("success"):
        console.print(result.get("text", ""), markup=False, highlight=False)
    else:
        err_console.print(
            f"[bold red]{result.get('error_type', 'Error')}:[/bold red] "
            f"{escape(str(result.get('error', result.get('text', ''))))}"
        )

    if not result.get("success"):
        sys.exit(1)


if __name__ == "__main__":
    cli()
