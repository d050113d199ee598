"""Main Typer CLI application for trace-opener."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Annotated

import typer

from trace_opener.config import get_settings
from trace_opener.core.exceptions import InvalidSettings
from trace_opener.core.models import BuildFlavor, MatchStrategy
from trace_opener.logging import configure_logging

app = typer.Typer(
    name="trace-opener",
    help="Open the Playwright trace viewer for a .NET test by name",
    no_args_is_help=True,
)

NameArg = Annotated[
    str,
    typer.Argument(help="Test name as shown in the test explorer"),
]
FileOpt = Annotated[
    Path | None,
    typer.Option(
        "--file",
        help="Source file of the test (selects the workspace root containing it)",
    ),
]
RootOpt = Annotated[
    list[Path] | None,
    typer.Option(
        "-r",
        "--root",
        help="Workspace root (repeatable; defaults to the current directory)",
    ),
]
FlavorOpt = Annotated[
    BuildFlavor | None,
    typer.Option(
        "--flavor",
        help="Build configuration to search (default: Debug)",
        case_sensitive=False,
    ),
]
MaxResultsOpt = Annotated[
    int | None,
    typer.Option(
        "--max-results",
        help="Maximum files to enumerate (default: 2000)",
        min=1,
    ),
]
StrategyOpt = Annotated[
    MatchStrategy | None,
    typer.Option(
        "-s",
        "--strategy",
        help="How to match the test name (default: both)",
        case_sensitive=False,
    ),
]
PatternOpt = Annotated[
    list[str] | None,
    typer.Option(
        "-p",
        "--pattern",
        help="Additional trace glob, relative to the root (repeatable)",
    ),
]
VerboseOpt = Annotated[
    bool,
    typer.Option(
        "-v",
        "--verbose",
        help="Log search details to stderr",
    ),
]


def _setup_logging(verbose: bool) -> None:
    try:
        settings = get_settings()
    except InvalidSettings:
        # The command handler reports the bad setting
        configure_logging(log_level="DEBUG" if verbose else "WARNING")
        return
    configure_logging(
        log_level="DEBUG" if verbose else settings.log_level,
        json_format=settings.log_json_format,
    )


@app.command("open")
def open_trace(
    name: NameArg,
    file: FileOpt = None,
    roots: RootOpt = None,
    flavor: FlavorOpt = None,
    max_results: MaxResultsOpt = None,
    strategy: StrategyOpt = None,
    patterns: PatternOpt = None,
    pwsh: Annotated[
        str | None,
        typer.Option(
            "--pwsh",
            help="PowerShell executable to use instead of searching PATH",
        ),
    ] = None,
    verbose: VerboseOpt = False,
) -> None:
    """Find the trace zip for a test and open it in the Playwright trace viewer.

    Runs: pwsh bin/<flavor>/net*/playwright.ps1 show-trace <trace.zip>
    """
    from trace_opener.cli.commands import run_open

    _setup_logging(verbose)

    # Build args namespace to reuse existing handler
    args = argparse.Namespace(
        name=name,
        file=file,
        roots=roots,
        flavor=flavor,
        max_results=max_results,
        strategy=strategy,
        patterns=patterns,
        pwsh=pwsh,
    )
    raise typer.Exit(code=run_open(args))


@app.command()
def locate(
    name: NameArg,
    file: FileOpt = None,
    roots: RootOpt = None,
    flavor: FlavorOpt = None,
    max_results: MaxResultsOpt = None,
    strategy: StrategyOpt = None,
    patterns: PatternOpt = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output JSON to stdout",
        ),
    ] = False,
    candidates: Annotated[
        bool,
        typer.Option(
            "--candidates",
            help="Also list every ranked trace candidate",
        ),
    ] = False,
    verbose: VerboseOpt = False,
) -> None:
    """Print the launcher script and trace zip for a test without opening them."""
    from trace_opener.cli.commands import run_locate

    _setup_logging(verbose)

    # Build args namespace to reuse existing handler
    args = argparse.Namespace(
        name=name,
        file=file,
        roots=roots,
        flavor=flavor,
        max_results=max_results,
        strategy=strategy,
        patterns=patterns,
        json_output=json_output,
        candidates=candidates,
    )
    raise typer.Exit(code=run_locate(args))


def main() -> None:
    """Entry point for the Typer CLI."""
    app()
