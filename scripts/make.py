#!/usr/bin/env python3
"""
Make-like Build CLI

Runs a target from a Makefile, re-running only stale targets in dependency order.

Examples:\n

    make.py                                  # Make the first target in ./Makefile

    make.py out.txt                          # Make a specific target

    make.py -f build/Makefile -C build       # Use another Makefile and directory

    make.py -v CC=clang -v CFLAGS=-O2        # Override Makefile variables

    make.py out.txt -n                       # Show the execution plan only

    make.py --help-targets                   # List targets with their ## help text
"""

from pathlib import Path
from typing import List, Optional

import typer
from typing_extensions import Annotated

from makeshift.contexts.execution import ShellRunner, plan_make, run_make
from makeshift.contexts.execution.logger import setup_execution_logger
from makeshift.contexts.parsing import help_entries, parse_makefile
from makeshift.exceptions import CommandFailedError, MakeError
from makeshift.utils.config import load_make_config
from makeshift.utils.paths import working_directory
from makeshift.utils.timestamp import now

app = typer.Typer(
    help="Make targets from a Makefile, running only what is stale",
    add_completion=False,
)


def _show_plan(plan) -> None:
    typer.secho(f"\nPlan for: {plan.target}", fg=typer.colors.BLUE, bold=True)
    for decision in plan.decisions:
        if not decision.run:
            typer.echo(f"  skip  {decision.target}  ({decision.reason.value})")
            continue

        typer.secho(f"  make  {decision.target}  ({decision.reason.value})", fg=typer.colors.GREEN)
        for command in plan.commands.get(decision.target, []):
            marker = "@" if command.silent else " "
            typer.echo(f"      {marker} {command.text}")

    if plan.up_to_date:
        typer.echo(f"\n'{plan.target}' is up to date.")


def _show_help_table(entries) -> None:
    if not entries:
        typer.echo("No targets defined.")
        return

    width = max(len(entry.target) for entry in entries)
    typer.secho(f"{'target':<{width}}  phony  synopsis", bold=True)
    typer.echo(f"{'-' * width}  -----  --------")
    for entry in entries:
        phony = "yes" if entry.phony else ""
        typer.echo(f"{entry.target:<{width}}  {phony:<5}  {entry.synopsis}")


@app.command()
def main(
    target: Annotated[
        Optional[str],
        typer.Argument(help="Target to make (default: first target in the Makefile)"),
    ] = None,
    makefile: Annotated[
        Optional[Path],
        typer.Option("--file", "-f", help="Makefile to read (default: from config, 'Makefile')"),
    ] = None,
    directory: Annotated[
        Optional[Path],
        typer.Option("--directory", "-C", help="Change to this directory before reading the Makefile"),
    ] = None,
    variables: Annotated[
        Optional[List[str]],
        typer.Option("--var", "-v", help="Variable override name=value (repeatable)"),
    ] = None,
    params: Annotated[
        Optional[List[str]],
        typer.Option("--param", "-p", help="Positional parameter for ${PARAM1}..${PARAM9} (repeatable)"),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", "-n", help="Print the execution plan without running it"),
    ] = False,
    show_help: Annotated[
        bool,
        typer.Option("--help-targets", help="List targets, phony flags and ## help text"),
    ] = False,
    error_action: Annotated[
        Optional[str],
        typer.Option("--error-action", "-e", help="On command failure: 'stop' or 'continue'"),
    ] = None,
    delete_comments: Annotated[
        bool,
        typer.Option("--delete-comments", help="Strip trailing # comments from command lines"),
    ] = False,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", help="YAML config file (default: MAKESHIFT_CONFIG_PATH)"),
    ] = None,
    log_dir: Annotated[
        Optional[Path],
        typer.Option("--log-dir", help="Write a detailed log file under this directory"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Show debug logging on the console"),
    ] = False,
):
    """
    Make TARGET from the Makefile.

    Examples:\n

        $ make.py                      # Make the default target

        $ make.py clean -e continue    # Keep going after failed commands

        $ make.py -n                   # Dry run
    """
    try:
        config = load_make_config(
            config_path,
            error_action=error_action,
            delete_command_comments=delete_comments or None,
            log_level="DEBUG" if verbose else None,
            logs_path=str(log_dir) if log_dir else None,
        )
    except (ValueError, FileNotFoundError) as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)

    if not config.logs_path:
        setup_execution_logger(None, level=config.log_level)
    else:
        setup_execution_logger(
            Path(config.logs_path) / f"make_{now()}", makefile=makefile, level=config.log_level
        )
        # Logger is configured here; keep run_make from creating a second log directory
        config.logs_path = None

    variables = variables or []
    params = params or []

    try:
        if show_help:
            with working_directory(directory):
                parsed = parse_makefile(
                    makefile, target, variables, params, config=config, runner=ShellRunner(config.shell)
                )
                _show_help_table(help_entries(parsed))
            return

        if dry_run:
            plan = plan_make(makefile, target, variables, params, config=config, directory=directory)
            _show_plan(plan)
            return

        result = run_make(
            makefile, target, variables, params, config=config, directory=directory, echo=typer.echo
        )
    except CommandFailedError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except MakeError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)

    if not result.success:
        typer.secho(
            f"\n{len(result.failures)} target(s) failed:", fg=typer.colors.RED, bold=True, err=True
        )
        for failure in result.failures:
            typer.secho(f"  {failure}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
