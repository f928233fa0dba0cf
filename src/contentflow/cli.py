# src/contentflow/cli.py
"""contentflow Command Line Interface.

Entry point for the contentflow CLI tool: validate the workflow
configuration, inspect the state table, and operate on runs.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

import typer
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from contentflow import __version__
from contentflow.contracts import (
    ConfigurationError,
    ConflictError,
    IllegalTransitionError,
    NotFoundError,
    Run,
    TransitionRecord,
    WorkflowEngineError,
)
from contentflow.core.config import ContentflowSettings, load_settings, redact_database_url
from contentflow.core.ledger.database import SchemaCompatibilityError
from contentflow.core.workflow import DEFAULT_WORKFLOW, validate_workflow_graph

if TYPE_CHECKING:
    from contentflow.engine.service import WorkflowEngine

__all__ = [
    "app",
]

# Exit codes let shell callers tell failures apart without parsing stderr
EXIT_ERROR = 1
EXIT_ILLEGAL_TRANSITION = 2
EXIT_CONFLICT = 3
EXIT_NOT_FOUND = 4
EXIT_CONFIGURATION = 5

app = typer.Typer(
    name="contentflow",
    help="contentflow: Auditable state engine for content-production workflows.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"contentflow version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Returns:
        True if .env was found and loaded, False otherwise.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(EXIT_ERROR)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)  # Don't override existing env vars


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    settings: Path | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file (defaults apply when omitted).",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """contentflow: Auditable state engine for content-production workflows."""
    from contentflow.core.logging import configure_logging

    log_level = "DEBUG" if verbose else "WARNING"
    configure_logging(json_output=json_logs, level=log_level)

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )

    ctx.obj = {"settings_path": settings, "verbose": verbose, "json_logs": json_logs}


# === Helpers ===


def _load_cli_settings(ctx: typer.Context, database: str | None) -> ContentflowSettings:
    """Resolve settings from --settings (if any) and a --database override."""
    settings_path: Path | None = ctx.obj["settings_path"] if ctx.obj else None

    if settings_path is None:
        config = ContentflowSettings()
    else:
        try:
            config = load_settings(settings_path.expanduser())
        except (YamlParserError, YamlScannerError) as e:
            typer.echo(f"YAML syntax error in {settings_path}: {e.problem}", err=True)
            raise typer.Exit(EXIT_ERROR) from None
        except FileNotFoundError:
            typer.echo(f"Error: Settings file not found: {settings_path}", err=True)
            raise typer.Exit(EXIT_ERROR) from None
        except ValidationError as e:
            typer.echo("Configuration errors:", err=True)
            for error in e.errors():
                loc = ".".join(str(x) for x in error["loc"])
                typer.echo(f"  - {loc}: {error['msg']}", err=True)
            raise typer.Exit(EXIT_ERROR) from None

        # A settings file may ask for more logging than the CLI default
        from contentflow.core.logging import configure_logging

        configure_logging(
            json_output=ctx.obj["json_logs"] or config.logging.json_output,
            level="DEBUG" if ctx.obj["verbose"] else config.logging.level,
        )

    if database is not None:
        config = config.model_copy(update={"database": config.database.model_copy(update={"url": database})})
    return config


def _open_engine(ctx: typer.Context, database: str | None) -> WorkflowEngine:
    from contentflow.engine.service import WorkflowEngine

    config = _load_cli_settings(ctx, database)
    try:
        return WorkflowEngine.from_settings(config)
    except ConfigurationError as e:
        typer.echo(f"Workflow configuration error: {e}", err=True)
        raise typer.Exit(EXIT_CONFIGURATION) from None
    except SchemaCompatibilityError as e:
        typer.echo(f"Database error: {e}", err=True)
        raise typer.Exit(EXIT_ERROR) from None
    except ValueError as e:
        # Journal path cannot be derived from the database URL
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(EXIT_ERROR) from None


def _exit_for(error: WorkflowEngineError) -> typer.Exit:
    """Report an engine error on stderr and return the matching exit."""
    typer.echo(f"Error: {error}", err=True)
    if isinstance(error, IllegalTransitionError):
        return typer.Exit(EXIT_ILLEGAL_TRANSITION)
    if isinstance(error, ConflictError):
        return typer.Exit(EXIT_CONFLICT)
    if isinstance(error, NotFoundError):
        return typer.Exit(EXIT_NOT_FOUND)
    if isinstance(error, ConfigurationError):
        return typer.Exit(EXIT_CONFIGURATION)
    return typer.Exit(EXIT_ERROR)


def _run_to_dict(run: Run) -> dict[str, Any]:
    return {
        "run_id": run.run_id,
        "tenant_id": run.tenant_id,
        "state": run.state.value,
        "version": run.version,
        "created_at": run.created_at.isoformat(),
        "updated_at": run.updated_at.isoformat(),
    }


def _transition_to_dict(record: TransitionRecord) -> dict[str, Any]:
    return {
        "sequence": record.sequence,
        "previous_state": record.previous_state.value,
        "new_state": record.new_state.value,
        "reason": record.reason,
        "actor": record.actor,
        "transitioned_at": record.transitioned_at.isoformat(),
        "transition_id": record.transition_id,
    }


def _echo_run(run: Run, output_format: Literal["console", "json"]) -> None:
    if output_format == "json":
        typer.echo(json.dumps(_run_to_dict(run)))
        return
    view = DEFAULT_WORKFLOW.describe(run.state)
    typer.echo(f"Run: {run.run_id}")
    typer.echo(f"  Tenant:  {run.tenant_id}")
    typer.echo(f"  State:   {run.state.value}")
    typer.echo(f"  Version: {run.version}")
    typer.echo(f"  Step:    {view.stage_index}/{view.total_stages} {view.stage_title} ({view.status_label})")


_DATABASE_OPTION_HELP = "Database URL (overrides settings), e.g. sqlite:///./state/workflow.db"
_FORMAT_OPTION_HELP = "Output format: 'console' (human-readable) or 'json' (structured JSON)."


# === Commands ===


@app.command()
def validate(ctx: typer.Context) -> None:
    """Validate the workflow configuration (and settings, if given)."""
    if ctx.obj and ctx.obj["settings_path"] is not None:
        config = _load_cli_settings(ctx, None)
        typer.echo(f"Settings valid (database: {redact_database_url(config.database.url)})")

    violations = validate_workflow_graph(DEFAULT_WORKFLOW)
    if violations:
        typer.echo(f"Workflow configuration is invalid ({len(violations)} violation(s)):", err=True)
        for violation in violations:
            typer.echo(f"  - {violation}", err=True)
        raise typer.Exit(EXIT_CONFIGURATION)

    typer.echo(
        f"Workflow configuration valid: {DEFAULT_WORKFLOW.stage_count} stages, "
        f"{len(DEFAULT_WORKFLOW.vocabulary)} states, "
        f"{sum(len(t) for t in DEFAULT_WORKFLOW.transitions.values())} transitions"
    )


@app.command()
def states(
    output_format: Literal["console", "json"] = typer.Option(
        "console",
        "--format",
        "-f",
        help=_FORMAT_OPTION_HELP,
    ),
) -> None:
    """List every state with its stage, status label and permitted successors."""
    graph = DEFAULT_WORKFLOW
    ordered = [state for stage in graph.stages for state in stage.state_names]
    ordered += [terminal.state for terminal in graph.terminals]

    if output_format == "json":
        payload = [
            {
                "state": state.value,
                "stage_index": graph.stage_index_of(state),
                "status_label": graph.status_label_of(state),
                "next_states": sorted(s.value for s in graph.next_states(state)),
            }
            for state in ordered
        ]
        typer.echo(json.dumps(payload))
        return

    for state in ordered:
        successors = sorted(s.value for s in graph.next_states(state))
        targets = ", ".join(successors) if successors else "(terminal)"
        typer.echo(f"{state.value:<24} {graph.stage_index_of(state)}  {graph.status_label_of(state):<22} -> {targets}")


@app.command("create-run")
def create_run(
    ctx: typer.Context,
    tenant: str = typer.Option(..., "--tenant", "-t", help="Owning tenant ID."),
    run_id: str | None = typer.Option(None, "--run-id", help="Explicit run ID (generated if omitted)."),
    database: str | None = typer.Option(None, "--database", "-d", help=_DATABASE_OPTION_HELP),
    output_format: Literal["console", "json"] = typer.Option("console", "--format", "-f", help=_FORMAT_OPTION_HELP),
) -> None:
    """Create a run in the initial state."""
    with _open_engine(ctx, database) as engine:
        try:
            run = engine.create_run(tenant, run_id=run_id)
        except ValueError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(EXIT_ERROR) from None
        _echo_run(run, output_format)


@app.command()
def transition(
    ctx: typer.Context,
    run_id: str = typer.Argument(..., help="Run to move."),
    target: str = typer.Argument(..., help="Target state (e.g. icp_pending)."),
    reason: str = typer.Option(..., "--reason", "-r", help="Why the transition happened."),
    actor: str = typer.Option("cli", "--actor", "-a", help="Who requested the transition."),
    expected_version: int | None = typer.Option(
        None,
        "--expected-version",
        help="Fail with a conflict unless the run is at this version.",
    ),
    database: str | None = typer.Option(None, "--database", "-d", help=_DATABASE_OPTION_HELP),
    output_format: Literal["console", "json"] = typer.Option("console", "--format", "-f", help=_FORMAT_OPTION_HELP),
) -> None:
    """Move a run to a new state."""
    with _open_engine(ctx, database) as engine:
        try:
            run = engine.transition(run_id, target, reason, actor, expected_version=expected_version)
        except WorkflowEngineError as e:
            raise _exit_for(e) from None
        _echo_run(run, output_format)


@app.command()
def cancel(
    ctx: typer.Context,
    run_id: str = typer.Argument(..., help="Run to cancel."),
    reason: str = typer.Option(..., "--reason", "-r", help="Why the run is cancelled."),
    actor: str = typer.Option("cli", "--actor", "-a", help="Who requested the cancellation."),
    database: str | None = typer.Option(None, "--database", "-d", help=_DATABASE_OPTION_HELP),
    output_format: Literal["console", "json"] = typer.Option("console", "--format", "-f", help=_FORMAT_OPTION_HELP),
) -> None:
    """Cancel a run."""
    with _open_engine(ctx, database) as engine:
        try:
            run = engine.cancel(run_id, reason, actor)
        except WorkflowEngineError as e:
            raise _exit_for(e) from None
        _echo_run(run, output_format)


@app.command()
def show(
    ctx: typer.Context,
    run_id: str = typer.Argument(..., help="Run to show."),
    database: str | None = typer.Option(None, "--database", "-d", help=_DATABASE_OPTION_HELP),
    output_format: Literal["console", "json"] = typer.Option("console", "--format", "-f", help=_FORMAT_OPTION_HELP),
) -> None:
    """Show a run and its derived progress."""
    with _open_engine(ctx, database) as engine:
        try:
            run = engine.get_run(run_id)
            view = engine.progress(run_id)
        except WorkflowEngineError as e:
            raise _exit_for(e) from None

        if output_format == "json":
            payload = _run_to_dict(run)
            payload["progress"] = {
                "stage_index": view.stage_index,
                "stage_key": view.stage_key.value,
                "stage_title": view.stage_title,
                "status_label": view.status_label,
                "phase": view.phase.value if view.phase is not None else None,
                "total_stages": view.total_stages,
                "is_processing": view.is_processing,
                "is_failed": view.is_failed,
                "is_completed": view.is_completed,
                "is_terminal": view.is_terminal,
            }
            typer.echo(json.dumps(payload))
            return

        _echo_run(run, output_format)
        successors = sorted(s.value for s in engine.graph.next_states(run.state))
        typer.echo(f"  Next:    {', '.join(successors) if successors else '(terminal)'}")


@app.command()
def history(
    ctx: typer.Context,
    run_id: str = typer.Argument(..., help="Run whose transitions to list."),
    database: str | None = typer.Option(None, "--database", "-d", help=_DATABASE_OPTION_HELP),
    output_format: Literal["console", "json"] = typer.Option("console", "--format", "-f", help=_FORMAT_OPTION_HELP),
) -> None:
    """List a run's transitions in commit order."""
    with _open_engine(ctx, database) as engine:
        try:
            records = engine.history(run_id)
        except WorkflowEngineError as e:
            raise _exit_for(e) from None

        if output_format == "json":
            typer.echo(json.dumps([_transition_to_dict(r) for r in records]))
            return

        if not records:
            typer.echo(f"Run {run_id} has no transitions.")
            return
        for record in records:
            typer.echo(
                f"{record.sequence:>4}  {record.transitioned_at.isoformat()}  "
                f"{record.previous_state.value} -> {record.new_state.value}  "
                f"[{record.actor}] {record.reason}"
            )


if __name__ == "__main__":
    app()
