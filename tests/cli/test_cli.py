"""Tests for the contentflow CLI."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from contentflow.cli import (
    EXIT_CONFLICT,
    EXIT_ILLEGAL_TRANSITION,
    EXIT_NOT_FOUND,
    app,
)

runner = CliRunner()


def _json_line(output: str) -> object:
    """Last stdout line is the command's JSON payload."""
    return json.loads(output.strip().split("\n")[-1])


@pytest.fixture
def database(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'cli.db'}"


def _create_run(database: str, run_id: str = "run-cli-1") -> None:
    result = runner.invoke(app, ["--no-dotenv", "create-run", "--tenant", "tenant-cli", "--run-id", run_id, "-d", database])
    assert result.exit_code == 0, result.output


class TestCLIBasics:
    def test_version_flag(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "contentflow" in result.stdout.lower()

    def test_help_lists_commands(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("validate", "states", "create-run", "transition", "cancel", "show", "history"):
            assert command in result.stdout


class TestValidateCommand:
    def test_default_workflow_is_valid(self) -> None:
        result = runner.invoke(app, ["--no-dotenv", "validate"])
        assert result.exit_code == 0
        assert "Workflow configuration valid: 7 stages" in result.stdout

    def test_validate_with_settings_file(self, tmp_path: Path) -> None:
        settings_file = tmp_path / "settings.yaml"
        settings_file.write_text('database:\n  url: "postgresql://app:s3cret@db/workflow"\n')

        result = runner.invoke(app, ["--no-dotenv", "--settings", str(settings_file), "validate"])

        assert result.exit_code == 0
        assert "Settings valid" in result.stdout
        assert "s3cret" not in result.stdout

    def test_missing_settings_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["--no-dotenv", "--settings", str(tmp_path / "missing.yaml"), "validate"])
        assert result.exit_code == 1
        assert "Settings file not found" in result.output


class TestStatesCommand:
    def test_console_lists_terminals(self) -> None:
        result = runner.invoke(app, ["--no-dotenv", "states"])
        assert result.exit_code == 0
        assert "step_3_keywords" in result.stdout
        assert "(terminal)" in result.stdout

    def test_json_output(self) -> None:
        result = runner.invoke(app, ["--no-dotenv", "states", "--format", "json"])
        assert result.exit_code == 0
        payload = _json_line(result.stdout)
        assert isinstance(payload, list)
        by_state = {entry["state"]: entry for entry in payload}
        assert by_state["created"]["next_states"] == ["cancelled", "icp_pending"]
        assert by_state["fully_completed"]["stage_index"] == 7
        assert by_state["cancelled"]["next_states"] == []


class TestRunCommands:
    def test_create_and_show(self, database: str) -> None:
        _create_run(database)

        result = runner.invoke(app, ["--no-dotenv", "show", "run-cli-1", "-d", database, "--format", "json"])

        assert result.exit_code == 0, result.output
        payload = _json_line(result.stdout)
        assert isinstance(payload, dict)
        assert payload["state"] == "created"
        assert payload["version"] == 1
        assert payload["progress"]["status_label"] == "step_1_icp"

    def test_transition_and_history(self, database: str) -> None:
        _create_run(database)

        moved = runner.invoke(
            app,
            ["--no-dotenv", "transition", "run-cli-1", "icp_pending", "--reason", "start", "--actor", "ops", "-d", database],
        )
        history = runner.invoke(app, ["--no-dotenv", "history", "run-cli-1", "-d", database, "--format", "json"])

        assert moved.exit_code == 0, moved.output
        assert "icp_pending" in moved.stdout
        records = _json_line(history.stdout)
        assert isinstance(records, list)
        assert [r["new_state"] for r in records] == ["icp_pending"]
        assert records[0]["actor"] == "ops"

    def test_illegal_transition_exit_code(self, database: str) -> None:
        _create_run(database)

        result = runner.invoke(app, ["--no-dotenv", "transition", "run-cli-1", "publish_pending", "-r", "skip", "-d", database])

        assert result.exit_code == EXIT_ILLEGAL_TRANSITION
        assert "Illegal transition" in result.output

    def test_conflict_exit_code(self, database: str) -> None:
        _create_run(database)

        result = runner.invoke(
            app,
            ["--no-dotenv", "transition", "run-cli-1", "icp_pending", "-r", "start", "--expected-version", "5", "-d", database],
        )

        assert result.exit_code == EXIT_CONFLICT

    def test_unknown_run_exit_code(self, database: str) -> None:
        result = runner.invoke(app, ["--no-dotenv", "show", "missing-run", "-d", database])
        assert result.exit_code == EXIT_NOT_FOUND
        assert "Run not found" in result.output

    def test_cancel(self, database: str) -> None:
        _create_run(database)

        result = runner.invoke(app, ["--no-dotenv", "cancel", "run-cli-1", "-r", "customer request", "-d", database])
        again = runner.invoke(app, ["--no-dotenv", "cancel", "run-cli-1", "-r", "again", "-d", database])

        assert result.exit_code == 0, result.output
        assert "cancelled" in result.stdout
        assert again.exit_code == EXIT_ILLEGAL_TRANSITION

    def test_history_of_new_run(self, database: str) -> None:
        _create_run(database)
        result = runner.invoke(app, ["--no-dotenv", "history", "run-cli-1", "-d", database])
        assert result.exit_code == 0
        assert "has no transitions" in result.stdout


class TestDotenv:
    def test_missing_env_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["--env-file", str(tmp_path / "missing.env"), "states"])
        assert result.exit_code == 1
        assert ".env file not found" in result.output

    def test_env_file_sets_database(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        db_path = tmp_path / "from-env.db"
        env_file = tmp_path / ".env"
        env_file.write_text(f"CONTENTFLOW_DATABASE__URL=sqlite:///{db_path}\n")
        settings_file = tmp_path / "settings.yaml"
        settings_file.write_text("logging:\n  level: INFO\n")
        # setenv first so the value dotenv loads is removed again at teardown
        monkeypatch.setenv("CONTENTFLOW_DATABASE__URL", "")
        monkeypatch.delenv("CONTENTFLOW_DATABASE__URL")

        result = runner.invoke(
            app,
            ["--env-file", str(env_file), "--settings", str(settings_file), "create-run", "--tenant", "tenant-env"],
        )

        assert result.exit_code == 0, result.output
        assert db_path.exists()
