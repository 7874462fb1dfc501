# SPDX-License-Identifier: MIT
"""Tests for the roast-registry command line."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from roast_registry.cli import cli


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def sql_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the CLI at a temporary SQLite database."""
    monkeypatch.setenv("ROAST_BACKEND", "sql")
    monkeypatch.setenv("ROAST_DATABASE_URL", f"sqlite:///{tmp_path / 'cli.db'}")
    monkeypatch.setenv("ROAST_STORAGE_BACKEND", "memory")
    return tmp_path


class TestRegisterUser:
    def test_register_prints_token(self, cli_runner: CliRunner, sql_env: Path):
        result = cli_runner.invoke(cli, ["register-user", "alice@example.com", "Alice"])

        assert result.exit_code == 0, result.output
        assert "Registered alice@example.com" in result.output
        assert "API token: rst_" in result.output
        assert (sql_env / "cli.db").exists()

    def test_duplicate_email_fails(self, cli_runner: CliRunner, sql_env: Path):
        cli_runner.invoke(cli, ["register-user", "alice@example.com", "Alice"])
        result = cli_runner.invoke(cli, ["register-user", "alice@example.com", "Alice"])

        assert result.exit_code == 1
        assert "Email already registered" in result.output

    def test_memory_backend_rejected(self, cli_runner: CliRunner, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("ROAST_BACKEND", "memory")
        monkeypatch.setenv("ROAST_STORAGE_BACKEND", "memory")

        result = cli_runner.invoke(cli, ["register-user", "alice@example.com", "Alice"])

        assert result.exit_code == 1
        assert "persistent backend" in result.output


class TestStats:
    def test_empty_registry(self, cli_runner: CliRunner, sql_env: Path):
        result = cli_runner.invoke(cli, ["stats"])

        assert result.exit_code == 0, result.output
        assert "Packages:  0" in result.output
        assert "Versions:  0" in result.output
        assert "Downloads: 0" in result.output
