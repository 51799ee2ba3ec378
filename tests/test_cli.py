"""
Tests for the command-line interface (cli.py).

run_sync is replaced by a fake so no network access happens; logging setup
is disabled so the test runner keeps its own handlers.
"""

import pytest
from click.testing import CliRunner

from letterboxd_sync import __version__
from letterboxd_sync import cli as cli_module
from letterboxd_sync.core.config import CREDENTIAL_ENV_VARS
from letterboxd_sync.core.exceptions import (
    CacheError,
    LetterboxdError,
    ScanError,
)
from letterboxd_sync.sync.driver import SyncReport
from letterboxd_sync.sync.reconciler import diff


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def cli_env(tmp_path, monkeypatch, credentials_env):
    """Run from an empty directory with credentials in the environment"""
    monkeypatch.chdir(tmp_path)
    for name, value in credentials_env.items():
        monkeypatch.setenv(name, value)
    monkeypatch.setattr(cli_module, "setup_logging", lambda *args, **kwargs: None)
    monkeypatch.setattr(cli_module, "shutdown_logging", lambda: None)
    return tmp_path


@pytest.fixture
def sync_calls(monkeypatch):
    """Replace run_sync; returns the list of recorded calls"""
    calls = []

    async def fake_run_sync(config, list_id, folder, pattern, dry_run=False, show_progress=False):
        calls.append({
            "config": config,
            "list_id": list_id,
            "folder": folder,
            "pattern": pattern,
            "dry_run": dry_run,
        })
        return SyncReport(
            list_id=list_id,
            candidates=["Solaris 1972", "Unknown"],
            resolved={"Solaris 1972": "A"},
            remote_ids={"D"},
            delta=diff({"A"}, {"D"}),
            dry_run=dry_run,
        )

    monkeypatch.setattr(cli_module, "run_sync", fake_run_sync)
    return calls


def _failing_run_sync(monkeypatch, error):
    async def fake_run_sync(*args, **kwargs):
        raise error

    monkeypatch.setattr(cli_module, "run_sync", fake_run_sync)


class TestCli:
    """Tests for the letterboxd-sync command"""

    def test_runs_sync(self, runner, cli_env, sync_calls):
        result = runner.invoke(cli_module.cli, ["--pattern", r"^(.+)\.mkv$", "aBc1", str(cli_env)])

        assert result.exit_code == 0, result.output
        assert len(sync_calls) == 1
        call = sync_calls[0]
        assert call["list_id"] == "aBc1"
        assert call["folder"] == cli_env
        assert call["pattern"] == r"^(.+)\.mkv$"
        assert not call["dry_run"]

    def test_options_override_config(self, runner, cli_env, sync_calls):
        result = runner.invoke(cli_module.cli, [
            "--pattern", "(.+)",
            "--dry-run",
            "--concurrency", "4",
            "--cache-file", "films.json",
            "--verbose",
            "aBc1", str(cli_env),
        ])

        assert result.exit_code == 0, result.output
        config = sync_calls[0]["config"]
        assert sync_calls[0]["dry_run"]
        assert config.sync.concurrency == 4
        assert config.sync.cache_file.name == "films.json"
        assert config.logging.level == "DEBUG"

    def test_pattern_is_required(self, runner, cli_env, sync_calls):
        result = runner.invoke(cli_module.cli, ["aBc1", str(cli_env)])

        assert result.exit_code == 2
        assert sync_calls == []

    def test_concurrency_must_be_positive(self, runner, cli_env, sync_calls):
        result = runner.invoke(cli_module.cli, ["--pattern", "(.+)", "--concurrency", "0", "aBc1", str(cli_env)])

        assert result.exit_code == 2
        assert sync_calls == []

    def test_missing_credentials(self, runner, cli_env, sync_calls, monkeypatch):
        for name in CREDENTIAL_ENV_VARS:
            monkeypatch.delenv(name, raising=False)

        result = runner.invoke(cli_module.cli, ["--pattern", "(.+)", "aBc1", str(cli_env)])

        assert result.exit_code == 1
        assert "Configuration error" in result.output
        assert sync_calls == []

    @pytest.mark.parametrize("error,exit_code", [
        (CacheError("Cache file is not valid JSON"), 2),
        (LetterboxdError("Letterboxd API error 500"), 3),
        (ScanError("Not a directory: /nowhere"), 4),
        (RuntimeError("unexpected"), 1),
    ])
    def test_exit_codes(self, runner, cli_env, monkeypatch, error, exit_code):
        _failing_run_sync(monkeypatch, error)

        result = runner.invoke(cli_module.cli, ["--pattern", "(.+)", "aBc1", str(cli_env)])

        assert result.exit_code == exit_code

    def test_auth_error_hints_at_credentials(self, runner, cli_env, monkeypatch, auth_error):
        _failing_run_sync(monkeypatch, auth_error)

        result = runner.invoke(cli_module.cli, ["--pattern", "(.+)", "aBc1", str(cli_env)])

        assert result.exit_code == 3
        assert "LETTERBOXD_KEY" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli_module.cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output
