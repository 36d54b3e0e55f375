"""Tests for the dropctl command line."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from dropctl import __version__
from dropctl.cli.common import Context, ExitCode
from dropctl.cli.main import cli
from dropctl.core.config import Config

PORTAL_URL = "http://portal.test/p/p_abc123"


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_obj(portal_server) -> Context:
    """CLI context wired to the fake portal server."""
    ctx = Context()
    ctx.config = Config()
    ctx.transport = portal_server.transport()
    return ctx


@pytest.fixture(autouse=True)
def isolated_config(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = temp_dir / "config.yaml"
    monkeypatch.setenv("DROPCTL_CONFIG", str(path))
    return path


class TestMain:
    """Tests for the top-level group."""

    def test_help(self, runner: CliRunner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("send", "info", "config"):
            assert command in result.output

    def test_version(self, runner: CliRunner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestSend:
    """Tests for dropctl send."""

    def test_send_folder(self, runner, cli_obj, portal_server, sample_tree: Path):
        result = runner.invoke(cli, ["send", PORTAL_URL, str(sample_tree)], obj=cli_obj)

        assert result.exit_code == 0, result.output
        assert portal_server.received == {"a/b.txt": b"bee", "a/c/d.txt": b"dee!"}
        assert "All uploads complete. Portal remains open." in result.output
        assert "Done" in result.output

    def test_send_quiet_prints_paths(self, runner, cli_obj, sample_tree: Path):
        result = runner.invoke(cli, ["send", PORTAL_URL, str(sample_tree), "-q"], obj=cli_obj)

        assert result.exit_code == 0, result.output
        assert result.output.split() == ["a/b.txt", "a/c/d.txt"]

    def test_send_json(self, runner, cli_obj, sample_tree: Path):
        result = runner.invoke(
            cli, ["send", PORTAL_URL, str(sample_tree / "b.txt"), "-o", "json"], obj=cli_obj
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["portal_id"] == "p_abc123"
        assert data["items"][0]["status"] == "done"
        assert data["uploaded_bytes"] == data["total_bytes"] == 3

    def test_send_policy_option(self, runner, cli_obj, portal_server, sample_tree: Path):
        portal_server.existing = {"b.txt"}
        result = runner.invoke(
            cli,
            ["send", PORTAL_URL, str(sample_tree / "b.txt"), "--policy", "autorename"],
            obj=cli_obj,
        )

        assert result.exit_code == 0, result.output
        assert "will be auto-renamed" in result.output
        assert portal_server.init_payloads[0]["policy"] == "autorename"

    def test_dry_run_uploads_nothing(self, runner, cli_obj, portal_server, sample_tree: Path):
        result = runner.invoke(cli, ["send", PORTAL_URL, str(sample_tree), "--dry-run"], obj=cli_obj)

        assert result.exit_code == 0, result.output
        assert "2 file(s) ready" in result.output
        assert portal_server.calls("POST", "/uploads") == 0

    def test_claim_failure_exit_code(self, runner, cli_obj, portal_server, sample_tree: Path):
        portal_server.claim_status = 404
        result = runner.invoke(cli, ["send", PORTAL_URL, str(sample_tree)], obj=cli_obj)

        assert result.exit_code == ExitCode.CLAIM_ERROR
        assert "portal not found" in result.output

    def test_transfer_failure_exit_code(self, runner, cli_obj, portal_server, sample_tree: Path):
        portal_server.fail_put = {"a/b.txt"}
        result = runner.invoke(cli, ["send", PORTAL_URL, str(sample_tree)], obj=cli_obj)

        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert "disk full" in result.output
        assert "a/c/d.txt" not in portal_server.received

    def test_continue_on_error(self, runner, cli_obj, portal_server, sample_tree: Path):
        portal_server.fail_put = {"a/b.txt"}
        result = runner.invoke(
            cli, ["send", PORTAL_URL, str(sample_tree), "--continue-on-error"], obj=cli_obj
        )

        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert "partially failed" in result.output
        assert portal_server.received["a/c/d.txt"] == b"dee!"

    def test_invalid_portal_url(self, runner, cli_obj, sample_tree: Path):
        result = runner.invoke(cli, ["send", "http://portal.test/", str(sample_tree)], obj=cli_obj)
        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert "Invalid URL" in result.output


class TestInfo:
    """Tests for dropctl info."""

    def test_info_table(self, runner, cli_obj, portal_server):
        result = runner.invoke(cli, ["info", PORTAL_URL], obj=cli_obj)

        assert result.exit_code == 0, result.output
        assert "p_abc123" in result.output
        assert "overwrite" in result.output
        assert portal_server.calls("POST", "/claim") == 0

    def test_info_json(self, runner, cli_obj):
        result = runner.invoke(cli, ["info", PORTAL_URL, "-o", "json"], obj=cli_obj)

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["portal_id"] == "p_abc123"


class TestConfigCommands:
    """Tests for dropctl config."""

    def test_init_then_refuse_overwrite(self, runner, isolated_config: Path):
        result = runner.invoke(cli, ["config", "init"])
        assert result.exit_code == 0, result.output
        assert isolated_config.exists()

        result = runner.invoke(cli, ["config", "init"])
        assert result.exit_code != 0

        result = runner.invoke(cli, ["config", "init", "--force"])
        assert result.exit_code == 0

    def test_set_and_show(self, runner, isolated_config: Path):
        result = runner.invoke(cli, ["config", "set", "chunk_size", "4096"])
        assert result.exit_code == 0, result.output
        assert Config.load(isolated_config).chunk_size == 4096

        result = runner.invoke(cli, ["config", "show", "-o", "json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["chunk_size"] == 4096
        assert data["config_file"] == str(isolated_config)

    def test_set_invalid_value(self, runner):
        result = runner.invoke(cli, ["config", "set", "verify_ssl", "maybe"])
        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert "Expected a boolean" in result.output

    def test_set_unknown_key(self, runner):
        result = runner.invoke(cli, ["config", "set", "profiles", "x"])
        assert result.exit_code == 2
