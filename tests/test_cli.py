"""Integration tests for CLI commands using Click's CliRunner."""

from __future__ import annotations

import json
import subprocess
import sys
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from ghostpad.cli.main import cli
from ghostpad.core.config import load_config, update_config
from ghostpad.core.exceptions import UpstreamError
from ghostpad.editor.factory import build_controller
from ghostpad.editor.gateway import ServiceGateway
from ghostpad.models.completion import DEFAULT_PROMPT, Completion
from ghostpad.services.api_client import HttpCompletionGateway


@pytest.fixture
def cli_runner(config_dir, tmp_path):
    """CliRunner against an isolated config whose data dir lives in tmp_path."""
    update_config(general={"data_dir": str(tmp_path / "data")})
    return CliRunner()


def _payload(result):
    return json.loads(result.output)


class TestRootCLI:
    def test_help(self, cli_runner):
        result = cli_runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("edit", "serve", "complete", "models", "config"):
            assert command in result.output

    def test_version(self, cli_runner):
        result = cli_runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "Ghostpad" in result.output

    @pytest.mark.parametrize(
        "module", ["ghostpad.cli.edit", "ghostpad.cli.serve", "ghostpad.cli.complete", "ghostpad.cli.config_cmd"]
    )
    def test_subcommand_module_imports_before_main(self, module):
        result = subprocess.run(
            [sys.executable, "-c", f"import {module}; import ghostpad.cli.main"],
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0, result.stderr

    def test_no_subcommand_opens_editor(self, cli_runner, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        with patch("ghostpad.tui.app.GhostpadApp") as app_cls:
            result = cli_runner.invoke(cli, [])
        assert result.exit_code == 0, result.output
        app_cls.return_value.run.assert_called_once()
        assert "API key" not in result.output

    def test_edit_warns_without_api_key(self, cli_runner):
        with patch("ghostpad.core.credentials.get_api_key", return_value=None), patch(
            "ghostpad.tui.app.GhostpadApp"
        ) as app_cls:
            result = cli_runner.invoke(cli, ["edit", "--model", "claude-haiku-4-5"])
        assert result.exit_code == 0, result.output
        assert "No anthropic API key" in result.output
        assert app_cls.call_args.args[0].settings.model == "claude-haiku-4-5"


class TestModels:
    def test_table(self, cli_runner):
        result = cli_runner.invoke(cli, ["models"])
        assert result.exit_code == 0
        assert "gpt-4o-mini" in result.output
        assert "claude-haiku-4-5" in result.output

    def test_json(self, cli_runner):
        result = cli_runner.invoke(cli, ["--json", "models"])
        data = {row["model"]: row for row in _payload(result)["data"]}
        assert data["gpt-4o"]["input_per_million"] == 5
        assert data["gpt-4o"]["output_per_million"] == 15
        assert data["claude-haiku-4-5"]["provider"] == "anthropic"


class TestConfigCommands:
    def test_show_json(self, cli_runner):
        result = cli_runner.invoke(cli, ["--json", "config", "show"])
        assert result.exit_code == 0
        assert _payload(result)["data"]["editor"]["wait_time_ms"] == 500

    def test_show_masks_password(self, cli_runner):
        update_config(server={"password": "geheim"})
        result = cli_runner.invoke(cli, ["config", "show"])
        assert result.exit_code == 0
        assert "geheim" not in result.output
        assert "********" in result.output

    def test_set(self, cli_runner):
        result = cli_runner.invoke(cli, ["config", "set", "editor.wait_time_ms", "800"])
        assert result.exit_code == 0, result.output
        assert load_config()["editor"]["wait_time_ms"] == 800

    def test_set_float(self, cli_runner):
        cli_runner.invoke(cli, ["config", "set", "gateway.temperature", "0.5"])
        assert load_config()["gateway"]["temperature"] == 0.5

    def test_set_unknown_key(self, cli_runner):
        result = cli_runner.invoke(cli, ["config", "set", "editor.colour", "red"])
        assert result.exit_code == 2
        assert "Unknown setting" in result.output

    def test_set_wrong_type(self, cli_runner):
        result = cli_runner.invoke(cli, ["config", "set", "server.port", "many"])
        assert result.exit_code == 2
        assert load_config()["server"]["port"] == 3000

    def test_set_key(self, cli_runner):
        with patch("keyring.set_password") as set_password:
            result = cli_runner.invoke(cli, ["config", "set-key", "openai"], input="sk-test\n")
        assert result.exit_code == 0, result.output
        set_password.assert_called_once_with("ghostpad", "openai", "sk-test")

    def test_delete_key(self, cli_runner):
        with patch("keyring.delete_password") as delete_password:
            result = cli_runner.invoke(cli, ["config", "delete-key", "anthropic"])
        assert result.exit_code == 0, result.output
        delete_password.assert_called_once_with("ghostpad", "anthropic")


class TestComplete:
    def test_json(self, cli_runner):
        completion = Completion(text=" ein Lehrsatz.", prompt_tokens=1000, completion_tokens=100, model="gpt-4o")
        with patch("ghostpad.services.completion_service.CompletionService") as service_cls:
            service_cls.return_value.complete.return_value = completion
            result = cli_runner.invoke(cli, ["--json", "complete", "--model", "gpt-4o", "Der", "Satz"])

        assert result.exit_code == 0, result.output
        data = _payload(result)["data"]
        assert data["suggestion"] == " ein Lehrsatz."
        assert data["cost_usd"] == pytest.approx(5 * 1000 / 1e6 + 15 * 100 / 1e6)
        service_cls.return_value.complete.assert_called_once_with("Der Satz", "gpt-4o", DEFAULT_PROMPT)

    def test_human_output(self, cli_runner):
        completion = Completion(text=" ein [Lehrsatz].", prompt_tokens=10, completion_tokens=2, model="gpt-4o")
        with patch("ghostpad.services.completion_service.CompletionService") as service_cls:
            service_cls.return_value.complete.return_value = completion
            result = cli_runner.invoke(cli, ["complete", "Der Satz"])
        assert result.exit_code == 0, result.output
        assert "Der Satz ein [Lehrsatz]." in result.output

    def test_failure(self, cli_runner):
        with patch("ghostpad.services.completion_service.CompletionService") as service_cls:
            service_cls.return_value.complete.side_effect = UpstreamError("connection reset")
            result = cli_runner.invoke(cli, ["complete", "Der Satz"])
        assert result.exit_code == 1
        assert "connection reset" in result.output


class TestServe:
    def test_requires_password(self, cli_runner):
        result = cli_runner.invoke(cli, ["serve"])
        assert result.exit_code == 1
        assert "No server password" in result.output

    def test_starts_server(self, cli_runner):
        with patch("ghostpad.services.api_server.serve") as run_server:
            result = cli_runner.invoke(cli, ["serve", "--password", "geheim", "--port", "3100"])
        assert result.exit_code == 0, result.output
        _, password, host, port = run_server.call_args.args
        assert (password, host, port) == ("geheim", "127.0.0.1", 3100)

    def test_password_from_env(self, cli_runner, monkeypatch):
        monkeypatch.setenv("GHOSTPAD_PASSWORD", "aus-env")
        with patch("ghostpad.services.api_server.serve") as run_server:
            result = cli_runner.invoke(cli, ["serve"])
        assert result.exit_code == 0, result.output
        assert run_server.call_args.args[1] == "aus-env"


class TestBuildController:
    def test_defaults_from_config(self, config_dir):
        controller = build_controller(load_config())
        assert isinstance(controller.gateway, ServiceGateway)
        assert controller.settings.wait_time_ms == 500
        assert controller.settings.prompt == DEFAULT_PROMPT
        assert controller.buffer.plain_text() == "Der Satz des Pythagoras ist"

    def test_overrides(self, config_dir):
        controller = build_controller(
            load_config(),
            text="Hallo",
            wait_ms=100,
            model="gpt-4o",
            prompt="P",
            endpoint="http://localhost:3000",
            password="geheim",
        )
        assert isinstance(controller.gateway, HttpCompletionGateway)
        assert controller.gateway.password == "geheim"
        assert (controller.settings.wait_time_ms, controller.settings.model, controller.settings.prompt) == (
            100,
            "gpt-4o",
            "P",
        )
        assert controller.buffer.plain_text() == "Hallo"
