"""Tests for core infrastructure: config, credentials, logging."""

import logging
from unittest.mock import patch

import keyring.errors
import pytest
from rich.logging import RichHandler

from ghostpad.core import config as config_mod
from ghostpad.core.credentials import delete_api_key, get_api_key, require_api_key, save_api_key
from ghostpad.core.exceptions import ConfigError, CredentialError
from ghostpad.core.log import setup_logging


class TestConfig:
    def test_defaults_without_file(self, config_dir):
        cfg = config_mod.load_config()
        assert cfg["editor"]["wait_time_ms"] == 500
        assert cfg["editor"]["model"] == "gpt-3.5-turbo"
        assert cfg["server"]["port"] == 3000
        assert cfg["gateway"]["temperature"] == 0.25

    def test_defaults_are_not_shared(self, config_dir):
        config_mod.load_config()["editor"]["wait_time_ms"] = 1
        assert config_mod.load_config()["editor"]["wait_time_ms"] == 500

    def test_config_path_in_override_dir(self, config_dir):
        assert config_mod.get_config_path() == config_dir / "ghostpad.toml"
        assert config_dir.is_dir()

    def test_save_and_merge(self, config_dir):
        config_mod.save_config({"editor": {"wait_time_ms": 800}})
        cfg = config_mod.load_config()
        assert cfg["editor"]["wait_time_ms"] == 800
        assert cfg["editor"]["model"] == "gpt-3.5-turbo"
        assert cfg["server"]["host"] == "127.0.0.1"

    def test_update_config(self, config_dir):
        config_mod.update_config(server={"port": 8080}, editor={"model": "gpt-4o"})
        cfg = config_mod.load_config()
        assert cfg["server"]["port"] == 8080
        assert cfg["editor"]["model"] == "gpt-4o"
        assert cfg["editor"]["wait_time_ms"] == 500

    def test_broken_file(self, config_dir):
        config_mod.get_config_path().write_text("editor = [", encoding="utf-8")
        with pytest.raises(ConfigError, match="Failed to load config"):
            config_mod.load_config()

    def test_server_password_from_env(self, config_dir, monkeypatch):
        cfg = {"server": {"password": "aus-datei"}}
        assert config_mod.get_server_password(cfg) == "aus-datei"
        monkeypatch.setenv("GHOSTPAD_PASSWORD", "aus-env")
        assert config_mod.get_server_password(cfg) == "aus-env"

    def test_log_path(self, config_dir, tmp_path):
        cfg = {"general": {"data_dir": str(tmp_path / "data")}, "logging": {"file": ""}}
        assert config_mod.get_log_path(cfg) == tmp_path / "data" / "ghostpad.log"
        cfg["logging"]["file"] = str(tmp_path / "custom.log")
        assert config_mod.get_log_path(cfg) == tmp_path / "custom.log"


class TestCredentials:
    def test_env_wins(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        with patch("keyring.get_password") as get_password:
            assert get_api_key("openai") == "sk-env"
        get_password.assert_not_called()

    def test_falls_back_to_keyring(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        with patch("keyring.get_password", return_value="sk-ant") as get_password:
            assert get_api_key("anthropic") == "sk-ant"
        get_password.assert_called_once_with("ghostpad", "anthropic")

    def test_keyring_failure_reads_as_missing(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with patch("keyring.get_password", side_effect=keyring.errors.KeyringError("locked")):
            assert get_api_key("openai") is None
            with pytest.raises(CredentialError, match="OPENAI_API_KEY"):
                require_api_key("openai")

    def test_unknown_provider(self):
        with pytest.raises(CredentialError, match="Unknown provider"):
            get_api_key("mistral")

    def test_save_and_delete(self):
        with patch("keyring.set_password") as set_password, patch("keyring.delete_password") as delete_password:
            save_api_key("openai", "sk-new")
            delete_api_key("openai")
        set_password.assert_called_once_with("ghostpad", "openai", "sk-new")
        delete_password.assert_called_once_with("ghostpad", "openai")

    def test_save_failure(self):
        with patch("keyring.set_password", side_effect=keyring.errors.PasswordSetError("denied")):
            with pytest.raises(CredentialError, match="Could not store"):
                save_api_key("openai", "sk-new")

    def test_delete_missing_key(self):
        with patch("keyring.delete_password", side_effect=keyring.errors.PasswordDeleteError("missing")):
            delete_api_key("anthropic")


class TestLogging:
    def test_console_handler(self):
        setup_logging("DEBUG")
        logger = logging.getLogger("ghostpad")
        assert logger.level == logging.DEBUG
        assert [type(h) for h in logger.handlers] == [RichHandler]
        assert not logger.propagate

    def test_file_handler_replaces_console(self, tmp_path):
        setup_logging("INFO")
        log_file = tmp_path / "logs" / "ghostpad.log"
        setup_logging("INFO", log_file=log_file)

        logger = logging.getLogger("ghostpad")
        assert len(logger.handlers) == 1
        logging.getLogger("ghostpad.editor").info("hello from the editor")
        logger.handlers[0].flush()
        assert "hello from the editor" in log_file.read_text(encoding="utf-8")

    def test_unknown_level_falls_back_to_warning(self):
        setup_logging("chatty")
        assert logging.getLogger("ghostpad").level == logging.WARNING
