# tests/test_utils.py
"""
Tests for toml_env.utils and toml_env.output.
"""

import logging
from pathlib import Path

import pytest

from toml_env.exceptions import EnvironmentVariableError
from toml_env.output import LogLogging, NoLogging, StdOutLogging
from toml_env.utils import expand_path, is_valid_unicode, read_env_var


class TestExpandPath:

    def test_none_input(self):
        assert expand_path(None) is None

    def test_tilde_expansion(self, monkeypatch):
        monkeypatch.setenv("HOME", "/home/testuser")
        assert expand_path("~/configs/app.toml") == Path("/home/testuser/configs/app.toml")

    def test_env_var_expansion(self, monkeypatch):
        monkeypatch.setenv("MY_DIR", "/opt/config")
        assert expand_path("$MY_DIR/app.toml") == Path("/opt/config/app.toml")

    def test_accepts_path_objects(self):
        assert expand_path(Path("/absolute/path/config.toml")) == Path("/absolute/path/config.toml")


class TestReadEnvVar:

    def test_unset(self):
        assert read_env_var("UNSET", {}) is None

    def test_set(self):
        assert read_env_var("A", {"A": "value"}) == "value"

    def test_os_environ(self, monkeypatch):
        monkeypatch.setenv("TOML_ENV_TEST_VALUE", "value")
        assert read_env_var("TOML_ENV_TEST_VALUE") == "value"

    def test_invalid_unicode(self):
        with pytest.raises(EnvironmentVariableError) as excinfo:
            read_env_var("A", {"A": "\udcff"})
        assert excinfo.value.name == "A"

    def test_is_valid_unicode(self):
        assert is_valid_unicode("héllo")
        assert not is_valid_unicode("bad\udcff")


class TestOutput:

    def test_no_logging(self, capsys):
        NoLogging().emit("message", "detail")
        assert capsys.readouterr().out == ""

    def test_stdout(self, capsys):
        StdOutLogging().emit("message", "detail")
        out = capsys.readouterr().out
        assert out.startswith("INFO toml_env: message\n")
        assert "detail" in out

    def test_log_logging(self, caplog):
        logger = logging.getLogger("toml_env.test")
        caplog.set_level(logging.INFO, logger="toml_env.test")
        LogLogging(logger).emit("message")
        assert [r.getMessage() for r in caplog.records] == ["message"]
