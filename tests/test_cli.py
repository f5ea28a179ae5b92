# tests/test_cli.py
"""
Tests for the toml-env command line.
"""

import json

import pytest
import toml
from click.testing import CliRunner

from toml_env.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(toml.dumps({
        "name": "myapp",
        "servers": [{"host": "alpha"}, {"host": "beta"}],
    }))
    return str(path)


def test_dump_json(runner, config_file):
    result = runner.invoke(cli, ["-c", config_file, "dump", "--to", "json"])
    assert result.exit_code == 0
    assert json.loads(result.output) == {"name": "myapp", "servers": [{"host": "alpha"}, {"host": "beta"}]}


def test_dump_toml(runner, config_file):
    result = runner.invoke(cli, ["-c", config_file, "dump"])
    assert result.exit_code == 0
    assert toml.loads(result.output)["name"] == "myapp"


def test_get_through_array(runner, config_file):
    result = runner.invoke(cli, ["-c", config_file, "get", "servers.1.host"])
    assert result.exit_code == 0
    assert json.loads(result.output) == "beta"


def test_get_missing(runner, config_file):
    result = runner.invoke(cli, ["-c", config_file, "get", "servers.5"])
    assert result.exit_code == 1


def test_exists(runner, config_file):
    result = runner.invoke(cli, ["-c", config_file, "exists", "name"])
    assert result.exit_code == 0
    assert result.output.strip() == "true"

    result = runner.invoke(cli, ["-c", config_file, "exists", "missing"])
    assert result.exit_code == 1
    assert result.output.strip() == "false"


def test_map_env_overrides_variable(runner, monkeypatch):
    monkeypatch.setenv("CONFIG", 'name = "inline"')
    monkeypatch.setenv("APP_NAME", "mapped")
    result = runner.invoke(cli, ["-m", "APP_NAME=name", "get", "name"])
    assert result.exit_code == 0
    assert json.loads(result.output) == "mapped"


def test_auto_map_env(runner, monkeypatch):
    monkeypatch.setenv("MY_APP__LIST__0", "x")
    monkeypatch.setenv("MY_APP__LIST__1", "y")
    result = runner.invoke(cli, ["--prefix", "MY_APP", "dump", "--to", "json"])
    assert result.exit_code == 0
    assert json.loads(result.output) == {"list": ["x", "y"]}


def test_bad_map_env(runner):
    result = runner.invoke(cli, ["-m", "NO_EQUALS", "dump"])
    assert result.exit_code != 0
    assert "NAME=key.path" in result.output


def test_nothing_found(runner):
    result = runner.invoke(cli, ["dump"])
    assert result.exit_code == 1


def test_error_is_reported(runner, monkeypatch):
    monkeypatch.setenv("CONFIG", "neither toml nor a file")
    result = runner.invoke(cli, ["dump"])
    assert result.exit_code == 1
    assert "Error parsing config environment variable" in result.output


def test_verbose(runner, config_file):
    result = runner.invoke(cli, ["-v", "-c", config_file, "dump"])
    assert result.exit_code == 0
    assert "INFO toml_env: Loading config from file" in result.output
