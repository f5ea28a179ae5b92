# toml_env/cli.py

import json
from typing import Any, Dict

import click
import toml

from .environment import DEFAULT_MAP_ENV_DIVIDER, AutoMapEnvArgs
from .exceptions import TomlEnvError
from .keypath import KeyPath
from .loader import DEFAULT_CONFIG_VARIABLE_NAME, DEFAULT_DOTENV_PATH, Args, initialize
from .output import NoLogging, StdOutLogging


def _parse_map_env(pairs) -> Dict[str, KeyPath]:
    """Turn ``NAME=key.path`` pairs into a map_env mapping."""
    map_env = {}
    for pair in pairs:
        name, sep, key = pair.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected NAME=key.path, got {pair!r}", param_hint="--map-env")
        try:
            map_env[name.strip()] = KeyPath.parse(key.strip())
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--map-env") from e
    return map_env


def _echo_error(error: Exception):
    click.secho(f"Error: {error}", fg="red", err=True)
    cause = error.__cause__
    while cause is not None:
        click.secho(f"  caused by: {cause}", fg="red", err=True)
        cause = cause.__cause__


def _to_json(value: Any) -> str:
    return json.dumps(value, indent=2, default=str)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--dotenv-path", default=DEFAULT_DOTENV_PATH, show_default=True,
              help="Path to the .env.toml format file")
@click.option("-c", "--config", "config_path", help="TOML config file to load (highest precedence)")
@click.option("--config-variable-name", default=DEFAULT_CONFIG_VARIABLE_NAME, show_default=True,
              help="Environment variable holding inline TOML or a file path")
@click.option("-m", "--map-env", "map_env", multiple=True, metavar="NAME=KEY",
              help="Map environment variable NAME to config KEY (repeatable)")
@click.option("--auto-map-env", is_flag=True, help="Map <PREFIX><DIVIDER>* environment variables automatically")
@click.option("--prefix", help="Prefix for --auto-map-env (default: config variable name)")
@click.option("--divider", default=DEFAULT_MAP_ENV_DIVIDER, show_default=True,
              help="Level divider for --auto-map-env")
@click.option("-v", "--verbose", is_flag=True, help="Print progress while loading")
@click.pass_context
def cli(ctx, dotenv_path, config_path, config_variable_name, map_env, auto_map_env, prefix, divider, verbose):
    """
    toml-env CLI: load layered TOML configuration and inspect the result.

    Sources (lowest to highest precedence): dotenv file, config variable,
    mapped environment variables, config file. Subcommands:
      • dump      [--to toml|json]
      • get       KEY
      • exists    KEY
    """
    auto_args = None
    if auto_map_env or prefix:
        auto_args = AutoMapEnvArgs(divider=divider, prefix=prefix)

    args = Args(
        dotenv_path=dotenv_path,
        config_path=config_path,
        config_variable_name=config_variable_name,
        logging=StdOutLogging() if verbose else NoLogging(),
        map_env=_parse_map_env(map_env),
        auto_map_env=auto_args,
    )

    try:
        config = initialize(Dict[str, Any], args)
    except TomlEnvError as e:
        _echo_error(e)
        ctx.exit(1)
    if config is None:
        click.secho("No configuration found", fg="yellow", err=True)
        ctx.exit(1)

    ctx.obj = {"config": config}


@cli.command()
@click.option("--to", "fmt", type=click.Choice(["toml", "json"]), default="toml",
              help="Output format")
@click.pass_context
def dump(ctx, fmt):
    """Print the merged configuration."""
    config = ctx.obj["config"]
    if fmt == "json":
        click.echo(_to_json(config))
    else:
        click.echo(toml.dumps(config), nl=False)


@cli.command()
@click.argument("key")
@click.pass_context
def get(ctx, key):
    """Print the value at KEY (dot-notation, numbers index arrays) as JSON."""
    try:
        value = KeyPath.parse(key).resolve(ctx.obj["config"])
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="KEY") from e
    if value is None:
        click.secho(f"Key not found: {key}", fg="yellow", err=True)
        ctx.exit(1)
    click.echo(_to_json(value))


@cli.command()
@click.argument("key")
@click.pass_context
def exists(ctx, key):
    """Exit 0 if KEY exists in config, 1 otherwise."""
    try:
        found = KeyPath.parse(key).resolve(ctx.obj["config"]) is not None
    except ValueError:
        found = False
    click.echo("true" if found else "false")
    ctx.exit(0 if found else 1)
