# toml_env/environment.py
"""
toml_env.environment
--------------------

Mapping of environment variables into configuration keys.

Variables are mapped to key paths either explicitly (``map_env``) or by
auto-discovery: with ``AutoMapEnvArgs`` every variable named
``<PREFIX><divider>...`` is mapped, e.g. ``CONFIG__DATABASE__PORT`` becomes
``database.port`` and ``CONFIG__HOSTS__0`` becomes ``hosts.0``.

Values are coerced to TOML scalars by trying, in this order: boolean, float,
integer, date/time, and finally falling back to the raw string. The order is
observable: ``"1"`` becomes ``1.0``.
"""

import datetime
import logging
import os
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

import tomli

from .exceptions import EnvironmentInsertError, InsertError
from .keypath import KeyPath, insert_value
from .output import Logging, NoLogging
from .utils import is_valid_unicode, read_env_var

log = logging.getLogger(__name__)

DEFAULT_MAP_ENV_DIVIDER = "__"

_DIGITS_RE = re.compile(r"([0-9]+)")


@dataclass(frozen=True)
class AutoMapEnvArgs:
    """
    Settings for automatically mapping environment variables into config.

    Attributes:
        divider: Separates parent and child levels in variable names. It is
            replaced with ``.`` when the name is turned into a key path.
        prefix: Prefix of the variables to map (the divider is appended).
            Defaults to the config variable name.
        transform: Applied to the name (without prefix) before it is parsed
            as a key path. Lowercases by default.
    """

    divider: str = DEFAULT_MAP_ENV_DIVIDER
    prefix: Optional[str] = None
    transform: Callable[[str], str] = str.lower


# --- Value coercion ---

def _parse_bool(raw: str) -> bool:
    if raw == "true":
        return True
    if raw == "false":
        return False
    raise ValueError(f"not a boolean: {raw!r}")


def _check_number_syntax(raw: str):
    # float()/int() also accept padding, '_' separators and non-ASCII digits
    if not raw.isascii() or raw != raw.strip() or "_" in raw:
        raise ValueError(f"not a number: {raw!r}")


def _parse_float(raw: str) -> float:
    _check_number_syntax(raw)
    return float(raw)


def _parse_int(raw: str) -> int:
    _check_number_syntax(raw)
    return int(raw)


def _parse_timestamp(raw: str) -> Union[datetime.datetime, datetime.date, datetime.time]:
    if raw != raw.strip() or any(c in raw for c in "\n\r#"):
        raise ValueError(f"not a date/time: {raw!r}")
    value = tomli.loads(f"value = {raw}")["value"]
    if not isinstance(value, (datetime.date, datetime.time)):
        raise ValueError(f"not a date/time: {raw!r}")
    return value


_SCALAR_PARSERS = (_parse_bool, _parse_float, _parse_int, _parse_timestamp)


def parse_env_value(raw: str) -> Any:
    """
    Convert an environment variable value into a TOML scalar.

    Tries boolean (exactly ``true``/``false``), float, integer and TOML
    date/time in that order; the first parser that succeeds wins. Anything
    else is kept as a string.

    Examples:
        >>> parse_env_value("true")
        True
        >>> parse_env_value("1")
        1.0
        >>> parse_env_value("1979-05-27")
        datetime.date(1979, 5, 27)
        >>> parse_env_value("hello")
        'hello'
    """
    for parser in _SCALAR_PARSERS:
        try:
            return parser(raw)
        except ValueError:
            continue
    return raw


# --- Building the variable -> key path map ---

def env_sort_key(name: str) -> List[Union[str, int]]:
    """Sort key comparing digit runs numerically, so ``LIST__2`` < ``LIST__10``."""
    parts = _DIGITS_RE.split(name)
    return [int(part) if i % 2 else part for i, part in enumerate(parts)]


def discover_env_map(auto_args: AutoMapEnvArgs,
                     config_variable_name: str,
                     environ: Optional[Mapping[str, str]] = None) -> Dict[str, KeyPath]:
    """
    Find environment variables matching the auto-map prefix.

    Names that are not valid unicode, or that do not produce a valid key path
    after the transform, are skipped.
    """
    environ = os.environ if environ is None else environ
    prefix = (auto_args.prefix or config_variable_name) + auto_args.divider

    discovered = {}
    for name in environ:
        if not is_valid_unicode(name) or not name.startswith(prefix):
            continue
        key = name[len(prefix):]
        try:
            key_path = KeyPath.parse(auto_args.transform(key).replace(auto_args.divider, "."))
        except ValueError as e:
            log.debug(f"DEBUG [toml_env.discover_env_map]: Skipping '{name}': {e}")
            continue
        discovered[name] = key_path
    log.debug(f"DEBUG [toml_env.discover_env_map]: Discovered {len(discovered)} variables with prefix '{prefix}'")
    return discovered


def build_env_map(map_env: Optional[Mapping[str, Union[KeyPath, str]]] = None,
                  auto_args: Optional[AutoMapEnvArgs] = None,
                  config_variable_name: str = "CONFIG",
                  environ: Optional[Mapping[str, str]] = None) -> Dict[str, KeyPath]:
    """
    Combine explicit and auto-discovered mappings, sorted by variable name.

    Explicit mappings win over discovered ones for the same variable. The
    sort order is what lets ``LIST__0``, ``LIST__1``, ... fill an array in
    index order.

    Raises:
        InvalidKeyPathError: If an explicit mapping is a malformed string.
    """
    effective = {}
    for name, key_path in (map_env or {}).items():
        effective[name] = KeyPath.parse(key_path) if isinstance(key_path, str) else key_path

    if auto_args is not None:
        for name, key_path in discover_env_map(auto_args, config_variable_name, environ).items():
            effective.setdefault(name, key_path)

    return {name: effective[name] for name in sorted(effective, key=env_sort_key)}


def load_env(map_env: Optional[Mapping[str, Union[KeyPath, str]]] = None,
             auto_args: Optional[AutoMapEnvArgs] = None,
             config_variable_name: str = "CONFIG",
             output: Logging = NoLogging(),
             environ: Optional[Mapping[str, str]] = None) -> Optional[Tuple[dict, List[str]]]:
    """
    Build a config tree from the mapped environment variables.

    Args:
        map_env: Explicit variable name -> key path mapping.
        auto_args: Auto-discovery settings, or None to disable it.
        config_variable_name: Default auto-discovery prefix.
        output: Logging mode for progress messages.
        environ: Environment to read (``os.environ`` by default).

    Returns:
        ``(tree, names)`` where ``names`` lists the variables that were set,
        or None if no mapped variable is set.

    Raises:
        EnvironmentVariableError: A mapped variable is not valid unicode.
        EnvironmentInsertError: A value could not be placed at its key path.
    """
    environ = os.environ if environ is None else environ
    env_map = build_env_map(map_env, auto_args, config_variable_name, environ)
    if not env_map:
        return None

    tree: Dict[str, Any] = {}
    names = []
    for name, key_path in env_map.items():
        raw = read_env_var(name, environ)
        if raw is None:
            continue
        try:
            tree = insert_value(tree, key_path, parse_env_value(raw))
        except InsertError as e:
            raise EnvironmentInsertError(name, key_path) from e
        names.append(name)

    if not names:
        log.debug("DEBUG [toml_env.load_env]: None of the mapped variables are set.")
        return None

    output.emit(
        "Loading config from current environment variables:",
        "\n".join(f"{name} => {env_map[name]}" for name in names),
    )
    return tree, names
