# toml_env/loader.py
"""
toml_env.loader
---------------

Loads configuration from layered sources and validates it into a
caller-supplied type.

Sources (lowest to highest precedence):
1.  **Dotenv file (`dotenv_path`, default `.env.toml`)**: scalar entries are
    exported as environment variables; a table named after the config
    variable (default `[CONFIG]`) is configuration.
2.  **Config variable (`config_variable_name`, default `CONFIG`)**: the
    variable holds either inline TOML or the path of a TOML file.
3.  **Mapped environment variables (`map_env`, `auto_map_env`)**: each
    variable is coerced to a scalar and placed at its key path.
4.  **Config file (`config_path`)**: an explicit TOML file.

Tables are merged key by key; arrays and scalars from a higher precedence
source replace the lower one. A source that is absent (unset variable,
missing file) is skipped; a source that is present but broken is an error.
"""

import copy
import datetime
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional, Tuple, Union

import tomli
import toml
from pydantic import TypeAdapter, ValidationError

from .environment import AutoMapEnvArgs, load_env
from .exceptions import (
    ConfigVariableError,
    DeserializeError,
    DotEnvConfigError,
    DotEnvFormatError,
    DotEnvKeyError,
    FileReadError,
    MergeConflictError,
    MergeError,
    TomlParseError,
)
from .keypath import KeyPath
from .output import Logging, NoLogging
from .provenance import ConfigSource, DotEnvSource, EnvironmentSource, FileSource, MergedSource
from .utils import expand_path, read_env_var

log = logging.getLogger(__name__)

DEFAULT_DOTENV_PATH = ".env.toml"
DEFAULT_CONFIG_VARIABLE_NAME = "CONFIG"

SourceValue = Tuple[Any, ConfigSource]
PathLike = Union[str, os.PathLike]


@dataclass(frozen=True)
class Args:
    """
    Where ``initialize()`` looks for configuration.

    Attributes:
        dotenv_path: Path of the ``.env.toml`` format file.
        config_path: Optional explicit config file, highest precedence.
        config_variable_name: Name of the environment variable holding the
            config (inline TOML or a file path), and of the config table
            inside the dotenv file.
        logging: Logging mode for progress messages, see ``toml_env.output``.
        map_env: Environment variable name -> key path (``KeyPath`` or
            dotted string).
        auto_map_env: Enables auto-discovery of mapped variables.
    """

    dotenv_path: PathLike = DEFAULT_DOTENV_PATH
    config_path: Optional[PathLike] = None
    config_variable_name: str = DEFAULT_CONFIG_VARIABLE_NAME
    logging: Logging = field(default_factory=NoLogging)
    map_env: Mapping[str, Union[KeyPath, str]] = field(default_factory=dict)
    auto_map_env: Optional[AutoMapEnvArgs] = None


# --- Helper Functions ---

def _shape(value: Any) -> str:
    if isinstance(value, dict):
        return "table"
    if isinstance(value, list):
        return "array"
    return "scalar"


def deep_merge(base: Any, updates: Any, _key: str = "") -> Any:
    """
    Recursively merge the `updates` tree into the `base` tree.

    - Creates a deep copy of `base` to avoid modifying the original.
    - If both values are tables, keys are merged recursively.
    - Otherwise the value from `updates` completely overwrites the value in
      `base`, provided both have the same shape. Scalars of different types
      replace each other freely.

    Args:
        base: The lower precedence tree.
        updates: The higher precedence tree.

    Returns:
        A new tree representing the merged result.

    Raises:
        MergeConflictError: If a key holds a table on one side and something
            else on the other, or an array on one side and a non-array on
            the other.
    """
    if not (isinstance(base, dict) and isinstance(updates, dict)):
        if _shape(base) != _shape(updates):
            raise MergeConflictError(_key or "<root>", base, updates)
        return copy.deepcopy(updates)

    merged = copy.deepcopy(base)
    for key, value_updates in updates.items():
        child_key = f"{_key}.{key}" if _key else key
        if key in merged:
            merged[key] = deep_merge(merged[key], value_updates, child_key)
        else:
            merged[key] = copy.deepcopy(value_updates)
    return merged


def merge_sources(lower: Optional[SourceValue], higher: Optional[SourceValue]) -> Optional[SourceValue]:
    """
    Merge two optional (tree, source) pairs, `higher` taking precedence.

    Raises:
        MergeError: If the trees cannot be merged, naming both sources.
    """
    if lower is None:
        return higher
    if higher is None:
        return lower

    try:
        merged = deep_merge(lower[0], higher[0])
    except MergeConflictError as e:
        raise MergeError(higher[1], lower[1], str(e)) from e
    return merged, MergedSource(from_source=higher[1], into_source=lower[1])


def _read_toml_file(path: Path) -> dict:
    """Read and parse a TOML file."""
    try:
        with open(path, mode='rb') as f:
            return tomli.load(f)
    except (tomli.TOMLDecodeError, UnicodeDecodeError) as e:
        raise TomlParseError(path) from e
    except OSError as e:
        raise FileReadError(path) from e


def _env_string(value: Any) -> str:
    """Render a TOML scalar as an environment variable value."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    return str(value)


# --- Sources ---

def load_config_variable(name: str, output: Logging = NoLogging()) -> Optional[SourceValue]:
    """
    Load config from the environment variable `name`.

    The value is parsed as inline TOML first. If that fails and the value is
    the path of an existing file, the file is parsed instead.

    Raises:
        ConfigVariableError: The value is neither TOML nor an existing file.
        EnvironmentVariableError: The value is not valid unicode.
        FileReadError, TomlParseError: The named file is unreadable.
    """
    value = read_env_var(name)
    if value is None:
        output.emit(f"No environment variable with the name {name} found, using default options.")
        return None

    try:
        config = tomli.loads(value)
    except tomli.TOMLDecodeError as parse_error:
        if not os.path.isfile(value):
            raise ConfigVariableError(name, value) from parse_error
        path = Path(value)
        log.debug(f"DEBUG [toml_env.load_config_variable]: '{name}' is not inline TOML, reading file {path}")
        config = _read_toml_file(path)
        output.emit(f"Options loaded from file specified in `{name}` environment variable: {str(path)!r}")
        return config, FileSource(path)

    output.emit(f"Options loaded from `{name}` environment variable")
    return config, EnvironmentSource((name,))


def load_dotenv(dotenv_path: PathLike,
                config_variable_name: str = DEFAULT_CONFIG_VARIABLE_NAME,
                target: Any = None,
                output: Logging = NoLogging(),
                environ: Optional[MutableMapping[str, str]] = None) -> Optional[SourceValue]:
    """
    Load a ``.env.toml`` format file.

    Scalar entries at the top level are exported into `environ`
    (``os.environ`` by default), overwriting existing values. A table named
    `config_variable_name` is the configuration held by the file; when
    `target` is given it is validated against it straight away.

    Returns:
        ``(config_table, DotEnvSource)``, or None if the file does not exist
        or holds no config table.

    Raises:
        DotEnvFormatError: The top level is not a table.
        DotEnvKeyError: The top level holds an array or a foreign table.
        DotEnvConfigError: The config table does not fit `target`.
        FileReadError, TomlParseError: The file is unreadable.
    """
    environ = os.environ if environ is None else environ
    path = Path(dotenv_path)
    if not path.exists():
        log.debug(f"DEBUG [toml_env.load_dotenv]: No dotenv file at {path}")
        return None

    output.emit(f"Loading config and environment variables from dotenv {str(path)!r}")
    document = _read_toml_file(path)
    if not isinstance(document, dict):
        raise DotEnvFormatError(path, document)
    if not document:
        return None

    config = None
    exported = []
    for key, value in document.items():
        if isinstance(value, dict):
            if key != config_variable_name:
                raise DotEnvKeyError(
                    key, path,
                    f"Only a table with {config_variable_name} is allowed in a .env.toml format file.",
                )
            if target is not None:
                try:
                    TypeAdapter(target).validate_python(value)
                except ValidationError as e:
                    raise DotEnvConfigError(key, path) from e
            config = value
        elif isinstance(value, list):
            raise DotEnvKeyError(key, path, f"Array values are not supported: {value!r}")
        else:
            try:
                environ[key] = _env_string(value)
            except (OSError, ValueError) as e:
                raise DotEnvKeyError(key, path, "cannot be exported as an environment variable") from e
            exported.append(key)

    if exported:
        output.emit(f"Set environment variables specified in {str(path)!r}:", "\n".join(exported))
    if config is None:
        return None
    return config, DotEnvSource(path, tuple(exported))


def load_config_file(config_path: Optional[PathLike], output: Logging = NoLogging()) -> Optional[SourceValue]:
    """
    Load an explicit TOML config file. A missing file is skipped.

    Raises:
        FileReadError, TomlParseError: The file is unreadable.
    """
    if config_path is None:
        return None
    path = Path(config_path)
    if not path.is_file():
        log.debug(f"DEBUG [toml_env.load_config_file]: Config file {path} not found, skipping.")
        return None

    output.emit(f"Loading config from file {str(path)!r}")
    return _read_toml_file(path), FileSource(path)


def _render_config(adapter: TypeAdapter, config: Any) -> str:
    dumped = adapter.dump_python(config, mode="json")
    if isinstance(dumped, dict):
        return toml.dumps(dumped)
    return repr(dumped)


# --- Entry point ---

def initialize(target: Any, args: Optional[Args] = None) -> Any:
    """
    Initialize configuration of type `target` from the sources in `args`.

    `target` is anything pydantic can validate into: a ``BaseModel``, a
    dataclass, a ``TypedDict``, ``dict[str, Any]``...

    Args:
        target: The type to validate the merged configuration into.
        args: Where to look for configuration; ``Args()`` by default.

    Returns:
        An instance of `target`, or None if no source held any configuration.

    Raises:
        TomlEnvError: Any present source is broken, sources cannot be merged,
            or the merged configuration does not fit `target`.
    """
    args = args or Args()
    output = args.logging
    name = args.config_variable_name

    config_variable_config = load_config_variable(name, output)
    log.debug(f"DEBUG [toml_env.initialize]: Collected config variable data: {config_variable_config}")

    # Must run before load_env: exported variables may be mapped
    dotenv_config = load_dotenv(expand_path(args.dotenv_path), name, target, output)
    log.debug(f"DEBUG [toml_env.initialize]: Collected dotenv data: {dotenv_config}")

    env_config = None
    env_result = load_env(args.map_env, args.auto_map_env, name, output)
    if env_result is not None:
        tree, names = env_result
        env_config = (tree, EnvironmentSource(tuple(names)))
    log.debug(f"DEBUG [toml_env.initialize]: Collected env data: {env_config}")

    file_config = load_config_file(expand_path(args.config_path), output)
    log.debug(f"DEBUG [toml_env.initialize]: Collected file data: {file_config}")

    merged = None
    for source in (dotenv_config, config_variable_config, env_config, file_config):
        merged = merge_sources(merged, source)

    if merged is None:
        log.debug("DEBUG [toml_env.initialize]: No configuration found.")
        return None

    tree, source = merged
    log.debug(f"DEBUG [toml_env.initialize]: Final merged data from {source}: {tree}")
    adapter = TypeAdapter(target)
    try:
        config = adapter.validate_python(tree)
    except ValidationError as e:
        raise DeserializeError(source) from e

    if getattr(output, "enabled", True):
        output.emit("Parsed configuration:", _render_config(adapter, config))
    return config
