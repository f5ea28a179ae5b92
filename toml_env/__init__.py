# toml_env/__init__.py
"""
toml_env – Layered TOML configuration from files and environment variables.

Import `initialize` and `Args` from `toml_env.loader`, `KeyPath` from
`toml_env.keypath`, `AutoMapEnvArgs` from `toml_env.environment`, the
logging modes from `toml_env.output` and errors from `toml_env.exceptions`.

Sources, lowest to highest precedence:
    - ``.env.toml`` file: scalars become environment variables, the
      ``[CONFIG]`` table is configuration
    - ``CONFIG`` environment variable: inline TOML or a path to a TOML file
    - environment variables mapped to key paths, explicitly or by prefix
    - an explicit TOML config file
"""

__version__ = "0.1.0"
