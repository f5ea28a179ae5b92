# toml_env/provenance.py
"""
toml_env.provenance
-------------------

Where a piece of configuration came from.

Each source loaded by ``initialize()`` is labelled with a ``ConfigSource``.
When two sources are merged their labels are combined into a
``MergedSource``, so the label of the final configuration is a tree that
mirrors the merge history. Labels are only used to build error messages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Union


@dataclass(frozen=True)
class DotEnvSource:
    """Configuration from a dotenv TOML file.

    Attributes:
        path: Path of the dotenv file.
        variable_names: Scalar keys of the file exported to the environment.
    """

    path: Path
    variable_names: tuple[str, ...] = field(default=())

    def __str__(self) -> str:
        return f"dotenv TOML file {str(self.path)!r}"


@dataclass(frozen=True)
class FileSource:
    """Configuration from a TOML config file."""

    path: Path

    def __str__(self) -> str:
        return f"config TOML file {str(self.path)!r}"


@dataclass(frozen=True)
class EnvironmentSource:
    """Configuration from environment variables."""

    variable_names: tuple[str, ...]

    def __str__(self) -> str:
        return f"environment variables {', '.join(self.variable_names)}"


@dataclass(frozen=True)
class MergedSource:
    """Configuration merged from two sources.

    Attributes:
        from_source: The higher precedence side, merged from.
        into_source: The lower precedence side, merged into.
    """

    from_source: ConfigSource
    into_source: ConfigSource

    def __str__(self) -> str:
        return f"({self.from_source}) merged into ({self.into_source})"


ConfigSource = Union[DotEnvSource, FileSource, EnvironmentSource, MergedSource]


def flatten_sources(source: ConfigSource) -> list[ConfigSource]:
    """List the leaf sources of a provenance tree, lowest precedence first.

    Examples:
        >>> merged = MergedSource(FileSource(Path("app.toml")), DotEnvSource(Path(".env.toml")))
        >>> [str(s) for s in flatten_sources(merged)]
        ["dotenv TOML file '.env.toml'", "config TOML file 'app.toml'"]
    """
    if isinstance(source, MergedSource):
        return flatten_sources(source.into_source) + flatten_sources(source.from_source)
    return [source]
