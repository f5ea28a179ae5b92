# toml_env/output.py
"""
toml_env.output
---------------

Logging modes for ``initialize()``.

Configuration is usually loaded before an application has set up its
logging, so the progress messages of ``initialize()`` go through a small
emitter chosen by the caller instead of straight to ``logging``:

    - ``NoLogging``: discard everything (the default).
    - ``StdOutLogging``: print to standard output.
    - ``LogLogging``: forward to a ``logging.Logger`` at INFO level.

Any object with a matching ``emit`` method can be passed as ``Args.logging``.
"""

import logging
from typing import Optional

import click

PACKAGE_NAME = "toml_env"


class Logging:
    """Base logging mode. ``emit`` receives a message and optional detail block."""

    enabled = True

    def emit(self, message: str, detail: Optional[str] = None) -> None:
        raise NotImplementedError


class NoLogging(Logging):
    enabled = False

    def emit(self, message: str, detail: Optional[str] = None) -> None:
        pass


class StdOutLogging(Logging):
    """
    Print ``INFO toml_env: <message>`` lines to standard output.

    Useful when the loaded configuration is what configures the logging
    system. The detail block is printed in blue.
    """

    def emit(self, message: str, detail: Optional[str] = None) -> None:
        line = f"INFO {PACKAGE_NAME}: {message}"
        if detail:
            line = f"{line}\n{click.style(detail, fg='blue')}"
        click.echo(line)


class LogLogging(Logging):
    """Forward messages to ``logger`` (the ``toml_env`` logger by default)."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(PACKAGE_NAME)

    def emit(self, message: str, detail: Optional[str] = None) -> None:
        if detail:
            self.logger.info("%s\n%s", message, detail)
        else:
            self.logger.info("%s", message)
