# toml_env/utils.py
"""
toml_env.utils
--------------

Shared helpers for path handling and environment access.
"""

import os
from pathlib import Path
from typing import Mapping, Optional, Union

from .exceptions import EnvironmentVariableError


def expand_path(path: Union[str, os.PathLike, None]) -> Optional[Path]:
    """Expand ~ and environment variables in a path.

    Handles both user home directory expansion (~) and environment
    variable expansion ($VAR, ${VAR}).

    Args:
        path: Path to expand, or None.

    Returns:
        Expanded Path, or None if input was None.

    Examples:
        >>> expand_path("~/configs/app.toml")
        PosixPath('/home/user/configs/app.toml')
        >>> expand_path(None)
        None
    """
    if path is None:
        return None
    return Path(os.path.expandvars(os.path.expanduser(os.fspath(path))))


def is_valid_unicode(text: str) -> bool:
    """False for strings carrying undecodable bytes (surrogate escapes from ``os.environ``)."""
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def read_env_var(name: str, environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Read an environment variable, ``None`` when it is not set.

    Raises:
        EnvironmentVariableError: If the value is not valid unicode.
    """
    environ = os.environ if environ is None else environ
    value = environ.get(name)
    if value is not None and not is_valid_unicode(value):
        raise EnvironmentVariableError(name)
    return value
