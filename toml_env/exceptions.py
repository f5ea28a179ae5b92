# toml_env/exceptions.py
"""
toml_env.exceptions
-------------------

Custom exceptions for toml_env.

Every error raised while initializing configuration derives from
``TomlEnvError``. The underlying cause (I/O, TOML or validation error) is
chained with ``raise ... from``.
"""


class TomlEnvError(Exception):
    """
    Base class for all toml_env errors.
    """


class InvalidKeyPathError(TomlEnvError, ValueError):
    """
    Raised when a string cannot be parsed into a KeyPath.
    """

    def __init__(self, path):
        super().__init__(f"Unable to parse path {path!r} into a key path")
        self.path = path


# --- Insertion ---

class InsertError(TomlEnvError):
    """
    Raised when a value cannot be inserted into a tree at a key path.
    """

    def __init__(self, message, path=None):
        if path is not None:
            message = f"{message} (inserting at {str(path)!r})"
        super().__init__(message)
        self.path = path


class TablePropertyCannotIndexError(InsertError):
    """A table property segment was applied to something that is not a table."""

    def __init__(self, property, value, path=None):
        super().__init__(
            f"Cannot index {type(value).__name__} value {value!r} with table property {property!r}",
            path,
        )
        self.property = property
        self.value = value


class ArrayIndexCannotIndexError(InsertError):
    """An array index segment was applied to something that is not an array."""

    def __init__(self, index, value, path=None):
        super().__init__(
            f"Cannot index {type(value).__name__} value {value!r} with array index {index}",
            path,
        )
        self.index = index
        self.value = value


class ArrayOutOfBoundsError(InsertError):
    """An array index is beyond the end of the array (appending is allowed)."""

    def __init__(self, index, array, path=None):
        super().__init__(
            f"Array index {index} is out of bounds for array of length {len(array)}",
            path,
        )
        self.index = index
        self.array = array


# --- Environment ---

class EnvironmentVariableError(TomlEnvError):
    """
    Raised when an environment variable is present but cannot be read.
    """

    def __init__(self, name, reason="value is not valid unicode"):
        super().__init__(f"Error reading {name} environment variable: {reason}")
        self.name = name


class EnvironmentInsertError(TomlEnvError):
    """
    Raised when a mapped environment variable cannot be placed in the config.
    """

    def __init__(self, name, key_path):
        super().__init__(f"Error mapping environment variable {name} to config key {str(key_path)!r}")
        self.name = name
        self.key_path = key_path


class ConfigVariableError(TomlEnvError):
    """
    Raised when the config variable is neither valid TOML nor an existing file.
    """

    def __init__(self, name, value):
        super().__init__(
            f"Error parsing config environment variable ({name}={value!r}) as the config "
            "or if it is a filename, the file does not exist."
        )
        self.name = name
        self.value = value


# --- Files ---

class FileReadError(TomlEnvError):
    """Raised when a TOML file exists but cannot be read."""

    def __init__(self, path):
        super().__init__(f"Error reading TOML file {str(path)!r}")
        self.path = path


class TomlParseError(TomlEnvError):
    """Raised when a TOML file cannot be parsed."""

    def __init__(self, path):
        super().__init__(f"Error parsing TOML file {str(path)!r}")
        self.path = path


class DotEnvFormatError(TomlEnvError):
    """Raised when the top level of a dotenv TOML file is not a table."""

    def __init__(self, path, value):
        super().__init__(
            f"Error parsing {str(path)!r} as `.env.toml` format file: {value!r}. "
            "Top level should be a table."
        )
        self.path = path
        self.value = value


class DotEnvKeyError(TomlEnvError):
    """Raised when a top level dotenv entry cannot become an environment variable."""

    def __init__(self, key, path, advice):
        super().__init__(f"Cannot parse {key} as environment variable in {str(path)!r}. Advice: {advice}")
        self.key = key
        self.path = path
        self.advice = advice


class DotEnvConfigError(TomlEnvError):
    """Raised when the config table of a dotenv file does not fit the target type."""

    def __init__(self, name, path):
        super().__init__(f"Error parsing config key ({name}) in TOML config file {str(path)!r}")
        self.name = name
        self.path = path


# --- Merging & deserialization ---

class MergeConflictError(TomlEnvError):
    """
    Raised by deep_merge when the same key holds incompatible shapes.
    """

    def __init__(self, key, base_value, update_value):
        super().__init__(
            f"Cannot merge {type(update_value).__name__} into {type(base_value).__name__} at key {key!r}"
        )
        self.key = key
        self.base_value = base_value
        self.update_value = update_value


class MergeError(TomlEnvError):
    """
    Raised when two configuration sources cannot be merged.
    """

    def __init__(self, from_source, into_source, reason=""):
        message = f"Error merging configuration {from_source} into {into_source}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.from_source = from_source
        self.into_source = into_source


class DeserializeError(TomlEnvError):
    """
    Raised when the merged configuration does not fit the target type.
    """

    def __init__(self, source):
        super().__init__(f"Error parsing merged configuration from {source}")
        self.source = source
