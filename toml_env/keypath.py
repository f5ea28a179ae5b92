# toml_env/keypath.py
"""
toml_env.keypath
----------------

Dot-notation key paths into a TOML value tree, and insertion of values at
those paths.

A tree is what ``tomli`` produces: ``dict`` for tables, ``list`` for arrays
and plain scalars for everything else. A key path such as ``servers.0.host``
addresses the ``host`` property of the first element of the ``servers``
array. Segments made only of digits are array indices, every other segment
is a table property.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Union

from .exceptions import (
    ArrayIndexCannotIndexError,
    ArrayOutOfBoundsError,
    InvalidKeyPathError,
    TablePropertyCannotIndexError,
)

_INDEX_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class TableProperty:
    """A path segment naming a key of a table."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ArrayIndex:
    """A path segment naming a position in an array."""

    index: int

    def __str__(self) -> str:
        return str(self.index)


PathElement = Union[TableProperty, ArrayIndex]


class KeyPath:
    """
    An immutable sequence of path elements addressing a location in a tree.

    Build one from a dotted string with ``KeyPath.parse``. The empty path,
    ``KeyPath()``, addresses the root of the tree.

    Examples:
        >>> path = KeyPath.parse("servers.0.host")
        >>> list(path)
        [TableProperty(name='servers'), ArrayIndex(index=0), TableProperty(name='host')]
        >>> path.resolve({"servers": [{"host": "alpha"}]})
        'alpha'
    """

    __slots__ = ("_elements",)

    def __init__(self, elements: Iterable[PathElement] = ()):
        self._elements = tuple(elements)

    @classmethod
    def parse(cls, path: str) -> KeyPath:
        """Parse a dotted string into a KeyPath.

        Parsing is strict: an empty string or an empty segment (``"a..b"``,
        ``".a"``, ``"a."``) raises ``InvalidKeyPathError``.

        Args:
            path: Dot-notation path, e.g. ``"database.replicas.1"``.

        Returns:
            The parsed KeyPath.

        Raises:
            InvalidKeyPathError: If the string is empty, has an empty segment,
                or has an index too long to convert to an int.
        """
        if not path:
            raise InvalidKeyPathError(path)

        elements = []
        for segment in path.split("."):
            if not segment:
                raise InvalidKeyPathError(path)
            if _INDEX_RE.fullmatch(segment):
                try:
                    index = int(segment)
                except ValueError as e:
                    raise InvalidKeyPathError(path) from e
                elements.append(ArrayIndex(index))
            else:
                elements.append(TableProperty(segment))
        return cls(elements)

    def resolve(self, tree: Any) -> Any:
        """Return the value at this path in ``tree``, or ``None``.

        ``None`` is returned when a segment is missing, when an index is past
        the end of an array, or when a segment does not fit the node it is
        applied to (a property on a non-table, an index on a non-array).
        """
        node = tree
        for element in self._elements:
            if isinstance(element, TableProperty):
                if not isinstance(node, dict) or element.name not in node:
                    return None
                node = node[element.name]
            else:
                if not isinstance(node, list) or element.index >= len(node):
                    return None
                node = node[element.index]
        return node

    def __iter__(self) -> Iterator[PathElement]:
        return iter(self._elements)

    def __len__(self) -> int:
        return len(self._elements)

    def __getitem__(self, item):
        if isinstance(item, slice):
            return KeyPath(self._elements[item])
        return self._elements[item]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyPath):
            return NotImplemented
        return self._elements == other._elements

    def __hash__(self) -> int:
        return hash(self._elements)

    def __str__(self) -> str:
        return ".".join(str(element) for element in self._elements)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r})"


def _new_container(element: PathElement) -> Union[dict, list]:
    """Empty container able to hold ``element``."""
    return [] if isinstance(element, ArrayIndex) else {}


def insert_value(root: Any, path: KeyPath, value: Any) -> Any:
    """
    Insert ``value`` at ``path`` within ``root``, creating missing containers.

    Containers along the path are modified in place. Missing tables and arrays
    are created to fit the next segment. For arrays, an index equal to the
    current length appends; any larger index is an error, so several values
    destined for one array must arrive in ascending index order.

    Args:
        root: The tree to insert into.
        path: Where to insert. The empty path replaces ``root`` entirely.
        value: The value to insert.

    Returns:
        The resulting root: ``root`` itself unless ``path`` is empty, in which
        case ``value`` is returned.

    Raises:
        TablePropertyCannotIndexError: A property segment met a non-table.
        ArrayIndexCannotIndexError: An index segment met a non-array.
        ArrayOutOfBoundsError: An index is greater than the array length.
    """
    return _insert(root, path, 0, value)


def _insert(node: Any, path: KeyPath, position: int, value: Any) -> Any:
    if position == len(path):
        return value

    element = path[position]
    is_last = position + 1 == len(path)

    if isinstance(element, TableProperty):
        if not isinstance(node, dict):
            raise TablePropertyCannotIndexError(element.name, node, path)
        key = element.name
        if key not in node:
            if is_last:
                node[key] = value
            else:
                child = _new_container(path[position + 1])
                node[key] = _insert(child, path, position + 1, value)
        elif is_last:
            node[key] = value
        else:
            node[key] = _insert(node[key], path, position + 1, value)
        return node

    if not isinstance(node, list):
        raise ArrayIndexCannotIndexError(element.index, node, path)
    index = element.index
    if index > len(node):
        raise ArrayOutOfBoundsError(index, node, path)
    if index == len(node):
        if is_last:
            node.insert(index, value)
        else:
            child = _new_container(path[position + 1])
            node.insert(index, _insert(child, path, position + 1, value))
    elif is_last:
        node[index] = value
    else:
        node[index] = _insert(node[index], path, position + 1, value)
    return node
