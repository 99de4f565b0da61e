"""
docmerge.cursor — Lazy, read-only traversal of document containers.

A cursor walks one container in stored order and yields tokens:

    {"a": 1, "b": [2]}   →  BEGIN_OBJECT  KEY("a")  SCALAR(1)
                            KEY("b")  BEGIN_ARRAY  SCALAR(2)  END_ARRAY
                            END_OBJECT  DONE

With skip_nested=True a nested container is not unrolled; it comes back
as a single CONTAINER_REF token whose value is the nested DVal itself:

    {"a": 1, "b": [2]}   →  BEGIN_OBJECT  KEY("a")  SCALAR(1)
                            KEY("b")  CONTAINER_REF([2])
                            END_OBJECT  DONE

The cursor never reorders anything and never touches the values it walks.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Iterator, Optional

from .core import DArray, DObject, DVal, Kind


class TokenKind(Enum):
    BEGIN_OBJECT = auto()
    BEGIN_ARRAY = auto()
    KEY = auto()
    SCALAR = auto()
    CONTAINER_REF = auto()
    END_OBJECT = auto()
    END_ARRAY = auto()
    DONE = auto()


@dataclass(frozen=True, slots=True)
class Token:
    """One traversal step.  `value` is the key, scalar or container ref."""
    kind: TokenKind
    value: Any = None

    def __repr__(self) -> str:
        if self.value is None:
            return self.kind.name
        return f"{self.kind.name}({self.value!r})"


DONE = Token(TokenKind.DONE)


class _Level:
    """Position inside one open container."""
    __slots__ = ("container", "index", "key_sent")

    def __init__(self, container: DVal):
        self.container = container
        self.index = 0
        self.key_sent = False


class Cursor:
    """
    Stateful walker over a single container.  Obtain one with open_cursor().

    The first call to next() returns the BEGIN token of the opened
    container; after its matching END every call returns DONE.
    """

    def __init__(self, container: DVal):
        if container is None or not container.kind.is_container:
            raise TypeError(f"Cursor needs an object or array, got {container!r}")
        self._root: Optional[DVal] = container
        self._stack: list[_Level] = []

    def next(self, skip_nested: bool = False) -> Token:
        if self._root is not None:
            root, self._root = self._root, None
            return self._enter(root)

        if not self._stack:
            return DONE

        top = self._stack[-1]
        if top.container.kind is Kind.OBJECT:
            entries = top.container.entries
            if top.index >= len(entries):
                self._stack.pop()
                return Token(TokenKind.END_OBJECT)
            key, val = entries[top.index]
            if not top.key_sent:
                top.key_sent = True
                return Token(TokenKind.KEY, key)
            top.key_sent = False
            top.index += 1
        else:
            items = top.container.items
            if top.index >= len(items):
                self._stack.pop()
                return Token(TokenKind.END_ARRAY)
            val = items[top.index]
            top.index += 1

        if not val.kind.is_container:
            return Token(TokenKind.SCALAR, val)
        if skip_nested:
            return Token(TokenKind.CONTAINER_REF, val)
        return self._enter(val)

    def _enter(self, container: DVal) -> Token:
        self._stack.append(_Level(container))
        if container.kind is Kind.OBJECT:
            return Token(TokenKind.BEGIN_OBJECT)
        return Token(TokenKind.BEGIN_ARRAY)

    def iter_tokens(self, skip_nested: bool = False) -> Iterator[Token]:
        """Drain the cursor, DONE excluded."""
        while (tok := self.next(skip_nested)).kind is not TokenKind.DONE:
            yield tok


def open_cursor(container: DVal) -> Cursor:
    """Begin traversal of an object or array in stored order."""
    return Cursor(container)


def iter_entries(obj: DObject) -> Iterator[tuple[str, DVal]]:
    """Yield the (key, value) pairs of an object without descending into values."""
    key = None
    for tok in open_cursor(obj).iter_tokens(skip_nested=True):
        if tok.kind is TokenKind.KEY:
            key = tok.value
        elif tok.kind in (TokenKind.SCALAR, TokenKind.CONTAINER_REF):
            yield key, tok.value


def iter_elements(arr: DArray) -> Iterator[DVal]:
    """Yield the elements of an array, nested containers passed through whole."""
    for tok in open_cursor(arr).iter_tokens(skip_nested=True):
        if tok.kind in (TokenKind.SCALAR, TokenKind.CONTAINER_REF):
            yield tok.value
