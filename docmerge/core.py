"""
docmerge.core — Document values and canonical key order
=======================================================

DOCUMENT MODEL
══════════════

A document is a tree built from six kinds of value:

    Null, Boolean, Number, String      → DScalar(val)
    Array(v₁, ..., vₙ)                 → DArray((v₁, ..., vₙ))
    Object({k₁:v₁, ..., kₙ:vₙ})        → DObject(((k₁, v₁), ..., (kₙ, vₙ)))

Every value carries a `kind` tag and code that needs to tell values apart
dispatches on that tag, not on the Python class.  Values are immutable:
merging never edits an input, it builds a fresh output that may share
untouched subtrees with the inputs.


CANONICAL KEY ORDER
═══════════════════

Object entries are stored in canonical order:

    k₁ < k₂  ⟺  len(k₁) < len(k₂)
             or len(k₁) = len(k₂) and bytes(k₁) < bytes(k₂)

where len and bytes refer to the UTF-8 encoding.  So "b" sorts before "aa",
and "aa" before "ab".  This is the order binary document stores keep their
objects in, and it lets two objects be merged with a single linear pass
(see docmerge.merge).

A DObject does not sort its entries itself.  Producers are expected to hand
them over in canonical order: docmerge.formats.from_python and
docmerge.builder.Builder both do.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Optional


# ═══════════════════════════════════════════════════════════════════
#  KINDS
# ═══════════════════════════════════════════════════════════════════

class Kind(Enum):
    """Tag of a document value."""
    NULL = "null"
    BOOL = "boolean"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"

    @property
    def is_container(self) -> bool:
        return self is Kind.ARRAY or self is Kind.OBJECT


def scalar_kind(val: Any) -> Kind:
    """Kind of a raw scalar.  bool is tested before int (bool subclasses int)."""
    if val is None:
        return Kind.NULL
    if isinstance(val, bool):
        return Kind.BOOL
    if isinstance(val, (int, float)):
        return Kind.NUMBER
    if isinstance(val, str):
        return Kind.STRING
    raise TypeError(f"Not a document scalar: {val!r} ({type(val).__name__})")


# ═══════════════════════════════════════════════════════════════════
#  KEY ORDER
# ═══════════════════════════════════════════════════════════════════

def key_order(key: str) -> tuple[int, bytes]:
    """Sort key giving the canonical order: length first, then bytes."""
    raw = key.encode("utf-8")
    return (len(raw), raw)


def compare_keys(a: str, b: str) -> int:
    """Three-way canonical comparison of two keys.  Returns -1, 0 or 1."""
    if a == b:
        return 0
    ka = key_order(a)
    kb = key_order(b)
    return -1 if ka < kb else 1


def is_canonical(entries) -> bool:
    """True if the keys of `entries` are strictly increasing in canonical order."""
    prev = None
    for key, _ in entries:
        cur = key_order(key)
        if prev is not None and cur <= prev:
            return False
        prev = cur
    return True


# ═══════════════════════════════════════════════════════════════════
#  VALUES
# ═══════════════════════════════════════════════════════════════════

class DVal:
    """Base class for document values.  Not instantiated directly."""
    __slots__ = ()

    @property
    def kind(self) -> Kind:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class DScalar(DVal):
    """
    A leaf value: None, bool, int/float or str.

    Examples:
        DScalar(None)
        DScalar(True)
        DScalar(42)
        DScalar("hello")
    """
    val: Any

    def __post_init__(self):
        scalar_kind(self.val)

    @property
    def kind(self) -> Kind:
        return scalar_kind(self.val)

    def __eq__(self, other) -> bool:
        # Keep True and 1 apart, they are different kinds.
        if not isinstance(other, DScalar):
            return NotImplemented
        return self.kind is other.kind and self.val == other.val

    def __hash__(self) -> int:
        return hash((self.kind, self.val))

    def __repr__(self) -> str:
        return f"DScalar({self.val!r})"


@dataclass(frozen=True, slots=True)
class DArray(DVal):
    """
    An ordered sequence of document values.

    Examples:
        DArray((DScalar(1), DScalar(2), DScalar(3)))    # [1, 2, 3]
    """
    items: tuple[DVal, ...] = ()

    def __init__(self, items=()):
        object.__setattr__(self, 'items', tuple(items))

    @property
    def kind(self) -> Kind:
        return Kind.ARRAY

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[DVal]:
        return iter(self.items)

    def __repr__(self) -> str:
        if len(self.items) <= 5:
            return f"DArray({list(self.items)})"
        return f"DArray([{self.items[0]!r}, ..., {self.items[-1]!r}] len={len(self.items)})"


@dataclass(frozen=True, slots=True)
class DObject(DVal):
    """
    A mapping of string keys to document values, stored as a tuple of
    (key, value) pairs in canonical key order.

    Examples:
        DObject((("a", DScalar(1)), ("bb", DScalar(2))))
    """
    entries: tuple[tuple[str, DVal], ...] = ()

    def __init__(self, entries=()):
        object.__setattr__(self, 'entries', tuple((k, v) for k, v in entries))

    @property
    def kind(self) -> Kind:
        return Kind.OBJECT

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[tuple[str, DVal]]:
        return iter(self.entries)

    def __contains__(self, key: str) -> bool:
        return self._find(key) is not None

    def keys(self) -> list[str]:
        return [k for k, _ in self.entries]

    def get(self, key: str, default: Optional[DVal] = None) -> Optional[DVal]:
        """Point lookup by binary search.  Relies on canonical order."""
        i = self._find(key)
        return default if i is None else self.entries[i][1]

    def __getitem__(self, key: str) -> DVal:
        i = self._find(key)
        if i is None:
            raise KeyError(key)
        return self.entries[i][1]

    def _find(self, key: str) -> Optional[int]:
        target = key_order(key)
        lo, hi = 0, len(self.entries)
        while lo < hi:
            mid = (lo + hi) // 2
            probe = key_order(self.entries[mid][0])
            if probe < target:
                lo = mid + 1
            elif probe > target:
                hi = mid
            else:
                return mid
        return None

    def __repr__(self) -> str:
        if len(self.entries) <= 3:
            return f"DObject({dict(self.entries)})"
        return f"DObject({{...}} len={len(self.entries)})"


def is_object(val: Optional[DVal]) -> bool:
    return val is not None and val.kind is Kind.OBJECT


def is_array(val: Optional[DVal]) -> bool:
    return val is not None and val.kind is Kind.ARRAY
