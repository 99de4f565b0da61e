"""
docmerge.merge — Recursive two-way merge of documents.

Given two documents a and b, build a new document holding both, with b
taking precedence wherever they disagree.

RULES:
    • a absent or not an object       → b unchanged
    • b absent or not an object       → a unchanged
    • both objects                    → merge key by key:
        key only in a                 → a's value, untouched
        key only in b                 → b's value, untouched
        key in both, both objects     → merge the two recursively
        key in both, both arrays      → a's elements then b's
                                        (only when merge_arrays is on)
        key in both, anything else    → b's value

ALGORITHM (Strategy.SORTED):
    Object entries are stored in canonical key order (docmerge.core), so
    the two key sets can be merged like two sorted runs:

        while both cursors have entries:
            ka < kb  → emit a's entry, advance a
            ka > kb  → emit b's entry, advance b
            ka = kb  → emit the resolved entry, advance both
        emit whatever is left of a, then of b

    That is O(n + m) key comparisons, and the output comes out already in
    canonical order.

    Strategy.LOOKUP is the older formulation: walk a, look every key up in
    b, then append b's leftover keys.  It does not rely on key order, and
    the builder sorts the result when the object closes.  On canonical
    inputs both strategies give the same document.

Arrays are never merged element by element; only whole arrays are
concatenated.  Each call is a pure function of its arguments.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .builder import Builder
from .core import DObject, DVal, compare_keys, is_array, is_canonical, is_object
from .cursor import iter_elements, iter_entries


_logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  OPTIONS
# ═══════════════════════════════════════════════════════════════════

class Strategy(Enum):
    """How two objects' key sets are lined up."""
    SORTED = "sorted"   # linear merge-join, needs canonical order
    LOOKUP = "lookup"   # per-key lookup, order independent


@dataclass(frozen=True)
class MergeOptions:
    """
    Knobs for merge_with_options().

    merge_arrays:  concatenate arrays found under the same key instead of
                   letting b's array replace a's.
    strategy:      Strategy.SORTED or Strategy.LOOKUP.
    check_order:   verify canonical key order of every object that gets
                   decomposed and raise KeyOrderError if it is broken.
    """
    merge_arrays: bool = True
    strategy: Strategy = Strategy.SORTED
    check_order: bool = False


DEFAULT_OPTIONS = MergeOptions()


class KeyOrderError(ValueError):
    """An input object's keys are not in canonical order."""

    def __init__(self, obj: DObject):
        self.keys = obj.keys()
        super().__init__(f"object keys not in canonical order: {self.keys!r}")


# ═══════════════════════════════════════════════════════════════════
#  PUBLIC ENTRY POINTS
# ═══════════════════════════════════════════════════════════════════

def merge(a: Optional[DVal], b: Optional[DVal]) -> Optional[DVal]:
    """
    Merge b into a, concatenating arrays that share a key.

    None means "no document": merge(x, None) is x, merge(None, x) is x,
    and merge(None, None) is None.

        merge({"a": {"x": 1, "y": 2}}, {"a": {"y": 3, "z": 4}})
            → {"a": {"x": 1, "y": 3, "z": 4}}
    """
    return merge_with_options(a, b, DEFAULT_OPTIONS)


def merge_with_option(a: Optional[DVal], b: Optional[DVal],
                      merge_arrays: bool) -> Optional[DVal]:
    """Same as merge(), with array concatenation switched by the caller."""
    return merge_with_options(a, b, MergeOptions(merge_arrays=merge_arrays))


def merge_with_options(a: Optional[DVal], b: Optional[DVal],
                       options: MergeOptions = DEFAULT_OPTIONS) -> Optional[DVal]:
    """Merge two documents under explicit MergeOptions."""
    for arg in (a, b):
        if arg is not None and not isinstance(arg, DVal):
            raise TypeError(f"Expected a DVal or None, got {type(arg).__name__}")
    if a is None:
        return b
    if b is None:
        return a
    _logger.debug("merging documents (strategy=%s, merge_arrays=%s)",
                  options.strategy.value, options.merge_arrays)
    return _merge_recursive(a, b, options)


def merge_values(a: Optional[DVal], b: Optional[DVal], merge_arrays: bool) -> Optional[DVal]:
    """The recursive core with the default strategy.  Absent inputs allowed."""
    return _merge_recursive(a, b, MergeOptions(merge_arrays=merge_arrays))


# ═══════════════════════════════════════════════════════════════════
#  ENGINE
# ═══════════════════════════════════════════════════════════════════

def _merge_recursive(a: Optional[DVal], b: Optional[DVal],
                     options: MergeOptions) -> Optional[DVal]:
    if not is_object(a):
        return b
    if not is_object(b):
        return a

    if options.check_order:
        for obj in (a, b):
            if not is_canonical(obj.entries):
                raise KeyOrderError(obj)

    builder = Builder()
    builder.begin_object()
    if options.strategy is Strategy.LOOKUP:
        _join_by_lookup(a, b, builder, options)
    else:
        _join_sorted(a, b, builder, options)
    return builder.end_object()


def _join_sorted(a: DObject, b: DObject, builder: Builder, options: MergeOptions) -> None:
    """Linear merge-join of two canonically ordered objects."""
    it_a = iter_entries(a)
    it_b = iter_entries(b)
    cur_a = next(it_a, None)
    cur_b = next(it_b, None)

    while cur_a is not None and cur_b is not None:
        c = compare_keys(cur_a[0], cur_b[0])
        if c < 0:
            _emit(builder, *cur_a)
            cur_a = next(it_a, None)
        elif c > 0:
            _emit(builder, *cur_b)
            cur_b = next(it_b, None)
        else:
            builder.key(cur_a[0])
            _merge_value(cur_a[1], cur_b[1], builder, options)
            cur_a = next(it_a, None)
            cur_b = next(it_b, None)

    # At most one side has entries left
    while cur_a is not None:
        _emit(builder, *cur_a)
        cur_a = next(it_a, None)
    while cur_b is not None:
        _emit(builder, *cur_b)
        cur_b = next(it_b, None)


def _join_by_lookup(a: DObject, b: DObject, builder: Builder, options: MergeOptions) -> None:
    """Walk a, look each key up in b, then add b's keys that a lacks."""
    b_index = dict(iter_entries(b))
    seen = set()
    for key, val_a in iter_entries(a):
        seen.add(key)
        builder.key(key)
        if key in b_index:
            _merge_value(val_a, b_index[key], builder, options)
        else:
            builder.value(val_a)
    for key, val_b in iter_entries(b):
        if key not in seen:
            _emit(builder, key, val_b)


def _emit(builder: Builder, key: str, val: DVal) -> None:
    builder.key(key)
    builder.value(val)


def _merge_value(val_a: DVal, val_b: DVal, builder: Builder, options: MergeOptions) -> None:
    """Resolve a key present on both sides and push the result."""
    if is_object(val_a) and is_object(val_b):
        builder.value(_merge_recursive(val_a, val_b, options))
    elif is_array(val_a) and is_array(val_b) and options.merge_arrays:
        builder.begin_array()
        for item in iter_elements(val_a):
            builder.value(item)
        for item in iter_elements(val_b):
            builder.value(item)
        builder.end_array()
    else:
        builder.value(val_b)
