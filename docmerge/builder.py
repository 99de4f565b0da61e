"""
docmerge.builder — Incremental, stack-based construction of documents.

Callers push events in nesting order:

    b = Builder()
    b.begin_object()
    b.key("a")
    b.begin_array()
    b.value(DScalar(1))
    b.end_array()               # [1] becomes the value of "a"
    doc = b.end_object()        # outermost close returns {"a": [1]}

Each open container is a frame on an explicit stack.  A closing event
freezes the top frame into an immutable DVal and hands it to the frame
below, or returns it when the stack runs empty.

Misuse is a bug in the caller, not bad input, so it raises BuilderError
straight away.
"""

import logging
from typing import Optional

from .core import DArray, DObject, DVal, Kind, is_canonical, key_order


_logger = logging.getLogger(__name__)


class BuilderError(AssertionError):
    """Events pushed to a Builder in an invalid order."""


class _Frame:
    __slots__ = ("kind", "children", "pending_key")

    def __init__(self, kind: Kind):
        self.kind = kind
        self.children: list = []
        self.pending_key: Optional[str] = None


class Builder:
    """Accumulates begin/key/value/end events into a single document."""

    def __init__(self):
        self._stack: list[_Frame] = []
        self.result: Optional[DVal] = None

    @property
    def depth(self) -> int:
        return len(self._stack)

    # ── opening ────────────────────────────────────────────────────

    def begin_object(self) -> None:
        self._open(Kind.OBJECT)

    def begin_array(self) -> None:
        self._open(Kind.ARRAY)

    def _open(self, kind: Kind) -> None:
        self._check_not_finished()
        if self._stack:
            self._check_accepts_value(self._stack[-1])
        self._stack.append(_Frame(kind))

    # ── content ────────────────────────────────────────────────────

    def key(self, name: str) -> None:
        if not self._stack:
            raise BuilderError("key() with no open container")
        top = self._stack[-1]
        if top.kind is not Kind.OBJECT:
            raise BuilderError(f"key({name!r}) inside an array")
        if top.pending_key is not None:
            raise BuilderError(f"key({name!r}) while key {top.pending_key!r} awaits a value")
        if not isinstance(name, str):
            raise BuilderError(f"Object keys must be str, got {name!r}")
        top.pending_key = name

    def value(self, v: DVal) -> None:
        """Append a scalar or a finished container to the open container."""
        if not isinstance(v, DVal):
            raise BuilderError(f"value() needs a DVal, got {v!r}")
        if not self._stack:
            raise BuilderError("value() with no open container")
        self._append(self._stack[-1], v)

    # ── closing ────────────────────────────────────────────────────

    def end_object(self) -> Optional[DVal]:
        frame = self._close(Kind.OBJECT)
        if frame.pending_key is not None:
            raise BuilderError(f"end_object() while key {frame.pending_key!r} awaits a value")
        entries = frame.children
        if not is_canonical(entries):
            entries = _canonicalize(entries)
        return self._finish(DObject(entries))

    def end_array(self) -> Optional[DVal]:
        frame = self._close(Kind.ARRAY)
        return self._finish(DArray(frame.children))

    def _close(self, kind: Kind) -> _Frame:
        if not self._stack:
            raise BuilderError(f"end of {kind.value} on an empty stack")
        if self._stack[-1].kind is not kind:
            raise BuilderError(
                f"end of {kind.value} while the open container is {self._stack[-1].kind.value}"
            )
        return self._stack.pop()

    def _finish(self, val: DVal) -> Optional[DVal]:
        if self._stack:
            self._append(self._stack[-1], val)
            return None
        self.result = val
        return val

    # ── helpers ────────────────────────────────────────────────────

    def _append(self, frame: _Frame, v: DVal) -> None:
        self._check_accepts_value(frame)
        if frame.kind is Kind.OBJECT:
            frame.children.append((frame.pending_key, v))
            frame.pending_key = None
        else:
            frame.children.append(v)

    @staticmethod
    def _check_accepts_value(frame: _Frame) -> None:
        if frame.kind is Kind.OBJECT and frame.pending_key is None:
            raise BuilderError("value inside an object with no pending key")

    def _check_not_finished(self) -> None:
        if self.result is not None:
            raise BuilderError("document already complete")


def _canonicalize(entries: list) -> list:
    """Stable sort into canonical order, keeping the last of duplicate keys."""
    _logger.debug("re-sorting %d object entries into canonical order", len(entries))
    latest = {}
    for key, val in entries:
        latest[key] = val
    return sorted(latest.items(), key=lambda kv: key_order(kv[0]))
