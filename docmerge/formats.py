"""
docmerge.formats — Convert between plain Python objects and documents.

Supported conversions:
    • Python objects (dict, list, tuple, str, int, float, bool, None) ↔ DVal
    • merge_python: merge two plain Python objects in one call

Reading and writing JSON text is left to the caller (json.loads/json.dumps).
"""

from typing import Any

from .core import DArray, DObject, DScalar, DVal, Kind, key_order
from .merge import MergeOptions, merge_with_options


# ═══════════════════════════════════════════════════════════════════
#  PYTHON OBJECTS ↔ DOCUMENTS
# ═══════════════════════════════════════════════════════════════════

def from_python(obj: Any) -> DVal:
    """
    Convert a Python object to a document.

    Mapping:
        None       → DScalar(None)
        bool       → DScalar(bool)
        int/float  → DScalar(number)
        str        → DScalar(str)
        list/tuple → DArray(...)
        dict       → DObject(...), keys in canonical order

    Non-string dict keys are converted with str().  If two keys collide
    after conversion the later one wins.  Anything else raises TypeError.
    """
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return DScalar(obj)
    if isinstance(obj, (list, tuple)):
        return DArray(from_python(item) for item in obj)
    if isinstance(obj, dict):
        entries = {str(k): from_python(v) for k, v in obj.items()}
        return DObject(sorted(entries.items(), key=lambda kv: key_order(kv[0])))
    raise TypeError(f"Cannot convert {type(obj).__name__} to a document")


def to_python(val: DVal) -> Any:
    """
    Convert a document back to plain Python objects.

    Inverse of from_python for JSON-compatible input (tuples come back as
    lists).  Dicts are built in canonical key order.
    """
    kind = val.kind
    if kind is Kind.ARRAY:
        return [to_python(item) for item in val.items]
    if kind is Kind.OBJECT:
        return {k: to_python(v) for k, v in val.entries}
    if isinstance(val, DScalar):
        return val.val
    raise TypeError(f"Unknown DVal type: {type(val)}")


def merge_python(a: Any, b: Any, merge_arrays: bool = True, **options) -> Any:
    """
    Merge two plain Python documents and return plain Python.

    Both arguments are documents: None here is a JSON null scalar, never
    "absent".  Extra keyword options are passed to MergeOptions.

        merge_python({"a": [1, 2]}, {"a": [3, 4]})  → {"a": [1, 2, 3, 4]}
    """
    opts = MergeOptions(merge_arrays=merge_arrays, **options)
    return to_python(merge_with_options(from_python(a), from_python(b), opts))
