"""
docmerge
========

Recursive merging of structured documents (objects, arrays, scalars).

    merge_python({"a": {"x": 1, "y": 2}}, {"a": {"y": 3, "z": 4}})
        → {"a": {"x": 1, "y": 3, "z": 4}}
    merge_python({"a": [1, 2]}, {"a": [3, 4]})
        → {"a": [1, 2, 3, 4]}
    merge_python({"a": [1, 2]}, {"a": [3, 4]}, merge_arrays=False)
        → {"a": [3, 4]}

merge() and merge_with_option() do the same on DVal documents, with None
standing for an absent document.

Objects merge key by key and recursively; arrays under the same key are
concatenated (or replaced, if array merging is off); for everything else
the second document wins.

Documents keep object keys in canonical order (length, then bytes), which
lets two objects be merged in one linear pass.  The pieces:

  • core     — DVal tagged union and the key order
  • cursor   — lazy traversal of containers
  • builder  — stack-based construction of new documents
  • merge    — the merge engine and its entry points
  • formats  — conversion to and from plain Python objects
"""

from docmerge.core import (
    # Types
    DVal,
    DScalar,
    DArray,
    DObject,
    Kind,
    # Key order
    key_order,
    compare_keys,
    is_canonical,
)
from docmerge.cursor import Cursor, Token, TokenKind, open_cursor
from docmerge.builder import Builder, BuilderError
from docmerge.merge import (
    merge, merge_with_option, merge_with_options, merge_values,
    MergeOptions, Strategy, KeyOrderError,
)
from docmerge.formats import from_python, to_python, merge_python

__version__ = "0.1.0"
__all__ = [
    "DVal", "DScalar", "DArray", "DObject", "Kind",
    "key_order", "compare_keys", "is_canonical",
    "Cursor", "Token", "TokenKind", "open_cursor",
    "Builder", "BuilderError",
    "merge", "merge_with_option", "merge_with_options", "merge_values",
    "MergeOptions", "Strategy", "KeyOrderError",
    "from_python", "to_python", "merge_python",
]
