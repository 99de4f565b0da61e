"""
Test suite for the docmerge building blocks.

    §1  Document values and kinds
    §2  Canonical key order
    §3  Document cursor
    §4  Result builder
    §5  Format converters (Python objects)
"""

import sys
import os
import pytest

# Add parent to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from docmerge.core import (
    DScalar, DArray, DObject, Kind,
    key_order, compare_keys, is_canonical, scalar_kind,
)
from docmerge.cursor import (
    Token, TokenKind, open_cursor, iter_entries, iter_elements,
)
from docmerge.builder import Builder, BuilderError
from docmerge.formats import from_python, to_python


# ═══════════════════════════════════════════════════════════════════
#  §1  DOCUMENT VALUES
# ═══════════════════════════════════════════════════════════════════

class TestValues:

    @pytest.mark.parametrize("val,kind", [
        (None, Kind.NULL),
        (True, Kind.BOOL),
        (False, Kind.BOOL),
        (0, Kind.NUMBER),
        (3.5, Kind.NUMBER),
        ("", Kind.STRING),
        ("hello", Kind.STRING),
    ])
    def test_scalar_kinds(self, val, kind):
        assert DScalar(val).kind is kind

    def test_container_kinds(self):
        assert DArray().kind is Kind.ARRAY
        assert DObject().kind is Kind.OBJECT
        assert Kind.ARRAY.is_container
        assert Kind.OBJECT.is_container
        assert not Kind.STRING.is_container

    def test_bool_is_not_number(self):
        """True == 1 in Python, but they are different document kinds."""
        assert DScalar(True) != DScalar(1)
        assert DScalar(False) != DScalar(0)
        assert DScalar(1) == DScalar(1)

    def test_unsupported_scalar(self):
        with pytest.raises(TypeError):
            DScalar(object())
        with pytest.raises(TypeError):
            scalar_kind(b"bytes")

    def test_values_are_immutable(self):
        obj = from_python({"a": 1})
        with pytest.raises(AttributeError):
            obj.entries = ()

    def test_structural_equality(self):
        assert from_python({"a": [1, {"b": None}]}) == from_python({"a": [1, {"b": None}]})
        assert from_python({"a": [1]}) != from_python({"a": [2]})

    def test_values_are_hashable(self):
        docs = {from_python({"a": [1, 2]}), from_python({"a": [1, 2]})}
        assert len(docs) == 1

    def test_object_lookup(self):
        obj = from_python({"b": 1, "aa": 2, "ccc": 3})
        assert obj["aa"] == DScalar(2)
        assert obj.get("ccc") == DScalar(3)
        assert obj.get("zz") is None
        assert "b" in obj
        assert "zz" not in obj
        with pytest.raises(KeyError):
            obj["zz"]

    def test_array_iteration(self):
        arr = from_python([1, "x"])
        assert len(arr) == 2
        assert list(arr) == [DScalar(1), DScalar("x")]


# ═══════════════════════════════════════════════════════════════════
#  §2  CANONICAL KEY ORDER
# ═══════════════════════════════════════════════════════════════════

class TestKeyOrder:

    @pytest.mark.parametrize("a,b,expected", [
        ("a", "a", 0),
        ("a", "b", -1),
        ("b", "a", 1),
        ("b", "aa", -1),      # shorter first, whatever the letters
        ("aa", "b", 1),
        ("aa", "ab", -1),
        ("", "a", -1),
        ("Z", "a", -1),       # bytewise: 'Z' (0x5a) < 'a' (0x61)
        ("z", "é", -1),       # 'é' is two bytes in UTF-8
        ("ab", "é", -1),      # same byte length, 0x61 < 0xc3
    ])
    def test_compare_keys(self, a, b, expected):
        assert compare_keys(a, b) == expected

    def test_sort_by_key_order(self):
        keys = ["abc", "b", "ab", "aa", "c", ""]
        assert sorted(keys, key=key_order) == ["", "b", "c", "aa", "ab", "abc"]

    def test_is_canonical(self):
        assert is_canonical([])
        assert is_canonical([("b", None), ("aa", None), ("ab", None)])
        assert not is_canonical([("aa", None), ("b", None)])

    def test_duplicate_keys_not_canonical(self):
        assert not is_canonical([("a", None), ("a", None)])


# ═══════════════════════════════════════════════════════════════════
#  §3  DOCUMENT CURSOR
# ═══════════════════════════════════════════════════════════════════

class TestCursor:

    def test_full_unroll(self):
        doc = from_python({"a": 1, "b": [2]})
        tokens = list(open_cursor(doc).iter_tokens(skip_nested=False))
        assert tokens == [
            Token(TokenKind.BEGIN_OBJECT),
            Token(TokenKind.KEY, "a"),
            Token(TokenKind.SCALAR, DScalar(1)),
            Token(TokenKind.KEY, "b"),
            Token(TokenKind.BEGIN_ARRAY),
            Token(TokenKind.SCALAR, DScalar(2)),
            Token(TokenKind.END_ARRAY),
            Token(TokenKind.END_OBJECT),
        ]

    def test_skip_nested(self):
        doc = from_python({"a": 1, "b": [2]})
        tokens = list(open_cursor(doc).iter_tokens(skip_nested=True))
        assert tokens == [
            Token(TokenKind.BEGIN_OBJECT),
            Token(TokenKind.KEY, "a"),
            Token(TokenKind.SCALAR, DScalar(1)),
            Token(TokenKind.KEY, "b"),
            Token(TokenKind.CONTAINER_REF, DArray((DScalar(2),))),
            Token(TokenKind.END_OBJECT),
        ]

    def test_container_ref_is_the_nested_value(self):
        doc = from_python({"a": {"x": 1}})
        tokens = list(open_cursor(doc).iter_tokens(skip_nested=True))
        assert tokens[2].value is doc["a"]

    def test_done_is_sticky(self):
        cur = open_cursor(from_python([]))
        assert cur.next().kind is TokenKind.BEGIN_ARRAY
        assert cur.next().kind is TokenKind.END_ARRAY
        assert cur.next().kind is TokenKind.DONE
        assert cur.next().kind is TokenKind.DONE

    def test_stored_order(self):
        doc = DObject([("zz", DScalar(1)), ("a", DScalar(2))])
        assert [k for k, _ in iter_entries(doc)] == ["zz", "a"]

    def test_mixed_skip_per_step(self):
        """skip_nested is decided on every call to next()."""
        cur = open_cursor(from_python([[1], [2]]))
        assert cur.next().kind is TokenKind.BEGIN_ARRAY
        assert cur.next(skip_nested=True).kind is TokenKind.CONTAINER_REF
        assert cur.next(skip_nested=False).kind is TokenKind.BEGIN_ARRAY
        assert cur.next().value == DScalar(2)
        assert cur.next().kind is TokenKind.END_ARRAY
        assert cur.next().kind is TokenKind.END_ARRAY
        assert cur.next().kind is TokenKind.DONE

    def test_iter_elements(self):
        arr = from_python([1, {"a": 2}, [3]])
        assert list(iter_elements(arr)) == list(arr.items)

    def test_scalar_cannot_be_opened(self):
        with pytest.raises(TypeError):
            open_cursor(DScalar(1))
        with pytest.raises(TypeError):
            open_cursor(None)


# ═══════════════════════════════════════════════════════════════════
#  §4  RESULT BUILDER
# ═══════════════════════════════════════════════════════════════════

class TestBuilder:

    def test_build_nested(self):
        b = Builder()
        b.begin_object()
        b.key("a")
        b.begin_array()
        b.value(DScalar(1))
        b.begin_object()
        b.key("x")
        b.value(DScalar(None))
        assert b.end_object() is None
        assert b.end_array() is None
        doc = b.end_object()
        assert doc == from_python({"a": [1, {"x": None}]})
        assert b.result is doc
        assert b.depth == 0

    def test_outermost_array(self):
        b = Builder()
        b.begin_array()
        assert b.end_array() == DArray()

    def test_prebuilt_values_are_kept(self):
        nested = from_python({"deep": [1, 2]})
        b = Builder()
        b.begin_array()
        b.value(nested)
        doc = b.end_array()
        assert doc.items[0] is nested

    def test_in_order_keys_kept(self):
        b = Builder()
        b.begin_object()
        for k in ["b", "aa", "ab"]:
            b.key(k)
            b.value(DScalar(k))
        assert b.end_object().keys() == ["b", "aa", "ab"]

    def test_out_of_order_keys_sorted(self):
        b = Builder()
        b.begin_object()
        for k in ["ab", "b", "aa"]:
            b.key(k)
            b.value(DScalar(k))
        assert b.end_object().keys() == ["b", "aa", "ab"]

    def test_duplicate_key_last_wins(self):
        b = Builder()
        b.begin_object()
        b.key("a")
        b.value(DScalar(1))
        b.key("a")
        b.value(DScalar(2))
        assert b.end_object() == DObject([("a", DScalar(2))])

    def test_key_inside_array(self):
        b = Builder()
        b.begin_array()
        with pytest.raises(BuilderError):
            b.key("a")

    def test_key_twice(self):
        b = Builder()
        b.begin_object()
        b.key("a")
        with pytest.raises(BuilderError):
            b.key("b")

    def test_value_without_key(self):
        b = Builder()
        b.begin_object()
        with pytest.raises(BuilderError):
            b.value(DScalar(1))
        with pytest.raises(BuilderError):
            b.begin_array()

    def test_end_on_empty_stack(self):
        with pytest.raises(BuilderError):
            Builder().end_object()
        with pytest.raises(BuilderError):
            Builder().end_array()

    def test_mismatched_end(self):
        b = Builder()
        b.begin_object()
        with pytest.raises(BuilderError):
            b.end_array()

    def test_end_with_dangling_key(self):
        b = Builder()
        b.begin_object()
        b.key("a")
        with pytest.raises(BuilderError):
            b.end_object()

    def test_events_after_completion(self):
        b = Builder()
        b.begin_array()
        b.end_array()
        with pytest.raises(BuilderError):
            b.begin_object()
        with pytest.raises(BuilderError):
            b.value(DScalar(1))

    def test_value_must_be_document(self):
        b = Builder()
        b.begin_array()
        with pytest.raises(BuilderError):
            b.value(1)

    def test_errors_are_assertions(self):
        """Misuse is a programming error, reported as AssertionError."""
        with pytest.raises(AssertionError):
            Builder().key("a")


# ═══════════════════════════════════════════════════════════════════
#  §5  FORMAT CONVERTERS
# ═══════════════════════════════════════════════════════════════════

class TestFormats:

    def test_python_primitives(self):
        assert from_python(42) == DScalar(42)
        assert from_python("hi") == DScalar("hi")
        assert from_python(True) == DScalar(True)
        assert from_python(None) == DScalar(None)
        assert from_python(3.14) == DScalar(3.14)

    def test_python_list(self):
        assert from_python([1, 2]) == DArray((DScalar(1), DScalar(2)))
        assert from_python((1, 2)) == from_python([1, 2])

    def test_python_dict_canonical_order(self):
        doc = from_python({"abc": 1, "b": 2, "aa": 3})
        assert doc.keys() == ["b", "aa", "abc"]
        assert is_canonical(doc.entries)

    def test_non_string_keys(self):
        assert from_python({1: "x"}).keys() == ["1"]

    def test_round_trip(self):
        obj = {
            "users": [{"name": "Alice", "age": 30}, {"name": "Bob", "age": None}],
            "meta": {"version": 2, "active": True, "ratio": 0.5},
        }
        assert to_python(from_python(obj)) == obj

    def test_to_python_key_order(self):
        assert list(to_python(from_python({"ccc": 1, "a": 2, "bb": 3}))) == ["a", "bb", "ccc"]

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            from_python({1, 2})
        with pytest.raises(TypeError):
            from_python(b"raw")
