"""Tests for single-line value rendering."""

from jwtdebug.formatter import format_nested_value, format_value


def test_scalars():
    assert format_value("admin") == "admin"
    assert format_value(42) == "42"
    assert format_value(1.5) == "1.5"
    assert format_value(True) == "true"
    assert format_value(False) == "false"
    assert format_value(None) == "null"


def test_strings_are_sanitized():
    assert format_value("evil\x1b[2J") == "evil\\x1B[2J"


def test_short_array_inline():
    assert format_value(["a", "b", 3]) == "[a, b, 3]"
    assert format_value([]) == "[]"


def test_ten_items_inline_eleven_summarized():
    assert format_value(list(range(10))) == "[0, 1, 2, 3, 4, 5, 6, 7, 8, 9]"
    assert format_value(list(range(11))) == "[array with 11 items]"


def test_objects_summarized_at_top_level():
    assert format_value({}) == "{}"
    assert format_value({"a": 1, "b": 2}) == "{object with 2 keys}"


def test_nested_values_fully_expanded():
    """Inside arrays, objects and arrays are rendered in full with sorted keys."""
    value = [{"b": [1, 2], "a": None}]
    assert format_value(value) == "[{a: null, b: [1, 2]}]"


def test_nested_arrays_have_no_item_limit():
    assert format_nested_value(list(range(12))) == "[" + ", ".join(str(i) for i in range(12)) + "]"


def test_nested_keys_sanitized():
    assert format_value([{"k\n": "v\t"}]) == "[{k\\n: v\\t}]"
