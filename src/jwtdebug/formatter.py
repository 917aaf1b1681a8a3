"""Single-line rendering of decoded JSON values."""

from typing import Any, Callable, List

from .constants import MAX_ARRAY_ITEMS
from .sanitize import sanitize_string


def _format_scalar(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return sanitize_string(value)
    return sanitize_string(str(value))


def _format_inline_array(items: List[Any], format_item: Callable[[Any], str]) -> str:
    if not items:
        return "[]"
    return "[" + ", ".join(format_item(item) for item in items) + "]"


def format_nested_value(value: Any) -> str:
    """Render a value found inside an array, expanding objects and arrays fully.

    Object keys are sorted so output is deterministic.
    """
    if isinstance(value, list):
        return _format_inline_array(value, format_nested_value)
    if isinstance(value, dict):
        if not value:
            return "{}"
        parts = [
            f"{sanitize_string(str(key))}: {format_nested_value(value[key])}"
            for key in sorted(value)
        ]
        return "{" + ", ".join(parts) + "}"
    return _format_scalar(value)


def format_value(value: Any) -> str:
    """Render a top-level claim or header value for one display line.

    Arrays of up to ten items are shown inline, longer ones as a count.
    Non-empty objects are always summarized by key count at this level.
    """
    if isinstance(value, list):
        if len(value) > MAX_ARRAY_ITEMS:
            return f"[array with {len(value)} items]"
        return _format_inline_array(value, format_nested_value)
    if isinstance(value, dict):
        if not value:
            return "{}"
        return f"{{object with {len(value)} keys}}"
    return _format_scalar(value)
