"""Translate Pydantic errors of network descriptions to user-friendly messages."""

from __future__ import annotations

from pydantic_core import ErrorDetails

# Translation map for Pydantic error types
ERROR_TRANSLATIONS: dict[str, str] = {
    "missing": "This field is required but was not provided",
    "extra_forbidden": "This field is not allowed in this context",
    "string_type": "Must be a string",
    "int_type": "Must be an integer",
    "int_parsing": "Must be an integer",
    "bool_type": "Must be true or false",
    "list_type": "Must be a list",
    "dict_type": "Must be a mapping of names to definitions",
    "model_type": "Must be a mapping",
    "enum": "Must be one of the allowed values",
    "literal_error": "Must be one of the allowed values",
    "value_error": "Invalid value",
    "string_too_short": "Must not be empty",
    "greater_than": "Value is too small",
    "greater_than_equal": "Value is too small",
    "less_than_equal": "Value is too large",
}


def translate_pydantic_error(error: ErrorDetails) -> str:
    """Translate a Pydantic error to a user-friendly message.

    Args:
    ----
        error: The Pydantic error details.

    Returns:
    -------
        User-friendly error message.

    """
    error_type = error["type"]
    ctx = error.get("ctx") or {}

    if error_type in ("enum", "literal_error"):
        return f"Must be one of: {ctx.get('expected', 'unknown')}"
    if error_type == "greater_than":
        return f"Must be greater than {ctx.get('gt', 0)}"
    if error_type == "greater_than_equal":
        return f"Must be at least {ctx.get('ge', 0)}"
    if error_type == "less_than_equal":
        return f"Must be at most {ctx.get('le', 0)}"
    if error_type == "value_error":
        # Messages of our own validators are already readable
        return str(ctx.get("error", error["msg"]))

    return ERROR_TRANSLATIONS.get(error_type, error["msg"])


def format_pydantic_location(loc: tuple[str | int, ...]) -> str:
    """Format Pydantic location tuple to readable path.

    Args:
    ----
        loc: Location tuple from Pydantic error.

    Returns:
    -------
        Formatted path string, e.g. ``pdus.EngineData.signals[0].byte_order``.

    """
    parts: list[str] = []
    for part in loc:
        if isinstance(part, int):
            parts.append(f"[{part}]")
        else:
            if parts:
                parts.append(".")
            parts.append(str(part))

    return "".join(parts)


def get_suggestion_for_error(error: ErrorDetails) -> str | None:
    """Get a suggestion for how to fix the error.

    Args:
    ----
        error: The Pydantic error details.

    Returns:
    -------
        Suggestion string or None.

    """
    error_type = error["type"]
    ctx = error.get("ctx") or {}
    loc = error["loc"]
    field = str(loc[-1]) if loc else ""

    if error_type == "literal_error" and field == "schema":
        return "Start the file with 'schema: com-graph.network/v1'"
    if error_type == "enum" and field == "byte_order":
        return "Use most-significant-byte-first (big-endian) or most-significant-byte-last"

    suggestions: dict[str, str] = {
        "missing": "Add the required field to your YAML",
        "extra_forbidden": "Remove this field or check for typos",
        "enum": f"Use one of the allowed values: {ctx.get('expected', 'check documentation')}",
        "int_parsing": "Write integers as decimal (2047) or hexadecimal strings ('0x7FF')",
    }

    return suggestions.get(error_type)
