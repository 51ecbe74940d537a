"""Integer types shared by the network description models.

Identifiers in description files (CAN ids, VLAN ids, E2E data ids) are
usually written in hex. The annotated types below accept ``"0x100"`` as well
as ``256`` and dump back to hex.
"""

from __future__ import annotations

from typing import Annotated, Any, Callable

from pydantic import AfterValidator, BeforeValidator, PlainSerializer


def parse_hex_int(value: Any) -> int:
    """Turn an integer, a hex string or a decimal string into an int.

    Args:
    ----
        value: ``2047``, ``"0x7FF"`` (any case, surrounding blanks ignored) or ``"2047"``

    Returns:
    -------
        The parsed integer

    Raises:
    ------
        ValueError: For None, booleans, other types and malformed strings

    """
    if value is None:
        raise ValueError("Identifier value cannot be None")
    # bool is an int subclass, but `can_id: true` is a typo, not 1
    if isinstance(value, bool):
        raise ValueError(f"Expected an integer, got bool {value}")
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Expected an integer, got {type(value).__name__} {value!r}")

    text = value.strip()
    is_hex = text[:2].lower() == "0x"
    try:
        return int(text, 16) if is_hex else int(text)
    except ValueError as e:
        kind = "hex" if is_hex else "integer"
        raise ValueError(f"Invalid {kind} string: {text}") from e


def serialize_hex_int(value: int) -> str:
    """Render an integer as upper-case hex, e.g. ``"0x1FFFFFFF"``."""
    return f"0x{value:X}"


def _unsigned(bits: int) -> Callable[[int], int]:
    upper = (1 << bits) - 1

    def check(value: int) -> int:
        if value < 0 or value > upper:
            raise ValueError(f"{value} does not fit into uint{bits} (0..{upper})")
        return value

    check.__name__ = f"check_uint{bits}"
    return check


_AsHex = PlainSerializer(serialize_hex_int, return_type=str)

HexInt16 = Annotated[int, BeforeValidator(parse_hex_int), AfterValidator(_unsigned(16)), _AsHex]
HexInt32 = Annotated[int, BeforeValidator(parse_hex_int), AfterValidator(_unsigned(32)), _AsHex]
