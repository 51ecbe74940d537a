"""Bit-layout validation for placements inside a byte buffer.

Bit positions follow the usual automotive numbering: bit position ``p``
lives in byte ``p // 8`` at bit ``p % 8``, where bit 7 is the most
significant bit of the byte.

Big-endian placements (``MOST_SIGNIFICANT_BYTE_FIRST``) start at the most
significant bit of the field and continue towards lower bits, wrapping to
bit 7 of the following byte. Little-endian placements
(``MOST_SIGNIFICANT_BYTE_LAST``) start at the least significant bit and
continue towards higher bits, wrapping to bit 0 of the following byte.

The validator keeps one coverage byte per buffer byte. Every mask is OR-ed
into the coverage even when it collides with bits that are already covered,
so the coverage always shows the union of everything that was attempted.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from com_graph.model.enums import ByteOrder

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Placement:
    """Position of a field inside a buffer."""

    bit_offset: int
    bit_length: int
    byte_order: ByteOrder
    update_bit: int | None = None


class BitLayoutValidator:
    """Tracks the bits covered by placements in a buffer of fixed length."""

    def __init__(self, buffer_length: int) -> None:
        """Initialize an empty coverage bitmap.

        Args:
        ----
            buffer_length: Length of the buffer in bytes.

        """
        self.buffer_length = buffer_length
        self._coverage = bytearray(buffer_length)

    @property
    def coverage(self) -> bytes:
        """Current coverage bitmap, one byte per buffer byte."""
        return bytes(self._coverage)

    def add_placement(
        self,
        bit_offset: int,
        bit_length: int,
        byte_order: ByteOrder,
        update_bit: int | None = None,
    ) -> bool:
        """Reserve the bits of a placement.

        Args:
        ----
            bit_offset: Start position of the field.
            bit_length: Length of the field in bits.
            byte_order: Byte order of the field. ``OPAQUE`` fields are laid out like
                little-endian fields.
            update_bit: Optional position of the update bit of the field.

        Returns:
        -------
            False if any bit collided with existing coverage or fell outside the buffer.

        """
        ok = True
        position = bit_offset // 8
        offset = bit_offset % 8

        if byte_order == ByteOrder.MOST_SIGNIFICANT_BYTE_FIRST:
            first_bits = min(offset + 1, bit_length)
            # bits offset..(offset + 1 - first_bits) of the first byte
            first_mask = ((1 << (offset + 1)) - 1) & ~((1 << (offset + 1 - first_bits)) - 1)
            remaining = bit_length - first_bits
            end_mask = (0xFF << (8 - remaining % 8)) & 0xFF
        else:
            first_bits = min(8 - offset, bit_length)
            first_mask = ((1 << first_bits) - 1) << offset
            remaining = bit_length - first_bits
            end_mask = (1 << (remaining % 8)) - 1

        full_bytes = remaining // 8

        ok &= self._apply_mask(first_mask, position)
        position += 1
        ok &= self._apply_full_bytes(position, full_bytes)
        position += full_bytes
        if remaining % 8:
            ok &= self._apply_mask(end_mask, position)

        if update_bit is not None:
            ok &= self._apply_mask(1 << (update_bit % 8), update_bit // 8)

        if not ok:
            logger.debug(
                "Placement at bit %d (%d bits, %s) collides in a %d byte buffer",
                bit_offset,
                bit_length,
                byte_order.value,
                self.buffer_length,
            )
        return ok

    def _apply_mask(self, mask: int, position: int) -> bool:
        if not 0 <= position < self.buffer_length:
            return False
        collision = self._coverage[position] & mask
        self._coverage[position] |= mask
        return collision == 0

    def _apply_full_bytes(self, position: int, count: int) -> bool:
        ok = True
        for index in range(position, position + count):
            ok &= self._apply_mask(0xFF, index)
        return ok


def validate_and_reserve(
    buffer_length: int,
    placements: Iterable[Placement],
    new_placement: Placement,
) -> bool:
    """Check whether a new placement fits next to the existing placements.

    Args:
    ----
        buffer_length: Length of the buffer in bytes.
        placements: Placements already present in the buffer.
        new_placement: The placement to add.

    Returns:
    -------
        True if the new placement fits without overlapping anything.

    """
    validator = BitLayoutValidator(buffer_length)
    for placement in placements:
        validator.add_placement(
            placement.bit_offset,
            placement.bit_length,
            placement.byte_order,
            placement.update_bit,
        )
    return validator.add_placement(
        new_placement.bit_offset,
        new_placement.bit_length,
        new_placement.byte_order,
        new_placement.update_bit,
    )


def is_pdu_start_aligned(start_position: int, byte_order: ByteOrder) -> bool:
    """Check that a whole PDU starts on a byte boundary of a frame.

    Big-endian PDUs start at bit 7 of a byte, little-endian PDUs at bit 0.
    """
    if byte_order == ByteOrder.MOST_SIGNIFICANT_BYTE_FIRST:
        return start_position % 8 == 7
    if byte_order == ByteOrder.MOST_SIGNIFICANT_BYTE_LAST:
        return start_position % 8 == 0
    return False
