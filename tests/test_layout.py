"""Tests for the bit-layout validator."""

from __future__ import annotations

import pytest
from com_graph.layout import (
    BitLayoutValidator,
    Placement,
    is_pdu_start_aligned,
    validate_and_reserve,
)
from com_graph.model import ByteOrder

BE = ByteOrder.MOST_SIGNIFICANT_BYTE_FIRST
LE = ByteOrder.MOST_SIGNIFICANT_BYTE_LAST


class TestLittleEndian:
    """Tests for little-endian placements."""

    def test_two_bits_at_start(self) -> None:
        """Should cover the two lowest bits of byte 0."""
        validator = BitLayoutValidator(1)
        assert validator.add_placement(0, 2, LE)
        assert validator.coverage == bytes([0x03])

    def test_crosses_byte_boundary(self) -> None:
        """Should cover bits 5-7 of byte 0 and bits 0-6 of byte 1."""
        validator = BitLayoutValidator(4)
        assert validator.add_placement(5, 10, LE)
        assert validator.coverage == bytes([0xE0, 0x7F, 0x00, 0x00])

    def test_same_placement_twice_collides(self) -> None:
        """Should report the collision and leave the coverage unchanged."""
        validator = BitLayoutValidator(4)
        assert validator.add_placement(5, 10, LE)
        assert not validator.add_placement(5, 10, LE)
        assert validator.coverage == bytes([0xE0, 0x7F, 0x00, 0x00])

    def test_full_buffer(self) -> None:
        """Should cover all 4 bytes."""
        validator = BitLayoutValidator(4)
        assert validator.add_placement(0, 32, LE)
        assert validator.coverage == b"\xff" * 4

    def test_adjacent_placements_do_not_collide(self) -> None:
        """Should accept placements that touch but do not overlap."""
        validator = BitLayoutValidator(2)
        assert validator.add_placement(0, 5, LE)
        assert validator.add_placement(5, 11, LE)
        assert validator.coverage == b"\xff\xff"


class TestBigEndian:
    """Tests for big-endian placements."""

    def test_crosses_byte_boundary(self) -> None:
        """Should cover bits 5-0 of byte 0 and bits 7-4 of byte 1."""
        validator = BitLayoutValidator(4)
        assert validator.add_placement(5, 10, BE)
        assert validator.coverage == bytes([0x3F, 0xF0, 0x00, 0x00])

    def test_full_buffer(self) -> None:
        """Should cover all 4 bytes when starting at bit 7."""
        validator = BitLayoutValidator(4)
        assert validator.add_placement(7, 32, BE)
        assert validator.coverage == b"\xff" * 4

    def test_short_field_inside_byte(self) -> None:
        """Should cover bits 6-4 of byte 0."""
        validator = BitLayoutValidator(1)
        assert validator.add_placement(6, 3, BE)
        assert validator.coverage == bytes([0x70])

    def test_little_endian_over_big_endian_collides(self) -> None:
        """Should mark and report: the union of both masks stays in the coverage."""
        validator = BitLayoutValidator(4)
        assert validator.add_placement(5, 10, BE)
        assert not validator.add_placement(5, 10, LE)
        assert validator.coverage == bytes([0xFF, 0xFF, 0x00, 0x00])


class TestUpdateBits:
    """Tests for update bits and mixed byte orders."""

    def test_update_bit_is_reserved(self) -> None:
        """Should set the update bit in its byte."""
        validator = BitLayoutValidator(2)
        assert validator.add_placement(0, 4, LE, update_bit=15)
        assert validator.coverage == bytes([0x0F, 0x80])

    def test_update_bit_collides_with_field(self) -> None:
        """Should report an update bit inside the field."""
        validator = BitLayoutValidator(1)
        assert not validator.add_placement(0, 4, LE, update_bit=2)

    def test_mixed_layout_fills_eight_bytes(self) -> None:
        """Should pack mixed byte orders and update bits without collision."""
        validator = BitLayoutValidator(8)
        assert validator.add_placement(7, 16, BE, update_bit=60)
        assert validator.add_placement(16, 3, LE, update_bit=61)
        assert validator.add_placement(19, 7, LE, update_bit=62)
        assert validator.add_placement(26, 30, LE, update_bit=63)
        assert validator.add_placement(59, 4, BE)
        assert validator.coverage == b"\xff" * 8


class TestBounds:
    """Tests for placements outside the buffer."""

    def test_placement_exceeding_buffer(self) -> None:
        """Should report a collision for bytes past the end."""
        validator = BitLayoutValidator(1)
        assert not validator.add_placement(4, 8, LE)
        assert validator.coverage == bytes([0xF0])

    def test_update_bit_outside_buffer(self) -> None:
        """Should report an update bit past the end."""
        validator = BitLayoutValidator(1)
        assert not validator.add_placement(0, 8, LE, update_bit=8)

    def test_negative_update_bit(self) -> None:
        """Should not wrap a negative update bit onto the last byte."""
        validator = BitLayoutValidator(2)
        assert not validator.add_placement(0, 4, LE, update_bit=-1)
        assert validator.coverage == bytes([0x0F, 0x00])

    @pytest.mark.parametrize("byte_order", [LE, BE])
    def test_negative_offset(self, byte_order: ByteOrder) -> None:
        """Should report bytes before the start of the buffer."""
        validator = BitLayoutValidator(2)
        assert not validator.add_placement(-1, 8, byte_order)
        assert validator.coverage[1] == 0

    def test_opaque_is_laid_out_like_little_endian(self) -> None:
        """Should use the little-endian layout for opaque fields."""
        validator = BitLayoutValidator(4)
        assert validator.add_placement(5, 10, ByteOrder.OPAQUE)
        assert validator.coverage == bytes([0xE0, 0x7F, 0x00, 0x00])


class TestValidateAndReserve:
    """Tests for validate_and_reserve."""

    def test_fits(self) -> None:
        """Should accept a placement next to existing ones."""
        existing = [Placement(0, 8, LE)]
        assert validate_and_reserve(2, existing, Placement(8, 8, LE))

    def test_overlaps(self) -> None:
        """Should reject a placement overlapping an existing one."""
        existing = [Placement(0, 8, LE)]
        assert not validate_and_reserve(2, existing, Placement(4, 8, LE))

    def test_empty_buffer(self) -> None:
        """Should reject any non-empty placement in a zero length buffer."""
        assert not validate_and_reserve(0, [], Placement(0, 1, LE))


class TestPduAlignment:
    """Tests for is_pdu_start_aligned."""

    @pytest.mark.parametrize(
        ("start", "byte_order", "expected"),
        [
            (0, LE, True),
            (8, LE, True),
            (7, LE, False),
            (7, BE, True),
            (15, BE, True),
            (0, BE, False),
            (0, ByteOrder.OPAQUE, False),
        ],
    )
    def test_alignment(self, start: int, byte_order: ByteOrder, expected: bool) -> None:
        """Should require bit 0 (little-endian) or bit 7 (big-endian) of a byte."""
        assert is_pdu_start_aligned(start, byte_order) is expected
