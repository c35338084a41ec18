"""
Tests for the slot schedule and slot range overlap.
"""

import pytest
from datetime import time

from models.booking_errors import BookingValidationError, UnknownSlot
from models.slot import (
    SLOT_SCHEDULE,
    FIRST_SLOT,
    LAST_SLOT,
    SlotRange,
    format_slot_range,
    get_slot_interval,
    get_slot_options,
    is_valid_slot,
    make_slot_range,
    overlaps,
)


class TestSlotSchedule:
    """Tests for the fixed slot universe."""

    def test_nine_ordered_slots(self):
        """Slots are numbered 1..9."""
        assert list(SLOT_SCHEDULE) == list(range(1, 10))
        assert FIRST_SLOT == 1
        assert LAST_SLOT == 9

    def test_slot_interval_times(self):
        """Slot indexes map to wall-clock intervals."""
        first = get_slot_interval(1)
        assert first.start == time(7, 20)
        assert first.end == time(8, 10)

        last = get_slot_interval(9)
        assert last.to_dict() == {'slot': 9, 'start': '15:50', 'end': '16:40'}

    def test_unknown_slot_raises(self):
        """Indexes outside the schedule raise UnknownSlot."""
        with pytest.raises(UnknownSlot):
            get_slot_interval(0)
        with pytest.raises(UnknownSlot):
            get_slot_interval(10)

    def test_is_valid_slot(self):
        """Only integer indexes of the schedule are valid."""
        assert is_valid_slot(5) is True
        assert is_valid_slot(0) is False
        assert is_valid_slot('3') is False
        assert is_valid_slot(True) is False
        assert is_valid_slot(None) is False

    def test_slot_options(self):
        """Options carry value and human label."""
        options = get_slot_options()
        assert len(options) == 9
        assert options[0]['value'] == 1
        assert options[0]['label'] == '1ª aula (07:20-08:10)'


class TestSlotRange:
    """Tests for SlotRange construction."""

    def test_inverted_range_rejected(self):
        """start > end is a validation error, not an empty range."""
        with pytest.raises(BookingValidationError) as exc:
            make_slot_range(5, 3)
        assert exc.value.field == 'end_slot'

    def test_unknown_slot_in_range(self):
        """Unknown slot reports which side is wrong."""
        with pytest.raises(UnknownSlot) as exc:
            make_slot_range(0, 3)
        assert exc.value.field == 'start_slot'

        with pytest.raises(UnknownSlot) as exc:
            make_slot_range(3, 12)
        assert exc.value.field == 'end_slot'

    def test_single_slot_range(self):
        """start == end is a one-slot range."""
        slots = make_slot_range(4, 4)
        assert len(slots) == 1
        assert 4 in slots
        assert 5 not in slots


class TestOverlaps:
    """Tests for inclusive overlap."""

    def test_sharing_one_slot_overlaps(self):
        """Ranges touching on a boundary slot conflict."""
        assert overlaps(SlotRange(1, 3), SlotRange(3, 5)) is True

    def test_adjacent_ranges_do_not_overlap(self):
        """Ranges that only border each other are free."""
        assert overlaps(SlotRange(1, 2), SlotRange(3, 4)) is False

    def test_containment_overlaps(self):
        """A range inside another overlaps."""
        assert overlaps(SlotRange(1, 9), SlotRange(4, 5)) is True

    @pytest.mark.parametrize('a,b', [
        ((1, 2), (2, 3)),
        ((1, 2), (3, 4)),
        ((4, 6), (1, 9)),
        ((7, 7), (7, 7)),
    ])
    def test_symmetry(self, a, b):
        """overlaps(a, b) == overlaps(b, a)."""
        ra, rb = SlotRange(*a), SlotRange(*b)
        assert overlaps(ra, rb) == overlaps(rb, ra)

    def test_reflexive(self):
        """Every range overlaps itself."""
        for start in SLOT_SCHEDULE:
            for end in range(start, LAST_SLOT + 1):
                r = SlotRange(start, end)
                assert overlaps(r, r) is True


class TestFormatSlotRange:
    """Tests for human readable ranges."""

    def test_single_slot(self):
        assert format_slot_range(2, 2) == '2ª aula (08:10-09:00)'

    def test_multi_slot(self):
        assert format_slot_range(1, 3) == '1ª à 3ª aula (07:20-10:10)'

    def test_without_times(self):
        assert format_slot_range(1, 3, with_times=False) == '1ª à 3ª aula'
