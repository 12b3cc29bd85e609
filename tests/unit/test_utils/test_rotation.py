import pytest
from flatflow.utils.rotation import next_turn, normalize_turn, participant_at, shift_after_removal


@pytest.mark.unit
class TestRotation:
    """Unit tests for the turn cursor helpers."""

    @pytest.mark.parametrize("count", [1, 2, 3, 5])
    def test_next_turn_for_every_start(self, count):
        """Every cursor advances by one, and the last participant hands back to the first."""
        for current in range(count):
            assert next_turn(current, count) == (current + 1) % count

    def test_next_turn_wraps_last_to_first(self):
        assert next_turn(2, 3) == 0

    def test_single_participant_keeps_turn(self):
        assert next_turn(0, 1) == 0

    def test_next_turn_normalizes_stale_cursor(self):
        """A cursor left behind by a departed member is brought back in range first."""
        assert next_turn(4, 3) == 2

    def test_next_turn_without_participants(self):
        with pytest.raises(ValueError):
            next_turn(0, 0)

    def test_normalize_turn(self):
        assert normalize_turn(3, 3) == 0
        assert normalize_turn(7, 3) == 1
        assert normalize_turn(5, 0) == 0

    def test_participant_at(self):
        participants = [11, 22, 33]
        assert participant_at(participants, 0) == 11
        assert participant_at(participants, 2) == 33
        assert participant_at(participants, 4) == 22
        assert participant_at([], 0) is None

    def test_shift_after_removal_keeps_person(self):
        """[A, B, C] with C up; B leaves and C is still up at index 1."""
        assert shift_after_removal(2, 1, 2) == 1
        assert shift_after_removal(0, 1, 2) == 0

    def test_shift_after_removal_on_removed_slot(self):
        # the next participant inherits the turn
        assert shift_after_removal(1, 1, 2) == 1
        # removed participant was last: wrap to the first
        assert shift_after_removal(2, 2, 2) == 0

    def test_shift_after_removal_empty_household(self):
        assert shift_after_removal(0, 0, 0) == 0
