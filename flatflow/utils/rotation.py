"""
Turn rotation over a household's participant list.

Chores and shopping items keep an index into the ordered list of household
members.  Completing the task hands it to the next participant, wrapping from
the last one back to the first.
"""
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


def next_turn(current: int, participant_count: int) -> int:
    """Advance a rotation cursor by one, modulo the participant count."""
    if participant_count <= 0:
        raise ValueError("Cannot rotate without participants")
    return (normalize_turn(current, participant_count) + 1) % participant_count


def normalize_turn(current: int, participant_count: int) -> int:
    """Bring a cursor back into ``[0, participant_count)``; 0 when nobody is left."""
    if participant_count <= 0:
        return 0
    return current % participant_count


def participant_at(participants: Sequence[T], turn: int) -> Optional[T]:
    if not participants:
        return None
    return participants[normalize_turn(turn, len(participants))]


def shift_after_removal(current: int, removed_index: int, participant_count: int) -> int:
    """
    Cursor after the participant at ``removed_index`` left a list that now
    holds ``participant_count`` people.

    Later participants move up one slot, so a cursor past the removed slot
    moves with them and keeps pointing at the same person.  A cursor on the
    removed slot passes to whoever follows, wrapping to the first participant
    when the removed one was last.
    """
    if participant_count <= 0:
        return 0
    current = normalize_turn(current, participant_count + 1)
    if current > removed_index:
        current -= 1
    return normalize_turn(current, participant_count)
