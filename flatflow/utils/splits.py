"""Expense split arithmetic."""
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Round to cents, half-up (15.165 -> 15.17)."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def even_share(amount, participant_count: int) -> Decimal:
    """
    Share of ``amount`` owed by each participant when split evenly.

    The payer counts as one of the ``participant_count`` participants, so
    45.50 split three ways is 15.17 per person.
    """
    if participant_count <= 0:
        raise ValueError("participant_count must be positive")
    return to_money(Decimal(str(amount)) / participant_count)


def even_split(amount, paid_by: int, participant_ids: Iterable[int]) -> Dict[int, Decimal]:
    """Map every participant other than the payer to the share they owe."""
    participants = list(participant_ids)
    if not participants:
        return {}
    share = even_share(amount, len(participants))
    return {pid: share for pid in participants if pid != paid_by}
