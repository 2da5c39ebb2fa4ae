"""Snake draft ordering.

Pure functions mapping a linear pick number to its round, slot and the
draft position of the team that owns it. Team count always comes from the
league itself.
"""

from typing import List, NamedTuple

from src.draft_room.errors import InvalidParameterError


class PickPosition(NamedTuple):
    """Where a linear pick number lands in the draft board."""

    overall_pick: int
    round: int
    slot_in_round: int
    draft_position: int


def _check_counts(team_count: int, total_rounds: int):
    if team_count < 1:
        raise InvalidParameterError(f"team_count must be >= 1, got {team_count}")
    if total_rounds < 1:
        raise InvalidParameterError(
            f"total_rounds must be >= 1, got {total_rounds}"
        )


def pick_position(team_count: int, total_rounds: int, overall_pick: int) -> PickPosition:
    """Resolve a 1-based overall pick number to (round, slot, draft position).

    Odd rounds run 1..T, even rounds run T..1.

    Raises:
        InvalidParameterError: For non-positive counts or a pick number
            outside ``[1, team_count * total_rounds]``.
    """
    _check_counts(team_count, total_rounds)
    total_picks = team_count * total_rounds
    if not 1 <= overall_pick <= total_picks:
        raise InvalidParameterError(
            f"Pick {overall_pick} outside [1, {total_picks}]"
        )

    round_number = (overall_pick - 1) // team_count + 1
    slot_in_round = (overall_pick - 1) % team_count + 1

    if round_number % 2 == 0:
        draft_position = team_count - slot_in_round + 1
    else:
        draft_position = slot_in_round

    return PickPosition(overall_pick, round_number, slot_in_round, draft_position)


def overall_pick_number(team_count: int, round_number: int, slot_in_round: int) -> int:
    """Inverse of :func:`pick_position` for a (round, slot) pair."""
    if team_count < 1:
        raise InvalidParameterError(f"team_count must be >= 1, got {team_count}")
    if round_number < 1 or not 1 <= slot_in_round <= team_count:
        raise InvalidParameterError(
            f"Invalid slot {round_number}.{slot_in_round} for {team_count} teams"
        )
    return (round_number - 1) * team_count + slot_in_round


def build_draft_order(team_count: int, total_rounds: int) -> List[PickPosition]:
    """Full ordered draft board for a league."""
    _check_counts(team_count, total_rounds)
    return [
        pick_position(team_count, total_rounds, pick)
        for pick in range(1, team_count * total_rounds + 1)
    ]
