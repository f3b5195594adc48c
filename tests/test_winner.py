"""
Unit tests for the winner fold.
"""

import pytest

from oddeven.constants import UNSET_WINNER_ID, Side
from oddeven.game import Participant, select_winner


def reference_fold(first_guess: int, second_guess: int) -> int:
    """Independent statement of the fold for badges 1 and 2."""
    if (first_guess + second_guess) % 2 == 0:
        return 2
    if first_guess % 2 == 0:
        return 1
    return UNSET_WINNER_ID


def _table(first_guess: int, second_guess: int) -> dict[int, Participant]:
    # reversed insertion: the fold must not depend on dict order
    return {
        2: Participant(side=Side.SECOND_CALLER, guess=second_guess),
        1: Participant(side=Side.FIRST_CALLER, guess=first_guess),
    }


@pytest.mark.parametrize(
    "first_guess,second_guess,expected",
    [
        (3, 4, UNSET_WINNER_ID),  # 3 odd, 7 odd
        (3, 5, 2),                # 3 odd, 8 even
        (4, 3, 1),                # 4 even, 7 odd
        (4, 4, 2),                # both partial sums even, last one wins
        (1, 1, 2),
        (2, 1, 1),
        (0, 0, 2),
    ],
)
def test_literal_pairs(first_guess, second_guess, expected):
    """The fold picks the last id whose running sum was even."""
    assert select_winner(_table(first_guess, second_guess)) == expected


def test_matches_reference_for_small_guesses():
    """The fold agrees with the reference over a grid of guesses."""
    for first_guess in range(12):
        for second_guess in range(12):
            assert select_winner(_table(first_guess, second_guess)) == reference_fold(
                first_guess, second_guess
            )


def test_winner_defined_unless_all_partial_sums_odd():
    """The fold leaves the winner unset only for an odd first guess and odd total."""
    for first_guess in range(1, 20):
        for second_guess in range(1, 20):
            winner = select_winner(_table(first_guess, second_guess))
            all_odd = first_guess % 2 == 1 and (first_guess + second_guess) % 2 == 1
            assert (winner == UNSET_WINNER_ID) == all_odd
