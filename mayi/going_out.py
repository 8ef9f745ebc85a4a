"""Going-out predicates used as guards by the turn engine.

Going out means ending a turn with no cards in hand while down. The player
who goes out scores zero and the round ends immediately.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from .cards import Card

FINAL_ROUND = 6
GOING_OUT_SCORE = 0


class GoingOutContext(Protocol):
    hand: Sequence[Card]
    is_down: bool


@dataclass(frozen=True)
class GoingOutResult:
    # Both fields share one formula today. ``went_out`` is the round-ending
    # signal, ``hand_empty`` the plain state fact; callers read whichever
    # they mean.
    went_out: bool
    hand_empty: bool


def check_going_out(hand: Sequence[Card]) -> GoingOutResult:
    hand_empty = len(hand) == 0
    return GoingOutResult(went_out=hand_empty, hand_empty=hand_empty)


def can_go_out(context: GoingOutContext) -> bool:
    """A player may go out only while down and holding no cards."""
    if not context.is_down:
        return False
    return len(context.hand) == 0


def is_round6_last_card_block(round_number: int, hand_size_after_action: int) -> bool:
    """The final round forbids emptying the hand by discarding."""
    return round_number == FINAL_ROUND and hand_size_after_action == 0


def get_going_out_score() -> int:
    return GOING_OUT_SCORE
