"""Round scoring helpers for May I?."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional

from .cards import Card, Rank
from .going_out import get_going_out_score


class ScoringError(ValueError):
    """Raised when scores cannot be computed from the supplied hands."""


@dataclass(frozen=True)
class RoundRecord:
    round_number: int
    winner_id: str
    scores: Dict[str, int]


def hand_score(cards: Iterable[Card], points: Optional[Mapping[Rank, int]] = None) -> int:
    if points is None:
        return sum(card.point_value() for card in cards)
    return sum(points[card.rank] for card in cards)


def round_scores(
    final_hands: Mapping[str, Iterable[Card]],
    winner_id: str,
    points: Optional[Mapping[Rank, int]] = None,
) -> Dict[str, int]:
    """The player who went out scores zero; everyone else pays for their hand."""
    if winner_id not in final_hands:
        raise ScoringError(f"Winner {winner_id!r} is not among the scored players.")
    scores: Dict[str, int] = {}
    for player_id, hand in final_hands.items():
        if player_id == winner_id:
            scores[player_id] = get_going_out_score()
        else:
            scores[player_id] = hand_score(hand, points)
    return scores


def update_totals(totals: Mapping[str, int], scores: Mapping[str, int]) -> Dict[str, int]:
    return {player_id: total + scores.get(player_id, 0) for player_id, total in totals.items()}


def determine_winners(totals: Mapping[str, int]) -> List[str]:
    """Lowest total wins; ties return every tied player."""
    if not totals:
        return []
    best = min(totals.values())
    return [player_id for player_id, total in totals.items() if total == best]
