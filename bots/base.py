"""Common bot strategy interfaces."""

from __future__ import annotations

from typing import List, Optional, Tuple

from mayi.cards import Card, is_wild
from mayi.game import RoundEngine
from mayi.melds import Meld
from mayi.turn import Discard, DrawFromStock, LayDown, LayOff, TurnCommand, TurnEngine


def legal_lay_offs(turn: TurnEngine) -> List[Tuple[Card, Meld]]:
    """Every (card, meld) pair the turn's validator would accept right now."""
    context = turn.context
    return [
        (card, meld)
        for card in context.hand
        for meld in context.table
        if turn.validator.is_legal_lay_off(card, meld)
    ]


def discard_priority(card: Card) -> Tuple[int, int]:
    # Keep wilds; shed expensive naturals first.
    return (0 if is_wild(card) else 1, card.point_value())


class BotStrategy:
    """Base class for bot policies."""

    name: str = "BaseBot"

    def on_round_start(self, game_round: RoundEngine) -> None:
        """Optional hook invoked at the start of each round."""
        return None

    def choose_draw(self, turn: TurnEngine) -> TurnCommand:
        return DrawFromStock()

    def choose_lay_down(self, turn: TurnEngine) -> Optional[LayDown]:
        """Return a lay-down for the round's contract, or None to hold."""
        return None

    def choose_lay_off(self, turn: TurnEngine) -> Optional[LayOff]:
        """Return the next lay-off to attempt, or None to stop laying off."""
        options = legal_lay_offs(turn)
        if not options:
            return None
        card, meld = options[0]
        return LayOff(card_id=card.card_id, meld_id=meld.meld_id)

    def choose_discard(self, turn: TurnEngine) -> Discard:
        hand = turn.context.hand
        if not hand:
            raise RuntimeError("No card available to discard.")
        card = max(hand, key=discard_priority)
        return Discard(card_id=card.card_id)
