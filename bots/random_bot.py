"""Random baseline bot."""

from __future__ import annotations

import random
from typing import Optional

from mayi.contracts import contract_for_round
from mayi.turn import Discard, DrawFromDiscard, DrawFromStock, LayDown, LayOff, TurnCommand, TurnEngine

from .base import BotStrategy, legal_lay_offs
from .meld_search import find_contract


class RandomBot(BotStrategy):
    name = "Random"

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def choose_draw(self, turn: TurnEngine) -> TurnCommand:
        if turn.context.discard and self._rng.random() < 0.3:
            return DrawFromDiscard()
        return DrawFromStock()

    def choose_lay_down(self, turn: TurnEngine) -> Optional[LayDown]:
        contract = contract_for_round(turn.context.round_number)
        if contract is None or self._rng.random() < 0.2:
            return None
        return find_contract(turn.context.hand, contract)

    def choose_lay_off(self, turn: TurnEngine) -> Optional[LayOff]:
        options = legal_lay_offs(turn)
        if not options:
            return None
        card, meld = self._rng.choice(options)
        return LayOff(card_id=card.card_id, meld_id=meld.meld_id)

    def choose_discard(self, turn: TurnEngine) -> Discard:
        card = self._rng.choice(list(turn.context.hand))
        return Discard(card_id=card.card_id)
