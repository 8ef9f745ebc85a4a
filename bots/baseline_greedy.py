"""Greedy baseline: lay down as soon as possible, lay off everything that fits."""

from __future__ import annotations

from typing import Optional

from mayi.contracts import contract_for_round
from mayi.turn import LayDown, TurnEngine

from .base import BotStrategy
from .meld_search import find_contract


class GreedyBot(BotStrategy):
    name = "Greedy"

    def choose_lay_down(self, turn: TurnEngine) -> Optional[LayDown]:
        contract = contract_for_round(turn.context.round_number)
        if contract is None:
            return None
        return find_contract(turn.context.hand, contract)
