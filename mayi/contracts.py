"""Round contracts and the meld validator consulted by the turn engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Protocol, Sequence

from .cards import Card
from .melds import Meld, MeldType, can_lay_off, is_valid_meld, run_bounds

logger = logging.getLogger(__name__)

# Same-suit runs must leave at least this many ranks between them.
MIN_SAME_SUIT_RUN_GAP = 2


@dataclass(frozen=True)
class Contract:
    round_number: int
    sets: int
    runs: int

    def describe(self) -> str:
        parts = []
        if self.sets:
            parts.append(f"{self.sets} set{'s' if self.sets > 1 else ''}")
        if self.runs:
            parts.append(f"{self.runs} run{'s' if self.runs > 1 else ''}")
        return " + ".join(parts)


CONTRACTS: Dict[int, Contract] = {
    1: Contract(round_number=1, sets=2, runs=0),
    2: Contract(round_number=2, sets=1, runs=1),
    3: Contract(round_number=3, sets=0, runs=2),
    4: Contract(round_number=4, sets=3, runs=0),
    5: Contract(round_number=5, sets=2, runs=1),
    6: Contract(round_number=6, sets=1, runs=2),
}

ROUND_COUNT = len(CONTRACTS)


def contract_for_round(round_number: int) -> Optional[Contract]:
    return CONTRACTS.get(round_number)


def minimum_cards_for_contract(contract: Contract) -> int:
    return contract.sets * 3 + contract.runs * 4


@dataclass(frozen=True)
class ContractValidation:
    valid: bool
    error: Optional[str] = None


def validate_contract_melds(contract: Contract, melds: Sequence[Meld]) -> ContractValidation:
    """Check a proposed lay-down against a round contract."""
    sets = [meld for meld in melds if meld.meld_type is MeldType.SET]
    runs = [meld for meld in melds if meld.meld_type is MeldType.RUN]

    if len(sets) != contract.sets:
        return ContractValidation(False, f"Contract requires {contract.sets} set(s), but got {len(sets)}")
    if len(runs) != contract.runs:
        return ContractValidation(False, f"Contract requires {contract.runs} run(s), but got {len(runs)}")

    for meld in melds:
        if not is_valid_meld(meld.meld_type, meld.cards):
            return ContractValidation(False, f"Meld declared as {meld.meld_type} is invalid")

    seen: set[str] = set()
    for meld in melds:
        for card in meld.cards:
            if card.card_id in seen:
                return ContractValidation(False, f"Card {card.card_id} appears in multiple melds")
            seen.add(card.card_id)

    if len(runs) >= 2:
        return _validate_same_suit_run_gap(runs)
    return ContractValidation(True)


def _validate_same_suit_run_gap(runs: Sequence[Meld]) -> ContractValidation:
    by_suit: Dict[str, List[tuple[int, int]]] = {}
    for run in runs:
        bounds = run_bounds(run.cards)
        if bounds is None:
            continue
        key = str(bounds.suit)
        by_suit.setdefault(key, []).append((bounds.low, bounds.high))

    for suit, spans in by_suit.items():
        for i in range(len(spans)):
            for j in range(i + 1, len(spans)):
                lower, upper = sorted((spans[i], spans[j]), key=lambda span: span[1])
                gap = upper[0] - lower[1] - 1
                if gap >= MIN_SAME_SUIT_RUN_GAP:
                    continue
                if gap < 0:
                    problem = "overlap"
                elif gap == 0:
                    problem = "are adjacent (no gap)"
                else:
                    problem = "have only 1 card gap"
                return ContractValidation(
                    False,
                    f"Same-suit runs of {suit} {problem}. "
                    f"Runs of the same suit must have a gap of at least {MIN_SAME_SUIT_RUN_GAP} cards between them.",
                )
    return ContractValidation(True)


class MeldValidator(Protocol):
    """Meld legality collaborator for the turn engine."""

    def is_legal_lay_off(self, card: Card, meld: Meld) -> bool:
        ...

    def is_legal_contract_lay_down(self, melds: Sequence[Meld], round_number: int) -> bool:
        ...


class StandardMeldValidator:
    """House rules: wild twos and jokers, six fixed contracts."""

    def __init__(self, contracts: Optional[Mapping[int, Contract]] = None) -> None:
        self.contracts = dict(contracts) if contracts is not None else dict(CONTRACTS)

    def is_legal_lay_off(self, card: Card, meld: Meld) -> bool:
        return can_lay_off(card, meld)

    def is_legal_contract_lay_down(self, melds: Sequence[Meld], round_number: int) -> bool:
        contract = self.contracts.get(round_number)
        if contract is None:
            logger.debug("No contract defined for round %s", round_number)
            return False
        result = validate_contract_melds(contract, melds)
        if not result.valid:
            logger.debug("Lay-down rejected for round %s: %s", round_number, result.error)
        return result.valid
