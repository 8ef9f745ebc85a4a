"""Search a hand for melds that satisfy a round contract."""

from __future__ import annotations

from itertools import combinations
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from mayi.cards import MAX_RUN_VALUE, MIN_RUN_VALUE, Card, Suit, is_wild, rank_value
from mayi.contracts import Contract, validate_contract_melds
from mayi.melds import MIN_RUN_SIZE, MIN_SET_SIZE, Meld, MeldType
from mayi.turn import LayDown, MeldProposal

Candidate = Tuple[MeldType, Tuple[Card, ...]]


def _set_candidates(cards: Sequence[Card]) -> Iterator[Candidate]:
    """Every set a hand can form, using as few wilds as possible first.

    Same-rank naturals only differ by suit, so one pick per suit mix is enough.
    """
    wilds = [card for card in cards if is_wild(card)]
    by_rank: Dict[object, List[Card]] = {}
    for card in cards:
        if not is_wild(card):
            by_rank.setdefault(card.rank, []).append(card)
    for group in by_rank.values():
        for size in range(len(group), 0, -1):
            seen = set()
            for naturals in combinations(group, size):
                suits = tuple(sorted(card.suit.value for card in naturals))
                if suits in seen:
                    continue
                seen.add(suits)
                for wild_count in range(max(0, MIN_SET_SIZE - size), min(size, len(wilds)) + 1):
                    yield MeldType.SET, naturals + tuple(wilds[:wild_count])


def _run_candidates(cards: Sequence[Card]) -> Iterator[Candidate]:
    """Every run of any length in each suit, with wilds filling the holes."""
    wilds = [card for card in cards if is_wild(card)]
    by_suit: Dict[Suit, Dict[int, Card]] = {}
    for card in cards:
        if is_wild(card) or card.suit is None:
            continue
        value = rank_value(card.rank)
        if value is not None:
            by_suit.setdefault(card.suit, {}).setdefault(value, card)

    for values in by_suit.values():
        for start in range(MIN_RUN_VALUE, MAX_RUN_VALUE - MIN_RUN_SIZE + 2):
            for end in range(MAX_RUN_VALUE, start + MIN_RUN_SIZE - 2, -1):
                window = range(start, end + 1)
                present = sum(1 for value in window if value in values)
                missing = len(window) - present
                if missing > len(wilds) or missing > present:
                    continue
                spare = list(wilds)
                yield MeldType.RUN, tuple(values[value] if value in values else spare.pop() for value in window)


def _search(
    cards: Tuple[Card, ...],
    sets_needed: int,
    runs_needed: int,
    chosen: Tuple[Candidate, ...],
    contract: Contract,
) -> Optional[Tuple[Candidate, ...]]:
    if len(cards) < sets_needed * MIN_SET_SIZE + runs_needed * MIN_RUN_SIZE:
        return None
    if sets_needed == 0 and runs_needed == 0:
        drafts = [
            Meld(meld_id=f"draft-{i}", meld_type=meld_type, cards=group, owner_id="")
            for i, (meld_type, group) in enumerate(chosen)
        ]
        return chosen if validate_contract_melds(contract, drafts).valid else None

    if runs_needed:
        candidates, next_sets, next_runs = _run_candidates(cards), sets_needed, runs_needed - 1
    else:
        candidates, next_sets, next_runs = _set_candidates(cards), sets_needed - 1, runs_needed

    for meld_type, group in candidates:
        used = {card.card_id for card in group}
        remaining = tuple(card for card in cards if card.card_id not in used)
        found = _search(remaining, next_sets, next_runs, chosen + ((meld_type, group),), contract)
        if found is not None:
            return found
    return None


def find_contract(hand: Sequence[Card], contract: Contract) -> Optional[LayDown]:
    """Return a LayDown meeting the contract from the given hand, or None."""
    found = _search(tuple(hand), contract.sets, contract.runs, (), contract)
    if found is None:
        return None
    return LayDown(
        melds=tuple(
            MeldProposal(meld_type=meld_type, card_ids=tuple(card.card_id for card in group))
            for meld_type, group in found
        )
    )
