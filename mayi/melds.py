"""Meld structures and legality checks for sets and runs."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import List, NamedTuple, Optional, Sequence, Tuple

from .cards import MAX_RUN_VALUE, MIN_RUN_VALUE, RUN_ORDER, Card, Rank, Suit, is_wild, rank_value

MIN_SET_SIZE = 3
MIN_RUN_SIZE = 4


class MeldType(Enum):
    SET = "set"
    RUN = "run"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Meld:
    """A group of cards on the table. Run cards are kept in order from low to high."""

    meld_id: str
    meld_type: MeldType
    cards: Tuple[Card, ...]
    owner_id: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "cards", tuple(self.cards))

    def card_ids(self) -> list[str]:
        return [card.card_id for card in self.cards]


class RunBounds(NamedTuple):
    low: int
    high: int
    suit: Optional[Suit]


def count_wilds_and_naturals(cards: Sequence[Card]) -> Tuple[int, int]:
    wilds = sum(1 for card in cards if is_wild(card))
    return wilds, len(cards) - wilds


def wilds_outnumber_naturals(cards: Sequence[Card]) -> bool:
    """Equal counts are allowed; only a strict majority of wilds is illegal."""
    wilds, naturals = count_wilds_and_naturals(cards)
    return wilds > naturals


def set_rank(cards: Sequence[Card]) -> Optional[Rank]:
    for card in cards:
        if not is_wild(card):
            return card.rank
    return None


def is_valid_set(cards: Sequence[Card]) -> bool:
    """Three or more cards of one natural rank. Duplicate suits are fine in a multi-deck game."""
    if len(cards) < MIN_SET_SIZE:
        return False
    if wilds_outnumber_naturals(cards):
        return False
    rank = set_rank(cards)
    if rank is None:
        return False
    return all(is_wild(card) or card.rank is rank for card in cards)


def run_bounds(cards: Sequence[Card]) -> Optional[RunBounds]:
    """Infer the low/high values of an ordered run from its first natural card.

    Returns None when every card is wild.
    """
    for position, card in enumerate(cards):
        if is_wild(card):
            continue
        value = rank_value(card.rank)
        if value is None:
            continue
        low = value - position
        return RunBounds(low=low, high=low + len(cards) - 1, suit=card.suit)
    return None


def is_valid_run(cards: Sequence[Card]) -> bool:
    """Four or more same-suit cards in consecutive order; wilds fill gaps."""
    if len(cards) < MIN_RUN_SIZE:
        return False
    if wilds_outnumber_naturals(cards):
        return False

    bounds = run_bounds(cards)
    if bounds is None:
        return False
    if bounds.low < MIN_RUN_VALUE or bounds.high > MAX_RUN_VALUE:
        return False

    for position, card in enumerate(cards):
        if is_wild(card):
            continue
        if card.suit is not bounds.suit:
            return False
        if rank_value(card.rank) != bounds.low + position:
            return False
    return True


def is_valid_meld(meld_type: MeldType, cards: Sequence[Card]) -> bool:
    if meld_type is MeldType.SET:
        return is_valid_set(cards)
    return is_valid_run(cards)


def can_lay_off_to_set(card: Card, meld: Meld) -> bool:
    if meld.meld_type is not MeldType.SET:
        return False
    rank = set_rank(meld.cards)
    if not is_wild(card) and rank is not None and card.rank is not rank:
        return False
    return not wilds_outnumber_naturals(list(meld.cards) + [card])


def can_lay_off_to_run(card: Card, meld: Meld) -> bool:
    if meld.meld_type is not MeldType.RUN:
        return False
    bounds = run_bounds(meld.cards)
    if bounds is None:
        return False
    if wilds_outnumber_naturals(list(meld.cards) + [card]):
        return False

    if is_wild(card):
        return bounds.low > MIN_RUN_VALUE or bounds.high < MAX_RUN_VALUE

    if card.suit is not bounds.suit:
        return False
    value = rank_value(card.rank)
    if value is None:
        return False
    extends_low = value == bounds.low - 1 and value >= MIN_RUN_VALUE
    extends_high = value == bounds.high + 1 and value <= MAX_RUN_VALUE
    return extends_low or extends_high


def can_lay_off(card: Card, meld: Meld) -> bool:
    if meld.meld_type is MeldType.SET:
        return can_lay_off_to_set(card, meld)
    return can_lay_off_to_run(card, meld)


def place_on_meld(meld: Meld, card: Card) -> Meld:
    """Return a copy of the meld with the card added at its rightful position.

    Sets take the card at the end. Runs take a low-end natural at the front;
    a wild extends the high end when there is room, otherwise the low end.
    """
    if meld.meld_type is MeldType.SET:
        return replace(meld, cards=meld.cards + (card,))

    bounds = run_bounds(meld.cards)
    at_front = False
    if bounds is not None:
        if is_wild(card):
            at_front = bounds.high >= MAX_RUN_VALUE
        else:
            at_front = rank_value(card.rank) == bounds.low - 1

    if at_front:
        return replace(meld, cards=(card,) + meld.cards)
    return replace(meld, cards=meld.cards + (card,))


class WildPosition(NamedTuple):
    card: Card
    rank: Rank
    suit: Suit
    index: int


def joker_positions(meld: Meld) -> List[WildPosition]:
    """Return the rank and suit each wild card stands for in a run.

    Sets give an empty list: a wild in a set stands for no particular suit.
    """
    if meld.meld_type is not MeldType.RUN:
        return []
    bounds = run_bounds(meld.cards)
    if bounds is None or bounds.suit is None:
        return []
    positions: List[WildPosition] = []
    for index, card in enumerate(meld.cards):
        value = bounds.low + index
        if is_wild(card) and MIN_RUN_VALUE <= value <= MAX_RUN_VALUE:
            positions.append(
                WildPosition(card=card, rank=RUN_ORDER[value - MIN_RUN_VALUE], suit=bounds.suit, index=index)
            )
    return positions


def can_swap_joker(meld: Meld, joker: Card, card: Card) -> bool:
    """A joker in a run may be exchanged for the exact natural it stands for. Twos stay put."""
    if meld.meld_type is not MeldType.RUN:
        return False
    if joker.rank is not Rank.JOKER or is_wild(card):
        return False
    for position in joker_positions(meld):
        if position.card.card_id == joker.card_id:
            return card.rank is position.rank and card.suit is position.suit
    return False


def swap_joker(meld: Meld, joker: Card, card: Card) -> Meld:
    """Return a copy of the meld with the card sitting where the joker was."""
    return replace(meld, cards=tuple(card if c.card_id == joker.card_id else c for c in meld.cards))
