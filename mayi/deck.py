"""Deck creation and dealing utilities for May I?."""

from __future__ import annotations

import logging
from random import Random
from typing import List, NamedTuple, Optional, Sequence, Tuple

from .cards import Card, Rank, Suit

logger = logging.getLogger(__name__)

HAND_SIZE = 11

# One standard deck without the jokers, highest rank first as printed.
STANDARD_RANKS: tuple[Rank, ...] = (
    Rank.ACE,
    Rank.KING,
    Rank.QUEEN,
    Rank.JACK,
    Rank.TEN,
    Rank.NINE,
    Rank.EIGHT,
    Rank.SEVEN,
    Rank.SIX,
    Rank.FIVE,
    Rank.FOUR,
    Rank.THREE,
    Rank.TWO,
)

SUIT_ORDER: tuple[Suit, ...] = (Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS, Suit.SPADES)


class DeckError(ValueError):
    """Raised when a deck cannot satisfy a deal."""


class DealResult(NamedTuple):
    hands: List[List[Card]]
    stock: List[Card]
    discard: List[Card]


def build_deck(deck_count: int = 2, joker_count: int = 4) -> List[Card]:
    """Return an ordered multi-deck shoe with unique card ids."""
    if deck_count < 1:
        raise DeckError("At least one deck is required.")
    if joker_count < 0:
        raise DeckError("Joker count cannot be negative.")

    cards: List[Card] = []
    for _ in range(deck_count):
        for suit in SUIT_ORDER:
            for rank in STANDARD_RANKS:
                cards.append(Card(f"card-{len(cards)}", rank, suit))
    for _ in range(joker_count):
        cards.append(Card(f"card-{len(cards)}", Rank.JOKER))
    return cards


def deck_config_for_players(player_count: int) -> Tuple[int, int]:
    """Return (deck_count, joker_count) for a table size."""
    if player_count >= 6:
        return 3, 6
    return 2, 4


def deal(
    player_count: int,
    *,
    rng: Optional[Random] = None,
    deck: Optional[Sequence[Card]] = None,
    hand_size: int = HAND_SIZE,
    deck_config: Optional[Tuple[int, int]] = None,
) -> DealResult:
    """Deal hands, flip one card to start the discard pile, keep the rest as stock."""
    if deck is not None:
        cards = list(deck)
    else:
        cards = build_deck(*(deck_config or deck_config_for_players(player_count)))
        if rng is None:
            rng = Random()
        rng.shuffle(cards)

    needed = player_count * hand_size + 1
    if len(cards) < needed:
        raise DeckError(f"Deck of {len(cards)} cards cannot deal {player_count} hands of {hand_size}.")

    hands = [cards[i * hand_size : (i + 1) * hand_size] for i in range(player_count)]
    offset = player_count * hand_size
    discard = [cards[offset]]
    stock = cards[offset + 1 :]
    logger.debug("Dealt %d hands, stock=%d", player_count, len(stock))
    return DealResult(hands=hands, stock=stock, discard=discard)


def replenish_stock(
    stock: Sequence[Card],
    discard: Sequence[Card],
    rng: Optional[Random] = None,
) -> Tuple[List[Card], List[Card]]:
    """Shuffle all but the top discard back into an empty stock.

    Returns the new (stock, discard). A non-empty stock is returned untouched.
    """
    if stock:
        return list(stock), list(discard)
    if len(discard) <= 1:
        return [], list(discard)

    if rng is None:
        rng = Random()
    recycled = list(discard[:-1])
    rng.shuffle(recycled)
    logger.info("Stock exhausted; recycled %d discards", len(recycled))
    return recycled, [discard[-1]]
