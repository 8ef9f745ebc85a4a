"""Card-related data structures and helpers for May I?."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional


class Suit(Enum):
    SPADES = "spades"
    CLUBS = "clubs"
    DIAMONDS = "diamonds"
    HEARTS = "hearts"

    def __str__(self) -> str:
        return self.value


class Rank(Enum):
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"
    ACE = "A"
    TWO = "2"
    JOKER = "Joker"

    def __str__(self) -> str:
        return self.value


WILD_RANKS = frozenset({Rank.TWO, Rank.JOKER})

# Run order from lowest to highest. Twos are wild and aces are high only.
RUN_ORDER: list[Rank] = [
    Rank.THREE,
    Rank.FOUR,
    Rank.FIVE,
    Rank.SIX,
    Rank.SEVEN,
    Rank.EIGHT,
    Rank.NINE,
    Rank.TEN,
    Rank.JACK,
    Rank.QUEEN,
    Rank.KING,
    Rank.ACE,
]

RANK_VALUES: dict[Rank, int] = {rank: index + 3 for index, rank in enumerate(RUN_ORDER)}

MIN_RUN_VALUE = RANK_VALUES[Rank.THREE]
MAX_RUN_VALUE = RANK_VALUES[Rank.ACE]

# Penalty points left in hand at the end of a round.
CARD_POINTS: dict[Rank, int] = {
    Rank.THREE: 3,
    Rank.FOUR: 4,
    Rank.FIVE: 5,
    Rank.SIX: 6,
    Rank.SEVEN: 7,
    Rank.EIGHT: 8,
    Rank.NINE: 9,
    Rank.TEN: 10,
    Rank.JACK: 10,
    Rank.QUEEN: 10,
    Rank.KING: 10,
    Rank.ACE: 15,
    Rank.TWO: 20,
    Rank.JOKER: 50,
}

SUIT_SYMBOLS: dict[Suit, str] = {
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
    Suit.SPADES: "♠",
}


@dataclass(frozen=True)
class Card:
    """Immutable playing card. Identity is the card id; two decks share faces."""

    card_id: str
    rank: Rank
    suit: Optional[Suit] = None

    def __post_init__(self) -> None:
        if self.rank is Rank.JOKER and self.suit is not None:
            raise ValueError("Jokers carry no suit.")
        if self.rank is not Rank.JOKER and self.suit is None:
            raise ValueError(f"Card {self.card_id} of rank {self.rank} needs a suit.")

    def point_value(self) -> int:
        return CARD_POINTS[self.rank]

    def __str__(self) -> str:
        return card_label(self)


def is_wild(card: Card) -> bool:
    """Twos and jokers are wild."""
    return card.rank in WILD_RANKS


def is_natural(card: Card) -> bool:
    return not is_wild(card)


def rank_value(rank: Rank) -> Optional[int]:
    """Return the run position of a natural rank (3..14), or None for wild ranks."""
    return RANK_VALUES.get(rank)


def point_value(card: Card) -> int:
    return CARD_POINTS[card.rank]


def card_label(card: Card) -> str:
    if card.rank is Rank.JOKER or card.suit is None:
        return card.rank.value
    return f"{card.rank.value}{SUIT_SYMBOLS[card.suit]}"


def serialize_card(card: Card) -> dict[str, Optional[str]]:
    return {
        "id": card.card_id,
        "rank": card.rank.value,
        "suit": card.suit.value if card.suit is not None else None,
    }


def deserialize_card(payload: Mapping[str, Optional[str]]) -> Card:
    suit_name = payload.get("suit")
    suit = Suit(suit_name.lower()) if suit_name else None
    return Card(card_id=str(payload["id"]), rank=Rank(payload["rank"]), suit=suit)
