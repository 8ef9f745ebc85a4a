from random import Random

import pytest

from mayi.cards import Card, Rank, Suit, card_label, deserialize_card, is_wild, serialize_card
from mayi.deck import DeckError, build_deck, deal, deck_config_for_players, replenish_stock
from mayi.scoring import ScoringError, determine_winners, hand_score, round_scores, update_totals


def test_build_deck_sizes_and_unique_ids():
    deck = build_deck(2, 4)
    assert len(deck) == 108
    assert len({card.card_id for card in deck}) == 108
    assert sum(1 for card in deck if card.rank is Rank.JOKER) == 4
    assert len(build_deck(3, 6)) == 162


@pytest.mark.parametrize("players, expected", [(3, (2, 4)), (5, (2, 4)), (6, (3, 6)), (8, (3, 6))])
def test_deck_config_for_players(players, expected):
    assert deck_config_for_players(players) == expected


def test_deal_hands_discard_and_stock():
    result = deal(4, rng=Random(3))
    assert [len(hand) for hand in result.hands] == [11, 11, 11, 11]
    assert len(result.discard) == 1
    assert len(result.stock) == 108 - 44 - 1


def test_deal_with_fixed_deck_keeps_order():
    deck = build_deck(1, 0)
    result = deal(3, deck=deck, hand_size=5)
    assert result.hands[0] == deck[0:5]
    assert result.discard == [deck[15]]
    assert result.stock[0] == deck[16]


def test_deal_rejects_short_deck():
    with pytest.raises(DeckError):
        deal(8, deck=build_deck(1, 0))


def test_replenish_keeps_top_discard():
    discard = build_deck(1, 0)[:5]
    stock, new_discard = replenish_stock([], discard, Random(1))
    assert new_discard == [discard[-1]]
    assert sorted(card.card_id for card in stock) == sorted(card.card_id for card in discard[:-1])

    untouched, same = replenish_stock([discard[0]], discard[1:])
    assert untouched == [discard[0]]
    assert same == discard[1:]


def test_card_helpers():
    queen = Card("q", Rank.QUEEN, Suit.HEARTS)
    joker = Card("j", Rank.JOKER)
    assert card_label(queen) == "Q♥"
    assert card_label(joker) == "Joker"
    assert is_wild(joker) and is_wild(Card("t", Rank.TWO, Suit.CLUBS))
    assert deserialize_card(serialize_card(queen)) == queen
    with pytest.raises(ValueError):
        Card("bad", Rank.NINE)


def test_hand_score_point_values():
    hand = [
        Card("a", Rank.ACE, Suit.SPADES),
        Card("k", Rank.KING, Suit.SPADES),
        Card("7", Rank.SEVEN, Suit.SPADES),
        Card("2", Rank.TWO, Suit.SPADES),
        Card("j", Rank.JOKER),
    ]
    assert hand_score(hand) == 15 + 10 + 7 + 20 + 50


def test_round_scores_winner_scores_zero():
    hands = {
        "p1": [],
        "p2": [Card("k", Rank.KING, Suit.SPADES)],
        "p3": [Card("j", Rank.JOKER), Card("3", Rank.THREE, Suit.HEARTS)],
    }
    assert round_scores(hands, "p1") == {"p1": 0, "p2": 10, "p3": 53}
    with pytest.raises(ScoringError):
        round_scores(hands, "p9")


def test_totals_and_winners():
    totals = update_totals({"p1": 10, "p2": 5, "p3": 0}, {"p1": 0, "p2": 5, "p3": 10})
    assert totals == {"p1": 10, "p2": 10, "p3": 10}
    assert determine_winners(totals) == ["p1", "p2", "p3"]
    assert determine_winners({"p1": 40, "p2": 12}) == ["p2"]
    assert determine_winners({}) == []
