import pytest

from mayi.cards import Card, Rank, Suit
from mayi.going_out import can_go_out, check_going_out, get_going_out_score, is_round6_last_card_block
from mayi.turn import TurnContext


def some_cards(count):
    ranks = [Rank.THREE, Rank.SEVEN, Rank.KING, Rank.ACE, Rank.NINE]
    return [Card(f"c{i}", ranks[i % len(ranks)], Suit.HEARTS) for i in range(count)]


def context(hand, is_down):
    return TurnContext(player_id="p1", hand=hand, stock=(), discard=(), round_number=1, is_down=is_down)


@pytest.mark.parametrize("size", [0, 1, 2, 5, 11])
def test_check_going_out_tracks_empty_hand(size):
    result = check_going_out(some_cards(size))
    assert result.went_out == (size == 0)
    assert result.hand_empty == (size == 0)


@pytest.mark.parametrize("is_down", [True, False])
@pytest.mark.parametrize("size", [0, 1, 3])
def test_can_go_out_requires_down_and_empty_hand(is_down, size):
    assert can_go_out(context(some_cards(size), is_down)) == (is_down and size == 0)


@pytest.mark.parametrize("round_number", [1, 2, 3, 4, 5, 6])
@pytest.mark.parametrize("remaining", [0, 1, 2, 7])
def test_round6_block_only_for_empty_final_round_hand(round_number, remaining):
    expected = round_number == 6 and remaining == 0
    assert is_round6_last_card_block(round_number, remaining) is expected


def test_going_out_score_is_zero():
    assert get_going_out_score() == 0
