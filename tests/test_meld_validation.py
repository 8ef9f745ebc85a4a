import pytest

from mayi.cards import Card, Rank, Suit
from mayi.melds import (
    Meld,
    MeldType,
    can_lay_off,
    is_valid_run,
    is_valid_set,
    place_on_meld,
    run_bounds,
)

_counter = iter(range(10_000))


def card(rank, suit=None):
    return Card(f"c{next(_counter)}", Rank(rank), Suit(suit) if suit else None)


def joker():
    return card("Joker")


def spades(*ranks):
    return [card(rank, "spades") for rank in ranks]


def meld(meld_type, cards):
    return Meld(meld_id="m", meld_type=meld_type, cards=tuple(cards), owner_id="p1")


def test_sets_need_three_cards_of_one_rank():
    assert is_valid_set([card("8", "spades"), card("8", "hearts"), card("8", "spades")])
    assert not is_valid_set([card("8", "spades"), card("8", "hearts")])
    assert not is_valid_set([card("8", "spades"), card("8", "hearts"), card("9", "clubs")])


def test_set_wild_ratio():
    assert is_valid_set([card("8", "spades"), card("8", "hearts"), joker(), card("2", "clubs")])
    assert not is_valid_set([card("8", "spades"), joker(), card("2", "clubs")])
    assert not is_valid_set([joker(), joker(), joker()])


def test_runs_need_four_consecutive_same_suit_cards():
    assert is_valid_run(spades("5", "6", "7", "8"))
    assert is_valid_run(spades("J", "Q", "K", "A"))
    assert not is_valid_run(spades("5", "6", "7"))
    assert not is_valid_run(spades("5", "6", "8", "9"))
    assert not is_valid_run(spades("8", "7", "6", "5"))
    assert not is_valid_run([card("5", "spades"), card("6", "hearts"), card("7", "spades"), card("8", "spades")])


def test_runs_with_wilds_fill_gaps_inside_bounds():
    assert is_valid_run([card("5", "spades"), joker(), card("7", "spades"), card("8", "spades")])
    # Wild in front of a 3 would represent a 2, below the lowest run card.
    assert not is_valid_run([joker(), card("3", "spades"), card("4", "spades"), card("5", "spades")])
    assert not is_valid_run([card("Q", "spades"), card("K", "spades"), card("A", "spades"), joker()])
    assert not is_valid_run([card("5", "spades"), joker(), joker(), joker()])


def test_run_bounds_from_first_natural():
    bounds = run_bounds([joker(), card("6", "hearts"), card("7", "hearts"), card("8", "hearts")])
    assert bounds.low == 5
    assert bounds.high == 8
    assert bounds.suit is Suit.HEARTS
    assert run_bounds([joker(), card("2", "clubs")]) is None


@pytest.mark.parametrize(
    "candidate, expected",
    [
        (("4", "spades"), True),
        (("9", "spades"), True),
        (("3", "spades"), False),
        (("9", "hearts"), False),
        (("6", "spades"), False),
    ],
)
def test_run_lay_off(candidate, expected):
    run = meld(MeldType.RUN, spades("5", "6", "7", "8"))
    assert can_lay_off(card(*candidate), run) is expected


def test_set_lay_off():
    nines = meld(MeldType.SET, [card("9", "clubs"), card("9", "hearts"), card("9", "spades")])
    assert can_lay_off(card("9", "diamonds"), nines)
    assert can_lay_off(joker(), nines)
    assert not can_lay_off(card("10", "diamonds"), nines)

    balanced = meld(MeldType.SET, [card("9", "clubs"), card("9", "hearts"), joker(), card("2", "spades")])
    assert not can_lay_off(joker(), balanced)


def test_wild_cannot_extend_full_run():
    full = meld(MeldType.RUN, spades("3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K", "A"))
    assert not can_lay_off(joker(), full)


def test_place_on_meld_keeps_run_order():
    run = meld(MeldType.RUN, spades("5", "6", "7", "8"))
    low = card("4", "spades")
    high = card("9", "spades")

    assert place_on_meld(run, low).cards[0] == low
    assert place_on_meld(run, high).cards[-1] == high

    top = meld(MeldType.RUN, spades("J", "Q", "K", "A"))
    wild = joker()
    extended = place_on_meld(top, wild)
    assert extended.cards[0] == wild
    assert is_valid_run(extended.cards)
    assert len(run.cards) == 4
