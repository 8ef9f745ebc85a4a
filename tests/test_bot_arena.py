from mayi.cards import Card, Rank, Suit
from mayi.contracts import CONTRACTS
from mayi.melds import Meld, MeldType
from mayi.turn import TurnContext, TurnEngine, TurnPhase

from bots.baseline_greedy import GreedyBot
from bots.bot_arena import play_turn, run_match
from bots.meld_search import find_contract
from bots.random_bot import RandomBot


def card(card_id, rank, suit=None):
    return Card(card_id, Rank(rank), Suit(suit) if suit else None)


def test_find_contract_two_runs_with_wild():
    hand = [
        card("3h", "3", "hearts"),
        card("4h", "4", "hearts"),
        card("6h", "6", "hearts"),
        card("jk", "Joker"),
        card("9s", "9", "spades"),
        card("10s", "10", "spades"),
        card("js", "J", "spades"),
        card("qs", "Q", "spades"),
        card("ks", "K", "spades"),
        card("5c", "5", "clubs"),
    ]
    lay_down = find_contract(hand, CONTRACTS[3])
    assert lay_down is not None
    used = [card_id for meld in lay_down.melds for card_id in meld.card_ids]
    assert "jk" in used
    assert "ks" in used


def test_find_contract_none_when_impossible():
    hand = [card(f"x{i}", rank, "clubs") for i, rank in enumerate(["3", "5", "7", "9", "J", "K"])]
    assert find_contract(hand, CONTRACTS[1]) is None


def test_greedy_turn_lays_down_and_discards():
    hand = [
        card("7s", "7", "spades"),
        card("7h", "7", "hearts"),
        card("7d", "7", "diamonds"),
        card("qc", "Q", "clubs"),
        card("qs", "Q", "spades"),
        card("qh", "Q", "hearts"),
        card("ah", "A", "hearts"),
    ]
    context = TurnContext(player_id="p1", hand=hand, stock=[card("3c", "3", "clubs")], discard=[], round_number=1)
    turn = TurnEngine(context=context)

    assert play_turn(turn, GreedyBot())
    assert turn.context.is_down
    assert turn.context.discard[-1].card_id == "ah"
    assert [c.card_id for c in turn.output.hand] == ["3c"]


def test_bot_stuck_in_round6_reports_failure():
    nines = Meld(
        meld_id="nines",
        meld_type=MeldType.SET,
        cards=(card("9c", "9", "clubs"), card("9d", "9", "diamonds"), card("9h", "9", "hearts")),
        owner_id="p2",
    )
    context = TurnContext(
        player_id="p1",
        hand=[card("9s", "9", "spades")],
        stock=[card("qh", "Q", "hearts")],
        discard=[],
        round_number=6,
        is_down=True,
        table=[nines],
    )
    turn = TurnEngine(context=context)

    assert play_turn(turn, GreedyBot()) is False
    assert turn.phase == TurnPhase.AWAITING_DISCARD
    assert [c.card_id for c in turn.context.hand] == ["qh"]


def test_run_match_executes():
    results = run_match([GreedyBot(), GreedyBot(), RandomBot(seed=3)], seed=7, max_turns=300)
    assert set(results["scores"]) == {"player-0", "player-1", "player-2"}
    assert isinstance(results["completed"], bool)
    for entry in results["history"]:
        assert entry["scores"][entry["winner"]] == 0


def test_find_contract_shortens_run_to_free_a_set_card():
    hand = [
        card("5s", "5", "spades"),
        card("6s", "6", "spades"),
        card("7s", "7", "spades"),
        card("8s", "8", "spades"),
        card("9s", "9", "spades"),
        card("9h", "9", "hearts"),
        card("9d", "9", "diamonds"),
        card("kc", "K", "clubs"),
    ]
    lay_down = find_contract(hand, CONTRACTS[2])
    assert lay_down is not None
    by_type = {meld.meld_type: meld.card_ids for meld in lay_down.melds}
    assert by_type[MeldType.RUN] == ("5s", "6s", "7s", "8s")
    assert sorted(by_type[MeldType.SET]) == ["9d", "9h", "9s"]


def test_find_contract_backtracks_over_wild_placement():
    hand = [
        card("4h", "4", "hearts"),
        card("5h", "5", "hearts"),
        card("6h", "6", "hearts"),
        card("7h", "7", "hearts"),
        card("jc", "J", "clubs"),
        card("jd", "J", "diamonds"),
        card("w2", "2", "spades"),
        card("7c", "7", "clubs"),
        card("7d", "7", "diamonds"),
    ]
    lay_down = find_contract(hand, CONTRACTS[2])
    assert lay_down is not None
    used = [card_id for meld in lay_down.melds for card_id in meld.card_ids]
    assert len(used) == len(set(used))
