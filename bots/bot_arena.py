"""Simple bot arena for May I?."""

from __future__ import annotations

import argparse
import logging
from typing import Dict, Iterable, Optional, Sequence

from mayi.game import GameSession, RoundEngine, RoundPhase
from mayi.turn import SkipLayDown, TurnEngine, TurnPhase

from .base import BotStrategy
from .baseline_greedy import GreedyBot
from .random_bot import RandomBot

logger = logging.getLogger(__name__)

BOT_REGISTRY: Dict[str, type[BotStrategy]] = {
    "greedy": GreedyBot,
    "random": RandomBot,
}

MAX_LAY_OFFS_PER_TURN = 32


def play_turn(turn: TurnEngine, bot: BotStrategy) -> bool:
    """Drive one turn with a bot. Returns False when the bot is left stuck."""
    if not turn.send(bot.choose_draw(turn)).accepted:
        return False

    if turn.phase == TurnPhase.DRAWN and not turn.context.is_down:
        lay_down = bot.choose_lay_down(turn)
        if lay_down is not None:
            turn.send(lay_down)

    attempts = 0
    while turn.phase == TurnPhase.DRAWN and turn.context.is_down and attempts < MAX_LAY_OFFS_PER_TURN:
        lay_off = bot.choose_lay_off(turn)
        if lay_off is None or not turn.send(lay_off).accepted:
            break
        attempts += 1

    if turn.phase == TurnPhase.DRAWN:
        turn.send(SkipLayDown())

    if turn.phase == TurnPhase.AWAITING_DISCARD:
        turn.send(bot.choose_discard(turn))

    return turn.is_terminal()


def play_round(game_round: RoundEngine, bots: Sequence[BotStrategy], *, max_turns: int = 400) -> bool:
    """Play turns until someone goes out. Returns False if the turn cap is hit."""
    by_player = dict(zip(game_round.player_ids, bots))
    for bot in bots:
        bot.on_round_start(game_round)

    while game_round.phase == RoundPhase.ACTIVE:
        if game_round.turns_played >= max_turns:
            logger.warning("Round %d hit the %d turn cap", game_round.round_number, max_turns)
            return False
        turn = game_round.start_turn()
        if play_turn(turn, by_player[turn.context.player_id]):
            game_round.finish_turn()
        else:
            game_round.abandon_turn()
    return True


def run_match(
    bots: Sequence[BotStrategy],
    *,
    seed: Optional[int] = None,
    max_turns: int = 400,
) -> dict:
    player_ids = [f"player-{i}" for i in range(len(bots))]
    session = GameSession(player_ids=player_ids, seed=seed)
    history = []
    completed = True
    while not session.is_over():
        game_round = session.start_round()
        if not play_round(game_round, bots, max_turns=max_turns):
            completed = False
            break
        record = session.finish_round()
        history.append({"round": record.round_number, "winner": record.winner_id, "scores": record.scores})
    return {
        "scores": dict(session.scores),
        "history": history,
        "completed": completed,
        "winners": session.winners() if completed else [],
    }


def main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run a bot match.")
    parser.add_argument("--bots", nargs="+", default=["greedy", "greedy", "random"], choices=BOT_REGISTRY.keys())
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--max-turns", type=int, default=400)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)
    bots = [BOT_REGISTRY[name]() for name in args.bots]
    results = run_match(bots, seed=args.seed, max_turns=args.max_turns)

    for entry in results["history"]:
        print(f"Round {entry['round']}: {entry['winner']} went out, scores {entry['scores']}")
    print(f"Totals: {results['scores']}")
    if results["completed"]:
        print(f"Winner(s): {', '.join(results['winners'])}")
    else:
        print("Match stopped early: a round hit the turn cap.")


if __name__ == "__main__":
    main()
