"""Round and game orchestration for May I?."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from random import Random
from typing import Dict, List, Optional, Sequence

from .cards import Card
from .contracts import Contract, MeldValidator, StandardMeldValidator
from .deck import deal, replenish_stock
from .melds import Meld
from .rules_schema import RuleSet
from .scoring import RoundRecord, determine_winners, round_scores, update_totals
from .turn import TurnContext, TurnEngine, TurnOutput

logger = logging.getLogger(__name__)


class RoundError(RuntimeError):
    """Base class for round orchestration errors."""


class InvalidRoundAction(RoundError):
    """Raised when an action does not fit the round's current phase."""


class RoundPhase(Enum):
    ACTIVE = auto()
    SCORING = auto()
    COMPLETE = auto()


@dataclass
class RoundEngine:
    """Deal one round, hand out turns in rotation and collect their results."""

    round_number: int
    player_ids: Sequence[str]
    dealer_index: int = 0
    rng: Optional[Random] = None
    deck: Optional[Sequence[Card]] = None
    rules: RuleSet = field(default_factory=RuleSet.default)
    validator: Optional[MeldValidator] = None

    phase: RoundPhase = field(init=False, default=RoundPhase.ACTIVE)
    hands: Dict[str, List[Card]] = field(init=False)
    down: Dict[str, bool] = field(init=False)
    stock: List[Card] = field(init=False)
    discard: List[Card] = field(init=False)
    table: List[Meld] = field(init=False, default_factory=list)
    current_player_index: int = field(init=False)
    current_turn: Optional[TurnEngine] = field(init=False, default=None)
    winner_id: Optional[str] = field(init=False, default=None)
    turns_played: int = field(init=False, default=0)
    record: Optional[RoundRecord] = field(init=False, default=None)

    def __post_init__(self) -> None:
        self.player_ids = list(self.player_ids)
        count = len(self.player_ids)
        if not self.rules.min_players <= count <= self.rules.max_players:
            raise RoundError(
                f"Game requires {self.rules.min_players}-{self.rules.max_players} players, got {count}."
            )
        if len(set(self.player_ids)) != count:
            raise RoundError("Player ids must be unique.")
        if self.round_number not in self.rules.contracts:
            raise RoundError(f"No contract for round {self.round_number}.")
        if self.rng is None:
            self.rng = Random()
        if self.validator is None:
            self.validator = StandardMeldValidator(self.rules.contract_table())

        dealt = deal(
            count,
            rng=self.rng,
            deck=self.deck,
            hand_size=self.rules.hand_size,
            deck_config=self.rules.deck_for_players(count),
        )
        self.hands = {pid: list(hand) for pid, hand in zip(self.player_ids, dealt.hands)}
        self.down = {pid: False for pid in self.player_ids}
        self.stock = list(dealt.stock)
        self.discard = list(dealt.discard)
        self.current_player_index = (self.dealer_index + 1) % count
        logger.info("Round %d dealt to %d players", self.round_number, count)

    @property
    def contract(self) -> Contract:
        return self.rules.contract_table()[self.round_number]

    @property
    def current_player_id(self) -> str:
        return self.player_ids[self.current_player_index]

    def start_turn(self) -> TurnEngine:
        self._ensure_phase(RoundPhase.ACTIVE)
        if self.current_turn is not None and not self.current_turn.is_terminal():
            raise InvalidRoundAction("Previous turn is still in progress.")

        if not self.stock:
            self.stock, self.discard = replenish_stock(self.stock, self.discard, self.rng)

        player_id = self.current_player_id
        context = TurnContext(
            player_id=player_id,
            hand=tuple(self.hands[player_id]),
            stock=tuple(self.stock),
            discard=tuple(self.discard),
            round_number=self.round_number,
            is_down=self.down[player_id],
            laid_down_this_turn=False,
            table=tuple(self.table),
        )
        assert self.validator is not None
        self.current_turn = TurnEngine(context=context, validator=self.validator)
        return self.current_turn

    def finish_turn(self) -> TurnOutput:
        self._ensure_phase(RoundPhase.ACTIVE)
        turn = self.current_turn
        if turn is None or turn.output is None:
            raise InvalidRoundAction("No finished turn to collect.")

        output = turn.output
        self.hands[output.player_id] = list(output.hand)
        self.down[output.player_id] = output.is_down
        self.stock = list(output.stock)
        self.discard = list(output.discard)
        self.table = list(output.table)
        self.current_turn = None
        self.turns_played += 1

        if output.went_out:
            self.winner_id = output.player_id
            self.phase = RoundPhase.SCORING
            logger.info("Player %s went out in round %d", output.player_id, self.round_number)
        else:
            self._advance()
        return output

    def abandon_turn(self) -> None:
        """Drop the live turn without applying it and move to the next player."""
        self._ensure_phase(RoundPhase.ACTIVE)
        if self.current_turn is None:
            raise InvalidRoundAction("No turn in progress.")
        if self.current_turn.is_terminal():
            raise InvalidRoundAction("Finished turns must be collected, not abandoned.")
        logger.info(
            "Abandoned turn of %s in round %d (phase %s)",
            self.current_player_id,
            self.round_number,
            self.current_turn.phase.value,
        )
        self.current_turn = None
        self.turns_played += 1
        self._advance()

    def complete_scoring(self) -> RoundRecord:
        self._ensure_phase(RoundPhase.SCORING)
        assert self.winner_id is not None
        scores = round_scores(self.hands, self.winner_id, self.rules.point_table())
        self.record = RoundRecord(round_number=self.round_number, winner_id=self.winner_id, scores=scores)
        self.phase = RoundPhase.COMPLETE
        return self.record

    def _advance(self) -> None:
        self.current_player_index = (self.current_player_index + 1) % len(self.player_ids)

    def _ensure_phase(self, expected: RoundPhase) -> None:
        if self.phase != expected:
            raise InvalidRoundAction(f"Action not allowed in phase {self.phase}. Expected {expected}.")


@dataclass
class GameSession:
    """Track totals across the six rounds of a game."""

    player_ids: Sequence[str]
    seed: Optional[int] = None
    dealer_index: int = 0
    rules: RuleSet = field(default_factory=RuleSet.default)
    scores: Dict[str, int] = field(init=False)
    rng: Random = field(init=False)
    current_round: Optional[RoundEngine] = field(default=None, init=False)
    round_history: List[RoundRecord] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.player_ids = list(self.player_ids)
        self.scores = {pid: 0 for pid in self.player_ids}
        self.rng = Random(self.seed)

    @property
    def next_round_number(self) -> int:
        return len(self.round_history) + 1

    def is_over(self) -> bool:
        return len(self.round_history) >= self.rules.round_count

    def start_round(self, deck: Optional[Sequence[Card]] = None) -> RoundEngine:
        if self.current_round is not None:
            raise RoundError("Current round has not been finished.")
        if self.is_over():
            raise RoundError("All rounds have been played.")
        number = self.next_round_number
        dealer = (self.dealer_index + number - 1) % len(self.player_ids)
        self.current_round = RoundEngine(
            round_number=number,
            player_ids=self.player_ids,
            dealer_index=dealer,
            rng=self.rng,
            deck=deck,
            rules=self.rules,
        )
        return self.current_round

    def finish_round(self) -> RoundRecord:
        if self.current_round is None:
            raise RoundError("No active round.")
        if self.current_round.phase == RoundPhase.ACTIVE:
            raise RoundError("Cannot finish round before someone goes out.")
        record = self.current_round.record or self.current_round.complete_scoring()
        self.scores = update_totals(self.scores, record.scores)
        self.round_history.append(record)
        self.current_round = None
        logger.info("Round %d complete, totals %s", record.round_number, self.scores)
        return record

    def winners(self) -> List[str]:
        if not self.is_over():
            raise RoundError("Game is not over yet.")
        return determine_winners(self.scores)
