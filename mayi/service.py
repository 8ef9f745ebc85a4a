"""Convenience service layer for UI and agents."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from .cards import card_label, serialize_card
from .game import GameSession, RoundEngine, RoundPhase
from .melds import Meld, MeldType
from .scoring import RoundRecord
from .turn import (
    Discard,
    DrawFromDiscard,
    DrawFromStock,
    GoOut,
    LayDown,
    LayOff,
    LayOffSpec,
    MeldProposal,
    SkipLayDown,
    SwapJoker,
    TurnCommand,
    TurnEngine,
)


@dataclass
class MeldView:
    meld_id: str
    meld_type: str
    owner_id: str
    cards: list[dict]
    labels: list[str]


@dataclass
class TurnView:
    phase: str
    round_number: int
    contract: str
    player_id: str
    is_down: bool
    hand: list[dict]
    hand_labels: list[str]
    table: list[MeldView]
    discard_top: Optional[dict]
    stock_size: int
    last_rejection: Optional[str]


@dataclass
class SessionView:
    scores: dict[str, int]
    round_number: Optional[int]
    round_phase: Optional[str]
    winner_id: Optional[str]
    turn: Optional[TurnView]


def describe_meld(meld: Meld) -> MeldView:
    return MeldView(
        meld_id=meld.meld_id,
        meld_type=meld.meld_type.value,
        owner_id=meld.owner_id,
        cards=[serialize_card(card) for card in meld.cards],
        labels=[card_label(card) for card in meld.cards],
    )


class TurnService:
    """Facade around GameSession for UI consumers."""

    def __init__(self, session: GameSession) -> None:
        self.session = session

    # Session lifecycle -------------------------------------------------

    def start_round(self) -> TurnView:
        self.session.start_round()
        return self.get_turn_view()

    def finish_round(self) -> RoundRecord:
        return self.session.finish_round()

    def has_active_round(self) -> bool:
        return self.session.current_round is not None

    # Actions -----------------------------------------------------------

    def draw(self, *, from_discard: bool = False) -> TurnView:
        return self._send(DrawFromDiscard() if from_discard else DrawFromStock())

    def lay_down(self, melds: Sequence[Mapping[str, object]]) -> TurnView:
        proposals = [
            MeldProposal(meld_type=MeldType(str(meld["type"])), card_ids=tuple(meld["card_ids"]))
            for meld in melds
        ]
        return self._send(LayDown(melds=tuple(proposals)))

    def lay_off(self, card_id: str, meld_id: str) -> TurnView:
        return self._send(LayOff(card_id=card_id, meld_id=meld_id))

    def go_out(self, lay_offs: Sequence[Mapping[str, str]]) -> TurnView:
        specs = [LayOffSpec(card_id=item["card_id"], meld_id=item["meld_id"]) for item in lay_offs]
        return self._send(GoOut(final_lay_offs=tuple(specs)))

    def swap_joker(self, joker_card_id: str, meld_id: str, swap_card_id: str) -> TurnView:
        return self._send(SwapJoker(joker_card_id=joker_card_id, meld_id=meld_id, swap_card_id=swap_card_id))

    def skip(self) -> TurnView:
        return self._send(SkipLayDown())

    def discard(self, card_id: str) -> TurnView:
        return self._send(Discard(card_id=card_id))

    def abandon_turn(self) -> TurnView:
        self._require_round().abandon_turn()
        return self.get_turn_view()

    # Views -------------------------------------------------------------

    def get_session_view(self) -> SessionView:
        game_round = self.session.current_round
        if game_round is None:
            return SessionView(
                scores=dict(self.session.scores),
                round_number=None,
                round_phase=None,
                winner_id=None,
                turn=None,
            )
        turn = self.get_turn_view() if game_round.phase == RoundPhase.ACTIVE else None
        return SessionView(
            scores=dict(self.session.scores),
            round_number=game_round.round_number,
            round_phase=game_round.phase.name.lower(),
            winner_id=game_round.winner_id,
            turn=turn,
        )

    def get_turn_view(self) -> TurnView:
        turn = self._require_turn()
        context = turn.context
        return TurnView(
            phase=turn.phase.value,
            round_number=context.round_number,
            contract=self._require_round().contract.describe(),
            player_id=context.player_id,
            is_down=context.is_down,
            hand=[serialize_card(card) for card in context.hand],
            hand_labels=[card_label(card) for card in context.hand],
            table=[describe_meld(meld) for meld in context.table],
            discard_top=serialize_card(context.discard[-1]) if context.discard else None,
            stock_size=len(context.stock),
            last_rejection=turn.last_rejection.value if turn.last_rejection else None,
        )

    # Helpers -----------------------------------------------------------

    def _send(self, command: TurnCommand) -> TurnView:
        turn = self._require_turn()
        turn.send(command)
        view = self.get_turn_view()
        if turn.is_terminal():
            self._require_round().finish_turn()
        return view

    def _require_round(self) -> RoundEngine:
        if self.session.current_round is None:
            raise RuntimeError("No active round.")
        return self.session.current_round

    def _require_turn(self) -> TurnEngine:
        game_round = self._require_round()
        if game_round.current_turn is None:
            if game_round.phase != RoundPhase.ACTIVE:
                raise RuntimeError("Round is over; finish it to continue.")
            return game_round.start_turn()
        return game_round.current_turn
