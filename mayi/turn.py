"""Per-turn state machine for May I?.

A turn moves ``start -> drawn -> awaitingDiscard`` and ends in either
``turnComplete`` or ``wentOut``. Every command is handled by the pure
:func:`transition` function, which either returns a new context and phase
or a typed rejection with the context untouched. :class:`TurnEngine` wraps
it for callers that want a stateful handle on one turn.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from .cards import Card
from .contracts import MeldValidator, StandardMeldValidator
from .going_out import FINAL_ROUND, can_go_out, check_going_out, is_round6_last_card_block
from .melds import Meld, MeldType, can_swap_joker, place_on_meld, swap_joker

logger = logging.getLogger(__name__)


class TurnPhase(Enum):
    START = "start"
    DRAWN = "drawn"
    AWAITING_DISCARD = "awaitingDiscard"
    TURN_COMPLETE = "turnComplete"
    WENT_OUT = "wentOut"

    def is_terminal(self) -> bool:
        return self in TERMINAL_PHASES


TERMINAL_PHASES = frozenset({TurnPhase.TURN_COMPLETE, TurnPhase.WENT_OUT})


class TurnRejection(Enum):
    """Why a command was refused. A refused command never changes the turn."""

    WRONG_PHASE = "wrong_phase"
    ALREADY_DRAWN = "already_drawn"
    STOCK_EMPTY = "stock_empty"
    DISCARD_EMPTY = "discard_empty"
    ALREADY_DOWN = "already_down"
    NOT_DOWN = "not_down"
    CARD_NOT_IN_HAND = "card_not_in_hand"
    MELD_NOT_FOUND = "meld_not_found"
    ILLEGAL_LAY_DOWN = "illegal_lay_down"
    ILLEGAL_LAY_OFF = "illegal_lay_off"
    ILLEGAL_JOKER_SWAP = "illegal_joker_swap"
    HAND_NOT_EMPTIED = "hand_not_emptied"
    ROUND_6_LAST_CARD = "round_6_last_card"
    TURN_OVER = "turn_over"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TurnContext:
    player_id: str
    hand: Tuple[Card, ...]
    stock: Tuple[Card, ...]
    discard: Tuple[Card, ...]
    round_number: int
    is_down: bool = False
    laid_down_this_turn: bool = False
    table: Tuple[Meld, ...] = ()

    def __post_init__(self) -> None:
        for name in ("hand", "stock", "discard", "table"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    def find_card(self, card_id: str) -> Optional[Card]:
        for card in self.hand:
            if card.card_id == card_id:
                return card
        return None

    def find_meld(self, meld_id: str) -> Optional[Meld]:
        for meld in self.table:
            if meld.meld_id == meld_id:
                return meld
        return None


@dataclass(frozen=True)
class TurnOutput:
    went_out: bool
    player_id: str
    hand: Tuple[Card, ...]
    stock: Tuple[Card, ...]
    discard: Tuple[Card, ...]
    table: Tuple[Meld, ...]
    is_down: bool


# Commands ----------------------------------------------------------------


@dataclass(frozen=True)
class DrawFromStock:
    pass


@dataclass(frozen=True)
class DrawFromDiscard:
    pass


@dataclass(frozen=True)
class MeldProposal:
    meld_type: MeldType
    card_ids: Tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "card_ids", tuple(self.card_ids))


@dataclass(frozen=True)
class LayDown:
    melds: Tuple[MeldProposal, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "melds", tuple(self.melds))


@dataclass(frozen=True)
class LayOff:
    card_id: str
    meld_id: str


@dataclass(frozen=True)
class LayOffSpec:
    card_id: str
    meld_id: str


@dataclass(frozen=True)
class GoOut:
    final_lay_offs: Tuple[LayOffSpec, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "final_lay_offs", tuple(self.final_lay_offs))


@dataclass(frozen=True)
class SwapJoker:
    joker_card_id: str
    meld_id: str
    swap_card_id: str


@dataclass(frozen=True)
class SkipLayDown:
    pass


@dataclass(frozen=True)
class Discard:
    card_id: str


TurnCommand = Union[DrawFromStock, DrawFromDiscard, LayDown, LayOff, GoOut, SwapJoker, SkipLayDown, Discard]

MeldIdFactory = Callable[[], str]


def _new_meld_id() -> str:
    return f"meld-{uuid.uuid4().hex[:12]}"


@dataclass(frozen=True)
class TurnStep:
    phase: TurnPhase
    context: TurnContext
    rejection: Optional[TurnRejection] = None

    @property
    def accepted(self) -> bool:
        return self.rejection is None


# Transition ----------------------------------------------------------------


def transition(
    phase: TurnPhase,
    context: TurnContext,
    command: TurnCommand,
    validator: MeldValidator,
    *,
    meld_id_factory: MeldIdFactory = _new_meld_id,
) -> TurnStep:
    """Apply one command to a turn and return the resulting step."""
    handler = _HANDLERS.get(type(command))
    if handler is None:
        raise TypeError(f"Unsupported turn command: {command!r}")
    if phase.is_terminal():
        return _reject(phase, context, TurnRejection.TURN_OVER)
    return handler(phase, context, command, validator, meld_id_factory)


def _reject(phase: TurnPhase, context: TurnContext, reason: TurnRejection) -> TurnStep:
    return TurnStep(phase=phase, context=context, rejection=reason)


def _after_hand_shrinks(context: TurnContext, otherwise: TurnPhase) -> TurnPhase:
    """Re-check going out right after a card movement."""
    if check_going_out(context.hand).went_out and can_go_out(context):
        return TurnPhase.WENT_OUT
    return otherwise


def _draw_from_stock(phase, context, command, validator, meld_id_factory) -> TurnStep:
    if phase is not TurnPhase.START:
        return _reject(phase, context, TurnRejection.ALREADY_DRAWN)
    if not context.stock:
        return _reject(phase, context, TurnRejection.STOCK_EMPTY)
    card = context.stock[0]
    updated = replace(context, hand=context.hand + (card,), stock=context.stock[1:])
    return TurnStep(phase=TurnPhase.DRAWN, context=updated)


def _draw_from_discard(phase, context, command, validator, meld_id_factory) -> TurnStep:
    if phase is not TurnPhase.START:
        return _reject(phase, context, TurnRejection.ALREADY_DRAWN)
    if not context.discard:
        return _reject(phase, context, TurnRejection.DISCARD_EMPTY)
    card = context.discard[-1]
    updated = replace(context, hand=context.hand + (card,), discard=context.discard[:-1])
    return TurnStep(phase=TurnPhase.DRAWN, context=updated)


def _lay_down(phase, context, command: LayDown, validator, meld_id_factory) -> TurnStep:
    if phase is not TurnPhase.DRAWN:
        return _reject(phase, context, TurnRejection.WRONG_PHASE)
    if context.is_down:
        return _reject(phase, context, TurnRejection.ALREADY_DOWN)
    if not command.melds:
        return _reject(phase, context, TurnRejection.ILLEGAL_LAY_DOWN)

    drafts: List[Meld] = []
    used_ids: set[str] = set()
    for proposal in command.melds:
        cards: List[Card] = []
        for card_id in proposal.card_ids:
            card = context.find_card(card_id)
            if card is None:
                return _reject(phase, context, TurnRejection.CARD_NOT_IN_HAND)
            if card_id in used_ids:
                return _reject(phase, context, TurnRejection.ILLEGAL_LAY_DOWN)
            used_ids.add(card_id)
            cards.append(card)
        drafts.append(
            Meld(
                meld_id=meld_id_factory(),
                meld_type=proposal.meld_type,
                cards=tuple(cards),
                owner_id=context.player_id,
            )
        )

    if not validator.is_legal_contract_lay_down(drafts, context.round_number):
        return _reject(phase, context, TurnRejection.ILLEGAL_LAY_DOWN)

    updated = replace(
        context,
        hand=tuple(card for card in context.hand if card.card_id not in used_ids),
        table=context.table + tuple(drafts),
        is_down=True,
        laid_down_this_turn=True,
    )
    # The final round keeps the player in ``drawn`` so remaining cards can
    # still be laid off; earlier rounds move on to the discard.
    if context.round_number == FINAL_ROUND:
        otherwise = TurnPhase.DRAWN
    else:
        otherwise = TurnPhase.AWAITING_DISCARD
    return TurnStep(phase=_after_hand_shrinks(updated, otherwise), context=updated)


def _apply_lay_off(
    context: TurnContext,
    card_id: str,
    meld_id: str,
    validator: MeldValidator,
) -> Union[TurnContext, TurnRejection]:
    card = context.find_card(card_id)
    if card is None:
        return TurnRejection.CARD_NOT_IN_HAND
    meld = context.find_meld(meld_id)
    if meld is None:
        return TurnRejection.MELD_NOT_FOUND
    if not validator.is_legal_lay_off(card, meld):
        return TurnRejection.ILLEGAL_LAY_OFF

    extended = place_on_meld(meld, card)
    return replace(
        context,
        hand=tuple(c for c in context.hand if c.card_id != card_id),
        table=tuple(extended if m.meld_id == meld_id else m for m in context.table),
    )


def _lay_off(phase, context, command: LayOff, validator, meld_id_factory) -> TurnStep:
    if phase is not TurnPhase.DRAWN:
        return _reject(phase, context, TurnRejection.WRONG_PHASE)
    if not context.is_down:
        return _reject(phase, context, TurnRejection.NOT_DOWN)

    outcome = _apply_lay_off(context, command.card_id, command.meld_id, validator)
    if isinstance(outcome, TurnRejection):
        return _reject(phase, context, outcome)
    return TurnStep(phase=_after_hand_shrinks(outcome, TurnPhase.DRAWN), context=outcome)


def _go_out(phase, context, command: GoOut, validator, meld_id_factory) -> TurnStep:
    if phase is not TurnPhase.DRAWN:
        return _reject(phase, context, TurnRejection.WRONG_PHASE)
    if not context.is_down:
        return _reject(phase, context, TurnRejection.NOT_DOWN)

    # Simulate the whole batch on immutable snapshots; commit only the end state.
    simulated = context
    for item in command.final_lay_offs:
        outcome = _apply_lay_off(simulated, item.card_id, item.meld_id, validator)
        if isinstance(outcome, TurnRejection):
            return _reject(phase, context, outcome)
        simulated = outcome

    if not can_go_out(simulated):
        return _reject(phase, context, TurnRejection.HAND_NOT_EMPTIED)
    return TurnStep(phase=TurnPhase.WENT_OUT, context=simulated)


def _swap_joker(phase, context, command: SwapJoker, validator, meld_id_factory) -> TurnStep:
    if phase is not TurnPhase.DRAWN:
        return _reject(phase, context, TurnRejection.WRONG_PHASE)
    if context.is_down:
        return _reject(phase, context, TurnRejection.ALREADY_DOWN)
    card = context.find_card(command.swap_card_id)
    if card is None:
        return _reject(phase, context, TurnRejection.CARD_NOT_IN_HAND)
    meld = context.find_meld(command.meld_id)
    if meld is None:
        return _reject(phase, context, TurnRejection.MELD_NOT_FOUND)
    joker = next((c for c in meld.cards if c.card_id == command.joker_card_id), None)
    if joker is None or not can_swap_joker(meld, joker, card):
        return _reject(phase, context, TurnRejection.ILLEGAL_JOKER_SWAP)

    swapped = swap_joker(meld, joker, card)
    updated = replace(
        context,
        hand=tuple(c for c in context.hand if c.card_id != card.card_id) + (joker,),
        table=tuple(swapped if m.meld_id == meld.meld_id else m for m in context.table),
    )
    return TurnStep(phase=TurnPhase.DRAWN, context=updated)


def _skip_lay_down(phase, context, command, validator, meld_id_factory) -> TurnStep:
    if phase is not TurnPhase.DRAWN:
        return _reject(phase, context, TurnRejection.WRONG_PHASE)
    return TurnStep(phase=TurnPhase.AWAITING_DISCARD, context=context)


def _discard(phase, context, command: Discard, validator, meld_id_factory) -> TurnStep:
    if phase is not TurnPhase.AWAITING_DISCARD:
        return _reject(phase, context, TurnRejection.WRONG_PHASE)
    card = context.find_card(command.card_id)
    if card is None:
        return _reject(phase, context, TurnRejection.CARD_NOT_IN_HAND)
    if is_round6_last_card_block(context.round_number, len(context.hand) - 1):
        return _reject(phase, context, TurnRejection.ROUND_6_LAST_CARD)

    updated = replace(
        context,
        hand=tuple(c for c in context.hand if c.card_id != command.card_id),
        discard=context.discard + (card,),
    )
    if check_going_out(updated.hand).went_out:
        return TurnStep(phase=TurnPhase.WENT_OUT, context=updated)
    return TurnStep(phase=TurnPhase.TURN_COMPLETE, context=updated)


_HANDLERS: Dict[type, Callable[..., TurnStep]] = {
    DrawFromStock: _draw_from_stock,
    DrawFromDiscard: _draw_from_discard,
    LayDown: _lay_down,
    LayOff: _lay_off,
    GoOut: _go_out,
    SwapJoker: _swap_joker,
    SkipLayDown: _skip_lay_down,
    Discard: _discard,
}


# Engine ----------------------------------------------------------------------


@dataclass(frozen=True)
class CommandResult:
    accepted: bool
    phase: TurnPhase
    rejection: Optional[TurnRejection] = None


def build_output(context: TurnContext) -> TurnOutput:
    return TurnOutput(
        went_out=check_going_out(context.hand).went_out,
        player_id=context.player_id,
        hand=context.hand,
        stock=context.stock,
        discard=context.discard,
        table=context.table,
        is_down=context.is_down,
    )


@dataclass
class TurnEngine:
    """Drive a single player's turn with commands until it reaches a terminal phase."""

    context: TurnContext
    validator: MeldValidator = field(default_factory=StandardMeldValidator)
    meld_id_factory: MeldIdFactory = _new_meld_id

    phase: TurnPhase = field(init=False, default=TurnPhase.START)
    output: Optional[TurnOutput] = field(init=False, default=None)
    last_rejection: Optional[TurnRejection] = field(init=False, default=None)
    history: List[Tuple[str, Optional[TurnRejection]]] = field(init=False, default_factory=list)

    @property
    def value(self) -> str:
        return self.phase.value

    def is_terminal(self) -> bool:
        return self.phase.is_terminal()

    def send(self, command: TurnCommand) -> CommandResult:
        step = transition(
            self.phase,
            self.context,
            command,
            self.validator,
            meld_id_factory=self.meld_id_factory,
        )
        name = type(command).__name__
        self.history.append((name, step.rejection))

        if not step.accepted:
            self.last_rejection = step.rejection
            logger.debug(
                "Player %s: %s rejected in %s (%s)",
                self.context.player_id,
                name,
                self.phase.value,
                step.rejection,
            )
            return CommandResult(accepted=False, phase=self.phase, rejection=step.rejection)

        previous = self.phase
        self.phase = step.phase
        self.context = step.context
        self.last_rejection = None
        logger.debug("Player %s: %s %s -> %s", self.context.player_id, name, previous.value, self.phase.value)

        if self.phase.is_terminal():
            self.output = build_output(self.context)
            logger.info(
                "Player %s finished turn in round %d: %s",
                self.context.player_id,
                self.context.round_number,
                self.phase.value,
            )
        return CommandResult(accepted=True, phase=self.phase)

    def send_all(self, commands: Sequence[TurnCommand]) -> List[CommandResult]:
        return [self.send(command) for command in commands]
