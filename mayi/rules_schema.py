"""Validation schema for May I? house rules configuration."""

from __future__ import annotations

from typing import Dict, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

from .cards import CARD_POINTS, Rank
from .contracts import CONTRACTS, Contract
from .going_out import FINAL_ROUND


class ContractConfig(BaseModel):
    sets: int = Field(..., ge=0, description="Number of sets required to lay down.")
    runs: int = Field(..., ge=0, description="Number of runs required to lay down.")

    @model_validator(mode="after")
    def ensure_some_meld(self) -> "ContractConfig":
        if self.sets + self.runs == 0:
            raise ValueError("A contract must require at least one meld.")
        return self


class DeckConfig(BaseModel):
    deck_count: int = Field(2, ge=1, description="Standard 52-card decks shuffled together.")
    joker_count: int = Field(4, ge=0, description="Jokers added to the shoe.")


class RuleSet(BaseModel):
    hand_size: int = Field(11, ge=1, description="Cards dealt to each player.")
    min_players: int = Field(3, ge=2)
    max_players: int = Field(8, ge=2)
    large_table_threshold: int = Field(6, ge=2, description="Player count from which the large shoe is used.")
    small_table_deck: DeckConfig = Field(default_factory=DeckConfig)
    large_table_deck: DeckConfig = Field(default_factory=lambda: DeckConfig(deck_count=3, joker_count=6))
    card_points: Dict[str, int]
    contracts: Dict[int, ContractConfig]

    @field_validator("card_points")
    @classmethod
    def validate_card_points(cls, value: Dict[str, int]) -> Dict[str, int]:
        if not value:
            raise ValueError("Card point mapping cannot be empty.")
        for rank, points in value.items():
            Rank(rank)
            if points < 0:
                raise ValueError(f"Card {rank} has negative points.")
        return value

    @field_validator("contracts")
    @classmethod
    def validate_contracts(cls, value: Dict[int, ContractConfig]) -> Dict[int, ContractConfig]:
        # The last-card rule in the turn engine is tied to the final round.
        if sorted(value) != list(range(1, FINAL_ROUND + 1)):
            raise ValueError(f"Contracts must cover rounds 1..{FINAL_ROUND}.")
        return value

    @model_validator(mode="after")
    def validate_table_size(self) -> "RuleSet":
        if self.min_players > self.max_players:
            raise ValueError("min_players cannot exceed max_players.")
        return self

    @classmethod
    def default(cls) -> "RuleSet":
        return cls(
            card_points={rank.value: points for rank, points in CARD_POINTS.items()},
            contracts={
                number: ContractConfig(sets=contract.sets, runs=contract.runs)
                for number, contract in CONTRACTS.items()
            },
        )

    @property
    def round_count(self) -> int:
        return len(self.contracts)

    def deck_for_players(self, player_count: int) -> Tuple[int, int]:
        config = self.large_table_deck if player_count >= self.large_table_threshold else self.small_table_deck
        return config.deck_count, config.joker_count

    def contract_table(self) -> Dict[int, Contract]:
        return {
            number: Contract(round_number=number, sets=config.sets, runs=config.runs)
            for number, config in self.contracts.items()
        }

    def point_table(self) -> Dict[Rank, int]:
        table = dict(CARD_POINTS)
        table.update({Rank(rank): points for rank, points in self.card_points.items()})
        return table
