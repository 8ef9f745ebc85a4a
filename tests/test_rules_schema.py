import pytest
from pydantic import ValidationError

from mayi.cards import Rank
from mayi.contracts import CONTRACTS
from mayi.rules_schema import ContractConfig, RuleSet


def six_rounds(overrides=None):
    contracts = {number: ContractConfig(sets=2, runs=0) for number in range(1, 7)}
    contracts.update(overrides or {})
    return contracts


def test_default_rules_match_house_rules():
    rules = RuleSet.default()
    assert rules.hand_size == 11
    assert rules.round_count == 6
    assert rules.contract_table() == CONTRACTS
    assert rules.deck_for_players(4) == (2, 4)
    assert rules.deck_for_players(6) == (3, 6)
    assert rules.point_table()[Rank.JOKER] == 50


def test_custom_point_override():
    rules = RuleSet(card_points={"Joker": 25}, contracts=six_rounds())
    assert rules.point_table()[Rank.JOKER] == 25
    assert rules.point_table()[Rank.ACE] == 15
    assert rules.round_count == 6


def test_custom_contract_keeps_six_rounds():
    rules = RuleSet(card_points={"7": 7}, contracts=six_rounds({6: ContractConfig(sets=0, runs=3)}))
    assert rules.contract_table()[6].runs == 3


@pytest.mark.parametrize(
    "contracts",
    [
        {1: ContractConfig(sets=2, runs=0)},
        {number: ContractConfig(sets=1, runs=0) for number in range(1, 8)},
        {number: ContractConfig(sets=1, runs=0) for number in range(2, 8)},
    ],
)
def test_contracts_must_cover_six_rounds(contracts):
    with pytest.raises(ValidationError):
        RuleSet(card_points={"7": 7}, contracts=contracts)


def test_rejects_bad_configuration():
    with pytest.raises(ValidationError):
        RuleSet(card_points={}, contracts=six_rounds())
    with pytest.raises(ValidationError):
        RuleSet(card_points={"7": -1}, contracts=six_rounds())
    with pytest.raises(ValidationError):
        ContractConfig(sets=0, runs=0)
    with pytest.raises(ValidationError):
        RuleSet(card_points={"7": 7}, contracts=six_rounds(), min_players=5, max_players=4)
