"""Core engine package for May I? contract rummy."""

__all__ = [
    "cards",
    "deck",
    "melds",
    "contracts",
    "going_out",
    "turn",
    "scoring",
    "game",
    "rules_schema",
    "service",
]
