"""OwnerSelectionPolicy — deterministic hash pick and rotation over the agent pool."""

from __future__ import annotations

import re

from leadrelay.domain.entities.owner import OwnerCandidate


def numeric_portion(identifier: object) -> int:
    """Digits of the identifier's string form as an int; 0 when there are none."""
    digits = re.sub(r"\D", "", str(identifier))
    return int(digits) if digits else 0


def select_index(identifier: object, pool: list[str]) -> int | None:
    """Index of the intended owner, or None for an empty pool."""
    if not pool:
        return None
    return numeric_portion(identifier) % len(pool)


def pick_intended(identifier: object, pool: list[str]) -> str | None:
    """Same identifier and same pool always give the same agent."""
    index = select_index(identifier, pool)
    return None if index is None else pool[index]


def rotate(identifier: object, pool: list[str]) -> list[str]:
    """The pool rotated so it starts at the intended owner."""
    index = select_index(identifier, pool)
    if index is None:
        return []
    return list(pool[index:]) + list(pool[:index])


def build_candidates(identifier: object, pool: list[str]) -> list[OwnerCandidate]:
    """Ranked candidates in fallback order; rank 0 is the intended owner."""
    return [
        OwnerCandidate.from_identifier(agent, rank)
        for rank, agent in enumerate(rotate(identifier, pool))
    ]
