"""Per-period random source.

Every stochastic decision in one advance draws from a single generator keyed
by (game id, period, salt), so replaying the same period reproduces it exactly.
"""

from __future__ import annotations

import random


def period_seed(game_id: str, period: int, salt: str = "") -> str:
    seed = f"{game_id}-{period}"
    if salt:
        seed = f"{seed}-{salt}"
    return seed


def period_rng(game_id: str, period: int, salt: str = "") -> random.Random:
    """Return a fresh generator for one game period."""
    return random.Random(period_seed(game_id, period, salt))
