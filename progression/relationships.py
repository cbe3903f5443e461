"""Artist and executive relationship dynamics for one period."""

from __future__ import annotations

import math
from typing import Any

from label.models import Executive


def clamp(value: float, low: int = 0, high: int = 100) -> int:
    return int(max(low, min(high, round(value))))


def workload_stress(active_projects: int, cfg: dict[str, Any] | None = None) -> int:
    cfg = cfg or {}
    free = cfg.get("workload_free_projects", 2)
    per_project = cfg.get("workload_stress", 5)
    return max(0, active_projects - free) * per_project


def mood_drift(mood: float, cfg: dict[str, Any] | None = None) -> int:
    """Pull toward neutral: down above the band, up below it."""
    cfg = cfg or {}
    low, high = cfg.get("drift_band", (45, 55))
    step = cfg.get("mood_drift", 3)
    if mood > high:
        return -step
    if mood < low:
        return step
    return 0


def next_artist_mood(
    mood: int,
    release_boost: int,
    period_deltas: float,
    active_projects: int,
    cfg: dict[str, Any] | None = None,
) -> int:
    """Mood after one period.

    Drift only applies when no release boost landed this period, so a
    release high is not immediately eroded.
    """
    value = mood + release_boost + period_deltas
    value -= workload_stress(active_projects, cfg)
    if not release_boost:
        value += mood_drift(value, cfg)
    return clamp(value)


def next_popularity(popularity: int, gained: float, carry: float = 0.0) -> tuple[int, float]:
    """Return (popularity, carry). Whole points land now; the fraction waits for the next gain."""
    total = round(gained + carry, 6)
    whole = math.trunc(total)
    return clamp(popularity + whole), total - whole


def decay_executive(
    executive: Executive,
    current_period: int,
    used_this_period: bool,
    cfg: dict[str, Any] | None = None,
    title: str = "",
) -> list[str]:
    """Apply disuse decay in place and return human-readable notes."""
    cfg = cfg or {}
    notes: list[str] = []
    name = title or executive.role

    if executive.last_action_period is None:
        idle = current_period
    else:
        idle = current_period - executive.last_action_period

    if not used_this_period and idle >= cfg.get("executive_inactive_periods", 3):
        loss = cfg.get("executive_loyalty_decay", 5)
        before = executive.loyalty
        executive.loyalty = clamp(executive.loyalty - loss)
        if executive.loyalty != before:
            notes.append(f"{name} loyalty decreased from being ignored ({idle} periods)")

    if not used_this_period:
        neutral = cfg.get("neutral_mood", 50)
        low, high = cfg.get("drift_band", (45, 55))
        max_step = cfg.get("executive_mood_drift", 5)
        if executive.mood < low or executive.mood > high:
            gap = neutral - executive.mood
            step = max(-max_step, min(max_step, gap))
            executive.mood = clamp(executive.mood + step)
            direction = "improved" if step > 0 else "cooled"
            notes.append(f"{name} mood {direction} toward neutral")

    return notes
