"""Budget-to-quality curve for recording sessions.

A per-song budget is compared to a minimum viable cost for the project
shape. The ratio runs through a piecewise curve: a flat penalty under the
penalty threshold, linear segments up to the diminishing threshold, and a
logarithmic tail beyond it.
"""

from __future__ import annotations

import math

from engine.config import ConfigError
from engine.content import ContentProvider

# Multiplier at each breakpoint, left to right.
_SEGMENT_MULTIPLIERS = (0.65, 0.85, 1.05, 1.20, 1.35)

_RATINGS = (
    ("penalty_threshold", "Insufficient", "Budget too low for quality production"),
    ("minimum_viable", "Below Standard", "Minimal quality, corners will be cut"),
    ("optimal_efficiency", "Efficient", "Good value for money, solid quality"),
    ("luxury_threshold", "Premium", "High-end production, excellent quality"),
    ("diminishing_threshold", "Luxury", "Top-tier production, maximum quality"),
)


def economies_of_scale(song_count: int, economies_cfg: dict | None) -> float:
    """Per-song cost multiplier that shrinks as the batch grows."""
    if not economies_cfg or not economies_cfg.get("enabled"):
        return 1.0
    thresholds = economies_cfg["thresholds"]
    breakpoints = economies_cfg["breakpoints"]
    if song_count >= thresholds["large_project"]:
        return breakpoints["large_project"]
    if song_count >= thresholds["medium_project"]:
        return breakpoints["medium_project"]
    if song_count >= thresholds["small_project"]:
        return breakpoints["small_project"]
    return breakpoints.get("single_song", 1.0)


def minimum_viable_cost(content: ContentProvider, project_type: str, song_count: int = 1) -> int:
    """Per-song spend that counts as the baseline for a project of this shape."""
    kind = project_type.lower()
    budget_cfg = content.budget_system()
    fallback = budget_cfg.get("fallback_cost_per_song", 3500)
    song_system = content.song_count_system()

    if song_system.get("enabled") and song_count > 1:
        per_song = song_system.get("base_per_song_cost", {}).get(kind, fallback)
        per_song *= economies_of_scale(song_count, song_system.get("economies_of_scale"))
    else:
        try:
            costs = content.project_costs(kind)
        except ConfigError:
            costs = None
        if costs:
            default_count = costs.get("song_count_default") or song_count
            if song_count == 1:
                per_song = costs["min"] / default_count
            else:
                per_song = ((costs["min"] + costs["max"]) / 2) / default_count
        else:
            per_song = fallback

    if kind in ("single", "ep"):
        per_song *= budget_cfg.get("recording_baseline_multiplier", 1.5)
    return round(per_song)


def efficiency_ratio(budget_per_song: float, min_viable: float, budget_cfg: dict) -> float:
    ratio = budget_per_song / min_viable if min_viable > 0 else 1.0
    dampening = budget_cfg.get("efficiency_dampening") or {}
    if dampening.get("enabled") and dampening.get("factor") is not None:
        ratio = 1 + dampening["factor"] * (ratio - 1)
    return ratio


def piecewise_multiplier(ratio: float, budget_cfg: dict) -> float:
    bp = budget_cfg["efficiency_breakpoints"]
    min_mult = budget_cfg.get("min_multiplier", 0.65)
    max_mult = budget_cfg.get("max_multiplier", 1.35)
    edges = (
        bp["penalty_threshold"],
        bp["minimum_viable"],
        bp["optimal_efficiency"],
        bp["luxury_threshold"],
        bp["diminishing_threshold"],
    )

    if ratio < edges[0]:
        multiplier = _SEGMENT_MULTIPLIERS[0]
    elif ratio > edges[-1]:
        excess = ratio - edges[-1]
        multiplier = _SEGMENT_MULTIPLIERS[-1] + math.log(1 + excess) * budget_cfg.get("diminishing_factor", 0.5) * 0.1
    else:
        multiplier = _SEGMENT_MULTIPLIERS[-1]
        for i in range(len(edges) - 1):
            lo, hi = edges[i], edges[i + 1]
            if ratio <= hi:
                progress = (ratio - lo) / (hi - lo)
                start, end = _SEGMENT_MULTIPLIERS[i], _SEGMENT_MULTIPLIERS[i + 1]
                multiplier = start + (end - start) * progress
                break

    return max(min_mult, min(max_mult, multiplier))


def budget_quality_multiplier(
    content: ContentProvider,
    budget_per_song: float,
    project_type: str,
    song_count: int = 1,
) -> float:
    """Quality multiplier for a per-song budget, rounded to 3 places."""
    budget_cfg = content.budget_system()
    if not budget_cfg.get("enabled"):
        return 1.0
    if budget_per_song < 0 or song_count <= 0:
        return 1.0

    min_viable = minimum_viable_cost(content, project_type, song_count)
    ratio = efficiency_ratio(budget_per_song, min_viable, budget_cfg)
    return round(piecewise_multiplier(ratio, budget_cfg), 3)


def budget_efficiency_rating(
    content: ContentProvider,
    budget_per_song: float,
    project_type: str,
    song_count: int = 1,
) -> dict:
    """Label a budget for preview callers: rating, description and ratio."""
    budget_cfg = content.budget_system()
    min_viable = minimum_viable_cost(content, project_type, song_count)
    ratio = efficiency_ratio(budget_per_song, min_viable, budget_cfg)
    bp = budget_cfg["efficiency_breakpoints"]

    for i, (key, rating, description) in enumerate(_RATINGS):
        below = ratio < bp[key] if i < 2 else ratio <= bp[key]
        if below:
            return {"rating": rating, "description": description, "efficiency_ratio": ratio}
    return {
        "rating": "Excessive",
        "description": "Diminishing returns, money could be better spent",
        "efficiency_ratio": ratio,
    }
