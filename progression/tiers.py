"""Reputation-gated unlocks: access tiers, producer tiers and focus slots."""

from __future__ import annotations

from typing import Any

from label.models import GameState

ACCESS_CATEGORIES = ("playlist", "press", "venue")


def ranked_tiers(tiers_cfg: dict[str, dict[str, Any]]) -> list[str]:
    """Tier names ordered from lowest to highest threshold."""
    return [name for name, _ in sorted(tiers_cfg.items(), key=lambda item: item[1].get("threshold", 0))]


def resolve_tier(reputation: int, tiers_cfg: dict[str, dict[str, Any]]) -> str:
    """Highest tier whose threshold the reputation meets."""
    for name in reversed(ranked_tiers(tiers_cfg)):
        if reputation >= tiers_cfg[name].get("threshold", 0):
            return name
    return "none"


def update_access_tiers(
    state: GameState,
    access_cfg: dict[str, dict[str, dict[str, Any]]],
    period: int,
) -> list[str]:
    """Recompute each category's tier in place; return unlock notices."""
    notices: list[str] = []
    for category in ACCESS_CATEGORIES:
        tiers = access_cfg.get(category)
        if not tiers:
            continue
        previous = state.access_tier(category)
        current = resolve_tier(state.reputation, tiers)
        if current == previous:
            continue
        state.set_access_tier(category, current)
        if current == "none":
            continue
        history = state.tier_unlock_history.setdefault(category, {})
        history.setdefault(current, period)
        label = current.replace("_", " ").title()
        notices.append(f"{category.title()} access unlocked: {label}")
    return notices


def unlock_producer_tiers(state: GameState, producer_cfg: dict[str, dict[str, Any]]) -> list[str]:
    """Add newly reachable producer tiers to the persistent unlocked set."""
    notices: list[str] = []
    for name, tier in sorted(producer_cfg.items(), key=lambda item: item[1].get("unlock_rep", 0)):
        if name in state.unlocked_producer_tiers:
            continue
        if state.reputation >= tier.get("unlock_rep", 0):
            state.unlocked_producer_tiers.append(name)
            notices.append(f"{name.title()} producers now available")
    return notices


def unlock_focus_slot(state: GameState, rules: dict[str, int]) -> str | None:
    if state.focus_slots >= rules["max"]:
        return None
    if state.reputation < rules["unlock_threshold"]:
        return None
    state.focus_slots = rules["max"]
    return f"Focus slot unlocked: {state.focus_slots} actions per period"
