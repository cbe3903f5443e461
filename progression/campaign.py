"""End-of-campaign scoring, victory classification and achievements."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Any

from label.models import GameState

from .tiers import ACCESS_CATEGORIES, ranked_tiers

TIER_BONUS_STEP = 10
BALANCE_THRESHOLD = 0.7


@dataclass
class ScoreBreakdown:
    money: int = 0
    reputation: int = 0
    access_tier_bonus: int = 0

    @property
    def total(self) -> int:
        return self.money + self.reputation + self.access_tier_bonus


@dataclass
class CampaignResults:
    campaign_completed: bool
    final_score: int
    score_breakdown: ScoreBreakdown
    victory_type: str
    summary: str
    achievements: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def access_tier_bonus(state: GameState, access_cfg: dict[str, dict[str, Any]]) -> int:
    """10 points per tier rank above "none" in each category."""
    bonus = 0
    for category in ACCESS_CATEGORIES:
        tiers = access_cfg.get(category) or {}
        order = ranked_tiers(tiers)
        tier = state.access_tier(category)
        if tier in order:
            bonus += order.index(tier) * TIER_BONUS_STEP
    return bonus


def victory_type(state: GameState, breakdown: ScoreBreakdown) -> str:
    score = breakdown.total
    if state.money < 0 or score < 50:
        return "Failure"
    if score < 100:
        return "Survival"

    money, reputation = breakdown.money, breakdown.reputation
    if money > reputation * 1.5:
        return "Commercial Success"
    if reputation > money * 1.5:
        return "Critical Acclaim"
    if max(money, reputation) and min(money, reputation) / max(money, reputation) >= BALANCE_THRESHOLD:
        return "Balanced Growth"
    return "Commercial Success"


def achievements(state: GameState, breakdown: ScoreBreakdown, access_cfg: dict, length: int) -> list[str]:
    earned: list[str] = []
    if breakdown.money >= 1000:
        earned.append("Millionaire - Ended with $1M+")
    elif breakdown.money >= 100:
        earned.append("Big Money - Ended with $100k+")
    elif breakdown.money >= 50:
        earned.append("Profitable - Ended with $50k+")

    if state.reputation >= 90:
        earned.append("Industry Legend - 90+ Reputation")
    elif state.reputation >= 60:
        earned.append("Well Known - 60+ Reputation")

    top_playlist = ranked_tiers(access_cfg.get("playlist") or {})[-1:]
    top_press = ranked_tiers(access_cfg.get("press") or {})[-1:]
    if [state.playlist_access] == top_playlist and [state.press_access] == top_press:
        earned.append("Media Mogul - Maximum playlist and press access")

    if state.money >= 0 and not earned:
        earned.append(f"Survivor - Made it through {length} periods")
    return earned


def _campaign_summary(kind: str, state: GameState, score: int) -> str:
    cash = f"${state.money / 1000:.0f}k"
    rep = state.reputation
    if kind == "Commercial Success":
        return f"Your label became a commercial powerhouse, closing with {cash} in the bank and {rep} reputation."
    if kind == "Critical Acclaim":
        return f"Critics loved your roster: {rep} reputation built a brand artists want to join, with {cash} in the bank."
    if kind == "Balanced Growth":
        return f"You balanced art and business, finishing with {cash} and {rep} reputation."
    if kind == "Survival":
        return f"You survived a hard market with {cash} and {rep} reputation. The groundwork is laid."
    if kind == "Failure":
        return f"The industry won this round. You finished with {cash} and {rep} reputation."
    return f"Campaign concluded with a final score of {score}."


def calculate_campaign_results(state: GameState, access_cfg: dict, length: int) -> CampaignResults:
    breakdown = ScoreBreakdown(
        money=max(0, math.floor(state.money / 1000)),
        reputation=max(0, math.floor(state.reputation / 5)),
        access_tier_bonus=access_tier_bonus(state, access_cfg),
    )
    kind = victory_type(state, breakdown)
    return CampaignResults(
        campaign_completed=True,
        final_score=breakdown.total,
        score_breakdown=breakdown,
        victory_type=kind,
        summary=_campaign_summary(kind, state, breakdown.total),
        achievements=achievements(state, breakdown, access_cfg, length),
    )
