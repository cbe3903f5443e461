"""Progression — relationships, unlocks and campaign scoring."""

from .campaign import CampaignResults, ScoreBreakdown, calculate_campaign_results
from .relationships import (
    clamp,
    decay_executive,
    next_artist_mood,
    next_popularity,
)
from .tiers import (
    resolve_tier,
    unlock_focus_slot,
    unlock_producer_tiers,
    update_access_tiers,
)

__all__ = [
    "CampaignResults",
    "ScoreBreakdown",
    "calculate_campaign_results",
    "clamp",
    "decay_executive",
    "next_artist_mood",
    "next_popularity",
    "resolve_tier",
    "unlock_focus_slot",
    "unlock_producer_tiers",
    "update_access_tiers",
]
