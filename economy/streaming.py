"""Streaming revenue: first-release outcomes, release multipliers and ongoing decay."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field

from engine.content import ContentProvider
from label.models import Song

logger = logging.getLogger(__name__)

DEFAULT_PLAYLIST_MULTIPLIER = 0.1
PLAYLIST_COMPONENT_SCALE = 100
MARKETING_SCALE_DIVISOR = 1000
MARKETING_SCALE_MULTIPLIER = 50
REPUTATION_BASELINE = 50


@dataclass
class ReleaseOutcome:
    total_streams: int
    total_revenue: int
    per_song: list[dict] = field(default_factory=list)
    multipliers: dict[str, float] = field(default_factory=dict)


def playlist_multiplier(content: ContentProvider, playlist_tier: str) -> float:
    tier = content.access_tiers("playlist").get(playlist_tier) or {}
    return tier.get("reach_multiplier", DEFAULT_PLAYLIST_MULTIPLIER)


def season_for_period(period: int, periods_per_quarter: int = 13) -> str:
    quarter = ((max(1, period) - 1) // periods_per_quarter) % 4 + 1
    return f"q{quarter}"


def streaming_outcome(
    content: ContentProvider,
    quality: float,
    playlist_tier: str,
    reputation: int,
    ad_spend: float,
    artist_popularity: int,
    rng: random.Random,
) -> int:
    """First-period streams for one song."""
    cfg = content.streaming()
    reach = playlist_multiplier(content, playlist_tier)

    base = (
        quality * cfg["quality_weight"]
        + reach * cfg["playlist_weight"] * PLAYLIST_COMPONENT_SCALE
        + reputation * cfg["reputation_weight"]
        + math.sqrt(max(0.0, ad_spend) / MARKETING_SCALE_DIVISOR) * cfg["marketing_weight"] * MARKETING_SCALE_MULTIPLIER
        + artist_popularity * cfg["popularity_weight"]
    )

    star_power = cfg.get("star_power_amplification") or {}
    if star_power.get("enabled"):
        base *= 1 + (artist_popularity / 100) * star_power.get("max_multiplier", 0)

    low, high = cfg.get("variance", (0.9, 1.1))
    variance = rng.uniform(low, high)
    return int(round(base * variance * cfg["first_week_multiplier"] * cfg["base_streams_per_point"]))


def ongoing_streams(
    content: ContentProvider,
    initial_streams: int,
    periods_since_release: int,
    reputation: int,
    playlist_tier: str,
) -> float:
    """Decayed streams for a song some periods after release (0 outside the window)."""
    cfg = content.ongoing_streams()
    if periods_since_release <= 0 or initial_streams <= 0:
        return 0.0
    if periods_since_release > cfg["max_decay_weeks"]:
        return 0.0

    reputation_bonus = 1 + (reputation - REPUTATION_BASELINE) * cfg["reputation_bonus_factor"]
    access_bonus = 1 + (playlist_multiplier(content, playlist_tier) - 1) * cfg["access_tier_bonus_factor"]
    decay = cfg["weekly_decay_rate"] ** periods_since_release
    return initial_streams * decay * reputation_bonus * access_bonus * cfg["ongoing_factor"]


def ongoing_revenue(
    content: ContentProvider,
    initial_streams: int,
    periods_since_release: int,
    reputation: int,
    playlist_tier: str,
) -> int:
    cfg = content.ongoing_streams()
    revenue_per_stream = cfg["revenue_per_stream"]
    if revenue_per_stream <= 0:
        raise ValueError("revenue_per_stream must be positive")
    streams = ongoing_streams(content, initial_streams, periods_since_release, reputation, playlist_tier)
    revenue = max(0, int(round(streams * revenue_per_stream)))
    if revenue < cfg.get("minimum_revenue_threshold", 0):
        return 0
    return revenue


def song_ongoing_revenue(
    content: ContentProvider,
    song: Song,
    current_period: int,
    reputation: int,
    playlist_tier: str,
) -> tuple[int, int]:
    """Return (revenue, streams) for a released song this period."""
    if song.release_period is None:
        return 0, 0
    weeks = current_period - song.release_period
    revenue = ongoing_revenue(content, song.initial_streams, weeks, reputation, playlist_tier)
    revenue_per_stream = content.ongoing_streams()["revenue_per_stream"]
    return revenue, int(round(revenue / revenue_per_stream))


def streaming_popularity_bonus(content: ContentProvider, weekly_streams: int, popularity: int) -> float:
    """Popularity points earned from one period of streams.

    The stream threshold doubles every 25 popularity, and the multiplier
    falls off sharply for already-popular artists.
    """
    cfg = content.streaming().get("popularity_bonus") or {}
    threshold = round(cfg.get("base_threshold", 3000) * 2 ** (popularity / cfg.get("doubling_popularity", 25)))
    if weekly_streams < threshold or weekly_streams <= 0:
        return 0.0
    points = min(math.log10(weekly_streams / threshold), cfg.get("max_points", 10))
    multiplier = 0.2 + 1.3 / (1 + (popularity / 35) ** 4)
    return max(cfg.get("min_bonus", 0.1), points * multiplier)


def _marketing_multiplier(planning: dict, budget: dict[str, float], marketing_weight: float) -> float:
    active = {channel: spend for channel, spend in budget.items() if spend > 0}
    total = sum(active.values())
    default_eff = planning.get("default_channel_effectiveness", 0.75)
    channels = planning.get("marketing_channels") or {}

    if active:
        effectiveness = sum(
            (spend / total) * (channels.get(channel) or {}).get("effectiveness", default_eff)
            for channel, spend in active.items()
        )
    else:
        effectiveness = default_eff

    scale = planning.get("marketing_budget_scale", 5000)
    base = 1 + math.sqrt(total / scale) * marketing_weight * 3 * effectiveness

    diversity_cfg = planning.get("diversity_bonus") or {}
    diversity = min(
        diversity_cfg.get("maximum", 1.0),
        diversity_cfg.get("base", 1.0) + max(0, len(active) - 1) * diversity_cfg.get("per_additional_channel", 0),
    )

    synergies = planning.get("channel_synergy_bonuses") or {}
    synergy = 1.0
    if "radio" in active and "digital" in active:
        synergy += synergies.get("radio_digital", 0)
    if "pr" in active and "influencer" in active:
        synergy += synergies.get("pr_influencer", 0)
    if len(active) == 4:
        synergy += synergies.get("full_spectrum", 0)

    return base * diversity * synergy


def lead_single_boost(planning: dict, release_period: int, lead_period: int, lead_budget: dict[str, float]) -> float:
    cfg = planning.get("lead_single_strategy") or {}
    gap = release_period - lead_period
    if gap in cfg.get("optimal_timing_periods_before", []):
        timing = cfg.get("optimal_timing_bonus", 1.0)
    elif gap == 3:
        timing = cfg.get("good_timing_bonus", 1.0)
    else:
        timing = cfg.get("default_bonus", 1.0)
    spend = sum(lead_budget.values())
    marketing = 1 + math.sqrt(spend / cfg.get("budget_scaling_factor", 5000)) * cfg.get(
        "marketing_effectiveness_factor", 0
    )
    return timing * marketing


def release_outcome(
    content: ContentProvider,
    songs: list[Song],
    release_type: str,
    release_period: int,
    marketing_budget: dict[str, float],
    playlist_tier: str,
    reputation: int,
    artist_popularity: int,
    rng: random.Random,
    lead_single: tuple[int, dict[str, float]] | None = None,
) -> ReleaseOutcome:
    """Streams and revenue for a release, split across songs by quality."""
    if not songs:
        return ReleaseOutcome(total_streams=0, total_revenue=0)

    planning = content.release_planning()
    revenue_per_stream = content.ongoing_streams()["revenue_per_stream"]
    type_bonus = (planning.get("release_type_bonuses") or {}).get(release_type.lower())
    if type_bonus is None:
        raise ValueError(f"Release type {release_type} has no release_type_bonuses entry")

    base_streams = [
        streaming_outcome(content, s.quality, playlist_tier, reputation, 0, artist_popularity, rng) for s in songs
    ]
    seasonal = (planning.get("seasonal_revenue_multipliers") or {}).get(
        season_for_period(release_period, content.periods_per_quarter), 1.0
    )
    marketing = _marketing_multiplier(planning, marketing_budget, content.streaming()["marketing_weight"])
    lead = 1.0
    if lead_single and release_type.lower() != "single":
        lead_period, lead_budget = lead_single
        lead = lead_single_boost(planning, release_period, lead_period, lead_budget)

    multiplier = type_bonus["revenue_multiplier"] * seasonal * marketing * lead
    total_streams = int(round(sum(base_streams) * multiplier))
    total_revenue = int(round(sum(base_streams) * revenue_per_stream * multiplier))

    total_quality = sum(s.quality for s in songs) or 1
    per_song = [
        {
            "song_id": s.id,
            "streams": int(round(total_streams * s.quality / total_quality)),
            "revenue": int(round(total_revenue * s.quality / total_quality)),
        }
        for s in songs
    ]
    return ReleaseOutcome(
        total_streams=total_streams,
        total_revenue=total_revenue,
        per_song=per_song,
        multipliers={"type": type_bonus["revenue_multiplier"], "seasonal": seasonal, "marketing": marketing, "lead": lead},
    )
