"""Song quality model."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass

from engine.content import ContentProvider
from label.models import Artist

from .budget import budget_quality_multiplier

logger = logging.getLogger(__name__)


@dataclass
class QualityBreakdown:
    base: float
    time_factor: float
    popularity_factor: float
    fatigue_factor: float
    budget_factor: float
    mood_factor: float
    variance: float
    outlier: str  # "" | "breakout" | "critical_failure"
    quality: int


def skill_variance_range(combined_skill: float) -> float:
    """Percent half-width of normal variance: 35 at skill 0, 5 at skill 100."""
    return 35 - 30 * (combined_skill / 100)


def roll_variance(combined_skill: float, rng: random.Random, cfg: dict) -> tuple[float, str]:
    breakout = cfg.get("breakout_chance", 0.05)
    failure = cfg.get("failure_chance", 0.05)
    roll = rng.random()
    if roll < breakout:
        return 1.5 + 0.5 * (1 - combined_skill / 100), "breakout"
    if roll < breakout + failure:
        return 0.5 + 0.2 * (combined_skill / 100), "critical_failure"
    spread = skill_variance_range(combined_skill)
    return 1 + rng.uniform(-spread, spread) / 100, ""


def song_quality_breakdown(
    content: ContentProvider,
    artist: Artist,
    producer_tier: str,
    time_investment: str,
    budget_per_song: float,
    song_count: int,
    rng: random.Random,
    project_type: str = "single",
) -> QualityBreakdown:
    cfg = content.quality()
    producer_skill = content.producer_tier(producer_tier).get("skill", 40)
    time_mult = content.time_investment(time_investment).get("quality_multiplier", 1.0)
    song_count = max(1, song_count)

    base = artist.talent * cfg.get("talent_weight", 0.65) + producer_skill * cfg.get("producer_weight", 0.35)
    time_factor = time_mult * (1 + artist.work_ethic / 100 * cfg.get("work_ethic_bonus", 0.3))
    popularity_factor = 0.95 + 0.10 * math.sqrt(max(0, artist.popularity) / 100)
    fatigue_factor = cfg.get("session_fatigue", 0.97) ** max(0, song_count - cfg.get("fatigue_free_songs", 3))
    budget_factor = budget_quality_multiplier(content, budget_per_song, project_type, song_count)
    mood_factor = 0.9 + 0.2 * (artist.mood / 100)

    raw = base * time_factor * popularity_factor * fatigue_factor * budget_factor * mood_factor

    combined_skill = (artist.talent + producer_skill) / 2
    variance, outlier = roll_variance(combined_skill, rng, cfg)
    raw *= variance

    floor, ceiling = cfg.get("floor", 25), cfg.get("ceiling", 98)
    quality = int(round(min(ceiling, max(floor, raw))))
    if outlier:
        logger.info("Quality outlier for %s: %s (x%.2f)", artist.name, outlier, variance)

    return QualityBreakdown(
        base=base,
        time_factor=time_factor,
        popularity_factor=popularity_factor,
        fatigue_factor=fatigue_factor,
        budget_factor=budget_factor,
        mood_factor=mood_factor,
        variance=variance,
        outlier=outlier,
        quality=quality,
    )


def song_quality(
    content: ContentProvider,
    artist: Artist,
    producer_tier: str,
    time_investment: str,
    budget_per_song: float,
    song_count: int,
    rng: random.Random,
    project_type: str = "single",
) -> int:
    """Final quality in [floor, ceiling] for one song of a session."""
    return song_quality_breakdown(
        content, artist, producer_tier, time_investment, budget_per_song, song_count, rng, project_type
    ).quality
