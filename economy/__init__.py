"""Economy — money, quality, streaming and tour formulas."""

from .budget import (
    budget_efficiency_rating,
    budget_quality_multiplier,
    economies_of_scale,
    minimum_viable_cost,
)
from .finance import BurnBreakdown, FinancialCalculator, WeeklyFinancials
from .quality import QualityBreakdown, song_quality, song_quality_breakdown
from .streaming import (
    ReleaseOutcome,
    ongoing_revenue,
    release_outcome,
    song_ongoing_revenue,
    streaming_outcome,
    streaming_popularity_bonus,
)
from .tours import CityResult, estimate_tour, plan_tour_cities, tour_costs, tour_impacts

__all__ = [
    "BurnBreakdown",
    "CityResult",
    "FinancialCalculator",
    "QualityBreakdown",
    "ReleaseOutcome",
    "WeeklyFinancials",
    "budget_efficiency_rating",
    "budget_quality_multiplier",
    "economies_of_scale",
    "estimate_tour",
    "minimum_viable_cost",
    "ongoing_revenue",
    "plan_tour_cities",
    "release_outcome",
    "song_ongoing_revenue",
    "song_quality",
    "song_quality_breakdown",
    "streaming_outcome",
    "streaming_popularity_bonus",
    "tour_costs",
    "tour_impacts",
]
