"""Tour economics: venue scaling, sell-through, per-city results and artist impacts."""

from __future__ import annotations

import random
from dataclasses import asdict, dataclass

from engine.content import ContentProvider

# (attendance upper bound, mood delta); the last band is open-ended.
_MOOD_BANDS = ((30, -3), (50, 0), (85, 5))
_TOP_MOOD = 8
_POPULARITY_MIN_ATTENDANCE = 70
_POPULARITY_BANDS = ((500, 1), (2000, 2), (5000, 3), (10000, 5))
_TOP_POPULARITY = 7

# Access tier -> capacity range key used for position-in-tier.
_RANGE_KEYS = {"none": "clubs", "clubs": "clubs", "theaters": "theaters", "arenas": "arenas"}


@dataclass
class SellThrough:
    base: float
    reputation_bonus: float
    popularity_bonus: float
    marketing_bonus: float
    venue_size_modifier: float
    rate: float


@dataclass
class CityResult:
    city_number: int
    capacity: int
    attendance_rate: int  # percent
    tickets_sold: int
    ticket_revenue: int
    merch_revenue: int
    revenue: int
    venue_fee: int
    production_fee: int
    marketing_cost: int
    profit: int

    def to_dict(self) -> dict:
        return asdict(self)


def _venue_ranges(content: ContentProvider) -> dict[str, tuple[int, int]]:
    tiers = content.access_tiers("venue")
    return {name: tuple(cfg["capacity_range"]) for name, cfg in tiers.items() if cfg.get("capacity_range")}


def venue_position(content: ContentProvider, capacity: int, venue_tier: str = "") -> float:
    """Where a capacity sits within its tier range, 0 at the smallest venue."""
    ranges = _venue_ranges(content)
    minimum = min(low for low, _ in ranges.values())
    if venue_tier and _RANGE_KEYS.get(venue_tier) in ranges:
        tier_max = ranges[_RANGE_KEYS[venue_tier]][1]
    else:
        tier_max = max(high for _, high in ranges.values())
        for key in ("clubs", "theaters", "arenas"):
            if key in ranges and capacity <= ranges[key][1]:
                tier_max = ranges[key][1]
                break
    if tier_max <= minimum:
        return 0.0
    return max(0.0, (capacity - minimum) / (tier_max - minimum))


def sell_through(
    content: ContentProvider,
    capacity: int,
    artist_popularity: int,
    reputation: int,
    marketing_per_city: float,
    venue_tier: str = "",
) -> SellThrough:
    cfg = content.tour()
    position = venue_position(content, capacity, venue_tier)
    popularity_effectiveness = 1.0 - position * cfg.get("popularity_scaling_factor", 0.3)
    venue_size_modifier = (1 - position) * cfg.get("venue_size_bonus", 0.5)

    base = cfg["sell_through_base"]
    reputation_bonus = (reputation / 100) * cfg["reputation_modifier"]
    popularity_bonus = (artist_popularity / 100) * cfg["local_popularity_weight"] * popularity_effectiveness
    marketing_bonus = (marketing_per_city / capacity) * 11 / 100 * 0.15 if marketing_per_city > 0 else 0.0

    rate = min(1.0, base + reputation_bonus + popularity_bonus + marketing_bonus + venue_size_modifier)
    return SellThrough(
        base=base,
        reputation_bonus=reputation_bonus,
        popularity_bonus=popularity_bonus,
        marketing_bonus=marketing_bonus,
        venue_size_modifier=venue_size_modifier,
        rate=rate,
    )


def ticket_price(content: ContentProvider, capacity: int, artist_popularity: int, venue_tier: str = "") -> float:
    """Scarcity pricing: popular artists in small rooms charge a premium."""
    cfg = content.tour()
    position = venue_position(content, capacity, venue_tier)
    base = cfg["ticket_price_base"] + capacity * cfg.get("ticket_price_per_capacity", 0.003)
    return base * (1 + (artist_popularity / 100) * (2.5 - position * 2.0))


def tour_costs(content: ContentProvider, capacity: int, cities: int, marketing_budget: int = 0) -> dict[str, int]:
    cfg = content.tour()
    venue_fee = round(capacity * cfg.get("venue_fee_per_capacity", 4))
    production_fee = round(capacity * cfg.get("production_fee_per_capacity", 2.7))
    return {
        "venue_fee_per_city": venue_fee,
        "production_fee_per_city": production_fee,
        "total": (venue_fee + production_fee) * cities + marketing_budget,
    }


def estimate_tour(
    content: ContentProvider,
    capacity: int,
    cities: int,
    artist_popularity: int,
    reputation: int,
    marketing_budget: int = 0,
    venue_tier: str = "",
) -> list[CityResult]:
    """Expected per-city results without attendance variance."""
    cfg = content.tour()
    costs = tour_costs(content, capacity, cities, marketing_budget)
    marketing_per_city = marketing_budget / cities if cities else 0
    st = sell_through(content, capacity, artist_popularity, reputation, marketing_per_city, venue_tier)
    price = ticket_price(content, capacity, artist_popularity, venue_tier)

    results = []
    for number in range(1, cities + 1):
        ticket_revenue = round(capacity * st.rate * price)
        merch_revenue = round(ticket_revenue * cfg["merch_percentage"])
        revenue = ticket_revenue + merch_revenue
        total_cost = costs["venue_fee_per_city"] + costs["production_fee_per_city"] + round(marketing_per_city)
        results.append(
            CityResult(
                city_number=number,
                capacity=capacity,
                attendance_rate=round(st.rate * 100),
                tickets_sold=round(capacity * st.rate),
                ticket_revenue=ticket_revenue,
                merch_revenue=merch_revenue,
                revenue=revenue,
                venue_fee=costs["venue_fee_per_city"],
                production_fee=costs["production_fee_per_city"],
                marketing_cost=round(marketing_per_city),
                profit=revenue - total_cost,
            )
        )
    return results


def plan_tour_cities(
    content: ContentProvider,
    capacity: int,
    cities: int,
    artist_popularity: int,
    reputation: int,
    rng: random.Random,
    marketing_budget: int = 0,
    venue_tier: str = "",
) -> list[CityResult]:
    """Actual per-city results, with attendance variance drawn once per city."""
    low, high = content.tour().get("attendance_variance", (0.8, 1.2))
    planned = []
    for city in estimate_tour(content, capacity, cities, artist_popularity, reputation, marketing_budget, venue_tier):
        factor = rng.uniform(low, high)
        rate = min(1.0, city.attendance_rate / 100 * factor)
        ticket_revenue = round(city.ticket_revenue * factor)
        merch_revenue = round(city.merch_revenue * factor)
        revenue = ticket_revenue + merch_revenue
        cost = city.venue_fee + city.production_fee + city.marketing_cost
        planned.append(
            CityResult(
                city_number=city.city_number,
                capacity=capacity,
                attendance_rate=round(rate * 100),
                tickets_sold=round(capacity * rate),
                ticket_revenue=ticket_revenue,
                merch_revenue=merch_revenue,
                revenue=revenue,
                venue_fee=city.venue_fee,
                production_fee=city.production_fee,
                marketing_cost=city.marketing_cost,
                profit=revenue - cost,
            )
        )
    return planned


def tour_impacts(attendance_rate: int, tickets_sold: int) -> tuple[int, int]:
    """Return (mood delta, popularity delta) for one city performance."""
    mood = _TOP_MOOD
    for bound, delta in _MOOD_BANDS:
        if attendance_rate < bound:
            mood = delta
            break

    popularity = 0
    if attendance_rate > _POPULARITY_MIN_ATTENDANCE:
        popularity = _TOP_POPULARITY
        for bound, delta in _POPULARITY_BANDS:
            if tickets_sold < bound:
                popularity = delta
                break
    return mood, popularity
