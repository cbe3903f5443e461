"""Financial calculator: burn, salaries, project and marketing costs, reconciliation."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from engine.content import ContentProvider
from label.models import Artist, Executive
from label.summary import PeriodSummary

from .budget import economies_of_scale

logger = logging.getLogger(__name__)

# Share of the min..max marketing range a player campaign spends.
MARKETING_SPEND_POSITION = 0.6
DEFAULT_PRESS_CHANCE = 0.05


@dataclass
class BurnBreakdown:
    base: int
    artists: int
    executives: int
    artist_details: list[dict] = field(default_factory=list)
    executive_details: list[dict] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.base + self.artists + self.executives


@dataclass
class WeeklyFinancials:
    starting_balance: int
    operations: int
    artists: int
    executives: int
    marketing: int
    role_costs: int
    revenue: int
    expenses: int
    net_change: int
    ending_balance: int
    breakdown: str = ""


def _money(amount: int) -> str:
    return f"${amount:,}"


class FinancialCalculator:
    """Pure money math over the balance tables. Never touches GameState.money."""

    def __init__(self, content: ContentProvider):
        self._content = content

    # ── Recurring costs ─────────────────────────────────────────

    def base_burn(self, rng: random.Random) -> int:
        low, high = self._content.weekly_burn_range
        return int(round(rng.uniform(low, high)))

    def artist_salaries(self, artists: list[Artist]) -> tuple[int, list[dict]]:
        fee = self._content.default_artist_fee
        details = [
            {"artist_id": a.id, "name": a.name, "weekly_cost": a.weekly_cost or fee}
            for a in artists
            if a.signed
        ]
        return sum(d["weekly_cost"] for d in details), details

    def executive_salaries(self, executives: list[Executive], period: int) -> tuple[int, list[dict]]:
        """Executives are paid every N periods; other periods cost nothing."""
        interval = self._content.executive_salary_interval
        if interval > 1 and period % interval != 0:
            return 0, []
        details = [
            {
                "executive_id": e.id,
                "role": e.role,
                "title": self._content.role_title(e.role),
                "salary": self._content.executive_salary(e.role),
            }
            for e in executives
        ]
        return sum(d["salary"] for d in details), details

    def weekly_burn(
        self,
        rng: random.Random,
        artists: list[Artist],
        executives: list[Executive],
        period: int,
    ) -> BurnBreakdown:
        base = self.base_burn(rng)
        artist_total, artist_details = self.artist_salaries(artists)
        exec_total, exec_details = self.executive_salaries(executives, period)
        return BurnBreakdown(
            base=base,
            artists=artist_total,
            executives=exec_total,
            artist_details=artist_details,
            executive_details=exec_details,
        )

    # ── Project and marketing costs ─────────────────────────────

    def project_cost(
        self,
        project_type: str,
        producer_tier: str = "local",
        time_investment: str = "standard",
        quality: int = 50,
        song_count: int | None = None,
    ) -> int:
        """Total cost of a project, charged once when it is created."""
        costs = self._content.project_costs(project_type)
        count = song_count or costs.get("song_count_default") or 1
        song_system = self._content.song_count_system()

        if song_system.get("enabled") and count > 1:
            per_song = song_system.get("base_per_song_cost", {}).get(project_type.lower(), costs["min"])
            base = per_song * count * economies_of_scale(count, song_system.get("economies_of_scale"))
        else:
            base = costs["min"] + (costs["max"] - costs["min"]) * (quality / 100)

        producer_mult = self._content.producer_tier(producer_tier).get("cost_multiplier", 1.0)
        time_mult = self._content.time_investment(time_investment).get("cost_multiplier", 1.0)
        return int(base * producer_mult * time_mult)

    def per_song_project_cost(
        self,
        budget_per_song: int,
        song_count: int,
        producer_tier: str = "local",
        time_investment: str = "standard",
    ) -> dict:
        producer_mult = self._content.producer_tier(producer_tier).get("cost_multiplier", 1.0)
        time_mult = self._content.time_investment(time_investment).get("cost_multiplier", 1.0)
        base = budget_per_song * song_count
        return {
            "base_cost": base,
            "total_cost": int(round(base * producer_mult * time_mult)),
            "producer_multiplier": producer_mult,
            "time_multiplier": time_mult,
        }

    def marketing_cost(self, channel: str) -> int | None:
        costs = self._content.marketing_costs(channel)
        if not costs:
            return None
        return int(round(costs["min"] + (costs["max"] - costs["min"]) * MARKETING_SPEND_POSITION))

    # ── Press ───────────────────────────────────────────────────

    def access_chance(self, press_tier: str) -> float:
        tier = self._content.access_tiers("press").get(press_tier) or {}
        return tier.get("pickup_chance", DEFAULT_PRESS_CHANCE)

    def press_pickups(
        self,
        press_tier: str,
        pr_spend: float,
        reputation: int,
        rng: random.Random,
        has_story: bool = False,
    ) -> int:
        cfg = self._content.press()
        chance = cfg["base_chance"] + self.access_chance(press_tier)
        chance += pr_spend * cfg["pr_spend_modifier"]
        chance += reputation * cfg["reputation_modifier"]
        if has_story:
            chance += cfg.get("story_flag_bonus", 0)
        return sum(1 for _ in range(cfg["max_pickups_per_release"]) if rng.random() < chance)

    def press_outcome(
        self,
        quality: float,
        press_tier: str,
        reputation: int,
        marketing_budget: float,
        rng: random.Random,
    ) -> tuple[int, int]:
        """Return (pickups, reputation gain) for a release."""
        pickups = self.press_pickups(press_tier, marketing_budget, reputation, rng)
        multiplier = self._content.press().get("reputation_gain_multiplier", 2)
        gain = int(pickups * (quality / 100) * multiplier) if pickups > 0 else 0
        return pickups, gain

    # ── Reconciliation ──────────────────────────────────────────

    def weekly_financials(self, summary: PeriodSummary, starting_money: int) -> WeeklyFinancials:
        eb = summary.expense_breakdown
        net = summary.revenue - summary.expenses
        financials = WeeklyFinancials(
            starting_balance=starting_money,
            operations=eb.weekly_operations,
            artists=eb.artist_salaries,
            executives=eb.executive_salaries,
            marketing=eb.marketing_costs,
            role_costs=eb.role_meeting_costs,
            revenue=summary.revenue,
            expenses=summary.expenses,
            net_change=net,
            ending_balance=starting_money + net,
        )
        financials.breakdown = self.financial_breakdown(financials, summary)
        return financials

    @staticmethod
    def financial_breakdown(f: WeeklyFinancials, summary: PeriodSummary) -> str:
        """Human-readable "$start - $x (operations) ... = $end" line."""
        parts = [_money(f.starting_balance)]
        for amount, label in (
            (f.operations, "operations"),
            (f.artists, "artists"),
            (f.executives, "executives"),
            (f.marketing, "marketing"),
            (f.role_costs, "role costs"),
        ):
            if amount > 0:
                parts.append(f"- {_money(amount)} ({label})")

        rb = summary.revenue_breakdown
        for amount, label in (
            (rb.streaming, "streaming"),
            (rb.releases, "releases"),
            (rb.tours, "tours"),
            (rb.role_benefits, "role benefits"),
        ):
            if amount > 0:
                parts.append(f"+ {_money(amount)} ({label})")

        parts.append(f"= {_money(f.ending_balance)}")
        return " ".join(parts)
