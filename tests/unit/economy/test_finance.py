"""Tests for the financial calculator."""

import random

from economy.finance import FinancialCalculator
from engine.config import load_config
from engine.content import ContentProvider
from label.models import Artist, Executive
from label.summary import PeriodSummary


class _FixedRandom(random.Random):
    def __init__(self, value: float):
        super().__init__(0)
        self._value = value

    def random(self) -> float:
        return self._value


def _calc() -> FinancialCalculator:
    return FinancialCalculator(ContentProvider(load_config()))


def _executives() -> list[Executive]:
    return [
        Executive(id="e1", game_id="g1", role="head_ar"),
        Executive(id="e2", game_id="g1", role="cmo"),
    ]


def test_base_burn_stays_in_configured_range():
    calc = _calc()
    for seed in range(50):
        assert 3000 <= calc.base_burn(random.Random(seed)) <= 6000


def test_artist_salaries_cover_signed_artists_only():
    artists = [
        Artist(id="a1", game_id="g1", name="Ivy", weekly_cost=1500),
        Artist(id="a2", game_id="g1", name="Rook", signed=False),
    ]
    total, details = _calc().artist_salaries(artists)
    assert total == 1500
    assert [d["artist_id"] for d in details] == ["a1"]


def test_executive_salaries_paid_every_fourth_period():
    calc = _calc()
    assert calc.executive_salaries(_executives(), 3) == (0, [])
    total, details = calc.executive_salaries(_executives(), 4)
    assert total == 11000
    assert {d["title"] for d in details} == {"Head of A&R", "Chief Marketing Officer"}


def test_weekly_burn_totals_components():
    burn = _calc().weekly_burn(random.Random(1), [Artist(id="a1", game_id="g1", name="Ivy")], _executives(), 8)
    assert burn.artists == 1200
    assert burn.executives == 11000
    assert burn.total == burn.base + 1200 + 11000


def test_marketing_cost_uses_channel_range():
    calc = _calc()
    assert calc.marketing_cost("pr_push") == 5600
    assert calc.marketing_cost("digital_ads") == 3400
    assert calc.marketing_cost("skywriting") is None


def test_project_cost_single_and_ep():
    calc = _calc()
    assert calc.project_cost("single") == 7500
    assert calc.project_cost("ep", producer_tier="regional", song_count=5) == 28350


def test_press_outcome_with_every_roll_succeeding():
    pickups, gain = _calc().press_outcome(80, "blogs", 20, 5000, _FixedRandom(0.0))
    assert pickups == 3
    assert gain == 4


def test_press_outcome_without_pickups_gives_nothing():
    pickups, gain = _calc().press_outcome(80, "none", 0, 0, _FixedRandom(0.99))
    assert (pickups, gain) == (0, 0)


def test_weekly_financials_reconcile_and_skip_tracked_costs():
    summary = PeriodSummary(period=3, starting_money=10000)
    summary.add_expense(4000, "weekly_operations")
    summary.add_expense(1200, "artist_salaries")
    summary.add_revenue(500, "streaming")
    summary.track_expense(9000, "project_costs")

    financials = _calc().weekly_financials(summary, 10000)
    assert financials.ending_balance == 5300
    assert financials.net_change == -4700
    assert financials.breakdown == "$10,000 - $4,000 (operations) - $1,200 (artists) + $500 (streaming) = $5,300"
