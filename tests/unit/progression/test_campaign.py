"""Tests for campaign scoring and victory types."""

from engine.config import load_config
from label.models import GameState
from progression.campaign import access_tier_bonus, calculate_campaign_results


def _access_cfg() -> dict:
    return load_config()["access_tiers"]


def test_score_and_commercial_success():
    state = GameState(id="g1", money=120000, reputation=40, playlist_access="niche", venue_access="clubs")
    results = calculate_campaign_results(state, _access_cfg(), 12)
    assert results.score_breakdown.money == 120
    assert results.score_breakdown.reputation == 8
    assert results.score_breakdown.access_tier_bonus == 20
    assert results.final_score == 148
    assert results.victory_type == "Commercial Success"
    assert "Big Money - Ended with $100k+" in results.achievements


def test_negative_money_is_failure():
    state = GameState(id="g1", money=-5000, reputation=90)
    results = calculate_campaign_results(state, _access_cfg(), 12)
    assert results.score_breakdown.money == 0
    assert results.victory_type == "Failure"


def test_middling_score_is_survival():
    state = GameState(id="g1", money=60000, reputation=10)
    results = calculate_campaign_results(state, _access_cfg(), 12)
    assert results.final_score == 62
    assert results.victory_type == "Survival"
    assert results.achievements == ["Profitable - Ended with $50k+"]


def test_reputation_heavy_label_earns_acclaim():
    state = GameState(
        id="g1",
        money=10000,
        reputation=100,
        playlist_access="flagship",
        press_access="national",
        venue_access="arenas",
    )
    assert access_tier_bonus(state, _access_cfg()) == 90
    results = calculate_campaign_results(state, _access_cfg(), 12)
    assert results.victory_type == "Critical Acclaim"
    assert "Media Mogul - Maximum playlist and press access" in results.achievements
    assert "Industry Legend - 90+ Reputation" in results.achievements


def test_even_split_is_balanced_growth():
    state = GameState(
        id="g1",
        money=20000,
        reputation=100,
        playlist_access="flagship",
        press_access="national",
        venue_access="arenas",
    )
    results = calculate_campaign_results(state, _access_cfg(), 12)
    assert results.victory_type == "Balanced Growth"
    assert results.to_dict()["score_breakdown"]["money"] == 20
