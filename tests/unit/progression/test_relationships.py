"""Tests for artist and executive relationship dynamics."""

import random

import pytest

from label.models import Executive
from progression.relationships import clamp, decay_executive, next_artist_mood, next_popularity, workload_stress


def test_clamp_bounds():
    assert clamp(150) == 100
    assert clamp(-3) == 0
    assert clamp(49.6) == 50


def test_neutral_mood_holds_steady():
    assert next_artist_mood(50, 0, 0, 0) == 50


def test_high_mood_drifts_down():
    assert next_artist_mood(80, 0, 0, 0) == 77


def test_release_boost_skips_drift():
    assert next_artist_mood(80, 5, 0, 0) == 85


def test_workload_stress_beyond_two_projects():
    assert workload_stress(2) == 0
    assert workload_stress(4) == 10
    # 50 - 10 stress = 40, then drift back up by 3
    assert next_artist_mood(50, 0, 0, 4) == 43


def test_mood_stays_in_range_under_random_pressure():
    rng = random.Random(3)
    mood = 50
    for _ in range(200):
        mood = next_artist_mood(mood, rng.choice([0, 5, 20]), rng.uniform(-40, 40), rng.randint(0, 6))
        assert 0 <= mood <= 100


def test_popularity_gain_is_clamped():
    assert next_popularity(99, 5.4)[0] == 100
    popularity, carry = next_popularity(10, 1.5)
    assert popularity == 11
    assert carry == pytest.approx(0.5)


def test_small_popularity_gains_accumulate():
    popularity, carry = 20, 0.0
    for _ in range(5):
        popularity, carry = next_popularity(popularity, 0.3, carry)
    assert popularity == 21
    assert carry == pytest.approx(0.5)

    popularity, carry = next_popularity(popularity, -0.2, carry)
    assert (popularity, carry) == (21, pytest.approx(0.3))


def test_ignored_executive_loses_loyalty_and_drifts():
    executive = Executive(id="e1", game_id="g1", role="cmo", mood=80, loyalty=50, last_action_period=1)
    notes = decay_executive(executive, 5, used_this_period=False, title="Chief Marketing Officer")
    assert executive.loyalty == 45
    assert executive.mood == 75
    assert len(notes) == 2
    assert "Chief Marketing Officer" in notes[0]


def test_used_executive_keeps_meeting_boost():
    executive = Executive(id="e1", game_id="g1", role="cmo", mood=80, loyalty=50, last_action_period=1)
    assert decay_executive(executive, 5, used_this_period=True) == []
    assert (executive.mood, executive.loyalty) == (80, 50)


def test_recently_used_executive_in_band_is_untouched():
    executive = Executive(id="e1", game_id="g1", role="cco", mood=52, loyalty=60, last_action_period=4)
    assert decay_executive(executive, 5, used_this_period=False) == []
    assert (executive.mood, executive.loyalty) == (52, 60)


def test_executive_notes_fall_back_to_role_id():
    executive = Executive(id="e1", game_id="g1", role="cco", mood=20, last_action_period=4)
    notes = decay_executive(executive, 5, used_this_period=False)
    assert notes == ["cco mood improved toward neutral"]
