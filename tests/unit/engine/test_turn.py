"""Tests for the turn controller."""

import asyncio
import logging

import pytest

from engine.config import load_config
from engine.content import ContentProvider
from engine.core import CampaignCompletedError, GameEngine
from engine.setup import new_game, plan_release, sign_artist, start_project
from engine.storage import MemoryStore
from label.models import Artist, LeadSingleStrategy, Song

_MEETING = {
    "type": "role_meeting",
    "target_id": "head_ar",
    "metadata": {"meeting_id": "ar_single_choice", "choice_id": "push_lead"},
}


def _content() -> ContentProvider:
    return ContentProvider(load_config())


async def _setup(signing_fee: int = 0) -> tuple[GameEngine, MemoryStore]:
    content = _content()
    store = MemoryStore()
    state = await new_game(store, content, "g1")
    await sign_artist(
        store, state, Artist(id="a1", game_id="g1", name="Ivy", talent=70, popularity=35), signing_fee=signing_fee
    )
    await store.commit()
    return GameEngine(store, content, "g1"), store


def test_balance_moves_only_by_revenue_minus_expenses():
    async def _run():
        engine, store = await _setup()
        state = await store.get_game("g1")
        await start_project(store, _content(), state, "a1", "First Light")

        previous = state.money
        for actions in ([_MEETING], [], [{"type": "marketing", "target_id": "digital_ads"}], []):
            result = await engine.advance(actions)
            summary = result.summary
            assert summary.starting_money == previous
            assert result.state.money == previous + summary.revenue - summary.expenses
            assert summary.ending_money == result.state.money
            assert summary.financial_breakdown.endswith(f"= ${result.state.money:,}")
            previous = result.state.money

        assert (await store.get_game("g1")).money == previous

    asyncio.run(_run())


def test_same_inputs_give_identical_outcomes():
    async def _play() -> list[dict]:
        engine, store = await _setup()
        state = await store.get_game("g1")
        await start_project(store, _content(), state, "a1", "Tidal", project_type="ep", song_count=4)
        return [(await engine.advance([_MEETING])).to_dict() for _ in range(5)]

    async def _run():
        assert await _play() == await _play()

    asyncio.run(_run())


def test_focus_slots_reset_each_period():
    async def _run():
        engine, _ = await _setup()
        result = await engine.advance([_MEETING, {"type": "marketing", "target_id": "digital_ads"}])
        assert result.state.used_focus_slots == 2
        result = await engine.advance()
        assert result.state.used_focus_slots == 0

    asyncio.run(_run())


def test_executives_are_paid_every_fourth_period():
    async def _run():
        engine, _ = await _setup()
        salaries = {}
        for _ in range(3):
            result = await engine.advance()
            salaries[result.summary.period] = result.summary.expense_breakdown.executive_salaries
        assert salaries == {2: 0, 3: 0, 4: 21000}

    asyncio.run(_run())


def test_signing_fee_is_tracked_not_charged_again():
    async def _run():
        engine, store = await _setup(signing_fee=5000)
        result = await engine.advance()
        eb = result.summary.expense_breakdown
        assert eb.signing_bonuses == 5000
        assert result.summary.expenses == eb.weekly_operations + eb.artist_salaries + eb.executive_salaries
        assert result.state.pending_signing_fees == 0

        result = await engine.advance()
        assert result.summary.expense_breakdown.signing_bonuses == 0

    asyncio.run(_run())


def test_project_cost_is_tracked_when_production_starts():
    async def _run():
        engine, store = await _setup()
        state = await store.get_game("g1")
        await start_project(store, _content(), state, "a1", "First Light")

        result = await engine.advance()
        assert result.summary.expense_breakdown.project_costs == 7500
        eb = result.summary.expense_breakdown
        assert result.summary.expenses == eb.weekly_operations + eb.artist_salaries + eb.executive_salaries
        assert any(c.type == "expense_tracking" for c in result.summary.changes)

    asyncio.run(_run())


def test_planned_release_goes_out_and_lifts_mood():
    async def _run():
        engine, store = await _setup()
        state = await store.get_game("g1")
        await store.add_song(
            Song(id="s1", game_id="g1", project_id="p0", artist_id="a1", title="Copper Sky", quality=70, is_recorded=True)
        )
        await plan_release(store, state, "a1", "Copper Sky", "single", ["s1"], 2, marketing_budget={"digital": 1000})

        result = await engine.advance()
        song = await store.get_song("s1")
        release = (await store.get_releases("g1"))[0]
        assert song.is_released and song.release_period == 2
        assert release.status == "released"
        assert release.revenue_generated == result.summary.revenue_breakdown.releases > 0
        assert result.summary.expense_breakdown.marketing_costs == 1000
        assert any("Ivy's mood improved from release (+5)" == c.description for c in result.summary.changes)

        result = await engine.advance()
        assert result.summary.revenue_breakdown.releases == 0
        assert result.summary.revenue_breakdown.streaming > 0

    asyncio.run(_run())


def test_campaign_ends_at_final_period():
    async def _run():
        engine, store = await _setup()
        state = await store.get_game("g1")
        state.current_period = 11
        await store.save_game(state)

        result = await engine.advance()
        assert result.state.current_period == 12
        assert result.state.campaign_completed
        assert result.campaign_results is not None
        assert result.summary.changes[-1].description.startswith("Campaign Completed! Final Score:")

    asyncio.run(_run())


def test_completed_campaign_refuses_to_advance():
    async def _run():
        engine, store = await _setup()
        state = await store.get_game("g1")
        state.campaign_completed = True
        await store.save_game(state)
        await store.commit()

        with pytest.raises(CampaignCompletedError) as exc:
            await engine.advance([_MEETING])
        assert exc.value.period == 1
        after = await store.get_game("g1")
        assert (after.current_period, after.money, after.used_focus_slots) == (1, state.money, 0)

    asyncio.run(_run())


def test_delayed_effect_fires_next_period_then_leaves_queue():
    async def _run():
        engine, _ = await _setup()
        meeting = {
            "type": "role_meeting",
            "target_id": "ceo",
            "metadata": {"meeting_id": "ceo_priorities", "choice_id": "invest_in_roster"},
        }
        result = await engine.advance([meeting])
        assert [e.trigger_period for e in result.state.scheduled_events] == [3]
        reputation = result.state.reputation

        result = await engine.advance()
        assert result.state.scheduled_events == []
        assert result.summary.reputation_changes["Quarterly Priorities"] == 2
        assert result.state.reputation == reputation + 2
        assert any(c.type == "delayed_effect" for c in result.summary.changes)

        result = await engine.advance()
        assert "Quarterly Priorities" not in result.summary.reputation_changes

    asyncio.run(_run())


def test_lead_single_goes_out_before_the_release():
    async def _run():
        engine, store = await _setup()
        state = await store.get_game("g1")
        await start_project(store, _content(), state, "a1", "Tidal", project_type="ep", song_count=3)
        await engine.advance()
        await engine.advance()

        state = await store.get_game("g1")
        song_ids = [s.id for s in await store.get_songs("g1")]
        lead = LeadSingleStrategy(song_id=song_ids[0], release_period=4, budget={"digital": 500})
        await plan_release(store, state, "a1", "Tidal", "ep", song_ids, 5, {"digital": 2000}, lead)

        result = await engine.advance()
        assert (await store.get_song(song_ids[0])).release_period == 4
        assert not (await store.get_song(song_ids[1])).is_released
        assert result.summary.expense_breakdown.marketing_costs == 500
        assert result.summary.revenue_breakdown.releases > 0
        assert (await store.get_releases("g1"))[0].lead_single.released

        result = await engine.advance()
        release = (await store.get_releases("g1"))[0]
        assert release.status == "released"
        assert release.metadata["multipliers"]["lead"] > 1.25
        assert result.summary.expense_breakdown.marketing_costs == 2000
        assert all(s.is_released for s in await store.get_songs("g1"))

    asyncio.run(_run())


def test_event_roll_is_recorded_in_summary():
    async def _run():
        cfg = load_config()
        cfg["events"]["weekly_chance"] = 1.0
        content = ContentProvider(cfg)
        store = MemoryStore()
        await new_game(store, content, "g1")

        result = await GameEngine(store, content, "g1").advance()
        catalog = {e["id"]: e["prompt"] for e in cfg["events"]["catalog"]}
        event = result.summary.events[0]
        assert len(result.summary.events) == 1
        assert event["occurred"]
        assert event["title"] == catalog[event["id"]][:50]
        assert any(c.type == "event" for c in result.summary.changes)

    asyncio.run(_run())


def test_one_bad_song_does_not_stop_ongoing_revenue(caplog):
    async def _run():
        engine, store = await _setup()
        for song_id, streams in (("bad", float("inf")), ("good", 10000)):
            await store.add_song(
                Song(
                    id=song_id,
                    game_id="g1",
                    project_id="p0",
                    artist_id="a1",
                    title=song_id,
                    is_recorded=True,
                    is_released=True,
                    release_period=1,
                    initial_streams=streams,
                )
            )

        with caplog.at_level(logging.WARNING, logger="engine.releases"):
            result = await engine.advance()

        assert result.summary.revenue_breakdown.streaming > 0
        assert (await store.get_song("good")).total_revenue == result.summary.revenue_breakdown.streaming
        assert (await store.get_song("bad")).total_revenue == 0
        assert any("Skipping ongoing revenue for song bad" in r.getMessage() for r in caplog.records)

    asyncio.run(_run())
