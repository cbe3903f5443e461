"""Tests for game creation, signing, project starts and release planning."""

import asyncio

import pytest

from engine.config import load_config
from engine.content import ContentProvider
from engine.setup import InsufficientFundsError, new_game, plan_release, sign_artist, start_project
from engine.storage import MemoryStore
from label.models import Artist, LeadSingleStrategy, Song


def _content() -> ContentProvider:
    return ContentProvider(load_config())


def _make_song(song_id: str, recorded: bool = True) -> Song:
    return Song(id=song_id, game_id="g1", project_id="p1", artist_id="a1", title=song_id, is_recorded=recorded)


def test_new_game_starts_at_period_one_with_executives():
    async def _run():
        store = MemoryStore()
        state = await new_game(store, _content(), "g1")
        assert (state.money, state.reputation, state.creative_capital) == (75000, 5, 10)
        assert state.current_period == 1
        assert state.focus_slots == 3
        assert (await store.get_game("g1")).money == 75000
        roles = [e.role for e in await store.get_executives("g1")]
        assert roles == ["head_ar", "cmo", "cco", "head_distribution"]

    asyncio.run(_run())


def test_signing_pays_fee_now_and_remembers_it():
    async def _run():
        store = MemoryStore()
        state = await new_game(store, _content(), "g1")
        artist = await sign_artist(store, state, Artist(id="a1", game_id="", name="Ivy"), signing_fee=5000)
        assert artist.game_id == "g1"
        assert state.money == 70000
        assert state.pending_signing_fees == 5000
        with pytest.raises(InsufficientFundsError):
            await sign_artist(store, state, Artist(id="a2", game_id="", name="Rook"), signing_fee=10**6)

    asyncio.run(_run())


def test_start_project_pays_cost_up_front():
    async def _run():
        content = _content()
        store = MemoryStore()
        state = await new_game(store, content, "g1")
        project = await start_project(store, content, state, "a1", "First Light")
        assert project.id == "g1-project-1"
        assert (project.stage, project.song_count, project.start_period) == ("planning", 1, 1)
        assert project.total_cost == 7500
        assert state.money == 75000 - 7500

        tour = await start_project(
            store, content, state, "a1", "Small Rooms", project_type="tour", metadata={"venue_capacity": 300, "cities": 2}
        )
        assert tour.id == "g1-project-2"
        assert tour.total_cost == (1200 + 810) * 2
        assert tour.song_count == 0
        assert tour.metadata["venue_access"] == "none"

    asyncio.run(_run())


def test_start_project_with_per_song_budget():
    async def _run():
        content = _content()
        store = MemoryStore()
        state = await new_game(store, content, "g1")
        project = await start_project(store, content, state, "a1", "Tidal", "ep", song_count=4, budget_per_song=3000)
        assert project.total_cost == 12000

    asyncio.run(_run())


def test_start_project_refusals_leave_money_untouched():
    async def _run():
        content = _content()
        store = MemoryStore()
        state = await new_game(store, content, "g1")
        with pytest.raises(ValueError):
            await start_project(store, content, state, "a1", "Gold", producer_tier="legendary")
        with pytest.raises(ValueError):
            await start_project(store, content, state, "a1", "Nowhere", project_type="tour")

        state.money = 1000
        with pytest.raises(InsufficientFundsError) as exc:
            await start_project(store, content, state, "a1", "First Light")
        assert exc.value.needed == 7500
        assert state.money == 1000
        assert await store.get_projects("g1") == []

    asyncio.run(_run())


def test_plan_release_claims_recorded_songs():
    async def _run():
        store = MemoryStore()
        state = await new_game(store, _content(), "g1")
        await store.add_song(_make_song("s1"))
        await store.add_song(_make_song("s2"))

        release = await plan_release(
            store,
            state,
            "a1",
            "Debut",
            "EP",
            ["s1", "s2"],
            4,
            marketing_budget={"digital": 1000},
            lead_single=LeadSingleStrategy(song_id="s1", release_period=2),
        )
        assert release.id == "g1-release-1"
        assert release.type == "ep"
        assert (await store.get_song("s1")).release_id == release.id

        with pytest.raises(ValueError):
            await plan_release(store, state, "a1", "Again", "single", ["s1"], 5)

    asyncio.run(_run())


def test_plan_release_validation():
    async def _run():
        store = MemoryStore()
        state = await new_game(store, _content(), "g1")
        await store.add_song(_make_song("s1"))
        await store.add_song(_make_song("raw", recorded=False))

        with pytest.raises(ValueError):
            await plan_release(store, state, "a1", "Now", "single", ["s1"], 1)
        with pytest.raises(ValueError):
            await plan_release(store, state, "a1", "Raw", "single", ["raw"], 3)
        with pytest.raises(ValueError):
            await plan_release(store, state, "a1", "Ghost", "single", ["missing"], 3)
        with pytest.raises(ValueError):
            lead = LeadSingleStrategy(song_id="other", release_period=2)
            await plan_release(store, state, "a1", "Lead", "ep", ["s1"], 3, lead_single=lead)
        with pytest.raises(ValueError):
            lead = LeadSingleStrategy(song_id="s1", release_period=3)
            await plan_release(store, state, "a1", "Late", "ep", ["s1"], 3, lead_single=lead)

    asyncio.run(_run())
