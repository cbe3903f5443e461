"""Tests for project stage transitions, recording sessions and tour dates."""

import asyncio

from economy.budget import budget_quality_multiplier
from engine.config import load_config
from engine.content import ContentProvider
from engine.core import GameEngine
from engine.lifecycle import ProjectLifecycle
from engine.setup import new_game, sign_artist, start_project
from engine.storage import MemoryStore
from label.models import Artist, Project, Song, stage_index


def _content() -> ContentProvider:
    return ContentProvider(load_config())


def _make_project(**kwargs) -> Project:
    values = {"id": "p1", "game_id": "g1", "artist_id": "a1", "title": "Night Drive"}
    values.update(kwargs)
    return Project(**values)


async def _game_with_artist(store: MemoryStore, content: ContentProvider):
    state = await new_game(store, content, "g1")
    await sign_artist(store, state, Artist(id="a1", game_id="g1", name="Ivy", talent=70, popularity=40))
    return state


def test_next_stage_planning_and_recording():
    lifecycle = ProjectLifecycle(None, None, None)
    assert lifecycle.next_stage(_make_project(), 0) is None
    assert lifecycle.next_stage(_make_project(), 1)[0] == "production"

    recording = _make_project(stage="production", song_count=3, songs_created=1)
    assert lifecycle.next_stage(recording, 3) is None
    assert lifecycle.next_stage(recording, 4)[0] == "marketing"

    done = _make_project(stage="production", song_count=1, songs_created=1)
    assert lifecycle.next_stage(done, 1) is None
    assert lifecycle.next_stage(done, 2)[0] == "marketing"

    assert lifecycle.next_stage(_make_project(stage="marketing"), 2) is None
    assert lifecycle.next_stage(_make_project(stage="marketing"), 3)[0] == "released"
    assert lifecycle.next_stage(_make_project(stage="released"), 10) is None


def test_next_stage_tour_waits_for_every_city():
    lifecycle = ProjectLifecycle(None, None, None)
    tour = _make_project(type="tour", stage="production", song_count=0, metadata={"cities": 2})
    assert lifecycle.next_stage(tour, 3) is None
    assert lifecycle.next_stage(tour, 4)[0] == "recorded"


def test_single_moves_from_planning_to_release():
    async def _run():
        content = _content()
        store = MemoryStore()
        state = await _game_with_artist(store, content)
        await start_project(store, content, state, "a1", "First Light")
        engine = GameEngine(store, content, "g1")

        stages = []
        results = []
        for _ in range(3):
            results.append(await engine.advance())
            stages.append((await store.get_projects("g1"))[0].stage)

        assert stages == ["production", "marketing", "released"]
        assert [r.summary.period for r in results] == [2, 3, 4]

        songs = await store.get_songs("g1")
        assert len(songs) == 1
        assert songs[0].created_period == 3
        assert songs[0].is_recorded and songs[0].is_released
        assert songs[0].release_period == 4
        assert results[2].summary.revenue_breakdown.releases > 0
        assert any("improved from release (+5)" in c.description for c in results[2].summary.changes)

    asyncio.run(_run())


def test_recording_respects_song_count_and_stage_order():
    async def _run():
        content = _content()
        store = MemoryStore()
        state = await _game_with_artist(store, content)
        await start_project(store, content, state, "a1", "Tidal", project_type="ep", song_count=5)
        engine = GameEngine(store, content, "g1")

        last = 0
        for _ in range(6):
            await engine.advance()
            project = (await store.get_projects("g1"))[0]
            assert project.songs_created <= project.song_count
            assert stage_index(project.stage) >= last
            last = stage_index(project.stage)

        songs = await store.get_project_songs(project.id, "g1")
        assert len(songs) == 5
        assert [s.id for s in songs] == [f"{project.id}-song-{n}" for n in range(1, 6)]
        assert project.stage == "released"

    asyncio.run(_run())


def test_tour_reveals_one_city_per_period():
    async def _run():
        content = _content()
        store = MemoryStore()
        state = await _game_with_artist(store, content)
        await start_project(
            store, content, state, "a1", "Small Rooms", project_type="tour", metadata={"venue_capacity": 300, "cities": 2}
        )
        engine = GameEngine(store, content, "g1")

        tour_revenue = []
        for _ in range(4):
            result = await engine.advance()
            tour_revenue.append(result.summary.revenue_breakdown.tours)

        assert tour_revenue[0] == 0
        assert tour_revenue[1] > 0 and tour_revenue[2] > 0
        assert tour_revenue[3] == 0

        project = (await store.get_projects("g1"))[0]
        assert project.stage == "recorded"
        stats = project.metadata["tour_stats"]
        assert len(stats["planned_cities"]) == 2
        assert stats["cities"] == stats["planned_cities"]
        assert await store.get_songs("g1") == []

    asyncio.run(_run())


def test_default_project_budget_spreads_cost_over_songs():
    async def _run():
        content = _content()
        store = MemoryStore()
        state = await _game_with_artist(store, content)
        single = await start_project(store, content, state, "a1", "First Light")
        assert single.budget_per_song == 0
        assert single.session_budget_per_song == 7500
        assert budget_quality_multiplier(content, single.session_budget_per_song, "single", 1) > 0.65

        ep = await start_project(store, content, state, "a1", "Tidal", "ep", song_count=4, budget_per_song=3000)
        assert ep.session_budget_per_song == 3000

    asyncio.run(_run())


def test_generated_songs_are_ready_for_release_planning():
    async def _run():
        content = _content()
        store = MemoryStore()
        state = await _game_with_artist(store, content)
        await start_project(store, content, state, "a1", "Tidal", project_type="ep", song_count=3)
        engine = GameEngine(store, content, "g1")

        await engine.advance()
        await engine.advance()

        project = (await store.get_projects("g1"))[0]
        songs = await store.get_project_songs(project.id, "g1")
        assert project.stage == "marketing"
        assert len(songs) == 3
        assert all(s.is_recorded and not s.is_released and not s.release_id for s in songs)

    asyncio.run(_run())


def test_unrecorded_songs_are_flagged_after_production():
    async def _run():
        content = _content()
        store = MemoryStore()
        state = await _game_with_artist(store, content)
        await store.add_project(_make_project(stage="marketing", start_period=1, songs_created=1))
        await store.add_song(Song(id="s1", game_id="g1", project_id="p1", artist_id="a1", title="Northbound"))
        state.current_period = 2
        await store.save_game(state)

        result = await GameEngine(store, content, "g1").advance()
        assert (await store.get_song("s1")).is_recorded
        assert any("ready for release" in c.description for c in result.summary.changes)

    asyncio.run(_run())
