"""Project lifecycle: song sessions, tour dates and stage transitions.

Stages only move forward, one transition per project per period:

    planning -> production -> marketing -> released     (recordings and others)
    planning -> production -> recorded                   (tours)

Elapsed time is counted from the project's start period.
"""

from __future__ import annotations

import logging

from economy.quality import song_quality
from economy.tours import plan_tour_cities, tour_costs, tour_impacts
from label.models import Project, Song

from .content import ContentProvider
from .releases import ReleaseManager
from .storage import GameStore
from .turn import Turn

logger = logging.getLogger(__name__)

MIN_RECORDING_PERIODS = 2
MAX_RECORDING_PERIODS = 4
PRODUCTION_PERIODS = 2
MARKETING_READY_PERIODS = 3


class ProjectLifecycle:
    def __init__(self, store: GameStore, content: ContentProvider, releases: ReleaseManager):
        self._store = store
        self._content = content
        self._releases = releases

    # ── Tours ───────────────────────────────────────────────────

    async def reveal_tour_cities(self, turn: Turn) -> None:
        """Reveal one pre-computed city per period a tour spends in production."""
        for project in await self._store.get_projects(turn.game_id):
            if not project.is_tour or project.stage != "production":
                continue
            city = turn.period - project.start_period - 1  # first period is planning
            if 1 <= city <= int(project.metadata.get("cities", 1)):
                await self._reveal_city(project, city, turn)

    async def _reveal_city(self, project: Project, number: int, turn: Turn) -> None:
        stats = project.metadata.setdefault("tour_stats", {"cities": []})
        if "planned_cities" not in stats:
            planned = await self._plan_cities(project, turn)
            if planned is None:
                return
            stats["planned_cities"] = planned

        planned = stats["planned_cities"]
        if len(planned) < number:
            return
        city = planned[number - 1]
        stats.setdefault("cities", []).append(city)

        turn.summary.add_revenue(
            city["revenue"],
            "tours",
            f"{project.title} - City {number} performance: ${city['revenue']:,} ({city['attendance_rate']}% attendance)",
            project.id,
        )
        mood, popularity = tour_impacts(city["attendance_rate"], city["tickets_sold"])
        if mood:
            turn.queue_artist_delta(project.artist_id, "mood", mood)
        if popularity:
            turn.queue_artist_delta(project.artist_id, "popularity", popularity)
        await self._store.update_project(project)

    async def _plan_cities(self, project: Project, turn: Turn) -> list[dict] | None:
        capacity = project.metadata.get("venue_capacity")
        if not capacity:
            raise ValueError(f"Tour {project.title} has no venue_capacity")
        artist = await self._store.get_artist(project.artist_id)
        if artist is None:
            logger.warning("Artist %s not found for tour %s", project.artist_id, project.title)
            return None

        cities = int(project.metadata.get("cities", 1))
        venue_tier = project.metadata.get("venue_access", turn.state.venue_access)
        marketing = max(0, project.total_cost - tour_costs(self._content, capacity, cities)["total"])
        results = plan_tour_cities(
            self._content,
            capacity,
            cities,
            artist.popularity,
            turn.state.reputation,
            turn.rng,
            marketing_budget=marketing,
            venue_tier=venue_tier,
        )
        logger.info("Planned %d cities for tour %s", len(results), project.title)
        return [c.to_dict() for c in results]

    # ── Recording ───────────────────────────────────────────────

    async def mark_recorded(self, turn: Turn) -> None:
        """Flag songs saved unrecorded (older saves, imports) once their project is past production."""
        for project in await self._store.get_projects(turn.game_id):
            if project.is_tour or project.stage in ("planning", "production"):
                continue
            songs = [s for s in await self._store.get_project_songs(project.id, turn.game_id) if not s.is_recorded]
            if not songs:
                continue
            for song in songs:
                song.is_recorded = True
                await self._store.update_song(song)
            turn.summary.add_change(
                "project_complete",
                f"{project.title} recording completed - ready for release",
                entity_id=project.id,
            )

    async def generate_songs(self, turn: Turn) -> None:
        for project in await self._store.get_projects(turn.game_id):
            if not project.is_recording or project.stage != "production":
                continue
            if project.songs_created >= project.song_count:
                continue
            await self._record_session(project, turn)

    async def _record_session(self, project: Project, turn: Turn) -> None:
        artist = await self._store.get_artist(project.artist_id)
        if artist is None:
            logger.warning("Artist %s not found for project %s", project.artist_id, project.title)
            return

        names = self._content.song_names(artist.genre)
        moods = self._content.song_moods()
        batch = min(project.song_count - project.songs_created, self._content.songs_per_period(project.type))

        for _ in range(batch):
            number = project.songs_created + 1
            quality = song_quality(
                self._content,
                artist,
                project.producer_tier,
                project.time_investment,
                project.session_budget_per_song,
                project.song_count,
                turn.rng,
                project.type,
            )
            song = Song(
                id=f"{project.id}-song-{number}",
                game_id=project.game_id,
                project_id=project.id,
                artist_id=artist.id,
                title=turn.rng.choice(names),
                quality=quality,
                mood=turn.rng.choice(moods),
                genre=artist.genre,
                producer_tier=project.producer_tier,
                time_investment=project.time_investment,
                created_period=turn.period,
                is_recorded=True,
            )
            await self._store.add_song(song)
            project.songs_created = number
            turn.summary.add_change("song", f'Created song "{song.title}" (quality {quality})', entity_id=song.id)

        await self._store.update_project(project)
        if project.songs_created >= project.song_count:
            turn.summary.add_change(
                "project_complete",
                f"{project.title}: Recording completed ({project.songs_created} songs)",
                entity_id=project.id,
            )

    # ── Stage transitions ───────────────────────────────────────

    def next_stage(self, project: Project, elapsed: int) -> tuple[str, str] | None:
        """Return (stage, reason) if the project may advance this period."""
        if project.stage == "planning":
            if elapsed >= 1:
                return "production", f"planning complete after {elapsed} period(s)"
            return None

        if project.stage == "production":
            if project.is_tour:
                cities = int(project.metadata.get("cities", 1))
                if elapsed - 1 > cities:
                    return "recorded", f"tour completed after {cities} cities ({elapsed} periods)"
                return None
            if project.is_recording:
                if project.songs_created >= project.song_count and elapsed >= MIN_RECORDING_PERIODS:
                    return "marketing", f"all {project.song_count} songs recorded"
                if elapsed >= MAX_RECORDING_PERIODS:
                    return "marketing", f"production window closed with {project.songs_created} songs"
                return None
            if elapsed >= PRODUCTION_PERIODS:
                return "marketing", "production complete"
            return None

        if project.stage == "marketing" and elapsed >= MARKETING_READY_PERIODS:
            return "released", "marketing campaign complete"
        return None

    async def advance_stages(self, turn: Turn) -> None:
        summary = turn.summary
        for project in await self._store.get_projects(turn.game_id):
            if not project.is_active:
                continue
            step = self.next_stage(project, turn.period - project.start_period)
            if step is None:
                continue
            stage, reason = step

            if project.stage == "planning":
                # Paid at creation; tracked here for the breakdown only.
                summary.track_expense(project.total_cost, "project_costs")
                summary.add_change(
                    "expense_tracking",
                    f"{project.title} production started (cost paid at creation)",
                    entity_id=project.id,
                )

            project.stage = stage
            await self._store.update_project(project)
            summary.add_change(
                "project_complete", f"{project.title} advanced to {stage} stage: {reason}", entity_id=project.id
            )

            if stage == "released":
                await self._releases.release_project(project, turn)
            elif stage == "recorded" and project.is_tour:
                self._summarize_tour(project, turn)

    def _summarize_tour(self, project: Project, turn: Turn) -> None:
        cities = (project.metadata.get("tour_stats") or {}).get("cities") or []
        if not cities:
            turn.summary.add_change("project_complete", f"{project.title} tour completed", entity_id=project.id)
            return
        revenue = sum(c.get("revenue", 0) for c in cities)
        attendance = round(sum(c.get("attendance_rate", 0) for c in cities) / len(cities))
        turn.summary.add_change(
            "project_complete",
            f"{project.title} tour completed - {len(cities)} cities, {attendance}% avg attendance, "
            f"${revenue:,} total revenue",
            entity_id=project.id,
        )
