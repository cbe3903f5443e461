"""Release execution and ongoing streaming income."""

from __future__ import annotations

import logging

from economy.finance import FinancialCalculator
from economy.streaming import (
    release_outcome,
    song_ongoing_revenue,
    streaming_outcome,
    streaming_popularity_bonus,
)
from label.models import Project, Release, Song
from progression.relationships import clamp

from .content import ContentProvider
from .storage import GameStore
from .turn import Turn

logger = logging.getLogger(__name__)

_DEFAULT_MOOD_BOOST = {"single": 5, "ep": 20, "album": 20}


def _mark_released(song: Song, period: int, streams: int, revenue: int, release_id: str = "") -> None:
    song.is_recorded = True
    song.is_released = True
    song.release_period = period
    if release_id:
        song.release_id = release_id
    song.initial_streams = streams
    song.weekly_streams = streams
    song.total_streams += streams
    song.total_revenue += revenue
    song.last_period_revenue = revenue


class ReleaseManager:
    """Turns recorded songs into income: first-period releases and decay afterwards."""

    def __init__(self, store: GameStore, content: ContentProvider, financial: FinancialCalculator):
        self._store = store
        self._content = content
        self._financial = financial

    def mood_boost(self, release_type: str) -> int:
        bonuses = self._content.release_planning().get("release_type_bonuses") or {}
        kind = release_type.lower()
        return int((bonuses.get(kind) or {}).get("mood_boost", _DEFAULT_MOOD_BOOST.get(kind, 5)))

    # ── Ongoing revenue ─────────────────────────────────────────

    async def process_ongoing_revenue(self, turn: Turn) -> None:
        """Decayed streaming income for every previously released song."""
        state, summary = turn.state, turn.summary
        songs = [s for s in await self._store.get_songs(turn.game_id) if s.is_released]
        artist_streams: dict[str, int] = {}

        for song in songs:
            # One bad song must not sink the period.
            try:
                revenue, streams = song_ongoing_revenue(
                    self._content, song, turn.period, state.reputation, state.playlist_access
                )
            except (ValueError, ArithmeticError) as e:
                logger.warning("Skipping ongoing revenue for song %s: %s", song.id, e)
                continue

            song.weekly_streams = streams
            song.last_period_revenue = revenue
            song.total_streams += streams
            song.total_revenue += revenue
            await self._store.update_song(song)

            if revenue > 0:
                summary.add_revenue(revenue, "streaming", f'"{song.title}" streaming: ${revenue:,}', song.id)
            summary.streams += streams
            artist_streams[song.artist_id] = artist_streams.get(song.artist_id, 0) + streams

        for artist_id, streams in artist_streams.items():
            artist = await self._store.get_artist(artist_id)
            if artist is None:
                continue
            bonus = streaming_popularity_bonus(self._content, streams, artist.popularity)
            if bonus > 0:
                turn.queue_artist_delta(artist_id, "popularity", bonus)
                logger.debug("Streaming popularity bonus for %s: %.2f", artist.name, bonus)

    # ── Lead singles and planned releases ───────────────────────

    async def release_lead_singles(self, turn: Turn) -> None:
        state, summary = turn.state, turn.summary
        for release in await self._store.get_releases(turn.game_id):
            lead = release.lead_single
            if release.status != "planned" or lead is None or lead.released:
                continue
            if lead.release_period != turn.period:
                continue

            song = await self._store.get_song(lead.song_id)
            if song is None:
                logger.warning("Lead single %s for release %s not found", lead.song_id, release.id)
                continue
            artist = await self._store.get_artist(release.artist_id)
            if artist is None:
                logger.warning("Artist %s not found, skipping lead single", release.artist_id)
                continue

            outcome = release_outcome(
                self._content,
                [song],
                "single",
                turn.period,
                lead.budget,
                state.playlist_access,
                state.reputation,
                artist.popularity,
                turn.rng,
            )
            result = outcome.per_song[0]
            _mark_released(song, turn.period, result["streams"], result["revenue"], release.id)
            await self._store.update_song(song)

            lead.released = True
            release.revenue_generated += result["revenue"]
            release.streams_generated += result["streams"]
            await self._store.update_release(release)

            summary.add_revenue(
                result["revenue"],
                "releases",
                f'Lead single: "{song.title}" (from upcoming "{release.title}")',
                song.id,
            )
            summary.streams += result["streams"]
            budget = int(sum(lead.budget.values()))
            if budget > 0:
                summary.add_expense(budget, "marketing_costs", f'Marketing for lead single "{song.title}"', release.id)

    async def release_planned(self, turn: Turn) -> None:
        for release in await self._store.get_releases(turn.game_id):
            if release.status == "planned" and release.release_period <= turn.period:
                await self._execute_release(release, turn)

    async def _execute_release(self, release: Release, turn: Turn) -> None:
        state, summary = turn.state, turn.summary
        songs = [s for s in [await self._store.get_song(sid) for sid in release.song_ids] if s is not None]
        if not songs:
            logger.warning('Release "%s" has no songs, skipping', release.title)
            summary.add_change("release", f'Release "{release.title}" skipped: no songs', entity_id=release.id)
            return

        pending = [s for s in songs if not s.is_released]
        if not pending:
            release.status = "released"
            await self._store.update_release(release)
            return

        artist = await self._store.get_artist(release.artist_id)
        if artist is None:
            logger.warning("Artist %s not found, skipping release %s", release.artist_id, release.id)
            return

        lead = None
        if release.lead_single and release.lead_single.released:
            lead = (release.lead_single.release_period, release.lead_single.budget)

        outcome = release_outcome(
            self._content,
            pending,
            release.type,
            turn.period,
            release.marketing_budget,
            state.playlist_access,
            state.reputation,
            artist.popularity,
            turn.rng,
            lead_single=lead,
        )
        by_song = {r["song_id"]: r for r in outcome.per_song}
        revenue = sum(r["revenue"] for r in outcome.per_song)
        streams = sum(r["streams"] for r in outcome.per_song)

        for song in pending:
            result = by_song[song.id]
            _mark_released(song, turn.period, result["streams"], result["revenue"], release.id)
            await self._store.update_song(song)

        release.status = "released"
        release.revenue_generated += revenue
        release.streams_generated += streams
        release.metadata["multipliers"] = outcome.multipliers
        await self._store.update_release(release)

        summary.add_revenue(revenue, "releases", f'Released: "{release.title}" ({release.type})', release.id)
        summary.streams += streams

        marketing = release.total_marketing
        if marketing > 0:
            summary.add_expense(marketing, "marketing_costs", f'Marketing campaign for "{release.title}"', release.id)

        turn.boost_release_mood(release.artist_id, self.mood_boost(release.type))

        if marketing > 0:
            average_quality = sum(s.quality for s in songs) / len(songs)
            pickups, gain = self._financial.press_outcome(
                average_quality, state.press_access, state.reputation, marketing, turn.rng
            )
            if gain > 0:
                before = state.reputation
                state.reputation = clamp(state.reputation + gain)
                summary.add_reputation(f"press:{release.id}", state.reputation - before)
                summary.add_change(
                    "reputation",
                    f'Press coverage for "{release.title}" ({pickups} pickups)',
                    state.reputation - before,
                    release.id,
                )

    # ── Project releases ────────────────────────────────────────

    async def release_project(self, project: Project, turn: Turn) -> None:
        """Release a finished project's recorded songs that no planned release claims."""
        state, summary = turn.state, turn.summary
        songs = [
            s
            for s in await self._store.get_project_songs(project.id, turn.game_id)
            if s.is_recorded and not s.is_released and not s.release_id
        ]
        if not songs:
            return

        artist = await self._store.get_artist(project.artist_id)
        popularity = artist.popularity if artist else 0
        ad_spend = project.metadata.get("marketing_budget", 0)
        if isinstance(ad_spend, dict):
            ad_spend = sum(ad_spend.values())
        revenue_per_stream = self._content.ongoing_streams()["revenue_per_stream"]

        total_revenue = 0
        total_streams = 0
        for song in songs:
            streams = streaming_outcome(
                self._content, song.quality, state.playlist_access, state.reputation, ad_spend, popularity, turn.rng
            )
            revenue = int(round(streams * revenue_per_stream))
            _mark_released(song, turn.period, streams, revenue)
            await self._store.update_song(song)
            total_revenue += revenue
            total_streams += streams

        summary.add_revenue(
            total_revenue, "releases", f"{project.title} released: {len(songs)} song(s)", project.id
        )
        summary.streams += total_streams
        turn.boost_release_mood(project.artist_id, self.mood_boost(project.type))
