"""Turn controller - advances one game by one period.

Each advance: reset focus -> period + 1 -> actions -> flush relationship
deltas -> ongoing revenue -> recording -> releases -> stage transitions ->
delayed effects -> drift -> events -> burn -> unlocks -> balance -> campaign end.

Money is written once, at the balance step. Nothing is committed here:
the caller commits the store on success and rolls it back on any error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from economy.finance import FinancialCalculator
from label.models import GameState
from label.summary import ALL_ARTISTS, PeriodSummary
from progression.campaign import CampaignResults, calculate_campaign_results
from progression.relationships import clamp, decay_executive, next_artist_mood, next_popularity
from progression.tiers import unlock_focus_slot, unlock_producer_tiers, update_access_tiers

from .actions import Action, ActionProcessor, EffectTargetError, action_from_dict
from .content import ContentProvider
from .lifecycle import ProjectLifecycle
from .releases import ReleaseManager
from .rng import period_rng
from .storage import GameStore
from .turn import Turn

logger = logging.getLogger(__name__)


class CampaignCompletedError(Exception):
    """Raised when advancing a game whose campaign has already ended."""

    def __init__(self, game_id: str, period: int):
        self.game_id = game_id
        self.period = period
        super().__init__(f"Campaign for game {game_id} already completed at period {period}")


@dataclass
class TurnResult:
    state: GameState
    summary: PeriodSummary
    campaign_results: CampaignResults | None = None

    def to_dict(self) -> dict:
        return {
            "state": self.state.to_dict(),
            "summary": self.summary.to_dict(),
            "campaign_results": self.campaign_results.to_dict() if self.campaign_results else None,
        }


class GameEngine:
    """One engine per game. Callers must not run advance() concurrently for a game."""

    def __init__(self, store: GameStore, content: ContentProvider, game_id: str):
        self._store = store
        self._content = content
        self._game_id = game_id
        self._financial = FinancialCalculator(content)
        self._actions = ActionProcessor(store, content, self._financial)
        self._releases = ReleaseManager(store, content, self._financial)
        self._lifecycle = ProjectLifecycle(store, content, self._releases)

    @property
    def financial(self) -> FinancialCalculator:
        return self._financial

    async def advance(self, actions: list[Action | dict] | None = None) -> TurnResult:
        state = await self._store.get_game(self._game_id)
        if state.campaign_completed:
            raise CampaignCompletedError(state.id, state.current_period)
        parsed = [action_from_dict(a) if isinstance(a, dict) else a for a in actions or []]

        state.used_focus_slots = 0
        state.current_period += 1
        turn = Turn(
            state=state,
            summary=PeriodSummary(period=state.current_period, starting_money=state.money),
            rng=period_rng(state.id, state.current_period, self._content.seed_salt),
        )
        logger.info("=== Period %d === game %s, %d action(s)", turn.period, state.id, len(parsed))

        await self._actions.process(parsed, turn)
        await self._flush_artist_deltas(turn)
        await self._releases.process_ongoing_revenue(turn)
        await self._lifecycle.reveal_tour_cities(turn)
        await self._lifecycle.mark_recorded(turn)
        await self._lifecycle.generate_songs(turn)
        await self._releases.release_lead_singles(turn)
        await self._releases.release_planned(turn)
        await self._lifecycle.advance_stages(turn)
        self._trigger_scheduled_events(turn)
        await self._update_relationships(turn)
        self._roll_event(turn)
        await self._apply_burn(turn)
        self._check_progression(turn)
        self._reconcile(turn)
        results = self._check_campaign_end(turn)

        await self._store.save_game(state)
        logger.info(
            "Period %d closed: revenue $%d, expenses $%d, balance $%d",
            turn.period,
            turn.summary.revenue,
            turn.summary.expenses,
            state.money,
        )
        return TurnResult(state=state, summary=turn.summary, campaign_results=results)

    # ── Relationships ───────────────────────────────────────────

    async def _flush_artist_deltas(self, turn: Turn) -> None:
        """Write action deltas to artists before anything reads their stats."""
        for artist in await self._store.get_artists(turn.game_id):
            deltas = turn.take_artist_deltas(artist.id)
            if not deltas:
                continue
            for attribute, delta in deltas.items():
                before = getattr(artist, attribute)
                setattr(artist, attribute, clamp(before + delta))
                turn.summary.record_artist_change(artist.id, attribute, getattr(artist, attribute) - before)
            await self._store.update_artist(artist)
        turn.clear_global_deltas()

    async def _update_relationships(self, turn: Turn) -> None:
        rel_cfg = self._content.relationships()
        summary = turn.summary
        projects = await self._store.get_projects(turn.game_id)

        for artist in await self._store.get_artists(turn.game_id):
            deltas = turn.take_artist_deltas(artist.id)
            boost = turn.release_boosts.get(artist.id, 0)
            active = sum(1 for p in projects if p.artist_id == artist.id and p.is_active)
            before = {a: getattr(artist, a) for a in ("mood", "popularity", "energy", "loyalty")}

            artist.mood = next_artist_mood(artist.mood, boost, deltas.get("mood", 0), active, rel_cfg)
            artist.popularity, artist.popularity_carry = next_popularity(
                artist.popularity, deltas.get("popularity", 0), artist.popularity_carry
            )
            artist.energy = clamp(artist.energy + deltas.get("energy", 0))
            artist.loyalty = clamp(artist.loyalty + deltas.get("loyalty", 0))

            for attribute, value in before.items():
                summary.record_artist_change(artist.id, attribute, getattr(artist, attribute) - value)
            if boost:
                summary.add_change("mood", f"{artist.name}'s mood improved from release (+{boost})", entity_id=artist.id)
            await self._store.update_artist(artist)

        turn.clear_global_deltas()
        leftover = [k for k in turn.pending if k != ALL_ARTISTS]
        if leftover:
            logger.debug("Dropping deltas for unsigned or unknown artists: %s", leftover)
            turn.pending.clear()

        for executive in await self._store.get_executives(turn.game_id):
            used = executive.id in turn.used_executives
            title = self._content.role_title(executive.role)
            notes = decay_executive(executive, turn.period, used, rel_cfg, title=title)
            if not notes:
                continue
            await self._store.update_executive(executive)
            for note in notes:
                summary.add_change("executive", note, entity_id=executive.id)

    # ── Delayed effects and events ──────────────────────────────

    def _trigger_scheduled_events(self, turn: Turn) -> None:
        state = turn.state
        due = [e for e in state.scheduled_events if e.trigger_period <= turn.period]
        state.scheduled_events = [e for e in state.scheduled_events if e.trigger_period > turn.period]

        for event in due:
            source = event.source or "delayed effect"
            try:
                self._actions.apply_effects(event.effects, turn, event.artist_id, event.scope, source)
            except EffectTargetError as e:
                logger.warning("Dropping delayed effect from %s: %s", source, e)
                continue
            turn.summary.add_change("delayed_effect", f"Delayed effect from {source} took hold", entity_id=event.artist_id)

    def _roll_event(self, turn: Turn) -> None:
        if turn.rng.random() >= self._content.event_chance:
            return
        event = self._content.random_event(turn.rng)
        if not event:
            return
        prompt = event.get("prompt", "")
        turn.summary.events.append({"id": event.get("id", ""), "title": prompt[:50], "occurred": True})
        turn.summary.add_change("event", prompt)
        logger.info("Event this period: %s", event.get("id"))

    # ── Money ───────────────────────────────────────────────────

    async def _apply_burn(self, turn: Turn) -> None:
        state, summary = turn.state, turn.summary
        artists = await self._store.get_artists(turn.game_id)
        executives = await self._store.get_executives(turn.game_id)
        burn = self._financial.weekly_burn(turn.rng, artists, executives, turn.period)

        summary.add_expense(burn.base, "weekly_operations")
        summary.add_expense(burn.artists, "artist_salaries")
        summary.add_expense(burn.executives, "executive_salaries")
        parts = [f"operations ${burn.base:,}", f"artists ${burn.artists:,}"]
        if burn.executives:
            parts.append(f"executives ${burn.executives:,}")
        summary.add_change("expense", f"Weekly burn: {', '.join(parts)}", -burn.total)

        if state.pending_signing_fees:
            summary.track_expense(state.pending_signing_fees, "signing_bonuses")
            state.pending_signing_fees = 0

    def _reconcile(self, turn: Turn) -> None:
        summary = turn.summary
        financials = self._financial.weekly_financials(summary, summary.starting_money)
        turn.state.money = financials.ending_balance
        summary.ending_money = financials.ending_balance
        summary.financial_breakdown = financials.breakdown

    # ── Progression ─────────────────────────────────────────────

    def _check_progression(self, turn: Turn) -> None:
        state, summary = turn.state, turn.summary
        for notice in update_access_tiers(state, self._content.all_access_tiers(), turn.period):
            summary.add_change("unlock", notice)
        for notice in unlock_producer_tiers(state, self._content.producer_tiers()):
            summary.add_change("unlock", notice)
        notice = unlock_focus_slot(state, self._content.focus_slot_rules())
        if notice:
            summary.add_change("unlock", notice)

    def _check_campaign_end(self, turn: Turn) -> CampaignResults | None:
        length = self._content.campaign_length
        if turn.period < length:
            return None
        turn.state.campaign_completed = True
        results = calculate_campaign_results(turn.state, self._content.all_access_tiers(), length)
        turn.summary.add_change("campaign", f"Campaign Completed! Final Score: {results.final_score}")
        logger.info("Campaign complete for %s: %s (%d)", turn.game_id, results.victory_type, results.final_score)
        return results
