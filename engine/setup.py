"""Between-period operations: starting a game, signing, projects, release plans.

These run outside an advance. They are the only places besides the turn
controller that touch money: signing fees and project costs are paid up
front, so the advance never charges them again.
"""

from __future__ import annotations

import logging

from economy.finance import FinancialCalculator
from economy.tours import tour_costs
from label.models import Artist, Executive, GameState, LeadSingleStrategy, Project, Release

from .content import ContentProvider
from .storage import GameStore

logger = logging.getLogger(__name__)

EXECUTIVE_ROLES = ("head_ar", "cmo", "cco", "head_distribution")


class InsufficientFundsError(ValueError):
    def __init__(self, needed: int, available: int):
        self.needed = needed
        self.available = available
        super().__init__(f"Insufficient funds: need ${needed:,}, have ${available:,}")


async def new_game(store: GameStore, content: ContentProvider, game_id: str) -> GameState:
    """Create a fresh game at period 1 with the executive team in place."""
    campaign = content.raw.get("campaign") or {}
    rules = content.focus_slot_rules()
    state = GameState(
        id=game_id,
        money=int(campaign.get("starting_money", 0)),
        reputation=int(campaign.get("starting_reputation", 0)),
        creative_capital=int(campaign.get("starting_creative_capital", 0)),
        focus_slots=rules["base"],
        current_period=1,
    )
    await store.save_game(state)
    for role in EXECUTIVE_ROLES:
        await store.add_executive(Executive(id=f"{game_id}-{role}", game_id=game_id, role=role))
    logger.info("Started game %s with $%d", game_id, state.money)
    return state


async def sign_artist(store: GameStore, state: GameState, artist: Artist, signing_fee: int = 0) -> Artist:
    if signing_fee > state.money:
        raise InsufficientFundsError(signing_fee, state.money)
    artist.game_id = state.id
    artist.signed = True
    state.money -= signing_fee
    state.pending_signing_fees += signing_fee
    await store.add_artist(artist)
    await store.save_game(state)
    logger.info("Signed %s for $%d", artist.name, signing_fee)
    return artist


async def start_project(
    store: GameStore,
    content: ContentProvider,
    state: GameState,
    artist_id: str,
    title: str,
    project_type: str = "single",
    song_count: int | None = None,
    producer_tier: str = "local",
    time_investment: str = "standard",
    budget_per_song: int = 0,
    metadata: dict | None = None,
) -> Project:
    """Create a project in planning and pay its full cost now."""
    if producer_tier not in state.unlocked_producer_tiers:
        raise ValueError(f"Producer tier {producer_tier} is not unlocked")
    metadata = dict(metadata or {})
    kind = project_type.lower()
    financial = FinancialCalculator(content)

    if kind in ("tour", "mini_tour"):
        capacity = int(metadata.get("venue_capacity", 0))
        cities = int(metadata.get("cities", 1))
        if capacity <= 0:
            raise ValueError("Tours need a positive venue_capacity")
        metadata.setdefault("venue_access", state.venue_access)
        total = tour_costs(content, capacity, cities, int(metadata.get("marketing_budget", 0)))["total"]
        song_count = 0
    else:
        costs = content.project_costs(kind)
        song_count = song_count or int(costs.get("song_count_default", 1))
        if budget_per_song:
            total = financial.per_song_project_cost(budget_per_song, song_count, producer_tier, time_investment)[
                "total_cost"
            ]
        else:
            total = financial.project_cost(kind, producer_tier, time_investment, song_count=song_count)

    if total > state.money:
        raise InsufficientFundsError(total, state.money)

    existing = await store.get_projects(state.id)
    project = Project(
        id=f"{state.id}-project-{len(existing) + 1}",
        game_id=state.id,
        artist_id=artist_id,
        title=title,
        type=kind,
        song_count=song_count,
        total_cost=total,
        budget_per_song=budget_per_song,
        producer_tier=producer_tier,
        time_investment=time_investment,
        start_period=state.current_period,
        metadata=metadata,
    )
    state.money -= total
    await store.add_project(project)
    await store.save_game(state)
    logger.info("Started %s %s for $%d", kind, title, total)
    return project


async def plan_release(
    store: GameStore,
    state: GameState,
    artist_id: str,
    title: str,
    release_type: str,
    song_ids: list[str],
    release_period: int,
    marketing_budget: dict[str, int] | None = None,
    lead_single: LeadSingleStrategy | None = None,
) -> Release:
    """Schedule recorded songs for a future release; marketing is paid on release."""
    if release_period <= state.current_period:
        raise ValueError("Release must be scheduled after the current period")
    if lead_single is not None:
        if lead_single.song_id not in song_ids:
            raise ValueError("Lead single must be one of the release's songs")
        if not state.current_period < lead_single.release_period < release_period:
            raise ValueError("Lead single must come out before the release")

    songs = []
    for song_id in song_ids:
        song = await store.get_song(song_id)
        if song is None or not song.is_recorded or song.is_released or song.release_id:
            raise ValueError(f"Song {song_id} is not available for release")
        songs.append(song)

    existing = await store.get_releases(state.id)
    release = Release(
        id=f"{state.id}-release-{len(existing) + 1}",
        game_id=state.id,
        artist_id=artist_id,
        title=title,
        type=release_type.lower(),
        release_period=release_period,
        song_ids=list(song_ids),
        marketing_budget=dict(marketing_budget or {}),
        lead_single=lead_single,
    )
    await store.add_release(release)
    for song in songs:
        song.release_id = release.id
        await store.update_song(song)
    return release
