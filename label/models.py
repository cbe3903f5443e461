"""Data models for label entities."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

STAGE_ORDER = ("planning", "production", "marketing", "recorded", "released")
RECORDING_TYPES = ("single", "ep")
TOUR_TYPES = ("tour", "mini_tour")
ACTIVE_STAGES = ("planning", "production", "marketing")


def stage_index(stage: str) -> int:
    return STAGE_ORDER.index(stage)


def _known_fields(cls: type, data: dict) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k in cls.__dataclass_fields__}


def _clamp_stat(value: Any) -> int:
    return max(0, min(100, int(round(value or 0))))


@dataclass
class ScheduledEvent:
    """A delayed effect waiting for its trigger period."""

    trigger_period: int
    effects: dict[str, float] = field(default_factory=dict)
    artist_id: str = ""
    scope: str = "global"  # "global" | "predetermined" | "user_selected"
    source: str = ""
    choice_id: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> ScheduledEvent:
        return cls(**_known_fields(cls, data))


@dataclass
class GameState:
    """One game's label-wide state. Only the turn controller writes money."""

    id: str
    money: int = 0
    reputation: int = 0
    creative_capital: int = 0
    focus_slots: int = 3
    used_focus_slots: int = 0
    playlist_access: str = "none"
    press_access: str = "none"
    venue_access: str = "none"
    current_period: int = 0
    campaign_completed: bool = False
    scheduled_events: list[ScheduledEvent] = field(default_factory=list)
    unlocked_producer_tiers: list[str] = field(default_factory=lambda: ["local"])
    tier_unlock_history: dict[str, dict[str, int]] = field(default_factory=dict)
    pending_signing_fees: int = 0

    def access_tier(self, category: str) -> str:
        return getattr(self, f"{category}_access")

    def set_access_tier(self, category: str, tier: str) -> None:
        setattr(self, f"{category}_access", tier)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> GameState:
        values = _known_fields(cls, data)
        values["scheduled_events"] = [
            e if isinstance(e, ScheduledEvent) else ScheduledEvent.from_dict(e)
            for e in values.get("scheduled_events", [])
        ]
        return cls(**values)


@dataclass
class Artist:
    id: str
    game_id: str
    name: str
    talent: int = 50
    work_ethic: int = 50
    popularity: int = 0
    popularity_carry: float = 0.0  # fractional popularity not yet applied
    mood: int = 50
    loyalty: int = 50
    temperament: int = 50
    energy: int = 50
    signed: bool = True
    weekly_cost: int = 1200
    genre: str = ""

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> Artist:
        values = _known_fields(cls, data)
        for stat in ("talent", "work_ethic", "popularity", "mood", "loyalty", "temperament", "energy"):
            if stat in values:
                values[stat] = _clamp_stat(values[stat])
        return cls(**values)


@dataclass
class Executive:
    id: str
    game_id: str
    role: str  # "head_ar" | "cmo" | "cco" | "head_distribution"
    mood: int = 50
    loyalty: int = 50
    last_action_period: int | None = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> Executive:
        return cls(**_known_fields(cls, data))


@dataclass
class Project:
    """A recording project or a tour, advanced through STAGE_ORDER."""

    id: str
    game_id: str
    artist_id: str
    title: str
    type: str = "single"
    stage: str = "planning"
    song_count: int = 1
    songs_created: int = 0
    total_cost: int = 0
    budget_per_song: int = 0
    producer_tier: str = "local"
    time_investment: str = "standard"
    start_period: int = 1
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_recording(self) -> bool:
        return self.type.lower() in RECORDING_TYPES

    @property
    def is_tour(self) -> bool:
        return self.type.lower() in TOUR_TYPES

    @property
    def is_active(self) -> bool:
        return self.stage in ACTIVE_STAGES

    @property
    def session_budget_per_song(self) -> float:
        """Explicit per-song budget, else the project cost spread over its songs."""
        if self.budget_per_song:
            return self.budget_per_song
        return self.total_cost / max(1, self.song_count)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> Project:
        return cls(**_known_fields(cls, data))


@dataclass
class Song:
    id: str
    game_id: str
    project_id: str
    artist_id: str
    title: str
    quality: int = 50
    mood: str = ""
    genre: str = ""
    producer_tier: str = "local"
    time_investment: str = "standard"
    created_period: int = 0
    is_recorded: bool = False
    is_released: bool = False
    release_period: int | None = None
    release_id: str = ""
    initial_streams: int = 0
    weekly_streams: int = 0
    total_streams: int = 0
    total_revenue: int = 0
    last_period_revenue: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> Song:
        return cls(**_known_fields(cls, data))


@dataclass
class LeadSingleStrategy:
    """A song from a release issued ahead of the main date."""

    song_id: str
    release_period: int
    budget: dict[str, int] = field(default_factory=dict)
    released: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> LeadSingleStrategy:
        return cls(**_known_fields(cls, data))


@dataclass
class Release:
    id: str
    game_id: str
    artist_id: str
    title: str
    type: str = "single"  # "single" | "ep" | "album"
    release_period: int = 0
    status: str = "planned"  # "planned" | "released"
    song_ids: list[str] = field(default_factory=list)
    marketing_budget: dict[str, int] = field(default_factory=dict)
    lead_single: LeadSingleStrategy | None = None
    revenue_generated: int = 0
    streams_generated: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def total_marketing(self) -> int:
        return int(sum(self.marketing_budget.values()))

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> Release:
        values = _known_fields(cls, data)
        lead = values.get("lead_single")
        if isinstance(lead, dict):
            values["lead_single"] = LeadSingleStrategy.from_dict(lead)
        return cls(**values)
