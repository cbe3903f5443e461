"""Working context for one advance, shared by every phase."""

from __future__ import annotations

import random
from dataclasses import dataclass, field

from label.models import GameState
from label.summary import ALL_ARTISTS, PeriodSummary

ARTIST_ATTRIBUTES = ("mood", "energy", "popularity", "loyalty")


@dataclass
class Turn:
    state: GameState
    summary: PeriodSummary
    rng: random.Random
    used_executives: set[str] = field(default_factory=set)
    # artist id (or ALL_ARTISTS) -> attribute -> delta not yet written to the artist
    pending: dict[str, dict[str, float]] = field(default_factory=dict)
    release_boosts: dict[str, int] = field(default_factory=dict)

    @property
    def period(self) -> int:
        return self.state.current_period

    @property
    def game_id(self) -> str:
        return self.state.id

    def projected_money(self) -> int:
        """Balance if the period closed now."""
        return self.state.money + self.summary.revenue - self.summary.expenses

    def queue_artist_delta(self, artist_id: str, attribute: str, delta: float) -> None:
        if attribute not in ARTIST_ATTRIBUTES:
            raise ValueError(f"Unknown artist attribute: {attribute}")
        bucket = self.pending.setdefault(artist_id or ALL_ARTISTS, {})
        bucket[attribute] = bucket.get(attribute, 0) + delta

    def take_artist_deltas(self, artist_id: str) -> dict[str, float]:
        """Pop the deltas for one artist, folding in the all-artist bucket."""
        merged = dict(self.pending.pop(artist_id, {}))
        for attribute, delta in self.pending.get(ALL_ARTISTS, {}).items():
            merged[attribute] = merged.get(attribute, 0) + delta
        return merged

    def clear_global_deltas(self) -> None:
        self.pending.pop(ALL_ARTISTS, None)

    def boost_release_mood(self, artist_id: str, boost: int) -> None:
        self.release_boosts[artist_id] = self.release_boosts.get(artist_id, 0) + boost
