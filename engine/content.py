"""Read-only lookups over the balance and narrative tables in settings.yaml."""

from __future__ import annotations

import logging
import random
from typing import Any

from .config import ConfigError

logger = logging.getLogger(__name__)

ROLE_TITLES = {
    "ceo": "CEO",
    "head_ar": "Head of A&R",
    "cmo": "Chief Marketing Officer",
    "cco": "Chief Creative Officer",
    "head_distribution": "Head of Distribution",
}


class ContentProvider:
    """Typed accessors for cost tables, formula coefficients and choice content.

    Missing required sections raise ConfigError so that an advance fails
    loudly instead of running on silent defaults.
    """

    def __init__(self, config: dict | None = None):
        self._cfg = config or {}

    @property
    def raw(self) -> dict:
        return self._cfg

    def _require(self, *path: str) -> Any:
        node: Any = self._cfg
        for key in path:
            if not isinstance(node, dict) or key not in node:
                dotted = ".".join(path)
                raise ConfigError(f"Missing required setting: {dotted}", path=dotted)
            node = node[key]
        return node

    def _optional(self, *path: str, default: Any = None) -> Any:
        node: Any = self._cfg
        for key in path:
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return node

    # ── Campaign ────────────────────────────────────────────────

    @property
    def campaign_length(self) -> int:
        return int(self._require("campaign", "length_periods"))

    @property
    def periods_per_quarter(self) -> int:
        return int(self._optional("campaign", "periods_per_quarter", default=13))

    def focus_slot_rules(self) -> dict[str, int]:
        campaign = self._require("campaign")
        return {
            "base": int(campaign.get("focus_slots_base", 3)),
            "unlock_threshold": int(campaign.get("focus_slots_unlock_threshold", 50)),
            "max": int(campaign.get("focus_slots_max", 4)),
        }

    @property
    def seed_salt(self) -> str:
        env_salt = self._optional("_env", "seed_salt", default="")
        return env_salt or str(self._optional("engine", "seed_salt", default="") or "")

    # ── Economy ─────────────────────────────────────────────────

    @property
    def weekly_burn_range(self) -> tuple[int, int]:
        low, high = self._require("economy", "weekly_burn_base")
        return int(low), int(high)

    @property
    def default_artist_fee(self) -> int:
        return int(self._optional("economy", "default_artist_fee", default=1200))

    @property
    def executive_salary_interval(self) -> int:
        return int(self._optional("economy", "executive_salary_interval", default=4))

    def project_costs(self, project_type: str) -> dict:
        costs = self._require("economy", "project_costs")
        entry = costs.get(project_type.lower())
        if entry is None:
            raise ConfigError(f"Unknown project type: {project_type}", path="economy.project_costs")
        return entry

    def song_count_system(self) -> dict:
        return self._optional("economy", "song_count_cost_system", default={}) or {}

    def marketing_costs(self, channel: str) -> dict | None:
        return self._optional("economy", "marketing_costs", channel)

    # ── Production ──────────────────────────────────────────────

    def producer_tiers(self) -> dict[str, dict]:
        return self._require("production", "producer_tiers")

    def producer_tier(self, tier: str) -> dict:
        tiers = self.producer_tiers()
        if tier not in tiers:
            raise ConfigError(f"Unknown producer tier: {tier}", path="production.producer_tiers")
        return tiers[tier]

    def time_investment(self, option: str) -> dict:
        options = self._require("production", "time_investment")
        if option not in options:
            raise ConfigError(f"Unknown time investment: {option}", path="production.time_investment")
        return options[option]

    def songs_per_period(self, project_type: str) -> int:
        table = self._optional("production", "songs_per_period", default={}) or {}
        return int(table.get(project_type.lower(), table.get("default", 2)))

    def quality(self) -> dict:
        return self._require("quality")

    def budget_system(self) -> dict:
        return self._optional("quality", "budget", default={}) or {}

    # ── Market formulas ─────────────────────────────────────────

    def access_tiers(self, category: str) -> dict[str, dict]:
        return self._require("access_tiers", category)

    def all_access_tiers(self) -> dict[str, dict[str, dict]]:
        return self._require("access_tiers")

    def streaming(self) -> dict:
        return self._require("streaming")

    def ongoing_streams(self) -> dict:
        return self._require("streaming", "ongoing")

    def press(self) -> dict:
        return self._require("press")

    def release_planning(self) -> dict:
        return self._require("release_planning")

    def tour(self) -> dict:
        return self._require("tour")

    def relationships(self) -> dict:
        return self._optional("relationships", default={}) or {}

    # ── Narrative content ───────────────────────────────────────

    def random_event(self, rng: random.Random) -> dict | None:
        catalog = self._optional("events", "catalog", default=[]) or []
        if not catalog:
            return None
        return rng.choice(catalog)

    @property
    def event_chance(self) -> float:
        return float(self._optional("events", "weekly_chance", default=0.0))

    def role(self, role_id: str) -> dict | None:
        return self._optional("roles", role_id)

    def role_title(self, role_id: str) -> str:
        role = self.role(role_id) or {}
        return role.get("title") or ROLE_TITLES.get(role_id, role_id)

    def executive_salary(self, role_id: str) -> int:
        role = self.role(role_id) or {}
        return int(role.get("salary", 0))

    def meeting(self, role_id: str, meeting_id: str) -> dict | None:
        return self._optional("roles", role_id, "meetings", meeting_id)

    def meeting_choice(self, role_id: str, meeting_id: str, choice_id: str) -> dict | None:
        meeting = self.meeting(role_id, meeting_id)
        if not meeting:
            logger.debug("Meeting %s/%s not found", role_id, meeting_id)
            return None
        return (meeting.get("choices") or {}).get(choice_id)

    def dialogue_choice(self, scene_id: str, choice_id: str) -> dict | None:
        return self._optional("dialogue", "scenes", scene_id, "choices", choice_id)

    def fallback_effects(self, kind: str) -> dict[str, float]:
        defaults = {"meeting": {"money": -1000}, "dialogue": {"artist_mood": -1}}
        configured = self._optional("fallbacks", f"{kind}_effects")
        return dict(configured if configured is not None else defaults[kind])

    def song_names(self, genre: str = "") -> list[str]:
        pools = self._optional("song_generation", "name_pools", default={}) or {}
        if genre and genre in pools:
            return list(pools[genre])
        return list(pools.get("default") or ["Untitled"])

    def song_moods(self) -> list[str]:
        return list(
            self._optional("song_generation", "mood_types", default=None)
            or ["upbeat", "melancholic", "aggressive", "chill"]
        )
