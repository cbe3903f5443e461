"""Player actions and the processor that applies them.

Actions are a closed set of three dataclasses. Each processed action costs
one focus slot; the cap itself is enforced by the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from economy.finance import FinancialCalculator
from label.models import ScheduledEvent
from progression.relationships import clamp

from .content import ContentProvider
from .storage import GameStore
from .turn import ARTIST_ATTRIBUTES, Turn

logger = logging.getLogger(__name__)


class EffectTargetError(ValueError):
    """Raised when artist effects have no artist to land on."""

    def __init__(self, message: str, scope: str = ""):
        self.scope = scope
        super().__init__(message)


@dataclass
class RoleMeeting:
    role_id: str
    meeting_id: str
    choice_id: str
    executive_id: str = ""
    artist_id: str = ""  # only for user_selected meetings


@dataclass
class MarketingCampaign:
    channel: str  # "pr_push" | "digital_ads" | ...
    target_id: str = ""


@dataclass
class ArtistDialogue:
    artist_id: str
    scene_id: str
    choice_id: str


Action = Union[RoleMeeting, MarketingCampaign, ArtistDialogue]


def action_from_dict(data: dict) -> Action:
    """Build an action from a {type, target_id, metadata} payload."""
    kind = data.get("type", "")
    target = data.get("target_id") or data.get("targetId") or ""
    meta = data.get("metadata") or {}

    if kind == "role_meeting":
        return RoleMeeting(
            role_id=meta.get("role_id") or target,
            meeting_id=meta.get("meeting_id", ""),
            choice_id=meta.get("choice_id", ""),
            executive_id=meta.get("executive_id", ""),
            artist_id=meta.get("selected_artist_id", ""),
        )
    if kind == "marketing":
        return MarketingCampaign(channel=meta.get("channel") or target, target_id=target)
    if kind == "artist_dialogue":
        return ArtistDialogue(
            artist_id=target,
            scene_id=meta.get("scene_id", ""),
            choice_id=meta.get("choice_id", ""),
        )
    raise ValueError(f"Unknown action type: {kind!r}")


class ActionProcessor:
    """Apply player actions to the period in progress."""

    def __init__(self, store: GameStore, content: ContentProvider, financial: FinancialCalculator):
        self._store = store
        self._content = content
        self._financial = financial

    async def process(self, actions: list[Action], turn: Turn) -> None:
        # Meetings first so their relationship effects are in before the flush.
        ordered = [a for a in actions if isinstance(a, RoleMeeting)]
        ordered += [a for a in actions if not isinstance(a, RoleMeeting)]

        for action in ordered:
            try:
                if isinstance(action, RoleMeeting):
                    await self._role_meeting(action, turn)
                elif isinstance(action, MarketingCampaign):
                    self._marketing(action, turn)
                elif isinstance(action, ArtistDialogue):
                    self._dialogue(action, turn)
                else:
                    raise TypeError(f"Unsupported action: {action!r}")
            except EffectTargetError as e:
                logger.warning("Action %r could not be targeted: %s", action, e)
                self._apply_fallback("meeting", turn, f"Action could not be applied ({e})")
            turn.state.used_focus_slots += 1

    # ── Shared effect routine ───────────────────────────────────

    def apply_effects(
        self,
        effects: dict[str, float],
        turn: Turn,
        artist_id: str = "",
        scope: str = "global",
        source: str = "",
    ) -> None:
        """Apply numeric effects to the period; artist effects are queued, not written."""
        artist_keys = [k for k in effects if k.startswith("artist_")]
        if artist_keys and not artist_id and scope != "global":
            raise EffectTargetError(f"{source or 'effect'} needs an artist for scope {scope}", scope=scope)

        state, summary = turn.state, turn.summary
        for key, value in effects.items():
            if key == "money":
                amount = int(value)
                if amount > 0:
                    summary.add_revenue(amount, "role_benefits", f"Executive meeting benefit: {source}".rstrip(": "))
                elif amount < 0:
                    summary.add_expense(-amount, "role_meeting_costs", f"Executive meeting cost: {source}".rstrip(": "))
            elif key == "reputation":
                before = state.reputation
                state.reputation = clamp(state.reputation + value)
                summary.add_reputation(source or "meetings", state.reputation - before)
            elif key == "creative_capital":
                state.creative_capital = max(0, int(state.creative_capital + value))
            elif key in artist_keys:
                attribute = key[len("artist_"):]
                if attribute not in ARTIST_ATTRIBUTES:
                    logger.debug("Ignoring unknown artist effect %s", key)
                    continue
                turn.queue_artist_delta(artist_id, attribute, value)
            elif key == "executive_mood":
                continue
            else:
                logger.debug("Ignoring unknown effect %s", key)

    def _apply_fallback(self, kind: str, turn: Turn, description: str, artist_id: str = "") -> None:
        effects = self._content.fallback_effects(kind)
        scope = "global" if not artist_id else "artist"
        self.apply_effects(effects, turn, artist_id=artist_id, scope=scope, source="fallback")
        turn.summary.add_change("meeting" if kind == "meeting" else "dialogue", description)

    def _schedule(self, effects: dict, turn: Turn, artist_id: str, scope: str, source: str, choice_id: str) -> None:
        if not effects:
            return
        turn.state.scheduled_events.append(
            ScheduledEvent(
                trigger_period=turn.period + 1,
                effects=dict(effects),
                artist_id=artist_id,
                scope=scope,
                source=source,
                choice_id=choice_id,
            )
        )

    # ── Role meetings ───────────────────────────────────────────

    async def _role_meeting(self, action: RoleMeeting, turn: Turn) -> None:
        meeting = self._content.meeting(action.role_id, action.meeting_id) or {}
        name = meeting.get("name") or action.meeting_id or "meeting"
        choice = self._content.meeting_choice(action.role_id, action.meeting_id, action.choice_id)
        if choice is None:
            logger.warning(
                "Meeting choice not found: role=%s meeting=%s choice=%s",
                action.role_id,
                action.meeting_id,
                action.choice_id,
            )
            self._apply_fallback("meeting", turn, f"{name}: choice unavailable, fallback applied")
            return

        scope = meeting.get("target_scope", "global")
        artist_id = await self._resolve_target(scope, action, turn)
        immediate = choice.get("effects_immediate") or {}
        self.apply_effects(immediate, turn, artist_id=artist_id, scope=scope, source=name)
        self._schedule(choice.get("effects_delayed") or {}, turn, artist_id, scope, name, action.choice_id)

        if action.role_id != "ceo":
            await self._update_executive(action, immediate, turn)

    async def _resolve_target(self, scope: str, action: RoleMeeting, turn: Turn) -> str:
        if scope == "user_selected":
            return action.artist_id
        if scope != "predetermined":
            return ""
        artists = await self._store.get_artists(turn.game_id)
        if not artists:
            return ""
        top = max(a.popularity for a in artists)
        return turn.rng.choice([a for a in artists if a.popularity == top]).id

    async def _update_executive(self, action: RoleMeeting, immediate: dict, turn: Turn) -> None:
        executives = await self._store.get_executives(turn.game_id)
        if action.executive_id:
            matches = [e for e in executives if e.id == action.executive_id]
        else:
            matches = [e for e in executives if e.role == action.role_id]
        if not matches:
            logger.warning("No executive for role %s (id=%r)", action.role_id, action.executive_id)
            return

        executive = matches[0]
        rel = self._content.relationships()
        mood_delta = immediate.get("executive_mood", rel.get("meeting_mood_default", 5))
        executive.mood = clamp(executive.mood + mood_delta)
        executive.loyalty = clamp(executive.loyalty + rel.get("meeting_loyalty_boost", 5))
        executive.last_action_period = turn.period
        turn.used_executives.add(executive.id)
        await self._store.update_executive(executive)
        turn.summary.add_change("meeting", f"Met with {self._content.role_title(executive.role)}", entity_id=executive.id)

    # ── Marketing ───────────────────────────────────────────────

    def _marketing(self, action: MarketingCampaign, turn: Turn) -> None:
        label = action.channel.replace("_", " ")
        cost = self._financial.marketing_cost(action.channel)
        if cost is None:
            logger.warning("Unknown marketing channel %s", action.channel)
            turn.summary.add_change("expense", f"Unknown marketing channel: {label}")
            return
        if turn.projected_money() < cost:
            turn.summary.add_change("expense", f"Cannot afford {label} campaign - insufficient funds")
            return

        state = turn.state
        if action.channel == "pr_push":
            pickups = self._financial.press_pickups(state.press_access, cost, state.reputation, turn.rng)
            if pickups:
                before = state.reputation
                state.reputation = clamp(state.reputation + pickups)
                turn.summary.add_reputation("pr_push", state.reputation - before)
                description = f"PR campaign generated {pickups} press mentions"
            else:
                description = "PR campaign completed - limited media pickup"
        elif action.channel == "digital_ads":
            boost = cost // 1000
            before = state.reputation
            state.reputation = clamp(state.reputation + boost)
            turn.summary.add_reputation("digital_ads", state.reputation - before)
            description = f"Digital campaign boosted online presence (+{boost} reputation)"
        else:
            description = f"{label.capitalize()} campaign completed"

        turn.summary.add_expense(cost, "marketing_costs", description)

    # ── Artist dialogue ─────────────────────────────────────────

    def _dialogue(self, action: ArtistDialogue, turn: Turn) -> None:
        if not action.artist_id:
            logger.warning("Dialogue %s has no artist", action.scene_id)
            turn.summary.add_change("dialogue", "Artist conversation skipped: no artist selected")
            return

        choice = self._content.dialogue_choice(action.scene_id, action.choice_id)
        if choice is None:
            logger.warning("Dialogue choice not found: scene=%s choice=%s", action.scene_id, action.choice_id)
            self._apply_fallback(
                "dialogue", turn, "Artist conversation went nowhere", artist_id=action.artist_id
            )
            return

        source = f"dialogue:{action.scene_id}"
        self.apply_effects(choice.get("effects_immediate") or {}, turn, action.artist_id, "artist", source)
        self._schedule(
            choice.get("effects_delayed") or {}, turn, action.artist_id, "artist", source, action.choice_id
        )
        turn.summary.add_change("dialogue", "Artist conversation completed", entity_id=action.artist_id)
