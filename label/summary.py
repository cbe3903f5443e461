"""Period summary: the accumulator every phase of an advance writes into."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

ALL_ARTISTS = "*"


@dataclass
class GameChange:
    type: str  # "revenue" | "expense" | "meeting" | "project_complete" | "unlock" | ...
    description: str
    amount: int = 0
    entity_id: str = ""


@dataclass
class ExpenseBreakdown:
    weekly_operations: int = 0
    artist_salaries: int = 0
    executive_salaries: int = 0
    signing_bonuses: int = 0  # tracked only, paid at signing
    project_costs: int = 0  # tracked only, paid at project creation
    marketing_costs: int = 0
    role_meeting_costs: int = 0


@dataclass
class RevenueBreakdown:
    streaming: int = 0
    releases: int = 0
    tours: int = 0
    role_benefits: int = 0


@dataclass
class PeriodSummary:
    """Everything that happened in one period.

    revenue and expenses are the only inputs to the end-of-period balance
    update; the breakdowns explain them.
    """

    period: int
    starting_money: int = 0
    ending_money: int = 0
    revenue: int = 0
    expenses: int = 0
    streams: int = 0
    changes: list[GameChange] = field(default_factory=list)
    expense_breakdown: ExpenseBreakdown = field(default_factory=ExpenseBreakdown)
    revenue_breakdown: RevenueBreakdown = field(default_factory=RevenueBreakdown)
    reputation_changes: dict[str, int] = field(default_factory=dict)
    artist_changes: dict[str, dict[str, int]] = field(default_factory=dict)
    events: list[dict[str, Any]] = field(default_factory=list)
    financial_breakdown: str = ""

    def add_change(self, type: str, description: str, amount: int = 0, entity_id: str = "") -> None:
        self.changes.append(GameChange(type=type, description=description, amount=amount, entity_id=entity_id))

    def add_revenue(self, amount: int, category: str, description: str = "", entity_id: str = "") -> None:
        amount = int(amount)
        self.revenue += amount
        setattr(self.revenue_breakdown, category, getattr(self.revenue_breakdown, category) + amount)
        if description:
            self.add_change("revenue", description, amount, entity_id)

    def add_expense(self, amount: int, category: str, description: str = "", entity_id: str = "") -> None:
        amount = int(amount)
        self.expenses += amount
        self.track_expense(amount, category)
        if description:
            self.add_change("expense", description, -amount, entity_id)

    def track_expense(self, amount: int, category: str) -> None:
        """Record an amount in the breakdown without charging it."""
        setattr(self.expense_breakdown, category, getattr(self.expense_breakdown, category) + int(amount))

    def add_reputation(self, source: str, delta: int) -> None:
        self.reputation_changes[source] = self.reputation_changes.get(source, 0) + int(delta)

    def record_artist_change(self, artist_id: str, attribute: str, delta: float) -> None:
        if not delta:
            return
        changes = self.artist_changes.setdefault(artist_id, {})
        changes[attribute] = changes.get(attribute, 0) + int(round(delta))

    def to_dict(self) -> dict:
        return asdict(self)
