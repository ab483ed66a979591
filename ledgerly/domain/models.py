"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import FrozenSet, List, Optional

BASE_CURRENCY = "USD"


@dataclass
class MonetaryRecord:
    """Income or expense line as read from the record store"""

    amount: Decimal
    date: datetime
    type: str  # "income" or "expense"
    currency: str = BASE_CURRENCY
    category: Optional[str] = None
    tags: List[str] = field(default_factory=list)


@dataclass
class Goal:
    """Savings goal progress, as consumed by the allocator"""

    id: object
    target_amount: Decimal
    current_amount: Decimal
    achieved: bool
    auto_allocate_percentage: Decimal


@dataclass(frozen=True)
class ReportFilters:
    """Predicates applied before aggregation; None means no constraint"""

    start: Optional[datetime] = None
    end: Optional[datetime] = None
    type: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[FrozenSet[str]] = None


@dataclass
class TrendBucket:
    """Per-period total in the reporting currency"""

    group: str
    total: Decimal
    count: int


@dataclass
class DashboardSummary:
    """All-time income/expense totals in the reporting currency"""

    total_income: Decimal
    total_expense: Decimal
    net_balance: Decimal
