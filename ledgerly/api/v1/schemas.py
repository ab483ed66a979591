"""Pydantic schemas for API request/response validation"""

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, ClassVar, Dict, FrozenSet, List, Literal, Optional
import uuid

TransactionType = Literal["income", "expense"]
RecurrencePattern = Literal["daily", "weekly", "monthly"]

# rate tables are keyed by upper-case ISO codes
CurrencyCode = Annotated[str, Field(min_length=3, max_length=3), AfterValidator(str.upper)]


class PartialUpdate(BaseModel):
    """Base for PUT bodies; only sent fields change"""

    # columns that accept an explicit null
    NULLABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset()

    def changes(self) -> Dict[str, Any]:
        """Sent fields, minus nulls aimed at NOT NULL columns"""
        return {
            name: value
            for name, value in self.model_dump(exclude_unset=True).items()
            if value is not None or name in self.NULLABLE_FIELDS
        }


class TransactionCreate(BaseModel):
    """Request body for POST /v1/transactions"""

    amount: Decimal = Field(..., description="Amount in the transaction's own currency")
    currency: CurrencyCode = "USD"
    type: TransactionType
    date: Optional[datetime] = Field(None, description="Defaults to now")
    category: str = Field(..., min_length=1)
    tags: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    recurring: bool = False
    recurrence_pattern: Optional[RecurrencePattern] = None
    recurrence_end_date: Optional[datetime] = None


class TransactionUpdate(PartialUpdate):
    """Request body for PUT /v1/transactions/{id}"""

    NULLABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset({"description", "recurrence_pattern", "recurrence_end_date"})

    amount: Optional[Decimal] = None
    currency: Optional[CurrencyCode] = None
    type: Optional[TransactionType] = None
    date: Optional[datetime] = None
    category: Optional[str] = Field(None, min_length=1)
    tags: Optional[List[str]] = None
    description: Optional[str] = None
    recurring: Optional[bool] = None
    recurrence_pattern: Optional[RecurrencePattern] = None
    recurrence_end_date: Optional[datetime] = None


class TransactionResponse(BaseModel):
    """Stored transaction"""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    amount: float
    currency: str
    type: str
    date: datetime
    category: str
    tags: List[str]
    description: Optional[str] = None
    recurring: bool
    recurrence_pattern: Optional[str] = None
    recurrence_end_date: Optional[datetime] = None


class GoalCreate(BaseModel):
    """Request body for POST /v1/goals"""

    description: str = Field(..., min_length=1)
    target_amount: Decimal = Field(..., ge=0)
    deadline: datetime
    auto_allocate: bool = False
    auto_allocate_percentage: Decimal = Field(Decimal(0), ge=0, le=100)


class GoalUpdate(PartialUpdate):
    """Request body for PUT /v1/goals/{id}"""

    description: Optional[str] = Field(None, min_length=1)
    target_amount: Optional[Decimal] = Field(None, ge=0)
    current_amount: Optional[Decimal] = None
    deadline: Optional[datetime] = None
    achieved: Optional[bool] = None
    auto_allocate: Optional[bool] = None
    auto_allocate_percentage: Optional[Decimal] = Field(None, ge=0, le=100)


class GoalResponse(BaseModel):
    """Stored goal"""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    description: str
    target_amount: float
    current_amount: float
    deadline: datetime
    achieved: bool
    auto_allocate: bool
    auto_allocate_percentage: float


class GoalDetailResponse(GoalResponse):
    """Goal with its progress as a two-decimal percentage string"""

    progress: str



class BudgetCreate(BaseModel):
    """Request body for POST /v1/budgets"""

    amount: Decimal = Field(..., ge=0)
    category: Optional[str] = Field(None, description="Omit to budget all expenses")
    period: datetime = Field(..., description="Start of the budget period")


class BudgetUpdate(PartialUpdate):
    """Request body for PUT /v1/budgets/{id}"""

    NULLABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset({"category"})

    amount: Optional[Decimal] = Field(None, ge=0)
    category: Optional[str] = None
    period: Optional[datetime] = None


class BudgetResponse(BaseModel):
    """Stored budget"""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    amount: float
    category: Optional[str] = None
    period: datetime

class MessageResponse(BaseModel):
    """Plain acknowledgement"""

    msg: str


class TrendItem(BaseModel):
    """One period of the spending trend report"""

    group: str
    total: float
    count: int


class DashboardSummaryResponse(BaseModel):
    """Response for GET /v1/reports/dashboard-summary-converted"""

    totalIncome: float
    totalExpense: float
    netBalance: float


class RateStatusResponse(BaseModel):
    """Currently published exchange rates"""

    pivot_currency: str
    last_updated: Optional[datetime] = None
    rates: Dict[str, float]
