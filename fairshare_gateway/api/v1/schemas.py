"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional


class SummarySchema(BaseModel):
    total_spent: Decimal
    transaction_count: int
    average_per_day: Decimal
    previous_period_total: Decimal
    percent_change: Optional[float] = None
    is_increase: bool
    is_decrease: bool
    has_comparison: bool


class CategorySpendingSchema(BaseModel):
    category: str
    total: Decimal
    count: int
    percentage: float


class GroupSpendingSchema(BaseModel):
    group_id: str
    name: str
    total: Decimal
    count: int


class TimeSeriesPointSchema(BaseModel):
    bucket_start: datetime
    total: Decimal
    label: str


class TopExpenseSchema(BaseModel):
    expense_id: str
    description: str
    category: str
    amount: Decimal
    date: datetime
    group_name: Optional[str] = None


class SpendingReportResponse(BaseModel):
    """Response for GET /v1/reports"""

    user_id: str
    period: str
    granularity: str
    start: datetime
    end: datetime
    previous_start: datetime
    previous_end: datetime
    summary: SummarySchema
    by_category: Dict[str, CategorySpendingSchema]
    by_group: Dict[str, GroupSpendingSchema]
    trend: List[TimeSeriesPointSchema]
    top_expenses: List[TopExpenseSchema]


class FriendRequestCreate(BaseModel):
    """Request body for POST /v1/friends/requests"""

    friend_user_id: str = Field(..., min_length=1, description="User to befriend")


class FriendshipResponse(BaseModel):
    owner_id: str
    friend_user_id: str
    friend_email: str
    friend_name: Optional[str] = None
    requested_by: str
    status: str


class DirectExpenseCreate(BaseModel):
    """Request body for POST /v1/direct-expenses"""

    participant_id: str = Field(..., min_length=1, description="The other party of the expense")
    description: str = Field(..., min_length=1)
    category: Optional[str] = None
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    participant_owed_amount: Decimal = Field(..., ge=0, decimal_places=2)
    currency_code: str = Field("USD", min_length=3, max_length=3)
    date: Optional[datetime] = None

    @model_validator(mode="after")
    def owed_within_amount(self) -> "DirectExpenseCreate":
        if self.participant_owed_amount > self.amount:
            raise ValueError("participant_owed_amount cannot exceed amount")
        return self


class DirectExpenseResponse(BaseModel):
    expense_id: str
    payer_id: str
    participant_id: str
    description: str
    category: Optional[str] = None
    amount: Decimal
    participant_owed_amount: Decimal
    currency_code: str
    date: datetime
