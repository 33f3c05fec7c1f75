"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional


class TimePeriod(str, Enum):
    """Named report periods"""

    THIS_MONTH = "this_month"
    LAST_MONTH = "last_month"
    THIS_YEAR = "this_year"
    ALL_TIME = "all_time"


class TimeGranularity(str, Enum):
    """Width of a trend series bucket"""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class FriendStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"


@dataclass
class User:
    """Registered user, read-only from the reporting side"""

    user_id: str
    email: str
    display_name: Optional[str] = None


@dataclass
class FriendRequest:
    """One side of a friendship, stored under users/{owner}/friends/{friend}"""

    status: str
    requested_by: str
    friend_user_id: str
    friend_email: str
    friend_name: Optional[str] = None

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "FriendRequest":
        return cls(
            status=doc.get("status", ""),
            requested_by=doc.get("requested_by", ""),
            friend_user_id=doc.get("friend_user_id", ""),
            friend_email=doc.get("friend_email", ""),
            friend_name=doc.get("friend_name"),
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "requested_by": self.requested_by,
            "friend_user_id": self.friend_user_id,
            "friend_name": self.friend_name,
            "friend_email": self.friend_email,
        }


@dataclass
class Expense:
    """Group or direct expense as read from the store"""

    expense_id: str
    payer_id: str
    payer_email: str
    description: str
    amount: Decimal
    date: datetime
    participant_owed_amount: Decimal = Decimal("0")
    currency_code: str = "USD"
    category: Optional[str] = None
    participant_id: Optional[str] = None
    group_id: Optional[str] = None
    group_name: Optional[str] = None
    payer_name: Optional[str] = None
    member_owed_amounts: Dict[str, Decimal] = field(default_factory=dict)

    @property
    def is_direct(self) -> bool:
        return self.group_id is None

    def share_for(self, user_id: str) -> Decimal:
        """Portion of this expense attributed to user_id"""
        if not self.is_direct:
            return self.member_owed_amounts.get(user_id, Decimal("0"))
        if user_id == self.participant_id:
            return self.participant_owed_amount
        return self.amount - self.participant_owed_amount


@dataclass
class DateRange:
    """Current report window plus its comparison window, all half-open"""

    start: datetime
    end: datetime
    previous_start: datetime
    previous_end: datetime

    @property
    def has_previous(self) -> bool:
        return self.previous_end > self.previous_start


@dataclass
class ReportDefaults:
    """Fallback values the aggregation engine applies"""

    default_category: str = "other"
    default_currency_symbol: str = "$"
    top_n: int = 5


@dataclass
class SpendingSummary:
    """Totals for the current period compared against the previous one"""

    total_spent: Decimal
    transaction_count: int
    average_per_day: Decimal
    previous_period_total: Decimal
    percent_change: Optional[float]
    is_increase: bool
    is_decrease: bool
    has_comparison: bool = True


@dataclass
class CategorySpending:
    category: str
    total: Decimal
    count: int
    percentage: float = 0.0


@dataclass
class GroupSpending:
    group_id: str
    name: str
    total: Decimal
    count: int


@dataclass
class TimeSeriesDataPoint:
    """Single trend bucket; zero-total buckets are kept"""

    bucket_start: datetime
    total: Decimal
    label: str


@dataclass
class TopExpenseItem:
    expense_id: str
    description: str
    category: str
    amount: Decimal
    date: datetime
    group_name: Optional[str] = None


@dataclass
class SpendingReport:
    """Output of a report request"""

    date_range: DateRange
    granularity: TimeGranularity
    summary: SpendingSummary
    by_category: dict = field(default_factory=dict)
    by_group: dict = field(default_factory=dict)
    trend: List[TimeSeriesDataPoint] = field(default_factory=list)
    top_expenses: List[TopExpenseItem] = field(default_factory=list)


@dataclass
class EmailMessage:
    """Outbound transactional email"""

    sender: str
    to: str
    subject: str
    html: str
    text: str
