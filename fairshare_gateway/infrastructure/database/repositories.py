"""Data access layer for users, friendships and expenses"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from fairshare_gateway.domain.exceptions import FetchFailureError, InvalidTransitionError, ReferenceNotFoundError
from fairshare_gateway.domain.models import Expense, FriendRequest, FriendStatus, User
from fairshare_gateway.infrastructure.database.models import (
    ExpenseRecord,
    ExpenseSplitRecord,
    FriendshipRecord,
    GroupMemberRecord,
    GroupRecord,
    UserRecord,
)


def friendship_document(record: FriendshipRecord) -> Dict[str, Any]:
    """Document view of a friendship row, as carried by change events"""
    return FriendRequest(
        status=record.status,
        requested_by=record.requested_by,
        friend_user_id=record.friend_user_id,
        friend_name=record.friend_name,
        friend_email=record.friend_email,
    ).to_document()


def expense_document(record: ExpenseRecord) -> Dict[str, Any]:
    """Document view of an expense row, as carried by change events"""
    return {
        "payer_id": record.payer_id,
        "payer_email": record.payer_email,
        "payer_name": record.payer_name,
        "participant_id": record.participant_id,
        "group_id": record.group_id,
        "description": record.description,
        "category": record.category,
        "amount": Decimal(record.amount),
        "participant_owed_amount": Decimal(record.participant_owed_amount),
        "currency_code": record.currency_code,
        "date": record.date,
    }


def split_equally(amount: Decimal, member_ids: List[str]) -> Dict[str, Decimal]:
    """Divide amount evenly in cents; leftover cents go to the first member"""
    if not member_ids:
        return {}
    cents = int((amount * 100).to_integral_value(rounding=ROUND_HALF_UP))
    base, remainder = divmod(cents, len(member_ids))
    return {
        member_id: Decimal(base + (remainder if i == 0 else 0)).scaleb(-2)
        for i, member_id in enumerate(member_ids)
    }


class UserRepository:
    """Repository for users"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str) -> Optional[User]:
        """Fetch a user, or None when the document does not exist"""
        record = self.db.get(UserRecord, user_id)
        if record is None:
            return None
        return User(user_id=record.id, email=record.email, display_name=record.display_name)

    def create(self, user_id: str, email: str, display_name: str | None = None) -> UserRecord:
        record = UserRecord(id=user_id, email=email, display_name=display_name)
        self.db.add(record)
        self.db.flush()
        return record


class FriendshipRepository:
    """Repository for friend requests; each friendship is stored once per side"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, owner_id: str, friend_user_id: str) -> Optional[FriendshipRecord]:
        return self.db.execute(
            select(FriendshipRecord).where(
                FriendshipRecord.owner_id == owner_id,
                FriendshipRecord.friend_user_id == friend_user_id,
            )
        ).scalar_one_or_none()

    def create_request(self, requester: User, recipient: User) -> Tuple[FriendshipRecord, FriendshipRecord]:
        """
        Write both sides of a new pending request.

        The recipient's copy describes the requester (friend_* fields point at
        the sender); the requester's copy describes the recipient.

        Returns:
            (requester_copy, recipient_copy)
        """
        requester_copy = FriendshipRecord(
            owner_id=requester.user_id,
            friend_user_id=recipient.user_id,
            friend_email=recipient.email,
            friend_name=recipient.display_name,
            requested_by=requester.user_id,
            status=FriendStatus.PENDING.value,
        )
        recipient_copy = FriendshipRecord(
            owner_id=recipient.user_id,
            friend_user_id=requester.user_id,
            friend_email=requester.email,
            friend_name=requester.display_name,
            requested_by=requester.user_id,
            status=FriendStatus.PENDING.value,
        )
        self.db.add_all([requester_copy, recipient_copy])
        self.db.flush()
        return requester_copy, recipient_copy

    def accept(self, owner_id: str, friend_user_id: str) -> List[Tuple[FriendshipRecord, Dict[str, Any], Dict[str, Any]]]:
        """
        Move both sides of a request from pending to accepted.

        Raises:
            ReferenceNotFoundError: No request between the two users
            InvalidTransitionError: Request is not pending, or owner is the requester

        Returns:
            (record, before, after) per side that changed
        """
        own_copy = self.get(owner_id, friend_user_id)
        if own_copy is None:
            raise ReferenceNotFoundError(f"No friend request from {friend_user_id}")
        if own_copy.status != FriendStatus.PENDING.value:
            raise InvalidTransitionError(f"Friend request is already {own_copy.status}")
        if own_copy.requested_by == owner_id:
            raise InvalidTransitionError("Requester cannot accept their own request")

        changes = []
        for record in (own_copy, self.get(friend_user_id, owner_id)):
            if record is None or record.status != FriendStatus.PENDING.value:
                continue
            before = friendship_document(record)
            record.status = FriendStatus.ACCEPTED.value
            changes.append((record, before, friendship_document(record)))
        self.db.flush()
        return changes


class GroupRepository:
    """Repository for groups and their membership"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, name: str, member_ids: List[str]) -> GroupRecord:
        group = GroupRecord(name=name)
        group.members = [GroupMemberRecord(user_id=member_id) for member_id in member_ids]
        self.db.add(group)
        self.db.flush()
        return group


class ExpenseRepository:
    """Repository for group and direct expenses"""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        payer: User,
        description: str,
        amount: Decimal,
        date: datetime,
        category: str | None = None,
        participant_id: str | None = None,
        participant_owed_amount: Decimal = Decimal("0"),
        currency_code: str = "USD",
        group_id: str | None = None,
        member_owed_amounts: Dict[str, Decimal] | None = None,
    ) -> ExpenseRecord:
        """
        Persist an expense; direct when group_id is None.

        Group expenses store one owed amount per member. Without explicit
        amounts the expense is split equally across the group's members,
        ordered by user id.
        """
        record = ExpenseRecord(
            group_id=group_id,
            payer_id=payer.user_id,
            payer_email=payer.email,
            payer_name=payer.display_name,
            participant_id=participant_id,
            description=description,
            category=category,
            amount=amount,
            participant_owed_amount=participant_owed_amount,
            currency_code=currency_code,
            date=date,
        )
        if group_id is not None:
            if member_owed_amounts is None:
                member_ids = self.db.execute(
                    select(GroupMemberRecord.user_id)
                    .where(GroupMemberRecord.group_id == group_id)
                    .order_by(GroupMemberRecord.user_id)
                ).scalars().all()
                member_owed_amounts = split_equally(amount, list(member_ids))
            record.splits = [
                ExpenseSplitRecord(user_id=member_id, owed_amount=owed)
                for member_id, owed in member_owed_amounts.items()
            ]
        self.db.add(record)
        self.db.flush()
        return record

    def list_for_user(self, user_id: str, start: datetime, end: datetime) -> List[Expense]:
        """
        Fetch expenses the user paid, participates in, or shares through a group,
        dated within [start, end).

        Raises:
            FetchFailureError: Store unreachable or rows malformed
        """
        group_ids = select(GroupMemberRecord.group_id).where(GroupMemberRecord.user_id == user_id)
        query = (
            select(ExpenseRecord, GroupRecord.name)
            .outerjoin(GroupRecord, ExpenseRecord.group_id == GroupRecord.id)
            .where(
                or_(
                    ExpenseRecord.payer_id == user_id,
                    ExpenseRecord.participant_id == user_id,
                    ExpenseRecord.group_id.in_(group_ids),
                ),
                ExpenseRecord.date >= start,
                ExpenseRecord.date < end,
            )
            .order_by(ExpenseRecord.date)
        )

        try:
            rows = self.db.execute(query).all()
            group_expense_ids = [record.id for record, _ in rows if record.group_id is not None]
            owed_by_expense: Dict[str, Dict[str, Decimal]] = {}
            if group_expense_ids:
                splits = self.db.execute(
                    select(ExpenseSplitRecord).where(ExpenseSplitRecord.expense_id.in_(group_expense_ids))
                ).scalars()
                for split in splits:
                    owed_by_expense.setdefault(split.expense_id, {})[split.user_id] = Decimal(split.owed_amount)
            return [
                Expense(
                    expense_id=record.id,
                    payer_id=record.payer_id,
                    payer_email=record.payer_email,
                    payer_name=record.payer_name,
                    participant_id=record.participant_id,
                    group_id=record.group_id,
                    group_name=group_name,
                    description=record.description,
                    category=record.category,
                    amount=Decimal(record.amount),
                    participant_owed_amount=Decimal(record.participant_owed_amount),
                    currency_code=record.currency_code,
                    date=record.date,
                    member_owed_amounts=owed_by_expense.get(record.id, {}),
                )
                for record, group_name in rows
            ]
        except SQLAlchemyError as e:
            raise FetchFailureError(f"Expense store error: {e}") from e
        except (TypeError, ValueError, ArithmeticError) as e:
            raise FetchFailureError(f"Invalid expense data: {e}") from e
