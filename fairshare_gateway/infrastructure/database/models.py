"""SQLAlchemy ORM models for users, friendships, groups and expenses"""

import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class UserRecord(Base):
    """Registered user (users/{id})"""

    __tablename__ = "users"

    id = Column(Text, primary_key=True)
    email = Column(Text, nullable=False, unique=True)
    display_name = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class FriendshipRecord(Base):
    """One side of a friendship (users/{owner_id}/friends/{friend_user_id})"""

    __tablename__ = "friendships"
    __table_args__ = (UniqueConstraint("owner_id", "friend_user_id", name="uq_friendship_pair"),)

    id = Column(Text, primary_key=True, default=_new_id)
    owner_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    friend_user_id = Column(Text, nullable=False)
    friend_email = Column(Text, nullable=False)
    friend_name = Column(Text, nullable=True)
    requested_by = Column(Text, nullable=False)
    status = Column(String(16), nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class GroupRecord(Base):
    """Expense-sharing group"""

    __tablename__ = "expense_groups"

    id = Column(Text, primary_key=True, default=_new_id)
    name = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    members = relationship("GroupMemberRecord", back_populates="group", cascade="all, delete-orphan")


class GroupMemberRecord(Base):
    __tablename__ = "group_members"
    __table_args__ = (UniqueConstraint("group_id", "user_id", name="uq_group_member"),)

    id = Column(Text, primary_key=True, default=_new_id)
    group_id = Column(Text, ForeignKey("expense_groups.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Text, nullable=False, index=True)

    group = relationship("GroupRecord", back_populates="members")


class ExpenseRecord(Base):
    """Group expense (group_id set) or direct expense between two users"""

    __tablename__ = "expenses"

    id = Column(Text, primary_key=True, default=_new_id)
    group_id = Column(Text, ForeignKey("expense_groups.id", ondelete="CASCADE"), nullable=True, index=True)
    payer_id = Column(Text, nullable=False, index=True)
    payer_email = Column(Text, nullable=False)
    payer_name = Column(Text, nullable=True)
    participant_id = Column(Text, nullable=True, index=True)
    description = Column(Text, nullable=False)
    category = Column(Text, nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    participant_owed_amount = Column(Numeric(12, 2), nullable=False, default=0)
    currency_code = Column(String(3), nullable=False, default="USD")
    date = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    splits = relationship("ExpenseSplitRecord", cascade="all, delete-orphan")


class ExpenseSplitRecord(Base):
    """Amount one member owes for a group expense"""

    __tablename__ = "expense_splits"
    __table_args__ = (UniqueConstraint("expense_id", "user_id", name="uq_expense_split_member"),)

    id = Column(Text, primary_key=True, default=_new_id)
    expense_id = Column(Text, ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Text, nullable=False, index=True)
    owed_amount = Column(Numeric(12, 2), nullable=False)
