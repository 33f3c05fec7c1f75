"""Pytest fixtures for testing"""

import pytest
from datetime import datetime
from decimal import Decimal
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session
from fairshare_gateway.api.main import create_app
from fairshare_gateway.domain.models import Expense, User
from fairshare_gateway.infrastructure.database.models import Base
from fairshare_gateway.infrastructure.database.repositories import UserRepository
from fairshare_gateway.infrastructure.database.session import build_engine, get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = build_engine(TEST_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def users(db: Session) -> dict[str, User]:
    """Alice has a display name, Bob only an email"""
    repo = UserRepository(db)
    repo.create("alice", "alice@example.com", "Alice")
    repo.create("bob", "bob.smith@example.com")
    repo.create("carol", "carol@example.com", "Carol")
    db.commit()
    return {user_id: repo.get(user_id) for user_id in ("alice", "bob", "carol")}


@pytest.fixture
def make_expense() -> Callable[..., Expense]:
    """Factory for domain expenses with sensible defaults"""
    counter = {"n": 0}

    def _make(
        amount: str,
        date: datetime,
        category: str | None = "food",
        payer_id: str = "alice",
        participant_id: str | None = "bob",
        participant_owed_amount: str = "0",
        group_id: str | None = None,
        group_name: str | None = None,
        description: str = "Lunch",
        expense_id: str | None = None,
        member_owed_amounts: dict[str, str] | None = None,
    ) -> Expense:
        counter["n"] += 1
        if group_id and member_owed_amounts is None:
            # payer is the only member
            member_owed_amounts = {payer_id: amount}
        return Expense(
            expense_id=expense_id or f"exp_{counter['n']:03d}",
            payer_id=payer_id,
            payer_email=f"{payer_id}@example.com",
            description=description,
            amount=Decimal(amount),
            date=date,
            participant_owed_amount=Decimal(participant_owed_amount),
            category=category,
            participant_id=None if group_id else participant_id,
            group_id=group_id,
            group_name=group_name,
            member_owed_amounts={k: Decimal(v) for k, v in (member_owed_amounts or {}).items()},
        )

    return _make
