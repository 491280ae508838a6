"""Pytest fixtures for testing"""

import pytest
from datetime import date
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from budget_nikal.api.main import create_app
from budget_nikal.infrastructure.database.models import Base
from budget_nikal.infrastructure.database.session import get_db
from budget_nikal.services.cards import CardFields, CardService


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

USER_ID = "user_1"


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
    """Create FastAPI test client with test database, acting as USER_ID"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app, headers={"X-User-ID": USER_ID})


@pytest.fixture
def user_id() -> str:
    return USER_ID


@pytest.fixture
def make_card(db: Session):
    """Factory for stored cards: statements on the 10th, due 20 days later, 30-day cycle"""

    def _make(nickname: str = "JS Bank", total_limit="20000.00", user: str = USER_ID, **overrides):
        fields = CardFields(
            nickname=nickname,
            day_difference=overrides.pop("day_difference", 20),
            first_statement_date=overrides.pop("first_statement_date", date(2024, 1, 10)),
            billing_cycle_days=overrides.pop("billing_cycle_days", 30),
            total_limit=Decimal(total_limit) if total_limit is not None else None,
            **overrides,
        )
        card = CardService(db).create(user, fields)
        db.commit()
        return card

    return _make
