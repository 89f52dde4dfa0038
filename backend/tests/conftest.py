"""Shared test fixtures for all test modules."""

import contextlib
import uuid
from decimal import Decimal

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import vocilia.models  # noqa: F401  registers every table on Base.metadata
from vocilia.core import database as db_module
from vocilia.core.auth import Role, create_access_token
from vocilia.core.database import Base, get_db
from vocilia.schemas.reward_calculation import RewardCalculationCreate
from vocilia.services.reward_calculator import RewardCalculatorService

# Create an in-memory SQLite engine with StaticPool so all connections
# share the same database state and there are no file-locking issues.
_test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
_TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_test_engine)

BUSINESS_ID = uuid.UUID("00000000-0000-0000-0000-00000000b001")
OTHER_BUSINESS_ID = uuid.UUID("00000000-0000-0000-0000-00000000b002")
STORE_ID = uuid.UUID("00000000-0000-0000-0000-000000005001")


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test and truncate all data after.

    Patches the module-level engine and SessionLocal so all application code
    uses the in-memory test database.
    """
    original_engine = db_module.engine
    original_session = db_module.SessionLocal
    db_module.engine = _test_engine
    db_module.SessionLocal = _TestSessionLocal

    Base.metadata.create_all(bind=_test_engine)

    yield
    with _test_engine.connect() as conn:
        conn.execute(text("PRAGMA foreign_keys = OFF"))
        for table in reversed(Base.metadata.sorted_tables):
            with contextlib.suppress(OperationalError):
                conn.execute(table.delete())
        conn.execute(text("PRAGMA foreign_keys = ON"))
        conn.commit()

    db_module.engine = original_engine
    db_module.SessionLocal = original_session


@pytest.fixture
def db_session():
    """Create a database session for direct repository testing."""
    gen = get_db()
    db = next(gen)
    try:
        yield db
    finally:
        for _ in gen:
            pass


@pytest.fixture
def business_id():
    return BUSINESS_ID


@pytest.fixture
def other_business_id():
    return OTHER_BUSINESS_ID


@pytest.fixture
def store_id():
    return STORE_ID


@pytest.fixture
def admin_headers():
    token = create_access_token("admin@vocilia.se", Role.ADMIN)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def business_headers():
    token = create_access_token("owner@store.se", Role.BUSINESS, business_id=BUSINESS_ID)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_reward(db_session):
    """Factory creating a reward; verified by the business unless told otherwise."""

    def _make(
        customer_phone: str = "0701234567",
        transaction_amount_sek: str = "100.00",
        rating: int = 4,
        has_detailed_feedback: bool = False,
        sentiment_score: str = "0",
        business_id: uuid.UUID = BUSINESS_ID,
        store_id: uuid.UUID = STORE_ID,
        verified: bool = True,
    ):
        service = RewardCalculatorService(db_session)
        reward = service.create_reward_for_feedback(
            RewardCalculationCreate(
                feedback_id=uuid.uuid4(),
                store_id=store_id,
                business_id=business_id,
                customer_phone=customer_phone,
                transaction_amount_sek=Decimal(transaction_amount_sek),
                rating=rating,
                has_detailed_feedback=has_detailed_feedback,
                sentiment_score=Decimal(sentiment_score),
            )
        )
        if verified:
            service.verify_rewards(business_id, [reward.id])
            db_session.refresh(reward)
        return reward

    return _make
