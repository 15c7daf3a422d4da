"""
Shared fixtures: an in-memory SQLite database per test and a FastAPI
TestClient whose `get_db` dependency points at it.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import get_db, init_db
from app.main import app
from app.services.modeling.scenario_store import ScenarioStore


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db) -> ScenarioStore:
    return ScenarioStore(db)


@pytest.fixture
def client(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    # No context manager: the lifespan (logging, table creation, seeding) is not needed here
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def simple_fields():
    """Inputs with no repeat purchases: 200 customers, $20k revenue per month."""
    return {
        "monthly_budget": 10000,
        "target_cac": 50,
        "expected_cvr": 0.025,
        "avg_order_value": 100,
        "cogs_percent": 0.40,
        "return_rate": 0,
        "avg_orders_per_customer": 1.0,
        "horizon_months": 3,
    }
