"""
Pytest fixtures for testing
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from groupbudget.application.entry_store import EntryStore
from groupbudget.domain.category import CATEGORY_TYPES, DEFAULT_CATEGORIES
from groupbudget.domain.company import DEFAULT_COMPANIES
from groupbudget.domain.taxonomy import default_config
from groupbudget.infrastructure.db.session import Base
from groupbudget.infrastructure.db import models  # noqa: F401
from groupbudget.infrastructure.repository import SqlConfigRepository, SqlScenarioRepository


@pytest.fixture
def db_engine():
    """In-memory SQLite engine shared across threads (TestClient runs sync routes in a pool)."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine) -> Session:
    """Create database session for tests"""
    SessionLocal = sessionmaker(bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def sample_version_id():
    return "base"


@pytest.fixture
def config():
    """Default group: Group Sales (USD), Group Tech (ARS), Group Consulting (MXN)"""
    return default_config()


@pytest.fixture
def store(config, sample_version_id):
    return EntryStore(sample_version_id, config, year=2026, reporting_currency="USD")


@pytest.fixture
def seeded_db(db_session, sample_version_id):
    """Default companies, default taxonomy and one empty scenario."""
    repo = SqlConfigRepository(db_session)
    for company in DEFAULT_COMPANIES:
        repo.add_company(company)
    for category in CATEGORY_TYPES:
        for concept in DEFAULT_CATEGORIES[category]:
            repo.add_concept(category, concept)
    SqlScenarioRepository(db_session).create_scenario("Base Budget 2026", scenario_id=sample_version_id)
    db_session.commit()
    return db_session
