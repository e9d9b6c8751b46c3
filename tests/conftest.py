import os
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

# Set test database before any imports
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

from app.main import create_app
from app.config import get_settings
from app.chat.contracts import ChatTurnRequest
from app.chat.router import route_turn
from db.base import Base
from db.session import SessionLocal, engine
from db.repos.agents_repo import create_agent
from db.repos.users_repo import create_user

AGENT_ID = "agent-1"
USER_REF = "ref-alice"
USER_ID = "4f1c2a9e-8b7d-4c3e-9a21-6d5e4f3b2a10"
T0 = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create all tables before tests run, drop after all tests complete."""
    # Import models to ensure they are registered with Base
    import db.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_tables():
    """Clean tables between tests to ensure isolation."""
    yield
    from db.models import Agent, Email, ExternalWallet, Message, User, Wallet

    with SessionLocal() as db:
        db.query(Message).delete()
        db.query(Email).delete()
        db.query(ExternalWallet).delete()
        db.query(Wallet).delete()
        db.query(Agent).delete()
        db.query(User).delete()
        db.commit()


@pytest.fixture
def client():
    app = create_app()
    with TestClient(app) as client:
        yield client


@pytest.fixture(autouse=True)
def _configure_llm(monkeypatch, request):
    get_settings.cache_clear()
    if request.node.get_closest_marker("use_llm"):
        yield
        return
    monkeypatch.setenv("LLM_ENABLED", "false")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def agent(db):
    create_user(db, ref=USER_REF, user_id=USER_ID, email="alice@example.com")
    return create_agent(db, agent_id=AGENT_ID, name="Alice's assistant", created_by_ref=USER_REF)


@pytest.fixture()
def say(db, agent):
    """Send one turn through the router at a fixed clock."""

    def _say(text="", *, now=T0, source=None, metadata=None, room_id=None, agent_id=AGENT_ID):
        req = ChatTurnRequest(
            agent_id=agent_id,
            room_id=room_id,
            user_id="client-user",
            text=text,
            source=source,
            metadata=metadata or {},
        )
        return route_turn(req, db=db, now=now)

    return _say
