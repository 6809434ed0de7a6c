import os
# Override DATABASE_URL before any app imports to avoid PostgreSQL driver requirement
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
# Provider calls never leave the process in tests; retries run without delay.
os.environ["GENERATION_BACKEND"] = "ollama"
os.environ["GENERATION_RETRY_DELAY_SECONDS"] = "0"
os.environ["GENERATION_MAX_RETRIES"] = "2"
os.environ["PROVIDER_TIMEOUT_SECONDS"] = "5"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from interview_eval.platform.database import Base, get_db
from interview_eval.main import app
from interview_eval.deps import get_embedding_provider, get_generation_provider
from interview_eval.models.history import History, HistoryStatus
from interview_eval.models.user import User
from tests.fakes import FakeEmbedder, ScriptedGenerator

SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Enable foreign key support for SQLite
@event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()

def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture(scope="function")
def db():
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    yield db
    db.close()
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def embedder():
    return FakeEmbedder()

@pytest.fixture
def generator():
    return ScriptedGenerator()

@pytest.fixture(scope="function")
def client(db, embedder, generator):
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_embedding_provider] = lambda: embedder
    app.dependency_overrides[get_generation_provider] = lambda: generator
    Base.metadata.create_all(bind=engine)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)


# ---------------------------------------------------------------------------
# Factory helpers
# ---------------------------------------------------------------------------

_counter = 0


def create_user(db, points: int = 0) -> User:
    global _counter
    _counter += 1
    user = User(email=f"user-{_counter}@test.com", name="Test User", points=points)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_history(db, user: User, **fields) -> History:
    values = {
        "question": "객체지향 프로그래밍의 특징은 무엇인가요?",
        "status": HistoryStatus.PENDING,
    }
    values.update(fields)
    history = History(user_id=user.id, **values)
    db.add(history)
    db.commit()
    db.refresh(history)
    return history
