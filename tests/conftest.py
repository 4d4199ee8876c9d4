import os

# settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "tyredesk-test-secret-0123456789abcdef")
os.environ.setdefault("JWT_AUDIENCE", "authenticated")
os.environ.setdefault("APP_ENV", "test")

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tyredesk import models  # noqa: F401  (registers tables on Base)
from tyredesk.core.errors import ExtractionError
from tyredesk.core.rate_limit import limiter
from tyredesk.core.settings import settings
from tyredesk.db import Base, enable_sqlite_savepoints, get_db
from tyredesk.ingestion.extraction_client import ExtractionClient, ExtractionResult, get_extraction_client
from tyredesk.main import app


# --- DB: one in-memory SQLite per test ---
@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(eng)
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


# --- Extraction service stand-in ---
class FakeExtractionClient(ExtractionClient):
    """Returns canned rows instead of calling the service."""

    def __init__(self, rows=None, error=None):
        super().__init__(url="http://extraction.test")
        self.rows = rows if rows is not None else []
        self.error = error
        self.calls = []

    def extract(self, file_bytes, supplier_id, file_name, content_type=None):
        self.calls.append(
            {"bytes": file_bytes, "supplier_id": supplier_id, "file_name": file_name, "content_type": content_type}
        )
        if self.error is not None:
            raise self.error
        if not self.rows:
            raise ExtractionError("No tyre prices were found in the document.")
        return ExtractionResult(rows=list(self.rows), message="ok", total=len(self.rows))


@pytest.fixture
def extraction():
    return FakeExtractionClient()


# --- Auth ---
def make_token(user_id: str, email: str = None, **extra) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "email": email or f"{user_id}@example.com",
        "aud": settings.JWT_AUDIENCE,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(hours=1)).timestamp()),
    }
    payload.update(extra)
    return jwt.encode(payload, settings.JWT_SECRET, algorithm="HS256")


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {make_token('user-a')}"}


@pytest.fixture
def other_auth_headers():
    return {"Authorization": f"Bearer {make_token('user-b')}"}


# --- App ---
@pytest.fixture
def client(db, extraction):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_extraction_client] = lambda: extraction
    limiter.enabled = False
    try:
        yield TestClient(app)
    finally:
        limiter.enabled = True
        app.dependency_overrides.clear()


@pytest.fixture
def headers_for():
    def _headers(user_id: str, **claims) -> dict:
        return {"Authorization": f"Bearer {make_token(user_id, **claims)}"}

    return _headers
