import os

# Must be set before the application modules read their settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "development"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["GOOGLE_CLIENT_ID"] = "test-client-id"
os.environ["R2_ACCOUNT_ID"] = ""
os.environ["R2_ENDPOINT"] = ""
os.environ["R2_ACCESS_KEY_ID"] = ""
os.environ["R2_SECRET_ACCESS_KEY"] = ""

import pytest
from fastapi.testclient import TestClient

from ryo.core.config import settings
from ryo.db.base import Base
from ryo.db.session import SessionLocal, engine
from ryo.deps import get_blob_store, get_identity_verifier
from ryo.main import app

from _helpers import FakeBlobStore, FakeVerifier, make_user, session_token_for


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def blobs():
    return FakeBlobStore()


@pytest.fixture
def verifier():
    return FakeVerifier()


@pytest.fixture
def client(db, blobs, verifier):
    app.dependency_overrides[get_blob_store] = lambda: blobs
    app.dependency_overrides[get_identity_verifier] = lambda: verifier
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def user(db):
    return make_user(db, "ryo")


@pytest.fixture
def admin(db):
    return make_user(db, "boss", is_admin=True)


@pytest.fixture
def login(client):
    """Return a callable that puts a session cookie for the given user on the client"""
    def _login(user):
        client.cookies.set(settings.SESSION_COOKIE_NAME, session_token_for(user))
        return client
    return _login
