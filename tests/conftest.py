import re

import pytest
from fastapi.testclient import TestClient

from booking.main import app
from booking import models  # noqa: F401
from booking.core import sessions
from booking.core.database import Base, SessionLocal, engine

CSRF_META = re.compile(r'<meta name="csrf-token" content="([^"]+)">')

@pytest.fixture(scope="function")
def test_db():
    # Create tables
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def db(test_db):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture
def client(test_db):
    sessions._store = None
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client

def csrf_token(client, path="/"):
    """Render a page and pull the session's anti-forgery token out of it."""
    response = client.get(path)
    match = CSRF_META.search(response.text)
    assert match, f"no csrf token rendered on {path}"
    return match.group(1)

def post_form(client, path, data, **kwargs):
    form = dict(data)
    form["_csrf"] = csrf_token(client)
    return client.post(path, data=form, **kwargs)

def register(client, username="alice", password="secret1"):
    return post_form(client, "/users/register", {"username": username, "password": password})

def login(client, username="alice", password="secret1"):
    return post_form(client, "/users/login", {"username": username, "password": password})

def register_and_login(client, username="alice", password="secret1"):
    register(client, username, password)
    return login(client, username, password)
