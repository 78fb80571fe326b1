"""
tests/conftest.py -- Shared fixtures for the user account service tests.

Every test gets a fresh app built with TestingConfig: an in-memory SQLite
database (StaticPool, so all sessions see the same schema) and fixed test
secrets. The test client runs with use_cookies=False so each request sends
exactly the tokens a test passes, either as headers or in the body.
"""
from __future__ import annotations

import os

os.environ.setdefault("APP_ENV", "test")

import pytest

from api import create_app
from models import storage


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        yield app
    storage.drop_all()
    storage.close()


@pytest.fixture
def client(app):
    return app.test_client(use_cookies=False)


@pytest.fixture
def session_manager(app):
    return app.extensions["session_manager"]


@pytest.fixture
def issuer(app):
    return app.extensions["token_issuer"]


# ---------------------------------------------------------------------------
# HTTP helpers
# ---------------------------------------------------------------------------

USER_URL = "/api/v1/user"


def register(client, username="alice", email="a@x.com", password="Secret1"):
    return client.post(f"{USER_URL}/register", json={"username": username, "email": email, "password": password})


def login(client, identifier="alice", password="Secret1"):
    return client.post(f"{USER_URL}/login", json={"identifier": identifier, "password": password})


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def logged_in(client):
    """Register and log in alice; yield the login payload's data."""
    assert register(client).status_code == 201
    resp = login(client)
    assert resp.status_code == 200
    return resp.get_json()["data"]
