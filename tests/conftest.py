from __future__ import annotations

import importlib
import os
import sys
from pathlib import Path

import httpx
import pytest
import respx
from sqlalchemy import create_engine, StaticPool
from sqlmodel import Session
from starlette.testclient import TestClient
from typer.testing import CliRunner

# The app creates its tables on startup; keep that off the working directory.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from app.api.auth import get_identity_client
from app.db import get_session, init_db
from app.identity import IdentityClient
from app.main import app
from app.models import ServerCreate
from app.services import servers as server_service

IDENTITY_URL = "https://identity.test"
PANEL_URL = "https://panel.test"
VALID_TOKEN = "valid-token"
CALLER_ID = "3f1c2a9e-user"


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite:///:memory:",
        echo=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture
def panel_server(db_session):
    return server_service.create_server(
        db_session,
        ServerCreate(
            name="eu-1",
            domain=f"{PANEL_URL}/",
            plta_key="ptla_secret",
            pltc_key="ptlc_secret",
            egg_id=15,
            location_id=2,
        ),
    )


def _identity_response(request: httpx.Request) -> httpx.Response:
    if request.headers.get("Authorization") == f"Bearer {VALID_TOKEN}":
        return httpx.Response(200, json={"id": CALLER_ID, "email": "caller@example.com"})
    return httpx.Response(401, json={"msg": "invalid JWT"})


@pytest.fixture
def http_mock():
    with respx.mock(assert_all_called=False) as mock:
        mock.get(f"{IDENTITY_URL}/auth/v1/user", name="identity").mock(side_effect=_identity_response)
        yield mock


@pytest.fixture
def client(db_session, http_mock):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_session] = override_get_db
    app.dependency_overrides[get_identity_client] = lambda: IdentityClient(IDENTITY_URL, "anon-key")

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture()
def cli_runner(tmp_path, monkeypatch):
    project_root = Path(__file__).resolve().parents[1]
    sys.path.append(str(project_root))
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")

    import app.db as db

    importlib.reload(db)
    init_db(db.engine)

    import app.cli as cli

    importlib.reload(cli)

    return CliRunner(), cli.app


@pytest.fixture()
def fresh_cli_runner(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'fresh.db'}")

    import app.db as db

    importlib.reload(db)

    import app.cli as cli

    importlib.reload(cli)

    return CliRunner(), cli.app
