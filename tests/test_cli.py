from __future__ import annotations

from typing import Any

import yaml

from app.db import session_scope
from app.models import PanelCreate
from app.services import panels as panel_service


def _stdout(result) -> str:
    return getattr(result, "stdout", result.output)


def _stderr(result) -> str:
    return getattr(result, "stderr", result.output)


def _parse_yaml_stdout(result) -> Any:
    return yaml.safe_load(_stdout(result))


def _create_server(runner, app, name: str = "eu-1"):
    return runner.invoke(
        app,
        [
            "create-server",
            name,
            "--domain",
            "https://panel.example.com/",
            "--plta-key",
            "ptla_secret",
            "--egg-id",
            "15",
            "--location-id",
            "2",
        ],
    )


def _seed_panel(server_id: int, user_id: str = "u-1") -> int:
    with session_scope() as session:
        panel = panel_service.create_panel(
            session,
            PanelCreate(
                user_id=user_id,
                server_id=server_id,
                username="alex",
                email="alex@example.com",
                password="pw",
                login_url="https://panel.example.com",
                ram=1024,
                cpu=100,
                disk=2048,
                ptero_user_id=4,
            ),
        )
        return panel.id


def test_cli_server_flow(cli_runner):
    runner, app = cli_runner

    result = _create_server(runner, app)
    assert result.exit_code == 0
    created = _parse_yaml_stdout(result)
    assert created["name"] == "eu-1"
    assert created["domain"] == "https://panel.example.com"
    assert "plta_key" not in created

    result = runner.invoke(app, ["list-servers"])
    assert result.exit_code == 0
    assert [s["id"] for s in _parse_yaml_stdout(result)] == [created["id"]]

    result = runner.invoke(app, ["get-server", str(created["id"])])
    assert result.exit_code == 0
    assert _parse_yaml_stdout(result)["egg_id"] == 15

    result = runner.invoke(app, ["delete-server", str(created["id"])])
    assert result.exit_code == 0

    result = runner.invoke(app, ["get-server", str(created["id"])])
    assert result.exit_code == 1
    assert "Error: Server not found" in _stderr(result)


def test_cli_duplicate_server_name(cli_runner):
    runner, app = cli_runner

    assert _create_server(runner, app).exit_code == 0
    result = _create_server(runner, app)
    assert result.exit_code == 1
    assert "already exists" in _stderr(result)


def test_cli_profile_flow(cli_runner):
    runner, app = cli_runner

    result = runner.invoke(app, ["create-profile", "u-1"])
    assert result.exit_code == 0
    assert _parse_yaml_stdout(result)["panel_creations_count"] == 0

    result = runner.invoke(app, ["get-profile", "u-1"])
    assert result.exit_code == 0
    assert _parse_yaml_stdout(result)["user_id"] == "u-1"

    result = runner.invoke(app, ["get-profile", "u-2"])
    assert result.exit_code == 1


def test_cli_panel_listing_and_deactivation(cli_runner):
    runner, app = cli_runner
    server_id = _parse_yaml_stdout(_create_server(runner, app))["id"]
    panel_id = _seed_panel(server_id)
    _seed_panel(server_id, user_id="u-2")

    result = runner.invoke(app, ["list-panels", "--user-id", "u-1"])
    assert result.exit_code == 0
    assert [p["id"] for p in _parse_yaml_stdout(result)] == [panel_id]

    result = runner.invoke(app, ["deactivate-panel", str(panel_id)])
    assert result.exit_code == 0
    assert _parse_yaml_stdout(result)["is_active"] is False

    result = runner.invoke(app, ["delete-server", str(server_id)])
    assert result.exit_code == 1
    assert "still has panels" in _stderr(result)

    result = runner.invoke(app, ["deactivate-panel", "999"])
    assert result.exit_code == 1


def test_cli_creates_tables_on_fresh_database(fresh_cli_runner):
    runner, app = fresh_cli_runner

    result = _create_server(runner, app)
    assert result.exit_code == 0, _stderr(result)
    created = _parse_yaml_stdout(result)

    result = runner.invoke(app, ["list-servers"])
    assert result.exit_code == 0
    assert [s["name"] for s in _parse_yaml_stdout(result)] == [created["name"]]
