from __future__ import annotations

import logging

import typer
import yaml
from fastapi.encoders import jsonable_encoder

from app.db import init_db, session_scope
from app.logging_config import configure_logging
from app.models import ProfileCreate, ServerCreate
from app.services import panels as panel_service
from app.services import profiles as profile_service
from app.services import servers as server_service
from app.services.errors import ProvisionerException

configure_logging()
logger = logging.getLogger(__name__)
app = typer.Typer(help="Panel provisioner admin CLI", pretty_exceptions_show_locals=False)


@app.callback()
def main() -> None:
    # Every command needs the tables, including on a fresh database.
    init_db()


def _exit_for_domain_error(exc: ProvisionerException) -> None:
    logger.warning("CLI command failed with domain error: %s", exc)
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=1)


def _echo_yaml_entity(entity: object) -> None:
    encoded = jsonable_encoder(entity)
    typer.echo(yaml.safe_dump(encoded, sort_keys=False), nl=False)


@app.command("create-server")
def create_server(
    name: str,
    domain: str = typer.Option(..., "--domain", help="Panel base URL, e.g. 'https://panel.example.com'."),
    plta_key: str = typer.Option(..., "--plta-key", help="Application API key used for provisioning."),
    pltc_key: str | None = typer.Option(None, "--pltc-key", help="Optional client API key."),
    egg_id: int = typer.Option(..., "--egg-id", help="Egg used for newly created game servers."),
    location_id: int = typer.Option(..., "--location-id", help="Location new game servers are deployed to."),
) -> None:
    with session_scope() as session:
        try:
            server = server_service.create_server(
                session,
                ServerCreate(
                    name=name,
                    domain=domain,
                    plta_key=plta_key,
                    pltc_key=pltc_key,
                    egg_id=egg_id,
                    location_id=location_id,
                ),
            )
        except ProvisionerException as e:
            _exit_for_domain_error(e)
        _echo_yaml_entity(server)


@app.command("list-servers")
def list_servers() -> None:
    with session_scope() as session:
        _echo_yaml_entity(server_service.list_servers(session))


@app.command("get-server")
def get_server(server_id: int) -> None:
    with session_scope() as session:
        try:
            server = server_service.get_server(session, server_id=server_id)
        except ProvisionerException as e:
            _exit_for_domain_error(e)
        _echo_yaml_entity(server)


@app.command("delete-server")
def delete_server(server_id: int) -> None:
    with session_scope() as session:
        try:
            server = server_service.delete_server(session, server_id=server_id)
        except ProvisionerException as e:
            _exit_for_domain_error(e)
        _echo_yaml_entity(server)


@app.command("create-profile")
def create_profile(user_id: str) -> None:
    with session_scope() as session:
        try:
            profile = profile_service.create_profile(session, ProfileCreate(user_id=user_id))
        except ProvisionerException as e:
            _exit_for_domain_error(e)
        _echo_yaml_entity(profile)


@app.command("get-profile")
def get_profile(user_id: str) -> None:
    with session_scope() as session:
        try:
            profile = profile_service.get_profile(session, user_id=user_id)
        except ProvisionerException as e:
            _exit_for_domain_error(e)
        _echo_yaml_entity(profile)


@app.command("list-panels")
def list_panels(user_id: str | None = typer.Option(None, "--user-id", help="Only show this user's panels.")) -> None:
    with session_scope() as session:
        _echo_yaml_entity(panel_service.list_panels(session, user_id=user_id))


@app.command("deactivate-panel")
def deactivate_panel(panel_id: int) -> None:
    with session_scope() as session:
        try:
            panel = panel_service.deactivate_panel(session, panel_id=panel_id)
        except ProvisionerException as e:
            _exit_for_domain_error(e)
        _echo_yaml_entity(panel)


if __name__ == "__main__":
    app()
