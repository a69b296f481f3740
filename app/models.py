from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic import Field as WireField
from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel, Relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _created_at() -> Any:
    return Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))


class ServerBase(SQLModel):
    name: str
    domain: str
    egg_id: int
    location_id: int


class ServerORM(ServerBase, table=True):
    """A Pterodactyl panel deployment that panels can be provisioned on."""

    __tablename__ = "pterodactyl_servers"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, unique=True)
    # Application API key, used for every provisioning call:
    plta_key: str = Field(nullable=False)
    # Client API key, kept for the panel front-end:
    pltc_key: Optional[str] = Field(default=None)
    created_at: datetime = _created_at()
    panels: list["PanelORM"] = Relationship(back_populates="server")


class ServerCreate(ServerBase):
    plta_key: str
    pltc_key: Optional[str] = None


class ServerRead(ServerBase):
    id: int
    created_at: datetime


class PanelBase(SQLModel):
    user_id: str
    server_id: int
    username: str
    email: str
    password: str
    login_url: str
    ram: int
    cpu: int
    disk: int
    ptero_user_id: int
    ptero_server_id: Optional[int] = None
    is_active: bool = True


class PanelORM(PanelBase, table=True):
    __tablename__ = "user_panels"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True, nullable=False)
    server_id: int = Field(foreign_key="pterodactyl_servers.id", index=True)
    ptero_server_id: Optional[int] = Field(default=None)
    is_active: bool = Field(default=True, nullable=False)
    created_at: datetime = _created_at()
    server: ServerORM = Relationship(back_populates="panels")


class PanelCreate(PanelBase):
    pass


class PanelRead(PanelBase):
    id: int
    created_at: datetime


class ProfileBase(SQLModel):
    user_id: str


class ProfileORM(ProfileBase, table=True):
    __tablename__ = "profiles"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True, unique=True, nullable=False)
    panel_creations_count: int = Field(default=0, nullable=False)
    created_at: datetime = _created_at()


class ProfileCreate(ProfileBase):
    pass


class ProfileRead(ProfileBase):
    id: int
    panel_creations_count: int
    created_at: datetime


class PanelRequest(BaseModel):
    """Body of a provisioning request, keyed the way the front-end sends it."""

    model_config = ConfigDict(populate_by_name=True)

    username: str
    email: str
    password: str
    server_id: int = WireField(alias="serverId")
    ram: int
    cpu: int
    disk: int


class ProvisionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    panel: PanelRead
    ptero_user_id: int = WireField(alias="pteroUserId")
    ptero_server_id: Optional[int] = WireField(default=None, alias="pteroServerId")
    message: str
