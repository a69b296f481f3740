from __future__ import annotations

from dataclasses import dataclass
import logging
import os

import httpx

from app.services.errors import UnauthenticatedException

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class Claims:
    sub: str
    email: str | None = None


def extract_bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise UnauthenticatedException("Unauthorized")
    return authorization[len(BEARER_PREFIX):]


class IdentityClient:
    """Validates bearer tokens against the identity service's user endpoint."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._transport = transport

    def verify(self, token: str) -> Claims:
        headers = {"Authorization": f"{BEARER_PREFIX}{token}", "Accept": "application/json"}
        if self._api_key:
            headers["apikey"] = self._api_key
        try:
            with httpx.Client(base_url=self.base_url, transport=self._transport) as client:
                response = client.get("/auth/v1/user", headers=headers)
        except httpx.HTTPError as exc:
            logger.error("Identity service unreachable at %s: %s", self.base_url, exc)
            raise UnauthenticatedException("Unauthorized") from exc
        if not response.is_success:
            logger.error("Auth error: identity service answered status=%s", response.status_code)
            raise UnauthenticatedException("Unauthorized")
        try:
            data = response.json()
        except ValueError as exc:
            logger.error("Auth error: identity response was not JSON")
            raise UnauthenticatedException("Unauthorized") from exc
        if not isinstance(data, dict) or not (sub := data.get("id") or data.get("sub")):
            logger.error("Auth error: identity response carried no subject")
            raise UnauthenticatedException("Unauthorized")
        return Claims(sub=str(sub), email=data.get("email"))


def identity_client_from_env() -> IdentityClient:
    return IdentityClient(
        os.getenv("IDENTITY_URL", "http://localhost:54321"),
        os.getenv("IDENTITY_API_KEY"),
    )
