from __future__ import annotations

from fastapi import Depends, Header

from app.identity import Claims, IdentityClient, extract_bearer_token, identity_client_from_env


def get_identity_client() -> IdentityClient:
    return identity_client_from_env()


def get_current_claims(
    authorization: str | None = Header(default=None),
    identity: IdentityClient = Depends(get_identity_client),
) -> Claims:
    # The prefix is checked before the identity service is contacted.
    token = extract_bearer_token(authorization)
    return identity.verify(token)
