"""Resolution of the current owner identity for request handlers."""
from __future__ import annotations

from dataclasses import dataclass

from fastapi import HTTPException, Request, status

OWNER_HEADER = "X-Owner-Id"
OWNER_COOKIE = "nexus_owner"


@dataclass(frozen=True)
class OwnerContext:
    """The already-authenticated user on whose behalf a request runs."""

    owner_id: str


def get_owner_context(request: Request) -> OwnerContext:
    """Return the owner identity supplied by the upstream session layer."""

    owner_id = request.headers.get(OWNER_HEADER) or request.cookies.get(OWNER_COOKIE)
    if owner_id is None or not owner_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "UNAUTHENTICATED", "message": "Owner identity is required"},
        )
    return OwnerContext(owner_id=owner_id.strip())
