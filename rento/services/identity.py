# rento/services/identity.py
"""
Identity collaborator.

Authentication happens upstream; the gateway forwards the signed-in user as
the X-User-Id header. This module only turns that header into an Identity
and offers the guards the workflow needs.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Header

from rento.exceptions import AuthenticationRequiredError, PermissionDeniedError

USER_HEADER = "X-User-Id"


@dataclass(frozen=True)
class Identity:
    user_id: str


def current_requester(x_user_id: Optional[str] = Header(default=None, alias=USER_HEADER)) -> Optional[Identity]:
    """FastAPI dependency: the caller's identity, or None when anonymous."""
    if x_user_id is None or not x_user_id.strip():
        return None
    return Identity(user_id=x_user_id.strip())


def require_identity(identity: Optional[Identity]) -> Identity:
    if identity is None:
        raise AuthenticationRequiredError()
    return identity


def require_host(vehicle, identity: Optional[Identity]) -> Identity:
    """Only the vehicle's owner may edit it or decide on its bookings."""
    identity = require_identity(identity)
    if identity.user_id != vehicle.host_id:
        raise PermissionDeniedError(
            f"Only the host of vehicle {vehicle.id} can do this",
            {"vehicle_id": vehicle.id},
        )
    return identity
