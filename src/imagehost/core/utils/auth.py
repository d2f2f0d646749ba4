"""Caller identity taken from the API Gateway authorizer context."""

from typing import Any, NamedTuple

from imagehost.core.models.errors import UnauthorizedError
from imagehost.core.utils.constants import ROLE_ADMIN, ROLE_USER


class Identity(NamedTuple):
    user_id: str
    role: str = ROLE_USER

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def get_identity(event: dict[str, Any]) -> Identity | None:
    """Return the authenticated caller, or None for anonymous requests.

    Lambda and JWT authorizers put the subject in different places:
    ``principalId`` / ``user_id`` for Lambda authorizers, ``claims.sub``
    for Cognito and JWT authorizers.
    """
    authorizer = (event.get("requestContext") or {}).get("authorizer") or {}
    claims = authorizer.get("claims") or (authorizer.get("jwt") or {}).get("claims") or {}

    user_id = authorizer.get("user_id") or authorizer.get("principalId") or claims.get("sub")
    if not user_id:
        return None

    role = authorizer.get("role") or claims.get("custom:role") or ROLE_USER
    return Identity(user_id=str(user_id), role=str(role))


def require_identity(event: dict[str, Any]) -> Identity:
    identity = get_identity(event)
    if identity is None:
        raise UnauthorizedError()
    return identity
