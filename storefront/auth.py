"""
Authentication and authorization for incoming requests.

The access policy resolves a request's token (Bearer header first, then the
``token`` cookie), verifies it and checks the role claim against the set of
roles a route allows. ``RequireRoles`` wraps the policy as a FastAPI dependency.
"""
from dataclasses import dataclass
from typing import Iterable, Optional
import logging
from fastapi import Request

from . import schemas
from .config import TOKEN_COOKIE_NAME
from .exceptions import AccessDenied, ClaimsMissing, DenyReason, TokenExpired, TokenInvalid
from .roles import Role
from .tokens import parse_token

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of evaluating a request against a route's allowed roles."""
    allowed: bool
    reason: Optional[DenyReason] = None
    user_id: Optional[int] = None
    role: Optional[Role] = None

    @classmethod
    def deny(cls, reason: DenyReason, user_id: Optional[int] = None) -> "AccessDecision":
        return cls(allowed=False, reason=reason, user_id=user_id)


def extract_token(authorization: Optional[str], cookie: Optional[str]) -> Optional[str]:
    """
    Pick the token a request presents.

    Args:
        authorization: Raw Authorization header value, if any
        cookie: Value of the token cookie, if any

    Returns:
        The Bearer token when present, otherwise the cookie value, otherwise None
    """
    if authorization and authorization.startswith(BEARER_PREFIX):
        token = authorization[len(BEARER_PREFIX):].strip()
        if token:
            return token
    if cookie:
        return cookie
    return None


def evaluate_access(token: Optional[str], allowed_roles: Iterable[Role]) -> AccessDecision:
    """
    Run the access policy for one request.

    Args:
        token: Token extracted from the request, or None
        allowed_roles: Roles the route accepts

    Returns:
        Allowed decision carrying the user id and role, or a Denied decision
        carrying the reason
    """
    if not token:
        return AccessDecision.deny(DenyReason.UNAUTHENTICATED)

    try:
        claims = parse_token(token)
    except TokenExpired:
        return AccessDecision.deny(DenyReason.TOKEN_EXPIRED)
    except TokenInvalid:
        return AccessDecision.deny(DenyReason.TOKEN_INVALID)
    except ClaimsMissing:
        return AccessDecision.deny(DenyReason.MALFORMED_CLAIMS)

    try:
        role = Role.parse(claims.role)
    except ValueError:
        return AccessDecision.deny(DenyReason.MALFORMED_CLAIMS, user_id=claims.user_id)

    if role not in frozenset(allowed_roles):
        return AccessDecision.deny(DenyReason.ROLE_FORBIDDEN, user_id=claims.user_id)

    return AccessDecision(allowed=True, user_id=claims.user_id, role=role)


class RequireRoles:
    """
    FastAPI dependency that admits only tokens whose role is in ``roles``.

    Usage:
        current_user: schemas.CurrentUser = Depends(RequireRoles(Role.ADMIN))

    Raises:
        AccessDenied: 401 for missing/invalid/expired tokens, 403 for a forbidden role
    """

    def __init__(self, *roles: Role):
        self.roles = tuple(Role.parse(role) for role in roles)

    def __call__(self, request: Request) -> schemas.CurrentUser:
        token = extract_token(
            request.headers.get("Authorization"),
            request.cookies.get(TOKEN_COOKIE_NAME),
        )
        decision = evaluate_access(token, self.roles)
        if not decision.allowed:
            logger.warning(
                f"Access denied on {request.method} {request.url.path}: "
                f"{decision.reason.value} (user_id={decision.user_id})"
            )
            raise AccessDenied(decision.reason)
        return schemas.CurrentUser(id=decision.user_id, role=decision.role)
