"""
JWT issuance and validation.

Tokens carry the user id (``sub``) and role, signed with the configured key
and algorithm. The algorithm is fixed configuration; tokens whose header
names any other algorithm are rejected before the signature is checked.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel

from .config import SECRET_KEY, ALGORITHM, ISSUER_NAME, ACCESS_TOKEN_EXPIRE_MINUTES
from .exceptions import ClaimsMissing, TokenExpired, TokenInvalid
from .roles import Role


class TokenClaims(BaseModel):
    """Identity facts recovered from a verified token."""
    user_id: int
    role: str
    issuer: str
    issued_at: datetime
    expires_at: datetime


def issue_token(user_id: int, role: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed JWT access token.

    Args:
        user_id: ID of the authenticated user
        role: The user's role
        expires_delta: Optional custom lifetime, defaults to ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        Encoded JWT token string
    """
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "iss": ISSUER_NAME,
        "iat": now,
        "exp": now + expires_delta,
        "sub": str(user_id),
        "role": Role.parse(role).value,
    }
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def parse_token(token: str) -> TokenClaims:
    """
    Verify a token and return its claims.

    Args:
        token: Encoded JWT string

    Returns:
        The verified claims

    Raises:
        TokenExpired: the token is past its exp claim
        TokenInvalid: bad signature, malformed token, foreign algorithm or issuer
        ClaimsMissing: sub or role claim absent, or role is not a string
    """
    try:
        header = jwt.get_unverified_header(token)
    except JWTError as e:
        raise TokenInvalid(f"Malformed token: {e}") from e
    if header.get("alg") != ALGORITHM:
        raise TokenInvalid(f"Unexpected signing algorithm: {header.get('alg')}")

    try:
        payload = jwt.decode(
            token,
            SECRET_KEY,
            algorithms=[ALGORITHM],
            issuer=ISSUER_NAME,
            options={"require_exp": True, "require_iat": True, "require_iss": True},
        )
    except ExpiredSignatureError as e:
        raise TokenExpired("Token has expired") from e
    except JWTError as e:
        raise TokenInvalid(f"Token verification failed: {e}") from e

    user_id_str = payload.get("sub")
    role = payload.get("role")
    if user_id_str is None or role is None:
        raise ClaimsMissing("Token is missing the sub or role claim")
    if not isinstance(role, str):
        raise ClaimsMissing("Token role claim is not a string")

    try:
        user_id = int(user_id_str)
    except (TypeError, ValueError) as e:
        raise TokenInvalid("Token subject is not a user id") from e

    return TokenClaims(
        user_id=user_id,
        role=role,
        issuer=payload["iss"],
        issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )
