"""JWT access-token encoding and verification.

Tokens are issued by the external identity provider, which shares
JWT_SECRET with this service (HS256). The service only needs ``decode_token``
on the request path; ``create_access_token`` mirrors the provider's claim
layout for local tooling and tests:

    {"sub": <user id>, "role": "Seller" | "Buyer", "type": "access", "iat", "exp"}
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.am_common.enums import UserRole
from src.am_common.errors import InvalidCredentialsError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)


def create_access_token(
    user_id: str, role: UserRole, expires_delta: timedelta | None = None
) -> str:
    """Issue an access token with the identity provider's claim layout."""
    now = datetime.now(UTC)
    payload = {
        "sub": user_id,
        "role": role.value,
        "type": "access",
        "iat": now,
        "exp": now + (expires_delta or _ACCESS_EXPIRE),
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def decode_token(token: str) -> dict[str, str]:
    """Decode and validate an access token.

    Raises:
        InvalidCredentialsError: signature/expiry invalid, wrong token type,
            or missing ``sub`` / ``role`` claims.
    """
    try:
        payload: dict[str, str] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if payload.get("type") != "access":
        raise InvalidCredentialsError()
    if not payload.get("sub") or not payload.get("role"):
        raise InvalidCredentialsError()
    return payload
