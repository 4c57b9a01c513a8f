"""FastAPI dependency: get_current_principal.

The identity provider is trusted: the principal is built straight from the
token claims, with no user-table lookup.

Usage in any protected router:
    from src.am_gateway.auth.dependencies import Principal, get_current_principal

    @router.get("/protected")
    async def protected(principal: Principal = Depends(get_current_principal)):
        ...
"""

from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from src.am_common.enums import UserRole
from src.am_common.errors import InvalidCredentialsError
from src.am_gateway.auth.jwt_handler import decode_token

# tokenUrl points at the identity provider; used only by the Swagger "Authorize" button
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: UserRole

    @property
    def is_buyer(self) -> bool:
        return self.role == UserRole.BUYER

    @property
    def is_seller(self) -> bool:
        return self.role == UserRole.SELLER


def principal_from_token(token: str) -> Principal:
    """Build a Principal from a raw bearer token.

    Raises InvalidCredentialsError for bad tokens or an unknown role.
    """
    payload = decode_token(token)
    try:
        role = UserRole(payload["role"])
    except ValueError:
        raise InvalidCredentialsError() from None
    return Principal(user_id=str(payload["sub"]), role=role)


async def get_current_principal(token: str = Depends(oauth2_scheme)) -> Principal:
    """Resolve the authenticated caller. Raises HTTP 401 on any token problem."""
    try:
        return principal_from_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None
