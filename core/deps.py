# core/deps.py
"""
FastAPI dependencies for the caller's identity and the shared workspace.
"""
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from core.security import decode_token
from sync.workspace import AssetWorkspace

# Bearer token extraction from the Authorization header
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/token", auto_error=False)

ADMIN_ROLE = "admin"
EMPLOYEE_ROLE = "employee"


class AuthenticationError(HTTPException):
    """Raised when authentication fails."""
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(HTTPException):
    """Raised when user lacks required permissions."""
    def __init__(self, detail: str = "Not enough permissions"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
        )


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: str

    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


async def get_current_principal(
    token: Annotated[str | None, Depends(oauth2_scheme)],
) -> Principal:
    """
    Dependency to get the caller from the identity provider's token.

    Raises:
        AuthenticationError: If token is missing, invalid, or has no subject
    """
    if token is None:
        raise AuthenticationError("Not authenticated")

    payload = decode_token(token)
    if payload is None:
        raise AuthenticationError("Invalid or expired token")

    # Check token type
    if payload.get("type") != "access":
        raise AuthenticationError("Invalid token type")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token payload")

    return Principal(user_id=str(user_id), role=str(payload.get("role") or EMPLOYEE_ROLE))


async def require_admin(
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> Principal:
    """Dependency that requires the admin role."""
    if not principal.is_admin():
        raise AuthorizationError("Admin access required")
    return principal


def get_workspace(request: Request) -> AssetWorkspace:
    """The workspace built at startup."""
    return request.app.state.workspace


# Type aliases for cleaner endpoint signatures
CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
AdminPrincipal = Annotated[Principal, Depends(require_admin)]
Workspace = Annotated[AssetWorkspace, Depends(get_workspace)]
