"""FastAPI dependencies for authentication.

Provides:
- Principal extraction from the Bearer token
- Write-only and admin-only guards raising domain errors
"""

from typing import Annotated

from fastapi import Depends, Request
from jose import JWTError

from src.auth.permissions import Principal
from src.auth.security import decode_access_token, principal_from_payload
from src.core.context import set_user_id
from src.core.errors import AuthenticationRequiredError, PermissionDeniedError


def get_token_from_header(request: Request) -> str | None:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    expected_parts = 2
    parts = auth_header.split()
    if len(parts) != expected_parts or parts[0].lower() != "bearer":
        return None

    return parts[1]


async def get_optional_principal(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> Principal | None:
    """Get the caller if a valid token is present, None otherwise.

    Reads work anonymously, so an invalid token degrades to anonymous.
    """
    if not token:
        return None

    try:
        principal = principal_from_payload(decode_access_token(token))
    except JWTError:
        return None

    set_user_id(principal.user_id)
    return principal


async def get_current_principal(
    principal: Annotated[Principal | None, Depends(get_optional_principal)],
) -> Principal:
    """Require an authenticated caller.

    Raises:
        AuthenticationRequiredError: If the token is missing or invalid
    """
    if principal is None:
        raise AuthenticationRequiredError
    return principal


async def get_admin_principal(
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> Principal:
    """Require an admin caller.

    Raises:
        PermissionDeniedError: If the caller is not an admin
    """
    if not principal.is_admin:
        raise PermissionDeniedError("Admin role required")
    return principal


OptionalUser = Annotated[Principal | None, Depends(get_optional_principal)]
CurrentUser = Annotated[Principal, Depends(get_current_principal)]
AdminUser = Annotated[Principal, Depends(get_admin_principal)]
