"""JWT access token handling.

Tokens are issued by the external auth service; this API only verifies them
and turns their claims into a ``Principal``. ``create_access_token`` exists
for service-to-service calls and tests.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from src.auth.permissions import Principal, UserRole
from src.config.settings import get_settings


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token.

    Args:
        data: Payload data ({"sub": user_id, "nickname": ..., "role": ...})
        expires_delta: Token lifetime (default from settings)

    Returns:
        Encoded JWT string
    """
    settings = get_settings()

    to_encode = data.copy()
    now = datetime.now(UTC)
    to_encode.update(
        {
            "exp": now
            + (
                expires_delta
                or timedelta(minutes=settings.auth_access_token_expire_minutes)
            ),
            "iat": now,
            "type": "access",
        }
    )

    return jwt.encode(
        to_encode,
        settings.auth_secret_key,
        algorithm=settings.auth_algorithm,
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and validate an access token.

    Validates signature, expiration and ``type == "access"``.

    Raises:
        JWTError: If token is invalid, expired, or wrong type
    """
    settings = get_settings()

    payload = jwt.decode(
        token,
        settings.auth_secret_key,
        algorithms=[settings.auth_algorithm],
    )

    if payload.get("type") != "access":
        msg = "Invalid token type: expected 'access'"
        raise JWTError(msg)

    return payload


def principal_from_payload(payload: dict[str, Any]) -> Principal:
    """Build a Principal from decoded token claims.

    Raises:
        JWTError: If the subject is missing or not an integer id
    """
    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError) as e:
        msg = "Token subject must be an integer user id"
        raise JWTError(msg) from e

    try:
        role = UserRole(str(payload.get("role", UserRole.USER.value)).lower())
    except ValueError:
        role = UserRole.USER

    return Principal(
        user_id=user_id,
        nickname=payload.get("nickname") or f"user{user_id}",
        role=role,
    )
