"""
Bearer JWT verification and authentication utilities.

This module verifies the signed access tokens presented to the API,
extracts the principal and its roles, and provides FastAPI dependencies
for authentication. Credential storage and token issuance for real users
live outside this service; ``create_access_token`` exists for development
tooling and tests.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from app.core.config import get_settings
from app.core.errors import UnauthorizedError

logger = logging.getLogger(__name__)

# =============================================================================
# Role Constants
# =============================================================================

CARD_OWNER = "CARD_OWNER"  # May hold and manage cash cards

INVALID_OR_EXPIRED_TOKEN_MSG = "Invalid or expired token"

# Authorization header is optional at the scheme level so that a missing
# header surfaces as our own 401 rather than FastAPI's 403.
_optional_security = HTTPBearer(auto_error=False)


class AuthenticatedUser(BaseModel):
    """Authenticated principal."""

    user_id: str
    email: str | None = None
    name: str | None = None
    roles: list[str] = []

    @property
    def is_card_owner(self) -> bool:
        """Check if the principal may use the cash card collection."""
        return CARD_OWNER in self.roles

    def has_role(self, role: str) -> bool:
        """Check if user has a specific role."""
        return role in self.roles


def create_access_token(
    subject: str,
    roles: list[str] | None = None,
    expires_delta: timedelta | None = None,
    **claims: Any,
) -> str:
    """Sign an access token for ``subject`` with the configured key."""
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.auth.access_token_expire_minutes)

    to_encode: dict[str, Any] = {
        "sub": subject,
        settings.auth.roles_claim: list(roles) if roles is not None else [CARD_OWNER],
        "iat": datetime.now(UTC),
        "exp": datetime.now(UTC) + expires_delta,
    }
    if settings.auth.audience:
        to_encode["aud"] = settings.auth.audience
    if settings.auth.issuer:
        to_encode["iss"] = settings.auth.issuer
    to_encode.update(claims)

    return jwt.encode(
        to_encode,
        settings.auth.secret_key.get_secret_value(),
        algorithm=settings.auth.signing_algorithm,
    )


def verify_token(token: str) -> dict[str, Any]:
    """Verify signature, expiry and (when configured) audience/issuer."""
    settings = get_settings()

    options = {"verify_aud": settings.auth.audience is not None}
    try:
        payload = jwt.decode(
            token,
            settings.auth.secret_key.get_secret_value(),
            algorithms=settings.auth.algorithms_list,
            audience=settings.auth.audience,
            issuer=settings.auth.issuer,
            options=options,
        )
        logger.debug(f"Token verified successfully for subject: {payload.get('sub')}")
        return payload

    except jwt.ExpiredSignatureError:
        logger.warning("Token has expired")
        raise UnauthorizedError(INVALID_OR_EXPIRED_TOKEN_MSG) from None

    except jwt.JWTClaimsError as e:
        logger.warning(f"Invalid token claims: {e}")
        raise UnauthorizedError(INVALID_OR_EXPIRED_TOKEN_MSG) from None

    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        raise UnauthorizedError(INVALID_OR_EXPIRED_TOKEN_MSG) from None


def _create_bypass_user() -> AuthenticatedUser:
    """
    Create a fixed principal for local development when JWT validation is bypassed.

    This is ONLY used when SECURITY_SKIP_JWT_VALIDATION=True and APP_ENV=local.
    """
    return AuthenticatedUser(
        user_id="local-dev-user",
        email="local-dev@example.com",
        name="Local Development User",
        roles=[CARD_OWNER],
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_optional_security),
) -> AuthenticatedUser:
    """Extract and verify the bearer token, returning the principal."""
    settings = get_settings()

    # Validation is enforced in config.py to prevent non-local use
    if settings.security.skip_jwt_validation is True:
        logger.info("JWT validation bypassed - returning local development user")
        return _create_bypass_user()

    if credentials is None:
        logger.warning("Missing Authorization header")
        raise UnauthorizedError("Missing authorization header")

    payload = verify_token(credentials.credentials)

    return AuthenticatedUser(
        user_id=get_user_sub(payload),
        email=payload.get("email"),
        name=payload.get("name"),
        roles=get_user_roles(payload),
    )


def get_user_sub(payload: dict[str, Any]) -> str:
    sub = payload.get("sub")
    if not sub:
        logger.error("JWT payload missing 'sub' claim")
        raise UnauthorizedError("Invalid token - missing user identifier")
    return sub


def get_user_roles(payload: dict[str, Any]) -> list[str]:
    settings = get_settings()
    roles = payload.get(settings.auth.roles_claim, [])

    if not isinstance(roles, list):
        logger.warning(f"Roles claim is not a list: {type(roles)}")
        return []

    return roles

