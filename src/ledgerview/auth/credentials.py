"""Credentials sign-in: the authorize callback for an external auth framework.

An attempt ends either authenticated (a minimal user identity is returned) or
rejected (None is returned). Rejection covers malformed input, unknown
emails and wrong passwords, none of which raise. Only backend failures
during the user lookup raise, as a DashboardError.

Session, cookie and token issuance stay with the framework.
"""

import asyncio
from typing import TYPE_CHECKING, Annotated, Any, Optional

import bcrypt
from email_validator import validate_email
from pydantic import AfterValidator, BaseModel, Field, ValidationError

from ..database.user_repo import find_user_by_email
from ..errors import DashboardError, ErrorKind, query_failure
from ..utils.logging import get_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 6


def _check_email(value: str) -> str:
    # Syntax check only; the submitted string is kept as-is for the exact-match lookup
    validate_email(value, check_deliverability=False)
    return value


class SignInCredentials(BaseModel):
    email: Annotated[str, AfterValidator(_check_email)]
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)


class UserCredential(BaseModel):
    """Stored user record. The hash never leaves this module."""
    id: str
    name: str
    email: str
    password_hash: str


class AuthenticatedUser(BaseModel):
    id: str
    name: str
    email: str


def parse_credentials(raw: Any) -> SignInCredentials:
    """
    Validate raw submitted credentials.

    Raises:
        DashboardError: VALIDATION_FAILED if the email is not a valid address,
            the password is shorter than MIN_PASSWORD_LENGTH, or the payload
            is not a mapping with both fields
    """
    try:
        return SignInCredentials.model_validate(raw)
    except ValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
        logger.debug("Credential validation failed for fields: %s", fields or ["payload"])
        raise DashboardError(
            ErrorKind.VALIDATION_FAILED,
            "Invalid credentials.",
            operation="parse_credentials",
        ) from exc


async def get_user(engine: "AsyncEngine", email: str) -> Optional[UserCredential]:
    """Get the stored credential for an exact email match, or None."""
    with query_failure("fetch_user", "Failed to fetch user."):
        row = await find_user_by_email(engine, email)
        if row is None:
            return None
        return UserCredential(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            password_hash=row["password"],
        )


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time bcrypt comparison. Inputs bcrypt refuses count as a mismatch."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError as exc:
        logger.warning("Password check rejected input: %s", exc)
        return False


async def authorize(engine: "AsyncEngine", credentials: Any) -> Optional[AuthenticatedUser]:
    """
    Verify one sign-in attempt.

    Args:
        engine: Async engine
        credentials: Raw, untyped payload submitted by the sign-in form

    Returns:
        AuthenticatedUser (no password hash) on success, None when the
        attempt is rejected

    Raises:
        DashboardError: QUERY_FAILED if the user lookup itself fails
    """
    try:
        parsed = parse_credentials(credentials)
    except DashboardError:
        logger.info("Invalid credentials: malformed submission")
        return None

    user = await get_user(engine, parsed.email)
    if user is None:
        logger.info("Invalid credentials: no such user")
        return None

    matched = await asyncio.to_thread(verify_password, parsed.password, user.password_hash)
    if not matched:
        logger.info("Invalid credentials: password mismatch for user %s", user.id)
        return None

    return AuthenticatedUser(id=user.id, name=user.name, email=user.email)


class CredentialsProvider:
    """
    Authorize callback bound to an engine.

    Register an instance with the auth framework; it is called as
    ``await provider(credentials)`` once per sign-in attempt.
    """

    def __init__(self, engine: "AsyncEngine"):
        self.engine = engine

    async def __call__(self, credentials: Any) -> Optional[AuthenticatedUser]:
        return await authorize(self.engine, credentials)
