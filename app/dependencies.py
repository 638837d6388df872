"""
FastAPI dependencies for authentication, authorization and path checks.

Dependency chain:

  get_current_user (bearer token -> User)
      └── require_user_access (path userId must be the caller)

  valid_account_number (path accountNumber must match ^01\\d{6}$)
  get_ledger_store (session -> LedgerStore)

FastAPI resolves dependencies before parsing the request body, so a missing
token fails with 401 and a malformed path fails with 400 before the body is
looked at.
"""

import re

from fastapi import Depends, Path
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.exceptions import (
    field_violation,
    forbidden_error,
    unauthorised_error,
    validation_error,
)
from app.models.user import User
from app.security import resolve_user_id
from app.services.ledger_store import LedgerStore

ACCOUNT_NUMBER_PATTERN = re.compile(r"^01\d{6}$")
USER_ID_PATTERN = re.compile(r"^usr-[A-Za-z0-9]+$")

# auto_error=False so a missing header reaches our own 401 message
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Resolve the bearer token to an existing User.

    Raises:
        BankAPIError (unauthorised): Token missing, invalid, expired, or
            naming a user that does not exist.
    """
    if credentials is None:
        raise unauthorised_error()

    user_id = resolve_user_id(credentials.credentials)
    if user_id is None:
        raise unauthorised_error()

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None:
        raise unauthorised_error()

    return user


async def require_user_access(
    userId: str = Path(),  # noqa: N803
    user: User = Depends(get_current_user),
) -> User:
    """
    Allow a /users/{userId} request only for the caller's own id.

    Raises:
        BankAPIError (validation): userId is not "usr-<alphanumeric>".
        BankAPIError (forbidden): userId belongs to someone else.
    """
    if not USER_ID_PATTERN.match(userId):
        raise validation_error("Invalid user ID format. Expected usr-<alphanumeric>")

    if userId != user.id:
        raise forbidden_error("Access to requested user is forbidden")

    return user


async def valid_account_number(
    accountNumber: str = Path(),  # noqa: N803
) -> str:
    """Return the account number from the path after checking its format."""
    if not ACCOUNT_NUMBER_PATTERN.match(accountNumber):
        raise validation_error(
            "Invalid account number format",
            details=[
                field_violation(
                    "accountNumber",
                    '"accountNumber" must match the pattern ^01\\d{6}$',
                    "string.pattern.base",
                )
            ],
        )
    return accountNumber


async def get_ledger_store(db: AsyncSession = Depends(get_db)) -> LedgerStore:
    return LedgerStore(db)
