"""
User service: create, read, update and delete user profiles.

Ownership is enforced one layer up (require_user_access): by the time these
functions run, the caller is the user being read or changed.
"""

from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import conflict_error, validation_error
from app.models.account import Account
from app.models.user import User
from app.services.identifiers import generate_user_id


async def _ensure_email_free(db: AsyncSession, email: str) -> None:
    result = await db.execute(select(User.id).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        raise validation_error("A user with this email already exists.")


async def create_user(db: AsyncSession, columns: dict) -> User:
    """
    Register a new user.

    Args:
        db: Database session.
        columns: User column values (see UserCreateRequest.to_columns).

    Raises:
        BankAPIError (validation): The email is already registered.
    """
    await _ensure_email_free(db, columns["email"])

    now = datetime.now(timezone.utc)
    user = User(
        id=generate_user_id(),
        created_timestamp=now,
        updated_timestamp=now,
        **columns,
    )
    db.add(user)
    await db.flush()
    return user


async def update_user(db: AsyncSession, user: User, columns: dict) -> User:
    """Apply the given column values to a user and bump updated_timestamp."""
    new_email = columns.get("email")
    if new_email is not None and new_email != user.email:
        await _ensure_email_free(db, new_email)

    for key, value in columns.items():
        setattr(user, key, value)
    user.updated_timestamp = datetime.now(timezone.utc)

    await db.flush()
    return user


async def delete_user(db: AsyncSession, user: User) -> None:
    """
    Delete a user that owns no bank accounts.

    Raises:
        BankAPIError (conflict): The user still has at least one account.
    """
    result = await db.execute(
        select(func.count()).select_from(Account).where(Account.user_id == user.id)
    )
    if result.scalar_one() > 0:
        raise conflict_error(
            "A user cannot be deleted when they are associated with a bank account"
        )

    await db.delete(user)
    await db.flush()
