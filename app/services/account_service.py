"""
Account service: business logic for bank account operations.

This module handles:
  - Account creation (with unique account number generation)
  - Account retrieval (single or list, scoped to the owner)
  - Renaming and deletion

Ownership enforcement:
  Single-account functions go through transaction_service.get_owned_account,
  the same guard that protects transaction posting. There is no way to read
  or change another user's account through this service.

Balances are never written here. Only the ledger store changes them.
"""

from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import conflict_error
from app.models.account import Account
from app.models.transaction import Transaction
from app.services.identifiers import generate_account_number
from app.services.ledger_store import LedgerStore
from app.services.transaction_service import get_owned_account


async def create_account(
    db: AsyncSession,
    user_id: str,
    name: str,
    account_type: str = "personal",
) -> Account:
    """
    Create a new GBP account with a zero balance.

    Returns:
        The newly created Account instance.
    """
    # Six random digits can collide; retry a few times
    for _ in range(10):
        account_number = generate_account_number()
        existing = await db.execute(
            select(Account.id).where(Account.account_number == account_number)
        )
        if existing.scalar_one_or_none() is None:
            break
    else:
        raise RuntimeError("Failed to generate a unique account number")

    now = datetime.now(timezone.utc)
    account = Account(
        account_number=account_number,
        name=name,
        account_type=account_type,
        balance=0,
        user_id=user_id,
        created_timestamp=now,
        updated_timestamp=now,
    )
    db.add(account)
    await db.flush()
    return account


async def get_accounts(db: AsyncSession, user_id: str) -> list[Account]:
    """List the user's accounts, newest first."""
    result = await db.execute(
        select(Account)
        .where(Account.user_id == user_id)
        .order_by(Account.created_timestamp.desc(), Account.id.desc())
    )
    return list(result.scalars().all())


async def get_account(db: AsyncSession, account_number: str, user_id: str) -> Account:
    """
    Get a single account, verifying ownership.

    Raises:
        BankAPIError (not_found): The account doesn't exist.
        BankAPIError (forbidden): The account belongs to someone else.
    """
    return await get_owned_account(LedgerStore(db), account_number, user_id)


async def update_account(
    db: AsyncSession,
    account_number: str,
    user_id: str,
    name: str | None = None,
    account_type: str | None = None,
) -> Account:
    """Rename an owned account and/or change its type."""
    account = await get_account(db, account_number, user_id)

    if name is not None:
        account.name = name
    if account_type is not None:
        account.account_type = account_type
    account.updated_timestamp = datetime.now(timezone.utc)

    await db.flush()
    return account


async def delete_account(db: AsyncSession, account_number: str, user_id: str) -> None:
    """
    Delete an owned account.

    Transactions are append-only, so an account that has any cannot be
    deleted.

    Raises:
        BankAPIError (conflict): The account has transactions.
    """
    account = await get_account(db, account_number, user_id)

    result = await db.execute(
        select(func.count())
        .select_from(Transaction)
        .where(Transaction.account_id == account.id)
    )
    if result.scalar_one() > 0:
        raise conflict_error(
            "A bank account cannot be deleted when it has transactions"
        )

    await db.delete(account)
    await db.flush()
