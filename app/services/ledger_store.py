"""
Ledger store: the persistence side of transaction posting.

The store owns the two writes that make up a posted transaction:

  (a) the account's balance and updated_timestamp
  (b) the new Transaction row

and commits them as a single database transaction. Either both are
visible afterwards or neither is.

Concurrency:
  The balance is never written back from a value read earlier in the
  request. The update is expressed relative to the stored row:

      UPDATE accounts SET balance = balance + :delta
      WHERE account_number = :n
        AND balance >= :amount           -- withdrawals
        AND balance <= :max - :delta     -- deposits

  so two requests racing on the same account cannot both spend the same
  funds. A guarded withdrawal that matches no row lost the race against
  another withdrawal and is rejected as insufficient funds, with nothing
  written. A deposit that matches no row would push the balance past the
  64-bit column and is rejected with a balance_limit error. This holds on
  SQLite and PostgreSQL alike, without row locks.
"""

import logging
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    balance_limit_error,
    commit_failure_error,
    insufficient_funds_error,
)
from app.models.account import Account
from app.models.transaction import Transaction
from app.money import MAXIMUM_BALANCE_PENCE

logger = logging.getLogger(__name__)


class LedgerStore:
    """SQLAlchemy-backed store for accounts and their transactions."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_account_by_number(self, account_number: str) -> Account | None:
        # Balance updates bypass the identity map; always reload the row
        result = await self.db.execute(
            select(Account)
            .where(Account.account_number == account_number)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def commit_transaction(
        self,
        account: Account,
        balance_delta: int,
        updated_timestamp: datetime,
        record: Transaction,
    ) -> Transaction:
        """
        Apply a balance change and insert its transaction record atomically.

        Args:
            account: The account being posted to (already ownership-checked).
            balance_delta: Signed change in pence; negative for withdrawals.
            updated_timestamp: New value for the account's updated_timestamp.
            record: The unsaved Transaction to insert.

        Returns:
            The committed Transaction.

        Raises:
            BankAPIError (insufficient_funds): A withdrawal found less money
                in the row than it needs.
            BankAPIError (balance_limit): A deposit would take the balance past
                MAXIMUM_BALANCE_PENCE.
            BankAPIError (commit_failure): The database rejected either write;
                everything is rolled back.
        """
        # Rollback expires loaded instances, so read these up front
        account_number = account.account_number
        transaction_id = record.id

        try:
            applied = await self._apply_balance_delta(
                account_number, balance_delta, updated_timestamp
            )
            if not applied:
                await self.db.rollback()
                if balance_delta < 0:
                    raise insufficient_funds_error()
                raise balance_limit_error()
            await self._insert_transaction(record)
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error(
                "Rolled back transaction %s on account %s",
                transaction_id,
                account_number,
                exc_info=exc,
            )
            raise commit_failure_error(
                f"Could not commit transaction {transaction_id}"
            ) from exc

        return record

    async def _apply_balance_delta(
        self,
        account_number: str,
        balance_delta: int,
        updated_timestamp: datetime,
    ) -> bool:
        """Run the conditional balance update; False if no row qualified."""
        stmt = (
            update(Account)
            .where(Account.account_number == account_number)
            .values(
                balance=Account.balance + balance_delta,
                updated_timestamp=updated_timestamp,
            )
            .execution_options(synchronize_session=False)
        )
        if balance_delta < 0:
            stmt = stmt.where(Account.balance >= -balance_delta)
        else:
            stmt = stmt.where(Account.balance <= MAXIMUM_BALANCE_PENCE - balance_delta)

        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def _insert_transaction(self, record: Transaction) -> None:
        self.db.add(record)
        await self.db.flush()

    async def list_transactions(self, account_id: int) -> list[Transaction]:
        result = await self.db.execute(
            select(Transaction)
            .where(Transaction.account_id == account_id)
            .order_by(Transaction.created_timestamp.desc())
        )
        return list(result.scalars().all())

    async def find_transaction(
        self, account_id: int, transaction_id: str
    ) -> Transaction | None:
        result = await self.db.execute(
            select(Transaction)
            .where(Transaction.id == transaction_id)
            .where(Transaction.account_id == account_id)
        )
        return result.scalar_one_or_none()
