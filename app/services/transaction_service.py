"""
Transaction service: posting deposits and withdrawals to an account.

Posting a transaction goes through these steps:

  1. Validate the request (transaction_validator), before any DB access
  2. Ownership guard: the account exists and belongs to the caller
  3. Funds check: a withdrawal may not exceed the current balance, and a
     deposit may not take it past the balance column's range
  4. Build the Transaction record with a fresh "tan-" id
  5. Ledger store commits balance change + record as one unit of work

Atomicity:
  The balance change and its transaction record are committed together by
  LedgerStore.commit_transaction. If either write fails, both are rolled
  back and the request fails with a commit_failure error. There is no
  automatic retry: posting is not idempotent, so a retry after an unknown
  outcome could post twice.

Duplicates:
  Posting the same request twice creates two transactions. There is no
  idempotency key.
"""

import logging
import secrets
from datetime import datetime, timezone

from app.exceptions import (
    balance_limit_error,
    forbidden_error,
    insufficient_funds_error,
    not_found_error,
)
from app.models.account import Account
from app.models.transaction import Transaction
from app.money import MAXIMUM_BALANCE_PENCE
from app.services.identifiers import EntropySource, generate_transaction_id
from app.services.ledger_store import LedgerStore
from app.services.transaction_validator import WITHDRAWAL, ValidatedTransaction

logger = logging.getLogger(__name__)


async def get_owned_account(
    store: LedgerStore,
    account_number: str,
    user_id: str,
) -> Account:
    """
    Load an account and check that the caller owns it.

    Raises:
        BankAPIError (not_found): No account with this number.
        BankAPIError (forbidden): The account belongs to another user.
    """
    account = await store.find_account_by_number(account_number)

    if account is None:
        raise not_found_error("Bank account was not found")

    if account.user_id != user_id:
        raise forbidden_error("Access forbidden")

    return account


def apply_to_balance(balance: int, request: ValidatedTransaction) -> int:
    """
    Return the balance after applying the request, in pence.

    Raises:
        BankAPIError (insufficient_funds): A withdrawal exceeds the balance.
        BankAPIError (balance_limit): A deposit would pass MAXIMUM_BALANCE_PENCE.
    """
    if request.type == WITHDRAWAL:
        if balance < request.amount_minor_units:
            raise insufficient_funds_error()
        return balance - request.amount_minor_units
    if balance > MAXIMUM_BALANCE_PENCE - request.amount_minor_units:
        raise balance_limit_error()
    return balance + request.amount_minor_units


async def post_transaction(
    store: LedgerStore,
    account_number: str,
    user_id: str,
    request: ValidatedTransaction,
    entropy: EntropySource = secrets.token_bytes,
) -> Transaction:
    """
    Post a validated deposit or withdrawal against an account.

    Args:
        store: Ledger store bound to the request's session.
        account_number: The target account ("01" + 6 digits).
        user_id: The authenticated caller.
        request: Output of validate_transaction().
        entropy: Random-byte source for the transaction id.

    Returns:
        The committed Transaction.

    Raises:
        BankAPIError: not_found, forbidden, insufficient_funds,
            balance_limit or commit_failure.
    """
    account = await get_owned_account(store, account_number, user_id)

    new_balance = apply_to_balance(account.balance, request)
    now = datetime.now(timezone.utc)

    record = Transaction(
        id=generate_transaction_id(entropy),
        amount=request.amount_minor_units,
        currency=request.currency,
        type=request.type,
        reference=request.reference,
        account_id=account.id,
        user_id=user_id,
        created_timestamp=now,
    )

    txn = await store.commit_transaction(
        account,
        balance_delta=new_balance - account.balance,
        updated_timestamp=now,
        record=record,
    )

    logger.info(
        "Posted %s %s of %d pence to account %s",
        txn.type,
        txn.id,
        txn.amount,
        account_number,
    )
    return txn


async def get_transactions(
    store: LedgerStore,
    account_number: str,
    user_id: str,
) -> list[Transaction]:
    """List an owned account's transactions, newest first."""
    account = await get_owned_account(store, account_number, user_id)
    return await store.list_transactions(account.id)


async def get_transaction(
    store: LedgerStore,
    account_number: str,
    transaction_id: str,
    user_id: str,
) -> Transaction:
    """
    Get one transaction of an owned account.

    Raises:
        BankAPIError (not_found): The transaction does not exist on this account.
    """
    account = await get_owned_account(store, account_number, user_id)

    txn = await store.find_transaction(account.id, transaction_id)
    if txn is None:
        raise not_found_error("Bank transaction was not found")

    return txn
