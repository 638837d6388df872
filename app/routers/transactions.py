"""
Transactions router: post and list transactions for an account.

Endpoints (all scoped to the authenticated user's own accounts):
  POST /v1/accounts/{accountNumber}/transactions                   Deposit or withdraw
  GET  /v1/accounts/{accountNumber}/transactions                   List transactions
  GET  /v1/accounts/{accountNumber}/transactions/{transactionId}   Get one transaction
"""

from fastapi import APIRouter, Depends, status

from app.dependencies import get_current_user, get_ledger_store, valid_account_number
from app.models.user import User
from app.schemas.transaction import (
    TransactionCreateRequest,
    TransactionListResponse,
    TransactionResponse,
)
from app.services import transaction_service
from app.services.ledger_store import LedgerStore
from app.services.transaction_validator import validate_transaction

router = APIRouter()


@router.post(
    "/{accountNumber}/transactions",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Deposit into or withdraw from an account",
)
async def create_transaction(
    request: TransactionCreateRequest,
    user: User = Depends(get_current_user),
    account_number: str = Depends(valid_account_number),
    store: LedgerStore = Depends(get_ledger_store),
):
    """
    Post a deposit or withdrawal.

    - **amount**: In pounds, at least 0.01 (e.g. 25.50)
    - **currency**: Must be "GBP"
    - **type**: "deposit" or "withdrawal"
    - **reference**: Optional free text

    The response `amount` is in **pence** (25.50 -> 2550). Withdrawals larger
    than the balance are rejected with 422 and change nothing.
    """
    validated = validate_transaction(
        amount=request.amount,
        currency=request.currency,
        type=request.type,
        reference=request.reference,
    )
    txn = await transaction_service.post_transaction(
        store=store,
        account_number=account_number,
        user_id=user.id,
        request=validated,
    )
    return TransactionResponse.from_model(txn)


@router.get(
    "/{accountNumber}/transactions",
    response_model=TransactionListResponse,
    summary="List transactions for an account",
)
async def list_transactions(
    user: User = Depends(get_current_user),
    account_number: str = Depends(valid_account_number),
    store: LedgerStore = Depends(get_ledger_store),
):
    """List an account's transactions, newest first."""
    txns = await transaction_service.get_transactions(store, account_number, user.id)
    return TransactionListResponse(
        transactions=[TransactionResponse.from_model(txn) for txn in txns]
    )


@router.get(
    "/{accountNumber}/transactions/{transactionId}",
    response_model=TransactionResponse,
    summary="Get a single transaction",
)
async def get_transaction(
    transactionId: str,  # noqa: N803
    user: User = Depends(get_current_user),
    account_number: str = Depends(valid_account_number),
    store: LedgerStore = Depends(get_ledger_store),
):
    """Get details for a specific transaction."""
    txn = await transaction_service.get_transaction(
        store, account_number, transactionId, user.id
    )
    return TransactionResponse.from_model(txn)
