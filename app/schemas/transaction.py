"""
Pydantic schemas for Transaction endpoints.

Requests carry the amount in pounds (major units); responses carry it in
pence (minor units). Clients depend on this asymmetry, so keep it.

The request schema only checks the shape of the body (field presence and
JSON types). Monetary rules live in app.services.transaction_validator.
"""

from decimal import Decimal

from pydantic import Field

from app.models.transaction import Transaction
from app.schemas.base import CamelModel, UTCDatetime


class TransactionCreateRequest(CamelModel):
    """Request body for POST /v1/accounts/{accountNumber}/transactions."""
    amount: Decimal = Field(description="Amount in pounds, e.g. 25.50")
    currency: str = Field(description='Currency code, must be "GBP"')
    type: str = Field(description='"deposit" or "withdrawal"')
    reference: str | None = None


class TransactionResponse(CamelModel):
    """Public representation of a transaction. `amount` is in pence."""
    id: str
    amount: int
    currency: str
    type: str
    reference: str
    user_id: str
    created_timestamp: UTCDatetime

    @classmethod
    def from_model(cls, txn: Transaction) -> "TransactionResponse":
        return cls(
            id=txn.id,
            amount=txn.amount,
            currency=txn.currency,
            type=txn.type,
            reference=txn.reference,
            user_id=txn.user_id,
            created_timestamp=txn.created_timestamp,
        )


class TransactionListResponse(CamelModel):
    transactions: list[TransactionResponse]
