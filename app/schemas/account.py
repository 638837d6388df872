"""
Pydantic schemas for Account endpoints.

Balances are stored in pence but shown in pounds here (7550 -> 75.5).
"""

from typing import Literal

from pydantic import Field, model_validator

from app.models.account import Account
from app.money import to_major_units
from app.schemas.base import CamelModel, UTCDatetime


class AccountCreateRequest(CamelModel):
    """Request body for POST /v1/accounts."""
    name: str = Field(min_length=1, max_length=255)
    account_type: Literal["personal"]


class AccountUpdateRequest(CamelModel):
    """Request body for PATCH /v1/accounts/{accountNumber}."""
    name: str | None = Field(None, min_length=1, max_length=255)
    account_type: Literal["personal"] | None = None

    @model_validator(mode="after")
    def at_least_one_field(self):
        if self.name is None and self.account_type is None:
            raise ValueError("At least one of name or accountType is required")
        return self


class AccountResponse(CamelModel):
    """Public representation of a bank account."""
    account_number: str
    sort_code: str
    name: str
    account_type: str
    balance: float
    currency: str
    created_timestamp: UTCDatetime
    updated_timestamp: UTCDatetime

    @classmethod
    def from_model(cls, account: Account) -> "AccountResponse":
        return cls(
            account_number=account.account_number,
            sort_code=account.sort_code,
            name=account.name,
            account_type=account.account_type,
            balance=to_major_units(account.balance),
            currency=account.currency,
            created_timestamp=account.created_timestamp,
            updated_timestamp=account.updated_timestamp,
        )


class AccountListResponse(CamelModel):
    accounts: list[AccountResponse]
