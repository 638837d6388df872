"""
Transaction request validation.

Turns the raw monetary fields of a transaction request into a normalized
ValidatedTransaction, or fails with a validation error listing every
violated rule. Rules are checked in this order:

  1. amount is a number, at most £1,000,000,000, and worth at least one
     penny once rounded half up to pence (0.005 is one penny, 0.004 is not)
  2. currency is exactly "GBP"
  3. type is exactly "deposit" or "withdrawal"
  4. reference, if present, is a string (absent becomes "")

This runs before the account is looked up, so a rejected request never
touches the database.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from app.exceptions import field_violation, validation_error
from app.money import (
    CURRENCY,
    MAXIMUM_AMOUNT_PENCE,
    MINIMUM_AMOUNT_PENCE,
    PENCE_PER_POUND,
    to_minor_units,
)

DEPOSIT = "deposit"
WITHDRAWAL = "withdrawal"
TRANSACTION_TYPES = (DEPOSIT, WITHDRAWAL)


@dataclass(frozen=True)
class ValidatedTransaction:
    """A transaction request that passed validation, amount in pence."""
    amount_minor_units: int
    currency: str
    type: str
    reference: str = ""


def _amount_in_pounds(amount: Any) -> Decimal | None:
    """Return the amount as a Decimal, or None if it is not a finite number."""
    if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
        return None
    pounds = Decimal(str(amount))
    if not pounds.is_finite():
        return None
    return pounds


def validate_transaction(
    amount: Any,
    currency: Any,
    type: Any,
    reference: Any = None,
) -> ValidatedTransaction:
    """
    Validate and normalize a transaction request.

    Args:
        amount: Amount in pounds (major units), e.g. Decimal("25.50").
        currency: Currency code; must be "GBP".
        type: "deposit" or "withdrawal".
        reference: Optional free-text reference.

    Returns:
        ValidatedTransaction with amount converted to pence.

    Raises:
        BankAPIError (validation): With one detail entry per violated rule.
    """
    violations = []

    amount_pence = None
    pounds = _amount_in_pounds(amount)
    if pounds is None:
        violations.append(
            field_violation("amount", '"amount" must be a number', "number.base")
        )
    elif pounds * PENCE_PER_POUND > MAXIMUM_AMOUNT_PENCE:
        violations.append(
            field_violation(
                "amount",
                '"amount" must be at most 1000000000',
                "number.max",
            )
        )
    else:
        amount_pence = to_minor_units(pounds)
        if amount_pence < MINIMUM_AMOUNT_PENCE:
            violations.append(
                field_violation(
                    "amount",
                    '"amount" must round to at least 0.01',
                    "number.min",
                )
            )

    if currency != CURRENCY:
        violations.append(
            field_violation("currency", f'"currency" must be [{CURRENCY}]', "any.only")
        )

    if type not in TRANSACTION_TYPES:
        violations.append(
            field_violation(
                "type",
                '"type" must be one of [deposit, withdrawal]',
                "any.only",
            )
        )

    if reference is not None and not isinstance(reference, str):
        violations.append(
            field_violation("reference", '"reference" must be a string', "string.base")
        )

    if violations:
        raise validation_error(details=violations)

    return ValidatedTransaction(
        amount_minor_units=amount_pence,
        currency=currency,
        type=type,
        reference=reference or "",
    )
