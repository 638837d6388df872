"""
Money representation.

Inside the system every amount is an integer number of pence (minor units).
Decimal pounds (major units) only exist at the API boundary: transaction
requests arrive in pounds and account balances are shown in pounds.

Why integer pence?
  Binary floating point cannot represent most decimal fractions exactly
  (0.1 + 0.2 != 0.3). Integer pence keep every balance exact.
"""

from decimal import Decimal, ROUND_HALF_UP

CURRENCY = "GBP"
PENCE_PER_POUND = 100

# Smallest amount a transaction may move: one penny. Amounts are rounded
# half up first, so 0.005 counts as one penny and 0.004 as none.
MINIMUM_AMOUNT_PENCE = 1

# Largest amount a single transaction may move: £1,000,000,000
MAXIMUM_AMOUNT_PENCE = 1_000_000_000 * PENCE_PER_POUND

# Balances are stored in a signed 64-bit integer column
MAXIMUM_BALANCE_PENCE = 2**63 - 1


def to_minor_units(amount: Decimal | int | float) -> int:
    """
    Convert an amount in pounds to whole pence, rounding half up.

    Floats are converted through their string form so that 15.75 becomes
    Decimal("15.75") rather than its binary approximation.

    >>> to_minor_units(Decimal("25.50"))
    2550
    """
    if isinstance(amount, float):
        amount = Decimal(str(amount))
    pence = Decimal(amount) * PENCE_PER_POUND
    return int(pence.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_major_units(pence: int) -> float:
    """Convert pence to pounds for display, e.g. 7550 -> 75.5."""
    return pence / PENCE_PER_POUND
