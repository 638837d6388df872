"""
Identifier generation for users, accounts and transactions.

Transaction and user ids are random, prefixed strings. Transaction ids take
their randomness from an injectable entropy source so tests can produce
known ids; the default is the OS CSPRNG. No uniqueness check is made here:
the primary-key constraint catches the (2**64 to one) collision.
"""

import random
import secrets
import uuid
from typing import Callable

TRANSACTION_ID_PREFIX = "tan-"
USER_ID_PREFIX = "usr-"
ACCOUNT_NUMBER_PREFIX = "01"

EntropySource = Callable[[int], bytes]


def generate_transaction_id(entropy: EntropySource = secrets.token_bytes) -> str:
    """Return "tan-" followed by 8 random bytes as 16 lowercase hex chars."""
    return TRANSACTION_ID_PREFIX + entropy(8).hex()


def generate_user_id() -> str:
    return USER_ID_PREFIX + uuid.uuid4().hex


def generate_account_number() -> str:
    """
    Generate an 8-character account number: "01" plus six digits.

    Six random digits do not rule out collisions, so the caller checks
    for an existing account and retries.
    """
    return f"{ACCOUNT_NUMBER_PREFIX}{random.randint(100000, 999999)}"
