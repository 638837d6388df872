"""
Account model: a GBP bank account owned by a User.

Each account has:
  - A unique account number: "01" followed by six digits
  - A fixed sort code ("10-10-10") and account type ("personal")
  - A balance in integer pence, updated atomically with transactions
  - A currency code, always GBP

Balance management:
  The `balance` column is only ever changed by the ledger store, in the same
  database transaction that inserts the matching Transaction row, so it
  always equals deposits minus withdrawals for the account.

  A CHECK constraint keeps the balance from ever going negative. The ledger
  store already guards withdrawals with a conditional update; the constraint
  is the last line behind it.
"""

from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.money import CURRENCY

SORT_CODE = "10-10-10"


class Account(Base):
    __tablename__ = "accounts"

    __table_args__ = (
        CheckConstraint(
            "balance >= 0",
            name="ck_accounts_non_negative_balance",
        ),
    )

    id: Mapped[int] = mapped_column(
        primary_key=True,
        autoincrement=True,
    )

    # "01" + 6 digits, validated at the API boundary
    account_number: Mapped[str] = mapped_column(
        String(8),
        unique=True,
        nullable=False,
        index=True,
    )

    sort_code: Mapped[str] = mapped_column(
        String(8),
        nullable=False,
        default=SORT_CODE,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Only "personal" accounts exist
    account_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="personal",
    )

    # Balance in pence
    balance: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    currency: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
        default=CURRENCY,
    )

    # Owner of this account
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    # Audit timestamps
    created_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # --- Relationships ---
    user: Mapped["User"] = relationship(
        back_populates="accounts",
    )
