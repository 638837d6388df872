"""
Transaction model: the append-only record of every balance change.

A deposit adds `amount` to the account balance, a withdrawal subtracts it.
Rows are written exactly once, together with the balance update they
describe, and are never updated or deleted afterwards.

Key fields:
  - id: "tan-" + 16 hex chars, generated by app.services.identifiers
  - amount: Always positive pence (the direction is implied by the type)
  - type: "deposit" or "withdrawal"
  - reference: Optional free text; empty string when not supplied
  - user_id: The authenticated user who posted it
"""

from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.money import CURRENCY


class Transaction(Base):
    __tablename__ = "transactions"

    __table_args__ = (
        # Amount must always be positive, direction is indicated by type
        CheckConstraint("amount > 0", name="ck_transactions_positive_amount"),
    )

    id: Mapped[str] = mapped_column(
        String(20),
        primary_key=True,
    )

    # Amount in pence
    amount: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    currency: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
        default=CURRENCY,
    )

    # "deposit" or "withdrawal"
    type: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
    )

    reference: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
    )

    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"),
        nullable=False,
        index=True,
    )

    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
    )

    # Indexed for newest-first listing
    created_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
