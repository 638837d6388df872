"""
User model: the customer identity.

A User holds contact details and a postal address and owns zero or more
bank accounts. Users log in with their email address only (demo system);
there is no password.

Ids look like "usr-<32 hex chars>" and are generated by the service layer,
not the database, so they can be returned before the row is flushed.
"""

from datetime import datetime, timezone

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(40),
        primary_key=True,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Login identifier: unique and indexed for the auth lookup
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    # E.164 format, e.g. +441234567890
    phone_number: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
    )

    # --- Address ---
    address_line1: Mapped[str] = mapped_column(String(255), nullable=False)
    address_line2: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    address_line3: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    town: Mapped[str] = mapped_column(String(100), nullable=False)
    county: Mapped[str] = mapped_column(String(100), nullable=False)
    postcode: Mapped[str] = mapped_column(String(10), nullable=False)

    # Audit timestamps
    created_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # --- Relationships ---
    # passive_deletes: users are only deleted once they own no accounts,
    # so there are no children to load and detach.
    accounts: Mapped[list["Account"]] = relationship(
        back_populates="user",
        passive_deletes=True,
    )
