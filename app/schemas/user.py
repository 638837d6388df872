"""
Pydantic schemas for User endpoints.

The API nests the postal address under "address" while the User table
stores it as flat columns (address_line1, ...). from_model() and
UserCreateRequest.to_columns() translate between the two.
"""

from pydantic import EmailStr, Field, model_validator

from app.models.user import User
from app.schemas.base import CamelModel, UTCDatetime

PHONE_NUMBER_PATTERN = r"^\+[1-9]\d{1,14}$"


class Address(CamelModel):
    line1: str = Field(min_length=1)
    line2: str = ""
    line3: str = ""
    town: str = Field(min_length=1)
    county: str = Field(min_length=1)
    postcode: str = Field(min_length=1)


class AddressUpdate(CamelModel):
    line1: str | None = Field(None, min_length=1)
    line2: str | None = None
    line3: str | None = None
    town: str | None = Field(None, min_length=1)
    county: str | None = Field(None, min_length=1)
    postcode: str | None = Field(None, min_length=1)


class UserCreateRequest(CamelModel):
    """Request body for POST /v1/users."""
    name: str = Field(min_length=1)
    email: EmailStr
    phone_number: str = Field(pattern=PHONE_NUMBER_PATTERN)
    address: Address

    def to_columns(self) -> dict:
        return {
            "name": self.name,
            "email": self.email,
            "phone_number": self.phone_number,
            "address_line1": self.address.line1,
            "address_line2": self.address.line2,
            "address_line3": self.address.line3,
            "town": self.address.town,
            "county": self.address.county,
            "postcode": self.address.postcode,
        }


class UserUpdateRequest(CamelModel):
    """Request body for PATCH /v1/users/{userId}. All fields optional."""
    name: str | None = Field(None, min_length=1)
    email: EmailStr | None = None
    phone_number: str | None = Field(None, pattern=PHONE_NUMBER_PATTERN)
    address: AddressUpdate | None = None

    @model_validator(mode="after")
    def at_least_one_field(self):
        if not self.to_columns():
            raise ValueError("No update fields provided")
        return self

    def to_columns(self) -> dict:
        """Only the fields the client actually sent, as User column names."""
        columns = {
            key: value
            for key, value in (
                ("name", self.name),
                ("email", self.email),
                ("phone_number", self.phone_number),
            )
            if value is not None
        }
        if self.address is not None:
            address_columns = {
                "address_line1": self.address.line1,
                "address_line2": self.address.line2,
                "address_line3": self.address.line3,
                "town": self.address.town,
                "county": self.address.county,
                "postcode": self.address.postcode,
            }
            columns.update(
                {key: value for key, value in address_columns.items() if value is not None}
            )
        return columns


class UserResponse(CamelModel):
    """Public representation of a User."""
    id: str
    name: str
    address: Address
    phone_number: str
    email: str
    created_timestamp: UTCDatetime
    updated_timestamp: UTCDatetime

    @classmethod
    def from_model(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            address=Address(
                line1=user.address_line1,
                line2=user.address_line2,
                line3=user.address_line3,
                town=user.town,
                county=user.county,
                postcode=user.postcode,
            ),
            phone_number=user.phone_number,
            email=user.email,
            created_timestamp=user.created_timestamp,
            updated_timestamp=user.updated_timestamp,
        )
