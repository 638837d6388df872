"""
Pydantic schemas for the authentication endpoint.

Login is by email only in this demo; there are no passwords.
"""

from pydantic import BaseModel, EmailStr


class LoginRequest(BaseModel):
    """Request body for POST /v1/auth."""
    email: EmailStr


class TokenResponse(BaseModel):
    """Response body for a successful login: the JWT."""
    token: str
