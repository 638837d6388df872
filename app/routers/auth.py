"""
Authentication router: email login.

  POST /v1/auth   Exchange an email address for a JWT

Along with /v1/users registration this is the only public endpoint.
The token is returned in the body and echoed in the Authorization header.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.auth import LoginRequest, TokenResponse
from app.services import auth_service

router = APIRouter()


@router.post(
    "",
    response_model=TokenResponse,
    summary="Authenticate and get a token",
)
async def login(
    request: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """
    Authenticate with an email address.

    Send the returned token on every other request:

        Authorization: Bearer <token>

    The token expires after ACCESS_TOKEN_EXPIRE_MINUTES (default: 60).
    """
    _, token = await auth_service.login(db=db, email=request.email)

    response.headers["Authorization"] = f"Bearer {token}"
    return TokenResponse(token=token)
