"""
Authentication service: email login.

The demo has no passwords. A caller who names the email of an existing user
receives a JWT for that user; anyone else gets 401.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import unauthorised_error
from app.models.user import User
from app.security import create_access_token


async def login(db: AsyncSession, email: str) -> tuple[User, str]:
    """
    Issue a JWT for the user with this email.

    Returns:
        Tuple of (User instance, JWT token string).

    Raises:
        BankAPIError (unauthorised): No user has this email.
    """
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if user is None:
        raise unauthorised_error("User not found")

    return user, create_access_token(user.id)
