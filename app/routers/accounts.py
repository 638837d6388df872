"""
Accounts router: bank account management endpoints.

All endpoints require a bearer token and only ever touch the caller's own
accounts:
  POST   /v1/accounts                   Create a new account
  GET    /v1/accounts                   List own accounts
  GET    /v1/accounts/{accountNumber}   Get account details
  PATCH  /v1/accounts/{accountNumber}   Rename / change type
  DELETE /v1/accounts/{accountNumber}   Delete an account without transactions

Transactions live in their own router, mounted under the same prefix.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user, valid_account_number
from app.models.user import User
from app.schemas.account import (
    AccountCreateRequest,
    AccountListResponse,
    AccountResponse,
    AccountUpdateRequest,
)
from app.services import account_service

router = APIRouter()


@router.post(
    "",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new bank account",
)
async def create_account(
    request: AccountCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Create a new personal GBP account.

    The account starts with a zero balance and a random account number of
    the form 01xxxxxx. The authenticated user becomes the owner.
    """
    account = await account_service.create_account(
        db=db,
        user_id=user.id,
        name=request.name,
        account_type=request.account_type,
    )
    return AccountResponse.from_model(account)


@router.get(
    "",
    response_model=AccountListResponse,
    summary="List your accounts",
)
async def list_accounts(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List all bank accounts owned by the authenticated user, newest first."""
    accounts = await account_service.get_accounts(db, user.id)
    return AccountListResponse(
        accounts=[AccountResponse.from_model(account) for account in accounts]
    )


@router.get(
    "/{accountNumber}",
    response_model=AccountResponse,
    summary="Get account details",
)
async def get_account(
    user: User = Depends(get_current_user),
    account_number: str = Depends(valid_account_number),
    db: AsyncSession = Depends(get_db),
):
    """
    Get details for a specific account.

    Returns 403 if the account belongs to a different user, or 404 if
    the account doesn't exist.
    """
    account = await account_service.get_account(db, account_number, user.id)
    return AccountResponse.from_model(account)


@router.patch(
    "/{accountNumber}",
    response_model=AccountResponse,
    summary="Update account details",
)
async def update_account(
    request: AccountUpdateRequest,
    user: User = Depends(get_current_user),
    account_number: str = Depends(valid_account_number),
    db: AsyncSession = Depends(get_db),
):
    """Change an account's name and/or type. The balance cannot be set here."""
    account = await account_service.update_account(
        db=db,
        account_number=account_number,
        user_id=user.id,
        name=request.name,
        account_type=request.account_type,
    )
    return AccountResponse.from_model(account)


@router.delete(
    "/{accountNumber}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an account",
)
async def delete_account(
    user: User = Depends(get_current_user),
    account_number: str = Depends(valid_account_number),
    db: AsyncSession = Depends(get_db),
):
    """Delete an account. Accounts with transactions cannot be deleted (409)."""
    await account_service.delete_account(db, account_number, user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
