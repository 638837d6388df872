"""
Tests for POST/GET /v1/accounts/{accountNumber}/transactions.

These tests verify:
  - Deposits increase and withdrawals decrease the balance
  - Request amounts are pounds, response amounts are pence
  - Withdrawals beyond the balance are rejected (422) and change nothing
  - Validation failures (400) never touch the account
  - Ownership: 404 for unknown accounts, 403 for other users' accounts
  - Posting the same request twice creates two transactions
  - Listing and fetching single transactions
"""

import re

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fastapi import Depends

from app.database import get_db
from app.dependencies import get_ledger_store
from app.main import app
from app.services.ledger_store import LedgerStore


TRANSACTION_ID = re.compile(r"^tan-[0-9a-f]{16}$")


async def post_txn(client, account_number, **body):
    payload = {"currency": "GBP", **body}
    return await client.post(f"/v1/accounts/{account_number}/transactions", json=payload)


async def balance_of(client, account_number) -> float:
    response = await client.get(f"/v1/accounts/{account_number}")
    assert response.status_code == 200, response.text
    return response.json()["balance"]


class TestDeposit:
    """Tests for deposit transactions."""

    async def test_deposit_increases_balance(self, authenticated_client, account_number, fund_account):
        """£25.50 onto 5000p leaves 7550p; the response amount is in pence."""
        await fund_account(account_number, 50.00)

        response = await post_txn(
            authenticated_client, account_number,
            amount=25.50, type="deposit", reference="Salary",
        )
        assert response.status_code == 201
        txn = response.json()
        assert txn["amount"] == 2550
        assert txn["currency"] == "GBP"
        assert txn["type"] == "deposit"
        assert txn["reference"] == "Salary"
        assert txn["userId"] == authenticated_client.user_id
        assert TRANSACTION_ID.match(txn["id"])

        assert await balance_of(authenticated_client, account_number) == 75.50

    async def test_response_shape(self, authenticated_client, account_number):
        response = await post_txn(authenticated_client, account_number, amount=1, type="deposit")
        assert set(response.json()) == {
            "id", "amount", "currency", "type", "reference", "userId", "createdTimestamp",
        }

    async def test_reference_defaults_to_empty_string(self, authenticated_client, account_number):
        response = await post_txn(authenticated_client, account_number, amount=10, type="deposit")
        assert response.status_code == 201
        assert response.json()["reference"] == ""

    async def test_minimum_amount_accepted(self, authenticated_client, account_number):
        """One penny is the smallest transaction."""
        response = await post_txn(authenticated_client, account_number, amount=0.01, type="deposit")
        assert response.status_code == 201
        assert response.json()["amount"] == 1
        assert await balance_of(authenticated_client, account_number) == 0.01


class TestWithdrawal:
    """Tests for withdrawal transactions."""

    async def test_withdrawal_decreases_balance(self, authenticated_client, account_number, fund_account):
        """£15.75 from 5000p leaves 3425p."""
        await fund_account(account_number, 50.00)

        response = await post_txn(authenticated_client, account_number, amount=15.75, type="withdrawal")
        assert response.status_code == 201
        assert response.json()["amount"] == 1575
        assert response.json()["type"] == "withdrawal"

        assert await balance_of(authenticated_client, account_number) == 34.25

    async def test_insufficient_funds_rejected(self, authenticated_client, account_number, fund_account):
        """Withdrawing 1000p from 500p is a 422 and the balance stays at 500p."""
        await fund_account(account_number, 5.00)

        response = await post_txn(authenticated_client, account_number, amount=10.00, type="withdrawal")
        assert response.status_code == 422
        assert response.json() == {"message": "Insufficient funds to process transaction"}

        assert await balance_of(authenticated_client, account_number) == 5.00
        listing = await authenticated_client.get(f"/v1/accounts/{account_number}/transactions")
        assert len(listing.json()["transactions"]) == 1

    async def test_exact_balance_withdrawal_leaves_zero(self, authenticated_client, account_number, fund_account):
        await fund_account(account_number, 50.00)

        response = await post_txn(authenticated_client, account_number, amount=50.00, type="withdrawal")
        assert response.status_code == 201
        assert await balance_of(authenticated_client, account_number) == 0

    async def test_one_penny_over_balance_rejected(self, authenticated_client, account_number, fund_account):
        await fund_account(account_number, 50.00)

        response = await post_txn(authenticated_client, account_number, amount=50.01, type="withdrawal")
        assert response.status_code == 422
        assert await balance_of(authenticated_client, account_number) == 50.00

    async def test_withdrawal_from_empty_account_rejected(self, authenticated_client, account_number):
        response = await post_txn(authenticated_client, account_number, amount=0.01, type="withdrawal")
        assert response.status_code == 422


class TestValidation:
    """Validation failures are 400s and never touch the account."""

    async def test_non_gbp_currency_rejected(self, authenticated_client, account_number, fund_account):
        await fund_account(account_number, 50.00)

        response = await post_txn(
            authenticated_client, account_number,
            amount=10, currency="USD", type="deposit",
        )
        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation failed"
        assert [d["field"] for d in body["details"]] == ["currency"]

        assert await balance_of(authenticated_client, account_number) == 50.00
        listing = await authenticated_client.get(f"/v1/accounts/{account_number}/transactions")
        assert len(listing.json()["transactions"]) == 1

    async def test_currency_is_case_sensitive(self, authenticated_client, account_number):
        response = await post_txn(
            authenticated_client, account_number,
            amount=10, currency="gbp", type="deposit",
        )
        assert response.status_code == 400

    async def test_unknown_type_rejected(self, authenticated_client, account_number):
        response = await post_txn(authenticated_client, account_number, amount=10, type="transfer")
        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "type"

    async def test_zero_amount_rejected(self, authenticated_client, account_number):
        response = await post_txn(authenticated_client, account_number, amount=0, type="deposit")
        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "amount"

    async def test_negative_amount_rejected(self, authenticated_client, account_number):
        response = await post_txn(authenticated_client, account_number, amount=-5, type="deposit")
        assert response.status_code == 400

    async def test_sub_penny_amount_rejected(self, authenticated_client, account_number):
        """0.004 pounds rounds to 0 pence, below the one-penny minimum."""
        response = await post_txn(authenticated_client, account_number, amount=0.004, type="deposit")
        assert response.status_code == 400

    async def test_half_penny_rounds_up(self, authenticated_client, account_number):
        response = await post_txn(authenticated_client, account_number, amount=0.005, type="deposit")
        assert response.status_code == 201
        assert response.json()["amount"] == 1

    async def test_amount_above_maximum_rejected(self, authenticated_client, account_number):
        """An amount past the ceiling is a 400, never a database overflow."""
        for amount in (1e17, 1e30):
            response = await post_txn(authenticated_client, account_number, amount=amount, type="deposit")
            assert response.status_code == 400
            assert response.json()["details"] == [
                {
                    "field": "amount",
                    "message": '"amount" must be at most 1000000000',
                    "type": "number.max",
                }
            ]

        assert await balance_of(authenticated_client, account_number) == 0

    async def test_missing_amount_rejected(self, authenticated_client, account_number):
        response = await post_txn(authenticated_client, account_number, type="deposit")
        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "amount"

    async def test_non_string_reference_rejected(self, authenticated_client, account_number):
        response = await post_txn(
            authenticated_client, account_number,
            amount=10, type="deposit", reference=42,
        )
        assert response.status_code == 400

    async def test_every_violation_reported(self, authenticated_client, account_number):
        response = await post_txn(
            authenticated_client, account_number,
            amount=0, currency="EUR", type="refund",
        )
        assert response.status_code == 400
        fields = [d["field"] for d in response.json()["details"]]
        assert fields == ["amount", "currency", "type"]

    async def test_malformed_account_number_rejected(self, authenticated_client):
        response = await post_txn(authenticated_client, "02123456", amount=10, type="deposit")
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid account number format"


class TestOwnership:
    """The ownership guard runs before any balance change."""

    async def test_unknown_account_not_found(self, authenticated_client):
        response = await post_txn(authenticated_client, "01999999", amount=10, type="deposit")
        assert response.status_code == 404
        assert response.json() == {"message": "Bank account was not found"}

    async def test_other_users_account_forbidden(self, authenticated_client, account_number, second_user_headers):
        response = await authenticated_client.post(
            f"/v1/accounts/{account_number}/transactions",
            json={"amount": 10, "currency": "GBP", "type": "deposit"},
            headers=second_user_headers,
        )
        assert response.status_code == 403
        assert response.json() == {"message": "Access forbidden"}
        assert await balance_of(authenticated_client, account_number) == 0

    async def test_missing_token_unauthorised(self, client):
        response = await client.post(
            "/v1/accounts/01123456/transactions",
            json={"amount": 10, "currency": "GBP", "type": "deposit"},
        )
        assert response.status_code == 401


class TestNoDeduplication:
    """Identical requests are separate transactions."""

    async def test_identical_requests_post_twice(self, authenticated_client, account_number):
        first = await post_txn(authenticated_client, account_number, amount=10, type="deposit", reference="dup")
        second = await post_txn(authenticated_client, account_number, amount=10, type="deposit", reference="dup")

        assert first.status_code == 201
        assert second.status_code == 201
        assert first.json()["id"] != second.json()["id"]
        assert await balance_of(authenticated_client, account_number) == 20.00

        listing = await authenticated_client.get(f"/v1/accounts/{account_number}/transactions")
        assert len(listing.json()["transactions"]) == 2


class TestCommitFailure:
    """A failed commit leaves neither the balance change nor the record."""

    async def test_failed_insert_rolls_back_balance(self, authenticated_client, account_number, fund_account):
        await fund_account(account_number, 50.00)

        class FailingLedgerStore(LedgerStore):
            async def _insert_transaction(self, record):
                raise SQLAlchemyError("simulated failure after balance update")

        async def failing_store(db: AsyncSession = Depends(get_db)):
            return FailingLedgerStore(db)

        app.dependency_overrides[get_ledger_store] = failing_store
        try:
            response = await post_txn(authenticated_client, account_number, amount=10, type="withdrawal")
        finally:
            app.dependency_overrides.pop(get_ledger_store)

        assert response.status_code == 500
        assert response.json() == {"message": "An unexpected error occurred"}

        assert await balance_of(authenticated_client, account_number) == 50.00
        listing = await authenticated_client.get(f"/v1/accounts/{account_number}/transactions")
        assert len(listing.json()["transactions"]) == 1


class TestTransactionListing:
    """Tests for listing and fetching transactions."""

    async def test_list_newest_first(self, authenticated_client, account_number):
        await post_txn(authenticated_client, account_number, amount=10, type="deposit", reference="first")
        await post_txn(authenticated_client, account_number, amount=3, type="withdrawal", reference="second")

        response = await authenticated_client.get(f"/v1/accounts/{account_number}/transactions")
        assert response.status_code == 200
        references = [t["reference"] for t in response.json()["transactions"]]
        assert references == ["second", "first"]

    async def test_get_single_transaction(self, authenticated_client, account_number):
        created = await post_txn(authenticated_client, account_number, amount=12.34, type="deposit")
        txn_id = created.json()["id"]

        response = await authenticated_client.get(
            f"/v1/accounts/{account_number}/transactions/{txn_id}"
        )
        assert response.status_code == 200
        assert response.json()["id"] == txn_id
        assert response.json()["amount"] == 1234

    async def test_unknown_transaction_not_found(self, authenticated_client, account_number):
        response = await authenticated_client.get(
            f"/v1/accounts/{account_number}/transactions/tan-0000000000000000"
        )
        assert response.status_code == 404
        assert response.json() == {"message": "Bank transaction was not found"}

    async def test_cannot_list_other_users_transactions(
        self, authenticated_client, account_number, second_user_headers
    ):
        response = await authenticated_client.get(
            f"/v1/accounts/{account_number}/transactions",
            headers=second_user_headers,
        )
        assert response.status_code == 403


class TestTimestamps:
    """Timestamps render the same whether just created or read back."""

    async def test_created_timestamp_stable_across_endpoints(self, authenticated_client, account_number):
        created = await post_txn(authenticated_client, account_number, amount=5, type="deposit")
        txn = created.json()

        fetched = await authenticated_client.get(
            f"/v1/accounts/{account_number}/transactions/{txn['id']}"
        )
        listed = await authenticated_client.get(f"/v1/accounts/{account_number}/transactions")

        assert fetched.json()["createdTimestamp"] == txn["createdTimestamp"]
        assert listed.json()["transactions"][0]["createdTimestamp"] == txn["createdTimestamp"]

    async def test_timestamps_are_utc(self, authenticated_client, account_number):
        created = await post_txn(authenticated_client, account_number, amount=5, type="deposit")
        txn_id = created.json()["id"]
        fetched = await authenticated_client.get(
            f"/v1/accounts/{account_number}/transactions/{txn_id}"
        )
        assert fetched.json()["createdTimestamp"].endswith("Z")
