#!/usr/bin/env python3
"""
Demo seed script: populates a running server with sample data for demos.

!! NOT FOR PRODUCTION !!
This script creates demo users with known emails and fake transaction
data. It is intended ONLY for local demos and frontend development.

Usage:
    # With the API server running on localhost:8000:
    python demo/seed.py

    # Reset the database and re-seed:
    python demo/seed.py --reset

    # Custom server URL:
    python demo/seed.py --base-url http://localhost:9000

Logins after seeding (POST /v1/auth with the email, there are no passwords):
    alice.chen@example.com
    bob.martinez@example.com
    carol.nguyen@example.com
    dave.johnson@example.com
    erin.patel@example.com
"""

import argparse
import asyncio
import os
import random
import sys

import httpx

BASE_URL = "http://localhost:8000"

# ---------------------------------------------------------------------------
# Demo users
# ---------------------------------------------------------------------------

MEMBERS = [
    {
        "name": "Alice Chen",
        "email": "alice.chen@example.com",
        "town": "London",
        "county": "Greater London",
        "postcode": "E1 6AN",
        "accounts": [
            {"name": "Current Account", "initial_deposit": 850.00},
            {"name": "Rainy Day Fund", "initial_deposit": 5_000.00},
        ],
    },
    {
        "name": "Bob Martinez",
        "email": "bob.martinez@example.com",
        "town": "Manchester",
        "county": "Greater Manchester",
        "postcode": "M1 1AE",
        "accounts": [
            {"name": "Current Account", "initial_deposit": 1_200.00},
        ],
    },
    {
        "name": "Carol Nguyen",
        "email": "carol.nguyen@example.com",
        "town": "Leeds",
        "county": "West Yorkshire",
        "postcode": "LS1 4DY",
        "accounts": [
            {"name": "Current Account", "initial_deposit": 3_200.00},
            {"name": "House Deposit", "initial_deposit": 12_000.00},
        ],
    },
    {
        "name": "Dave Johnson",
        "email": "dave.johnson@example.com",
        "town": "Bristol",
        "county": "Bristol",
        "postcode": "BS1 5TR",
        "accounts": [
            {"name": "Current Account", "initial_deposit": 600.00},
        ],
    },
    {
        "name": "Erin Patel",
        "email": "erin.patel@example.com",
        "town": "Leicester",
        "county": "Leicestershire",
        "postcode": "LE1 5WW",
        "accounts": [
            {"name": "Current Account", "initial_deposit": 2_500.00},
        ],
    },
]

WITHDRAWAL_REFERENCES = [
    "Coffee shop", "Supermarket", "Petrol station", "Online subscription",
    "Restaurant", "Council tax", "Mobile phone", "Parking", "Bookshop",
    "Pharmacy", "Hardware shop", "Clothing", "Cinema tickets",
    "Gym membership", "Insurance premium", "Broadband",
]

DEPOSIT_REFERENCES = [
    "Salary", "Freelance payment", "Refund", "Cash deposit",
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def log(msg: str) -> None:
    print(f"  {msg}")


def format_pounds(pounds: float) -> str:
    return f"£{pounds:,.2f}"


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def register(client: httpx.AsyncClient, member: dict) -> str:
    """Create the user and log in, return a JWT token."""
    resp = await client.post(f"{BASE_URL}/v1/users", json={
        "name": member["name"],
        "email": member["email"],
        "phoneNumber": f"+4477009{random.randint(10000, 99999)}",
        "address": {
            "line1": f"{random.randint(1, 200)} High Street",
            "town": member["town"],
            "county": member["county"],
            "postcode": member["postcode"],
        },
    })
    resp.raise_for_status()

    resp = await client.post(f"{BASE_URL}/v1/auth", json={"email": member["email"]})
    resp.raise_for_status()
    return resp.json()["token"]


async def create_account(client: httpx.AsyncClient, token: str, name: str) -> str:
    """Create an account and return its account number."""
    resp = await client.post(
        f"{BASE_URL}/v1/accounts",
        json={"name": name, "accountType": "personal"},
        headers=auth_header(token),
    )
    resp.raise_for_status()
    return resp.json()["accountNumber"]


async def transact(client: httpx.AsyncClient, token: str, account_number: str,
                   txn_type: str, pounds: float, reference: str) -> httpx.Response:
    return await client.post(
        f"{BASE_URL}/v1/accounts/{account_number}/transactions",
        json={
            "amount": round(pounds, 2),
            "currency": "GBP",
            "type": txn_type,
            "reference": reference,
        },
        headers=auth_header(token),
    )


async def get_balance(client: httpx.AsyncClient, token: str, account_number: str) -> float:
    resp = await client.get(
        f"{BASE_URL}/v1/accounts/{account_number}",
        headers=auth_header(token),
    )
    resp.raise_for_status()
    return resp.json()["balance"]


# ---------------------------------------------------------------------------
# Seed logic
# ---------------------------------------------------------------------------

async def seed_history(client: httpx.AsyncClient, token: str,
                       account_number: str, months: int) -> int:
    """Post a few months of salary and spending. Returns the number posted.

    Spending stops for the month at the first 422 (insufficient funds).
    """
    posted = 0
    for _ in range(months):
        resp = await transact(client, token, account_number, "deposit",
                              random.uniform(1_800, 3_200), random.choice(DEPOSIT_REFERENCES))
        if resp.status_code == 201:
            posted += 1

        for _ in range(random.randint(8, 15)):
            resp = await transact(client, token, account_number, "withdrawal",
                                  random.uniform(3, 120), random.choice(WITHDRAWAL_REFERENCES))
            if resp.status_code == 422:
                break
            resp.raise_for_status()
            posted += 1
    return posted


async def seed(base_url: str) -> None:
    global BASE_URL
    BASE_URL = base_url

    print("\n========================================")
    print("  DEMO SEED: NOT FOR PRODUCTION")
    print("========================================\n")

    async with httpx.AsyncClient(timeout=30.0) as client:
        # Health check
        try:
            health = await client.get(f"{BASE_URL}/health")
            health.raise_for_status()
        except (httpx.ConnectError, httpx.HTTPStatusError):
            print(f"  ERROR: Cannot connect to {BASE_URL}")
            print("  Start the server first: uvicorn app.main:app --reload\n")
            sys.exit(1)

        for member in MEMBERS:
            print(f"\nCreating {member['name']}...")
            token = await register(client, member)
            log(f"Login: {member['email']}")

            for acct_info in member["accounts"]:
                account_number = await create_account(client, token, acct_info["name"])
                log(f"  {acct_info['name']}: {account_number}")

                resp = await transact(client, token, account_number, "deposit",
                                      acct_info["initial_deposit"], "Opening deposit")
                resp.raise_for_status()
                log(f"  Opening deposit: {format_pounds(acct_info['initial_deposit'])}")

                posted = await seed_history(client, token, account_number, months=2)
                balance = await get_balance(client, token, account_number)
                log(f"  {posted} transactions seeded. Balance: {format_pounds(balance)}")

    print("\n========================================")
    print("  SEED COMPLETE")
    print("========================================\n")
    for member in MEMBERS:
        print(f"  {member['email']}")
    print()


def reset_database() -> None:
    """Delete the SQLite database file so the server recreates it on restart."""
    db_path = os.path.join(os.path.dirname(__file__), "..", "data", "bank.db")
    db_path = os.path.normpath(db_path)

    if os.path.exists(db_path):
        os.remove(db_path)
        print(f"\n  Deleted {db_path}")
        print("  Restart the server to recreate empty tables.\n")
    else:
        print(f"\n  No database found at {db_path}\n")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

async def main() -> None:
    parser = argparse.ArgumentParser(
        description="Demo seed script: NOT FOR PRODUCTION",
        epilog="Creates sample users, accounts, and transactions for demos.",
    )
    parser.add_argument(
        "--base-url", default="http://localhost:8000",
        help="Base URL of the running API (default: http://localhost:8000)",
    )
    parser.add_argument(
        "--reset", action="store_true",
        help="Delete the database file and exit (restart server to recreate)",
    )
    args = parser.parse_args()

    if args.reset:
        reset_database()
        return

    await seed(args.base_url)


if __name__ == "__main__":
    asyncio.run(main())
