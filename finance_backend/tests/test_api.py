"""
HTTP tests for the v1 API.

Tests authentication, the error response contract and the main ledger
flows end to end.
"""

import pytest
from datetime import date, timedelta

from finance_backend.app.core.jwt import create_access_token


async def create_account(client, headers, name, initial_balance="0"):
    response = await client.post(
        "/v1/accounts",
        json={"name": name, "initial_balance": initial_balance},
        headers=headers
    )
    assert response.status_code == 201
    return response.json()


async def create_category(client, headers, name, category_type):
    response = await client.post("/v1/categories", json={"name": name, "type": category_type}, headers=headers)
    assert response.status_code == 201
    return response.json()


def transaction_body(from_type, from_id, to_type, to_id, amount, **extra):
    body = {
        "date_of_completion": date.today().isoformat(),
        "from_type": from_type,
        "from_id": from_id,
        "to_type": to_type,
        "to_id": to_id,
        "amount": amount,
    }
    body.update(extra)
    return body


# TEST 1: Health
@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert "X-Correlation-ID" in response.headers


# TEST 2: Authentication
@pytest.mark.asyncio
async def test_missing_token_is_rejected(client):
    response = await client.get("/v1/accounts")
    assert response.status_code in (401, 403)


@pytest.mark.asyncio
async def test_invalid_token_is_rejected(client):
    response = await client.get("/v1/accounts", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["error_code"] == "ERR_UNAUTHORIZED"


@pytest.mark.asyncio
async def test_token_for_unknown_user_is_rejected(client):
    token = create_access_token(data={"sub": "ghost", "user_id": 4040})
    response = await client.get("/v1/accounts", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_token_without_user_id_is_rejected(client):
    token = create_access_token(data={"sub": "nobody"})
    response = await client.get("/v1/accounts", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


# TEST 3: Accounts
@pytest.mark.asyncio
async def test_account_flow(client, auth_headers):
    account = await create_account(client, auth_headers, "Wallet", "120.50")
    assert account["status"] == "ACTIVATED"
    assert float(account["balance"]) == 120.50

    response = await client.get("/v1/accounts", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["total"] == 1

    response = await client.get("/v1/accounts/total-balance", headers=auth_headers)
    assert float(response.json()["total_balance"]) == 120.50

    response = await client.patch(
        f"/v1/accounts/{account['id']}/balance", json={"balance": "0"}, headers=auth_headers
    )
    assert response.status_code == 200
    assert float(response.json()["balance"]) == 0

    response = await client.delete(f"/v1/accounts/{account['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "DELETED"


@pytest.mark.asyncio
async def test_duplicate_account_name_conflict(client, auth_headers):
    await create_account(client, auth_headers, "Wallet")

    response = await client.post("/v1/accounts", json={"name": "Wallet"}, headers=auth_headers)

    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_NAME_CONFLICT"


@pytest.mark.asyncio
async def test_delete_funded_account_conflict(client, auth_headers):
    account = await create_account(client, auth_headers, "Wallet", "10")

    response = await client.delete(f"/v1/accounts/{account['id']}", headers=auth_headers)

    assert response.status_code == 409
    body = response.json()
    assert body["error_code"] == "ERR_STATE_CONFLICT"
    assert body["message"] == "Account balance must be zero to delete account!"


@pytest.mark.asyncio
async def test_foreign_account_is_forbidden(client, auth_headers, other_auth_headers):
    account = await create_account(client, auth_headers, "Wallet")

    response = await client.get(f"/v1/accounts/{account['id']}", headers=other_auth_headers)

    assert response.status_code == 403
    assert response.json()["error_code"] == "ERR_PERM_001"
    assert response.json()["message"] == "User does not own this resource!"


@pytest.mark.asyncio
async def test_missing_account_is_not_found(client, auth_headers):
    response = await client.get("/v1/accounts/999", headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["error_code"] == "ERR_NOT_FOUND_001"


# TEST 4: Transactions
@pytest.mark.asyncio
async def test_transaction_lifecycle(client, auth_headers):
    account = await create_account(client, auth_headers, "Wallet")
    salary = await create_category(client, auth_headers, "Salary", "INCOME")

    response = await client.post(
        "/v1/transactions",
        json=transaction_body("CATEGORY", salary["id"], "ACCOUNT", account["id"], "100", description="June"),
        headers=auth_headers
    )
    assert response.status_code == 201
    transaction = response.json()
    assert transaction["description"] == "June"
    assert transaction["date_of_completion"] == date.today().isoformat()

    response = await client.put(
        f"/v1/transactions/{transaction['id']}",
        json=transaction_body("CATEGORY", salary["id"], "ACCOUNT", account["id"], "60"),
        headers=auth_headers
    )
    assert response.status_code == 200
    assert float(response.json()["amount"]) == 60

    response = await client.get(f"/v1/accounts/{account['id']}", headers=auth_headers)
    assert float(response.json()["balance"]) == 60

    response = await client.delete(f"/v1/transactions/{transaction['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["id"] == transaction["id"]

    response = await client.get(f"/v1/categories/{salary['id']}", headers=auth_headers)
    assert float(response.json()["current_period_sum"]) == 0


@pytest.mark.asyncio
async def test_gate_rejection_contract(client, auth_headers):
    wallet = await create_account(client, auth_headers, "Wallet", "50")
    bank = await create_account(client, auth_headers, "Bank")

    response = await client.post(
        "/v1/transactions",
        json=transaction_body("ACCOUNT", wallet["id"], "ACCOUNT", bank["id"], "100"),
        headers=auth_headers
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error_code"] == "ERR_INVALID_DATA"
    assert body["message"] == "Transaction contains invalid from-to data!"
    assert "insufficient funds" in body["details"]["reason"]


@pytest.mark.asyncio
async def test_malformed_transaction_is_unprocessable(client, auth_headers):
    wallet = await create_account(client, auth_headers, "Wallet")

    response = await client.post(
        "/v1/transactions",
        json=transaction_body("ACCOUNT", wallet["id"], "SOMEWHERE", 1, "-3"),
        headers=auth_headers
    )

    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"


@pytest.mark.asyncio
async def test_update_without_date_is_unprocessable(client, auth_headers):
    wallet = await create_account(client, auth_headers, "Wallet")
    salary = await create_category(client, auth_headers, "Salary", "INCOME")
    booked_on = (date.today() - timedelta(days=40)).isoformat()

    response = await client.post(
        "/v1/transactions",
        json=transaction_body("CATEGORY", salary["id"], "ACCOUNT", wallet["id"], "100", date_of_completion=booked_on),
        headers=auth_headers
    )
    transaction_id = response.json()["id"]

    body = transaction_body("CATEGORY", salary["id"], "ACCOUNT", wallet["id"], "60")
    del body["date_of_completion"]
    response = await client.put(f"/v1/transactions/{transaction_id}", json=body, headers=auth_headers)

    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"

    response = await client.get(f"/v1/transactions/{transaction_id}", headers=auth_headers)
    assert response.json()["date_of_completion"] == booked_on
    assert float(response.json()["amount"]) == 100


@pytest.mark.asyncio
async def test_transaction_filters_and_totals(client, auth_headers):
    wallet = await create_account(client, auth_headers, "Wallet")
    salary = await create_category(client, auth_headers, "Salary", "INCOME")
    food = await create_category(client, auth_headers, "Food", "EXPENSES")
    last_week = (date.today() - timedelta(days=7)).isoformat()

    for amount, when in (("100", last_week), ("200", date.today().isoformat())):
        await client.post(
            "/v1/transactions",
            json=transaction_body("CATEGORY", salary["id"], "ACCOUNT", wallet["id"], amount, date_of_completion=when),
            headers=auth_headers
        )
    await client.post(
        "/v1/transactions",
        json=transaction_body("ACCOUNT", wallet["id"], "CATEGORY", food["id"], "40"),
        headers=auth_headers
    )

    response = await client.get("/v1/transactions", params={"shape": "INCOME"}, headers=auth_headers)
    assert response.json()["total"] == 2

    response = await client.get(
        "/v1/transactions", params={"to_type": "CATEGORY", "to_id": food["id"]}, headers=auth_headers
    )
    assert response.json()["total"] == 1

    response = await client.get("/v1/transactions", params={"to_type": "CATEGORY"}, headers=auth_headers)
    assert response.status_code == 400

    response = await client.get(
        "/v1/transactions/total-sum",
        params={"shape": "INCOME", "start_date": date.today().isoformat()},
        headers=auth_headers
    )
    assert float(response.json()["total_sum"]) == 200

    response = await client.get(
        f"/v1/accounts/{wallet['id']}/expense-sum",
        params={"start_date": last_week, "end_date": date.today().isoformat()},
        headers=auth_headers
    )
    assert float(response.json()["sum"]) == 40

    response = await client.get(
        f"/v1/categories/{salary['id']}/added-sum",
        params={"start_date": last_week, "end_date": last_week},
        headers=auth_headers
    )
    assert float(response.json()["sum"]) == 100


@pytest.mark.asyncio
async def test_foreign_transaction_is_forbidden(client, auth_headers, other_auth_headers):
    wallet = await create_account(client, auth_headers, "Wallet")
    salary = await create_category(client, auth_headers, "Salary", "INCOME")
    response = await client.post(
        "/v1/transactions",
        json=transaction_body("CATEGORY", salary["id"], "ACCOUNT", wallet["id"], "10"),
        headers=auth_headers
    )
    transaction_id = response.json()["id"]

    response = await client.delete(f"/v1/transactions/{transaction_id}", headers=other_auth_headers)
    assert response.status_code == 403

    response = await client.get(f"/v1/accounts/{wallet['id']}", headers=auth_headers)
    assert float(response.json()["balance"]) == 10


# TEST 5: Categories and reporting periods
@pytest.mark.asyncio
async def test_category_listing_hides_system_categories(client, auth_headers):
    await create_category(client, auth_headers, "Food", "EXPENSES")

    response = await client.get("/v1/categories", headers=auth_headers)
    names = [category["name"] for category in response.json()["categories"]]
    assert names == ["Food"]

    response = await client.post("/v1/categories/examples", headers=auth_headers)
    assert response.status_code == 201
    assert response.json()["total"] == 5


@pytest.mark.asyncio
async def test_reporting_period_endpoints(client, auth_headers):
    response = await client.post(
        "/v1/reporting-periods",
        json={"end_date": (date.today() - timedelta(days=1)).isoformat(), "end_sum": "10"},
        headers=auth_headers
    )
    assert response.status_code == 400

    response = await client.post(
        "/v1/reporting-periods",
        json={"end_date": date.today().isoformat(), "end_sum": "10"},
        headers=auth_headers
    )
    assert response.status_code == 201

    response = await client.get("/v1/reporting-periods", headers=auth_headers)
    assert response.json()["total"] == 1
