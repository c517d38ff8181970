import pytest

from fintrack.core.permissions import Role


async def create_tx(client, headers, **overrides):
    payload = {"date": "2026-03-10", "amount": 200, "type": "expense"}
    payload.update(overrides)
    return await client.post("/api/transactions", json=payload, headers=headers)


async def balance_of(client, headers, account_id):
    response = await client.get(f"/api/accounts/{account_id}", headers=headers)
    assert response.status_code == 200
    return response.json()["currentBalance"]


@pytest.mark.asyncio
async def test_requires_authentication(client):
    response = await client.get("/api/transactions")
    assert response.status_code == 401
    assert response.json() == {"message": "Not authenticated"}


@pytest.mark.asyncio
async def test_submit_then_approve_expense_updates_balance(client, headers, accounts, categories):
    admin, hr = headers[Role.ADMIN], headers[Role.HR]
    bank = accounts["bank"]

    response = await create_tx(
        client, hr, accountId=bank.id, categoryId=categories["rent"].id, status="submitted"
    )
    assert response.status_code == 201
    tx = response.json()
    assert tx["status"] == "submitted"
    assert tx["baseAmount"] == 200
    assert await balance_of(client, admin, bank.id) == 1000

    response = await client.post(f"/api/transactions/{tx['id']}/approve", headers=admin)
    assert response.status_code == 200
    assert response.json()["status"] == "approved"
    assert response.json()["approvedBy"] is not None
    assert await balance_of(client, admin, bank.id) == 800


@pytest.mark.asyncio
async def test_approved_transfer_moves_money_between_accounts(client, headers):
    admin = headers[Role.ADMIN]
    source = (await client.post(
        "/api/accounts", json={"name": "A", "type": "current", "openingBalance": 500}, headers=admin
    )).json()
    target = (await client.post(
        "/api/accounts", json={"name": "B", "type": "cash", "openingBalance": 0}, headers=admin
    )).json()

    response = await create_tx(
        client, admin, type="transfer", amount=300,
        accountId=source["id"], toAccountId=target["id"], status="approved"
    )
    assert response.status_code == 201
    assert response.json()["status"] == "approved"

    assert await balance_of(client, admin, source["id"]) == 200
    assert await balance_of(client, admin, target["id"]) == 300


@pytest.mark.asyncio
async def test_transfer_validation(client, headers, accounts, categories):
    admin = headers[Role.ADMIN]
    bank = accounts["bank"]

    response = await create_tx(client, admin, type="transfer", accountId=bank.id)
    assert response.status_code == 400
    assert "toAccountId" in response.json()["message"]

    response = await create_tx(client, admin, type="transfer", accountId=bank.id, toAccountId=bank.id)
    assert response.status_code == 400

    response = await create_tx(client, admin, accountId=bank.id, toAccountId=accounts["cash"].id)
    assert response.status_code == 400

    response = await create_tx(client, admin, accountId=bank.id, categoryId=categories["archived"].id)
    assert response.status_code == 400

    response = await create_tx(client, admin, accountId=9999)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_invalid_amount_is_rejected(client, headers, accounts):
    response = await create_tx(client, headers[Role.ADMIN], accountId=accounts["bank"].id, amount=0)
    assert response.status_code == 400
    assert response.json()["message"] == "amount must be greater than 0"


@pytest.mark.asyncio
async def test_amount_that_rounds_to_zero_is_rejected(client, headers, accounts):
    admin = headers[Role.ADMIN]
    response = await create_tx(client, admin, accountId=accounts["bank"].id, amount=0.001)
    assert response.status_code == 400
    assert response.json()["message"] == "amount must be greater than 0"

    response = await create_tx(client, admin, accountId=accounts["bank"].id, amount=1, exchangeRate=0.001)
    assert response.status_code == 400

    response = await client.get("/api/transactions", headers=admin)
    assert response.json() == []

    tx_id = (await create_tx(client, admin, accountId=accounts["bank"].id)).json()["id"]
    response = await client.put(f"/api/transactions/{tx_id}", json={"amount": 0.004}, headers=admin)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_currency_must_be_three_letters(client, headers, accounts):
    admin = headers[Role.ADMIN]
    for currency in ("DOLLARS", "US", "U$D"):
        response = await create_tx(client, admin, accountId=accounts["bank"].id, currency=currency)
        assert response.status_code == 400, currency
        assert response.json()["message"] == "currency must be a 3-letter code"

    tx_id = (await create_tx(client, admin, accountId=accounts["bank"].id, currency="eur")).json()["id"]
    response = await client.put(f"/api/transactions/{tx_id}", json={"currency": "EUROS"}, headers=admin)
    assert response.status_code == 400

    response = await client.get(f"/api/transactions/{tx_id}", headers=admin)
    assert response.json()["currency"] == "EUR"


@pytest.mark.asyncio
async def test_approved_opening_balance_raises_opening_and_current(client, headers, accounts):
    admin = headers[Role.ADMIN]
    cash = accounts["cash"].id

    response = await create_tx(
        client, admin, type="opening_balance", amount=750, accountId=cash, status="submitted"
    )
    tx_id = response.json()["id"]
    response = await client.post(f"/api/transactions/{tx_id}/approve", headers=admin)
    assert response.status_code == 200

    account = (await client.get(f"/api/accounts/{cash}", headers=admin)).json()
    assert account["openingBalance"] == 750
    assert account["currentBalance"] == 750

    # Already folded into the opening balance, so reconciling changes nothing
    response = await client.post(f"/api/accounts/{cash}/reconcile", headers=admin)
    assert response.json()["currentBalance"] == 750
    assert response.json()["difference"] == 0


@pytest.mark.asyncio
async def test_foreign_currency_uses_exchange_rate(client, headers, accounts):
    admin = headers[Role.ADMIN]
    response = await create_tx(
        client, admin, type="income", amount=10, currency="usd", exchangeRate=83.5,
        accountId=accounts["bank"].id, status="approved"
    )
    assert response.status_code == 201
    body = response.json()
    assert body["currency"] == "USD"
    assert body["baseAmount"] == 835
    assert await balance_of(client, admin, accounts["bank"].id) == 1835


@pytest.mark.asyncio
async def test_only_admin_can_approve_or_reject(client, headers, accounts):
    admin = headers[Role.ADMIN]
    response = await create_tx(client, headers[Role.HR], accountId=accounts["bank"].id, status="submitted")
    tx_id = response.json()["id"]

    for role in (Role.HR, Role.MANAGER, Role.DATA_ENTRY):
        for action in ("approve", "reject"):
            response = await client.post(f"/api/transactions/{tx_id}/{action}", headers=headers[role])
            assert response.status_code == 403, (role, action)

    response = await client.get(f"/api/transactions/{tx_id}", headers=admin)
    assert response.json()["status"] == "submitted"
    assert response.json()["approvedBy"] is None
    assert await balance_of(client, admin, accounts["bank"].id) == 1000


@pytest.mark.asyncio
async def test_manager_cannot_create_transactions(client, headers, accounts):
    response = await create_tx(client, headers[Role.MANAGER], accountId=accounts["bank"].id)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_data_entry_is_forced_to_draft(client, headers, accounts):
    response = await create_tx(
        client, headers[Role.DATA_ENTRY], accountId=accounts["bank"].id, status="approved"
    )
    assert response.status_code == 201
    assert response.json()["status"] == "draft"
    assert await balance_of(client, headers[Role.ADMIN], accounts["bank"].id) == 1000


@pytest.mark.asyncio
async def test_data_entry_cannot_submit(client, headers, accounts):
    tx_id = (await create_tx(client, headers[Role.DATA_ENTRY], accountId=accounts["bank"].id)).json()["id"]

    response = await client.post(f"/api/transactions/{tx_id}/submit", headers=headers[Role.DATA_ENTRY])
    assert response.status_code == 403

    response = await client.post(f"/api/transactions/{tx_id}/submit", headers=headers[Role.HR])
    assert response.status_code == 200
    assert response.json()["status"] == "submitted"


@pytest.mark.asyncio
async def test_hr_cannot_create_approved(client, headers, accounts):
    response = await create_tx(client, headers[Role.HR], accountId=accounts["bank"].id, status="approved")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_double_approval_is_rejected(client, headers, accounts):
    admin = headers[Role.ADMIN]
    tx_id = (await create_tx(client, admin, accountId=accounts["bank"].id, status="submitted")).json()["id"]

    first = await client.post(f"/api/transactions/{tx_id}/approve", headers=admin)
    second = await client.post(f"/api/transactions/{tx_id}/approve", headers=admin)

    assert first.status_code == 200
    assert second.status_code == 409
    assert await balance_of(client, admin, accounts["bank"].id) == 800


@pytest.mark.asyncio
async def test_approve_requires_submitted(client, headers, accounts):
    admin = headers[Role.ADMIN]
    tx_id = (await create_tx(client, admin, accountId=accounts["bank"].id)).json()["id"]

    response = await client.post(f"/api/transactions/{tx_id}/approve", headers=admin)
    assert response.status_code == 409

    response = await client.post(f"/api/transactions/{tx_id}/reject", headers=admin)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_reject_has_no_balance_effect(client, headers, actors, accounts):
    admin = headers[Role.ADMIN]
    tx_id = (await create_tx(client, admin, accountId=accounts["bank"].id, status="submitted")).json()["id"]

    response = await client.post(f"/api/transactions/{tx_id}/reject", headers=admin)
    assert response.status_code == 200
    assert response.json()["status"] == "rejected"
    # The reviewer is stamped for rejections too
    assert response.json()["approvedBy"] == actors[Role.ADMIN].user_id
    assert response.json()["approvedAt"] is not None
    assert await balance_of(client, admin, accounts["bank"].id) == 1000

    response = await client.put(f"/api/transactions/{tx_id}", json={"notes": "late"}, headers=admin)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_approved_rows_allow_only_descriptive_edits(client, headers, accounts):
    admin = headers[Role.ADMIN]
    tx_id = (await create_tx(client, admin, accountId=accounts["bank"].id, status="approved")).json()["id"]

    response = await client.put(f"/api/transactions/{tx_id}", json={"description": "Rent March"}, headers=admin)
    assert response.status_code == 200
    assert response.json()["description"] == "Rent March"

    response = await client.put(f"/api/transactions/{tx_id}", json={"amount": 999}, headers=admin)
    assert response.status_code == 409

    response = await client.put(f"/api/transactions/{tx_id}", json={"notes": "x"}, headers=headers[Role.HR])
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_users_edit_only_their_own_drafts(client, headers, accounts):
    tx_id = (await create_tx(client, headers[Role.DATA_ENTRY], accountId=accounts["bank"].id)).json()["id"]

    response = await client.put(f"/api/transactions/{tx_id}", json={"amount": 150}, headers=headers[Role.HR])
    assert response.status_code == 403

    response = await client.put(f"/api/transactions/{tx_id}", json={"amount": 150}, headers=headers[Role.DATA_ENTRY])
    assert response.status_code == 200
    assert response.json()["baseAmount"] == 150


@pytest.mark.asyncio
async def test_delete_rules(client, headers, accounts):
    bank = accounts["bank"]
    own = (await create_tx(client, headers[Role.DATA_ENTRY], accountId=bank.id)).json()["id"]
    others = (await create_tx(client, headers[Role.HR], accountId=bank.id)).json()["id"]
    submitted = (await create_tx(client, headers[Role.HR], accountId=bank.id, status="submitted")).json()["id"]

    response = await client.delete(f"/api/transactions/{others}", headers=headers[Role.DATA_ENTRY])
    assert response.status_code == 403

    response = await client.delete(f"/api/transactions/{submitted}", headers=headers[Role.HR])
    assert response.status_code == 403

    response = await client.delete(f"/api/transactions/{own}", headers=headers[Role.DATA_ENTRY])
    assert response.status_code == 204

    response = await client.delete(f"/api/transactions/{submitted}", headers=headers[Role.ADMIN])
    assert response.status_code == 204

    response = await client.get(f"/api/transactions/{own}", headers=headers[Role.ADMIN])
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_reconcile_after_deleting_approved_transaction(client, headers, accounts):
    admin = headers[Role.ADMIN]
    bank = accounts["bank"]
    tx_id = (await create_tx(client, admin, accountId=bank.id, status="approved")).json()["id"]
    assert await balance_of(client, admin, bank.id) == 800

    response = await client.delete(f"/api/transactions/{tx_id}", headers=admin)
    assert response.status_code == 204
    # Deleting does not reverse the balance effect
    assert await balance_of(client, admin, bank.id) == 800

    response = await client.post(f"/api/accounts/{bank.id}/reconcile", headers=admin)
    assert response.status_code == 200
    assert response.json() == {
        "accountId": bank.id,
        "previousBalance": 800,
        "currentBalance": 1000,
        "difference": 200,
    }
    assert await balance_of(client, admin, bank.id) == 1000

    response = await client.post(f"/api/accounts/{bank.id}/reconcile", headers=headers[Role.HR])
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_filters(client, headers, accounts, categories):
    admin = headers[Role.ADMIN]
    await create_tx(client, admin, accountId=accounts["bank"].id, categoryId=categories["rent"].id)
    await create_tx(client, admin, accountId=accounts["cash"].id, date="2026-04-02", status="submitted")

    response = await client.get("/api/transactions", params={"month": "2026-03"}, headers=admin)
    assert [tx["accountId"] for tx in response.json()] == [accounts["bank"].id]

    response = await client.get("/api/transactions", params={"status": "submitted"}, headers=admin)
    assert [tx["accountId"] for tx in response.json()] == [accounts["cash"].id]

    response = await client.get(
        "/api/transactions", params={"categoryId": categories["rent"].id}, headers=headers[Role.MANAGER]
    )
    assert len(response.json()) == 1

    response = await client.get("/api/transactions", params={"month": "March"}, headers=admin)
    assert response.status_code == 400
