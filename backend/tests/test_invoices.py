import pytest

from fintrack.core.permissions import Role


async def create_client(client, headers, name="Acme Pvt Ltd"):
    response = await client.post("/api/clients", json={"name": name, "email": "billing@acme.in"}, headers=headers)
    assert response.status_code == 201
    return response.json()


def invoice_payload(client_id, **overrides):
    payload = {
        "invoiceNumber": "INV-001",
        "clientId": client_id,
        "date": "2026-03-01",
        "dueDate": "2026-03-31",
        "items": [
            {"description": "Consulting", "quantity": 2, "price": 1500},
            {"description": "Setup", "quantity": 1, "price": 499.5},
        ],
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_manager_creates_invoice_with_items(client, headers):
    manager = headers[Role.MANAGER]
    acme = await create_client(client, manager)

    response = await client.post("/api/invoices", json=invoice_payload(acme["id"]), headers=manager)
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "draft"
    assert body["totalAmount"] == 3499.5
    assert [item["amount"] for item in body["items"]] == [3000, 499.5]
    assert body["client"]["name"] == "Acme Pvt Ltd"

    response = await client.get("/api/invoices", headers=headers[Role.DATA_ENTRY])
    assert [inv["invoiceNumber"] for inv in response.json()] == ["INV-001"]


@pytest.mark.asyncio
async def test_client_total_is_kept(client, headers):
    manager = headers[Role.MANAGER]
    acme = await create_client(client, manager)

    response = await client.post(
        "/api/invoices", json=invoice_payload(acme["id"], totalAmount=4000), headers=manager
    )
    assert response.status_code == 201
    assert response.json()["totalAmount"] == 4000


@pytest.mark.asyncio
async def test_invoice_validation(client, headers):
    manager = headers[Role.MANAGER]
    acme = await create_client(client, manager)

    response = await client.post("/api/invoices", json=invoice_payload(9999), headers=manager)
    assert response.status_code == 404

    response = await client.post(
        "/api/invoices", json=invoice_payload(acme["id"], dueDate="2026-02-01"), headers=manager
    )
    assert response.status_code == 400

    response = await client.post("/api/invoices", json=invoice_payload(acme["id"], items=[]), headers=manager)
    assert response.status_code == 400

    await client.post("/api/invoices", json=invoice_payload(acme["id"]), headers=manager)
    response = await client.post("/api/invoices", json=invoice_payload(acme["id"]), headers=manager)
    assert response.status_code == 400
    assert "INV-001" in response.json()["message"]


@pytest.mark.asyncio
async def test_invoice_permissions(client, headers):
    acme = await create_client(client, headers[Role.ADMIN])

    for role in (Role.HR, Role.DATA_ENTRY):
        response = await client.post("/api/invoices", json=invoice_payload(acme["id"]), headers=headers[role])
        assert response.status_code == 403

    response = await client.post("/api/clients", json={"name": "Other"}, headers=headers[Role.HR])
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_update_status(client, headers):
    manager = headers[Role.MANAGER]
    acme = await create_client(client, manager)
    invoice_id = (await client.post("/api/invoices", json=invoice_payload(acme["id"]), headers=manager)).json()["id"]

    response = await client.patch(f"/api/invoices/{invoice_id}/status", json={"status": "paid"}, headers=manager)
    assert response.status_code == 200
    assert response.json()["status"] == "paid"

    response = await client.patch(f"/api/invoices/{invoice_id}/status", json={"status": "void"}, headers=manager)
    assert response.status_code == 400

    response = await client.patch(
        f"/api/invoices/{invoice_id}/status", json={"status": "sent"}, headers=headers[Role.DATA_ENTRY]
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_update_client(client, headers):
    manager = headers[Role.MANAGER]
    acme = await create_client(client, manager)

    response = await client.put(f"/api/clients/{acme['id']}", json={"phone": "+91 98765 43210"}, headers=manager)
    assert response.status_code == 200
    assert response.json()["phone"] == "+91 98765 43210"
    assert response.json()["name"] == "Acme Pvt Ltd"

    response = await client.put("/api/clients/9999", json={"phone": "1"}, headers=manager)
    assert response.status_code == 404
