import pytest

from fulfillment.app.db.models.models_v1 import InventoryItem

ADMIN = {"X-Actor-Role": "Admin"}
DELIVERED_ON = "2024-06-01"


def _supplier(supplier_id: int) -> dict:
    return {"X-Actor-Role": "Supplier", "X-Actor-Supplier-Id": str(supplier_id)}


def _create(client, master, **overrides) -> dict:
    body = {
        "supplierId": master["supplier_id"],
        "productId": master["product_id"],
        "quantity": 10,
        "pricePerUnit": 500,
        "expectedDeliveryDate": "2024-06-10",
    }
    body.update(overrides)
    r = client.post("/v1/purchase-orders", json=body, headers=ADMIN)
    assert r.status_code == 201, r.text
    return r.json()


def _move(client, po_id: int, headers: dict, **body):
    return client.post(f"/v1/purchase-orders/{po_id}/transitions", json=body, headers=headers)


def _deliver(client, po_id: int, headers: dict) -> dict:
    assert _move(client, po_id, headers, status="Accepted").status_code == 200
    assert _move(client, po_id, headers, status="Dispatched").status_code == 200
    r = _move(client, po_id, headers, status="Delivered", actualDeliveryDate=DELIVERED_ON)
    assert r.status_code == 200, r.text
    return r.json()


def test_health(client):
    r = client.get("/v1/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_actor_headers_are_required(client, master):
    r = client.get("/v1/purchase-orders")
    assert r.status_code == 401
    assert r.json()["error"] == "unauthenticated"

    r = client.get("/v1/purchase-orders", headers={"X-Actor-Role": "Customer"})
    assert r.status_code == 401

    r = client.get("/v1/purchase-orders", headers={"X-Actor-Role": "Supplier"})
    assert r.status_code == 401


def test_create_returns_camel_case_record(client, master):
    po = _create(client, master)

    assert po["status"] == "Pending"
    assert po["quantity"] == 10
    assert po["pricePerUnit"] == "500.00"
    assert po["totalPrice"] == "5000.00"
    assert po["supplierId"] == master["supplier_id"]
    assert po["expectedDeliveryDate"] == "2024-06-10"
    assert po["invoiceId"] is None
    assert po["actualDeliveryDate"] is None


def test_create_uses_catalog_price_when_omitted(client, master):
    body = {
        "supplierId": master["supplier_id"],
        "productId": master["product_id"],
        "quantity": 2,
        "expectedDeliveryDate": "2024-06-10",
    }
    r = client.post("/v1/purchase-orders", json=body, headers=ADMIN)
    assert r.status_code == 201
    assert r.json()["totalPrice"] == "900.00"


def test_create_validation(client, master):
    r = client.post(
        "/v1/purchase-orders",
        json={"supplierId": master["supplier_id"], "productId": master["product_id"], "quantity": 0},
        headers=ADMIN,
    )
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "validation_error"
    assert body["action"] == "resubmit"


@pytest.mark.parametrize(
    "overrides",
    [
        {"quantity": 2.5},
        {"quantity": "3"},
        {"quantity": True},
        {"quantity": 1_000_001},
        {"pricePerUnit": "10000000000.00"},
        {"quantity": 1_000_000, "pricePerUnit": "9999999.99"},
    ],
)
def test_create_refuses_terms_that_cannot_be_invoiced(client, master, overrides):
    body = {
        "supplierId": master["supplier_id"],
        "productId": master["product_id"],
        "quantity": 10,
        "pricePerUnit": "500.00",
        "expectedDeliveryDate": "2024-06-10",
    }
    body.update(overrides)
    r = client.post("/v1/purchase-orders", json=body, headers=ADMIN)
    assert r.status_code == 400, r.text
    assert r.json()["error"] == "validation_error"
    assert client.get("/v1/purchase-orders", headers=ADMIN).json() == []


def test_money_is_exact_two_decimal_text(client, master):
    po = _create(client, master, quantity=3, pricePerUnit="12.35")
    assert po["pricePerUnit"] == "12.35"
    assert po["totalPrice"] == "37.05"

    r = client.get(f"/v1/purchase-orders/{po['id']}", headers=ADMIN)
    assert r.json()["totalPrice"] == "37.05"


def test_create_needs_approved_supplier(client, master):
    body = {
        "supplierId": master["applicant_id"],
        "productId": master["product_id"],
        "quantity": 1,
        "expectedDeliveryDate": "2024-06-10",
    }
    r = client.post("/v1/purchase-orders", json=body, headers=ADMIN)
    assert r.status_code == 422
    assert r.json()["error"] == "supplier_not_approved"


def test_supplier_cannot_create(client, master):
    body = {
        "supplierId": master["supplier_id"],
        "productId": master["product_id"],
        "quantity": 1,
        "expectedDeliveryDate": "2024-06-10",
    }
    r = client.post("/v1/purchase-orders", json=body, headers=_supplier(master["supplier_id"]))
    assert r.status_code == 403


def test_full_workflow_over_http(client, master):
    supplier = _supplier(master["supplier_id"])
    po = _create(client, master)

    delivered = _deliver(client, po["id"], supplier)
    assert delivered["status"] == "Delivered"
    assert delivered["actualDeliveryDate"] == DELIVERED_ON

    r = _move(client, po["id"], ADMIN, status="Completed")
    assert r.status_code == 200, r.text
    completed = r.json()
    assert completed["status"] == "Completed"
    assert completed["invoiceId"] is not None

    # retry: same record, no second invoice
    r = _move(client, po["id"], ADMIN, status="Completed")
    assert r.status_code == 200
    assert r.json()["invoiceId"] == completed["invoiceId"]

    r = client.get(f"/v1/invoices/{completed['invoiceId']}", headers=supplier)
    assert r.status_code == 200
    invoice = r.json()
    assert invoice["amount"] == "5000.00"
    assert invoice["status"] == "Pending"
    assert invoice["orderId"] == po["id"]
    assert invoice["invoiceNumber"].endswith(f"-{po['id']:04d}")

    r = client.get("/v1/invoices", headers=ADMIN)
    assert [i["id"] for i in r.json()] == [completed["invoiceId"]]

    r = client.get("/v1/inventory", params={"product_id": master["product_id"]}, headers=ADMIN)
    [item] = r.json()
    assert item["stock"] == 10
    assert item["stockStatus"] == "In Stock"

    r = client.get(f"/v1/purchase-orders/{po['id']}/events", headers=supplier)
    assert [(e["fromStatus"], e["toStatus"]) for e in r.json()] == [
        (None, "Pending"),
        ("Pending", "Accepted"),
        ("Accepted", "Dispatched"),
        ("Dispatched", "Delivered"),
        ("Delivered", "Completed"),
    ]


def test_role_denials_map_to_403(client, master):
    supplier = _supplier(master["supplier_id"])
    po = _create(client, master)

    r = _move(client, po["id"], ADMIN, status="Accepted")
    assert r.status_code == 403
    assert r.json()["error"] == "unauthorized"

    _deliver(client, po["id"], supplier)
    r = _move(client, po["id"], supplier, status="Completed")
    assert r.status_code == 403

    r = client.get(f"/v1/purchase-orders/{po['id']}", headers=ADMIN)
    assert r.json()["status"] == "Delivered"


def test_invalid_edge_maps_to_409(client, master):
    po = _create(client, master)
    r = _move(client, po["id"], ADMIN, status="Completed")
    assert r.status_code == 409
    body = r.json()
    assert body["error"] == "invalid_transition"
    assert body["from_status"] == "Pending"
    assert body["to_status"] == "Completed"


def test_unknown_status_is_rejected(client, master):
    po = _create(client, master)
    r = _move(client, po["id"], ADMIN, status="Shipped")
    assert r.status_code == 400


def test_reject_requires_reason(client, master):
    supplier = _supplier(master["supplier_id"])
    po = _create(client, master)

    r = _move(client, po["id"], supplier, status="Rejected")
    assert r.status_code == 400

    r = _move(client, po["id"], supplier, status="Rejected", reason="No teak this quarter")
    assert r.status_code == 200
    assert r.json()["rejectionReason"] == "No teak this quarter"


def test_missing_inventory_item_is_a_support_case(client, db_session, master):
    po = _create(client, master)
    _deliver(client, po["id"], _supplier(master["supplier_id"]))

    db_session.delete(db_session.get(InventoryItem, master["inventory_item_id"]))
    db_session.commit()

    r = _move(client, po["id"], ADMIN, status="Completed")
    assert r.status_code == 409
    assert r.json()["error"] == "inventory_item_not_found"
    assert r.json()["action"] == "contact_support"

    r = client.get(f"/v1/purchase-orders/{po['id']}", headers=ADMIN)
    assert r.json()["status"] == "Delivered"
    assert r.json()["invoiceId"] is None


def test_suppliers_only_see_their_own_orders(client, master):
    mine = _create(client, master)
    theirs = _create(client, master, supplierId=master["other_supplier_id"])
    supplier = _supplier(master["supplier_id"])

    r = client.get("/v1/purchase-orders", headers=supplier)
    assert [po["id"] for po in r.json()] == [mine["id"]]

    r = client.get(f"/v1/purchase-orders/{theirs['id']}", headers=supplier)
    assert r.status_code == 404
    assert r.json()["error"] == "order_not_found"

    r = client.get("/v1/purchase-orders", params={"status": "Pending"}, headers=ADMIN)
    assert {po["id"] for po in r.json()} == {mine["id"], theirs["id"]}


def test_reschedule_only_while_pending(client, master):
    supplier = _supplier(master["supplier_id"])
    po = _create(client, master)

    r = client.patch(
        f"/v1/purchase-orders/{po['id']}/expected-delivery",
        json={"expectedDeliveryDate": "2024-07-01"},
        headers=supplier,
    )
    assert r.status_code == 200
    assert r.json()["expectedDeliveryDate"] == "2024-07-01"

    _move(client, po["id"], supplier, status="Accepted")
    r = client.patch(
        f"/v1/purchase-orders/{po['id']}/expected-delivery",
        json={"expectedDeliveryDate": "2024-08-01"},
        headers=ADMIN,
    )
    assert r.status_code == 409
    assert r.json()["error"] == "order_locked"


def test_invoice_of_another_supplier_is_hidden(client, master):
    po = _create(client, master)
    _deliver(client, po["id"], _supplier(master["supplier_id"]))
    invoice_id = _move(client, po["id"], ADMIN, status="Completed").json()["invoiceId"]

    other = _supplier(master["other_supplier_id"])
    assert client.get(f"/v1/invoices/{invoice_id}", headers=other).status_code == 404
    assert client.get("/v1/invoices", headers=other).json() == []
    assert client.get("/v1/invoices/424242", headers=ADMIN).status_code == 404
