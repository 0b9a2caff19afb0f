"""
API tests for /invoices CRUD.
"""

import math


def create(client, auth_headers, payload):
    r = client.post("/invoices", json=payload, headers=auth_headers)
    assert r.status_code == 201, r.text
    return r.json()["data"]


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert set(r.json()) == {"status", "app"}
    assert r.json()["status"] == "healthy"


def test_requires_user_identity(client, invoice_payload):
    r = client.post("/invoices", json=invoice_payload())

    assert r.status_code == 401
    assert r.json() == {"success": False, "message": "Not authorized, missing user identity"}


def test_create_computes_totals_on_server(client, auth_headers, invoice_payload):
    # Client-submitted totals are wrong on purpose
    r = client.post(
        "/invoices",
        json=invoice_payload(subTotal=1, taxTotal=1, total=2),
        headers=auth_headers,
    )

    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "Invoice created successfully"

    invoice = body["data"]
    assert invoice["user"] == "user-1"
    assert invoice["subTotal"] == 35
    assert invoice["taxTotal"] == 3
    assert invoice["total"] == 38
    assert [item["total"] for item in invoice["items"]] == [33, 5]
    assert invoice["paymentTerms"] == "Net 15"
    assert invoice["status"] == "Unpaid"
    assert math.isclose(invoice["total"], invoice["subTotal"] + invoice["taxTotal"])


def test_create_validation_errors_use_envelope(client, auth_headers, invoice_payload):
    payload = invoice_payload(
        items=[{"name": "Widget", "quantity": 0, "unitPrice": -1, "taxPercent": 150}],
        billTo={"clientName": "Acme", "email": "not-an-email"},
    )

    r = client.post("/invoices", json=payload, headers=auth_headers)

    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    fields = {error["field"] for error in body["errors"]}
    assert {
        "items[0].quantity",
        "items[0].unitPrice",
        "items[0].taxPercent",
        "billTo.email",
    } <= fields


def test_create_requires_at_least_one_item(client, auth_headers, invoice_payload):
    r = client.post("/invoices", json=invoice_payload(items=[]), headers=auth_headers)

    assert r.status_code == 400
    assert r.json()["errors"][0]["field"] == "items"


def test_due_date_before_invoice_date_is_rejected(client, auth_headers, invoice_payload):
    payload = invoice_payload(invoiceDate="2025-10-10T00:00:00Z", dueDate="2025-10-01T00:00:00Z")

    r = client.post("/invoices", json=payload, headers=auth_headers)

    assert r.status_code == 400
    error = r.json()["errors"][0]
    assert error == {"field": "dueDate", "message": "Due date cannot be before invoice date"}


def test_get_invoice(client, auth_headers, invoice_payload):
    created = create(client, auth_headers, invoice_payload())

    r = client.get(f"/invoices/{created['id']}", headers=auth_headers)

    assert r.status_code == 200
    assert r.json()["data"] == created


def test_get_invoice_errors(client, auth_headers, invoice_payload):
    created = create(client, auth_headers, invoice_payload())

    assert client.get("/invoices/not-an-id", headers=auth_headers).status_code == 400
    assert client.get(f"/invoices/{'0' * 32}", headers=auth_headers).status_code == 404

    r = client.get(f"/invoices/{created['id']}", headers={"X-User-Id": "someone-else"})
    assert r.status_code == 403
    assert r.json()["message"] == "Unauthorized to access this invoice"


def test_update_replaces_items_and_recomputes(client, auth_headers, invoice_payload):
    created = create(client, auth_headers, invoice_payload())
    payload = invoice_payload(
        status="Paid",
        items=[{"name": "Audit", "quantity": 2, "unitPrice": 100, "taxPercent": 5}],
    )

    r = client.put(f"/invoices/{created['id']}", json=payload, headers=auth_headers)

    assert r.status_code == 200
    invoice = r.json()["data"]
    assert invoice["id"] == created["id"]
    assert invoice["createdAt"] == created["createdAt"]
    assert invoice["status"] == "Paid"
    assert [item["name"] for item in invoice["items"]] == ["Audit"]
    assert (invoice["subTotal"], invoice["taxTotal"], invoice["total"]) == (200, 10, 210)


def test_update_by_other_user_is_forbidden(client, auth_headers, invoice_payload):
    created = create(client, auth_headers, invoice_payload())

    r = client.put(
        f"/invoices/{created['id']}",
        json=invoice_payload(),
        headers={"X-User-Id": "someone-else"},
    )

    assert r.status_code == 403
    assert r.json()["message"] == "Unauthorized to update this invoice"


def test_delete_invoice(client, auth_headers, invoice_payload):
    created = create(client, auth_headers, invoice_payload())

    assert client.delete(f"/invoices/{created['id']}", headers={"X-User-Id": "someone-else"}).status_code == 403

    r = client.delete(f"/invoices/{created['id']}", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["message"] == "Invoice deleted successfully"

    assert client.get(f"/invoices/{created['id']}", headers=auth_headers).status_code == 404


def test_list_invoices_paginates(client, auth_headers, invoice_payload):
    for n in range(3):
        create(client, auth_headers, invoice_payload(invoiceNumber=f"INV-{n}"))
    create(client, {"X-User-Id": "user-2"}, invoice_payload())

    r = client.get("/invoices", params={"page": 2, "limit": 2}, headers=auth_headers)

    assert r.status_code == 200
    body = r.json()
    assert body["pagination"] == {"total": 3, "page": 2, "limit": 2, "pages": 2}
    assert [inv["invoiceNumber"] for inv in body["data"]] == ["INV-0"]


def test_list_invoices_filters_and_sorts(client, auth_headers, invoice_payload):
    create(client, auth_headers, invoice_payload(invoiceNumber="B", status="Paid"))
    create(client, auth_headers, invoice_payload(invoiceNumber="A", status="Paid"))
    create(client, auth_headers, invoice_payload(invoiceNumber="C"))

    r = client.get(
        "/invoices",
        params={"status": "Paid", "sortBy": "invoiceNumber", "order": "asc"},
        headers=auth_headers,
    )

    assert [inv["invoiceNumber"] for inv in r.json()["data"]] == ["A", "B"]


def test_list_invoices_rejects_bad_query(client, auth_headers):
    r = client.get("/invoices", params={"sortBy": "password"}, headers=auth_headers)

    assert r.status_code == 400
    assert r.json()["errors"][0]["field"] == "sortBy"


def test_list_invoices_sorts_dates_by_instant(client, auth_headers, invoice_payload):
    # 2025-10-02T04:00Z is later than 2025-10-02T01:00Z despite its earlier wall-clock date
    create(client, auth_headers, invoice_payload(invoiceNumber="A", invoiceDate="2025-10-01T23:00:00-05:00"))
    create(client, auth_headers, invoice_payload(invoiceNumber="B", invoiceDate="2025-10-02T01:00:00Z"))

    r = client.get("/invoices", params={"sortBy": "invoiceDate", "order": "asc"}, headers=auth_headers)

    assert [inv["invoiceNumber"] for inv in r.json()["data"]] == ["B", "A"]


def test_offset_dates_are_stored_in_utc(client, auth_headers, invoice_payload):
    created = create(client, auth_headers, invoice_payload(invoiceDate="2025-10-01T23:00:00-05:00"))

    assert created["invoiceDate"] == "2025-10-02T04:00:00Z"
