"""
API tests for the /ai endpoints using the fake completion transport.
"""

from invoiceai.core.errors import UpstreamError
from invoiceai.services.completion import CompletionEnvelope

FREE_TEXT = "Please bill Acme for 2 widgets at 9.50 each, send to ap@acme.test"


def test_parse_text_returns_draft(client, auth_headers, transport):
    transport.queue(
        "Sure! ```json\n"
        '{"clientName":"Acme","email":"ap@acme.test","items":[{"name":"Widget","quantity":2,"unitPrice":9.5}]}'
        "\n```"
    )

    r = client.post("/ai/parse-text", json={"text": FREE_TEXT}, headers=auth_headers)

    assert r.status_code == 200
    assert r.json() == {
        "success": True,
        "data": {
            "clientName": "Acme",
            "email": "ap@acme.test",
            "address": "",
            "items": [{"name": "Widget", "quantity": 2, "unitPrice": 9.5}],
        },
    }
    assert FREE_TEXT in transport.prompts[0]


def test_parse_text_accepts_lazy_text_accessor(client, auth_headers, transport):
    transport.queue(CompletionEnvelope(text=lambda: '{"clientName": "Acme", "items": [{"name": "X", "quantity": 1, "unitPrice": 1}]}'))

    r = client.post("/ai/parse-text", json={"text": FREE_TEXT}, headers=auth_headers)

    assert r.status_code == 200
    assert r.json()["data"]["clientName"] == "Acme"


def test_parse_text_without_json_is_422(client, auth_headers, transport):
    transport.queue("I cannot extract this.")

    r = client.post("/ai/parse-text", json={"text": FREE_TEXT}, headers=auth_headers)

    assert r.status_code == 422
    assert r.json() == {"success": False, "message": "Could not understand the provided text"}


def test_parse_text_unparseable_json_does_not_leak_completion(client, auth_headers, transport):
    transport.queue('{"clientName": "Acme", "items": [SECRET-RAW-OUTPUT,}')

    r = client.post("/ai/parse-text", json={"text": FREE_TEXT}, headers=auth_headers)

    assert r.status_code == 422
    assert "SECRET-RAW-OUTPUT" not in r.text


def test_parse_text_returns_violations(client, auth_headers, transport):
    transport.queue('{"clientName": "Acme", "items": [{"name": "Widget"}]}')

    r = client.post("/ai/parse-text", json={"text": FREE_TEXT}, headers=auth_headers)

    assert r.status_code == 422
    body = r.json()
    assert body["success"] is False
    assert [e["field"] for e in body["errors"]] == ["items[0].quantity", "items[0].unitPrice"]


def test_parse_text_upstream_failure_is_502(client, auth_headers, transport):
    transport.queue(UpstreamError("Completion service returned HTTP 500"))

    r = client.post("/ai/parse-text", json={"text": FREE_TEXT}, headers=auth_headers)

    assert r.status_code == 502
    assert r.json() == {"success": False, "message": "AI service unavailable"}


def test_parse_text_validates_request(client, auth_headers, transport):
    r = client.post("/ai/parse-text", json={"text": "short"}, headers=auth_headers)

    assert r.status_code == 400
    assert r.json()["errors"][0]["field"] == "text"
    assert transport.prompts == []


def test_parse_text_requires_user(client):
    r = client.post("/ai/parse-text", json={"text": FREE_TEXT})
    assert r.status_code == 401


def test_generate_reminder(client, auth_headers, transport, invoice_payload):
    created = client.post("/invoices", json=invoice_payload(), headers=auth_headers).json()["data"]
    transport.queue("Subject: Friendly reminder\n\nHi Acme Corp, ...")

    r = client.post("/ai/generate-reminder", json={"invoiceId": created["id"]}, headers=auth_headers)

    assert r.status_code == 200
    assert r.json()["data"] == {
        "to": "ap@acme.test",
        "subject": "Reminder: Invoice INV-001",
        "body": "Subject: Friendly reminder\n\nHi Acme Corp, ...",
    }
    prompt = transport.prompts[-1]
    assert "Client Name: Acme Corp" in prompt
    assert "Amount Due: 38.00" in prompt
    assert "Due Date: 2025-10-31" in prompt


def test_generate_reminder_checks_ownership(client, auth_headers, transport, invoice_payload):
    created = client.post("/invoices", json=invoice_payload(), headers=auth_headers).json()["data"]

    r = client.post(
        "/ai/generate-reminder",
        json={"invoiceId": created["id"]},
        headers={"X-User-Id": "someone-else"},
    )

    assert r.status_code == 403
    assert transport.prompts == []


def test_generate_reminder_missing_invoice(client, auth_headers):
    r = client.post("/ai/generate-reminder", json={"invoiceId": "0" * 32}, headers=auth_headers)
    assert r.status_code == 404


def test_dashboard_summary_with_insights(client, auth_headers, transport, invoice_payload):
    client.post("/invoices", json=invoice_payload(), headers=auth_headers)
    client.post("/invoices", json=invoice_payload(invoiceNumber="INV-002", status="Paid"), headers=auth_headers)
    client.post("/invoices", json=invoice_payload(), headers={"X-User-Id": "user-2"})
    transport.queue('Here you go: {"insights": ["Follow up with Acme Corp", "  "]}')

    r = client.get("/ai/dashboard-summary", headers=auth_headers)

    assert r.status_code == 200
    assert r.json()["data"] == {
        "invoiceCount": 2,
        "totalAmount": 76,
        "outstandingAmount": 38,
        "insights": ["Follow up with Acme Corp"],
    }
    assert "Overdue invoices: 1" in transport.prompts[-1]


def test_dashboard_summary_survives_insight_failure(client, auth_headers, transport, invoice_payload):
    client.post("/invoices", json=invoice_payload(), headers=auth_headers)
    transport.queue(UpstreamError("Completion service is not configured"))

    r = client.get("/ai/dashboard-summary", headers=auth_headers)

    assert r.status_code == 200
    assert r.json()["data"] == {
        "invoiceCount": 1,
        "totalAmount": 38,
        "outstandingAmount": 38,
        "insights": [],
    }


def blocked_text():
    raise ValueError("Response was blocked by safety filters")


def test_parse_text_raising_accessor_is_502(client, auth_headers, transport):
    transport.queue(CompletionEnvelope(text=blocked_text))

    r = client.post("/ai/parse-text", json={"text": FREE_TEXT}, headers=auth_headers)

    assert r.status_code == 502
    assert r.json() == {"success": False, "message": "AI service unavailable"}


def test_dashboard_summary_survives_raising_accessor(client, auth_headers, transport, invoice_payload):
    client.post("/invoices", json=invoice_payload(), headers=auth_headers)
    transport.queue(CompletionEnvelope(text=blocked_text))

    r = client.get("/ai/dashboard-summary", headers=auth_headers)

    assert r.status_code == 200
    assert r.json()["data"]["invoiceCount"] == 1
    assert r.json()["data"]["insights"] == []
