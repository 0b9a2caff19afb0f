"""
Pytest configuration and shared fixtures.

Registers the integration marker (live LLM tests) and provides a fake
completion transport (see fakes.py) plus a temporary SQLite store wired into the app.
"""

import pytest
from fastapi.testclient import TestClient

from invoiceai.api.deps import get_completion_transport, get_invoice_store
from invoiceai.api.main import app
from invoiceai.services.storage import SQLiteInvoiceStore

from fakes import FakeTransport


def pytest_addoption(parser):
    """Add custom command-line options"""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests against a real LLM endpoint"
    )


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test requiring a real LLM endpoint"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --run-integration is specified"""
    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="need --run-integration option to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def store(tmp_path):
    return SQLiteInvoiceStore(str(tmp_path / "invoices.db"))


@pytest.fixture
def client(store, transport):
    app.dependency_overrides[get_invoice_store] = lambda: store
    app.dependency_overrides[get_completion_transport] = lambda: transport
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"X-User-Id": "user-1"}


@pytest.fixture
def invoice_payload():
    """Factory for a valid create/update request body"""

    def make(**overrides):
        payload = {
            "invoiceNumber": "INV-001",
            "invoiceDate": "2025-10-01T00:00:00Z",
            "dueDate": "2025-10-31T00:00:00Z",
            "billFrom": {"businessName": "Ammons Studio", "email": "billing@studio.test"},
            "billTo": {"clientName": "Acme Corp", "email": "ap@acme.test", "address": "1 Main St"},
            "items": [
                {"name": "Design", "quantity": 3, "unitPrice": 10, "taxPercent": 10},
                {"name": "Hosting", "quantity": 1, "unitPrice": 5},
            ],
        }
        payload.update(overrides)
        return payload

    return make
