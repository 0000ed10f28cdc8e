"""
Tests for the Mini App Auth HTTP service.
"""

import pytest
from fastapi.testclient import TestClient

from service_miniapp_auth.app.main import create_app, get_service_config
from shared.test_helpers import DEFAULT_BOT_TOKEN, InitDataFactory, TestDataFactory


@pytest.fixture
def client():
    """Create test client."""
    app = create_app(get_service_config(bot_token=DEFAULT_BOT_TOKEN))
    return TestClient(app)


@pytest.fixture
def factory():
    return InitDataFactory(DEFAULT_BOT_TOKEN)


@pytest.fixture
def users():
    return TestDataFactory.create_test_users()


def test_root_endpoint(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "miniapp_auth"
    assert data["version"] == "1.0.0"


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "miniapp_auth"
    assert data["status"] == "ok"
    assert data["dependencies"] == {"bot_token": "configured"}


def test_health_check_reports_missing_token():
    """Test health check without a configured bot token."""
    client = TestClient(create_app(get_service_config(bot_token=None)))

    data = client.get("/health").json()

    assert data["dependencies"] == {"bot_token": "missing"}


def test_verify_endpoint(client, factory, users):
    """Test verification of a valid payload."""
    init_data = factory.valid(users["basic"], query_id="test-query")

    response = client.post("/miniapp/verify", json={"init_data": init_data})

    assert response.status_code == 200
    data = response.json()
    assert data["verified"] is True
    assert data["is_authenticated"] is True
    assert data["query_id"] == "test-query"
    assert data["user"] == users["basic"].to_claims()
    assert data["user_id"] == users["basic"].id
    assert data["user_name"] == "Vladislav Kibenko"
    assert "raw_data" not in data
    assert "hash" not in data
    assert response.headers["X-Request-ID"]


def test_verify_endpoint_include_options(client, factory, users):
    """Test include_raw_data and include_hash switches."""
    init_data = factory.valid(users["minimal"])

    response = client.post(
        "/miniapp/verify",
        json={"init_data": init_data, "include_raw_data": True, "include_hash": True}
    )

    data = response.json()
    assert data["raw_data"] == init_data
    assert isinstance(data["hash"], str) and len(data["hash"]) == 64


def test_verify_endpoint_rejection(client, factory, users):
    """Test a rejected payload returns the error envelope."""
    response = client.post(
        "/miniapp/verify",
        json={"init_data": factory.expired(users["basic"])},
        headers={"X-Request-ID": "req-1"}
    )

    assert response.status_code == 401
    data = response.json()
    assert data["code"] == "PAYLOAD_EXPIRED"
    assert data["details"] == {"kind": "PayloadExpired"}
    assert data["trace_id"] == "req-1"
    assert "too old" in data["message"]


def test_verify_endpoint_missing_payload(client):
    """Test an empty init_data."""
    response = client.post("/miniapp/verify", json={})

    assert response.status_code == 401
    assert response.json()["code"] == "MISSING_PAYLOAD"


def test_verify_endpoint_null_payload(client):
    """Test an explicit null init_data is a missing payload, not a schema error."""
    response = client.post("/miniapp/verify", json={"init_data": None})

    assert response.status_code == 401
    assert response.json()["code"] == "MISSING_PAYLOAD"


def test_verify_endpoint_negative_max_age(client, factory, users):
    """Test request validation of max_age."""
    response = client.post(
        "/miniapp/verify",
        json={"init_data": factory.valid(users["basic"]), "max_age": -1}
    )

    assert response.status_code == 422


def test_verify_endpoint_without_bot_token(factory, users):
    """Test a service without credentials rejects every payload."""
    client = TestClient(create_app(get_service_config(bot_token=None)))

    response = client.post("/miniapp/verify", json={"init_data": factory.valid(users["basic"])})

    assert response.status_code == 401
    assert response.json()["code"] == "MISSING_SECRET"


def test_verify_batch_continue_on_fail(client, factory, users):
    """Test soft failures in a batch."""
    items = [factory.valid(users["basic"], query_id="query-1"), "invalid-data"]

    response = client.post("/miniapp/verify-batch", json={"items": items, "continue_on_fail": True})

    assert response.status_code == 200
    results = response.json()["results"]
    assert results[0]["verified"] is True
    assert results[0]["query_id"] == "query-1"
    assert results[1]["verified"] is False
    assert results[1]["is_authenticated"] is False
    assert results[1]["code"] == "MISSING_SIGNATURE"
    assert results[1]["item_index"] == 1


def test_verify_batch_strict(client, factory, users):
    """Test the first failure aborts a strict batch with its index."""
    items = [factory.valid(users["basic"]), "invalid-data", factory.valid(users["minimal"])]

    response = client.post("/miniapp/verify-batch", json={"items": items})

    assert response.status_code == 401
    data = response.json()
    assert data["code"] == "MISSING_SIGNATURE"
    assert data["details"]["item_index"] == 1


def test_metrics_endpoint_counts_outcomes(client, factory, users):
    """Test verification outcomes are exported."""
    client.post("/miniapp/verify", json={"init_data": factory.valid(users["basic"])})
    client.post("/miniapp/verify", json={"init_data": "invalid-data"})

    body = client.get("/metrics").text

    assert 'initdata_verifications_total{outcome="verified"} 1.0' in body
    assert 'initdata_verifications_total{outcome="MISSING_SIGNATURE"} 1.0' in body


def test_metrics_count_items_before_strict_batch_failure(client, factory, users):
    """Test a strict batch records the items verified before the failure."""
    items = [factory.valid(users["basic"]), "invalid-data", factory.valid(users["minimal"])]

    response = client.post("/miniapp/verify-batch", json={"items": items})

    assert response.status_code == 401
    body = client.get("/metrics").text
    assert 'initdata_verifications_total{outcome="verified"} 1.0' in body
    assert 'initdata_verifications_total{outcome="MISSING_SIGNATURE"} 1.0' in body


def test_metrics_count_every_soft_batch_item(client, factory, users):
    """Test a soft batch records one outcome per item."""
    items = [factory.valid(users["basic"]), "invalid-data", factory.valid(users["minimal"])]

    client.post("/miniapp/verify-batch", json={"items": items, "continue_on_fail": True})

    body = client.get("/metrics").text
    assert 'initdata_verifications_total{outcome="verified"} 2.0' in body
    assert 'initdata_verifications_total{outcome="MISSING_SIGNATURE"} 1.0' in body
