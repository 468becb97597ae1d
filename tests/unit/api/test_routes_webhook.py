"""Tests for the webhook and health endpoints with dependency overrides."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conftest import FakeCRM
from leadrelay.config import Settings
from leadrelay.infrastructure.api.dependencies import get_crm, get_settings
from leadrelay.main import app

URL = "/api/elevenlabs-webhook"


def _settings(**overrides) -> Settings:
    values = {
        "clientify_base_url": "https://api.test/v1",
        "clientify_token": "tok",
        "agent_user_ids": "7,9,11",
        "deal_stage_id": "stage-1",
        "verify_delay_ms": 0,
        "dry_run": False,
        "elevenlabs_secret": "",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def client_for(crm):
    def build(**overrides) -> TestClient:
        config = _settings(**overrides)
        app.dependency_overrides[get_settings] = lambda: config
        app.dependency_overrides[get_crm] = lambda: crm
        return TestClient(app)

    yield build
    app.dependency_overrides.clear()


def _envelope(payload: dict, intent: str = "create_lead") -> dict:
    return {"type": "intent_detected", "intent": intent, "payload": payload}


def test_create_lead_end_to_end(client_for, crm, sample_payload):
    response = client_for().post(URL, json=_envelope(sample_payload))

    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    assert data["base"] == "https://api.test/v1"
    assert data["contactId"] == "12345"
    assert data["dealId"] == "12346"
    assert data["assignedOwnerId"] == "7"
    assert data["assignedOwnerUrl"] == "https://api.test/v1/users/7/"
    assert data["assignedOwnerEmail"] == "ana@agency.test"
    assert data["assignedOwnerName"] == "Ana Ruiz"
    trace = data["ownerAssignment"]["deals"]
    assert trace["success"] is True
    assert trace["winningField"] == {"field": "owner", "encoding": "id"}
    assert trace["attempts"][0]["state"] == "verified"


def test_flat_record_is_wrapped(client_for, crm):
    response = client_for().post(URL, json={"name": "Ana Ruiz", "phone": "600111222"})

    assert response.status_code == 200
    assert crm.calls_named("create_contact")


def test_missing_token_is_server_error(client_for, crm, sample_payload):
    response = client_for(clientify_token="").post(URL, json=_envelope(sample_payload))

    assert response.status_code == 500
    assert "CLIENTIFY_TOKEN" in response.json()["detail"]
    assert crm.calls == []


def test_secret_is_enforced(client_for, crm, sample_payload):
    client = client_for(elevenlabs_secret="s3cret")

    assert client.post(URL, json=_envelope(sample_payload)).status_code == 401
    assert (
        client.post(
            URL, json=_envelope(sample_payload), headers={"x-elevenlabs-secret": "wrong"}
        ).status_code
        == 401
    )
    ok = client.post(URL, json=_envelope(sample_payload), headers={"x-elevenlabs-secret": "s3cret"})
    assert ok.status_code == 200


@pytest.mark.parametrize(
    "overrides, params, headers",
    [
        ({"dry_run": True}, None, None),
        ({}, {"dryRun": "1"}, None),
        ({}, None, {"x-dry-run": "true"}),
    ],
)
def test_dry_run_skips_crm(client_for, crm, overrides, params, headers):
    response = client_for(**overrides).post(
        URL, json={"name": "Ana", "email": "a@b.test"}, params=params, headers=headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["mode"] == "dry-run"
    assert data["received"]["payload"]["name"] == "Ana"
    assert crm.calls == []


def test_invalid_envelope_is_bad_request(client_for, crm):
    response = client_for().post(URL, json={"type": "other", "intent": "x", "payload": {"a": 1}})

    assert response.status_code == 400
    assert "type must be" in response.json()["detail"]


def test_invalid_payload_is_bad_request(client_for, crm):
    response = client_for().post(URL, json=_envelope({"name": "Ana"}))

    assert response.status_code == 400
    assert "email" in response.json()["detail"]


def test_non_json_body_is_bad_request(client_for, crm):
    response = client_for().post(URL, content=b"not json", headers={"content-type": "application/json"})
    assert response.status_code == 400


def test_other_intents_are_acknowledged(client_for, crm, sample_payload):
    response = client_for().post(URL, json=_envelope(sample_payload, intent="book_call"))

    assert response.status_code == 200
    assert "not implemented" in response.json()["message"]
    assert crm.calls == []


def test_contact_failure_surfaces_vendor_error(client_for, crm, sample_payload):
    crm.fail_contact = True
    response = client_for().post(URL, json=_envelope(sample_payload))

    assert response.status_code == 500
    body = response.json()
    assert "detail" not in body
    assert body["error"] == "Clientify integration failed"
    assert body["status"] == 400
    assert body["url"] == "https://api.test/v1/contacts/"
    assert body["details"] == {"email": ["invalid"]}


def test_owner_failure_does_not_fail_request(client_for, crm, sample_payload):
    crm.users.clear()
    response = client_for().post(URL, json=_envelope(sample_payload))

    assert response.status_code == 200
    data = response.json()
    assert data["assignedOwnerId"] is None
    assert data["ownerAssignment"]["contacts"]["skippedReason"] == "no valid candidate"


def test_health(client_for):
    response = client_for().get("/api/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["agent_pool_size"] == 3


def test_only_post_is_allowed(client_for):
    assert client_for().get(URL).status_code == 405
