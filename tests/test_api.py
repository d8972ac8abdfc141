"""Tests for the HTTP boundary."""

import logging

import pytest
import structlog
from fastapi.testclient import TestClient

from src.api import create_app
from src.config import ResolverConfig, Settings
from src.constants.messages import INTERNAL_ERROR, MISSING_DRUG_NAMES, NO_INTERACTION_DESCRIPTION
from src.services.interactions import InteractionResolver

URL = "/api/drug-interaction"


@pytest.fixture
def client(fake_store, recording_logger):
    resolver = InteractionResolver(fake_store, ResolverConfig(), logger=recording_logger)
    return TestClient(create_app(Settings(), resolver=resolver))


def test_root_and_health(client):
    assert client.get("/").status_code == 200
    body = client.get("/health").json()
    assert body == {"ok": True, "sources": ["drug_interactions", "DrugInteraction", "druginteraction"]}


def test_match_echoes_caller_names(client):
    resp = client.post(URL, json={"drug1": " Aspirin ", "drug2": "Warfarin"})

    assert resp.status_code == 200
    assert resp.json() == {
        "drug1": "Aspirin",
        "drug2": "Warfarin",
        "severity": "Major",
        "description": "Increased risk of bleeding.",
        "interaction": "Concomitant use increases anticoagulant effect.",
    }


def test_paired_name_match_omits_text_fields(client):
    resp = client.post(URL, json={"drug1": "Metformin", "drug2": "Lisinopril"})

    assert resp.status_code == 200
    assert resp.json() == {"drug1": "Metformin", "drug2": "Lisinopril", "severity": "Minor"}


def test_no_match_returns_fallback(client):
    resp = client.post(URL, json={"drug1": "aspirin", "drug2": "ibuprofen"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["severity"] == "None"
    assert body["description"] == NO_INTERACTION_DESCRIPTION
    assert body["interaction"]


@pytest.mark.parametrize(
    "payload",
    [{}, {"drug1": "aspirin"}, {"drug2": "aspirin"}, {"drug1": "", "drug2": "aspirin"}, {"drug1": "aspirin", "drug2": "  "}],
)
def test_missing_names_is_400(client, fake_store, payload):
    resp = client.post(URL, json=payload)

    assert resp.status_code == 400
    assert resp.json() == {"error": MISSING_DRUG_NAMES}
    assert fake_store.calls == []


def test_malformed_json_is_500(client):
    resp = client.post(URL, content="{not json", headers={"content-type": "application/json"})

    assert resp.status_code == 500
    assert resp.json() == {"error": INTERNAL_ERROR}


def test_non_string_name_is_500(client):
    resp = client.post(URL, json={"drug1": 5, "drug2": "aspirin"})

    assert resp.status_code == 500
    assert resp.json() == {"error": INTERNAL_ERROR}


class ExplodingResolver:
    config = ResolverConfig()

    def resolve_interaction(self, drug_a, drug_b):
        raise RuntimeError("password=hunter2 host=db.internal")


def test_unexpected_error_does_not_leak():
    client = TestClient(create_app(Settings(), resolver=ExplodingResolver()))

    resp = client.post(URL, json={"drug1": "aspirin", "drug2": "warfarin"})

    assert resp.status_code == 500
    assert resp.json() == {"error": INTERNAL_ERROR}
    assert "hunter2" not in resp.text


def test_storage_failure_still_returns_result(recording_logger):
    from conftest import FakeStore

    resolver = InteractionResolver(FakeStore({}), ResolverConfig(), logger=recording_logger)
    client = TestClient(create_app(Settings(), resolver=resolver))

    resp = client.post(URL, json={"drug1": "aspirin", "drug2": "ibuprofen"})

    assert resp.status_code == 200
    assert resp.json()["severity"] == "None"
    assert recording_logger.named("interaction_source_failed")


def test_import_leaves_root_logging_alone():
    import src.api  # noqa: F401

    formatters = [h.formatter for h in logging.getLogger().handlers]
    assert not any(isinstance(f, structlog.stdlib.ProcessorFormatter) for f in formatters)


@pytest.mark.parametrize("configure_logging, expected_calls", [(True, 1), (False, 0)])
def test_logging_configured_on_startup_only_when_asked(
    monkeypatch, fake_store, recording_logger, configure_logging, expected_calls
):
    calls = []
    monkeypatch.setattr("src.api.setup_logging", lambda level, json=False: calls.append((level, json)))
    resolver = InteractionResolver(fake_store, ResolverConfig(), logger=recording_logger)
    app = create_app(Settings(log_level="DEBUG"), resolver=resolver, configure_logging=configure_logging)

    with TestClient(app) as client:
        assert client.get("/").status_code == 200

    assert len(calls) == expected_calls
    if expected_calls:
        assert calls[0] == ("DEBUG", False)
