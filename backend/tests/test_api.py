"""
Tests for the HTTP API.

The pipeline dependency is overridden with one built on a FakeOracle and a
mocked Wikidata endpoint, so no request leaves the process.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from claimcheck.api.routes import get_pipeline
from claimcheck.main import app
from claimcheck.services.pipeline import VerificationPipeline

from fakes import (
    TOKYO_CLAIM,
    TOKYO_DECOMPOSITION,
    TOKYO_QUERY,
    TOKYO_VERDICT,
    FakeOracle,
    fenced,
    sparql_json,
)


@pytest.fixture
def client_with(glossary, wikidata_client, recording_handler):
    """Factory: TestClient whose pipeline answers with the given oracle replies."""
    def factory(replies: list, response=None) -> TestClient:
        if response is None:
            response = httpx.Response(200, json=sparql_json("Tokyo"))
        pipeline = VerificationPipeline(
            oracle=FakeOracle(replies),
            client=wikidata_client(recording_handler(response)),
            glossary=glossary,
        )
        app.dependency_overrides[get_pipeline] = lambda: pipeline
        return TestClient(app)

    yield factory
    app.dependency_overrides.clear()


TOKYO_REPLIES = [fenced(TOKYO_DECOMPOSITION), TOKYO_QUERY, fenced(TOKYO_VERDICT)]


def test_health():
    response = TestClient(app).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_verify_returns_the_four_result_fields(client_with):
    client = client_with(TOKYO_REPLIES)

    response = client.post("/api/verify", json={"claim": TOKYO_CLAIM})

    assert response.status_code == 200
    assert response.json() == {
        "verified": True,
        "confidence": 92,
        "explanation": TOKYO_VERDICT["explanation"],
        "source": "Wikidata",
    }


def test_pipeline_failure_is_still_200(client_with):
    client = client_with(["not json at all"])

    response = client.post("/api/verify", json={"claim": TOKYO_CLAIM})

    assert response.status_code == 200
    body = response.json()
    assert body["verified"] is False
    assert body["confidence"] == 0


def test_trace_includes_query_and_outcome(client_with):
    client = client_with(
        [fenced(TOKYO_DECOMPOSITION), TOKYO_QUERY],
        response=httpx.Response(200, json=sparql_json()),
    )

    response = client.post("/api/verify/trace", json={"claim": TOKYO_CLAIM})

    assert response.status_code == 200
    trace = response.json()
    assert trace["outcome"] == "no_evidence"
    assert trace["stage"] == "query_built"
    assert trace["query"] == TOKYO_QUERY
    assert trace["decomposition"]["propertyCode"] == "P36"
    assert trace["result"]["confidence"] == 15


@pytest.mark.parametrize("claim", ["", "   ", "ab", "x" * 501])
def test_invalid_claim_is_rejected(client_with, claim):
    client = client_with([])

    response = client.post("/api/verify", json={"claim": claim})

    assert response.status_code == 422


def test_missing_claim_is_rejected(client_with):
    response = client_with([]).post("/api/verify", json={})

    assert response.status_code == 422


def test_glossary_endpoint(glossary):
    response = TestClient(app).get("/api/glossary")

    assert response.status_code == 200
    body = response.json()
    assert body["version"] == glossary.version
    assert any(p["code"] == "P36" for p in body["properties"])
