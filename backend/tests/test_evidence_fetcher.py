"""
Tests for the EvidenceFetcher stage: which endpoint outcomes stop the
pipeline, and with what confidence.
"""

import httpx
import pytest

from claimcheck.models.schemas import Outcome
from claimcheck.services.evidence_fetcher import EvidenceFetcher
from claimcheck.services.outcomes import Halt, Proceed

from fakes import TOKYO_QUERY, sparql_json


@pytest.mark.asyncio
async def test_rows_proceed_untouched(wikidata_client, recording_handler):
    labels = [f"Row {i}" for i in range(8)]
    handler = recording_handler(httpx.Response(200, json=sparql_json(*labels)))

    outcome = await EvidenceFetcher(wikidata_client(handler)).fetch(TOKYO_QUERY)

    # The fetcher forwards everything; capping is the synthesizer's job
    assert isinstance(outcome, Proceed)
    assert len(outcome.value) == 8


@pytest.mark.asyncio
async def test_zero_rows_is_a_weak_negative(wikidata_client, recording_handler):
    handler = recording_handler(httpx.Response(200, json=sparql_json()))

    outcome = await EvidenceFetcher(wikidata_client(handler)).fetch(TOKYO_QUERY)

    assert isinstance(outcome, Halt)
    assert outcome.outcome is Outcome.NO_EVIDENCE
    assert outcome.result.verified is False
    assert outcome.result.confidence == 15
    assert "no supporting evidence" in outcome.result.explanation.lower()
    assert outcome.result.source == "Wikidata"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="Internal Server Error"),
        httpx.Response(400, text="MalformedQueryException"),
        httpx.ConnectError("connection refused"),
        httpx.ReadTimeout("timed out"),
        httpx.Response(200, text="not json"),
    ],
)
async def test_transport_failures_halt_with_zero_confidence(
    wikidata_client, recording_handler, response
):
    handler = recording_handler(response)

    outcome = await EvidenceFetcher(wikidata_client(handler)).fetch(TOKYO_QUERY)

    assert isinstance(outcome, Halt)
    assert outcome.outcome is Outcome.FETCH_FAILED
    assert outcome.result.verified is False
    assert outcome.result.confidence == 0
    assert "could not fetch data" in outcome.result.explanation.lower()
