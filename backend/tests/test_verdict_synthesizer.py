"""
Tests for the VerdictSynthesizer stage and the confidence rubric.
"""

import json

import pytest

from claimcheck.models.schemas import Outcome
from claimcheck.services.oracle import OracleError
from claimcheck.services.outcomes import Halt, Proceed
from claimcheck.services.verdict_synthesizer import (
    HIGH,
    LOW,
    MEDIUM,
    VerdictSynthesizer,
    band_for,
    render_rubric,
)

from fakes import TOKYO_CLAIM, TOKYO_VERDICT, FakeOracle, fenced, sparql_json


def rows(*labels: str) -> list[dict]:
    return sparql_json(*labels)["results"]["bindings"]


# =============================================================================
# RUBRIC
# =============================================================================

@pytest.mark.parametrize(
    "score, band",
    [(95, HIGH), (80, HIGH), (75, MEDIUM), (50, MEDIUM), (40, LOW), (10, LOW),
     (77, None), (45, None), (0, None), (100, None)],
)
def test_band_for(score, band):
    assert band_for(score) is band


def test_rubric_lists_all_bands():
    rubric = render_rubric()
    assert "80-95" in rubric
    assert "50-75" in rubric
    assert "10-40" in rubric


# =============================================================================
# PROMPT
# =============================================================================

def test_prompt_caps_evidence_at_five_rows(tokyo_decomposition):
    synthesizer = VerdictSynthesizer(FakeOracle([]), evidence_limit=5)
    evidence = rows(*[f"Row {i}" for i in range(7)])

    prompt = synthesizer.build_prompt(TOKYO_CLAIM, tokyo_decomposition, evidence)

    assert "Row 0" in prompt
    assert "Row 4" in prompt
    assert "Row 5" not in prompt
    assert "Row 6" not in prompt
    assert "first 5 shown" in prompt


def test_prompt_uses_all_rows_when_fewer_than_cap(tokyo_decomposition):
    synthesizer = VerdictSynthesizer(FakeOracle([]), evidence_limit=5)

    prompt = synthesizer.build_prompt(TOKYO_CLAIM, tokyo_decomposition, rows("Tokyo", "Edo"))

    assert "first 2 shown" in prompt
    assert '"value": "Tokyo"' in prompt
    assert '"value": "Edo"' in prompt


def test_prompt_carries_claim_decomposition_and_rubric(tokyo_decomposition):
    prompt = VerdictSynthesizer(FakeOracle([])).build_prompt(
        TOKYO_CLAIM, tokyo_decomposition, rows("Tokyo")
    )

    assert f'"{TOKYO_CLAIM}"' in prompt
    assert '"queryDirection": "object"' in prompt
    assert render_rubric() in prompt
    assert "conservative" in prompt


# =============================================================================
# SYNTHESIS
# =============================================================================

@pytest.mark.asyncio
async def test_verified_verdict_maps_to_result(tokyo_decomposition):
    oracle = FakeOracle([fenced(TOKYO_VERDICT)])

    outcome = await VerdictSynthesizer(oracle).synthesize(
        TOKYO_CLAIM, tokyo_decomposition, rows("Tokyo")
    )

    assert isinstance(outcome, Proceed)
    result = outcome.value
    assert result.verified is True
    assert result.confidence == 92
    assert result.explanation == TOKYO_VERDICT["explanation"]
    assert result.source == "Wikidata"


@pytest.mark.asyncio
async def test_unverified_verdict_is_not_verified(tokyo_decomposition):
    verdict = {"status": "unverified", "confidence": 25, "explanation": "Wikidata lists Kyoto."}
    oracle = FakeOracle([json.dumps(verdict)])

    outcome = await VerdictSynthesizer(oracle).synthesize(
        "Kyoto is the capital of Japan", tokyo_decomposition, rows("Tokyo")
    )

    assert isinstance(outcome, Proceed)
    assert outcome.value.verified is False
    assert outcome.value.confidence == 25


@pytest.mark.asyncio
async def test_out_of_range_confidence_is_clamped(tokyo_decomposition):
    oracle = FakeOracle([fenced(dict(TOKYO_VERDICT, confidence=140))])

    outcome = await VerdictSynthesizer(oracle).synthesize(
        TOKYO_CLAIM, tokyo_decomposition, rows("Tokyo")
    )

    assert isinstance(outcome, Proceed)
    assert outcome.value.confidence == 100


@pytest.mark.asyncio
async def test_prose_verdict_halts_with_synthesis_failure(tokyo_decomposition):
    oracle = FakeOracle(["Yes, Tokyo is the capital of Japan. I'm 95% sure."])

    outcome = await VerdictSynthesizer(oracle).synthesize(
        TOKYO_CLAIM, tokyo_decomposition, rows("Tokyo")
    )

    assert isinstance(outcome, Halt)
    assert outcome.outcome is Outcome.UNPARSEABLE_VERDICT
    assert outcome.result.verified is False
    assert outcome.result.confidence == 0
    assert "synthesis" in outcome.result.explanation.lower()
    assert "parse" in outcome.result.explanation.lower()


@pytest.mark.asyncio
async def test_oracle_error_halts_with_synthesis_failure(tokyo_decomposition):
    oracle = FakeOracle([OracleError("503")])

    outcome = await VerdictSynthesizer(oracle).synthesize(
        TOKYO_CLAIM, tokyo_decomposition, rows("Tokyo")
    )

    assert isinstance(outcome, Halt)
    assert outcome.result.confidence == 0
    assert "synthesis" in outcome.result.explanation.lower()


@pytest.mark.parametrize("limit", [0, -1])
def test_non_positive_evidence_limit_is_rejected(limit):
    with pytest.raises(ValueError):
        VerdictSynthesizer(FakeOracle([]), evidence_limit=limit)
