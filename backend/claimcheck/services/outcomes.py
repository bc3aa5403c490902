"""
Stage outcomes for the verification pipeline.

Every stage returns one of two things:
- Proceed(value): hand `value` to the next stage
- Halt(outcome, result): stop here, `result` is the final answer

The fallback results built here are the only ways a run can end early, so
their confidence values are the whole failure policy in one place:
- 0  → something broke (unparseable reply, endpoint down)
- 15 → the endpoint answered but had nothing to say (weak negative)
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

from claimcheck.models.schemas import Outcome, VerificationResult

T = TypeVar("T")

# Name reported in every VerificationResult.source
KNOWLEDGE_SOURCE = "Wikidata"

EMPTY_EVIDENCE_CONFIDENCE = 15

UNPARSEABLE_CLAIM_EXPLANATION = "Could not parse claim structure."
CLAIM_ORACLE_DOWN_EXPLANATION = (
    "Could not parse claim structure: the language model did not respond."
)
FETCH_FAILED_EXPLANATION = f"Could not fetch data from {KNOWLEDGE_SOURCE}."
NO_EVIDENCE_EXPLANATION = (
    f"No supporting evidence found in {KNOWLEDGE_SOURCE} for this claim."
)
UNPARSEABLE_VERDICT_EXPLANATION = "Could not parse verdict synthesis response."
VERDICT_ORACLE_DOWN_EXPLANATION = (
    "Could not parse verdict synthesis response: the language model did not respond."
)
INTERNAL_ERROR_EXPLANATION = "Verification failed unexpectedly."


@dataclass(frozen=True)
class Proceed(Generic[T]):
    value: T


@dataclass(frozen=True)
class Halt:
    outcome: Outcome
    result: VerificationResult


StageOutcome = Proceed[T] | Halt


def halt(outcome: Outcome, explanation: str, confidence: int = 0) -> Halt:
    """Build a terminal, unverified result."""
    return Halt(
        outcome=outcome,
        result=VerificationResult(
            verified=False,
            confidence=confidence,
            explanation=explanation,
            source=KNOWLEDGE_SOURCE,
        ),
    )
