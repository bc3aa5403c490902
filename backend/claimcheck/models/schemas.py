"""
Pydantic schemas for the verification pipeline and the API.

These define the shape of data flowing between pipeline stages and out of
the API. The VerificationResult is the core output of the entire system.

FLOW OVERVIEW:
==============
1. Caller sends a claim (VerifyRequest at /api/verify, or verify_claim())
2. ClaimExtractor turns the oracle's reply into a Decomposition
3. QueryBuilder turns the Decomposition into a SPARQL query
4. WikidataClient returns evidence rows for the query
5. VerdictSynthesizer turns the oracle's reply into a Verdict
6. Pipeline converts the Verdict (or any failure) into a VerificationResult
"""

import math
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from claimcheck.config import get_settings


# =============================================================================
# ORACLE OUTPUT SCHEMAS (parsed from untrusted model text)
# =============================================================================
#
# WHEN USED:
# - Decomposition: parsed from the ClaimExtractor's oracle reply
# - Verdict: parsed from the VerdictSynthesizer's oracle reply
#
# The oracle speaks camelCase JSON ("queryDirection", "propertyCode"), so
# these models accept camelCase aliases while exposing snake_case attributes.
#

class QueryDirection(str, Enum):
    """Which side of the claim the SPARQL query starts from."""
    SUBJECT = "subject"
    OBJECT = "object"


class VerdictStatus(str, Enum):
    VERIFIED = "verified"
    UNVERIFIED = "unverified"


class Decomposition(BaseModel):
    """
    Structured breakdown of a claim.

    USED BY: Created by ClaimExtractor, consumed by QueryBuilder and
    VerdictSynthesizer. Never mutated after parsing.

    Example:
        Claim: "Tokyo is the capital of Japan"
        Decomposition(
            subject="Tokyo", property="capital", object="Japan",
            query_direction=QueryDirection.OBJECT, property_code="P36",
            subject_entity_id="Q1490", object_entity_id="Q17",
        )
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        frozen=True,
    )

    subject: str = Field(min_length=1, description="Entity the claim is about")
    property: str = Field(min_length=1, description="Relation asserted by the claim")
    object: str = Field(min_length=1, description="Value the relation points to")
    query_direction: QueryDirection = Field(
        description="'subject' queries the subject's property, 'object' queries the containing side"
    )
    reasoning: str = Field(default="", description="Why the oracle decomposed it this way")

    # Wikidata identifiers, when the oracle knows them
    property_code: Optional[str] = Field(default=None, description="Wikidata property code, e.g. 'P36'")
    subject_entity_id: Optional[str] = Field(default=None, description="Wikidata item ID, e.g. 'Q1490'")
    object_entity_id: Optional[str] = Field(default=None, description="Wikidata item ID, e.g. 'Q17'")

    @field_validator("query_direction", mode="before")
    @classmethod
    def _normalize_direction(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("property_code", "subject_entity_id", "object_entity_id", mode="before")
    @classmethod
    def _normalize_identifier(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value.upper() if value else None
        return value


class Verdict(BaseModel):
    """
    The synthesizer's judgement of a claim against the evidence.

    Confidence is coerced into an integer in [0, 100]: the oracle sometimes
    answers 92.5 or 120, and a clamped score is more useful than a rejection.
    A non-numeric confidence is still a parse failure.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    status: VerdictStatus
    confidence: int = Field(ge=0, le=100)
    explanation: str = Field(min_length=1)

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("confidence must be a number, not a boolean")
        if isinstance(value, str):
            try:
                value = float(value.strip().rstrip("%"))
            except ValueError:
                raise ValueError(f"confidence is not numeric: {value!r}")
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError(f"confidence is not finite: {value!r}")
        if isinstance(value, (int, float)):
            return max(0, min(100, round(value)))
        return value


# =============================================================================
# PIPELINE OUTPUT SCHEMAS
# =============================================================================
#
# WHEN USED:
# - VerificationResult: returned by every pipeline run, success or failure
# - VerificationTrace: VerificationResult plus how far the pipeline got
#

class VerificationResult(BaseModel):
    """
    The public output of the pipeline.

    USED BY: verify_claim(), POST /api/verify
    INVARIANTS:
    - verified is True only when the synthesized verdict status is "verified"
    - 0 <= confidence <= 100 on every path, including failures
    - source is always the knowledge endpoint name
    """
    model_config = ConfigDict(frozen=True)

    verified: bool
    confidence: int = Field(ge=0, le=100)
    explanation: str = Field(min_length=1)
    source: str


class PipelineStage(str, Enum):
    """Furthest stage a pipeline run completed."""
    INIT = "init"
    EXTRACTED = "extracted"
    QUERY_BUILT = "query_built"
    EVIDENCE_FETCHED = "evidence_fetched"
    SYNTHESIZED = "synthesized"


class Outcome(str, Enum):
    """How a pipeline run terminated."""
    VERDICT = "verdict"
    UNPARSEABLE_CLAIM = "unparseable_claim"
    FETCH_FAILED = "fetch_failed"
    NO_EVIDENCE = "no_evidence"
    UNPARSEABLE_VERDICT = "unparseable_verdict"
    INTERNAL_ERROR = "internal_error"


class VerificationTrace(BaseModel):
    """
    Debug view of a single pipeline run.

    USED BY: POST /api/verify/trace
    WHEN: Investigating why a claim got a low confidence. A malformed query
    and a genuinely absent fact both end as fetch_failed or no_evidence, so
    the generated query is included for inspection.
    """
    claim: str
    stage: PipelineStage
    outcome: Outcome
    decomposition: Optional[Decomposition] = None
    query: Optional[str] = None
    evidence_count: int = 0
    result: VerificationResult


# =============================================================================
# GLOSSARY SCHEMAS (grounding table embedded in prompts)
# =============================================================================

class GlossaryEntity(BaseModel):
    label: str
    id: str


class GlossaryProperty(BaseModel):
    label: str
    code: str


class QueryExample(BaseModel):
    """A few-shot example mapping a claim to a SPARQL query."""
    property_code: str
    claim: str
    query: str


class Glossary(BaseModel):
    """
    Versioned entity/property lookup table used for few-shot grounding.

    Loaded from JSON (bundled default or GLOSSARY_PATH). Bump the version
    whenever the table changes so verdicts can be traced to the table used.
    """
    version: str
    entities: list[GlossaryEntity] = Field(default_factory=list)
    properties: list[GlossaryProperty] = Field(default_factory=list)
    direction_rules: list[str] = Field(default_factory=list)
    query_examples: list[QueryExample] = Field(default_factory=list)


# =============================================================================
# API REQUEST SCHEMAS
# =============================================================================

class VerifyRequest(BaseModel):
    """
    Request body for the /api/verify endpoints.

    Example:
        POST /api/verify
        {"claim": "Tokyo is the capital of Japan"}
    """
    claim: str = Field(
        min_length=3,
        description="The factual claim to verify"
    )

    @field_validator("claim")
    @classmethod
    def _within_length_limit(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("claim must not be blank")
        limit = get_settings().max_claim_length
        if len(value) > limit:
            raise ValueError(f"claim is longer than {limit} characters")
        return value
