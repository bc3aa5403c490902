"""
Verdict Synthesizer Service.

WHAT THIS DOES:
Reads the claim, its decomposition and the first few Wikidata rows, and asks
the oracle for a verdict: verified or unverified, a confidence score, and a
one-line explanation. This is the last stage of the pipeline.

WHY A RUBRIC:
Left alone, models hand out 90+ to almost anything. The prompt pins scores
to named confidence bands so that a direct label match, a partial match and
a contradiction land in predictable ranges:

    HIGH    80-95   evidence clearly and directly matches the claim
    MEDIUM  50-75   evidence reasonably supports the claim, with some gap
    LOW     10-40   evidence is weak, indirect, or contradicts the claim

Nothing scores above 95: a knowledge base can be stale or incomplete.

EVIDENCE CAP:
Only the first EVIDENCE_LIMIT rows (default 5) go into the prompt. Rows are
in endpoint order, so the cap keeps the prompt small without reordering.

FAILURE:
If the reply can't be parsed as a Verdict, the result is unverified with
confidence 0 and an explanation naming the synthesis failure.

USAGE:
    synthesizer = VerdictSynthesizer(oracle)
    outcome = await synthesizer.synthesize(claim, decomposition, rows)
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

from claimcheck.config import get_settings
from claimcheck.models.schemas import (
    Decomposition,
    Outcome,
    Verdict,
    VerdictStatus,
    VerificationResult,
)
from claimcheck.services.oracle import BaseOracle, OracleError
from claimcheck.services.outcomes import (
    KNOWLEDGE_SOURCE,
    UNPARSEABLE_VERDICT_EXPLANATION,
    VERDICT_ORACLE_DOWN_EXPLANATION,
    Proceed,
    StageOutcome,
    halt,
)
from claimcheck.services.parsing import ParseFailure, parse_model

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIDENCE BANDS
# =============================================================================

@dataclass(frozen=True)
class ConfidenceBand:
    """A named range of confidence scores used in the rubric."""
    name: str
    low: int
    high: int
    meaning: str

    def contains(self, score: int) -> bool:
        return self.low <= score <= self.high


HIGH = ConfidenceBand("high", 80, 95, "the evidence clearly and directly matches the claim")
MEDIUM = ConfidenceBand("medium", 50, 75, "the evidence is a reasonable but partial match")
LOW = ConfidenceBand("low", 10, 40, "the evidence is weak, indirect, or contradicts the claim")

CONFIDENCE_BANDS = (HIGH, MEDIUM, LOW)


def band_for(score: int) -> Optional[ConfidenceBand]:
    """
    Return the band a score falls in, or None for scores between or outside
    the bands (e.g. 77, or 0 for a failed run).
    """
    for band in CONFIDENCE_BANDS:
        if band.contains(score):
            return band
    return None


def render_rubric() -> str:
    return "\n".join(
        f"- {band.low}-{band.high}: {band.meaning}" for band in CONFIDENCE_BANDS
    )


# =============================================================================
# PROMPT
# =============================================================================

SYNTHESIS_PROMPT = """You are a fact verification judge. You decide whether structured data from Wikidata supports a factual claim.

Original claim:
"{claim}"

Claim decomposition:
{decomposition}

We received the following Wikidata response rows (JSON, first {row_count} shown):
{evidence}

CONFIDENCE RUBRIC:
{rubric}

RULES:
1. Judge ONLY from the rows above. Do not use outside knowledge to fill gaps.
2. Use "verified" only when the rows support the claim.
3. Compare labels, not just IDs: a row labelled "Tokyo" matches a claim about Tokyo.
4. When the evidence is ambiguous, be conservative: pick the lower band and prefer "unverified".
5. Never give a confidence above 95.
6. The explanation is ONE sentence naming the evidence you relied on.

Respond in JSON format like:
{{
  "status": "verified",
  "confidence": 92,
  "explanation": "Wikidata lists Tokyo as the capital of Japan."
}}"""


class VerdictSynthesizer:
    """
    Turns claim + evidence into the final VerificationResult.

    Pipeline position:
    ... → Evidence rows → [VerdictSynthesizer] → VerificationResult
    """

    def __init__(self, oracle: BaseOracle, evidence_limit: Optional[int] = None):
        self.oracle = oracle
        self.evidence_limit = (
            evidence_limit if evidence_limit is not None else get_settings().evidence_limit
        )
        if self.evidence_limit < 1:
            raise ValueError(f"evidence_limit must be at least 1, got {self.evidence_limit}")

    def build_prompt(
        self,
        claim: str,
        decomposition: Decomposition,
        rows: list[dict[str, Any]],
    ) -> str:
        shown = rows[: self.evidence_limit]
        return SYNTHESIS_PROMPT.format(
            claim=claim,
            decomposition=json.dumps(
                decomposition.model_dump(by_alias=True, mode="json"), indent=2
            ),
            row_count=len(shown),
            evidence=json.dumps(shown, indent=2, ensure_ascii=False),
            rubric=render_rubric(),
        )

    async def synthesize(
        self,
        claim: str,
        decomposition: Decomposition,
        rows: list[dict[str, Any]],
    ) -> StageOutcome:
        """
        Produce the verdict for a claim.

        Args:
            claim: The original claim text
            decomposition: Output of the ClaimExtractor
            rows: Every evidence row; only the first `evidence_limit` are shown

        Returns:
            Proceed(VerificationResult) on success, Halt with confidence 0
            otherwise.
        """
        logger.info(
            f"Synthesizing verdict from {min(len(rows), self.evidence_limit)} "
            f"of {len(rows)} evidence rows"
        )

        try:
            raw = await self.oracle.complete(self.build_prompt(claim, decomposition, rows))
        except OracleError as e:
            logger.error(f"Verdict synthesis oracle call failed: {e}")
            return halt(Outcome.UNPARSEABLE_VERDICT, VERDICT_ORACLE_DOWN_EXPLANATION)

        parsed = parse_model(raw, Verdict)
        if isinstance(parsed, ParseFailure):
            logger.error(
                f"Error parsing verdict: {parsed.reason}. Raw response: {raw[:200]!r}"
            )
            return halt(Outcome.UNPARSEABLE_VERDICT, UNPARSEABLE_VERDICT_EXPLANATION)

        verdict = parsed.value
        band = band_for(verdict.confidence)
        logger.info(
            f"Verdict: {verdict.status.value}, confidence={verdict.confidence} "
            f"({band.name if band else 'outside rubric bands'})"
        )

        return Proceed(
            VerificationResult(
                verified=verdict.status == VerdictStatus.VERIFIED,
                confidence=verdict.confidence,
                explanation=verdict.explanation,
                source=KNOWLEDGE_SOURCE,
            )
        )
