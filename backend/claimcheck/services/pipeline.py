"""
Verification Pipeline — Orchestrates the four-stage claim check.

WHAT THIS DOES:
Coordinates the stages that turn a free-text claim into a VerificationResult.
This is the only entry point callers need.

PIPELINE STAGES:
1. Extraction:  claim → Decomposition                    (oracle)
2. Query:       Decomposition → SPARQL                   (oracle)
3. Evidence:    SPARQL → binding rows                    (Wikidata)
4. Synthesis:   claim + decomposition + rows → verdict   (oracle)

STATE MACHINE:
    INIT → EXTRACTED → QUERY_BUILT → EVIDENCE_FETCHED → SYNTHESIZED
Early exits, each ending in exactly one VerificationResult:
    - unparseable decomposition      → confidence 0
    - Wikidata unreachable / error   → confidence 0
    - Wikidata returned no rows      → confidence 15
    - unparseable verdict            → confidence 0

NEVER RAISES:
verify() always returns a well-formed VerificationResult. Stage failures are
handled by the stages; anything unexpected is caught here and reported as
an unverified, confidence-0 result.

CONCURRENCY:
Stages run strictly one after another. A pipeline keeps no per-run state,
so one instance can serve concurrent verify() calls.

USAGE:
    pipeline = VerificationPipeline(oracle=OpenAIOracle(), client=WikidataClient())
    result = await pipeline.verify("Tokyo is the capital of Japan")
    # VerificationResult(verified=True, confidence=92, explanation=..., source="Wikidata")
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from claimcheck.models.schemas import (
    Decomposition,
    Glossary,
    Outcome,
    PipelineStage,
    VerificationResult,
    VerificationTrace,
)
from claimcheck.services.claim_extractor import ClaimExtractor
from claimcheck.services.evidence_fetcher import EvidenceFetcher
from claimcheck.services.oracle import BaseOracle, OpenAIOracle
from claimcheck.services.outcomes import (
    INTERNAL_ERROR_EXPLANATION,
    Halt,
    halt,
)
from claimcheck.services.query_builder import QueryBuilder
from claimcheck.services.verdict_synthesizer import VerdictSynthesizer
from claimcheck.services.wikidata import WikidataClient

logger = logging.getLogger(__name__)


@dataclass
class PipelineRun:
    """Intermediate state tracked through a single run."""

    claim: str
    stage: PipelineStage = PipelineStage.INIT

    decomposition: Optional[Decomposition] = None
    query: Optional[str] = None
    evidence: Optional[list[dict[str, Any]]] = None

    def finish(self, outcome: Outcome, result: VerificationResult) -> VerificationTrace:
        return VerificationTrace(
            claim=self.claim,
            stage=self.stage,
            outcome=outcome,
            decomposition=self.decomposition,
            query=self.query,
            evidence_count=len(self.evidence or []),
            result=result,
        )


class VerificationPipeline:
    """
    Runs claim extraction, query building, evidence fetching and verdict
    synthesis in order, stopping at the first stage that halts.

    The oracle and Wikidata client are injected, so tests can pass doubles
    and concurrent runs can share one pipeline.
    """

    def __init__(
        self,
        oracle: BaseOracle,
        client: WikidataClient,
        glossary: Optional[Glossary] = None,
        evidence_limit: Optional[int] = None,
    ):
        self.extractor = ClaimExtractor(oracle, glossary)
        self.query_builder = QueryBuilder(oracle, glossary)
        self.fetcher = EvidenceFetcher(client)
        self.synthesizer = VerdictSynthesizer(oracle, evidence_limit)

    async def verify(self, claim: str) -> VerificationResult:
        """Verify a claim. Always returns a result, never raises."""
        trace = await self.run(claim)
        return trace.result

    async def run(self, claim: str) -> VerificationTrace:
        """
        Verify a claim and report how far the pipeline got.

        Returns:
            VerificationTrace whose `result` is the VerificationResult
        """
        logger.info(f"Pipeline starting: '{claim}'")
        run = PipelineRun(claim=claim)

        try:
            trace = await self._run_stages(run)
        except Exception:
            logger.exception(f"Pipeline crashed at stage {run.stage.value}")
            failure = halt(Outcome.INTERNAL_ERROR, INTERNAL_ERROR_EXPLANATION)
            trace = run.finish(failure.outcome, failure.result)

        logger.info(
            f"Pipeline complete: outcome={trace.outcome.value}, stage={trace.stage.value}, "
            f"verified={trace.result.verified}, confidence={trace.result.confidence}"
        )
        return trace

    async def _run_stages(self, run: PipelineRun) -> VerificationTrace:
        # Stage 1: Extraction
        extracted = await self.extractor.extract(run.claim)
        if isinstance(extracted, Halt):
            return run.finish(extracted.outcome, extracted.result)
        run.decomposition = extracted.value
        run.stage = PipelineStage.EXTRACTED

        # Stage 2: Query (never halts)
        run.query = await self.query_builder.build(run.claim, run.decomposition)
        run.stage = PipelineStage.QUERY_BUILT

        # Stage 3: Evidence
        fetched = await self.fetcher.fetch(run.query)
        if isinstance(fetched, Halt):
            return run.finish(fetched.outcome, fetched.result)
        run.evidence = fetched.value
        run.stage = PipelineStage.EVIDENCE_FETCHED

        # Stage 4: Synthesis
        synthesized = await self.synthesizer.synthesize(
            run.claim, run.decomposition, run.evidence
        )
        if isinstance(synthesized, Halt):
            return run.finish(synthesized.outcome, synthesized.result)
        run.stage = PipelineStage.SYNTHESIZED

        return run.finish(Outcome.VERDICT, synthesized.value)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

async def run_verification(claim: str) -> VerificationTrace:
    """
    Run the pipeline with default OpenAI and Wikidata clients, closing
    both afterwards.
    """
    oracle = OpenAIOracle()
    client = WikidataClient()
    try:
        pipeline = VerificationPipeline(oracle=oracle, client=client)
        return await pipeline.run(claim)
    finally:
        await client.close()
        await oracle.close()


async def verify_claim(claim: str) -> VerificationResult:
    """
    Convenience function to verify a single claim.

    Example:
        result = await verify_claim("Tokyo is the capital of Japan")
        print(result.verified, result.confidence, result.explanation)
    """
    trace = await run_verification(claim)
    return trace.result
