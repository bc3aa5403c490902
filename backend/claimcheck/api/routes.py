"""
API Routes — HTTP access to the verification pipeline.

ENDPOINTS:
- POST /api/verify        → claim → VerificationResult
- POST /api/verify/trace  → claim → VerificationTrace (result + stage reached, query)
- GET  /api/glossary      → the grounding glossary currently in use

Both verify endpoints always answer 200 with a well-formed result once the
request body validates; pipeline failures are reported inside the result
(verified=false, low confidence), not as HTTP errors.
"""

import logging
from typing import AsyncIterator

from fastapi import APIRouter, Depends

from claimcheck.models.schemas import (
    Glossary,
    VerificationResult,
    VerificationTrace,
    VerifyRequest,
)
from claimcheck.services.glossary import get_glossary
from claimcheck.services.oracle import OpenAIOracle
from claimcheck.services.pipeline import VerificationPipeline
from claimcheck.services.wikidata import WikidataClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])


async def get_pipeline() -> AsyncIterator[VerificationPipeline]:
    """Dependency that yields a pipeline and closes its clients afterwards."""
    oracle = OpenAIOracle()
    client = WikidataClient()
    try:
        yield VerificationPipeline(oracle=oracle, client=client, glossary=get_glossary())
    finally:
        await client.close()
        await oracle.close()


# =============================================================================
# VERIFICATION
# =============================================================================

@router.post("/verify", response_model=VerificationResult)
async def verify(
    request: VerifyRequest,
    pipeline: VerificationPipeline = Depends(get_pipeline),
) -> VerificationResult:
    """
    Verify a factual claim against Wikidata.

    Example:
        POST /api/verify
        {"claim": "Tokyo is the capital of Japan"}

        Returns {"verified": true, "confidence": 92,
                 "explanation": "Wikidata lists Tokyo as the capital of Japan.",
                 "source": "Wikidata"}
    """
    logger.info(f"Verifying claim: '{request.claim}'")
    return await pipeline.verify(request.claim)


@router.post("/verify/trace", response_model=VerificationTrace)
async def verify_with_trace(
    request: VerifyRequest,
    pipeline: VerificationPipeline = Depends(get_pipeline),
) -> VerificationTrace:
    """
    Verify a claim and include the decomposition, generated SPARQL and the
    stage the pipeline reached. Useful when a claim comes back with
    confidence 0 or 15 and you need to know whether the query was at fault.
    """
    return await pipeline.run(request.claim)


# =============================================================================
# GLOSSARY
# =============================================================================

@router.get("/glossary", response_model=Glossary)
async def glossary() -> Glossary:
    """Return the grounding glossary (version + tables) used in prompts."""
    return get_glossary()
