"""
Evidence Fetcher Service.

Runs the generated query against Wikidata and decides whether the pipeline
continues:

- HTTP/network failure, or a body that isn't SPARQL JSON → stop, confidence 0
- zero rows → stop, confidence 15 ("nothing found", not "broken")
- one or more rows → continue to synthesis with every row
"""

import logging
from typing import Any

import httpx

from claimcheck.models.schemas import Outcome
from claimcheck.services.outcomes import (
    EMPTY_EVIDENCE_CONFIDENCE,
    FETCH_FAILED_EXPLANATION,
    NO_EVIDENCE_EXPLANATION,
    Proceed,
    StageOutcome,
    halt,
)
from claimcheck.services.wikidata import KnowledgeSourceError, WikidataClient

logger = logging.getLogger(__name__)


class EvidenceFetcher:
    """
    Pipeline position:
    Query → [EvidenceFetcher] → Evidence rows → VerdictSynthesizer → ...
    """

    def __init__(self, client: WikidataClient):
        self.client = client

    async def fetch(self, query: str) -> StageOutcome:
        try:
            rows: list[dict[str, Any]] = await self.client.query(query)
        except (httpx.HTTPError, KnowledgeSourceError) as e:
            logger.error(f"Error fetching from Wikidata: {e}")
            return halt(Outcome.FETCH_FAILED, FETCH_FAILED_EXPLANATION)

        if not rows:
            logger.warning("Wikidata returned no rows for the generated query")
            return halt(
                Outcome.NO_EVIDENCE,
                NO_EVIDENCE_EXPLANATION,
                confidence=EMPTY_EVIDENCE_CONFIDENCE,
            )

        return Proceed(rows)
