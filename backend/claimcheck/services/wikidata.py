"""
Wikidata Query Service client.

WHAT THIS DOES:
Runs SPARQL queries against Wikidata (100M+ items of structured facts) and
returns the result rows.

HOW IT WORKS:
The Query Service takes a GET request with the query URL-encoded in the
`query` parameter and returns SPARQL JSON results:

    {
      "head": {"vars": ["capital", "capitalLabel"]},
      "results": {
        "bindings": [
          {
            "capital": {"type": "uri", "value": "http://www.wikidata.org/entity/Q1490"},
            "capitalLabel": {"type": "literal", "xml:lang": "en", "value": "Tokyo"}
          }
        ]
      }
    }

Each binding row is passed on untouched; this client doesn't interpret them.

USAGE POLICY:
Wikidata blocks requests without a descriptive User-Agent, so one is always
sent (SPARQL_USER_AGENT).

USAGE:
    client = WikidataClient()
    rows = await client.query("SELECT ?x WHERE { wd:Q17 wdt:P36 ?x }")
    await client.close()
"""

import logging
from typing import Any, Optional

import httpx

from claimcheck.config import get_settings

logger = logging.getLogger(__name__)

SPARQL_RESULTS_JSON = "application/sparql-results+json"


class KnowledgeSourceError(Exception):
    """The endpoint answered, but not with SPARQL JSON results."""


class WikidataClient:
    """
    Async client for the Wikidata SPARQL endpoint.

    One GET per query. No retries and no rate limiting: the pipeline makes a
    single call per verification.
    """

    def __init__(
        self,
        endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        settings = get_settings()
        self.endpoint = endpoint or settings.sparql_endpoint
        self.timeout = timeout if timeout is not None else settings.sparql_timeout
        self.user_agent = user_agent or settings.sparql_user_agent

        # An injected client belongs to the caller and is not closed here
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client (lazy initialization)."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def query(self, sparql: str) -> list[dict[str, Any]]:
        """
        Execute a SPARQL query and return its binding rows.

        Args:
            sparql: The query text (URL-encoded by httpx)

        Returns:
            Binding rows in endpoint order. May be empty.

        Raises:
            httpx.HTTPError: network failure, timeout, or non-2xx status
            KnowledgeSourceError: body isn't SPARQL JSON results
        """
        client = await self._get_client()

        response = await client.get(
            self.endpoint,
            params={"query": sparql, "format": "json"},
            headers={
                "Accept": SPARQL_RESULTS_JSON,
                "User-Agent": self.user_agent,
            },
        )
        response.raise_for_status()

        try:
            data = response.json()
        except ValueError as e:
            raise KnowledgeSourceError(f"Response is not JSON: {e}") from e

        bindings = self._extract_bindings(data)
        logger.info(f"Wikidata query returned {len(bindings)} rows")
        return bindings

    def _extract_bindings(self, data: Any) -> list[dict[str, Any]]:
        """Pull results.bindings out of a SPARQL JSON document."""
        if not isinstance(data, dict):
            raise KnowledgeSourceError("Response is not a JSON object")

        results = data.get("results")
        if not isinstance(results, dict) or "bindings" not in results:
            raise KnowledgeSourceError("Response has no results.bindings")

        bindings = results["bindings"]
        if not isinstance(bindings, list):
            raise KnowledgeSourceError("results.bindings is not a list")

        return bindings

    async def close(self):
        """Close the HTTP client (call when done)."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None


# =============================================================================
# MODULE-LEVEL CONVENIENCE FUNCTION
# =============================================================================

async def run_sparql(sparql: str) -> list[dict[str, Any]]:
    """
    Run one query without managing client lifecycle.

    Example:
        rows = await run_sparql("SELECT ?x WHERE { wd:Q17 wdt:P36 ?x }")
    """
    client = WikidataClient()
    try:
        return await client.query(sparql)
    finally:
        await client.close()
