"""
SPARQL Query Builder Service.

WHAT THIS DOES:
Converts a claim Decomposition into a single SPARQL query for the Wikidata
Query Service.

WHY THIS MATTERS:
Wikidata answers structured questions, not sentences. The query has to start
from the right entity and follow the right property, otherwise a true claim
comes back with zero rows.

EXAMPLE:
    Decomposition: subject="Tokyo", object="Japan", queryDirection="object",
                   propertyCode="P36", objectEntityId="Q17"
    Output:
        SELECT ?capital ?capitalLabel WHERE {
          wd:Q17 wdt:P36 ?capital .
          SERVICE wikibase:label { bd:serviceParam wikibase:language "en". }
        }

HOW IT WORKS:
1. Sends the claim, the decomposition and few-shot examples to the oracle
2. The example for the decomposition's property code is listed first
3. Strips code fences from the reply
4. Forwards the text as-is

NO VALIDATION:
The query is not checked before it is sent. A malformed query shows up
downstream as an HTTP error or an empty result, the same way a missing fact
does. This stage never stops the pipeline.

USAGE:
    builder = QueryBuilder(oracle)
    query = await builder.build(claim, decomposition)
"""

import json
import logging
from typing import Optional

from claimcheck.models.schemas import Decomposition, Glossary, QueryDirection
from claimcheck.services.glossary import get_glossary, render_query_examples
from claimcheck.services.oracle import BaseOracle, OracleError
from claimcheck.services.parsing import strip_code_fences

logger = logging.getLogger(__name__)

QUERY_PROMPT = """You are a SPARQL query generator for the Wikidata Query Service.

The user gave the following claim: "{claim}"

It has been decomposed as:
{decomposition}

{direction_hint}

RULES:
1. Write exactly ONE SELECT query using the wd: and wdt: prefixes (they are predefined)
2. Always include SERVICE wikibase:label {{ bd:serviceParam wikibase:language "en". }} so results carry English labels
3. Select both the value and its label (e.g. ?capital ?capitalLabel)
4. Prefer entity IDs over label matching when IDs are known
5. If an entity ID is unknown, match it by English label with rdfs:label "Name"@en
6. Keep the query simple — no OPTIONAL blocks unless necessary, LIMIT 10 when matching labels
7. Output ONLY the query, no explanation

EXAMPLES:
{examples}

Generate the SPARQL query for the claim above:"""

DIRECTION_HINTS = {
    QueryDirection.SUBJECT: (
        "Query from the SUBJECT side: start at the subject entity, follow the "
        "property, and return its value(s) so they can be compared with the object."
    ),
    QueryDirection.OBJECT: (
        "Query from the OBJECT side: start at the object entity (the containing "
        "entity), follow the property, and return its value(s) so they can be "
        "compared with the subject."
    ),
}


class QueryBuilder:
    """
    Generates a SPARQL query from a claim decomposition.

    Pipeline position:
    Decomposition → [QueryBuilder] → Query → WikidataClient → Evidence → ...
    """

    def __init__(self, oracle: BaseOracle, glossary: Optional[Glossary] = None):
        self.oracle = oracle
        self.glossary = glossary or get_glossary()

    def build_prompt(self, claim: str, decomposition: Decomposition) -> str:
        return QUERY_PROMPT.format(
            claim=claim,
            decomposition=json.dumps(
                decomposition.model_dump(by_alias=True, mode="json"), indent=2
            ),
            direction_hint=DIRECTION_HINTS[decomposition.query_direction],
            examples=render_query_examples(self.glossary, decomposition.property_code),
        )

    async def build(self, claim: str, decomposition: Decomposition) -> str:
        """
        Generate a SPARQL query.

        Returns:
            The fence-stripped query text. If the oracle fails, an empty
            string, which the endpoint will reject downstream.
        """
        try:
            raw = await self.oracle.complete(self.build_prompt(claim, decomposition))
        except OracleError as e:
            logger.error(f"SPARQL query generation failed: {e}. Forwarding empty query.")
            return ""

        query = strip_code_fences(raw)
        logger.info(f"Generated SPARQL query ({len(query)} chars): {query[:120]!r}")
        return query
