"""
Claim Extractor Service.

WHAT THIS DOES:
Breaks a free-text claim into subject / property / object plus the Wikidata
identifiers needed to query it. This is the first stage of the pipeline.

WHY THIS MATTERS:
You can't query a sentence — you query an entity and a property.
"Tokyo is the capital of Japan" becomes "Japan (Q17) has capital (P36) ?x"
and the later stages check whether ?x is Tokyo.

EXAMPLE:
    Claim: "Tokyo is the capital of Japan"

    Decomposition:
        subject="Tokyo", property="capital", object="Japan",
        queryDirection="object", propertyCode="P36",
        subjectEntityId="Q1490", objectEntityId="Q17"

GROUNDING:
The prompt carries the glossary (common entities and property codes) and
the direction rules, so the oracle picks real IDs and the right side to
query from.

FAILURE:
If the reply can't be parsed as a Decomposition the pipeline stops with
confidence 0. No query is built and Wikidata is never called.

USAGE:
    extractor = ClaimExtractor(oracle)
    outcome = await extractor.extract("Tokyo is the capital of Japan")
"""

import logging
from typing import Optional

from claimcheck.models.schemas import Decomposition, Glossary, Outcome
from claimcheck.services.glossary import (
    get_glossary,
    render_direction_rules,
    render_entities,
    render_properties,
)
from claimcheck.services.oracle import BaseOracle, OracleError
from claimcheck.services.outcomes import (
    CLAIM_ORACLE_DOWN_EXPLANATION,
    UNPARSEABLE_CLAIM_EXPLANATION,
    Proceed,
    StageOutcome,
    halt,
)
from claimcheck.services.parsing import ParseFailure, parse_model

logger = logging.getLogger(__name__)

EXTRACTION_PROMPT = """You are a claim decomposition system that prepares factual claims for lookup in Wikidata.

The user gave the following claim: "{claim}"

Break it into a subject, a property and an object, and decide which side of the claim a Wikidata query should start from.

COMMON ENTITIES (label: Wikidata ID):
{entities}

COMMON PROPERTIES (label: property code):
{properties}

QUERY DIRECTION RULES:
{direction_rules}

RULES:
1. Use the IDs above when the claim mentions those entities or properties
2. If you know the Wikidata ID of an entity not listed, use it; otherwise use null
3. queryDirection must be exactly "subject" or "object"
4. Do not judge whether the claim is true — only decompose it
5. Output ONLY the JSON object, no explanation

OUTPUT FORMAT (JSON):
{{
  "subject": "Tokyo",
  "property": "capital",
  "object": "Japan",
  "queryDirection": "object",
  "reasoning": "Capital-of claims are checked by querying the country's capital.",
  "propertyCode": "P36",
  "subjectEntityId": "Q1490",
  "objectEntityId": "Q17"
}}"""


class ClaimExtractor:
    """
    Turns a claim into a Decomposition.

    Pipeline position:
    Claim → [ClaimExtractor] → Decomposition → QueryBuilder → ...
    """

    def __init__(self, oracle: BaseOracle, glossary: Optional[Glossary] = None):
        self.oracle = oracle
        self.glossary = glossary or get_glossary()

    def build_prompt(self, claim: str) -> str:
        return EXTRACTION_PROMPT.format(
            claim=claim,
            entities=render_entities(self.glossary),
            properties=render_properties(self.glossary),
            direction_rules=render_direction_rules(self.glossary),
        )

    async def extract(self, claim: str) -> StageOutcome:
        """
        Decompose a claim.

        Returns:
            Proceed(Decomposition) on success, or Halt with a confidence-0
            result if the oracle failed or its reply didn't parse.
        """
        logger.info(f"Extracting claim structure for: '{claim}'")

        try:
            raw = await self.oracle.complete(self.build_prompt(claim))
        except OracleError as e:
            logger.error(f"Claim extraction oracle call failed: {e}")
            return halt(Outcome.UNPARSEABLE_CLAIM, CLAIM_ORACLE_DOWN_EXPLANATION)

        parsed = parse_model(raw, Decomposition)
        if isinstance(parsed, ParseFailure):
            logger.error(
                f"Failed to parse claim decomposition: {parsed.reason}. "
                f"Raw response: {raw[:200]!r}"
            )
            return halt(Outcome.UNPARSEABLE_CLAIM, UNPARSEABLE_CLAIM_EXPLANATION)

        decomposition = parsed.value
        logger.info(
            f"Decomposed claim: subject='{decomposition.subject}', "
            f"property='{decomposition.property}' ({decomposition.property_code}), "
            f"object='{decomposition.object}', direction={decomposition.query_direction.value}"
        )
        return Proceed(decomposition)
