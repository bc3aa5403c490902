"""
Grounding glossary loader.

The glossary is a versioned table of common Wikidata entities, property
codes, direction rules and few-shot SPARQL examples. It is pasted into the
extraction and query prompts so the oracle uses real identifiers instead of
guessing them.

The bundled table lives in claimcheck/data/glossary.json. Point
GLOSSARY_PATH at another JSON file with the same shape to override it.
"""

import json
import logging
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Optional, Union

from claimcheck.config import get_settings
from claimcheck.models.schemas import Glossary

logger = logging.getLogger(__name__)

BUNDLED_GLOSSARY = "glossary.json"


def load_glossary(path: Optional[Union[str, Path]] = None) -> Glossary:
    """
    Load and validate a glossary file.

    Args:
        path: JSON file to load. None loads the bundled table.

    Raises:
        FileNotFoundError, json.JSONDecodeError, pydantic.ValidationError
        for a missing or malformed file. A broken glossary is a deployment
        error, so it is not swallowed.
    """
    if path:
        text = Path(path).read_text(encoding="utf-8")
        origin = str(path)
    else:
        text = (
            resources.files("claimcheck.data")
            .joinpath(BUNDLED_GLOSSARY)
            .read_text(encoding="utf-8")
        )
        origin = f"bundled {BUNDLED_GLOSSARY}"

    glossary = Glossary.model_validate(json.loads(text))
    logger.info(
        f"Loaded glossary {glossary.version} from {origin}: "
        f"{len(glossary.entities)} entities, {len(glossary.properties)} properties, "
        f"{len(glossary.query_examples)} query examples"
    )
    return glossary


@lru_cache
def get_glossary() -> Glossary:
    """Cached glossary, from GLOSSARY_PATH or the bundled default."""
    return load_glossary(get_settings().glossary_path or None)


# =============================================================================
# PROMPT RENDERING
# =============================================================================

def render_entities(glossary: Glossary) -> str:
    """One 'label: QID' line per entity."""
    return "\n".join(f"- {e.label}: {e.id}" for e in glossary.entities)


def render_properties(glossary: Glossary) -> str:
    return "\n".join(f"- {p.label}: {p.code}" for p in glossary.properties)


def render_direction_rules(glossary: Glossary) -> str:
    return "\n".join(f"{i}. {rule}" for i, rule in enumerate(glossary.direction_rules, 1))


def render_query_examples(glossary: Glossary, property_code: Optional[str] = None) -> str:
    """
    Format the few-shot SPARQL examples.

    Examples for `property_code` come first so the most relevant pattern is
    the one the oracle reads first.
    """
    examples = sorted(
        glossary.query_examples,
        key=lambda ex: ex.property_code != property_code,
    )
    blocks = [
        f"Claim: \"{ex.claim}\" (property {ex.property_code})\nQuery:\n{ex.query}"
        for ex in examples
    ]
    return "\n\n".join(blocks)
