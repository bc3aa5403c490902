"""
Oracle Response Parsing.

WHAT THIS DOES:
Turns free text from the language model into validated pydantic objects.

WHY THIS EXISTS:
Model replies are untrusted. The same JSON may arrive bare, wrapped in
```json ... ```, wrapped in a tag-less ``` ... ```, or with a stray closing
fence. It may also be prose, truncated JSON, or JSON with the wrong fields.
Every stage that reads structured output needs the same handling, and none
of them should have to catch exceptions to find out it failed.

HOW IT WORKS:
1. strip_code_fences() removes every fence marker (with or without a
   language tag, any case) and surrounding whitespace
2. parse_model() decodes JSON and validates it against a pydantic model
3. The result is tagged: Parsed(value) or ParseFailure(reason)

USAGE:
    outcome = parse_model(raw_reply, Decomposition)
    if isinstance(outcome, ParseFailure):
        logger.error(f"Bad decomposition: {outcome.reason}")
    else:
        decomposition = outcome.value
"""

import json
import re
from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar("T", bound=BaseModel)

# An opening fence may carry a language tag (```json, ```SPARQL, ```py3).
# A word after a fence counts as a tag only if it is a known tag or ends the
# line; otherwise it is content (```SELECT ?x WHERE {...}```).
# A closing fence is the same pattern without the tag.
KNOWN_FENCE_TAGS = ("json", "sparql", "rq", "sql")
FENCE_PATTERN = re.compile(
    r"```[ \t]*(?:(?:" + "|".join(KNOWN_FENCE_TAGS) + r")\b"
    r"|[a-z][\w+-]*(?=[ \t]*(?:\r?\n|\Z)))?",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class Parsed(Generic[T]):
    """Successful parse."""
    value: T


@dataclass(frozen=True)
class ParseFailure:
    """Failed parse, with a short reason for logs."""
    reason: str


ParseOutcome = Parsed[T] | ParseFailure


def strip_code_fences(text: str) -> str:
    """
    Remove code-fence markers and surrounding whitespace.

    Works whether there is one pair of fences, none, or an unbalanced fence.
    Repeats until nothing changes, so applying it twice gives the same result
    as applying it once.

    Example:
        strip_code_fences('```json\\n{"a": 1}\\n```')  # -> '{"a": 1}'
        strip_code_fences('{"a": 1}')                   # -> '{"a": 1}'
    """
    cleaned = text
    while True:
        stripped = FENCE_PATTERN.sub("", cleaned)
        if stripped == cleaned:
            break
        cleaned = stripped
    return cleaned.strip()


def parse_model(raw: str, model: type[T]) -> ParseOutcome:
    """
    Fence-strip a raw oracle reply and validate it as `model`.

    Returns:
        Parsed(instance) on success, ParseFailure(reason) otherwise.
        Never raises for bad input.
    """
    if raw is None:
        return ParseFailure("empty response")

    cleaned = strip_code_fences(raw)
    if not cleaned:
        return ParseFailure("empty response")

    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        return ParseFailure(f"invalid JSON: {e.msg} at position {e.pos}")

    if not isinstance(payload, dict):
        return ParseFailure(f"expected a JSON object, got {type(payload).__name__}")

    try:
        return Parsed(model.model_validate(payload))
    except ValidationError as e:
        # Only the first few problems; a full pydantic dump is noisy in logs
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()[:3]
        )
        return ParseFailure(f"schema mismatch for {model.__name__}: {problems}")
