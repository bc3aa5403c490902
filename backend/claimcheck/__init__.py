"""Grounded claim verification: LLM-assisted fact checking against Wikidata."""

from claimcheck.models.schemas import VerificationResult, VerificationTrace
from claimcheck.services.pipeline import VerificationPipeline, verify_claim

__all__ = [
    "VerificationPipeline",
    "VerificationResult",
    "VerificationTrace",
    "verify_claim",
]
