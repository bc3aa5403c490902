# Pipeline data shapes and API schemas
from claimcheck.models.schemas import (
    Decomposition,
    Glossary,
    QueryDirection,
    Verdict,
    VerdictStatus,
    VerificationResult,
    VerificationTrace,
)

__all__ = [
    "Decomposition",
    "Glossary",
    "QueryDirection",
    "Verdict",
    "VerdictStatus",
    "VerificationResult",
    "VerificationTrace",
]
