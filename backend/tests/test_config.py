"""
Tests for environment-driven settings.
"""

import pytest
from pydantic import ValidationError

from claimcheck.config import Settings


def test_defaults(monkeypatch):
    for name in ("EVIDENCE_LIMIT", "SPARQL_ENDPOINT", "GLOSSARY_PATH"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.evidence_limit == 5
    assert settings.sparql_endpoint == "https://query.wikidata.org/sparql"
    assert settings.glossary_path == ""


def test_evidence_limit_from_environment(monkeypatch):
    monkeypatch.setenv("EVIDENCE_LIMIT", "3")

    assert Settings(_env_file=None).evidence_limit == 3


@pytest.mark.parametrize("value", ["0", "-1"])
def test_non_positive_evidence_limit_is_rejected(monkeypatch, value):
    monkeypatch.setenv("EVIDENCE_LIMIT", value)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
