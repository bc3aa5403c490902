from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # OpenAI (the language model oracle)
    openai_api_key: str = ""
    oracle_model: str = "gpt-4o-mini"
    # Low temperature keeps decompositions and queries consistent between runs
    oracle_temperature: float = 0.1
    # Seconds to wait for a single completion before giving up
    oracle_timeout: float = 30.0

    # Wikidata Query Service
    sparql_endpoint: str = "https://query.wikidata.org/sparql"
    sparql_timeout: float = 30.0
    # Wikidata rejects requests without a descriptive User-Agent
    sparql_user_agent: str = "claimcheck/0.1 (grounded claim verification)"

    # How many evidence rows the verdict synthesizer is allowed to see
    evidence_limit: int = Field(default=5, ge=1)

    # Grounding glossary
    # Empty string means "use the glossary bundled with the package"
    glossary_path: str = ""

    # API
    max_claim_length: int = 500
    cors_origins: list[str] = ["http://localhost:5173"]  # Vite default

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env")


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
