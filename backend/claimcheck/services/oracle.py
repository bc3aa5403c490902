"""
Oracle — the text-completion service behind every LLM-assisted stage.

WHAT THIS IS:
An abstract interface (prompt in, text out) plus the default OpenAI-backed
implementation. Pipeline stages receive an oracle in their constructor
instead of building a client themselves, so tests can hand them a fake that
returns canned text without touching the network.

CONTRACT:
- complete() returns free text. It may be fenced (```json ... ```) or not,
  and the structured content inside may be malformed. Callers must cope.
- Transport problems (network, auth, rate limit, timeout) raise OracleError.

NO RETRIES:
The OpenAI client is created with max_retries=0. A verification run makes
at most three oracle calls, each bounded by ORACLE_TIMEOUT.

USAGE:
    oracle = OpenAIOracle()
    text = await oracle.complete("Decompose this claim: ...")
    await oracle.close()
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from claimcheck.config import get_settings

logger = logging.getLogger(__name__)


class OracleError(Exception):
    """The oracle could not produce a completion."""


class BaseOracle(ABC):
    """
    Abstract base class for text-completion oracles.

    Implement this to plug in another model provider, or a test double.
    """

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """
        Send a prompt and return the raw response text.

        Raises:
            OracleError: if no completion could be obtained
        """
        pass

    async def close(self) -> None:
        """Release any underlying connections (no-op by default)."""
        return None


class OpenAIOracle(BaseOracle):
    """
    Oracle backed by OpenAI chat completions.

    The whole prompt goes in a single user message; the stages put all of
    their instructions in the prompt text itself.
    """

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
    ):
        settings = get_settings()
        self.client = client or AsyncOpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.oracle_timeout,
            max_retries=0,
        )
        self.model = model or settings.oracle_model
        self.temperature = (
            temperature if temperature is not None else settings.oracle_temperature
        )

    async def complete(self, prompt: str) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
            )
        except OpenAIError as e:
            logger.error(f"Oracle call to {self.model} failed: {e}")
            raise OracleError(str(e)) from e

        if not response.choices:
            raise OracleError(f"{self.model} returned no choices")

        content = response.choices[0].message.content or ""
        logger.debug(f"Oracle returned {len(content)} chars")
        return content

    async def close(self) -> None:
        await self.client.close()
