from typing import Callable

import httpx
import pytest

from claimcheck.models.schemas import Decomposition, QueryDirection
from claimcheck.services.glossary import load_glossary
from claimcheck.services.wikidata import WikidataClient

from fakes import TOKYO_DECOMPOSITION


@pytest.fixture
def glossary():
    return load_glossary()


@pytest.fixture
def tokyo_decomposition() -> Decomposition:
    return Decomposition.model_validate(TOKYO_DECOMPOSITION)


@pytest.fixture
def einstein_decomposition() -> Decomposition:
    return Decomposition(
        subject="Albert Einstein",
        property="place of birth",
        object="Ulm",
        query_direction=QueryDirection.SUBJECT,
        property_code="P19",
        subject_entity_id="Q937",
    )


@pytest.fixture
def recording_handler():
    """
    Factory for a MockTransport handler that records each request and
    answers with a fixed response (or raises a fixed error).

    Usage:
        handler = recording_handler(httpx.Response(200, json={...}))
        ...
        assert len(handler.requests) == 1
    """
    def factory(response: httpx.Response | Exception):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if isinstance(response, Exception):
                raise response
            return response

        handler.requests = requests
        return handler

    return factory


@pytest.fixture
def wikidata_client() -> Callable[..., WikidataClient]:
    """Factory for a WikidataClient whose HTTP layer is a handler function."""
    def factory(handler) -> WikidataClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return WikidataClient(
            endpoint="https://query.wikidata.org/sparql",
            user_agent="claimcheck-tests/1.0",
            client=http,
        )

    return factory
