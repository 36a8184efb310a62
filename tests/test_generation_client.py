import asyncio

import httpx
import pytest

from memoraize.modules.generation.client import GenerationClient, GenerationError
from memoraize.modules.generation.models import GenerateRequest


def client_for(handler):
    return GenerationClient(
        "http://generation.test/api", transport=httpx.MockTransport(handler)
    )


def test_generate_posts_to_generate_endpoint(generation_client, generation_stub):
    cards = asyncio.run(generation_client.generate(GenerateRequest(data="Planets")))
    assert [c.back for c in cards] == ["True", "False", "True"]
    request = generation_stub.requests[-1]
    assert request.method == "POST"
    assert str(request.url) == "http://generation.test/api/generate"


def test_error_payload_raises():
    client = client_for(lambda r: httpx.Response(200, json={"error": "quota exceeded"}))
    with pytest.raises(GenerationError, match="quota exceeded"):
        asyncio.run(client.generate(GenerateRequest(data="x")))


def test_error_status_without_body_raises():
    client = client_for(lambda r: httpx.Response(502, json={}))
    with pytest.raises(GenerationError):
        asyncio.run(client.generate(GenerateRequest(data="x")))


def test_malformed_json_raises():
    client = client_for(lambda r: httpx.Response(200, content=b"<html>"))
    with pytest.raises(GenerationError):
        asyncio.run(client.generate(GenerateRequest(data="x")))


def test_missing_flashcards_raises():
    client = client_for(lambda r: httpx.Response(200, json={}))
    with pytest.raises(GenerationError):
        asyncio.run(client.generate(GenerateRequest(data="x")))


def test_transport_failure_raises():
    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(GenerationError):
        asyncio.run(client_for(unreachable).recommend_topic(["Bio"]))


def test_recommend_topic(generation_client, generation_stub):
    assert asyncio.run(generation_client.recommend_topic(["Bio", "Chem"])) == "Astronomy basics"
    assert generation_stub.requests[-1].url.params["topics"] == "Bio, Chem"
