"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import pytest

from meal_planner.adapters.openai_chat_client import OpenAIChatClient
from meal_planner.adapters.proxy_chat_client import (
    HttpxProxyChatClient,
    StaticTokenProvider,
)
from meal_planner.adapters.recipe_client import HttpxRecipeClient
from meal_planner.domain.llm import ChatMessage, ChatRequest
from meal_planner.errors import ConfigurationError, InvalidResponseFormatError

REQUEST = ChatRequest(
    model="gpt-3.5-turbo",
    messages=(ChatMessage("system", "Be brief"), ChatMessage("user", "Hi")),
    temperature=0.8,
    max_tokens=800,
)


class _FakeUsage:
    def model_dump(self) -> dict[str, int]:
        return {"total_tokens": 42}


class _FakeCompletions:
    def __init__(self, content: str | None) -> None:
        self.content = content
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        message = type("Message", (), {"content": self.content})()
        choice = type("Choice", (), {"message": message})()
        return type("Resp", (), {"choices": [choice], "usage": _FakeUsage()})()


class _FakeOpenAI:
    def __init__(self, content: str | None) -> None:
        self.chat = type("Chat", (), {"completions": _FakeCompletions(content)})()


def test_openai_chat_client_returns_content() -> None:
    fake = _FakeOpenAI('["step"]')
    client = OpenAIChatClient(client=fake)

    response = asyncio.run(client.complete(REQUEST))

    assert response.content == '["step"]'
    assert response.usage == {"total_tokens": 42}
    payload = fake.chat.completions.last_payload
    assert payload["model"] == "gpt-3.5-turbo"
    assert payload["max_tokens"] == 800
    assert payload["messages"][1] == {"role": "user", "content": "Hi"}


def test_openai_chat_client_rejects_empty_content() -> None:
    client = OpenAIChatClient(client=_FakeOpenAI(None))

    with pytest.raises(InvalidResponseFormatError):
        asyncio.run(client.complete(REQUEST))


def test_proxy_chat_client_unwraps_envelope() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={"success": True, "data": "[]", "usage": {"total_tokens": 7}},
        )

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = HttpxProxyChatClient(
        base_url="https://functions.test",
        token_provider=StaticTokenProvider("user-token"),
        http_client=async_client,
    )

    response = asyncio.run(client.complete(REQUEST))

    assert response.content == "[]"
    assert response.usage == {"total_tokens": 7}
    assert seen[0].url.path == "/openAIProxy"
    assert seen[0].headers["Authorization"] == "Bearer user-token"
    assert json.loads(seen[0].content)["temperature"] == 0.8


def test_proxy_chat_client_requires_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("proxy should not be called")

    client = HttpxProxyChatClient(
        base_url="https://functions.test",
        token_provider=StaticTokenProvider(None),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    with pytest.raises(ConfigurationError):
        asyncio.run(client.complete(REQUEST))


def test_proxy_chat_client_rejects_failed_envelope() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": False, "error": "nope"})

    client = HttpxProxyChatClient(
        base_url="https://functions.test",
        token_provider=StaticTokenProvider("token"),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    with pytest.raises(InvalidResponseFormatError):
        asyncio.run(client.complete(REQUEST))


def test_proxy_chat_client_raises_http_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"error": "busy"})

    client = HttpxProxyChatClient(
        base_url="https://functions.test",
        token_provider=StaticTokenProvider("token"),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    with pytest.raises(httpx.HTTPStatusError) as exc_info:
        asyncio.run(client.complete(REQUEST))

    assert exc_info.value.response.status_code == 503


def test_recipe_client_instructions_and_details() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["apiKey"] == "key"
        if request.url.path.endswith("/analyzedInstructions"):
            return httpx.Response(
                200,
                json=[
                    {"steps": [{"step": "Boil water."}, {"step": " "}]},
                    {"steps": [{"step": "Add pasta."}]},
                ],
            )
        return httpx.Response(
            200,
            json={
                "id": 716429,
                "title": "Pasta with Garlic",
                "summary": "A <b>quick</b> pasta.",
                "preparationMinutes": 10,
                "cookingMinutes": 15,
                "servings": 2,
                "extendedIngredients": [
                    {
                        "name": "garlic",
                        "amount": 3,
                        "unit": "cloves",
                        "aisle": "Produce",
                    }
                ],
            },
        )

    client = HttpxRecipeClient(
        api_key="key",
        base_url="https://api.test",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    steps = asyncio.run(client.get_recipe_instructions("716429"))
    recipe = asyncio.run(client.get_recipe_by_id("716429"))

    assert steps == ["Boil water.", "Add pasta."]
    assert recipe.id == "716429"
    assert recipe.description == "A quick pasta."
    assert recipe.cook_time == 15
    assert recipe.ingredients[0].category == "produce"
    assert recipe.ingredients[0].estimated_price == 0.0
