"""Chat client that forwards requests through an authenticated HTTP proxy."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from meal_planner.domain.llm import ChatRequest, ChatResponse
from meal_planner.errors import ConfigurationError, InvalidResponseFormatError
from meal_planner.services.ai import LlmClient


class TokenProvider(Protocol):
    """Source of bearer tokens for the proxy."""

    async def get_token(self) -> str | None:
        """Return the current user's token, or None when signed out."""


@dataclass
class StaticTokenProvider(TokenProvider):
    """Token provider returning a fixed, preconfigured token."""

    token: str | None

    async def get_token(self) -> str | None:
        return self.token


@dataclass
class HttpxProxyChatClient(LlmClient):
    """LLM client posting chat payloads to ``{base_url}/openAIProxy``.

    The proxy answers ``{"success": true, "data": "<content>", "usage": {...}}``.
    A fresh token is requested before every call.
    """

    base_url: str
    token_provider: TokenProvider
    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls, base_url: str, token_provider: TokenProvider
    ) -> "HttpxProxyChatClient":
        """Create a proxy client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            token_provider=token_provider,
            http_client=httpx.AsyncClient(),
        )

    async def complete(self, request: ChatRequest) -> ChatResponse:
        """Forward the request and unwrap the proxy envelope."""
        token = await self.token_provider.get_token()
        if not token:
            raise ConfigurationError("User not authenticated")
        response = await self.http_client.post(
            f"{self.base_url}/openAIProxy",
            json=request.to_payload(),
            headers={"Authorization": f"Bearer {token}"},
            timeout=60,
        )
        response.raise_for_status()
        data = response.json()
        if not data.get("success") or not data.get("data"):
            raise InvalidResponseFormatError("Invalid response from AI proxy")
        return ChatResponse(content=str(data["data"]), usage=data.get("usage") or {})

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
