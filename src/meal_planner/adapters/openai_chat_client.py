"""OpenAI chat completions client."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from meal_planner.domain.llm import ChatRequest, ChatResponse
from meal_planner.errors import InvalidResponseFormatError
from meal_planner.services.ai import LlmClient


@dataclass
class OpenAIChatClient(LlmClient):
    """LLM client backed by the OpenAI chat completions API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIChatClient":
        """Create an OpenAI chat client."""
        return cls(client=AsyncOpenAI(api_key=api_key, max_retries=0))

    async def complete(self, request: ChatRequest) -> ChatResponse:
        """Call chat completions and return the first choice's text."""
        response = await self.client.chat.completions.create(**request.to_payload())
        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise InvalidResponseFormatError("Empty response from AI service")
        usage = response.usage.model_dump() if response.usage is not None else {}
        return ChatResponse(content=content, usage=usage)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
