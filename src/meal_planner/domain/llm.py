"""Chat completion request and response types."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ChatMessage:
    """Single role-tagged message."""

    role: str
    content: str


@dataclass(frozen=True)
class ChatRequest:
    """Model call with sampling parameters."""

    model: str
    messages: tuple[ChatMessage, ...]
    temperature: float = 0.7
    max_tokens: int = 2000
    top_p: float = 1.0
    frequency_penalty: float = 0.0
    presence_penalty: float = 0.0

    def to_payload(self) -> dict[str, object]:
        """Return the JSON body shared by the SDK and the proxy."""
        return {
            "model": self.model,
            "messages": [
                {"role": message.role, "content": message.content}
                for message in self.messages
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "top_p": self.top_p,
            "frequency_penalty": self.frequency_penalty,
            "presence_penalty": self.presence_penalty,
        }


@dataclass(frozen=True)
class ChatResponse:
    """Generated text with usage metadata."""

    content: str
    usage: dict[str, object] = field(default_factory=dict)
