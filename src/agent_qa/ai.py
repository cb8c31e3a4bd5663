"""AI provider variants consumed by checking units.

The provider set is closed: a kind is chosen at configuration time and an
unsupported kind fails when the provider is built, never when it is invoked.
Inference itself lives outside Agent.QA; providers return an acknowledgement
of the prompt they were given.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from .errors import ConfigurationError


class AIProviderKind(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"


class AIProvider(Protocol):
    """Minimal completion contract shared by all provider variants."""

    kind: AIProviderKind
    model: str
    temperature: float

    async def complete(self, prompt: str) -> str:
        ...


@dataclass(slots=True)
class _AcknowledgingProvider:
    model: str
    temperature: float
    label = "AI"

    async def complete(self, prompt: str) -> str:
        return f"{self.label} response for: {prompt[:50]}..."


@dataclass(slots=True)
class OpenAIProvider(_AcknowledgingProvider):
    kind = AIProviderKind.OPENAI
    label = "OpenAI"


@dataclass(slots=True)
class AnthropicProvider(_AcknowledgingProvider):
    kind = AIProviderKind.ANTHROPIC
    label = "Anthropic"


@dataclass(slots=True)
class GeminiProvider(_AcknowledgingProvider):
    kind = AIProviderKind.GOOGLE
    label = "Gemini"


_PROVIDERS: dict[AIProviderKind, type[_AcknowledgingProvider]] = {
    AIProviderKind.OPENAI: OpenAIProvider,
    AIProviderKind.ANTHROPIC: AnthropicProvider,
    AIProviderKind.GOOGLE: GeminiProvider,
}


def build_ai_provider(
    kind: AIProviderKind | str, *, model: str = "gpt-4", temperature: float = 0.1
) -> AIProvider:
    """Construct the provider for ``kind`` or raise ``ConfigurationError``."""

    try:
        resolved = AIProviderKind(kind)
    except ValueError as exc:
        raise ConfigurationError(f"Unsupported AI provider: {kind}") from exc
    return _PROVIDERS[resolved](model=model, temperature=temperature)


__all__ = [
    "AIProvider",
    "AIProviderKind",
    "AnthropicProvider",
    "GeminiProvider",
    "OpenAIProvider",
    "build_ai_provider",
]
