"""Base text-generation provider abstraction."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from langchain_core.messages import BaseMessage
from pydantic import BaseModel


class LLMResponse(BaseModel):
    """Standardized LLM response across all providers."""

    content: str
    model: str
    provider: str  # "azure", "openai", "gemini"
    usage: Dict[str, int]  # prompt_tokens, completion_tokens, total_tokens
    raw_response: Optional[Dict[str, Any]] = None


class BaseLLMProvider(ABC):
    """Abstract base class for all text-generation providers."""

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        temperature: float = 0.7,
        top_p: float = 1.0,
        max_tokens: int = 256,
    ) -> LLMResponse:
        """
        Generate a completion for a single user prompt.

        Args:
            prompt: The full instruction text, sent as one user message
            temperature: Sampling temperature
            top_p: Nucleus sampling cutoff
            max_tokens: Maximum tokens in response

        Raises:
            ValueError: If the prompt is empty
        """
        pass

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return provider name (azure, openai, gemini)."""
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return current model or deployment name."""
        pass


def require_prompt(prompt: str) -> str:
    """Return the stripped prompt, rejecting empty input."""
    if not prompt or not prompt.strip():
        raise ValueError("Prompt must not be empty")
    return prompt.strip()


def usage_from_message(message: BaseMessage) -> Dict[str, int]:
    """Extract token usage from a LangChain AI message."""
    metadata = getattr(message, "usage_metadata", None) or {}
    return {
        "prompt_tokens": metadata.get("input_tokens", 0),
        "completion_tokens": metadata.get("output_tokens", 0),
        "total_tokens": metadata.get("total_tokens", 0),
    }


def text_from_message(message: BaseMessage) -> str:
    """Return message content as plain text (some providers return content blocks)."""
    content = message.content
    if isinstance(content, list):
        content = "".join(
            block.get("text", "") if isinstance(block, dict) else str(block) for block in content
        )
    return (content or "").strip()
