"""Gemini LLM provider using LangChain."""

import logging

from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from .base import BaseLLMProvider, LLMResponse, require_prompt, text_from_message, usage_from_message

logger = logging.getLogger(__name__)


class GeminiProvider(BaseLLMProvider):
    """Gemini LLM provider using LangChain."""

    def __init__(self, api_key: str = None, model: str = None):
        if not api_key:
            raise ValueError("GEMINI_API_KEY not provided (set via environment or .env file)")
        if not model:
            raise ValueError("GEMINI_MODEL not provided")

        self.api_key = api_key
        self._model = model

        logger.info(f"Initialized Gemini provider with model: {self._model}")

    @property
    def provider_name(self) -> str:
        return "gemini"

    @property
    def model_name(self) -> str:
        return self._model

    async def complete(
        self,
        prompt: str,
        temperature: float = 0.7,
        top_p: float = 1.0,
        max_tokens: int = 256,
    ) -> LLMResponse:
        """Generate completion using Gemini via LangChain."""
        prompt = require_prompt(prompt)

        client = ChatGoogleGenerativeAI(
            model=self._model,
            google_api_key=self.api_key,
            temperature=temperature,
            top_p=top_p,
            max_output_tokens=max_tokens,
            max_retries=0,
        )

        logger.debug("Calling Gemini: model=%s, temperature=%s", self._model, temperature)

        response = await client.ainvoke([HumanMessage(content=prompt)])
        usage = usage_from_message(response)

        logger.debug(f"Gemini response: tokens={usage['total_tokens']}")

        return LLMResponse(
            content=text_from_message(response),
            model=self._model,
            provider="gemini",
            usage=usage,
            raw_response={"response_metadata": response.response_metadata}
            if hasattr(response, "response_metadata")
            else None,
        )
