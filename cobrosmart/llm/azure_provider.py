"""Azure OpenAI LLM provider using LangChain."""

import logging

from langchain_core.messages import HumanMessage
from langchain_openai import AzureChatOpenAI

from .base import BaseLLMProvider, LLMResponse, require_prompt, text_from_message, usage_from_message

logger = logging.getLogger(__name__)


class AzureOpenAIProvider(BaseLLMProvider):
    """Azure OpenAI deployment accessed through LangChain.

    The deployment name doubles as the model identifier recorded in the
    message cache.
    """

    def __init__(
        self,
        endpoint: str = None,
        api_key: str = None,
        deployment: str = None,
        api_version: str = "2024-10-21",
    ):
        missing = [
            name
            for name, value in (
                ("AZURE_OPENAI_ENDPOINT", endpoint),
                ("AZURE_OPENAI_API_KEY", api_key),
                ("AZURE_OPENAI_DEPLOYMENT_NAME", deployment),
            )
            if not value
        ]
        if missing:
            raise ValueError(f"{', '.join(missing)} not provided (set via environment or .env file)")

        self.endpoint = endpoint
        self.api_key = api_key
        self.api_version = api_version
        self._deployment = deployment

        logger.info(f"Initialized Azure OpenAI provider with deployment: {self._deployment}")

    @property
    def provider_name(self) -> str:
        return "azure"

    @property
    def model_name(self) -> str:
        return self._deployment

    async def complete(
        self,
        prompt: str,
        temperature: float = 0.7,
        top_p: float = 1.0,
        max_tokens: int = 256,
    ) -> LLMResponse:
        """Generate completion against the configured Azure deployment."""
        prompt = require_prompt(prompt)

        client = AzureChatOpenAI(
            azure_endpoint=self.endpoint,
            api_key=self.api_key,
            api_version=self.api_version,
            azure_deployment=self._deployment,
            temperature=temperature,
            top_p=top_p,
            max_tokens=max_tokens,
            max_retries=0,
        )

        logger.debug(
            "Calling Azure OpenAI: deployment=%s, temperature=%s, top_p=%s",
            self._deployment,
            temperature,
            top_p,
        )

        response = await client.ainvoke([HumanMessage(content=prompt)])
        usage = usage_from_message(response)

        logger.debug(f"Azure OpenAI response: tokens={usage['total_tokens']}")

        return LLMResponse(
            content=text_from_message(response),
            model=self._deployment,
            provider="azure",
            usage=usage,
            raw_response={"response_metadata": response.response_metadata}
            if hasattr(response, "response_metadata")
            else None,
        )
