"""
Anthropic Claude model client
"""

import os
import time

import anthropic
from anthropic import Anthropic, APIConnectionError, RateLimitError, InternalServerError

from truecheck_core.domain.errors import ProviderError
from truecheck_core.domain.value_objects import ModelResponse
from truecheck_core.infrastructure.model_clients.base import ModelClient, RetryMixin


class ClaudeClient(RetryMixin, ModelClient):
    """Claude client using the Anthropic API"""

    def __init__(
        self,
        model_name: str,
        api_key: str | None = None,
        temperature: float = 0.0,
        max_tokens: int = 800,
        timeout_seconds: float = 25.0,
        max_retries: int = 1,
    ):
        """
        Args:
            model_name: Model name (e.g. claude-haiku-4-5-20251001)
            api_key: Anthropic API key (falls back to environment variable if not specified)
            temperature: Sampling temperature
            max_tokens: Maximum number of output tokens
            timeout_seconds: Hard wall-clock budget per request
            max_retries: Total attempts including the first one (default: 1)
        """
        self.model_name = model_name
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.max_retries = max_retries

        if not self.api_key:
            raise ValueError("ANTHROPIC_API_KEY is not set")

        self.client = Anthropic(api_key=self.api_key, timeout=timeout_seconds, max_retries=0)

    def generate(self, prompt: str, *, system_prompt: str | None = None) -> ModelResponse:
        """
        Send a prompt and retrieve the response

        Args:
            prompt: User prompt
            system_prompt: Optional system instruction

        Returns:
            ModelResponse: The model's response

        Raises:
            ProviderError: If every attempt failed or the response was empty
        """
        kwargs = {
            "model": self.model_name,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        def _call():
            start_time = time.time()
            response = self.client.messages.create(**kwargs)
            end_time = time.time()

            latency_ms = int((end_time - start_time) * 1000)
            texts = [block.text for block in response.content if getattr(block, "type", "") == "text"]
            output = "".join(texts).strip()
            if not output:
                raise ProviderError(f"Empty response from {self.model_name}")

            # Retrieve token usage
            input_tokens = getattr(response.usage, "input_tokens", 0) or 0
            output_tokens = getattr(response.usage, "output_tokens", 0) or 0

            return ModelResponse(
                output=output,
                latency_ms=latency_ms,
                model_name=self.model_name,
                input_tokens=input_tokens,
                output_tokens=output_tokens,
            )

        try:
            return self._with_retry(
                _call,
                retryable_exceptions=(APIConnectionError, RateLimitError, InternalServerError),
            )
        except anthropic.APIError as e:
            raise ProviderError(f"Anthropic request failed: {type(e).__name__}: {e}") from e
