"""
OpenAI chat completion model client
"""

import os
import time

import openai
from openai import OpenAI

from truecheck_core.domain.errors import ProviderError
from truecheck_core.domain.value_objects import ModelResponse
from truecheck_core.infrastructure.model_clients.base import ModelClient, RetryMixin


class OpenAIClient(RetryMixin, ModelClient):
    """Client using the OpenAI chat completions API in JSON mode"""

    def __init__(
        self,
        model_name: str,
        api_key: str | None = None,
        base_url: str | None = None,
        temperature: float = 0.0,
        seed: int | None = 42,
        max_tokens: int = 800,
        timeout_seconds: float = 25.0,
        max_retries: int = 1,
        json_mode: bool = True,
    ):
        """
        Args:
            model_name: Model name (e.g. gpt-4o-mini)
            api_key: OpenAI API key (falls back to OPENAI_API_KEY if not specified)
            base_url: Alternative endpoint for OpenAI-compatible servers
            temperature: Sampling temperature (0 for deterministic verdicts)
            seed: Fixed sampling seed, or None to let the provider choose
            max_tokens: Maximum number of output tokens
            timeout_seconds: Hard wall-clock budget per request
            max_retries: Total attempts including the first one (default: 1)
            json_mode: Ask the API for a JSON object response
        """
        self.model_name = model_name
        self.temperature = temperature
        self.seed = seed
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.json_mode = json_mode

        api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("OPENAI_API_KEY is not set")

        # Retries are handled by RetryMixin so the timeout stays a hard budget
        self.client = OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
            max_retries=0,
        )

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
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        kwargs = {
            "model": self.model_name,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        if self.seed is not None:
            kwargs["seed"] = self.seed
        if self.json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        def _call():
            start_time = time.time()
            response = self.client.chat.completions.create(**kwargs)
            end_time = time.time()

            latency_ms = int((end_time - start_time) * 1000)
            content = response.choices[0].message.content if response.choices else None
            if not content:
                raise ProviderError(f"Empty response from {self.model_name}")

            # Retrieve token usage
            input_tokens = 0
            output_tokens = 0
            if response.usage:
                input_tokens = response.usage.prompt_tokens or 0
                output_tokens = response.usage.completion_tokens or 0

            return ModelResponse(
                output=content.strip(),
                latency_ms=latency_ms,
                model_name=self.model_name,
                input_tokens=input_tokens,
                output_tokens=output_tokens,
            )

        try:
            return self._with_retry(
                _call,
                retryable_exceptions=(
                    openai.APIConnectionError,
                    openai.RateLimitError,
                    openai.InternalServerError,
                ),
            )
        except openai.APIError as e:
            raise ProviderError(f"OpenAI request failed: {type(e).__name__}: {e}") from e
