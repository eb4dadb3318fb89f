"""
Gemini (Google GenAI SDK via Vertex AI) model client
"""

import os
import time

from google import genai
from google.genai import errors as genai_errors
from google.genai.types import GenerateContentConfig, HttpOptions

from truecheck_core.domain.errors import ProviderError
from truecheck_core.domain.value_objects import ModelResponse
from truecheck_core.infrastructure.model_clients.base import ModelClient, RetryMixin


class GeminiClient(RetryMixin, ModelClient):
    """Model client using Google GenAI SDK (via Vertex AI)"""

    def __init__(
        self,
        model_name: str,
        project_id: str | None = None,
        location: str | None = None,
        temperature: float = 0.0,
        seed: int | None = 42,
        max_tokens: int = 800,
        timeout_seconds: float = 25.0,
        max_retries: int = 1,
    ):
        """
        Args:
            model_name: Model name (e.g. gemini-2.5-flash)
            project_id: GCP project ID (falls back to environment variable if not specified)
            location: Region (defaults to global)
            temperature: Sampling temperature
            seed: Fixed sampling seed, or None
            max_tokens: Maximum number of output tokens
            timeout_seconds: Hard wall-clock budget per request
            max_retries: Total attempts including the first one (default: 1)
        """
        self.model_name = model_name
        self.project_id = project_id or os.environ.get("GCP_PROJECT_ID")
        self.location = location or "global"
        self.temperature = temperature
        self.seed = seed
        self.max_tokens = max_tokens
        self.max_retries = max_retries

        if not self.project_id:
            raise ValueError("GCP_PROJECT_ID is not set")

        # Timeout is configured via HttpOptions (milliseconds)
        self.client = genai.Client(
            vertexai=True,
            project=self.project_id,
            location=self.location,
            http_options=HttpOptions(timeout=int(timeout_seconds * 1000)),
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
        generation_config = GenerateContentConfig(
            temperature=self.temperature,
            seed=self.seed,
            max_output_tokens=self.max_tokens,
            system_instruction=system_prompt,
            response_mime_type="application/json",
        )

        def _call():
            start_time = time.time()
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=generation_config,
            )
            end_time = time.time()

            latency_ms = int((end_time - start_time) * 1000)
            if not response.text:
                raise ProviderError(f"Empty response from {self.model_name}")

            # Retrieve token usage
            input_tokens = 0
            output_tokens = 0
            if getattr(response, "usage_metadata", None):
                input_tokens = getattr(response.usage_metadata, "prompt_token_count", 0) or 0
                output_tokens = getattr(response.usage_metadata, "candidates_token_count", 0) or 0

            return ModelResponse(
                output=response.text.strip(),
                latency_ms=latency_ms,
                model_name=self.model_name,
                input_tokens=input_tokens,
                output_tokens=output_tokens,
            )

        try:
            return self._with_retry(_call, retryable_exceptions=(genai_errors.ServerError,))
        except genai_errors.APIError as e:
            raise ProviderError(f"Gemini request failed: {type(e).__name__}: {e}") from e
