"""
Model client factory

Creates the appropriate client instance based on the model name.
"""

from __future__ import annotations

from truecheck_core.detector_config import LLMConfig, provider_for_model
from truecheck_core.infrastructure.model_clients.base import ModelClient
from truecheck_core.infrastructure.model_clients.claude import ClaudeClient
from truecheck_core.infrastructure.model_clients.gemini import GeminiClient
from truecheck_core.infrastructure.model_clients.openai_client import OpenAIClient


def create_client(config: LLMConfig) -> ModelClient:
    """
    Create the appropriate client based on the model name

    Args:
        config: LLMConfig (model, credentials, sampling and timeout settings)

    Returns:
        ModelClient: The appropriate client instance
    """
    provider = provider_for_model(config.model)

    if provider == "anthropic":
        return ClaudeClient(
            config.model,
            api_key=config.api_key,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout_seconds=config.timeout_seconds,
            max_retries=config.max_retries,
        )
    elif provider == "google":
        return GeminiClient(
            config.model,
            project_id=config.project_id,
            temperature=config.temperature,
            seed=config.seed,
            max_tokens=config.max_tokens,
            timeout_seconds=config.timeout_seconds,
            max_retries=config.max_retries,
        )
    else:
        return OpenAIClient(
            config.model,
            api_key=config.api_key,
            base_url=config.base_url,
            temperature=config.temperature,
            seed=config.seed,
            max_tokens=config.max_tokens,
            timeout_seconds=config.timeout_seconds,
            max_retries=config.max_retries,
        )
