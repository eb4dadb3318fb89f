"""
Model client package

Provides a unified interface to each LLM provider.
"""

from truecheck_core.infrastructure.model_clients.base import ModelClient
from truecheck_core.infrastructure.model_clients.factory import create_client
from truecheck_core.domain.value_objects import ModelResponse

__all__ = ["ModelClient", "ModelResponse", "create_client"]
