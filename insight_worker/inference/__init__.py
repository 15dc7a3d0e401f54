from insight_worker.inference.client import InferenceClient
from insight_worker.inference.client_base import BaseInferenceClient
from insight_worker.inference.exceptions import (
    InferenceError,
    InferenceNetworkError,
    InferenceUnavailableError,
)
from insight_worker.inference.factory import InferenceClientFactory
from insight_worker.inference.models import MediaAttachment, PromptPayload
from insight_worker.inference.retry import RetryPolicy, retry_call

__all__ = [
    "BaseInferenceClient",
    "InferenceClient",
    "InferenceClientFactory",
    "InferenceError",
    "InferenceNetworkError",
    "InferenceUnavailableError",
    "MediaAttachment",
    "PromptPayload",
    "RetryPolicy",
    "retry_call",
]
