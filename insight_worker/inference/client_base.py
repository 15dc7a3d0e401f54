from abc import ABC, abstractmethod

from insight_worker.inference.models import MediaAttachment


class BaseInferenceClient(ABC):
    """Contract for provider-specific completion clients."""

    @abstractmethod
    def create_completion(
        self,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        system_prompt: str,
        user_prompt: str,
        attachment: MediaAttachment | None = None,
    ) -> str:
        """Return provider response as plain text."""
