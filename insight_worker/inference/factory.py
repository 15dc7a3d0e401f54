from typing import ClassVar

from insight_worker.config.settings import Settings
from insight_worker.inference.client import InferenceClient
from insight_worker.inference.client_base import BaseInferenceClient
from insight_worker.inference.example_client_adapter import ExampleClientAdapter
from insight_worker.inference.openai_client_adapter import OpenAIClientAdapter
from insight_worker.inference.retry import RetryPolicy


class InferenceClientFactory:
    """Creates the configured inference client with its retry policy."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(cls, settings: Settings) -> InferenceClient:
        """Create a configured inference client from application settings."""
        return InferenceClient(
            cls.create_adapter(settings),
            cls.retry_policy(settings),
            default_model=settings.text_model_name,
        )

    @classmethod
    def create_adapter(cls, settings: Settings) -> BaseInferenceClient:
        provider = settings.inference_provider.lower()
        if provider == "example":
            return ExampleClientAdapter()
        return OpenAIClientAdapter(
            api_key=cls._resolve_api_key(provider, settings),
            timeout_seconds=settings.inference_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
        )

    @classmethod
    def retry_policy(cls, settings: Settings) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=settings.inference_max_attempts,
            delay_seconds=settings.inference_retry_delay_ms / 1000,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = settings.inference_openai_compatible_base_url.strip()
            if not url:
                raise ValueError(
                    "inference_openai_compatible_base_url is required for "
                    "inference_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(
            f"Unknown inference provider '{provider}'. Choose from: {supported}"
        )

    @classmethod
    def _resolve_api_key(cls, provider: str, settings: Settings) -> str:
        key_map = {
            "openai": settings.inference_openai_api_key,
            "openai_compatible": settings.inference_openai_compatible_api_key,
            "openrouter": settings.inference_openrouter_api_key,
            "groq": settings.inference_groq_api_key,
            "together": settings.inference_together_api_key,
            "deepseek": settings.inference_deepseek_api_key,
            "ollama": settings.inference_ollama_api_key,
        }
        return key_map.get(provider, "") or ""
