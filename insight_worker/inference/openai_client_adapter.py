from typing import Any

import httpx
import openai

from insight_worker.inference.client_base import BaseInferenceClient
from insight_worker.inference.exceptions import InferenceError, InferenceNetworkError
from insight_worker.inference.models import MediaAttachment


class OpenAIClientAdapter(BaseInferenceClient):
    """Completion client adapter built on the OpenAI-compatible chat API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        # Retries are owned by InferenceClient; the SDK must not add its own.
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=0,
        )

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
        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
                messages=self._build_messages(system_prompt, user_prompt, attachment),
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise InferenceNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise InferenceNetworkError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise InferenceError("AI returned no choices")
        content = response.choices[0].message.content
        if not content:
            raise InferenceError("AI returned empty response")
        return content

    @staticmethod
    def _build_messages(
        system_prompt: str,
        user_prompt: str,
        attachment: MediaAttachment | None,
    ) -> list[dict[str, Any]]:
        messages: list[dict[str, Any]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        if attachment is None:
            messages.append({"role": "user", "content": user_prompt})
            return messages
        messages.append({
            "role": "user",
            "content": [
                {"type": "text", "text": user_prompt},
                {"type": "image_url", "image_url": {"url": attachment.data_url()}},
            ],
        })
        return messages
