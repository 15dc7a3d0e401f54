"""Offline completion client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseInferenceClient and register the provider in InferenceClientFactory.
"""

import json
from typing import ClassVar

from insight_worker.inference.client_base import BaseInferenceClient
from insight_worker.inference.models import MediaAttachment


class ExampleClientAdapter(BaseInferenceClient):
    """Example adapter that returns a fixed JSON answer.

    No network calls. Useful for local development and tests. The response
    carries a neutral value for every field the bundled prompts ask for, so
    each analyzer can normalize it.
    """

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "description": "example",
        "mood": "calm",
        "inferred_interests": [],
        "keywords": [],
        "insights": "",
        "mbti_type": "XXXX",
        "confidence": 50,
        "health_score": 50,
        "stability_score": 50,
        "summary": "",
    }

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
        _ = model, temperature, max_tokens, system_prompt, user_prompt, attachment
        return json.dumps(self.DEFAULT_RESPONSE)
