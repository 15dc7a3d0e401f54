import time
from collections.abc import Callable

from insight_worker.inference.client_base import BaseInferenceClient
from insight_worker.inference.exceptions import InferenceUnavailableError
from insight_worker.inference.models import PromptPayload
from insight_worker.inference.retry import RetryPolicy, retry_call
from insight_worker.logging.logger import Log


class InferenceClient:
    """Resilient wrapper around a single completion call.

    The response text is passed through untouched; interpreting it is the
    Response Normalizer's job.
    """

    def __init__(
        self,
        adapter: BaseInferenceClient,
        policy: RetryPolicy | None = None,
        *,
        default_model: str = "",
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._adapter = adapter
        self._policy = policy or RetryPolicy()
        self._default_model = default_model
        self._sleep = sleep

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def complete(self, payload: PromptPayload) -> str:
        """Return the raw completion text for ``payload``.

        Raises:
            InferenceUnavailableError: when every attempt has failed.
        """
        model = payload.model or self._default_model
        try:
            return retry_call(
                lambda: self._call(payload, model),
                self._policy,
                sleep=self._sleep,
                on_retry=self._log_retry,
            )
        except Exception as exc:
            Log.error(
                f"Inference failed after {self._policy.max_attempts} attempts: {exc}"
            )
            raise InferenceUnavailableError(
                str(exc) or type(exc).__name__,
                attempts=self._policy.max_attempts,
            ) from exc

    def _call(self, payload: PromptPayload, model: str) -> str:
        return self._adapter.create_completion(
            model=model,
            temperature=payload.temperature,
            max_tokens=payload.max_tokens,
            system_prompt=payload.system_prompt,
            user_prompt=payload.user_prompt,
            attachment=payload.attachment,
        )

    def _log_retry(self, attempt: int, exc: BaseException) -> None:
        Log.warning(
            f"Inference call failed ({attempt}/{self._policy.max_attempts}), "
            f"retrying in {self._policy.delay_seconds}s: {exc}"
        )
