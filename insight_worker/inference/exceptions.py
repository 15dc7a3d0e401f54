class InferenceError(Exception):
    """Raised when a completion cannot be obtained from the AI provider."""


class InferenceNetworkError(InferenceError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""


class InferenceUnavailableError(InferenceError):
    """Raised when every attempt against the AI provider has failed."""

    code = "INFERENCE_UNAVAILABLE"

    def __init__(self, message: str, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts
