class AnalyzerError(Exception):
    """Base exception for all analyzer errors."""


class InvalidPayloadError(AnalyzerError):
    """Raised when a record's payload cannot be analyzed (missing file, bad format, empty text)."""


class PromptTemplateError(AnalyzerError):
    """Raised when a bundled prompt template cannot be loaded."""


class UnknownAnalyzerError(AnalyzerError):
    """Raised when no analyzer is registered for a queue entry's analyzer type."""
