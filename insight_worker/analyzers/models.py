from dataclasses import dataclass, field
from typing import Any, ClassVar


@dataclass
class Evidence:
    """Inputs gathered for one analysis, with their evidence-point count."""

    count: int
    data_sources: dict[str, int] = field(default_factory=dict)
    items: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class InsufficientData:
    """Analyzer outcome when the owner has too little data to analyze yet."""

    code: ClassVar[str] = "INSUFFICIENT_DATA"

    message: str
    evidence_count: int
    data_sources: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "evidence_count": self.evidence_count,
            "data_sources": dict(self.data_sources),
        }


AnalysisOutcome = dict[str, Any] | InsufficientData


def is_insufficient_payload(result: dict[str, Any] | None) -> bool:
    """True for a stored result that records an insufficient-data outcome."""
    return isinstance(result, dict) and result.get("error") == InsufficientData.code
