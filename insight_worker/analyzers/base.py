from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any, ClassVar

from insight_worker.analyzers.models import (
    AnalysisOutcome,
    Evidence,
    InsufficientData,
    is_insufficient_payload,
)
from insight_worker.database.models import AnalyzableRecord
from insight_worker.database.repositories.base import BaseRecordStore
from insight_worker.inference.client import InferenceClient
from insight_worker.inference.models import PromptPayload
from insight_worker.logging.logger import Log
from insight_worker.normalization.response_normalizer import normalize_response


class BaseAnalyzer(ABC):
    """Contract shared by every analysis domain.

    ``analyze`` runs the common pipeline: gather inputs, enforce the minimum
    evidence count, build the prompt, call the inference client, normalize the
    response and apply the low-evidence confidence penalty. Subclasses supply
    the domain-specific steps.
    """

    analyzer_type: ClassVar[str]
    record_kind: ClassVar[str]
    confidence_fields: ClassVar[tuple[str, ...]] = ()
    insufficient_message: ClassVar[str] = (
        "Not enough data yet. Complete your profile and upload more files."
    )

    def __init__(
        self,
        store: BaseRecordStore,
        inference_client: InferenceClient,
        *,
        model: str = "",
        min_evidence: int = 1,
        reliable_evidence: int = 0,
        confidence_penalty: int = 0,
        confidence_floor: int = 30,
    ) -> None:
        self._store = store
        self._inference = inference_client
        self.model = model
        self.min_evidence = min_evidence
        self.reliable_evidence = reliable_evidence
        self.confidence_penalty = confidence_penalty
        self.confidence_floor = confidence_floor

    def analyze(self, record: AnalyzableRecord) -> AnalysisOutcome:
        """Produce a structured insight for ``record``.

        Returns:
            The normalized result, or InsufficientData when the evidence count
            is below ``min_evidence`` (no inference call is made then).

        Raises:
            InferenceUnavailableError: when the inference service is exhausted.
            InvalidPayloadError: when the record's payload cannot be analyzed.
        """
        evidence = self.gather_inputs(record)
        if evidence.count < self.min_evidence:
            Log.info(
                f"{self.analyzer_type} analysis for record {record.id}: "
                f"{evidence.count} evidence points, {self.min_evidence} required"
            )
            return InsufficientData(
                message=self.insufficient_message,
                evidence_count=evidence.count,
                data_sources=evidence.data_sources,
            )

        payload = self.build_prompt(evidence)
        Log.debug(f"{self.analyzer_type} prompt:\n{payload.user_prompt}")

        raw_response = self._inference.complete(payload)
        Log.debug(f"AI raw response:\n{raw_response}")

        result = normalize_response(raw_response, self.default_result_shape(evidence))
        result = self.apply_confidence_penalty(result, evidence.count)
        return self.finalize(result, evidence)

    @abstractmethod
    def gather_inputs(self, record: AnalyzableRecord) -> Evidence:
        """Collect the evidence this analysis is built from."""

    @abstractmethod
    def build_prompt(self, evidence: Evidence) -> PromptPayload:
        """Serialize the evidence into a prompt with output-format instructions."""

    @abstractmethod
    def default_result_shape(self, evidence: Evidence) -> dict[str, Any]:
        """Return a fully-populated result with empty or neutral values."""

    def apply_confidence_penalty(
        self, result: dict[str, Any], evidence_count: int
    ) -> dict[str, Any]:
        """Lower the confidence fields when evidence is below the reliable count.

        Scores are clamped to 0-100; a penalized score never drops below the
        confidence floor.
        """
        for field in self.confidence_fields:
            value = result.get(field)
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                continue
            score = max(0, min(100, round(value)))
            if evidence_count < self.reliable_evidence:
                score = max(score - self.confidence_penalty, self.confidence_floor)
            result[field] = score
        return result

    def finalize(self, result: dict[str, Any], evidence: Evidence) -> dict[str, Any]:
        """Attach derived fields to the normalized result."""
        return result


def usable_results(records: Iterable[AnalyzableRecord]) -> list[AnalyzableRecord]:
    """Drop records without a result or whose result is an insufficient-data outcome."""
    return [
        r for r in records
        if isinstance(r.result, dict) and not is_insufficient_payload(r.result)
    ]


def unique(values: Iterable[Any]) -> list[Any]:
    """Deduplicate while keeping first-seen order."""
    seen: set[Any] = set()
    ordered: list[Any] = []
    for value in values:
        key = value if isinstance(value, (str, int, float)) else repr(value)
        if key in seen:
            continue
        seen.add(key)
        ordered.append(value)
    return ordered


def as_list(value: Any) -> list[Any]:
    """Treat a scalar result field as a one-item list; None as empty."""
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return value
    return [value]
