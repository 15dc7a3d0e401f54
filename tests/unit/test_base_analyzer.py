import json
from typing import Any
from unittest.mock import MagicMock

from insight_worker.analyzers.base import BaseAnalyzer, as_list, unique, usable_results
from insight_worker.analyzers.models import Evidence, InsufficientData
from insight_worker.database.models import AnalyzableRecord, RecordKind
from insight_worker.inference.client import InferenceClient
from insight_worker.inference.models import PromptPayload
from tests.fakes import InMemoryRecordStore, make_record


class _CountingAnalyzer(BaseAnalyzer):
    analyzer_type = "counting"
    record_kind = "counting"
    confidence_fields = ("confidence",)

    def __init__(self, store: InMemoryRecordStore, inference: MagicMock, **kwargs: Any) -> None:
        super().__init__(store, inference, **kwargs)
        self.evidence_count = 0

    def gather_inputs(self, record: AnalyzableRecord) -> Evidence:
        return Evidence(count=self.evidence_count, data_sources={"things": self.evidence_count})

    def build_prompt(self, evidence: Evidence) -> PromptPayload:
        return PromptPayload(user_prompt=f"{evidence.count} things", model=self.model)

    def default_result_shape(self, evidence: Evidence) -> dict[str, Any]:
        return {"summary": "", "confidence": 50}


def _make_analyzer(
    response: str, evidence_count: int, **kwargs: Any
) -> tuple[_CountingAnalyzer, MagicMock]:
    inference = MagicMock(spec=InferenceClient)
    inference.complete.return_value = response
    analyzer = _CountingAnalyzer(InMemoryRecordStore(), inference, **kwargs)
    analyzer.evidence_count = evidence_count
    return analyzer, inference


def _record() -> AnalyzableRecord:
    return make_record("r-1", "counting")


class TestAnalyzePipeline:
    def test_below_minimum_returns_insufficient_data_without_inference(self) -> None:
        analyzer, inference = _make_analyzer("{}", evidence_count=2, min_evidence=3)

        outcome = analyzer.analyze(_record())

        assert isinstance(outcome, InsufficientData)
        assert outcome.evidence_count == 2
        assert outcome.data_sources == {"things": 2}
        inference.complete.assert_not_called()

    def test_insufficient_data_payload(self) -> None:
        outcome = InsufficientData(message="later", evidence_count=1, data_sources={"a": 1})
        assert outcome.to_dict() == {
            "error": "INSUFFICIENT_DATA",
            "message": "later",
            "evidence_count": 1,
            "data_sources": {"a": 1},
        }

    def test_normalizes_response(self) -> None:
        analyzer, inference = _make_analyzer(
            'Result:\n{"summary": "ok", "confidence": 90, "extra": 1}',
            evidence_count=3,
            min_evidence=3,
            model="m",
        )

        outcome = analyzer.analyze(_record())

        assert outcome == {"summary": "ok", "confidence": 90}
        payload = inference.complete.call_args.args[0]
        assert payload.user_prompt == "3 things"
        assert payload.model == "m"

    def test_unparseable_response_degrades_to_default(self) -> None:
        analyzer, _inference = _make_analyzer("sorry", evidence_count=1)

        assert analyzer.analyze(_record()) == {"summary": "", "confidence": 50}


class TestConfidencePenalty:
    def _analyzer(self) -> _CountingAnalyzer:
        analyzer, _ = _make_analyzer(
            "{}",
            evidence_count=0,
            reliable_evidence=5,
            confidence_penalty=20,
            confidence_floor=30,
        )
        return analyzer

    def test_penalizes_below_reliable_count(self) -> None:
        result = self._analyzer().apply_confidence_penalty({"confidence": 80}, 2)
        assert result["confidence"] == 60

    def test_floor_applies(self) -> None:
        result = self._analyzer().apply_confidence_penalty({"confidence": 35}, 1)
        assert result["confidence"] == 30

    def test_no_penalty_at_reliable_count(self) -> None:
        result = self._analyzer().apply_confidence_penalty({"confidence": 80}, 5)
        assert result["confidence"] == 80

    def test_clamps_out_of_range_scores(self) -> None:
        analyzer = self._analyzer()
        assert analyzer.apply_confidence_penalty({"confidence": 140}, 9)["confidence"] == 100
        assert analyzer.apply_confidence_penalty({"confidence": -5}, 9)["confidence"] == 0

    def test_end_to_end_penalty(self) -> None:
        analyzer, _ = _make_analyzer(
            json.dumps({"confidence": 80}),
            evidence_count=2,
            min_evidence=1,
            reliable_evidence=5,
            confidence_penalty=20,
        )
        assert analyzer.analyze(_record())["confidence"] == 60  # type: ignore[index]


class TestHelpers:
    def test_usable_results_skips_missing_and_insufficient(self) -> None:
        records = [
            make_record("a", RecordKind.IMAGE, result={"mood": "calm"}),
            make_record("b", RecordKind.IMAGE, result=None),
            make_record("c", RecordKind.IMAGE, result={"error": "INSUFFICIENT_DATA"}),
        ]
        assert [r.id for r in usable_results(records)] == ["a"]

    def test_unique_keeps_first_seen_order(self) -> None:
        assert unique(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]

    def test_as_list(self) -> None:
        assert as_list(None) == []
        assert as_list("") == []
        assert as_list("calm") == ["calm"]
        assert as_list(["a"]) == ["a"]
