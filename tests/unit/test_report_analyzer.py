import json
from collections.abc import Callable
from datetime import datetime
from typing import Any
from unittest.mock import MagicMock

from insight_worker.analyzers.models import InsufficientData
from insight_worker.analyzers.report import ReportAnalyzer
from insight_worker.database.models import AnalyzableRecord, RecordKind, RecordStatus
from insight_worker.inference.client import InferenceClient
from tests.fakes import InMemoryRecordStore, make_record


def _make_analyzer(
    store: InMemoryRecordStore,
    now: Callable[[], datetime],
    response: dict[str, Any] | None = None,
) -> tuple[ReportAnalyzer, MagicMock]:
    inference = MagicMock(spec=InferenceClient)
    inference.complete.return_value = json.dumps(response or {})
    return ReportAnalyzer(store, inference, model="reporter", now=now), inference


def _request(title: str | None = None) -> AnalyzableRecord:
    return make_record(
        "report-1",
        RecordKind.REPORT,
        status=RecordStatus.PENDING,
        payload_ref={"title": title} if title else {},
    )


def _seed(store: InMemoryRecordStore) -> None:
    store.add(make_record(
        "profile-1",
        RecordKind.PROFILE,
        status=RecordStatus.PENDING,
        result={"interests": "painting", "future_dream": "open a studio"},
    ))
    store.add(make_record(
        "trait-1",
        RecordKind.TRAIT_ESTIMATION,
        result={"mbti_type": "INFP", "confidence": 70, "characteristics": ["idealistic"]},
    ))
    store.add(make_record(
        "emotion-1",
        RecordKind.EMOTION_ANALYSIS,
        result={"health_score": 65, "primary_emotions": ["hope"]},
    ))
    store.add(make_record(
        "img-1", RecordKind.IMAGE, result={"inferred_interests": ["art"], "keywords": ["canvas"]}
    ))


class TestReportAnalyzer:
    def test_data_sources(
        self, store: InMemoryRecordStore, fixed_now: Callable[[], datetime]
    ) -> None:
        _seed(store)
        analyzer, _ = _make_analyzer(store, fixed_now)

        evidence = analyzer.gather_inputs(_request())

        assert evidence.count == 4
        assert evidence.data_sources == {
            "profile": 1,
            "analyses": 0,
            "mbti": 1,
            "emotion": 1,
            "images": 1,
            "documents": 0,
        }

    def test_insufficient_data(
        self, store: InMemoryRecordStore, fixed_now: Callable[[], datetime]
    ) -> None:
        store.add(make_record("profile-1", RecordKind.PROFILE, result={"interests": "x"}))
        analyzer, inference = _make_analyzer(store, fixed_now)

        outcome = analyzer.analyze(_request())

        assert isinstance(outcome, InsufficientData)
        assert outcome.evidence_count == 1
        inference.complete.assert_not_called()

    def test_prior_insufficient_estimation_is_not_evidence(
        self, store: InMemoryRecordStore, fixed_now: Callable[[], datetime]
    ) -> None:
        store.add(make_record(
            "trait-1",
            RecordKind.TRAIT_ESTIMATION,
            result={"error": "INSUFFICIENT_DATA", "message": "later"},
        ))
        analyzer, _ = _make_analyzer(store, fixed_now)

        evidence = analyzer.gather_inputs(_request())

        assert evidence.data_sources["mbti"] == 0

    def test_prompt_and_result(
        self, store: InMemoryRecordStore, fixed_now: Callable[[], datetime]
    ) -> None:
        _seed(store)
        analyzer, inference = _make_analyzer(
            store, fixed_now, {"summary": "A creative soul", "strengths": ["empathy"]}
        )

        result = analyzer.analyze(_request())

        payload = inference.complete.call_args.args[0]
        assert payload.model == "reporter"
        assert payload.max_tokens == 4000
        assert "MBTI type: INFP" in payload.user_prompt
        assert "Future dream: open a studio" in payload.user_prompt
        assert "Primary emotions: hope" in payload.user_prompt
        assert "art, canvas" in payload.user_prompt
        assert result["title"] == "Comprehensive report - 2026-10-18"  # type: ignore[index]
        assert result["summary"] == "A creative soul"  # type: ignore[index]
        assert result["strengths"] == ["empathy"]  # type: ignore[index]
        assert result["cautions"] == []  # type: ignore[index]
        assert result["data_sources"]["mbti"] == 1  # type: ignore[index]

    def test_uses_requested_title(
        self, store: InMemoryRecordStore, fixed_now: Callable[[], datetime]
    ) -> None:
        _seed(store)
        analyzer, _ = _make_analyzer(store, fixed_now)

        result = analyzer.analyze(_request(title="Spring review"))

        assert result["title"] == "Spring review"  # type: ignore[index]
