import json
from datetime import UTC, datetime
from typing import Any
from unittest.mock import MagicMock

from insight_worker.analyzers.emotion import (
    EmotionAnalyzer,
    EmotionSample,
    build_emotion_timeline,
)
from insight_worker.analyzers.models import InsufficientData
from insight_worker.database.models import AnalyzableRecord, RecordKind, RecordStatus
from insight_worker.inference.client import InferenceClient
from tests.fakes import InMemoryRecordStore, make_record


def _make_analyzer(
    store: InMemoryRecordStore, response: dict[str, Any] | None = None
) -> tuple[EmotionAnalyzer, MagicMock]:
    inference = MagicMock(spec=InferenceClient)
    inference.complete.return_value = json.dumps(response or {})
    return EmotionAnalyzer(store, inference), inference


def _request() -> AnalyzableRecord:
    return make_record("emo-1", RecordKind.EMOTION_ANALYSIS, status=RecordStatus.PENDING)


def _add_document(
    store: InMemoryRecordStore, record_id: str, document_type: str, age: int, emotion: str
) -> None:
    store.add(make_record(
        record_id,
        RecordKind.DOCUMENT,
        payload_ref={"document_type": document_type},
        result={"emotions": [emotion]},
        age_minutes=age,
    ))


class TestGatherInputs:
    def test_tops_up_diaries_with_other_documents(self, store: InMemoryRecordStore) -> None:
        _add_document(store, "diary-1", "diary", 10, "joy")
        _add_document(store, "diary-2", "diary", 20, "calm")
        _add_document(store, "note-1", "note", 30, "stress")
        analyzer, _ = _make_analyzer(store)

        evidence = analyzer.gather_inputs(_request())

        assert evidence.data_sources == {"documents": 3, "images": 0}
        types = sorted(s.document_type for s in evidence.items["documents"])
        assert types == ["diary", "diary", "note"]

    def test_image_moods_are_samples(self, store: InMemoryRecordStore) -> None:
        store.add(make_record("img-1", RecordKind.IMAGE, result={"mood": "cheerful"}))
        store.add(make_record("img-2", RecordKind.IMAGE, result={"mood": ""}))
        analyzer, _ = _make_analyzer(store)

        evidence = analyzer.gather_inputs(_request())

        assert evidence.count == 2
        assert [s.emotions for s in evidence.items["images"]] == [("cheerful",)]


class TestAnalyze:
    def test_insufficient_data(self, store: InMemoryRecordStore) -> None:
        _add_document(store, "diary-1", "diary", 10, "joy")
        analyzer, inference = _make_analyzer(store)

        outcome = analyzer.analyze(_request())

        assert isinstance(outcome, InsufficientData)
        assert outcome.data_sources == {"documents": 1, "images": 0}
        inference.complete.assert_not_called()

    def test_scores_are_penalized_below_reliable_count(
        self, store: InMemoryRecordStore
    ) -> None:
        for i in range(3):
            _add_document(store, f"diary-{i}", "diary", i * 10, "joy")
        store.add(make_record("img-1", RecordKind.IMAGE, result={"mood": "calm"}))
        analyzer, _ = _make_analyzer(
            store, {"health_score": 80, "stability_score": 35, "primary_emotions": ["joy"]}
        )

        result = analyzer.analyze(_request())

        assert result["health_score"] == 70  # type: ignore[index]
        assert result["stability_score"] == 30  # type: ignore[index]
        assert result["primary_emotions"] == ["joy"]  # type: ignore[index]
        assert result["data_count"] == 4  # type: ignore[index]
        assert len(result["emotion_timeline"]) == 4  # type: ignore[index]

    def test_prompt_lists_samples(self, store: InMemoryRecordStore) -> None:
        for i in range(3):
            _add_document(store, f"diary-{i}", "diary", i, "gratitude")
        analyzer, inference = _make_analyzer(store)

        analyzer.analyze(_request())

        prompt = inference.complete.call_args.args[0].user_prompt
        assert "emotions: gratitude, type: diary" in prompt
        assert "Date: 2026-10-18" in prompt


class TestEmotionTimeline:
    def test_orders_by_date_with_undated_last(self) -> None:
        early = datetime(2026, 1, 1, tzinfo=UTC)
        late = datetime(2026, 3, 1, tzinfo=UTC)
        samples = [
            EmotionSample("image", ("calm",), late),
            EmotionSample("document", ("sad",), None),
            EmotionSample("document", ("joy", "pride"), early),
        ]

        timeline = build_emotion_timeline(samples)

        assert timeline == [
            {"date": early.isoformat(), "type": "document", "emotion": "joy"},
            {"date": late.isoformat(), "type": "image", "emotion": "calm"},
            {"date": None, "type": "document", "emotion": "sad"},
        ]
