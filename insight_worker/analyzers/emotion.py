from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar

from insight_worker.analyzers.base import BaseAnalyzer, as_list, usable_results
from insight_worker.analyzers.models import Evidence
from insight_worker.analyzers.prompt_loader import load_prompt_template
from insight_worker.database.models import AnalyzableRecord, RecordKind
from insight_worker.database.repositories.base import BaseRecordStore
from insight_worker.inference.client import InferenceClient
from insight_worker.inference.models import PromptPayload

SYSTEM_PROMPT = (
    "You are a professional emotion analyst. Analyze the user's emotional data "
    "as a whole and describe their emotional patterns, health and ways to improve."
)


@dataclass(frozen=True)
class EmotionSample:
    """One dated emotion observation taken from a document or an image."""

    source: str
    emotions: tuple[str, ...]
    observed_at: datetime | None
    document_type: str = ""

    def date_label(self) -> str:
        return self.observed_at.date().isoformat() if self.observed_at else "unknown"


class EmotionAnalyzer(BaseAnalyzer):
    """Scores the owner's emotional health from documents and image moods."""

    analyzer_type = "emotion"
    record_kind = RecordKind.EMOTION_ANALYSIS
    confidence_fields = ("health_score", "stability_score")
    insufficient_message = "Not enough data yet. Upload more documents and images."

    RECORD_LIMIT: ClassVar[int] = 100
    DIARY_TARGET: ClassVar[int] = 5
    PROMPT_SAMPLE_LIMIT: ClassVar[int] = 50

    def __init__(
        self,
        store: BaseRecordStore,
        inference_client: InferenceClient,
        *,
        model: str = "",
        min_evidence: int = 3,
        reliable_evidence: int = 10,
        confidence_penalty: int = 10,
        confidence_floor: int = 30,
    ) -> None:
        super().__init__(
            store,
            inference_client,
            model=model,
            min_evidence=min_evidence,
            reliable_evidence=reliable_evidence,
            confidence_penalty=confidence_penalty,
            confidence_floor=confidence_floor,
        )
        self._template = load_prompt_template("emotion")

    def gather_inputs(self, record: AnalyzableRecord) -> Evidence:
        documents = self._gather_documents(record.owner_id)
        images = usable_results(
            self._store.find_recent_by_owner(
                record.owner_id, kinds=[RecordKind.IMAGE], limit=self.RECORD_LIMIT
            )
        )

        document_samples: list[EmotionSample] = []
        for doc in documents:
            result = doc.result or {}
            document_type = str(doc.payload_ref.get("document_type") or "other")
            observed = [as_list(result.get("emotions")), as_list(result.get("sentiment"))]
            for emotions in observed:
                if emotions:
                    document_samples.append(
                        EmotionSample(
                            source="document",
                            emotions=tuple(map(str, emotions)),
                            observed_at=doc.created_at,
                            document_type=document_type,
                        )
                    )
        image_samples = [
            EmotionSample("image", (str(img.result["mood"]),), img.created_at)
            for img in images
            if img.result and img.result.get("mood")
        ]

        return Evidence(
            count=len(documents) + len(images),
            data_sources={"documents": len(documents), "images": len(images)},
            items={"documents": document_samples, "images": image_samples},
        )

    def build_prompt(self, evidence: Evidence) -> PromptPayload:
        return PromptPayload(
            system_prompt=SYSTEM_PROMPT,
            user_prompt=self._template.format(evidence=self._format_evidence(evidence)),
            model=self.model,
            temperature=0.7,
            max_tokens=2000,
        )

    def default_result_shape(self, evidence: Evidence) -> dict[str, Any]:
        return {
            "primary_emotions": [],
            "emotion_patterns": [],
            "positive_negative_ratio": {"positive": 50, "negative": 50},
            "stability_score": 50,
            "concerns": [],
            "health_score": 50,
            "suggestions": [],
        }

    def finalize(self, result: dict[str, Any], evidence: Evidence) -> dict[str, Any]:
        result["emotion_timeline"] = build_emotion_timeline(
            evidence.items["documents"] + evidence.items["images"]
        )
        result["data_count"] = evidence.count
        result["data_sources"] = evidence.data_sources
        return result

    def _gather_documents(self, owner_id: str) -> list[AnalyzableRecord]:
        """Diaries first; top up with any completed document when diaries are few."""
        documents = usable_results(
            self._store.find_recent_by_owner(
                owner_id,
                kinds=[RecordKind.DOCUMENT],
                filters={"document_type": "diary"},
                limit=self.RECORD_LIMIT,
            )
        )
        if len(documents) >= self.DIARY_TARGET:
            return documents

        seen = {doc.id for doc in documents}
        others = usable_results(
            self._store.find_recent_by_owner(
                owner_id, kinds=[RecordKind.DOCUMENT], limit=self.RECORD_LIMIT
            )
        )
        for doc in others:
            if len(documents) >= self.RECORD_LIMIT:
                break
            if doc.id not in seen:
                seen.add(doc.id)
                documents.append(doc)
        return documents

    def _format_evidence(self, evidence: Evidence) -> str:
        sections: list[str] = []
        documents: list[EmotionSample] = evidence.items["documents"]
        if documents:
            lines = [
                f"- Date: {s.date_label()}, emotions: {', '.join(s.emotions)}, "
                f"type: {s.document_type}"
                for s in documents[: self.PROMPT_SAMPLE_LIMIT]
            ]
            sections.append("[Document emotion data]\n" + "\n".join(lines))
        images: list[EmotionSample] = evidence.items["images"]
        if images:
            lines = [
                f"- Date: {s.date_label()}, mood: {s.emotions[0]}"
                for s in images[: self.PROMPT_SAMPLE_LIMIT]
            ]
            sections.append("[Image mood data]\n" + "\n".join(lines))
        return "".join(f"{section}\n\n" for section in sections)


def build_emotion_timeline(samples: list[EmotionSample]) -> list[dict[str, Any]]:
    """One entry per sample, oldest first; undated samples go last."""
    dated = sorted(
        (s for s in samples if s.observed_at is not None),
        key=lambda s: s.observed_at,  # type: ignore[arg-type, return-value]
    )
    ordered = dated + [s for s in samples if s.observed_at is None]
    return [
        {
            "date": s.observed_at.isoformat() if s.observed_at else None,
            "type": s.source,
            "emotion": s.emotions[0],
        }
        for s in ordered
    ]
