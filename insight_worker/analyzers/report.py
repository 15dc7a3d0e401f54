import json
from typing import Any, ClassVar

from insight_worker.analyzers.base import BaseAnalyzer, as_list, unique, usable_results
from insight_worker.analyzers.models import Evidence
from insight_worker.analyzers.prompt_loader import load_prompt_template
from insight_worker.analyzers.trait import format_profile
from insight_worker.clock import Clock, utcnow
from insight_worker.database.models import AnalyzableRecord, RecordKind
from insight_worker.database.repositories.base import BaseRecordStore
from insight_worker.inference.client import InferenceClient
from insight_worker.inference.models import PromptPayload

SYSTEM_PROMPT = (
    "You are a professional psychological analyst and career consultant. Combine "
    "all of the user's data into a detailed, practical analysis report. Write at "
    "least 200 characters per section and include concrete examples and advice."
)

REPORT_PROFILE_LABELS: tuple[tuple[str, str], ...] = (
    ("interests", "Interests"),
    ("hobbies", "Hobbies"),
    ("personality", "Personality"),
    ("current_job", "Current job"),
    ("future_dream", "Future dream"),
    ("concerns", "Concerns"),
)


class ReportAnalyzer(BaseAnalyzer):
    """Composes a comprehensive report from every prior insight about the owner."""

    analyzer_type = "report"
    record_kind = RecordKind.REPORT

    MEDIA_LIMIT: ClassVar[int] = 20
    PROMPT_ITEM_LIMIT: ClassVar[int] = 10
    EXCERPT_CHARS: ClassVar[int] = 300

    def __init__(
        self,
        store: BaseRecordStore,
        inference_client: InferenceClient,
        *,
        model: str = "",
        min_evidence: int = 3,
        now: Clock = utcnow,
    ) -> None:
        super().__init__(store, inference_client, model=model, min_evidence=min_evidence)
        self._now = now
        self._template = load_prompt_template("report")

    def gather_inputs(self, record: AnalyzableRecord) -> Evidence:
        owner_id = record.owner_id
        profile = self._latest(owner_id, RecordKind.PROFILE)
        analysis = self._latest(owner_id, RecordKind.PROFILE_ANALYSIS)
        trait = self._latest(owner_id, RecordKind.TRAIT_ESTIMATION)
        emotion = self._latest(owner_id, RecordKind.EMOTION_ANALYSIS)
        images = usable_results(
            self._store.find_recent_by_owner(
                owner_id, kinds=[RecordKind.IMAGE], limit=self.MEDIA_LIMIT
            )
        )
        documents = usable_results(
            self._store.find_recent_by_owner(
                owner_id, kinds=[RecordKind.DOCUMENT], limit=self.MEDIA_LIMIT
            )
        )
        data_sources = {
            "profile": int(profile is not None),
            "analyses": int(analysis is not None),
            "mbti": int(trait is not None),
            "emotion": int(emotion is not None),
            "images": len(images),
            "documents": len(documents),
        }
        return Evidence(
            count=sum(data_sources.values()),
            data_sources=data_sources,
            items={
                "title": record.payload_ref.get("title"),
                "profile": profile,
                "analysis": analysis,
                "trait": trait,
                "emotion": emotion,
                "images": [r.result for r in images],
                "documents": [r.result for r in documents],
            },
        )

    def build_prompt(self, evidence: Evidence) -> PromptPayload:
        return PromptPayload(
            system_prompt=SYSTEM_PROMPT,
            user_prompt=self._template.format(evidence=self._format_evidence(evidence)),
            model=self.model,
            temperature=0.7,
            max_tokens=4000,
        )

    def default_result_shape(self, evidence: Evidence) -> dict[str, Any]:
        return {
            "summary": "",
            "personality": "",
            "strengths": [],
            "improvements": [],
            "career_suggestions": [],
            "lifestyle_recommendations": [],
            "relationship_style": "",
            "growth_roadmap": [],
            "cautions": [],
        }

    def finalize(self, result: dict[str, Any], evidence: Evidence) -> dict[str, Any]:
        title = evidence.items.get("title")
        if not title:
            title = f"Comprehensive report - {self._now().date().isoformat()}"
        return {"title": title, **result, "data_sources": evidence.data_sources}

    def _latest(self, owner_id: str, kind: str) -> dict[str, Any] | None:
        # A few rows, so an insufficient-data outcome on top does not hide an older usable one.
        records = usable_results(
            self._store.find_recent_by_owner(owner_id, kinds=[kind], status=None, limit=5)
        )
        return records[0].result if records else None

    def _format_evidence(self, evidence: Evidence) -> str:
        items = evidence.items
        sections: list[str] = []

        if items["profile"]:
            sections.append(
                "[Profile]\n" + format_profile(items["profile"], REPORT_PROFILE_LABELS)
            )

        trait = items["trait"]
        if trait:
            lines = [
                f"MBTI type: {trait.get('mbti_type', 'XXXX')}",
                f"Confidence: {trait.get('confidence', 0)}%",
            ]
            if trait.get("dimensions"):
                lines.append(f"Dimensions: {json.dumps(trait['dimensions'], ensure_ascii=False)}")
            if trait.get("characteristics"):
                lines.append(f"Characteristics: {', '.join(map(str, trait['characteristics']))}")
            if trait.get("suitable_careers"):
                lines.append(f"Suitable careers: {', '.join(map(str, trait['suitable_careers']))}")
            sections.append("[MBTI estimation]\n" + "\n".join(lines))

        emotion = items["emotion"]
        if emotion:
            ratio = emotion.get("positive_negative_ratio") or {}
            lines = [
                f"Emotional health score: {emotion.get('health_score', 50)}/100",
                f"Stability score: {emotion.get('stability_score', 50)}/100",
                f"Positive/negative ratio: {ratio.get('positive', 50)}% / "
                f"{ratio.get('negative', 50)}%",
            ]
            if emotion.get("primary_emotions"):
                primary = ", ".join(map(str, emotion["primary_emotions"]))
                lines.append(f"Primary emotions: {primary}")
            if emotion.get("concerns"):
                lines.append(f"Concerns: {', '.join(map(str, emotion['concerns']))}")
            sections.append("[Emotional patterns]\n" + "\n".join(lines))

        image_keywords = unique(
            k for r in items["images"][: self.PROMPT_ITEM_LIMIT]
            for k in as_list(r.get("inferred_interests")) + as_list(r.get("keywords"))
        )
        if image_keywords:
            keywords = ", ".join(map(str, image_keywords[: self.PROMPT_ITEM_LIMIT]))
            sections.append(f"[Image analysis insights]\nMain keywords: {keywords}")

        document_insights: list[str] = []
        for r in items["documents"][: self.PROMPT_ITEM_LIMIT]:
            document_insights.extend(map(str, as_list(r.get("keywords"))))
            document_insights.extend(map(str, as_list(r.get("topics"))))
            if r.get("sentiment"):
                document_insights.append(f"sentiment: {r['sentiment']}")
        if document_insights:
            insights = ", ".join(document_insights[: self.PROMPT_ITEM_LIMIT])
            sections.append(f"[Text document analysis]\nDocument insights: {insights}")

        analysis = items["analysis"]
        if analysis:
            lines = []
            for key, label in (
                ("personality_analysis", "Personality"),
                ("career_recommendations", "Career recommendations"),
            ):
                if analysis.get(key):
                    lines.append(f"{label}: {str(analysis[key])[: self.EXCERPT_CHARS]}...")
            if lines:
                sections.append("[Previous analysis]\n" + "\n".join(lines))

        return "".join(f"{section}\n\n" for section in sections)
