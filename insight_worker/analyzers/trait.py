from typing import Any, ClassVar

from insight_worker.analyzers.base import BaseAnalyzer, as_list, unique, usable_results
from insight_worker.analyzers.models import Evidence
from insight_worker.analyzers.prompt_loader import load_prompt_template
from insight_worker.database.models import AnalyzableRecord, RecordKind
from insight_worker.database.repositories.base import BaseRecordStore
from insight_worker.inference.client import InferenceClient
from insight_worker.inference.models import PromptPayload

SYSTEM_PROMPT = (
    "You are an MBTI expert. Analyze the user's data as a whole and estimate "
    "their MBTI type accurately. When data is scarce, lower the confidence and "
    "keep the analysis as objective as possible."
)

PROFILE_LABELS: tuple[tuple[str, str], ...] = (
    ("interests", "Interests"),
    ("hobbies", "Hobbies"),
    ("personality", "Personality"),
    ("current_job", "Current job"),
    ("future_dream", "Future dream"),
    ("ideal_life", "Ideal life"),
    ("concerns", "Concerns"),
)


def format_profile(profile: dict[str, Any], labels: tuple[tuple[str, str], ...]) -> str:
    lines = [f"- {label}: {profile[key]}" for key, label in labels if profile.get(key)]
    return "\n".join(lines)


class TraitEstimationAnalyzer(BaseAnalyzer):
    """Estimates the owner's MBTI type from everything known about them."""

    analyzer_type = "trait_estimation"
    record_kind = RecordKind.TRAIT_ESTIMATION
    confidence_fields = ("confidence",)

    IMAGE_LIMIT: ClassVar[int] = 50
    DOCUMENT_LIMIT: ClassVar[int] = 50
    ANALYSIS_LIMIT: ClassVar[int] = 10
    EXCERPT_CHARS: ClassVar[int] = 200

    def __init__(
        self,
        store: BaseRecordStore,
        inference_client: InferenceClient,
        *,
        model: str = "",
        min_evidence: int = 3,
        reliable_evidence: int = 5,
        confidence_penalty: int = 20,
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
        self._template = load_prompt_template("trait_estimation")

    def gather_inputs(self, record: AnalyzableRecord) -> Evidence:
        owner_id = record.owner_id
        profiles = usable_results(
            self._store.find_recent_by_owner(
                owner_id, kinds=[RecordKind.PROFILE], status=None, limit=1
            )
        )
        images = usable_results(
            self._store.find_recent_by_owner(
                owner_id, kinds=[RecordKind.IMAGE], limit=self.IMAGE_LIMIT
            )
        )
        documents = usable_results(
            self._store.find_recent_by_owner(
                owner_id, kinds=[RecordKind.DOCUMENT], limit=self.DOCUMENT_LIMIT
            )
        )
        analyses = usable_results(
            self._store.find_recent_by_owner(
                owner_id, kinds=[RecordKind.PROFILE_ANALYSIS], limit=self.ANALYSIS_LIMIT
            )
        )
        data_sources = {
            "profile": len(profiles),
            "images": len(images),
            "documents": len(documents),
            "analyses": len(analyses),
        }
        return Evidence(
            count=sum(data_sources.values()),
            data_sources=data_sources,
            items={
                "profile": profiles[0].result if profiles else None,
                "images": [r.result for r in images],
                "documents": [r.result for r in documents],
                "analyses": [r.result for r in analyses],
            },
        )

    def build_prompt(self, evidence: Evidence) -> PromptPayload:
        return PromptPayload(
            system_prompt=SYSTEM_PROMPT,
            user_prompt=self._template.format(evidence=self._format_evidence(evidence)),
            model=self.model,
            temperature=0.7,
            max_tokens=2500,
        )

    def default_result_shape(self, evidence: Evidence) -> dict[str, Any]:
        return {
            "dimensions": {
                axis: {"score": 50, "type": letter, "description": "Insufficient data"}
                for axis, letter in (("EI", "I"), ("SN", "S"), ("TF", "T"), ("JP", "J"))
            },
            "mbti_type": "XXXX",
            "confidence": 50,
            "description": "",
            "characteristics": [],
            "suitable_careers": [],
            "suitable_environments": [],
            "growth_suggestions": [],
        }

    def finalize(self, result: dict[str, Any], evidence: Evidence) -> dict[str, Any]:
        result["data_sources"] = evidence.data_sources
        return result

    def _format_evidence(self, evidence: Evidence) -> str:
        sections: list[str] = []

        profile = evidence.items["profile"]
        if profile:
            sections.append("[Profile]\n" + format_profile(profile, PROFILE_LABELS))

        images: list[dict[str, Any]] = evidence.items["images"]
        if images:
            lines = []
            interests = unique(
                i for r in images
                for i in as_list(r.get("inferred_interests")) + as_list(r.get("interests"))
            )
            keywords = unique(k for r in images for k in as_list(r.get("keywords")))
            moods = unique(m for r in images for m in as_list(r.get("mood")))
            if interests:
                lines.append(f"- Main interests: {', '.join(map(str, interests))}")
            if keywords:
                lines.append(f"- Activity patterns: {', '.join(map(str, keywords))}")
            if moods:
                lines.append(f"- Moods: {', '.join(map(str, moods))}")
            sections.append("[Image analysis insights]\n" + "\n".join(lines))

        documents: list[dict[str, Any]] = evidence.items["documents"]
        if documents:
            lines = []
            emotions = unique(e for r in documents for e in as_list(r.get("emotions")))
            thinking = [str(r["thinking_style"]) for r in documents if r.get("thinking_style")]
            relationships = unique(
                x for r in documents for x in as_list(r.get("relationships"))
            )
            if emotions:
                lines.append(f"- Emotional patterns: {', '.join(map(str, emotions))}")
            if thinking:
                lines.append(f"- Ways of thinking: {', '.join(thinking)}")
            if relationships:
                lines.append(f"- Relationships: {', '.join(map(str, relationships))}")
            sections.append("[Text document analysis]\n" + "\n".join(lines))

        analyses: list[dict[str, Any]] = evidence.items["analyses"]
        if analyses:
            lines = []
            for index, analysis in enumerate(analyses, start=1):
                lines.append(f"Analysis {index}:")
                for key, label in (
                    ("personality_analysis", "Personality"),
                    ("career_recommendations", "Career recommendations"),
                ):
                    text = analysis.get(key)
                    if text:
                        lines.append(f"- {label}: {str(text)[: self.EXCERPT_CHARS]}...")
            sections.append("[Previous analyses]\n" + "\n".join(lines))

        return "".join(f"{section}\n\n" for section in sections)
