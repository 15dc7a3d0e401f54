from typing import Any

from insight_worker.analyzers.base import BaseAnalyzer, usable_results
from insight_worker.analyzers.models import Evidence
from insight_worker.analyzers.prompt_loader import load_prompt_template
from insight_worker.analyzers.trait import format_profile
from insight_worker.database.models import AnalyzableRecord, RecordKind
from insight_worker.database.repositories.base import BaseRecordStore
from insight_worker.inference.client import InferenceClient
from insight_worker.inference.models import PromptPayload

SYSTEM_PROMPT = (
    "You are a professional psychological analyst and career consultant. Analyze "
    "the user's profile and give detailed, specific insights. Write at least 150 "
    "characters per section, name concrete jobs, places and activities, explain "
    "the reason for every recommendation and avoid vague wording. Career "
    "recommendations must name actual jobs, not just abilities."
)

ANALYSIS_PROFILE_LABELS: tuple[tuple[str, str], ...] = (
    ("interests", "Interests"),
    ("hobbies", "Hobbies"),
    ("personality", "Personality"),
    ("dreams", "Dreams"),
    ("ideal_type", "Ideal partner"),
    ("concerns", "Concerns"),
    ("dating_style", "Dating style"),
    ("other_info", "Other"),
)


class ProfileAnalyzer(BaseAnalyzer):
    """Turns the owner's profile into personality, career and lifestyle advice.

    The profile is taken from ``payload_ref["profile"]`` when the request
    carries a snapshot, otherwise from the owner's latest profile record. Each
    filled profile field counts as one evidence point.
    """

    analyzer_type = "profile_analysis"
    record_kind = RecordKind.PROFILE_ANALYSIS
    insufficient_message = "Profile is empty. Fill in your profile before requesting analysis."

    def __init__(
        self,
        store: BaseRecordStore,
        inference_client: InferenceClient,
        *,
        model: str = "",
        min_evidence: int = 1,
    ) -> None:
        super().__init__(store, inference_client, model=model, min_evidence=min_evidence)
        self._template = load_prompt_template("profile_analysis")

    def gather_inputs(self, record: AnalyzableRecord) -> Evidence:
        profile = record.payload_ref.get("profile")
        if not isinstance(profile, dict):
            profiles = usable_results(
                self._store.find_recent_by_owner(
                    record.owner_id, kinds=[RecordKind.PROFILE], status=None, limit=1
                )
            )
            profile = profiles[0].result if profiles else {}
        snapshot = {key: profile.get(key) for key, _ in ANALYSIS_PROFILE_LABELS}
        filled = sum(1 for value in snapshot.values() if value)
        return Evidence(
            count=filled,
            data_sources={"profile_fields": filled},
            items={"profile": snapshot},
        )

    def build_prompt(self, evidence: Evidence) -> PromptPayload:
        profile = format_profile(evidence.items["profile"], ANALYSIS_PROFILE_LABELS)
        return PromptPayload(
            system_prompt=SYSTEM_PROMPT,
            user_prompt=self._template.format(profile=profile),
            model=self.model,
            temperature=0.8,
            max_tokens=2000,
        )

    def default_result_shape(self, evidence: Evidence) -> dict[str, Any]:
        return {
            "personality_analysis": "",
            "career_recommendations": "",
            "hobby_suggestions": "",
            "travel_recommendations": "",
            "additional_insights": "",
        }

    def finalize(self, result: dict[str, Any], evidence: Evidence) -> dict[str, Any]:
        result["profile_snapshot"] = evidence.items["profile"]
        return result
