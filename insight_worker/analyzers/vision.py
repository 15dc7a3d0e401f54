import base64
from typing import Any, ClassVar

from insight_worker.analyzers.base import BaseAnalyzer
from insight_worker.analyzers.exceptions import InvalidPayloadError
from insight_worker.analyzers.file_loader import FileLoader
from insight_worker.analyzers.models import Evidence
from insight_worker.analyzers.prompt_loader import load_prompt_template
from insight_worker.database.models import AnalyzableRecord, RecordKind
from insight_worker.database.repositories.base import BaseRecordStore
from insight_worker.inference.client import InferenceClient
from insight_worker.inference.models import MediaAttachment, PromptPayload

MAX_IMAGE_BYTES = 10 * 1024 * 1024


class VisionAnalyzer(BaseAnalyzer):
    """Describes a single uploaded image with a multimodal completion."""

    analyzer_type = "vision"
    record_kind = RecordKind.IMAGE

    MIME_TYPES: ClassVar[dict[str, str]] = {
        ".jpg": "image/jpeg",
        ".jpeg": "image/jpeg",
        ".png": "image/png",
        ".gif": "image/gif",
        ".webp": "image/webp",
    }

    def __init__(
        self,
        store: BaseRecordStore,
        inference_client: InferenceClient,
        file_loader: FileLoader,
        *,
        model: str = "",
    ) -> None:
        super().__init__(store, inference_client, model=model, min_evidence=1)
        self._file_loader = file_loader
        self._template = load_prompt_template("vision")

    def gather_inputs(self, record: AnalyzableRecord) -> Evidence:
        path_value = record.payload_ref.get("path")
        if not path_value or not isinstance(path_value, str):
            raise InvalidPayloadError(f"Image record {record.id} has no file path")
        attachment = self._load_image(path_value)
        return Evidence(
            count=1,
            data_sources={"images": 1},
            items={"attachment": attachment},
        )

    def build_prompt(self, evidence: Evidence) -> PromptPayload:
        return PromptPayload(
            user_prompt=self._template.format(),
            attachment=evidence.items["attachment"],
            model=self.model,
            temperature=0.7,
            max_tokens=1000,
        )

    def default_result_shape(self, evidence: Evidence) -> dict[str, Any]:
        return {
            "description": "",
            "mood": "",
            "inferred_interests": [],
            "keywords": [],
            "additional_insights": "",
        }

    def _load_image(self, path_value: str) -> MediaAttachment:
        path = self._file_loader.resolve(path_value)
        mime_type = self.MIME_TYPES.get(path.suffix.lower())
        if mime_type is None:
            raise InvalidPayloadError(
                f"Unsupported image format '{path.suffix}'. "
                f"Supported: {sorted(self.MIME_TYPES)}"
            )
        if path.is_file() and path.stat().st_size > MAX_IMAGE_BYTES:
            raise InvalidPayloadError(
                f"Image too large: {path.stat().st_size} bytes (max {MAX_IMAGE_BYTES})"
            )
        raw_bytes = self._file_loader.load(path_value)
        return MediaAttachment(
            data_base64=base64.b64encode(raw_bytes).decode("ascii"),
            mime_type=mime_type,
        )
