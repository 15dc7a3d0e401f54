from typing import Any, ClassVar

from insight_worker.analyzers.base import BaseAnalyzer
from insight_worker.analyzers.exceptions import InvalidPayloadError
from insight_worker.analyzers.file_loader import FileLoader
from insight_worker.analyzers.models import Evidence
from insight_worker.analyzers.prompt_loader import load_prompt_template
from insight_worker.database.models import AnalyzableRecord, RecordKind
from insight_worker.database.repositories.base import BaseRecordStore
from insight_worker.inference.client import InferenceClient
from insight_worker.inference.models import PromptPayload

SYSTEM_PROMPT = (
    "You are a professional analyst. Analyze the text the user provides and "
    "respond in structured JSON."
)


class DocumentAnalyzer(BaseAnalyzer):
    """Analyzes one text document; prompt and result shape depend on its type."""

    analyzer_type = "document"
    record_kind = RecordKind.DOCUMENT

    DOCUMENT_TYPES: ClassVar[tuple[str, ...]] = ("diary", "note", "other")

    DEFAULT_SHAPES: ClassVar[dict[str, dict[str, Any]]] = {
        "diary": {
            "emotions": [],
            "main_events": [],
            "relationships": [],
            "interests": [],
            "psychological_state": "",
            "insights": "",
        },
        "note": {
            "topics": [],
            "categories": [],
            "interests": [],
            "plans": [],
            "thinking_style": "",
            "insights": "",
        },
        "other": {
            "topics": [],
            "keywords": [],
            "summary": "",
            "insights": "",
        },
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
        self._templates = {
            doc_type: load_prompt_template(f"document_{doc_type}")
            for doc_type in self.DOCUMENT_TYPES
        }

    def gather_inputs(self, record: AnalyzableRecord) -> Evidence:
        document_type = self._document_type(record)
        content = self._read_content(record)
        if not content.strip():
            raise InvalidPayloadError(f"Document {record.id} has no text content")
        return Evidence(
            count=1,
            data_sources={"documents": 1},
            items={"document_type": document_type, "content": content},
        )

    def build_prompt(self, evidence: Evidence) -> PromptPayload:
        document_type = evidence.items["document_type"]
        return PromptPayload(
            system_prompt=SYSTEM_PROMPT,
            user_prompt=self._templates[document_type].format(
                content=evidence.items["content"]
            ),
            model=self.model,
            temperature=0.7,
            max_tokens=2000,
        )

    def default_result_shape(self, evidence: Evidence) -> dict[str, Any]:
        document_type = evidence.items.get("document_type", "other")
        return dict(self.DEFAULT_SHAPES[document_type])

    def _document_type(self, record: AnalyzableRecord) -> str:
        document_type = str(record.payload_ref.get("document_type") or "other").lower()
        return document_type if document_type in self.DOCUMENT_TYPES else "other"

    def _read_content(self, record: AnalyzableRecord) -> str:
        content = record.payload_ref.get("content")
        if isinstance(content, str):
            return content
        path_value = record.payload_ref.get("path")
        if not path_value or not isinstance(path_value, str):
            raise InvalidPayloadError(f"Document {record.id} has neither content nor path")
        raw_bytes = self._file_loader.load(path_value)
        return raw_bytes.decode("utf-8", errors="replace")
