from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class RecordStatus(str, Enum):
    """Durable work state of an analyzable record."""

    PENDING = "pending"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    FAILED = "failed"


class RecordKind:
    """Values of the analysis_records.kind column."""

    IMAGE = "image"
    DOCUMENT = "document"
    PROFILE = "profile"
    PROFILE_ANALYSIS = "profile_analysis"
    TRAIT_ESTIMATION = "trait_estimation"
    EMOTION_ANALYSIS = "emotion_analysis"
    REPORT = "report"


# Sentinel for update() arguments that should leave a column untouched.
UNSET: Any = object()


@dataclass
class AnalyzableRecord:
    """Represents a row from the analysis_records table."""

    id: str
    owner_id: str
    kind: str
    status: RecordStatus
    payload_ref: dict[str, Any] = field(default_factory=dict)
    result: dict[str, Any] | None = None
    error: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
