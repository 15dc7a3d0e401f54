from pathlib import Path

from insight_worker.analyzers.document import DocumentAnalyzer
from insight_worker.analyzers.emotion import EmotionAnalyzer
from insight_worker.analyzers.file_loader import FileLoader
from insight_worker.analyzers.profile import ProfileAnalyzer
from insight_worker.analyzers.registry import AnalyzerRegistry
from insight_worker.analyzers.report import ReportAnalyzer
from insight_worker.analyzers.trait import TraitEstimationAnalyzer
from insight_worker.analyzers.vision import VisionAnalyzer
from insight_worker.config.settings import Settings
from insight_worker.database.repositories.base import BaseRecordStore
from insight_worker.inference.client import InferenceClient


def build_analyzer_registry(
    settings: Settings,
    store: BaseRecordStore,
    inference_client: InferenceClient,
    files_root: Path | None = None,
) -> AnalyzerRegistry:
    """Build every domain analyzer from application settings."""
    file_loader = FileLoader(
        files_root=files_root if files_root is not None else Path(settings.files_root)
    )
    return AnalyzerRegistry([
        VisionAnalyzer(
            store,
            inference_client,
            file_loader,
            model=settings.vision_model_name,
        ),
        DocumentAnalyzer(
            store,
            inference_client,
            file_loader,
            model=settings.text_model_name,
        ),
        ProfileAnalyzer(
            store,
            inference_client,
            model=settings.text_model_name,
        ),
        TraitEstimationAnalyzer(
            store,
            inference_client,
            model=settings.estimation_model_name,
            min_evidence=settings.trait_min_evidence,
            reliable_evidence=settings.trait_reliable_evidence,
            confidence_penalty=settings.trait_confidence_penalty,
            confidence_floor=settings.confidence_floor,
        ),
        EmotionAnalyzer(
            store,
            inference_client,
            model=settings.estimation_model_name,
            min_evidence=settings.emotion_min_evidence,
            reliable_evidence=settings.emotion_reliable_evidence,
            confidence_penalty=settings.emotion_confidence_penalty,
            confidence_floor=settings.confidence_floor,
        ),
        ReportAnalyzer(
            store,
            inference_client,
            model=settings.estimation_model_name,
            min_evidence=settings.report_min_evidence,
        ),
    ])
