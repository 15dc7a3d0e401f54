from insight_worker.analyzers.base import BaseAnalyzer
from insight_worker.analyzers.document import DocumentAnalyzer
from insight_worker.analyzers.emotion import EmotionAnalyzer
from insight_worker.analyzers.factory import build_analyzer_registry
from insight_worker.analyzers.models import AnalysisOutcome, Evidence, InsufficientData
from insight_worker.analyzers.profile import ProfileAnalyzer
from insight_worker.analyzers.registry import AnalyzerRegistry
from insight_worker.analyzers.report import ReportAnalyzer
from insight_worker.analyzers.trait import TraitEstimationAnalyzer
from insight_worker.analyzers.vision import VisionAnalyzer

__all__ = [
    "AnalysisOutcome",
    "AnalyzerRegistry",
    "BaseAnalyzer",
    "DocumentAnalyzer",
    "EmotionAnalyzer",
    "Evidence",
    "InsufficientData",
    "ProfileAnalyzer",
    "ReportAnalyzer",
    "TraitEstimationAnalyzer",
    "VisionAnalyzer",
    "build_analyzer_registry",
]
