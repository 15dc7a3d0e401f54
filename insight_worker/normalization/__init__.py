from insight_worker.normalization.response_normalizer import (
    extract_json_candidate,
    normalize_response,
)

__all__ = ["extract_json_candidate", "normalize_response"]
