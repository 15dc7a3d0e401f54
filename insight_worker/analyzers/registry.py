from collections.abc import Iterable

from insight_worker.analyzers.base import BaseAnalyzer
from insight_worker.analyzers.exceptions import UnknownAnalyzerError


class AnalyzerRegistry:
    """Maps analyzer types, and the record kinds they own, to analyzers."""

    def __init__(self, analyzers: Iterable[BaseAnalyzer] = ()) -> None:
        self._by_type: dict[str, BaseAnalyzer] = {}
        self._type_by_kind: dict[str, str] = {}
        for analyzer in analyzers:
            self.register(analyzer)

    def register(self, analyzer: BaseAnalyzer) -> None:
        self._by_type[analyzer.analyzer_type] = analyzer
        self._type_by_kind[analyzer.record_kind] = analyzer.analyzer_type

    def get(self, analyzer_type: str) -> BaseAnalyzer:
        """Return the analyzer registered for ``analyzer_type``.

        Raises:
            UnknownAnalyzerError: if none is registered.
        """
        analyzer = self._by_type.get(analyzer_type)
        if analyzer is None:
            raise UnknownAnalyzerError(
                f"Unknown analyzer type '{analyzer_type}'. Choose from: {sorted(self._by_type)}"
            )
        return analyzer

    def analyzer_type_for(self, record_kind: str) -> str | None:
        """Return the analyzer type that processes records of ``record_kind``."""
        return self._type_by_kind.get(record_kind)

    def types(self) -> list[str]:
        return sorted(self._by_type)
