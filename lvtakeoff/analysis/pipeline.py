import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from lvtakeoff.analysis.exceptions import AnalysisCancelledError
from lvtakeoff.analysis.models import (
    GridCountResult,
    Issue,
    LegendInfo,
    PerDocumentResult,
    ValidationResult,
)
from lvtakeoff.documents.models import Document
from lvtakeoff.gateway.models import PreparedPayload


@dataclass(slots=True)
class AnalysisContext:
    document: Document
    payload: PreparedPayload | None = None
    legend: LegendInfo | None = None
    grid: GridCountResult | None = None
    validation: ValidationResult | None = None
    result: PerDocumentResult | None = None
    issues: list[Issue] = field(default_factory=list)
    cancel_event: threading.Event | None = None

    def raise_if_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise AnalysisCancelledError(f"Analysis of {self.document.name} cancelled")


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: AnalysisContext) -> AnalysisContext:
        raise NotImplementedError
