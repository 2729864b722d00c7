"""Batch analysis: runs every document and folds the results together."""

import threading
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace

from lvtakeoff.analysis.document_analyzer import DocumentAnalyzer
from lvtakeoff.analysis.exceptions import AnalysisCancelledError
from lvtakeoff.analysis.models import (
    AggregatedDevice,
    AggregateResult,
    Issue,
    IssueSeverity,
    PerDocumentResult,
    SheetQuantity,
    SheetResult,
)
from lvtakeoff.documents.models import Document
from lvtakeoff.logging.logger import Log

CANCELLED_MESSAGE = "Analysis cancelled before completion"


@dataclass(frozen=True)
class AnalysisProgress:
    current: int
    total: int
    file_name: str
    status: str = ""


ProgressCallback = Callable[[AnalysisProgress], None]


@dataclass(frozen=True)
class _Outcome:
    result: PerDocumentResult | None = None
    error: Exception | None = None
    cancelled: bool = False


class BatchAnalyzer:
    """Analyze many documents without letting one failure abort the batch.

    Sheets, folding and progress callbacks always follow input order, also
    when ``max_workers`` is above one.
    """

    def __init__(self, analyzer: DocumentAnalyzer, max_workers: int = 1) -> None:
        self._analyzer = analyzer
        self._max_workers = max(1, max_workers)

    def analyze_one(self, document: Document) -> PerDocumentResult:
        return self._analyzer.analyze(document)

    def analyze_all(
        self,
        documents: Sequence[Document],
        on_progress: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> AggregateResult:
        aggregate = AggregateResult()
        total = len(documents)
        Log.info(f"Analyzing {total} documents", max_workers=self._max_workers)

        if self._max_workers == 1 or total <= 1:
            outcomes = (self._run_captured(document, cancel_event) for document in documents)
            self._fold_all(aggregate, documents, outcomes, on_progress)
            return aggregate

        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            futures = [
                executor.submit(self._run_captured, document, cancel_event)
                for document in documents
            ]
            outcomes = (future.result() for future in futures)
            self._fold_all(aggregate, documents, outcomes, on_progress)
        return aggregate

    def _run_captured(
        self,
        document: Document,
        cancel_event: threading.Event | None,
    ) -> _Outcome:
        if cancel_event is not None and cancel_event.is_set():
            return _Outcome(cancelled=True)
        try:
            return _Outcome(result=self._analyzer.analyze(document, cancel_event=cancel_event))
        except AnalysisCancelledError:
            return _Outcome(cancelled=True)
        except Exception as exc:
            return _Outcome(error=exc)

    @staticmethod
    def _fold_all(
        aggregate: AggregateResult,
        documents: Sequence[Document],
        outcomes: Iterable[_Outcome],
        on_progress: ProgressCallback | None,
    ) -> None:
        total = len(documents)
        for index, (document, outcome) in enumerate(zip(documents, outcomes), start=1):
            if outcome.cancelled:
                add_cancelled(aggregate, document.name)
                status = "cancelled"
            elif outcome.result is not None:
                add_result(aggregate, document.name, outcome.result)
                status = "analyzed"
            else:
                add_failure(aggregate, document.name, outcome.error or RuntimeError("unknown error"))
                status = "failed"
            if on_progress is not None:
                on_progress(AnalysisProgress(index, total, document.name, status))


def add_result(aggregate: AggregateResult, file_name: str, result: PerDocumentResult) -> None:
    """Fold one successful document into the batch totals."""
    aggregate.sheets.append(SheetResult(file_name=file_name, result=result))

    for system, device_type, count in result.totals.items():
        devices = aggregate.totals_by_system.setdefault(system, {})
        devices[device_type] = devices.get(device_type, 0) + count

        key = f"{system}:{device_type}"
        entry = aggregate.aggregated_devices.setdefault(
            key, AggregatedDevice(symbol=device_type, system=system)
        )
        entry.total_qty += count
        entry.by_sheet.append(SheetQuantity(sheet=file_name, qty=count))

    aggregate.closets.extend(replace(closet, sheet=file_name) for closet in result.closets)
    aggregate.discrepancies.extend(
        replace(discrepancy, sheet=file_name) for discrepancy in result.discrepancies
    )
    aggregate.issues.extend(replace(issue, sheet=file_name) for issue in result.issues)


def add_failure(aggregate: AggregateResult, file_name: str, error: Exception) -> None:
    Log.error(f"Failed to analyze {file_name}: {error}")
    aggregate.sheets.append(SheetResult(file_name=file_name, error=str(error)))
    aggregate.issues.append(
        Issue(IssueSeverity.CRITICAL, f"Failed to analyze: {error}", sheet=file_name)
    )


def add_cancelled(aggregate: AggregateResult, file_name: str) -> None:
    Log.info(f"Skipping {file_name}: batch cancelled")
    aggregate.cancelled = True
    aggregate.sheets.append(
        SheetResult(file_name=file_name, error=CANCELLED_MESSAGE, cancelled=True)
    )
    aggregate.issues.append(Issue(IssueSeverity.INFO, CANCELLED_MESSAGE, sheet=file_name))
