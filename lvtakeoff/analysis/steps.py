from lvtakeoff.analysis.exceptions import PassError
from lvtakeoff.analysis.grid_count_pass import GridCountPass
from lvtakeoff.analysis.legend_pass import LegendPass
from lvtakeoff.analysis.models import (
    GridCountResult,
    Issue,
    IssueSeverity,
    LegendInfo,
    ValidationResult,
)
from lvtakeoff.analysis.pipeline import AnalysisContext, PipelineStep
from lvtakeoff.analysis.reconciler import SeverityThresholds, reconcile
from lvtakeoff.analysis.validation_pass import ValidationPass
from lvtakeoff.gateway.client_base import BaseVisionClient
from lvtakeoff.gateway.models import PreparedPayload
from lvtakeoff.logging.logger import Log


class PreparePayloadStep(PipelineStep):
    """Upload or encode the document once; every pass reuses the payload."""

    def __init__(self, client: BaseVisionClient) -> None:
        self._client = client

    def run(self, context: AnalysisContext) -> AnalysisContext:
        context.raise_if_cancelled()
        context.payload = self._client.prepare(context.document)
        Log.info(f"Prepared {context.document.name} as {context.payload.mode.value} payload")
        return context


class LegendStep(PipelineStep):
    def __init__(self, legend_pass: LegendPass) -> None:
        self._legend_pass = legend_pass

    def run(self, context: AnalysisContext) -> AnalysisContext:
        if context.legend is not None:
            Log.info(f"Reusing supplied legend for {context.document.name}")
            return context
        context.raise_if_cancelled()
        try:
            context.legend = self._legend_pass.run(_require_payload(context))
        except PassError as exc:
            Log.warning(f"Legend extraction failed for {context.document.name}: {exc}")
            context.legend = LegendInfo.default(notes=str(exc))
            context.issues.append(Issue(IssueSeverity.INFO, str(exc)))
        return context


class GridCountStep(PipelineStep):
    def __init__(self, grid_pass: GridCountPass) -> None:
        self._grid_pass = grid_pass

    def run(self, context: AnalysisContext) -> AnalysisContext:
        context.raise_if_cancelled()
        legend = _require_legend(context)
        try:
            context.grid = self._grid_pass.run(_require_payload(context), legend)
        except PassError as exc:
            Log.warning(f"Grid count failed for {context.document.name}: {exc}")
            context.grid = GridCountResult.failed(notes=str(exc))
            context.issues.append(Issue(IssueSeverity.WARNING, str(exc)))
        return context


class ValidationStep(PipelineStep):
    def __init__(self, validation_pass: ValidationPass) -> None:
        self._validation_pass = validation_pass

    def run(self, context: AnalysisContext) -> AnalysisContext:
        context.raise_if_cancelled()
        legend = _require_legend(context)
        if context.grid is None:
            raise ValueError("AnalysisContext.grid must be set before validation")
        try:
            context.validation = self._validation_pass.run(
                _require_payload(context),
                context.grid,
                legend,
            )
        except PassError as exc:
            Log.warning(f"Validation failed for {context.document.name}: {exc}")
            context.validation = ValidationResult.failed(notes=str(exc))
            context.issues.append(Issue(IssueSeverity.WARNING, str(exc)))
        return context


class ReconcileStep(PipelineStep):
    def __init__(self, thresholds: SeverityThresholds) -> None:
        self._thresholds = thresholds

    def run(self, context: AnalysisContext) -> AnalysisContext:
        if context.grid is None or context.validation is None:
            raise ValueError("AnalysisContext grid and validation must be set before reconcile")
        context.result = reconcile(
            _require_legend(context),
            context.grid,
            context.validation,
            file_name=context.document.name,
            thresholds=self._thresholds,
            issues=context.issues,
        )
        Log.info(
            f"Reconciled {context.document.name}: {context.result.totals.total} devices, "
            f"{len(context.result.discrepancies)} discrepancies"
        )
        return context


def _require_payload(context: AnalysisContext) -> PreparedPayload:
    if context.payload is None:
        raise ValueError("AnalysisContext.payload must be set before running a pass")
    return context.payload


def _require_legend(context: AnalysisContext) -> LegendInfo:
    if context.legend is None:
        raise ValueError("AnalysisContext.legend must be set before counting")
    return context.legend
