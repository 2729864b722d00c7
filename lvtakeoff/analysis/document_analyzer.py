import threading

from lvtakeoff.analysis.grid_count_pass import GridCountPass
from lvtakeoff.analysis.legend_pass import LegendPass
from lvtakeoff.analysis.models import LegendInfo, PerDocumentResult, QuickCountResult
from lvtakeoff.analysis.pipeline import AnalysisContext, PipelineStep
from lvtakeoff.analysis.quick_count_pass import QuickCountPass
from lvtakeoff.analysis.reconciler import SeverityThresholds
from lvtakeoff.analysis.steps import (
    GridCountStep,
    LegendStep,
    PreparePayloadStep,
    ReconcileStep,
    ValidationStep,
)
from lvtakeoff.analysis.validation_pass import ValidationPass
from lvtakeoff.config.settings import Settings
from lvtakeoff.decoding.decoder import ResponseDecoder
from lvtakeoff.documents.models import Document
from lvtakeoff.gateway.client_base import BaseVisionClient
from lvtakeoff.gateway.factory import VisionClientFactory
from lvtakeoff.logging.logger import Log


class DocumentAnalyzer:
    """Runs the three-pass analysis for one document.

    Pipeline: prepare payload -> legend -> grid count -> validation -> reconcile.
    """

    def __init__(
        self,
        client: BaseVisionClient,
        steps: list[PipelineStep],
        quick_pass: QuickCountPass,
    ) -> None:
        self._client = client
        self._steps = steps
        self._quick_pass = quick_pass

    def analyze(
        self,
        document: Document,
        legend: LegendInfo | None = None,
        cancel_event: threading.Event | None = None,
    ) -> PerDocumentResult:
        """Analyze one document.

        Pass failures are absorbed into the result as issues. Failures while
        preparing the payload propagate, as does AnalysisCancelledError.
        """
        Log.info(f"Starting 3-pass analysis for {document.name}")
        context = AnalysisContext(document=document, legend=legend, cancel_event=cancel_event)
        for step in self._steps:
            context = step.run(context)
        if context.result is None:
            raise ValueError("Analysis pipeline finished without a result")
        Log.info(
            f"Analysis complete for {document.name}: "
            f"{context.result.total_devices} devices detected"
        )
        return context.result

    def quick_analyze(self, document: Document) -> QuickCountResult:
        """Single-pass preview count. Gateway errors propagate."""
        payload = self._client.prepare(document)
        return self._quick_pass.run(payload)


def build_document_analyzer(
    settings: Settings,
    client: BaseVisionClient | None = None,
) -> DocumentAnalyzer:
    """Build a DocumentAnalyzer with all passes wired to one vision client."""
    client = client or VisionClientFactory.create(settings)
    decoder = ResponseDecoder()
    temperature = settings.analysis_temperature
    steps: list[PipelineStep] = [
        PreparePayloadStep(client),
        LegendStep(LegendPass(client=client, decoder=decoder, temperature=temperature)),
        GridCountStep(
            GridCountPass(
                client=client,
                decoder=decoder,
                temperature=temperature,
                prefer_overcount=settings.prefer_overcount,
            )
        ),
        ValidationStep(ValidationPass(client=client, decoder=decoder, temperature=temperature)),
        ReconcileStep(
            SeverityThresholds(
                high_percent=settings.high_severity_percent,
                medium_percent=settings.medium_severity_percent,
            )
        ),
    ]
    quick_pass = QuickCountPass(
        client=client,
        decoder=decoder,
        temperature=settings.quick_analysis_temperature,
    )
    return DocumentAnalyzer(client=client, steps=steps, quick_pass=quick_pass)
