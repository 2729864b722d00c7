from lvtakeoff.analysis.aggregator import AnalysisProgress, BatchAnalyzer
from lvtakeoff.analysis.device_table import to_device_count_table
from lvtakeoff.analysis.document_analyzer import DocumentAnalyzer, build_document_analyzer
from lvtakeoff.analysis.reconciler import SeverityThresholds, reconcile

__all__ = [
    "AnalysisProgress",
    "BatchAnalyzer",
    "DocumentAnalyzer",
    "SeverityThresholds",
    "build_document_analyzer",
    "reconcile",
    "to_device_count_table",
]
