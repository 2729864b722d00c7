"""Cross-checks the grid count against the validation count.

The validation summary is the authoritative count for a document; the grid
count only contributes a confidence signal and discrepancy detection.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from lvtakeoff.analysis.models import (
    DeviceCount,
    Discrepancy,
    GridCountResult,
    Issue,
    LegendInfo,
    PassScores,
    PerDocumentResult,
    Severity,
    ValidationResult,
)

RESOLUTION_USE_VALIDATION = "Using higher validation count"
RESOLUTION_REVIEW = "Review recommended"


@dataclass(frozen=True)
class SeverityThresholds:
    """Percent thresholds; a difference must exceed a threshold to reach its tier."""

    high_percent: float = 20.0
    medium_percent: float = 10.0

    def classify(self, percent_difference: float) -> Severity:
        if percent_difference > self.high_percent:
            return Severity.HIGH
        if percent_difference > self.medium_percent:
            return Severity.MEDIUM
        return Severity.LOW


def percent_difference(grid_count: int, validation_count: int) -> float:
    """Relative difference against the grid count; a zero grid count is 100%."""
    if grid_count == 0:
        return 100.0 if validation_count else 0.0
    return abs(validation_count - grid_count) * 100 / grid_count


def find_discrepancies(
    grid_totals: DeviceCount,
    validation_summary: DeviceCount,
    thresholds: SeverityThresholds = SeverityThresholds(),
) -> list[Discrepancy]:
    keys = list(dict.fromkeys(grid_totals.keys() + validation_summary.keys()))
    discrepancies: list[Discrepancy] = []
    for system, device_type in keys:
        grid_count = grid_totals.get(system, device_type)
        validation_count = validation_summary.get(system, device_type)
        difference = validation_count - grid_count
        if difference == 0:
            continue
        percent = percent_difference(grid_count, validation_count)
        discrepancies.append(
            Discrepancy(
                system=system,
                device_type=device_type,
                grid_count=grid_count,
                validation_count=validation_count,
                difference=difference,
                percent_difference=round(percent, 1),
                severity=thresholds.classify(percent),
                resolution=(
                    RESOLUTION_USE_VALIDATION
                    if validation_count >= grid_count
                    else RESOLUTION_REVIEW
                ),
            )
        )
    return discrepancies


def reconcile(
    legend: LegendInfo,
    grid: GridCountResult,
    validation: ValidationResult,
    *,
    file_name: str = "",
    thresholds: SeverityThresholds = SeverityThresholds(),
    issues: Iterable[Issue] = (),
) -> PerDocumentResult:
    """Merge the three pass results into one per-document result.

    A skipped grid count (reference sheet) produces no discrepancies.
    """
    discrepancies: list[Discrepancy] = []
    if not grid.skipped and not validation.skipped:
        discrepancies = find_discrepancies(grid.totals, validation.summary, thresholds)

    notes = tuple(
        note for note in (legend.notes, grid.notes, validation.notes, validation.compliance.notes)
        if note
    )
    return PerDocumentResult(
        file_name=file_name,
        legend=legend,
        totals=validation.summary,
        grid_zones=grid.zones,
        closets=validation.closets,
        backbones=validation.backbones,
        compliance=validation.compliance,
        discrepancies=tuple(discrepancies),
        scores=PassScores(
            legend_found=legend.legend_found,
            grid_confidence=grid.confidence,
            validation_confidence=validation.confidence,
        ),
        devices=validation.devices,
        total_devices=validation.total_devices or validation.summary.total,
        notes=notes,
        issues=tuple(issues),
    )
