import pytest

from lvtakeoff.analysis.models import (
    Closet,
    ComplianceFindings,
    DeviceCount,
    GridCountResult,
    Issue,
    IssueSeverity,
    LegendInfo,
    Severity,
    SheetType,
    ValidationResult,
)
from lvtakeoff.analysis.reconciler import (
    RESOLUTION_REVIEW,
    RESOLUTION_USE_VALIDATION,
    SeverityThresholds,
    find_discrepancies,
    percent_difference,
    reconcile,
)


def _counts(**devices: int) -> DeviceCount:
    return DeviceCount.from_raw({"CABLING": {name.replace("_", " "): qty for name, qty in devices.items()}})


class TestSeverityThresholds:
    @pytest.mark.parametrize(
        ("percent", "expected"),
        [
            (0.0, Severity.LOW),
            (10.0, Severity.LOW),
            (10.01, Severity.MEDIUM),
            (20.0, Severity.MEDIUM),
            (20.01, Severity.HIGH),
            (100.0, Severity.HIGH),
        ],
    )
    def test_strict_boundaries(self, percent: float, expected: Severity) -> None:
        assert SeverityThresholds().classify(percent) is expected

    def test_custom_thresholds(self) -> None:
        thresholds = SeverityThresholds(high_percent=50.0, medium_percent=25.0)
        assert thresholds.classify(30.0) is Severity.MEDIUM
        assert thresholds.classify(51.0) is Severity.HIGH


class TestFindDiscrepancies:
    @pytest.mark.parametrize(
        ("grid", "validation", "severity"),
        [
            (10, 12, Severity.MEDIUM),
            (10, 13, Severity.HIGH),
            (10, 11, Severity.LOW),
            (100, 89, Severity.MEDIUM),
            (100, 79, Severity.HIGH),
            (0, 4, Severity.HIGH),
            (4, 0, Severity.HIGH),
        ],
    )
    def test_severity_and_sign(self, grid: int, validation: int, severity: Severity) -> None:
        (discrepancy,) = find_discrepancies(
            _counts(Data_Outlet=grid), _counts(Data_Outlet=validation)
        )
        assert discrepancy.severity is severity
        assert discrepancy.difference == validation - grid
        assert discrepancy.grid_count == grid
        assert discrepancy.validation_count == validation

    def test_equal_counts_emit_nothing(self) -> None:
        assert find_discrepancies(_counts(WAP=3), _counts(WAP=3)) == []

    def test_resolution_hint(self) -> None:
        higher, lower = find_discrepancies(
            _counts(WAP=3, Card_Reader=5), _counts(WAP=4, Card_Reader=2)
        )
        assert higher.resolution == RESOLUTION_USE_VALIDATION
        assert lower.resolution == RESOLUTION_REVIEW

    def test_percent_rounded_to_one_decimal(self) -> None:
        (discrepancy,) = find_discrepancies(_counts(WAP=3), _counts(WAP=4))
        assert discrepancy.percent_difference == 33.3

    def test_zero_grid_is_full_difference(self) -> None:
        assert percent_difference(0, 5) == 100.0
        assert percent_difference(0, 0) == 0.0

    def test_keys_from_both_sides(self) -> None:
        discrepancies = find_discrepancies(_counts(WAP=2), _counts(Dome_Camera=1))
        assert {d.device_type for d in discrepancies} == {"WAP", "Dome Camera"}


class TestReconcile:
    def test_validation_counts_win(self) -> None:
        legend = LegendInfo(sheet_type=SheetType.FLOOR_PLAN, legend_found=True)
        grid = GridCountResult(totals=_counts(Data_Outlet=10), confidence=0.8, notes="grid note")
        validation = ValidationResult(
            summary=_counts(Data_Outlet=12),
            closets=(Closet(name="IDF-1"),),
            compliance=ComplianceFindings(status="COMPLIANT"),
            confidence=0.9,
        )

        result = reconcile(legend, grid, validation, file_name="A.pdf")

        assert result.file_name == "A.pdf"
        assert result.totals.get("CABLING", "Data Outlet") == 12
        assert result.total_devices == 12
        assert result.closets[0].name == "IDF-1"
        assert result.compliance.status == "COMPLIANT"
        assert len(result.discrepancies) == 1
        assert result.discrepancies[0].difference == 2
        assert result.scores.legend_found
        assert result.scores.grid_confidence == 0.8
        assert result.scores.validation_confidence == 0.9
        assert "grid note" in result.notes
        assert result.analysis_method == "3-pass-multipass"

    def test_reference_sheet_has_no_discrepancies(self) -> None:
        legend = LegendInfo(sheet_type=SheetType.LEGEND_SHEET, should_count_devices=False)

        result = reconcile(
            legend, GridCountResult.skipped_for(legend), ValidationResult.skipped_for(legend)
        )

        assert result.discrepancies == ()
        assert result.totals.is_empty()

    def test_threads_issues_and_thresholds(self) -> None:
        issue = Issue(IssueSeverity.WARNING, "Grid counting failed: boom")
        result = reconcile(
            LegendInfo(),
            GridCountResult(totals=_counts(WAP=10)),
            ValidationResult(summary=_counts(WAP=12)),
            thresholds=SeverityThresholds(high_percent=15.0, medium_percent=5.0),
            issues=[issue],
        )
        assert result.issues == (issue,)
        assert result.discrepancies[0].severity is Severity.HIGH
