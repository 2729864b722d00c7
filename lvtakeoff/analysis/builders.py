"""Builds pass results from decoded model output.

Model output is untrusted: every builder accepts anything, keeps what is
well-formed and drops the rest instead of raising.
"""

from typing import Any

from lvtakeoff.analysis.models import (
    Backbone,
    Closet,
    ComplianceFindings,
    ComplianceViolation,
    DeviceCount,
    GridCountResult,
    LegendInfo,
    QuickCountResult,
    SheetType,
    Symbol,
    ValidationResult,
    coerce_count,
)

_REFERENCE_SHEET_TYPES = frozenset({
    SheetType.LEGEND_SHEET,
    SheetType.SCHEDULE_SHEET,
    SheetType.TITLE_SHEET,
    SheetType.DETAIL_SHEET,
})


def build_legend_info(data: dict[str, Any]) -> LegendInfo:
    sheet_type = _sheet_type(data.get("sheetType"))
    should_count = data.get("shouldCountDevices")
    if not isinstance(should_count, bool):
        should_count = sheet_type not in _REFERENCE_SHEET_TYPES
    symbols = tuple(
        symbol for symbol in (_build_symbol(item) for item in _list(data.get("symbols")))
        if symbol is not None
    )
    legend_found = data.get("legendFound")
    return LegendInfo(
        sheet_type=sheet_type,
        sheet_name=_text(data.get("sheetName")),
        should_count_devices=should_count,
        sheet_type_reason=_text(data.get("sheetTypeReason")),
        legend_found=legend_found if isinstance(legend_found, bool) else bool(symbols),
        legend_location=_text(data.get("legendLocation")),
        symbols=symbols,
        notes=_text(data.get("notes")),
    )


def build_grid_count(data: dict[str, Any]) -> GridCountResult:
    zones = {
        str(zone): DeviceCount.from_raw(counts)
        for zone, counts in _dict(data.get("gridCounts")).items()
    }
    raw_totals = data.get("totalsBySystem")
    if not isinstance(raw_totals, dict):
        raw_totals = data.get("summary")
    totals = DeviceCount.from_raw(raw_totals)
    if totals.is_empty() and zones:
        for zone_counts in zones.values():
            totals = totals.merged(zone_counts)
    return GridCountResult(
        zones=zones,
        totals=totals,
        confidence=_confidence(data.get("confidence")),
        notes=_text(data.get("countingNotes") or data.get("notes")),
    )


def build_validation_result(data: dict[str, Any]) -> ValidationResult:
    summary = DeviceCount.from_raw(data.get("summary"))
    devices = tuple(item for item in _list(data.get("devices")) if isinstance(item, dict))
    total_devices = coerce_count(data.get("totalDevices"))
    return ValidationResult(
        summary=summary,
        closets=tuple(
            closet for closet in (_build_closet(item) for item in _list(data.get("closets")))
            if closet is not None
        ),
        backbones=tuple(
            backbone
            for backbone in (_build_backbone(item) for item in _list(data.get("backbones")))
            if backbone is not None
        ),
        compliance=_build_compliance(data.get("codeCompliance")),
        confidence=_confidence(data.get("overallConfidence", data.get("confidence"))),
        devices=devices,
        total_devices=total_devices if total_devices is not None else summary.total,
        sheet_name=_text(data.get("sheetName")),
        notes=_text(data.get("notes")),
    )


def build_quick_count(data: dict[str, Any]) -> QuickCountResult:
    summary = DeviceCount.from_raw(data.get("summary"))
    total_devices = coerce_count(data.get("totalDevices"))
    return QuickCountResult(
        summary=summary,
        total_devices=total_devices if total_devices is not None else summary.total,
        confidence=_confidence(data.get("confidence")),
        notes=_text(data.get("notes")),
    )


def _build_symbol(raw: Any) -> Symbol | None:
    if not isinstance(raw, dict):
        return None
    description = _text(raw.get("description"))
    symbol = _text(raw.get("symbol"))
    if not description and not symbol:
        return None
    return Symbol(
        symbol=symbol,
        description=description,
        system=_text(raw.get("system")),
        visual_description=_text(raw.get("visualDescription")),
    )


def _build_closet(raw: Any) -> Closet | None:
    if not isinstance(raw, dict):
        return None
    name = _text(raw.get("name"))
    if not name:
        return None
    return Closet(
        name=name,
        floor=_text(raw.get("floor")),
        location=_text(raw.get("location")),
        feeds_to=tuple(_text(item) for item in _list(raw.get("feedsTo")) if _text(item)),
        feeds_from=_text(raw.get("feedsFrom")),
        data_ports=_count(raw.get("dataPorts")),
        voice_ports=_count(raw.get("voicePorts")),
        fiber_ports=_count(raw.get("fiberPorts")),
        cable_runs=_count(raw.get("cableRuns")),
        avg_cable_length=_count(raw.get("avgCableLength")),
        total_cable_ft=_count(raw.get("totalCableFt")),
        devices_fed=DeviceCount.from_raw(raw.get("devicesFed")),
        notes=_text(raw.get("notes")),
    )


def _build_backbone(raw: Any) -> Backbone | None:
    if not isinstance(raw, dict):
        return None
    from_closet = _text(raw.get("from"))
    to_closet = _text(raw.get("to"))
    if not from_closet or not to_closet:
        return None
    return Backbone(
        from_closet=from_closet,
        to_closet=to_closet,
        cable_type=_text(raw.get("type")),
        category=_text(raw.get("category")),
        strand_count=_count(raw.get("strandCount")),
        pair_count=_count(raw.get("pairCount")),
        estimated_length=_text(raw.get("estimatedLength")),
        notes=_text(raw.get("notes")),
    )


def _build_compliance(raw: Any) -> ComplianceFindings:
    if not isinstance(raw, dict):
        return ComplianceFindings()
    violations = tuple(
        ComplianceViolation(
            code=_text(item.get("code")),
            severity=_text(item.get("severity")),
            location=_text(item.get("location")),
            issue=_text(item.get("issue")),
        )
        for item in _list(raw.get("violations"))
        if isinstance(item, dict)
    )
    return ComplianceFindings(
        status=_text(raw.get("status")).upper() or "UNKNOWN",
        violations=violations,
        notes=_text(raw.get("notes")),
    )


def _sheet_type(raw: Any) -> SheetType:
    try:
        return SheetType(_text(raw).upper())
    except ValueError:
        return SheetType.UNKNOWN


def _confidence(raw: Any) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return 0.0
    return max(0.0, min(1.0, float(raw)))


def _count(raw: Any) -> int:
    return coerce_count(raw) or 0


def _text(raw: Any) -> str:
    if raw is None:
        return ""
    return str(raw).strip()


def _list(raw: Any) -> list[Any]:
    return raw if isinstance(raw, list) else []


def _dict(raw: Any) -> dict[str, Any]:
    return raw if isinstance(raw, dict) else {}
