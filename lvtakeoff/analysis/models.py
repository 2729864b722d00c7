from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DEFAULT_SYSTEMS: tuple[str, ...] = ("CABLING", "ACCESS", "CCTV", "FIRE", "INTERCOM", "A/V")


class SheetType(str, Enum):
    FLOOR_PLAN = "FLOOR_PLAN"
    LEGEND_SHEET = "LEGEND_SHEET"
    SCHEDULE_SHEET = "SCHEDULE_SHEET"
    TITLE_SHEET = "TITLE_SHEET"
    DETAIL_SHEET = "DETAIL_SHEET"
    UNKNOWN = "UNKNOWN"


class Severity(str, Enum):
    """Discrepancy severity tier."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class IssueSeverity(str, Enum):
    CRITICAL = "CRITICAL"
    WARNING = "WARNING"
    INFO = "INFO"


def coerce_count(value: Any) -> int | None:
    """Return a non-negative integer count, or None for unusable values."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return None
    try:
        number = int(float(value.strip()) if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        return None
    return number if number >= 0 else None


@dataclass(frozen=True)
class DeviceCount:
    """Quantities keyed by system, then device-type label.

    Only positive counts are stored; an absent key means zero.
    """

    counts: dict[str, dict[str, int]] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: Any) -> "DeviceCount":
        """Build from untrusted ``{system: {device: count}}`` data."""
        counts: dict[str, dict[str, int]] = {}
        if not isinstance(raw, dict):
            return cls()
        for system, devices in raw.items():
            if not isinstance(devices, dict):
                continue
            for device_type, value in devices.items():
                count = coerce_count(value)
                if not count:
                    continue
                counts.setdefault(str(system), {})[str(device_type)] = count
        return cls(counts=counts)

    def get(self, system: str, device_type: str) -> int:
        return self.counts.get(system, {}).get(device_type, 0)

    def items(self) -> list[tuple[str, str, int]]:
        return [
            (system, device_type, count)
            for system, devices in self.counts.items()
            for device_type, count in devices.items()
        ]

    def keys(self) -> list[tuple[str, str]]:
        return [(system, device_type) for system, device_type, _ in self.items()]

    @property
    def total(self) -> int:
        return sum(count for _, _, count in self.items())

    def is_empty(self) -> bool:
        return not self.counts

    def merged(self, other: "DeviceCount") -> "DeviceCount":
        counts = self.to_dict()
        for system, device_type, count in other.items():
            devices = counts.setdefault(system, {})
            devices[device_type] = devices.get(device_type, 0) + count
        return DeviceCount(counts=counts)

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {system: dict(devices) for system, devices in self.counts.items()}


@dataclass(frozen=True)
class Symbol:
    """One legend entry: how a device is drawn and what it is."""

    symbol: str
    description: str
    system: str = ""
    visual_description: str = ""


@dataclass(frozen=True)
class LegendInfo:
    sheet_type: SheetType = SheetType.UNKNOWN
    sheet_name: str = ""
    should_count_devices: bool = True
    sheet_type_reason: str = ""
    legend_found: bool = False
    legend_location: str = ""
    symbols: tuple[Symbol, ...] = ()
    notes: str = ""

    @classmethod
    def default(cls, notes: str = "") -> "LegendInfo":
        """Legend used when extraction failed: count the sheet, no symbols."""
        return cls(notes=notes)


@dataclass(frozen=True)
class GridCountResult:
    zones: dict[str, DeviceCount] = field(default_factory=dict)
    totals: DeviceCount = field(default_factory=DeviceCount)
    confidence: float = 0.0
    notes: str = ""
    skipped: bool = False
    sheet_type: SheetType | None = None

    @classmethod
    def skipped_for(cls, legend: LegendInfo) -> "GridCountResult":
        return cls(
            confidence=1.0,
            notes=(
                f"Skipped counting - {legend.sheet_type.value} used for "
                "symbol reference only"
            ),
            skipped=True,
            sheet_type=legend.sheet_type,
        )

    @classmethod
    def failed(cls, notes: str) -> "GridCountResult":
        return cls(confidence=0.0, notes=notes)


@dataclass(frozen=True)
class Closet:
    """A distribution point (MDF/IDF/TR) and the devices it feeds."""

    name: str
    floor: str = ""
    location: str = ""
    feeds_to: tuple[str, ...] = ()
    feeds_from: str = ""
    data_ports: int = 0
    voice_ports: int = 0
    fiber_ports: int = 0
    cable_runs: int = 0
    avg_cable_length: int = 0
    total_cable_ft: int = 0
    devices_fed: DeviceCount = field(default_factory=DeviceCount)
    notes: str = ""
    sheet: str = ""


@dataclass(frozen=True)
class Backbone:
    """Cabling between two closets."""

    from_closet: str
    to_closet: str
    cable_type: str = ""
    category: str = ""
    strand_count: int = 0
    pair_count: int = 0
    estimated_length: str = ""
    notes: str = ""


@dataclass(frozen=True)
class ComplianceViolation:
    code: str
    severity: str = ""
    location: str = ""
    issue: str = ""


@dataclass(frozen=True)
class ComplianceFindings:
    status: str = "UNKNOWN"
    violations: tuple[ComplianceViolation, ...] = ()
    notes: str = ""


@dataclass(frozen=True)
class ValidationResult:
    summary: DeviceCount = field(default_factory=DeviceCount)
    closets: tuple[Closet, ...] = ()
    backbones: tuple[Backbone, ...] = ()
    compliance: ComplianceFindings = field(default_factory=ComplianceFindings)
    confidence: float = 0.0
    devices: tuple[dict[str, Any], ...] = ()
    total_devices: int = 0
    sheet_name: str = ""
    notes: str = ""
    skipped: bool = False

    @classmethod
    def skipped_for(cls, legend: LegendInfo) -> "ValidationResult":
        return cls(
            confidence=1.0,
            sheet_name=legend.sheet_name,
            notes=f"Skipped validation - {legend.sheet_type.value} is reference only",
            skipped=True,
        )

    @classmethod
    def failed(cls, notes: str) -> "ValidationResult":
        return cls(confidence=0.0, notes=notes)


@dataclass(frozen=True)
class Discrepancy:
    """Mismatch between the grid count and the validation count."""

    system: str
    device_type: str
    grid_count: int
    validation_count: int
    difference: int
    percent_difference: float
    severity: Severity
    resolution: str
    sheet: str = ""


@dataclass(frozen=True)
class PassScores:
    legend_found: bool = False
    grid_confidence: float = 0.0
    validation_confidence: float = 0.0


@dataclass(frozen=True)
class Issue:
    severity: IssueSeverity
    message: str
    sheet: str = ""


@dataclass(frozen=True)
class PerDocumentResult:
    file_name: str
    legend: LegendInfo
    totals: DeviceCount
    grid_zones: dict[str, DeviceCount] = field(default_factory=dict)
    closets: tuple[Closet, ...] = ()
    backbones: tuple[Backbone, ...] = ()
    compliance: ComplianceFindings = field(default_factory=ComplianceFindings)
    discrepancies: tuple[Discrepancy, ...] = ()
    scores: PassScores = field(default_factory=PassScores)
    devices: tuple[dict[str, Any], ...] = ()
    total_devices: int = 0
    notes: tuple[str, ...] = ()
    issues: tuple[Issue, ...] = ()
    analysis_method: str = "3-pass-multipass"


@dataclass(frozen=True)
class QuickCountResult:
    summary: DeviceCount
    total_devices: int = 0
    confidence: float = 0.0
    notes: str = ""


@dataclass(frozen=True)
class SheetResult:
    """One input document's slot in a batch, successful or not."""

    file_name: str
    result: PerDocumentResult | None = None
    error: str = ""
    cancelled: bool = False

    @property
    def succeeded(self) -> bool:
        return self.result is not None


@dataclass(frozen=True)
class SheetQuantity:
    sheet: str
    qty: int


@dataclass
class AggregatedDevice:
    symbol: str
    system: str
    total_qty: int = 0
    by_sheet: list[SheetQuantity] = field(default_factory=list)


@dataclass
class AggregateResult:
    """Batch accumulator, folded one document at a time."""

    sheets: list[SheetResult] = field(default_factory=list)
    totals_by_system: dict[str, dict[str, int]] = field(
        default_factory=lambda: {system: {} for system in DEFAULT_SYSTEMS}
    )
    aggregated_devices: dict[str, AggregatedDevice] = field(default_factory=dict)
    closets: list[Closet] = field(default_factory=list)
    discrepancies: list[Discrepancy] = field(default_factory=list)
    issues: list[Issue] = field(default_factory=list)
    cancelled: bool = False

    def total_for(self, system: str, device_type: str) -> int:
        return self.totals_by_system.get(system, {}).get(device_type, 0)
