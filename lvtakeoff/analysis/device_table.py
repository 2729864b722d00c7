import re
from typing import Any

from lvtakeoff.analysis.models import AggregateResult

DEVICE_TABLE_SYSTEMS: tuple[str, ...] = (
    "CABLING",
    "ACCESS",
    "CCTV",
    "FIRE",
    "INTERCOM",
    "A/V",
    "AV",
    "INTRUSION",
    "OTHER",
)
FALLBACK_SYSTEM = "OTHER"
UNIT_EACH = "EA"

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]")
_UNDERSCORE_RUN = re.compile(r"_+")


def clean_device_key(device_type: str) -> str:
    """``"Horn/Strobe (Wall)"`` -> ``"horn_strobe_wall_"``."""
    return _UNDERSCORE_RUN.sub("_", _NON_ALPHANUMERIC.sub("_", device_type.lower()))


def to_device_count_table(aggregate: AggregateResult) -> dict[str, dict[str, dict[str, Any]]]:
    """Convert batch totals into the nested table consumed by BOM generation.

    Systems outside the known list fold into ``OTHER``. Two device labels
    that clean to the same key within one system are summed.
    """
    table: dict[str, dict[str, dict[str, Any]]] = {
        system: {} for system in DEVICE_TABLE_SYSTEMS
    }
    for system, devices in aggregate.totals_by_system.items():
        target = table[system if system in table else FALLBACK_SYSTEM]
        for device_type, qty in devices.items():
            if qty <= 0:
                continue
            key = clean_device_key(device_type)
            if key in target:
                target[key]["qty"] += qty
                continue
            target[key] = {"display_name": device_type, "qty": qty, "unit": UNIT_EACH}
    return table
