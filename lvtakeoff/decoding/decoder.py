"""Total decoder for vision-model responses."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from lvtakeoff.decoding import strategies
from lvtakeoff.logging.logger import Log

FALLBACK_MARKER = "extracted-via-fallback"
EXTRACTED_SYSTEM = "EXTRACTED"
UNKNOWN_COMPLIANCE_STATUS = "UNKNOWN"

STRATEGY_DIRECT = "direct"
STRATEGY_CONSERVATIVE = "conservative-repair"
STRATEGY_AGGRESSIVE = "aggressive-repair"
STRATEGY_REGEX = "regex-fallback"
STRATEGY_EMPTY = "empty"

ParseStrategy = Callable[[str], dict[str, Any] | list[Any] | None]

PARSE_CHAIN: tuple[tuple[str, ParseStrategy], ...] = (
    (STRATEGY_DIRECT, strategies.parse_direct),
    (STRATEGY_CONSERVATIVE, strategies.parse_conservative),
    (STRATEGY_AGGRESSIVE, strategies.parse_aggressive),
)


def empty_result() -> dict[str, Any]:
    return {
        "devices": [],
        "symbols": [],
        "summary": {},
        "codeCompliance": {
            "status": UNKNOWN_COMPLIANCE_STATUS,
            "violations": [],
            "notes": "Analysis failed - manual review required",
        },
    }


@dataclass(frozen=True)
class DecodeResult:
    """A recovered value and the strategy that produced it."""

    value: dict[str, Any] | list[Any]
    strategy: str

    @property
    def used_fallback(self) -> bool:
        return self.strategy in (STRATEGY_REGEX, STRATEGY_EMPTY)

    def as_object(self) -> dict[str, Any]:
        """Return the value when it is an object, else an empty result."""
        if isinstance(self.value, dict):
            return self.value
        return empty_result()


class ResponseDecoder:
    """Recovers one structured value from arbitrary model text. Never raises."""

    def __init__(
        self,
        device_patterns: tuple[str, ...] = strategies.DEFAULT_DEVICE_PATTERNS,
    ) -> None:
        self._device_patterns = device_patterns

    def decode(self, text: str | None) -> DecodeResult:
        raw = text if isinstance(text, str) else ("" if text is None else str(text))
        for position, candidate in enumerate(strategies.candidate_spans(raw)):
            for name, strategy in PARSE_CHAIN:
                value = strategy(candidate)
                if value is not None:
                    if name != STRATEGY_DIRECT or position:
                        Log.debug(f"Response decoded after {name}", candidate=position)
                    return DecodeResult(value=value, strategy=name)

        Log.warning(
            "Could not parse model response, trying count extraction",
            length=len(raw),
        )
        counts = strategies.extract_device_counts(raw, self._device_patterns)
        if counts:
            Log.warning(f"Extracted {len(counts)} counts via regex fallback")
            return DecodeResult(
                value={
                    "devices": [],
                    "symbols": [],
                    "summary": {EXTRACTED_SYSTEM: counts},
                    "notes": FALLBACK_MARKER,
                },
                strategy=STRATEGY_REGEX,
            )

        Log.error("Could not parse model response, returning empty result")
        return DecodeResult(value=empty_result(), strategy=STRATEGY_EMPTY)
