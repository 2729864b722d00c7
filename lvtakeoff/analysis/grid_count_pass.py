from dataclasses import replace

from lvtakeoff.analysis.builders import build_grid_count
from lvtakeoff.analysis.exceptions import PassError
from lvtakeoff.analysis.models import GridCountResult, LegendInfo
from lvtakeoff.analysis.prompt_loader import GRID_COUNT_PROMPT, load_prompt_template
from lvtakeoff.decoding.decoder import ResponseDecoder
from lvtakeoff.gateway.client_base import BaseVisionClient
from lvtakeoff.gateway.exceptions import GatewayError
from lvtakeoff.gateway.models import PreparedPayload
from lvtakeoff.logging.logger import Log

OVERCOUNT_RULE = "When a symbol is ambiguous, COUNT IT. Overcounting is better than undercounting."
STRICT_RULE = "Count a symbol only when you can identify it; list ambiguous ones in countingNotes."


class GridCountPass:
    """Pass 2: zoned 3x3 recount of every device symbol."""

    name = "grid_count"

    def __init__(
        self,
        *,
        client: BaseVisionClient,
        decoder: ResponseDecoder,
        temperature: float = 0.1,
        prefer_overcount: bool = True,
        prompt_template: str | None = None,
    ) -> None:
        self._client = client
        self._decoder = decoder
        self._temperature = temperature
        self._prefer_overcount = prefer_overcount
        self._prompt_template = prompt_template or load_prompt_template(GRID_COUNT_PROMPT)

    def run(self, payload: PreparedPayload, legend: LegendInfo) -> GridCountResult:
        """Count devices zone by zone.

        Reference sheets are not sent to the model at all: symbols on a
        legend or schedule are artwork, so the result is all zeros.

        Raises:
            PassError: when the model cannot be reached.
        """
        if not legend.should_count_devices:
            Log.info(
                f"Pass 2: skipping count on {legend.sheet_type.value} sheet "
                f"'{legend.sheet_name}' - reference only"
            )
            return GridCountResult.skipped_for(legend)

        Log.info(f"Pass 2: grid-based counting on {payload.name}")
        try:
            raw = self._client.generate(
                prompt=self.build_prompt(legend),
                payload=payload,
                temperature=self._temperature,
            )
        except GatewayError as exc:
            raise PassError(self.name, f"Grid counting failed: {exc}") from exc

        decoded = self._decoder.decode(raw)
        result = build_grid_count(decoded.as_object())
        if decoded.used_fallback:
            result = replace(result, notes=_append_note(result.notes, f"decoded via {decoded.strategy}"))
        Log.info(f"Pass 2 complete: {result.totals.total} devices, confidence {result.confidence:.2f}")
        return result

    def build_prompt(self, legend: LegendInfo) -> str:
        return self._prompt_template.format(
            ambiguity_rule=OVERCOUNT_RULE if self._prefer_overcount else STRICT_RULE,
            symbol_descriptions=_legend_symbol_lines(legend),
        )


def _legend_symbol_lines(legend: LegendInfo) -> str:
    if not legend.legend_found or not legend.symbols:
        return ""
    lines = "\n".join(
        f"- {symbol.symbol}: {symbol.description} ({symbol.system})"
        for symbol in legend.symbols
    )
    return f"\nLEGEND SYMBOLS FROM THIS DRAWING:\n{lines}\n"


def _append_note(notes: str, extra: str) -> str:
    return f"{notes} [{extra}]" if notes else f"[{extra}]"
