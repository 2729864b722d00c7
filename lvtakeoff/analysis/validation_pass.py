import json
from dataclasses import replace

from lvtakeoff.analysis.builders import build_validation_result
from lvtakeoff.analysis.exceptions import PassError
from lvtakeoff.analysis.models import GridCountResult, LegendInfo, ValidationResult
from lvtakeoff.analysis.prompt_loader import VALIDATION_PROMPT, load_prompt_template
from lvtakeoff.decoding.decoder import ResponseDecoder
from lvtakeoff.gateway.client_base import BaseVisionClient
from lvtakeoff.gateway.exceptions import GatewayError
from lvtakeoff.gateway.models import PreparedPayload
from lvtakeoff.logging.logger import Log


class ValidationPass:
    """Pass 3: independent full-sheet count with closet attribution.

    Its summary is the authoritative count for the document.
    """

    name = "validation"

    def __init__(
        self,
        *,
        client: BaseVisionClient,
        decoder: ResponseDecoder,
        temperature: float = 0.1,
        prompt_template: str | None = None,
    ) -> None:
        self._client = client
        self._decoder = decoder
        self._temperature = temperature
        self._prompt_template = prompt_template or load_prompt_template(VALIDATION_PROMPT)

    def run(
        self,
        payload: PreparedPayload,
        grid: GridCountResult,
        legend: LegendInfo,
    ) -> ValidationResult:
        """Raises PassError when the model cannot be reached."""
        if not legend.should_count_devices:
            Log.info(f"Pass 3: skipping validation on {legend.sheet_type.value} sheet")
            return ValidationResult.skipped_for(legend)

        Log.info(f"Pass 3: full sheet validation on {payload.name}")
        try:
            raw = self._client.generate(
                prompt=self.build_prompt(grid, legend),
                payload=payload,
                temperature=self._temperature,
            )
        except GatewayError as exc:
            raise PassError(self.name, f"Validation failed: {exc}") from exc

        decoded = self._decoder.decode(raw)
        result = build_validation_result(decoded.as_object())
        if decoded.used_fallback:
            notes = f"{result.notes} [decoded via {decoded.strategy}]".strip()
            result = replace(result, notes=notes)
        Log.info(
            f"Pass 3 complete: {result.summary.total} devices, "
            f"{len(result.closets)} closets, {len(result.backbones)} backbones"
        )
        return result

    def build_prompt(self, grid: GridCountResult, legend: LegendInfo) -> str:
        previous_counts = ""
        if not grid.totals.is_empty():
            previous_counts = (
                "\nEARLIER COUNT (context only, verify independently):\n"
                f"{json.dumps(grid.totals.to_dict(), indent=2)}\n"
            )
        known_symbols = ""
        if legend.legend_found and legend.symbols:
            lines = "\n".join(
                f"- {symbol.description}: {symbol.visual_description or symbol.symbol}"
                for symbol in legend.symbols
            )
            known_symbols = f"\nSYMBOLS DEFINED IN THE LEGEND:\n{lines}\n"
        return self._prompt_template.format(
            previous_counts=previous_counts,
            known_symbols=known_symbols,
        )
