from lvtakeoff.analysis.builders import build_legend_info
from lvtakeoff.analysis.exceptions import PassError
from lvtakeoff.analysis.models import LegendInfo
from lvtakeoff.analysis.prompt_loader import LEGEND_PROMPT, load_prompt_template
from lvtakeoff.decoding.decoder import ResponseDecoder
from lvtakeoff.gateway.client_base import BaseVisionClient
from lvtakeoff.gateway.exceptions import GatewayError
from lvtakeoff.gateway.models import PreparedPayload
from lvtakeoff.logging.logger import Log


class LegendPass:
    """Pass 1: classify the sheet and read its symbol legend."""

    name = "legend"

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
        self._prompt_template = prompt_template or load_prompt_template(LEGEND_PROMPT)

    def run(self, payload: PreparedPayload) -> LegendInfo:
        """Raises PassError when the model cannot be reached."""
        Log.info(f"Pass 1: extracting legend symbols from {payload.name}")
        try:
            raw = self._client.generate(
                prompt=self._prompt_template.format(),
                payload=payload,
                temperature=self._temperature,
            )
        except GatewayError as exc:
            raise PassError(self.name, f"Legend extraction failed: {exc}") from exc

        legend = build_legend_info(self._decoder.decode(raw).as_object())
        if legend.legend_found:
            Log.info(f"Pass 1 complete: found {len(legend.symbols)} symbols ({legend.sheet_type.value})")
        else:
            Log.info(f"Pass 1 complete: no legend found ({legend.sheet_type.value})")
        return legend
