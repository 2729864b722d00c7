from lvtakeoff.analysis.builders import build_quick_count
from lvtakeoff.analysis.models import QuickCountResult
from lvtakeoff.analysis.prompt_loader import QUICK_COUNT_PROMPT, load_prompt_template
from lvtakeoff.decoding.decoder import ResponseDecoder
from lvtakeoff.gateway.client_base import BaseVisionClient
from lvtakeoff.gateway.models import PreparedPayload
from lvtakeoff.logging.logger import Log


class QuickCountPass:
    """Single-pass preview count. Gateway errors propagate to the caller."""

    def __init__(
        self,
        *,
        client: BaseVisionClient,
        decoder: ResponseDecoder,
        temperature: float = 0.2,
        prompt_template: str | None = None,
    ) -> None:
        self._client = client
        self._decoder = decoder
        self._temperature = temperature
        self._prompt_template = prompt_template or load_prompt_template(QUICK_COUNT_PROMPT)

    def run(self, payload: PreparedPayload) -> QuickCountResult:
        Log.info(f"Quick analysis for {payload.name}")
        raw = self._client.generate(
            prompt=self._prompt_template.format(),
            payload=payload,
            temperature=self._temperature,
        )
        return build_quick_count(self._decoder.decode(raw).as_object())
