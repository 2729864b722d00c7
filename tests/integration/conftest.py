from collections.abc import Callable

import httpx
import pytest

from lvtakeoff.gateway.gemini_client_adapter import GeminiClientAdapter


@pytest.fixture()
def gemini_adapter() -> Callable[..., GeminiClientAdapter]:
    """Build a Gemini adapter whose HTTP traffic goes to ``handler``."""
    def build(
        handler: Callable[[httpx.Request], httpx.Response],
        *,
        api_base_url: str,
        upload_base_url: str,
    ) -> GeminiClientAdapter:
        return GeminiClientAdapter(
            api_key="integration-key",
            model="gemini-test",
            timeout_seconds=5,
            api_base_url=api_base_url,
            upload_base_url=upload_base_url,
            poll_max_attempts=3,
            http_client=httpx.Client(transport=httpx.MockTransport(handler)),
            sleep=lambda seconds: None,
        )

    return build
