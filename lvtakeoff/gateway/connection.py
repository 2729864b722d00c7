from dataclasses import dataclass

from lvtakeoff.gateway.client_base import BaseVisionClient
from lvtakeoff.gateway.exceptions import GatewayError
from lvtakeoff.logging.logger import Log

CONNECTION_CHECK_PROMPT = 'Say "API connected successfully"'


@dataclass(frozen=True)
class ConnectionStatus:
    success: bool
    error: str = ""


def check_connection(client: BaseVisionClient) -> ConnectionStatus:
    """Send a text-only prompt to confirm the provider answers."""
    try:
        client.generate(prompt=CONNECTION_CHECK_PROMPT, payload=None, temperature=0.0)
    except GatewayError as exc:
        Log.warning(f"Vision API connection check failed: {exc}")
        return ConnectionStatus(success=False, error=str(exc))
    Log.info("Vision API connection check succeeded")
    return ConnectionStatus(success=True)
