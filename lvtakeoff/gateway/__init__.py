from lvtakeoff.gateway.client_base import BaseVisionClient
from lvtakeoff.gateway.factory import VisionClientFactory
from lvtakeoff.gateway.models import PayloadMode, PreparedPayload

__all__ = ["BaseVisionClient", "PayloadMode", "PreparedPayload", "VisionClientFactory"]
