"""Offline vision client with a canned answer.

A new provider subclasses BaseVisionClient, implements upload_document and
generate, and gets a branch in VisionClientFactory.create.
"""

import json
from typing import ClassVar

from lvtakeoff.documents.models import Document
from lvtakeoff.gateway.client_base import BaseVisionClient
from lvtakeoff.gateway.models import PreparedPayload


class ExampleClientAdapter(BaseVisionClient):
    """Example adapter that answers every prompt with one fixed response.

    No network calls. The response carries the fields read by the legend,
    grid count and validation passes, so a full document analysis runs
    end to end.
    """

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "sheetType": "FLOOR_PLAN",
        "sheetName": "EXAMPLE",
        "shouldCountDevices": True,
        "legendFound": False,
        "symbols": [],
        "gridCounts": {},
        "totalsBySystem": {"CABLING": {"Data Outlet": 1}},
        "confidence": 1.0,
        "countingNotes": "Example response",
        "summary": {"CABLING": {"Data Outlet": 1}},
        "closets": [],
        "backbones": [],
        "codeCompliance": {"status": "COMPLIANT", "violations": [], "notes": ""},
        "overallConfidence": 1.0,
        "totalDevices": 1,
        "notes": "Example response",
    }

    def upload_document(self, document: Document) -> PreparedPayload:
        return PreparedPayload.inline(document)

    def generate(
        self,
        *,
        prompt: str,
        payload: PreparedPayload | None,
        temperature: float,
    ) -> str:
        _ = prompt, payload, temperature
        return json.dumps(self.DEFAULT_RESPONSE)
