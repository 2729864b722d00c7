import base64

import pytest

from lvtakeoff.documents.models import Document
from lvtakeoff.gateway.client_base import BaseVisionClient
from lvtakeoff.gateway.exceptions import ProcessingTimeoutError, UploadError
from lvtakeoff.gateway.models import PayloadMode, PreparedPayload


class _StubClient(BaseVisionClient):
    def __init__(self, upload_error: Exception | None = None, inline_max: int = 0) -> None:
        self.upload_error = upload_error
        self.inline_pdf_max_bytes = inline_max
        self.uploads = 0

    def upload_document(self, document: Document) -> PreparedPayload:
        self.uploads += 1
        if self.upload_error is not None:
            raise self.upload_error
        return PreparedPayload.remote(document, uri="files/abc")

    def generate(self, *, prompt: str, payload: PreparedPayload | None, temperature: float) -> str:
        return "{}"


class TestPrepare:
    def test_image_is_inline(self, image_document: Document) -> None:
        client = _StubClient()

        payload = client.prepare(image_document)

        assert payload.mode is PayloadMode.INLINE
        assert payload.media_type == "image/png"
        assert base64.b64decode(payload.data) == image_document.content
        assert client.uploads == 0

    def test_pdf_is_uploaded(self, pdf_document: Document) -> None:
        client = _StubClient()

        payload = client.prepare(pdf_document)

        assert payload.mode is PayloadMode.REMOTE
        assert payload.uri == "files/abc"

    def test_upload_failure_falls_back_to_inline(self, pdf_document: Document) -> None:
        client = _StubClient(upload_error=UploadError("session refused", status_code=500))

        payload = client.prepare(pdf_document)

        assert payload.mode is PayloadMode.INLINE
        assert payload.is_pdf
        assert base64.b64decode(payload.data) == pdf_document.content

    def test_processing_timeout_propagates(self, pdf_document: Document) -> None:
        client = _StubClient(upload_error=ProcessingTimeoutError("still processing"))

        with pytest.raises(ProcessingTimeoutError):
            client.prepare(pdf_document)

    def test_small_pdf_sent_inline_under_threshold(self, pdf_document: Document) -> None:
        client = _StubClient(inline_max=pdf_document.size_bytes)

        payload = client.prepare(pdf_document)

        assert payload.mode is PayloadMode.INLINE
        assert client.uploads == 0
