from abc import ABC, abstractmethod

from lvtakeoff.documents.models import Document
from lvtakeoff.gateway.exceptions import UploadError
from lvtakeoff.gateway.models import PreparedPayload
from lvtakeoff.logging.logger import Log


class BaseVisionClient(ABC):
    """Contract for provider-specific vision model clients."""

    inline_pdf_max_bytes: int = 0

    def prepare(self, document: Document) -> PreparedPayload:
        """Turn a document into a payload the model can reference.

        Images are always sent inline. PDFs are uploaded unless they fit under
        ``inline_pdf_max_bytes``; a failed upload session degrades to inline
        base64 instead of failing the document.

        Raises:
            ProcessingTimeoutError: if an uploaded file never becomes ready.
        """
        if not document.is_pdf:
            return PreparedPayload.inline(document)
        if self.inline_pdf_max_bytes and document.size_bytes <= self.inline_pdf_max_bytes:
            Log.debug(f"Sending {document.name} inline ({document.size_bytes} bytes)")
            return PreparedPayload.inline(document)
        try:
            return self.upload_document(document)
        except UploadError as exc:
            Log.warning(f"PDF upload failed for {document.name}, using inline base64: {exc}")
            return PreparedPayload.inline(document)

    @abstractmethod
    def upload_document(self, document: Document) -> PreparedPayload:
        """Upload a PDF and wait until the provider reports it ready.

        Raises:
            UploadError: if the upload session fails.
            ProcessingTimeoutError: if processing exceeds the poll budget.
        """

    @abstractmethod
    def generate(
        self,
        *,
        prompt: str,
        payload: PreparedPayload | None,
        temperature: float,
    ) -> str:
        """Send one prompt (with an optional document) and return the raw text.

        Raises:
            GatewayError: on a non-success status or an unusable response.
        """
