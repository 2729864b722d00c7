import time
from collections.abc import Callable, Iterator
from typing import Any

import httpx
import openai

from lvtakeoff.documents.models import Document
from lvtakeoff.gateway.client_base import BaseVisionClient
from lvtakeoff.gateway.exceptions import (
    EmptyResponseError,
    GatewayError,
    GatewayNetworkError,
    ProcessingTimeoutError,
    UploadError,
)
from lvtakeoff.gateway.models import PayloadMode, PreparedPayload
from lvtakeoff.logging.logger import Log

_STATUS_PROCESSED = "processed"
_STATUS_ERROR = "error"


class OpenAIClientAdapter(BaseVisionClient):
    """Vision client built on the OpenAI-compatible chat and Uploads APIs."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        timeout_seconds: int,
        base_url: str | None = None,
        poll_interval_seconds: float = 1.0,
        poll_max_attempts: int = 60,
        chunk_size_bytes: int = 8 * 1024 * 1024,
        inline_pdf_max_bytes: int = 0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )
        self._model = model
        self._poll_interval_seconds = poll_interval_seconds
        self._poll_max_attempts = poll_max_attempts
        self._chunk_size_bytes = max(1, chunk_size_bytes)
        self.inline_pdf_max_bytes = inline_pdf_max_bytes
        self._sleep = sleep

    def upload_document(self, document: Document) -> PreparedPayload:
        Log.info(
            f"Uploading PDF {document.name} "
            f"({document.size_bytes / 1024 / 1024:.2f}MB)"
        )
        try:
            upload = self._client.uploads.create(
                bytes=document.size_bytes,
                filename=document.name,
                mime_type=document.media_type or "application/pdf",
                purpose="user_data",
            )
            part_ids = [
                self._client.uploads.parts.create(upload_id=upload.id, data=chunk).id
                for chunk in self._chunks(document.content)
            ]
            completed = self._client.uploads.complete(upload_id=upload.id, part_ids=part_ids)
        except (openai.APIError, httpx.TransportError) as exc:
            raise UploadError(f"Upload session failed: {exc}") from exc

        if completed.file is None:
            raise UploadError(f"Upload {completed.id} completed without a file")
        file_id = self._wait_until_processed(completed.file)
        Log.info(f"PDF ready for analysis: {file_id}")
        return PreparedPayload.remote(document, uri=file_id, media_type=document.media_type)

    def generate(
        self,
        *,
        prompt: str,
        payload: PreparedPayload | None,
        temperature: float,
    ) -> str:
        content: list[dict[str, Any]] = [{"type": "text", "text": prompt}]
        if payload is not None:
            content.append(self._payload_part(payload))
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                temperature=temperature,
                messages=[{"role": "user", "content": content}],
            )
        except openai.APIStatusError as exc:
            raise GatewayError(
                f"Vision API error: {exc.status_code} - {exc.message}",
                status_code=exc.status_code,
                body=exc.response.text,
            ) from exc
        except (openai.APIConnectionError, httpx.TransportError) as exc:
            raise GatewayNetworkError(f"Vision API network error: {exc}") from exc
        except openai.APIError as exc:
            raise GatewayError(f"Vision API error: {exc}") from exc

        if not response.choices:
            raise EmptyResponseError("Vision API returned no choices")
        text = response.choices[0].message.content
        if not text or not text.strip():
            raise EmptyResponseError("No response from vision API")
        return text

    def _chunks(self, content: bytes) -> Iterator[bytes]:
        for offset in range(0, len(content), self._chunk_size_bytes):
            yield content[offset:offset + self._chunk_size_bytes]

    def _wait_until_processed(self, remote_file: Any) -> str:
        attempts = 0
        while (
            remote_file.status not in (_STATUS_PROCESSED, _STATUS_ERROR)
            and attempts < self._poll_max_attempts
        ):
            Log.debug(f"Waiting for PDF processing... ({attempts + 1}s)")
            self._sleep(self._poll_interval_seconds)
            try:
                remote_file = self._client.files.retrieve(remote_file.id)
            except (openai.APIError, httpx.TransportError) as exc:
                Log.debug(f"File status check failed, will retry: {exc}")
            attempts += 1

        if remote_file.status == _STATUS_ERROR:
            raise UploadError(f"File processing failed. State: {remote_file.status}")
        if remote_file.status != _STATUS_PROCESSED:
            raise ProcessingTimeoutError(
                f"File {remote_file.id} still processing after {attempts} checks"
            )
        return str(remote_file.id)

    @staticmethod
    def _payload_part(payload: PreparedPayload) -> dict[str, Any]:
        if payload.mode is PayloadMode.REMOTE:
            return {"type": "file", "file": {"file_id": payload.uri}}
        data_url = f"data:{payload.media_type};base64,{payload.data}"
        if payload.is_pdf:
            return {"type": "file", "file": {"filename": payload.name, "file_data": data_url}}
        return {"type": "image_url", "image_url": {"url": data_url}}
