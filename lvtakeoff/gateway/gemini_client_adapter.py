"""Vision client for the Gemini REST API.

PDF uploads use the resumable File API protocol: start a session, send the
bytes with ``upload, finalize``, then poll the file until it is ACTIVE.
"""

import time
from collections.abc import Callable
from typing import Any

import httpx

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

_STATE_PROCESSING = "PROCESSING"
_STATE_ACTIVE = "ACTIVE"


class GeminiClientAdapter(BaseVisionClient):
    """Vision client built on the Gemini generateContent and File APIs."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        timeout_seconds: int,
        api_base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        upload_base_url: str = "https://generativelanguage.googleapis.com/upload/v1beta",
        max_output_tokens: int = 16384,
        poll_interval_seconds: float = 1.0,
        poll_max_attempts: int = 60,
        inline_pdf_max_bytes: int = 0,
        http_client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._api_base_url = api_base_url.rstrip("/")
        self._upload_base_url = upload_base_url.rstrip("/")
        self._max_output_tokens = max_output_tokens
        self._poll_interval_seconds = poll_interval_seconds
        self._poll_max_attempts = poll_max_attempts
        self.inline_pdf_max_bytes = inline_pdf_max_bytes
        self._http = http_client or httpx.Client(timeout=timeout_seconds)
        self._sleep = sleep

    def upload_document(self, document: Document) -> PreparedPayload:
        Log.info(
            f"Uploading PDF {document.name} "
            f"({document.size_bytes / 1024 / 1024:.2f}MB)"
        )
        upload_url = self._start_upload_session(document)
        remote_file = self._send_file_bytes(upload_url, document)
        remote_file = self._wait_until_active(remote_file)
        Log.info(f"PDF ready for analysis: {remote_file.get('uri')}")
        return PreparedPayload.remote(
            document,
            uri=str(remote_file.get("uri", "")),
            media_type=str(remote_file.get("mimeType") or document.media_type),
        )

    def generate(
        self,
        *,
        prompt: str,
        payload: PreparedPayload | None,
        temperature: float,
    ) -> str:
        parts: list[dict[str, Any]] = [{"text": prompt}]
        if payload is not None:
            parts.append(self._payload_part(payload))
        body = {
            "contents": [{"parts": parts}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": self._max_output_tokens,
            },
        }
        url = f"{self._api_base_url}/models/{self._model}:generateContent"
        try:
            response = self._http.post(url, json=body, headers=self._auth_headers())
        except httpx.TransportError as exc:
            raise GatewayNetworkError(f"Vision API network error: {exc}") from exc

        if not response.is_success:
            Log.error(f"Vision API error: {response.status_code}")
            raise GatewayError(
                f"Vision API error: {response.status_code} - {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise EmptyResponseError("Vision API returned a non-JSON body") from exc

        text = self._candidate_text(data)
        if not text:
            raise EmptyResponseError("No response from vision API")
        return text

    def _auth_headers(self) -> dict[str, str]:
        return {"x-goog-api-key": self._api_key}

    def _start_upload_session(self, document: Document) -> str:
        headers = {
            **self._auth_headers(),
            "X-Goog-Upload-Protocol": "resumable",
            "X-Goog-Upload-Command": "start",
            "X-Goog-Upload-Header-Content-Length": str(document.size_bytes),
            "X-Goog-Upload-Header-Content-Type": document.media_type or "application/pdf",
        }
        try:
            response = self._http.post(
                f"{self._upload_base_url}/files",
                headers=headers,
                json={"file": {"displayName": document.name}},
            )
        except httpx.TransportError as exc:
            raise UploadError(f"Upload start failed: {exc}") from exc
        if not response.is_success:
            raise UploadError(
                f"Upload start failed: {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        upload_url = response.headers.get("X-Goog-Upload-URL")
        if not upload_url:
            raise UploadError("Upload start response carried no upload URL")
        return upload_url

    def _send_file_bytes(self, upload_url: str, document: Document) -> dict[str, Any]:
        headers = {
            "X-Goog-Upload-Offset": "0",
            "X-Goog-Upload-Command": "upload, finalize",
            "Content-Length": str(document.size_bytes),
        }
        try:
            response = self._http.post(upload_url, headers=headers, content=document.content)
        except httpx.TransportError as exc:
            raise UploadError(f"Upload data failed: {exc}") from exc
        if not response.is_success:
            raise UploadError(
                f"Upload data failed: {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        try:
            remote_file = response.json().get("file")
        except ValueError as exc:
            raise UploadError("Upload data response was not JSON") from exc
        if not isinstance(remote_file, dict) or not remote_file.get("name"):
            raise UploadError("Upload data response carried no file record")
        Log.info(f"File uploaded: {remote_file['name']} state={remote_file.get('state')}")
        return remote_file

    def _wait_until_active(self, remote_file: dict[str, Any]) -> dict[str, Any]:
        attempts = 0
        while remote_file.get("state") == _STATE_PROCESSING and attempts < self._poll_max_attempts:
            Log.debug(f"Waiting for PDF processing... ({attempts + 1}s)")
            self._sleep(self._poll_interval_seconds)
            remote_file = self._poll_file(remote_file)
            attempts += 1

        state = remote_file.get("state")
        if state == _STATE_PROCESSING:
            raise ProcessingTimeoutError(
                f"File {remote_file.get('name')} still processing after {attempts} checks"
            )
        if state != _STATE_ACTIVE:
            raise UploadError(f"File processing failed. State: {state}")
        return remote_file

    def _poll_file(self, remote_file: dict[str, Any]) -> dict[str, Any]:
        file_id = str(remote_file["name"]).removeprefix("files/")
        try:
            response = self._http.get(
                f"{self._api_base_url}/files/{file_id}",
                headers=self._auth_headers(),
            )
        except httpx.TransportError as exc:
            Log.debug(f"File status check failed, will retry: {exc}")
            return remote_file
        if not response.is_success:
            return remote_file
        try:
            polled = response.json()
        except ValueError:
            return remote_file
        return polled if isinstance(polled, dict) else remote_file

    @staticmethod
    def _payload_part(payload: PreparedPayload) -> dict[str, Any]:
        if payload.mode is PayloadMode.REMOTE:
            return {"fileData": {"mimeType": payload.media_type, "fileUri": payload.uri}}
        return {"inlineData": {"mimeType": payload.media_type, "data": payload.data}}

    @staticmethod
    def _candidate_text(data: Any) -> str:
        """Join the non-empty text parts of the first candidate."""
        if not isinstance(data, dict):
            return ""
        candidates = data.get("candidates") or []
        if not candidates or not isinstance(candidates[0], dict):
            return ""
        content = candidates[0].get("content")
        if not isinstance(content, dict):
            return ""
        parts = content.get("parts") or []
        texts = [
            part["text"]
            for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str) and part["text"].strip()
        ]
        return "".join(texts).strip()
