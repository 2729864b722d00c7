import io
import json
import struct
import zlib
from collections.abc import Callable
from typing import Any

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from lvtakeoff.documents.models import PDF_MEDIA_TYPE, Document
from lvtakeoff.gateway.client_base import BaseVisionClient
from lvtakeoff.gateway.models import PreparedPayload


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a single-page floor plan PDF with a few device tags."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "LEVEL 1 FLOOR PLAN - LOW VOLTAGE")
    c.circle(200, 400, 6)
    c.drawString(210, 396, "D")
    c.circle(300, 400, 6)
    c.drawString(310, 396, "D")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def legend_pdf_bytes() -> bytes:
    """Generate a legend sheet PDF."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "SYMBOL LEGEND")
    c.drawString(72, 700, "D - DATA OUTLET")
    c.drawString(72, 680, "SD - SMOKE DETECTOR")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def png_bytes() -> bytes:
    """A valid 1x1 white PNG."""
    def chunk(kind: bytes, data: bytes) -> bytes:
        body = kind + data
        return struct.pack(">I", len(data)) + body + struct.pack(">I", zlib.crc32(body))

    header = struct.pack(">IIBBBBB", 1, 1, 8, 2, 0, 0, 0)
    pixels = zlib.compress(b"\x00\xff\xff\xff")
    return (
        b"\x89PNG\r\n\x1a\n"
        + chunk(b"IHDR", header)
        + chunk(b"IDAT", pixels)
        + chunk(b"IEND", b"")
    )


@pytest.fixture()
def pdf_document(sample_pdf_bytes: bytes) -> Document:
    return Document(name="E-101.pdf", content=sample_pdf_bytes, media_type=PDF_MEDIA_TYPE)


@pytest.fixture()
def image_document(png_bytes: bytes) -> Document:
    return Document(name="E-102.png", content=png_bytes, media_type="image/png")


class ScriptedVisionClient(BaseVisionClient):
    """Vision client answering each prompt with the first matching canned reply.

    ``replies`` maps a prompt marker to a reply. A reply that is an
    exception instance is raised instead of returned.
    """

    def __init__(self, replies: dict[str, Any], *, fail_prepare: Exception | None = None) -> None:
        self.replies = replies
        self.fail_prepare = fail_prepare
        self.prompts: list[str] = []
        self.prepared: list[str] = []

    def prepare(self, document: Document) -> PreparedPayload:
        if self.fail_prepare is not None:
            raise self.fail_prepare
        self.prepared.append(document.name)
        return PreparedPayload.inline(document)

    def upload_document(self, document: Document) -> PreparedPayload:
        return PreparedPayload.inline(document)

    def generate(
        self,
        *,
        prompt: str,
        payload: PreparedPayload | None,
        temperature: float,
    ) -> str:
        self.prompts.append(prompt)
        for marker, reply in self.replies.items():
            if marker in prompt:
                if isinstance(reply, Exception):
                    raise reply
                return reply if isinstance(reply, str) else json.dumps(reply)
        raise AssertionError(f"No scripted reply for prompt: {prompt[:80]}")


@pytest.fixture()
def scripted_client() -> Callable[..., ScriptedVisionClient]:
    return ScriptedVisionClient
