from dataclasses import dataclass

PDF_MEDIA_TYPE = "application/pdf"


@dataclass(frozen=True)
class Document:
    """One uploaded floor-plan file."""

    name: str
    content: bytes
    media_type: str

    @property
    def is_pdf(self) -> bool:
        return self.media_type == PDF_MEDIA_TYPE or self.name.lower().endswith(".pdf")

    @property
    def size_bytes(self) -> int:
        return len(self.content)
