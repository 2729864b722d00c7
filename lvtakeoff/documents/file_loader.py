import mimetypes
from pathlib import Path

from lvtakeoff.documents.models import PDF_MEDIA_TYPE, Document

DEFAULT_IMAGE_MEDIA_TYPE = "image/png"

_MAGIC_PREFIXES: tuple[tuple[bytes, str], ...] = (
    (b"%PDF-", PDF_MEDIA_TYPE),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
)


def sniff_media_type(name: str, content: bytes) -> str:
    """Resolve a media type from the file name, then from the leading bytes."""
    guessed, _ = mimetypes.guess_type(name)
    if guessed:
        return guessed
    for prefix, media_type in _MAGIC_PREFIXES:
        if content.startswith(prefix):
            return media_type
    if content[:4] == b"RIFF" and content[8:12] == b"WEBP":
        return "image/webp"
    return DEFAULT_IMAGE_MEDIA_TYPE


class FileLoader:
    """Reads floor-plan files from disk into Documents."""

    def load(self, path: Path) -> Document:
        """Read a file and wrap it as a Document.

        Raises:
            FileNotFoundError: if nothing exists at the path.
        """
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        content = path.read_bytes()
        return Document(
            name=path.name,
            content=content,
            media_type=sniff_media_type(path.name, content),
        )

    def load_many(self, paths: list[Path]) -> list[Document]:
        return [self.load(path) for path in paths]
