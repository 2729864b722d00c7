import base64
from dataclasses import dataclass
from enum import Enum

from lvtakeoff.documents.models import PDF_MEDIA_TYPE, Document


class PayloadMode(str, Enum):
    INLINE = "inline"
    REMOTE = "remote"


@dataclass(frozen=True)
class PreparedPayload:
    """A document in a form the vision model can reference.

    Inline payloads carry base64 data; remote payloads carry the handle of a
    file already uploaded to the provider. One payload is reused by every
    pass over the same document.
    """

    name: str
    media_type: str
    mode: PayloadMode
    data: str = ""
    uri: str = ""

    @property
    def is_pdf(self) -> bool:
        return self.media_type == PDF_MEDIA_TYPE

    @classmethod
    def inline(cls, document: Document) -> "PreparedPayload":
        media_type = PDF_MEDIA_TYPE if document.is_pdf else document.media_type
        return cls(
            name=document.name,
            media_type=media_type,
            mode=PayloadMode.INLINE,
            data=base64.b64encode(document.content).decode("ascii"),
        )

    @classmethod
    def remote(cls, document: Document, *, uri: str, media_type: str = "") -> "PreparedPayload":
        return cls(
            name=document.name,
            media_type=media_type or document.media_type,
            mode=PayloadMode.REMOTE,
            uri=uri,
        )
