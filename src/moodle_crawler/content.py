from __future__ import annotations

from enum import Enum


class ContentKind(str, Enum):
    HTML = "html"
    PDF = "pdf"
    BYTES = "bytes"

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self]


_EXTENSIONS = {
    ContentKind.HTML: "html",
    ContentKind.PDF: "pdf",
    ContentKind.BYTES: "bin",
}

_KINDS_BY_MEDIA_TYPE = {
    "text/html": ContentKind.HTML,
    "application/pdf": ContentKind.PDF,
}


def media_type(content_type: str | None) -> str:
    """Return the bare media type of a Content-Type header value.

    ``text/html; charset=utf-8`` becomes ``text/html``.
    """

    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def kind_for(content_type: str | None) -> ContentKind:
    return _KINDS_BY_MEDIA_TYPE.get(media_type(content_type), ContentKind.BYTES)
