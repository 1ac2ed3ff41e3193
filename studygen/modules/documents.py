"""Uploaded documents: PDF checks and base64 data-URL encoding.

The client builds ``Document`` objects from files the user picked, checks
them with ``is_valid_pdf_file`` and encodes them into ``EncodedFile``
payloads. The service decodes those payloads back into bytes with
``decode_upload`` and applies the same checks before any provider call.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import mimetypes
import re
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from studygen.core.config import settings
from studygen.core.errors import DocumentRejectedError

PDF_MIME_TYPE = "application/pdf"

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[^;,]+)?(?:;[^;,]*)*?;base64,(?P<data>.*)$", re.S)


class EncodedFile(BaseModel):
    """Wire form of a document: ``{name, type, data}`` with a data URL."""

    name: str
    type: str
    data: str = Field(..., description="base64 data URL, e.g. data:application/pdf;base64,...")


class Document(BaseModel):
    """A file selected by the user, held in memory until encoded."""

    name: str
    mime_type: str
    content: bytes = Field(repr=False)

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    async def from_path(cls, path: str | Path, mime_type: Optional[str] = None) -> "Document":
        p = Path(path)
        content = await asyncio.to_thread(p.read_bytes)
        guessed = mime_type or mimetypes.guess_type(p.name)[0] or "application/octet-stream"
        return cls(name=p.name, mime_type=guessed, content=content)


def is_valid_pdf_file(doc: Document, max_size_mb: Optional[float] = None) -> bool:
    limit_mb = settings.max_upload_mb if max_size_mb is None else max_size_mb
    return doc.mime_type == PDF_MIME_TYPE and doc.size <= limit_mb * 1024 * 1024


def to_data_url(mime_type: str, content: bytes) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(content).decode('ascii')}"


async def encode_file_as_base64(doc: Document) -> EncodedFile:
    """Encode off the event loop; large PDFs take a noticeable moment."""
    data = await asyncio.to_thread(to_data_url, doc.mime_type, doc.content)
    return EncodedFile(name=doc.name, type=doc.mime_type, data=data)


def decode_data_url(data: str) -> tuple[Optional[str], bytes]:
    """Return ``(mime_type, bytes)``; plain base64 strings have no mime type."""
    match = _DATA_URL_RE.match(data.strip())
    mime: Optional[str] = None
    payload = data.strip()
    if match:
        mime = match.group("mime")
        payload = match.group("data")
    try:
        return mime, base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DocumentRejectedError("File data is not valid base64", details=str(e))


def decode_upload(file: EncodedFile, *, max_bytes: Optional[int] = None) -> bytes:
    """Decode one uploaded file, enforcing PDF type and the size limit."""
    limit = settings.max_upload_bytes if max_bytes is None else max_bytes
    mime, content = decode_data_url(file.data)
    effective = mime or file.type
    if effective != PDF_MIME_TYPE or file.type != PDF_MIME_TYPE:
        raise DocumentRejectedError(
            "Only PDF files are supported",
            details=f"{file.name}: {effective or 'unknown type'}",
        )
    if len(content) > limit:
        raise DocumentRejectedError(
            f"File exceeds the {limit // (1024 * 1024)}MB limit",
            details=f"{file.name}: {len(content)} bytes",
        )
    if not content:
        raise DocumentRejectedError("File is empty", details=file.name)
    return content
