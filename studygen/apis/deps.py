from __future__ import annotations

from studygen.apis.schemas import GenerateRequest
from studygen.core.errors import DocumentRejectedError
from studygen.modules.documents import decode_upload


async def uploaded_pdf(req: GenerateRequest) -> bytes:
    """Resolve the request's first file into validated PDF bytes.

    Rejections surface as 400 responses through the app's error handler,
    before any provider is contacted.
    """
    if not req.files:
        raise DocumentRejectedError("No file provided", details="files must not be empty")
    return decode_upload(req.files[0])
