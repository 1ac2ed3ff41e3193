from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from studygen.apis.deps import uploaded_pdf
from studygen.apis.schemas import ErrorResponse
from studygen.core.config import settings
from studygen.modules.flashcards.generator import stream_flashcards
from studygen.modules.streaming import stream_json_array


router = APIRouter()

STREAM_HEADERS = {"Cache-Control": "no-cache", "X-Content-Type-Options": "nosniff"}


@router.post(
    f"/{settings.app.version}/generate-flashcards",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    tags=["flashcards"],
)
async def create_flashcards(
    pdf: Annotated[bytes, Depends(uploaded_pdf)],
) -> StreamingResponse:
    # Built before the response starts so credential errors still get a status code
    snapshots = stream_flashcards(pdf)
    return StreamingResponse(
        stream_json_array(snapshots, label="flashcards"),
        media_type="text/plain; charset=utf-8",
        headers=STREAM_HEADERS,
    )
