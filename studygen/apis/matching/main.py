from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from studygen.apis.deps import uploaded_pdf
from studygen.apis.flashcards.main import STREAM_HEADERS
from studygen.apis.schemas import ErrorResponse
from studygen.core.config import settings
from studygen.modules.artifacts.models import MatchingItem, Provider
from studygen.modules.matching.generator import (
    generate_matching,
    stream_matching,
    with_id,
)
from studygen.modules.streaming import stream_json_array


router = APIRouter()


@router.post(
    f"/{settings.app.version}/generate-matching",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    tags=["matching"],
)
async def create_matching_google(
    pdf: Annotated[bytes, Depends(uploaded_pdf)],
) -> StreamingResponse:
    """Stream matching pairs from Gemini, tagging each with an id as it is sent."""
    snapshots = stream_matching(pdf)
    return StreamingResponse(
        stream_json_array(snapshots, label="matching", dump=with_id),
        media_type="text/plain; charset=utf-8",
        headers=STREAM_HEADERS,
    )


@router.post(
    f"/{settings.app.version}/generate-matching-openai",
    response_model=list[MatchingItem],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    tags=["matching"],
)
async def create_matching_openai(
    pdf: Annotated[bytes, Depends(uploaded_pdf)],
) -> list[MatchingItem]:
    return await generate_matching(pdf, Provider.OPENAI)
