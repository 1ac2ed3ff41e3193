from __future__ import annotations

from fastapi import APIRouter

from studygen.apis.schemas import ErrorResponse, TitleRequest, TitleResponse
from studygen.core.config import settings
from studygen.modules.title.generator import generate_title


router = APIRouter()


@router.post(
    f"/{settings.app.version}/generate-title",
    response_model=TitleResponse,
    responses={500: {"model": ErrorResponse}},
    tags=["title"],
)
async def create_title(req: TitleRequest) -> TitleResponse:
    return TitleResponse(title=await generate_title(req.file_name))
