from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from studygen.apis.deps import uploaded_pdf
from studygen.apis.schemas import ErrorResponse
from studygen.core.config import settings
from studygen.modules.artifacts.models import QuizQuestion
from studygen.modules.quiz.generator import generate_quiz


router = APIRouter()


@router.post(
    f"/{settings.app.version}/generate-quiz",
    response_model=list[QuizQuestion],
    status_code=status.HTTP_200_OK,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    tags=["quiz"],
)
async def create_quiz(pdf: Annotated[bytes, Depends(uploaded_pdf)]) -> list[QuizQuestion]:
    """Collect the full quiz, validate it, and answer with one JSON array."""
    return await generate_quiz(pdf)
