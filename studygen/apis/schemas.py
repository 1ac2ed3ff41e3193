from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from studygen.modules.documents import EncodedFile


class GenerateRequest(BaseModel):
    files: list[EncodedFile] = Field(
        default_factory=list, description="Uploaded documents; the first one is used"
    )


class TitleRequest(BaseModel):
    file_name: str = Field(..., description="Name (or short excerpt) of the uploaded file")


class TitleResponse(BaseModel):
    title: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
