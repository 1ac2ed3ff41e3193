"""Quiz generator: four multiple-choice questions from a PDF.

The response is collected in full, validated against the exact quiz shape
and only then returned, so the quiz endpoint answers with a single JSON
body.
"""

from __future__ import annotations

from studygen.core.errors import ArtifactValidationError
from studygen.core.logging import get_logger, log_context
from studygen.modules.agents import build_agent, document_prompt, run_buffered
from studygen.modules.artifacts.models import (
    QUIZ_LENGTH,
    Provider,
    QuestionDraft,
    QuizQuestion,
)
from studygen.modules.artifacts.validator import validate_quiz

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are a teacher. Your job is to take a document, and create a multiple "
    f"choice test (with {QUIZ_LENGTH} questions) based on the content of the "
    "document. Each question has exactly 4 options of roughly equal length and "
    "an answer letter A-D, where A is the first option. "
    "Avoid markdown; do not include code fences."
)

INSTRUCTION = "Create a multiple choice test based on this document."


async def generate_quiz(pdf: bytes) -> list[QuizQuestion]:
    """Generate and validate a quiz using Google Gemini."""
    agent = build_agent(Provider.GOOGLE, list[QuestionDraft], SYSTEM_PROMPT)
    drafts = await run_buffered(agent, document_prompt(INSTRUCTION, pdf), label="quiz")
    result = validate_quiz(drafts)
    if not result.ok:
        logger.warning("Quiz failed validation: %s", result.summary(), extra=log_context(artifact="quiz"))
        raise ArtifactValidationError("Failed to process questions", issues=result.issues)
    return result.items
