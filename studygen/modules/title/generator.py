"""Short display title for a session, derived from the uploaded file."""

from __future__ import annotations

from studygen.core.config import settings
from studygen.modules.agents import build_agent, run_buffered
from studygen.modules.artifacts.models import Provider, QuizTitle

FALLBACK_TITLE = "Quiz"

SYSTEM_PROMPT = (
    "Generate a title for a quiz based on the attached file content. Try and "
    "extract as much info from the file content as possible. If the file "
    "content is just numbers or incoherent, just return quiz. "
    "Use at most three words."
)


async def generate_title(file_name: str) -> str:
    agent = build_agent(
        Provider.GOOGLE,
        QuizTitle,
        SYSTEM_PROMPT,
        model_name=settings.google_title_model,
    )
    out: QuizTitle = await run_buffered(agent, file_name, label="title")
    words = (out.title or "").split()
    return " ".join(words[:3]) or FALLBACK_TITLE
