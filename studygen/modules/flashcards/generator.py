"""Flashcard generator using pydantic-ai and the Gemini provider.

Cards are streamed: the router forwards each completed card as soon as the
model has finished writing it. Validation of the full deck happens on the
receiving side once the stream ends.
"""

from __future__ import annotations

from typing import AsyncIterator

from studygen.modules.agents import build_agent, document_prompt, stream_snapshots
from studygen.modules.artifacts.models import FLASHCARDS_LENGTH, FlashcardDraft, Provider

SYSTEM_PROMPT = (
    "You are a teacher. Your job is to take a document, and create a set of "
    f"flashcards (with {FLASHCARDS_LENGTH} cards) based on the content of the "
    "document. Each flashcard should have a front (question/prompt) and back "
    "(answer/explanation). Plain text only, no markdown."
)

INSTRUCTION = "Create a set of flashcards based on this document."


def stream_flashcards(pdf: bytes) -> AsyncIterator[list[FlashcardDraft]]:
    agent = build_agent(Provider.GOOGLE, list[FlashcardDraft], SYSTEM_PROMPT)
    return stream_snapshots(agent, document_prompt(INSTRUCTION, pdf), label="flashcards")
