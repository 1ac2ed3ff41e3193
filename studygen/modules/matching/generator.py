"""Matching-game generator backed by either provider.

The model only writes term/definition pairs; ids are assigned here so the
matching game can pair a term with its definition. Google output is
streamed pair by pair, OpenAI output is collected and validated first.
"""

from __future__ import annotations

import uuid
from typing import Any, AsyncIterator

from studygen.core.errors import ArtifactValidationError
from studygen.core.logging import get_logger, log_context
from studygen.modules.agents import (
    build_agent,
    document_prompt,
    run_buffered,
    stream_snapshots,
)
from studygen.modules.artifacts.models import (
    MATCHING_LENGTH,
    MatchingItem,
    MatchingPair,
    Provider,
)
from studygen.modules.artifacts.validator import validate_matching

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are a teacher. Your job is to take a document, and create a set of "
    f"matching items (with {MATCHING_LENGTH} pairs) based on the content of the "
    "document. Each matching item should have a term and a definition that "
    "matches the term. Make sure each term and definition pair is clearly "
    "related and can be matched together. Ensure both term and definition are "
    "non-empty strings with at least 5 characters each."
)

INSTRUCTION = (
    f"Create a set of matching items based on this document. Return exactly "
    f"{MATCHING_LENGTH} pairs of terms and definitions. Each term and definition "
    "must be non-empty and meaningful."
)


def with_id(pair: Any) -> dict[str, Any]:
    data = pair.model_dump() if hasattr(pair, "model_dump") else dict(pair)
    return {"id": uuid.uuid4().hex, **data}


def stream_matching(pdf: bytes) -> AsyncIterator[list[MatchingPair]]:
    agent = build_agent(Provider.GOOGLE, list[MatchingPair], SYSTEM_PROMPT)
    return stream_snapshots(agent, document_prompt(INSTRUCTION, pdf), label="matching")


async def generate_matching(
    pdf: bytes, provider: Provider = Provider.OPENAI
) -> list[MatchingItem]:
    """Generate, tag and validate a full matching set."""
    agent = build_agent(provider, list[MatchingPair], SYSTEM_PROMPT)
    pairs = await run_buffered(agent, document_prompt(INSTRUCTION, pdf), label="matching")
    result = validate_matching([with_id(p) for p in pairs or []])
    if not result.ok:
        logger.warning(
            "Matching items failed validation (%s): %s",
            provider.value,
            result.summary(),
            extra=log_context(artifact="matching"),
        )
        raise ArtifactValidationError(
            "Failed to process matching items", issues=result.issues
        )
    return result.items
