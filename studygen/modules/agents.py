"""Shared pydantic-ai plumbing for the artifact generators.

Builds agents for a provider variant, attaches the uploaded PDF to the
user prompt, and runs agents either to completion or as a stream of
partial outputs. Provider failures are translated into the application's
error types here so routers only deal with ``StudyGenError``.
"""

from __future__ import annotations

import asyncio
from typing import Any, AsyncIterator, Optional

import httpx
from pydantic_ai import Agent, BinaryContent
from pydantic_ai.exceptions import AgentRunError

from studygen.core.config import settings
from studygen.core.errors import ProviderError, ProviderTimeoutError
from studygen.core.logging import get_logger, log_context
from studygen.modules.artifacts.models import Provider
from studygen.modules.documents import PDF_MIME_TYPE
from studygen.modules.providers import build_model

logger = get_logger(__name__)


def build_agent(
    provider: Provider,
    output_type: Any,
    system_prompt: str,
    *,
    model_name: Optional[str] = None,
) -> Agent:
    model = build_model(provider, model_name)
    return Agent(
        model=model,
        output_type=output_type,
        system_prompt=system_prompt,
        # No automatic retries: a failed artifact needs a new submission
        retries=0,
    )


def document_prompt(instruction: str, pdf: bytes) -> list:
    return [instruction, BinaryContent(data=pdf, media_type=PDF_MIME_TYPE)]


async def run_buffered(agent: Agent, prompt: Any, *, label: str) -> Any:
    """Run an agent to completion within the configured time budget."""
    timeout = settings.generation_timeout_seconds
    try:
        res = await asyncio.wait_for(agent.run(prompt), timeout)
    except asyncio.TimeoutError:
        raise ProviderTimeoutError(
            f"Timed out generating {label}", details=f"exceeded {timeout:g}s"
        )
    except (AgentRunError, httpx.HTTPError) as e:
        logger.error("Provider call failed: %s", e, extra=log_context(artifact=label))
        raise ProviderError(f"Failed to generate {label}", details=str(e))
    return res.output


async def stream_snapshots(agent: Agent, prompt: Any, *, label: str) -> AsyncIterator[Any]:
    """Yield partial outputs as they arrive; the last value is the final output."""
    try:
        async with agent.run_stream(prompt) as result:
            async for partial in result.stream_output(debounce_by=None):
                yield partial
            yield await result.get_output()
    except (AgentRunError, httpx.HTTPError) as e:
        logger.error("Provider stream failed: %s", e, extra=log_context(artifact=label))
        raise ProviderError(f"Failed to generate {label}", details=str(e))
