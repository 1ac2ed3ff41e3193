"""Turn partial structured outputs into an incrementally streamed JSON array.

The model's partial outputs grow one list element at a time and the last
element of a snapshot may still be incomplete. Only elements that are
followed by another one (or that belong to the final snapshot) are
written, each exactly once, so the concatenated chunks always form a
prefix of one valid JSON array.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, AsyncIterator, Callable, Sequence

from studygen.core.config import settings
from studygen.core.errors import ProviderTimeoutError
from studygen.core.logging import get_logger, log_context

logger = get_logger(__name__)

Dump = Callable[[Any], Any]

_DONE = object()


def _default_dump(item: Any) -> Any:
    return item.model_dump() if hasattr(item, "model_dump") else item


async def json_array_chunks(
    snapshots: AsyncIterator[Sequence[Any]], dump: Dump = _default_dump
) -> AsyncIterator[str]:
    emitted = 0
    last: Sequence[Any] = ()

    def _render(item: Any) -> str:
        text = json.dumps(dump(item), ensure_ascii=False)
        return text if emitted == 0 else "," + text

    yield "["
    async for snap in snapshots:
        last = snap or ()
        for item in list(last)[emitted : max(len(last) - 1, 0)]:
            yield _render(item)
            emitted += 1
    for item in list(last)[emitted:]:
        yield _render(item)
        emitted += 1
    yield "]"


async def stream_json_array(
    snapshots: AsyncIterator[Sequence[Any]],
    *,
    label: str,
    dump: Dump = _default_dump,
    timeout: float | None = None,
) -> AsyncIterator[str]:
    """Run the provider stream in its own task, bounded by ``timeout``.

    Headers are already sent when this body runs, so a failure can only end
    the stream early; the truncated array is what the client sees.
    """
    budget = settings.generation_timeout_seconds if timeout is None else timeout
    queue: asyncio.Queue[Any] = asyncio.Queue()

    async def _produce() -> None:
        try:
            async with asyncio.timeout(budget):
                async for chunk in json_array_chunks(snapshots, dump):
                    await queue.put(chunk)
        except TimeoutError:
            await queue.put(
                ProviderTimeoutError(
                    f"Timed out generating {label}", details=f"exceeded {budget:g}s"
                )
            )
        except Exception as e:  # noqa: BLE001
            # Forwarded to the consumer, which logs and ends the body
            await queue.put(e)
        else:
            await queue.put(_DONE)

    task = asyncio.create_task(_produce())
    try:
        while True:
            item = await queue.get()
            if item is _DONE:
                return
            if isinstance(item, BaseException):
                logger.error(
                    "Stream ended early: %s", item, extra=log_context(artifact=label)
                )
                return
            yield item
    finally:
        if not task.done():
            task.cancel()
