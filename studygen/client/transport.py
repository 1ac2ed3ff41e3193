"""HTTP transport between the orchestration client and the service.

Artifact endpoints answer in one of two ways: a complete JSON body, or a
text stream whose concatenation is a JSON array. Both are handled by
``generate_artifact``. While a stream is arriving, the text received so far
is decoded in partial mode so callers can show progress; the complete text
is decoded strictly once the stream ends.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

import httpx
import pydantic_core

from studygen.core.config import settings
from studygen.core.errors import (
    MalformedResponseError,
    ProviderError,
    ProviderTimeoutError,
)
from studygen.core.logging import get_logger
from studygen.modules.artifacts.models import ArtifactKind, Provider
from studygen.modules.documents import EncodedFile

logger = get_logger(__name__)

PartialCallback = Callable[[Any], None]


def artifact_path(kind: ArtifactKind, provider: Provider = Provider.GOOGLE) -> str:
    version = settings.app.version
    if kind is ArtifactKind.QUIZ:
        return f"/{version}/generate-quiz"
    if kind is ArtifactKind.FLASHCARDS:
        return f"/{version}/generate-flashcards"
    if provider is Provider.OPENAI:
        return f"/{version}/generate-matching-openai"
    return f"/{version}/generate-matching"


def parse_partial(text: str) -> Optional[Any]:
    """Best-effort decode of an incomplete JSON document; None if hopeless."""
    if not text.strip():
        return None
    try:
        return pydantic_core.from_json(text, allow_partial=True)
    except ValueError:
        return None


def parse_complete(text: str) -> Any:
    try:
        return pydantic_core.from_json(text)
    except ValueError as e:
        raise MalformedResponseError(
            "Received an incomplete or malformed response", details=str(e)
        )


def _error_from_response(resp: httpx.Response) -> ProviderError:
    body: Any = None
    try:
        body = resp.json()
    except ValueError:
        pass
    if isinstance(body, dict) and body.get("error"):
        message = str(body["error"])
        details = body.get("details")
        details = str(details) if details is not None else None
    else:
        message = f"Request failed with status {resp.status_code}"
        details = resp.text[:500] or None
    cls = ProviderTimeoutError if resp.status_code == 504 else ProviderError
    return cls(message, details=details, status=resp.status_code)


class StudyGenClient:
    """Async client for the generation service.

    Example:
        async with StudyGenClient() as client:
            title = await client.generate_title("cell-biology.pdf")
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=base_url or settings.client.base_url,
            timeout=timeout or settings.client.timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "StudyGenClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def generate_artifact(
        self,
        path: str,
        files: Sequence[EncodedFile],
        on_partial: Optional[PartialCallback] = None,
    ) -> Any:
        """POST files to an artifact endpoint and return the decoded JSON value."""
        payload = {"files": [f.model_dump() for f in files]}
        try:
            async with self._http.stream("POST", path, json=payload) as resp:
                if resp.is_error:
                    await resp.aread()
                    raise _error_from_response(resp)
                content_type = resp.headers.get("content-type", "")
                if content_type.startswith("application/json"):
                    await resp.aread()
                    text = resp.text
                else:
                    chunks: list[str] = []
                    async for chunk in resp.aiter_text():
                        chunks.append(chunk)
                        if on_partial is not None:
                            partial = parse_partial("".join(chunks))
                            if partial is not None:
                                on_partial(partial)
                    text = "".join(chunks)
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError("The request timed out", details=str(e))
        except httpx.HTTPError as e:
            raise ProviderError("Could not reach the generation service", details=str(e))
        return parse_complete(text)

    async def generate_title(self, file_name: str) -> str:
        path = f"/{settings.app.version}/generate-title"
        try:
            resp = await self._http.post(path, json={"file_name": file_name})
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError("The request timed out", details=str(e))
        except httpx.HTTPError as e:
            raise ProviderError("Could not reach the generation service", details=str(e))
        if resp.is_error:
            raise _error_from_response(resp)
        body = parse_complete(resp.text)
        title = body.get("title") if isinstance(body, dict) else None
        if not isinstance(title, str) or not title.strip():
            raise MalformedResponseError("Title response has no title", details=resp.text[:200])
        return title.strip()
