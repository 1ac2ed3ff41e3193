"""Artifact generators: one wrapper per provider call.

A generator submits the encoded document to its endpoint, exposes the
latest unvalidated partial list while the response streams in, validates
the complete response, and reports back through callbacks. Whatever
happens (success, validation failure, transport failure) ``on_complete``
fires exactly once per submission, so the session never waits on a
generator that will not finish.

Generators never touch session state; they only call back.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Optional, Protocol, Sequence

from studygen.core.errors import ArtifactValidationError, StudyGenError
from studygen.core.logging import get_logger, log_context
from studygen.client.notifications import Notifier
from studygen.client.transport import PartialCallback, artifact_path
from studygen.modules.artifacts.models import ArtifactKind, Provider
from studygen.modules.artifacts.validator import ValidationIssue, validate_artifact
from studygen.modules.documents import EncodedFile

logger = get_logger(__name__)


class ArtifactClient(Protocol):
    async def generate_artifact(
        self,
        path: str,
        files: Sequence[EncodedFile],
        on_partial: Optional[PartialCallback] = None,
    ) -> Any: ...


@dataclass
class GenerationOutcome:
    kind: ArtifactKind
    provider: Provider
    items: list[Any] = field(default_factory=list)
    error: Optional[StudyGenError] = None
    issues: list[ValidationIssue] = field(default_factory=list)
    # Opaque tag passed to submit() and echoed back unchanged
    context: Any = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.items)

    @property
    def error_message(self) -> Optional[str]:
        return self.error.message if self.error else None


OutcomeCallback = Callable[[GenerationOutcome], None]
ContextCheck = Callable[[Any], bool]


def _always_current(context: Any) -> bool:
    return True


class ArtifactGenerator:
    kind: ClassVar[ArtifactKind]
    label: ClassVar[str]

    def __init__(
        self,
        client: ArtifactClient,
        *,
        provider: Provider = Provider.GOOGLE,
        notifier: Optional[Notifier] = None,
        on_success: Optional[OutcomeCallback] = None,
        on_complete: Optional[OutcomeCallback] = None,
        on_error: Optional[OutcomeCallback] = None,
        is_current: Optional[ContextCheck] = None,
    ) -> None:
        self.client = client
        self.provider = provider
        self.notifier = notifier or Notifier()
        self.on_success = on_success
        self.on_complete = on_complete
        self.on_error = on_error
        # Submissions whose context fails this check are silent and not reported
        self.is_current = is_current or _always_current
        self._partials: dict[Any, list[Any]] = {}
        self._in_flight: Counter = Counter()
        self._latest: Any = None

    @property
    def path(self) -> str:
        return artifact_path(self.kind, self.provider)

    @property
    def partial(self) -> list[Any]:
        """Partial list of the latest current submission; display only."""
        if not self.is_current(self._latest):
            return []
        return list(self._partials.get(self._latest, []))

    @property
    def is_loading(self) -> bool:
        return any(n > 0 and self.is_current(ctx) for ctx, n in self._in_flight.items())

    def failure_message(self, cause: Optional[str] = None) -> str:
        msg = f"Failed to generate {self.label}. Please try again."
        return f"{msg} ({cause})" if cause else msg

    def _partial_sink(self, context: Any) -> PartialCallback:
        def _set(value: Any) -> None:
            if context in self._partials:
                self._partials[context] = list(value) if isinstance(value, list) else []

        return _set

    def submit(self, files: Sequence[EncodedFile], *, context: Any = None) -> asyncio.Task:
        """Start one request in the background and return its task."""
        return asyncio.create_task(
            self.run(list(files), context=context),
            name=f"generate-{self.kind.value}-{self.provider.value}",
        )

    async def run(self, files: Sequence[EncodedFile], *, context: Any = None) -> GenerationOutcome:
        outcome = GenerationOutcome(kind=self.kind, provider=self.provider, context=context)
        extra = log_context(artifact=self.kind)
        self._in_flight[context] += 1
        self._partials[context] = []
        self._latest = context
        try:
            raw = await self.client.generate_artifact(
                self.path, files, on_partial=self._partial_sink(context)
            )
        except StudyGenError as e:
            logger.error("Generation failed: %s (%s)", e.message, e.details, extra=extra)
            outcome.error = e
            if self.is_current(context):
                self.notifier.error(self.failure_message(e.message))
            if self.on_error is not None:
                self.on_error(outcome)
        else:
            result = validate_artifact(self.kind, raw)
            if result.ok:
                outcome.items = list(result.items)
                logger.info("Generated %d %s item(s)", len(outcome.items), self.kind.value, extra=extra)
                if self.on_success is not None:
                    self.on_success(outcome)
            else:
                logger.warning("Rejected %s output: %s", self.kind.value, result.summary(), extra=extra)
                outcome.issues = result.issues
                outcome.error = ArtifactValidationError(
                    f"The generated {self.label} was invalid", issues=result.issues
                )
                if self.is_current(context):
                    self.notifier.error(self.failure_message())
        finally:
            self._in_flight[context] -= 1
            if self._in_flight[context] <= 0:
                del self._in_flight[context]
                self._partials.pop(context, None)
            if self.on_complete is not None:
                self.on_complete(outcome)
        return outcome


class QuizGenerator(ArtifactGenerator):
    kind = ArtifactKind.QUIZ
    label = "quiz"


class FlashcardsGenerator(ArtifactGenerator):
    kind = ArtifactKind.FLASHCARDS
    label = "flashcards"


class MatchingGenerator(ArtifactGenerator):
    kind = ArtifactKind.MATCHING
    label = "matching game"

    def failure_message(self, cause: Optional[str] = None) -> str:
        msg = f"Failed to generate matching game with {self.provider.label}. Please try again."
        return f"{msg} ({cause})" if cause else msg
