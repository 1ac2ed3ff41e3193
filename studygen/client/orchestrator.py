"""Session state machine for one upload-to-reset lifecycle.

``StudySession`` is the only writer of session state. It accepts user
intents (select files, submit, switch mode, toggle the matching provider,
reset), drives the title request and the three generators, and folds their
completions into a single aggregate signal.

Phases::

    IDLE -> SUBMITTING -> GENERATING_ALL -> PARTIALLY_COMPLETE -> ALL_COMPLETE
      ^                                                               |
      +------------------------------ reset --------------------------+

Every run is tagged with an epoch. ``reset`` bumps the epoch without
aborting requests already sent; results carrying an older epoch are
dropped when they arrive.
"""

from __future__ import annotations

import asyncio
import uuid
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Protocol, Sequence

from pydantic import BaseModel, Field, computed_field

from studygen.core.config import settings
from studygen.core.errors import StudyGenError
from studygen.core.logging import get_logger, log_context
from studygen.client.generators import (
    ArtifactClient,
    FlashcardsGenerator,
    GenerationOutcome,
    MatchingGenerator,
    QuizGenerator,
)
from studygen.client.notifications import Notifier
from studygen.client.selector import MatchingProviderSelector
from studygen.modules.artifacts.models import (
    ArtifactKind,
    Flashcard,
    LearningMode,
    MatchingItem,
    Provider,
    QuizQuestion,
)
from studygen.modules.documents import (
    Document,
    EncodedFile,
    encode_file_as_base64,
    is_valid_pdf_file,
)

logger = get_logger(__name__)

DEFAULT_TITLE = "Learning Material"


class SessionClient(ArtifactClient, Protocol):
    async def generate_title(self, file_name: str) -> str: ...


class SessionPhase(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    GENERATING_ALL = "generating_all"
    PARTIALLY_COMPLETE = "partially_complete"
    ALL_COMPLETE = "all_complete"


class SlotStatus(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    EMPTY = "empty"
    POPULATED = "populated"


class SessionProgress(BaseModel):
    quiz: float = 0.0
    flashcards: float = 0.0
    matching: float = 0.0

    @computed_field
    @property
    def overall(self) -> float:
        return round((self.quiz + self.flashcards + self.matching) / 3, 2)


class SessionState(BaseModel):
    """Read-only snapshot handed to the presentation surface."""

    session_id: str
    epoch: int
    phase: SessionPhase
    files: list[str] = Field(default_factory=list)
    title: str = DEFAULT_TITLE
    questions: list[QuizQuestion] = Field(default_factory=list)
    flashcards: list[Flashcard] = Field(default_factory=list)
    matching_items: list[MatchingItem] = Field(default_factory=list)
    mode: LearningMode = LearningMode.FLASHCARDS
    completed: dict[ArtifactKind, bool] = Field(default_factory=dict)
    slots: dict[ArtifactKind, SlotStatus] = Field(default_factory=dict)
    errors: dict[ArtifactKind, Optional[str]] = Field(default_factory=dict)
    is_processing: bool = False
    processing_step: str = ""
    pdf_uploaded: bool = False
    matching_provider: Provider = Provider.GOOGLE
    progress: SessionProgress = Field(default_factory=SessionProgress)

    @property
    def current_slot(self) -> SlotStatus:
        return self.slots[self.mode]


CompleteCallback = Callable[[SessionState], None]


def _blank() -> dict[ArtifactKind, Any]:
    return {kind: [] for kind in ArtifactKind}


class StudySession:
    """Owns the session and coordinates title + three generators.

    Example:
        async with StudyGenClient() as client:
            session = StudySession(client)
            if await session.upload([await Document.from_path("notes.pdf")]):
                await session.wait_until_complete()
            print(session.state.flashcards)
    """

    def __init__(
        self,
        client: SessionClient,
        *,
        notifier: Optional[Notifier] = None,
        matching_provider: Provider = Provider.GOOGLE,
        matching_delay: Optional[float] = None,
        on_all_complete: Optional[CompleteCallback] = None,
    ) -> None:
        self.client = client
        self.notifier = notifier or Notifier()
        self.session_id = uuid.uuid4().hex[:8]
        self.matching_delay = (
            settings.client.matching_dispatch_delay_seconds
            if matching_delay is None
            else max(0.0, float(matching_delay))
        )
        self._all_complete_callbacks: list[CompleteCallback] = []
        if on_all_complete is not None:
            self._all_complete_callbacks.append(on_all_complete)

        common = dict(
            notifier=self.notifier,
            on_complete=self._on_generator_complete,
            is_current=self._is_current,
        )
        self.quiz = QuizGenerator(client, **common)
        self.flashcards = FlashcardsGenerator(client, **common)
        self.matching = MatchingProviderSelector(
            {p: MatchingGenerator(client, provider=p, **common) for p in Provider},
            provider=matching_provider,
        )

        self._epoch = 0
        self._tasks: set[asyncio.Task] = set()
        self._mode: LearningMode = LearningMode.FLASHCARDS
        # One event for the session lifetime so waiters survive a reset
        self._all_done = asyncio.Event()
        self._clear()

    # Internal state -----------------------------------------------------
    def _clear(self) -> None:
        self._documents: list[Document] = []
        self._title = DEFAULT_TITLE
        self._items: dict[ArtifactKind, list[Any]] = _blank()
        self._completed: dict[ArtifactKind, bool] = {k: False for k in ArtifactKind}
        self._errors: dict[ArtifactKind, Optional[str]] = {k: None for k in ArtifactKind}
        self._submitted = False
        self._dispatched = False
        self._processing = False
        self._step = ""
        self._all_complete_signaled = False
        self._all_done.clear()

    def _clear_artifacts(self) -> None:
        self._items = _blank()
        self._completed = {k: False for k in ArtifactKind}
        self._errors = {k: None for k in ArtifactKind}
        self._dispatched = False
        self._all_complete_signaled = False
        self._all_done.clear()

    def _log_extra(self, kind: Optional[ArtifactKind] = None) -> dict:
        return log_context(f"{self.session_id}#{self._epoch}", kind)

    def _set_step(self, step: str) -> None:
        self._step = step
        logger.info(step, extra=self._log_extra())

    def _track(self, task: asyncio.Task) -> asyncio.Task:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _is_stale(self, epoch: int) -> bool:
        return epoch != self._epoch

    def _is_current(self, context: Any) -> bool:
        return context == self._epoch

    # Read side ----------------------------------------------------------
    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def phase(self) -> SessionPhase:
        if not self._submitted:
            return SessionPhase.IDLE
        if not self._dispatched:
            return SessionPhase.SUBMITTING
        done = sum(1 for v in self._completed.values() if v)
        if done == 0:
            return SessionPhase.GENERATING_ALL
        if done < len(self._completed):
            return SessionPhase.PARTIALLY_COMPLETE
        return SessionPhase.ALL_COMPLETE

    @property
    def is_processing(self) -> bool:
        return self._processing

    def _partial(self, kind: ArtifactKind) -> list[Any]:
        if kind is ArtifactKind.QUIZ:
            return self.quiz.partial
        if kind is ArtifactKind.FLASHCARDS:
            return self.flashcards.partial
        return self.matching.partial

    def slot_status(self, kind: ArtifactKind) -> SlotStatus:
        kind = ArtifactKind(kind)
        if self._items[kind]:
            return SlotStatus.POPULATED
        if self._errors[kind]:
            return SlotStatus.ERROR
        if self._submitted and not self._completed[kind]:
            return SlotStatus.LOADING
        return SlotStatus.EMPTY

    def progress(self) -> SessionProgress:
        values: dict[str, float] = {}
        for kind in ArtifactKind:
            if self._items[kind]:
                values[kind.value] = 100.0
            elif self._submitted and not self._completed[kind]:
                # The trailing element of a streamed partial may still be incomplete
                n = max(len(self._partial(kind)) - 1, 0)
                values[kind.value] = round(min(n / kind.target_length * 100.0, 100.0), 2)
            else:
                values[kind.value] = 0.0
        return SessionProgress(**values)

    @property
    def state(self) -> SessionState:
        return SessionState(
            session_id=self.session_id,
            epoch=self._epoch,
            phase=self.phase,
            files=[d.name for d in self._documents],
            title=self._title,
            questions=list(self._items[ArtifactKind.QUIZ]),
            flashcards=list(self._items[ArtifactKind.FLASHCARDS]),
            matching_items=list(self._items[ArtifactKind.MATCHING]),
            mode=self._mode,
            completed=dict(self._completed),
            slots={k: self.slot_status(k) for k in ArtifactKind},
            errors=dict(self._errors),
            is_processing=self._processing,
            processing_step=self._step,
            pdf_uploaded=self._submitted,
            matching_provider=self.matching.provider,
            progress=self.progress(),
        )

    # Intents ------------------------------------------------------------
    def on_all_complete(self, callback: CompleteCallback) -> None:
        self._all_complete_callbacks.append(callback)

    def select_files(self, documents: Iterable[Document]) -> list[Document]:
        """Keep the valid PDFs from a file pick or drop; reject the rest."""
        docs = list(documents)
        valid = [d for d in docs if is_valid_pdf_file(d)]
        if len(valid) != len(docs):
            rejected = ", ".join(d.name for d in docs if d not in valid)
            logger.info("Rejected file(s): %s", rejected, extra=self._log_extra())
            self.notifier.error(
                f"Only PDF files under {settings.max_upload_mb:g}MB are allowed."
            )
        self._documents = valid
        return valid

    def set_mode(self, mode: LearningMode | str) -> None:
        self._mode = LearningMode(mode)

    def set_matching_provider(self, provider: Provider | str) -> None:
        """Affects the next submission only."""
        self.matching.provider = Provider(provider)

    def reset(self) -> None:
        """Drop everything from the current run; in-flight results become stale."""
        self._epoch += 1
        logger.info("Session reset", extra=self._log_extra())
        self._clear()

    async def upload(self, documents: Iterable[Document]) -> bool:
        if not self.select_files(documents):
            return False
        return await self.submit()

    async def submit(self) -> bool:
        """Encode, title and dispatch all three generators.

        Returns once the generators are dispatched (or the run was refused);
        use ``wait_until_complete`` to wait for the results.
        """
        if not self._documents:
            self.notifier.error("Please select a PDF file first.")
            return False
        if self._processing:
            logger.warning("Submit ignored: a run is already in progress", extra=self._log_extra())
            return False

        epoch = self._epoch
        self._clear_artifacts()
        self._submitted = True
        self._processing = True
        self._set_step("Analyzing PDF...")

        try:
            encoded = list(
                await asyncio.gather(*(encode_file_as_base64(d) for d in self._documents))
            )
        except (OSError, ValueError) as e:
            logger.error("Encoding failed: %s", e, extra=self._log_extra())
            self.notifier.error("An error occurred while processing your PDF. Please try again.")
            if not self._is_stale(epoch):
                self._submitted = False
                self._processing = False
            return False
        if self._is_stale(epoch):
            return False

        self._set_step("Generating title...")
        title = await self._resolve_title(encoded[0].name)
        if self._is_stale(epoch):
            logger.info("Discarding title from a reset session", extra=self._log_extra())
            return False
        self._title = title

        self._dispatch(encoded, epoch)
        self.notifier.info("Generating learning materials from your PDF...")
        return True

    async def wait_until_complete(self, timeout: Optional[float] = None) -> SessionState:
        """Wait until ALL_COMPLETE and return the state at that point.

        A waiter that spans a reset keeps waiting and returns with the state
        of the next run that completes. Raises ``TimeoutError`` on timeout.
        """
        await asyncio.wait_for(self._all_done.wait(), timeout)
        return self.state

    # Orchestration ------------------------------------------------------
    async def _resolve_title(self, file_name: str) -> str:
        try:
            return await self.client.generate_title(file_name)
        except StudyGenError as e:
            logger.warning(
                "Title generation failed, keeping %r: %s", self._title, e.message,
                extra=self._log_extra(),
            )
            return self._title

    def _dispatch(self, encoded: Sequence[EncodedFile], epoch: int) -> None:
        self._dispatched = True
        self._set_step("Generating quiz questions...")
        self._track(self.quiz.submit(encoded, context=epoch))
        self._set_step("Generating flashcards...")
        self._track(self.flashcards.submit(encoded, context=epoch))
        self._track(asyncio.create_task(self._submit_matching_later(encoded, epoch)))

    async def _submit_matching_later(self, encoded: Sequence[EncodedFile], epoch: int) -> None:
        # Small delay to avoid provider-side races with the other two requests
        if self.matching_delay:
            await asyncio.sleep(self.matching_delay)
        if self._is_stale(epoch):
            logger.info("Skipping matching dispatch for a reset session", extra=self._log_extra())
            return
        self._set_step(f"Generating matching game with {self.matching.provider.label}...")
        await self._track(self.matching.submit(encoded, context=epoch))

    def _on_generator_complete(self, outcome: GenerationOutcome) -> None:
        kind = outcome.kind
        if outcome.context != self._epoch:
            logger.info(
                "Discarding stale %s result from epoch %s", kind.value, outcome.context,
                extra=self._log_extra(kind),
            )
            return
        if outcome.ok:
            self._items[kind] = list(outcome.items)
            self._errors[kind] = None
        else:
            self._errors[kind] = outcome.error_message or f"No {kind.value} content was generated"
        self._completed[kind] = True
        logger.info(
            "%s finished (%s)", kind.value, "ok" if outcome.ok else "failed",
            extra=self._log_extra(kind),
        )
        self._check_all_complete()

    def _check_all_complete(self) -> None:
        if self._all_complete_signaled or not all(self._completed.values()):
            return
        self._all_complete_signaled = True
        self._processing = False
        self._step = ""
        self.notifier.success("All learning materials generated!")
        self._all_done.set()
        snapshot = self.state
        for callback in list(self._all_complete_callbacks):
            callback(snapshot)
