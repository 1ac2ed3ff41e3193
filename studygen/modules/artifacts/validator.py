"""Single source of truth for "is this candidate a legitimate artifact".

Every entry point takes an arbitrary value (decoded JSON, a partially
streamed list, model instances) and returns a ``ValidationResult``. The
functions never raise: malformed input always becomes a failed result with
one ``ValidationIssue`` per problem found.

Counts are exact. A quiz with three questions or a deck with nine cards is
reported as ``wrong_arity``; nothing is truncated or padded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Any, Generic, Sequence, TypeVar

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from studygen.modules.artifacts.models import (
    FLASHCARDS_LENGTH,
    MATCHING_LENGTH,
    QUIZ_LENGTH,
    ArtifactKind,
    Flashcard,
    MatchingItem,
    QuizQuestion,
)

T = TypeVar("T", bound=BaseModel)

# pydantic error type -> issue kind
_KIND_BY_ERROR = {
    "missing": "missing_field",
    "list_type": "not_a_list",
    "too_short": "wrong_arity",
    "too_long": "wrong_arity",
    "string_too_short": "empty",
    "string_too_long": "too_long",
    "literal_error": "invalid_answer",
    "string_type": "wrong_type",
    "model_type": "wrong_type",
    "model_attributes_type": "wrong_type",
    "dict_type": "wrong_type",
}


@dataclass(frozen=True)
class ValidationIssue:
    loc: str
    kind: str
    message: str

    def __str__(self) -> str:
        return f"{self.loc}: {self.message}" if self.loc else self.message


@dataclass
class ValidationResult(Generic[T]):
    kind: ArtifactKind
    items: list[T] = field(default_factory=list)
    issues: list[ValidationIssue] = field(default_factory=list)
    # Elements removed by matching pre-filtering, kept for logging
    filtered: list[ValidationIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def summary(self) -> str:
        return "; ".join(str(i) for i in self.issues)


_QUIZ_ADAPTER = TypeAdapter(
    Annotated[list[QuizQuestion], Field(min_length=QUIZ_LENGTH, max_length=QUIZ_LENGTH)]
)
_FLASHCARDS_ADAPTER = TypeAdapter(
    Annotated[
        list[Flashcard],
        Field(min_length=FLASHCARDS_LENGTH, max_length=FLASHCARDS_LENGTH),
    ]
)


def _loc(parts: Sequence[Any]) -> str:
    return ".".join(str(p) for p in parts)


def _issues_from_error(err: ValidationError) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for e in err.errors(include_url=False):
        issues.append(
            ValidationIssue(
                loc=_loc(e.get("loc", ())),
                kind=_KIND_BY_ERROR.get(e.get("type", ""), "invalid"),
                message=str(e.get("msg", "invalid value")),
            )
        )
    return issues


def _as_plain(candidate: Any) -> Any:
    """Turn model instances (e.g. drafts) into dicts so any model family validates."""
    if isinstance(candidate, BaseModel):
        return candidate.model_dump()
    if isinstance(candidate, (list, tuple)):
        return [c.model_dump() if isinstance(c, BaseModel) else c for c in candidate]
    return candidate


def _validate_list(
    kind: ArtifactKind, adapter: TypeAdapter, candidate: Any
) -> ValidationResult:
    try:
        items = adapter.validate_python(_as_plain(candidate))
    except ValidationError as err:
        return ValidationResult(kind=kind, issues=_issues_from_error(err))
    except (TypeError, ValueError) as err:
        return ValidationResult(
            kind=kind, issues=[ValidationIssue("", "invalid", str(err))]
        )
    return ValidationResult(kind=kind, items=list(items))


def validate_quiz(candidate: Any) -> ValidationResult[QuizQuestion]:
    """Exactly 4 questions, each with 4 options and an answer in A-D."""
    return _validate_list(ArtifactKind.QUIZ, _QUIZ_ADAPTER, candidate)


def validate_flashcards(candidate: Any) -> ValidationResult[Flashcard]:
    return _validate_list(ArtifactKind.FLASHCARDS, _FLASHCARDS_ADAPTER, candidate)


def validate_matching(candidate: Any) -> ValidationResult[MatchingItem]:
    """Filter element-wise, then require exactly 6 items with unique ids.

    Items missing a non-empty id, term or definition are dropped first. If
    what remains is not a complete, duplicate-free set the whole candidate
    is rejected; a partial set is never accepted.
    """
    kind = ArtifactKind.MATCHING
    candidate = _as_plain(candidate)
    if not isinstance(candidate, (list, tuple)):
        return ValidationResult(
            kind=kind,
            issues=[
                ValidationIssue(
                    "", "not_a_list", f"expected a list, got {type(candidate).__name__}"
                )
            ],
        )

    kept: list[MatchingItem] = []
    filtered: list[ValidationIssue] = []
    for idx, raw in enumerate(candidate):
        try:
            kept.append(MatchingItem.model_validate(raw))
        except ValidationError as err:
            for issue in _issues_from_error(err):
                loc = _loc([idx, issue.loc]) if issue.loc else str(idx)
                filtered.append(ValidationIssue(loc, issue.kind, issue.message))

    if len(kept) != MATCHING_LENGTH:
        arity = ValidationIssue(
            "",
            "wrong_arity",
            f"expected {MATCHING_LENGTH} valid items, got {len(kept)}",
        )
        return ValidationResult(
            kind=kind, issues=filtered + [arity], filtered=filtered
        )

    seen: set[str] = set()
    dupes: list[ValidationIssue] = []
    for idx, item in enumerate(kept):
        if item.id in seen:
            dupes.append(
                ValidationIssue(str(idx), "duplicate_id", f"duplicate id {item.id!r}")
            )
        seen.add(item.id)
    if dupes:
        return ValidationResult(kind=kind, issues=dupes, filtered=filtered)

    return ValidationResult(kind=kind, items=kept, filtered=filtered)


_VALIDATORS = {
    ArtifactKind.QUIZ: validate_quiz,
    ArtifactKind.FLASHCARDS: validate_flashcards,
    ArtifactKind.MATCHING: validate_matching,
}


def validate_artifact(kind: ArtifactKind, candidate: Any) -> ValidationResult:
    return _VALIDATORS[ArtifactKind(kind)](candidate)
