"""Artifact models, validation and play helpers."""

from .models import (
    ArtifactKind,
    Flashcard,
    LearningMode,
    MatchingItem,
    Provider,
    QuizQuestion,
)
from .validator import (
    ValidationIssue,
    ValidationResult,
    validate_artifact,
    validate_flashcards,
    validate_matching,
    validate_quiz,
)

__all__ = [
    "ArtifactKind",
    "Flashcard",
    "LearningMode",
    "MatchingItem",
    "Provider",
    "QuizQuestion",
    "ValidationIssue",
    "ValidationResult",
    "validate_artifact",
    "validate_flashcards",
    "validate_matching",
    "validate_quiz",
]
