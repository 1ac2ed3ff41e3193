"""Playing with validated artifacts: quiz scoring and the matching round."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Optional, Sequence

from pydantic import BaseModel

from studygen.modules.artifacts.models import ANSWER_LABELS, MatchingItem, QuizQuestion


class QuestionReview(BaseModel):
    question: str
    selected: Optional[str] = None
    correct: str
    is_correct: bool


class QuizScore(BaseModel):
    correct: int
    total: int
    review: list[QuestionReview]

    @property
    def percent(self) -> float:
        return round(self.correct / self.total * 100.0, 2) if self.total else 0.0


def score_quiz(
    questions: Sequence[QuizQuestion], answers: Sequence[Optional[str]]
) -> QuizScore:
    """Compare answer letters (A-D, case-insensitive) with the key.

    Missing or unknown answers count as wrong.
    """
    review: list[QuestionReview] = []
    for i, q in enumerate(questions):
        raw = answers[i] if i < len(answers) else None
        selected = raw.strip().upper() if isinstance(raw, str) else None
        if selected not in ANSWER_LABELS:
            selected = None
        review.append(
            QuestionReview(
                question=q.question,
                selected=selected,
                correct=q.answer,
                is_correct=selected == q.answer,
            )
        )
    return QuizScore(
        correct=sum(1 for r in review if r.is_correct),
        total=len(review),
        review=review,
    )


@dataclass
class MatchingRound:
    """One play-through of a matching set.

    Terms and definitions are shuffled independently. A pick of one term
    and one definition is a match when both belong to the same item id.
    """

    items: list[MatchingItem]
    rng: random.Random = field(default_factory=random.Random, repr=False)
    terms: list[MatchingItem] = field(default_factory=list)
    definitions: list[MatchingItem] = field(default_factory=list)
    matched: list[str] = field(default_factory=list)
    attempts: int = 0

    def __post_init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.terms = list(self.items)
        self.definitions = list(self.items)
        self.rng.shuffle(self.terms)
        self.rng.shuffle(self.definitions)
        self.matched = []
        self.attempts = 0

    @property
    def is_complete(self) -> bool:
        return bool(self.items) and len(self.matched) == len(self.items)

    def select(self, term_id: str, definition_id: str) -> bool:
        """Try a pairing; already matched ids are ignored and return False."""
        if term_id in self.matched or definition_id in self.matched:
            return False
        self.attempts += 1
        if term_id != definition_id:
            return False
        self.matched.append(term_id)
        return True
