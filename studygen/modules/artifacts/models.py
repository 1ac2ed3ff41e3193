"""Pydantic models for the three study artifacts.

Two families live here. The ``*Draft`` models are what the LLM is asked to
produce: to keep the provider structured-output schemas simple and
compatible we avoid constraints (lengths, enums beyond the answer letter)
on them. The strict models are what the validator accepts into session
state; they carry every shape and length rule.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, StringConstraints


QUIZ_LENGTH = 4
OPTIONS_LENGTH = 4
FLASHCARDS_LENGTH = 8
MATCHING_LENGTH = 6

ANSWER_LABELS: tuple[str, ...] = ("A", "B", "C", "D")


class ArtifactKind(str, Enum):
    QUIZ = "quiz"
    FLASHCARDS = "flashcards"
    MATCHING = "matching"

    @property
    def target_length(self) -> int:
        return _TARGET_LENGTHS[self]


# The display modes are exactly the artifact kinds
LearningMode = ArtifactKind

_TARGET_LENGTHS = {
    ArtifactKind.QUIZ: QUIZ_LENGTH,
    ArtifactKind.FLASHCARDS: FLASHCARDS_LENGTH,
    ArtifactKind.MATCHING: MATCHING_LENGTH,
}


class Provider(str, Enum):
    GOOGLE = "google"
    OPENAI = "openai"

    @property
    def label(self) -> str:
        return "OpenAI" if self is Provider.OPENAI else "Google AI"


QuestionText = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=500)
]
OptionText = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=300)
]
CardText = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=1000)
]
TermText = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)
]
ItemId = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)
]


class QuizQuestion(BaseModel):
    """A single multiple-choice question."""

    model_config = ConfigDict(extra="ignore")

    question: QuestionText
    options: Annotated[
        list[OptionText],
        Field(min_length=OPTIONS_LENGTH, max_length=OPTIONS_LENGTH),
    ]
    answer: Literal["A", "B", "C", "D"]

    @property
    def answer_index(self) -> int:
        return ANSWER_LABELS.index(self.answer)

    @property
    def correct_option(self) -> str:
        return self.options[self.answer_index]


class Flashcard(BaseModel):
    model_config = ConfigDict(extra="ignore")

    front: CardText
    back: CardText


class MatchingItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: ItemId
    term: TermText
    definition: CardText


# LLM-facing drafts -----------------------------------------------------


class QuestionDraft(BaseModel):
    question: str
    options: list[str] = Field(
        description=(
            "Four possible answers to the question. Only one should be correct. "
            "They should all be of equal lengths."
        )
    )
    answer: Literal["A", "B", "C", "D"] = Field(
        description=(
            "The correct answer, where A is the first option, B is the second, "
            "and so on."
        )
    )


class FlashcardDraft(BaseModel):
    front: str = Field(description="The question or prompt on the front of the flashcard")
    back: str = Field(description="The answer or explanation on the back of the flashcard")


class MatchingPair(BaseModel):
    term: str = Field(description="The term to be matched")
    definition: str = Field(description="The definition that matches the term")


class QuizTitle(BaseModel):
    title: str = Field(
        description="A max three word title for the quiz based on the file provided as context"
    )
