"""Generate quizzes, flashcards and matching games from PDF documents."""

__version__ = "0.1.0"
