"""
Pytest configuration and shared fixtures.

Artifact payloads here are the JSON shapes the service sends.
"""
from typing import Any

import pytest

from fakes import (
    FLASHCARDS_PATH,
    MATCHING_OPENAI_PATH,
    MATCHING_PATH,
    QUIZ_PATH,
    make_pdf,
)
from studygen.core.config import settings
from studygen.modules.documents import Document


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Tests that wire several layers together")


def pytest_collection_modifyitems(config, items):
    """Mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def quiz_payload() -> list[dict]:
    return [
        {
            "question": f"Question {i}?",
            "options": [f"Option {i}{c}" for c in "abcd"],
            "answer": "ABCD"[i % 4],
        }
        for i in range(4)
    ]


@pytest.fixture
def flashcards_payload() -> list[dict]:
    return [{"front": f"Front {i}", "back": f"Back {i}"} for i in range(8)]


@pytest.fixture
def matching_payload() -> list[dict]:
    return [
        {"id": f"m{i}", "term": f"Term {i}", "definition": f"Definition {i}"}
        for i in range(6)
    ]


@pytest.fixture
def responses(quiz_payload, flashcards_payload, matching_payload) -> dict[str, Any]:
    return {
        QUIZ_PATH: quiz_payload,
        FLASHCARDS_PATH: flashcards_payload,
        MATCHING_PATH: matching_payload,
        MATCHING_OPENAI_PATH: matching_payload,
    }


@pytest.fixture
def pdf_document() -> Document:
    return make_pdf()


@pytest.fixture
def provider_keys(monkeypatch):
    """Pretend both provider credentials are configured."""
    monkeypatch.setattr(settings, "google_api_key", "test-google-key")
    monkeypatch.setattr(settings, "openai_api_key", "test-openai-key")
