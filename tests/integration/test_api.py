"""
Integration tests for the HTTP service using FastAPI's TestClient.

Generator functions are replaced at the router module level so no
provider is contacted.
"""

import json

import pytest
from fastapi.testclient import TestClient

from main import app
from studygen.core.config import settings
from studygen.core.errors import ArtifactValidationError, ProviderTimeoutError
from studygen.modules.artifacts.models import FlashcardDraft, MatchingPair
from studygen.modules.artifacts.validator import validate_matching, validate_quiz
from studygen.modules.documents import PDF_MIME_TYPE, to_data_url


@pytest.fixture
def client():
    return TestClient(app)


def _body(content: bytes = b"%PDF-1.4 test", mime: str = PDF_MIME_TYPE, name: str = "cells.pdf") -> dict:
    return {"files": [{"name": name, "type": mime, "data": to_data_url(mime, content)}]}


async def _snapshots(*snaps):
    for snap in snaps:
        yield snap


def test_root(client):
    resp = client.get("/")

    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


class TestUploadRejection:
    def test_no_files(self, client):
        resp = client.post("/v1/generate-quiz", json={"files": []})

        assert resp.status_code == 400
        assert resp.json()["error"] == "No file provided"

    def test_not_a_pdf(self, client):
        resp = client.post("/v1/generate-flashcards", json=_body(b"hello", mime="text/plain", name="a.txt"))

        assert resp.status_code == 400
        assert resp.json()["error"] == "Only PDF files are supported"

    def test_too_large(self, client, monkeypatch):
        monkeypatch.setattr(settings, "max_upload_mb", 0.00001)

        resp = client.post("/v1/generate-matching", json=_body(b"x" * 100))

        assert resp.status_code == 400

    def test_malformed_body(self, client):
        resp = client.post("/v1/generate-quiz", json={"files": "nope"})

        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid request body"


class TestMissingCredentials:
    @pytest.fixture(autouse=True)
    def _no_keys(self, monkeypatch):
        monkeypatch.setattr(settings, "google_api_key", None)
        monkeypatch.setattr(settings, "openai_api_key", None)

    def test_quiz(self, client):
        resp = client.post("/v1/generate-quiz", json=_body())

        assert resp.status_code == 500
        assert resp.json()["error"] == (
            "Google API key is not configured. Please set GOOGLE_API_KEY in your environment variables."
        )

    def test_streamed_flashcards_fail_before_streaming(self, client):
        resp = client.post("/v1/generate-flashcards", json=_body())

        assert resp.status_code == 500
        assert "GOOGLE_API_KEY" in resp.json()["error"]

    def test_openai_matching(self, client):
        resp = client.post("/v1/generate-matching-openai", json=_body())

        assert resp.status_code == 500
        assert resp.json()["error"] == (
            "OpenAI API key is not configured. Please set OPENAI_API_KEY in your environment variables."
        )


def test_quiz_success(client, monkeypatch, quiz_payload):
    received = {}

    async def fake_generate_quiz(pdf):
        received["pdf"] = pdf
        return validate_quiz(quiz_payload).items

    monkeypatch.setattr("studygen.apis.quiz.main.generate_quiz", fake_generate_quiz)

    resp = client.post("/v1/generate-quiz", json=_body(b"%PDF-1.4 quiz"))

    assert resp.status_code == 200
    assert resp.json() == quiz_payload
    assert received["pdf"] == b"%PDF-1.4 quiz"


def test_quiz_validation_failure(client, monkeypatch):
    async def fake_generate_quiz(pdf):
        raise ArtifactValidationError("Failed to process questions", issues=["0.answer: invalid"])

    monkeypatch.setattr("studygen.apis.quiz.main.generate_quiz", fake_generate_quiz)

    resp = client.post("/v1/generate-quiz", json=_body())

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to process questions", "details": "0.answer: invalid"}


def test_quiz_timeout(client, monkeypatch):
    async def fake_generate_quiz(pdf):
        raise ProviderTimeoutError("Timed out generating quiz")

    monkeypatch.setattr("studygen.apis.quiz.main.generate_quiz", fake_generate_quiz)

    assert client.post("/v1/generate-quiz", json=_body()).status_code == 504


def test_flashcards_stream(client, monkeypatch):
    cards = [FlashcardDraft(front=f"f{i}", back=f"b{i}") for i in range(8)]

    def fake_stream(pdf):
        return _snapshots(cards[:3], cards[:6], cards)

    monkeypatch.setattr("studygen.apis.flashcards.main.stream_flashcards", fake_stream)

    resp = client.post("/v1/generate-flashcards", json=_body())

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/plain")
    assert json.loads(resp.text) == [c.model_dump() for c in cards]


def test_google_matching_stream_adds_ids(client, monkeypatch):
    pairs = [MatchingPair(term=f"t{i}", definition=f"d{i}") for i in range(6)]

    monkeypatch.setattr(
        "studygen.apis.matching.main.stream_matching", lambda pdf: _snapshots(pairs[:2], pairs)
    )

    resp = client.post("/v1/generate-matching", json=_body())
    items = json.loads(resp.text)

    assert resp.status_code == 200
    assert [i["term"] for i in items] == [f"t{i}" for i in range(6)]
    assert len({i["id"] for i in items}) == 6
    assert validate_matching(items).ok


def test_openai_matching_success(client, monkeypatch, matching_payload):
    async def fake_generate(pdf, provider):
        return validate_matching(matching_payload).items

    monkeypatch.setattr("studygen.apis.matching.main.generate_matching", fake_generate)

    resp = client.post("/v1/generate-matching-openai", json=_body())

    assert resp.status_code == 200
    assert resp.json() == matching_payload


def test_title(client, monkeypatch):
    async def fake_title(file_name):
        return "Cell Biology"

    monkeypatch.setattr("studygen.apis.title.main.generate_title", fake_title)

    resp = client.post("/v1/generate-title", json={"file_name": "cells.pdf"})

    assert resp.status_code == 200
    assert resp.json() == {"title": "Cell Biology"}
