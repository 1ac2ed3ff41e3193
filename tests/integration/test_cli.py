"""
Smoke tests for the studygen-cli entry point.
"""

import json

import pytest

from fakes import FLASHCARDS_PATH, MATCHING_PATH, QUIZ_PATH, FakeClient
from studygen.client import cli
from studygen.core.config import settings

MB = 1024 * 1024


@pytest.fixture
def pdf_path(tmp_path):
    path = tmp_path / "cells.pdf"
    path.write_bytes(b"%PDF-1.4\n" + b"0" * 1024)
    return path


@pytest.fixture
def fake_client(monkeypatch, responses):
    fake = FakeClient(responses, title="Cell Biology")
    monkeypatch.setattr(cli, "StudyGenClient", lambda base_url=None: fake)
    monkeypatch.setattr(settings.client, "matching_dispatch_delay_seconds", 0)
    return fake


def test_generate_prints_flashcards(fake_client, pdf_path, capsys):
    code = cli.main(["generate", "--pdf", str(pdf_path)])

    out = capsys.readouterr()
    assert code == 0
    assert out.out.startswith("# Cell Biology")
    assert "Front 0" in out.out
    assert "All learning materials generated!" in out.err


def test_generate_json_quiz(fake_client, pdf_path, capsys):
    code = cli.main(["generate", "--pdf", str(pdf_path), "--mode", "quiz", "--json"])

    state = json.loads(capsys.readouterr().out)
    assert code == 0
    assert state["mode"] == "quiz"
    assert len(state["questions"]) == 4
    assert state["progress"]["overall"] == 100.0


def test_rejects_oversized_pdf(fake_client, tmp_path, capsys):
    big = tmp_path / "big.pdf"
    big.write_bytes(b"0" * (6 * MB))

    code = cli.main(["generate", "--pdf", str(big)])

    assert code == 1
    assert "Only PDF files under 5MB are allowed." in capsys.readouterr().err
    assert fake_client.calls == []


def test_missing_pdf_is_reported_without_traceback(fake_client, tmp_path, capsys):
    missing = tmp_path / "nope.pdf"

    code = cli.main(["generate", "--pdf", str(missing)])

    err = capsys.readouterr().err
    assert code == 1
    assert f"error: cannot read {missing}" in err
    assert "Traceback" not in err
    assert fake_client.calls == []


def test_timeout_is_reported_without_traceback(monkeypatch, responses, pdf_path, capsys):
    stuck = FakeClient(responses, gated=(QUIZ_PATH, FLASHCARDS_PATH, MATCHING_PATH))
    monkeypatch.setattr(cli, "StudyGenClient", lambda base_url=None: stuck)
    monkeypatch.setattr(settings.client, "matching_dispatch_delay_seconds", 0)

    code = cli.main(["generate", "--pdf", str(pdf_path), "--timeout", "0.05"])

    out = capsys.readouterr()
    assert code == 1
    assert "error: timed out after 0.05s waiting for learning materials" in out.err
    assert out.out == ""
