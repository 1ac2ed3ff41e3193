"""
Unit tests for the service-side generators with the agent layer stubbed out.
"""

import asyncio

import pytest

from studygen.core.errors import ArtifactValidationError, ProviderTimeoutError
from studygen.modules import agents
from studygen.modules.artifacts.models import MatchingPair, Provider, QuestionDraft, QuizTitle
from studygen.modules.matching import generator as matching_generator
from studygen.modules.quiz import generator as quiz_generator
from studygen.modules.title import generator as title_generator


def _stub_agent_layer(monkeypatch, module, output):
    built = {}

    def fake_build_agent(provider, output_type, system_prompt, **kwargs):
        built.update(provider=provider, output_type=output_type, **kwargs)
        return object()

    async def fake_run_buffered(agent, prompt, *, label):
        built["label"] = label
        return output

    monkeypatch.setattr(module, "build_agent", fake_build_agent)
    monkeypatch.setattr(module, "run_buffered", fake_run_buffered)
    return built


@pytest.mark.asyncio
async def test_generate_quiz_validates(monkeypatch, quiz_payload):
    drafts = [QuestionDraft(**q) for q in quiz_payload]
    built = _stub_agent_layer(monkeypatch, quiz_generator, drafts)

    questions = await quiz_generator.generate_quiz(b"%PDF")

    assert len(questions) == 4
    assert built["provider"] is Provider.GOOGLE
    assert built["label"] == "quiz"


@pytest.mark.asyncio
async def test_generate_quiz_rejects_short_quiz(monkeypatch, quiz_payload):
    _stub_agent_layer(monkeypatch, quiz_generator, [QuestionDraft(**q) for q in quiz_payload[:3]])

    with pytest.raises(ArtifactValidationError) as exc:
        await quiz_generator.generate_quiz(b"%PDF")

    assert exc.value.message == "Failed to process questions"
    assert exc.value.status_code == 500


@pytest.mark.asyncio
async def test_generate_matching_assigns_unique_ids(monkeypatch):
    pairs = [MatchingPair(term=f"t{i}", definition=f"d{i}") for i in range(6)]
    built = _stub_agent_layer(monkeypatch, matching_generator, pairs)

    items = await matching_generator.generate_matching(b"%PDF", Provider.OPENAI)

    assert built["provider"] is Provider.OPENAI
    assert len({i.id for i in items}) == 6
    assert [i.term for i in items] == [p.term for p in pairs]


@pytest.mark.asyncio
async def test_generate_matching_rejects_short_set(monkeypatch):
    pairs = [MatchingPair(term=f"t{i}", definition=f"d{i}") for i in range(5)]
    _stub_agent_layer(monkeypatch, matching_generator, pairs)

    with pytest.raises(ArtifactValidationError) as exc:
        await matching_generator.generate_matching(b"%PDF")

    assert exc.value.message == "Failed to process matching items"


def test_with_id_keeps_fields():
    item = matching_generator.with_id(MatchingPair(term="t", definition="d"))

    assert item["term"] == "t" and item["definition"] == "d"
    assert item["id"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Cell Biology", "Cell Biology"),
        ("Introduction To Modern Genetics", "Introduction To Modern"),
        ("   ", title_generator.FALLBACK_TITLE),
    ],
)
async def test_generate_title_trims_to_three_words(monkeypatch, raw, expected):
    built = _stub_agent_layer(monkeypatch, title_generator, QuizTitle(title=raw))

    assert await title_generator.generate_title("cells.pdf") == expected
    assert built["model_name"] == title_generator.settings.google_title_model


@pytest.mark.asyncio
async def test_run_buffered_times_out(monkeypatch):
    class SlowAgent:
        async def run(self, prompt):
            await asyncio.sleep(1)

    monkeypatch.setattr(agents.settings, "generation_timeout_seconds", 0.01)

    with pytest.raises(ProviderTimeoutError) as exc:
        await agents.run_buffered(SlowAgent(), "prompt", label="quiz")

    assert exc.value.status_code == 504
