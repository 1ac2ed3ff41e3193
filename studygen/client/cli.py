from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Optional

from studygen.client.notifications import Notice, Notifier
from studygen.client.orchestrator import SessionState, StudySession
from studygen.client.transport import StudyGenClient
from studygen.core.logging import setup_logging
from studygen.modules.artifacts.models import LearningMode, Provider
from studygen.modules.documents import Document, PDF_MIME_TYPE


def _print_notice(notice: Notice) -> None:
    print(f"[{notice.level.value}] {notice.message}", file=sys.stderr)


def _render(state: SessionState) -> str:
    lines = [f"# {state.title}", ""]
    if state.mode is LearningMode.QUIZ:
        for i, q in enumerate(state.questions, 1):
            lines.append(f"{i}. {q.question}")
            for label, option in zip("ABCD", q.options):
                mark = "*" if label == q.answer else " "
                lines.append(f"   {mark} {label}) {option}")
    elif state.mode is LearningMode.FLASHCARDS:
        for i, card in enumerate(state.flashcards, 1):
            lines.append(f"{i}. {card.front}")
            lines.append(f"   -> {card.back}")
    else:
        for item in state.matching_items:
            lines.append(f"- {item.term}: {item.definition}")
    error = state.errors.get(state.mode)
    if error:
        lines.append(f"({state.mode.value} unavailable: {error})")
    return "\n".join(lines)


async def _generate(args: argparse.Namespace) -> int:
    notifier = Notifier()
    notifier.subscribe(_print_notice)
    try:
        doc = await Document.from_path(args.pdf, mime_type=args.mime_type)
    except OSError as e:
        print(f"error: cannot read {args.pdf}: {e.strerror or e}", file=sys.stderr)
        return 1
    async with StudyGenClient(args.base_url) as client:
        session = StudySession(
            client,
            notifier=notifier,
            matching_provider=Provider(args.provider),
        )
        session.set_mode(args.mode)
        if not await session.upload([doc]):
            return 1
        try:
            state = await session.wait_until_complete(timeout=args.timeout)
        except asyncio.TimeoutError:
            print(
                f"error: timed out after {args.timeout:g}s waiting for learning materials",
                file=sys.stderr,
            )
            return 1

    if args.json:
        print(json.dumps(state.model_dump(mode="json"), indent=2))
    else:
        print(_render(state))
    return 0 if not any(state.errors.values()) else 1


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="studygen-cli", description="Study material generator CLI"
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    g = sub.add_parser("generate", help="Generate quiz, flashcards and matching from a PDF")
    g.add_argument("--pdf", required=True, help="Path to the PDF document")
    g.add_argument(
        "--provider",
        choices=[p.value for p in Provider],
        default=Provider.GOOGLE.value,
        help="Provider for the matching game",
    )
    g.add_argument(
        "--mode",
        choices=[m.value for m in LearningMode],
        default=LearningMode.FLASHCARDS.value,
        help="Which artifact to print",
    )
    g.add_argument("--base-url", help="Service URL (defaults to STUDYGEN_BASE_URL)")
    g.add_argument("--timeout", type=float, default=None, help="Overall wait in seconds")
    # Files without a .pdf suffix are otherwise typed by their extension
    g.add_argument("--mime-type", default=None, help=f"Override the file type (e.g. {PDF_MIME_TYPE})")
    g.add_argument("--json", action="store_true", help="Output the full session state as JSON")

    args = parser.parse_args(argv)
    if args.cmd == "generate":
        setup_logging()
        return asyncio.run(_generate(args))

    parser.print_help()
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
