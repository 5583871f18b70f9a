from __future__ import annotations

import argparse
from datetime import date
import json
from pathlib import Path
import sys

from echo_notes.config import configure_logging, get_settings
from echo_notes.controller import StudyHubController
from echo_notes.llm import ChatCompletionClient, CompletionClient
from echo_notes.services.notes import reduce_to_summary
from echo_notes.storage import LectureStore


def _build_parser() -> argparse.ArgumentParser:
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="echo-notes",
        description="Turn lecture transcripts into study notes, flashcards and quizzes",
    )
    parser.add_argument(
        "--base-dir",
        default=settings.base_dir,
        help="Root directory holding one sub-directory per course",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    summarize = subparsers.add_parser("summarize", help="Summarize a transcript text file")
    summarize.add_argument("transcript_file", help="Path to a UTF-8 transcript file")
    summarize.add_argument(
        "--chunk-size",
        type=int,
        default=settings.summary_chunk_size,
        help="Words per chunk sent to the model",
    )

    generate = subparsers.add_parser("generate", help="Generate notes, flashcards and quiz for a stored lecture")
    generate.add_argument("course", help="Course directory name")
    generate.add_argument("filename", help="Lecture file name, with or without extension")
    generate.add_argument(
        "--chunk-size",
        type=int,
        default=settings.summary_chunk_size,
        help="Words per chunk sent to the model",
    )

    lectures = subparsers.add_parser("lectures", help="List stored lectures")
    scope = lectures.add_mutually_exclusive_group()
    scope.add_argument("--course", default=None, help="Only lectures of this course")
    scope.add_argument("--date", default=None, help="Only lectures recorded on YYYY-MM-DD")

    return parser


def _progress(current: int, total: int) -> None:
    print(f"[echo-notes] processing chunk {current} of {total}", file=sys.stderr, flush=True)


def _run_summarize(args: argparse.Namespace, client: CompletionClient) -> None:
    transcript = Path(args.transcript_file).read_text(encoding="utf-8")
    notes = reduce_to_summary(
        transcript,
        client=client,
        chunk_size=args.chunk_size,
        on_progress=_progress,
    )
    print(notes, flush=True)


def _run_generate(args: argparse.Namespace, controller: StudyHubController) -> None:
    outcome = controller.generate(
        args.course,
        Path(args.filename).stem,
        chunk_size=args.chunk_size,
        on_progress=_progress,
    )
    for warning in outcome.warnings:
        print(f"[echo-notes] warning: {warning}", file=sys.stderr, flush=True)

    lecture = outcome.lecture
    print(
        "[echo-notes] completed "
        f"lecture_id={lecture.id} "
        f"flashcards={len(lecture.flashcards or [])} "
        f"quiz_questions={len(lecture.quiz_questions or [])}",
        flush=True,
    )


def _run_lectures(args: argparse.Namespace, store: LectureStore) -> None:
    if args.course:
        infos = store.list_lectures(args.course)
    elif args.date:
        infos = store.lectures_for_date(date.fromisoformat(args.date).isoformat())
    else:
        infos = [info for course in store.list_courses() for info in store.list_lectures(course)]

    for info in infos:
        print(json.dumps(info.model_dump()), flush=True)


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging()

    settings = get_settings()
    store = LectureStore(Path(args.base_dir))

    def client_factory() -> CompletionClient:
        return ChatCompletionClient.from_settings(settings)

    try:
        if args.command == "summarize":
            _run_summarize(args, client_factory())
        elif args.command == "generate":
            controller = StudyHubController(store=store, client_factory=client_factory)
            _run_generate(args, controller)
        else:
            _run_lectures(args, store)
    except Exception as exc:
        print(f"[echo-notes] failed: {exc}", file=sys.stderr, flush=True)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
