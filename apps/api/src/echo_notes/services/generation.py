from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
import logging
import threading

from echo_notes.llm import CompletionClient
from echo_notes.models import Lecture
from echo_notes.services.notes import ProgressCallback, reduce_to_summary
from echo_notes.services.study import flashcard_extraction, quiz_extraction
from echo_notes.storage import LectureNotFound, LectureStore

logger = logging.getLogger(__name__)

PLACEHOLDER_TRANSCRIPT = "Could you provide a brief overview of the key concepts from this lecture?"


class GenerationInProgress(RuntimeError):
    pass


@dataclass(frozen=True)
class GenerationOutcome:
    lecture: Lecture
    warnings: list[str] = field(default_factory=list)


_in_flight: set[str] = set()
_in_flight_guard = threading.Lock()


@contextmanager
def single_flight(lecture_id: str) -> Iterator[None]:
    with _in_flight_guard:
        if lecture_id in _in_flight:
            raise GenerationInProgress(f"generation already running for lecture {lecture_id}")
        _in_flight.add(lecture_id)
    try:
        yield
    finally:
        with _in_flight_guard:
            _in_flight.discard(lecture_id)


def generate_study_materials(
    lecture: Lecture,
    *,
    client: CompletionClient,
    store: LectureStore,
    chunk_size: int | None = None,
    on_progress: ProgressCallback | None = None,
) -> GenerationOutcome:
    transcript = lecture.transcript or PLACEHOLDER_TRANSCRIPT

    with single_flight(lecture.id):
        if store.load(lecture.audio_path, lecture.course_name) is None:
            raise LectureNotFound(f"Lecture not stored: {lecture.audio_path}")

        logger.info("generation started lecture_id=%s words=%d", lecture.id, len(transcript.split()))
        notes = reduce_to_summary(
            transcript,
            client=client,
            chunk_size=chunk_size,
            on_progress=on_progress,
        )
        flashcards = flashcard_extraction(notes, client=client)
        quiz = quiz_extraction(notes, client=client)

        generated = {
            "transcript": transcript,
            "ai_notes": notes,
            "flashcards": flashcards.items,
            "quiz_questions": quiz.items,
        }
        updated = store.update(
            lecture.audio_path,
            lecture.course_name,
            lambda current: current.model_copy(update=generated),
        )

    warnings = [warning for warning in (flashcards.warning, quiz.warning) if warning]
    logger.info(
        "generation completed lecture_id=%s flashcards=%d quiz=%d warnings=%d",
        lecture.id,
        len(flashcards.items),
        len(quiz.items),
        len(warnings),
    )
    return GenerationOutcome(lecture=updated, warnings=warnings)
