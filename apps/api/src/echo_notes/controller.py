from __future__ import annotations

from collections.abc import Callable
from datetime import date
import logging
from pathlib import Path
import queue
import threading
from typing import Any

from echo_notes import state as actions
from echo_notes.capture import CaptureEvent, drain_capture
from echo_notes.llm import CompletionClient
from echo_notes.models import Lecture, LectureInfo
from echo_notes.services.generation import GenerationOutcome, generate_study_materials
from echo_notes.services.notes import ProgressCallback
from echo_notes.services.study import toggle_known
from echo_notes.state import AppState
from echo_notes.storage import LectureNotFound, LectureStore

logger = logging.getLogger(__name__)


class RecordingInProgress(RuntimeError):
    pass


class StudyHubController:
    """Top-level owner of the application state.

    Views read ``state``; every change goes through one of the methods below,
    which apply a pure action from ``echo_notes.state`` and keep the lecture
    store in sync.
    """

    def __init__(
        self,
        *,
        store: LectureStore,
        client_factory: Callable[[], CompletionClient],
        chunk_size: int | None = None,
        initial_state: AppState | None = None,
    ) -> None:
        self._store = store
        self._client_factory = client_factory
        self._chunk_size = chunk_size
        self._state = initial_state or AppState()
        self._state_lock = threading.Lock()

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def store(self) -> LectureStore:
        return self._store

    def _dispatch(self, action: Callable[..., AppState], *args: Any) -> AppState:
        with self._state_lock:
            self._state = action(self._state, *args)
            return self._state

    def _load_info(self, info: LectureInfo) -> Lecture | None:
        return self._store.load(info.path, Path(info.path).parent.name)

    def refresh(self) -> AppState:
        self._dispatch(actions.set_courses, self._store.list_courses())
        return self._dispatch(actions.set_dates_with_lectures, self._store.dates_with_lectures())

    def select_date(self, selected: date) -> list[LectureInfo]:
        infos = self._store.lectures_for_date(selected.isoformat())
        lectures = [lecture for lecture in map(self._load_info, infos) if lecture is not None]
        self._dispatch(actions.select_date, selected)
        self._dispatch(actions.set_lectures, lectures)
        return infos

    def open_lecture(self, course_name: str, filename: str) -> Lecture:
        lecture = self._store.get(course_name, filename)
        self._dispatch(actions.select_lecture, lecture)
        self._dispatch(actions.set_view, "study-hub")
        return lecture

    def start_recording(self, course_name: str | None = None) -> queue.Queue[CaptureEvent]:
        with self._state_lock:
            if self._state.is_recording:
                raise RecordingInProgress("a recording is already running")
            self._state = actions.set_recording(self._state, True)
            if course_name:
                self._state = actions.set_current_course(self._state, course_name)
        logger.info("recording started course=%s", self._state.current_course)
        return queue.Queue()

    def finish_recording(
        self,
        events: queue.Queue[CaptureEvent],
        *,
        title: str | None = None,
        recorded_on: date | None = None,
        timeout: float | None = None,
    ) -> Lecture:
        try:
            session = drain_capture(events, timeout=timeout)
        finally:
            self._dispatch(actions.set_recording, False)

        lecture = self._store.save_recording(
            course_name=self._state.current_course,
            date=(recorded_on or self._state.selected_date).isoformat(),
            audio=session.audio,
            transcript=session.transcript,
            duration_seconds=session.duration_seconds or 0.0,
            title=title,
        )
        self._dispatch(actions.add_lecture, lecture)
        return lecture

    def import_transcript(
        self,
        *,
        course_name: str,
        title: str,
        transcript: str,
        recorded_on: date | None = None,
    ) -> Lecture:
        lecture = self._store.import_transcript(
            course_name=course_name,
            date=(recorded_on or self._state.selected_date).isoformat(),
            title=title,
            transcript=transcript,
        )
        self._dispatch(actions.add_lecture, lecture)
        return lecture

    def generate(
        self,
        course_name: str,
        filename: str,
        *,
        chunk_size: int | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> GenerationOutcome:
        lecture = self._store.get(course_name, filename)
        outcome = generate_study_materials(
            lecture,
            client=self._client_factory(),
            store=self._store,
            chunk_size=chunk_size or self._chunk_size,
            on_progress=on_progress,
        )
        self._dispatch(actions.update_lecture, outcome.lecture)
        return outcome

    def save_notes(self, course_name: str, filename: str, notes: str) -> Lecture:
        updated = self._store.update(
            self._store.audio_path_for(course_name, filename),
            course_name,
            lambda current: current.model_copy(update={"ai_notes": notes}),
        )
        self._dispatch(actions.update_lecture, updated)
        return updated

    def toggle_flashcard(self, course_name: str, filename: str, card_id: str) -> Lecture:
        def mutate(current: Lecture) -> Lecture:
            try:
                flashcards = toggle_known(current.flashcards or [], card_id)
            except KeyError as exc:
                raise LectureNotFound(f"Flashcard not found: {card_id}") from exc
            return current.model_copy(update={"flashcards": flashcards})

        updated = self._store.update(
            self._store.audio_path_for(course_name, filename),
            course_name,
            mutate,
        )
        self._dispatch(actions.update_lecture, updated)
        return updated

    def delete_lecture(self, course_name: str, filename: str) -> None:
        audio_path = self._store.audio_path_for(course_name, filename)
        lecture = self._store.load(audio_path, course_name)
        self._store.delete(audio_path, course_name)
        if lecture is not None:
            self._dispatch(actions.remove_lecture, lecture.id)
        self._dispatch(actions.set_dates_with_lectures, self._store.dates_with_lectures())
