"""Application state for the study hub and the actions that transform it.

State is immutable; every action returns a new ``AppState``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Literal

from echo_notes.models import Lecture

View = Literal["calendar", "lecture", "study-hub"]


@dataclass(frozen=True)
class AppState:
    courses: tuple[str, ...] = ()
    lectures: tuple[Lecture, ...] = ()
    selected_date: date = field(default_factory=date.today)
    current_month: date = field(default_factory=lambda: date.today().replace(day=1))
    selected_lecture: Lecture | None = None
    is_recording: bool = False
    current_course: str = "Classes"
    dates_with_lectures: tuple[str, ...] = ()
    view: View = "calendar"


def set_courses(state: AppState, courses: list[str]) -> AppState:
    return replace(state, courses=tuple(courses))


def set_lectures(state: AppState, lectures: list[Lecture]) -> AppState:
    return replace(state, lectures=tuple(lectures))


def select_date(state: AppState, selected: date) -> AppState:
    return replace(state, selected_date=selected)


def set_current_month(state: AppState, month: date) -> AppState:
    return replace(state, current_month=month.replace(day=1))


def select_lecture(state: AppState, lecture: Lecture | None) -> AppState:
    return replace(state, selected_lecture=lecture)


def set_recording(state: AppState, recording: bool) -> AppState:
    return replace(state, is_recording=recording)


def set_current_course(state: AppState, course: str) -> AppState:
    return replace(state, current_course=course)


def set_dates_with_lectures(state: AppState, dates: list[str]) -> AppState:
    return replace(state, dates_with_lectures=tuple(dates))


def set_view(state: AppState, view: View) -> AppState:
    return replace(state, view=view)


def add_lecture(state: AppState, lecture: Lecture) -> AppState:
    dates = state.dates_with_lectures
    if lecture.date not in dates:
        dates = (*dates, lecture.date)
    return replace(state, lectures=(*state.lectures, lecture), dates_with_lectures=dates)


def update_lecture(state: AppState, updated: Lecture) -> AppState:
    selected = state.selected_lecture
    if selected is not None and selected.id == updated.id:
        selected = updated
    return replace(
        state,
        lectures=tuple(updated if lecture.id == updated.id else lecture for lecture in state.lectures),
        selected_lecture=selected,
    )


def remove_lecture(state: AppState, lecture_id: str) -> AppState:
    selected = state.selected_lecture
    if selected is not None and selected.id == lecture_id:
        selected = None
    return replace(
        state,
        lectures=tuple(lecture for lecture in state.lectures if lecture.id != lecture_id),
        selected_lecture=selected,
    )
