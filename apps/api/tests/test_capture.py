import queue

import pytest

from echo_notes.capture import (
    AudioChunkReady,
    CaptureEnded,
    CaptureError,
    CaptureEvent,
    CaptureTimeout,
    TranscriptFragment,
    drain_capture,
    format_timestamp,
)


@pytest.mark.parametrize(
    ("elapsed", "expected"),
    [(0, "[00:00]"), (5.9, "[00:05]"), (70, "[01:10]"), (3725, "[62:05]"), (-3, "[00:00]")],
)
def test_format_timestamp(elapsed: float, expected: str) -> None:
    assert format_timestamp(elapsed) == expected


def test_drain_capture_assembles_transcript_and_audio() -> None:
    events: queue.Queue[CaptureEvent] = queue.Queue()
    for event in (
        AudioChunkReady(b"ab"),
        TranscriptFragment("  Welcome to class. ", 5),
        CaptureError("network"),
        TranscriptFragment("   ", 9),
        AudioChunkReady(b""),
        AudioChunkReady(b"cd"),
        TranscriptFragment("Today: entropy.", 70),
        CaptureEnded(95.4),
    ):
        events.put(event)

    session = drain_capture(events, timeout=1)

    assert session.transcript == "[00:05] Welcome to class.\n\n[01:10] Today: entropy."
    assert session.audio == b"abcd"
    assert session.errors == ["network"]
    assert session.duration_seconds == 95.4
    assert session.ended


def test_drain_capture_without_transcription_yields_empty_transcript() -> None:
    events: queue.Queue[CaptureEvent] = queue.Queue()
    events.put(AudioChunkReady(b"audio"))
    events.put(CaptureEnded(3))

    session = drain_capture(events, timeout=1)

    assert session.transcript == ""
    assert session.audio == b"audio"


def test_drain_capture_times_out_without_end_event() -> None:
    events: queue.Queue[CaptureEvent] = queue.Queue()
    events.put(TranscriptFragment("partial", 1))

    with pytest.raises(CaptureTimeout):
        drain_capture(events, timeout=0.01)


def test_drain_capture_rejects_unknown_events() -> None:
    events: queue.Queue[object] = queue.Queue()
    events.put("not an event")

    with pytest.raises(TypeError, match="Unsupported capture event"):
        drain_capture(events, timeout=1)  # type: ignore[arg-type]
