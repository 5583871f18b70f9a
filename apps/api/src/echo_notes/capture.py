from __future__ import annotations

from dataclasses import dataclass, field
import logging
import queue
from typing import Union

logger = logging.getLogger(__name__)

FRAGMENT_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class AudioChunkReady:
    data: bytes


@dataclass(frozen=True)
class TranscriptFragment:
    text: str
    elapsed_seconds: float


@dataclass(frozen=True)
class CaptureEnded:
    elapsed_seconds: float


@dataclass(frozen=True)
class CaptureError:
    message: str


CaptureEvent = Union[AudioChunkReady, TranscriptFragment, CaptureEnded, CaptureError]


class CaptureTimeout(TimeoutError):
    pass


def format_timestamp(elapsed_seconds: float) -> str:
    total = max(0, int(elapsed_seconds))
    minutes, seconds = divmod(total, 60)
    return f"[{minutes:02d}:{seconds:02d}]"


@dataclass
class CaptureSession:
    audio_chunks: list[bytes] = field(default_factory=list)
    fragments: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    duration_seconds: float | None = None

    @property
    def ended(self) -> bool:
        return self.duration_seconds is not None

    @property
    def audio(self) -> bytes:
        return b"".join(self.audio_chunks)

    @property
    def transcript(self) -> str:
        return FRAGMENT_SEPARATOR.join(self.fragments)

    def apply(self, event: CaptureEvent) -> None:
        if isinstance(event, AudioChunkReady):
            if event.data:
                self.audio_chunks.append(event.data)
        elif isinstance(event, TranscriptFragment):
            text = event.text.strip()
            if text:
                self.fragments.append(f"{format_timestamp(event.elapsed_seconds)} {text}")
        elif isinstance(event, CaptureError):
            logger.warning("capture error message=%s", event.message)
            self.errors.append(event.message)
        elif isinstance(event, CaptureEnded):
            self.duration_seconds = event.elapsed_seconds
        else:
            raise TypeError(f"Unsupported capture event: {event!r}")


def drain_capture(
    events: queue.Queue[CaptureEvent],
    *,
    timeout: float | None = None,
    session: CaptureSession | None = None,
) -> CaptureSession:
    """Consume capture events until ``CaptureEnded`` arrives.

    ``timeout`` bounds the wait for each event; exceeding it raises
    CaptureTimeout with the session left as collected so far.
    """
    current = session or CaptureSession()
    while not current.ended:
        try:
            event = events.get(timeout=timeout)
        except queue.Empty as exc:
            raise CaptureTimeout(f"no capture event within {timeout}s") from exc
        current.apply(event)

    logger.info(
        "capture drained fragments=%d audio_bytes=%d errors=%d duration=%.1f",
        len(current.fragments),
        sum(len(chunk) for chunk in current.audio_chunks),
        len(current.errors),
        current.duration_seconds or 0.0,
    )
    return current
