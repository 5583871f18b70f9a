from collections.abc import Callable
from dataclasses import dataclass

ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class TranscriptChunk:
    index: int
    total: int
    text: str
    word_count: int
