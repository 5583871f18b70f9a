from __future__ import annotations

import math

from echo_notes.services.notes.types import TranscriptChunk


def _tokenize(text: str) -> list[str]:
    return text.split()


def split_into_chunks(text: str, chunk_size: int) -> list[TranscriptChunk]:
    if chunk_size <= 0:
        raise ValueError("chunk_size must be > 0")

    words = _tokenize(text)
    total = math.ceil(len(words) / chunk_size)

    chunks: list[TranscriptChunk] = []
    for position, start in enumerate(range(0, len(words), chunk_size), start=1):
        window = words[start : start + chunk_size]
        chunks.append(
            TranscriptChunk(
                index=position,
                total=total,
                text=" ".join(window),
                word_count=len(window),
            )
        )

    return chunks
