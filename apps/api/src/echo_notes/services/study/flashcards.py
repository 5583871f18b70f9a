from __future__ import annotations

from echo_notes.llm import CompletionClient
from echo_notes.models import Flashcard
from echo_notes.services.study.extraction import ExtractionResult, item_parser, run_extraction
from echo_notes.services.study.prompts import FLASHCARDS_SYSTEM

_parse_flashcard = item_parser(Flashcard, ("term", "definition"))


def flashcard_extraction(summary_text: str, *, client: CompletionClient) -> ExtractionResult[Flashcard]:
    return run_extraction(
        "flashcards",
        client=client,
        system_prompt=FLASHCARDS_SYSTEM,
        notes=summary_text,
        parse_item=_parse_flashcard,
    )


def extract_flashcards(summary_text: str, *, client: CompletionClient) -> list[Flashcard]:
    return flashcard_extraction(summary_text, client=client).items


def toggle_known(flashcards: list[Flashcard], card_id: str) -> list[Flashcard]:
    """Return a copy of the deck with ``card_id`` flipped between known and unknown."""
    if not any(card.id == card_id for card in flashcards):
        raise KeyError(card_id)
    return [
        card.model_copy(update={"known": not card.known}) if card.id == card_id else card
        for card in flashcards
    ]
