from echo_notes.services.study.decode import DecodeResult, MalformedResponse, decode_json_array
from echo_notes.services.study.extraction import ExtractionResult
from echo_notes.services.study.flashcards import extract_flashcards, flashcard_extraction, toggle_known
from echo_notes.services.study.quiz import extract_quiz, quiz_extraction

__all__ = [
    "DecodeResult",
    "ExtractionResult",
    "MalformedResponse",
    "decode_json_array",
    "extract_flashcards",
    "extract_quiz",
    "flashcard_extraction",
    "quiz_extraction",
    "toggle_known",
]
