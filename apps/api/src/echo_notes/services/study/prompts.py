from __future__ import annotations

FLASHCARD_COUNT = 5
QUIZ_QUESTION_COUNT = 3

FLASHCARDS_SYSTEM = f"""You are a study assistant. Create {FLASHCARD_COUNT} flashcards based on the provided notes.
Output exactly in this JSON format:
[
  {{ "term": "Concept", "definition": "Explanation" }}
]
Do not output any markdown code blocks, just raw JSON."""

QUIZ_SYSTEM = f"""You are a study assistant. Create {QUIZ_QUESTION_COUNT} multiple choice quiz questions based on the provided notes.
Output exactly in this JSON format:
[
  {{
    "question": "Question text?",
    "options": ["Option A", "Option B", "Option C", "Option D"],
    "correctAnswer": 0,
    "explanation": "Explanation for correct answer."
  }}
]
correctAnswer must be the integer index (0-3) of the correct option.
Do not output any markdown code blocks, just raw JSON."""
