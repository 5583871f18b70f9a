from __future__ import annotations

NO_TRANSCRIPT_SUMMARY = "No transcript available to summarize."

EMPTY_SUMMARY_MARKER = "(Empty - this is the first chunk)"

ROLLING_SUMMARY_SYSTEM = """You are an expert academic note-taker. You are processing a lecture transcript in chunks to build final study notes.

You will be given the CURRENT ROLLING SUMMARY and the NEXT TRANSCRIPT CHUNK.

Rules:
- Update and expand the rolling summary so it incorporates the new chunk.
- Keep the notes organized into topics; keep every topic and diagram established so far.
- Use Markdown, with LaTeX for any math.
- When the lecturer explains a process, relationship, architecture or flow, include a Mermaid diagram for it (```mermaid ... ```).
- If the current rolling summary is empty, summarize the first chunk.
- No conversational filler such as "Here is the summary". Your entire response is the new rolling summary.
"""

ROLLING_SUMMARY_USER_TEMPLATE = """CURRENT ROLLING SUMMARY:
{running_summary}

NEXT TRANSCRIPT CHUNK:
{chunk}"""


def build_rolling_summary_prompt(running_summary: str, chunk: str) -> str:
    return ROLLING_SUMMARY_USER_TEMPLATE.format(
        running_summary=running_summary or EMPTY_SUMMARY_MARKER,
        chunk=chunk,
    )
