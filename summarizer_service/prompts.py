from __future__ import annotations

from common.schemas import TranscriptionResult

SUMMARY_PROMPT = """\
Provide a concise and neutral summary of the following transcribed audio content. \
Focus on the main topics, key decisions or outcomes if any, and distinct speakers \
or viewpoints if discernible.

Transcribed Text:
---
{text}
---

Concise Summary:"""

DEBUG_PROMPT = """\
Provide a concise summary of the following text:

"{text}"

Summary:"""


def flatten_transcript(result: TranscriptionResult | None) -> str:
    """Join the canonical display text of every phrase, one per line."""
    if result is None:
        return ""
    return "\n".join(p.display for p in result.recognized_phrases if p.best is not None)


def build_summary_prompt(text: str, template: str = SUMMARY_PROMPT) -> str:
    return template.format(text=text)
