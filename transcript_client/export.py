from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from common.schemas import TranscriptionResult
from transcript_client.session import TranscriptSession, speaker_label

HEADER = "Timestamp\tSpeaker\tText"
FIELD_BREAKS = str.maketrans({"\t": " ", "\r": " ", "\n": " "})


class NothingToExport(Exception):
    """Raised instead of writing an empty file; the message is meant for the user."""


@dataclass
class TranscriptRow:
    start_seconds: float
    speaker: str
    text: str


def _field(value: str) -> str:
    # one row per phrase: separators inside a field would split it
    return value.translate(FIELD_BREAKS)


def transcript_text(result: TranscriptionResult, speaker_names: dict[int, str]) -> str:
    lines = [HEADER]
    for phrase in result.recognized_phrases:
        label = _field(speaker_label(phrase, speaker_names))
        lines.append(f"{phrase.start_seconds:.2f}s\t{label}\t{_field(phrase.display)}")
    return "\n".join(lines) + "\n"


def parse_transcript_text(text: str) -> list[TranscriptRow]:
    rows = []
    for line in text.splitlines():
        if not line or line == HEADER:
            continue
        stamp, speaker, body = line.split("\t", 2)
        rows.append(TranscriptRow(start_seconds=float(stamp.rstrip("s")), speaker=speaker, text=body))
    return rows


def export_filename(kind: str, job_id: Optional[str]) -> str:
    suffix = job_id[:8] if job_id else "file"
    return f"{kind}-{suffix}.txt"


def write_export(content: Optional[str], kind: str, job_id: Optional[str], out_dir: Path) -> Path:
    if not content:
        raise NothingToExport(f"No {kind} data to download.")
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / export_filename(kind, job_id)
    path.write_text(content, encoding="utf-8")
    return path


def export_transcript(session: TranscriptSession, out_dir: Path) -> Path:
    if session.result is None:
        raise NothingToExport("No transcript data to download.")
    content = transcript_text(session.result, session.speaker_names)
    return write_export(content, "transcript", session.job.id if session.job else None, out_dir)


def export_summary(session: TranscriptSession, out_dir: Path) -> Path:
    return write_export(session.summary, "summary", session.job.id if session.job else None, out_dir)
