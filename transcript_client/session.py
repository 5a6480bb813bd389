from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from common.schemas import RecognizedPhrase, TranscriptionJob, TranscriptionResult
from transcript_client.playback import PlaybackSync
from transcript_client.poller import PollOutcome

logger = logging.getLogger(__name__)

MISSING_SUMMARY = "Summary could not be generated or was not provided."
UNKNOWN_SPEAKER = "Unknown"


def default_speaker_name(speaker_id: int) -> str:
    return f"Speaker {speaker_id}"


def speaker_label(phrase: RecognizedPhrase, names: dict[int, str]) -> str:
    if phrase.speaker is None:
        return UNKNOWN_SPEAKER
    return names.get(phrase.speaker) or default_speaker_name(phrase.speaker)


@dataclass
class TranscriptSession:
    """State of one submission, from job handle to rendered transcript."""

    job: Optional[TranscriptionJob] = None
    result: Optional[TranscriptionResult] = None
    summary: Optional[str] = None
    error: Optional[str] = None
    loading: bool = False
    summarizing: bool = False
    speaker_names: dict[int, str] = field(default_factory=dict)
    playback: PlaybackSync = field(default_factory=PlaybackSync)

    def begin(self) -> None:
        """Drop everything from the previous submission."""
        self.job = None
        self.result = None
        self.summary = None
        self.error = None
        self.loading = True
        self.summarizing = False
        self.speaker_names = {}
        self.playback.load(())

    def job_started(self, job: TranscriptionJob) -> None:
        self.job = job
        self.summarizing = True
        logger.info("Tracking job %s", job.id)

    def mark_pending(self) -> None:
        self.loading = True
        self.summarizing = True

    def fail(self, message: str) -> None:
        self.error = message
        self.loading = False
        self.summarizing = False

    def apply_outcome(self, outcome: PollOutcome) -> None:
        if not outcome.succeeded:
            self.fail(outcome.error or "Transcription failed.")
            return

        self.result = outcome.transcript
        self.summary = outcome.summary or MISSING_SUMMARY
        self.error = None
        self.loading = False
        self.summarizing = False
        self.speaker_names = {sid: default_speaker_name(sid) for sid in self.result.speaker_ids()}
        self.playback.load(self.result.recognized_phrases)

    def rename_speaker(self, speaker_id: int, name: str) -> None:
        self.speaker_names[speaker_id] = name

    def label(self, phrase: RecognizedPhrase) -> str:
        return speaker_label(phrase, self.speaker_names)
