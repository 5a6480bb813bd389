from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

TICKS_PER_SECOND = 10_000_000
WORD_END_SLACK = 1.1


def ticks_to_seconds(ticks: float) -> float:
    return ticks / TICKS_PER_SECOND


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


# --- Azure batch transcription: job definition ---

class PunctuationMode(str, Enum):
    none = "None"
    dictated = "Dictated"
    automatic = "Automatic"
    dictated_and_automatic = "DictatedAndAutomatic"


class SpeakerBounds(CamelModel):
    min_count: int
    max_count: int


class DiarizationSpeakers(CamelModel):
    speakers: SpeakerBounds


class JobProperties(CamelModel):
    diarization_enabled: bool
    diarization: Optional[DiarizationSpeakers] = None
    punctuation_mode: str
    word_level_timestamps_enabled: bool = True
    profanity_filter_mode: str = "Masked"


class JobDefinition(CamelModel):
    content_urls: list[str]
    locale: str
    display_name: str
    properties: JobProperties


# --- Azure batch transcription: status and result files ---

class JobStatusValue(str, Enum):
    not_started = "NotStarted"
    running = "Running"
    succeeded = "Succeeded"
    failed = "Failed"


PENDING_STATUSES = frozenset({JobStatusValue.not_started.value, JobStatusValue.running.value})


class JobCreated(CamelModel):
    self_url: str = Field(alias="self")


class JobError(CamelModel):
    code: Optional[str] = None
    message: Optional[str] = None


class JobStatusProperties(CamelModel):
    error: Optional[JobError] = None


class JobLinks(CamelModel):
    files: Optional[str] = None


class JobStatus(CamelModel):
    self_url: Optional[str] = Field(default=None, alias="self")
    status: str
    links: Optional[JobLinks] = None
    properties: Optional[JobStatusProperties] = None

    @property
    def files_url(self) -> Optional[str]:
        return self.links.files if self.links else None

    @property
    def error_message(self) -> Optional[str]:
        if self.properties and self.properties.error:
            return self.properties.error.message
        return None


class ResultFileLinks(CamelModel):
    content_url: Optional[str] = None


class ResultFile(CamelModel):
    name: Optional[str] = None
    kind: str
    links: ResultFileLinks = ResultFileLinks()


class ResultFileListing(CamelModel):
    values: list[ResultFile] = []


# --- Transcription result content ---

class WordDetail(CamelModel):
    model_config = ConfigDict(frozen=True)

    word: str = ""
    display: Optional[str] = None
    offset_in_ticks: int = 0
    duration_in_ticks: int = 0
    confidence: Optional[float] = None

    @property
    def text(self) -> str:
        return self.display or self.word

    @property
    def start_seconds(self) -> float:
        return ticks_to_seconds(self.offset_in_ticks)

    @property
    def end_seconds(self) -> float:
        # word timings jitter slightly, so the end is stretched
        return ticks_to_seconds(self.offset_in_ticks + self.duration_in_ticks * WORD_END_SLACK)


class NBest(CamelModel):
    model_config = ConfigDict(frozen=True)

    display: str = ""
    lexical: str = ""
    itn: Optional[str] = None
    masked_itn: Optional[str] = Field(default=None, alias="maskedITN")
    confidence: float = 0.0
    words: Optional[list[WordDetail]] = None


class RecognizedPhrase(CamelModel):
    model_config = ConfigDict(frozen=True)

    recognition_status: str = "Success"
    channel: Optional[int] = None
    speaker: Optional[int] = None
    offset_in_ticks: int = 0
    duration_in_ticks: int = 0
    n_best: list[NBest] = []

    @property
    def best(self) -> Optional[NBest]:
        return self.n_best[0] if self.n_best else None

    @property
    def display(self) -> str:
        return self.best.display if self.best else ""

    @property
    def words(self) -> list[WordDetail]:
        if self.best and self.best.words:
            return self.best.words
        return []

    @property
    def start_seconds(self) -> float:
        return ticks_to_seconds(self.offset_in_ticks)

    @property
    def end_seconds(self) -> float:
        return ticks_to_seconds(self.offset_in_ticks + self.duration_in_ticks)


class TranscriptionResult(CamelModel):
    model_config = ConfigDict(frozen=True)

    source: str = ""
    timestamp: str = ""
    duration: str = ""
    recognized_phrases: list[RecognizedPhrase] = []

    def speaker_ids(self) -> list[int]:
        """Distinct diarization ids in first-seen order."""
        seen: list[int] = []
        for phrase in self.recognized_phrases:
            if phrase.speaker is not None and phrase.speaker not in seen:
                seen.append(phrase.speaker)
        return seen


# --- Local HTTP surface: client <-> gateway ---

class TranscribeRequest(CamelModel):
    public_audio_url: Optional[str] = None
    locale: str = "en-IN"
    punctuation_mode: str = PunctuationMode.dictated_and_automatic.value
    diarization_enabled: bool = True
    min_speakers: int = 1
    max_speakers: int = 20


class TranscribeResponse(CamelModel):
    message: str
    transcription_id: str
    transcription_location_url: str


class StatusResponse(CamelModel):
    status: Optional[str] = None
    transcript: Optional[TranscriptionResult] = None
    summary: Optional[str] = None
    message: Optional[str] = None


class SummarizeRequest(CamelModel):
    text_to_summarize: Optional[str] = None


class TranscriptionJob(CamelModel):
    id: str
    status_location_url: str
