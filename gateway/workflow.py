from __future__ import annotations

import logging

from common.schemas import JobStatusValue, StatusResponse
from speech_service.batch_client import BatchTranscriptionClient
from summarizer_service.gemini_client import GeminiSummarizer
from summarizer_service.prompts import flatten_transcript

logger = logging.getLogger(__name__)


async def check_status(
    speech: BatchTranscriptionClient,
    summarizer: GeminiSummarizer,
    location_url: str,
) -> StatusResponse:
    """One poll of a job; on success, also fetch the transcript and summarize it.

    Speech failures propagate as ``SpeechServiceError``. Summarization
    failures never do: they come back as a diagnostic summary string.
    """
    job = await speech.get_status(location_url)
    logger.info("Job %s status: %s", location_url, job.status)

    if job.status == JobStatusValue.succeeded.value:
        result = await speech.fetch_result(job)
        summary = await summarizer.summarize(flatten_transcript(result))
        return StatusResponse(status=job.status, transcript=result, summary=summary)

    if job.status == JobStatusValue.failed.value:
        return StatusResponse(status=job.status, message=job.error_message or "Transcription job failed.")

    return StatusResponse(status=job.status)
