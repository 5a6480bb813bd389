from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

import httpx
from pydantic import ValidationError

from common.config import SpeechSettings
from common.schemas import (
    DiarizationSpeakers,
    JobCreated,
    JobDefinition,
    JobProperties,
    JobStatus,
    JobStatusValue,
    ResultFile,
    ResultFileListing,
    SpeakerBounds,
    TranscribeRequest,
    TranscriptionJob,
    TranscriptionResult,
)
from speech_service.errors import MissingResultError, NotConfiguredError, UpstreamError

logger = logging.getLogger(__name__)

KEY_HEADER = "Ocp-Apim-Subscription-Key"
TRANSCRIPTION_KIND = "Transcription"


def build_job_definition(req: TranscribeRequest, now: Optional[datetime] = None) -> JobDefinition:
    """Translate a submit request into the batch job payload.

    The diarization block is only present when diarization is enabled.
    """
    now = now or datetime.now(timezone.utc)
    diarization = None
    if req.diarization_enabled:
        diarization = DiarizationSpeakers(
            speakers=SpeakerBounds(min_count=req.min_speakers, max_count=req.max_speakers)
        )
    return JobDefinition(
        content_urls=[req.public_audio_url],
        locale=req.locale,
        display_name=f"Transcription - {now.isoformat()}",
        properties=JobProperties(
            diarization_enabled=req.diarization_enabled,
            diarization=diarization,
            punctuation_mode=req.punctuation_mode,
        ),
    )


def job_id_from_url(self_url: str) -> str:
    return self_url.split("/")[-1]


def find_transcription_file(listing: ResultFileListing) -> Optional[ResultFile]:
    # the service emits one Transcription file per audio URL; we submit one URL
    for entry in listing.values:
        if entry.kind == TRANSCRIPTION_KIND:
            return entry
    return None


class BatchTranscriptionClient:
    """Azure Speech batch transcription REST client.

    Each call opens its own short-lived ``httpx.AsyncClient``; pass a
    ``transport`` to route requests elsewhere (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        settings: SpeechSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings
        self._transport = transport

    @property
    def configured(self) -> bool:
        return self.settings.is_configured

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self.settings.request_timeout_s)

    def _auth_headers(self) -> dict[str, str]:
        if not self.configured:
            raise NotConfiguredError("Server configuration error for Speech service.")
        return {KEY_HEADER: self.settings.key}

    async def create_job(self, req: TranscribeRequest) -> TranscriptionJob:
        headers = self._auth_headers()
        definition = build_job_definition(req)

        async with self._client() as client:
            resp = await client.post(
                self.settings.transcriptions_url,
                headers=headers,
                json=definition.to_wire(),
            )
        if resp.is_error:
            logger.error("Transcription creation failed: %d %s", resp.status_code, resp.text)
            raise UpstreamError("Azure transcription creation failed", resp.status_code, resp.text)

        created = JobCreated.model_validate(resp.json())
        job = TranscriptionJob(id=job_id_from_url(created.self_url), status_location_url=created.self_url)
        logger.info("Batch transcription job created: %s (%s)", job.id, job.status_location_url)
        return job

    async def get_status(self, location_url: str) -> JobStatus:
        headers = self._auth_headers()
        async with self._client() as client:
            resp = await client.get(location_url, headers=headers)
        if resp.is_error:
            logger.error("Status check failed for %s: %d %s", location_url, resp.status_code, resp.text)
            raise UpstreamError("Failed to get job status from Azure", resp.status_code, resp.text)
        return JobStatus.model_validate(resp.json())

    async def fetch_result(self, status: JobStatus) -> TranscriptionResult:
        """Resolve the file listing of a succeeded job and download its transcript."""
        succeeded = JobStatusValue.succeeded.value
        if not status.files_url:
            raise MissingResultError(
                "Result files link is missing in Azure response.", status_code=500, status=succeeded
            )

        headers = self._auth_headers()
        async with self._client() as client:
            resp = await client.get(status.files_url, headers=headers)
            if resp.is_error:
                logger.error("File listing failed: %d %s", resp.status_code, resp.text)
                raise UpstreamError(
                    "Failed to get transcription files list from Azure",
                    resp.status_code,
                    resp.text,
                    status=succeeded,
                )
            listing = ResultFileListing.model_validate(resp.json())

            entry = find_transcription_file(listing)
            if entry is None or not entry.links.content_url:
                raise MissingResultError(
                    "Transcription result file link not found in Azure response.",
                    status_code=404,
                    status=succeeded,
                )

            # content URLs are pre-signed, the key header must not be sent
            resp = await client.get(entry.links.content_url)
            if resp.is_error:
                logger.error("Transcript download failed: %d %s", resp.status_code, resp.text)
                raise UpstreamError(
                    "Failed to download transcript content from Azure",
                    resp.status_code,
                    resp.text,
                    status=succeeded,
                )

        try:
            result = TranscriptionResult.model_validate(resp.json())
        except ValidationError as exc:
            raise MissingResultError(
                f"Transcript content has an unexpected shape: {exc.error_count()} errors",
                status=succeeded,
            ) from exc
        logger.info("Fetched transcript with %d phrases", len(result.recognized_phrases))
        return result
