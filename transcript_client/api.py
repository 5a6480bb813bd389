from __future__ import annotations

import logging
from typing import Optional

import httpx

from common.schemas import StatusResponse, TranscriptionJob

logger = logging.getLogger(__name__)


class SubmissionError(RuntimeError):
    pass


class GatewayClient:
    """HTTP client for the local gateway routes."""

    def __init__(self, base_url: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, transport=self._transport, timeout=None)

    async def submit(self, audio_url: str, locale: str, max_speakers: int) -> TranscriptionJob:
        if not audio_url:
            raise SubmissionError("Please enter a public audio URL.")

        payload = {"publicAudioUrl": audio_url, "locale": locale, "maxSpeakers": max_speakers}
        async with self._client() as client:
            resp = await client.post("/api/transcribe", json=payload)
        data = resp.json()

        job_id = data.get("transcriptionId")
        location = data.get("transcriptionLocationUrl")
        if resp.is_error or not job_id or not location:
            raise SubmissionError(data.get("message") or "Failed to start transcription job.")
        return TranscriptionJob(id=job_id, status_location_url=location)

    async def check_status(self, location_url: str) -> StatusResponse:
        # error bodies are parsed too; the poller decides what they mean
        async with self._client() as client:
            resp = await client.get("/api/transcription-status", params={"locationUrl": location_url})
        if resp.is_error:
            logger.warning("Status check answered %d", resp.status_code)
        return StatusResponse.model_validate(resp.json())
