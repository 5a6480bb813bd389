from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from common.config import GatewaySettings, SpeechSettings, SummarizerSettings
from common.schemas import StatusResponse, SummarizeRequest, TranscribeRequest, TranscribeResponse
from gateway.workflow import check_status
from speech_service.batch_client import BatchTranscriptionClient
from speech_service.errors import SpeechServiceError
from summarizer_service.gemini_client import GeminiSummarizer, is_diagnostic
from summarizer_service.prompts import DEBUG_PROMPT

logger = logging.getLogger(__name__)

settings = GatewaySettings()
speech_client = BatchTranscriptionClient(SpeechSettings())
summarizer = GeminiSummarizer.from_settings(SummarizerSettings())
app = FastAPI(title="Transcription Gateway")


def _message(status_code: int, message: str, status: Optional[str] = None) -> JSONResponse:
    content = {"message": message}
    if status:
        content["status"] = status
    return JSONResponse(content, status_code=status_code)


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
    return _message(400, f"Missing or invalid request fields: {fields}")


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "speech_configured": speech_client.configured,
        "summarizer_configured": summarizer.configured,
    }


@app.post("/api/transcribe")
async def transcribe(req: TranscribeRequest):
    if not req.public_audio_url or not req.public_audio_url.strip():
        return _message(400, "Missing or invalid publicAudioUrl in request body.")
    if not speech_client.configured:
        logger.error("Azure Speech credentials not set")
        return _message(500, "Server configuration error for Speech service.")

    try:
        job = await speech_client.create_job(req)
    except SpeechServiceError as exc:
        return _message(exc.status_code, exc.message)
    except Exception as exc:
        logger.exception("Error in /api/transcribe")
        return _message(500, f"Internal server error: {exc}")

    return TranscribeResponse(
        message="Transcription job successfully started.",
        transcription_id=job.id,
        transcription_location_url=job.status_location_url,
    ).to_wire()


@app.get("/api/transcription-status")
async def transcription_status(location_url: Optional[str] = Query(None, alias="locationUrl")):
    if not location_url:
        return _message(400, "Missing or invalid 'locationUrl' query parameter.")
    if not speech_client.configured:
        logger.error("Azure Speech key is not available")
        return _message(500, "Server configuration error: Azure Speech key missing.")

    try:
        result: StatusResponse = await check_status(speech_client, summarizer, location_url)
    except SpeechServiceError as exc:
        return _message(exc.status_code, exc.message, status=exc.status)
    except Exception as exc:
        logger.exception("Error in /api/transcription-status")
        return _message(500, f"Internal server error in status check: {exc}")

    return result.to_wire()


@app.post("/api/debug-summarize")
async def debug_summarize(req: SummarizeRequest):
    if not summarizer.configured:
        return JSONResponse({"error": "Gemini service not configured on the server."}, status_code=500)
    text = req.text_to_summarize
    if not text or not text.strip():
        return JSONResponse({"error": "Missing or empty textToSummarize in request body."}, status_code=400)

    summary = await summarizer.summarize(text, template=DEBUG_PROMPT)
    if is_diagnostic(summary):
        return JSONResponse({"error": summary}, status_code=500)
    return {"summary": summary}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
