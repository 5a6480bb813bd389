from __future__ import annotations

from typing import Optional


class SpeechServiceError(Exception):
    """Failure talking to the transcription service, mapped to an HTTP status."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None, status: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        # job status, when the failure happened after the job was observed
        self.status = status


class NotConfiguredError(SpeechServiceError):
    pass


class UpstreamError(SpeechServiceError):
    def __init__(self, step: str, status_code: int, body: str, status: Optional[str] = None) -> None:
        super().__init__(f"{step}: {body}", status_code=status_code, status=status)
        self.body = body


class MissingResultError(SpeechServiceError):
    pass
