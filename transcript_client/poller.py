from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

import httpx

from common.schemas import PENDING_STATUSES, JobStatusValue, StatusResponse, TranscriptionResult

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_S = 7.0


@dataclass
class PollOutcome:
    status: Optional[str]
    transcript: Optional[TranscriptionResult] = None
    summary: Optional[str] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.transcript is not None


def classify(resp: StatusResponse) -> Optional[PollOutcome]:
    """Map one status response to a terminal outcome, or None to keep polling."""
    if resp.status == JobStatusValue.succeeded.value and resp.transcript is not None:
        return PollOutcome(status=resp.status, transcript=resp.transcript, summary=resp.summary)
    if resp.status == JobStatusValue.failed.value:
        return PollOutcome(status=resp.status, error=resp.message or "Transcription failed.")
    if resp.status in PENDING_STATUSES:
        return None
    # anything else, including error bodies, ends the loop
    return PollOutcome(
        status=resp.status,
        error=resp.message or f"Unexpected status: {resp.status or 'Unknown'}",
    )


class StatusPoller:
    """Fixed-interval status loop.

    Checks once immediately, then once per ``interval`` until a terminal
    outcome. Checks are awaited one at a time, so a slow response delays
    the next tick instead of overlapping it. There is no attempt cap;
    ``max_duration`` adds an optional wall-clock ceiling.
    """

    def __init__(
        self,
        check: Callable[[str], Awaitable[StatusResponse]],
        interval: float = DEFAULT_INTERVAL_S,
        max_duration: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._check = check
        self.interval = interval
        self.max_duration = max_duration
        self._sleep = sleep
        self._clock = clock

    async def run(
        self,
        location_url: str,
        on_pending: Optional[Callable[[str], None]] = None,
    ) -> PollOutcome:
        started = self._clock()
        while True:
            try:
                resp = await self._check(location_url)
            except (httpx.HTTPError, ValueError) as exc:
                logger.error("Status poll failed: %s", exc)
                return PollOutcome(status=None, error=f"Error polling status: {exc}")

            outcome = classify(resp)
            if outcome is not None:
                logger.info("Polling finished with status %s", outcome.status)
                return outcome

            if on_pending:
                on_pending(resp.status)
            if self.max_duration is not None and self._clock() - started >= self.max_duration:
                return PollOutcome(
                    status=resp.status,
                    error=f"Gave up waiting after {self.max_duration:.0f}s (last status: {resp.status})",
                )
            await self._sleep(self.interval)
