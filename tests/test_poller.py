import httpx
import pytest

from common.schemas import NBest, RecognizedPhrase, StatusResponse, TranscriptionResult
from transcript_client.api import GatewayClient, SubmissionError
from transcript_client.poller import StatusPoller, classify

RESULT = TranscriptionResult(recognized_phrases=[RecognizedPhrase(n_best=[NBest(display="Hi.")])])


class ScriptedCheck:
    """Answers status checks from a script; exceptions in the script are raised."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.calls = 0

    async def __call__(self, location_url):
        answer = self.answers[self.calls]
        self.calls += 1
        if isinstance(answer, Exception):
            raise answer
        return answer


class Sleeps:
    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


def poller(check, sleeps, **kwargs):
    return StatusPoller(check, interval=7.0, sleep=sleeps, **kwargs)


class TestStatusPoller:
    @pytest.mark.asyncio
    async def test_polls_until_succeeded(self):
        check = ScriptedCheck(
            StatusResponse(status="NotStarted"),
            StatusResponse(status="Running"),
            StatusResponse(status="Succeeded", transcript=RESULT, summary="ok"),
        )
        sleeps = Sleeps()
        pending = []
        outcome = await poller(check, sleeps).run("loc", on_pending=pending.append)

        assert outcome.succeeded
        assert outcome.summary == "ok"
        assert check.calls == 3
        assert sleeps.calls == [7.0, 7.0]
        assert pending == ["NotStarted", "Running"]

    @pytest.mark.asyncio
    async def test_failed_stops_immediately(self):
        check = ScriptedCheck(StatusResponse(status="Failed", message="bad audio"), StatusResponse(status="Running"))
        sleeps = Sleeps()
        outcome = await poller(check, sleeps).run("loc")
        assert outcome.error == "bad audio"
        assert check.calls == 1
        assert sleeps.calls == []

    @pytest.mark.asyncio
    async def test_unrecognized_status_is_terminal(self):
        check = ScriptedCheck(StatusResponse(status="Running"), StatusResponse(status="Paused"))
        outcome = await poller(check, Sleeps()).run("loc")
        assert outcome.error == "Unexpected status: Paused"
        assert check.calls == 2

    @pytest.mark.asyncio
    async def test_transport_failure_is_not_retried(self):
        check = ScriptedCheck(StatusResponse(status="Running"), httpx.ConnectError("refused"), StatusResponse(status="Running"))
        outcome = await poller(check, Sleeps()).run("loc")
        assert outcome.error.startswith("Error polling status")
        assert check.calls == 2

    @pytest.mark.asyncio
    async def test_optional_duration_ceiling(self):
        ticks = iter([0.0, 5.0, 10.0, 15.0])
        check = ScriptedCheck(*[StatusResponse(status="Running")] * 5)
        outcome = await poller(check, Sleeps(), max_duration=10.0, clock=lambda: next(ticks)).run("loc")
        assert outcome.error.startswith("Gave up waiting")
        assert check.calls == 2


class TestClassify:
    def test_succeeded_without_transcript_uses_message(self):
        outcome = classify(StatusResponse(status="Succeeded", message="Result files link is missing."))
        assert outcome.error == "Result files link is missing."

    def test_error_body_without_status(self):
        outcome = classify(StatusResponse())
        assert outcome.error == "Unexpected status: Unknown"

    def test_pending(self):
        assert classify(StatusResponse(status="Running")) is None
        assert classify(StatusResponse(status="NotStarted")) is None


class TestGatewayClient:
    @pytest.mark.asyncio
    async def test_submit(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/transcribe"
            return httpx.Response(200, json={
                "message": "started",
                "transcriptionId": "job-1",
                "transcriptionLocationUrl": "https://azure/job-1",
            })

        client = GatewayClient("http://gw", transport=httpx.MockTransport(handler))
        job = await client.submit("https://a/b.wav", "en-US", 5)
        assert job.id == "job-1"
        assert job.status_location_url == "https://azure/job-1"

    @pytest.mark.asyncio
    async def test_submit_error_message(self):
        handler = lambda request: httpx.Response(400, json={"message": "Missing or invalid publicAudioUrl"})
        client = GatewayClient("http://gw", transport=httpx.MockTransport(handler))
        with pytest.raises(SubmissionError, match="publicAudioUrl"):
            await client.submit("https://a/b.wav", "en-US", 5)

    @pytest.mark.asyncio
    async def test_check_status_parses_error_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["locationUrl"] == "https://azure/job-1"
            return httpx.Response(404, json={"status": "Succeeded", "message": "not found"})

        client = GatewayClient("http://gw", transport=httpx.MockTransport(handler))
        resp = await client.check_status("https://azure/job-1")
        assert resp.status == "Succeeded"
        assert resp.transcript is None
        assert classify(resp).error == "not found"
