import argparse

import pytest
from pydantic import ValidationError

from common.config import ClientSettings
from common.schemas import NBest, RecognizedPhrase, StatusResponse, TranscriptionJob, TranscriptionResult, WordDetail
from transcript_client.main import build_parser, parse_rename, progress_line, render_transcript, run
from transcript_client.poller import PollOutcome
from transcript_client.session import TranscriptSession

RESULT = TranscriptionResult(recognized_phrases=[
    RecognizedPhrase(speaker=1, offset_in_ticks=0, duration_in_ticks=10_000_000, n_best=[NBest(
        display="Hello world.",
        words=[
            WordDetail(word="hello", display="Hello", offset_in_ticks=0, duration_in_ticks=4_000_000),
            WordDetail(word="world", offset_in_ticks=5_000_000, duration_in_ticks=4_000_000),
        ],
    )]),
    RecognizedPhrase(offset_in_ticks=10_000_000, duration_in_ticks=10_000_000, n_best=[NBest(display="Bye.")]),
])


def test_render_marks_active_phrase_and_word():
    session = TranscriptSession()
    session.apply_outcome(PollOutcome(status="Succeeded", transcript=RESULT, summary="s"))
    session.playback.update(0.6)

    assert render_transcript(session).splitlines() == [
        "> [0.00s] Speaker 1:",
        "    Hello [world]",
        "  [1.00s] Unknown:",
        "    Bye.",
    ]


def test_parse_rename():
    assert parse_rename("2=Alice Smith") == (2, "Alice Smith")
    with pytest.raises(argparse.ArgumentTypeError):
        parse_rename("Alice")


def test_parser_defaults_come_from_settings():
    settings = ClientSettings(gateway_url="http://gw:9000", poll_interval_s=3.0, max_speakers=4)
    args = build_parser(settings).parse_args(["https://a/b.wav", "--rename", "1=Dana"])
    assert args.gateway_url == "http://gw:9000"
    assert args.interval == 3.0
    assert args.max_speakers == 4
    assert args.max_duration is None
    assert args.rename == [(1, "Dana")]


def test_max_speakers_setting_is_bounded():
    with pytest.raises(ValidationError):
        ClientSettings(max_speakers=20)
    with pytest.raises(ValidationError):
        ClientSettings(max_speakers=0)


def test_progress_line_reads_session_flags():
    session = TranscriptSession()
    session.begin()
    session.mark_pending()
    assert progress_line(session, "Running") == "Still transcribing (Running), summary follows..."
    session.fail("boom")
    assert progress_line(session, "Running") == "Status: Running"


class FakeGateway:
    def __init__(self, *answers):
        self.answers = list(answers)
        self.submitted = []

    async def submit(self, audio_url, locale, max_speakers):
        self.submitted.append((audio_url, locale, max_speakers))
        return TranscriptionJob(id="job-12345678-abc", status_location_url="https://azure/job-1")

    async def check_status(self, location_url):
        return self.answers.pop(0)


class TestRun:
    @staticmethod
    def args(*extra):
        return build_parser(ClientSettings()).parse_args(["https://a/b.wav", "--interval", "0", *extra])

    @pytest.mark.asyncio
    async def test_positions_highlight_active_phrase_and_word(self, capsys):
        gateway = FakeGateway(
            StatusResponse(status="Running"),
            StatusResponse(status="Succeeded", transcript=RESULT, summary="They said hello."),
        )
        code = await run(self.args("--position", "0.6", "--position", "1.5", "--rename", "1=Dana"), gateway)

        out = capsys.readouterr().out
        assert code == 0
        assert "Still transcribing (Running), summary follows..." in out
        assert "> [0.00s] Dana:\n    Hello [world]" in out
        assert "> [1.00s] Unknown:\n    Bye." in out
        assert "They said hello." in out

    @pytest.mark.asyncio
    async def test_without_positions_nothing_is_active(self, capsys):
        gateway = FakeGateway(StatusResponse(status="Succeeded", transcript=RESULT, summary="s"))
        assert await run(self.args(), gateway) == 0
        out = capsys.readouterr().out
        assert "  [0.00s] Speaker 1:\n    Hello world" in out
        assert ">" not in out

    @pytest.mark.asyncio
    async def test_failed_job(self, capsys):
        gateway = FakeGateway(StatusResponse(status="Failed", message="bad audio"))
        assert await run(self.args(), gateway) == 1
        assert "bad audio" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_export_dir(self, tmp_path, capsys):
        gateway = FakeGateway(StatusResponse(status="Succeeded", transcript=RESULT, summary="s"))
        assert await run(self.args("--export-dir", str(tmp_path)), gateway) == 0
        assert sorted(p.name for p in tmp_path.iterdir()) == ["summary-job-1234.txt", "transcript-job-1234.txt"]
