"""Command-line front end: submit an audio URL, wait, show and export the result."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import httpx

from common.config import ClientSettings
from transcript_client.api import GatewayClient, SubmissionError
from transcript_client.export import NothingToExport, export_summary, export_transcript
from transcript_client.poller import StatusPoller
from transcript_client.session import TranscriptSession

logger = logging.getLogger(__name__)


def render_transcript(session: TranscriptSession) -> str:
    lines = []
    active = session.playback.active_phrase
    for p_index, phrase in enumerate(session.result.recognized_phrases):
        marker = ">" if p_index == active else " "
        lines.append(f"{marker} [{phrase.start_seconds:.2f}s] {session.label(phrase)}:")
        if phrase.words:
            words = []
            for w_index, word in enumerate(phrase.words):
                if p_index == active and w_index == session.playback.active_word:
                    words.append(f"[{word.text}]")
                else:
                    words.append(word.text)
            lines.append("    " + " ".join(words))
        else:
            lines.append("    " + phrase.display)
    return "\n".join(lines)


def parse_rename(value: str) -> tuple[int, str]:
    speaker_id, sep, name = value.partition("=")
    if not sep or not speaker_id.strip().isdigit():
        raise argparse.ArgumentTypeError(f"expected ID=NAME, got {value!r}")
    return int(speaker_id), name


def build_parser(settings: ClientSettings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="transcribe-client", description=__doc__)
    parser.add_argument("audio_url", help="publicly reachable audio URL")
    parser.add_argument("--gateway-url", default=settings.gateway_url)
    parser.add_argument("--locale", default=settings.locale)
    parser.add_argument("--max-speakers", type=int, default=settings.max_speakers, choices=range(1, 11),
                        metavar="1-10")
    parser.add_argument("--interval", type=float, default=settings.poll_interval_s,
                        help="seconds between status checks")
    parser.add_argument("--max-duration", type=float, default=settings.poll_max_duration_s,
                        help="stop polling after this many seconds (default: never)")
    parser.add_argument("--rename", type=parse_rename, action="append", default=[], metavar="ID=NAME",
                        help="display name for a diarized speaker id")
    parser.add_argument("--position", type=float, action="append", default=[], metavar="SECONDS",
                        help="show the phrase and word playing at this audio position (repeatable)")
    parser.add_argument("--export-dir", type=Path, help="write transcript and summary text files here")
    return parser


def progress_line(session: TranscriptSession, status: str) -> str:
    if session.loading and session.summarizing:
        return f"Still transcribing ({status}), summary follows..."
    return f"Status: {status}"


async def run(args: argparse.Namespace, gateway: GatewayClient | None = None) -> int:
    logger.info("Submitting %s to %s", args.audio_url, args.gateway_url)
    gateway = gateway or GatewayClient(args.gateway_url)
    session = TranscriptSession()
    session.begin()

    try:
        job = await gateway.submit(args.audio_url, args.locale, args.max_speakers)
    except (SubmissionError, httpx.HTTPError, ValueError) as exc:
        session.fail(str(exc) if isinstance(exc, SubmissionError) else f"Error submitting URL: {exc}")
        print(f"Error: {session.error}", file=sys.stderr)
        return 1

    session.job_started(job)
    print(f"Job ID: {job.id} (transcription in progress, this can take some time)")

    poller = StatusPoller(gateway.check_status, interval=args.interval, max_duration=args.max_duration)

    def on_pending(status: str) -> None:
        session.mark_pending()
        print(progress_line(session, status))

    outcome = await poller.run(job.status_location_url, on_pending=on_pending)
    session.apply_outcome(outcome)
    if session.error:
        print(f"Error: {session.error}", file=sys.stderr)
        return 1

    for speaker_id, name in args.rename:
        session.rename_speaker(speaker_id, name)

    if args.position:
        for position in args.position:
            session.playback.update(position)
            print(f"\n@ {position:.2f}s")
            print(render_transcript(session))
    else:
        print(render_transcript(session))
    print("\nSummary:\n" + session.summary)

    if args.export_dir:
        for export in (export_transcript, export_summary):
            try:
                print(f"Wrote {export(session, args.export_dir)}")
            except NothingToExport as exc:
                print(str(exc), file=sys.stderr)
    return 0


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    settings = ClientSettings()
    args = build_parser(settings).parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
