from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol, Sequence

from common.schemas import RecognizedPhrase

logger = logging.getLogger(__name__)

NO_INDEX = -1


class AudioPlayer(Protocol):
    """Whatever plays the audio; decoding is its business, not ours."""

    def seek(self, seconds: float) -> None: ...

    def play(self) -> None: ...


def locate(phrases: Sequence[RecognizedPhrase], current_time: float) -> tuple[int, int]:
    """Return (phrase index, word index) for a playback position, -1 when none."""
    for p_index, phrase in enumerate(phrases):
        if phrase.start_seconds <= current_time <= phrase.end_seconds:
            for w_index, word in enumerate(phrase.words):
                if word.start_seconds <= current_time < word.end_seconds:
                    return p_index, w_index
            return p_index, NO_INDEX
    return NO_INDEX, NO_INDEX


def seek(player: AudioPlayer, seconds: float) -> None:
    player.seek(seconds)
    try:
        player.play()
    except Exception as exc:
        logger.warning("Audio play interrupted or failed: %s", exc)


class PlaybackSync:
    """Tracks which phrase and word match the audio position.

    ``on_phrase_change`` is called only when the active phrase moves to a
    different phrase, so callers can scroll it into view without redoing
    layout on every time update.
    """

    def __init__(
        self,
        phrases: Sequence[RecognizedPhrase] = (),
        on_phrase_change: Optional[Callable[[int], None]] = None,
    ) -> None:
        self.on_phrase_change = on_phrase_change
        self.load(phrases)

    def load(self, phrases: Sequence[RecognizedPhrase]) -> None:
        self.phrases = list(phrases)
        self.active_phrase: Optional[int] = None
        self.active_word: Optional[int] = None

    def update(self, current_time: float) -> bool:
        if not self.phrases:
            return False
        p_index, w_index = locate(self.phrases, current_time)

        changed = p_index != self.active_phrase
        if changed:
            self.active_phrase = p_index
            if p_index != NO_INDEX and self.on_phrase_change:
                self.on_phrase_change(p_index)
        self.active_word = w_index
        return changed

    def seek_phrase(self, player: AudioPlayer, p_index: int) -> None:
        seek(player, self.phrases[p_index].start_seconds)

    def seek_word(self, player: AudioPlayer, p_index: int, w_index: int) -> None:
        seek(player, self.phrases[p_index].words[w_index].start_seconds)
