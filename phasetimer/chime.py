from __future__ import annotations

from dataclasses import dataclass
import logging
import platform
import sys
import time
from typing import Callable, TextIO

from .timer import Phase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tone:
    frequency: int  # Hz
    duration: float  # seconds
    offset: float  # seconds from the start of the pattern


_STEPS = ((0.3, 0.0), (0.3, 0.3), (0.5, 0.6))


def tone_pattern(ended: Phase) -> tuple[Tone, ...]:
    """Falling notes when work ends, rising notes when a break ends."""
    if Phase(ended) is Phase.WORK:
        frequencies = (880, 660, 440)
    else:
        frequencies = (440, 660, 880)
    return tuple(
        Tone(frequency=freq, duration=duration, offset=offset)
        for freq, (duration, offset) in zip(frequencies, _STEPS)
    )


class Chime:
    def __init__(
        self,
        stream: TextIO | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.stream = stream or sys.stdout
        self.sleep = sleep

    def play(self, ended: Phase) -> None:
        tones = tone_pattern(ended)
        try:
            if platform.system() == "Windows":
                self._play_winsound(tones)
                return
        except Exception:
            logger.warning("tone playback failed, using terminal bell", exc_info=True)
        self._play_bell(tones)

    def _play_winsound(self, tones: tuple[Tone, ...]) -> None:
        import winsound

        # Beep blocks for the tone's length, so only the gap is slept.
        elapsed = 0.0
        for tone in tones:
            if tone.offset > elapsed:
                self.sleep(tone.offset - elapsed)
            winsound.Beep(tone.frequency, int(tone.duration * 1000))
            elapsed = max(tone.offset, elapsed) + tone.duration

    def _play_bell(self, tones: tuple[Tone, ...]) -> None:
        try:
            previous = 0.0
            for tone in tones:
                if tone.offset > previous:
                    self.sleep(tone.offset - previous)
                    previous = tone.offset
                self.stream.write("\a")
                self.stream.flush()
        except Exception:
            logger.warning("terminal bell failed", exc_info=True)
