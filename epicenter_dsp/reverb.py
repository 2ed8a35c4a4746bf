"""
Comb Reverb - Schroeder-style parallel feedback delay lines.

Adds a short reverberant tail to the voice/mid band. Four comb lines with
mutually prime-ish delay times run in parallel; their delayed outputs are
averaged and mixed with the dry signal.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from .utils import ms_to_samples


COMB_DELAYS_MS = (29.7, 37.1, 41.1, 43.7)
FEEDBACK_SCALE = 0.7
DRY_REDUCTION = 0.5


@dataclass
class ReverbConfig:
    """Comb reverb configuration."""
    intensity: float = 30.0                      # 0-100
    delays_ms: Sequence[float] = COMB_DELAYS_MS

    @property
    def mix(self) -> float:
        return self.intensity / 100.0

    @property
    def feedback(self) -> float:
        return FEEDBACK_SCALE * self.mix


class CombLine:
    """
    Feedback delay line with a circular buffer.

    Per sample: read the delayed value at the current index, write
    ``input + delayed * feedback`` back to that index, advance the index,
    and emit the delayed (pre-write) value.
    """

    def __init__(self, delay_samples: int, feedback: float):
        if delay_samples < 1:
            raise ValueError(f"Delay must be at least one sample, got {delay_samples}")
        self.buffer = np.zeros(delay_samples)
        self.index = 0
        self.feedback = feedback

    @classmethod
    def from_ms(cls, delay_ms: float, sample_rate: int, feedback: float) -> "CombLine":
        return cls(ms_to_samples(delay_ms, sample_rate), feedback)

    def __len__(self) -> int:
        return len(self.buffer)

    def process_sample(self, x: float) -> float:
        delayed = self.buffer[self.index]
        self.buffer[self.index] = x + delayed * self.feedback
        self.index = (self.index + 1) % len(self.buffer)
        return float(delayed)

    def process_block(self, audio: np.ndarray) -> np.ndarray:
        """
        Vectorized equivalent of ``process_sample`` over a block.

        The recursion w[n] = x[n] + g * w[n - D] only reaches back one full
        delay, so it is evaluated one delay-length slice at a time.
        """
        audio = np.asarray(audio, dtype=np.float64)
        n = len(audio)
        delay = len(self.buffer)
        if n == 0:
            return np.zeros(0)

        # Oldest stored value first: written[j] is w[start - delay + j]
        written = np.empty(delay + n)
        written[:delay] = np.roll(self.buffer, -self.index)

        for start in range(delay, delay + n, delay):
            end = min(start + delay, delay + n)
            written[start:end] = (
                audio[start - delay:end - delay]
                + self.feedback * written[start - delay:end - delay]
            )

        self.index = (self.index + n) % delay
        self.buffer = np.roll(written[-delay:], self.index)
        return written[:n].copy()


class CombReverb:
    """
    Four parallel comb lines mixed with the dry signal.

    Usage:
        reverb = CombReverb(sample_rate=44100, intensity=30)
        wet = reverb.process(voice)
    """

    def __init__(self, sample_rate: int, intensity: float = 30.0,
                 config: Optional[ReverbConfig] = None):
        self.sample_rate = sample_rate
        self.config = config or ReverbConfig(intensity=intensity)
        self.lines: List[CombLine] = [
            CombLine.from_ms(ms, sample_rate, self.config.feedback)
            for ms in self.config.delays_ms
        ]

    def process(self, audio: np.ndarray) -> np.ndarray:
        """dry * (1 - mix/2) + mean(delayed) * mix"""
        audio = np.asarray(audio, dtype=np.float64)
        mix = self.config.mix
        comb_sum = np.zeros(len(audio))
        for line in self.lines:
            comb_sum += line.process_block(audio)
        return audio * (1 - mix * DRY_REDUCTION) + (comb_sum / len(self.lines)) * mix


def apply_reverb(audio: np.ndarray, sample_rate: int, intensity: float) -> np.ndarray:
    """Reverberate a mono signal with fresh comb lines."""
    return CombReverb(sample_rate, intensity).process(audio)
