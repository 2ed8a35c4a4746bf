"""
Peak Limiter

Final anti-clipping stage. Scans every channel for the largest absolute
sample and, if it exceeds the ceiling, scales all channels by the same
factor (linked gain keeps the channel balance). This is a single static
gain, not a dynamic limiter: no attack, release or lookahead.

Usage:
    >>> limiter = PeakLimiter(PeakLimiterParams(ceiling=0.95))
    >>> limited = limiter.process(channels)
    >>> report = limiter.get_report()
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np

from .utils import OUTPUT_CEILING, linear_to_db, peak

logger = logging.getLogger(__name__)


@dataclass
class PeakLimiterParams:
    """
    Attributes:
        ceiling: Maximum allowed absolute sample value (linear)
    """
    ceiling: float = OUTPUT_CEILING


class PeakLimiter:
    """Linked static peak limiter with a report of the last run."""

    def __init__(self, params: Optional[PeakLimiterParams] = None):
        self.params = params or PeakLimiterParams()
        self._input_peak = 0.0
        self._output_peak = 0.0
        self._gain = 1.0

    def process(self, channels: np.ndarray) -> np.ndarray:
        """
        Limit a buffer shaped (n_channels, n_samples) or (n_samples,).

        Returns:
            New array, scaled only if the peak exceeded the ceiling
        """
        channels = np.asarray(channels, dtype=np.float64)
        ceiling = self.params.ceiling

        self._input_peak = peak(channels)
        self._gain = 1.0
        if self._input_peak > ceiling:
            self._gain = ceiling / self._input_peak
            logger.debug(
                f"Limiting: peak {self._input_peak:.4f} -> {ceiling} "
                f"({linear_to_db(self._gain):.2f} dB)"
            )
            output = channels * self._gain
        else:
            output = channels.copy()

        self._output_peak = self._input_peak * self._gain
        return output

    def get_report(self) -> Dict[str, Any]:
        """Summary of the last ``process`` call."""
        return {
            "ceiling": self.params.ceiling,
            "input_peak": self._input_peak,
            "output_peak": self._output_peak,
            "gain": self._gain,
            "gain_reduction_db": -linear_to_db(self._gain),
            "limited": self._gain < 1.0,
        }


def limit_peak(channels: np.ndarray, ceiling: float = OUTPUT_CEILING) -> np.ndarray:
    """Convenience wrapper around PeakLimiter."""
    return PeakLimiter(PeakLimiterParams(ceiling=ceiling)).process(channels)
