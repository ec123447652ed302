"""Random-noise dithering."""

from __future__ import annotations

import logging

import numpy as np

from pixel_dither.matching import ColorMatcher
from pixel_dither.scanline import MATRIX_REPORT_EVERY, ProgressCallback, ScanlineScheduler

logger = logging.getLogger(__name__)


class StochasticDitherEngine:
    """Add independent uniform noise in ``[-intensity, +intensity]`` per channel.

    Pass a seeded ``numpy.random.Generator`` (or a seed) for reproducible
    output; without one the result differs on every run.
    """

    def __init__(
        self,
        matcher: ColorMatcher,
        scheduler: ScanlineScheduler,
        intensity: int = 32,
        rng: np.random.Generator | int | None = None,
    ) -> None:
        self.matcher = matcher
        self.scheduler = scheduler
        self.intensity = intensity
        self.rng = rng if isinstance(rng, np.random.Generator) else np.random.default_rng(rng)

    def run(
        self,
        work: np.ndarray,
        progress: ProgressCallback | None = None,
    ) -> np.ndarray:
        """Dither *work* in place, one vectorised row at a time."""
        sched = self.scheduler
        h = sched.height
        logger.debug("Random noise, intensity=%s", self.intensity)

        for y in range(h):
            xs = np.flatnonzero(sched.mask[y])
            if len(xs):
                noise = self.rng.uniform(-1.0, 1.0, size=(len(xs), 3)) * self.intensity
                work[y, xs] = self.matcher.match_many(work[y, xs] + noise)
            if progress is not None and y % MATRIX_REPORT_EVERY == 0:
                progress((y + 1) / h)

        if progress is not None:
            progress(1.0)
        return work
