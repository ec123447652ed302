"""Ordered (threshold-matrix) dithering.

Each pixel gets a position-dependent offset from a tiled matrix before the
nearest-colour lookup. Nothing is written back apart from the matched colour,
so every pixel is independent of its neighbours.
"""

from __future__ import annotations

import logging

import numpy as np

from pixel_dither.matching import ColorMatcher
from pixel_dither.scanline import MATRIX_REPORT_EVERY, ProgressCallback, ScanlineScheduler

logger = logging.getLogger(__name__)

BAYER_4X4 = np.array([
    [0, 8, 2, 10],
    [12, 4, 14, 6],
    [3, 11, 1, 9],
    [15, 7, 13, 5],
], dtype=np.float64) / 16.0 - 0.5

# Clustered-dot pattern, normalised the same way as the Bayer matrix
HALFTONE_8X8 = np.array([
    [24, 3, 19, 8, 25, 4, 20, 9],
    [12, 43, 52, 35, 11, 44, 53, 36],
    [18, 51, 60, 42, 17, 50, 59, 41],
    [7, 34, 40, 58, 6, 33, 39, 57],
    [26, 5, 21, 10, 27, 2, 22, 1],
    [13, 45, 54, 37, 14, 46, 55, 38],
    [16, 49, 58, 40, 15, 48, 57, 39],
    [1, 32, 38, 56, 0, 31, 37, 55],
], dtype=np.float64) / 64.0 - 0.5

THRESHOLD_MATRICES = {"bayer": BAYER_4X4, "halftone": HALFTONE_8X8}


class OrderedDitherEngine:
    """Threshold-matrix dithering; stateless per pixel."""

    def __init__(
        self,
        matrix: np.ndarray,
        matcher: ColorMatcher,
        scheduler: ScanlineScheduler,
        intensity: int = 32,
    ) -> None:
        self.matrix = np.asarray(matrix, dtype=np.float64)
        self.size = self.matrix.shape[0]
        self.matcher = matcher
        self.scheduler = scheduler
        self.intensity = intensity
        self.scale = intensity / 255

    def offset(self, x, y):
        """Channel offset at (x, y); *x* may be an array of columns."""
        n = self.size
        return self.matrix[y % n, np.asarray(x) % n] * self.scale * 255

    def dither_pixel(self, pixel, x: int, y: int) -> tuple[int, int, int]:
        """Quantise one pixel as it would be at (x, y) in a full pass."""
        adjusted = np.asarray(pixel, dtype=np.float64).reshape(3) + self.offset(x, y)
        return self.matcher.match(adjusted)

    def run(
        self,
        work: np.ndarray,
        progress: ProgressCallback | None = None,
    ) -> np.ndarray:
        """Dither *work* in place, one vectorised row at a time."""
        sched = self.scheduler
        h = sched.height
        logger.debug(
            "Ordered %dx%d matrix, intensity=%s", self.size, self.size, self.intensity,
        )

        for y in range(h):
            xs = np.flatnonzero(sched.mask[y])
            if len(xs):
                adjusted = work[y, xs] + self.offset(xs, y)[:, np.newaxis]
                work[y, xs] = self.matcher.match_many(adjusted)
            if progress is not None and y % MATRIX_REPORT_EVERY == 0:
                progress((y + 1) / h)

        if progress is not None:
            progress(1.0)
        return work
