"""Nearest-palette-colour search."""

from __future__ import annotations

import numpy as np

from pixel_dither.color_utils import DISTANCE_METRICS, compute_distance_matrix
from pixel_dither.palette import Palette, as_palette


class ColorMatcher:
    """Find the closest palette entry under one of :data:`DISTANCE_METRICS`.

    Ties go to the earliest palette entry. The single-pixel and vectorised
    lookups share one code path, so they always agree.
    """

    def __init__(self, palette: Palette, metric: str = "lab") -> None:
        if metric not in DISTANCE_METRICS:
            msg = f"Unknown colour distance {metric!r}; choose from {DISTANCE_METRICS}"
            raise ValueError(msg)
        self.palette = as_palette(palette)
        self.metric = metric

    def nearest_indices(self, pixels: np.ndarray) -> np.ndarray:
        """(N, 3) pixels → (N,) int palette indices."""
        dist = compute_distance_matrix(
            pixels,
            self.palette.rgb,
            self.metric,
            palette_lab=self.palette.lab if self.metric == "lab" else None,
        )
        return np.argmin(dist, axis=1)

    def match_many(self, pixels: np.ndarray) -> np.ndarray:
        """(N, 3) pixels → (N, 3) uint8 palette colours (a new array)."""
        return self.palette.rgb[self.nearest_indices(pixels)]

    def match(self, pixel) -> tuple[int, int, int]:
        """Closest palette colour to a single pixel, as an immutable tuple."""
        idx = int(self.nearest_indices(np.asarray(pixel, dtype=np.float64))[0])
        return self.palette.colors[idx]
