"""Colour usage statistics for a quantised grid."""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass

import numpy as np

from pixel_dither.color_utils import rgb_to_hex


@dataclass(frozen=True)
class ColorStat:
    name: str
    hex: str
    count: int


def count_colors(
    rgb: np.ndarray,
    alpha: np.ndarray | None = None,
    alpha_threshold: int = 128,
) -> Counter[tuple[int, int, int]]:
    """Count pixels per colour, ignoring those below *alpha_threshold*."""
    flat = np.asarray(rgb, dtype=np.uint8).reshape(-1, 3)
    if alpha is not None:
        flat = flat[np.asarray(alpha).reshape(-1) >= alpha_threshold]
    if not len(flat):
        return Counter()
    colors, counts = np.unique(flat, axis=0, return_counts=True)
    return Counter(
        {tuple(int(v) for v in c): int(n) for c, n in zip(colors, counts, strict=True)}
    )


def color_statistics(
    rgb: np.ndarray,
    alpha: np.ndarray | None = None,
    alpha_threshold: int = 128,
    names: Mapping[str, str] | None = None,
) -> list[ColorStat]:
    """Per-colour pixel counts, most frequent first.

    *names* maps lowercase ``#rrggbb`` to a display name; colours without an
    entry are reported as ``"Unknown"``.
    """
    names = names or {}
    stats = [
        ColorStat(names.get(rgb_to_hex(c), "Unknown"), rgb_to_hex(c), n)
        for c, n in count_colors(rgb, alpha, alpha_threshold).items()
    ]
    stats.sort(key=lambda s: s.count, reverse=True)
    return stats
