"""Row traversal order and alpha masking shared by all passes."""

from __future__ import annotations

from collections.abc import Callable, Iterator

import numpy as np

ProgressCallback = Callable[[float], None]

# Rows between progress reports for ordered and random passes
MATRIX_REPORT_EVERY = 25


def report_interval(height: int) -> int:
    """Rows between progress reports for diffusion and direct passes."""
    return max(1, height // 50)


class ScanlineScheduler:
    """Decide the visiting order of pixels and which ones take part.

    A pixel is *eligible* when its alpha is at least ``alpha_threshold``.
    Ineligible pixels are never visited, written or used as error targets.
    """

    def __init__(
        self,
        alpha: np.ndarray,
        alpha_threshold: int = 128,
        serpentine: bool = False,
    ) -> None:
        self.alpha = alpha
        self.height, self.width = alpha.shape[:2]
        self.alpha_threshold = alpha_threshold
        self.serpentine = serpentine
        self.mask = alpha >= alpha_threshold

    def left_to_right(self, y: int) -> bool:
        return not self.serpentine or y % 2 == 0

    def is_eligible(self, x: int, y: int) -> bool:
        """True if (x, y) lies inside the grid and passes the alpha test."""
        if x < 0 or x >= self.width or y < 0 or y >= self.height:
            return False
        return bool(self.mask[y, x])

    def row(self, y: int) -> Iterator[int]:
        """Yield eligible x coordinates of row *y* in scan order."""
        xs = range(self.width) if self.left_to_right(y) else range(self.width - 1, -1, -1)
        row_mask = self.mask[y]
        for x in xs:
            if row_mask[x]:
                yield x

    def rows(self) -> Iterator[tuple[int, bool]]:
        """Yield ``(y, left_to_right)`` for every row, top to bottom."""
        for y in range(self.height):
            yield y, self.left_to_right(y)
