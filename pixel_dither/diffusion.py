"""Generic weighted-kernel error diffusion.

The working grid is both the read source for pixels not yet visited and the
write target for quantised pixels and diffused error. Each pixel is read
(including any error it has received), quantised, written, and only then is
its error spread forward. The pass is strictly sequential.

Error shares that would land outside the grid or on a pixel below the alpha
threshold are dropped, not redistributed.
"""

from __future__ import annotations

import logging
import time

import numpy as np

from pixel_dither.kernels import KernelSpec
from pixel_dither.matching import ColorMatcher
from pixel_dither.scanline import ProgressCallback, ScanlineScheduler, report_interval

logger = logging.getLogger(__name__)


class ErrorDiffusionEngine:
    """Scanline error diffusion driven by a :class:`KernelSpec`."""

    def __init__(
        self,
        kernel: KernelSpec,
        matcher: ColorMatcher,
        scheduler: ScanlineScheduler,
        strength: float = 1.0,
    ) -> None:
        self.kernel = kernel
        self.matcher = matcher
        self.scheduler = scheduler
        self.strength = strength

    def run(
        self,
        work: np.ndarray,
        progress: ProgressCallback | None = None,
    ) -> np.ndarray:
        """Dither *work* in place.

        Args:
            work:     (H, W, 3) float64 working grid, mutated in place.
            progress: Optional callback receiving the completed fraction.

        Returns:
            The same *work* array.
        """
        sched = self.scheduler
        h, w = sched.height, sched.width
        denom = self.kernel.denominator
        every = report_interval(h)

        logger.debug(
            "%s diffusion on %dx%d (strength=%.2f, serpentine=%s)",
            self.kernel.name, w, h, self.strength, sched.serpentine,
        )
        t0 = time.perf_counter()

        for y, left_to_right in sched.rows():
            neighbours = self.kernel.offsets_for(left_to_right)
            for x in sched.row(y):
                old = work[y, x].copy()
                new = np.array(self.matcher.match(old), dtype=np.float64)
                err = (old - new) * self.strength / denom
                work[y, x] = new

                for dx, dy, weight in neighbours:
                    nx, ny = x + dx, y + dy
                    if not sched.is_eligible(nx, ny):
                        continue
                    work[ny, nx] = np.clip(work[ny, nx] + err * weight, 0, 255)

            if progress is not None and y % every == 0:
                progress((y + 1) / h)

        if progress is not None:
            progress(1.0)

        logger.debug("%s done  (%.2f s)", self.kernel.name, time.perf_counter() - t0)
        return work
