"""Quantise a pixel grid onto a palette with the requested dithering method."""

from __future__ import annotations

import logging
import time

import numpy as np

from pixel_dither.config import (
    ERROR_DIFFUSION_METHODS,
    ORDERED_METHODS,
    STOCHASTIC_METHODS,
    DitherConfig,
)
from pixel_dither.diffusion import ErrorDiffusionEngine
from pixel_dither.kernels import KERNELS
from pixel_dither.matching import ColorMatcher
from pixel_dither.ordered import THRESHOLD_MATRICES, OrderedDitherEngine
from pixel_dither.palette import Palette, as_palette
from pixel_dither.scanline import ProgressCallback, ScanlineScheduler, report_interval
from pixel_dither.stochastic import StochasticDitherEngine

logger = logging.getLogger(__name__)


def match_direct(
    work: np.ndarray,
    matcher: ColorMatcher,
    scheduler: ScanlineScheduler,
    progress: ProgressCallback | None = None,
) -> np.ndarray:
    """Replace every eligible pixel of *work* with its nearest palette colour."""
    h = scheduler.height
    every = report_interval(h)
    for y in range(h):
        xs = np.flatnonzero(scheduler.mask[y])
        if len(xs):
            work[y, xs] = matcher.match_many(work[y, xs])
        if progress is not None and y % every == 0:
            progress((y + 1) / h)
    if progress is not None:
        progress(1.0)
    return work


def _check_inputs(rgb: np.ndarray, alpha: np.ndarray | None) -> np.ndarray:
    if rgb.ndim != 3 or rgb.shape[2] != 3:
        msg = f"Expected an (H, W, 3) RGB grid, got shape {rgb.shape}"
        raise ValueError(msg)
    if alpha is None:
        return np.full(rgb.shape[:2], 255, dtype=np.uint8)
    alpha = np.asarray(alpha)
    if alpha.shape != rgb.shape[:2]:
        msg = f"Alpha shape {alpha.shape} does not match grid {rgb.shape[:2]}"
        raise ValueError(msg)
    return alpha


def quantize(
    rgb: np.ndarray,
    alpha: np.ndarray | None,
    palette: Palette | list | np.ndarray,
    config: DitherConfig | None = None,
    progress: ProgressCallback | None = None,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Map *rgb* onto *palette* using the method named in *config*.

    Args:
        rgb:      (H, W, 3) pixel grid; never modified.
        alpha:    (H, W) alpha values, or None for fully opaque.
        palette:  A :class:`Palette` or anything :func:`as_palette` accepts.
        config:   Method and parameters (defaults to :class:`DitherConfig`).
        progress: Called with the completed fraction, ending with 1.0.
        rng:      Generator for ``"random"``; overrides ``config.seed``.

    Returns:
        (H, W, 3) uint8 - a new grid. Pixels below the alpha threshold keep
        their input values.

    Raises:
        InvalidPaletteError: *palette* is empty or malformed.
        ValueError: The grid and alpha shapes do not line up.
    """
    cfg = config or DitherConfig()
    pal = as_palette(palette)
    rgb = np.asarray(rgb)
    alpha = _check_inputs(rgb, alpha)

    h, w = rgb.shape[:2]
    work = rgb.astype(np.float64)  # always a copy
    matcher = ColorMatcher(pal, cfg.color_distance)
    scheduler = ScanlineScheduler(alpha, cfg.alpha_threshold, cfg.serpentine)

    logger.info(
        "Quantising %dx%d onto %d colours (%s, %s)",
        w, h, len(pal), cfg.method, cfg.color_distance,
    )
    t0 = time.perf_counter()

    if cfg.method in ERROR_DIFFUSION_METHODS:
        engine = ErrorDiffusionEngine(
            KERNELS[cfg.method], matcher, scheduler, cfg.strength,
        )
        engine.run(work, progress)
    elif cfg.method in ORDERED_METHODS:
        engine = OrderedDitherEngine(
            THRESHOLD_MATRICES[cfg.method], matcher, scheduler, cfg.resolved_intensity,
        )
        engine.run(work, progress)
    elif cfg.method in STOCHASTIC_METHODS:
        engine = StochasticDitherEngine(
            matcher, scheduler, cfg.resolved_intensity,
            rng=rng if rng is not None else cfg.seed,
        )
        engine.run(work, progress)
    else:
        match_direct(work, matcher, scheduler, progress)

    logger.info("Quantised  (%.2f s)", time.perf_counter() - t0)

    # Skipped pixels were never touched, so uint8 input survives unchanged
    return np.clip(work, 0, 255).astype(np.uint8)
