"""Colour-space conversion, hex helpers and distance-matrix computation."""

from __future__ import annotations

import numpy as np
from skimage.color import rgb2lab

DISTANCE_METRICS = ("lab", "rgb", "compuphase")


def rgb_to_lab(rgb: np.ndarray) -> np.ndarray:
    """Convert flat (N, 3) RGB in 0-255 → (N, 3) float64 CIELAB (D65).

    Values outside 0-255 are converted as-is, without clipping.
    """
    arr = np.asarray(rgb, dtype=np.float64).reshape(1, -1, 3) / 255.0
    return rgb2lab(arr).reshape(-1, 3)


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """``"#ff7f27"`` → ``(255, 127, 39)``. The leading ``#`` is optional."""
    clean = hex_color.strip().lstrip("#")
    if len(clean) != 6:
        msg = f"Expected a 6-digit hex colour, got {hex_color!r}"
        raise ValueError(msg)
    try:
        return (int(clean[0:2], 16), int(clean[2:4], 16), int(clean[4:6], 16))
    except ValueError:
        msg = f"Invalid hex colour {hex_color!r}"
        raise ValueError(msg) from None


def rgb_to_hex(rgb) -> str:
    return "#" + "".join(f"{int(round(c)):02x}" for c in rgb[:3])


def _compuphase_distances(pixels: np.ndarray, palette: np.ndarray) -> np.ndarray:
    # Integer "redmean" metric; channels truncated toward zero first.
    p = np.trunc(pixels).astype(np.int64)[:, np.newaxis, :]
    c = palette.astype(np.int64)[np.newaxis, :, :]
    rmean = (c[..., 0] + p[..., 0]) >> 1
    diff = c - p
    dr2 = diff[..., 0] * diff[..., 0]
    dg2 = diff[..., 1] * diff[..., 1]
    db2 = diff[..., 2] * diff[..., 2]
    return (((512 + rmean) * dr2) >> 8) + 4 * dg2 + (((767 - rmean) * db2) >> 8)


def compute_distance_matrix(
    pixels: np.ndarray,
    palette_rgb: np.ndarray,
    metric: str = "lab",
    palette_lab: np.ndarray | None = None,
    chunk_size: int = 4096,
) -> np.ndarray:
    """Pairwise squared distance between pixels and palette colours.

    Only the ordering matters to callers, so no square root is taken.

    Args:
        pixels:      (N, 3) RGB, any numeric dtype, may exceed 0-255.
        palette_rgb: (P, 3) RGB of the palette.
        metric:      One of :data:`DISTANCE_METRICS`.
        palette_lab: Precomputed Lab of the palette (``"lab"`` only).
        chunk_size:  Rows computed per batch (controls peak RAM).

    Returns:
        (N, P) distance matrix (float64, or int64 for ``"compuphase"``).
    """
    if metric not in DISTANCE_METRICS:
        msg = f"Unknown colour distance {metric!r}; choose from {DISTANCE_METRICS}"
        raise ValueError(msg)

    pixels = np.asarray(pixels, dtype=np.float64).reshape(-1, 3)
    palette_rgb = np.asarray(palette_rgb).reshape(-1, 3)

    if metric == "compuphase":
        dtype = np.int64
    else:
        dtype = np.float64
        if metric == "lab":
            ref = palette_lab if palette_lab is not None else rgb_to_lab(palette_rgb)
        else:
            ref = palette_rgb.astype(np.float64)

    n = len(pixels)
    dist = np.empty((n, len(palette_rgb)), dtype=dtype)
    for i in range(0, n, chunk_size):
        j = min(i + chunk_size, n)
        if metric == "compuphase":
            dist[i:j] = _compuphase_distances(pixels[i:j], palette_rgb)
            continue
        block = rgb_to_lab(pixels[i:j]) if metric == "lab" else pixels[i:j]
        diff = block[:, np.newaxis, :] - ref[np.newaxis, :, :]
        dist[i:j] = np.sum(diff ** 2, axis=2)
    return dist
