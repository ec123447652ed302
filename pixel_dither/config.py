"""Centralised configuration via a frozen dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from pixel_dither.color_utils import DISTANCE_METRICS

ERROR_DIFFUSION_METHODS = (
    "floyd_steinberg",
    "jarvis",
    "stucki",
    "burkes",
    "atkinson",
    "sierra_lite",
    "sierra2",
    "sierra3",
)
ORDERED_METHODS = ("bayer", "halftone")
STOCHASTIC_METHODS = ("random",)
METHODS = ERROR_DIFFUSION_METHODS + ORDERED_METHODS + STOCHASTIC_METHODS + ("none",)

# Amplitude used by ordered / random dithering when intensity is not given
DEFAULT_INTENSITY = {"bayer": 32, "halftone": 64, "random": 32}


@dataclass(frozen=True)
class DitherConfig:
    """All tuneable parameters for a quantisation pass.

    Attributes:
        method:          One of :data:`METHODS` (``"none"`` = plain nearest match).
        strength:        Error-diffusion multiplier (nominal 0.0-2.0, not range-checked).
        alpha_threshold: Pixels with alpha below this are left untouched.
        serpentine:      Alternate scan direction on odd rows.
        intensity:       Ordered / random amplitude (None = per-method default).
        color_distance:  Nearest-colour metric - "lab", "rgb" or "compuphase".
        seed:            Seed for random dithering (None = non-deterministic).
    """

    method: str = "floyd_steinberg"
    strength: float = 1.0
    alpha_threshold: int = 128
    serpentine: bool = False
    intensity: int | None = None
    color_distance: str = "lab"
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.method not in METHODS:
            msg = f"Unknown dither method {self.method!r}; choose from {METHODS}"
            raise ValueError(msg)
        if self.color_distance not in DISTANCE_METRICS:
            msg = (
                f"Unknown colour distance {self.color_distance!r}; "
                f"choose from {DISTANCE_METRICS}"
            )
            raise ValueError(msg)
        if not 0 <= self.alpha_threshold <= 255:
            msg = f"alpha_threshold must be within 0-255, got {self.alpha_threshold}"
            raise ValueError(msg)

    @property
    def resolved_intensity(self) -> int:
        if self.intensity is not None:
            return self.intensity
        return DEFAULT_INTENSITY.get(self.method, 32)


@dataclass(frozen=True)
class OutputConfig:
    """Settings for the command-line image workflow.

    Attributes:
        max_side:        Downscale so the longest side is at most this (None = keep).
        pixel_upscale:   Each pixel becomes n x n in the saved image.
        output_format:   Image format for saved files.
        remove_semitransparent: Force every kept pixel fully opaque.
        save_comparison: Also write an original / dithered side-by-side image.
        input_dir:       Folder to scan for source images.
        output_dir:      Folder for results.
    """

    max_side: int | None = None
    pixel_upscale: int = 1
    output_format: str = "png"
    remove_semitransparent: bool = False
    save_comparison: bool = False

    input_dir: Path = field(default_factory=lambda: Path("images"))
    output_dir: Path = field(default_factory=lambda: Path("output"))

    SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
        {".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".webp", ".gif"}
    )
