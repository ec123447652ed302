"""
Pixel Dither
============

Quantise a continuous-tone pixel grid onto a small fixed palette while
keeping gradients visible. Ships three families of methods:

- **Error diffusion** (Floyd-Steinberg, Jarvis, Stucki, Burkes, Atkinson,
  Sierra-Lite, Sierra-2, Sierra-3) with optional serpentine scanning
- **Ordered** (4x4 Bayer, 8x8 halftone)
- **Random noise** (seedable)

Nearest colours are found in CIELAB (default), raw RGB or the
"compuphase" redmean approximation. Pixels below an alpha threshold are
left untouched.
"""

__version__ = "1.0.0"

from pixel_dither.config import METHODS, DitherConfig
from pixel_dither.diffusion import ErrorDiffusionEngine
from pixel_dither.kernels import KERNELS, KernelSpec
from pixel_dither.matching import ColorMatcher
from pixel_dither.ordered import BAYER_4X4, HALFTONE_8X8, OrderedDitherEngine
from pixel_dither.palette import InvalidPaletteError, Palette, as_palette
from pixel_dither.pipeline import match_direct, quantize
from pixel_dither.scanline import ScanlineScheduler
from pixel_dither.stats import color_statistics, count_colors
from pixel_dither.stochastic import StochasticDitherEngine

__all__ = [
    "BAYER_4X4",
    "HALFTONE_8X8",
    "KERNELS",
    "METHODS",
    "ColorMatcher",
    "DitherConfig",
    "ErrorDiffusionEngine",
    "InvalidPaletteError",
    "KernelSpec",
    "OrderedDitherEngine",
    "Palette",
    "ScanlineScheduler",
    "StochasticDitherEngine",
    "as_palette",
    "color_statistics",
    "count_colors",
    "match_direct",
    "quantize",
]
