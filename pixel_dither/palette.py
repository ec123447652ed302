"""Immutable palette value object with a memoised CIELAB representation.

A :class:`Palette` never changes after construction, so its Lab coordinates
can be computed once and kept on the object itself. Two palettes with the
same colours are still separate objects and are cached independently; build
a new palette whenever the colour list changes.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from functools import cached_property

import numpy as np

from pixel_dither.color_utils import hex_to_rgb, rgb_to_hex, rgb_to_lab

# Used by the CLI when no colours are given.
DEFAULT_HEX = ("#000000", "#ffffff")


class InvalidPaletteError(ValueError):
    """Raised for empty palettes or malformed palette entries."""


def _normalise_color(color, index: int) -> tuple[int, int, int]:
    try:
        values = tuple(int(c) for c in color)
    except (TypeError, ValueError):
        msg = f"Palette entry {index} is not an RGB triple: {color!r}"
        raise InvalidPaletteError(msg) from None
    if len(values) != 3:
        msg = f"Palette entry {index} must have 3 channels, got {len(values)}"
        raise InvalidPaletteError(msg)
    if any(v < 0 or v > 255 for v in values):
        msg = f"Palette entry {index} has channels outside 0-255: {values}"
        raise InvalidPaletteError(msg)
    return values  # type: ignore[return-value]


@dataclass(frozen=True, eq=False)
class Palette:
    """Ordered, non-empty set of unique RGB colours.

    Attributes:
        colors: Tuple of ``(r, g, b)`` integer triples, in match priority order.
    """

    colors: tuple[tuple[int, int, int], ...]

    def __post_init__(self) -> None:
        colors = tuple(
            _normalise_color(c, i) for i, c in enumerate(self.colors)
        )
        if not colors:
            msg = "Palette must contain at least one colour"
            raise InvalidPaletteError(msg)
        seen: set[tuple[int, int, int]] = set()
        for c in colors:
            if c in seen:
                msg = f"Duplicate palette colour {rgb_to_hex(c)}"
                raise InvalidPaletteError(msg)
            seen.add(c)
        object.__setattr__(self, "colors", colors)

    @classmethod
    def from_hex(cls, hex_colors: Iterable[str]) -> Palette:
        """Build a palette from ``#rrggbb`` strings."""
        try:
            return cls(tuple(hex_to_rgb(h) for h in hex_colors))
        except InvalidPaletteError:
            raise
        except ValueError as exc:
            raise InvalidPaletteError(str(exc)) from exc

    def __len__(self) -> int:
        return len(self.colors)

    def __iter__(self):
        return iter(self.colors)

    def __getitem__(self, index: int) -> tuple[int, int, int]:
        return self.colors[index]

    def __repr__(self) -> str:
        return f"Palette({', '.join(self.hex)})"

    @cached_property
    def rgb(self) -> np.ndarray:
        """(P, 3) uint8 array of the palette colours (read-only)."""
        arr = np.array(self.colors, dtype=np.uint8)
        arr.setflags(write=False)
        return arr

    @cached_property
    def lab(self) -> np.ndarray:
        """(P, 3) float64 CIELAB coordinates, computed on first use."""
        arr = rgb_to_lab(self.rgb)
        arr.setflags(write=False)
        return arr

    @property
    def hex(self) -> list[str]:
        return [rgb_to_hex(c) for c in self.colors]


def as_palette(colors: Palette | Sequence | np.ndarray) -> Palette:
    """Return *colors* unchanged if it is already a :class:`Palette`."""
    if isinstance(colors, Palette):
        return colors
    if isinstance(colors, np.ndarray):
        colors = colors.reshape(-1, 3).tolist()
    return Palette(tuple(colors))
