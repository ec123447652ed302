"""Error-diffusion kernel tables.

Offsets are given for left-to-right scanning as ``(dx, dy, weight)``; the
right-to-left table is the same list with ``dx`` negated.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property


@dataclass(frozen=True)
class KernelSpec:
    """One diffusion kernel.

    Attributes:
        name:        Human-readable kernel name.
        offsets:     ``(dx, dy, weight)`` neighbours, left-to-right form.
        denominator: Sum the weights are normalised by.
    """

    name: str
    offsets: tuple[tuple[int, int, int], ...]
    denominator: int

    @cached_property
    def mirrored(self) -> tuple[tuple[int, int, int], ...]:
        """Offsets for right-to-left rows."""
        return tuple((-dx, dy, w) for dx, dy, w in self.offsets)

    def offsets_for(self, left_to_right: bool) -> tuple[tuple[int, int, int], ...]:
        return self.offsets if left_to_right else self.mirrored


KERNELS: dict[str, KernelSpec] = {
    "floyd_steinberg": KernelSpec(
        "Floyd-Steinberg",
        ((1, 0, 7), (-1, 1, 3), (0, 1, 5), (1, 1, 1)),
        16,
    ),
    "jarvis": KernelSpec(
        "Jarvis-Judice-Ninke",
        (
            (1, 0, 7), (2, 0, 5),
            (-2, 1, 3), (-1, 1, 5), (0, 1, 7), (1, 1, 5), (2, 1, 3),
            (-2, 2, 1), (-1, 2, 3), (0, 2, 5), (1, 2, 3), (2, 2, 1),
        ),
        48,
    ),
    "stucki": KernelSpec(
        "Stucki",
        (
            (1, 0, 8), (2, 0, 4),
            (-2, 1, 2), (-1, 1, 4), (0, 1, 8), (1, 1, 4), (2, 1, 2),
            (-2, 2, 1), (-1, 2, 2), (0, 2, 4), (1, 2, 2), (2, 2, 1),
        ),
        42,
    ),
    "burkes": KernelSpec(
        "Burkes",
        (
            (1, 0, 8), (2, 0, 4),
            (-2, 1, 2), (-1, 1, 4), (0, 1, 8), (1, 1, 4), (2, 1, 2),
        ),
        32,
    ),
    "atkinson": KernelSpec(
        "Atkinson",
        ((1, 0, 1), (2, 0, 1), (-1, 1, 1), (0, 1, 1), (1, 1, 1), (0, 2, 1)),
        8,
    ),
    "sierra_lite": KernelSpec(
        "Sierra-Lite",
        ((1, 0, 2), (-1, 1, 1), (0, 1, 1)),
        4,
    ),
    "sierra2": KernelSpec(
        "Sierra-2",
        (
            (1, 0, 4), (2, 0, 3),
            (-2, 1, 1), (-1, 1, 2), (0, 1, 3), (1, 1, 2), (2, 1, 1),
        ),
        16,
    ),
    "sierra3": KernelSpec(
        "Sierra-3",
        (
            (1, 0, 5), (2, 0, 3),
            (-2, 1, 2), (-1, 1, 4), (0, 1, 5), (1, 1, 4), (2, 1, 2),
            (-1, 2, 2), (0, 2, 3), (1, 2, 2),
        ),
        32,
    ),
}
