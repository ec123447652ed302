"""Image loading, alpha recompositing, saving and comparison images."""

from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont

# Output suffixes whose formats cannot store an alpha channel
NO_ALPHA_SUFFIXES = frozenset({".jpg", ".jpeg", ".bmp"})


def compute_target_size(
    original_width: int,
    original_height: int,
    max_side: int,
) -> tuple[int, int]:
    """Compute downscaled (w, h) preserving aspect ratio.

    The longest side becomes *max_side*; the other is scaled
    proportionally (rounded to the nearest integer, minimum 1).
    Images already within *max_side* keep their size.
    """
    if max(original_width, original_height) <= max_side:
        return original_width, original_height
    if original_width >= original_height:
        w = max_side
        h = max(1, round(original_height * max_side / original_width))
    else:
        h = max_side
        w = max(1, round(original_width * max_side / original_height))
    return w, h


def load_rgba(
    path: str | Path,
    max_side: int | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """Load an image as separate colour and alpha grids.

    Args:
        path:     Image file.
        max_side: If given, downscale so the longest side fits.

    Returns:
        ``(rgb, alpha)`` - (H, W, 3) uint8 and (H, W) uint8.
    """
    img = Image.open(path).convert("RGBA")
    if max_side is not None:
        size = compute_target_size(img.width, img.height, max_side)
        if size != img.size:
            img = img.resize(size, Image.LANCZOS)
    arr = np.array(img, dtype=np.uint8)
    return arr[..., :3].copy(), arr[..., 3].copy()


def compose_rgba(
    rgb: np.ndarray,
    alpha: np.ndarray,
    alpha_threshold: int = 128,
    remove_semitransparent: bool = False,
) -> np.ndarray:
    """Re-attach alpha to a quantised grid.

    Pixels below *alpha_threshold* become fully transparent; with
    *remove_semitransparent* every remaining pixel becomes fully opaque.

    Returns:
        (H, W, 4) uint8 array.
    """
    out_alpha = np.asarray(alpha, dtype=np.uint8).copy()
    keep = out_alpha >= alpha_threshold
    out_alpha[~keep] = 0
    if remove_semitransparent:
        out_alpha[keep] = 255
    return np.dstack([np.asarray(rgb, dtype=np.uint8), out_alpha])


def save_upscaled(
    array: np.ndarray,
    path: str | Path,
    pixel_upscale: int = 1,
) -> None:
    """Save an RGB or RGBA array, nearest-neighbour upscaled.

    Alpha is dropped when *path* names a format without transparency.
    """
    img = Image.fromarray(array.astype(np.uint8))
    if img.mode == "RGBA" and Path(path).suffix.lower() in NO_ALPHA_SUFFIXES:
        img = img.convert("RGB")
    if pixel_upscale > 1:
        h, w = array.shape[:2]
        img = img.resize((w * pixel_upscale, h * pixel_upscale), Image.NEAREST)
    img.save(path)


def make_comparison_grid(
    original: np.ndarray,
    dithered: np.ndarray,
    output_path: str | Path,
    pixel_upscale: int = 1,
    label: str = "Dithered",
) -> None:
    """Create a 2-panel comparison: Original | Dithered.

    Both arrays share the same (H, W) and may be RGB or RGBA; transparent
    areas are drawn over the dark background.
    """
    h, w = original.shape[:2]
    panel_w = w * pixel_upscale
    panel_h = h * pixel_upscale
    label_height = 36

    panels = [
        Image.fromarray(a.astype(np.uint8))
        .convert("RGBA")
        .resize((panel_w, panel_h), Image.NEAREST)
        for a in (original, dithered)
    ]
    labels = ["Original", label]

    gap = 8
    total_w = len(panels) * panel_w + (len(panels) - 1) * gap
    total_h = panel_h + label_height

    canvas = Image.new("RGBA", (total_w, total_h), (30, 30, 30, 255))
    draw = ImageDraw.Draw(canvas)

    try:
        font = ImageFont.truetype(
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf", 18,
        )
    except OSError:
        font = ImageFont.load_default()

    for i, (panel, text) in enumerate(zip(panels, labels, strict=True)):
        x = i * (panel_w + gap)
        canvas.alpha_composite(panel, (x, label_height))

        bbox = draw.textbbox((0, 0), text, font=font)
        text_w = bbox[2] - bbox[0]
        tx = x + (panel_w - text_w) // 2
        draw.text((tx, 6), text, fill=(220, 220, 220), font=font)

    canvas.convert("RGB").save(output_path)
