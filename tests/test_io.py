"""Tests for colour statistics, image helpers and the CLI."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
import typer
from PIL import Image
from typer.testing import CliRunner

from pixel_dither.cli import app
from pixel_dither.config import OutputConfig
from pixel_dither.image_io import (
    compose_rgba,
    compute_target_size,
    load_rgba,
    make_comparison_grid,
    save_upscaled,
)
from pixel_dither.stats import ColorStat, color_statistics, count_colors

runner = CliRunner()

# -- Fixtures ----------------------------------------------------------


@pytest.fixture
def rgba_image(tmp_path: Path) -> Path:
    """Write a small non-square RGBA PNG with a transparent left column."""
    rng = np.random.default_rng(0)
    arr = rng.integers(0, 256, size=(12, 16, 4), dtype=np.uint8)
    arr[..., 3] = 255
    arr[:, 0, 3] = 0
    p = tmp_path / "test.png"
    Image.fromarray(arr, "RGBA").save(p)
    return p


@pytest.fixture
def quantised() -> tuple[np.ndarray, np.ndarray]:
    rgb = np.array([
        [[0, 0, 0], [0, 0, 0], [255, 255, 255]],
        [[237, 28, 36], [0, 0, 0], [255, 255, 255]],
    ], dtype=np.uint8)
    alpha = np.array([[255, 255, 255], [255, 0, 255]], dtype=np.uint8)
    return rgb, alpha


# -- Stats -------------------------------------------------------------

class TestStats:
    def test_count_colors(self, quantised: tuple[np.ndarray, np.ndarray]) -> None:
        rgb, alpha = quantised
        counts = count_colors(rgb, alpha, alpha_threshold=128)
        assert counts == {(0, 0, 0): 2, (255, 255, 255): 2, (237, 28, 36): 1}

    def test_count_colors_without_alpha(
        self, quantised: tuple[np.ndarray, np.ndarray],
    ) -> None:
        rgb, _ = quantised
        assert count_colors(rgb)[(0, 0, 0)] == 3

    def test_all_transparent(self, quantised: tuple[np.ndarray, np.ndarray]) -> None:
        rgb, _ = quantised
        assert count_colors(rgb, np.zeros((2, 3), dtype=np.uint8)) == {}

    def test_statistics_sorted_and_named(
        self, quantised: tuple[np.ndarray, np.ndarray],
    ) -> None:
        rgb, alpha = quantised
        stats = color_statistics(
            rgb, alpha, 128, names={"#ed1c24": "Red", "#000000": "Black"},
        )
        assert [s.count for s in stats] == [2, 2, 1]
        assert stats[-1] == ColorStat("Red", "#ed1c24", 1)
        by_hex = {s.hex: s.name for s in stats}
        assert by_hex["#000000"] == "Black"
        assert by_hex["#ffffff"] == "Unknown"


# -- Image I/O ---------------------------------------------------------

class TestImageIO:
    def test_target_size_landscape(self) -> None:
        assert compute_target_size(1920, 1080, 64) == (64, 36)

    def test_target_size_portrait(self) -> None:
        assert compute_target_size(1080, 1920, 64) == (36, 64)

    def test_target_size_minimum_one(self) -> None:
        w, h = compute_target_size(1000, 1, 32)
        assert w == 32
        assert h >= 1

    def test_target_size_never_upscales(self) -> None:
        assert compute_target_size(20, 10, 64) == (20, 10)

    def test_load_rgba(self, rgba_image: Path) -> None:
        rgb, alpha = load_rgba(rgba_image)
        assert rgb.shape == (12, 16, 3)
        assert alpha.shape == (12, 16)
        assert rgb.dtype == np.uint8
        assert np.all(alpha[:, 0] == 0)
        assert np.all(alpha[:, 1:] == 255)

    def test_load_rgba_max_side(self, rgba_image: Path) -> None:
        rgb, alpha = load_rgba(rgba_image, max_side=8)
        assert rgb.shape == (6, 8, 3)
        assert alpha.shape == (6, 8)

    def test_compose_rgba(self) -> None:
        rgb = np.zeros((1, 3, 3), dtype=np.uint8)
        alpha = np.array([[10, 150, 255]], dtype=np.uint8)
        out = compose_rgba(rgb, alpha, alpha_threshold=128)
        assert out.shape == (1, 3, 4)
        assert out[0, :, 3].tolist() == [0, 150, 255]
        solid = compose_rgba(rgb, alpha, 128, remove_semitransparent=True)
        assert solid[0, :, 3].tolist() == [0, 255, 255]
        # Input alpha untouched
        assert alpha.tolist() == [[10, 150, 255]]

    def test_save_upscaled(self, tmp_path: Path) -> None:
        arr = np.random.randint(0, 256, (6, 10, 4), dtype=np.uint8)
        out = tmp_path / "up.png"
        save_upscaled(arr, out, pixel_upscale=4)
        img = Image.open(out)
        assert img.size == (40, 24)
        assert img.mode == "RGBA"

    @pytest.mark.parametrize("name", ["up.jpg", "up.JPEG", "up.bmp"])
    def test_save_upscaled_drops_alpha(self, tmp_path: Path, name: str) -> None:
        arr = np.zeros((3, 5, 4), dtype=np.uint8)
        out = tmp_path / name
        save_upscaled(arr, out, pixel_upscale=2)
        img = Image.open(out)
        assert img.mode == "RGB"
        assert img.size == (10, 6)

    def test_comparison_grid(self, tmp_path: Path) -> None:
        a = np.zeros((5, 7, 3), dtype=np.uint8)
        b = np.full((5, 7, 4), 255, dtype=np.uint8)
        out = tmp_path / "cmp.png"
        make_comparison_grid(a, b, out, pixel_upscale=2)
        assert Image.open(out).size == (2 * 14 + 8, 10 + 36)


# -- CLI ---------------------------------------------------------------

class TestCLI:
    def test_methods(self) -> None:
        result = runner.invoke(app, ["methods"])
        assert result.exit_code == 0
        assert "atkinson" in result.output
        assert "halftone" in result.output

    def test_single(self, rgba_image: Path, tmp_path: Path) -> None:
        out = tmp_path / "out" / "dithered.png"
        result = runner.invoke(app, [
            "single", str(rgba_image), "-o", str(out),
            "-m", "atkinson", "-c", "#000000,#ffffff,#ed1c24",
            "--serpentine", "--upscale", "2", "--compare", "--stats",
        ])
        assert result.exit_code == 0, result.output
        img = np.array(Image.open(out))
        assert img.shape == (24, 32, 4)
        assert np.all(img[:, :2, 3] == 0)
        colors = {tuple(p) for p in img[:, 2:, :3].reshape(-1, 3)}
        assert colors <= {(0, 0, 0), (255, 255, 255), (237, 28, 36)}
        assert (tmp_path / "out" / "dithered_comparison.png").exists()

    def test_single_palette_file(self, rgba_image: Path, tmp_path: Path) -> None:
        pal = tmp_path / "pal.txt"
        pal.write_text("; two greys\n#3c3c3c\n\n#d2d2d2\n", encoding="utf-8")
        out = tmp_path / "grey.png"
        result = runner.invoke(app, [
            "single", str(rgba_image), "-o", str(out),
            "--palette-file", str(pal), "-m", "none",
        ])
        assert result.exit_code == 0, result.output
        img = np.array(Image.open(out))
        colors = {tuple(p) for p in img[:, 1:, :3].reshape(-1, 3)}
        assert colors <= {(60, 60, 60), (210, 210, 210)}

    def test_single_jpeg_output(self, rgba_image: Path, tmp_path: Path) -> None:
        out = tmp_path / "out.jpg"
        result = runner.invoke(app, [
            "single", str(rgba_image), "-o", str(out), "-m", "none", "--compare",
        ])
        assert result.exit_code == 0, result.output
        img = Image.open(out)
        assert img.mode == "RGB"
        assert img.size == (16, 12)
        assert (tmp_path / "out_comparison.jpg").exists()

    def test_max_side_help_mentions_cost(self) -> None:
        command = typer.main.get_command(app)
        params = {p.name: p for p in command.commands["single"].params}
        assert "Error diffusion" in params["max_side"].help

    def test_invalid_method(self, rgba_image: Path, tmp_path: Path) -> None:
        result = runner.invoke(app, [
            "single", str(rgba_image), "-o", str(tmp_path / "x.png"), "-m", "blur",
        ])
        assert result.exit_code == 1

    def test_invalid_colour(self, rgba_image: Path, tmp_path: Path) -> None:
        result = runner.invoke(app, [
            "single", str(rgba_image), "-o", str(tmp_path / "x.png"), "-c", "#zzz",
        ])
        assert result.exit_code == 1

    def test_batch(self, rgba_image: Path, tmp_path: Path) -> None:
        out_dir = tmp_path / "results"
        result = runner.invoke(app, [
            "batch", "-i", str(rgba_image.parent), "-o", str(out_dir),
            "-m", "bayer", "--max-side", "8",
        ])
        assert result.exit_code == 0, result.output
        written = out_dir / f"test_bayer.{OutputConfig().output_format}"
        assert Image.open(written).size == (8, 6)

    def test_batch_same_stem_kept_apart(self, tmp_path: Path) -> None:
        src = tmp_path / "src"
        src.mkdir()
        Image.new("RGB", (4, 4), (0, 0, 0)).save(src / "a.png")
        Image.new("RGB", (6, 2), (255, 255, 255)).save(src / "a.jpg")
        Image.new("RGB", (2, 2), (0, 0, 0)).save(src / "b.png")
        out_dir = tmp_path / "results"
        result = runner.invoke(app, ["batch", "-i", str(src), "-o", str(out_dir), "-m", "none"])
        assert result.exit_code == 0, result.output
        assert Image.open(out_dir / "a_png_none.png").size == (4, 4)
        assert Image.open(out_dir / "a_jpg_none.png").size == (6, 2)
        assert (out_dir / "b_none.png").exists()
        assert not (out_dir / "a_none.png").exists()

    def test_batch_empty_folder(self, tmp_path: Path) -> None:
        empty = tmp_path / "empty"
        empty.mkdir()
        result = runner.invoke(app, ["batch", "-i", str(empty), "-o", str(tmp_path / "o")])
        assert result.exit_code == 0
        assert "No images found" in result.output
