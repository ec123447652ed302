"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import logging
import time
from collections import Counter
from pathlib import Path

import numpy as np
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.table import Table

from pixel_dither.config import (
    ERROR_DIFFUSION_METHODS,
    METHODS,
    ORDERED_METHODS,
    DitherConfig,
    OutputConfig,
)
from pixel_dither.image_io import (
    compose_rgba,
    load_rgba,
    make_comparison_grid,
    save_upscaled,
)
from pixel_dither.kernels import KERNELS
from pixel_dither.palette import DEFAULT_HEX, Palette
from pixel_dither.pipeline import quantize
from pixel_dither.stats import color_statistics

app = typer.Typer(
    name="pixel-dither",
    help="Quantise images onto a fixed palette with error-diffusion or ordered dithering.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=True)],
    )


def _collect_images(folder: Path, extensions: frozenset[str]) -> list[Path]:
    if not folder.exists():
        return []
    return sorted(
        f for f in folder.iterdir()
        if f.is_file() and f.suffix.lower() in extensions
    )


def _read_palette_file(path: Path) -> list[str]:
    """One hex colour per line; blank lines and ``;`` or ``//`` comments skipped."""
    colors = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith(";") or line.startswith("//"):
            continue
        colors.append(line.split()[0])
    return colors


def _build_palette(colors: str | None, palette_file: Path | None) -> Palette:
    if palette_file is not None:
        hex_list = _read_palette_file(palette_file)
    elif colors:
        hex_list = [c.strip() for c in colors.split(",") if c.strip()]
    else:
        hex_list = list(DEFAULT_HEX)
    return Palette.from_hex(hex_list)


def _build_config(
    method: str,
    strength: float,
    alpha_threshold: int,
    serpentine: bool,
    intensity: int | None,
    color_distance: str,
    seed: int | None,
) -> DitherConfig:
    try:
        return DitherConfig(
            method=method,
            strength=strength,
            alpha_threshold=alpha_threshold,
            serpentine=serpentine,
            intensity=intensity,
            color_distance=color_distance,
            seed=seed,
        )
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc


def _dither_file(
    img_path: Path,
    output: Path,
    palette: Palette,
    cfg: DitherConfig,
    out_cfg: OutputConfig,
) -> tuple[np.ndarray, np.ndarray]:
    rgb, alpha = load_rgba(img_path, out_cfg.max_side)
    h, w = rgb.shape[:2]

    with Progress(
        TextColumn("[cyan]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
    ) as bar:
        task = bar.add_task(f"{cfg.method} {w}x{h}", total=1.0)
        result = quantize(
            rgb, alpha, palette, cfg,
            progress=lambda frac: bar.update(task, completed=frac),
        )

    rgba = compose_rgba(
        result, alpha, cfg.alpha_threshold, out_cfg.remove_semitransparent,
    )
    save_upscaled(rgba, output, out_cfg.pixel_upscale)

    if out_cfg.save_comparison:
        comp_path = output.with_name(f"{output.stem}_comparison{output.suffix}")
        make_comparison_grid(
            np.dstack([rgb, alpha]), rgba, comp_path,
            out_cfg.pixel_upscale, label=cfg.method,
        )
    return result, alpha


def _print_stats(result: np.ndarray, alpha: np.ndarray, threshold: int) -> None:
    table = Table(title="Colour usage")
    table.add_column("Name")
    table.add_column("Hex")
    table.add_column("Pixels", justify="right")
    for stat in color_statistics(result, alpha, threshold):
        table.add_row(stat.name, f"[on {stat.hex}]  [/] {stat.hex}", f"{stat.count:,}")
    console.print(table)


# Defaults come from the config dataclasses - single source of truth
_DEFAULTS = DitherConfig()
_OUT_DEFAULTS = OutputConfig()

MAX_SIDE_HELP = (
    "Downscale so the longest side fits. Error diffusion matches one pixel "
    "at a time, so full-size photos take minutes; 256-512 is typical."
)


def _output_stems(images: list[Path]) -> dict[Path, str]:
    """Output name stem per input; the source extension is appended on clashes."""
    seen = Counter(p.stem for p in images)
    return {
        p: p.stem if seen[p.stem] == 1 else f"{p.stem}_{p.suffix.lstrip('.')}"
        for p in images
    }


# -- single-image command ----------------------------------------------

@app.command()
def single(
    source: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="Path to the source image",
    ),
    output: Path = typer.Option(Path("output/dithered.png"), "--output", "-o"),
    method: str = typer.Option(_DEFAULTS.method, "--method", "-m", help="See 'methods'"),
    colors: str | None = typer.Option(
        None, "--colors", "-c",
        help="Comma-separated hex palette, e.g. '#000000,#ffffff'",
    ),
    palette_file: Path | None = typer.Option(
        None, "--palette-file", exists=True, dir_okay=False,
        help="Text file with one hex colour per line",
    ),
    strength: float = typer.Option(_DEFAULTS.strength, "--strength", "-s"),
    intensity: int | None = typer.Option(
        _DEFAULTS.intensity, "--intensity", help="Ordered / random amplitude",
    ),
    alpha_threshold: int = typer.Option(_DEFAULTS.alpha_threshold, "--alpha-threshold", "-a"),
    serpentine: bool = typer.Option(_DEFAULTS.serpentine, "--serpentine/--raster"),
    color_distance: str = typer.Option(
        _DEFAULTS.color_distance, "--distance", help="'lab', 'rgb' or 'compuphase'",
    ),
    seed: int | None = typer.Option(_DEFAULTS.seed, "--seed"),
    max_side: int | None = typer.Option(
        _OUT_DEFAULTS.max_side, "--max-side", help=MAX_SIDE_HELP,
    ),
    upscale: int = typer.Option(_OUT_DEFAULTS.pixel_upscale, "--upscale", "-u"),
    opaque: bool = typer.Option(
        _OUT_DEFAULTS.remove_semitransparent, "--opaque/--keep-alpha",
        help="Remove semi-transparency from kept pixels",
    ),
    compare: bool = typer.Option(_OUT_DEFAULTS.save_comparison, "--compare/--no-compare"),
    stats: bool = typer.Option(False, "--stats", help="Print colour usage table"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Dither a single image."""
    _setup_logging(verbose)

    cfg = _build_config(
        method, strength, alpha_threshold, serpentine, intensity, color_distance, seed,
    )
    out_cfg = OutputConfig(
        max_side=max_side,
        pixel_upscale=upscale,
        remove_semitransparent=opaque,
        save_comparison=compare,
    )
    try:
        palette = _build_palette(colors, palette_file)
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc

    output.parent.mkdir(parents=True, exist_ok=True)
    t0 = time.perf_counter()
    result, alpha = _dither_file(source, output, palette, cfg, out_cfg)

    h, w = result.shape[:2]
    console.print(
        f"[green]✓[/green] Saved to {output}  "
        f"[dim]{w}x{h}  {len(palette)} colours  "
        f"time={time.perf_counter() - t0:.1f}s[/dim]"
    )
    if stats:
        _print_stats(result, alpha, cfg.alpha_threshold)


# -- batch command -----------------------------------------------------

@app.command()
def batch(
    input_dir: Path = typer.Option(
        _OUT_DEFAULTS.input_dir, "--input", "-i", help="Folder with source images",
    ),
    output_dir: Path = typer.Option(
        _OUT_DEFAULTS.output_dir, "--output", "-o", help="Results folder",
    ),
    method: str = typer.Option(_DEFAULTS.method, "--method", "-m"),
    colors: str | None = typer.Option(None, "--colors", "-c"),
    palette_file: Path | None = typer.Option(
        None, "--palette-file", exists=True, dir_okay=False,
    ),
    strength: float = typer.Option(_DEFAULTS.strength, "--strength", "-s"),
    intensity: int | None = typer.Option(_DEFAULTS.intensity, "--intensity"),
    alpha_threshold: int = typer.Option(_DEFAULTS.alpha_threshold, "--alpha-threshold", "-a"),
    serpentine: bool = typer.Option(_DEFAULTS.serpentine, "--serpentine/--raster"),
    color_distance: str = typer.Option(_DEFAULTS.color_distance, "--distance"),
    seed: int | None = typer.Option(_DEFAULTS.seed, "--seed"),
    max_side: int | None = typer.Option(
        _OUT_DEFAULTS.max_side, "--max-side", help=MAX_SIDE_HELP,
    ),
    upscale: int = typer.Option(_OUT_DEFAULTS.pixel_upscale, "--upscale", "-u"),
    opaque: bool = typer.Option(_OUT_DEFAULTS.remove_semitransparent, "--opaque/--keep-alpha"),
    compare: bool = typer.Option(_OUT_DEFAULTS.save_comparison, "--compare/--no-compare"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Dither all images in INPUT_DIR and write results to OUTPUT_DIR."""
    _setup_logging(verbose)
    logger = logging.getLogger("pixel_dither")

    cfg = _build_config(
        method, strength, alpha_threshold, serpentine, intensity, color_distance, seed,
    )
    out_cfg = OutputConfig(
        max_side=max_side,
        pixel_upscale=upscale,
        remove_semitransparent=opaque,
        save_comparison=compare,
        input_dir=input_dir,
        output_dir=output_dir,
    )
    try:
        palette = _build_palette(colors, palette_file)
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc

    images = _collect_images(input_dir, out_cfg.SUPPORTED_EXTENSIONS)
    if not images:
        console.print(f"\n[yellow]No images found in {input_dir}/[/yellow]")
        console.print("Place .jpg / .png / ... files there and re-run.\n")
        raise typer.Exit(0)

    output_dir.mkdir(parents=True, exist_ok=True)

    console.print(Panel.fit(
        f"[bold]PIXEL DITHER[/bold]\n"
        f"Method: {cfg.method}  |  Distance: {cfg.color_distance}\n"
        f"Palette: {len(palette)} colours  |  Images: {len(images)}",
        border_style="cyan",
    ))

    stems = _output_stems(images)
    for idx, img_path in enumerate(images, 1):
        console.rule(f"[bold cyan][{idx}/{len(images)}] {img_path.name}[/bold cyan]")
        t0 = time.perf_counter()
        out_path = output_dir / f"{stems[img_path]}_{cfg.method}.{out_cfg.output_format}"
        result, _ = _dither_file(img_path, out_path, palette, cfg, out_cfg)
        h, w = result.shape[:2]
        logger.debug("Wrote %s", out_path)
        console.print(
            f"  [green]✓[/green] {out_path.name}  "
            f"[dim]{w}x{h}  time={time.perf_counter() - t0:.1f}s[/dim]"
        )

    console.print(Panel.fit(
        f"[bold green]ALL DONE[/bold green] - results in [bold]{output_dir}/[/bold]",
        border_style="green",
    ))


# -- methods command ---------------------------------------------------

@app.command()
def methods() -> None:
    """List the available dithering methods."""
    table = Table(title="Dithering methods")
    table.add_column("Method")
    table.add_column("Kind")
    table.add_column("Details")
    for name in METHODS:
        if name in ERROR_DIFFUSION_METHODS:
            kernel = KERNELS[name]
            details = f"{kernel.name}, {len(kernel.offsets)} taps / {kernel.denominator}"
            table.add_row(name, "error diffusion", details)
        elif name in ORDERED_METHODS:
            table.add_row(name, "ordered", "4x4 Bayer" if name == "bayer" else "8x8 halftone")
        elif name == "random":
            table.add_row(name, "stochastic", "uniform per-channel noise")
        else:
            table.add_row(name, "direct", "nearest colour only")
    console.print(table)


if __name__ == "__main__":
    app()
