"""
Command-line interface for Candlesight.
"""

import json
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import Config
from .labels.placement import LabelPlacer, compute_candle_bounds
from .logger import get_logger, get_scan_adapter
from .models.candles import CandleSeries
from .models.labels import Box
from .models.patterns import PATTERN_INFO, PatternBias
from .patterns.pattern_config import (
    PRESETS,
    DetectionOptions,
    PatternConfig,
    enable_patterns,
    get_preset,
)
from .patterns.scanner import EmptySeriesError, PatternScanner

console = Console()

BIAS_STYLES = {
    PatternBias.BULLISH: "green",
    PatternBias.BEARISH: "red",
    PatternBias.NEUTRAL: "yellow",
}


@click.group()
@click.version_option(version=__version__, prog_name="candlesight")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to .env configuration file"
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging"
)
@click.pass_context
def main(ctx: click.Context, config: Optional[Path], verbose: bool) -> None:
    """
    Candlesight: candlestick pattern scanner

    Detects candlestick patterns in OHLC data and lays out chart labels
    for them.
    """
    ctx.ensure_object(dict)

    try:
        if config:
            ctx.obj["config"] = Config.load_from_env(str(config))
        else:
            ctx.obj["config"] = Config.load_from_env()
    except (ValidationError, ValueError) as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)

    if verbose:
        ctx.obj["config"].logging.level = "DEBUG"

    logging_config = ctx.obj["config"].logging
    ctx.obj["logger"] = get_logger("candlesight", logging_config.level, logging_config.file_path)


def _resolve_pattern_config(
    config: Config,
    preset: Optional[str],
    patterns: Tuple[str, ...],
    thresholds: dict,
) -> PatternConfig:
    """Explicit --pattern list beats --preset, which beats the configured preset."""
    overrides = DetectionOptions(**{k: v for k, v in thresholds.items() if v is not None})
    options = overrides.overlay(config.detection.detection_options())
    replace = config.detection.replace_series_label

    if patterns:
        return enable_patterns(*patterns, replace_series_label=replace, detection_options=options)
    return get_preset(preset or config.detection.preset,
                      replace_series_label=replace, detection_options=options)


def _load_series(candles_file: Path) -> CandleSeries:
    try:
        return CandleSeries.load_from_file(candles_file)
    except (ValidationError, ValueError, OSError) as e:
        click.echo(f"Error loading candles from {candles_file}: {e}", err=True)
        sys.exit(1)


def detection_options(func):
    """Shared pattern selection and threshold options."""
    options = [
        click.option("--preset", "-p", type=click.Choice(sorted(PRESETS)), help="Pattern preset"),
        click.option("--pattern", "patterns", multiple=True, help="Enable a single pattern (repeatable)"),
        click.option("--doji-threshold", type=float, help="Max body/range ratio for doji"),
        click.option("--shadow-ratio", type=float, help="Min shadow/body ratio"),
        click.option("--engulfing-min-size", type=float, help="Engulfing body size floor"),
        click.option("--shadow-tolerance", type=float, help="Max shadow/range for marubozu"),
        click.option("--body-size-ratio", type=float, help="Max body/range for small bodies"),
        click.option("--tweezer-tolerance", type=float, help="Relative tolerance for tweezers"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _thresholds(kwargs: dict) -> dict:
    names = ("doji_threshold", "shadow_ratio", "engulfing_min_size",
             "shadow_tolerance", "body_size_ratio", "tweezer_tolerance")
    return {name: kwargs.get(name) for name in names}


def _scan(ctx: click.Context, candles_file: Path, preset, patterns, kwargs):
    config: Config = ctx.obj["config"]
    series = _load_series(candles_file)

    try:
        pattern_config = _resolve_pattern_config(config, preset, patterns, _thresholds(kwargs))
    except (ValidationError, ValueError) as e:
        click.echo(f"Invalid pattern selection: {e}", err=True)
        sys.exit(1)

    log = get_scan_adapter(ctx.obj["logger"], series=series.name, preset=preset or config.detection.preset)
    log.debug(f"Scanning {len(series.candles)} candles for {len(pattern_config.enabled_patterns)} patterns")

    try:
        results = PatternScanner(pattern_config).scan(series)
    except EmptySeriesError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    return series, pattern_config, results


@main.command()
@click.argument("candles_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@detection_options
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.pass_context
def scan(ctx: click.Context, candles_file: Path, preset: Optional[str],
         patterns: Tuple[str, ...], as_json: bool, **kwargs) -> None:
    """Scan CANDLES_FILE (JSON or CSV) for candlestick patterns."""
    series, _, results = _scan(ctx, candles_file, preset, patterns, kwargs)

    if as_json:
        payload = {
            str(index): [m.pattern_type.value for m in matches]
            for index, matches in sorted(results.items())
        }
        click.echo(json.dumps(payload, indent=2))
        return

    if not results:
        console.print(f"[yellow]No patterns found in {series.name}[/yellow]")
        return

    table = Table(title=f"Candlestick patterns: {series.name}")
    table.add_column("Index", justify="right", style="cyan")
    table.add_column("Close", justify="right")
    table.add_column("Patterns")

    for index, matches in sorted(results.items()):
        names = ", ".join(
            f"[{BIAS_STYLES[m.bias]}]{m.display_name}[/{BIAS_STYLES[m.bias]}]" for m in matches
        )
        close = series.candles[index].close
        table.add_row(str(index), "" if close is None else str(close), names)

    console.print(table)
    total = sum(len(m) for m in results.values())
    console.print(f"\n[bold]{total}[/bold] patterns at [bold]{len(results)}[/bold] of {len(series.candles)} candles")


@main.command()
@click.argument("candles_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@detection_options
@click.option("--width", type=click.FloatRange(min=1), default=800.0, show_default=True, help="Canvas width in pixels")
@click.option("--height", type=click.FloatRange(min=1), default=400.0, show_default=True, help="Canvas height in pixels")
@click.option("--json", "as_json", is_flag=True, help="Print label blocks as JSON")
@click.pass_context
def layout(ctx: click.Context, candles_file: Path, preset: Optional[str],
           patterns: Tuple[str, ...], width: float, height: float,
           as_json: bool, **kwargs) -> None:
    """Scan CANDLES_FILE and lay out the pattern labels on a canvas."""
    series, pattern_config, results = _scan(ctx, candles_file, preset, patterns, kwargs)
    config: Config = ctx.obj["config"]

    canvas = Box(0.0, 0.0, width, height)
    bounds = compute_candle_bounds(series.candles, canvas)
    blocks = LabelPlacer(config.label_layout_options()).place(
        results, bounds, canvas,
        replace_series_label=pattern_config.replace_series_label,
    )

    if as_json:
        click.echo(json.dumps([block.model_dump(mode="json") for block in blocks], indent=2))
        return

    table = Table(title=f"Label layout: {series.name} ({width:g}x{height:g})")
    table.add_column("Index", justify="right", style="cyan")
    table.add_column("Anchor")
    table.add_column("Box (l, t, r, b)")
    table.add_column("Lines")

    for block in blocks:
        box = block.box
        coords = f"{box.left:.1f}, {box.top:.1f}, {box.right:.1f}, {box.bottom:.1f}"
        style = BIAS_STYLES[block.bias]
        anchor = block.anchor.value + (" [red](overlap)[/red]" if block.overlapping else "")
        table.add_row(str(block.index), anchor, coords, f"[{style}]" + "\n".join(block.lines) + f"[/{style}]")

    console.print(table)


@main.command(name="patterns")
def list_patterns() -> None:
    """List supported candlestick patterns."""
    table = Table(title="Supported patterns")
    table.add_column("Name", style="cyan")
    table.add_column("Display")
    table.add_column("Label")
    table.add_column("Candles", justify="right")
    table.add_column("Bias")
    table.add_column("Categories")

    for pattern_type, info in PATTERN_INFO.items():
        style = BIAS_STYLES[info.bias]
        table.add_row(
            pattern_type.value,
            info.display_name,
            info.label,
            str(info.window),
            f"[{style}]{info.bias.value}[/{style}]",
            ", ".join(sorted(c.value for c in info.categories)),
        )

    console.print(table)


@main.command()
def presets() -> None:
    """List pattern presets and the patterns they enable."""
    table = Table(title="Pattern presets")
    table.add_column("Preset", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("Patterns")

    for name, factory in PRESETS.items():
        enabled = factory().enabled_patterns
        table.add_row(name, str(len(enabled)), ", ".join(p.value for p in enabled))

    console.print(table)


@main.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the effective configuration."""
    config: Config = ctx.obj["config"]
    options = config.pattern_config().resolved_options()

    console.print("[bold]Candlesight configuration[/bold]")
    console.print(f"  Preset: {config.detection.preset}")
    console.print(f"  Replace series labels: {config.detection.replace_series_label}")
    for name, value in options.to_dict().items():
        console.print(f"  {name}: {value}")
    console.print(f"  Log level: {config.logging.level}")


if __name__ == "__main__":
    main()
