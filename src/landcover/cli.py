"""Command-line interface for the land-cover summary toolkit."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from .errors import LandCoverError
from .pipeline import RunConfig, SummaryResult, render_outputs, run_summary
from .summary import CELL_AREA_SQ_MI, format_summary

app = typer.Typer(help="Summarise and visualise multi-year land-cover rasters")


@app.callback()
def _configure(
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Increase log verbosity."),
) -> None:
    level = logging.DEBUG if verbose > 1 else logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _run(config: RunConfig) -> SummaryResult:
    try:
        return run_summary(config)
    except LandCoverError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _echo_summary(result: SummaryResult) -> None:
    """Pretty-print the per-description and per-class tables."""

    typer.secho(f"\nYears: {', '.join(map(str, result.layers.labels))}", fg=typer.colors.CYAN)

    typer.secho("\nLand cover by description", fg=typer.colors.CYAN)
    typer.echo(format_summary(result.summary.drop(columns="color")).to_string(index=False))

    typer.secho("\nLand cover by class", fg=typer.colors.CYAN)
    typer.echo(format_summary(result.by_class.drop(columns="color")).to_string(index=False))


@app.command()
def summarize(
    data_dir: Path = typer.Argument(..., help="Directory of yearly land-cover rasters."),
    pattern: str = typer.Option("*.tif", help="Glob pattern selecting the raster files."),
    legend: Optional[Path] = typer.Option(
        None, help="CSV legend (code,class,description,color). Defaults to NLCD."
    ),
    aoi: Optional[Path] = typer.Option(None, help="Optional vector file to clip rasters to."),
    cell_area: float = typer.Option(CELL_AREA_SQ_MI, help="Area of one cell in square miles."),
    output: Optional[Path] = typer.Option(None, help="Optional CSV path for the summary table."),
) -> None:
    """Count pixels per category and year and print the change metrics."""

    config = RunConfig(
        data_dir=data_dir, pattern=pattern, legend_path=legend, aoi_path=aoi, cell_area=cell_area
    )
    result = _run(config)
    _echo_summary(result)
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        result.summary.to_csv(output, index=False)
        typer.echo(f"Saved summary table to {output}")


@app.command()
def render(
    data_dir: Path = typer.Argument(..., help="Directory of yearly land-cover rasters."),
    output_dir: Path = typer.Option(Path("outputs"), help="Directory for the rendered artefacts."),
    pattern: str = typer.Option("*.tif", help="Glob pattern selecting the raster files."),
    legend: Optional[Path] = typer.Option(
        None, help="CSV legend (code,class,description,color). Defaults to NLCD."
    ),
    aoi: Optional[Path] = typer.Option(None, help="Optional vector file to clip rasters to."),
    interval: int = typer.Option(800, help="GIF frame duration in milliseconds."),
    gif_width: int = typer.Option(600, help="GIF width in pixels."),
    cell_area: float = typer.Option(CELL_AREA_SQ_MI, help="Area of one cell in square miles."),
) -> None:
    """Write maps, the animation, treemaps and summary tables."""

    config = RunConfig(
        data_dir=data_dir,
        pattern=pattern,
        output_dir=output_dir,
        legend_path=legend,
        aoi_path=aoi,
        interval=interval,
        gif_width=gif_width,
        cell_area=cell_area,
    )
    result = _run(config)
    try:
        written = render_outputs(result, config)
    except LandCoverError as exc:
        typer.secho(f"Rendering failed: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    for name, path in written.items():
        typer.echo(f"Saved {name} to {path}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
