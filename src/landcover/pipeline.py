"""End-to-end workflow: load rasters, summarise, and write every artefact."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import geopandas as gpd
import pandas as pd

from .errors import LandCoverError
from .legend import load_legend, observed_categories
from .plotting import (
    animate_layers,
    plot_area_change,
    plot_categorical,
    plot_layers,
    save_figure,
    treemap,
    treemap_hierarchical,
)
from .raster import LayerSet, load_layers, observed_codes
from .summary import CELL_AREA_SQ_MI, add_derived_metrics, aggregate_frequencies, class_summary

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunConfig:
    """Inputs and rendering options for one run."""

    data_dir: Path
    pattern: str = "*.tif"
    output_dir: Path = Path("outputs")
    legend_path: Optional[Path] = None
    aoi_path: Optional[Path] = None
    interval: int = 800
    gif_width: int = 600
    cell_area: float = CELL_AREA_SQ_MI


@dataclass
class SummaryResult:
    """Everything produced by :func:`run_summary`."""

    layers: LayerSet
    legend: pd.DataFrame
    """Legend restricted to the codes observed in any layer."""

    summary: pd.DataFrame
    """Per-description counts for each year plus derived metrics."""

    by_class: pd.DataFrame
    """Counts and metrics summed per class."""


def load_aoi(path: Optional[Path]) -> Optional[gpd.GeoDataFrame]:
    if path is None:
        return None
    path = Path(path)
    if not path.exists():
        raise LandCoverError(f"Area-of-interest file not found: {path}")
    return gpd.read_file(path)


def run_summary(config: RunConfig) -> SummaryResult:
    """Load the layers of ``config.data_dir`` and build the summary tables."""

    legend = load_legend(config.legend_path)
    layers = load_layers(config.data_dir, config.pattern, aoi=load_aoi(config.aoi_path))
    observed = observed_categories(legend, observed_codes(layers))
    LOGGER.info("%d of %d legend categories observed", len(observed), len(legend))

    counts = aggregate_frequencies(layers, observed)
    summary = add_derived_metrics(counts, cell_area=config.cell_area)
    by_class = class_summary(counts, cell_area=config.cell_area)
    return SummaryResult(layers=layers, legend=observed, summary=summary, by_class=by_class)


def render_outputs(result: SummaryResult, config: RunConfig) -> Dict[str, Path]:
    """Write maps, animation, treemaps and CSV tables to ``config.output_dir``."""

    out = Path(config.output_dir)
    out.mkdir(parents=True, exist_ok=True)
    last = result.layers[-1]
    written: Dict[str, Path] = {}

    written["layers"] = save_figure(plot_layers(result.layers), out / "layers.png")
    ax = plot_categorical(last, result.legend)
    written["map"] = save_figure(ax.figure, out / f"map_{last.label}.png")

    result.layers.check_aligned()
    written["animation"] = animate_layers(
        result.layers,
        result.legend,
        out / "landcover.gif",
        interval=config.interval,
        width=config.gif_width,
    )
    written["treemap"] = save_figure(
        treemap(result.summary, last.label, result.legend), out / "treemap.html"
    )
    written["treemap_hierarchical"] = save_figure(
        treemap_hierarchical(result.summary, last.label, result.legend),
        out / "treemap_hierarchical.html",
    )
    written["area_change"] = save_figure(plot_area_change(result.summary), out / "area_change.png")

    written["summary"] = out / "summary.csv"
    result.summary.to_csv(written["summary"], index=False)
    written["class_summary"] = out / "class_summary.csv"
    result.by_class.to_csv(written["class_summary"], index=False)
    return written
