"""Maps, animations and charts for land-cover layers and summary tables.

Matplotlib renders the maps and the GIF, seaborn the change chart and plotly the
treemaps. Every function returns the figure (or axes) it draws so callers can
tweak or save it with :func:`save_figure`.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Dict, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import plotly.express as px
import seaborn as sns
from matplotlib.animation import FuncAnimation, PillowWriter
from matplotlib.colors import BoundaryNorm, ListedColormap
from matplotlib.patches import Patch
from rasterio.plot import plotting_extent, show

from .errors import LandCoverError
from .legend import class_colors, observed_categories
from .raster import Layer
from .summary import count_column

LOGGER = logging.getLogger(__name__)


def _extent(layer: Layer):
    if layer.transform is None:
        return None
    return plotting_extent(layer.data, layer.transform)


def plot_layers(layers: Sequence[Layer], *, max_cols: int = 4, panel_size: float = 4.0):
    """One panel per layer with rasterio's default colouring."""

    if not layers:
        raise LandCoverError("Nothing to plot: no layers given.")
    ncols = min(max_cols, len(layers))
    nrows = math.ceil(len(layers) / ncols)
    fig, axs = plt.subplots(
        nrows, ncols, figsize=(panel_size * ncols, panel_size * nrows), squeeze=False
    )
    axes = axs.ravel()
    for ax, layer in zip(axes, layers):
        data = layer.data
        if layer.nodata is not None:
            data = np.ma.masked_equal(data, layer.nodata)
        show(
            data,
            ax=ax,
            transform=layer.transform,
            with_bounds=layer.transform is not None,
            title=str(layer.label),
        )
    # Hide axes left over when the grid is larger than the number of layers.
    for ax in axes[len(layers):]:
        ax.set_axis_off()
    return fig


def plot_categorical(
    layer: Layer,
    legend: pd.DataFrame,
    *,
    ax=None,
    title: Optional[str] = None,
    show_legend: bool = True,
):
    """Draw a layer with exact legend colours.

    Only the categories present in ``layer`` get a colour and a legend entry;
    cells holding codes the legend does not know are left blank.
    """

    present = observed_categories(legend, layer.codes()).sort_values("code")
    if present.empty:
        raise LandCoverError(f"None of the codes in layer {layer.label} are in the legend.")

    codes = present["code"].astype(int).tolist()
    cmap = ListedColormap(present["color"].tolist())
    norm = BoundaryNorm(codes + [codes[-1] + 1], cmap.N)
    data = np.ma.masked_where(~np.isin(layer.data, codes), layer.data)

    if ax is None:
        _, ax = plt.subplots(figsize=(8, 6))
    ax.imshow(data, cmap=cmap, norm=norm, interpolation="nearest", extent=_extent(layer))
    ax.set_title(title if title is not None else str(layer.label))
    ax.set_axis_off()

    if show_legend:
        handles = [
            Patch(facecolor=row.color, edgecolor="none", label=f"{row.code} {row.description}")
            for row in present.itertuples(index=False)
        ]
        ax.legend(
            handles=handles,
            loc="center left",
            bbox_to_anchor=(1.02, 0.5),
            frameon=False,
            fontsize="small",
        )
    return ax


def animate_layers(
    layers: Sequence[Layer],
    legend: pd.DataFrame,
    path: Path,
    *,
    interval: int = 800,
    width: int = 600,
    dpi: int = 100,
) -> Path:
    """Write an animated GIF cycling through ``layers`` in order.

    Parameters
    ----------
    interval:
        Display time of each frame in milliseconds.
    width:
        Width of the GIF in pixels.
    """

    if not layers:
        raise LandCoverError("Nothing to animate: no layers given.")

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    inches = width / dpi
    fig, ax = plt.subplots(figsize=(inches, inches * 0.6), dpi=dpi)
    fig.subplots_adjust(left=0.02, right=0.6, top=0.9, bottom=0.02)

    def _update(i):
        ax.clear()
        plot_categorical(layers[i], legend, ax=ax, title=str(layers[i].label))

    anim = FuncAnimation(fig, _update, frames=len(layers), interval=interval, repeat=True)
    anim.save(path, writer=PillowWriter(fps=1000 / interval), dpi=dpi)
    plt.close(fig)
    LOGGER.info("Wrote %d-frame animation to %s", len(layers), path)
    return path


def _treemap_data(summary: pd.DataFrame, year: int) -> pd.DataFrame:
    column = count_column(year)
    if column not in summary.columns:
        raise LandCoverError(f"No count column for year {year} in the summary table.")
    data = summary.dropna(subset=[column])
    return data.loc[data[column] > 0]


def _class_palette(summary: pd.DataFrame, legend: Optional[pd.DataFrame]) -> Dict[str, str]:
    return class_colors(legend if legend is not None else summary)


def treemap(
    summary: pd.DataFrame,
    year: int,
    legend: Optional[pd.DataFrame] = None,
    *,
    title: Optional[str] = None,
):
    """Flat treemap of the classes' share of ``year`` (descriptions summed per class)."""

    column = count_column(year)
    data = (
        _treemap_data(summary, year)
        .groupby("class", as_index=False, sort=False)[column]
        .sum()
    )
    fig = px.treemap(
        data,
        path=["class"],
        values=column,
        color="class",
        color_discrete_map=_class_palette(summary, legend),
        title=title or f"Land cover by class, {year}",
    )
    fig.update_traces(textinfo="label+percent root")
    return fig


def treemap_hierarchical(
    summary: pd.DataFrame,
    year: int,
    legend: Optional[pd.DataFrame] = None,
    *,
    title: Optional[str] = None,
):
    """Two-level treemap: bordered class groups containing their descriptions."""

    column = count_column(year)
    fig = px.treemap(
        _treemap_data(summary, year),
        path=["class", "description"],
        values=column,
        color="class",
        color_discrete_map=_class_palette(summary, legend),
        title=title or f"Land cover by class and description, {year}",
    )
    fig.update_traces(
        textinfo="label+percent root",
        marker_line_width=2,
        marker_line_color="white",
        tiling_pad=4,
    )
    return fig


def plot_area_change(summary: pd.DataFrame, *, label: str = "description"):
    """Horizontal bar chart of ``area_change`` per category."""

    if "area_change" not in summary.columns:
        raise LandCoverError("Run add_derived_metrics before plotting area change.")
    data = summary.dropna(subset=["area_change"]).sort_values("area_change")
    palette = dict(zip(data[label], data["color"])) if "color" in data.columns else None

    fig, ax = plt.subplots(figsize=(8, 1.5 + 0.4 * len(data)))
    sns.barplot(
        data=data,
        x="area_change",
        y=label,
        hue=label,
        palette=palette,
        legend=False,
        ax=ax,
    )
    ax.axvline(0, color="0.3", linewidth=0.8)
    ax.set_xlabel("Area change (sq mi)")
    ax.set_ylabel("")
    fig.tight_layout()
    return fig


def save_figure(fig, path: Path, *, dpi: int = 150) -> Path:
    """Save a matplotlib or plotly figure, choosing the writer from the suffix."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if hasattr(fig, "write_html"):
        if path.suffix.lower() == ".html":
            fig.write_html(path)
        else:
            # Static plotly export goes through kaleido (the ``images`` extra).
            fig.write_image(path)
    else:
        fig.savefig(path, dpi=dpi, bbox_inches="tight")
        plt.close(fig)
    LOGGER.info("Saved %s", path)
    return path
