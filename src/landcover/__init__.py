"""Summaries and visualisations of multi-year categorical land-cover rasters."""

from .errors import LandCoverError, LegendError, RasterError
from .legend import class_colors, color_map, load_legend, observed_categories
from .raster import Layer, LayerSet, frequency_of, load_layers, read_layer, zonal_frequency
from .summary import (
    CELL_AREA_SQ_MI,
    add_derived_metrics,
    aggregate_counts,
    aggregate_frequencies,
    class_summary,
    count_column,
    count_columns,
    proportions,
    style_summary,
)

__all__ = [
    "CELL_AREA_SQ_MI",
    "LandCoverError",
    "Layer",
    "LayerSet",
    "LegendError",
    "RasterError",
    "add_derived_metrics",
    "aggregate_counts",
    "aggregate_frequencies",
    "class_colors",
    "class_summary",
    "color_map",
    "count_column",
    "count_columns",
    "frequency_of",
    "load_layers",
    "load_legend",
    "observed_categories",
    "proportions",
    "read_layer",
    "style_summary",
    "zonal_frequency",
]
