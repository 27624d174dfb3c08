#!/usr/bin/env python
"""Step-by-step NLCD walkthrough: load, summarise, map, animate and treemap.

Expects yearly NLCD rasters (e.g. NLCD_2001_Land_Cover.tif ... NLCD_2016_Land_Cover.tif)
in ../data/nlcd and writes everything to ../outputs/walkthrough.
"""

import os

from landcover.legend import load_legend, observed_categories
from landcover.plotting import (
    animate_layers,
    plot_categorical,
    plot_layers,
    save_figure,
    treemap,
    treemap_hierarchical,
)
from landcover.raster import load_layers, observed_codes
from landcover.summary import add_derived_metrics, aggregate_frequencies, class_summary

DATA_DIR = os.path.join("..", "data", "nlcd")
OUT_DIR = os.path.join("..", "outputs", "walkthrough")


def main():
    os.makedirs(OUT_DIR, exist_ok=True)

    # 1. Load the yearly rasters and the legend
    layers = load_layers(DATA_DIR, "NLCD_*.tif")
    legend = load_legend()
    print("Years:", layers.labels)

    # 2. Quick look at every year with default colours
    save_figure(plot_layers(layers), os.path.join(OUT_DIR, "layers.png"))

    # 3. Restrict the legend to what is actually in the study area
    observed = observed_categories(legend, observed_codes(layers))
    print(observed[["code", "class", "description"]].to_string(index=False))

    # 4. Map the most recent year with the official colours
    ax = plot_categorical(layers[-1], legend)
    save_figure(ax.figure, os.path.join(OUT_DIR, f"nlcd_{layers[-1].label}.png"))

    # 5. Animate all years
    animate_layers(layers, legend, os.path.join(OUT_DIR, "nlcd.gif"))

    # 6. Pixel counts per year and change metrics
    summary = add_derived_metrics(aggregate_frequencies(layers, observed))
    by_class = class_summary(summary)
    print(summary.drop(columns="color").to_string(index=False))
    print(by_class.drop(columns="color").to_string(index=False))

    # 7. Treemaps of the final year
    year = layers[-1].label
    save_figure(treemap(summary, year, legend), os.path.join(OUT_DIR, "treemap.html"))
    save_figure(
        treemap_hierarchical(summary, year, legend),
        os.path.join(OUT_DIR, "treemap_hierarchical.html"),
    )


if __name__ == "__main__":
    main()
