import matplotlib.pyplot as plt
import pytest
from PIL import Image

from helpers import make_base_table
from landcover.errors import LandCoverError
from landcover.legend import load_legend
from landcover.plotting import (
    animate_layers,
    plot_area_change,
    plot_categorical,
    plot_layers,
    save_figure,
    treemap,
    treemap_hierarchical,
)
from landcover.raster import load_layers
from landcover.summary import add_derived_metrics, aggregate_frequencies


@pytest.fixture
def layers(raster_dir):
    return load_layers(raster_dir)


@pytest.fixture
def summary(layers):
    return add_derived_metrics(aggregate_frequencies(layers, make_base_table()))


def test_plot_layers_draws_one_titled_panel_per_layer(layers):
    fig = plot_layers(layers)
    titles = [ax.get_title() for ax in fig.axes if ax.get_title()]
    assert titles == ["2001", "2016"]
    plt.close(fig)


def test_plot_categorical_legend_lists_only_codes_in_layer(layers):
    ax = plot_categorical(layers[0], load_legend())
    labels = [text.get_text() for text in ax.get_legend().get_texts()]
    assert labels == ["11 Open Water", "41 Deciduous Forest"]
    assert ax.get_title() == "2001"
    plt.close(ax.figure)


def test_plot_categorical_rejects_layer_without_known_codes(layers):
    legend = load_legend()
    with pytest.raises(LandCoverError):
        plot_categorical(layers[0], legend.loc[legend["code"] == 95])


def test_animate_layers_writes_one_frame_per_layer(layers, tmp_path):
    path = animate_layers(layers, load_legend(), tmp_path / "lc.gif", interval=500, width=400)
    with Image.open(path) as gif:
        assert gif.n_frames == len(layers)
        assert gif.size[0] == 400
        durations = []
        for frame in range(gif.n_frames):
            gif.seek(frame)
            durations.append(gif.info["duration"])
    assert durations == [500] * len(layers)


def test_flat_treemap_aggregates_by_class(summary):
    fig = treemap(summary, 2001)
    trace = fig.data[0]
    assert set(trace.labels) == {"Water", "Forest"}
    values = dict(zip(trace.labels, trace.values))
    assert values["Water"] == 9
    assert values["Forest"] == 6


def test_hierarchical_treemap_carries_class_colours(summary):
    legend = load_legend()
    fig = treemap_hierarchical(summary, 2016, legend)
    trace = fig.data[0]
    assert "Forest/Deciduous Forest" in trace.ids
    assert "Developed/Developed, Open Space" in trace.ids
    colors = dict(zip(trace.ids, trace.marker.colors))
    assert colors["Forest/Deciduous Forest"] == colors["Forest"] == "#68ab5f"
    assert colors["Water/Open Water"] == "#466b9f"
    assert trace.marker.line.width == 2


def test_treemap_rejects_unknown_year(summary):
    with pytest.raises(LandCoverError):
        treemap(summary, 1999)


def test_plot_area_change_skips_undefined_rows(summary, tmp_path):
    fig = plot_area_change(summary)
    labels = [text.get_text() for text in fig.axes[0].get_yticklabels()]
    assert sorted(labels) == ["Deciduous Forest", "Open Water"]
    path = save_figure(fig, tmp_path / "area.png")
    assert path.exists()


def test_save_figure_writes_plotly_html(summary, tmp_path):
    path = save_figure(treemap(summary, 2016), tmp_path / "nested" / "treemap.html")
    html = path.read_text(encoding="utf-8")
    assert "<html>" in html
    assert "\"Forest\"" in html
