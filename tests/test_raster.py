import geopandas as gpd
import numpy as np
import pytest
from shapely.geometry import box

from helpers import CRS, GRIDS, write_raster
from landcover.errors import RasterError
from landcover.raster import (
    Layer,
    LayerSet,
    find_rasters,
    frequency_of,
    load_layers,
    observed_codes,
    read_layer,
    year_from_path,
    zonal_frequency,
)


def make_aoi() -> gpd.GeoDataFrame:
    # Top-left 2x2 block of the 4x4 test grids.
    return gpd.GeoDataFrame(geometry=[box(0, 60, 60, 120)], crs=CRS)


def test_year_from_path_reads_first_year():
    assert year_from_path("NLCD_2016_Land_Cover_L48.tif") == 2016
    assert year_from_path("lc-1992.tif") == 1992
    with pytest.raises(RasterError):
        year_from_path("landcover_v12345.tif")


def test_find_rasters_sorts_by_year(raster_dir):
    paths = find_rasters(raster_dir)
    assert [year_from_path(path) for path in paths] == [2001, 2016]


def test_find_rasters_rejects_empty_or_missing_directory(tmp_path):
    with pytest.raises(RasterError):
        find_rasters(tmp_path)
    with pytest.raises(RasterError):
        find_rasters(tmp_path / "missing")


def test_load_layers_reads_grids_in_order(raster_dir):
    layers = load_layers(raster_dir)
    assert layers.labels == [2001, 2016]
    assert layers.shape == (4, 4)
    np.testing.assert_array_equal(layers.layer(2016).data, GRIDS[2016])
    assert layers[0].nodata == 0
    assert observed_codes(layers) == {11, 21, 41}


def test_frequency_of_excludes_nodata(raster_dir):
    layer = read_layer(raster_dir / "nlcd_2001_landcover.tif")
    counts = frequency_of(layer)
    assert counts.to_dict() == {11: 9, 41: 6}
    assert counts.index.name == "code"


def test_layer_set_requires_chronological_unique_labels():
    grid = np.zeros((2, 2), dtype="uint8")
    with pytest.raises(RasterError):
        LayerSet((Layer(2016, grid), Layer(2001, grid)))
    with pytest.raises(RasterError):
        LayerSet((Layer(2001, grid), Layer(2001, grid)))


def test_check_aligned_detects_shape_mismatch():
    layers = LayerSet(
        (Layer(2001, np.zeros((2, 2), dtype="uint8")), Layer(2016, np.zeros((3, 2), dtype="uint8")))
    )
    with pytest.raises(RasterError):
        layers.check_aligned()
    with pytest.raises(RasterError):
        layers.layer(2011)


def test_read_layer_clips_to_area_of_interest(raster_dir):
    layer = read_layer(raster_dir / "nlcd_2016_landcover.tif", aoi=make_aoi())
    assert frequency_of(layer).to_dict() == {11: 2, 21: 2}


def test_zonal_frequency_counts_categories_inside_aoi(tmp_path):
    path = write_raster(tmp_path / "nlcd_2001.tif", GRIDS[2001])
    counts = zonal_frequency(path, make_aoi())
    assert counts.to_dict() == {11: 4}
