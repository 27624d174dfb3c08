import matplotlib

matplotlib.use("Agg")

import pytest

from helpers import GRIDS, write_raster


@pytest.fixture
def raster_dir(tmp_path):
    directory = tmp_path / "rasters"
    directory.mkdir()
    # Written newest first so loading has to sort by year.
    for year in sorted(GRIDS, reverse=True):
        write_raster(directory / f"nlcd_{year}_landcover.tif", GRIDS[year])
    return directory
