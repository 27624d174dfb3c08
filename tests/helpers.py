import numpy as np
import pandas as pd
import rasterio
from rasterio.transform import from_origin

CRS = "EPSG:5070"
CELL = 30

GRIDS = {
    2001: np.array(
        [
            [11, 11, 41, 41],
            [11, 11, 41, 41],
            [11, 11, 11, 41],
            [0, 11, 11, 41],
        ],
        dtype="uint8",
    ),
    2016: np.array(
        [
            [11, 21, 41, 41],
            [11, 21, 41, 41],
            [11, 11, 41, 41],
            [0, 11, 21, 41],
        ],
        dtype="uint8",
    ),
}


def write_raster(path, data, *, nodata=0):
    transform = from_origin(0, data.shape[0] * CELL, CELL, CELL)
    with rasterio.open(
        path,
        "w",
        driver="GTiff",
        height=data.shape[0],
        width=data.shape[1],
        count=1,
        dtype=data.dtype,
        crs=CRS,
        transform=transform,
        nodata=nodata,
    ) as dst:
        dst.write(data, 1)
    return path


def make_base_table() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "code": [11, 21, 41],
            "class": ["Water", "Developed", "Forest"],
            "description": ["Open Water", "Developed, Open Space", "Deciduous Forest"],
            "color": ["#466b9f", "#dec5c5", "#68ab5f"],
        }
    )
