"""Loading categorical land-cover rasters into chronologically ordered layers."""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, List, Optional, Sequence, Set, Tuple

import numpy as np
import pandas as pd
import rasterio
from rasterio.mask import mask
from rasterstats import zonal_stats

from .errors import RasterError

LOGGER = logging.getLogger(__name__)

_YEAR_PATTERN = re.compile(r"(?<!\d)((?:19|20)\d{2})(?!\d)")


@dataclass(frozen=True, eq=False)
class Layer:
    """One time step of classified land cover."""

    label: int
    """Time-step label, the year of the classification."""

    data: np.ndarray
    """2D grid of category codes."""

    path: Optional[Path] = None
    nodata: Optional[float] = None
    transform: Any = None
    crs: Any = None

    @property
    def shape(self) -> Tuple[int, int]:
        return self.data.shape

    def valid_values(self) -> np.ndarray:
        """Flattened cell values with ``nodata`` cells removed."""

        values = self.data.ravel()
        if self.nodata is not None:
            values = values[values != self.nodata]
        return values

    def codes(self) -> Set[int]:
        return {int(code) for code in np.unique(self.valid_values())}


@dataclass(frozen=True)
class LayerSet:
    """Chronologically ordered layers covering the same study area."""

    layers: Tuple[Layer, ...]

    def __post_init__(self) -> None:
        labels = [layer.label for layer in self.layers]
        if labels != sorted(labels):
            raise RasterError(f"Layers must be in chronological order, got {labels}")
        if len(set(labels)) != len(labels):
            raise RasterError(f"Layer labels must be unique, got {labels}")

    def __iter__(self) -> Iterator[Layer]:
        return iter(self.layers)

    def __len__(self) -> int:
        return len(self.layers)

    def __getitem__(self, index: int) -> Layer:
        return self.layers[index]

    @property
    def labels(self) -> List[int]:
        return [layer.label for layer in self.layers]

    @property
    def shape(self) -> Tuple[int, int]:
        self.check_aligned()
        return self.layers[0].shape

    def layer(self, label: int) -> Layer:
        for layer in self.layers:
            if layer.label == label:
                return layer
        raise RasterError(f"No layer for year {label}; available: {self.labels}")

    def check_aligned(self) -> None:
        """Raise :class:`RasterError` unless every layer has the same grid shape."""

        if not self.layers:
            raise RasterError("The layer set is empty.")
        shapes = {layer.shape for layer in self.layers}
        if len(shapes) > 1:
            raise RasterError(f"Layers do not share grid dimensions: {sorted(shapes)}")


def year_from_path(path: Path) -> int:
    """Extract the first four-digit year (19xx or 20xx) from a file name."""

    match = _YEAR_PATTERN.search(Path(path).name)
    if match is None:
        raise RasterError(f"Could not find a year in file name: {Path(path).name}")
    return int(match.group(1))


def find_rasters(directory: Path, pattern: str = "*.tif") -> List[Path]:
    """List rasters matching ``pattern`` in ``directory``, oldest year first."""

    directory = Path(directory)
    if not directory.is_dir():
        raise RasterError(f"Raster directory not found: {directory}")
    paths = sorted(directory.glob(pattern), key=year_from_path)
    if not paths:
        raise RasterError(f"No rasters matching {pattern!r} in {directory}")
    return paths


def read_layer(path: Path, label: Optional[int] = None, aoi=None) -> Layer:
    """Read band 1 of a categorical raster.

    Parameters
    ----------
    path:
        Single-band GeoTIFF (or any GDAL-readable raster) of integer codes.
    label:
        Year of the layer. Parsed from the file name when omitted.
    aoi:
        Optional GeoDataFrame. The raster is cropped to its geometries and cells
        outside them are set to ``nodata``.
    """

    path = Path(path)
    if label is None:
        label = year_from_path(path)

    with rasterio.open(path) as src:
        nodata = src.nodata
        if aoi is None:
            data = src.read(1)
            transform = src.transform
        else:
            if nodata is None:
                nodata = 0
            shapes = aoi.to_crs(src.crs).geometry if src.crs is not None else aoi.geometry
            clipped, transform = mask(src, shapes, crop=True, filled=True, nodata=nodata)
            data = clipped[0]
        crs = src.crs

    LOGGER.debug("Read %s (%s) with shape %s", path.name, label, data.shape)
    return Layer(label=label, data=data, path=path, nodata=nodata, transform=transform, crs=crs)


def load_layers(directory: Path, pattern: str = "*.tif", aoi=None) -> LayerSet:
    """Load every raster in ``directory`` matching ``pattern`` into a :class:`LayerSet`."""

    layers = tuple(read_layer(path, aoi=aoi) for path in find_rasters(directory, pattern))
    LOGGER.info("Loaded %d layers: %s", len(layers), [layer.label for layer in layers])
    return LayerSet(layers)


def frequency_of(layer: Layer) -> pd.Series:
    """Count the cells holding each category code (``nodata`` cells excluded)."""

    codes, counts = np.unique(layer.valid_values(), return_counts=True)
    return pd.Series(counts, index=pd.Index(codes.astype(int), name="code"), name="count")


def observed_codes(layers: Sequence[Layer]) -> Set[int]:
    """Union of the category codes present in any layer."""

    codes: Set[int] = set()
    for layer in layers:
        codes |= layer.codes()
    return codes


def zonal_frequency(path: Path, aoi) -> pd.Series:
    """Categorical pixel counts of a raster inside the polygons of ``aoi``."""

    with rasterio.open(path) as src:
        crs, nodata = src.crs, src.nodata
    zones = aoi.to_crs(crs) if crs is not None else aoi
    stats = zonal_stats(zones, str(path), categorical=True, nodata=nodata)

    totals: Counter = Counter()
    for zone in stats:
        for key, count in zone.items():
            if isinstance(key, str) or count is None:
                continue
            totals[int(key)] += int(count)
    codes = sorted(totals)
    return pd.Series(
        [totals[code] for code in codes],
        index=pd.Index(codes, name="code", dtype="int64"),
        name="count",
        dtype="int64",
    )
