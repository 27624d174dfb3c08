"""Exceptions raised by the land-cover toolkit."""


class LandCoverError(RuntimeError):
    """Base class for failures while loading or summarising land-cover data."""


class LegendError(LandCoverError):
    """Raised when a legend table is malformed (missing columns, duplicate codes)."""


class RasterError(LandCoverError):
    """Raised when raster inputs cannot be found, labelled or aligned."""
