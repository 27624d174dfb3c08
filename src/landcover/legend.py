"""Land-cover legend: category codes, class names, descriptions and colours.

The legend is plain reference data. It is loaded once by the caller (either the
built-in NLCD palette or a user supplied CSV) and passed explicitly to every
function that needs it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from .errors import LegendError

LEGEND_COLUMNS = ["code", "class", "description", "color"]

# National Land Cover Database (2016 legend), standard MRLC palette.
NLCD_LEGEND: List[Tuple[int, str, str, str]] = [
    (11, "Water", "Open Water", "#466b9f"),
    (12, "Water", "Perennial Ice/Snow", "#d1def8"),
    (21, "Developed", "Developed, Open Space", "#dec5c5"),
    (22, "Developed", "Developed, Low Intensity", "#d99282"),
    (23, "Developed", "Developed, Medium Intensity", "#eb0000"),
    (24, "Developed", "Developed, High Intensity", "#ab0000"),
    (31, "Barren", "Barren Land (Rock/Sand/Clay)", "#b3ac9f"),
    (41, "Forest", "Deciduous Forest", "#68ab5f"),
    (42, "Forest", "Evergreen Forest", "#1c5f2c"),
    (43, "Forest", "Mixed Forest", "#b5c58f"),
    (51, "Shrubland", "Dwarf Scrub", "#af963c"),
    (52, "Shrubland", "Shrub/Scrub", "#ccb879"),
    (71, "Herbaceous", "Grassland/Herbaceous", "#dfdfc2"),
    (72, "Herbaceous", "Sedge/Herbaceous", "#d1d182"),
    (73, "Herbaceous", "Lichens", "#a3cc51"),
    (74, "Herbaceous", "Moss", "#82ba9e"),
    (81, "Planted/Cultivated", "Pasture/Hay", "#dcd939"),
    (82, "Planted/Cultivated", "Cultivated Crops", "#ab6c28"),
    (90, "Wetlands", "Woody Wetlands", "#b8d9eb"),
    (95, "Wetlands", "Emergent Herbaceous Wetlands", "#6c9fb8"),
]


def _validate(legend: pd.DataFrame) -> pd.DataFrame:
    missing = [col for col in LEGEND_COLUMNS if col not in legend.columns]
    if missing:
        raise LegendError(f"Legend is missing required columns: {', '.join(missing)}")
    legend = legend[LEGEND_COLUMNS].copy()
    legend["code"] = legend["code"].astype(int)
    duplicated = legend.loc[legend["code"].duplicated(), "code"].tolist()
    if duplicated:
        raise LegendError(f"Legend contains duplicate codes: {duplicated}")
    return legend.reset_index(drop=True)


def load_legend(path: Optional[Path] = None) -> pd.DataFrame:
    """Return the category table with columns ``code, class, description, color``.

    Parameters
    ----------
    path:
        Optional CSV file with the same columns. When omitted the built-in NLCD
        legend is returned.
    """

    if path is None:
        return pd.DataFrame(NLCD_LEGEND, columns=LEGEND_COLUMNS)

    path = Path(path)
    if not path.exists():
        raise LegendError(f"Legend file not found: {path}")
    return _validate(pd.read_csv(path))


def observed_categories(legend: pd.DataFrame, codes: Iterable[int]) -> pd.DataFrame:
    """Restrict ``legend`` to the given codes, keeping legend order."""

    wanted = {int(code) for code in codes}
    return legend.loc[legend["code"].isin(wanted)].reset_index(drop=True)


def color_map(legend: pd.DataFrame) -> Dict[int, str]:
    return dict(zip(legend["code"].astype(int), legend["color"]))


def class_colors(legend: pd.DataFrame) -> Dict[str, str]:
    """One colour per class: the colour of its lowest-coded category."""

    ordered = legend.sort_values("code")
    return ordered.drop_duplicates("class").set_index("class")["color"].to_dict()
