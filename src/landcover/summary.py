"""Per-year frequency aggregation and change metrics.

The summary table starts as a copy of the legend (``code, class, description,
color``) and gains one pixel-count column per year. Each year is attached with a
left join on ``code``:

* every legend row is kept, codes absent from the legend are dropped;
* a legend code that does not occur in a year's raster gets ``NaN`` for that
  year, never zero, so downstream ratios stay undefined rather than infinite.

All functions return new frames and never modify their inputs.
"""

from __future__ import annotations

import re
from functools import reduce
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from .errors import LandCoverError
from .raster import Layer, frequency_of

SQ_MILES_PER_SQ_METER = 3.86102e-7
CELL_AREA_SQ_MI = 30 * 30 * SQ_MILES_PER_SQ_METER
"""Area of one 30 m x 30 m cell in square miles."""

_COUNT_COLUMN = re.compile(r"^y(\d+)$")


def count_column(label: int) -> str:
    """Name of the pixel-count column for a year, e.g. ``y2001``."""

    return f"y{label}"


def count_columns(labels: Iterable[int]) -> Dict[int, str]:
    """Explicit mapping from year to count column."""

    return {int(label): count_column(label) for label in labels}


def year_columns(table: pd.DataFrame) -> Dict[int, str]:
    """Year to count column mapping of an aggregated table.

    Uses the mapping recorded by :func:`aggregate_counts` in ``table.attrs`` and
    falls back to parsing ``y<label>`` column names.
    """

    recorded = table.attrs.get("count_columns")
    if recorded:
        columns = {int(label): col for label, col in recorded.items() if col in table.columns}
        return dict(sorted(columns.items()))

    columns = {}
    for column in table.columns:
        match = _COUNT_COLUMN.match(str(column))
        if match:
            columns[int(match.group(1))] = column
    return dict(sorted(columns.items()))


def _left_join(acc: pd.DataFrame, item: Tuple[int, pd.Series]) -> pd.DataFrame:
    label, counts = item
    column = count_column(label)
    frequency = pd.DataFrame(
        {"code": counts.index.astype("int64"), column: counts.to_numpy()}
    )
    return acc.merge(frequency, on="code", how="left")


def aggregate_counts(
    base: pd.DataFrame,
    frequencies: Iterable[Tuple[int, pd.Series]],
) -> pd.DataFrame:
    """Fold ``(year, frequency table)`` pairs into ``base`` with left joins.

    Parameters
    ----------
    base:
        Category table; must contain a ``code`` column. It is copied, not
        modified.
    frequencies:
        ``(year, counts)`` pairs in chronological order, where ``counts`` is a
        Series indexed by category code.
    """

    if "code" not in base.columns:
        raise LandCoverError("The base table needs a 'code' column.")
    frequencies = list(frequencies)
    labels = [label for label, _ in frequencies]
    if len(set(labels)) != len(labels):
        raise LandCoverError(f"Duplicate years in frequency tables: {labels}")

    table = reduce(_left_join, frequencies, base.copy())
    table.attrs["count_columns"] = count_columns(labels)
    return table


def aggregate_frequencies(layers: Iterable[Layer], base: pd.DataFrame) -> pd.DataFrame:
    """Build the summary table: ``base`` plus one count column per layer."""

    return aggregate_counts(base, ((layer.label, frequency_of(layer)) for layer in layers))


def _first_last(
    table: pd.DataFrame, first: Optional[int], last: Optional[int]
) -> Tuple[str, str]:
    columns = year_columns(table)
    if not columns:
        raise LandCoverError("The table has no per-year count columns.")
    years = list(columns)
    first = years[0] if first is None else first
    last = years[-1] if last is None else last
    for year in (first, last):
        if year not in columns:
            raise LandCoverError(f"No count column for year {year}; available: {years}")
    return columns[first], columns[last]


def add_derived_metrics(
    table: pd.DataFrame,
    *,
    first: Optional[int] = None,
    last: Optional[int] = None,
    cell_area: float = CELL_AREA_SQ_MI,
) -> pd.DataFrame:
    """Add ``area_change``, ``percent_change`` and ``proportion`` columns.

    ``first``/``last`` default to the oldest and newest years in the table.
    ``percent_change`` is not guarded: a missing or zero first-year count yields
    ``NaN`` or ``inf``.
    """

    first_col, last_col = _first_last(table, first, last)
    out = table.copy()
    change = out[last_col] - out[first_col]
    out["area_change"] = change * cell_area
    out["percent_change"] = change / out[first_col]
    out["proportion"] = out[last_col] / out[last_col].sum()
    return out


def proportions(table: pd.DataFrame) -> pd.DataFrame:
    """Share of each category in every year (count over column total)."""

    labels = [col for col in ("code", "class", "description") if col in table.columns]
    out = table[labels].copy()
    for column in year_columns(table).values():
        out[column] = table[column] / table[column].sum()
    return out


def class_summary(
    table: pd.DataFrame,
    *,
    cell_area: float = CELL_AREA_SQ_MI,
) -> pd.DataFrame:
    """Collapse descriptions into their parent class and recompute metrics."""

    columns: List[str] = list(year_columns(table).values())
    grouped = table.groupby("class", sort=False)
    out = grouped[columns].sum(min_count=1)
    if "color" in table.columns:
        out.insert(0, "color", grouped["color"].first())
    out = out.reset_index()
    out.attrs["count_columns"] = year_columns(table)
    return add_derived_metrics(out, cell_area=cell_area)


def _formats(table: pd.DataFrame) -> Dict[str, str]:
    formats = {column: "{:,.0f}" for column in year_columns(table).values()}
    formats.update(
        {
            "area_change": "{:,.2f}",
            "percent_change": "{:.2%}",
            "proportion": "{:.2%}",
        }
    )
    return {column: fmt for column, fmt in formats.items() if column in table.columns}


def style_summary(table: pd.DataFrame, *, caption: Optional[str] = None):
    """Return a ``pandas`` Styler suitable for inline notebook display."""

    styler = table.style.format(_formats(table), na_rep="n/a").hide(axis="index")
    if "color" in table.columns:
        styler = styler.map(lambda color: f"background-color: {color}", subset=["color"])
    if caption:
        styler = styler.set_caption(caption)
    return styler


def format_summary(table: pd.DataFrame, columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """Plain-text rendition of :func:`style_summary` (strings, no styling)."""

    out = table if columns is None else table[list(columns)]
    out = out.copy()
    for column, fmt in _formats(out).items():
        out[column] = out[column].map(lambda value, fmt=fmt: "n/a" if pd.isna(value) else fmt.format(value))
    return out
