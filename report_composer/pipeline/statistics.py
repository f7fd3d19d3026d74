#!/usr/bin/env python3
"""
Descriptive statistics for the report summary page.

Provides:
- ColumnStatistic: average/min/max of one numeric column
- aggregate_statistics(): single entry point, one statistic per numeric column
- DetailedStatistic / detailed_statistics(): full descriptive profile per column
- data_completeness(): share of fully populated records
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

LOGGER = logging.getLogger(__name__)

DEFAULT_ID_COLUMN = "id"
MAX_STATISTICS = 10

Dataset = Union[pd.DataFrame, Sequence[Mapping[str, Any]]]


# ============================================================================
# COLUMN STATISTIC
# ============================================================================
@dataclass(frozen=True)
class ColumnStatistic:
    """
    Summary of one numeric column.

    Attributes:
        column: Column name
        average: Arithmetic mean over every record
        minimum: Smallest value
        maximum: Largest value
        sample_count: Number of records the values were taken from
    """
    column: str
    average: float
    minimum: float
    maximum: float
    sample_count: int


@dataclass(frozen=True)
class DetailedStatistic:
    """
    Full descriptive profile of one numeric column.

    The standard deviation is the population one (divides by the count).
    """
    column: str
    mean: float
    median: float
    std_dev: float
    minimum: float
    maximum: float
    total: float
    count: int

    @property
    def value_range(self) -> float:
        return self.maximum - self.minimum


def to_frame(dataset: Optional[Dataset]) -> pd.DataFrame:
    """
    Normalize a dataset to a DataFrame.

    Records may have different keys; columns are the union of keys in order
    of first appearance and absent keys become NaN.
    """
    if dataset is None:
        return pd.DataFrame()
    if isinstance(dataset, pd.DataFrame):
        return dataset
    return pd.DataFrame([dict(record) for record in dataset])


def _normalise(value: Any) -> Any:
    if isinstance(value, (bool, np.bool_)):
        return int(value)
    if isinstance(value, str):
        return value.strip()
    return value


def _numeric_values(series: pd.Series) -> Optional[pd.Series]:
    """
    Return the column as floats, or None if it is not a numeric column.

    A numeric column has at least one present value, no blank strings and
    every present value coercible to a number. Missing values become zero.
    """
    values = series.map(_normalise)
    present = values.notna()
    if not present.any():
        return None

    blank = values[present].map(lambda v: isinstance(v, str) and v == "")
    if blank.any():
        return None

    numeric = pd.to_numeric(values, errors="coerce")
    if numeric[present].isna().any():
        return None

    return numeric.fillna(0.0).astype(np.float64)


def _numeric_columns(frame: pd.DataFrame,
                     id_column: str) -> Iterator[Tuple[str, pd.Series]]:
    """Yield ``(name, float values)`` for each numeric column, in column order."""
    for column in frame.columns:
        if str(column) == id_column:
            continue
        values = _numeric_values(frame[column])
        if values is None:
            LOGGER.debug("Skipping non-numeric column: %s", column)
            continue
        yield str(column), values


# ============================================================================
# COMPUTATION FUNCTIONS
# ============================================================================
def aggregate_statistics(dataset: Optional[Dataset],
                         id_column: str = DEFAULT_ID_COLUMN,
                         max_columns: int = MAX_STATISTICS) -> List[ColumnStatistic]:
    """
    Compute descriptive statistics for every numeric column.

    Args:
        dataset: Records (list of mappings) or DataFrame
        id_column: Identifier column, never summarized
        max_columns: Upper bound on the number of statistics returned

    Returns:
        ColumnStatistic list in column order, at most ``max_columns`` long.
        An empty dataset yields an empty list.

    Example:
        >>> stats = aggregate_statistics([{"x": 1}, {"x": 2}, {"x": 3}])
        >>> stats[0].average
        2.0
    """
    frame = to_frame(dataset)
    if frame.empty or max_columns <= 0:
        return []

    results: List[ColumnStatistic] = []
    for column, values in _numeric_columns(frame, id_column):
        results.append(ColumnStatistic(
            column=column,
            average=float(values.mean()),
            minimum=float(values.min()),
            maximum=float(values.max()),
            sample_count=int(len(values)),
        ))
        if len(results) >= max_columns:
            break

    LOGGER.info("  Statistics: %d numeric columns (of %d)", len(results), len(frame.columns))
    return results


def detailed_statistics(dataset: Optional[Dataset],
                        id_column: str = DEFAULT_ID_COLUMN) -> List[DetailedStatistic]:
    """
    Profile every numeric column: mean, median, spread, extremes and total.

    Columns are chosen with the same rule as ``aggregate_statistics`` but the
    list is not truncated.

    Example:
        >>> detailed_statistics([{"x": 1}, {"x": 2}, {"x": 6}])[0].median
        2.0
    """
    frame = to_frame(dataset)
    if frame.empty:
        return []

    results = [
        DetailedStatistic(
            column=column,
            mean=float(values.mean()),
            median=float(values.median()),
            std_dev=float(values.std(ddof=0)),
            minimum=float(values.min()),
            maximum=float(values.max()),
            total=float(values.sum()),
            count=int(len(values)),
        )
        for column, values in _numeric_columns(frame, id_column)
    ]
    LOGGER.info("  Detailed statistics: %d numeric columns", len(results))
    return results


def data_completeness(dataset: Optional[Dataset]) -> float:
    """
    Percentage of records whose every value is present and non-blank.

    Returns:
        Value in [0, 100]; 0.0 for an empty dataset
    """
    frame = to_frame(dataset)
    if frame.empty:
        return 0.0

    blank = frame.apply(lambda col: col.map(lambda v: isinstance(v, str) and v.strip() == ""))
    complete = ~(frame.isna() | blank).any(axis=1)
    return float(complete.mean() * 100.0)


def summarize_statistics(stats: Sequence[ColumnStatistic]) -> str:
    """Human-readable multi-line summary, for logs."""
    if not stats:
        return "No numeric columns."
    lines = [f"{len(stats)} numeric columns:"]
    for stat in stats:
        lines.append(
            f"  • {stat.column}: avg={stat.average:.3f} "
            f"min={stat.minimum:.3f} max={stat.maximum:.3f} (n={stat.sample_count})"
        )
    return "\n".join(lines)
