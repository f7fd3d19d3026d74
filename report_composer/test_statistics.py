#!/usr/bin/env python3
"""
Test statistics aggregation for the summary page.

Run with: pytest report_composer/test_statistics.py -v
"""
import pandas as pd
import pytest

from report_composer.pipeline.statistics import (
    ColumnStatistic,
    aggregate_statistics,
    data_completeness,
    detailed_statistics,
    summarize_statistics,
)


def test_basic_column():
    stats = aggregate_statistics([{"x": 1}, {"x": 2}, {"x": 3}])

    assert stats == [ColumnStatistic("x", 2.0, 1.0, 3.0, 3)]


def test_identifier_and_text_columns_excluded():
    records = [
        {"id": 1, "name": "alpha", "mixed": 5, "sales": "10"},
        {"id": 2, "name": "beta", "mixed": "n/a", "sales": "30"},
    ]
    stats = aggregate_statistics(records)

    assert [s.column for s in stats] == ["sales"]
    assert stats[0].average == pytest.approx(20.0)


def test_empty_string_excludes_column():
    records = [{"a": 1, "b": 4}, {"a": "", "b": 6}, {"a": 3, "b": " "}]
    stats = aggregate_statistics(records)

    assert [s.column for s in stats] == []


def test_missing_values_count_as_zero():
    records = [{"x": 4, "y": 1}, {"y": 2}, {"x": None, "y": 3}]
    stats = {s.column: s for s in aggregate_statistics(records)}

    assert stats["x"].average == pytest.approx(4 / 3)
    assert stats["x"].minimum == 0.0
    assert stats["x"].maximum == 4.0
    assert stats["x"].sample_count == 3


def test_all_missing_column_excluded():
    records = [{"x": 1, "blank": None}, {"x": 2, "blank": None}]
    assert [s.column for s in aggregate_statistics(records)] == ["x"]


def test_column_order_is_first_appearance():
    records = [{"b": 1, "a": 2}, {"a": 3, "c": 4, "b": 5}]
    assert [s.column for s in aggregate_statistics(records)] == ["b", "a", "c"]


def test_output_truncated_to_ten():
    record = {f"col_{i:02d}": i for i in range(25)}
    stats = aggregate_statistics([record, record])

    assert len(stats) == 10
    assert stats[0].column == "col_00"
    assert stats[-1].column == "col_09"


def test_custom_limits():
    record = {"id": 1, "row": 7, "a": 1, "b": 2}
    stats = aggregate_statistics([record], id_column="row", max_columns=2)
    assert [s.column for s in stats] == ["id", "a"]


def test_booleans_and_numeric_strings():
    records = [{"flag": True, "price": " 2.5 "}, {"flag": False, "price": "1e1"}]
    stats = {s.column: s for s in aggregate_statistics(records)}

    assert stats["flag"].average == pytest.approx(0.5)
    assert stats["price"].maximum == pytest.approx(10.0)


def test_empty_dataset():
    assert aggregate_statistics([]) == []
    assert aggregate_statistics(None) == []
    assert aggregate_statistics(pd.DataFrame()) == []


def test_dataframe_input():
    frame = pd.DataFrame({"id": [1, 2], "revenue": [100.0, 300.0], "region": ["N", "S"]})
    stats = aggregate_statistics(frame)

    assert len(stats) == 1
    assert stats[0].column == "revenue"
    assert stats[0].average == pytest.approx(200.0)


def test_detailed_statistics_profile():
    records = [{"id": i, "x": x, "label": "row"} for i, x in enumerate([4, 1, 3, 2])]

    (stat,) = detailed_statistics(records)

    assert stat.column == "x"
    assert stat.mean == pytest.approx(2.5)
    assert stat.median == pytest.approx(2.5)
    assert stat.std_dev == pytest.approx(1.118034, rel=1e-6)
    assert (stat.minimum, stat.maximum, stat.value_range) == (1.0, 4.0, 3.0)
    assert stat.total == pytest.approx(10.0)
    assert stat.count == 4


def test_detailed_statistics_not_truncated_and_missing_as_zero():
    records = [{f"c{i}": i + 1 for i in range(12)}, {"c0": 3}]

    stats = detailed_statistics(records)

    assert len(stats) == 12
    assert stats[0].total == pytest.approx(4.0)
    assert stats[1].minimum == 0.0
    assert detailed_statistics([]) == []


def test_data_completeness():
    records = [
        {"a": 1, "b": "x"},
        {"a": None, "b": "y"},
        {"a": 2, "b": ""},
        {"a": 3, "b": "z"},
    ]
    assert data_completeness(records) == pytest.approx(50.0)
    assert data_completeness([]) == 0.0


def test_summary_text():
    stats = aggregate_statistics([{"x": 1}, {"x": 3}])
    text = summarize_statistics(stats)
    assert "1 numeric columns" in text
    assert "x: avg=2.000" in text
    assert summarize_statistics([]) == "No numeric columns."


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
