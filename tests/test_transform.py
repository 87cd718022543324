from __future__ import annotations

from datetime import date
from typing import Any

import pandas as pd
import pytest

from gadash.errors import MalformedResponseError, NoDataError
from gadash.transform import RawResponse, format_header_label, to_typed_table


def _payload(headers: list[tuple[str, str]], rows: list[list[Any]] | None) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "columnHeaders": [
            {
                "name": name,
                "dataType": data_type,
                "columnType": "DIMENSION" if data_type == "STRING" else "METRIC",
            }
            for name, data_type in headers
        ]
    }
    if rows is not None:
        payload["rows"] = rows
    return payload


DATE_VISITS = _payload(
    [("ga:date", "STRING"), ("ga:visits", "INTEGER")],
    [["20240115", "42"], ["20240116", "7"]],
)


def test_date_dimension_is_typed_date_for_line_charts() -> None:
    table = to_typed_table(DATE_VISITS, "LineChart")

    assert [column.type for column in table.columns] == ["date", "number"]
    assert table.rows[0] == (date(2024, 1, 15), 42)
    assert table.rows[1] == (date(2024, 1, 16), 7)


@pytest.mark.parametrize("chart_type", ["BarChart", "ColumnChart"])
def test_date_dimension_stays_string_for_categorical_charts(chart_type: str) -> None:
    table = to_typed_table(DATE_VISITS, chart_type)

    assert table.columns[0].type == "string"
    assert table.rows[0][0] == "20240115"


def test_integer_cells_become_whole_numbers() -> None:
    table = to_typed_table(DATE_VISITS, "Table")

    value = table.rows[0][1]
    assert value == 42
    assert isinstance(value, int)


@pytest.mark.parametrize(
    ("data_type", "raw", "expected"),
    [
        ("PERCENT", "12.345", 12.35),
        ("PERCENT", "12.344", 12.34),
        ("TIME", "3.456", 3.46),
        ("FLOAT", "0.005", 0.01),
        ("FLOAT", "100", 100.0),
        ("FLOAT", "-12.345", -12.34),
        ("FLOAT", "-12.346", -12.35),
    ],
)
def test_rounded_kinds_keep_two_decimals(data_type: str, raw: str, expected: float) -> None:
    payload = _payload([("ga:country", "STRING"), ("ga:metric", data_type)], [["US", raw]])

    table = to_typed_table(payload, "Table")

    assert table.rows[0][1] == expected


def test_string_and_unrecognised_kinds() -> None:
    payload = _payload(
        [("ga:source", "STRING"), ("ga:revenue", "CURRENCY"), ("ga:flag", "BOOLEAN")],
        [["google", "1.5", "true"]],
    )

    table = to_typed_table(payload, "Table")

    assert [column.type for column in table.columns] == ["string", "number", "number"]
    assert table.rows[0] == ("google", "1.5", "true")


def test_column_and_row_counts_match_response() -> None:
    rows = [["US", "1"], ["CA", "2"], ["MX", "3"]]
    payload = _payload([("ga:country", "STRING"), ("ga:visits", "INTEGER")], rows)
    table = to_typed_table(payload, "")

    assert len(table.columns) == 2
    assert len(table.rows) == 3
    assert table.labels == ["Country", "Visits"]
    assert [column.name for column in table.columns] == ["ga:country", "ga:visits"]


@pytest.mark.parametrize("rows", [[], None])
def test_missing_rows_raise_no_data(rows: list[list[Any]] | None) -> None:
    with pytest.raises(NoDataError, match="No rows returned for that query"):
        to_typed_table(_payload([("ga:visits", "INTEGER")], rows), "LineChart")


def test_ragged_row_is_malformed() -> None:
    payload = _payload([("ga:country", "STRING"), ("ga:visits", "INTEGER")], [["US"]])

    with pytest.raises(MalformedResponseError, match="row 0 has 1 cells, expected 2"):
        to_typed_table(payload, "Table")


@pytest.mark.parametrize(
    ("headers", "row"),
    [
        ([("ga:visits", "INTEGER")], ["many"]),
        ([("ga:bounceRate", "PERCENT")], [""]),
        ([("ga:date", "STRING")], ["2024-01-15"]),
    ],
)
def test_uncoercible_cells_are_malformed(headers: list[tuple[str, str]], row: list[Any]) -> None:
    with pytest.raises(MalformedResponseError):
        to_typed_table(_payload(headers, [row]), "LineChart")


def test_raw_response_from_payload_normalises_kinds() -> None:
    response = RawResponse.from_payload(
        {"columnHeaders": [{"name": "ga:visits", "dataType": "integer"}], "rows": [["5"]]}
    )

    assert response.headers[0].data_type == "INTEGER"
    assert response.headers[0].column_type is None
    assert to_typed_table(response, "Table").rows == ((5,),)


def test_to_frame_uses_labels_and_column_types() -> None:
    frame = to_typed_table(DATE_VISITS, "LineChart").to_frame()

    assert list(frame.columns) == ["Date", "Visits"]
    assert pd.api.types.is_datetime64_any_dtype(frame["Date"])
    assert pd.api.types.is_numeric_dtype(frame["Visits"])
    assert frame["Visits"].tolist() == [42, 7]


@pytest.mark.parametrize(
    ("name", "label"),
    [
        ("ga:percentNewVisits", "Percent New Visits"),
        ("ga:visits", "Visits"),
        ("ga:avgTimeOnSite", "Avg Time On Site"),
        ("xx:visitorID", "Visitor I D"),
        ("ga:", ""),
    ],
)
def test_format_header_label(name: str, label: str) -> None:
    assert format_header_label(name) == label
