from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal
from typing import Any, Literal, Mapping

import pandas as pd

from gadash.dates import parse_compact_date
from gadash.errors import MalformedResponseError, NoDataError

ColumnType = Literal["string", "number", "date"]

DATE_DIMENSION = "ga:date"
HEADER_PREFIX_LENGTH = 3

# Bar/column axes are categorical and cannot plot date values.
CATEGORICAL_CHART_TYPES = frozenset({"BarChart", "ColumnChart"})

STRING_KIND = "STRING"
INTEGER_KIND = "INTEGER"
ROUNDED_KINDS = frozenset({"PERCENT", "TIME", "FLOAT"})

_TWO_PLACES = Decimal("0.01")


@dataclass(frozen=True, slots=True)
class ColumnHeader:
    name: str
    data_type: str
    column_type: str | None = None


@dataclass(frozen=True)
class RawResponse:
    headers: tuple[ColumnHeader, ...]
    rows: tuple[tuple[Any, ...], ...]

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> RawResponse:
        headers = tuple(
            ColumnHeader(
                name=str(header.get("name", "")),
                data_type=str(header.get("dataType", "")).upper(),
                column_type=header.get("columnType"),
            )
            for header in payload.get("columnHeaders") or []
        )
        rows = tuple(tuple(row) for row in payload.get("rows") or [])
        return cls(headers=headers, rows=rows)


@dataclass(frozen=True, slots=True)
class Column:
    name: str
    label: str
    type: ColumnType


@dataclass(frozen=True)
class TypedTable:
    columns: tuple[Column, ...]
    rows: tuple[tuple[Any, ...], ...]

    @property
    def labels(self) -> list[str]:
        return [column.label for column in self.columns]

    def columns_of_type(self, column_type: ColumnType) -> list[Column]:
        return [column for column in self.columns if column.type == column_type]

    def to_frame(self) -> pd.DataFrame:
        frame = pd.DataFrame(list(self.rows), columns=self.labels)
        for column in self.columns:
            if column.type == "date":
                frame[column.label] = pd.to_datetime(frame[column.label])
            elif column.type == "number":
                frame[column.label] = pd.to_numeric(frame[column.label], errors="coerce")
        return frame


def format_header_label(name: str) -> str:
    """Turn an API field name into a display label.

    ``"ga:percentNewVisits"`` becomes ``"Percent New Visits"``.
    """
    label = name[HEADER_PREFIX_LENGTH:]
    label = label[:1].upper() + label[1:]
    index = 1
    while index < len(label):
        if label[index].isupper():
            label = f"{label[:index]} {label[index:]}"
            index += 1
        index += 1
    return label


def _is_date_column(header: ColumnHeader, chart_type: str) -> bool:
    return header.name == DATE_DIMENSION and chart_type not in CATEGORICAL_CHART_TYPES


def column_type_for(header: ColumnHeader, chart_type: str) -> ColumnType:
    if _is_date_column(header, chart_type):
        return "date"
    if header.data_type == STRING_KIND:
        return "string"
    return "number"


def round_two_places(value: Any) -> float:
    """Round to cents with ties going toward positive infinity (-12.345 gives -12.34)."""
    number = Decimal(str(value).strip())
    rounding = ROUND_HALF_DOWN if number < 0 else ROUND_HALF_UP
    return float(number.quantize(_TWO_PLACES, rounding=rounding))


def _coerce_cell(value: Any, header: ColumnHeader, as_date: bool) -> Any:
    if as_date:
        return parse_compact_date(value)
    if header.data_type == INTEGER_KIND:
        return int(Decimal(str(value).strip()))
    if header.data_type in ROUNDED_KINDS:
        return round_two_places(value)
    return value


def to_typed_table(response: RawResponse | Mapping[str, Any], chart_type: str) -> TypedTable:
    """Type the columns and coerce the cells of an analytics response.

    Raises NoDataError when the response carries no rows and MalformedResponseError
    when a row is ragged or a cell cannot be coerced to its column's kind.
    """
    if not isinstance(response, RawResponse):
        response = RawResponse.from_payload(response)
    if not response.rows:
        raise NoDataError()

    headers = response.headers
    columns = tuple(
        Column(
            name=header.name,
            label=format_header_label(header.name),
            type=column_type_for(header, chart_type),
        )
        for header in headers
    )
    as_date = [column.type == "date" for column in columns]

    rows: list[tuple[Any, ...]] = []
    for row_index, row in enumerate(response.rows):
        if len(row) != len(headers):
            raise MalformedResponseError(
                f"row {row_index} has {len(row)} cells, expected {len(headers)}"
            )
        values: list[Any] = []
        for header, is_date, value in zip(headers, as_date, row):
            try:
                values.append(_coerce_cell(value, header, is_date))
            except (ValueError, ArithmeticError) as exc:
                raise MalformedResponseError(
                    f"row {row_index} column {header.name}: cannot read {value!r} "
                    f"as {header.data_type or 'value'}"
                ) from exc
        rows.append(tuple(values))
    return TypedTable(columns=columns, rows=tuple(rows))

