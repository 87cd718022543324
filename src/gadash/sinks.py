from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Protocol

import matplotlib.pyplot as plt
import pandas as pd

from gadash.config import DEFAULT_CHART_TYPE
from gadash.page import Surface
from gadash.transform import TypedTable

LOGGER = logging.getLogger(__name__)

DEFAULT_WIDTH_PX = 900
DEFAULT_HEIGHT_PX = 400
PIXELS_PER_INCH = 100


class ChartSink(Protocol):
    def draw(self, table: TypedTable, surface: Surface, options: Mapping[str, Any]) -> None: ...


def save_figure(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    plt.tight_layout()
    plt.savefig(path)
    plt.close()
    return path


def _figure_size(options: Mapping[str, Any]) -> tuple[float, float]:
    width = float(options.get("width") or DEFAULT_WIDTH_PX)
    height = float(options.get("height") or DEFAULT_HEIGHT_PX)
    return width / PIXELS_PER_INCH, height / PIXELS_PER_INCH


def _legend_enabled(options: Mapping[str, Any]) -> bool:
    legend = options.get("legend", True)
    if isinstance(legend, Mapping):
        legend = legend.get("position", True)
    return legend not in (False, "none")


def _split_axes(table: TypedTable, frame: pd.DataFrame) -> tuple[pd.Series, list[str]]:
    """Pick the category/date axis and the numeric series to plot against it."""
    series = [column.label for column in table.columns_of_type("number")]
    axis_columns = [column.label for column in table.columns if column.type != "number"]
    if axis_columns:
        return frame[axis_columns[0]], series
    return pd.Series(range(len(frame)), index=frame.index), series


class TableSink:
    def draw(self, table: TypedTable, surface: Surface, options: Mapping[str, Any]) -> None:
        frame = table.to_frame()
        max_rows = options.get("max_rows")
        if max_rows:
            frame = frame.head(int(max_rows))
        surface.clear()
        surface.html = frame.to_html(
            index=False,
            classes="gadash-table",
            border=0,
            na_rep="",
        )


class FigureSink:
    """Base for sinks that draw a matplotlib figure into the surface's figure path."""

    def draw(self, table: TypedTable, surface: Surface, options: Mapping[str, Any]) -> None:
        frame = table.to_frame()
        axis_values, series = _split_axes(table, frame)
        figure = plt.figure(figsize=_figure_size(options))
        try:
            self.plot(frame, axis_values, series, options)
            if options.get("title"):
                plt.title(str(options["title"]))
            axes = plt.gca()
            if axes.get_legend_handles_labels()[0]:
                if _legend_enabled(options):
                    axes.legend(loc="best")
                elif axes.get_legend() is not None:
                    axes.get_legend().remove()
            surface.clear()
            surface.rendered_figure = save_figure(surface.figure_path)
        finally:
            plt.close(figure)

    def plot(
        self,
        frame: pd.DataFrame,
        axis_values: pd.Series,
        series: list[str],
        options: Mapping[str, Any],
    ) -> None:
        raise NotImplementedError


class LineChartSink(FigureSink):
    def plot(
        self,
        frame: pd.DataFrame,
        axis_values: pd.Series,
        series: list[str],
        options: Mapping[str, Any],
    ) -> None:
        for label in series:
            plt.plot(axis_values, frame[label], label=label)
        plt.xlabel(str(axis_values.name or ""))
        plt.gcf().autofmt_xdate()


class AreaChartSink(FigureSink):
    def plot(
        self,
        frame: pd.DataFrame,
        axis_values: pd.Series,
        series: list[str],
        options: Mapping[str, Any],
    ) -> None:
        for label in series:
            plt.fill_between(axis_values, frame[label], alpha=0.3)
            plt.plot(axis_values, frame[label], label=label)
        plt.xlabel(str(axis_values.name or ""))
        plt.gcf().autofmt_xdate()


class ColumnChartSink(FigureSink):
    kind = "bar"

    def plot(
        self,
        frame: pd.DataFrame,
        axis_values: pd.Series,
        series: list[str],
        options: Mapping[str, Any],
    ) -> None:
        if not series:
            return
        indexed = frame[series].set_index(axis_values.astype(str))
        indexed.plot(kind=self.kind, ax=plt.gca())


class BarChartSink(ColumnChartSink):
    kind = "barh"

    def plot(
        self,
        frame: pd.DataFrame,
        axis_values: pd.Series,
        series: list[str],
        options: Mapping[str, Any],
    ) -> None:
        super().plot(frame, axis_values, series, options)
        plt.gca().invert_yaxis()


class PieChartSink(FigureSink):
    def plot(
        self,
        frame: pd.DataFrame,
        axis_values: pd.Series,
        series: list[str],
        options: Mapping[str, Any],
    ) -> None:
        if not series:
            return
        plt.pie(frame[series[0]], labels=axis_values.astype(str).tolist(), autopct="%1.1f%%")
        plt.axis("equal")


class SinkRegistry:
    """Chart type identifier to drawing strategy, with a tabular fallback."""

    def __init__(
        self,
        sinks: Mapping[str, ChartSink] | None = None,
        fallback: str = DEFAULT_CHART_TYPE,
    ) -> None:
        self._sinks: dict[str, ChartSink] = dict(sinks or {})
        self._sinks.setdefault(fallback, TableSink())
        self.fallback = fallback

    def __contains__(self, chart_type: object) -> bool:
        return chart_type in self._sinks

    @property
    def chart_types(self) -> list[str]:
        return sorted(self._sinks)

    def register(self, chart_type: str, sink: ChartSink) -> None:
        self._sinks[chart_type] = sink

    def resolve(self, chart_type: str) -> ChartSink:
        sink = self._sinks.get(chart_type)
        if sink is None:
            LOGGER.debug("Unknown chart type %r; drawing as %s", chart_type, self.fallback)
            return self._sinks[self.fallback]
        return sink


def default_sinks() -> SinkRegistry:
    return SinkRegistry(
        {
            "Table": TableSink(),
            "LineChart": LineChartSink(),
            "AreaChart": AreaChartSink(),
            "ColumnChart": ColumnChartSink(),
            "BarChart": BarChartSink(),
            "PieChart": PieChartSink(),
        }
    )
