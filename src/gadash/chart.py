from __future__ import annotations

import logging
from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping

from gadash.config import ChartConfig
from gadash.dates import relative_date
from gadash.errors import ApiError, ChartError, DrawError
from gadash.io.responses import write_response
from gadash.transform import TypedTable, to_typed_table

if TYPE_CHECKING:
    from gadash.dashboard import Dashboard

LOGGER = logging.getLogger(__name__)


class ChartState(str, Enum):
    CONSTRUCTED = "constructed"
    AWAITING_CLIENT = "awaiting_client"
    REQUESTING = "requesting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ChartRequest:
    """One configured chart: query, API call, transformation and draw.

    A ``last_n_days`` window is resolved into ``start-date``/``end-date`` once, here, so
    every later ``render()`` of the same request queries the same dates. Callbacks are
    called with this request as their first argument: ``on_success(request, payload)``
    and ``on_error(request, message)``.
    """

    def __init__(
        self,
        config: ChartConfig | Mapping[str, Any],
        dashboard: Dashboard,
        *,
        today: date | None = None,
    ) -> None:
        if not isinstance(config, ChartConfig):
            config = ChartConfig.model_validate(config)
        self.config = config
        self.dashboard = dashboard
        self.state = ChartState.CONSTRUCTED
        self.response: dict[str, Any] | None = None
        self.error: str | None = None

        query = dict(self.config.query)
        if self.config.last_n_days is not None:
            query["end-date"] = relative_date(0, today)
            query["start-date"] = relative_date(self.config.last_n_days, today)
        self.query: Mapping[str, Any] = MappingProxyType(query)

    def __repr__(self) -> str:
        return f"ChartRequest(target_id={self.target_id!r}, state={self.state.value!r})"

    @property
    def target_id(self) -> str:
        return self.config.target_id

    @property
    def chart_type(self) -> str:
        return self.config.chart_type

    def render(self) -> ChartRequest:
        gate = self.dashboard.gate
        if not gate.is_ready:
            self.state = ChartState.AWAITING_CLIENT
            gate.submit(self)
            return self

        client = self.dashboard.client
        if client is None:
            raise RuntimeError("render gate is open but no reporting client is attached")
        self.state = ChartState.REQUESTING
        LOGGER.info("Requesting %s for %s", self.chart_type, self.target_id)
        client.execute(self.query, self.handle_response)
        return self

    def handle_response(self, payload: Mapping[str, Any]) -> None:
        self.response = dict(payload)
        if self.dashboard.save_responses:
            self._save_response(payload)

        error = payload.get("error")
        if error:
            self.fail(ApiError.from_payload(error))
            return

        self.state = ChartState.SUCCEEDED
        self.error = None
        if self.config.on_success is not None:
            self.config.on_success(self, payload)
            return
        try:
            self.draw(to_typed_table(payload, self.chart_type))
        except ChartError as exc:
            self.fail(exc)

    def _save_response(self, payload: Mapping[str, Any]) -> None:
        path = self.dashboard.paths.response(self.target_id)
        try:
            write_response(payload, path)
        except OSError as exc:
            LOGGER.warning(
                "Could not save response for %s to %s: %s", self.target_id, path, exc
            )

    def draw(self, table: TypedTable) -> None:
        sink = self.dashboard.sinks.resolve(self.chart_type)
        surface = self.dashboard.page.surface(self.target_id)
        try:
            sink.draw(table, surface, self.config.draw_options)
        except Exception as exc:
            LOGGER.debug("Sink for %s raised", self.target_id, exc_info=True)
            raise DrawError(f"cannot draw {self.chart_type}: {exc}") from exc
        LOGGER.info("Drew %d row(s) into %s", len(table.rows), self.target_id)

    def fail(self, error: ChartError | str) -> None:
        message = str(error)
        self.state = ChartState.FAILED
        self.error = message
        LOGGER.warning("Chart %s failed: %s", self.target_id, message)
        if self.config.on_error is not None:
            self.config.on_error(self, message)
        else:
            self.dashboard.page.report_error(self.target_id, message)
