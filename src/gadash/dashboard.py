from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Mapping

from gadash.auth import AuthSession, Authorizer
from gadash.chart import ChartRequest, ChartState
from gadash.client import ReportingClient, ReportingService
from gadash.config import ChartConfig, DashboardConfig
from gadash.gate import RenderGate
from gadash.page import DashboardPage
from gadash.paths import OutputPaths, build_output_paths
from gadash.sinks import SinkRegistry, default_sinks

LOGGER = logging.getLogger(__name__)


class Dashboard:
    """Application context shared by every chart request of one page."""

    def __init__(
        self,
        paths: OutputPaths,
        *,
        sinks: SinkRegistry | None = None,
        title: str = "Analytics Dashboard",
        figures_format: str = "png",
        save_responses: bool = False,
    ) -> None:
        self.paths = paths
        self.gate = RenderGate()
        self.page = DashboardPage(paths.figures, title=title, figures_format=figures_format)
        self.sinks = sinks or default_sinks()
        self.save_responses = save_responses
        self.client: ReportingService | None = None
        self.charts: list[ChartRequest] = []

    @classmethod
    def from_config(cls, config: DashboardConfig, out_dir: Path) -> Dashboard:
        return cls(
            build_output_paths(out_dir),
            title=config.output.title,
            figures_format=config.output.figures_format,
            save_responses=config.output.save_responses,
        )

    @property
    def client_ready(self) -> bool:
        return self.client is not None and self.gate.is_ready

    def open(self, client: ReportingService) -> None:
        self.client = client
        self.page.authorize_prompt = False
        self.gate.mark_ready()

    def chart(
        self,
        config: ChartConfig | Mapping[str, Any],
        *,
        today: date | None = None,
    ) -> ChartRequest:
        request = ChartRequest(config, self, today=today)
        self.page.surface(request.target_id)
        self.charts.append(request)
        return request

    def write_page(self) -> Path:
        return self.page.write(self.paths.page)


@dataclass(frozen=True)
class DashboardRun:
    page_path: Path
    authorized: bool
    states: dict[str, ChartState]
    errors: list[str]

    @property
    def failed(self) -> list[str]:
        return [target for target, state in self.states.items() if state == ChartState.FAILED]


def run_dashboard(
    config: DashboardConfig,
    out_dir: Path,
    authorizer: Authorizer,
) -> DashboardRun:
    dashboard = Dashboard.from_config(config, out_dir)
    for chart_config in config.charts:
        dashboard.chart(chart_config).render()

    clients: list[ReportingClient] = []

    def _client_factory(token: str) -> ReportingClient:
        client = ReportingClient(
            token,
            endpoint=config.api.endpoint,
            api_key=config.auth.api_key,
            timeout=config.api.timeout_seconds,
        )
        clients.append(client)
        return client

    session = AuthSession(dashboard, config.auth, client_factory=_client_factory)
    try:
        authorized = session.check(authorizer)
    finally:
        for client in clients:
            client.close()

    page_path = dashboard.write_page()
    errors = list(dashboard.page.errors.lines) if dashboard.page.errors else []
    LOGGER.info("Dashboard written to %s (%d error(s))", page_path, len(errors))
    return DashboardRun(
        page_path=page_path,
        authorized=authorized,
        states={request.target_id: request.state for request in dashboard.charts},
        errors=errors,
    )
