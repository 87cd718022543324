from __future__ import annotations

import os
from datetime import date
from pathlib import Path
from typing import Any, Callable, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field

ANALYTICS_READONLY_SCOPE = "https://www.googleapis.com/auth/analytics.readonly"
REPORTING_ENDPOINT = "https://www.googleapis.com/analytics/v3/data/ga"
DEFAULT_CHART_TYPE = "Table"

QueryValue = str | int | float | date


class ChartConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    query: dict[str, QueryValue]
    target_id: str = Field(alias="divContainer", min_length=1)
    chart_type: str = Field(default=DEFAULT_CHART_TYPE, alias="type", min_length=1)
    last_n_days: int | None = Field(default=None, alias="last-n-days", ge=0)
    draw_options: dict[str, Any] = Field(default_factory=dict, alias="chartOptions")
    on_success: Callable[..., Any] | None = Field(default=None, alias="onSuccess")
    on_error: Callable[..., Any] | None = Field(default=None, alias="onError")


class AuthConfig(BaseModel):
    client_id: str | None = None
    api_key: str | None = None
    scope: str = ANALYTICS_READONLY_SCOPE
    access_token: str | None = None


class ApiConfig(BaseModel):
    endpoint: str = REPORTING_ENDPOINT
    timeout_seconds: float = Field(default=30.0, gt=0.0)


class OutputConfig(BaseModel):
    title: str = "Analytics Dashboard"
    figures_format: Literal["png", "svg"] = "png"
    save_responses: bool = False


class DashboardConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    auth: AuthConfig = Field(default_factory=AuthConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    charts: list[ChartConfig] = Field(default_factory=list)


DEFAULT_CONFIG_PATH = Path("configs/dashboard.yaml")


def load_config(path: Path) -> DashboardConfig:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError("dashboard config must contain a mapping/object")

    config = DashboardConfig.model_validate(data)
    config.auth.access_token = config.auth.access_token or os.getenv("GADASH_ACCESS_TOKEN")
    config.auth.api_key = config.auth.api_key or os.getenv("GADASH_API_KEY")
    return config
