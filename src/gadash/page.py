from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

ERROR_PANEL_HEADING = "ERRORS:"


@dataclass
class Surface:
    target_id: str
    figure_path: Path
    html: str | None = None
    rendered_figure: Path | None = None

    @property
    def is_empty(self) -> bool:
        return self.html is None and self.rendered_figure is None

    def clear(self) -> None:
        self.html = None
        self.rendered_figure = None


@dataclass
class ErrorPanel:
    heading: str = ERROR_PANEL_HEADING
    lines: list[str] = field(default_factory=list)

    def append(self, target_id: str, message: str) -> str:
        line = f"{target_id} error: {message}"
        self.lines.append(line)
        return line


def _template_env() -> Environment:
    templates_path = Path(__file__).resolve().parent / "templates"
    return Environment(
        loader=FileSystemLoader(str(templates_path)),
        autoescape=select_autoescape(enabled_extensions=("html", "xml", "j2")),
        trim_blocks=True,
        lstrip_blocks=True,
    )


class DashboardPage:
    """Output surfaces, error panel and authorize prompt of one dashboard page."""

    def __init__(
        self,
        figures_dir: Path,
        title: str = "Analytics Dashboard",
        figures_format: str = "png",
    ) -> None:
        self.figures_dir = figures_dir
        self.title = title
        self.figures_format = figures_format
        self.authorize_prompt = False
        self._surfaces: dict[str, Surface] = {}
        self._errors: ErrorPanel | None = None

    @property
    def surfaces(self) -> list[Surface]:
        return list(self._surfaces.values())

    @property
    def errors(self) -> ErrorPanel | None:
        return self._errors

    def surface(self, target_id: str) -> Surface:
        if target_id not in self._surfaces:
            self._surfaces[target_id] = Surface(
                target_id=target_id,
                figure_path=self.figures_dir / f"{target_id}.{self.figures_format}",
            )
        return self._surfaces[target_id]

    def report_error(self, target_id: str, message: str) -> str:
        if self._errors is None:
            self._errors = ErrorPanel()
        return self._errors.append(target_id, message)

    def write(self, path: Path) -> Path:
        template = _template_env().get_template("dashboard.html.j2")
        surfaces = [
            {
                "target_id": surface.target_id,
                "html": surface.html,
                "figure": (
                    Path(os.path.relpath(surface.rendered_figure, start=path.parent)).as_posix()
                    if surface.rendered_figure is not None
                    else None
                ),
            }
            for surface in self.surfaces
        ]
        rendered = template.render(
            title=self.title,
            generated_at=datetime.now(timezone.utc).isoformat(),
            authorize_prompt=self.authorize_prompt,
            errors=self._errors,
            surfaces=surfaces,
        )
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(rendered, encoding="utf-8")
        return path
