from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class OutputPaths:
    root: Path
    figures: Path
    responses: Path

    @property
    def page(self) -> Path:
        return self.root / "index.html"

    def response(self, target_id: str) -> Path:
        return self.responses / f"{target_id}.json"


def build_output_paths(out_dir: Path) -> OutputPaths:
    paths = OutputPaths(
        root=out_dir,
        figures=out_dir / "figures",
        responses=out_dir / "responses",
    )
    for path in (paths.root, paths.figures, paths.responses):
        path.mkdir(parents=True, exist_ok=True)
    return paths
