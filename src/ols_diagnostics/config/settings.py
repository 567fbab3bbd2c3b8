from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml


@dataclass
class DiagnosticSettings:
    which: tuple[Any, ...] = (1, 2, 3, 5)
    r_style: bool = True
    smoother_span: float = 2.0 / 3.0
    smoother_iterations: int = 0
    smooth_points: int = 100
    influence_multiplier: float = 4.0
    leverage_tolerance: float = 1e-10
    high_leverage_multiplier: float = 2.0
    cook_levels: tuple[float, ...] = (0.5, 1.0)
    residual_levels: tuple[float, ...] = (0.5, 1.0, 1.5, 2.0)
    figure_dpi: int = 150
    figure_format: str = "png"
    panel_width: float = 4.5
    panel_height: float = 4.5

    def __post_init__(self) -> None:
        # YAML yields lists; keep the tuple types stable. View ids are left for
        # ViewSelection to sanitize.
        if isinstance(self.which, list):
            self.which = tuple(self.which)
        self.cook_levels = tuple(float(value) for value in self.cook_levels)
        self.residual_levels = tuple(float(value) for value in self.residual_levels)

    @classmethod
    def from_yaml(cls, path: Path | None) -> "DiagnosticSettings":
        if path is None:
            return cls()
        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {path}")

        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle) or {}
        return cls(**payload)
