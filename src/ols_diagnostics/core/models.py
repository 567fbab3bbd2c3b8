from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

import numpy as np

Severity = Literal["INFO", "WARN", "ERROR"]
LineKind = Literal["horizontal", "vertical", "segment"]

MARKER_FACE = "white"
MARKER_EDGE = "black"


@dataclass
class Flag:
    code: str
    message: str
    severity: Severity = "WARN"
    stage: str = "unknown"
    observations: list[int] = field(default_factory=list)
    recommendation: str | None = None


@dataclass
class ValidationResult:
    name: str
    passed: bool
    summary: str = ""
    flags: list[Flag] = field(default_factory=list)
    metrics: dict[str, Any] = field(default_factory=dict)
    assumptions: list[str] = field(default_factory=list)


@dataclass(frozen=True, eq=False)
class FittedModelSummary:
    """Outputs of a fitted OLS model consumed by the diagnostics engine."""

    design: np.ndarray
    response: np.ndarray
    fitted: np.ndarray
    residuals: np.ndarray
    coefficients: np.ndarray
    term_names: tuple[str, ...] = ()

    @classmethod
    def from_arrays(
        cls,
        design: Any,
        response: Any,
        fitted: Any,
        coefficients: Any,
        residuals: Any | None = None,
        term_names: tuple[str, ...] = (),
    ) -> "FittedModelSummary":
        design_arr = np.asarray(design, dtype=np.float64)
        if design_arr.ndim == 1:
            design_arr = design_arr[:, np.newaxis]
        response_arr = np.asarray(response, dtype=np.float64).ravel()
        fitted_arr = np.asarray(fitted, dtype=np.float64).ravel()
        if residuals is None:
            residual_arr = response_arr - fitted_arr
        else:
            residual_arr = np.asarray(residuals, dtype=np.float64).ravel()
        return cls(
            design=design_arr,
            response=response_arr,
            fitted=fitted_arr,
            residuals=residual_arr,
            coefficients=np.asarray(coefficients, dtype=np.float64).ravel(),
            term_names=tuple(term_names),
        )

    @property
    def n_obs(self) -> int:
        return int(self.design.shape[0])

    @property
    def n_params(self) -> int:
        return int(self.coefficients.shape[0])

    @property
    def df_residual(self) -> int:
        return self.n_obs - self.n_params


@dataclass(frozen=True, eq=False)
class DiagnosticStatistics:
    """Per-observation influence quantities of one fitted model.

    Observations whose leverage is numerically one are marked in
    ``unit_leverage``; their standardized residual and Cook's distance are NaN.
    """

    fitted: np.ndarray
    residuals: np.ndarray
    leverage: np.ndarray
    sigma2: float
    standardized_residuals: np.ndarray
    cooks_distance: np.ndarray
    influential: tuple[int, ...]
    unit_leverage: np.ndarray
    constant_leverage: bool
    n_params: int
    influence_threshold: float

    @property
    def n_obs(self) -> int:
        return int(self.leverage.shape[0])

    @property
    def valid(self) -> np.ndarray:
        return (self.leverage < 1.0) & ~self.unit_leverage

    @property
    def studentized_residuals(self) -> np.ndarray:
        # Same values as the standardized residuals; no leave-one-out variance.
        return self.standardized_residuals


@dataclass(frozen=True, eq=False)
class Series:
    x: np.ndarray
    y: np.ndarray
    color: str = "black"
    linestyle: str = "-"
    linewidth: float = 1.0


@dataclass(frozen=True)
class ReferenceLine:
    kind: LineKind
    value: float = 0.0
    start: tuple[float, float] | None = None
    end: tuple[float, float] | None = None
    color: str = "black"
    linestyle: str = "--"


@dataclass(frozen=True)
class TextLabel:
    x: float
    y: float
    text: str
    color: str = "black"
    fontsize: float = 8
    ha: str = "center"
    va: str = "bottom"


@dataclass(frozen=True)
class TickSpec:
    positions: tuple[float, ...]
    labels: tuple[str, ...]


@dataclass(frozen=True, eq=False)
class PanelSpec:
    view: int
    title: str
    xlabel: str
    ylabel: str
    scatter: Series | None = None
    trend: Series | None = None
    reference_lines: tuple[ReferenceLine, ...] = ()
    contours: tuple[Series, ...] = ()
    stems: Series | None = None
    xlim: tuple[float, float] | None = None
    ylim: tuple[float, float] | None = None
    xticks: TickSpec | None = None
    annotations: tuple[TextLabel, ...] = ()
    placeholder: str | None = None
    position: tuple[int, int] | None = None


@dataclass
class ModelResult:
    formula: str
    summary: FittedModelSummary
    fit_statistics: dict[str, float] = field(default_factory=dict)
    flags: list[Flag] = field(default_factory=list)
    raw_result: Any | None = None


@dataclass
class DiagnosticsRequest:
    input_path: Path
    output_dir: Path
    formula: str
    which: tuple[int, ...] = (1, 2, 3, 5)
    r_style: bool = True
    run_plots: bool = True
    run_tables: bool = True


@dataclass
class FigureArtifact:
    figure_id: str
    path: Path
    title: str
    caption: str
    section: str = "diagnostics"
    tags: list[str] = field(default_factory=list)


@dataclass
class TableArtifact:
    table_id: str
    path: Path
    title: str
    row_count: int
    columns: list[str] = field(default_factory=list)


@dataclass
class RunResult:
    request: DiagnosticsRequest
    model: ModelResult | None = None
    statistics: DiagnosticStatistics | None = None
    checks: list[ValidationResult] = field(default_factory=list)
    figures: list[FigureArtifact] = field(default_factory=list)
    tables: list[TableArtifact] = field(default_factory=list)
    flags: list[Flag] = field(default_factory=list)
