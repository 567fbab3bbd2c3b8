from __future__ import annotations

from typing import Any, Iterable, Sequence

import numpy as np
from scipy import stats

from ols_diagnostics.core.models import (
    MARKER_EDGE,
    DiagnosticStatistics,
    PanelSpec,
    ReferenceLine,
    Series,
    TextLabel,
    TickSpec,
)
from ols_diagnostics.diagnostics.smoothing import LoessSmoother, smooth_curve

COOK_LEVELS = (0.5, 1.0)
RESIDUAL_LEVELS = (0.5, 1.0, 1.5, 2.0)
LEVERAGE_TICKS = (0.1, 0.2, 0.3, 0.4, 0.5)
CONTOUR_COLOR = "red"
CONSTANT_LEVERAGE_TEXT = "Constant leverage: no plot"


def _scatter(x: Any, y: Any) -> Series:
    return Series(x=np.asarray(x, dtype=np.float64), y=np.asarray(y, dtype=np.float64), color=MARKER_EDGE)


def influence_labels(
    influential: Iterable[int],
    x: np.ndarray,
    y: np.ndarray,
    include: np.ndarray | None = None,
) -> tuple[TextLabel, ...]:
    """1-based observation numbers placed just above each influential point."""
    labels = []
    for index in influential:
        if include is not None and not include[index]:
            continue
        labels.append(TextLabel(x=float(x[index]), y=float(y[index]), text=str(index + 1)))
    return tuple(labels)


def fitted_xlim(fitted: np.ndarray) -> tuple[float, float]:
    return float(np.min(fitted)) - 0.5, float(np.max(fitted)) + 0.5


def symmetric_ylim(values: np.ndarray, factor: float = 1.1) -> tuple[float, float]:
    extent = float(np.max(np.abs(values))) * factor
    return -extent, extent


def normal_quantiles(n_points: int) -> np.ndarray:
    # (i - 0.5) / n plotting positions, not i / (n + 1).
    probabilities = (np.arange(1, n_points + 1) - 0.5) / n_points
    return stats.norm.ppf(probabilities)


def qq_reference_line(sorted_values: np.ndarray, theoretical: np.ndarray) -> ReferenceLine:
    """Line through the first and third quartiles, spanning the theoretical range."""
    y_q1, y_q3 = np.quantile(sorted_values, [0.25, 0.75])
    x_q1, x_q3 = stats.norm.ppf([0.25, 0.75])
    slope = (y_q3 - y_q1) / (x_q3 - x_q1)
    intercept = y_q1 - slope * x_q1
    x_start = float(np.min(theoretical))
    x_end = float(np.max(theoretical))
    return ReferenceLine(
        kind="segment",
        start=(x_start, float(slope * x_start + intercept)),
        end=(x_end, float(slope * x_end + intercept)),
        color="gray",
    )


def contour_range(leverage: np.ndarray) -> tuple[float, float]:
    return max(float(np.min(leverage)), 0.001), min(float(np.max(leverage)), 0.999)


def cook_contour(
    level: float,
    n_params: int,
    h_low: float,
    h_high: float,
    n_points: int = 100,
) -> tuple[np.ndarray, np.ndarray]:
    """Upper branch of the Cook's distance contour y(h) = sqrt(level p (1 - h) / h)."""
    h_grid = np.linspace(h_low, h_high, n_points)
    return h_grid, np.sqrt(level * n_params * (1.0 - h_grid) / h_grid)


def cook_contour_edge_labels(
    levels: Sequence[float],
    n_params: int,
    h_edge: float,
    offset: float = 0.02,
) -> tuple[TextLabel, ...]:
    multiplier = np.sqrt(n_params * (1.0 - h_edge) / h_edge)
    labels = []
    for level in levels:
        position = float(np.sqrt(level) * multiplier)
        for y in (position, -position):
            labels.append(
                TextLabel(
                    x=h_edge + offset,
                    y=y,
                    text=str(level),
                    color=CONTOUR_COLOR,
                    ha="left",
                    va="center",
                )
            )
    return tuple(labels)


def leverage_ratio(leverage: np.ndarray) -> np.ndarray:
    return leverage / (1.0 - leverage)


def leverage_ratio_ticks(at_hat: Sequence[float] = LEVERAGE_TICKS) -> TickSpec:
    """Ticks at h/(1-h) positions labelled with the leverage value itself."""
    hat = np.asarray(at_hat, dtype=np.float64)
    return TickSpec(
        positions=tuple(float(value) for value in leverage_ratio(hat)),
        labels=tuple(str(value) for value in at_hat),
    )


def residual_level_lines(
    levels: Sequence[float],
    g_max: float,
    y_max: float,
    n_points: int = 100,
) -> tuple[tuple[Series, ...], tuple[TextLabel, ...]]:
    """Lines d = b^2 g for each standardized residual level b, clipped at y_max."""
    lines = []
    labels = []
    for level in levels:
        slope = level**2
        x_values = np.linspace(0.0, g_max, n_points)
        y_values = slope * x_values
        if np.max(y_values) < y_max:
            lines.append(Series(x=x_values, y=y_values, color=CONTOUR_COLOR, linestyle="--"))
            labels.append(
                TextLabel(
                    x=g_max + 0.05,
                    y=slope * g_max,
                    text=str(level),
                    color=CONTOUR_COLOR,
                    ha="left",
                    va="center",
                )
            )
        else:
            x_clip = y_max / slope
            x_values = np.linspace(0.0, x_clip, n_points)
            lines.append(Series(x=x_values, y=slope * x_values, color=CONTOUR_COLOR, linestyle="--"))
            labels.append(
                TextLabel(
                    x=x_clip,
                    y=y_max - 0.02,
                    text=str(level),
                    color=CONTOUR_COLOR,
                    ha="center",
                    va="top",
                )
            )
    return tuple(lines), tuple(labels)


def residuals_vs_fitted(
    statistics: DiagnosticStatistics,
    *,
    r_style: bool = True,
    smoother: LoessSmoother | None = None,
    n_points: int = 100,
) -> PanelSpec:
    fitted = statistics.fitted
    residuals = statistics.residuals

    trend = None
    reference_lines: tuple[ReferenceLine, ...] = ()
    annotations: tuple[TextLabel, ...] = ()
    if r_style:
        trend = smooth_curve(fitted, residuals, smoother or LoessSmoother(), n_points)
        reference_lines = (ReferenceLine(kind="horizontal", value=0.0),)
        annotations = influence_labels(statistics.influential, fitted, residuals)

    return PanelSpec(
        view=1,
        title="Residuals vs Fitted",
        xlabel="Fitted values",
        ylabel="Residuals",
        scatter=_scatter(fitted, residuals),
        trend=trend,
        reference_lines=reference_lines,
        xlim=fitted_xlim(fitted),
        ylim=symmetric_ylim(residuals),
        annotations=annotations,
    )


def normal_qq(
    statistics: DiagnosticStatistics,
    *,
    r_style: bool = True,
    smoother: LoessSmoother | None = None,
    n_points: int = 100,
) -> PanelSpec:
    standardized = statistics.standardized_residuals
    candidates = np.flatnonzero(~statistics.unit_leverage)
    order = candidates[np.argsort(standardized[candidates], kind="stable")]
    sorted_values = standardized[order]
    theoretical = normal_quantiles(order.shape[0])

    reference_lines: tuple[ReferenceLine, ...] = ()
    annotations: tuple[TextLabel, ...] = ()
    if r_style:
        reference_lines = (qq_reference_line(sorted_values, theoretical),)
        sorted_rank = {int(observation): rank for rank, observation in enumerate(order)}
        annotations = tuple(
            TextLabel(
                x=float(theoretical[sorted_rank[index]]),
                y=float(sorted_values[sorted_rank[index]]),
                text=str(index + 1),
            )
            for index in statistics.influential
            if index in sorted_rank
        )

    return PanelSpec(
        view=2,
        title="Normal Q-Q Plot",
        xlabel="Theoretical Quantiles",
        ylabel="Standardized Residuals",
        scatter=_scatter(theoretical, sorted_values),
        reference_lines=reference_lines,
        annotations=annotations,
    )


def scale_location(
    statistics: DiagnosticStatistics,
    *,
    r_style: bool = True,
    smoother: LoessSmoother | None = None,
    n_points: int = 100,
) -> PanelSpec:
    fitted = statistics.fitted
    root_abs = np.sqrt(np.abs(statistics.standardized_residuals))
    keep = ~statistics.unit_leverage

    trend = None
    annotations: tuple[TextLabel, ...] = ()
    if r_style:
        trend = smooth_curve(fitted[keep], root_abs[keep], smoother or LoessSmoother(), n_points)
        annotations = influence_labels(statistics.influential, fitted, root_abs)

    return PanelSpec(
        view=3,
        title="Scale-Location",
        xlabel="Fitted values",
        ylabel="√|Standardized residuals|",
        scatter=_scatter(fitted[keep], root_abs[keep]),
        trend=trend,
        xlim=fitted_xlim(fitted),
        annotations=annotations,
    )


def cooks_distance(
    statistics: DiagnosticStatistics,
    *,
    r_style: bool = True,
    smoother: LoessSmoother | None = None,
    n_points: int = 100,
) -> PanelSpec:
    keep = ~statistics.unit_leverage
    observation = np.arange(1, statistics.n_obs + 1, dtype=np.float64)
    distance = statistics.cooks_distance
    y_top = float(np.max(distance[keep])) * 1.075

    reference_lines: tuple[ReferenceLine, ...] = ()
    annotations: tuple[TextLabel, ...] = ()
    if r_style:
        reference_lines = (
            ReferenceLine(kind="horizontal", value=statistics.influence_threshold, color="red"),
        )
        annotations = influence_labels(statistics.influential, observation, distance)

    return PanelSpec(
        view=4,
        title="Cook's Distance",
        xlabel="Obs. number",
        ylabel="Cook's distance",
        scatter=_scatter(observation[keep], distance[keep]),
        stems=Series(x=observation[keep], y=distance[keep], linewidth=0.5),
        reference_lines=reference_lines,
        ylim=(0.0, y_top) if y_top > 0.0 else None,
        annotations=annotations,
    )


def residuals_vs_leverage(
    statistics: DiagnosticStatistics,
    *,
    r_style: bool = True,
    smoother: LoessSmoother | None = None,
    n_points: int = 100,
    cook_levels: Sequence[float] = COOK_LEVELS,
) -> PanelSpec:
    title = "Residuals vs Leverage"
    xlabel = "Leverage"
    ylabel = "Standardized Residuals"
    if statistics.constant_leverage:
        return PanelSpec(view=5, title=title, xlabel=xlabel, ylabel=ylabel, placeholder=CONSTANT_LEVERAGE_TEXT)

    valid = statistics.valid
    leverage = statistics.leverage[valid]
    standardized = statistics.standardized_residuals[valid]
    ylim = symmetric_ylim(standardized)

    h_low, h_high = contour_range(leverage)
    contours = []
    for level in cook_levels:
        h_grid, upper = cook_contour(level, statistics.n_params, h_low, h_high, n_points)
        contours.append(Series(x=h_grid, y=upper, color=CONTOUR_COLOR, linestyle="--"))
        contours.append(Series(x=h_grid, y=-upper, color=CONTOUR_COLOR, linestyle="--"))

    legend = TextLabel(
        x=0.01,
        y=0.95 * ylim[1],
        text="Cook's distance",
        color=CONTOUR_COLOR,
        ha="left",
        va="bottom",
    )

    trend = None
    reference_lines: tuple[ReferenceLine, ...] = ()
    annotations: tuple[TextLabel, ...] = (legend,)
    if r_style:
        trend = smooth_curve(leverage, standardized, smoother or LoessSmoother(), n_points)
        reference_lines = (
            ReferenceLine(kind="horizontal", value=0.0),
            ReferenceLine(kind="vertical", value=0.0),
        )
        annotations += cook_contour_edge_labels(cook_levels, statistics.n_params, h_high)
        annotations += influence_labels(
            statistics.influential,
            statistics.leverage,
            statistics.standardized_residuals,
            include=valid,
        )

    return PanelSpec(
        view=5,
        title=title,
        xlabel=xlabel,
        ylabel=ylabel,
        scatter=_scatter(leverage, standardized),
        trend=trend,
        reference_lines=reference_lines,
        contours=tuple(contours),
        ylim=ylim,
        annotations=annotations,
    )


def cooks_vs_leverage_ratio(
    statistics: DiagnosticStatistics,
    *,
    r_style: bool = True,
    smoother: LoessSmoother | None = None,
    n_points: int = 100,
    residual_levels: Sequence[float] = RESIDUAL_LEVELS,
) -> PanelSpec:
    valid = statistics.valid
    ratio = np.full(statistics.n_obs, np.nan)
    ratio[valid] = leverage_ratio(statistics.leverage[valid])
    distance = statistics.cooks_distance

    y_top = float(np.max(distance[valid])) * 1.025
    g_max = float(np.max(ratio[valid]))
    lines, line_labels = residual_level_lines(residual_levels, g_max, y_top, n_points)

    annotations = line_labels
    if r_style:
        annotations += influence_labels(statistics.influential, ratio, distance, include=valid)

    return PanelSpec(
        view=6,
        title="Cook's dist vs Leverage h/(1-h)",
        xlabel="Leverage hᵢᵢ",
        ylabel="Cook's distance",
        scatter=_scatter(ratio[valid], distance[valid]),
        contours=lines,
        ylim=(0.0, y_top),
        xticks=leverage_ratio_ticks(),
        annotations=annotations,
    )
