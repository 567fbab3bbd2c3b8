from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable

from ols_diagnostics.config.settings import DiagnosticSettings
from ols_diagnostics.core.models import (
    MARKER_EDGE,
    MARKER_FACE,
    FigureArtifact,
    FittedModelSummary,
    PanelSpec,
)
from ols_diagnostics.diagnostics.engine import DiagnosticsEngine
from ols_diagnostics.diagnostics.selection import PANELS_PER_ROW, grid_rows, panel_position
from ols_diagnostics.modeling.ols import summary_from_results
from ols_diagnostics.plotting.builder import PanelSpecBuilder

logger = logging.getLogger(__name__)


class DiagnosticPlotter:
    """Draw diagnostic panel specifications into a two-column matplotlib grid."""

    def __init__(self, settings: DiagnosticSettings | None = None) -> None:
        self.settings = settings or DiagnosticSettings()

    def _draw_panel(self, ax: Any, panel: PanelSpec) -> None:
        ax.set_title(panel.title, color="black")
        ax.set_xlabel(panel.xlabel)
        ax.set_ylabel(panel.ylabel)

        if panel.placeholder is not None:
            ax.text(0.5, 0.5, panel.placeholder, ha="center", va="center", transform=ax.transAxes)
            return

        if panel.stems is not None:
            ax.vlines(
                panel.stems.x,
                0.0,
                panel.stems.y,
                colors=panel.stems.color,
                linewidth=panel.stems.linewidth,
            )
        if panel.scatter is not None:
            ax.scatter(
                panel.scatter.x,
                panel.scatter.y,
                marker="o",
                facecolors=MARKER_FACE,
                edgecolors=MARKER_EDGE,
                linewidths=1,
                zorder=3,
            )
        for contour in panel.contours:
            ax.plot(
                contour.x,
                contour.y,
                color=contour.color,
                linestyle=contour.linestyle,
                linewidth=contour.linewidth,
            )
        if panel.trend is not None:
            ax.plot(
                panel.trend.x,
                panel.trend.y,
                color=panel.trend.color,
                linestyle=panel.trend.linestyle,
                linewidth=panel.trend.linewidth,
            )
        for line in panel.reference_lines:
            if line.kind == "horizontal":
                ax.axhline(y=line.value, color=line.color, linestyle=line.linestyle, linewidth=1)
            elif line.kind == "vertical":
                ax.axvline(x=line.value, color=line.color, linestyle=line.linestyle, linewidth=1)
            elif line.start is not None and line.end is not None:
                ax.plot(
                    [line.start[0], line.end[0]],
                    [line.start[1], line.end[1]],
                    color=line.color,
                    linestyle=line.linestyle,
                    linewidth=1,
                )
        for label in panel.annotations:
            ax.text(
                label.x,
                label.y,
                label.text,
                color=label.color,
                fontsize=label.fontsize,
                ha=label.ha,
                va=label.va,
            )

        if panel.xlim is not None:
            ax.set_xlim(*panel.xlim)
        if panel.ylim is not None:
            ax.set_ylim(*panel.ylim)
        if panel.xticks is not None:
            ax.set_xticks(list(panel.xticks.positions))
            ax.set_xticklabels(list(panel.xticks.labels))

    def draw(self, panels: list[PanelSpec]) -> Any:
        import matplotlib.pyplot as plt

        rows = grid_rows(len(panels))
        fig, axes = plt.subplots(
            rows,
            PANELS_PER_ROW,
            figsize=(PANELS_PER_ROW * self.settings.panel_width, rows * self.settings.panel_height),
            squeeze=False,
        )

        used: set[tuple[int, int]] = set()
        for rank, panel in enumerate(panels, start=1):
            row, column = panel.position or panel_position(rank, len(panels))
            self._draw_panel(axes[row - 1][column - 1], panel)
            used.add((row, column))

        for row in range(1, rows + 1):
            for column in range(1, PANELS_PER_ROW + 1):
                if (row, column) not in used:
                    axes[row - 1][column - 1].set_axis_off()

        fig.tight_layout()
        return fig

    def run(
        self,
        panels: list[PanelSpec],
        output_dir: Path,
        figure_id: str = "diagnostic_plots",
    ) -> FigureArtifact:
        import matplotlib.pyplot as plt

        output_dir.mkdir(parents=True, exist_ok=True)
        figure_path = output_dir / f"{figure_id}.{self.settings.figure_format}"

        fig = self.draw(panels)
        fig.savefig(figure_path, dpi=self.settings.figure_dpi)
        plt.close(fig)
        logger.info("Wrote diagnostic figure with %d panels to %s", len(panels), figure_path)

        return FigureArtifact(
            figure_id=figure_id,
            path=figure_path,
            title="Regression Diagnostics",
            caption=", ".join(panel.title for panel in panels),
            tags=["diagnostic", *(f"view-{panel.view}" for panel in panels)],
        )


def diagnostic_plots(
    model: Any,
    which: Iterable[Any] = (1, 2, 3, 5),
    r_style: bool = True,
    settings: DiagnosticSettings | None = None,
) -> Any:
    """Figure with R-style OLS diagnostic plots for a fitted model.

    ``model`` is either a ``FittedModelSummary`` or a fitted statsmodels OLS
    results object. ``which`` picks views from 1..6:

    1. Residuals vs Fitted
    2. Normal Q-Q
    3. Scale-Location
    4. Cook's Distance
    5. Residuals vs Leverage (with Cook's distance contours)
    6. Cook's Distance vs Leverage h/(1-h)

    Returns an open matplotlib Figure; the caller closes it.
    """
    summary = model if isinstance(model, FittedModelSummary) else summary_from_results(model)
    statistics = DiagnosticsEngine(settings).run(summary)
    panels = PanelSpecBuilder(settings).build(statistics, which, r_style)
    return DiagnosticPlotter(settings).draw(panels)
