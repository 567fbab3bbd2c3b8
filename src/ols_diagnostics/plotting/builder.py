from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, Iterable

from ols_diagnostics.config.settings import DiagnosticSettings
from ols_diagnostics.core.models import DiagnosticStatistics, PanelSpec
from ols_diagnostics.diagnostics.selection import ViewSelection
from ols_diagnostics.diagnostics.smoothing import LoessSmoother
from ols_diagnostics.plotting.panels import (
    cooks_distance,
    cooks_vs_leverage_ratio,
    normal_qq,
    residuals_vs_fitted,
    residuals_vs_leverage,
    scale_location,
)

logger = logging.getLogger(__name__)

PanelGenerator = Callable[..., PanelSpec]

VIEW_GENERATORS: dict[int, PanelGenerator] = {
    1: residuals_vs_fitted,
    2: normal_qq,
    3: scale_location,
    4: cooks_distance,
    5: residuals_vs_leverage,
    6: cooks_vs_leverage_ratio,
}

VIEW_TITLES = {
    1: "Residuals vs Fitted",
    2: "Normal Q-Q",
    3: "Scale-Location",
    4: "Cook's Distance",
    5: "Residuals vs Leverage",
    6: "Cook's dist vs Leverage h/(1-h)",
}


class PanelSpecBuilder:
    """Derive one renderable panel specification per selected diagnostic view."""

    def __init__(self, settings: DiagnosticSettings | None = None) -> None:
        self.settings = settings or DiagnosticSettings()

    def _smoother(self) -> LoessSmoother:
        return LoessSmoother(span=self.settings.smoother_span, iterations=self.settings.smoother_iterations)

    def _view_options(self, view: int) -> dict[str, Any]:
        if view == 5:
            return {"cook_levels": self.settings.cook_levels}
        if view == 6:
            return {"residual_levels": self.settings.residual_levels}
        return {}

    def build(
        self,
        statistics: DiagnosticStatistics,
        which: ViewSelection | Iterable[Any] | None = None,
        r_style: bool | None = None,
    ) -> list[PanelSpec]:
        selection = which if isinstance(which, ViewSelection) else ViewSelection.from_values(
            self.settings.which if which is None else which
        )
        use_r_style = self.settings.r_style if r_style is None else r_style

        panels: list[PanelSpec] = []
        for view in selection:
            panel = VIEW_GENERATORS[view](
                statistics,
                r_style=use_r_style,
                smoother=self._smoother(),
                n_points=self.settings.smooth_points,
                **self._view_options(view),
            )
            panels.append(replace(panel, position=selection.position(view)))

        logger.debug("Built %d diagnostic panels for views %s", len(panels), selection.views)
        return panels
