from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pytest

from ols_diagnostics.core.models import FittedModelSummary
from ols_diagnostics.diagnostics.engine import compute_statistics
from ols_diagnostics.plotting.builder import PanelSpecBuilder
from ols_diagnostics.plotting.diagnostic import DiagnosticPlotter, diagnostic_plots


def _summary(n_obs: int = 40) -> FittedModelSummary:
    rng = np.random.default_rng(8)
    design = np.column_stack([np.ones(n_obs), rng.normal(size=n_obs), rng.normal(size=n_obs)])
    response = design @ np.array([0.5, 2.0, -1.5]) + rng.normal(scale=0.5, size=n_obs)
    coef, *_ = np.linalg.lstsq(design, response, rcond=None)
    return FittedModelSummary.from_arrays(design, response, design @ coef, coef)


def test_draw_lays_out_two_panels_per_row() -> None:
    summary = _summary()
    stats = compute_statistics(summary.design, summary.residuals, summary.fitted)
    panels = PanelSpecBuilder().build(stats, [1, 2, 4])

    fig = DiagnosticPlotter().draw(panels)
    try:
        assert len(fig.axes) == 4
        assert tuple(fig.get_size_inches()) == pytest.approx((9.0, 9.0))
        titles = [ax.get_title() for ax in fig.axes]
        assert titles[:3] == ["Residuals vs Fitted", "Normal Q-Q Plot", "Cook's Distance"]
        assert not fig.axes[3].axison
    finally:
        plt.close(fig)


def test_draw_applies_custom_ticks_and_limits() -> None:
    summary = _summary()
    stats = compute_statistics(summary.design, summary.residuals, summary.fitted)
    (panel,) = PanelSpecBuilder().build(stats, [6])

    fig = DiagnosticPlotter().draw([panel])
    try:
        ax = fig.axes[0]
        np.testing.assert_allclose(ax.get_xticks(), panel.xticks.positions)
        assert panel.xticks.labels == ("0.1", "0.2", "0.3", "0.4", "0.5")
        assert ax.get_ylim() == pytest.approx(panel.ylim)
    finally:
        plt.close(fig)


def test_placeholder_panel_is_drawn_as_text() -> None:
    design = np.array([[1.0, 1.0], [1.0, -1.0], [1.0, 1.0], [1.0, -1.0]])
    stats = compute_statistics(design, np.array([1.0, 1.0, -1.0, -1.0]), np.array([3.0, 1.0, 3.0, 1.0]))
    panels = PanelSpecBuilder().build(stats, [5])

    fig = DiagnosticPlotter().draw(panels)
    try:
        texts = [text.get_text() for text in fig.axes[0].texts]
        assert texts == ["Constant leverage: no plot"]
    finally:
        plt.close(fig)


def test_run_writes_figure_artifact(tmp_path: Path) -> None:
    summary = _summary()
    stats = compute_statistics(summary.design, summary.residuals, summary.fitted)
    panels = PanelSpecBuilder().build(stats)

    artifact = DiagnosticPlotter().run(panels, tmp_path / "figures")

    assert artifact.path == tmp_path / "figures" / "diagnostic_plots.png"
    assert artifact.path.exists()
    assert "view-5" in artifact.tags


def test_diagnostic_plots_accepts_statsmodels_results() -> None:
    import statsmodels.api as sm

    summary = _summary()
    results = sm.OLS(summary.response, summary.design).fit()

    fig = diagnostic_plots(results, which=range(1, 7))
    try:
        assert len(fig.axes) == 6
        assert tuple(fig.get_size_inches()) == pytest.approx((9.0, 13.5))
    finally:
        plt.close(fig)


def test_diagnostic_plots_bare_style_from_summary() -> None:
    fig = diagnostic_plots(_summary(), which=[1], r_style=False)
    try:
        ax = fig.axes[0]
        assert ax.get_title() == "Residuals vs Fitted"
        assert len(ax.lines) == 0
        assert len(ax.texts) == 0
    finally:
        plt.close(fig)
