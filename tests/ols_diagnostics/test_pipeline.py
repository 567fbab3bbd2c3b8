from __future__ import annotations

from pathlib import Path

import pandas as pd

from ols_diagnostics.config.settings import DiagnosticSettings
from ols_diagnostics.core.models import DiagnosticsRequest
from ols_diagnostics.pipeline.orchestrator import PipelineOrchestrator


def test_orchestrator_writes_figure_and_influence_table(dataset_csv: Path, tmp_path: Path) -> None:
    request = DiagnosticsRequest(
        input_path=dataset_csv,
        output_dir=tmp_path / "out",
        formula="y ~ x1 + x2",
        which=(1, 5, 6),
    )

    result = PipelineOrchestrator().run(request)

    assert result.statistics is not None
    assert result.statistics.n_params == 3
    assert [check.name for check in result.checks] == ["influence", "leverage"]
    assert len(result.figures) == 1
    assert result.figures[0].path.exists()
    assert result.figures[0].tags == ["diagnostic", "view-1", "view-5", "view-6"]
    assert len(result.tables) == 1

    table = pd.read_csv(result.tables[0].path)
    assert list(table.columns) == [
        "observation",
        "fitted",
        "residual",
        "leverage",
        "leverage_ratio",
        "standardized_residual",
        "cooks_distance",
        "influential",
        "unit_leverage",
    ]
    assert len(table) == 30
    assert abs(table["leverage"].sum() - 3.0) < 1e-8
    influential = tuple(int(row) - 1 for row in table.loc[table["influential"], "observation"])
    assert influential == result.statistics.influential


def test_orchestrator_respects_disabled_outputs(dataset_csv: Path, tmp_path: Path) -> None:
    request = DiagnosticsRequest(
        input_path=dataset_csv,
        output_dir=tmp_path / "out",
        formula="y ~ x1",
        run_plots=False,
        run_tables=False,
    )

    result = PipelineOrchestrator(settings=DiagnosticSettings(influence_multiplier=2.0)).run(request)

    assert result.figures == []
    assert result.tables == []
    assert result.statistics is not None
    assert result.statistics.influence_threshold == 2.0 / 30
    assert result.model is not None
    assert set(result.model.fit_statistics) >= {"r_squared", "df_resid"}
