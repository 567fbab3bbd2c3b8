from __future__ import annotations

from pathlib import Path

import numpy as np

from ols_diagnostics.diagnostics.engine import compute_statistics
from ols_diagnostics.reporting.table_builder import InfluenceTableBuilder


def test_influence_frame_marks_unit_leverage_rows() -> None:
    design = np.array([[1.0, 0.0], [1.0, 0.0], [1.0, 0.0], [1.0, 1.0]])
    stats = compute_statistics(design, np.array([1.0, -1.0, 0.0, 0.0]), np.zeros(4))

    frame = InfluenceTableBuilder().frame(stats)

    assert frame["observation"].tolist() == [1, 2, 3, 4]
    assert frame["unit_leverage"].tolist() == [False, False, False, True]
    assert np.isnan(frame.loc[3, "leverage_ratio"])
    np.testing.assert_allclose(frame.loc[:2, "leverage_ratio"], 0.5)


def test_influence_table_written_as_csv(tmp_path: Path) -> None:
    design = np.column_stack([np.ones(5), np.arange(1.0, 6.0)])
    stats = compute_statistics(design, np.array([0.1, -0.2, 0.05, 0.1, -0.05]), np.zeros(5))

    artifact = InfluenceTableBuilder().build(stats, tmp_path)

    assert artifact.path == tmp_path / "tables" / "influence_measures.csv"
    assert artifact.path.exists()
    assert artifact.row_count == 5
    assert "cooks_distance" in artifact.columns
