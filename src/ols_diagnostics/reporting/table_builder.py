from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import pandas as pd

from ols_diagnostics.core.models import DiagnosticStatistics, TableArtifact

logger = logging.getLogger(__name__)


class InfluenceTableBuilder:
    """Create the per-observation influence table and write it as CSV."""

    TABLE_ID = "influence_measures"

    def frame(self, statistics: DiagnosticStatistics) -> pd.DataFrame:
        leverage = statistics.leverage
        with np.errstate(divide="ignore", invalid="ignore"):
            ratio = np.where(statistics.valid, leverage / (1.0 - leverage), np.nan)

        influential = np.zeros(statistics.n_obs, dtype=bool)
        influential[list(statistics.influential)] = True

        return pd.DataFrame(
            {
                "observation": np.arange(1, statistics.n_obs + 1),
                "fitted": statistics.fitted,
                "residual": statistics.residuals,
                "leverage": leverage,
                "leverage_ratio": ratio,
                "standardized_residual": statistics.standardized_residuals,
                "cooks_distance": statistics.cooks_distance,
                "influential": influential,
                "unit_leverage": statistics.unit_leverage,
            }
        )

    def build(self, statistics: DiagnosticStatistics, output_dir: Path) -> TableArtifact:
        tables_dir = output_dir / "tables"
        tables_dir.mkdir(parents=True, exist_ok=True)
        table_path = tables_dir / f"{self.TABLE_ID}.csv"

        frame = self.frame(statistics)
        frame.to_csv(table_path, index=False)
        logger.info("Wrote influence table with %d rows to %s", len(frame), table_path)

        return TableArtifact(
            table_id=self.TABLE_ID,
            path=table_path,
            title="Influence Measures",
            row_count=int(len(frame)),
            columns=list(frame.columns),
        )
