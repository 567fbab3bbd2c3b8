from __future__ import annotations

from pathlib import Path

import matplotlib
import numpy as np
import pandas as pd
import pytest

matplotlib.use("Agg")


@pytest.fixture()
def dataset_csv(tmp_path: Path) -> Path:
    rng = np.random.default_rng(17)
    frame = pd.DataFrame({"x1": rng.normal(size=30), "x2": rng.uniform(0.0, 5.0, size=30)})
    frame["y"] = 1.0 + 2.0 * frame["x1"] - 0.5 * frame["x2"] + rng.normal(scale=0.4, size=30)
    frame.loc[3, "y"] += 4.0
    path = tmp_path / "sample.csv"
    frame.to_csv(path, index=False)
    return path
