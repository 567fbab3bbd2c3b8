from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

READERS = {
    ".csv": "read_csv",
    ".parquet": "read_parquet",
    ".pq": "read_parquet",
    ".xlsx": "read_excel",
    ".xls": "read_excel",
}


class DataLoader:
    """Read the tabular dataset a model formula refers to."""

    def load(self, path: Path) -> Any:
        import pandas as pd

        if not path.exists():
            raise FileNotFoundError(f"Input dataset not found: {path}")

        suffix = path.suffix.lower()
        reader = READERS.get(suffix)
        if reader is None:
            raise ValueError(f"Unsupported dataset extension: {suffix}")

        frame = getattr(pd, reader)(path)
        logger.debug("Loaded %s with %d rows and %d columns", path, frame.shape[0], frame.shape[1])
        return frame
