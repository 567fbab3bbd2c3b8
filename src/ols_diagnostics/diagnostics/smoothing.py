from __future__ import annotations

from typing import Any

import numpy as np

from ols_diagnostics.core.models import Series

MIN_SMOOTH_POINTS = 4


class LoessSmoother:
    """Local weighted regression with a fixed span (statsmodels lowess).

    ``iterations`` is the number of robustifying passes; zero gives the plain
    tricube-weighted local fit.
    """

    def __init__(self, span: float = 2.0 / 3.0, iterations: int = 0) -> None:
        if not 0.0 < span <= 1.0:
            raise ValueError(f"span must lie in (0, 1], got {span}")
        self.span = span
        self.iterations = iterations
        self._x: np.ndarray | None = None
        self._y: np.ndarray | None = None

    def fit(self, x: Any, y: Any) -> "LoessSmoother":
        x_arr = np.asarray(x, dtype=np.float64).ravel()
        y_arr = np.asarray(y, dtype=np.float64).ravel()
        if x_arr.shape != y_arr.shape:
            raise ValueError("x and y must have the same length")
        self._x = x_arr.copy()
        self._y = y_arr.copy()
        return self

    def predict(self, x_query: Any) -> np.ndarray:
        """Smoothed values at ``x_query``, interpolated from the in-sample fit.

        Tied x values share one fitted value. Queries outside the training range
        take the nearest edge value.
        """
        if self._x is None or self._y is None:
            raise RuntimeError("LoessSmoother.predict called before fit")

        from statsmodels.nonparametric.smoothers_lowess import lowess

        query = np.asarray(x_query, dtype=np.float64).ravel()
        in_sample = np.asarray(
            lowess(self._y, self._x, frac=self.span, it=self.iterations, return_sorted=False),
            dtype=np.float64,
        )
        finite = np.isfinite(in_sample)
        if not np.any(finite):
            return np.full(query.shape, np.nan)

        knots, inverse = np.unique(self._x[finite], return_inverse=True)
        knot_values = np.bincount(inverse, weights=in_sample[finite]) / np.bincount(inverse)
        return np.interp(query, knots, knot_values)


def smooth_curve(
    x: Any,
    y: Any,
    smoother: LoessSmoother,
    n_points: int = 100,
) -> Series | None:
    """Trend curve sampled on an even grid over the x range, or None if too little data."""
    x_arr = np.asarray(x, dtype=np.float64).ravel()
    y_arr = np.asarray(y, dtype=np.float64).ravel()
    finite = np.isfinite(x_arr) & np.isfinite(y_arr)
    x_arr = x_arr[finite]
    y_arr = y_arr[finite]
    if x_arr.shape[0] < MIN_SMOOTH_POINTS or np.ptp(x_arr) == 0.0:
        return None

    grid = np.linspace(float(x_arr.min()), float(x_arr.max()), n_points)
    values = smoother.fit(x_arr, y_arr).predict(grid)
    if not np.all(np.isfinite(values)):
        return None
    return Series(x=grid, y=values, color="red", linestyle="-", linewidth=1.5)
