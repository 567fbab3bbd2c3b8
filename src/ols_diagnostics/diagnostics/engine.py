from __future__ import annotations

import logging
from typing import Any

import numpy as np

from ols_diagnostics.config.settings import DiagnosticSettings
from ols_diagnostics.core.errors import InvalidModelError, SingularDesignError
from ols_diagnostics.core.models import DiagnosticStatistics, FittedModelSummary

logger = logging.getLogger(__name__)


def hat_diagonal(design: np.ndarray) -> np.ndarray:
    """Diagonal of X (X'X)^-1 X' computed row by row.

    Solves (X'X) Z = X' once and takes h_i = x_i . z_i, so memory stays O(n p)
    instead of materialising the n x n hat matrix.
    """
    n_params = design.shape[1]
    if np.linalg.matrix_rank(design) < n_params:
        raise SingularDesignError(
            f"Design matrix is rank deficient (rank < {n_params} columns); X'X is not invertible."
        )
    cross_product = design.T @ design
    try:
        solved = np.linalg.solve(cross_product, design.T)
    except np.linalg.LinAlgError as exc:
        raise SingularDesignError(f"X'X is not invertible: {exc}") from exc
    return np.einsum("ij,ji->i", design, solved)


def _read_only(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


def is_constant_leverage(leverage: np.ndarray, tolerance: float = 1e-10) -> bool:
    h_min = float(np.min(leverage))
    h_max = float(np.max(leverage))
    return h_min == 0.0 or (h_max - h_min) < tolerance * float(np.mean(leverage))


def _as_vector(values: Any, name: str, length: int) -> np.ndarray:
    vector = np.array(values, dtype=np.float64).ravel()
    if vector.shape[0] != length:
        raise InvalidModelError(f"{name} has {vector.shape[0]} entries, expected {length}.")
    if not np.all(np.isfinite(vector)):
        raise InvalidModelError(f"{name} contains NaN or Inf")
    return vector


def compute_statistics(
    design: Any,
    residuals: Any,
    fitted: Any,
    n_params: int | None = None,
    *,
    influence_multiplier: float = 4.0,
    leverage_tolerance: float = 1e-10,
) -> DiagnosticStatistics:
    """Leverage, standardized residuals, Cook's distance and influential set.

    Raises ``InvalidModelError`` when the residual degrees of freedom are not
    positive, and ``SingularDesignError`` when X'X cannot be inverted.
    """
    design_arr = np.asarray(design, dtype=np.float64)
    if design_arr.ndim == 1:
        design_arr = design_arr[:, np.newaxis]
    if design_arr.ndim != 2:
        raise InvalidModelError("Design matrix must be 2-dimensional")
    if not np.all(np.isfinite(design_arr)):
        raise InvalidModelError("Design matrix contains NaN or Inf")

    n_obs, n_columns = design_arr.shape
    n_params = n_columns if n_params is None else int(n_params)
    if n_params != n_columns:
        raise InvalidModelError(
            f"Parameter count {n_params} does not match the {n_columns} design columns."
        )
    if n_obs - n_params <= 0:
        raise InvalidModelError(
            f"Residual degrees of freedom are {n_obs - n_params} (n={n_obs}, p={n_params}); "
            "diagnostics need n > p."
        )

    resid = _as_vector(residuals, "residuals", n_obs)
    fitted_arr = _as_vector(fitted, "fitted values", n_obs)

    leverage = hat_diagonal(design_arr)
    sigma2 = float(resid @ resid) / (n_obs - n_params)
    if sigma2 <= 0.0:
        raise InvalidModelError("Residual variance is zero; diagnostics are undefined for an exact fit.")

    one_minus_h = 1.0 - leverage
    unit_leverage = one_minus_h < leverage_tolerance * float(np.mean(leverage))
    safe_one_minus_h = np.where(unit_leverage, np.nan, one_minus_h)

    standardized = resid / (np.sqrt(sigma2) * np.sqrt(safe_one_minus_h))
    cooks = (resid**2 / (n_params * sigma2)) * (leverage / safe_one_minus_h**2)

    threshold = influence_multiplier / n_obs
    exceeds = np.zeros(n_obs, dtype=bool)
    exceeds[~unit_leverage] = cooks[~unit_leverage] > threshold
    influential = tuple(int(index) for index in np.flatnonzero(exceeds))

    if np.any(unit_leverage):
        logger.warning(
            "%d observation(s) have unit leverage and are excluded from residual diagnostics",
            int(unit_leverage.sum()),
        )
    logger.debug(
        "Diagnostics computed for n=%d, p=%d: sigma2=%.6g, %d influential (threshold %.4g)",
        n_obs,
        n_params,
        sigma2,
        len(influential),
        threshold,
    )

    return DiagnosticStatistics(
        fitted=_read_only(fitted_arr),
        residuals=_read_only(resid),
        leverage=_read_only(leverage),
        sigma2=sigma2,
        standardized_residuals=_read_only(standardized),
        cooks_distance=_read_only(cooks),
        influential=influential,
        unit_leverage=_read_only(unit_leverage),
        constant_leverage=is_constant_leverage(leverage, leverage_tolerance),
        n_params=n_params,
        influence_threshold=threshold,
    )


class DiagnosticsEngine:
    """Compute diagnostic statistics for a fitted OLS model."""

    def __init__(self, settings: DiagnosticSettings | None = None) -> None:
        self.settings = settings or DiagnosticSettings()

    def run(self, summary: FittedModelSummary) -> DiagnosticStatistics:
        return compute_statistics(
            summary.design,
            summary.residuals,
            summary.fitted,
            summary.n_params,
            influence_multiplier=self.settings.influence_multiplier,
            leverage_tolerance=self.settings.leverage_tolerance,
        )
