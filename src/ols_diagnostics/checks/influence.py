from __future__ import annotations

import numpy as np

from ols_diagnostics.checks.base import BaseCheck
from ols_diagnostics.config.settings import DiagnosticSettings
from ols_diagnostics.core.models import DiagnosticStatistics, Flag, ValidationResult


def _one_based(indices: np.ndarray) -> list[int]:
    return [int(index) + 1 for index in indices]


def _preview(observations: list[int], limit: int = 10) -> str:
    preview = ", ".join(str(value) for value in observations[:limit])
    if len(observations) > limit:
        preview = f"{preview}, ..."
    return preview


class InfluenceChecker(BaseCheck):
    name = "influence"
    assumptions = [
        "Cook's distance above 4/n marks an observation for review, not a formal test.",
        "Standardized residuals beyond +/-3 are unusual under normal errors.",
    ]

    def __init__(self, outlier_limit: float = 3.0) -> None:
        self.outlier_limit = outlier_limit

    def run(self, statistics: DiagnosticStatistics) -> ValidationResult:
        flags: list[Flag] = []
        keep = ~statistics.unit_leverage
        cooks = np.where(keep, statistics.cooks_distance, 0.0)
        standardized = np.where(keep, statistics.standardized_residuals, 0.0)

        influential = [index + 1 for index in statistics.influential]
        if influential:
            flags.append(
                self.flag(
                    "influential_observations_detected",
                    f"{len(influential)} observations exceed Cook's distance threshold "
                    f"{statistics.influence_threshold:.4g}: {_preview(influential)}",
                    observations=influential,
                    recommendation="Inspect influence diagnostics and assess sensitivity to outliers.",
                )
            )

        above_one = _one_based(np.flatnonzero(cooks > 1.0))
        if above_one:
            flags.append(
                self.flag(
                    "cooks_distance_above_one",
                    f"Cook's distance exceeds 1 for observations {_preview(above_one)}.",
                    observations=above_one,
                    recommendation="Refit without these observations and compare coefficients.",
                )
            )

        outliers = _one_based(np.flatnonzero(np.abs(standardized) > self.outlier_limit))
        if outliers:
            flags.append(
                self.flag(
                    "large_standardized_residuals",
                    f"{len(outliers)} standardized residuals exceed +/-{self.outlier_limit:g}: "
                    f"{_preview(outliers)}",
                    observations=outliers,
                    recommendation="Check these rows for recording errors or model misspecification.",
                )
            )

        return self.result(
            flags,
            {
                "cooks_distance_threshold": statistics.influence_threshold,
                "influential_count": len(influential),
                "max_cooks_distance": float(np.max(cooks[keep])),
                "max_abs_standardized_residual": float(np.max(np.abs(standardized[keep]))),
                "residual_variance": statistics.sigma2,
            },
        )


class LeverageChecker(BaseCheck):
    name = "leverage"
    assumptions = [
        "Leverage above 2p/n indicates an unusual design point.",
        "Leverage equal to one means the fit passes through the observation exactly.",
    ]

    def __init__(self, settings: DiagnosticSettings | None = None) -> None:
        self.settings = settings or DiagnosticSettings()

    def run(self, statistics: DiagnosticStatistics) -> ValidationResult:
        flags: list[Flag] = []
        leverage = statistics.leverage
        cutoff = self.settings.high_leverage_multiplier * statistics.n_params / statistics.n_obs

        unit = _one_based(np.flatnonzero(statistics.unit_leverage))
        if unit:
            flags.append(
                self.flag(
                    "unit_leverage_observations",
                    f"Observations {_preview(unit)} have leverage one; their standardized residuals "
                    "and Cook's distances are undefined and they are left out of the plots.",
                    observations=unit,
                    recommendation="Check for indicator columns that isolate single observations.",
                )
            )

        high = _one_based(np.flatnonzero(~statistics.unit_leverage & (leverage > cutoff)))
        if high:
            flags.append(
                self.flag(
                    "high_leverage_observations",
                    f"{len(high)} observations exceed leverage cutoff {cutoff:.4g}: {_preview(high)}",
                    observations=high,
                    recommendation="Review predictor values of these observations.",
                )
            )

        if statistics.constant_leverage:
            flags.append(
                self.flag(
                    "constant_leverage",
                    "Leverage is constant across observations; residuals vs leverage is not drawn.",
                    severity="INFO",
                )
            )

        return self.result(
            flags,
            {
                "leverage_sum": float(np.sum(leverage)),
                "leverage_min": float(np.min(leverage)),
                "leverage_max": float(np.max(leverage)),
                "high_leverage_cutoff": cutoff,
                "high_leverage_count": len(high),
                "constant_leverage": statistics.constant_leverage,
            },
        )
