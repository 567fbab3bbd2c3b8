from __future__ import annotations

from typing import Any

from ols_diagnostics.core.models import FittedModelSummary, Flag, ModelResult


def summary_from_results(results: Any) -> FittedModelSummary:
    """Extract design, response, fitted values and residuals from statsmodels OLS results."""
    model = results.model
    return FittedModelSummary.from_arrays(
        design=model.exog,
        response=model.endog,
        fitted=results.fittedvalues,
        coefficients=results.params,
        residuals=results.resid,
        term_names=tuple(model.exog_names or ()),
    )


class OlsModelRunner:
    """Fit ordinary least squares models using statsmodels formulas."""

    def run(self, dataset: Any, formula: str) -> ModelResult:
        import statsmodels.formula.api as smf

        model = smf.ols(formula=formula, data=dataset).fit()

        fit_stats = {
            "r_squared": float(model.rsquared),
            "adj_r_squared": float(model.rsquared_adj),
            "f_statistic": float(model.fvalue) if model.fvalue is not None else float("nan"),
            "f_pvalue": float(model.f_pvalue) if model.f_pvalue is not None else float("nan"),
            "n_obs": float(model.nobs),
            "df_resid": float(model.df_resid),
        }

        flags: list[Flag] = []
        if model.df_resid <= 0:
            flags.append(
                Flag(
                    code="model_df_resid_nonpositive",
                    message="Model residual degrees of freedom are non-positive.",
                    severity="ERROR",
                    stage="modeling",
                    recommendation="Simplify model terms or increase sample size.",
                )
            )

        return ModelResult(
            formula=formula,
            summary=summary_from_results(model),
            fit_statistics=fit_stats,
            flags=flags,
            raw_result=model,
        )
