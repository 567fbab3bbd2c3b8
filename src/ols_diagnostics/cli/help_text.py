EXPLANATIONS = {
    "stats": (
        "Stats fits the OLS formula with statsmodels and reports leverage, standardized residuals, "
        "Cook's distance and the influential observations (Cook's distance above 4/n). "
        "Assumes the formula's columns exist in the dataset and that n exceeds the number of "
        "model parameters."
    ),
    "plot": (
        "Plot draws R-style regression diagnostics, two panels per row. Views: "
        "1 Residuals vs Fitted, 2 Normal Q-Q, 3 Scale-Location, 4 Cook's Distance, "
        "5 Residuals vs Leverage, 6 Cook's dist vs Leverage h/(1-h). "
        "Use --which to pick views (default 1 2 3 5) and --no-r-style to drop smoothers, "
        "reference lines and point labels."
    ),
    "run-all": (
        "Run-all fits the model, runs influence and leverage checks, draws the diagnostic figure "
        "and writes the per-observation influence table as CSV."
    ),
}
