from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any

from ols_diagnostics.checks.influence import InfluenceChecker, LeverageChecker
from ols_diagnostics.cli.help_text import EXPLANATIONS
from ols_diagnostics.config.settings import DiagnosticSettings
from ols_diagnostics.core.errors import DiagnosticsError
from ols_diagnostics.core.models import DiagnosticsRequest
from ols_diagnostics.data.loader import DataLoader
from ols_diagnostics.diagnostics.engine import DiagnosticsEngine
from ols_diagnostics.diagnostics.selection import ViewSelection
from ols_diagnostics.modeling.ols import OlsModelRunner
from ols_diagnostics.pipeline.orchestrator import PipelineOrchestrator
from ols_diagnostics.plotting.builder import PanelSpecBuilder, VIEW_TITLES
from ols_diagnostics.plotting.diagnostic import DiagnosticPlotter

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ols-diagnostics",
        description="R-style diagnostic statistics and plots for OLS regression models.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command")

    stats = subparsers.add_parser("stats", help="Report leverage, Cook's distance and influential points.")
    _add_model_arguments(stats)

    plot = subparsers.add_parser("plot", help="Render the diagnostic figure.")
    _add_model_arguments(plot)
    _add_plot_arguments(plot)

    run_all = subparsers.add_parser("run-all", help="Run checks, figure and influence table.")
    _add_model_arguments(run_all)
    _add_plot_arguments(run_all)
    run_all.add_argument("--no-tables", action="store_true", help="Disable the influence table CSV.")

    return parser


def _add_model_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("input", type=str, help="Path to input dataset (CSV, Parquet or Excel).")
    parser.add_argument(
        "--formula",
        type=str,
        required=True,
        help="Model formula in patsy syntax, e.g. 'y ~ x1 + x2'.",
    )
    parser.add_argument("--config", type=str, help="Path to diagnostic settings YAML.")
    parser.add_argument(
        "--output-dir",
        type=str,
        default="output/ols_diagnostics",
        help="Directory for figures and tables.",
    )
    parser.add_argument("--explain", action="store_true", help="Show assumptions and method context.")


def _add_plot_arguments(parser: argparse.ArgumentParser) -> None:
    views = "; ".join(f"{view}={title}" for view, title in VIEW_TITLES.items())
    parser.add_argument(
        "--which",
        nargs="*",
        type=int,
        default=None,
        help=f"Views to draw ({views}). Defaults to the configured views, 1 2 3 5.",
    )
    parser.add_argument(
        "--no-r-style",
        action="store_true",
        help="Draw bare scatters without smoothers, reference lines and point labels.",
    )


def _build_request(args: argparse.Namespace, settings: DiagnosticSettings) -> DiagnosticsRequest:
    which = args.which if getattr(args, "which", None) is not None else settings.which
    return DiagnosticsRequest(
        input_path=Path(args.input),
        output_dir=Path(args.output_dir),
        formula=args.formula,
        which=ViewSelection.from_values(which).views,
        r_style=settings.r_style and not getattr(args, "no_r_style", False),
        run_plots=args.command in {"plot", "run-all"},
        run_tables=args.command == "run-all" and not getattr(args, "no_tables", False),
    )


def _print_json(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _print_explain(command: str | None) -> bool:
    if not command:
        return False
    explanation = EXPLANATIONS.get(command)
    if explanation is None:
        return False
    print(explanation)
    return True


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1

    if args.explain:
        _print_explain(args.command)
        return 0

    settings = DiagnosticSettings.from_yaml(Path(args.config) if args.config else None)
    request = _build_request(args, settings)

    try:
        if args.command == "run-all":
            run_result = PipelineOrchestrator(settings=settings).run(request)
            _print_json(
                {
                    "formula": request.formula,
                    "views": list(request.which),
                    "figure_count": len(run_result.figures),
                    "figures": [str(figure.path) for figure in run_result.figures],
                    "table_count": len(run_result.tables),
                    "tables": [str(table.path) for table in run_result.tables],
                    "flag_count": len(run_result.flags),
                    "flags": [asdict(flag) for flag in run_result.flags],
                }
            )
            return 0 if run_result.statistics is not None else 1

        dataset = DataLoader().load(request.input_path)
        model_result = OlsModelRunner().run(dataset, request.formula)
        statistics = DiagnosticsEngine(settings).run(model_result.summary)
    except DiagnosticsError as exc:
        logger.error("Diagnostics failed: %s", exc)
        _print_json({"error": type(exc).__name__, "message": str(exc)})
        return 2

    if args.command == "stats":
        checks = [InfluenceChecker().run(statistics), LeverageChecker(settings).run(statistics)]
        _print_json(
            {
                "formula": model_result.formula,
                "n_obs": statistics.n_obs,
                "n_params": statistics.n_params,
                "residual_variance": statistics.sigma2,
                "influence_threshold": statistics.influence_threshold,
                "influential": [index + 1 for index in statistics.influential],
                "constant_leverage": statistics.constant_leverage,
                "fit_statistics": model_result.fit_statistics,
                "metrics": {check.name: check.metrics for check in checks},
                "flags": [asdict(flag) for check in checks for flag in check.flags],
            }
        )
        return 0

    if args.command == "plot":
        panels = PanelSpecBuilder(settings).build(statistics, request.which, request.r_style)
        figure = DiagnosticPlotter(settings).run(panels, request.output_dir / "figures")
        _print_json(
            {
                "formula": model_result.formula,
                "views": [panel.view for panel in panels],
                "figure": str(figure.path),
            }
        )
        return 0

    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
