from __future__ import annotations

import logging

from ols_diagnostics.checks.base import BaseCheck
from ols_diagnostics.checks.influence import InfluenceChecker, LeverageChecker
from ols_diagnostics.config.settings import DiagnosticSettings
from ols_diagnostics.core.models import DiagnosticsRequest, RunResult
from ols_diagnostics.data.loader import DataLoader
from ols_diagnostics.diagnostics.engine import DiagnosticsEngine
from ols_diagnostics.modeling.ols import OlsModelRunner
from ols_diagnostics.plotting.builder import PanelSpecBuilder
from ols_diagnostics.plotting.diagnostic import DiagnosticPlotter
from ols_diagnostics.reporting.table_builder import InfluenceTableBuilder

logger = logging.getLogger(__name__)


class PipelineOrchestrator:
    """Run the diagnostics workflow from dataset to figure and influence table."""

    def __init__(
        self,
        settings: DiagnosticSettings | None = None,
        loader: DataLoader | None = None,
        model_runner: OlsModelRunner | None = None,
        engine: DiagnosticsEngine | None = None,
        checks: list[BaseCheck] | None = None,
        panel_builder: PanelSpecBuilder | None = None,
        plotter: DiagnosticPlotter | None = None,
        table_builder: InfluenceTableBuilder | None = None,
    ) -> None:
        self.settings = settings or DiagnosticSettings()
        self.loader = loader or DataLoader()
        self.model_runner = model_runner or OlsModelRunner()
        self.engine = engine or DiagnosticsEngine(self.settings)
        self.checks = checks if checks is not None else [InfluenceChecker(), LeverageChecker(self.settings)]
        self.panel_builder = panel_builder or PanelSpecBuilder(self.settings)
        self.plotter = plotter or DiagnosticPlotter(self.settings)
        self.table_builder = table_builder or InfluenceTableBuilder()

    def run(self, request: DiagnosticsRequest) -> RunResult:
        result = RunResult(request=request)
        request.output_dir.mkdir(parents=True, exist_ok=True)

        dataset = self.loader.load(request.input_path)
        model = self.model_runner.run(dataset, request.formula)
        result.model = model
        result.flags.extend(model.flags)
        if any(flag.severity == "ERROR" for flag in model.flags):
            logger.warning("Diagnostics skipped because model fitting reported blocking errors")
            return result

        statistics = self.engine.run(model.summary)
        result.statistics = statistics

        for check in self.checks:
            validation = check.run(statistics)
            result.checks.append(validation)
            result.flags.extend(validation.flags)

        if request.run_plots:
            panels = self.panel_builder.build(statistics, request.which, request.r_style)
            result.figures.append(self.plotter.run(panels, request.output_dir / "figures"))

        if request.run_tables:
            result.tables.append(self.table_builder.build(statistics, request.output_dir))

        return result
