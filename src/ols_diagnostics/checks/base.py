from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

from ols_diagnostics.core.models import DiagnosticStatistics, Flag, Severity, ValidationResult


class BaseCheck(ABC):
    """Inspect computed diagnostic statistics and report findings as flags."""

    name = "base-check"
    assumptions: list[str] = []

    @abstractmethod
    def run(self, statistics: DiagnosticStatistics) -> ValidationResult:
        raise NotImplementedError

    def flag(
        self,
        code: str,
        message: str,
        observations: Iterable[int] = (),
        severity: Severity = "WARN",
        recommendation: str | None = None,
    ) -> Flag:
        return Flag(
            code=code,
            message=message,
            severity=severity,
            stage=self.name,
            observations=list(observations),
            recommendation=recommendation,
        )

    def result(self, flags: list[Flag], metrics: dict[str, object]) -> ValidationResult:
        return ValidationResult(
            name=self.name,
            passed=all(flag.severity != "ERROR" for flag in flags),
            summary=f"{self.name.capitalize()} checks completed with {len(flags)} flag(s).",
            flags=flags,
            metrics=metrics,
            assumptions=list(self.assumptions),
        )

    def describe(self) -> str:
        lines = [f"Check: {self.name}", "Assumptions:"]
        lines.extend(f"- {entry}" for entry in self.assumptions)
        return "\n".join(lines)
