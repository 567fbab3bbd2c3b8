from __future__ import annotations


class DiagnosticsError(Exception):
    """Base class for fatal diagnostics failures."""


class InvalidModelError(DiagnosticsError, ValueError):
    """The fitted model cannot support diagnostics (shapes, n <= p, exact fit)."""


class SingularDesignError(DiagnosticsError):
    """The design cross-product X'X is not invertible."""
