"""Error taxonomy for the working-capital domain."""
from __future__ import annotations

QUARTER_GRAMMAR = "YY.NQ (two-digit year, dot, quarter 1-4, 'Q'; e.g. 25.3Q)"


class WcDashboardError(Exception):
    """Base class for every error raised by the package."""


class InvalidQuarterFormat(WcDashboardError, ValueError):
    def __init__(self, label: object) -> None:
        self.label = label
        super().__init__(f"Invalid fiscal quarter {label!r}: expected {QUARTER_GRAMMAR}")


class UnknownEntity(WcDashboardError, ValueError):
    def __init__(self, value: object, allowed: list[str]) -> None:
        self.value = value
        self.allowed = allowed
        super().__init__(f"Unknown entity {value!r}; allowed: {', '.join(allowed)}")


class InvalidSnapshot(WcDashboardError, ValueError):
    """Raised when snapshot fields violate the balance invariants."""


class DuplicateSnapshot(WcDashboardError):
    def __init__(self, key: object) -> None:
        self.key = key
        super().__init__(f"Duplicate snapshot for {key}")


class UploadError(WcDashboardError):
    """Raised when an uploaded workbook cannot produce any snapshot."""

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        self.details = list(details or [])
        super().__init__(message)
