"""Error taxonomy for metric construction and binding.

All four failures are programmer errors raised at the point they occur:

    ValidationError      — malformed name/suffix, out-of-range quantile, bad buckets
    RegistrationError    — backend refused the family (duplicate name, bad label)
    ArityMismatchError   — extractor returned the wrong number of label values
    NarrowedHandleError  — asked for the backend family of a label-bound handle
"""

from __future__ import annotations

from typing import Any


class MetricsError(Exception):
    """Base class for every qortex_metrics error."""


class ValidationError(MetricsError, ValueError):
    """Input failed validation before anything reached the backend."""

    def __init__(self, message: str, *, value: Any = None, field: str | None = None) -> None:
        super().__init__(message)
        self.value = value
        self.field = field


class RegistrationError(MetricsError):
    """The backend registry rejected a metric family."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Failed to register metric {name!r}: {reason}")
        self.name = name
        self.reason = reason


class ArityMismatchError(MetricsError, ValueError):
    """Extracted label values do not match the declared label names."""

    def __init__(self, name: str, expected: int, actual: int) -> None:
        super().__init__(
            f"Metric {name!r} declares {expected} label(s) "
            f"but the extractor produced {actual} value(s)"
        )
        self.name = name
        self.expected = expected
        self.actual = actual


class NarrowedHandleError(MetricsError, TypeError):
    """The handle is bound to specific label values; no family object to return."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"Cannot get underlying parent {kind} with labels applied")
        self.kind = kind
