"""qortex_metrics configuration, env-var driven.

All settings have safe defaults. Zero config required.

Logging:
    QORTEX_METRICS_LOG_FORMATTER=structlog (default) | stdlib
    QORTEX_METRICS_LOG_FORMAT=json (default) | console
    QORTEX_METRICS_LOG_LEVEL=INFO

Summary defaults (used by Summary.no_labels / Summary.labelled):
    QORTEX_METRICS_SUMMARY_MAX_AGE_SECONDS=600
    QORTEX_METRICS_SUMMARY_AGE_BUCKETS=5
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

DEFAULT_MAX_AGE_SECONDS = 600
DEFAULT_AGE_BUCKETS = 5


@dataclass
class MetricsConfig:
    """qortex_metrics configuration, env-var driven."""

    # --- Logging ---
    log_formatter: str = field(
        default_factory=lambda: os.environ.get("QORTEX_METRICS_LOG_FORMATTER", "structlog")
    )  # "structlog" | "stdlib"

    log_level: str = field(
        default_factory=lambda: os.environ.get("QORTEX_METRICS_LOG_LEVEL", "INFO")
    )

    log_format: str = field(
        default_factory=lambda: os.environ.get("QORTEX_METRICS_LOG_FORMAT", "json")
    )  # "json" | "console"

    # --- Summary sliding window ---
    summary_max_age_seconds: int = field(
        default_factory=lambda: int(
            os.environ.get("QORTEX_METRICS_SUMMARY_MAX_AGE_SECONDS", str(DEFAULT_MAX_AGE_SECONDS))
        )
    )
    summary_age_buckets: int = field(
        default_factory=lambda: int(
            os.environ.get("QORTEX_METRICS_SUMMARY_AGE_BUCKETS", str(DEFAULT_AGE_BUCKETS))
        )
    )
