"""Configure once at startup; everything works unconfigured too.

configure() wires logging from MetricsConfig and remembers the config so
the Summary short constructors pick up the configured sliding window.
reset() is for tests.
"""

from __future__ import annotations

from qortex_metrics.config import MetricsConfig

_config: MetricsConfig | None = None
_configured: bool = False


def configure(config: MetricsConfig | None = None) -> MetricsConfig:
    """Set up logging and store the active config.

    Idempotent -- a second call returns the existing config.
    """
    global _config, _configured

    if _configured and _config is not None:
        return _config

    cfg = config or MetricsConfig()

    from qortex_metrics.logging import get_logger, setup_logging

    setup_logging(cfg)
    # committed before the first event is logged
    _config = cfg
    _configured = True

    get_logger(__name__).debug(
        "metrics.configured",
        log_formatter=cfg.log_formatter,
        summary_max_age_seconds=cfg.summary_max_age_seconds,
        summary_age_buckets=cfg.summary_age_buckets,
    )
    return cfg


def is_configured() -> bool:
    return _configured


def active_config() -> MetricsConfig:
    """The configured MetricsConfig, or a fresh env-derived one."""
    if _config is not None:
        return _config
    return MetricsConfig()


def reset() -> None:
    """Reset for testing."""
    global _config, _configured

    from qortex_metrics.logging import shutdown_logging

    shutdown_logging()
    _config = None
    _configured = False
