"""
Logging — structlog setup.

    from emporium.log import configure_logging
    configure_logging("DEBUG")

Modules log through `structlog.get_logger(__name__)` with event names and
bound keys (product_id=..., step=..., order_number=...).
"""

from __future__ import annotations

import logging

import structlog


def configure_logging(level: str = "INFO", *, json: bool = False) -> None:
    """Install the processor chain. Console output unless json=True."""
    renderer: structlog.typing.Processor = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping()[level.upper()]
        ),
        # Note: loggers stay reconfigurable (tests swap processors).
        cache_logger_on_first_use=False,
    )


__all__ = ("configure_logging",)
