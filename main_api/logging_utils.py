"""
Structured logging setup for main-api.

Every module logs through `structlog.get_logger(__name__)`; this module wires
structlog into the stdlib root logger so Flask/werkzeug output and our own
events end up on the same stream.
"""
import logging
import sys

import structlog
from structlog.contextvars import merge_contextvars


def configure_logging(level="INFO", fmt="console"):
    """Configure structlog and the stdlib root logger.

    `fmt` is "json" for log aggregation or "console" for human-readable output.
    Safe to call more than once; handlers are replaced, not stacked.
    """
    shared_processors = [
        merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if fmt == "json":
        renderer = structlog.processors.JSONRenderer()
        shared_processors.append(structlog.processors.format_exc_info)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level)

    # werkzeug duplicates our access log line
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
