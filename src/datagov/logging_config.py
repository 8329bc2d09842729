"""structlog setup.

Call configure_logging() once at startup (create_app does). Modules just do
`logger = structlog.get_logger()` and log event-style names:
`logger.info("job_run.completed", run_id=...)`.

The request-id middleware binds `request_id` into structlog contextvars,
and merge_contextvars copies it onto every line logged during the request.
"""

import logging
import sys

import structlog


def configure_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Install the processor chain for structlog and stdlib logging."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]
    if json_format:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # uvicorn / sqlalchemy / alembic log through stdlib
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
