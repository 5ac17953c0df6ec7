import logging
import logging.handlers
import sys

import structlog
from structlog.typing import EventDict, WrappedLogger

from infrastructure.config import settings

# Libraries whose records are routed through the structlog formatter
CAPTURED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi", "temporalio")

# Name given to the handlers installed here, so a second setup replaces them
HANDLER_NAME = "artifact_generator"


def add_service_context(_logger: WrappedLogger, _method_name: str, event_dict: EventDict) -> EventDict:
    """Tag every event with the service name and environment."""
    event_dict.setdefault("service", settings.app_name)
    event_dict.setdefault("env", settings.app_env)
    return event_dict


def _named(handler: logging.Handler) -> logging.Handler:
    handler.set_name(HANDLER_NAME)
    return handler


def setup_logging() -> None:
    """Configure unified logging for structlog, uvicorn, temporalio and the standard library.

    Events carry the ``request_id`` bound by the request-context middleware
    through ``merge_contextvars``. Calling this again replaces the handlers
    installed by the previous call.
    """
    settings.log_dir.mkdir(parents=True, exist_ok=True)
    log_file = settings.log_dir / f"{settings.app_env}.log"

    common_processors = [
        structlog.contextvars.merge_contextvars,
        add_service_context,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.app_env == "development":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            *common_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=common_processors,
        processor=renderer,
    )

    stream_handler = _named(logging.StreamHandler(sys.stdout))
    stream_handler.setFormatter(formatter)

    file_handler = _named(
        logging.handlers.TimedRotatingFileHandler(
            log_file,
            when="midnight",
            interval=1,
            backupCount=7,
        ),
    )
    file_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    for handler in [h for h in root_logger.handlers if h.get_name() == HANDLER_NAME]:
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.addHandler(stream_handler)
    root_logger.addHandler(file_handler)
    root_logger.setLevel(settings.log_level.upper())

    for logger_name in CAPTURED_LOGGERS:
        captured = logging.getLogger(logger_name)
        captured.handlers = [stream_handler, file_handler]
        captured.propagate = False

    # Malformed bodies are reported per request; the parser's own warnings are noise
    logging.getLogger("python_multipart").setLevel(logging.ERROR)
