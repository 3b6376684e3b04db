from __future__ import annotations

import logging
from typing import Optional

import structlog


def setup_logging(level: str = "info", fmt: str = "human", to_file: bool = False, file_path: Optional[str] = None) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
    ]
    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )

    handlers = [logging.StreamHandler()]
    if to_file and file_path:
        handlers.append(logging.FileHandler(file_path))
    for handler in handlers:
        handler.setLevel(log_level)

    logging.basicConfig(level=log_level, handlers=handlers)
