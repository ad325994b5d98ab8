"""
Logging for coursecal: structlog rendering on top of stdlib logging.

Library modules log through ``logging.getLogger(__name__)``; the CLI uses
``get_logger`` for key/value events. Entry points call ``setup_logging()``
before doing any work.

    COURSECAL_LOG_LEVEL   DEBUG, INFO, WARNING... (default INFO)
    COURSECAL_LOG_FORMAT  "json" or "console"; json by default on Vercel
"""

from __future__ import annotations

import logging
import os
import sys

import structlog

HANDLER_NAME = "coursecal"

# chatty at INFO, and nothing there a user of the CLI needs
QUIET_LOGGERS = ("googleapiclient.discovery_cache", "google_auth_oauthlib.flow", "urllib3")


def _wants_json(json_output: bool | None) -> bool:
    if json_output is not None:
        return json_output
    default = "json" if os.environ.get("VERCEL") else "console"
    return os.environ.get("COURSECAL_LOG_FORMAT", default).lower() == "json"


def setup_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """Install (or replace) the coursecal handler on the root logger."""
    level = level or os.environ.get("COURSECAL_LOG_LEVEL", "INFO")
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    pre_chain: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
    ]
    if _wants_json(json_output):
        render: list[structlog.types.Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        render = [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *render],
    ))

    # other handlers (pytest's, the host's) stay in place
    root = logging.getLogger()
    for old in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(old)
    root.addHandler(handler)
    root.setLevel(numeric_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


__all__ = ["get_logger", "setup_logging"]
