"""
Structured logging for the audience engine.

Modules obtain loggers with ``structlog.get_logger(__name__)`` and log
snake_case events with key/value context. The API app factory calls
``configure_logging`` with the service name and level from ``Settings``;
events are rendered as one JSON object per line on stdout.
"""

import logging
import sys
from typing import Any, Callable, Dict, List

import structlog

EventDict = Dict[str, Any]
Processor = Callable[[Any, str, EventDict], EventDict]


def service_context(service_name: str) -> Processor:
    """Processor stamping every event with ``service=<service_name>``."""

    def add_service(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service_name)
        return event_dict

    return add_service


def build_processors(service_name: str) -> List[Processor]:
    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        service_context(service_name),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]


def configure_logging(service_name: str, log_level: str = "info") -> None:
    level = getattr(logging, log_level.upper(), logging.INFO)

    # Loggers are not cached so a later call (another app in the same
    # process) takes effect for module-level loggers too.
    structlog.configure(
        processors=build_processors(service_name),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout)
    logging.getLogger().setLevel(level)
