"""Logging utilities: process-wide setup and stage latency tracking."""

import logging
import sys
import time
from functools import wraps
from typing import Callable

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging once for the server process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def log_latency(operation_name: str):
    """Log how long the wrapped call took and whether it raised."""

    def decorator(func: Callable):
        logger = logging.getLogger(func.__module__)

        @wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                latency_ms = (time.perf_counter() - start) * 1000
                logger.error(f"{operation_name} | latency_ms={latency_ms:.2f} | status=error | error={e}")
                raise
            latency_ms = (time.perf_counter() - start) * 1000
            logger.info(f"{operation_name} | latency_ms={latency_ms:.2f} | status=success")
            return result

        return wrapper

    return decorator
