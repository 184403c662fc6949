"""Centralized logging service using loguru."""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from loguru import logger

from deepresearch.config import settings

LOG_DIR = Path(settings.log_dir)
LOG_DIR.mkdir(parents=True, exist_ok=True)

# Remove default handler
logger.remove()

logger.add(
    sys.stderr,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    level=settings.app_log_level.upper(),
    colorize=True,
)

logger.add(
    LOG_DIR / "deepresearch_{time:YYYY-MM-DD}.log",
    format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
    level="DEBUG",
    rotation="00:00",
    retention="7 days",
    compression="zip",
)

for logger_name in (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "fastapi",
    "sse_starlette.sse",
    "httpx",
    "httpcore",
    "asyncio",
):
    logging.getLogger(logger_name).setLevel(settings.noisy_log_level.upper())


def log_search_call(
    provider: str,
    query: str,
    results_count: int = 0,
    duration_ms: int = 0,
    status: str = "success",
    error: Optional[str] = None,
) -> None:
    """Log a single provider search call."""
    call_data = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "provider": provider,
        "query": query,
        "results_count": results_count,
        "duration_ms": duration_ms,
        "status": status,
        "error": error,
    }
    if error:
        logger.warning(f"SEARCH_CALL_FAILED: {call_data}")
    else:
        logger.info(f"SEARCH_CALL: {call_data}")


def log_research_step(
    topic: str,
    step_id: str,
    status: str,
    data: Optional[dict] = None,
) -> None:
    """Log a research step outcome."""
    step_data = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "topic": topic,
        "step_id": step_id,
        "status": status,
        "data": data,
    }
    if status == "failed":
        logger.warning(f"RESEARCH_STEP: {step_data}")
    else:
        logger.info(f"RESEARCH_STEP: {step_data}")


def log_event(
    event_type: str,
    message: str,
    **kwargs,
) -> None:
    """Log a generic event."""
    event_data = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event_type": event_type,
        "message": message,
        **kwargs,
    }
    logger.info(f"EVENT: {event_data}")
