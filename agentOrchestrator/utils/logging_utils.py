"""Logging utilities for agentOrchestrator."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

ROOT_LOGGER_NAME = "agentOrchestrator"


def setup_logging(observability=None, level: Optional[int] = None) -> logging.Logger:
    """Setup logging configuration for agentOrchestrator.

    Args:
        observability: ObservabilitySettings (log dir, console level)
        level: Optional console level override

    Returns:
        Configured logger instance
    """
    log_dir = Path(getattr(observability, "log_dir", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"orchestrator_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    if level is None:
        level_name = str(getattr(observability, "log_level", "WARNING")).upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            level = logging.WARNING

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)  # Capture all child logs, handlers filter
    logger.propagate = False

    logger.handlers = []

    # File handler (detailed logs)
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    ))

    # Console handler (user-friendly)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    logger.info("=" * 80)
    logger.info("agentOrchestrator session started")
    logger.info(f"Log file: {log_file}")
    logger.info("=" * 80)

    return logger


def _preview(value: Any, max_length: int) -> str:
    text = value if isinstance(value, str) else str(value)
    if len(text) > max_length:
        return text[:max_length] + "... (truncated)"
    return text


def log_stage_transition(logger: logging.Logger, session_id: str, from_stage: str, to_stage: str, **details: Any) -> None:
    """Log a macro-stage transition of an orchestration session.

    Args:
        logger: Logger instance
        session_id: Session being driven
        from_stage: Stage (or status) being left
        to_stage: Stage (or status) being entered
        **details: Extra key/value context (task counts etc.)
    """
    logger.info("=" * 80)
    logger.info(f"Stage transition: {from_stage} → {to_stage}")
    logger.info(f"  Session: {session_id}")
    for key, value in details.items():
        logger.info(f"  {key}: {value}")
    logger.info("=" * 80)


def log_tool_call(logger: logging.Logger, label: str, tool_name: str, args: Dict[str, Any]) -> None:
    """Log tool invocation.

    Args:
        logger: Logger instance
        label: Agent label (e.g. "PlanAgent", "explorer-2")
        tool_name: Name of the tool being called
        args: Tool arguments
    """
    logger.info(f"[{label}] Tool call: {tool_name}")
    logger.debug(f"  Arguments: {json.dumps(args, ensure_ascii=False, indent=2, default=str)}")


def log_tool_result(logger: logging.Logger, label: str, tool_name: str, result: Any, max_length: int = 500) -> None:
    """Log tool execution result (preview only).

    Args:
        logger: Logger instance
        label: Agent label
        tool_name: Name of the tool
        result: Tool execution result
        max_length: Preview length
    """
    logger.info(f"[{label}] Tool result: {tool_name}")
    logger.debug(f"  Result: {_preview(result, max_length)}")


def log_error(logger: logging.Logger, error: Exception, context: str = "") -> None:
    """Log error with context.

    Args:
        logger: Logger instance
        error: Exception instance
        context: Additional context about where the error occurred
    """
    logger.error(f"Error occurred: {type(error).__name__}: {str(error)}")
    if context:
        logger.error(f"  Context: {context}")
    logger.debug("Full traceback:", exc_info=error)
