"""
@file logging.py
@brief Centralized logging configuration
@details
Configures application logging with support for file and stdout output.
Falls back to stdout only when no log directory is writable.

@author Market Research Project
@date 2025-03-19
@version 1.0
@license AGPL-3.0
"""

import logging
import sys
import os


def _resolve_log_dir():
    """
    @brief Pick a writable log directory or None
    @details
    LOG_DIR wins when set. Otherwise the project-local logs/ directory is
    created next to the app package.
    """
    log_dir = os.getenv("LOG_DIR")
    if log_dir:
        return log_dir

    # this file is in app/core/, so back 3 levels is the project root
    base_dir = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
    log_dir = os.path.join(base_dir, "logs")
    try:
        os.makedirs(log_dir, exist_ok=True)
    except (OSError, PermissionError):
        return None
    if not os.access(log_dir, os.W_OK):
        return None
    return log_dir


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    @brief Configure and return the application logger
    @details
    Sets up handlers based on the LOG_OUTPUT env var:
    - 'file': Write to <LOG_DIR>/app.log
    - 'stdout': Write to console
    - 'both': Write to both (default)
    """
    log_output = os.getenv("LOG_OUTPUT", "both").lower()
    log_dir = _resolve_log_dir() if log_output in ("file", "both") else None

    handlers = []

    if log_output in ("stdout", "both"):
        handlers.append(logging.StreamHandler(sys.stdout))

    if log_dir:
        try:
            handlers.append(logging.FileHandler(os.path.join(log_dir, "app.log")))
        except (OSError, PermissionError):
            if not any(isinstance(h, logging.StreamHandler) for h in handlers):
                handlers.append(logging.StreamHandler(sys.stdout))

    if not handlers:
        handlers.append(logging.StreamHandler(sys.stdout))

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers
    )

    return logging.getLogger("market_research")
