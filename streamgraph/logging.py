"""Structured logging for streamgraph hosts and scripts.

This module provides:
- Structured logging configuration (key=value format)
- A context variable carrying the graph expression being run

Example:
    >>> from streamgraph.logging import setup_logging
    >>> setup_logging("INFO")
"""

import logging
import sys
from contextvars import ContextVar


# Context variable for the graph currently being run
graph_var: ContextVar[str] = ContextVar("graph", default="")


# =============================================================================
# Custom Logging Formatter
# =============================================================================


class StructuredFormatter(logging.Formatter):
    """Structured log formatter producing key=value output.
    
    Formats log messages as:
        timestamp=ISO8601 level=LEVEL logger=NAME graph=EXPR message=MSG
    """
    
    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as structured key=value pairs."""
        timestamp = self.formatTime(record, self.datefmt)
        
        graph = graph_var.get() or "-"
        
        parts = [
            f"timestamp={timestamp}",
            f"level={record.levelname}",
            f"logger={record.name}",
            f'graph="{graph}"',
        ]
        
        message = record.getMessage()
        message = message.replace('"', '\\"')
        parts.append(f'message="{message}"')
        
        if record.exc_info:
            exc_text = self.formatException(record.exc_info)
            exc_text = exc_text.replace('\n', ' | ').replace('"', '\\"')
            parts.append(f'exception="{exc_text}"')
        
        return " ".join(parts)


# =============================================================================
# Logging Setup
# =============================================================================


def setup_logging(log_level: str = "INFO") -> None:
    """Configure structured logging on stdout.
    
    Replaces any handler already installed on the root logger.
    
    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR).
    """
    formatter = StructuredFormatter(
        datefmt="%Y-%m-%dT%H:%M:%S%z"
    )
    
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level.upper())
    
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    stdout_handler.setLevel(log_level.upper())
    root_logger.addHandler(stdout_handler)
