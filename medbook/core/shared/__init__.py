"""
Shared utilities used across domains.
"""

from medbook.core.shared.logger import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
