"""Logging configuration for the study engine."""

from study_engine.observability.logger import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
