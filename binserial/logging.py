"""Logging infrastructure for binserial.

This module provides a centralized logger factory for all binserial
components. Loggers live under the ``binserial`` namespace; nothing is
emitted until an application configures a handler.

Example:
    >>> from binserial.logging import configure_logging, get_logger
    >>> configure_logging(level=logging.DEBUG)
    >>> logger = get_logger("schema")
    >>> logger.debug("Schema built")
"""

import logging
from typing import Optional


BINSERIAL_ROOT_LOGGER = "binserial"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class BinserialLoggerFactory:
    """Factory for creating and managing binserial component loggers.

    Provides hierarchical loggers under the 'binserial' namespace,
    allowing fine-grained control over logging levels per component.
    """

    @classmethod
    def get_logger(cls, name: str = "") -> logging.Logger:
        """Get a logger for a binserial component.

        Args:
            name: Component name (e.g., 'schema', 'image').
                  If empty, returns the root binserial logger.

        Returns:
            A logger instance for the specified component.
        """
        if name:
            logger_name = f"{BINSERIAL_ROOT_LOGGER}.{name}"
        else:
            logger_name = BINSERIAL_ROOT_LOGGER
        return logging.getLogger(logger_name)

    @classmethod
    def configure(
        cls,
        level: int = logging.INFO,
        format_string: str = DEFAULT_FORMAT,
        handler: Optional[logging.Handler] = None,
    ) -> logging.Logger:
        """Configure the binserial logging system.

        Only adds a handler if the root binserial logger has none yet.

        Args:
            level: Logging level (e.g., logging.DEBUG, logging.INFO).
            format_string: Format string for log messages.
            handler: Optional custom handler. If None, a StreamHandler is used.

        Returns:
            The configured root logger.
        """
        logger = logging.getLogger(BINSERIAL_ROOT_LOGGER)
        logger.setLevel(level)

        if not logger.handlers:
            if handler is None:
                handler = logging.StreamHandler()
            handler.setLevel(level)
            handler.setFormatter(logging.Formatter(format_string))
            logger.addHandler(handler)

        return logger

    @classmethod
    def set_level(cls, level: int, component: str = "") -> None:
        """Set logging level for a specific component or the root logger."""
        cls.get_logger(component).setLevel(level)


def get_logger(name: str = "") -> logging.Logger:
    """Get a binserial logger for a component.

    Args:
        name: Component name (e.g., 'schema', 'serializer', 'image').

    Returns:
        Logger instance for the component.
    """
    return BinserialLoggerFactory.get_logger(name)


def configure_logging(
    level: int = logging.INFO,
    format_string: str = DEFAULT_FORMAT,
    handler: Optional[logging.Handler] = None,
) -> logging.Logger:
    """Configure the binserial logging system.

    This is the primary entry point for setting up logging.
    """
    return BinserialLoggerFactory.configure(level, format_string, handler)


def set_level(level: int, component: str = "") -> None:
    """Set logging level for a component, or the root logger if empty."""
    BinserialLoggerFactory.set_level(level, component)
