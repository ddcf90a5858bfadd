"""Configuration, logging and exceptions."""

from propgen.core.log import configure_logging

__all__ = ["configure_logging"]
