"""Shared utilities and configuration."""

from macrodash.shared.config import Config
from macrodash.shared.exceptions import (
    MacroDashError,
    NoDataAvailableError,
    TransportError,
    UpstreamError,
    UpstreamSchemaError,
    UpstreamStatusError,
)
from macrodash.shared.utils import setup_logger

__all__ = [
    "Config",
    "setup_logger",
    "MacroDashError",
    "UpstreamError",
    "TransportError",
    "UpstreamSchemaError",
    "UpstreamStatusError",
    "NoDataAvailableError",
]
