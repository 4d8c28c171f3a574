"""Trace markers, footnotes and trace matrices for mdBook books."""

from __future__ import annotations

from .book import Book, Chapter, PartTitle, Separator
from .config import ParentNumbering, TargetConfig, TraceConfig
from .engine import RunState, TracePreprocessor
from .errors import (
    ConfigurationError,
    DuplicateTargetConfigurationError,
    MalformedMarkerError,
    MarkerError,
    ProtocolError,
    RegistryFrozenError,
    TraceError,
    UnknownTargetError,
)
from .registry import TraceRegistry
from .types import Trace, TraceTarget

__version__ = "0.1.0"

__all__ = [
    "Book",
    "Chapter",
    "ConfigurationError",
    "DuplicateTargetConfigurationError",
    "MalformedMarkerError",
    "MarkerError",
    "ParentNumbering",
    "PartTitle",
    "ProtocolError",
    "RegistryFrozenError",
    "RunState",
    "Separator",
    "TargetConfig",
    "Trace",
    "TraceConfig",
    "TraceError",
    "TracePreprocessor",
    "TraceRegistry",
    "TraceTarget",
    "UnknownTargetError",
]
