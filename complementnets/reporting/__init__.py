"""Reporting utilities for complementnets."""

from .artifacts import write_manifest
from .metrics import ConsoleSink, CsvSink, JsonlSink
from .plots import PlotAdapter
from .summary import write_summary
from .swatches import SwatchTable

__all__ = [
    "ConsoleSink",
    "CsvSink",
    "JsonlSink",
    "PlotAdapter",
    "SwatchTable",
    "write_manifest",
    "write_summary",
]
