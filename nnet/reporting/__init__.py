"""Reporting utilities for nnet."""

from .checkpoint import load_checkpoint, save_checkpoint
from .metrics import CsvSink, JsonlSink
from .plots import PlotAdapter

__all__ = ["CsvSink", "JsonlSink", "PlotAdapter", "load_checkpoint", "save_checkpoint"]
