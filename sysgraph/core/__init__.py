"""Data projection and time-window control for the monitor graphs."""

from .chart_adapter import ChartAdapter, TimeChart, TimeGraphData
from .history import DataCollection, TimedData
from .history_projector import ConvertedData, HistoryProjector
from .time_graph import ComponentEventResult, TimeWindowController

__all__ = [
    "ChartAdapter",
    "ComponentEventResult",
    "ConvertedData",
    "DataCollection",
    "HistoryProjector",
    "TimeChart",
    "TimeGraphData",
    "TimedData",
    "TimeWindowController",
]
