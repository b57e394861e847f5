"""UI widgets for the system monitor application."""

from .time_graph_widget import TimeGraphWidget

__all__ = ["TimeGraphWidget"]
