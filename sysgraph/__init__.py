"""sysgraph: history projection and zoomable time graphs for a resource monitor."""

__version__ = "0.1.0"
