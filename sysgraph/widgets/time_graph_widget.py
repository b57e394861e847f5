"""QtCharts renderer for :class:`~sysgraph.core.chart_adapter.TimeChart` values.

The widget owns no data. It forwards zoom input to its
:class:`TimeWindowController` and emits ``redraw_requested`` when the window
changed, the host then re-projects the history and calls :meth:`draw`.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

from PySide6.QtCore import QMargins, QPointF, Qt, Signal
from PySide6.QtGui import QColor, QPainter
from PySide6.QtWidgets import QSizePolicy, QVBoxLayout, QWidget
from PySide6.QtCharts import (
    QCategoryAxis,
    QChart,
    QChartView,
    QLineSeries,
    QScatterSeries,
)

from sysgraph.core.chart_adapter import Axis, ChartAdapter, Marker, TimeChart, TimeGraphData
from sysgraph.core.time_graph import (
    ComponentEventResult,
    KeyModifiers,
    MouseEventKind,
    TimeWindowController,
)


def qt_modifiers_to_key_modifiers(modifiers) -> KeyModifiers:
    result = KeyModifiers.NONE
    if modifiers & Qt.ShiftModifier:
        result |= KeyModifiers.SHIFT
    if modifiers & Qt.ControlModifier:
        result |= KeyModifiers.CONTROL
    if modifiers & Qt.AltModifier:
        result |= KeyModifiers.ALT
    return result


def wheel_delta_to_mouse_kind(delta_y: int) -> MouseEventKind:
    """Positive wheel deltas scroll up (zoom in), negative ones scroll down."""
    if delta_y > 0:
        return MouseEventKind.SCROLL_UP
    if delta_y < 0:
        return MouseEventKind.SCROLL_DOWN
    return MouseEventKind.MOVED


def finite_points(data: Sequence[Tuple[float, float]]) -> List[QPointF]:
    return [QPointF(x, y) for x, y in data if math.isfinite(x) and math.isfinite(y)]


class TimeGraphWidget(QWidget):
    redraw_requested = Signal()

    def __init__(
        self,
        title: str,
        controller: TimeWindowController,
        graph_style: str,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.controller = controller
        self.graph_style = graph_style
        self.last_chart: Optional[TimeChart] = None

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self.chart = QChart()
        self.chart.setTheme(QChart.ChartThemeDark)
        self.chart.setTitle(title)
        self.chart.legend().setAlignment(Qt.AlignTop)
        self.chart.setAnimationOptions(QChart.NoAnimation)
        self.chart.setBackgroundVisible(False)
        self.chart.setMargins(QMargins(8, 8, 8, 8))

        self.view = QChartView(self.chart)
        self.view.setRenderHint(QPainter.Antialiasing, True)
        self.view.setStyleSheet("background-color: transparent;")
        layout.addWidget(self.view)

        self.setFocusPolicy(Qt.StrongFocus)
        self.setSizePolicy(QSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding))

    def available_rows(self) -> int:
        """Height of the plot in text rows, used to decide whether time labels fit."""
        return self.height() // max(1, self.fontMetrics().height())

    def draw(
        self,
        data: Sequence[TimeGraphData],
        y_bound_labels: Sequence[str],
        y_bounds: Tuple[float, float],
        reverse_order: bool = False,
    ) -> TimeChart:
        chart = ChartAdapter.build_chart(
            self.controller,
            data,
            y_bound_labels,
            y_bounds,
            self.available_rows(),
            self.graph_style,
            reverse_order=reverse_order,
        )
        self.render_chart(chart)
        return chart

    def render_chart(self, chart: TimeChart) -> None:
        self.last_chart = chart
        self.chart.removeAllSeries()
        for axis in self.chart.axes():
            self.chart.removeAxis(axis)

        axis_x = self._make_axis(chart.x_axis)
        axis_y = self._make_axis(chart.y_axis)
        self.chart.addAxis(axis_x, Qt.AlignBottom)
        self.chart.addAxis(axis_y, Qt.AlignLeft)

        legend = self.chart.legend()
        has_names = False
        for dataset in chart.datasets:
            if dataset.marker is Marker.DOT:
                series = QScatterSeries()
                series.setMarkerSize(4.0)
            else:
                series = QLineSeries()
            series.setColor(QColor(dataset.style))
            series.setName(dataset.name or "")
            series.replace(finite_points(dataset.data))
            self.chart.addSeries(series)
            series.attachAxis(axis_x)
            series.attachAxis(axis_y)
            if dataset.name:
                has_names = True
            else:
                for marker in legend.markers(series):
                    marker.setVisible(False)

        legend.setVisible(has_names)
        width_ratio, height_ratio = chart.hidden_legend_constraints
        legend.setMaximumSize(self.width() * float(width_ratio), self.height() * float(height_ratio))

    @staticmethod
    def _make_axis(axis: Axis) -> QCategoryAxis:
        low, high = axis.bounds
        result = QCategoryAxis()
        result.setRange(low, high)
        result.setLabelsPosition(QCategoryAxis.AxisLabelsPositionOnValue)
        result.setLabelsColor(QColor(axis.style))
        if len(axis.labels) == 2 and low < high:
            result.append(axis.labels[0], low)
            result.append(axis.labels[1], high)
        else:
            result.setLabelsVisible(False)
        return result

    # ----------------------- Input -----------------------
    def _apply(self, outcome: ComponentEventResult) -> ComponentEventResult:
        if outcome is ComponentEventResult.REDRAW:
            self.redraw_requested.emit()
        return outcome

    def keyPressEvent(self, event) -> None:  # noqa: N802
        outcome = self.controller.handle_key_event(
            event.text(), qt_modifiers_to_key_modifiers(event.modifiers())
        )
        if outcome is ComponentEventResult.UNHANDLED:
            super().keyPressEvent(event)
            return
        self._apply(outcome)

    def wheelEvent(self, event) -> None:  # noqa: N802
        kind = wheel_delta_to_mouse_kind(event.angleDelta().y())
        outcome = self.controller.handle_mouse_event(kind)
        if outcome is ComponentEventResult.UNHANDLED:
            super().wheelEvent(event)
            return
        self._apply(outcome)
        event.accept()
