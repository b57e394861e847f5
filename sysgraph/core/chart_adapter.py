"""Packages projected series and time-window metadata into the chart contract.

The renderer only ever sees a :class:`TimeChart`: axis bounds and labels,
named datasets with a style tag and marker, and the legend size hint.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from fractions import Fraction
from typing import List, Optional, Sequence, Tuple

from sysgraph.config import AxisScaling, DataUnit
from sysgraph.core.history_projector import ConvertedData, CpuWidgetEntry, Point
from sysgraph.core.time_graph import TimeWindowController
from sysgraph.utils.units import get_binary_prefix, get_decimal_prefix

# Legend may take at most 3/4 of the chart width and 3/4 of its height.
HIDDEN_LEGEND_CONSTRAINTS: Tuple[Fraction, Fraction] = (Fraction(3, 4), Fraction(3, 4))

PERCENT_Y_BOUNDS: Tuple[float, float] = (0.0, 100.5)
PERCENT_Y_LABELS: List[str] = ["0%", "100%"]


class Marker(Enum):
    DOT = "dot"
    BRAILLE = "braille"


class GraphType(Enum):
    LINE = "line"
    SCATTER = "scatter"


@dataclass
class TimeGraphData:
    """One series handed to the adapter by a widget."""

    data: Sequence[Point]
    style: str
    label: Optional[str] = None


@dataclass
class Axis:
    bounds: Tuple[float, float]
    labels: List[str] = field(default_factory=list)
    style: str = ""


@dataclass
class Dataset:
    data: Sequence[Point]
    style: str
    marker: Marker
    graph_type: GraphType = GraphType.LINE
    name: Optional[str] = None


@dataclass
class TimeChart:
    datasets: List[Dataset]
    x_axis: Axis
    y_axis: Axis
    style: str
    legend_style: str
    hidden_legend_constraints: Tuple[Fraction, Fraction] = HIDDEN_LEGEND_CONSTRAINTS


class ChartAdapter:
    """Static builders from projected data to :class:`TimeChart` values."""

    @staticmethod
    def build_chart(
        controller: TimeWindowController,
        data: Sequence[TimeGraphData],
        y_bound_labels: Sequence[str],
        y_bounds: Tuple[float, float],
        available_height: int,
        graph_style: str,
        reverse_order: bool = False,
    ) -> TimeChart:
        """Assemble a chart for a graph whose inner area is ``available_height`` rows tall.

        ``reverse_order`` is for when the first series should be drawn on top;
        it also reverses the legend.
        """
        x_labels: List[str] = []
        if controller.should_show_time_labels(available_height):
            x_labels = controller.get_x_axis_labels()
        x_axis = Axis(bounds=controller.get_x_axis_bounds(), labels=x_labels, style=graph_style)
        y_axis = Axis(bounds=tuple(y_bounds), labels=list(y_bound_labels), style=graph_style)

        marker = Marker.DOT if controller.use_dot else Marker.BRAILLE
        datasets = [
            Dataset(data=item.data, style=item.style, marker=marker, name=item.label)
            for item in data
        ]
        if reverse_order:
            datasets.reverse()

        return TimeChart(
            datasets=datasets,
            x_axis=x_axis,
            y_axis=y_axis,
            style=graph_style,
            legend_style=graph_style,
        )

    # ----------------------- Per-widget series -----------------------
    @staticmethod
    def cpu_graph_data(
        converted: ConvertedData, colours: Sequence[str], avg_style: str, show_avg: bool = True
    ) -> List[TimeGraphData]:
        """One unlabeled series per CPU row; the legend lives in a separate table."""
        result: List[TimeGraphData] = []
        core_index = 0
        for cpu in converted.cpu_data:
            if not isinstance(cpu, CpuWidgetEntry):
                continue
            if cpu.data_type.is_avg:
                if show_avg:
                    result.append(TimeGraphData(data=cpu.data, style=avg_style))
                continue
            result.append(TimeGraphData(data=cpu.data, style=colours[core_index % len(colours)]))
            core_index += 1
        return result

    @staticmethod
    def memory_graph_data(
        converted: ConvertedData, ram_style: str, swap_style: str
    ) -> List[TimeGraphData]:
        result: List[TimeGraphData] = []
        if converted.mem_labels is not None:
            percent, absolute = converted.mem_labels
            result.append(TimeGraphData(
                data=converted.mem_data, style=ram_style, label=f"RAM:{percent}{absolute}"
            ))
        if converted.swap_labels is not None:
            percent, absolute = converted.swap_labels
            result.append(TimeGraphData(
                data=converted.swap_data, style=swap_style, label=f"SWP:{percent}{absolute}"
            ))
        return result

    @staticmethod
    def network_graph_data(
        converted: ConvertedData, rx_style: str, tx_style: str
    ) -> List[TimeGraphData]:
        rx_label = converted.rx_display
        tx_label = converted.tx_display
        if converted.total_rx_display is not None:
            rx_label = f"RX: {converted.rx_display}  Total: {converted.total_rx_display}"
        if converted.total_tx_display is not None:
            tx_label = f"TX: {converted.tx_display}  Total: {converted.total_tx_display}"
        return [
            TimeGraphData(data=converted.network_data_rx, style=rx_style, label=rx_label),
            TimeGraphData(data=converted.network_data_tx, style=tx_style, label=tx_label),
        ]

    @staticmethod
    def network_y_axis(
        rx: Sequence[Point],
        tx: Sequence[Point],
        current_display_time: int,
        scale_type: AxisScaling,
        unit_type: DataUnit,
        use_binary_prefix: bool,
    ) -> Tuple[Tuple[float, float], List[str]]:
        """Y bounds and labels sized to the largest value inside the visible window."""
        start = -float(current_display_time)
        visible = [
            value for offset, value in list(rx) + list(tx)
            if offset >= start and math.isfinite(value)
        ]
        max_entry = max(visible, default=0.0)
        unit = "B/s" if unit_type is DataUnit.BYTE else "b/s"
        prefix = get_binary_prefix if use_binary_prefix else get_decimal_prefix

        if scale_type is AxisScaling.LOG:
            base = 2.0 if use_binary_prefix else 10.0
            upper = max(math.ceil(max_entry), 1)
            top_value, top_unit = prefix(int(base ** upper), unit)
            return (0.0, float(upper)), [f"0{unit}", f"{top_value:.0f}{top_unit}"]

        upper = max_entry * 1.5 if max_entry > 0 else 1.0
        top_value, top_unit = prefix(int(upper), unit)
        return (0.0, upper), [f"0{unit}", f"{top_value:.1f}{top_unit}"]
