"""
Resource monitor window built on the sysgraph projection core (PySide6)

Dependencies:
- PySide6 (Qt 6, including QtCharts)
- psutil

Install:
  pip install -e .

Run:
  python -m sysgraph.app

Notes:
- One QTimer drives harvesting and redraws at ``update_rate_in_milliseconds``.
- Graph keys (focus a graph first): '+' zoom in, '-' zoom out, '=' reset; the
  mouse wheel zooms as well.
- Window shortcuts: F=Freeze/Unfreeze, Esc=Quit
"""
from __future__ import annotations

import logging
import sys
from typing import Optional

from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QApplication,
    QHeaderView,
    QLabel,
    QMainWindow,
    QTableWidget,
    QTableWidgetItem,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from sysgraph.config import AppConfigFields
from sysgraph.core.chart_adapter import PERCENT_Y_BOUNDS, PERCENT_Y_LABELS, ChartAdapter
from sysgraph.core.harvester import Harvester
from sysgraph.core.history import DataCollection
from sysgraph.core.history_projector import ConvertedData, CpuWidgetEntry, HistoryProjector
from sysgraph.core.time_graph import TimeWindowController
from sysgraph.utils.theme import (
    AVG_CPU_STYLE,
    CPU_COLOURS,
    GRAPH_STYLE,
    RAM_STYLE,
    RX_STYLE,
    SWAP_STYLE,
    TX_STYLE,
    apply_dark_theme,
)
from sysgraph.widgets import TimeGraphWidget

logger = logging.getLogger(__name__)


class SystemMonitor(QMainWindow):
    def __init__(
        self,
        config: AppConfigFields,
        harvester: Optional[Harvester] = None,
        collection: Optional[DataCollection] = None,
    ) -> None:
        super().__init__()
        self.config = config
        self.collection = collection if collection is not None else DataCollection()
        self.harvester = harvester if harvester is not None else Harvester.from_config(config)
        self.projector = HistoryProjector.from_config(config)
        self.converted: Optional[ConvertedData] = None
        self.resize(1200, 800)

        tabs = QTabWidget()
        self.setCentralWidget(tabs)
        self.tabs = tabs

        # Each graph zooms independently.
        self.graph_cpu = TimeGraphWidget(
            "CPU", TimeWindowController.from_config(config), GRAPH_STYLE
        )
        self.graph_mem = TimeGraphWidget(
            "Memory", TimeWindowController.from_config(config), GRAPH_STYLE
        )
        self.graph_net = TimeGraphWidget(
            "Network", TimeWindowController.from_config(config), GRAPH_STYLE
        )
        for graph in (self.graph_cpu, self.graph_mem, self.graph_net):
            graph.redraw_requested.connect(self.redraw)

        cpu_tab = QWidget()
        cpu_l = QVBoxLayout(cpu_tab)
        cpu_l.addWidget(self.graph_cpu)
        self.lbl_cpu_legend = QLabel("")
        self.lbl_cpu_legend.setObjectName("GraphLegend")
        self.lbl_cpu_legend.setWordWrap(True)
        cpu_l.addWidget(self.lbl_cpu_legend)
        self.lbl_load_avg = QLabel("")
        self.lbl_load_avg.setObjectName("GraphLegend")
        cpu_l.addWidget(self.lbl_load_avg)
        tabs.addTab(cpu_tab, "CPU")

        mem_tab = QWidget()
        QVBoxLayout(mem_tab).addWidget(self.graph_mem)
        tabs.addTab(mem_tab, "Memory")

        net_tab = QWidget()
        QVBoxLayout(net_tab).addWidget(self.graph_net)
        tabs.addTab(net_tab, "Network")

        self.disk_table = self._make_table(
            ["Disk", "Mount", "Used", "Use%", "Free", "Total", "R/s", "W/s"]
        )
        tabs.addTab(self.disk_table, "Disks")
        self.temp_table = self._make_table(["Sensor", "Temp"])
        tabs.addTab(self.temp_table, "Temperatures")
        self.lbl_battery = QLabel("No battery detected")
        self.lbl_battery.setAlignment(Qt.AlignTop | Qt.AlignLeft)
        tabs.addTab(self.lbl_battery, "Battery")

        self.lbl_frozen = QLabel("")
        self.lbl_frozen.setObjectName("FrozenBanner")
        self.statusBar().addWidget(self.lbl_frozen)

        self.timer = QTimer(self)
        self.timer.timeout.connect(self.on_timer)
        self.timer.start(self.config.update_rate_in_milliseconds)

        self._setup_shortcuts()
        self._update_window_title()

    @staticmethod
    def _make_table(headers) -> QTableWidget:
        table = QTableWidget(0, len(headers))
        table.setHorizontalHeaderLabels(headers)
        table.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        table.setAlternatingRowColors(True)
        table.setEditTriggers(QTableWidget.NoEditTriggers)
        return table

    def _setup_shortcuts(self) -> None:
        freeze_action = QAction("Freeze/Unfreeze", self)
        freeze_action.setShortcut(QKeySequence("F"))
        freeze_action.triggered.connect(self.toggle_freeze)
        self.addAction(freeze_action)

        quit_action = QAction("Quit", self)
        quit_action.setShortcut(QKeySequence("Esc"))
        quit_action.triggered.connect(self.close)
        self.addAction(quit_action)

    def toggle_freeze(self) -> None:
        """Pin the graphs to the current instant, or release them."""
        if self.collection.is_frozen:
            self.collection.thaw()
        else:
            self.collection.freeze()
        logger.info("Display %s", "frozen" if self.collection.is_frozen else "resumed")
        self._update_window_title()
        self.redraw()

    def _update_window_title(self) -> None:
        state = " [FROZEN]" if self.collection.is_frozen else ""
        self.setWindowTitle(f"System Monitor ({self.config.update_rate_in_milliseconds} ms){state}")
        self.lbl_frozen.setText("Frozen, press F to resume" if state else "")

    # ----------------------- Timer update ----------------------
    def on_timer(self) -> None:
        """Harvest one tick, then redraw everything."""
        self.harvester.harvest(self.collection)
        self.redraw()

    def redraw(self) -> None:
        converted = self.projector.project(self.collection, need_four_points=True)
        self.converted = converted

        self.graph_cpu.draw(
            ChartAdapter.cpu_graph_data(converted, CPU_COLOURS, AVG_CPU_STYLE),
            PERCENT_Y_LABELS,
            PERCENT_Y_BOUNDS,
            reverse_order=True,
        )
        self.lbl_cpu_legend.setText("   ".join(
            cpu.legend_text() for cpu in converted.cpu_data if isinstance(cpu, CpuWidgetEntry)
        ))
        one, five, fifteen = converted.load_avg_data
        self.lbl_load_avg.setText(f"Load average: {one:.2f} {five:.2f} {fifteen:.2f}")

        self.graph_mem.draw(
            ChartAdapter.memory_graph_data(converted, RAM_STYLE, SWAP_STYLE),
            PERCENT_Y_LABELS,
            PERCENT_Y_BOUNDS,
        )

        net_bounds, net_labels = ChartAdapter.network_y_axis(
            converted.network_data_rx,
            converted.network_data_tx,
            self.graph_net.controller.get_current_display_time(),
            self.config.network_scale_type,
            self.config.network_unit_type,
            self.config.network_use_binary_prefix,
        )
        self.graph_net.draw(
            ChartAdapter.network_graph_data(converted, RX_STYLE, TX_STYLE),
            net_labels,
            net_bounds,
        )

        self._fill_disk_table(converted)
        self._fill_temp_table(converted)
        self._fill_battery_text(converted)

    def _fill_disk_table(self, converted: ConvertedData) -> None:
        self.disk_table.setRowCount(len(converted.disk_data))
        for row, disk in enumerate(converted.disk_data):
            cells = [
                disk.name,
                disk.mount_point,
                disk.used_space_text,
                "N/A" if disk.usage_percent is None else f"{disk.usage_percent:.0f}%",
                disk.free_space_text,
                disk.total_space_text,
                disk.io_read,
                disk.io_write,
            ]
            for col, text in enumerate(cells):
                self.disk_table.setItem(row, col, QTableWidgetItem(text))

    def _fill_temp_table(self, converted: ConvertedData) -> None:
        self.temp_table.setRowCount(len(converted.temp_data))
        for row, temp in enumerate(converted.temp_data):
            self.temp_table.setItem(row, 0, QTableWidgetItem(temp.sensor))
            self.temp_table.setItem(row, 1, QTableWidgetItem(temp.text))

    def _fill_battery_text(self, converted: ConvertedData) -> None:
        if not converted.battery_data:
            self.lbl_battery.setText("No battery detected")
            return
        blocks = []
        for battery in converted.battery_data:
            lines = [
                battery.battery_name,
                f"Charge: {battery.charge_percentage:.0f}%",
                f"Consumption: {battery.watt_consumption}",
                f"Health: {battery.health}",
            ]
            if battery.duration_until_empty is not None:
                lines.append(f"Time to empty: {battery.duration_until_empty}")
            if battery.duration_until_full is not None:
                lines.append(f"Time to full: {battery.duration_until_full}")
            blocks.append("\n".join(lines))
        self.lbl_battery.setText("\n\n".join(blocks))


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    app = QApplication(sys.argv)
    apply_dark_theme(app)
    win = SystemMonitor(AppConfigFields())
    win.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
