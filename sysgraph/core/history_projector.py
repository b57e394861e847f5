"""Projection of the collected history into series and strings the widgets can draw.

Every redraw re-walks the full history from oldest to newest against the
display instant (the frozen instant if one is set). Points are
``(offset_ms, value)`` with ``offset_ms <= 0``; clipping to the visible span
is left to the chart's x-axis bounds.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple, Union

from sysgraph.config import AppConfigFields, AxisScaling, DataUnit, TemperatureType
from sysgraph.core.history import CpuDataType, DataCollection, MemHarvest, TimedData
from sysgraph.utils.units import (
    GIBI_LIMIT,
    KIBI_LIMIT,
    MEBI_LIMIT,
    binary_byte_string,
    duration_string,
    get_binary_bytes,
    get_binary_prefix,
    get_decimal_bytes,
    get_decimal_prefix,
)

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

_NS_PER_MS = 1_000_000


# ----------------------------- Output types -----------------------------
@dataclass
class ConvertedNetworkData:
    rx: List[Point] = field(default_factory=list)
    tx: List[Point] = field(default_factory=list)
    rx_display: str = ""
    tx_display: str = ""
    total_rx_display: Optional[str] = None
    total_tx_display: Optional[str] = None


class CpuWidgetAll:
    """Placeholder row for the "All" entry at the head of the CPU list."""

    def __repr__(self) -> str:
        return "CpuWidgetAll()"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, CpuWidgetAll)

    def __hash__(self) -> int:
        return hash(CpuWidgetAll)


@dataclass
class CpuWidgetEntry:
    data_type: CpuDataType
    data: List[Point] = field(default_factory=list)
    last_entry: float = 0.0

    def legend_text(self) -> str:
        return f"{self.data_type.name:<5}{self.last_entry:3.0f}%"


CpuWidgetData = Union[CpuWidgetAll, CpuWidgetEntry]


@dataclass
class DiskWidgetData:
    name: str
    mount_point: str
    free_bytes: int
    used_bytes: int
    total_bytes: int
    io_read: str
    io_write: str

    @property
    def free_space_text(self) -> str:
        return binary_byte_string(self.free_bytes)

    @property
    def used_space_text(self) -> str:
        return binary_byte_string(self.used_bytes)

    @property
    def total_space_text(self) -> str:
        return binary_byte_string(self.total_bytes)

    @property
    def usage_percent(self) -> Optional[float]:
        if self.total_bytes == 0:
            return None
        return self.used_bytes / self.total_bytes * 100.0


@dataclass
class TempWidgetData:
    sensor: str
    temperature_value: int
    temperature_type: TemperatureType

    @property
    def text(self) -> str:
        return f"{self.temperature_value}{self.temperature_type.symbol}"


@dataclass
class ConvertedBatteryData:
    battery_name: str
    charge_percentage: float
    watt_consumption: str
    duration_until_full: Optional[str]
    duration_until_empty: Optional[str]
    health: str


@dataclass
class ConvertedData:
    """Everything one redraw needs, rebuilt from the history on every tick."""

    rx_display: str = ""
    tx_display: str = ""
    total_rx_display: Optional[str] = None
    total_tx_display: Optional[str] = None
    network_data_rx: List[Point] = field(default_factory=list)
    network_data_tx: List[Point] = field(default_factory=list)
    disk_data: List[DiskWidgetData] = field(default_factory=list)
    temp_data: List[TempWidgetData] = field(default_factory=list)
    mem_labels: Optional[Tuple[str, str]] = None
    swap_labels: Optional[Tuple[str, str]] = None
    mem_data: List[Point] = field(default_factory=list)
    swap_data: List[Point] = field(default_factory=list)
    load_avg_data: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    cpu_data: List[CpuWidgetData] = field(default_factory=list)
    battery_data: List[ConvertedBatteryData] = field(default_factory=list)


# ----------------------------- Series helpers -----------------------------
def _offset_ms(now: int, instant: int) -> float:
    """Non-positive offset of ``instant`` from ``now`` in whole milliseconds."""
    return -float((now - instant) // _NS_PER_MS)


def _walk_series(
    current_data: DataCollection, extract: Callable[[TimedData], Optional[float]]
) -> List[Point]:
    """Collect ``(offset, value)`` for every tick carrying a value, up to the display instant."""
    now = current_data.display_instant
    result: List[Point] = []
    for instant, timed_data in current_data.timed_data_vec:
        value = extract(timed_data)
        if value is not None:
            result.append((_offset_ms(now, instant), value))
        if instant == now:
            break
    return result


def _log(fn: Callable[[float], float], value: float) -> float:
    # math.log* raises on non-positive input; keep float semantics instead.
    if value > 0:
        return fn(value)
    if value == 0:
        return float("-inf")
    return float("nan")


def convert_mem_data_points(current_data: DataCollection) -> List[Point]:
    return _walk_series(current_data, lambda data: data.mem_data)


def convert_swap_data_points(current_data: DataCollection) -> List[Point]:
    return _walk_series(current_data, lambda data: data.swap_data)


# ----------------------------- Memory labels -----------------------------
def _mem_unit_and_denominator(mem_total_kib: int) -> Tuple[str, float]:
    """Unit and divisor for a total given in kibibytes."""
    if mem_total_kib < KIBI_LIMIT:
        return "KiB", 1.0
    if mem_total_kib < MEBI_LIMIT:
        return "MiB", float(KIBI_LIMIT)
    if mem_total_kib < GIBI_LIMIT:
        return "GiB", float(MEBI_LIMIT)
    return "TiB", float(GIBI_LIMIT)


def _mem_label(harvest: MemHarvest) -> Optional[Tuple[str, str]]:
    if harvest.mem_total_in_kib <= 0:
        return None
    percent = harvest.use_percent if harvest.use_percent is not None else 0.0
    unit, denominator = _mem_unit_and_denominator(harvest.mem_total_in_kib)
    used = harvest.mem_used_in_kib / denominator
    total = harvest.mem_total_in_kib / denominator
    return f"{percent:3.0f}%", f"   {used:.1f}{unit}/{total:.1f}{unit}"


def convert_mem_labels(
    current_data: DataCollection,
) -> Tuple[Optional[Tuple[str, str]], Optional[Tuple[str, str]]]:
    """``(percent, used/total)`` label pairs for memory and swap; ``None`` when absent."""
    return _mem_label(current_data.memory_harvest), _mem_label(current_data.swap_harvest)


# ----------------------------- Network -----------------------------
def _scale_network_value(
    raw: float, scale_type: AxisScaling, unit_type: DataUnit, use_binary_prefix: bool
) -> float:
    if scale_type is AxisScaling.LOG:
        if use_binary_prefix:
            if unit_type is DataUnit.BYTE:
                # log2(x / 8) == log2(x) - 3
                return _log(math.log2, raw) - 3.0
            return _log(math.log2, raw)
        if unit_type is DataUnit.BYTE:
            return _log(math.log10, raw / 8.0)
        return _log(math.log10, raw)

    if unit_type is DataUnit.BYTE:
        return raw / 8.0
    return raw


def get_rx_tx_data_points(
    current_data: DataCollection,
    network_scale_type: AxisScaling,
    network_unit_type: DataUnit,
    network_use_binary_prefix: bool,
) -> Tuple[List[Point], List[Point]]:
    now = current_data.display_instant
    rx: List[Point] = []
    tx: List[Point] = []

    for instant, data in current_data.timed_data_vec:
        offset = _offset_ms(now, instant)
        rx.append((offset, _scale_network_value(
            data.rx_data, network_scale_type, network_unit_type, network_use_binary_prefix
        )))
        tx.append((offset, _scale_network_value(
            data.tx_data, network_scale_type, network_unit_type, network_use_binary_prefix
        )))
        if instant == now:
            break

    return rx, tx


def _pad_unit(value: float, unit: str, use_binary_prefix: bool) -> str:
    if use_binary_prefix:
        return f"{value:.1f}{unit:<3}"
    return f"{value:.1f}{unit:<2}"


def convert_network_data_points(
    current_data: DataCollection,
    need_four_points: bool,
    network_scale_type: AxisScaling,
    network_unit_type: DataUnit,
    network_use_binary_prefix: bool,
) -> ConvertedNetworkData:
    """Project rx/tx series and build the current-rate and lifetime-total strings.

    ``need_four_points`` selects the layout with separate total fields; otherwise
    each direction gets a single ``"RX: <rate>  All: <total>"`` line.
    """
    rx, tx = get_rx_tx_data_points(
        current_data, network_scale_type, network_unit_type, network_use_binary_prefix
    )

    harvest = current_data.network_harvest
    if network_unit_type is DataUnit.BYTE:
        unit = "B/s"
        rx_data, tx_data = harvest.rx // 8, harvest.tx // 8
    else:
        unit = "b/s"
        rx_data, tx_data = harvest.rx, harvest.tx
    # Totals are always shown in bytes.
    total_rx_data, total_tx_data = harvest.total_rx // 8, harvest.total_tx // 8

    if network_use_binary_prefix:
        rx_converted = get_binary_prefix(rx_data, unit)
        tx_converted = get_binary_prefix(tx_data, unit)
        total_rx_converted = get_binary_bytes(total_rx_data)
        total_tx_converted = get_binary_bytes(total_tx_data)
    else:
        rx_converted = get_decimal_prefix(rx_data, unit)
        tx_converted = get_decimal_prefix(tx_data, unit)
        total_rx_converted = get_decimal_bytes(total_rx_data)
        total_tx_converted = get_decimal_bytes(total_tx_data)

    if need_four_points:
        return ConvertedNetworkData(
            rx=rx,
            tx=tx,
            rx_display=f"{rx_converted[0]:.1f}{rx_converted[1]}",
            tx_display=f"{tx_converted[0]:.1f}{tx_converted[1]}",
            total_rx_display=f"{total_rx_converted[0]:.1f}{total_rx_converted[1]}",
            total_tx_display=f"{total_tx_converted[0]:.1f}{total_tx_converted[1]}",
        )

    rate_rx = _pad_unit(*rx_converted, network_use_binary_prefix)
    rate_tx = _pad_unit(*tx_converted, network_use_binary_prefix)
    all_rx = _pad_unit(*total_rx_converted, network_use_binary_prefix)
    all_tx = _pad_unit(*total_tx_converted, network_use_binary_prefix)
    return ConvertedNetworkData(
        rx=rx,
        tx=tx,
        rx_display=f"RX: {rate_rx:<10}  All: {all_rx}",
        tx_display=f"TX: {rate_tx:<10}  All: {all_tx}",
    )


# ----------------------------- One-shot snapshots -----------------------------
def convert_disk_data(current_data: DataCollection) -> List[DiskWidgetData]:
    return [
        DiskWidgetData(
            name=disk.name,
            mount_point=disk.mount_point,
            free_bytes=disk.free_space,
            used_bytes=disk.used_space,
            total_bytes=disk.total_space,
            io_read=io_read,
            io_write=io_write,
        )
        for disk, (io_read, io_write) in zip(current_data.disk_harvest, current_data.io_labels)
    ]


def convert_temp_data(
    current_data: DataCollection, temperature_type: TemperatureType
) -> List[TempWidgetData]:
    return [
        TempWidgetData(
            sensor=temp.name,
            temperature_value=int(math.ceil(temp.temperature)),
            temperature_type=temperature_type,
        )
        for temp in current_data.temp_harvest
    ]


def convert_battery_harvest(current_data: DataCollection) -> List[ConvertedBatteryData]:
    return [
        ConvertedBatteryData(
            battery_name=f"Battery {index}",
            charge_percentage=battery.charge_percent,
            watt_consumption=f"{battery.power_consumption_rate_watts:.2f}W",
            duration_until_full=(
                duration_string(battery.secs_until_full)
                if battery.secs_until_full is not None else None
            ),
            duration_until_empty=(
                duration_string(battery.secs_until_empty)
                if battery.secs_until_empty is not None else None
            ),
            health=f"{battery.health_percent:.2f}%",
        )
        for index, battery in enumerate(current_data.battery_harvest)
    ]


# ----------------------------- Projector -----------------------------
class HistoryProjector:
    """Turns a :class:`DataCollection` into a :class:`ConvertedData` each redraw.

    The CPU rows persist between passes: index 0 is the "All" placeholder and
    the rest hold one entry per reading in the latest tick. The list is only
    rebuilt when that count changes; otherwise each row is cleared in place and
    refilled from the full history.
    """

    def __init__(
        self,
        network_scale_type: AxisScaling = AxisScaling.LINEAR,
        network_unit_type: DataUnit = DataUnit.BIT,
        network_use_binary_prefix: bool = False,
        temperature_type: TemperatureType = TemperatureType.CELSIUS,
    ) -> None:
        self.network_scale_type = network_scale_type
        self.network_unit_type = network_unit_type
        self.network_use_binary_prefix = network_use_binary_prefix
        self.temperature_type = temperature_type
        self.cpu_data: List[CpuWidgetData] = []

    @classmethod
    def from_config(cls, config: AppConfigFields) -> "HistoryProjector":
        return cls(
            network_scale_type=config.network_scale_type,
            network_unit_type=config.network_unit_type,
            network_use_binary_prefix=config.network_use_binary_prefix,
            temperature_type=config.temperature_type,
        )

    # ----------------------- CPU -----------------------
    def reconcile_cpu_entries(self, current_data: DataCollection) -> None:
        """Resize or reset the CPU rows against the latest tick, leaving every series empty."""
        if not current_data.timed_data_vec:
            for cpu in self.cpu_data[1:]:
                cpu.data.clear()
            return

        _, latest = current_data.timed_data_vec[-1]
        if len(latest.cpu_data) + 1 != len(self.cpu_data):
            logger.debug(
                "CPU count changed (%d -> %d), rebuilding rows",
                max(len(self.cpu_data) - 1, 0), len(latest.cpu_data),
            )
            harvest = current_data.cpu_harvest
            rows: List[CpuWidgetData] = [CpuWidgetAll()]
            for index, usage in enumerate(latest.cpu_data):
                data_type = (
                    harvest[index].data_type if index < len(harvest) else CpuDataType.cpu(index)
                )
                rows.append(CpuWidgetEntry(data_type=data_type, data=[], last_entry=usage))
            self.cpu_data = rows
        else:
            for cpu, usage in zip(self.cpu_data[1:], latest.cpu_data):
                cpu.data.clear()
                cpu.last_entry = usage

    def fill_cpu_series(self, current_data: DataCollection) -> None:
        """Re-walk the whole history into each CPU row."""
        now = current_data.display_instant
        for index, cpu in enumerate(self.cpu_data[1:]):
            for instant, timed_data in current_data.timed_data_vec:
                if index < len(timed_data.cpu_data):
                    cpu.data.append((_offset_ms(now, instant), timed_data.cpu_data[index]))
                if instant == now:
                    break

    def convert_cpu_data_points(self, current_data: DataCollection) -> List[CpuWidgetData]:
        self.reconcile_cpu_entries(current_data)
        self.fill_cpu_series(current_data)
        return self.cpu_data

    # ----------------------- Full pass -----------------------
    def project(self, current_data: DataCollection, need_four_points: bool = True) -> ConvertedData:
        """Run every conversion for one redraw."""
        network = convert_network_data_points(
            current_data,
            need_four_points,
            self.network_scale_type,
            self.network_unit_type,
            self.network_use_binary_prefix,
        )
        mem_labels, swap_labels = convert_mem_labels(current_data)
        load_avg = (
            current_data.timed_data_vec[-1][1].load_avg_data
            if current_data.timed_data_vec else current_data.load_avg_harvest
        )

        return ConvertedData(
            rx_display=network.rx_display,
            tx_display=network.tx_display,
            total_rx_display=network.total_rx_display,
            total_tx_display=network.total_tx_display,
            network_data_rx=network.rx,
            network_data_tx=network.tx,
            disk_data=convert_disk_data(current_data),
            temp_data=convert_temp_data(current_data, self.temperature_type),
            mem_labels=mem_labels,
            swap_labels=swap_labels,
            mem_data=convert_mem_data_points(current_data),
            swap_data=convert_swap_data_points(current_data),
            load_avg_data=load_avg,
            cpu_data=self.convert_cpu_data_points(current_data),
            battery_data=convert_battery_harvest(current_data),
        )
