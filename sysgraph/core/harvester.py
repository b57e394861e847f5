"""psutil-backed collector that appends one tick to a DataCollection per call."""

from __future__ import annotations

import logging
import os
import time
from typing import Dict, List, Optional, Tuple

import psutil

from sysgraph.config import AppConfigFields, TemperatureType
from sysgraph.core.history import (
    BatteryHarvest,
    CpuDataType,
    CpuHarvest,
    DataCollection,
    DiskHarvest,
    MemHarvest,
    NetworkHarvest,
    TempHarvest,
    TimedData,
)
from sysgraph.utils.units import dec_bytes_per_second_string

logger = logging.getLogger(__name__)

_SENSOR_ERRORS = (psutil.Error, OSError, AttributeError, NotImplementedError)


class Harvester:
    """Polls psutil and feeds the history buffer.

    Rates (network, disk I/O) are computed from the counter delta since the
    previous call, so the first tick reports zero.
    """

    def __init__(
        self,
        temperature_type: TemperatureType = TemperatureType.CELSIUS,
        retention_ms: Optional[int] = None,
    ) -> None:
        self.temperature_type = temperature_type
        self.retention_ms = retention_ms
        self._last_instant: Optional[int] = None
        self._last_net = None
        self._last_disk_io: Dict[str, object] = {}
        # Warm-up CPU percent calculation
        psutil.cpu_percent(interval=None)
        psutil.cpu_percent(interval=None, percpu=True)

    @classmethod
    def from_config(cls, config: AppConfigFields) -> "Harvester":
        return cls(temperature_type=config.temperature_type, retention_ms=config.retention_ms)

    def harvest(self, collection: DataCollection) -> None:
        """Sample every source once and append the tick to ``collection``."""
        instant = time.monotonic_ns()
        if self._last_instant is None:
            dt = 0.0
        else:
            dt = max(1, instant - self._last_instant) / 1e9
        self._last_instant = instant

        cpu_harvest = self._harvest_cpu()
        mem = self._harvest_memory(psutil.virtual_memory())
        swap = self._harvest_memory(psutil.swap_memory())
        network = self._harvest_network(dt)
        load_avg = self._harvest_load_avg()

        collection.cpu_harvest = cpu_harvest
        collection.memory_harvest = mem
        collection.swap_harvest = swap
        collection.network_harvest = network
        collection.load_avg_harvest = load_avg
        collection.disk_harvest, collection.io_labels = self._harvest_disks(dt)
        collection.temp_harvest = self._harvest_temperatures()
        collection.battery_harvest = self._harvest_batteries()

        collection.eat_data(instant, TimedData(
            rx_data=float(network.rx),
            tx_data=float(network.tx),
            cpu_data=[cpu.cpu_usage for cpu in cpu_harvest],
            load_avg_data=load_avg,
            mem_data=mem.use_percent,
            swap_data=swap.use_percent,
        ))
        if self.retention_ms is not None:
            collection.clean_data(self.retention_ms)

    # ----------------------- Sources -----------------------
    @staticmethod
    def _harvest_cpu() -> List[CpuHarvest]:
        result = [CpuHarvest(CpuDataType.avg(), float(psutil.cpu_percent(interval=None)))]
        cores = psutil.cpu_percent(interval=None, percpu=True)
        result.extend(
            CpuHarvest(CpuDataType.cpu(index), float(usage)) for index, usage in enumerate(cores)
        )
        return result

    @staticmethod
    def _harvest_memory(stats) -> MemHarvest:
        total_kib = int(stats.total) // 1024
        if total_kib == 0:
            return MemHarvest()
        return MemHarvest(
            mem_total_in_kib=total_kib,
            mem_used_in_kib=int(stats.used) // 1024,
            use_percent=float(stats.percent),
        )

    @staticmethod
    def _harvest_load_avg() -> Tuple[float, float, float]:
        try:
            one, five, fifteen = psutil.getloadavg()
        except _SENSOR_ERRORS as exc:
            logger.debug("Load average unavailable: %s", exc)
            return 0.0, 0.0, 0.0
        return float(one), float(five), float(fifteen)

    def _harvest_network(self, dt: float) -> NetworkHarvest:
        net = psutil.net_io_counters()
        rx = tx = 0
        if self._last_net is not None and dt > 0:
            rx = int(max(0, net.bytes_recv - self._last_net.bytes_recv) * 8 / dt)
            tx = int(max(0, net.bytes_sent - self._last_net.bytes_sent) * 8 / dt)
        self._last_net = net
        return NetworkHarvest(
            rx=rx,
            tx=tx,
            total_rx=int(net.bytes_recv) * 8,
            total_tx=int(net.bytes_sent) * 8,
        )

    def _harvest_disks(self, dt: float) -> Tuple[List[DiskHarvest], List[Tuple[str, str]]]:
        try:
            io_counters = psutil.disk_io_counters(perdisk=True) or {}
        except _SENSOR_ERRORS as exc:
            logger.debug("Disk I/O counters unavailable: %s", exc)
            io_counters = {}

        disks: List[DiskHarvest] = []
        io_labels: List[Tuple[str, str]] = []
        for partition in psutil.disk_partitions(all=False):
            try:
                usage = psutil.disk_usage(partition.mountpoint)
            except _SENSOR_ERRORS as exc:
                logger.debug("Skipping %s: %s", partition.mountpoint, exc)
                continue
            disks.append(DiskHarvest(
                name=partition.device,
                mount_point=partition.mountpoint,
                free_space=int(usage.free),
                used_space=int(usage.used),
                total_space=int(usage.total),
            ))
            io_labels.append(self._io_label(os.path.basename(partition.device), io_counters, dt))

        self._last_disk_io = dict(io_counters)
        return disks, io_labels

    def _io_label(self, device: str, io_counters: Dict[str, object], dt: float) -> Tuple[str, str]:
        current = io_counters.get(device)
        previous = self._last_disk_io.get(device)
        if current is None:
            return "N/A", "N/A"
        if previous is None or dt <= 0:
            return dec_bytes_per_second_string(0), dec_bytes_per_second_string(0)
        read = int(max(0, current.read_bytes - previous.read_bytes) / dt)
        write = int(max(0, current.write_bytes - previous.write_bytes) / dt)
        return dec_bytes_per_second_string(read), dec_bytes_per_second_string(write)

    def _harvest_temperatures(self) -> List[TempHarvest]:
        if not hasattr(psutil, "sensors_temperatures"):
            return []
        try:
            sensors = psutil.sensors_temperatures() or {}
        except _SENSOR_ERRORS as exc:
            logger.debug("Temperature sensors unavailable: %s", exc)
            return []

        result: List[TempHarvest] = []
        for name, entries in sensors.items():
            for entry in entries:
                label = f"{name}: {entry.label}" if entry.label else name
                result.append(TempHarvest(
                    name=label,
                    temperature=self.temperature_type.convert_celsius(float(entry.current)),
                ))
        return result

    @staticmethod
    def _harvest_batteries() -> List[BatteryHarvest]:
        if not hasattr(psutil, "sensors_battery"):
            return []
        try:
            battery = psutil.sensors_battery()
        except _SENSOR_ERRORS as exc:
            logger.debug("Battery sensor unavailable: %s", exc)
            return []
        if battery is None:
            return []

        secs_until_empty = None
        if not battery.power_plugged and isinstance(battery.secsleft, int) and battery.secsleft >= 0:
            secs_until_empty = battery.secsleft
        # psutil reports neither power draw nor wear level.
        return [BatteryHarvest(
            charge_percent=float(battery.percent),
            secs_until_full=None,
            secs_until_empty=secs_until_empty,
            power_consumption_rate_watts=0.0,
            health_percent=100.0,
        )]
