"""Unit tests for sysgraph.core.harvester module."""

#      Copyright (c) 2025 predator. All rights reserved.

import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from sysgraph.config import AppConfigFields, TemperatureType
from sysgraph.core.harvester import Harvester
from sysgraph.core.history import CpuDataType, DataCollection


def cpu_percent(interval=None, percpu=False):
    return [10.0, 30.0] if percpu else 20.0


def make_psutil():
    """Build a psutil stand-in reporting one disk, one sensor and one battery."""
    mock_psutil = MagicMock()
    mock_psutil.cpu_percent.side_effect = cpu_percent
    mock_psutil.virtual_memory.return_value = SimpleNamespace(
        total=4096 * 1024, used=1024 * 1024, percent=25.0
    )
    mock_psutil.swap_memory.return_value = SimpleNamespace(total=0, used=0, percent=0.0)
    mock_psutil.net_io_counters.side_effect = [
        SimpleNamespace(bytes_recv=10_000, bytes_sent=5_000),
        SimpleNamespace(bytes_recv=11_000, bytes_sent=5_500),
    ]
    mock_psutil.disk_partitions.return_value = [
        SimpleNamespace(device="/dev/sda1", mountpoint="/")
    ]
    mock_psutil.disk_usage.return_value = SimpleNamespace(free=600, used=400, total=1000)
    mock_psutil.disk_io_counters.side_effect = [
        {"sda1": SimpleNamespace(read_bytes=1_000, write_bytes=1_000)},
        {"sda1": SimpleNamespace(read_bytes=3_000, write_bytes=1_500)},
    ]
    mock_psutil.sensors_temperatures.return_value = {
        "coretemp": [SimpleNamespace(label="Core 0", current=40.0)],
        "acpitz": [SimpleNamespace(label="", current=30.0)],
    }
    mock_psutil.sensors_battery.return_value = SimpleNamespace(
        percent=80, secsleft=3600, power_plugged=False
    )
    mock_psutil.getloadavg.return_value = (0.5, 1.0, 1.5)
    return mock_psutil


class TestHarvester(unittest.TestCase):
    """Test Harvester against a mocked psutil."""

    def setUp(self):
        self.psutil = make_psutil()
        psutil_patcher = patch("sysgraph.core.harvester.psutil", self.psutil)
        clock_patcher = patch(
            "sysgraph.core.harvester.time.monotonic_ns",
            side_effect=[1_000_000_000, 2_000_000_000, 3_000_000_000],
        )
        psutil_patcher.start()
        clock_patcher.start()
        self.addCleanup(psutil_patcher.stop)
        self.addCleanup(clock_patcher.stop)
        self.collection = DataCollection()

    def test_first_tick(self):
        Harvester().harvest(self.collection)

        self.assertEqual(self.collection.current_instant, 1_000_000_000)
        self.assertEqual(len(self.collection.timed_data_vec), 1)
        _, timed = self.collection.timed_data_vec[0]
        self.assertEqual(timed.cpu_data, [20.0, 10.0, 30.0])
        self.assertEqual(timed.mem_data, 25.0)
        self.assertIsNone(timed.swap_data)
        self.assertEqual(timed.rx_data, 0.0)
        self.assertEqual(timed.load_avg_data, (0.5, 1.0, 1.5))

        self.assertEqual(
            [cpu.data_type for cpu in self.collection.cpu_harvest],
            [CpuDataType.avg(), CpuDataType.cpu(0), CpuDataType.cpu(1)],
        )
        self.assertEqual(self.collection.memory_harvest.mem_total_in_kib, 4096)
        self.assertEqual(self.collection.memory_harvest.mem_used_in_kib, 1024)
        self.assertEqual(self.collection.network_harvest.total_rx, 80_000)
        self.assertEqual(self.collection.io_labels, [("0B/s", "0B/s")])

    def test_rates_from_counter_deltas(self):
        harvester = Harvester()
        harvester.harvest(self.collection)
        harvester.harvest(self.collection)

        _, timed = self.collection.timed_data_vec[-1]
        self.assertEqual(timed.rx_data, 8_000.0)
        self.assertEqual(timed.tx_data, 4_000.0)
        self.assertEqual(self.collection.network_harvest.rx, 8_000)
        self.assertEqual(self.collection.io_labels, [("2KB/s", "500B/s")])

    def test_disks_temperatures_and_battery(self):
        Harvester(temperature_type=TemperatureType.FAHRENHEIT).harvest(self.collection)

        disk = self.collection.disk_harvest[0]
        self.assertEqual((disk.name, disk.mount_point), ("/dev/sda1", "/"))
        self.assertEqual((disk.free_space, disk.used_space, disk.total_space), (600, 400, 1000))

        temps = [(t.name, t.temperature) for t in self.collection.temp_harvest]
        self.assertEqual(temps, [("coretemp: Core 0", 104.0), ("acpitz", 86.0)])

        battery = self.collection.battery_harvest[0]
        self.assertEqual(battery.charge_percent, 80.0)
        self.assertEqual(battery.secs_until_empty, 3600)
        self.assertIsNone(battery.secs_until_full)

    def test_unavailable_sources_are_skipped(self):
        self.psutil.disk_usage.side_effect = OSError("not ready")
        self.psutil.sensors_temperatures.side_effect = OSError("no sensors")
        self.psutil.sensors_battery.return_value = None
        self.psutil.getloadavg.side_effect = OSError("no loadavg")

        Harvester().harvest(self.collection)

        self.assertEqual(self.collection.disk_harvest, [])
        self.assertEqual(self.collection.io_labels, [])
        self.assertEqual(self.collection.temp_harvest, [])
        self.assertEqual(self.collection.battery_harvest, [])
        self.assertEqual(self.collection.load_avg_harvest, (0.0, 0.0, 0.0))

    def test_retention_prunes_history(self):
        harvester = Harvester(retention_ms=500)
        harvester.harvest(self.collection)
        harvester.harvest(self.collection)

        self.assertEqual([i for i, _ in self.collection.timed_data_vec], [2_000_000_000])

    def test_from_config(self):
        config = AppConfigFields(temperature_type=TemperatureType.KELVIN, retention_ms=60_000)
        harvester = Harvester.from_config(config)

        self.assertIs(harvester.temperature_type, TemperatureType.KELVIN)
        self.assertEqual(harvester.retention_ms, 60_000)


if __name__ == '__main__':
    unittest.main()
