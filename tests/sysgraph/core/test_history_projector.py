"""Unit tests for sysgraph.core.history_projector module."""

#      Copyright (c) 2025 predator. All rights reserved.

import math
import unittest

from sysgraph.config import AppConfigFields, AxisScaling, DataUnit, TemperatureType
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
from sysgraph.core.history_projector import (
    CpuWidgetAll,
    CpuWidgetEntry,
    HistoryProjector,
    convert_battery_harvest,
    convert_disk_data,
    convert_mem_data_points,
    convert_mem_labels,
    convert_network_data_points,
    convert_swap_data_points,
    convert_temp_data,
    get_rx_tx_data_points,
)


def ms(value):
    return int(value * 1_000_000)


def make_collection(entries):
    """Build a collection from ``(t_ms, TimedData)`` pairs."""
    collection = DataCollection()
    for t, data in entries:
        collection.eat_data(ms(t), data)
    return collection


def cpu_collection(per_tick):
    collection = make_collection(
        (t, TimedData(cpu_data=list(values))) for t, values in per_tick
    )
    last = per_tick[-1][1]
    collection.cpu_harvest = [CpuHarvest(CpuDataType.avg(), last[0])] + [
        CpuHarvest(CpuDataType.cpu(i), value) for i, value in enumerate(last[1:])
    ]
    return collection


class TestMemorySeries(unittest.TestCase):
    """Test straight extraction of memory and swap series."""

    def test_three_entry_history(self):
        """Test offsets are measured back from the newest entry."""
        collection = make_collection([
            (0, TimedData(mem_data=10.0)),
            (500, TimedData(mem_data=20.0)),
            (1000, TimedData(mem_data=30.0)),
        ])
        self.assertEqual(
            convert_mem_data_points(collection),
            [(-1000.0, 10.0), (-500.0, 20.0), (0.0, 30.0)],
        )

    def test_missing_readings_are_skipped(self):
        collection = make_collection([
            (0, TimedData(swap_data=1.0)),
            (500, TimedData()),
            (1000, TimedData(swap_data=3.0)),
        ])
        self.assertEqual(convert_swap_data_points(collection), [(-1000.0, 1.0), (0.0, 3.0)])

    def test_empty_history(self):
        self.assertEqual(convert_mem_data_points(DataCollection()), [])

    def test_frozen_instant_stops_walk(self):
        """Test entries after the frozen instant are not projected."""
        collection = make_collection([
            (0, TimedData(mem_data=10.0)),
            (500, TimedData(mem_data=20.0)),
        ])
        collection.freeze()
        collection.eat_data(ms(1000), TimedData(mem_data=30.0))

        self.assertEqual(convert_mem_data_points(collection), [(-500.0, 10.0), (0.0, 20.0)])

    def test_freeze_before_first_tick_keeps_offsets_non_positive(self):
        collection = DataCollection()
        collection.freeze()
        collection.eat_data(ms(5000), TimedData(mem_data=10.0))
        collection.eat_data(ms(6000), TimedData(mem_data=20.0))

        points = convert_mem_data_points(collection)

        self.assertEqual(points, [(-1000.0, 10.0), (0.0, 20.0)])
        self.assertTrue(all(offset <= 0 for offset, _ in points))

    def test_offsets_floor_to_whole_milliseconds(self):
        collection = DataCollection()
        collection.eat_data(0, TimedData(mem_data=1.0))
        collection.eat_data(1_999_999, TimedData(mem_data=2.0))
        self.assertEqual(convert_mem_data_points(collection), [(-1.0, 1.0), (0.0, 2.0)])


class TestMemoryLabels(unittest.TestCase):
    """Test convert_mem_labels."""

    def test_gib_labels(self):
        collection = DataCollection(
            memory_harvest=MemHarvest(
                mem_total_in_kib=16 * 1024 * 1024, mem_used_in_kib=4 * 1024 * 1024, use_percent=25.0
            ),
        )
        mem, swap = convert_mem_labels(collection)
        self.assertEqual(mem, (" 25%", "   4.0GiB/16.0GiB"))
        self.assertIsNone(swap)

    def test_unit_thresholds(self):
        cases = [
            (512, "KiB", "   256.0KiB/512.0KiB"),
            (2048, "MiB", "   1.0MiB/2.0MiB"),
            (2 * 1024 ** 3, "TiB", "   1.0TiB/2.0TiB"),
        ]
        for total, unit, expected in cases:
            with self.subTest(unit=unit):
                collection = DataCollection(
                    swap_harvest=MemHarvest(mem_total_in_kib=total, mem_used_in_kib=total // 2, use_percent=50.0)
                )
                _, swap = convert_mem_labels(collection)
                self.assertEqual(swap, (" 50%", expected))

    def test_missing_percent_shows_zero(self):
        collection = DataCollection(memory_harvest=MemHarvest(mem_total_in_kib=1024, mem_used_in_kib=0))
        mem, _ = convert_mem_labels(collection)
        self.assertEqual(mem[0], "  0%")


class TestNetworkSeries(unittest.TestCase):
    """Test network unit and log scaling."""

    def setUp(self):
        self.collection = make_collection([
            (0, TimedData(rx_data=1024.0, tx_data=8.0)),
            (1000, TimedData(rx_data=0.0, tx_data=80.0)),
        ])

    def test_linear_bit_passthrough(self):
        rx, tx = get_rx_tx_data_points(self.collection, AxisScaling.LINEAR, DataUnit.BIT, False)
        self.assertEqual(rx, [(-1000.0, 1024.0), (0.0, 0.0)])
        self.assertEqual(tx, [(-1000.0, 8.0), (0.0, 80.0)])

    def test_linear_byte_divides_by_eight(self):
        rx, tx = get_rx_tx_data_points(self.collection, AxisScaling.LINEAR, DataUnit.BYTE, True)
        self.assertEqual(rx, [(-1000.0, 128.0), (0.0, 0.0)])
        self.assertEqual(tx, [(-1000.0, 1.0), (0.0, 10.0)])

    def test_log_byte_binary_subtracts_three(self):
        """Test the binary byte conversion in log2 space subtracts log2(8) == 3, not 4."""
        rx, _ = get_rx_tx_data_points(self.collection, AxisScaling.LOG, DataUnit.BYTE, True)
        self.assertEqual(rx[0], (-1000.0, math.log2(1024.0) - 3))
        self.assertEqual(rx[0][1], 7.0)
        self.assertNotEqual(rx[0][1], math.log2(1024.0) - 4)

    def test_log_byte_decimal(self):
        _, tx = get_rx_tx_data_points(self.collection, AxisScaling.LOG, DataUnit.BYTE, False)
        self.assertAlmostEqual(tx[0][1], 0.0)
        self.assertAlmostEqual(tx[1][1], 1.0)

    def test_log_bit(self):
        _, tx = get_rx_tx_data_points(self.collection, AxisScaling.LOG, DataUnit.BIT, True)
        self.assertEqual(tx[0][1], 3.0)
        _, tx = get_rx_tx_data_points(self.collection, AxisScaling.LOG, DataUnit.BIT, False)
        self.assertAlmostEqual(tx[1][1], math.log10(80.0))

    def test_log_of_zero_is_negative_infinity(self):
        rx, _ = get_rx_tx_data_points(self.collection, AxisScaling.LOG, DataUnit.BIT, False)
        self.assertEqual(rx[1][1], float("-inf"))


class TestNetworkDisplay(unittest.TestCase):
    """Test the rx/tx display strings."""

    def setUp(self):
        self.collection = make_collection([(0, TimedData())])
        self.collection.network_harvest = NetworkHarvest(
            rx=8 * 2048, tx=8 * 100, total_rx=8 * 3 * 1024 ** 2, total_tx=8 * 5_000_000
        )

    def test_four_points_binary_bytes(self):
        data = convert_network_data_points(
            self.collection, True, AxisScaling.LINEAR, DataUnit.BYTE, True
        )
        self.assertEqual(data.rx_display, "2.0KiB/s")
        self.assertEqual(data.tx_display, "100.0B/s")
        self.assertEqual(data.total_rx_display, "3.0MiB")
        self.assertEqual(data.total_tx_display, "4.8MiB")

    def test_four_points_bits_keep_totals_in_bytes(self):
        data = convert_network_data_points(
            self.collection, True, AxisScaling.LINEAR, DataUnit.BIT, False
        )
        self.assertEqual(data.rx_display, "16.4Kb/s")
        self.assertEqual(data.total_tx_display, "5.0MB")

    def test_combined_binary_layout(self):
        data = convert_network_data_points(
            self.collection, False, AxisScaling.LINEAR, DataUnit.BYTE, True
        )
        self.assertEqual(data.rx_display, "RX: 2.0KiB/s    All: 3.0MiB")
        self.assertEqual(data.tx_display, "TX: 100.0B/s    All: 4.8MiB")
        self.assertIsNone(data.total_rx_display)
        self.assertIsNone(data.total_tx_display)

    def test_combined_decimal_layout_pads_unit_to_two(self):
        self.collection.network_harvest = NetworkHarvest(rx=8, tx=0, total_rx=8 * 10, total_tx=0)
        data = convert_network_data_points(
            self.collection, False, AxisScaling.LINEAR, DataUnit.BYTE, False
        )
        self.assertEqual(data.rx_display, "RX: 1.0B/s      All: 10.0B ")
        self.assertEqual(data.tx_display, "TX: 0.0B/s      All: 0.0B ")


class TestCpuProjection(unittest.TestCase):
    """Test the two-phase CPU row update."""

    def test_rebuild_on_count_change(self):
        """Test a changed count rebuilds rows with empty series."""
        projector = HistoryProjector()
        projector.convert_cpu_data_points(cpu_collection([(0, [50.0, 40.0, 60.0])]))
        self.assertEqual(len(projector.cpu_data), 4)

        collection = cpu_collection([(0, [50.0, 40.0, 60.0]), (1000, [30.0, 10.0, 20.0, 40.0, 50.0])])
        projector.reconcile_cpu_entries(collection)

        self.assertEqual(len(projector.cpu_data), 6)
        self.assertIsInstance(projector.cpu_data[0], CpuWidgetAll)
        for cpu in projector.cpu_data[1:]:
            self.assertEqual(cpu.data, [])
        self.assertEqual([cpu.last_entry for cpu in projector.cpu_data[1:]], [30.0, 10.0, 20.0, 40.0, 50.0])
        self.assertTrue(projector.cpu_data[1].data_type.is_avg)
        self.assertEqual(projector.cpu_data[2].data_type, CpuDataType.cpu(0))

    def test_reuses_rows_when_count_unchanged(self):
        projector = HistoryProjector()
        first = cpu_collection([(0, [50.0, 40.0])])
        projector.convert_cpu_data_points(first)
        row = projector.cpu_data[1]

        second = cpu_collection([(0, [50.0, 40.0]), (500, [70.0, 80.0])])
        projector.convert_cpu_data_points(second)

        self.assertIs(projector.cpu_data[1], row)
        self.assertEqual(row.last_entry, 70.0)
        self.assertEqual(row.data, [(-500.0, 50.0), (0.0, 70.0)])
        self.assertEqual(projector.cpu_data[2].data, [(-500.0, 40.0), (0.0, 80.0)])

    def test_short_ticks_skip_missing_cores(self):
        projector = HistoryProjector()
        collection = cpu_collection([(0, [10.0]), (1000, [20.0, 30.0])])
        rows = projector.convert_cpu_data_points(collection)

        self.assertEqual(rows[1].data, [(-1000.0, 10.0), (0.0, 20.0)])
        self.assertEqual(rows[2].data, [(0.0, 30.0)])

    def test_data_type_falls_back_without_harvest(self):
        projector = HistoryProjector()
        collection = make_collection([(0, TimedData(cpu_data=[1.0, 2.0]))])
        rows = projector.convert_cpu_data_points(collection)
        self.assertEqual(rows[2].data_type, CpuDataType.cpu(1))

    def test_empty_history_clears_series(self):
        projector = HistoryProjector()
        projector.convert_cpu_data_points(cpu_collection([(0, [50.0, 40.0])]))
        projector.convert_cpu_data_points(DataCollection())
        for cpu in projector.cpu_data[1:]:
            self.assertEqual(cpu.data, [])

    def test_legend_text(self):
        entry = CpuWidgetEntry(data_type=CpuDataType.cpu(2), last_entry=42.4)
        self.assertEqual(entry.legend_text(), "CPU2  42%")


class TestSnapshots(unittest.TestCase):
    """Test one-shot disk, temperature and battery conversions."""

    def test_disk_rows(self):
        collection = DataCollection(
            disk_harvest=[DiskHarvest("/dev/sda1", "/", 1024 ** 3, 3 * 1024 ** 3, 4 * 1024 ** 3)],
            io_labels=[("1KB/s", "0B/s")],
        )
        disk = convert_disk_data(collection)[0]
        self.assertEqual(disk.name, "/dev/sda1")
        self.assertEqual(disk.io_read, "1KB/s")
        self.assertEqual(disk.free_space_text, "1.0GiB")
        self.assertEqual(disk.used_space_text, "3.0GiB")
        self.assertEqual(disk.total_space_text, "4.0GiB")
        self.assertEqual(disk.usage_percent, 75.0)

    def test_disk_without_capacity(self):
        collection = DataCollection(
            disk_harvest=[DiskHarvest("tmpfs", "/run", 0, 0, 0)], io_labels=[("N/A", "N/A")]
        )
        self.assertIsNone(convert_disk_data(collection)[0].usage_percent)

    def test_temperatures_round_up(self):
        collection = DataCollection(temp_harvest=[TempHarvest("coretemp", 41.2), TempHarvest("acpi", 40.0)])
        temps = convert_temp_data(collection, TemperatureType.CELSIUS)
        self.assertEqual([t.temperature_value for t in temps], [42, 40])
        self.assertEqual(temps[0].text, "42°C")

    def test_battery(self):
        collection = DataCollection(battery_harvest=[
            BatteryHarvest(
                charge_percent=80.0,
                secs_until_full=None,
                secs_until_empty=3600 + 60 + 5,
                power_consumption_rate_watts=12.5,
                health_percent=97.5,
            ),
        ])
        battery = convert_battery_harvest(collection)[0]
        self.assertEqual(battery.battery_name, "Battery 0")
        self.assertEqual(battery.watt_consumption, "12.50W")
        self.assertEqual(battery.health, "97.50%")
        self.assertEqual(battery.duration_until_empty, "1 hour, 1 minute, 5 seconds")
        self.assertIsNone(battery.duration_until_full)


class TestProject(unittest.TestCase):
    """Test the full projection pass."""

    def test_project_fills_all_fields(self):
        collection = make_collection([
            (0, TimedData(rx_data=8.0, tx_data=16.0, cpu_data=[5.0, 6.0], mem_data=10.0,
                          load_avg_data=(0.5, 0.4, 0.3))),
            (1000, TimedData(rx_data=8.0, tx_data=16.0, cpu_data=[7.0, 8.0], mem_data=30.0,
                             load_avg_data=(1.0, 0.5, 0.25))),
        ])
        collection.memory_harvest = MemHarvest(2048, 1024, 50.0)
        projector = HistoryProjector.from_config(AppConfigFields(network_unit_type=DataUnit.BYTE))

        converted = projector.project(collection)

        self.assertEqual(converted.mem_data, [(-1000.0, 10.0), (0.0, 30.0)])
        self.assertEqual(converted.swap_data, [])
        self.assertEqual(converted.network_data_rx, [(-1000.0, 1.0), (0.0, 1.0)])
        self.assertEqual(converted.mem_labels, (" 50%", "   1.0MiB/2.0MiB"))
        self.assertIsNone(converted.swap_labels)
        self.assertEqual(converted.load_avg_data, (1.0, 0.5, 0.25))
        self.assertEqual(len(converted.cpu_data), 3)
        self.assertEqual(converted.total_rx_display, "0.0B")

    def test_project_empty_history(self):
        converted = HistoryProjector().project(DataCollection(), need_four_points=False)
        self.assertEqual(converted.mem_data, [])
        self.assertEqual(converted.network_data_rx, [])
        self.assertEqual(converted.cpu_data, [])
        self.assertEqual(converted.rx_display, "RX: 0.0b/s      All: 0.0B ")


if __name__ == '__main__':
    unittest.main()
