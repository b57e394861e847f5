"""History buffer consumed by the projector: timed samples plus latest harvests.

Instants are integer nanoseconds from :func:`time.monotonic_ns`. The buffer is
append-only from the projector's point of view; only the harvester (or a
test) writes to it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

_NS_PER_MS = 1_000_000


@dataclass(frozen=True)
class CpuDataType:
    """Either the averaged row (``index is None``) or one logical core."""

    index: Optional[int] = None

    @classmethod
    def avg(cls) -> "CpuDataType":
        return cls(None)

    @classmethod
    def cpu(cls, index: int) -> "CpuDataType":
        return cls(index)

    @property
    def is_avg(self) -> bool:
        return self.index is None

    @property
    def name(self) -> str:
        return "AVG" if self.index is None else f"CPU{self.index}"


@dataclass
class CpuHarvest:
    data_type: CpuDataType
    cpu_usage: float


@dataclass
class MemHarvest:
    mem_total_in_kib: int = 0
    mem_used_in_kib: int = 0
    use_percent: Optional[float] = None


@dataclass
class NetworkHarvest:
    """Current rates and lifetime totals, all in bits."""

    rx: int = 0
    tx: int = 0
    total_rx: int = 0
    total_tx: int = 0


@dataclass
class DiskHarvest:
    name: str
    mount_point: str
    free_space: int
    used_space: int
    total_space: int


@dataclass
class TempHarvest:
    name: str
    temperature: float


@dataclass
class BatteryHarvest:
    charge_percent: float
    secs_until_full: Optional[int]
    secs_until_empty: Optional[int]
    power_consumption_rate_watts: float
    health_percent: float


@dataclass
class TimedData:
    """Readings captured at one tick. Absent readings are ``None`` or empty."""

    rx_data: float = 0.0
    tx_data: float = 0.0
    cpu_data: List[float] = field(default_factory=list)
    load_avg_data: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    mem_data: Optional[float] = None
    swap_data: Optional[float] = None


@dataclass
class DataCollection:
    """Append-only history of :class:`TimedData` plus the latest one-shot harvests.

    ``frozen_instant``, when set, replaces ``current_instant`` as the display
    reference so the graphs stay pinned while collection carries on.
    """

    current_instant: int = 0
    frozen_instant: Optional[int] = None
    timed_data_vec: List[Tuple[int, TimedData]] = field(default_factory=list)
    network_harvest: NetworkHarvest = field(default_factory=NetworkHarvest)
    memory_harvest: MemHarvest = field(default_factory=MemHarvest)
    swap_harvest: MemHarvest = field(default_factory=MemHarvest)
    cpu_harvest: List[CpuHarvest] = field(default_factory=list)
    load_avg_harvest: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    disk_harvest: List[DiskHarvest] = field(default_factory=list)
    io_labels: List[Tuple[str, str]] = field(default_factory=list)
    temp_harvest: List[TempHarvest] = field(default_factory=list)
    battery_harvest: List[BatteryHarvest] = field(default_factory=list)

    @property
    def display_instant(self) -> int:
        """The "now" reference graphs are drawn against."""
        return self.frozen_instant if self.frozen_instant is not None else self.current_instant

    @property
    def is_frozen(self) -> bool:
        return self.frozen_instant is not None

    def freeze(self) -> None:
        """Pin the display to the latest tick. Does nothing before the first tick."""
        if not self.timed_data_vec:
            logger.debug("Nothing collected yet, not freezing")
            return
        self.frozen_instant = self.current_instant

    def thaw(self) -> None:
        self.frozen_instant = None

    def eat_data(self, instant: int, timed_data: TimedData) -> None:
        """Append one tick and advance ``current_instant`` to it."""
        self.timed_data_vec.append((instant, timed_data))
        self.current_instant = instant

    def clean_data(self, max_age_ms: int) -> None:
        """Drop entries older than ``max_age_ms`` before ``current_instant``.

        Entries at or after a frozen instant are always kept, so that a frozen
        view keeps the point it is pinned to.
        """
        cutoff = self.current_instant - max_age_ms * _NS_PER_MS
        if self.frozen_instant is not None:
            cutoff = min(cutoff, self.frozen_instant)

        keep_from = 0
        for keep_from, (instant, _) in enumerate(self.timed_data_vec):
            if instant >= cutoff:
                break
        else:
            keep_from = len(self.timed_data_vec)

        if keep_from:
            logger.debug("Pruning %d history entries", keep_from)
            del self.timed_data_vec[:keep_from]
