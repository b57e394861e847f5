"""Zoomable time window for graphs and the auto-hiding x-axis label timer.

The autohide timer is evaluated lazily: nothing fires in the background, the
hide transition only happens when :meth:`AutohideTimer.is_showing` is next
called, so visibility changes are only as prompt as the host's redraw cadence.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum, IntFlag
from typing import List, Optional, Tuple, Union

from sysgraph.config import AppConfigFields
from sysgraph.constants import (
    AUTOHIDE_TIMEOUT_MILLISECONDS,
    STALE_MAX_MILLISECONDS,
    STALE_MIN_MILLISECONDS,
    TIME_LABEL_HEIGHT_LIMIT,
)

logger = logging.getLogger(__name__)

_NS_PER_MS = 1_000_000


class ComponentEventResult(Enum):
    """Outcome of feeding an input event to a component."""

    UNHANDLED = "unhandled"
    REDRAW = "redraw"
    NO_REDRAW = "no_redraw"


class KeyModifiers(IntFlag):
    NONE = 0
    SHIFT = 1
    CONTROL = 2
    ALT = 4


class MouseEventKind(Enum):
    SCROLL_UP = "scroll_up"
    SCROLL_DOWN = "scroll_down"
    DOWN = "down"
    UP = "up"
    DRAG = "drag"
    MOVED = "moved"


# ----------------------------- Autohide timer -----------------------------
class Hidden:
    """Timer state: labels are concealed until the next zoom."""

    def __repr__(self) -> str:
        return "Hidden()"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Hidden)

    def __hash__(self) -> int:
        return hash(Hidden)


@dataclass(frozen=True)
class Running:
    """Timer state: labels are showing since ``start_ns`` (monotonic nanoseconds)."""

    start_ns: int


AutohideTimerState = Union[Hidden, Running]


class AutohideTimer:
    """Base class for the three autohide modes."""

    def start_display_timer(self) -> None:
        raise NotImplementedError

    def update_display_timer(self) -> None:
        raise NotImplementedError

    def is_showing(self) -> bool:
        raise NotImplementedError


class AlwaysShow(AutohideTimer):
    def start_display_timer(self) -> None:
        pass

    def update_display_timer(self) -> None:
        pass

    def is_showing(self) -> bool:
        return True

    def __repr__(self) -> str:
        return "AlwaysShow()"


class AlwaysHide(AutohideTimer):
    def start_display_timer(self) -> None:
        pass

    def update_display_timer(self) -> None:
        pass

    def is_showing(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "AlwaysHide()"


class Enabled(AutohideTimer):
    """Labels show for ``show_duration_ms`` after each zoom, then hide."""

    def __init__(self, show_duration_ms: int, state: Optional[AutohideTimerState] = None) -> None:
        self.show_duration_ms = show_duration_ms
        self.state: AutohideTimerState = state if state is not None else Hidden()

    def start_display_timer(self) -> None:
        self.state = Running(time.monotonic_ns())

    def update_display_timer(self) -> None:
        if isinstance(self.state, Running):
            elapsed_ns = time.monotonic_ns() - self.state.start_ns
            if elapsed_ns > self.show_duration_ms * _NS_PER_MS:
                logger.debug("Autohide timer expired after %d ms", elapsed_ns // _NS_PER_MS)
                self.state = Hidden()

    def is_showing(self) -> bool:
        self.update_display_timer()
        return isinstance(self.state, Running)

    def __repr__(self) -> str:
        return f"Enabled(show_duration_ms={self.show_duration_ms}, state={self.state!r})"


# ----------------------------- Time window -----------------------------
@dataclass
class TimeWindow:
    """Visible span of a time graph, in milliseconds."""

    current_ms: int
    default_ms: int
    min_ms: int
    max_ms: int
    step_ms: int

    def __post_init__(self) -> None:
        if self.step_ms <= 0:
            raise ValueError(f"step_ms must be positive, got {self.step_ms}")
        if not self.min_ms <= self.current_ms <= self.max_ms:
            raise ValueError(
                f"current_ms {self.current_ms} outside [{self.min_ms}, {self.max_ms}]"
            )


class TimeWindowController:
    """Owns the zoom level of one graph and its autohide timer.

    Every zoom method returns a :class:`ComponentEventResult` so the host can
    skip redrawing when nothing moved.
    """

    def __init__(
        self,
        start_value: int,
        autohide_timer: AutohideTimer,
        min_duration: int,
        max_duration: int,
        time_interval: int,
        use_dot: bool = False,
    ) -> None:
        self.window = TimeWindow(
            current_ms=start_value,
            default_ms=start_value,
            min_ms=min_duration,
            max_ms=max_duration,
            step_ms=time_interval,
        )
        self.autohide_timer = autohide_timer
        self.use_dot = use_dot

    @classmethod
    def from_config(cls, config: AppConfigFields) -> "TimeWindowController":
        """Create a controller seeded from the resolved application config."""
        if config.hide_time:
            autohide_timer: AutohideTimer = AlwaysHide()
        elif config.autohide_time:
            autohide_timer = Enabled(
                AUTOHIDE_TIMEOUT_MILLISECONDS, Running(time.monotonic_ns())
            )
        else:
            autohide_timer = AlwaysShow()

        return cls(
            config.default_time_value,
            autohide_timer,
            STALE_MIN_MILLISECONDS,
            STALE_MAX_MILLISECONDS,
            config.time_interval,
            config.use_dot,
        )

    # ----------------------- Input handling -----------------------
    def handle_key_event(
        self, key: str, modifiers: KeyModifiers = KeyModifiers.NONE
    ) -> ComponentEventResult:
        """Handle a key press; ``key`` is a single character or a key name."""
        if modifiers not in (KeyModifiers.NONE, KeyModifiers.SHIFT):
            return ComponentEventResult.UNHANDLED
        if len(key) != 1:
            return ComponentEventResult.UNHANDLED
        return self.handle_char(key)

    def handle_char(self, c: str) -> ComponentEventResult:
        if c == "-":
            return self.zoom_out()
        if c == "+":
            return self.zoom_in()
        if c == "=":
            return self.reset_zoom()
        return ComponentEventResult.UNHANDLED

    def handle_mouse_event(self, kind: MouseEventKind) -> ComponentEventResult:
        if kind is MouseEventKind.SCROLL_DOWN:
            return self.zoom_out()
        if kind is MouseEventKind.SCROLL_UP:
            return self.zoom_in()
        return ComponentEventResult.UNHANDLED

    # ----------------------- Zoom -----------------------
    def zoom_in(self) -> ComponentEventResult:
        window = self.window
        new_time = max(0, window.current_ms - window.step_ms)

        if new_time == window.current_ms:
            return ComponentEventResult.NO_REDRAW
        if new_time >= window.min_ms:
            self._commit(new_time)
            return ComponentEventResult.REDRAW
        if window.current_ms != window.min_ms:
            self._commit(window.min_ms)
            return ComponentEventResult.REDRAW
        return ComponentEventResult.NO_REDRAW

    def zoom_out(self) -> ComponentEventResult:
        window = self.window
        new_time = window.current_ms + window.step_ms

        if new_time == window.current_ms:
            return ComponentEventResult.NO_REDRAW
        if new_time <= window.max_ms:
            self._commit(new_time)
            return ComponentEventResult.REDRAW
        if window.current_ms != window.max_ms:
            self._commit(window.max_ms)
            return ComponentEventResult.REDRAW
        return ComponentEventResult.NO_REDRAW

    def reset_zoom(self) -> ComponentEventResult:
        if self.window.current_ms == self.window.default_ms:
            return ComponentEventResult.NO_REDRAW
        self._commit(self.window.default_ms)
        return ComponentEventResult.REDRAW

    def _commit(self, new_time: int) -> None:
        logger.debug("Time window %d ms -> %d ms", self.window.current_ms, new_time)
        self.window.current_ms = new_time
        self.autohide_timer.start_display_timer()

    # ----------------------- Axis metadata -----------------------
    def get_current_display_time(self) -> int:
        """Returns the current display time boundary."""
        return self.window.current_ms

    def get_x_axis_bounds(self) -> Tuple[float, float]:
        return -float(self.window.current_ms), 0.0

    def get_x_axis_labels(self) -> List[str]:
        return [f"{self.window.current_ms // 1000}s", "0s"]

    def should_show_time_labels(self, available_height: int) -> bool:
        """Whether the x-axis labels fit in ``available_height`` rows and are not auto-hidden."""
        return available_height >= TIME_LABEL_HEIGHT_LIMIT and self.autohide_timer.is_showing()
