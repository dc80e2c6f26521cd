"""
Outside-click dismissal.

PointerEventBus stands in for the document: listeners register for an
event type in the capture or bubble phase. DismissHandler registers one
capture-phase pointerdown listener while mounted and calls back whenever
the pointer lands outside the control's region.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple

logger = logging.getLogger(__name__)

POINTER_DOWN = "pointerdown"


@dataclass(frozen=True)
class PointerEvent:
    x: float
    y: float
    type: str = POINTER_DOWN


@dataclass(frozen=True)
class Region:
    """Axis-aligned bounding box; edges count as inside."""
    left: float
    top: float
    width: float
    height: float

    def contains(self, x: float, y: float) -> bool:
        return (
            self.left <= x <= self.left + self.width
            and self.top <= y <= self.top + self.height
        )


Listener = Callable[[PointerEvent], None]


class PointerEventBus:
    def __init__(self) -> None:
        self._listeners: Dict[str, List[Tuple[Listener, bool]]] = {}

    def add_listener(self, event_type: str, listener: Listener, capture: bool = False) -> None:
        entries = self._listeners.setdefault(event_type, [])
        if (listener, capture) not in entries:
            entries.append((listener, capture))

    def remove_listener(self, event_type: str, listener: Listener, capture: bool = False) -> None:
        entries = self._listeners.get(event_type, [])
        if (listener, capture) in entries:
            entries.remove((listener, capture))

    def listener_count(self, event_type: str = POINTER_DOWN) -> int:
        return len(self._listeners.get(event_type, []))

    def dispatch(self, event: PointerEvent) -> None:
        """Capture listeners first, then bubble listeners, each in registration order."""
        entries = list(self._listeners.get(event.type, []))
        for listener, capture in entries:
            if capture:
                listener(event)
        for listener, capture in entries:
            if not capture:
                listener(event)


class DismissHandler:
    """
    Calls `on_dismiss` for pointer-downs outside `region_provider()`.

    The region is read on every event so a control that moves or resizes
    is tracked without re-mounting.
    """

    def __init__(
        self,
        bus: PointerEventBus,
        region_provider: Callable[[], Region],
        on_dismiss: Callable[[], None],
    ):
        self.bus = bus
        self.region_provider = region_provider
        self.on_dismiss = on_dismiss
        self.mounted = False

    def mount(self) -> None:
        if self.mounted:
            return
        self.bus.add_listener(POINTER_DOWN, self._handle, capture=True)
        self.mounted = True

    def unmount(self) -> None:
        if not self.mounted:
            return
        self.bus.remove_listener(POINTER_DOWN, self._handle, capture=True)
        self.mounted = False

    def _handle(self, event: PointerEvent) -> None:
        if self.region_provider().contains(event.x, event.y):
            return
        logger.debug("Pointer down outside control at (%s, %s)", event.x, event.y)
        self.on_dismiss()

    def __enter__(self) -> "DismissHandler":
        self.mount()
        return self

    def __exit__(self, *exc) -> None:
        self.unmount()
