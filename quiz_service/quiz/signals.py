"""
Environment Signals - In-process source of browser-level events

The HTTP layer publishes client events (clipboard, context menu,
visibility changes) here; the integrity monitor subscribes while a
session is active.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)

COPY = "copy"
CUT = "cut"
PASTE = "paste"
CONTEXT_MENU = "contextmenu"
VISIBILITY_CHANGE = "visibilitychange"

CLIPBOARD_EVENTS = (COPY, CUT, PASTE)
SIGNAL_TYPES = CLIPBOARD_EVENTS + (CONTEXT_MENU, VISIBILITY_CHANGE)


@dataclass
class EnvironmentSignal:
    """A single environment event as seen by subscribers"""
    type: str
    hidden: bool = False
    timestamp: datetime = field(default_factory=datetime.utcnow)
    default_prevented: bool = False

    def prevent_default(self) -> None:
        """Ask the originating client to suppress the event's default action"""
        self.default_prevented = True


SignalHandler = Callable[[EnvironmentSignal], None]


class SignalSource:
    """Minimal pub/sub keyed by signal type."""

    def __init__(self) -> None:
        self._subs: Dict[str, List[SignalHandler]] = {}

    def subscribe(self, signal_type: str, handler: SignalHandler) -> Callable[[], None]:
        """
        Register a handler.

        Returns:
            A callable that removes exactly this subscription
        """
        if signal_type not in SIGNAL_TYPES:
            raise ValueError(f"Unknown signal type: {signal_type}")
        self._subs.setdefault(signal_type, []).append(handler)

        def unsubscribe() -> None:
            self.unsubscribe(signal_type, handler)

        return unsubscribe

    def unsubscribe(self, signal_type: str, handler: SignalHandler) -> None:
        handlers = self._subs.get(signal_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def subscriber_count(self, signal_type: str = None) -> int:
        if signal_type is not None:
            return len(self._subs.get(signal_type, []))
        return sum(len(h) for h in self._subs.values())

    def emit(self, signal: EnvironmentSignal) -> EnvironmentSignal:
        """Deliver a signal to current subscribers and return it."""
        # Copy so handlers may unsubscribe during dispatch
        for handler in list(self._subs.get(signal.type, [])):
            handler(signal)
        return signal

    def publish(self, signal_type: str, hidden: bool = False) -> EnvironmentSignal:
        """Build and emit a signal of the given type."""
        if signal_type not in SIGNAL_TYPES:
            raise ValueError(f"Unknown signal type: {signal_type}")
        return self.emit(EnvironmentSignal(type=signal_type, hidden=hidden))
