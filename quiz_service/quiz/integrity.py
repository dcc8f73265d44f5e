"""
Integrity Monitor - Classifies environment signals into violations

Policy:
- Clipboard (copy/cut/paste) and context-menu use: always logged as info,
  never fatal; the client's default action is suppressed.
- Visibility loss: the first is a warning, every later one is fatal.
  The fatal callback runs at most once per attachment lifetime.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from ..config import settings
from .models import ViolationKind, ViolationRecord, ViolationSeverity
from .signals import (
    CLIPBOARD_EVENTS,
    CONTEXT_MENU,
    VISIBILITY_CHANGE,
    EnvironmentSignal,
    SignalSource,
)

logger = logging.getLogger(__name__)

ViolationSink = Callable[[ViolationRecord], None]


class IntegrityMonitor:
    """
    Observes a signal source between attach() and detach().

    Usable as a context manager so subscriptions are released on every
    exit path.
    """

    def __init__(
        self,
        source: SignalSource,
        sink: ViolationSink,
        on_fatal_violation: Optional[Callable[[ViolationRecord], None]] = None,
        max_visibility_warnings: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.utcnow
    ):
        """
        Args:
            source: Environment signal source to observe
            sink: Receives every violation record
            on_fatal_violation: Invoked once on the first fatal violation
            max_visibility_warnings: Visibility losses tolerated before fatal
            clock: Timestamp source for records
        """
        self.source = source
        self.sink = sink
        self.on_fatal_violation = on_fatal_violation
        self.max_visibility_warnings = (
            settings.MAX_VISIBILITY_WARNINGS
            if max_visibility_warnings is None else max_visibility_warnings
        )
        self._clock = clock
        self._unsubscribers: List[Callable[[], None]] = []
        self._attached = False
        self._fatal_signalled = False
        self._detach_count = 0
        self.visibility_loss_count = 0

    @property
    def attached(self) -> bool:
        return self._attached

    @property
    def fatal_signalled(self) -> bool:
        return self._fatal_signalled

    @property
    def detach_count(self) -> int:
        """Number of detach() calls that actually released subscriptions"""
        return self._detach_count

    def attach(self) -> "IntegrityMonitor":
        """Begin observing environment signals."""
        if self._attached:
            return self
        try:
            for signal_type in CLIPBOARD_EVENTS:
                self._unsubscribers.append(self.source.subscribe(signal_type, self._on_clipboard))
            self._unsubscribers.append(self.source.subscribe(CONTEXT_MENU, self._on_context_menu))
            self._unsubscribers.append(self.source.subscribe(VISIBILITY_CHANGE, self._on_visibility_change))
        except Exception:
            self._release()
            raise
        self._attached = True
        logger.debug("Integrity monitor attached")
        return self

    def detach(self) -> None:
        """Stop observing. Idempotent."""
        if not self._attached:
            return
        self._release()
        self._attached = False
        self._detach_count += 1
        logger.debug("Integrity monitor detached")

    def __enter__(self) -> "IntegrityMonitor":
        return self.attach()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.detach()

    def _release(self) -> None:
        while self._unsubscribers:
            self._unsubscribers.pop()()

    # ============== Signal Handlers ==============

    def _on_clipboard(self, signal: EnvironmentSignal) -> None:
        signal.prevent_default()
        self._record(ViolationKind.CLIPBOARD_USE, ViolationSeverity.INFO, signal)

    def _on_context_menu(self, signal: EnvironmentSignal) -> None:
        signal.prevent_default()
        self._record(ViolationKind.CONTEXT_MENU_USE, ViolationSeverity.INFO, signal)

    def _on_visibility_change(self, signal: EnvironmentSignal) -> None:
        if not signal.hidden:
            return

        self.visibility_loss_count += 1
        if self.visibility_loss_count <= self.max_visibility_warnings:
            self._record(ViolationKind.VISIBILITY_LOSS, ViolationSeverity.WARNING, signal)
            return

        record = self._record(ViolationKind.VISIBILITY_LOSS, ViolationSeverity.FATAL, signal)
        if not self._fatal_signalled:
            self._fatal_signalled = True
            logger.warning(
                f"Fatal integrity violation after {self.visibility_loss_count} visibility losses"
            )
            if self.on_fatal_violation is not None:
                self.on_fatal_violation(record)

    def _record(
        self,
        kind: ViolationKind,
        severity: ViolationSeverity,
        signal: EnvironmentSignal
    ) -> ViolationRecord:
        record = ViolationRecord(
            kind=kind,
            timestamp=self._clock(),
            severity=severity,
            detail=signal.type,
        )
        self.sink(record)
        return record
