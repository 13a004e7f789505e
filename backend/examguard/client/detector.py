import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Set

from .config import ClientSettings
from .page import HIDDEN, VISIBLE, PageEnvironment, PageEvent
from .signals import DESCRIPTIONS, SignalKind, is_restricted_shortcut
from .state import EscalationState

logger = logging.getLogger(__name__)

SignalSink = Callable[[str, str], Awaitable[None]]


class SignalDetector:
    """Turns raw page signals into ``(kind, description)`` pairs.

    Every source is independent and may report the same underlying condition
    more than once; deduplication belongs to the reporter. Emission stops as
    soon as ``state.terminated`` is set. Must be started from inside a running
    event loop.
    """

    def __init__(self, page: PageEnvironment, state: EscalationState, sink: SignalSink,
                 settings: Optional[ClientSettings] = None):
        self.page = page
        self.state = state
        self.sink = sink
        self.settings = settings or ClientSettings()

        self._last_visibility = VISIBLE
        self._poll_tasks: List[asyncio.Task] = []
        self._pending: Set[asyncio.Task] = set()
        self._rechecks: Set[asyncio.Task] = set()
        self._listeners = [
            ("visibilitychange", self.on_visibility_change),
            ("blur", self.on_blur),
            ("focus", self.on_focus),
            ("fullscreenchange", self.on_fullscreen_change),
            ("mouseout", self.on_mouse_out),
            ("contextmenu", self.on_context_menu),
            ("keydown", self.on_key_down),
        ]
        self._running = False

    def start(self):
        if self._running:
            return
        self._running = True
        loop = asyncio.get_running_loop()

        for event_type, listener in self._listeners:
            self.page.add_listener(event_type, listener)

        self._last_visibility = self.page.visibility_state
        self.check_fullscreen()

        self._poll_tasks = [
            loop.create_task(self._poll(self.settings.fullscreen_poll_interval, self.check_fullscreen)),
            loop.create_task(self._poll(self.settings.visibility_poll_interval, self.poll_visibility)),
        ]
        logger.info("Signal detector started")

    async def stop(self):
        """Detach from the page and cancel polls; in-flight reports are left to finish."""
        if not self._running:
            return
        self._running = False
        for event_type, listener in self._listeners:
            self.page.remove_listener(event_type, listener)
        background = self._poll_tasks + list(self._rechecks)
        for task in background:
            task.cancel()
        await asyncio.gather(*background, return_exceptions=True)
        self._rechecks.clear()
        self._poll_tasks = []
        logger.info("Signal detector stopped")

    async def drain(self):
        """Wait for every report handed to the sink so far."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def emit(self, kind: SignalKind, description: Optional[str] = None):
        if self.state.terminated:
            return
        task = asyncio.get_running_loop().create_task(
            self.sink(kind.value, description or DESCRIPTIONS[kind])
        )
        self._pending.add(task)
        task.add_done_callback(self._report_done)

    def _report_done(self, task: asyncio.Task):
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Signal report failed: {task.exception()}")

    async def _poll(self, interval: float, check: Callable[[], None]):
        while True:
            await asyncio.sleep(interval)
            if not self.state.terminated:
                check()

    # sources

    def check_fullscreen(self):
        if self.state.terminated:
            return
        if not self.page.is_fullscreen:
            self.emit(SignalKind.FULLSCREEN_EXIT)

    def poll_visibility(self):
        if self.state.terminated:
            return
        current = self.page.visibility_state
        if current == HIDDEN and self._last_visibility == VISIBLE:
            self.emit(SignalKind.VISIBILITY_POLL)
        self._last_visibility = current

    def on_visibility_change(self, event: PageEvent):
        if self.state.terminated:
            return
        if self.page.visibility_state == HIDDEN:
            self.emit(SignalKind.VISIBILITY_CHANGE)

    def on_blur(self, event: PageEvent):
        if self.state.terminated:
            return
        self.emit(SignalKind.BLUR)

    def on_focus(self, event: PageEvent):
        if self.state.terminated:
            return
        task = asyncio.get_running_loop().create_task(self._recheck_after_focus())
        self._rechecks.add(task)
        task.add_done_callback(self._rechecks.discard)

    async def _recheck_after_focus(self):
        await asyncio.sleep(self.settings.focus_recheck_delay)
        if self.state.terminated:
            return
        if self.page.visibility_state == HIDDEN:
            self.emit(SignalKind.FOCUS_REVEAL)

    def on_fullscreen_change(self, event: PageEvent):
        self.check_fullscreen()

    def on_mouse_out(self, event: PageEvent):
        if self.state.terminated:
            return
        # no related target: the pointer left the viewport
        if event.related_target is None:
            self.emit(SignalKind.CURSOR_LEAVE)

    def on_context_menu(self, event: PageEvent):
        event.prevent_default()

    def on_key_down(self, event: PageEvent):
        if not is_restricted_shortcut(event.key or "", event.ctrl_key, event.shift_key):
            return
        event.prevent_default()
        if self.state.terminated:
            return
        self.emit(SignalKind.DEVTOOLS_SHORTCUT)
