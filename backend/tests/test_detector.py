"""
Tests for the signal detector sources
"""
import asyncio

import pytest

from examguard.client import ClientSettings, EscalationState, HeadlessPage, SignalDetector, SignalKind
from examguard.client.signals import is_restricted_shortcut

NO_POLLS = dict(fullscreen_poll_interval=3600, visibility_poll_interval=3600)


class RecordingSink:
    def __init__(self):
        self.calls = []

    async def __call__(self, kind, description):
        self.calls.append((kind, description))

    @property
    def kinds(self):
        return [kind for kind, _ in self.calls]


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def state():
    return EscalationState()


def make_detector(page, state, sink, **overrides):
    settings = ClientSettings(**{**NO_POLLS, "focus_recheck_delay": 0.01, **overrides})
    return SignalDetector(page, state, sink, settings)


class TestShortcutMatching:

    @pytest.mark.parametrize("key,ctrl,shift,expected", [
        ("F12", False, False, True),
        ("I", True, True, True),
        ("J", True, True, True),
        ("u", True, False, True),
        ("I", True, False, False),
        ("c", True, False, False),
        ("a", False, False, False),
    ])
    def test_restricted_shortcuts(self, key, ctrl, shift, expected):
        assert is_restricted_shortcut(key, ctrl, shift) is expected


class TestEventSources:

    @pytest.mark.asyncio
    async def test_blur(self, state, sink):
        page = HeadlessPage()
        detector = make_detector(page, state, sink)
        detector.start()
        try:
            page.blur()
            await detector.drain()
        finally:
            await detector.stop()

        assert sink.calls == [("blur", "Window blur detected")]

    @pytest.mark.asyncio
    async def test_visibility_change_only_when_hidden(self, state, sink):
        page = HeadlessPage()
        detector = make_detector(page, state, sink)
        detector.start()
        try:
            page.hide()
            page.show()
            await detector.drain()
        finally:
            await detector.stop()

        assert sink.kinds == [SignalKind.VISIBILITY_CHANGE.value]

    @pytest.mark.asyncio
    async def test_fullscreen_exit_on_change_event(self, state, sink):
        page = HeadlessPage()
        detector = make_detector(page, state, sink)
        detector.start()
        try:
            page.exit_fullscreen()
            page.enter_fullscreen()
            await detector.drain()
        finally:
            await detector.stop()

        assert sink.kinds == ["fullscreen_exit"]

    @pytest.mark.asyncio
    async def test_fullscreen_checked_on_start(self, state, sink):
        page = HeadlessPage(fullscreen=False)
        detector = make_detector(page, state, sink)
        detector.start()
        try:
            await detector.drain()
        finally:
            await detector.stop()

        assert sink.kinds == ["fullscreen_exit"]

    @pytest.mark.asyncio
    async def test_cursor_leaving_viewport(self, state, sink):
        page = HeadlessPage()
        detector = make_detector(page, state, sink)
        detector.start()
        try:
            page.mouse_out(related_target=object())
            page.mouse_out(related_target=None)
            await detector.drain()
        finally:
            await detector.stop()

        assert sink.kinds == ["cursor_leave"]

    @pytest.mark.asyncio
    async def test_devtools_shortcut_prevented_and_reported(self, state, sink):
        page = HeadlessPage()
        detector = make_detector(page, state, sink)
        detector.start()
        try:
            blocked = page.key_down("F12")
            allowed = page.key_down("a")
            await detector.drain()
        finally:
            await detector.stop()

        assert blocked.default_prevented
        assert not allowed.default_prevented
        assert sink.kinds == ["devtools_shortcut"]

    @pytest.mark.asyncio
    async def test_context_menu_suppressed_silently(self, state, sink):
        page = HeadlessPage()
        detector = make_detector(page, state, sink)
        detector.start()
        try:
            event = page.context_menu()
            await detector.drain()
        finally:
            await detector.stop()

        assert event.default_prevented
        assert sink.calls == []

    @pytest.mark.asyncio
    async def test_focus_regained_while_hidden(self, state, sink):
        page = HeadlessPage()
        detector = make_detector(page, state, sink)
        detector.start()
        try:
            page.hide(fire_event=False)
            page.focus()
            await asyncio.sleep(0.05)
            await detector.drain()
        finally:
            await detector.stop()

        assert sink.kinds == ["focus_reveal"]

    @pytest.mark.asyncio
    async def test_focus_regained_while_visible(self, state, sink):
        page = HeadlessPage()
        detector = make_detector(page, state, sink)
        detector.start()
        try:
            page.focus()
            await asyncio.sleep(0.05)
            await detector.drain()
        finally:
            await detector.stop()

        assert sink.calls == []


class TestPolls:

    @pytest.mark.asyncio
    async def test_visibility_poll_fires_once_per_transition(self, state, sink):
        page = HeadlessPage()
        detector = make_detector(page, state, sink, visibility_poll_interval=0.01)
        detector.start()
        try:
            page.hide(fire_event=False)
            await asyncio.sleep(0.08)
            await detector.drain()
        finally:
            await detector.stop()

        assert sink.kinds == ["visibility_poll"]

    @pytest.mark.asyncio
    async def test_fullscreen_poll_repeats_while_exited(self, state, sink):
        page = HeadlessPage()
        detector = make_detector(page, state, sink, fullscreen_poll_interval=0.01)
        detector.start()
        try:
            page.exit_fullscreen(fire_event=False)
            await asyncio.sleep(0.08)
            await detector.drain()
        finally:
            await detector.stop()

        assert len(sink.kinds) >= 2
        assert set(sink.kinds) == {"fullscreen_exit"}


class TestGating:

    @pytest.mark.asyncio
    async def test_nothing_emitted_after_termination(self, state, sink):
        page = HeadlessPage()
        detector = make_detector(page, state, sink, fullscreen_poll_interval=0.01, visibility_poll_interval=0.01)
        detector.start()
        try:
            state.mark_terminated()
            page.blur()
            page.hide()
            page.exit_fullscreen()
            page.mouse_out()
            shortcut = page.key_down("u", ctrl=True)
            page.focus()
            await asyncio.sleep(0.05)
            await detector.drain()
        finally:
            await detector.stop()

        assert sink.calls == []
        assert shortcut.default_prevented

    @pytest.mark.asyncio
    async def test_stop_detaches_listeners(self, state, sink):
        page = HeadlessPage()
        detector = make_detector(page, state, sink)
        detector.start()
        await detector.stop()

        page.blur()
        await detector.drain()

        assert sink.calls == []

    @pytest.mark.asyncio
    async def test_duplicates_are_not_collapsed(self, state, sink):
        page = HeadlessPage()
        detector = make_detector(page, state, sink)
        detector.start()
        try:
            page.exit_fullscreen()
            page.exit_fullscreen()
            await detector.drain()
        finally:
            await detector.stop()

        assert sink.kinds == ["fullscreen_exit", "fullscreen_exit"]
