"""
The exam page as the proctoring client sees it.

``PageEnvironment`` is what the detector observes, ``PageSurface`` is what
enforcement acts on. ``HeadlessPage`` implements both in memory; it drives
the client in tests and simulations the way a browser would.
"""
import logging
import time
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Protocol

logger = logging.getLogger(__name__)

VISIBLE = "visible"
HIDDEN = "hidden"


@dataclass
class PageEvent:
    type: str
    related_target: Optional[object] = None
    key: Optional[str] = None
    ctrl_key: bool = False
    shift_key: bool = False
    default_prevented: bool = False

    def prevent_default(self):
        self.default_prevented = True


Listener = Callable[[PageEvent], None]


class Control(Protocol):
    def disable(self) -> None: ...


class PageEnvironment(Protocol):
    @property
    def visibility_state(self) -> str: ...

    @property
    def is_fullscreen(self) -> bool: ...

    def add_listener(self, event_type: str, listener: Listener) -> None: ...

    def remove_listener(self, event_type: str, listener: Listener) -> None: ...


class PageSurface(Protocol):
    total_questions: int

    def elapsed_seconds(self) -> float: ...

    def stop_timer(self) -> None: ...

    def interactive_controls(self) -> Iterable[Control]: ...

    def show_banner(self, element_id: str, message: str) -> None: ...

    def replace_content(self, title: str, body: str, link: Optional[str]) -> None: ...

    def submit_form(self, action: str, fields: Dict[str, str]) -> None: ...


@dataclass
class HeadlessControl:
    name: str
    disabled: bool = False

    def disable(self):
        self.disabled = True


@dataclass
class SubmittedForm:
    action: str
    fields: Dict[str, str]


class HeadlessPage:
    def __init__(self, total_questions: int = 0, controls: Optional[List[Control]] = None,
                 fullscreen: bool = True, started_at: Optional[float] = None):
        self.total_questions = total_questions
        self.controls: List[Control] = list(controls or [])
        self.banners: Dict[str, str] = {}
        self.content: Optional[dict] = None
        self.submitted_forms: List[SubmittedForm] = []
        self.timer_running = True

        self._visibility = VISIBLE
        self._fullscreen = fullscreen
        self._started_at = time.monotonic() if started_at is None else started_at
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)

    @property
    def visibility_state(self) -> str:
        return self._visibility

    @property
    def is_fullscreen(self) -> bool:
        return self._fullscreen

    def add_listener(self, event_type: str, listener: Listener):
        self._listeners[event_type].append(listener)

    def remove_listener(self, event_type: str, listener: Listener):
        if listener in self._listeners[event_type]:
            self._listeners[event_type].remove(listener)

    def dispatch(self, event: PageEvent) -> PageEvent:
        for listener in list(self._listeners[event.type]):
            listener(event)
        return event

    # user actions

    def hide(self, fire_event: bool = True):
        self._visibility = HIDDEN
        if fire_event:
            self.dispatch(PageEvent("visibilitychange"))

    def show(self, fire_event: bool = True):
        self._visibility = VISIBLE
        if fire_event:
            self.dispatch(PageEvent("visibilitychange"))

    def blur(self):
        self.dispatch(PageEvent("blur"))

    def focus(self):
        self.dispatch(PageEvent("focus"))

    def exit_fullscreen(self, fire_event: bool = True):
        self._fullscreen = False
        if fire_event:
            self.dispatch(PageEvent("fullscreenchange"))

    def enter_fullscreen(self, fire_event: bool = True):
        self._fullscreen = True
        if fire_event:
            self.dispatch(PageEvent("fullscreenchange"))

    def mouse_out(self, related_target: Optional[object] = None):
        self.dispatch(PageEvent("mouseout", related_target=related_target))

    def key_down(self, key: str, ctrl: bool = False, shift: bool = False) -> PageEvent:
        return self.dispatch(PageEvent("keydown", key=key, ctrl_key=ctrl, shift_key=shift))

    def context_menu(self) -> PageEvent:
        return self.dispatch(PageEvent("contextmenu"))

    # surface

    def elapsed_seconds(self) -> float:
        return time.monotonic() - self._started_at

    def stop_timer(self):
        self.timer_running = False

    def interactive_controls(self) -> Iterable[Control]:
        return list(self.controls)

    def show_banner(self, element_id: str, message: str):
        self.banners[element_id] = message

    def replace_content(self, title: str, body: str, link: Optional[str]):
        self.content = {"title": title, "body": body, "link": link}

    def submit_form(self, action: str, fields: Dict[str, str]):
        logger.info(f"Submitting form to {action}")
        self.submitted_forms.append(SubmittedForm(action=action, fields=dict(fields)))
