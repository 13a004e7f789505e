"""
Exam page side of the escalation protocol.

``ExamProctor`` wires the pieces together for one exam page::

    proctor = ExamProctor(page, session_token=token)
    await proctor.start()
    ...
    await proctor.stop()
"""
from typing import Optional

import httpx

from .config import ClientSettings
from .detector import SignalDetector
from .enforcement import EnforcementActions
from .page import HeadlessPage, HeadlessControl, PageEvent
from .reporter import EscalationReporter, ReportFailed, fallback_decision
from .signals import SignalKind
from .state import Decision, EscalationState


class ExamProctor:
    def __init__(self, page, settings: Optional[ClientSettings] = None, session_token: Optional[str] = None,
                 client: Optional[httpx.AsyncClient] = None):
        self.settings = settings or ClientSettings()
        self.state = EscalationState(debug_log_size=self.settings.debug_log_size)
        self.enforcement = EnforcementActions(self.state, page, self.settings)
        self.reporter = EscalationReporter(
            self.state,
            self.enforcement,
            client or EscalationReporter.build_client(self.settings, session_token),
            self.settings,
        )
        self.detector = SignalDetector(page, self.state, self.reporter.report, self.settings)

    async def start(self):
        self.detector.start()

    async def stop(self):
        await self.detector.stop()
        await self.detector.drain()
        await self.reporter.aclose()


__all__ = [
    "ClientSettings",
    "Decision",
    "EnforcementActions",
    "EscalationReporter",
    "EscalationState",
    "ExamProctor",
    "HeadlessControl",
    "HeadlessPage",
    "PageEvent",
    "ReportFailed",
    "SignalDetector",
    "SignalKind",
    "fallback_decision",
]
