import logging
import time
from typing import Dict, Optional

import httpx
from pydantic import ValidationError

from .config import ClientSettings
from .enforcement import DEFAULT_WARNING, EnforcementActions
from .state import Decision, EscalationState

logger = logging.getLogger(__name__)

FALLBACK_WARN_AT = 2
FALLBACK_END_AT = 3


class ReportFailed(Exception):
    """The ledger could not be reached or did not accept the report."""


def fallback_decision(violations: int) -> Decision:
    """Thresholds applied when the ledger is unreachable, on the incremented count."""
    if violations >= FALLBACK_END_AT:
        return Decision(violations=violations, action="end", message="Exam terminated due to multiple violations")
    if violations == FALLBACK_WARN_AT:
        return Decision(violations=violations, action="warn", message=DEFAULT_WARNING)
    return Decision(violations=violations, action="ok", message="Violation logged")


class EscalationReporter:
    """Sends each signal to the violation ledger and acts on the answer.

    The ledger's count always overwrites the local one. Only when a report
    fails does the tab count on its own, which can under-count but never
    un-terminates.
    """

    def __init__(self, state: EscalationState, enforcement: EnforcementActions,
                 client: httpx.AsyncClient, settings: Optional[ClientSettings] = None):
        self.state = state
        self.enforcement = enforcement
        self.client = client
        self.settings = settings or ClientSettings()
        self._last_kind: Optional[str] = None
        self._last_sent_at = 0.0

    @classmethod
    def build_client(cls, settings: ClientSettings, session_token: Optional[str] = None,
                     transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
        cookies: Dict[str, str] = {}
        if session_token:
            cookies[settings.session_cookie_name] = session_token
        return httpx.AsyncClient(
            base_url=settings.ledger_url,
            timeout=settings.request_timeout,
            cookies=cookies,
            transport=transport,
        )

    def _is_duplicate(self, kind: str) -> bool:
        window = self.settings.duplicate_window
        if window <= 0:
            return False
        now = time.monotonic()
        duplicate = kind == self._last_kind and now - self._last_sent_at < window
        if not duplicate:
            self._last_kind = kind
            self._last_sent_at = now
        return duplicate

    async def report(self, kind: str, description: str):
        if self.state.terminated:
            return

        if self._is_duplicate(kind):
            self.state.log(kind, f"{description} (suppressed duplicate)")
            return

        self.state.log(kind, description)

        try:
            decision = await self._send(kind, description)
        except ReportFailed as e:
            logger.warning(f"Failed to report violation {kind}: {e}")
            # the flag may have flipped while this report was in flight
            if self.state.terminated:
                return
            self.state.violation_count += 1
            decision = fallback_decision(self.state.violation_count)
            self._dispatch(decision, fallback=True)
            return

        if self.state.terminated:
            return
        self.state.violation_count = decision.violations
        self._dispatch(decision)

    async def _send(self, kind: str, description: str) -> Decision:
        try:
            response = await self.client.post(
                self.settings.ledger_path,
                json={"event_type": kind, "details": description},
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ReportFailed(str(e) or e.__class__.__name__) from e

        if not isinstance(payload, dict):
            raise ReportFailed("Malformed ledger response")
        if not payload.get("success"):
            raise ReportFailed(payload.get("error") or "Unknown error occurred")

        try:
            return Decision.model_validate(payload.get("data"))
        except ValidationError as e:
            raise ReportFailed("Malformed ledger response") from e

    def _dispatch(self, decision: Decision, fallback: bool = False):
        suffix = " (fallback)" if fallback else ""

        if decision.action == "end":
            logger.error(f"Violation {decision.violations} - terminating exam{suffix}: {decision.message}")
            self.enforcement.terminate_exam()
            if self.settings.submit_on_terminate:
                self.enforcement.submit_as_cheated()
        elif decision.action == "warn":
            if not self.state.warning_shown:
                logger.warning(f"Violation {decision.violations} - warning shown{suffix}: {decision.message}")
                self.enforcement.show_warning(decision.message or DEFAULT_WARNING)
        else:
            logger.info(f"Violation {decision.violations} detected{suffix}: {decision.message}")

    async def aclose(self):
        await self.client.aclose()
