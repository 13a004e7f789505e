import logging
from typing import Optional

from .config import ClientSettings
from .page import PageSurface
from .state import EscalationState

logger = logging.getLogger(__name__)

WARNING_BANNER_ID = "violationWarning"
DEFAULT_WARNING = "Warning: Continued violations will terminate the exam."

TERMINATED_TITLE = "Exam Terminated"
TERMINATED_BODY = (
    "Your exam session has been terminated due to repeated violations of the exam rules. "
    "Please contact the administrator for further details."
)


class EnforcementActions:
    """Visible consequences of a decision. Nothing here can be undone in the tab."""

    def __init__(self, state: EscalationState, surface: PageSurface, settings: Optional[ClientSettings] = None):
        self.state = state
        self.surface = surface
        self.settings = settings or ClientSettings()
        self._submitted = False

    def show_warning(self, message: Optional[str] = None):
        if self.state.warning_shown or self.state.terminated:
            return
        self.state.warning_shown = True
        self.surface.show_banner(WARNING_BANNER_ID, message or DEFAULT_WARNING)

    def terminate_exam(self):
        """Lock the page. Every step is best effort; a failing step never stops the rest."""
        if not self.state.mark_terminated():
            return

        try:
            self.surface.stop_timer()
        except Exception as e:
            logger.warning(f"Failed to stop exam timer: {e}")

        disabled = self._disable_controls()

        try:
            self.surface.replace_content(
                TERMINATED_TITLE,
                TERMINATED_BODY,
                f"{self.settings.results_url}?status=cheated"
            )
        except Exception as e:
            logger.warning(f"Failed to show termination message: {e}")

        self.state.log("terminated", "Exam terminated after repeated violations")
        logger.error(f"Exam terminated, {disabled} controls disabled")

    def _disable_controls(self) -> int:
        disabled = 0
        try:
            controls = list(self.surface.interactive_controls())
        except Exception as e:
            logger.warning(f"Failed to enumerate page controls: {e}")
            return disabled

        for control in controls:
            try:
                control.disable()
                disabled += 1
            except Exception as e:
                logger.debug(f"Failed to disable control {control!r}: {e}")
        return disabled

    def submit_as_cheated(self):
        """Force a zero-score submission with status ``cheated``."""
        if self._submitted:
            return
        self._submitted = True

        fields = {
            "submit_result": "1",
            "score": "0",
            "total_questions": str(self.surface.total_questions),
            "time_taken": str(int(self.surface.elapsed_seconds())),
            "status": "cheated",
        }
        self.surface.submit_form(self.settings.results_url, fields)
        logger.info("Exam submitted as cheated")
