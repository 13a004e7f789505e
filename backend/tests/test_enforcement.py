"""
Tests for enforcement actions on the page surface
"""
import pytest

from examguard.client import ClientSettings, EnforcementActions, EscalationState, HeadlessControl, HeadlessPage
from examguard.client.enforcement import TERMINATED_TITLE, WARNING_BANNER_ID


class BrokenControl:
    """A control that has been detached from the page"""

    def disable(self):
        raise RuntimeError("node is detached")


class FrozenTimerPage(HeadlessPage):
    def stop_timer(self):
        raise RuntimeError("timer already cleared")


@pytest.fixture
def state():
    return EscalationState()


class TestShowWarning:

    def test_shows_banner_once(self, state):
        page = HeadlessPage()
        actions = EnforcementActions(state, page)

        actions.show_warning("Next violation will terminate the exam")
        actions.show_warning("something else")

        assert page.banners == {WARNING_BANNER_ID: "Next violation will terminate the exam"}
        assert state.warning_shown

    def test_no_warning_after_termination(self, state):
        page = HeadlessPage()
        actions = EnforcementActions(state, page)
        actions.terminate_exam()

        actions.show_warning("late warning")

        assert page.banners == {}


class TestTerminateExam:

    def test_locks_page(self, state):
        controls = [HeadlessControl("answer-1"), HeadlessControl("answer-2"), HeadlessControl("submit")]
        page = HeadlessPage(controls=controls)
        actions = EnforcementActions(state, page, ClientSettings(results_url="/exam/result"))

        actions.terminate_exam()

        assert state.terminated
        assert not page.timer_running
        assert all(c.disabled for c in controls)
        assert page.content["title"] == TERMINATED_TITLE
        assert page.content["link"] == "/exam/result?status=cheated"
        assert state.entries()[-1].event == "terminated"

    def test_control_failures_do_not_stop_the_rest(self, state):
        last = HeadlessControl("submit")
        page = FrozenTimerPage(controls=[HeadlessControl("answer-1"), BrokenControl(), last])
        actions = EnforcementActions(state, page)

        actions.terminate_exam()

        assert last.disabled
        assert page.content["title"] == TERMINATED_TITLE
        assert state.terminated

    def test_idempotent(self, state):
        page = HeadlessPage()
        actions = EnforcementActions(state, page)

        actions.terminate_exam()
        page.content = None
        actions.terminate_exam()

        assert page.content is None
        assert [e.event for e in state.entries()].count("terminated") == 1


class TestSubmitAsCheated:

    def test_forced_submission_fields(self, state):
        page = HeadlessPage(total_questions=25)
        actions = EnforcementActions(state, page, ClientSettings(results_url="/result"))

        actions.submit_as_cheated()

        form = page.submitted_forms[0]
        assert form.action == "/result"
        assert form.fields["submit_result"] == "1"
        assert form.fields["score"] == "0"
        assert form.fields["total_questions"] == "25"
        assert form.fields["status"] == "cheated"
        assert int(form.fields["time_taken"]) >= 0

    def test_submits_once(self, state):
        page = HeadlessPage()
        actions = EnforcementActions(state, page)

        actions.submit_as_cheated()
        actions.submit_as_cheated()

        assert len(page.submitted_forms) == 1


class TestEscalationState:

    def test_terminated_never_regresses(self, state):
        assert state.mark_terminated() is True
        assert state.mark_terminated() is False
        assert state.terminated is True

    def test_debug_log_is_bounded(self):
        state = EscalationState(debug_log_size=3)
        for i in range(5):
            state.log("blur", f"entry {i}")

        assert [e.description for e in state.entries()] == ["entry 2", "entry 3", "entry 4"]
