import pytest

from scn_controller.job_state import JobState, JobStateMachine


pytestmark = pytest.mark.unit_controller


def test_valid_lifecycle():
    sm = JobStateMachine()
    assert sm.state == JobState.IDLE

    sm.transition(JobState.RUNNING)
    assert sm.is_running()
    sm.transition(JobState.COMPLETED)
    assert sm.is_terminal()
    sm.reset()
    assert sm.state == JobState.IDLE


@pytest.mark.parametrize("terminal", [JobState.COMPLETED, JobState.CANCELLED, JobState.FAILED])
def test_every_terminal_state_returns_to_idle(terminal):
    sm = JobStateMachine()
    sm.transition(JobState.RUNNING)
    sm.transition(terminal)
    sm.transition(JobState.IDLE)
    assert sm.state == JobState.IDLE


@pytest.mark.parametrize(
    "path",
    [
        [JobState.COMPLETED],
        [JobState.RUNNING, JobState.RUNNING],
        [JobState.RUNNING, JobState.IDLE],
        [JobState.RUNNING, JobState.FAILED, JobState.CANCELLED],
    ],
)
def test_invalid_transition_raises(path):
    sm = JobStateMachine()
    with pytest.raises(ValueError):
        for state in path:
            sm.transition(state)


def test_reason_and_callbacks():
    sm = JobStateMachine()
    seen = []
    sm.register_callback(lambda state, reason: seen.append((state, reason)))

    def _broken(state, reason):
        raise RuntimeError("callback bug")

    sm.register_callback(_broken)
    sm.transition(JobState.RUNNING, reason="job 1")
    sm.transition(JobState.FAILED, reason="boom")

    assert sm.snapshot() == (JobState.FAILED, "boom")
    assert seen == [(JobState.RUNNING, "job 1"), (JobState.FAILED, "boom")]


def test_reset_when_idle_is_a_noop():
    sm = JobStateMachine()
    seen = []
    sm.register_callback(lambda state, reason: seen.append(state))
    sm.reset()
    assert seen == []
