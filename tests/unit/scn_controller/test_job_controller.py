import asyncio
import time

import pytest

from scn_common.config.settings import WorkbenchSettings
from scn_common.errors import (
    AnalysisCancelled,
    AnalyzerError,
    BusyError,
    InitializationError,
    InvalidInputError,
    NotReadyError,
)
from scn_common.log_schema import LogEvent, LogLevel, ProgressEvent
from scn_controller.controller import JobController
from scn_controller.job_state import JobState
from scn_controller.messages import (
    Ack,
    AnalyzeRequest,
    CancelRequest,
    ContextExited,
    CostImpactRequest,
    CostTableMessage,
    ErrorMessage,
    InitializeRequest,
    LogMessage,
    ProgressMessage,
    ResultMessage,
)
from scn_options.presets import get_preset
from scn_options.state import set_one
from tests.helpers.fake_channel import FakeChannel


pytestmark = pytest.mark.unit_controller

SETTINGS = WorkbenchSettings(init_timeout_seconds=1.0, log_level=LogLevel.INFO)


def replying(channel, message):
    if isinstance(message, AnalyzeRequest):
        job_id = message.job_id
        channel.emit(ProgressMessage(job_id=job_id, event=ProgressEvent(percentage=50, message="half")))
        channel.emit(LogMessage(job_id=job_id, event=LogEvent(level=LogLevel.INFO, message="parsed")))
        channel.emit(ProgressMessage(job_id=job_id, event=ProgressEvent(percentage=100, message="done")))
        channel.emit(ResultMessage(job_id=job_id, source_files=[], elapsed_time_ms=12.5))
    elif isinstance(message, CostImpactRequest):
        channel.emit(CostTableMessage(job_id=message.job_id, cost_table={"showIcons": 3}))


def silent(channel, message):
    return None


def make_controller(channel, settings=SETTINGS, **kwargs):
    factory_calls = []

    def factory():
        factory_calls.append(1)
        return channel

    controller = JobController(settings, channel_factory=factory, **kwargs)
    return controller, factory_calls


async def wait_for_sent(channel, kind):
    for _ in range(200):
        if channel.sent_of(kind):
            return channel.sent_of(kind)
        await asyncio.sleep(0.005)
    raise AssertionError(f"{kind.__name__} was never sent")


def test_run_before_initialize_raises_not_ready():
    controller, _ = make_controller(FakeChannel(replying))

    async def scenario():
        await controller.run("[]")

    with pytest.raises(NotReadyError):
        asyncio.run(scenario())


def test_initialize_is_idempotent_and_shared():
    channel = FakeChannel(replying)
    controller, factory_calls = make_controller(channel)

    async def scenario():
        await asyncio.gather(controller.initialize(), controller.initialize())
        await controller.initialize()
        await controller.teardown()

    asyncio.run(scenario())
    assert len(factory_calls) == 1
    assert len(channel.sent_of(InitializeRequest)) == 1
    assert channel.closed


def test_initialize_forwards_asset_location():
    channel = FakeChannel(replying)
    settings = WorkbenchSettings(asset_base_location="/opt/assets", init_timeout_seconds=1.0)
    controller, _ = make_controller(channel, settings)

    async def scenario():
        async with controller:
            assert controller.is_initialized

    asyncio.run(scenario())
    assert channel.sent_of(InitializeRequest)[0].asset_base_location == "/opt/assets"
    assert channel.closed
    assert not controller.is_initialized


def test_initialize_error_from_context_is_reported():
    channel = FakeChannel(auto_ack=False)
    controller, _ = make_controller(channel)

    async def scenario():
        task = asyncio.ensure_future(controller.initialize())
        await wait_for_sent(channel, InitializeRequest)
        channel.emit(
            ErrorMessage(job_id=None, error_type="InitializationError", message="assets missing")
        )
        await task

    with pytest.raises(InitializationError, match="assets missing"):
        asyncio.run(scenario())
    assert channel.closed
    assert not controller.is_initialized


def test_initialize_timeout_closes_the_channel():
    channel = FakeChannel(auto_ack=False)
    settings = WorkbenchSettings(init_timeout_seconds=0.05)
    controller, _ = make_controller(channel, settings)

    with pytest.raises(InitializationError, match="did not initialize within"):
        asyncio.run(controller.initialize())
    assert channel.closed


def test_channel_start_failure_is_an_initialization_error():
    channel = FakeChannel()
    channel.start_error = OSError("cannot spawn")
    controller, _ = make_controller(channel)

    with pytest.raises(InitializationError, match="cannot spawn") as excinfo:
        asyncio.run(controller.initialize())
    assert isinstance(excinfo.value.__cause__, OSError)


def test_successful_run_relays_events_in_order():
    channel = FakeChannel(replying)
    states = []
    controller, _ = make_controller(channel, on_state_change=lambda s, r: states.append(s))
    events = []

    async def scenario():
        await controller.initialize()
        outcome = await controller.run(
            "[]",
            include="src/**\n\n",
            exclude=["**/*.test.ts", " "],
            on_progress=lambda e: events.append(("progress", e.percentage)),
            on_log=lambda e: events.append(("log", e.message)),
        )
        await controller.teardown()
        return outcome

    outcome = asyncio.run(scenario())
    assert events == [("progress", 50), ("log", "parsed"), ("progress", 100)]
    assert outcome.result == []
    assert outcome.elapsed_time == 12.5
    assert outcome.cost_table == {"showIcons": 3}
    assert states == [JobState.RUNNING, JobState.COMPLETED, JobState.IDLE]
    assert controller.state == JobState.IDLE
    assert not controller.is_running

    request = channel.sent_of(AnalyzeRequest)[0]
    assert request.job_id == 1
    assert request.include == ["src/**"]
    assert request.exclude == ["**/*.test.ts"]
    assert request.log_level == LogLevel.INFO


def test_cost_options_default_to_the_default_preset():
    channel = FakeChannel(replying)
    controller, _ = make_controller(channel)

    async def scenario():
        await controller.initialize()
        await controller.run("[]")

    asyncio.run(scenario())
    assert channel.sent_of(CostImpactRequest)[0].options == get_preset("default")


def test_options_are_read_when_the_result_arrives():
    current = {"state": get_preset("default")}
    edited = set_one(get_preset("default"), "showIcons", False)

    def edit_then_reply(channel, message):
        if isinstance(message, AnalyzeRequest):
            current["state"] = edited
        replying(channel, message)

    channel = FakeChannel(edit_then_reply)
    controller, _ = make_controller(channel)

    async def scenario():
        await controller.initialize()
        await controller.run("[]", options=lambda: current["state"])

    asyncio.run(scenario())
    assert channel.sent_of(CostImpactRequest)[0].options == edited


def test_second_run_while_busy_is_rejected():
    channel = FakeChannel(replying)
    controller, _ = make_controller(channel)

    async def scenario():
        await controller.initialize()
        return await asyncio.gather(
            controller.run("[]"), controller.run("[]"), return_exceptions=True
        )

    first, second = asyncio.run(scenario())
    assert first.cost_table == {"showIcons": 3}
    assert isinstance(second, BusyError)
    assert len(channel.sent_of(AnalyzeRequest)) == 1


def test_cancel_settles_run_and_drops_late_messages():
    channel = FakeChannel(silent)
    states = []
    controller, _ = make_controller(channel, on_state_change=lambda s, r: states.append(s))
    late_progress = []

    async def scenario():
        await controller.initialize()
        task = asyncio.ensure_future(
            controller.run("[]", on_progress=lambda e: late_progress.append(e))
        )
        await wait_for_sent(channel, AnalyzeRequest)
        controller.cancel()
        controller.cancel()
        with pytest.raises(AnalysisCancelled):
            await task

        channel.emit(ProgressMessage(job_id=1, event=ProgressEvent(percentage=90)))
        channel.emit(ResultMessage(job_id=1, source_files=[], elapsed_time_ms=1.0))
        await asyncio.sleep(0.01)

        channel.responder = replying
        return await controller.run("[]")

    outcome = asyncio.run(scenario())
    assert late_progress == []
    assert [m.job_id for m in channel.sent_of(CancelRequest)] == [1]
    assert [m.job_id for m in channel.sent_of(AnalyzeRequest)] == [1, 2]
    assert outcome.cost_table == {"showIcons": 3}
    assert states[:3] == [JobState.RUNNING, JobState.CANCELLED, JobState.IDLE]


def test_cancel_without_a_running_job_is_a_no_op():
    channel = FakeChannel(replying)
    controller, _ = make_controller(channel)
    controller.cancel()
    assert channel.sent == []


def test_messages_for_other_jobs_are_ignored():
    seen = []

    def stray_then_reply(channel, message):
        if isinstance(message, AnalyzeRequest):
            channel.emit(ProgressMessage(job_id=99, event=ProgressEvent(percentage=10)))
            channel.emit(ResultMessage(job_id=99, source_files=[], elapsed_time_ms=99.0))
        replying(channel, message)

    channel = FakeChannel(stray_then_reply)
    controller, _ = make_controller(channel)

    async def scenario():
        await controller.initialize()
        return await controller.run("[]", on_progress=lambda e: seen.append(e.percentage))

    outcome = asyncio.run(scenario())
    assert outcome.elapsed_time == 12.5
    assert seen == [50, 100]


def test_context_error_is_raised_with_its_type():
    def failing(channel, message):
        if isinstance(message, AnalyzeRequest):
            channel.emit(
                ErrorMessage(
                    job_id=message.job_id,
                    error_type="InvalidInputError",
                    message="Invalid JSON input: Input is not an array.",
                )
            )

    channel = FakeChannel(failing)
    states = []
    controller, _ = make_controller(channel, on_state_change=lambda s, r: states.append((s, r)))

    async def scenario():
        await controller.initialize()
        await controller.run("{}")

    with pytest.raises(InvalidInputError, match="not an array"):
        asyncio.run(scenario())
    assert (JobState.FAILED, "Invalid JSON input: Input is not an array.") in states
    assert controller.state == JobState.IDLE
    assert not channel.sent_of(CostImpactRequest)


def test_unknown_error_types_surface_as_analyzer_error():
    def failing(channel, message):
        if isinstance(message, AnalyzeRequest):
            channel.emit(
                ErrorMessage(job_id=message.job_id, error_type="KeyError", message="KeyError: 'x'")
            )

    controller, _ = make_controller(FakeChannel(failing))

    async def scenario():
        await controller.initialize()
        await controller.run("[]")

    with pytest.raises(AnalyzerError) as excinfo:
        asyncio.run(scenario())
    assert excinfo.value.context["original_type"] == "KeyError"


def test_context_exit_fails_the_job_and_requires_reinitialization():
    def crash(channel, message):
        if isinstance(message, AnalyzeRequest):
            channel.emit(ContextExited(exitcode=3))

    channel = FakeChannel(crash)
    controller, _ = make_controller(channel)

    async def scenario():
        await controller.initialize()
        with pytest.raises(AnalyzerError, match="exited unexpectedly"):
            await controller.run("[]")
        assert not controller.is_initialized
        with pytest.raises(NotReadyError):
            await controller.run("[]")

    asyncio.run(scenario())


def test_teardown_cancels_running_job_and_closes_channel():
    channel = FakeChannel(silent)
    controller, _ = make_controller(channel)

    async def scenario():
        await controller.initialize()
        task = asyncio.ensure_future(controller.run("[]"))
        await wait_for_sent(channel, AnalyzeRequest)
        await controller.teardown()
        with pytest.raises(AnalysisCancelled):
            await task

    asyncio.run(scenario())
    assert channel.closed
    assert [m.job_id for m in channel.sent_of(CancelRequest)] == [1]
    assert not controller.is_initialized


class SlowStartChannel(FakeChannel):
    """Start blocks like a process spawn; close records whether start had finished."""

    def __init__(self, responder=None):
        super().__init__(responder)
        self.started = False
        self.closed_before_started = False

    def start(self, on_message):
        time.sleep(0.3)
        super().start(on_message)
        self.started = True

    def close(self, timeout=2.0):
        if not self.started:
            self.closed_before_started = True
        super().close(timeout)


def test_teardown_during_initialize_closes_the_started_context():
    channel = SlowStartChannel(replying)
    controller, _ = make_controller(channel)

    async def scenario():
        init = asyncio.ensure_future(controller.initialize())
        await asyncio.sleep(0.05)
        await controller.teardown()
        with pytest.raises(asyncio.CancelledError):
            await init

    asyncio.run(scenario())
    assert channel.started
    assert channel.closed
    assert not channel.closed_before_started
    assert not controller.is_initialized


def test_run_after_teardown_needs_a_new_initialize():
    channels = []

    def factory():
        channels.append(FakeChannel(replying))
        return channels[-1]

    controller = JobController(SETTINGS, channel_factory=factory)

    async def scenario():
        await controller.initialize()
        await controller.teardown()
        with pytest.raises(NotReadyError):
            await controller.run("[]")
        await controller.initialize()
        outcome = await controller.run("[]")
        await controller.teardown()
        return outcome

    outcome = asyncio.run(scenario())
    assert outcome.cost_table == {"showIcons": 3}
    assert len(channels) == 2
    assert all(channel.closed for channel in channels)
    assert channels[0].sent_of(AnalyzeRequest) == []
    assert len(channels[1].sent_of(AnalyzeRequest)) == 1


def test_run_while_initializing_raises_not_ready():
    channel = FakeChannel(replying, auto_ack=False)
    controller, _ = make_controller(channel)

    async def scenario():
        init = asyncio.ensure_future(controller.initialize())
        await wait_for_sent(channel, InitializeRequest)
        with pytest.raises(NotReadyError):
            await controller.run("[]")
        channel.emit(Ack(request="initialize"))
        await init
        return await controller.run("[]")

    outcome = asyncio.run(scenario())
    assert outcome.cost_table == {"showIcons": 3}
    assert len(channel.sent_of(AnalyzeRequest)) == 1


def test_caller_timeout_cancels_the_job():
    channel = FakeChannel(silent)
    controller, _ = make_controller(channel)

    async def scenario():
        await controller.initialize()
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(controller.run("[]"), 0.05)
        assert not controller.is_running
        assert controller.state == JobState.IDLE

    asyncio.run(scenario())
    assert [m.job_id for m in channel.sent_of(CancelRequest)] == [1]


def test_failing_event_callback_does_not_break_the_job():
    channel = FakeChannel(replying)
    controller, _ = make_controller(channel)

    def explode(_event):
        raise RuntimeError("callback bug")

    async def scenario():
        await controller.initialize()
        return await controller.run("[]", on_progress=explode, on_log=explode)

    outcome = asyncio.run(scenario())
    assert outcome.cost_table == {"showIcons": 3}
