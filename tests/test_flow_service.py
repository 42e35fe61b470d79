"""Tests for FlowService argv construction and result shaping."""

import asyncio
import gc

import pytest

from flowrunner.config import Settings
from flowrunner.models import FailureKind, InvocationFailure, InvocationSuccess
from flowrunner.service import FlowService


class FakeRunner:
    def __init__(self, *results):
        self.results = list(results)
        self.calls = []

    async def run(self, argv, *, cwd=None, timeout=None, extra_env=None):
        self.calls.append({"argv": list(argv), "timeout": timeout})
        return self.results.pop(0)


def _service(*results, **settings_kwargs):
    runner = FakeRunner(*results)
    return FlowService(Settings(**settings_kwargs), runner=runner), runner


@pytest.mark.asyncio
async def test_list_flows_parses_output():
    service, runner = _service(InvocationSuccess(stdout="  Prod\n    g1  Demo\n", stderr=""))

    response = await service.list_flows()

    assert runner.calls == [{"argv": ["list"], "timeout": None}]
    assert response.success is True
    assert [(flow.id, flow.name, flow.group) for flow in response.data] == [("g1", "Demo", "Prod")]


@pytest.mark.asyncio
async def test_list_flows_reports_failure():
    failure = InvocationFailure(message="cannot read data dir", kind=FailureKind.NON_ZERO_EXIT, exit_code=1)
    service, _ = _service(failure)

    response = await service.list_flows()

    assert response.success is False
    assert response.error == "cannot read data dir"
    assert response.data is None


@pytest.mark.asyncio
async def test_show_flow_builds_expanded_args():
    stdout = "ID: g1\n名称: Demo\n节点数: 1\n边数: 0\n节点列表:\n- n1 (start): Begin\n"
    service, runner = _service(InvocationSuccess(stdout=stdout, stderr=""))

    response = await service.show_flow("g1")

    assert runner.calls[0]["argv"] == ["show", "g1", "-e"]
    assert response.data.id == "g1"
    assert response.data.nodes[0].label == "Begin"


@pytest.mark.asyncio
async def test_show_flow_with_unrecognized_output_is_still_success():
    service, _ = _service(InvocationSuccess(stdout="something else entirely", stderr=""))

    response = await service.show_flow("g1")

    assert response.success is True
    assert response.data.complete is False
    assert response.data.nodes == []


@pytest.mark.asyncio
async def test_run_flow_passes_options_and_run_timeout():
    service, runner = _service(InvocationSuccess(stdout="step 1\nstep 2\n", stderr=""), run_timeout_seconds=90)

    response = await service.run_flow("g1", input="hello world", max_iterations=5)

    assert runner.calls == [{"argv": ["run", "g1", "-i", "hello world", "-m", "5"], "timeout": 90}]
    assert response.success is True
    assert response.output == "step 1\nstep 2\n"


@pytest.mark.asyncio
async def test_run_flow_omits_empty_options():
    service, runner = _service(InvocationSuccess(stdout="", stderr=""))

    await service.run_flow("g1", input="", max_iterations=0)

    assert runner.calls[0]["argv"] == ["run", "g1"]
    assert runner.calls[0]["timeout"] == 120


@pytest.mark.asyncio
async def test_run_flow_timeout_becomes_error():
    failure = InvocationFailure(message="CLI command timed out after 120 seconds", kind=FailureKind.TIMEOUT)
    service, _ = _service(failure)

    response = await service.run_flow("g1")

    assert response.success is False
    assert "timed out" in response.error
    assert response.output is None


@pytest.mark.asyncio
async def test_empty_failure_message_gets_exit_code_text():
    service, _ = _service(InvocationFailure(message="", kind=FailureKind.NON_ZERO_EXIT, exit_code=7))

    response = await service.run_flow("g1")

    assert response.error == "CLI exited with status 7"


@pytest.mark.parametrize("flow_id", ["", "   "])
def test_blank_flow_id_is_rejected(flow_id):
    with pytest.raises(ValueError):
        FlowService.show_args(flow_id)
    with pytest.raises(ValueError):
        FlowService.run_args(flow_id)


class SlowRunner:
    def __init__(self):
        self.active = 0
        self.max_active = 0

    async def run(self, argv, *, cwd=None, timeout=None, extra_env=None):
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        await asyncio.sleep(0.01)
        self.active -= 1
        return InvocationSuccess(stdout="done", stderr="")


@pytest.mark.asyncio
@pytest.mark.parametrize("serialize, expected", [(True, 1), (False, 3)])
async def test_run_serialization_per_flow(serialize, expected):
    runner = SlowRunner()
    service = FlowService(Settings(serialize_runs=serialize), runner=runner)

    await asyncio.gather(*(service.run_flow("g1") for _ in range(3)))

    assert runner.max_active == expected


@pytest.mark.asyncio
async def test_run_locks_are_released_after_runs():
    runner = SlowRunner()
    service = FlowService(Settings(serialize_runs=True), runner=runner)

    await asyncio.gather(*(service.run_flow(f"g{index}") for index in range(5)), service.run_flow("g0"))
    gc.collect()

    assert runner.max_active == 5
    assert len(service._run_locks) == 0
