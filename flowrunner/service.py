"""Translate flow operations into CLI invocations and shape their results."""

from __future__ import annotations

import asyncio
import logging
import weakref

from flowrunner.config import Settings
from flowrunner.models import (
    FlowDetailResponse,
    FlowListResponse,
    FlowRunResponse,
    InvocationFailure,
    InvocationResult,
)
from flowrunner.parsers import BaseParser, get_parser
from flowrunner.runner import ProcessRunner

logger = logging.getLogger("flowrunner.service")


class FlowService:
    """List, show and run flows through the external CLI.

    ``list`` and ``show`` output is parsed into structured records; ``run``
    output is passed through untouched so the UI can render it as a log.
    """

    def __init__(self, settings: Settings, runner: ProcessRunner | None = None):
        self.settings = settings
        self.runner = runner or ProcessRunner(settings)
        self._list_parser: BaseParser = get_parser("flow_list")
        self._show_parser: BaseParser = get_parser("flow_show")
        # Entries vanish once no run holds or waits on the lock.
        self._run_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    async def list_flows(self) -> FlowListResponse:
        result = await self.runner.run(self.list_args())
        if isinstance(result, InvocationFailure):
            return FlowListResponse(success=False, error=self._error_message(result))

        flows = self._list_parser.parse(result.stdout, result.stderr)
        logger.debug("Parsed %d flow(s) from list output", len(flows))
        return FlowListResponse(success=True, data=flows)

    async def show_flow(self, flow_id: str) -> FlowDetailResponse:
        result = await self.runner.run(self.show_args(flow_id))
        if isinstance(result, InvocationFailure):
            return FlowDetailResponse(success=False, error=self._error_message(result))

        detail = self._show_parser.parse(result.stdout, result.stderr)
        if not detail.complete:
            logger.info("Flow '%s' detail is missing fields: %s", flow_id, ", ".join(detail.missing_fields))
        return FlowDetailResponse(success=True, data=detail)

    async def run_flow(
        self,
        flow_id: str,
        input: str | None = None,
        max_iterations: int | None = None,
    ) -> FlowRunResponse:
        args = self.run_args(flow_id, input=input, max_iterations=max_iterations)
        if self.settings.serialize_runs:
            async with self._run_lock(flow_id):
                result = await self._invoke_run(args)
        else:
            result = await self._invoke_run(args)

        if isinstance(result, InvocationFailure):
            return FlowRunResponse(success=False, error=self._error_message(result))
        return FlowRunResponse(success=True, output=result.stdout)

    # ------------------------------------------------------------------
    # Argument vectors
    # ------------------------------------------------------------------

    @staticmethod
    def list_args() -> list[str]:
        return ["list"]

    @staticmethod
    def show_args(flow_id: str) -> list[str]:
        return ["show", _require_id(flow_id), "-e"]

    @staticmethod
    def run_args(flow_id: str, *, input: str | None = None, max_iterations: int | None = None) -> list[str]:
        args = ["run", _require_id(flow_id)]
        if input:
            args.extend(["-i", input])
        if max_iterations:
            args.extend(["-m", str(int(max_iterations))])
        return args

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _run_lock(self, flow_id: str) -> asyncio.Lock:
        lock = self._run_locks.get(flow_id)
        if lock is None:
            lock = asyncio.Lock()
            self._run_locks[flow_id] = lock
        return lock

    async def _invoke_run(self, args: list[str]) -> InvocationResult:
        return await self.runner.run(args, timeout=self.settings.run_timeout_seconds)

    @staticmethod
    def _error_message(result: InvocationFailure) -> str:
        if result.message:
            return result.message
        if result.exit_code is not None:
            return f"CLI exited with status {result.exit_code}"
        return "CLI invocation failed"


def _require_id(flow_id: str) -> str:
    if not flow_id or not flow_id.strip():
        raise ValueError("flow_id must be a non-empty string")
    return flow_id.strip()
