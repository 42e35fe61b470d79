"""Execute the flow CLI as a child process with a bounded lifetime."""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
import shutil
import signal
import time
from collections.abc import Mapping, Sequence

from flowrunner.config import Settings
from flowrunner.constants import (
    CHILD_ENV_DEFAULTS,
    DATA_DIR_ENV_VAR,
    DATA_DIR_FLAG,
    READ_CHUNK_SIZE,
    REAP_GRACE_SECONDS,
    SCRIPT_SUFFIX,
    TRUNCATION_MARKER,
)
from flowrunner.models import (
    FailureKind,
    InvocationFailure,
    InvocationRequest,
    InvocationResult,
    InvocationSuccess,
)

logger = logging.getLogger("flowrunner.runner")

# The child leads its own session so a timeout can take down anything it spawned.
_KILL_PROCESS_GROUP = hasattr(os, "killpg")


class ProcessRunner:
    """Spawn the configured CLI once per call and normalize the outcome.

    Process-level problems (missing executable, non-zero exit, timeout) are
    returned as :class:`InvocationFailure`; nothing is shared between calls.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    async def run(
        self,
        argv: Sequence[str],
        *,
        cwd: str | None = None,
        timeout: float | None = None,
        extra_env: Mapping[str, str] | None = None,
    ) -> InvocationResult:
        request = InvocationRequest(argv=tuple(argv), cwd=cwd, extra_env=extra_env or {}, timeout=timeout)
        return await self.execute(request)

    async def execute(self, request: InvocationRequest) -> InvocationResult:
        command = self.build_command(request.argv)
        env = self.build_environment(request.extra_env)
        cwd = request.cwd or str(self.settings.working_dir)
        timeout = request.timeout or self.settings.default_timeout_seconds

        logger.info("Executing CLI command: %s", shlex.join(command))
        logger.debug("Working directory: %s (timeout %ss)", cwd, timeout)
        start_time = time.monotonic()

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
                env=env,
                start_new_session=_KILL_PROCESS_GROUP,
            )
        except OSError as exc:
            logger.warning("Failed to start CLI '%s': %s", command[0], exc)
            return InvocationFailure(
                message=f"Failed to start '{command[0]}': {exc}",
                kind=FailureKind.SPAWN_FAILURE,
            )

        collect = asyncio.gather(
            self._read_stream(process.stdout),
            self._read_stream(process.stderr),
            process.wait(),
        )
        try:
            stdout_text, stderr_text, return_code = await asyncio.wait_for(collect, timeout=timeout)
        except asyncio.TimeoutError:
            await self._terminate(process)
            duration = time.monotonic() - start_time
            logger.warning("CLI command timed out after %ss: %s", timeout, shlex.join(command))
            return InvocationFailure(
                message=f"CLI command timed out after {timeout:g} seconds",
                kind=FailureKind.TIMEOUT,
                duration_seconds=duration,
            )
        except asyncio.CancelledError:
            await self._terminate(process)
            raise

        duration = time.monotonic() - start_time
        logger.debug("CLI exited with status %s in %.2fs", return_code, duration)

        if return_code == 0:
            return InvocationSuccess(stdout=stdout_text, stderr=stderr_text, duration_seconds=duration)

        return InvocationFailure(
            message=stderr_text or stdout_text,
            kind=FailureKind.NON_ZERO_EXIT,
            exit_code=return_code,
            duration_seconds=duration,
        )

    def resolve_executable(self) -> list[str]:
        """Return the command prefix used to launch the CLI.

        Script distributions (``*.js``) are launched through the node interpreter.
        """

        cli_path = self.settings.cli_path
        resolved = shutil.which(cli_path) or cli_path
        if resolved.lower().endswith(SCRIPT_SUFFIX):
            interpreter = shutil.which(self.settings.node_binary) or self.settings.node_binary
            return [interpreter, resolved]
        return [resolved]

    def build_command(self, argv: Sequence[str]) -> list[str]:
        command = self.resolve_executable()
        command.extend(argv)
        if self.settings.data_dir:
            command.extend([DATA_DIR_FLAG, self.settings.data_dir])
        return command

    def build_environment(self, extra_env: Mapping[str, str] | None = None) -> dict[str, str]:
        env = os.environ.copy()
        env.update(CHILD_ENV_DEFAULTS)
        if extra_env:
            env.update(extra_env)
        if self.settings.data_dir:
            env[DATA_DIR_ENV_VAR] = self.settings.data_dir
        return env

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _read_stream(self, stream: asyncio.StreamReader | None) -> str:
        if stream is None:
            return ""

        limit = self.settings.max_output_bytes
        chunks: list[bytes] = []
        received = 0
        truncated = False

        while True:
            chunk = await stream.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            if limit:
                remaining = limit - received
                if remaining <= 0:
                    truncated = True
                    continue
                if len(chunk) > remaining:
                    chunk = chunk[:remaining]
                    truncated = True
            chunks.append(chunk)
            received += len(chunk)

        text = b"".join(chunks).decode("utf-8", errors="replace")
        if truncated:
            text += TRUNCATION_MARKER
        return text

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        self._kill(process)
        try:
            await asyncio.wait_for(process.wait(), timeout=REAP_GRACE_SECONDS)
        except asyncio.TimeoutError:
            logger.warning("CLI process %s not reaped within %ss after kill", process.pid, REAP_GRACE_SECONDS)

    def _kill(self, process: asyncio.subprocess.Process) -> None:
        try:
            if _KILL_PROCESS_GROUP and process.pid:
                # The direct child may already be gone while its descendants hold the pipes.
                os.killpg(process.pid, signal.SIGKILL)
            elif process.returncode is None:
                process.kill()
        except (ProcessLookupError, PermissionError):
            pass
