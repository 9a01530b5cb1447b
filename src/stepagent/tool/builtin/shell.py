"""Shell tool — run a command as a one-shot subprocess."""

from __future__ import annotations

import asyncio
import os
import signal
from typing import ClassVar

from pydantic import BaseModel, Field

from stepagent.tool.base import BaseTool, ToolError, ToolOk, ToolResult
from stepagent.tool.truncation import strip_ansi


class RunCommandParams(BaseModel):
    command: str = Field(description="The shell command to execute.")


class RunCommandTool(BaseTool[RunCommandParams]):
    """Execute a shell command and return its output.

    Each call spawns a fresh shell in its own process group so a hung
    command can be killed as a whole when the timeout fires.
    """

    name: ClassVar[str] = "run_command"
    description: ClassVar[str] = (
        "Takes a command as input to execute on the system and returns its output."
    )
    param_model: ClassVar[type[BaseModel]] = RunCommandParams
    scalar_param: ClassVar[str | None] = "command"

    def __init__(self, cwd: str | None = None, command_timeout: float = 60.0) -> None:
        self._cwd = cwd or os.getcwd()
        self._command_timeout = command_timeout

    async def execute(self, params: RunCommandParams) -> ToolResult:
        brief = params.command[:50]
        try:
            process = await asyncio.create_subprocess_shell(
                params.command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self._cwd,
                preexec_fn=os.setpgrp,  # New process group
                env={**os.environ, "TERM": "dumb"},
            )
        except OSError as e:
            return ToolError(output=f"Failed to execute command: {e}", brief=brief)

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self._command_timeout
            )
        except asyncio.TimeoutError:
            _kill_group(process)
            await process.wait()
            return ToolError(
                output=f"Command timed out after {self._command_timeout}s: {params.command}",
                brief=f"Timeout: {brief}",
            )
        except asyncio.CancelledError:
            _kill_group(process)
            raise

        out = strip_ansi(stdout.decode("utf-8", errors="replace")) if stdout else ""
        err = strip_ansi(stderr.decode("utf-8", errors="replace")) if stderr else ""

        if process.returncode:
            return ToolError(
                output=err or f"Command exited with status {process.returncode}",
                brief=f"exit={process.returncode}: {brief}",
            )
        return ToolOk(output=out, brief=f"exit=0: {brief}")


def _kill_group(process: asyncio.subprocess.Process) -> None:
    """Kill the command's entire process group."""
    if process.pid:
        try:
            os.killpg(os.getpgid(process.pid), signal.SIGKILL)
        except ProcessLookupError:
            pass
