# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Subprocess runner behind the git backend.

:func:`run_command` never raises for a command that could not finish:
a missing executable or a timeout comes back as a failed
:class:`CommandResult`, so the backend has a single failure path to
turn into a :class:`~bumpkit.errors.BumpKitError`.
"""

from __future__ import annotations

import subprocess  # noqa: S404 - subprocess is the core purpose of this module
import time
from dataclasses import dataclass
from pathlib import Path

from bumpkit.logging import get_logger

log = get_logger('bumpkit.backends.run')

# Seconds before a git call is abandoned.
DEFAULT_TIMEOUT_SECONDS = 120

# Shell conventions for "not found" and "killed".
_NOT_FOUND = 127
_TIMED_OUT = 124


@dataclass(frozen=True)
class CommandResult:
    """Result of a subprocess invocation.

    Attributes:
        command: The command that was executed (as a list of strings).
        return_code: Process exit code (0 = success).
        stdout: Captured standard output.
        stderr: Captured standard error.
        duration: Wall-clock duration in milliseconds.
    """

    command: list[str]
    return_code: int
    stdout: str = ''
    stderr: str = ''
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        """Whether the command succeeded."""
        return self.return_code == 0

    @property
    def command_str(self) -> str:
        """The command as a single shell-style string."""
        return ' '.join(self.command)


def run_command(
    cmd: list[str],
    *,
    cwd: Path | str | None = None,
    timeout: int = DEFAULT_TIMEOUT_SECONDS,
) -> CommandResult:
    """Run ``cmd`` to completion and capture its output.

    Args:
        cmd: Command and arguments as a list of strings.
        cwd: Working directory for the command.
        timeout: Maximum seconds to wait before killing the process.

    Returns:
        The result. Exit code 127 means the executable was not found and
        124 means it was killed after ``timeout`` seconds.
    """
    start = time.monotonic()
    try:
        proc = subprocess.run(  # noqa: S603 -- arguments come from bumpkit itself
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError:
        result = CommandResult(command=cmd, return_code=_NOT_FOUND, stderr=f'{cmd[0]}: command not found')
    except subprocess.TimeoutExpired:
        result = CommandResult(command=cmd, return_code=_TIMED_OUT, stderr=f'timed out after {timeout}s')
    else:
        result = CommandResult(
            command=cmd,
            return_code=proc.returncode,
            stdout=proc.stdout,
            stderr=proc.stderr,
            duration=(time.monotonic() - start) * 1000,
        )

    if result.ok:
        log.debug('command_ok', cmd=result.command_str, cwd=str(cwd or '.'), duration=result.duration)
    else:
        log.warning(
            'command_failed',
            cmd=result.command_str,
            cwd=str(cwd or '.'),
            return_code=result.return_code,
            stderr=result.stderr[:500],
        )
    return result


__all__ = [
    'CommandResult',
    'DEFAULT_TIMEOUT_SECONDS',
    'run_command',
]
