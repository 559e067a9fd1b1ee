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

"""Git VCS backend for bumpkit.

The :class:`GitCLIBackend` implements the :class:`~bumpkit.backends.vcs.VCS`
protocol by delegating to ``git`` via :func:`run_command`. Blocking
subprocess calls are dispatched to ``asyncio.to_thread()``.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from bumpkit.backends._run import CommandResult, run_command
from bumpkit.commit_parsing import RawCommit
from bumpkit.errors import BumpKitError, E
from bumpkit.logging import get_logger

log = get_logger('bumpkit.backends.git')

# Full SHA, NUL, raw message, record separator.
_LOG_FORMAT = '%H%x00%B%x1e'
_RECORD_SEP = '\x1e'
_FIELD_SEP = '\x00'


def parse_log_records(output: str) -> list[RawCommit]:
    """Split ``git log`` output produced with :data:`_LOG_FORMAT`."""
    commits: list[RawCommit] = []
    for record in output.split(_RECORD_SEP):
        record = record.lstrip('\n')
        if not record:
            continue
        sha, _, message = record.partition(_FIELD_SEP)
        commits.append(RawCommit(sha=sha.strip(), message=message.rstrip('\n')))
    return commits


def command_failed(result: CommandResult) -> BumpKitError:
    """Build the error raised when a git command exits non-zero."""
    detail = result.stderr.strip() or f'exit code {result.return_code}'
    return BumpKitError(
        code=E.VCS_COMMAND_FAILED,
        message=f'{result.command_str} failed: {detail}',
    )


class GitCLIBackend:
    """Default :class:`~bumpkit.backends.vcs.VCS` implementation using ``git``.

    Every query raises :class:`~bumpkit.errors.BumpKitError` when git
    fails, so a broken repository never reads as "nothing to release".

    Args:
        repo_root: Path to the git repository root.
    """

    def __init__(self, repo_root: Path) -> None:
        """Initialize with the git repository root path."""
        self._root = repo_root

    def _git(self, *args: str) -> CommandResult:
        """Run a git command synchronously (called via to_thread)."""
        return run_command(['git', *args], cwd=self._root)

    async def _query(self, *args: str) -> str:
        result = await asyncio.to_thread(self._git, *args)
        if not result.ok:
            raise command_failed(result)
        return result.stdout

    async def commits_since(self, tag: str | None = None) -> list[RawCommit]:
        """Return full commit messages since ``tag``, oldest first."""
        cmd_parts = ['log', '--reverse', f'--format={_LOG_FORMAT}']
        if tag:
            cmd_parts.append(f'{tag}..HEAD')
        commits = parse_log_records(await self._query(*cmd_parts))
        log.debug('commits_read', since=tag, count=len(commits))
        return commits

    async def list_tags(self, *, pattern: str = '') -> list[str]:
        """Return all tags, optionally filtered by a glob pattern."""
        cmd_parts = ['tag', '--list']
        if pattern:
            cmd_parts.append(pattern)
        return (await self._query(*cmd_parts)).strip().splitlines()

    async def add(self, paths: list[str]) -> CommandResult:
        """Stage ``paths`` in the index."""
        return await asyncio.to_thread(self._git, 'add', '--', *paths)


__all__ = [
    'GitCLIBackend',
    'command_failed',
    'parse_log_records',
]
