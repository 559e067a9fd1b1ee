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

"""Tests for the Git VCS backend.

Mocks ``_git`` to avoid real git calls.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from bumpkit.backends._run import CommandResult
from bumpkit.backends.vcs import VCS
from bumpkit.backends.vcs.git import GitCLIBackend, parse_log_records
from bumpkit.commit_parsing import RawCommit
from bumpkit.errors import BumpKitError, E

SHA_A = 'a' * 40
SHA_B = 'b' * 40


def _ok(stdout: str = '', **kw: Any) -> CommandResult:  # noqa: ANN401
    return CommandResult(command=['git'], return_code=0, stdout=stdout, **kw)


def _fail(stderr: str = '', **kw: Any) -> CommandResult:  # noqa: ANN401
    return CommandResult(command=['git'], return_code=128, stderr=stderr, **kw)


@pytest.fixture()
def git() -> GitCLIBackend:
    """Git."""
    return GitCLIBackend(repo_root=Path('/fake/repo'))


class TestParseLogRecords:
    """Tests for parse_log_records."""

    def test_multi_line_messages(self) -> None:
        """Test multi line messages."""
        output = f'{SHA_A}\x00feat: a\n\nbody line\n\x1e\n{SHA_B}\x00fix: b\n\nRefs: #1\n\x1e\n'
        assert parse_log_records(output) == [
            RawCommit(sha=SHA_A, message='feat: a\n\nbody line'),
            RawCommit(sha=SHA_B, message='fix: b\n\nRefs: #1'),
        ]

    def test_empty(self) -> None:
        """Test empty."""
        assert parse_log_records('') == []
        assert parse_log_records('\n') == []


class TestCommitsSince:
    """Tests for commits_since."""

    @pytest.mark.asyncio()
    async def test_whole_history(self, git: GitCLIBackend) -> None:
        """Test whole history."""
        with patch.object(git, '_git', return_value=_ok(f'{SHA_A}\x00feat: a\n\x1e\n')) as m:
            commits = await git.commits_since()
        assert commits == [RawCommit(sha=SHA_A, message='feat: a')]
        m.assert_called_once_with('log', '--reverse', '--format=%H%x00%B%x1e')

    @pytest.mark.asyncio()
    async def test_since_tag(self, git: GitCLIBackend) -> None:
        """Test since tag."""
        with patch.object(git, '_git', return_value=_ok('')) as m:
            assert await git.commits_since('v1.0.0') == []
        m.assert_called_once_with('log', '--reverse', '--format=%H%x00%B%x1e', 'v1.0.0..HEAD')

    @pytest.mark.asyncio()
    async def test_git_failure_raises(self, git: GitCLIBackend) -> None:
        """A failing git log is an error, not an empty history."""
        with patch.object(git, '_git', return_value=_fail("fatal: not a git repository")):
            with pytest.raises(BumpKitError) as exc_info:
                await git.commits_since('v1.0.0')
        assert exc_info.value.code == E.VCS_COMMAND_FAILED
        assert 'not a git repository' in exc_info.value.message


class TestListTags:
    """Tests for list_tags."""

    @pytest.mark.asyncio()
    async def test_pattern(self, git: GitCLIBackend) -> None:
        """Test pattern."""
        with patch.object(git, '_git', return_value=_ok('cli/v0.1.0\ncli/v0.2.0\n')) as m:
            assert await git.list_tags(pattern='cli/v*') == ['cli/v0.1.0', 'cli/v0.2.0']
        m.assert_called_once_with('tag', '--list', 'cli/v*')

    @pytest.mark.asyncio()
    async def test_no_tags(self, git: GitCLIBackend) -> None:
        """Test no tags."""
        with patch.object(git, '_git', return_value=_ok('')) as m:
            assert await git.list_tags() == []
        m.assert_called_once_with('tag', '--list')

    @pytest.mark.asyncio()
    async def test_git_failure_raises(self, git: GitCLIBackend) -> None:
        """A failing git tag is an error, not an untagged repository."""
        with patch.object(git, '_git', return_value=_fail()):
            with pytest.raises(BumpKitError) as exc_info:
                await git.list_tags(pattern='v*')
        assert exc_info.value.code == E.VCS_COMMAND_FAILED
        assert 'exit code 128' in exc_info.value.message


class TestAdd:
    """Tests for add."""

    @pytest.mark.asyncio()
    async def test_add(self, git: GitCLIBackend) -> None:
        """Test add."""
        with patch.object(git, '_git', return_value=_ok()) as m:
            result = await git.add(['pyproject.toml', 'CHANGELOG.md'])
        assert result.ok
        m.assert_called_once_with('add', '--', 'pyproject.toml', 'CHANGELOG.md')


class TestProtocol:
    """Tests for protocol conformance."""

    def test_satisfies_vcs(self, git: GitCLIBackend) -> None:
        """Test satisfies vcs."""
        assert isinstance(git, VCS)
