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

"""Tests for bumpkit.backends._run.

Mocks ``subprocess.run`` so no process is started.
"""

from __future__ import annotations

import subprocess  # noqa: S404 - patched in these tests
from unittest.mock import patch

from bumpkit.backends._run import CommandResult, run_command
from bumpkit.backends.vcs.git import command_failed


class TestRunCommand:
    """Tests for run_command."""

    def test_captures_output(self) -> None:
        """Test captures output."""
        done = subprocess.CompletedProcess(['git', 'tag'], 0, stdout='v1.0.0\n', stderr='')
        with patch('bumpkit.backends._run.subprocess.run', return_value=done) as m:
            result = run_command(['git', 'tag'], cwd='/repo')
        assert result.ok
        assert result.stdout == 'v1.0.0\n'
        assert m.call_args.kwargs['cwd'] == '/repo'

    def test_non_zero_exit(self) -> None:
        """Test non zero exit."""
        done = subprocess.CompletedProcess(['git', 'log'], 128, stdout='', stderr='fatal: bad revision')
        with patch('bumpkit.backends._run.subprocess.run', return_value=done):
            result = run_command(['git', 'log'])
        assert not result.ok
        assert result.stderr == 'fatal: bad revision'

    def test_missing_executable(self) -> None:
        """A missing git binary is a failed result, not an exception."""
        with patch('bumpkit.backends._run.subprocess.run', side_effect=FileNotFoundError('git')):
            result = run_command(['git', 'status'])
        assert result.return_code == 127
        assert result.stderr == 'git: command not found'

    def test_timeout(self) -> None:
        """A hung command is a failed result, not an exception."""
        with patch('bumpkit.backends._run.subprocess.run', side_effect=subprocess.TimeoutExpired(['git'], 5)):
            result = run_command(['git', 'fetch'], timeout=5)
        assert result.return_code == 124
        assert result.stderr == 'timed out after 5s'


class TestCommandFailed:
    """Tests for the error built from a failed result."""

    def test_message_names_command(self) -> None:
        """Test message names command."""
        exc = command_failed(CommandResult(command=['git', 'tag', '--list'], return_code=1))
        assert exc.message == 'git tag --list failed: exit code 1'
