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

"""VCS protocol for bumpkit.

The :class:`VCS` protocol is the history provider and tag resolver used
by the release orchestrator. Implementations:

- :class:`~bumpkit.backends.vcs.git.GitCLIBackend`: ``git`` CLI
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from bumpkit.backends.vcs.git import GitCLIBackend as GitCLIBackend
from bumpkit.commit_parsing import RawCommit

__all__ = [
    'GitCLIBackend',
    'RawCommit',
    'VCS',
]


@runtime_checkable
class VCS(Protocol):
    """Protocol for reading release history.

    All methods are async to avoid blocking the event loop when
    shelling out to ``git``.
    """

    async def commits_since(self, tag: str | None = None) -> list[RawCommit]:
        """Return commits reachable from HEAD but not from ``tag``, oldest first.

        Args:
            tag: Exclusive lower bound. ``None`` means the whole history.
        """
        ...

    async def list_tags(self, *, pattern: str = '') -> list[str]:
        """Return all tags, optionally filtered by a glob pattern."""
        ...
