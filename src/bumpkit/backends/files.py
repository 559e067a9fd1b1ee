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

"""File store protocol and implementations.

The release orchestrator never touches the filesystem directly: it reads
through :meth:`FileStore.read` and hands finished contents to
:meth:`FileStore.stage_write`. Which store is injected decides whether a
run has side effects.

Key Concepts (ELI5)::

    ┌─────────────────────┬────────────────────────────────────────────────┐
    │ Concept             │ ELI5 Explanation                               │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ WorkingTreeFiles    │ Writes the file and runs ``git add`` so the   │
    │                     │ change is ready to commit.                    │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ DryRunFiles         │ Reads from another store, but only remembers  │
    │                     │ what it was asked to write.                   │
    └─────────────────────┴────────────────────────────────────────────────┘
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from bumpkit.backends.vcs.git import GitCLIBackend, command_failed
from bumpkit.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class FileStore(Protocol):
    """Protocol for reading and staging repository files.

    Paths are relative to the repository root and use ``/`` separators.
    """

    async def read(self, path: str) -> str | None:
        """Return the contents of ``path``, or ``None`` if it does not exist."""
        ...

    async def stage_write(self, path: str, text: str) -> None:
        """Write ``text`` to ``path`` and stage it for the release commit."""
        ...


class WorkingTreeFiles:
    """:class:`FileStore` backed by a git working tree.

    Args:
        root: Repository root.
        git: Backend used to ``git add`` written files. ``None`` writes
            without staging.
    """

    def __init__(self, root: Path, git: GitCLIBackend | None = None) -> None:
        """Initialize with the repository root and an optional git backend."""
        self._root = root
        self._git = git

    async def read(self, path: str) -> str | None:
        """Return file contents, or ``None`` if missing."""
        full = self._root / path
        if not full.is_file():
            return None
        return full.read_text(encoding='utf-8')

    async def stage_write(self, path: str, text: str) -> None:
        """Write the file, creating parent directories, then ``git add`` it.

        Raises:
            BumpKitError: If ``git add`` fails.
        """
        full = self._root / path
        full.parent.mkdir(parents=True, exist_ok=True)
        full.write_text(text, encoding='utf-8')
        if self._git is not None:
            result = await self._git.add([path])
            if not result.ok:
                raise command_failed(result)
        logger.debug('file_staged', path=path)


class DryRunFiles:
    """:class:`FileStore` that reads from ``source`` and never writes.

    Staged contents are kept in :attr:`staged` in call order so callers can
    show what a real run would do.
    """

    def __init__(self, source: FileStore) -> None:
        """Wrap ``source`` for reads."""
        self._source = source
        self.staged: dict[str, str] = {}

    async def read(self, path: str) -> str | None:
        """Return staged contents if any, else delegate to the wrapped store."""
        if path in self.staged:
            return self.staged[path]
        return await self._source.read(path)

    async def stage_write(self, path: str, text: str) -> None:
        """Record the write instead of performing it."""
        self.staged[path] = text
        logger.debug('dry_run_write', path=path)


__all__ = [
    'DryRunFiles',
    'FileStore',
    'WorkingTreeFiles',
]
