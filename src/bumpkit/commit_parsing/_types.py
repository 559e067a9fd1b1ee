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

"""Pure types for commit message parsing.

Everything here is a frozen dataclass, enum, or protocol: no I/O, no
logging, no side effects.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, runtime_checkable

# Footer keys are stored lowercased; both spellings of the breaking
# change footer fold onto this one.
BREAKING_CHANGE_FOOTER = 'breaking change'
CHANGELOG_NOTE_FOOTER = 'changelog-note'


class BumpType(Enum):
    """Semver bump types.

    ``MAJOR``, ``MINOR``, ``PATCH`` and ``NONE`` are derived from commit
    history and ordered by :data:`BUMP_PRECEDENCE`. ``RELEASE`` (promote a
    prerelease to stable) and ``EXACT`` (use a given version) only come
    from explicit rules.
    """

    MAJOR = 'major'
    MINOR = 'minor'
    PATCH = 'patch'
    RELEASE = 'release'
    EXACT = 'exact'
    NONE = 'none'


# Bump precedence: lower index = higher precedence.
BUMP_PRECEDENCE: list[BumpType] = [
    BumpType.MAJOR,
    BumpType.MINOR,
    BumpType.PATCH,
    BumpType.NONE,
]


def max_bump(a: BumpType, b: BumpType) -> BumpType:
    """Return the higher-precedence bump type.

    >>> max_bump(BumpType.MINOR, BumpType.PATCH)
    <BumpType.MINOR: 'minor'>
    >>> max_bump(BumpType.NONE, BumpType.MAJOR)
    <BumpType.MAJOR: 'major'>
    """
    a_idx = BUMP_PRECEDENCE.index(a)
    b_idx = BUMP_PRECEDENCE.index(b)
    return BUMP_PRECEDENCE[min(a_idx, b_idx)]


def normalize_footer_key(key: str) -> str:
    """Return the lookup form of a footer token.

    >>> normalize_footer_key('BREAKING-CHANGE')
    'breaking change'
    >>> normalize_footer_key('Changelog-Note')
    'changelog-note'
    """
    lowered = key.strip().lower()
    if lowered == 'breaking-change':
        return BREAKING_CHANGE_FOOTER
    return lowered


@dataclass(frozen=True)
class RawCommit:
    """A commit as read from history, before parsing.

    Attributes:
        sha: The full commit SHA.
        message: The complete commit message (header, body and footers).
    """

    sha: str
    message: str


@dataclass(frozen=True)
class Commit:
    """A parsed commit message.

    Commits whose header does not follow the convention still parse:
    they get an empty ``type`` and the first line as ``subject``, and
    their footers are still available.

    Attributes:
        sha: The full commit SHA.
        raw: The original unparsed commit message.
        type: The lowercased commit type (``"feat"``, ``"fix"``), or ``""``.
        scope: The scope from ``type(scope):``, or ``None``.
        breaking: ``True`` for ``type!:`` headers and for commits with a
            ``BREAKING CHANGE`` footer.
        subject: The header text after the colon.
        body: Free text between the header and the footers.
        footers: Footer values keyed by :func:`normalize_footer_key`.
    """

    sha: str
    raw: str
    type: str
    subject: str
    scope: str | None = None
    breaking: bool = False
    body: str = ''
    footers: Mapping[str, str] = field(default_factory=dict)

    def footer(self, key: str) -> str | None:
        """Return a footer value by key, ignoring case."""
        return self.footers.get(normalize_footer_key(key))

    @property
    def breaking_description(self) -> str | None:
        """Text describing the breaking change, or ``None`` if not breaking.

        The ``BREAKING CHANGE`` footer wins over the subject.
        """
        if not self.breaking:
            return None
        return self.footers.get(BREAKING_CHANGE_FOOTER) or self.subject


@runtime_checkable
class CommitParser(Protocol):
    """Protocol for commit message parsers.

    A parser never rejects a message: anything that does not match its
    convention is returned as a non-conventional :class:`Commit`.

    Built-in implementations:

    - :class:`~bumpkit.commit_parsing.ConventionalCommitParser`
    """

    def parse(self, message: str, sha: str = '') -> Commit:
        """Parse a full commit message.

        Args:
            message: The complete commit message.
            sha: The commit SHA (for reference).
        """
        ...
