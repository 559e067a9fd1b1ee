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

"""Commit message parsing framework.

The :class:`CommitParser` protocol turns raw commit messages into
structured :class:`Commit` records that drive rule selection and
changelog generation.

Built-in parsers:

- :class:`ConventionalCommitParser`: ``type(scope)!: subject`` plus
  trailing footers.

Usage::

    from bumpkit.commit_parsing import parse_commit

    commit = parse_commit('feat(auth)!: drop tokens\n\nBREAKING CHANGE: use OAuth2')
    assert commit.type == 'feat'
    assert commit.scope == 'auth'
    assert commit.breaking_description == 'use OAuth2'
"""

from collections.abc import Iterable

from bumpkit.commit_parsing._conventional import ConventionalCommitParser
from bumpkit.commit_parsing._types import (
    BREAKING_CHANGE_FOOTER,
    BUMP_PRECEDENCE,
    CHANGELOG_NOTE_FOOTER,
    BumpType,
    Commit,
    CommitParser,
    RawCommit,
    max_bump,
    normalize_footer_key,
)

# Module-level singleton for convenience.
_DEFAULT_PARSER = ConventionalCommitParser()


def parse_commit(message: str, sha: str = '') -> Commit:
    """Parse a single commit message with the default parser.

    Args:
        message: The complete commit message.
        sha: The commit SHA (for reference).
    """
    return _DEFAULT_PARSER.parse(message, sha=sha)


def parse_commits(records: Iterable[RawCommit], parser: CommitParser | None = None) -> list[Commit]:
    """Parse a commit history, preserving order.

    Args:
        records: Raw commits, oldest first.
        parser: Parser to use; defaults to :class:`ConventionalCommitParser`.
    """
    active = parser or _DEFAULT_PARSER
    return [active.parse(record.message, sha=record.sha) for record in records]


__all__ = [
    'BREAKING_CHANGE_FOOTER',
    'BUMP_PRECEDENCE',
    'CHANGELOG_NOTE_FOOTER',
    'BumpType',
    'Commit',
    'CommitParser',
    'ConventionalCommitParser',
    'RawCommit',
    'max_bump',
    'normalize_footer_key',
    'parse_commit',
    'parse_commits',
]
