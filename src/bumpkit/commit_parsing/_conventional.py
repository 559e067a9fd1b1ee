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

"""Conventional Commits parser.

Pure implementation: depends only on ``re`` and :mod:`._types`.

Message layout::

    feat(cli)!: drop the --legacy flag          <- header
                                                <- blank line
    The flag was deprecated in 1.4.             <- body (optional)
                                                <- blank line
    BREAKING CHANGE: --legacy is gone.          <- footers (optional,
    Changelog-Note: Mention the migration.         last paragraph only)
"""

from __future__ import annotations

import re

from bumpkit.commit_parsing._types import BREAKING_CHANGE_FOOTER, Commit, normalize_footer_key

# Regex for Conventional Commit headers: type(scope)!: subject
CC_PATTERN: re.Pattern[str] = re.compile(
    r'^(?P<type>[A-Za-z][\w-]*)'  # type (e.g. feat, fix, chore)
    r'(?:\((?P<scope>[^()\r\n]*)\))?'  # optional scope in parens
    r'(?P<breaking>!)?'  # optional breaking change indicator
    r':\s*'  # colon + space
    r'(?P<subject>\S.*)$',  # subject
)

# Footer lines: "Token: value" or "Token #value". The breaking change
# token is the only one allowed to contain a space.
FOOTER_PATTERN: re.Pattern[str] = re.compile(
    r'^(?P<token>BREAKING[ -]CHANGE|[A-Za-z][\w-]*)'
    r'(?::\s|\s#)'
    r'(?P<value>.*)$',
)

_PARAGRAPH_SPLIT: re.Pattern[str] = re.compile(r'\n[ \t]*\n')


def _parse_footers(paragraph: str) -> dict[str, str] | None:
    """Parse a trailing paragraph as footers.

    Returns ``None`` when the paragraph does not start with a footer
    token. Lines that do not start a new footer continue the previous one.
    """
    lines = paragraph.splitlines()
    if not lines or not FOOTER_PATTERN.match(lines[0]):
        return None

    entries: list[tuple[str, list[str]]] = []
    for line in lines:
        match = FOOTER_PATTERN.match(line)
        if match:
            entries.append((match.group('token'), [match.group('value').strip()]))
        else:
            entries[-1][1].append(line.strip())

    footers: dict[str, str] = {}
    for token, parts in entries:
        # First occurrence of a repeated footer wins.
        footers.setdefault(normalize_footer_key(token), '\n'.join(p for p in parts if p))
    return footers


class ConventionalCommitParser:
    """Parser for `Conventional Commits <https://www.conventionalcommits.org/>`_.

    Parses messages in the format ``type(scope)!: subject`` with an
    optional body and trailing footers. Never raises: a header that does
    not follow the convention yields a commit with ``type == ''``.
    """

    def parse(self, message: str, sha: str = '') -> Commit:
        """Parse a commit message as a Conventional Commit.

        Args:
            message: The complete commit message.
            sha: The commit SHA (for reference).

        Returns:
            The parsed :class:`Commit`.
        """
        text = message.replace('\r\n', '\n').strip()
        header, _, rest = text.partition('\n')
        header = header.strip()

        paragraphs = [p.strip('\n') for p in _PARAGRAPH_SPLIT.split(rest) if p.strip()]
        footers: dict[str, str] = {}
        if paragraphs:
            parsed = _parse_footers(paragraphs[-1])
            if parsed is not None:
                footers = parsed
                paragraphs = paragraphs[:-1]
        body = '\n\n'.join(paragraphs).strip()

        match = CC_PATTERN.match(header)
        if not match:
            return Commit(
                sha=sha,
                raw=message,
                type='',
                subject=header,
                breaking=BREAKING_CHANGE_FOOTER in footers,
                body=body,
                footers=footers,
            )

        scope = (match.group('scope') or '').strip() or None
        breaking = bool(match.group('breaking')) or BREAKING_CHANGE_FOOTER in footers
        return Commit(
            sha=sha,
            raw=message,
            type=match.group('type').lower(),
            scope=scope,
            breaking=breaking,
            subject=match.group('subject').strip(),
            body=body,
            footers=footers,
        )


__all__ = [
    'CC_PATTERN',
    'FOOTER_PATTERN',
    'ConventionalCommitParser',
]
