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

"""Changelog sections from Conventional Commits.

Classifies each commit into the sections it contributes to, renders one
markdown entry per release, and merges that entry into an existing
``CHANGELOG.md`` without touching older entries.

Key Concepts (ELI5)::

    ┌─────────────────────────┬─────────────────────────────────────────────┐
    │ Concept                 │ Plain-English                               │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ SectionKind             │ The closed set of places a commit can land: │
    │                         │ breaking, feature, fix, note, custom.       │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ ChangelogItem           │ One bullet a commit contributes, tagged     │
    │                         │ with the section it belongs in.             │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ ChangelogSection        │ A group of bullets under one heading, e.g.  │
    │                         │ "Features" or "Fixes".                      │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ Changelog               │ All sections for one version.               │
    └─────────────────────────┴─────────────────────────────────────────────┘

Classification rules::

    commit                                        lands in
    ────────────────────────────────────────────  ─────────────────────────
    feat: add X                                   Features
    fix!: drop Y                                  Breaking Changes only
    fix: Z + "BREAKING CHANGE: no more Y" footer  Breaking Changes + Fixes
    chore: bump deps + "Changelog-Note: ..."      Notes
    any + "<extra section footer>: ..."           that custom section

Rendered entry::

    ## 1.3.0 (2026-10-19)

    ### Breaking Changes

    - drop Y

    ### Features

    - add X
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from bumpkit.commit_parsing import CHANGELOG_NOTE_FOOTER, Commit
from bumpkit.package import Package
from bumpkit.semver import SemanticVersion

CHANGELOG_TITLE = '# Changelog'

BREAKING_HEADING = 'Breaking Changes'
FEATURES_HEADING = 'Features'
FIXES_HEADING = 'Fixes'

_VERSION_HEADING_RE = re.compile(r'^## (?P<version>\S+)(?: \((?P<date>[^)]*)\))?[ \t]*$', re.MULTILINE)
_ENTRY_HEADING_RE = re.compile(r'^## ', re.MULTILINE)
_SECTION_HEADING_RE = re.compile(r'^### (?P<heading>.+?)[ \t]*$')


class SectionKind(Enum):
    """Where a commit's contribution goes, in render order."""

    BREAKING = 'breaking'
    FEATURE = 'feature'
    FIX = 'fix'
    NOTE = 'note'
    CUSTOM = 'custom'


@dataclass(frozen=True)
class ChangelogItem:
    """One bullet contributed by one commit.

    Attributes:
        kind: The section kind.
        heading: Section heading the bullet renders under.
        text: Bullet text.
    """

    kind: SectionKind
    heading: str
    text: str


@dataclass
class ChangelogSection:
    """A group of bullets under one heading."""

    heading: str
    bullets: list[str] = field(default_factory=list)


@dataclass
class Changelog:
    """One release entry.

    Attributes:
        version: Version string in the ``## <version>`` heading.
        sections: Sections in render order. Never empty sections.
        date: Optional date rendered after the version.
    """

    version: str
    sections: list[ChangelogSection] = field(default_factory=list)
    date: str = ''


def classify_commit(commit: Commit, package: Package) -> list[ChangelogItem]:
    """Return every changelog bullet ``commit`` contributes to ``package``.

    A breaking commit whose breaking text is its own subject (``fix!:``)
    only shows under Breaking Changes. When the breaking text comes from a
    separate ``BREAKING CHANGE`` footer, the subject also shows under
    Features or Fixes.
    """
    items: list[ChangelogItem] = []
    breaking_text = commit.breaking_description
    if breaking_text is not None:
        items.append(ChangelogItem(SectionKind.BREAKING, BREAKING_HEADING, breaking_text))

    if breaking_text != commit.subject:
        if commit.type == 'feat':
            items.append(ChangelogItem(SectionKind.FEATURE, FEATURES_HEADING, commit.subject))
        elif commit.type == 'fix':
            items.append(ChangelogItem(SectionKind.FIX, FIXES_HEADING, commit.subject))

    note = commit.footer(CHANGELOG_NOTE_FOOTER)
    if note:
        items.append(ChangelogItem(SectionKind.NOTE, package.notes_heading, note))

    for extra in package.extra_sections:
        value = commit.footer(extra.footer_key)
        if value:
            items.append(ChangelogItem(SectionKind.CUSTOM, extra.heading, value))
    return items


def _section_order(package: Package) -> list[str]:
    order = [BREAKING_HEADING, FEATURES_HEADING, FIXES_HEADING, package.notes_heading]
    for extra in package.extra_sections:
        if extra.heading not in order:
            order.append(extra.heading)
    return order


def build_changelog(
    commits: Iterable[Commit],
    package: Package,
    version: SemanticVersion | str,
    *,
    date: str = '',
) -> Changelog:
    """Group the bullets of ``commits`` into a :class:`Changelog`.

    Sections follow a fixed order (Breaking Changes, Features, Fixes,
    notes, then custom sections as configured). Bullets keep commit order;
    empty sections are omitted.
    """
    grouped: dict[str, list[str]] = {heading: [] for heading in _section_order(package)}
    for commit in commits:
        for item in classify_commit(commit, package):
            grouped[item.heading].append(item.text)
    sections = [ChangelogSection(heading, bullets) for heading, bullets in grouped.items() if bullets]
    return Changelog(version=str(version), sections=sections, date=date)


def _render_bullet(text: str) -> str:
    first, *rest = text.splitlines() or ['']
    return '\n'.join([f'- {first}', *(f'  {line}' if line else '' for line in rest)])


def render_changelog(changelog: Changelog) -> str:
    """Render a Changelog as a markdown string.

    Args:
        changelog: The changelog to render.

    Returns:
        A markdown string with version heading, sections, and bullets,
        ending in a single newline.
    """
    lines: list[str] = []

    heading = f'## {changelog.version}'
    if changelog.date:
        heading += f' ({changelog.date})'
    lines.append(heading)
    lines.append('')

    for section in changelog.sections:
        lines.append(f'### {section.heading}')
        lines.append('')
        for bullet in section.bullets:
            lines.append(_render_bullet(bullet))
        lines.append('')

    return '\n'.join(lines).rstrip() + '\n'


def parse_changelog_entry(text: str) -> Changelog:
    """Parse one rendered entry back into a :class:`Changelog`.

    Inverse of :func:`render_changelog`. Text outside ``###`` sections is
    ignored.

    Raises:
        ValueError: If ``text`` does not start with a ``## <version>`` heading.
    """
    lines = text.strip('\n').splitlines()
    match = _VERSION_HEADING_RE.match(lines[0]) if lines else None
    if match is None:
        raise ValueError('changelog entry must start with a "## <version>" heading')

    changelog = Changelog(version=match.group('version'), date=match.group('date') or '')
    current: ChangelogSection | None = None
    for line in lines[1:]:
        section_match = _SECTION_HEADING_RE.match(line)
        if section_match:
            current = ChangelogSection(section_match.group('heading'))
            changelog.sections.append(current)
        elif current is None:
            continue
        elif line.startswith('- '):
            current.bullets.append(line[2:])
        elif line.startswith('  ') and current.bullets:
            current.bullets[-1] += '\n' + line[2:]
    return changelog


def merge_changelog(existing: str | None, rendered: str) -> str:
    """Insert a rendered entry into existing changelog text.

    The entry goes directly above the first ``## `` heading, whatever its
    format (``## [1.2.3] - 2024-01-01`` from other tools included).
    Everything before that heading (title, preamble) and every older entry
    is kept verbatim. If the first heading is a bumpkit heading for the
    same version, that entry is replaced instead. A missing or blank
    changelog gets a ``# Changelog`` title.

    Args:
        existing: Current file contents, or ``None`` if the file is missing.
        rendered: Output of :func:`render_changelog`.

    Returns:
        The new file contents.
    """
    entry = rendered.rstrip('\n') + '\n'
    if existing is None or not existing.strip():
        return f'{CHANGELOG_TITLE}\n\n{entry}'

    first = _ENTRY_HEADING_RE.search(existing)
    if first is None:
        return existing.rstrip('\n') + '\n\n' + entry

    head, tail = existing[: first.start()], existing[first.start() :]
    old_heading = _VERSION_HEADING_RE.match(tail.split('\n', 1)[0])
    new_heading = _VERSION_HEADING_RE.match(entry)
    if old_heading and new_heading and old_heading.group('version') == new_heading.group('version'):
        following = _ENTRY_HEADING_RE.search(tail, first.end() - first.start())
        tail = tail[following.start() :] if following else ''

    if not tail:
        return head + entry
    return head + entry + '\n' + tail


__all__ = [
    'BREAKING_HEADING',
    'CHANGELOG_TITLE',
    'FEATURES_HEADING',
    'FIXES_HEADING',
    'Changelog',
    'ChangelogItem',
    'ChangelogSection',
    'SectionKind',
    'build_changelog',
    'classify_commit',
    'merge_changelog',
    'parse_changelog_entry',
    'render_changelog',
]
