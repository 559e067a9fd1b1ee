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

"""Semantic versions and the version bumper.

Versions are plain ``MAJOR.MINOR.PATCH`` triples with an optional
``-LABEL.N`` prerelease. Build metadata (``+...``) is accepted when
parsing and dropped.

Key Concepts (ELI5)::

    ┌─────────────────────┬────────────────────────────────────────────────┐
    │ Concept             │ ELI5 Explanation                               │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ SemanticVersion     │ A version like 1.4.0 or 1.4.0-rc.2. Sorts the │
    │                     │ way semver says: 1.4.0-rc.2 < 1.4.0.          │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ BumpRule            │ What to do to a version: major, minor, patch, │
    │                     │ "same but as an rc", promote, or set exactly. │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ target              │ The stable version a rule is heading for.     │
    │                     │ A prerelease 2.0.0-rc.1 already heads for a   │
    │                     │ major, so another breaking change keeps 2.0.0.│
    └─────────────────────┴────────────────────────────────────────────────┘

Bump table (``last_stable`` unknown)::

    current          rule            result
    ───────────────  ──────────────  ──────────────
    1.2.3            minor           1.3.0
    1.2.3            pre(rc, minor)  1.3.0-rc.0
    1.3.0-rc.0       pre(rc, minor)  1.3.0-rc.1
    1.3.0-rc.1       minor           1.3.0
    1.3.0-rc.1       major           2.0.0
    1.3.0-rc.1       release         1.3.0

Usage::

    from bumpkit.semver import BumpRule, bump_version, parse_version
    from bumpkit.commit_parsing import BumpType

    v = parse_version('1.2.3')
    assert str(bump_version(v, BumpRule(BumpType.MINOR, prerelease_label='rc'))) == '1.3.0-rc.0'
"""

from __future__ import annotations

import dataclasses
import functools
import re
from dataclasses import dataclass

from bumpkit.commit_parsing import BumpType
from bumpkit.errors import BumpKitError, E

_VERSION_RE = re.compile(
    r'^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)'
    r'(?:-(?P<label>[0-9A-Za-z-]+)\.(?P<num>0|[1-9]\d*))?'
    r'(?:\+[0-9A-Za-z.-]+)?$'
)


@dataclass(frozen=True)
class Prerelease:
    """The ``-LABEL.N`` part of a version."""

    label: str
    number: int = 0

    def __str__(self) -> str:
        """Render as ``label.N``."""
        return f'{self.label}.{self.number}'


@functools.total_ordering
@dataclass(frozen=True)
class SemanticVersion:
    """An immutable semantic version.

    Ordering compares ``(major, minor, patch)`` first. With equal cores a
    stable version sorts after any prerelease, and two prereleases compare
    by label then number.

    Attributes:
        major: Major version number.
        minor: Minor version number.
        patch: Patch version number.
        pre: The prerelease part, or ``None`` for a stable version.
    """

    major: int
    minor: int
    patch: int
    pre: Prerelease | None = None

    def __post_init__(self) -> None:
        """Reject negative components."""
        if min(self.major, self.minor, self.patch) < 0:
            raise BumpKitError(
                code=E.VERSION_INVALID,
                message=f'Version components must be non-negative: {self.major}.{self.minor}.{self.patch}',
            )

    def __str__(self) -> str:
        """Render as ``1.2.3`` or ``1.2.3-rc.0``."""
        core = f'{self.major}.{self.minor}.{self.patch}'
        return f'{core}-{self.pre}' if self.pre else core

    def __lt__(self, other: object) -> bool:
        """Semver precedence."""
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def _sort_key(self) -> tuple[int, int, int, int, str, int]:
        if self.pre is None:
            return (self.major, self.minor, self.patch, 1, '', 0)
        return (self.major, self.minor, self.patch, 0, self.pre.label, self.pre.number)

    @property
    def is_prerelease(self) -> bool:
        """Whether this version carries a prerelease part."""
        return self.pre is not None

    @property
    def core(self) -> SemanticVersion:
        """This version with the prerelease part dropped."""
        return dataclasses.replace(self, pre=None)


def parse_version(text: str) -> SemanticVersion:
    """Parse a version string.

    Args:
        text: A version such as ``"1.2.3"``, ``"1.2.3-rc.0"`` or
            ``"1.2.3+build.5"``.

    Raises:
        BumpKitError: If ``text`` is not a valid version.
    """
    match = _VERSION_RE.match(text.strip())
    if not match:
        raise BumpKitError(
            code=E.VERSION_INVALID,
            message=f'Invalid version: {text!r}',
            hint='Expected MAJOR.MINOR.PATCH with an optional -LABEL.N suffix.',
        )
    pre = None
    if match.group('label') is not None:
        pre = Prerelease(match.group('label'), int(match.group('num')))
    return SemanticVersion(
        int(match.group('major')),
        int(match.group('minor')),
        int(match.group('patch')),
        pre,
    )


@dataclass(frozen=True)
class BumpRule:
    """An increment rule.

    A rule with ``prerelease_label`` set is ``Pre(label)``: it heads for
    the stable version ``bump`` would produce and lands on a numbered
    prerelease of it.

    Attributes:
        bump: The underlying bump type.
        prerelease_label: Label for ``Pre(label)`` rules, else ``""``.
        version: Target version for :attr:`BumpType.EXACT` rules.
    """

    bump: BumpType
    prerelease_label: str = ''
    version: SemanticVersion | None = None

    @property
    def is_prerelease(self) -> bool:
        """Whether this is a ``Pre(label)`` rule."""
        return bool(self.prerelease_label)

    def __str__(self) -> str:
        """Short human-readable form, e.g. ``pre(rc, minor)``."""
        if self.bump is BumpType.EXACT:
            return f'exact({self.version})'
        if self.prerelease_label:
            return f'pre({self.prerelease_label}, {self.bump.value})'
        return self.bump.value


NO_BUMP = BumpRule(BumpType.NONE)


def _increment(version: SemanticVersion, bump: BumpType) -> SemanticVersion:
    if bump is BumpType.MAJOR:
        return SemanticVersion(version.major + 1, 0, 0)
    if bump is BumpType.MINOR:
        return SemanticVersion(version.major, version.minor + 1, 0)
    return SemanticVersion(version.major, version.minor, version.patch + 1)


def _implied_bump(core: SemanticVersion) -> BumpType:
    """The largest bump a prerelease core already represents."""
    if core.minor == 0 and core.patch == 0:
        return BumpType.MAJOR
    if core.patch == 0:
        return BumpType.MINOR
    return BumpType.PATCH


_MAGNITUDE: dict[BumpType, int] = {BumpType.MAJOR: 3, BumpType.MINOR: 2, BumpType.PATCH: 1}


def _target(current: SemanticVersion, bump: BumpType, last_stable: SemanticVersion | None) -> SemanticVersion:
    """Return the stable version ``bump`` heads for from ``current``."""
    if current.pre is None:
        return _increment(current, bump)
    core = current.core
    if last_stable is not None:
        return max(_increment(last_stable.core, bump), core)
    if _MAGNITUDE[_implied_bump(core)] >= _MAGNITUDE[bump]:
        return core
    return _increment(core, bump)


def bump_version(
    current: SemanticVersion,
    rule: BumpRule,
    *,
    last_stable: SemanticVersion | None = None,
) -> SemanticVersion:
    """Apply ``rule`` to ``current``.

    Args:
        current: The version currently declared by the package.
        rule: The rule to apply.
        last_stable: The last stable release, when known (from version
            tags). Only consulted when ``current`` is a prerelease.

    Returns:
        The new version. ``NONE`` rules return ``current`` unchanged.

    Raises:
        BumpKitError: For ``RELEASE`` on a stable version, or ``EXACT``
            without a version.
    """
    if rule.bump is BumpType.NONE:
        return current

    if rule.bump is BumpType.EXACT:
        if rule.version is None:
            raise BumpKitError(code=E.VERSION_INVALID, message='Exact bump rule has no version.')
        return rule.version

    if rule.bump is BumpType.RELEASE:
        if current.pre is None:
            raise BumpKitError(
                code=E.VERSION_NOT_PRERELEASE,
                message=f'Cannot release {current}: it is not a prerelease.',
                hint="Use 'major', 'minor' or 'patch' to bump a stable version.",
            )
        return current.core

    target = _target(current, rule.bump, last_stable)
    if not rule.prerelease_label:
        return target

    label = rule.prerelease_label
    if current.pre is not None and current.pre.label == label and current.core == target:
        return dataclasses.replace(current, pre=Prerelease(label, current.pre.number + 1))
    return dataclasses.replace(target, pre=Prerelease(label, 0))


__all__ = [
    'NO_BUMP',
    'BumpRule',
    'Prerelease',
    'SemanticVersion',
    'bump_version',
    'parse_version',
]
