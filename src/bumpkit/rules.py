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

"""Choose the bump rule for one package.

Selection order, first match wins::

    explicit override                         -> the override
    any breaking commit                       -> major
    any feat commit                           -> minor
    any commit contributing a changelog line  -> patch
    otherwise                                 -> none (nothing to release)

With a prerelease label every rule except ``none`` becomes
``pre(label, <rule>)``.
"""

from __future__ import annotations

from collections.abc import Iterable

from bumpkit.changelog import SectionKind, classify_commit
from bumpkit.commit_parsing import BumpType, Commit, max_bump
from bumpkit.errors import BumpKitError, E
from bumpkit.package import Package
from bumpkit.semver import NO_BUMP, BumpRule, parse_version

_KIND_BUMPS: dict[SectionKind, BumpType] = {
    SectionKind.BREAKING: BumpType.MAJOR,
    SectionKind.FEATURE: BumpType.MINOR,
    SectionKind.FIX: BumpType.PATCH,
    SectionKind.NOTE: BumpType.PATCH,
    SectionKind.CUSTOM: BumpType.PATCH,
}

_WRAPPABLE: frozenset[BumpType] = frozenset({BumpType.MAJOR, BumpType.MINOR, BumpType.PATCH})


def commit_bump(commit: Commit, package: Package) -> BumpType:
    """Return the bump a single commit asks for in ``package``."""
    bump = BumpType.NONE
    for item in classify_commit(commit, package):
        bump = max_bump(bump, _KIND_BUMPS[item.kind])
    return bump


def with_prerelease(rule: BumpRule, label: str) -> BumpRule:
    """Wrap a major/minor/patch rule as ``pre(label, rule)``.

    Other rules (none, release, exact) are returned unchanged.
    """
    if not label or rule.bump not in _WRAPPABLE:
        return rule
    return BumpRule(rule.bump, prerelease_label=label)


def select_rule(
    commits: Iterable[Commit],
    package: Package,
    *,
    override: BumpRule | None = None,
    prerelease_label: str = '',
) -> BumpRule:
    """Pick the rule for ``package`` from its applicable commits.

    Args:
        commits: Commits already routed to ``package``.
        package: The package being released.
        override: Explicit rule that beats anything derived from commits.
        prerelease_label: Non-empty to produce ``pre(label, ...)`` rules.

    Returns:
        The selected :class:`BumpRule`; ``bump`` is ``NONE`` when nothing
        in ``commits`` warrants a release.
    """
    if override is not None:
        return with_prerelease(override, prerelease_label)

    bump = BumpType.NONE
    for commit in commits:
        bump = max_bump(bump, commit_bump(commit, package))
        if bump is BumpType.MAJOR:
            break
    if bump is BumpType.NONE:
        return NO_BUMP
    return with_prerelease(BumpRule(bump), prerelease_label)


_NAMED_RULES: dict[str, BumpType] = {
    'major': BumpType.MAJOR,
    'minor': BumpType.MINOR,
    'patch': BumpType.PATCH,
    'release': BumpType.RELEASE,
}


def parse_rule(text: str, *, label: str = '') -> BumpRule:
    """Build a rule from a command-line value.

    Accepts ``major``, ``minor``, ``patch``, ``release``, ``pre`` (a
    prerelease of the next patch, needs ``label``) or an exact version.

    Raises:
        BumpKitError: If ``text`` is none of the above.
    """
    value = text.strip().lower()
    if value in _NAMED_RULES:
        return with_prerelease(BumpRule(_NAMED_RULES[value]), label)
    if value == 'pre':
        if not label:
            raise BumpKitError(
                code=E.CONFIG_INVALID_VALUE,
                message="The 'pre' rule needs a prerelease label.",
                hint='Pass --prerelease-label or set BUMPKIT_PRERELEASE_LABEL.',
            )
        return BumpRule(BumpType.PATCH, prerelease_label=label)
    try:
        version = parse_version(text)
    except BumpKitError as exc:
        raise BumpKitError(
            code=E.CONFIG_INVALID_VALUE,
            message=f'Unknown bump rule: {text!r}',
            hint="Use 'major', 'minor', 'patch', 'pre', 'release' or a version like 1.2.3.",
        ) from exc
    return BumpRule(BumpType.EXACT, version=version)


__all__ = [
    'BumpRule',
    'commit_bump',
    'parse_rule',
    'select_rule',
    'with_prerelease',
]
