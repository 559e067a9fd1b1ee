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

"""Tests for bumpkit.rules."""

from __future__ import annotations

import pytest
from bumpkit.commit_parsing import BumpType, parse_commit
from bumpkit.errors import BumpKitError, E
from bumpkit.package import ExtraSection, Package
from bumpkit.rules import commit_bump, parse_rule, select_rule, with_prerelease
from bumpkit.semver import BumpRule, parse_version

PKG = Package(name=None, versioned_files=('pyproject.toml',))
SECURITY_PKG = Package(
    name=None,
    versioned_files=('pyproject.toml',),
    extra_sections=(ExtraSection(footer_key='Security', heading='Security'),),
)


def _commits(*messages: str) -> list:
    return [parse_commit(m) for m in messages]


class TestSelectRule:
    """Tests for select_rule."""

    def test_feat_is_minor(self) -> None:
        """Test feat is minor."""
        assert select_rule(_commits('feat: add X'), PKG) == BumpRule(BumpType.MINOR)

    def test_fix_is_patch(self) -> None:
        """Test fix is patch."""
        assert select_rule(_commits('fix: a'), PKG) == BumpRule(BumpType.PATCH)

    def test_any_breaking_is_major(self) -> None:
        """Test any breaking is major."""
        assert select_rule(_commits('fix: a', 'fix!: b'), PKG) == BumpRule(BumpType.MAJOR)

    def test_breaking_footer_on_chore_is_major(self) -> None:
        """Test breaking footer on chore is major."""
        assert select_rule(_commits('chore: x\n\nBREAKING CHANGE: y'), PKG).bump is BumpType.MAJOR

    def test_feat_beats_fix(self) -> None:
        """Test feat beats fix."""
        assert select_rule(_commits('fix: a', 'feat: b', 'fix: c'), PKG).bump is BumpType.MINOR

    def test_no_commits_is_none(self) -> None:
        """Test no commits is none."""
        assert select_rule([], PKG).bump is BumpType.NONE

    def test_chores_are_none(self) -> None:
        """Test chores are none."""
        assert select_rule(_commits('chore: deps', 'docs: typo', 'Merge branch x'), PKG).bump is BumpType.NONE

    def test_changelog_note_is_patch(self) -> None:
        """A note footer contributes a bullet, so it releases a patch."""
        commits = _commits('chore: deps\n\nChangelog-Note: Upgraded the parser.')
        assert select_rule(commits, PKG).bump is BumpType.PATCH

    def test_extra_section_footer_is_patch(self) -> None:
        """Test extra section footer is patch."""
        commits = _commits('chore: deps\n\nSecurity: Fixed CVE-2026-0001.')
        assert select_rule(commits, SECURITY_PKG).bump is BumpType.PATCH
        assert select_rule(commits, PKG).bump is BumpType.NONE

    def test_prerelease_label_wraps(self) -> None:
        """Test prerelease label wraps."""
        rule = select_rule(_commits('feat: a'), PKG, prerelease_label='rc')
        assert rule == BumpRule(BumpType.MINOR, prerelease_label='rc')

    def test_prerelease_label_does_not_wrap_none(self) -> None:
        """Test prerelease label does not wrap none."""
        assert select_rule(_commits('chore: a'), PKG, prerelease_label='rc') == BumpRule(BumpType.NONE)

    def test_override_wins(self) -> None:
        """Test override wins."""
        override = BumpRule(BumpType.EXACT, version=parse_version('5.0.0'))
        assert select_rule(_commits('feat!: a'), PKG, override=override) == override

    def test_override_wins_without_commits(self) -> None:
        """Test override wins without commits."""
        override = BumpRule(BumpType.PATCH)
        assert select_rule([], PKG, override=override, prerelease_label='beta') == BumpRule(
            BumpType.PATCH,
            prerelease_label='beta',
        )


class TestCommitBump:
    """Tests for per-commit bumps."""

    @pytest.mark.parametrize(
        ('message', 'expected'),
        [
            ('feat: a', BumpType.MINOR),
            ('fix: a', BumpType.PATCH),
            ('feat!: a', BumpType.MAJOR),
            ('refactor: a', BumpType.NONE),
            ('perf: a', BumpType.NONE),
        ],
    )
    def test_commit_bump(self, message: str, expected: BumpType) -> None:
        """Test commit bump."""
        assert commit_bump(parse_commit(message), PKG) is expected


class TestWithPrerelease:
    """Tests for with_prerelease."""

    def test_leaves_release_and_exact_alone(self) -> None:
        """Test leaves release and exact alone."""
        release = BumpRule(BumpType.RELEASE)
        exact = BumpRule(BumpType.EXACT, version=parse_version('1.0.0'))
        assert with_prerelease(release, 'rc') is release
        assert with_prerelease(exact, 'rc') is exact

    def test_empty_label(self) -> None:
        """Test empty label."""
        assert with_prerelease(BumpRule(BumpType.MINOR), '') == BumpRule(BumpType.MINOR)


class TestParseRule:
    """Tests for parse_rule."""

    @pytest.mark.parametrize(
        ('text', 'bump'),
        [
            ('major', BumpType.MAJOR),
            ('Minor', BumpType.MINOR),
            ('patch', BumpType.PATCH),
            ('release', BumpType.RELEASE),
        ],
    )
    def test_named(self, text: str, bump: BumpType) -> None:
        """Test named."""
        assert parse_rule(text).bump is bump

    def test_pre_needs_label(self) -> None:
        """Test pre needs label."""
        with pytest.raises(BumpKitError) as exc_info:
            parse_rule('pre')
        assert exc_info.value.code == E.CONFIG_INVALID_VALUE

    def test_pre_with_label(self) -> None:
        """Test pre with label."""
        assert parse_rule('pre', label='rc') == BumpRule(BumpType.PATCH, prerelease_label='rc')

    def test_named_with_label(self) -> None:
        """Test named with label."""
        assert parse_rule('minor', label='beta') == BumpRule(BumpType.MINOR, prerelease_label='beta')

    def test_exact_version(self) -> None:
        """Test exact version."""
        assert parse_rule('2.1.0') == BumpRule(BumpType.EXACT, version=parse_version('2.1.0'))

    def test_garbage(self) -> None:
        """Test garbage."""
        with pytest.raises(BumpKitError) as exc_info:
            parse_rule('sideways')
        assert exc_info.value.code == E.CONFIG_INVALID_VALUE
