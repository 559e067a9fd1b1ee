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

"""Tests for bumpkit.routing."""

from __future__ import annotations

from bumpkit.commit_parsing import parse_commit
from bumpkit.package import Package
from bumpkit.routing import applicable_packages, applies_to, commits_for_package, consider_scopes

CLI = Package(name='cli', versioned_files=('cli/Cargo.toml',), scopes=frozenset({'cli'}))
LIB = Package(name='lib', versioned_files=('lib/Cargo.toml',), scopes=frozenset({'lib', 'core'}))
DOCS = Package(name='docs', versioned_files=('docs/package.json',))
PLAIN_A = Package(name='a', versioned_files=('a/pyproject.toml',))
PLAIN_B = Package(name='b', versioned_files=('b/pyproject.toml',))


def _names(packages: list[Package]) -> list[str | None]:
    return [p.name for p in packages]


class TestConsiderScopes:
    """Tests for the global scope switch."""

    def test_off_when_no_package_has_scopes(self) -> None:
        """Test off when no package has scopes."""
        assert consider_scopes([PLAIN_A, PLAIN_B]) is False

    def test_on_when_any_package_has_scopes(self) -> None:
        """Test on when any package has scopes."""
        assert consider_scopes([PLAIN_A, CLI]) is True

    def test_empty_scope_list_counts(self) -> None:
        """An empty scopes list still switches scoping on."""
        assert consider_scopes([Package(name='x', versioned_files=('x.py',), scopes=frozenset())]) is True


class TestApplicablePackages:
    """Tests for routing a single commit."""

    def test_scoped_commit_reaches_only_matching_package(self) -> None:
        """Test scoped commit reaches only matching package."""
        commit = parse_commit('feat(cli): add flag')
        assert _names(applicable_packages(commit, [CLI, LIB])) == ['cli']

    def test_unscoped_commit_reaches_all(self) -> None:
        """Test unscoped commit reaches all."""
        commit = parse_commit('fix: shared bug')
        assert _names(applicable_packages(commit, [CLI, LIB, DOCS])) == ['cli', 'lib', 'docs']

    def test_package_with_several_scopes(self) -> None:
        """Test package with several scopes."""
        commit = parse_commit('fix(core): x')
        assert _names(applicable_packages(commit, [CLI, LIB])) == ['lib']

    def test_unknown_scope_reaches_nobody(self) -> None:
        """Test unknown scope reaches nobody."""
        commit = parse_commit('feat(api): thing')
        assert applicable_packages(commit, [CLI, LIB, DOCS]) == []

    def test_unscoped_package_rejects_scoped_commits_once_scoping_is_on(self) -> None:
        """Scoping is decided globally, not per package."""
        commit = parse_commit('feat(cli): add flag')
        assert _names(applicable_packages(commit, [CLI, DOCS])) == ['cli']

    def test_scopes_ignored_when_no_package_defines_them(self) -> None:
        """Test scopes ignored when no package defines them."""
        commit = parse_commit('feat(anything): x')
        assert _names(applicable_packages(commit, [PLAIN_A, PLAIN_B])) == ['a', 'b']

    def test_non_conventional_commit_is_unscoped(self) -> None:
        """Test non conventional commit is unscoped."""
        commit = parse_commit('Update README')
        assert _names(applicable_packages(commit, [CLI, LIB])) == ['cli', 'lib']

    def test_explicit_scoped_flag(self) -> None:
        """A precomputed switch is used as given."""
        commit = parse_commit('feat(cli): add flag')
        assert applies_to(commit, DOCS, scoped=False) is True
        assert applies_to(commit, DOCS, scoped=True) is False


class TestCommitsForPackage:
    """Tests for filtering a whole history."""

    def test_scenario_c(self) -> None:
        """feat(cli) only reaches cli; an unscoped fix reaches both."""
        history = [parse_commit('feat(cli): new command'), parse_commit('fix: crash on start')]
        scoped = consider_scopes([CLI, LIB])
        cli_commits = commits_for_package(history, CLI, scoped=scoped)
        lib_commits = commits_for_package(history, LIB, scoped=scoped)
        assert [c.subject for c in cli_commits] == ['new command', 'crash on start']
        assert [c.subject for c in lib_commits] == ['crash on start']
