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

"""Tests for bumpkit.config."""

from __future__ import annotations

from pathlib import Path

import pytest
from bumpkit.commit_parsing import BumpType
from bumpkit.config import (
    CONFIG_FILENAME,
    PRERELEASE_LABEL_ENV,
    load_config,
    parse_config,
    parse_override_args,
    resolve_overrides,
    resolve_prerelease_label,
)
from bumpkit.errors import BumpKitError, E
from bumpkit.package import ExtraSection, Package
from bumpkit.semver import parse_version

SINGLE = """\
[package]
versioned_files = ["pyproject.toml", "src/demo/__init__.py"]
changelog = "CHANGELOG.md"
"""

MULTI = """\
[packages.cli]
versioned_files = ["cli/Cargo.toml"]
changelog = "cli/CHANGELOG.md"
scopes = ["cli"]

[packages.lib]
versioned_files = ["lib/pyproject.toml"]
notes_heading = "Notable Changes"
extra_changelog_sections = [
    { name = "Security", footers = ["Security", "CVE"] },
]
"""


def _config_error(text: str) -> BumpKitError:
    with pytest.raises(BumpKitError) as exc_info:
        parse_config(text)
    return exc_info.value


# ---------------------------------------------------------------------------
# parse_config
# ---------------------------------------------------------------------------


class TestParseConfig:
    """Tests for parse_config."""

    def test_single_package(self) -> None:
        """Test single package."""
        cfg = parse_config(SINGLE)
        assert cfg.multi_package is False
        assert cfg.package_names() == [None]
        (package,) = cfg.packages
        assert package.versioned_files == ('pyproject.toml', 'src/demo/__init__.py')
        assert package.changelog == 'CHANGELOG.md'
        assert package.scopes is None
        assert package.notes_heading == 'Notes'

    def test_multi_package(self) -> None:
        """Test multi package."""
        cfg = parse_config(MULTI)
        assert cfg.multi_package is True
        assert cfg.package_names() == ['cli', 'lib']
        cli, lib = cfg.packages
        assert cli.scopes == frozenset({'cli'})
        assert lib.changelog is None
        assert lib.notes_heading == 'Notable Changes'
        assert lib.extra_sections == (
            ExtraSection(footer_key='Security', heading='Security'),
            ExtraSection(footer_key='CVE', heading='Security'),
        )

    def test_single_footer_key(self) -> None:
        """Test single footer key."""
        cfg = parse_config(
            '[package]\nversioned_files = ["a.py"]\nextra_changelog_sections = [{ name = "Docs", footer = "Docs" }]\n'
        )
        assert cfg.packages[0].extra_sections == (ExtraSection(footer_key='Docs', heading='Docs'),)

    def test_typo_suggests_key(self) -> None:
        """Test typo suggests key."""
        err = _config_error('[package]\nversioned_file = ["a.py"]\n')
        assert err.code == E.CONFIG_INVALID_KEY
        assert "Did you mean 'versioned_files'?" in err.hint

    def test_package_key_at_top_level(self) -> None:
        """Test package key at top level."""
        err = _config_error('versioned_files = ["a.py"]\n')
        assert err.code == E.CONFIG_INVALID_KEY
        assert 'Move it under [package]' in err.hint

    def test_both_forms(self) -> None:
        """Test both forms."""
        err = _config_error(SINGLE + '\n[packages.x]\nversioned_files = ["x.py"]\n')
        assert err.code == E.CONFIG_INVALID_KEY

    def test_no_packages(self) -> None:
        """Test no packages."""
        assert _config_error('').code == E.CONFIG_NOT_FOUND

    def test_invalid_toml(self) -> None:
        """Test invalid toml."""
        assert _config_error('[package\n').code == E.CONFIG_NOT_FOUND

    def test_missing_versioned_files(self) -> None:
        """Test missing versioned files."""
        err = _config_error('[package]\nchangelog = "CHANGELOG.md"\n')
        assert err.code == E.CONFIG_MISSING_REQUIRED

    def test_wrong_type(self) -> None:
        """Test wrong type."""
        err = _config_error('[package]\nversioned_files = "pyproject.toml"\n')
        assert err.code == E.CONFIG_INVALID_VALUE
        assert "'versioned_files' must be list" in err.message

    def test_blank_list_item(self) -> None:
        """Test blank list item."""
        err = _config_error('[package]\nversioned_files = ["a.py", " "]\n')
        assert err.code == E.CONFIG_INVALID_VALUE

    def test_section_without_footers(self) -> None:
        """Test section without footers."""
        err = _config_error('[package]\nversioned_files = ["a.py"]\nextra_changelog_sections = [{ name = "X" }]\n')
        assert err.code == E.CONFIG_MISSING_REQUIRED

    def test_invalid_package_name(self) -> None:
        """Test invalid package name."""
        err = _config_error('[packages."my pkg"]\nversioned_files = ["a.py"]\n')
        assert err.code == E.CONFIG_INVALID_VALUE


class TestLoadConfig:
    """Tests for load_config."""

    def test_loads_from_root(self, tmp_path: Path) -> None:
        """Test loads from root."""
        (tmp_path / CONFIG_FILENAME).write_text(SINGLE, encoding='utf-8')
        cfg = load_config(tmp_path)
        assert cfg.config_path == tmp_path / CONFIG_FILENAME
        assert cfg.packages[0].changelog == 'CHANGELOG.md'

    def test_missing(self, tmp_path: Path) -> None:
        """Test missing."""
        with pytest.raises(BumpKitError) as exc_info:
            load_config(tmp_path)
        assert exc_info.value.code == E.CONFIG_NOT_FOUND


# ---------------------------------------------------------------------------
# Prerelease label
# ---------------------------------------------------------------------------


class TestPrereleaseLabel:
    """Tests for resolve_prerelease_label."""

    def test_cli_wins(self) -> None:
        """Test cli wins."""
        assert resolve_prerelease_label('rc', {PRERELEASE_LABEL_ENV: 'beta'}) == 'rc'

    def test_env_fallback(self) -> None:
        """Test env fallback."""
        assert resolve_prerelease_label(None, {PRERELEASE_LABEL_ENV: 'beta'}) == 'beta'

    def test_empty_cli_value_disables_env(self) -> None:
        """An explicit empty flag overrides the environment."""
        assert resolve_prerelease_label('', {PRERELEASE_LABEL_ENV: 'beta'}) == ''

    def test_neither(self) -> None:
        """Test neither."""
        assert resolve_prerelease_label(None, {}) == ''

    def test_reads_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test reads process environment."""
        monkeypatch.setenv(PRERELEASE_LABEL_ENV, 'alpha')
        assert resolve_prerelease_label(None) == 'alpha'

    @pytest.mark.parametrize('label', ['rc.1', 'r c', 'β'])
    def test_invalid(self, label: str) -> None:
        """Test invalid."""
        with pytest.raises(BumpKitError) as exc_info:
            resolve_prerelease_label(label, {})
        assert exc_info.value.code == E.CONFIG_INVALID_VALUE


# ---------------------------------------------------------------------------
# Overrides
# ---------------------------------------------------------------------------

CLI = Package(name='cli', versioned_files=('cli/Cargo.toml',))
LIB = Package(name='lib', versioned_files=('lib/pyproject.toml',))
ROOT = Package(name=None, versioned_files=('pyproject.toml',))


class TestOverrides:
    """Tests for override parsing and resolution."""

    def test_parse_override_args(self) -> None:
        """Test parse override args."""
        overrides = parse_override_args(['cli=2.0.0', '1.0.0'])
        assert [(o.package_name, o.version) for o in overrides] == [('cli', '2.0.0'), (None, '1.0.0')]

    def test_single_package_bare(self) -> None:
        """Test single package bare."""
        resolved = resolve_overrides(parse_override_args(['3.0.0']), [ROOT], multi_package=False)
        assert resolved.errors == {}
        rule = resolved.rules[None]
        assert rule.bump is BumpType.EXACT
        assert rule.version == parse_version('3.0.0')

    def test_multi_package_named(self) -> None:
        """Test multi package named."""
        resolved = resolve_overrides(parse_override_args(['lib=0.2.0']), [CLI, LIB], multi_package=True)
        assert list(resolved.rules) == ['lib']
        assert resolved.errors == {}

    def test_multi_package_bare_fails_everyone(self) -> None:
        """Test multi package bare fails everyone."""
        resolved = resolve_overrides(parse_override_args(['1.0.0']), [CLI, LIB], multi_package=True)
        assert resolved.rules == {}
        assert {name: err.code for name, err in resolved.errors.items()} == {
            'cli': E.CONFIG_UNQUALIFIED_OVERRIDE,
            'lib': E.CONFIG_UNQUALIFIED_OVERRIDE,
        }

    def test_unknown_package(self) -> None:
        """Test unknown package."""
        resolved = resolve_overrides(parse_override_args(['web=1.0.0']), [CLI, LIB], multi_package=True)
        assert resolved.errors['web'].code == E.CONFIG_UNKNOWN_PACKAGE
        assert 'cli, lib' in resolved.errors['web'].hint

    def test_invalid_version(self) -> None:
        """Test invalid version."""
        resolved = resolve_overrides(parse_override_args(['cli=next']), [CLI, LIB], multi_package=True)
        assert resolved.errors['cli'].code == E.CONFIG_INVALID_VALUE
        assert 'cli' not in resolved.rules
