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

"""Configuration reader for bumpkit.

Reads ``bumpkit.toml`` from the repository root and returns a validated
:class:`BumpKitConfig`. A repository is either single-package (one
``[package]`` table) or multi-package (``[packages.<name>]`` tables),
never both.

Key Concepts (ELI5)::

    ┌─────────────────────────┬────────────────────────────────────────────┐
    │ Concept                 │ ELI5 Explanation                           │
    ├─────────────────────────┼────────────────────────────────────────────┤
    │ BumpKitConfig           │ The list of packages plus where they came │
    │                         │ from. Frozen, ready to use.               │
    ├─────────────────────────┼────────────────────────────────────────────┤
    │ Fuzzy key matching      │ If you typo a config key, we suggest the  │
    │                         │ closest valid key. Like "did you mean?"   │
    ├─────────────────────────┼────────────────────────────────────────────┤
    │ VersionOverride         │ A "--override-version" value, split into  │
    │                         │ an optional package name and a version.   │
    ├─────────────────────────┼────────────────────────────────────────────┤
    │ Prerelease label        │ From --prerelease-label, else from the    │
    │                         │ BUMPKIT_PRERELEASE_LABEL environment var. │
    └─────────────────────────┴────────────────────────────────────────────┘

Supported keys::

    [package]                                  # or [packages.<name>]
    versioned_files = ["pyproject.toml"]       # required
    changelog       = "CHANGELOG.md"           # optional
    scopes          = ["core"]                 # optional
    notes_heading   = "Notes"                  # optional
    extra_changelog_sections = [
        { name = "Security", footers = ["Security"] },
    ]

Usage::

    from bumpkit.config import load_config

    cfg = load_config(Path('.'))
    for package in cfg.packages:
        print(package.label, package.versioned_files)
"""

from __future__ import annotations

import difflib
import os
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomlkit
import tomlkit.exceptions

from bumpkit.commit_parsing import BumpType
from bumpkit.errors import BumpKitError, E
from bumpkit.logging import get_logger
from bumpkit.package import ExtraSection, Package
from bumpkit.semver import BumpRule, parse_version

logger = get_logger(__name__)

CONFIG_FILENAME = 'bumpkit.toml'
PRERELEASE_LABEL_ENV = 'BUMPKIT_PRERELEASE_LABEL'

VALID_TOP_LEVEL_KEYS: frozenset[str] = frozenset({'package', 'packages'})

VALID_PACKAGE_KEYS: frozenset[str] = frozenset({
    'changelog',
    'extra_changelog_sections',
    'notes_heading',
    'scopes',
    'versioned_files',
})

VALID_SECTION_KEYS: frozenset[str] = frozenset({'footer', 'footers', 'name'})

_PACKAGE_TYPE_MAP: dict[str, type | tuple[type, ...]] = {
    'changelog': str,
    'extra_changelog_sections': list,
    'notes_heading': str,
    'scopes': list,
    'versioned_files': list,
}

_LABEL_RE = re.compile(r'^[0-9A-Za-z-]+$')
_NAME_RE = re.compile(r'^[^\s=]+$')


@dataclass(frozen=True)
class BumpKitConfig:
    """Validated bumpkit configuration.

    Attributes:
        packages: Configured packages in file order.
        multi_package: ``True`` for ``[packages.<name>]`` configs.
        config_path: Where the configuration was read from.
    """

    packages: tuple[Package, ...]
    multi_package: bool = False
    config_path: Path | None = None

    def package_names(self) -> list[str | None]:
        """Return package names in configuration order."""
        return [package.name for package in self.packages]


def _unknown_key_error(key: str, valid: frozenset[str], context: str) -> BumpKitError:
    suggestion = difflib.get_close_matches(key, valid, n=1, cutoff=0.6)
    if suggestion:
        hint = f"Did you mean '{suggestion[0]}'?"
    else:
        hint = f'Valid keys for {context}: {", ".join(sorted(valid))}.'
    return BumpKitError(
        code=E.CONFIG_INVALID_KEY,
        message=f"Unknown key '{key}' in {context}",
        hint=hint,
    )


def _validate_value_type(
    key: str,
    value: Any,  # noqa: ANN401 - dynamic config values
    type_map: dict[str, type | tuple[type, ...]],
    *,
    context: str,
) -> None:
    """Raise if a config value has the wrong type."""
    expected = type_map.get(key)
    if expected is None:
        return
    if not isinstance(value, expected):
        type_name = expected.__name__ if isinstance(expected, type) else str(expected)
        raise BumpKitError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"'{key}' must be {type_name}, got {type(value).__name__}",
            hint=f'Check the value of {key} in {context}.',
        )


def _validate_string_list(key: str, items: list[object], context: str) -> list[str]:
    """Raise if any item in a list is not a non-empty string."""
    result: list[str] = []
    for item in items:
        if not isinstance(item, str) or not item.strip():
            raise BumpKitError(
                code=E.CONFIG_INVALID_VALUE,
                message=f"'{key}' items must be non-empty strings, got {item!r}",
                hint=f'Check the {key} entries in {context}.',
            )
        result.append(item.strip())
    return result


def _parse_extra_sections(items: list[object], context: str) -> tuple[ExtraSection, ...]:
    sections: list[ExtraSection] = []
    for item in items:
        if not isinstance(item, dict):
            raise BumpKitError(
                code=E.CONFIG_INVALID_VALUE,
                message=f'extra_changelog_sections entries must be tables, got {item!r}',
                hint=f'Use {{ name = "Security", footers = ["Security"] }} in {context}.',
            )
        for key in item:
            if key not in VALID_SECTION_KEYS:
                raise _unknown_key_error(key, VALID_SECTION_KEYS, f'{context}.extra_changelog_sections')
        name = item.get('name')
        if not isinstance(name, str) or not name.strip():
            raise BumpKitError(
                code=E.CONFIG_MISSING_REQUIRED,
                message=f'extra_changelog_sections entry in {context} has no name',
                hint='Every extra section needs a name, used as its heading.',
            )
        footers: list[object] = []
        if 'footer' in item:
            footers.append(item['footer'])
        raw_footers = item.get('footers', [])
        if not isinstance(raw_footers, list):
            raise BumpKitError(
                code=E.CONFIG_INVALID_VALUE,
                message=f"'footers' must be list, got {type(raw_footers).__name__}",
                hint=f'Check extra_changelog_sections in {context}.',
            )
        footers.extend(raw_footers)
        if not footers:
            raise BumpKitError(
                code=E.CONFIG_MISSING_REQUIRED,
                message=f"extra_changelog_sections entry '{name}' in {context} lists no footers",
                hint='Add footers = ["<Footer-Token>"] to the entry.',
            )
        for footer in _validate_string_list('footers', footers, context):
            sections.append(ExtraSection(footer_key=footer, heading=name.strip()))
    return tuple(sections)


def _parse_package(name: str | None, raw: Mapping[str, Any], context: str) -> Package:  # noqa: ANN401
    """Parse and validate one package table."""
    if not isinstance(raw, Mapping):
        raise BumpKitError(
            code=E.CONFIG_INVALID_VALUE,
            message=f'{context} must be a table',
            hint=f'Write {context} as a TOML table with versioned_files = [...].',
        )
    for key in raw:
        if key not in VALID_PACKAGE_KEYS:
            raise _unknown_key_error(key, VALID_PACKAGE_KEYS, context)
    for key, value in raw.items():
        _validate_value_type(key, value, _PACKAGE_TYPE_MAP, context=context)

    versioned_files = _validate_string_list('versioned_files', raw.get('versioned_files', []), context)
    if not versioned_files:
        raise BumpKitError(
            code=E.CONFIG_MISSING_REQUIRED,
            message=f'{context} has no versioned_files',
            hint='List at least one file that declares the version, e.g. versioned_files = ["pyproject.toml"].',
        )

    scopes: frozenset[str] | None = None
    if 'scopes' in raw:
        scopes = frozenset(_validate_string_list('scopes', raw['scopes'], context))

    extra_sections: tuple[ExtraSection, ...] = ()
    if 'extra_changelog_sections' in raw:
        extra_sections = _parse_extra_sections(raw['extra_changelog_sections'], context)

    return Package(
        name=name,
        versioned_files=tuple(versioned_files),
        changelog=raw.get('changelog') or None,
        scopes=scopes,
        extra_sections=extra_sections,
        notes_heading=raw.get('notes_heading', 'Notes'),
    )


def parse_config(text: str, *, source: str = CONFIG_FILENAME) -> BumpKitConfig:
    """Validate configuration text.

    Args:
        text: TOML text.
        source: Name used in error messages.

    Raises:
        BumpKitError: If the text is not valid TOML or not a valid config.
    """
    try:
        raw: dict[str, Any] = tomlkit.parse(text).unwrap()  # noqa: ANN401
    except tomlkit.exceptions.TOMLKitError as exc:
        raise BumpKitError(
            code=E.CONFIG_NOT_FOUND,
            message=f'Failed to parse {source}: {exc}',
        ) from exc

    for key in raw:
        if key not in VALID_TOP_LEVEL_KEYS:
            if key in VALID_PACKAGE_KEYS:
                raise BumpKitError(
                    code=E.CONFIG_INVALID_KEY,
                    message=f"Unknown key '{key}' in {source}",
                    hint=f"'{key}' is a package key. Move it under [package] or [packages.<name>].",
                )
            raise _unknown_key_error(key, VALID_TOP_LEVEL_KEYS, source)

    if 'package' in raw and 'packages' in raw:
        raise BumpKitError(
            code=E.CONFIG_INVALID_KEY,
            message=f'{source} defines both [package] and [packages]',
            hint='Use [package] for a single package or [packages.<name>] for several, not both.',
        )

    if 'package' in raw:
        package = _parse_package(None, raw['package'], '[package]')
        return BumpKitConfig(packages=(package,), multi_package=False)

    tables = raw.get('packages')
    if not isinstance(tables, dict) or not tables:
        raise BumpKitError(
            code=E.CONFIG_NOT_FOUND,
            message=f'{source} defines no packages',
            hint='Add a [package] section, or one [packages.<name>] section per package.',
        )
    packages: list[Package] = []
    for name, table in tables.items():
        if not _NAME_RE.match(name):
            raise BumpKitError(
                code=E.CONFIG_INVALID_VALUE,
                message=f"Invalid package name '{name}'",
                hint="Package names cannot contain whitespace or '='.",
            )
        packages.append(_parse_package(name, table, f'[packages.{name}]'))
    return BumpKitConfig(packages=tuple(packages), multi_package=True)


def load_config(root: Path) -> BumpKitConfig:
    """Load and validate ``bumpkit.toml`` from ``root``.

    Raises:
        BumpKitError: If the file is missing, unreadable, or invalid.
    """
    config_path = root / CONFIG_FILENAME
    if not config_path.is_file():
        raise BumpKitError(
            code=E.CONFIG_NOT_FOUND,
            message=f'No {CONFIG_FILENAME} found in {root}',
            hint='Create a bumpkit.toml with a [package] section listing versioned_files.',
        )
    try:
        text = config_path.read_text(encoding='utf-8')
    except OSError as exc:
        raise BumpKitError(
            code=E.CONFIG_NOT_FOUND,
            message=f'Failed to read {config_path}: {exc}',
        ) from exc

    config = parse_config(text, source=str(config_path))
    logger.debug('config_loaded', path=str(config_path), packages=len(config.packages))
    return BumpKitConfig(
        packages=config.packages,
        multi_package=config.multi_package,
        config_path=config_path,
    )


def resolve_prerelease_label(cli_value: str | None, env: Mapping[str, str] | None = None) -> str:
    """Return the prerelease label, preferring the command-line value.

    Args:
        cli_value: Value of ``--prerelease-label``, or ``None`` if absent.
        env: Environment to consult; defaults to :data:`os.environ`.

    Raises:
        BumpKitError: If the chosen label is not a valid semver identifier.
    """
    environ = os.environ if env is None else env
    label = cli_value if cli_value is not None else environ.get(PRERELEASE_LABEL_ENV, '')
    label = label.strip()
    if label and not _LABEL_RE.match(label):
        raise BumpKitError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"Invalid prerelease label '{label}'",
            hint='Labels may only contain ASCII letters, digits and hyphens, e.g. rc or beta.',
        )
    return label


@dataclass(frozen=True)
class VersionOverride:
    """One ``--override-version`` value.

    Attributes:
        package_name: Target package, or ``None`` for a bare version.
        version: The raw version text.
    """

    package_name: str | None
    version: str


def parse_override_args(values: Sequence[str]) -> list[VersionOverride]:
    """Split ``NAME=VERSION`` / ``VERSION`` command-line values."""
    overrides: list[VersionOverride] = []
    for value in values:
        name, sep, version = value.partition('=')
        if sep:
            overrides.append(VersionOverride(package_name=name.strip(), version=version.strip()))
        else:
            overrides.append(VersionOverride(package_name=None, version=value.strip()))
    return overrides


@dataclass(frozen=True)
class ResolvedOverrides:
    """Overrides matched to packages.

    Attributes:
        rules: Exact-version rules keyed by package name.
        errors: Failures keyed by the package they belong to. Overrides
            naming an unknown package are keyed by that unknown name.
    """

    rules: dict[str | None, BumpRule]
    errors: dict[str | None, BumpKitError]


def resolve_overrides(
    overrides: Sequence[VersionOverride],
    packages: Sequence[Package],
    *,
    multi_package: bool,
) -> ResolvedOverrides:
    """Match overrides to packages.

    In single-package mode a bare version applies to the one package. In
    multi-package mode a bare version cannot be attributed and fails every
    package; a named override for an unconfigured package is reported
    under that name.
    """
    known = {package.name for package in packages}
    rules: dict[str | None, BumpRule] = {}
    errors: dict[str | None, BumpKitError] = {}

    for override in overrides:
        if override.package_name is None and multi_package:
            for package in packages:
                errors.setdefault(
                    package.name,
                    BumpKitError(
                        code=E.CONFIG_UNQUALIFIED_OVERRIDE,
                        message=f"Override '{override.version}' does not name a package",
                        hint=f"Use '--override-version {package.name}={override.version}'.",
                    ),
                )
            continue

        target = override.package_name
        if target not in known:
            errors[target] = BumpKitError(
                code=E.CONFIG_UNKNOWN_PACKAGE,
                message=f"Override names unknown package '{target}'",
                hint=f'Configured packages: {", ".join(sorted(str(n) for n in known))}.',
            )
            continue

        try:
            version = parse_version(override.version)
        except BumpKitError as exc:
            errors[target] = BumpKitError(
                code=E.CONFIG_INVALID_VALUE,
                message=f"Override for {target or 'the package'} is not a version: '{override.version}'",
                hint=exc.hint,
            )
            continue
        rules[target] = BumpRule(BumpType.EXACT, version=version)

    return ResolvedOverrides(rules=rules, errors=errors)


__all__ = [
    'CONFIG_FILENAME',
    'PRERELEASE_LABEL_ENV',
    'VALID_PACKAGE_KEYS',
    'VALID_TOP_LEVEL_KEYS',
    'BumpKitConfig',
    'ResolvedOverrides',
    'VersionOverride',
    'load_config',
    'parse_config',
    'parse_override_args',
    'resolve_overrides',
    'resolve_prerelease_label',
]
