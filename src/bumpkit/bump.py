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

r"""Read and rewrite versions in versioned files.

Every function here is text in, text out: callers read files through a
:class:`~bumpkit.backends.files.FileStore` and stage what comes back.
TOML files are edited with tomlkit so comments and formatting survive.

Supported files::

    file name          version location
    ─────────────────  ─────────────────────────────────────────────
    pyproject.toml     [project].version and/or [tool.poetry].version
    Cargo.toml         [package].version
    package.json       top-level "version"
    *.py               __version__ = '...'
    go.mod             none; the major lives in the module path (/vN)

Key Concepts (ELI5)::

    ┌─────────────────────┬────────────────────────────────────────────────┐
    │ Concept             │ ELI5 Explanation                               │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ VersionedFileKind   │ Which of the formats above a path is. Chosen  │
    │                     │ from the file name alone.                     │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ read_version        │ Pull the version out of one file's text.      │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ set_version         │ Return the file's text with the version       │
    │                     │ replaced and nothing else changed.            │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ package_version     │ Read every file of a package and insist they  │
    │                     │ all say the same thing.                       │
    └─────────────────────┴────────────────────────────────────────────────┘
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from enum import Enum
from pathlib import PurePosixPath
from typing import Any

import tomlkit
import tomlkit.exceptions

from bumpkit.errors import BumpKitError, E
from bumpkit.logging import get_logger
from bumpkit.package import Package
from bumpkit.semver import SemanticVersion, parse_version

logger = get_logger(__name__)

# Pattern for __version__ in Python files.
DEFAULT_VERSION_PATTERN: re.Pattern[str] = re.compile(
    r"^(__version__\s*=\s*['\"])([^'\"]+)(['\"])",
    re.MULTILINE,
)

_JSON_VERSION_PATTERN: re.Pattern[str] = re.compile(r'("version"\s*:\s*")([^"]*)(")')
_GO_MODULE_PATTERN: re.Pattern[str] = re.compile(r'^module[ \t]+(?P<path>\S+)', re.MULTILINE)
_GO_MAJOR_SUFFIX: re.Pattern[str] = re.compile(r'^v\d+$')


class VersionedFileKind(Enum):
    """Supported versioned file formats."""

    PYPROJECT = 'pyproject.toml'
    CARGO = 'Cargo.toml'
    PACKAGE_JSON = 'package.json'
    PYTHON_MODULE = '*.py'
    GO_MOD = 'go.mod'


def file_kind(path: str) -> VersionedFileKind:
    """Return the format of ``path``, judged by its file name.

    Raises:
        BumpKitError: If the file name is not a supported format.
    """
    name = PurePosixPath(path).name
    for kind in (
        VersionedFileKind.PYPROJECT,
        VersionedFileKind.CARGO,
        VersionedFileKind.PACKAGE_JSON,
        VersionedFileKind.GO_MOD,
    ):
        if name == kind.value:
            return kind
    if name.endswith('.py'):
        return VersionedFileKind.PYTHON_MODULE
    raise BumpKitError(
        code=E.CONFIG_UNKNOWN_VERSIONED_FILE,
        message=f'Unknown versioned file format: {path}',
        hint='Supported files: pyproject.toml, Cargo.toml, package.json, go.mod, and *.py modules with __version__.',
    )


def _invalid(path: str, detail: str) -> BumpKitError:
    return BumpKitError(
        code=E.VERSION_SOURCE_INVALID,
        message=f'Cannot read a version from {path}: {detail}',
        hint=f'Check that {path} declares a version where bumpkit expects it.',
    )


def _parse_toml(path: str, text: str) -> tomlkit.TOMLDocument:
    try:
        return tomlkit.parse(text)
    except tomlkit.exceptions.TOMLKitError as exc:
        raise _invalid(path, f'invalid TOML ({exc})') from exc


def _toml_version_tables(path: str, kind: VersionedFileKind, doc: tomlkit.TOMLDocument) -> list[Any]:
    """Return the tables holding a ``version`` key, in a stable order."""
    tables: list[Any] = []
    if kind is VersionedFileKind.CARGO:
        package = doc.get('package')
        if isinstance(package, dict) and 'version' in package:
            tables.append(package)
    else:
        project = doc.get('project')
        if isinstance(project, dict) and 'version' in project:
            tables.append(project)
        tool = doc.get('tool')
        poetry = tool.get('poetry') if isinstance(tool, dict) else None
        if isinstance(poetry, dict) and 'version' in poetry:
            tables.append(poetry)
    if not tables:
        where = '[package].version'
        if kind is VersionedFileKind.PYPROJECT:
            where = '[project].version or [tool.poetry].version'
        raise _invalid(path, f'no {where} key')
    for table in tables:
        if not isinstance(table['version'], str):
            raise _invalid(path, 'version is not a string (workspace-inherited versions are not supported)')
    return tables


def _to_version(path: str, raw: str) -> SemanticVersion:
    try:
        return parse_version(raw)
    except BumpKitError as exc:
        raise _invalid(path, f'{raw!r} is not a semantic version') from exc


def _raw_versions(path: str, text: str) -> list[str]:
    kind = file_kind(path)
    if kind is VersionedFileKind.GO_MOD:
        raise _invalid(path, 'go.mod records no version; bumpkit reads it from tags')
    if kind in (VersionedFileKind.PYPROJECT, VersionedFileKind.CARGO):
        doc = _parse_toml(path, text)
        return [str(table['version']) for table in _toml_version_tables(path, kind, doc)]
    if kind is VersionedFileKind.PACKAGE_JSON:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise _invalid(path, f'invalid JSON ({exc})') from exc
        if not isinstance(data, dict) or not isinstance(data.get('version'), str):
            raise _invalid(path, 'no top-level "version" string')
        return [data['version']]
    match = DEFAULT_VERSION_PATTERN.search(text)
    if not match:
        raise _invalid(path, 'no __version__ assignment')
    return [match.group(2)]


def read_version(path: str, text: str) -> SemanticVersion:
    """Return the version declared in one versioned file.

    Args:
        path: Path of the file; selects the format.
        text: File contents.

    Raises:
        BumpKitError: If the format is unknown, no version can be found,
            or a pyproject declares two different versions.
    """
    raw = _raw_versions(path, text)
    versions = {_to_version(path, value) for value in raw}
    if len(versions) > 1:
        raise BumpKitError(
            code=E.VERSION_INCONSISTENT,
            message=f'{path} declares more than one version: {", ".join(raw)}',
            hint='Keep [project].version and [tool.poetry].version in sync.',
        )
    return versions.pop()


def declares_version(path: str) -> bool:
    """Whether the file at ``path`` holds a full version string.

    ``go.mod`` does not: Go takes the version from the tag and the file
    only carries the major version as a ``/vN`` module path suffix.
    """
    return file_kind(path) is not VersionedFileKind.GO_MOD


def _set_go_major(path: str, text: str, version: SemanticVersion) -> str:
    """Point the ``module`` path of a go.mod at the major of ``version``.

    Majors 0 and 1 have no suffix and leave the file untouched.
    """
    if version.major < 2:
        return text
    match = _GO_MODULE_PATTERN.search(text)
    if match is None:
        raise _invalid(path, 'no module line')
    module = match.group('path')
    parent, _, last = module.rpartition('/')
    suffix = f'v{version.major}'
    if last == suffix:
        return text
    new_module = f'{parent}/{suffix}' if parent and _GO_MAJOR_SUFFIX.match(last) else f'{module}/{suffix}'
    logger.debug('go_module_path_updated', path=path, old=module, new=new_module)
    return text[: match.start('path')] + new_module + text[match.end('path') :]


def set_version(path: str, text: str, version: SemanticVersion | str) -> str:
    """Return ``text`` with its declared version replaced.

    A go.mod only changes when the major moves past 1; see
    :func:`declares_version`.

    Args:
        path: Path of the file; selects the format.
        text: Current file contents.
        version: The new version.

    Raises:
        BumpKitError: If the current contents have no readable version.
    """
    new_version = str(version)
    kind = file_kind(path)

    if kind is VersionedFileKind.GO_MOD:
        parsed = version if isinstance(version, SemanticVersion) else parse_version(new_version)
        return _set_go_major(path, text, parsed)

    if kind in (VersionedFileKind.PYPROJECT, VersionedFileKind.CARGO):
        doc = _parse_toml(path, text)
        for table in _toml_version_tables(path, kind, doc):
            table['version'] = new_version
        return tomlkit.dumps(doc)

    if kind is VersionedFileKind.PACKAGE_JSON:
        _raw_versions(path, text)
        updated = _JSON_VERSION_PATTERN.sub(rf'\g<1>{new_version}\g<3>', text, count=1)
        if json.loads(updated).get('version') == new_version:
            return updated
        # The first "version" key was nested; rewrite the whole document.
        data = json.loads(text)
        data['version'] = new_version
        return json.dumps(data, indent=2, ensure_ascii=False) + '\n'

    if not DEFAULT_VERSION_PATTERN.search(text):
        raise _invalid(path, 'no __version__ assignment')
    return DEFAULT_VERSION_PATTERN.sub(rf'\g<1>{new_version}\g<3>', text, count=1)


def package_version(
    package: Package,
    contents: Mapping[str, str | None],
    *,
    tagged: SemanticVersion | None = None,
) -> SemanticVersion:
    """Return the single version shared by all of ``package``'s versioned files.

    Files that hold no full version (``go.mod``) are only checked for
    existence. When no file declares a version, ``tagged`` (the newest
    version tag of the package) is the current version, or ``0.0.0``
    before the first tag.

    Args:
        package: The package whose ``versioned_files`` to read.
        contents: File contents by path; ``None`` for missing files.
        tagged: Version of the package's newest tag, prereleases included.

    Raises:
        BumpKitError: If a file is missing or unreadable, or the files
            disagree.
    """
    if not package.versioned_files:
        raise BumpKitError(
            code=E.CONFIG_MISSING_REQUIRED,
            message=f'Package {package.label} has no versioned_files.',
            hint='List at least one file that declares the version.',
        )

    found: dict[str, SemanticVersion] = {}
    for path in package.versioned_files:
        text = contents.get(path)
        if text is None:
            raise BumpKitError(
                code=E.VERSION_SOURCE_MISSING,
                message=f'Versioned file {path} of package {package.label} does not exist.',
                hint='Fix the path in versioned_files or create the file.',
            )
        if declares_version(path):
            found[path] = read_version(path, text)

    if not found:
        version = tagged if tagged is not None else SemanticVersion(0, 0, 0)
        logger.debug('package_version_from_tags', package=package.label, version=str(version))
        return version

    distinct = set(found.values())
    if len(distinct) > 1:
        listing = ', '.join(f'{path}={version}' for path, version in found.items())
        raise BumpKitError(
            code=E.VERSION_INCONSISTENT,
            message=f'Versioned files of package {package.label} disagree: {listing}',
            hint='Set every versioned file to the same version before releasing.',
        )
    version = distinct.pop()
    logger.debug('package_version_read', package=package.label, version=str(version), files=len(found))
    return version


__all__ = [
    'DEFAULT_VERSION_PATTERN',
    'VersionedFileKind',
    'declares_version',
    'file_kind',
    'package_version',
    'read_version',
    'set_version',
]
