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

"""Version tags: the boundaries between releases.

A single-package repository tags releases ``v{version}``; in a
multi-package repository each package gets ``{name}/v{version}``.
Only stable tags bound the commit range of the next release, so a run
of prereleases keeps collecting every commit since the last stable one.

Usage::

    from bumpkit.tags import format_tag, latest_stable_tag

    assert format_tag('1.2.0', package_name='cli') == 'cli/v1.2.0'
    tag = latest_stable_tag(['cli/v1.1.0', 'cli/v1.2.0-rc.0', 'lib/v3.0.0'], 'cli')
    assert tag.ref == 'cli/v1.1.0'
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from bumpkit.errors import BumpKitError
from bumpkit.semver import SemanticVersion, parse_version

SINGLE_PACKAGE_TAG_FORMAT = 'v{version}'
MULTI_PACKAGE_TAG_FORMAT = '{name}/v{version}'


@dataclass(frozen=True)
class VersionTag:
    """A tag that marks a released version.

    Attributes:
        package_name: Owning package, or ``None`` in single-package mode.
        version: The released version.
        ref: The tag name as stored in the repository.
    """

    package_name: str | None
    version: SemanticVersion
    ref: str


def tag_prefix(package_name: str | None) -> str:
    """Return the part of a tag in front of the version.

    >>> tag_prefix(None)
    'v'
    >>> tag_prefix('cli')
    'cli/v'
    """
    if package_name is None:
        return SINGLE_PACKAGE_TAG_FORMAT.format(version='')
    return MULTI_PACKAGE_TAG_FORMAT.format(name=package_name, version='')


def format_tag(version: SemanticVersion | str, *, package_name: str | None = None) -> str:
    """Return the tag for ``version``.

    >>> format_tag('0.5.0')
    'v0.5.0'
    >>> format_tag('0.5.0', package_name='core')
    'core/v0.5.0'
    """
    return f'{tag_prefix(package_name)}{version}'


def parse_tag(tag: str, package_name: str | None = None) -> VersionTag | None:
    """Parse ``tag`` as a version tag of ``package_name``.

    Returns:
        The :class:`VersionTag`, or ``None`` if the tag belongs to another
        package or its suffix is not a semantic version.

    >>> parse_tag('core/v1.0.0', 'core').version
    SemanticVersion(major=1, minor=0, patch=0, pre=None)
    >>> parse_tag('v1.0.0', 'core') is None
    True
    """
    prefix = tag_prefix(package_name)
    if not tag.startswith(prefix):
        return None
    try:
        version = parse_version(tag[len(prefix) :])
    except BumpKitError:
        return None
    return VersionTag(package_name=package_name, version=version, ref=tag)


def _version_tags(tags: Iterable[str], package_name: str | None) -> list[VersionTag]:
    return [parsed for tag in tags if (parsed := parse_tag(tag, package_name)) is not None]


def latest_stable_tag(tags: Iterable[str], package_name: str | None = None) -> VersionTag | None:
    """Return the highest stable version tag of ``package_name``, if any."""
    stable = [tag for tag in _version_tags(tags, package_name) if not tag.version.is_prerelease]
    if not stable:
        return None
    return max(stable, key=lambda tag: tag.version)


def latest_tag(tags: Iterable[str], package_name: str | None = None) -> VersionTag | None:
    """Return the highest version tag of ``package_name``, prereleases included.

    This is the current version of a package whose files do not declare
    one (``go.mod``).
    """
    candidates = _version_tags(tags, package_name)
    if not candidates:
        return None
    return max(candidates, key=lambda tag: tag.version)


__all__ = [
    'MULTI_PACKAGE_TAG_FORMAT',
    'SINGLE_PACKAGE_TAG_FORMAT',
    'VersionTag',
    'format_tag',
    'latest_stable_tag',
    'latest_tag',
    'parse_tag',
    'tag_prefix',
]
