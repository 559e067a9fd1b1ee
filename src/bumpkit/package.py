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

"""Package configuration model.

A :class:`Package` is everything bumpkit knows about one releasable unit:
which files declare its version, where its changelog lives, and which
commit scopes belong to it. Packages are immutable and shared freely
between concurrent per-package tasks.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ExtraSection:
    """A custom changelog section fed by a commit footer.

    Attributes:
        footer_key: Footer token that sends a commit here (case-insensitive).
        heading: Section heading in the rendered changelog.
    """

    footer_key: str
    heading: str


@dataclass(frozen=True)
class Package:
    """One releasable package.

    Attributes:
        name: Package name, or ``None`` in single-package mode.
        versioned_files: Files declaring the version, relative to the
            repository root. All of them are rewritten on a bump.
        changelog: Changelog path, or ``None`` to skip changelog output.
        scopes: Commit scopes that belong to this package. ``None`` means
            the package has no scope filter.
        extra_sections: Custom changelog sections in render order.
        notes_heading: Heading for ``Changelog-Note`` footers.
    """

    name: str | None
    versioned_files: tuple[str, ...]
    changelog: str | None = None
    scopes: frozenset[str] | None = None
    extra_sections: tuple[ExtraSection, ...] = ()
    notes_heading: str = 'Notes'

    @property
    def label(self) -> str:
        """Name for logs and summaries."""
        return self.name or '(root)'


__all__ = [
    'ExtraSection',
    'Package',
]
