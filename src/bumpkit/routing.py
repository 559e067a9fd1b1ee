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

"""Route commits to the packages they affect.

Scope filtering is switched on for the whole run as soon as *any*
package declares ``scopes``; after that, scoped commits only reach the
packages that list their scope. Unscoped commits always reach every
package.

Routing table (``cli`` has ``scopes=["cli"]``, ``docs`` has no scopes)::

    commit              scoping on?   cli    docs
    ──────────────────  ────────────  ─────  ─────
    fix: typo           yes           yes    yes
    feat(cli): flag     yes           yes    no
    feat(api): thing    yes           no     no
    feat(api): thing    no            yes    yes

Everything here is a pure function over ``(Commit, Package)``.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from bumpkit.commit_parsing import Commit
from bumpkit.package import Package


def consider_scopes(packages: Iterable[Package]) -> bool:
    """Return ``True`` if any package declares ``scopes``."""
    return any(package.scopes is not None for package in packages)


def applies_to(commit: Commit, package: Package, *, scoped: bool) -> bool:
    """Return whether ``commit`` affects ``package``.

    Args:
        commit: The parsed commit.
        package: The candidate package.
        scoped: Result of :func:`consider_scopes` over *all* packages.
    """
    if not scoped or not commit.scope:
        return True
    return package.scopes is not None and commit.scope in package.scopes


def applicable_packages(
    commit: Commit,
    packages: Sequence[Package],
    *,
    scoped: bool | None = None,
) -> list[Package]:
    """Return the packages ``commit`` affects, in configuration order.

    Args:
        commit: The parsed commit.
        packages: Every configured package.
        scoped: Precomputed :func:`consider_scopes`; computed from
            ``packages`` when omitted.
    """
    if scoped is None:
        scoped = consider_scopes(packages)
    return [package for package in packages if applies_to(commit, package, scoped=scoped)]


def commits_for_package(commits: Iterable[Commit], package: Package, *, scoped: bool) -> list[Commit]:
    """Filter a history down to the commits affecting ``package``."""
    return [commit for commit in commits if applies_to(commit, package, scoped=scoped)]


__all__ = [
    'applicable_packages',
    'applies_to',
    'commits_for_package',
    'consider_scopes',
]
