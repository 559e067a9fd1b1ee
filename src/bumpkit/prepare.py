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

"""Release orchestration: from commit history to staged files.

Runs the ``prepare-release`` and ``bump-version`` steps for every
configured package. Each package moves through its own state machine,
concurrently with the others; only scope consideration is decided once
for the whole run.

Key Concepts (ELI5)::

    ┌─────────────────────────┬─────────────────────────────────────────────┐
    │ Concept                 │ ELI5 Explanation                            │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ PackageState            │ Where one package is in the pipeline. Ends  │
    │                         │ as staged, skipped, or failed.              │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ PackageOutcome          │ What happened to one package: versions,     │
    │                         │ new file contents, or why it failed.        │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ ReleaseResult           │ All outcomes of a run. Not ok if any        │
    │                         │ package failed.                             │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ FileStore               │ The only thing that writes. Pass a          │
    │                         │ DryRunFiles to preview without side effects.│
    └─────────────────────────┴─────────────────────────────────────────────┘

Prepare flow (per package, all packages concurrently)::

    PENDING
       │  latest stable tag → vcs.commits_since(tag)
       ▼
    READING_HISTORY
       │  parse_commits → commits_for_package → select_rule
       ▼
    CLASSIFYING
       │  rule is none? ──────────────────────────────→ SKIPPED
       ▼
    VERSIONING
       │  package_version(files, tags) → bump_version
       ▼
    RENDERING
       │  set_version per file, build + merge changelog
       ▼
    STAGED

    any BumpKitError along the way ─────────────────→ FAILED

Writes are emitted only after every package has finished computing, and
only for packages that reached ``STAGED``.

Usage::

    from bumpkit.prepare import prepare_release

    result = await prepare_release(
        packages=config.packages,
        vcs=GitCLIBackend(root),
        files=WorkingTreeFiles(root, git),
        prerelease_label='rc',
    )
    if not result.ok:
        ...
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import Any

from bumpkit.backends.files import FileStore
from bumpkit.backends.vcs import VCS
from bumpkit.bump import package_version, set_version
from bumpkit.changelog import build_changelog, merge_changelog, render_changelog
from bumpkit.commit_parsing import BumpType, Commit, CommitParser, parse_commits
from bumpkit.config import ResolvedOverrides
from bumpkit.errors import BumpKitError, E, ErrorCode
from bumpkit.logging import get_logger
from bumpkit.package import Package
from bumpkit.routing import commits_for_package, consider_scopes
from bumpkit.rules import select_rule
from bumpkit.semver import BumpRule, SemanticVersion, bump_version
from bumpkit.tags import VersionTag, format_tag, latest_stable_tag, latest_tag, tag_prefix

logger = get_logger(__name__)


class PackageState(Enum):
    """Lifecycle of one package within a run."""

    PENDING = 'pending'
    READING_HISTORY = 'reading_history'
    CLASSIFYING = 'classifying'
    VERSIONING = 'versioning'
    RENDERING = 'rendering'
    STAGED = 'staged'
    SKIPPED = 'skipped'
    FAILED = 'failed'


@dataclass(frozen=True)
class StagedFile:
    """New contents for one file."""

    path: str
    content: str


@dataclass
class PackageOutcome:
    """Result of processing one package.

    Attributes:
        package_name: The package name (``None`` in single-package mode).
        state: Final :class:`PackageState`.
        rule: The applied rule, e.g. ``"minor"`` or ``"pre(rc, minor)"``.
        old_version: Version before the run, when it was read.
        new_version: Version after the run, for staged packages.
        tag: Tag the release of ``new_version`` will get.
        files: New file contents, versioned files first, changelog last.
        changelog: The rendered changelog entry, if any.
        reason: Why the package was skipped or failed.
        code: Error code for failed packages.
    """

    package_name: str | None
    state: PackageState = PackageState.PENDING
    rule: str = ''
    old_version: str = ''
    new_version: str = ''
    tag: str = ''
    files: list[StagedFile] = field(default_factory=list)
    changelog: str = ''
    reason: str = ''
    code: ErrorCode | None = None

    @property
    def label(self) -> str:
        """Name for logs and summaries."""
        return self.package_name or '(root)'

    def advance(self, state: PackageState) -> None:
        """Move to ``state`` and log the transition."""
        logger.debug('package_state', package=self.label, old=self.state.value, new=state.value)
        self.state = state

    def fail(self, exc: BumpKitError) -> None:
        """Record a fatal error and drop anything computed so far."""
        self.files = []
        self.changelog = ''
        self.tag = ''
        self.reason = exc.message
        self.code = exc.code
        self.advance(PackageState.FAILED)
        logger.error('package_failed', package=self.label, code=exc.code.value, reason=exc.message)

    def to_dict(self) -> dict[str, Any]:  # noqa: ANN401
        """Return a JSON-serializable summary."""
        return {
            'package': self.package_name,
            'state': self.state.value,
            'rule': self.rule,
            'old_version': self.old_version,
            'new_version': self.new_version,
            'tag': self.tag,
            'files': [staged.path for staged in self.files],
            'reason': self.reason,
            'code': self.code.value if self.code else None,
        }


@dataclass
class ReleaseResult:
    """Outcome of a whole run, one :class:`PackageOutcome` per package."""

    outcomes: list[PackageOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Return True if no package failed."""
        return not self.failed

    @property
    def staged(self) -> list[PackageOutcome]:
        """Packages whose files were (or would be) written."""
        return [o for o in self.outcomes if o.state is PackageState.STAGED]

    @property
    def skipped(self) -> list[PackageOutcome]:
        """Packages with nothing to release."""
        return [o for o in self.outcomes if o.state is PackageState.SKIPPED]

    @property
    def failed(self) -> list[PackageOutcome]:
        """Packages that hit a fatal error."""
        return [o for o in self.outcomes if o.state is PackageState.FAILED]

    def outcome(self, package_name: str | None) -> PackageOutcome:
        """Return the outcome for ``package_name``.

        Raises:
            KeyError: If no such package was processed.
        """
        for outcome in self.outcomes:
            if outcome.package_name == package_name:
                return outcome
        raise KeyError(package_name)

    def to_dict(self) -> dict[str, Any]:  # noqa: ANN401
        """Return a JSON-serializable summary."""
        return {
            'ok': self.ok,
            'packages': [outcome.to_dict() for outcome in self.outcomes],
        }


def shared_write_targets(
    packages: Sequence[Package],
    *,
    include_changelogs: bool = True,
) -> dict[str | None, BumpKitError]:
    """Find packages that would write the same file.

    Paths are compared after normalization, so ``./CHANGELOG.md`` and
    ``CHANGELOG.md`` collide.

    Args:
        packages: All configured packages.
        include_changelogs: Whether changelog paths count as write targets.

    Returns:
        An error for every package involved in a collision.
    """
    owners: dict[str, list[Package]] = {}
    for package in packages:
        paths = list(package.versioned_files)
        if include_changelogs and package.changelog:
            paths.append(package.changelog)
        targets = {PurePosixPath(path).as_posix() for path in paths}
        for path in targets:
            owners.setdefault(path, []).append(package)

    errors: dict[str | None, BumpKitError] = {}
    for path, sharing in owners.items():
        if len(sharing) < 2:
            continue
        names = ', '.join(p.label for p in sharing)
        for package in sharing:
            errors.setdefault(
                package.name,
                BumpKitError(
                    code=E.CHANGELOG_TARGET_AMBIGUOUS,
                    message=f'{path} is written by more than one package ({names})',
                    hint='Give every package its own changelog and versioned files.',
                ),
            )
    return errors


async def _package_tags(vcs: VCS, package: Package) -> tuple[VersionTag | None, VersionTag | None]:
    """Return the latest stable tag and the latest tag of any kind."""
    tags = await vcs.list_tags(pattern=f'{tag_prefix(package.name)}*')
    return latest_stable_tag(tags, package.name), latest_tag(tags, package.name)


async def _read_files(files: FileStore, paths: Sequence[str]) -> dict[str, str | None]:
    contents = await asyncio.gather(*(files.read(path) for path in paths))
    return dict(zip(paths, contents))


async def _stage_versions(
    outcome: PackageOutcome,
    package: Package,
    *,
    files: FileStore,
    rule: BumpRule,
    last_stable: VersionTag | None,
    newest: VersionTag | None,
) -> SemanticVersion:
    """Bump the package's versioned files into ``outcome.files``."""
    outcome.rule = str(rule)
    outcome.advance(PackageState.VERSIONING)
    contents = await _read_files(files, package.versioned_files)
    current = package_version(package, contents, tagged=newest.version if newest else None)
    outcome.old_version = str(current)
    new = bump_version(current, rule, last_stable=last_stable.version if last_stable else None)
    outcome.new_version = str(new)
    outcome.tag = format_tag(new, package_name=package.name)

    outcome.advance(PackageState.RENDERING)
    for path in package.versioned_files:
        text = contents[path]
        if text is None:
            raise BumpKitError(code=E.VERSION_SOURCE_MISSING, message=f'Versioned file {path} does not exist.')
        outcome.files.append(StagedFile(path, set_version(path, text, new)))
    return new


async def _prepare_package(
    package: Package,
    *,
    vcs: VCS,
    files: FileStore,
    scoped: bool,
    prerelease_label: str,
    override: BumpRule | None,
    config_error: BumpKitError | None,
    parser: CommitParser | None,
    date: str,
) -> PackageOutcome:
    outcome = PackageOutcome(package_name=package.name)
    try:
        if config_error is not None:
            raise config_error

        outcome.advance(PackageState.READING_HISTORY)
        last, newest = await _package_tags(vcs, package)
        raw = await vcs.commits_since(last.ref if last else None)

        outcome.advance(PackageState.CLASSIFYING)
        commits: list[Commit] = commits_for_package(parse_commits(raw, parser), package, scoped=scoped)
        rule = select_rule(commits, package, override=override, prerelease_label=prerelease_label)
        if rule.bump is BumpType.NONE:
            outcome.rule = str(rule)
            outcome.reason = f'no releasable commits since {last.ref if last else "the first commit"}'
            outcome.advance(PackageState.SKIPPED)
            logger.info(
                'package_skipped',
                package=outcome.label,
                commits=len(commits),
                since=last.ref if last else None,
            )
            return outcome

        new = await _stage_versions(
            outcome,
            package,
            files=files,
            rule=rule,
            last_stable=last,
            newest=newest,
        )

        if package.changelog:
            entry = render_changelog(build_changelog(commits, package, new, date=date))
            existing = await files.read(package.changelog)
            outcome.changelog = entry
            outcome.files.append(StagedFile(package.changelog, merge_changelog(existing, entry)))

        outcome.advance(PackageState.STAGED)
        logger.info(
            'package_bumped',
            package=outcome.label,
            rule=outcome.rule,
            old=outcome.old_version,
            new=outcome.new_version,
            commits=len(commits),
        )
    except BumpKitError as exc:
        outcome.fail(exc)
    return outcome


async def _bump_package(
    package: Package,
    *,
    vcs: VCS,
    files: FileStore,
    rule: BumpRule,
    config_error: BumpKitError | None,
) -> PackageOutcome:
    outcome = PackageOutcome(package_name=package.name)
    try:
        if config_error is not None:
            raise config_error
        outcome.advance(PackageState.READING_HISTORY)
        last, newest = await _package_tags(vcs, package)
        outcome.advance(PackageState.CLASSIFYING)
        if rule.bump is BumpType.NONE:
            outcome.rule = str(rule)
            outcome.reason = 'rule is none'
            outcome.advance(PackageState.SKIPPED)
            return outcome
        await _stage_versions(outcome, package, files=files, rule=rule, last_stable=last, newest=newest)
        outcome.advance(PackageState.STAGED)
        logger.info(
            'package_bumped',
            package=outcome.label,
            rule=outcome.rule,
            old=outcome.old_version,
            new=outcome.new_version,
        )
    except BumpKitError as exc:
        outcome.fail(exc)
    return outcome


def _unknown_package_outcomes(
    packages: Sequence[Package],
    overrides: ResolvedOverrides | None,
) -> list[PackageOutcome]:
    """Failed outcomes for overrides that name unconfigured packages."""
    if overrides is None:
        return []
    known = {package.name for package in packages}
    outcomes: list[PackageOutcome] = []
    for name, exc in overrides.errors.items():
        if name in known:
            continue
        outcome = PackageOutcome(package_name=name)
        outcome.fail(exc)
        outcomes.append(outcome)
    return outcomes


async def emit_writes(result: ReleaseResult, files: FileStore) -> None:
    """Hand every staged file to ``files``, in package order.

    A package whose write fails is marked failed; the remaining packages
    are still written.
    """
    for outcome in result.staged:
        try:
            for staged in outcome.files:
                await files.stage_write(staged.path, staged.content)
        except BumpKitError as exc:
            outcome.fail(exc)


async def prepare_release(
    *,
    packages: Sequence[Package],
    vcs: VCS,
    files: FileStore,
    prerelease_label: str = '',
    overrides: ResolvedOverrides | None = None,
    parser: CommitParser | None = None,
    date: str = '',
) -> ReleaseResult:
    """Run the prepare-release step for every package.

    Args:
        packages: All configured packages.
        vcs: History provider and tag resolver.
        files: File store used for reads and for the final writes. Pass a
            :class:`~bumpkit.backends.files.DryRunFiles` to preview.
        prerelease_label: Non-empty to cut ``pre(label, ...)`` versions.
        overrides: Resolved ``--override-version`` values.
        parser: Commit parser; defaults to Conventional Commits.
        date: Date shown in changelog headings, e.g. ``"2026-10-19"``.

    Returns:
        A :class:`ReleaseResult` with one outcome per package, plus one
        failed outcome per override naming an unknown package.
    """
    scoped = consider_scopes(packages)
    conflicts = shared_write_targets(packages)
    override_errors = overrides.errors if overrides else {}
    override_rules = overrides.rules if overrides else {}
    logger.info('prepare_started', packages=len(packages), scoped=scoped, prerelease_label=prerelease_label or None)

    outcomes = await asyncio.gather(*(
        _prepare_package(
            package,
            vcs=vcs,
            files=files,
            scoped=scoped,
            prerelease_label=prerelease_label,
            override=override_rules.get(package.name),
            config_error=conflicts.get(package.name) or override_errors.get(package.name),
            parser=parser,
            date=date,
        )
        for package in packages
    ))
    result = ReleaseResult(outcomes=[*outcomes, *_unknown_package_outcomes(packages, overrides)])
    await emit_writes(result, files)
    logger.info(
        'prepare_finished',
        staged=len(result.staged),
        skipped=len(result.skipped),
        failed=len(result.failed),
    )
    return result


async def bump_version_step(
    *,
    packages: Sequence[Package],
    vcs: VCS,
    files: FileStore,
    rule: BumpRule,
) -> ReleaseResult:
    """Apply an explicit ``rule`` to every package's versioned files.

    Changelogs are left alone. The last stable tag of each package is
    still consulted so prerelease rules land on the right release line.
    """
    conflicts = shared_write_targets(packages, include_changelogs=False)
    logger.info('bump_started', packages=len(packages), rule=str(rule))
    outcomes = await asyncio.gather(*(
        _bump_package(package, vcs=vcs, files=files, rule=rule, config_error=conflicts.get(package.name))
        for package in packages
    ))
    result = ReleaseResult(outcomes=list(outcomes))
    await emit_writes(result, files)
    logger.info('bump_finished', staged=len(result.staged), failed=len(result.failed))
    return result


__all__ = [
    'PackageOutcome',
    'PackageState',
    'ReleaseResult',
    'StagedFile',
    'bump_version_step',
    'emit_writes',
    'prepare_release',
    'shared_write_targets',
]
