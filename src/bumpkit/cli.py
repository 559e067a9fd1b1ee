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

"""CLI entry point for bumpkit.

Constructs backend instances and injects them into :mod:`bumpkit.prepare`.

Subcommands::

    bumpkit prepare-release   Bump versions and changelogs from commits
    bumpkit bump-version      Apply an explicit rule to versioned files
    bumpkit explain           Explain an error code

Usage::

    # Preview the next release:
    bumpkit prepare-release --dry-run

    # Cut a release candidate:
    bumpkit prepare-release --prerelease-label rc

    # Promote the candidate:
    bumpkit bump-version release

    # Explain an error:
    bumpkit explain BK-VERSION-INCONSISTENT
"""

from __future__ import annotations

import argparse
import asyncio
import datetime
import json
import sys
from pathlib import Path

from rich_argparse import RichHelpFormatter

from bumpkit import __version__
from bumpkit.backends.files import DryRunFiles, FileStore, WorkingTreeFiles
from bumpkit.backends.vcs import GitCLIBackend
from bumpkit.config import (
    PRERELEASE_LABEL_ENV,
    load_config,
    parse_override_args,
    resolve_overrides,
    resolve_prerelease_label,
)
from bumpkit.errors import BumpKitError, explain, render_error
from bumpkit.logging import configure_logging, get_logger
from bumpkit.prepare import PackageState, ReleaseResult, bump_version_step, prepare_release
from bumpkit.rules import parse_rule

logger = get_logger(__name__)


def _today() -> str:
    return datetime.datetime.now(tz=datetime.timezone.utc).date().isoformat()


def _file_store(root: Path, *, dry_run: bool) -> FileStore:
    if dry_run:
        return DryRunFiles(WorkingTreeFiles(root))
    return WorkingTreeFiles(root, GitCLIBackend(root))


def _print_result(result: ReleaseResult, *, dry_run: bool, fmt: str) -> None:
    """Print a human or JSON summary of a run to stdout."""
    if fmt == 'json':
        data = result.to_dict()
        data['dry_run'] = dry_run
        print(json.dumps(data, indent=2))  # noqa: T201 - CLI output
        return

    for outcome in result.outcomes:
        if outcome.state is PackageState.STAGED:
            if dry_run:
                print(f'Would bump {outcome.label} version to {outcome.new_version}')  # noqa: T201 - CLI output
                if outcome.changelog:
                    changelog_path = outcome.files[-1].path
                    print(f'Would add the following to {changelog_path}:\n\n{outcome.changelog}')  # noqa: T201
            else:
                print(  # noqa: T201 - CLI output
                    f'  📦 {outcome.label}: {outcome.old_version} → {outcome.new_version} ({outcome.rule})'
                )
        elif outcome.state is PackageState.SKIPPED:
            print(f'  ⏭️  {outcome.label}: {outcome.reason}')  # noqa: T201 - CLI output
        else:
            code = f' [{outcome.code.value}]' if outcome.code else ''
            print(f'  ❌ {outcome.label}: {outcome.reason}{code}', file=sys.stderr)  # noqa: T201 - CLI output


async def _cmd_prepare_release(args: argparse.Namespace) -> int:
    """Handle the ``prepare-release`` subcommand."""
    root = Path(args.root)
    config = load_config(root)
    label = resolve_prerelease_label(args.prerelease_label)
    overrides = resolve_overrides(
        parse_override_args(args.override_version or []),
        config.packages,
        multi_package=config.multi_package,
    )
    result = await prepare_release(
        packages=config.packages,
        vcs=GitCLIBackend(root),
        files=_file_store(root, dry_run=args.dry_run),
        prerelease_label=label,
        overrides=overrides,
        date=args.date or _today(),
    )
    _print_result(result, dry_run=args.dry_run, fmt=args.format)
    return 0 if result.ok else 1


async def _cmd_bump_version(args: argparse.Namespace) -> int:
    """Handle the ``bump-version`` subcommand."""
    root = Path(args.root)
    config = load_config(root)
    rule = parse_rule(args.rule, label=resolve_prerelease_label(args.prerelease_label))
    result = await bump_version_step(
        packages=config.packages,
        vcs=GitCLIBackend(root),
        files=_file_store(root, dry_run=args.dry_run),
        rule=rule,
    )
    _print_result(result, dry_run=args.dry_run, fmt=args.format)
    return 0 if result.ok else 1


def _cmd_explain(args: argparse.Namespace) -> int:
    """Handle the ``explain`` subcommand."""
    result = explain(args.code)
    if result is None:
        print(f'Unknown error code: {args.code}')  # noqa: T201 - CLI output
        return 1
    print(result)  # noqa: T201 - CLI output
    return 0


def _add_run_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Show what would change without writing or staging files.',
    )
    parser.add_argument(
        '--prerelease-label',
        metavar='LABEL',
        default=None,
        help=f'Cut a prerelease with this label (e.g. rc). Overrides ${PRERELEASE_LABEL_ENV}.',
    )
    parser.add_argument(
        '--format',
        choices=['text', 'json'],
        default='text',
        help='Output format (default: text).',
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser.

    Returns:
        Configured :class:`argparse.ArgumentParser`.
    """
    RichHelpFormatter.styles['argparse.groups'] = 'bold yellow'
    parser = argparse.ArgumentParser(
        prog='bumpkit',
        description='Conventional-commit driven version bumps and changelogs.',
        formatter_class=RichHelpFormatter,
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument(
        '--root',
        '-C',
        metavar='DIR',
        default='.',
        help='Repository root containing bumpkit.toml (default: current directory).',
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging.')
    parser.add_argument('--quiet', '-q', action='store_true', help='Only log warnings and errors.')
    parser.add_argument('--json-log', action='store_true', help='Log as JSON lines on stderr.')

    subparsers = parser.add_subparsers(dest='command')

    prepare_parser = subparsers.add_parser(
        'prepare-release',
        help='Bump versions and update changelogs from conventional commits.',
        formatter_class=RichHelpFormatter,
    )
    _add_run_options(prepare_parser)
    prepare_parser.add_argument(
        '--override-version',
        metavar='VERSION',
        action='append',
        help='Release exactly this version. Repeat with NAME=VERSION per package in multi-package repos.',
    )
    prepare_parser.add_argument(
        '--date',
        metavar='YYYY-MM-DD',
        default=None,
        help='Date for changelog headings (default: today, UTC).',
    )

    bump_parser = subparsers.add_parser(
        'bump-version',
        help='Apply an explicit rule to every package version.',
        formatter_class=RichHelpFormatter,
    )
    bump_parser.add_argument(
        'rule',
        help="One of 'major', 'minor', 'patch', 'pre', 'release', or an exact version.",
    )
    _add_run_options(bump_parser)

    explain_parser = subparsers.add_parser(
        'explain',
        help='Explain an error code.',
        formatter_class=RichHelpFormatter,
    )
    explain_parser.add_argument('code', help='Error code, e.g. BK-VERSION-INCONSISTENT.')

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(
        verbose=args.verbose,
        quiet=args.quiet,
        json_log=args.json_log,
        step=args.command or '',
    )

    try:
        command = args.command
        if command == 'prepare-release':
            return asyncio.run(_cmd_prepare_release(args))
        if command == 'bump-version':
            return asyncio.run(_cmd_bump_version(args))
        if command == 'explain':
            return _cmd_explain(args)

        parser.print_help()
        print(  # noqa: T201 - CLI output
            f'\n{parser.prog}: error: please provide a command',
            file=sys.stderr,
        )
        return 2

    except BumpKitError as exc:
        render_error(exc)
        return 1
    except KeyboardInterrupt:
        logger.info('interrupted')
        return 130


__all__ = [
    'build_parser',
    'main',
]
