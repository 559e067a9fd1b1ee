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

"""Structured error system for bumpkit.

Every error has a unique ``BK-NAMED-KEY`` code, a human-readable message,
and an optional hint with a suggested fix.

Key Concepts (ELI5)::

    ┌─────────────────────┬────────────────────────────────────────────────┐
    │ Concept             │ ELI5 Explanation                               │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ ErrorCode           │ A unique named ID like "BK-CONFIG-NOT-FOUND"  │
    │                     │ for each error. Readable at a glance.         │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ ErrorInfo           │ A bundle of code + message + hint. Like an    │
    │                     │ error card with a fix suggestion stapled on.  │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ BumpKitError        │ An exception you can raise. Carries the       │
    │                     │ error card so renderers can display it.       │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ explain()           │ Looks up an error code and prints details.    │
    └─────────────────────┴────────────────────────────────────────────────┘

Code categories::

    BK-CONFIG-*       Configuration and override errors
    BK-VERSION-*      Version parsing and versioned file errors
    BK-CHANGELOG-*    Changelog target errors
    BK-VCS-*          Git command failures

Usage::

    from bumpkit.errors import BumpKitError, E

    raise BumpKitError(
        code=E.CONFIG_NOT_FOUND,
        message='No bumpkit.toml found in the current directory',
        hint="Create a bumpkit.toml with a [package] section.",
    )
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

from rich.console import Console
from rich.markup import escape as rich_escape


class ErrorCode(str, Enum):
    """Enumeration of all bumpkit diagnostic codes."""

    # Configuration
    CONFIG_NOT_FOUND = 'BK-CONFIG-NOT-FOUND'
    CONFIG_INVALID_KEY = 'BK-CONFIG-INVALID-KEY'
    CONFIG_INVALID_VALUE = 'BK-CONFIG-INVALID-VALUE'
    CONFIG_MISSING_REQUIRED = 'BK-CONFIG-MISSING-REQUIRED'
    CONFIG_UNKNOWN_PACKAGE = 'BK-CONFIG-UNKNOWN-PACKAGE'
    CONFIG_UNQUALIFIED_OVERRIDE = 'BK-CONFIG-UNQUALIFIED-OVERRIDE'
    CONFIG_UNKNOWN_VERSIONED_FILE = 'BK-CONFIG-UNKNOWN-VERSIONED-FILE'

    # Versioning
    VERSION_INVALID = 'BK-VERSION-INVALID'
    VERSION_SOURCE_MISSING = 'BK-VERSION-SOURCE-MISSING'
    VERSION_SOURCE_INVALID = 'BK-VERSION-SOURCE-INVALID'
    VERSION_INCONSISTENT = 'BK-VERSION-INCONSISTENT'
    VERSION_NOT_PRERELEASE = 'BK-VERSION-NOT-PRERELEASE'

    # Changelog
    CHANGELOG_TARGET_AMBIGUOUS = 'BK-CHANGELOG-TARGET-AMBIGUOUS'

    # Version control
    VCS_COMMAND_FAILED = 'BK-VCS-COMMAND-FAILED'


# Convenience alias for shorter imports.
E = ErrorCode


@dataclass(frozen=True)
class ErrorInfo:
    """Metadata for a single error code.

    Attributes:
        code: The ``BK-NAMED-KEY`` error code.
        message: Human-readable description of what went wrong.
        hint: Optional suggestion for how to fix the error.
    """

    code: ErrorCode
    message: str
    hint: str = ''


class BumpKitError(Exception):
    """Base exception for all bumpkit errors.

    Args:
        code: The error code from :class:`ErrorCode`.
        message: Human-readable description of what went wrong.
        hint: Optional suggestion for how to fix the error.
    """

    def __init__(self, code: ErrorCode, message: str, hint: str = '') -> None:
        """Initialize with an error code, message, and optional hint."""
        self.info = ErrorInfo(code=code, message=message, hint=hint)
        super().__init__(f'[{code.value}] {message}')

    @property
    def code(self) -> ErrorCode:
        """The error code."""
        return self.info.code

    @property
    def message(self) -> str:
        """The human-readable message, without the code prefix."""
        return self.info.message

    @property
    def hint(self) -> str:
        """Suggestion for fixing this error, or empty string."""
        return self.info.hint


ERRORS: dict[ErrorCode, ErrorInfo] = {
    E.CONFIG_NOT_FOUND: ErrorInfo(
        code=E.CONFIG_NOT_FOUND,
        message='No bumpkit.toml was found, or it could not be parsed.',
        hint='Create a bumpkit.toml with a [package] or [packages.<name>] section.',
    ),
    E.CONFIG_INVALID_KEY: ErrorInfo(
        code=E.CONFIG_INVALID_KEY,
        message='bumpkit.toml contains an unknown key.',
        hint='Check the key for typos; the error message suggests the closest valid key.',
    ),
    E.CONFIG_INVALID_VALUE: ErrorInfo(
        code=E.CONFIG_INVALID_VALUE,
        message='A configuration value or command-line option has the wrong type or an unsupported value.',
        hint='Check the value against the documented type for that key.',
    ),
    E.CONFIG_MISSING_REQUIRED: ErrorInfo(
        code=E.CONFIG_MISSING_REQUIRED,
        message='A package is missing a required setting.',
        hint='Every package needs at least one entry in versioned_files.',
    ),
    E.CONFIG_UNKNOWN_PACKAGE: ErrorInfo(
        code=E.CONFIG_UNKNOWN_PACKAGE,
        message='A version override names a package that is not configured.',
        hint='Use one of the names under [packages.<name>] in bumpkit.toml.',
    ),
    E.CONFIG_UNQUALIFIED_OVERRIDE: ErrorInfo(
        code=E.CONFIG_UNQUALIFIED_OVERRIDE,
        message='A bare version override was given in a multi-package repository.',
        hint="Qualify the override with a package name, e.g. '--override-version cli=2.0.0'.",
    ),
    E.CONFIG_UNKNOWN_VERSIONED_FILE: ErrorInfo(
        code=E.CONFIG_UNKNOWN_VERSIONED_FILE,
        message='A versioned file has a format bumpkit does not know how to read.',
        hint='Supported files: pyproject.toml, Cargo.toml, package.json, go.mod, and Python modules with __version__.',
    ),
    E.VERSION_INVALID: ErrorInfo(
        code=E.VERSION_INVALID,
        message='A version string is not a valid semantic version.',
        hint='Use MAJOR.MINOR.PATCH with an optional -LABEL.N prerelease suffix, e.g. 1.4.0-rc.2.',
    ),
    E.VERSION_SOURCE_MISSING: ErrorInfo(
        code=E.VERSION_SOURCE_MISSING,
        message='A versioned file listed in bumpkit.toml does not exist.',
        hint='Fix the path in versioned_files or create the file.',
    ),
    E.VERSION_SOURCE_INVALID: ErrorInfo(
        code=E.VERSION_SOURCE_INVALID,
        message='A versioned file does not contain a readable version.',
        hint='Make sure the file declares a version in the expected location.',
    ),
    E.VERSION_INCONSISTENT: ErrorInfo(
        code=E.VERSION_INCONSISTENT,
        message="The versioned files of a package declare different versions.",
        hint='Set every versioned file of the package to the same version before releasing.',
    ),
    E.VERSION_NOT_PRERELEASE: ErrorInfo(
        code=E.VERSION_NOT_PRERELEASE,
        message='The release rule only applies to prerelease versions.',
        hint="Use 'major', 'minor' or 'patch' to bump a stable version.",
    ),
    E.CHANGELOG_TARGET_AMBIGUOUS: ErrorInfo(
        code=E.CHANGELOG_TARGET_AMBIGUOUS,
        message='Two packages write to the same changelog or versioned file.',
        hint='Give every package its own changelog and versioned files.',
    ),
    E.VCS_COMMAND_FAILED: ErrorInfo(
        code=E.VCS_COMMAND_FAILED,
        message='A git command needed for the release failed.',
        hint="Run bumpkit inside a git work tree and check the git output above.",
    ),
}


def explain(code: str) -> str | None:
    """Return a detailed explanation for an error code.

    Args:
        code: The error code string, e.g. ``"BK-CONFIG-NOT-FOUND"``.

    Returns:
        A formatted explanation string, or ``None`` if the code is unknown.
    """
    try:
        error_code = ErrorCode(code)
    except ValueError:
        return None

    info = ERRORS.get(error_code)
    if info is None:
        return f'{code}: No detailed explanation available.'

    lines = [f'{code}: {info.message}']
    if info.hint:
        lines.append(f'  Hint: {info.hint}')
    return '\n'.join(lines)


def render_error(exc: BumpKitError, *, file: TextIO | None = None) -> None:
    """Render an error in Rust-compiler style with color.

    Output format::

        error[BK-CONFIG-NOT-FOUND]: No bumpkit.toml found.
          |
          = hint: Create a bumpkit.toml with a [package] section.

    Args:
        exc: The error to render.
        file: Output stream (defaults to ``sys.stderr``).
    """
    out = file or sys.stderr
    color = out.isatty()
    console = Console(file=out, highlight=False, no_color=not color, force_terminal=color)
    msg = rich_escape(exc.info.message)
    console.print(f'[bold red]error\\[{exc.code.value}][/bold red][bold]: {msg}[/bold]', soft_wrap=True)
    if exc.hint:
        console.print('  [dim]|[/dim]')
        console.print(f'  [dim]=[/dim] [cyan]hint[/cyan]: {rich_escape(exc.hint)}', soft_wrap=True)
    console.print()


__all__ = [
    'E',
    'ERRORS',
    'BumpKitError',
    'ErrorCode',
    'ErrorInfo',
    'explain',
    'render_error',
]
