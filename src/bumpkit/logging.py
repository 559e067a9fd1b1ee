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

"""Structured logging for bumpkit.

Every module logs through :func:`get_logger` with an event name and
key/value fields, e.g. ``package_bumped package=cli old=1.2.0 new=1.3.0``.
Events go to stderr; stdout carries only the release summary, so
``bumpkit prepare-release --dry-run --format json | jq`` keeps working.

Output modes::

    mode       when                 each line looks like
    ─────────  ───────────────────  ──────────────────────────────────────
    console    default              [info ] package_bumped  new=1.3.0 ...
    json       --json-log           {"event": "package_bumped", ...}

In JSON mode every record also carries an ISO timestamp, and both modes
carry the name of the step being run (``step=prepare-release``) once
:func:`configure_logging` is given one.
"""

from __future__ import annotations

import logging
import sys

import structlog


def _level(*, verbose: bool, quiet: bool) -> int:
    """Quiet wins over verbose."""
    if quiet:
        return logging.WARNING
    if verbose:
        return logging.DEBUG
    return logging.INFO


def _processors(json_log: bool) -> list[structlog.types.Processor]:
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
    ]
    if json_log:
        processors.append(structlog.processors.TimeStamper(fmt='iso'))
    processors.extend([
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ])
    return processors


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    json_log: bool = False,
    step: str = '',
) -> None:
    """Route bumpkit's structlog events to stderr.

    Call once per process, before the first event. Calling again
    replaces the previous setup.

    Args:
        verbose: Also show debug events (git invocations, state changes).
        quiet: Only show warnings and errors. Wins over ``verbose``.
        json_log: Emit one JSON object per line instead of console text.
        step: Name of the step being run, bound to every event.
    """
    logging.basicConfig(
        format='%(message)s',
        stream=sys.stderr,
        level=_level(verbose=verbose, quiet=quiet),
        force=True,
    )

    structlog.configure(
        processors=[
            *_processors(json_log),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if json_log:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    for handler in logging.root.handlers:
        handler.setFormatter(formatter)

    structlog.contextvars.clear_contextvars()
    if step:
        structlog.contextvars.bind_contextvars(step=step)


def get_logger(name: str = 'bumpkit') -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger.

    Args:
        name: Logger name, usually the module's ``__name__``.
    """
    return structlog.get_logger(name)


__all__ = [
    'configure_logging',
    'get_logger',
]
