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

"""Structured logging for licensekit.

Configures `structlog <https://www.structlog.org/>`_ with two output modes:

- **Console** (default): Rich-colored, human-readable output.
- **JSON** (``--json-log``): Machine-readable, one JSON object per line,
  with ISO timestamps.

Both modes write to stderr so stdout stays reserved for the status
lines and the summary.  Per-dependency traces are logged at debug level
and only show up with ``--verbose``.

Work on one dependency runs inside :func:`bound_package`, so every event
emitted while it is being resolved carries a ``package`` field without
each call site passing it.  Each scheduler task has its own context
copy, so concurrent records never see each other's binding.

Usage::

    from licensekit.logging import bound_package, configure_logging, get_logger

    configure_logging(verbose=True)
    log = get_logger('licensekit.resolver')
    with bound_package('left-pad'):
        log.debug('license_url_checked', url=url, exists=True)
"""

from __future__ import annotations

import contextlib
import logging
import os
import re
import sys
from collections.abc import Iterator
from typing import Any, Final

import structlog

#: Third-party loggers that are chatty at INFO (one line per request).
QUIET_LOGGERS: Final[tuple[str, ...]] = ('httpx', 'httpcore')

#: Set to ``0`` to keep secrets in log output (local debugging only).
REDACT_ENV_VAR: Final[str] = 'LICENSEKIT_REDACT_SECRETS'


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    json_log: bool = False,
    redact_secrets: bool = True,
) -> None:
    """Configure structlog for licensekit.

    Should be called once at startup, before any logging calls.

    Args:
        verbose: Enable debug-level output (the per-dependency trace).
        quiet: Suppress info-level output (only warnings and errors).
            Wins over *verbose*.
        json_log: Use JSON output instead of colored console output.
        redact_secrets: Scrub tokens from log output.  Can also be
            disabled via ``LICENSEKIT_REDACT_SECRETS=0``.
    """
    level = _level_for(verbose=verbose, quiet=quiet)
    logging.basicConfig(format='%(message)s', stream=sys.stderr, level=level, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    global _redact, _secret_values  # noqa: PLW0603
    _redact = redact_secrets and os.environ.get(REDACT_ENV_VAR, '1') != '0'
    _secret_values = _build_secret_values() if _redact else frozenset()

    shared_processors: list[structlog.types.Processor] = [  # type: ignore[assignment]
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        redact_sensitive_values,
    ]
    if json_log:
        shared_processors.insert(1, structlog.processors.TimeStamper(fmt='iso'))
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    for handler in logging.root.handlers:
        handler.setFormatter(formatter)


def _level_for(*, verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.WARNING
    if verbose:
        return logging.DEBUG
    return logging.INFO


def get_logger(name: str = 'licensekit') -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger."""
    return structlog.get_logger(name)


@contextlib.contextmanager
def bound_package(name: str) -> Iterator[None]:
    """Tag every event logged inside the block with ``package=name``."""
    with structlog.contextvars.bound_contextvars(package=name):
        yield


# ── Redaction ────────────────────────────────────────────────────────

# Env var names whose runtime values must never appear in logs.
_SENSITIVE_ENV_VARS: Final[tuple[str, ...]] = (
    'GITHUB_TOKEN',
    'GH_TOKEN',
    'NPM_TOKEN',
    'PUB_TOKEN',
)

# GitHub token shapes, caught even when they did not come from the env
# (e.g. echoed back inside an error message).
_GITHUB_TOKEN_RE: Final[re.Pattern[str]] = re.compile(r'\b(?:gh[pousr]_[A-Za-z0-9]{20,}|github_pat_[A-Za-z0-9_]{20,})')

_REDACTED: Final[str] = '[REDACTED]'

# Populated by configure_logging(); read by the processor.
_redact: bool = True
_secret_values: frozenset[str] = frozenset()


def _build_secret_values() -> frozenset[str]:
    """Collect current runtime values of sensitive env vars.

    Values shorter than 8 characters are skipped; replacing them would
    mangle unrelated text.
    """
    return frozenset(val for name in _SENSITIVE_ENV_VARS if len(val := os.environ.get(name, '')) >= 8)


def _scrub(value: object) -> object:
    """Replace secrets in a string value with ``[REDACTED]``."""
    if not isinstance(value, str):
        return value
    result = value
    for secret in _secret_values:
        if secret in result:
            result = result.replace(secret, _REDACTED)
    return _GITHUB_TOKEN_RE.sub(_REDACTED, result)


def redact_sensitive_values(
    logger: Any,  # noqa: ANN401
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor: scrub tokens from all event fields."""
    if not _redact:
        return event_dict
    return {k: _scrub(v) for k, v in event_dict.items()}


__all__ = [
    'QUIET_LOGGERS',
    'bound_package',
    'configure_logging',
    'get_logger',
    'redact_sensitive_values',
]
