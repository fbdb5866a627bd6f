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

"""Ignore file support.

``<cwd>/.licenseignore`` holds one glob per line, matched with
:mod:`fnmatch` against dependency names::

    # internal packages
    @acme/*
    !@acme/public-widget

Blank lines and ``#`` comments are skipped.  A leading ``!`` re-includes
names excluded by an earlier pattern; the last matching pattern wins.
"""

from __future__ import annotations

import fnmatch
from collections.abc import Iterable
from pathlib import Path
from typing import NamedTuple

from licensekit._types import DependencyRecord
from licensekit.logging import get_logger

log = get_logger('licensekit.ignore')


class IgnorePattern(NamedTuple):
    """One parsed ignore line."""

    glob: str
    negated: bool = False


def parse_ignore_lines(lines: Iterable[str]) -> list[IgnorePattern]:
    patterns: list[IgnorePattern] = []
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith('#'):
            continue
        if line.startswith('!'):
            glob = line[1:].strip()
            if glob:
                patterns.append(IgnorePattern(glob, negated=True))
            continue
        patterns.append(IgnorePattern(line))
    return patterns


def load_ignore_patterns(path: Path) -> list[IgnorePattern]:
    """Read *path*; a missing or unreadable file yields no patterns."""
    try:
        text = path.read_text(encoding='utf-8')
    except FileNotFoundError:
        return []
    except OSError as exc:
        log.warning('ignore_file_unreadable', path=str(path), error=str(exc))
        return []
    return parse_ignore_lines(text.splitlines())


def is_ignored(name: str, patterns: Iterable[IgnorePattern]) -> bool:
    ignored = False
    for pattern in patterns:
        if fnmatch.fnmatchcase(name, pattern.glob):
            ignored = not pattern.negated
    return ignored


def apply_ignore(
    records: Iterable[DependencyRecord],
    patterns: list[IgnorePattern],
) -> tuple[list[DependencyRecord], list[DependencyRecord]]:
    """Split *records* into ``(kept, ignored)``, preserving order."""
    kept: list[DependencyRecord] = []
    ignored: list[DependencyRecord] = []
    for record in records:
        if patterns and is_ignored(record.name, patterns):
            ignored.append(record)
        else:
            kept.append(record)
    return kept, ignored


__all__ = [
    'IgnorePattern',
    'apply_ignore',
    'is_ignored',
    'load_ignore_patterns',
    'parse_ignore_lines',
]
