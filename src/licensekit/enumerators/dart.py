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

"""Dart dependency enumeration from ``pubspec.yaml``.

Dart packages are not installed into the project tree, so every record
starts out with only a registry identifier:

- hosted dependencies → their pub.dev package name;
- ``git:`` dependencies → the normalized repository URL instead;
- ``sdk: flutter`` dependencies → the Flutter SDK.

``builders``, ``dependencies`` and ``dev_dependencies`` are merged in
that order; a name listed in more than one section keeps the value of
the last one.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import yaml

from licensekit._types import DependencyRecord
from licensekit.config import RunConfig
from licensekit.errors import EnumerationError
from licensekit.urls import pretty_git_url

PUBSPEC = 'pubspec.yaml'

_SECTIONS = ('builders', 'dependencies', 'dev_dependencies')


def load_pubspec(path: Path) -> dict[str, Any]:
    """Read and parse a ``pubspec.yaml``.

    Raises:
        EnumerationError: If the file cannot be read or parsed.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding='utf-8'))
    except (OSError, yaml.YAMLError) as exc:
        raise EnumerationError('dart', f'cannot read {path.name}: {exc}') from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise EnumerationError('dart', f'{path.name} is not a mapping')
    return data


def pubspec_records(pubspec: dict[str, Any]) -> list[DependencyRecord]:
    """Turn the dependency sections of a pubspec into records."""
    merged: dict[str, Any] = {}
    for section in _SECTIONS:
        entries = pubspec.get(section)
        if isinstance(entries, dict):
            merged.update(entries)

    records: list[DependencyRecord] = []
    for name, spec in merged.items():
        name = str(name)
        record = DependencyRecord(name=name, registry_id=name)
        if isinstance(spec, dict):
            git = spec.get('git')
            if isinstance(git, dict):
                git = git.get('url')
            if isinstance(git, str):
                record.registry_id = None
                record.repository_url = pretty_git_url(git)
            elif spec.get('sdk') == 'flutter':
                record.registry_id = 'flutter'
        records.append(record)
    return records


async def enumerate_dart(config: RunConfig) -> list[DependencyRecord]:
    """List the project's declared Dart dependencies."""
    pubspec = await asyncio.to_thread(load_pubspec, config.cwd / PUBSPEC)
    return pubspec_records(pubspec)


__all__ = [
    'PUBSPEC',
    'enumerate_dart',
    'load_pubspec',
    'pubspec_records',
]
