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

"""Ecosystem detection and dependency enumeration.

Each supported ecosystem is identified by a marker file in the project
root.  Markers are checked in declaration order and the first one
present wins::

    package.json  → node  (npm ls)
    pubspec.yaml  → dart  (pubspec sections)
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from licensekit._types import DependencyRecord, unique_by_name
from licensekit.config import RunConfig
from licensekit.enumerators.dart import enumerate_dart
from licensekit.enumerators.npm import enumerate_npm


@dataclass(frozen=True)
class Ecosystem:
    """A supported package ecosystem.

    Attributes:
        name: Short name shown to the user.
        marker: File in the project root that identifies the ecosystem.
        enumerate: Coroutine function listing the project's dependencies.
    """

    name: str
    marker: str
    enumerate: Callable[[RunConfig], Awaitable[list[DependencyRecord]]]

    async def dependencies(self, config: RunConfig) -> list[DependencyRecord]:
        """Enumerate dependencies, de-duplicated by name."""
        return unique_by_name(await self.enumerate(config))


ECOSYSTEMS: tuple[Ecosystem, ...] = (
    Ecosystem(name='node', marker='package.json', enumerate=enumerate_npm),
    Ecosystem(name='dart', marker='pubspec.yaml', enumerate=enumerate_dart),
)


def detect_ecosystem(cwd: Path) -> Ecosystem | None:
    """Return the first ecosystem whose marker exists in *cwd*."""
    for ecosystem in ECOSYSTEMS:
        if (cwd / ecosystem.marker).is_file():
            return ecosystem
    return None


__all__ = [
    'ECOSYSTEMS',
    'Ecosystem',
    'detect_ecosystem',
]
