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

"""Shared leaf-level types used across licensekit.

This module must have **zero** imports from other ``licensekit``
modules to avoid circular-import chains.  It is safe to import
from any module in the project.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

__all__ = [
    'DependencyRecord',
    'MissingReason',
    'ProbeOutcome',
    'ProbeResult',
    'RepoLicenseKind',
    'RepoLicenseResult',
    'unique_by_name',
]


class MissingReason(str, enum.Enum):
    """Why a dependency ended up without a license."""

    NONE = 'none'
    NO_LOCAL_MANIFEST = 'no-local-manifest'
    NO_WEB_MATCH = 'no-web-match'
    NO_REPOSITORY = 'no-repository'


@dataclass
class DependencyRecord:
    """One dependency being resolved.

    A record is created by an enumerator, mutated only by its own
    resolver run, and read-only once the scheduler has collected it.

    Attributes:
        name: Dependency name, unique within a run. The registry
            metadata lookup may rewrite it once.
        install_location: Directory the package is installed in, or
            ``None`` for registry-only ecosystems.
        registry_id: Identifier in the external registry for
            registry-only ecosystems (e.g. a pub.dev package name).
        repository_url: Canonical repository browsing URL.
        description: Short description from the manifest or registry.
        license: Accepted license name.
        license_url: Where the license text can be read.
        license_url_validated: ``None`` until a verdict is reached,
            then ``True`` or ``False`` and never changed again.
        missing_reason: Terminal failure reason.
    """

    name: str
    install_location: Path | None = None
    registry_id: str | None = None
    repository_url: str | None = None
    description: str | None = None
    license: str | None = None
    license_url: str | None = None
    license_url_validated: bool | None = None
    missing_reason: MissingReason = MissingReason.NONE

    @property
    def resolved(self) -> bool:
        """``True`` if a license name was found."""
        return bool(self.license)

    def mark_validated(self, verdict: bool) -> None:
        """Record the license URL verdict unless one is already set."""
        if self.license_url_validated is None:
            self.license_url_validated = verdict

    def fail(self, reason: MissingReason) -> None:
        """Record a terminal failure."""
        self.mark_validated(False)
        self.missing_reason = reason

    def finalize(self) -> None:
        """Settle the record into exactly one terminal state.

        A record with a license carries no missing reason.  One without
        a license keeps ``NONE`` only if its license URL was validated.
        """
        if self.license:
            self.missing_reason = MissingReason.NONE
        elif self.missing_reason is MissingReason.NONE and self.license_url_validated is not True:
            self.missing_reason = MissingReason.NO_WEB_MATCH
        self.mark_validated(False)


def unique_by_name(records: Iterable[DependencyRecord]) -> list[DependencyRecord]:
    """Drop records whose name was already seen; first occurrence wins."""
    seen: set[str] = set()
    unique: list[DependencyRecord] = []
    for record in records:
        if record.name in seen:
            continue
        seen.add(record.name)
        unique.append(record)
    return unique


class ProbeOutcome(str, enum.Enum):
    """Classification of a single existence check."""

    EXISTS = 'exists'
    REDIRECT = 'redirect'
    NOT_FOUND = 'not-found'
    RATE_LIMITED = 'rate-limited'
    NETWORK_ERROR = 'network-error'


@dataclass(frozen=True)
class ProbeResult:
    """Result of probing one URL.

    Attributes:
        outcome: How the response was classified.
        location: Absolute redirect target for ``REDIRECT`` outcomes.
        status: HTTP status code, or ``None`` on network errors.
    """

    outcome: ProbeOutcome
    location: str | None = None
    status: int | None = None


class RepoLicenseKind(str, enum.Enum):
    """Tag for :class:`RepoLicenseResult`."""

    FOUND = 'found'
    RATE_LIMITED = 'rate-limited'
    NOT_FOUND = 'not-found'
    AUTH_ERROR = 'auth-error'


@dataclass(frozen=True)
class RepoLicenseResult:
    """Result of a hosting-API license lookup.

    Attributes:
        kind: Which variant this result is.
        license: SPDX id reported by the API. Empty when the API could
            not assert one (``NOASSERTION``).
        download_url: URL of the license file for ``FOUND`` results.
        message: API error message for ``RATE_LIMITED`` and
            ``AUTH_ERROR`` results.
    """

    kind: RepoLicenseKind
    license: str = ''
    download_url: str = ''
    message: str = ''

    @property
    def disables_api(self) -> bool:
        """``True`` if further API calls in this run are pointless."""
        return self.kind in (RepoLicenseKind.RATE_LIMITED, RepoLicenseKind.AUTH_ERROR)
