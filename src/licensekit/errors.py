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

"""Exceptions for process-level licensekit faults.

Per-dependency faults never raise; they end up as a
:class:`~licensekit._types.MissingReason` on the record instead.
"""

from __future__ import annotations

__all__ = [
    'EnumerationError',
    'GitHubAuthError',
    'LicenseKitError',
]


class LicenseKitError(Exception):
    """Base exception for all licensekit errors."""


class EnumerationError(LicenseKitError):
    """Raised when the project's dependency list cannot be built."""

    def __init__(self, ecosystem: str, reason: str) -> None:
        self.ecosystem = ecosystem
        self.reason = reason
        super().__init__(f'cannot list {ecosystem} dependencies: {reason}')


class GitHubAuthError(LicenseKitError):
    """Raised when the GitHub API rejects the configured token."""
