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

r"""Per-dependency license resolution state machine.

One :class:`LicenseResolver` is shared by all workers in a run; each
call to :meth:`LicenseResolver.resolve` walks a single
:class:`~licensekit._types.DependencyRecord` through an ordered chain of
fallbacks until it reaches a terminal step.

State diagram::

    READ_MANIFEST ─────────┬──no manifest──────────────────► FAILED
      (installed)          │                                   ▲
    REGISTRY_METADATA ─────┤                                   │
      (registry only)      ▼                                   │
                   REPOSITORY_LOOKUP ──no repository───────────┘
                           │
             installed ────┴──── registry only
                 ▼                     │
       LOCAL_LICENSE_FILE ──none──► HOSTING_API ──found──────┐
                 │                     │ nothing             │
                 │                     ▼                     │
                 │             PROBE_LICENSE_FILES           │
                 ▼                     ▼                     ▼
       LANDING_PAGE (scrapes a name only when none was found) ──► DONE

Every handler returns the next :class:`Step`; the loop in
:meth:`LicenseResolver.resolve` is the only place that sequences them.
Handlers never raise for expected faults (missing files, network
errors, bad JSON): those degrade to the next fallback or to a terminal
:class:`~licensekit._types.MissingReason`.
"""

from __future__ import annotations

import asyncio
import enum
import json
import os
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, Final

import httpx

from licensekit._types import DependencyRecord, MissingReason, RepoLicenseKind
from licensekit.clients.github import GitHubClient
from licensekit.clients.registry import (
    fetch_landing_page,
    fetch_npm_repository,
    fetch_pub_package,
    pub_landing_page_url,
)
from licensekit.config import RunContext
from licensekit.licenses import (
    LICENSE_FILE_NAMES,
    PRIMARY_BRANCH_NAMES,
    accept_license_name,
    detect_license_from_text,
    scrape_license_from_html,
)
from licensekit.logging import bound_package, get_logger
from licensekit.probe import ping_with_retry
from licensekit.urls import github_owner_repo, pretty_git_url, safe_url

log = get_logger('licensekit.resolver')

#: Registry id used for packages that ship with the Flutter SDK.
FLUTTER_SDK_ID: Final[str] = 'flutter'

FLUTTER_SDK_REPOSITORY: Final[str] = 'https://github.com/flutter/flutter'


class Step(enum.Enum):
    """States of the resolution state machine."""

    READ_MANIFEST = 'read-manifest'
    REGISTRY_METADATA = 'registry-metadata'
    REPOSITORY_LOOKUP = 'repository-lookup'
    LOCAL_LICENSE_FILE = 'local-license-file'
    HOSTING_API = 'hosting-api'
    PROBE_LICENSE_FILES = 'probe-license-files'
    LANDING_PAGE = 'landing-page'
    DONE = 'done'
    FAILED = 'failed'


TERMINAL_STEPS: Final[frozenset[Step]] = frozenset({Step.DONE, Step.FAILED})


def candidate_license_urls(repository_url: str, filename: str) -> list[str]:
    """Return the URLs at which *filename* may live in a repository.

    If the repository URL already points inside a branch (monorepo
    subdirectories do), the file is looked up right there.  Otherwise
    one URL per primary branch is built, using ``src`` for Bitbucket
    and ``blob`` for GitHub and GitLab.
    """
    repo = repository_url.rstrip('/')
    if any(f'/{branch}/' in repo for branch in PRIMARY_BRANCH_NAMES):
        return [f'{repo}/{filename}']
    segment = 'src' if 'bitbucket.org' in repo else 'blob'
    return [f'{repo}/{segment}/{branch}/{filename}' for branch in PRIMARY_BRANCH_NAMES]


class LicenseResolver:
    """Resolves one dependency record at a time.

    Args:
        context: Per-run context (config, API latch, message log).
        http: Shared HTTP client.
        github: GitHub API client; ``None`` skips the hosting-API step.
    """

    def __init__(
        self,
        context: RunContext,
        http: httpx.AsyncClient,
        github: GitHubClient | None = None,
    ) -> None:
        self._context = context
        self._http = http
        self._github = github
        self._handlers: dict[Step, Callable[[DependencyRecord], Awaitable[Step]]] = {
            Step.READ_MANIFEST: self._read_manifest,
            Step.REGISTRY_METADATA: self._registry_metadata,
            Step.REPOSITORY_LOOKUP: self._repository_lookup,
            Step.LOCAL_LICENSE_FILE: self._local_license_file,
            Step.HOSTING_API: self._hosting_api,
            Step.PROBE_LICENSE_FILES: self._probe_license_files,
            Step.LANDING_PAGE: self._landing_page,
        }

    @staticmethod
    def entry_step(record: DependencyRecord) -> Step:
        """Installed packages start from their manifest, others from the registry."""
        if record.install_location is not None:
            return Step.READ_MANIFEST
        return Step.REGISTRY_METADATA

    async def resolve(self, record: DependencyRecord) -> DependencyRecord:
        """Run the state machine for *record* and finalize it."""
        step = self.entry_step(record)
        with bound_package(record.name):
            try:
                while step not in TERMINAL_STEPS:
                    log.debug('resolver_step', step=step.value)
                    step = await self._handlers[step](record)
            except Exception:  # noqa: BLE001
                log.exception('resolver_failed', step=step.value)
            record.finalize()
            log.debug(
                'resolved',
                license=record.license,
                license_url=record.license_url,
                reason=record.missing_reason.value,
            )
        return record

    async def validate_license_url(self, record: DependencyRecord, filename: str) -> bool:
        """Probe the repository for *filename*; memoized per record.

        Once the record has a verdict it is returned without probing.
        """
        if record.license_url_validated is not None:
            return record.license_url_validated
        if not record.repository_url:
            return False
        for url in candidate_license_urls(record.repository_url, filename):
            found = await ping_with_retry(self._http, url)
            log.debug('license_url_checked', url=url, exists=found is not None)
            if found:
                record.license_url = found
                record.mark_validated(True)
                return True
        return False

    # ── Handlers ─────────────────────────────────────────────────────

    async def _read_manifest(self, record: DependencyRecord) -> Step:
        manifest = None
        if record.install_location is not None:
            manifest = await asyncio.to_thread(_load_manifest, record.install_location / 'package.json')
        if manifest is None:
            log.debug('no_local_manifest')
            record.fail(MissingReason.NO_LOCAL_MANIFEST)
            return Step.FAILED

        description = manifest.get('description')
        if isinstance(description, str) and description.strip():
            record.description = description.strip()
        record.license = accept_license_name(_manifest_license(manifest))
        record.repository_url = _manifest_repository(manifest)
        return Step.REPOSITORY_LOOKUP

    async def _registry_metadata(self, record: DependencyRecord) -> Step:
        registry_id = record.registry_id
        if registry_id == FLUTTER_SDK_ID:
            record.repository_url = FLUTTER_SDK_REPOSITORY
        elif registry_id:
            package = await fetch_pub_package(self._http, registry_id)
            if package is not None:
                record.name = package.name
                record.description = package.description or record.description
                record.repository_url = pretty_git_url(package.repository or package.homepage) or record.repository_url
        return Step.REPOSITORY_LOOKUP

    async def _repository_lookup(self, record: DependencyRecord) -> Step:
        if safe_url(record.repository_url).scheme is None and record.install_location is not None:
            raw = await fetch_npm_repository(self._http, record.name)
            if raw:
                record.repository_url = pretty_git_url(raw)

        if safe_url(record.repository_url).scheme is None:
            log.debug('no_repository', repository=record.repository_url)
            record.fail(MissingReason.NO_REPOSITORY)
            return Step.FAILED
        if record.install_location is not None:
            return Step.LOCAL_LICENSE_FILE
        return Step.HOSTING_API

    async def _local_license_file(self, record: DependencyRecord) -> Step:
        location = record.install_location
        if location is None:
            return Step.HOSTING_API
        contents = await asyncio.to_thread(_list_dir, location)
        filename = next((name for name in LICENSE_FILE_NAMES if name in contents), None)
        if filename is None:
            log.debug('no_local_license')
            return Step.HOSTING_API

        if not await self.validate_license_url(record, filename):
            # Point at the copy on disk instead.
            record.license_url = _relative_path(location / filename, self._context.config.cwd)
            record.mark_validated(False)
        if record.license is None:
            text = await asyncio.to_thread(_read_text, location / filename)
            record.license = detect_license_from_text(text)
        return Step.LANDING_PAGE

    async def _hosting_api(self, record: DependencyRecord) -> Step:
        slug = github_owner_repo(record.repository_url)
        if slug is None or self._github is None or not self._context.api.enabled:
            return Step.PROBE_LICENSE_FILES

        result = await self._github.get_repo_license(*slug)
        if result.disables_api:
            self._context.api.disable()
            self._context.note(result.message)
            log.debug('github_api_disabled', reason=result.message)
            return Step.PROBE_LICENSE_FILES
        if result.kind is RepoLicenseKind.FOUND and result.download_url:
            log.debug('github_license_found', license=result.license)
            record.license_url = result.download_url
            record.mark_validated(True)
            record.license = accept_license_name(result.license) or record.license
            return Step.LANDING_PAGE
        return Step.PROBE_LICENSE_FILES

    async def _probe_license_files(self, record: DependencyRecord) -> Step:
        for filename in LICENSE_FILE_NAMES:
            if await self.validate_license_url(record, filename):
                return Step.LANDING_PAGE
        log.debug('no_web_license')
        record.fail(MissingReason.NO_WEB_MATCH)
        return Step.LANDING_PAGE

    async def _landing_page(self, record: DependencyRecord) -> Step:
        registry_id = record.registry_id
        if record.license is None and registry_id and registry_id != FLUTTER_SDK_ID:
            html = await fetch_landing_page(self._http, pub_landing_page_url(registry_id))
            record.license = scrape_license_from_html(html) if html else None
            log.debug('landing_page_scraped', license=record.license)
        return Step.DONE


# ── Manifest helpers ─────────────────────────────────────────────────


def _load_manifest(path: Path) -> dict[str, Any] | None:
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except (OSError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def _manifest_license(manifest: dict[str, Any]) -> str | None:
    """Read ``license``, its ``{type}`` form, or deprecated ``licenses[0]``."""
    lic = manifest.get('license')
    if isinstance(lic, dict):
        lic = lic.get('type')
    if isinstance(lic, str) and lic.strip():
        return lic
    licenses = manifest.get('licenses')
    if isinstance(licenses, list) and licenses and isinstance(licenses[0], dict):
        first = licenses[0].get('type')
        if isinstance(first, str):
            return first
    return None


def _manifest_repository(manifest: dict[str, Any]) -> str | None:
    repository = manifest.get('repository')
    if isinstance(repository, str):
        return pretty_git_url(repository)
    if not isinstance(repository, dict):
        return None
    url = repository.get('url')
    url = pretty_git_url(url) if isinstance(url, str) else None
    directory = repository.get('directory')
    if url and isinstance(directory, str) and directory.strip('/'):
        # Monorepo packages live in a subdirectory of the default branch.
        url = f'{url}/blob/main/{directory.strip("/")}'
    return url


def _list_dir(path: Path) -> frozenset[str]:
    try:
        return frozenset(os.listdir(path))
    except OSError:
        return frozenset()


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding='utf-8', errors='replace')
    except OSError:
        return ''


def _relative_path(path: Path, root: Path) -> str:
    try:
        return os.path.relpath(path, root)
    except ValueError:
        return str(path)


__all__ = [
    'FLUTTER_SDK_REPOSITORY',
    'LicenseResolver',
    'Step',
    'TERMINAL_STEPS',
    'candidate_license_urls',
]
