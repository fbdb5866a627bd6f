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

"""Package-registry metadata lookups.

These are fallbacks used by the resolver when the local manifest has
nothing useful:

- **npm**: the registry document's ``repository`` field, for packages
  whose ``package.json`` omits it.
- **pub.dev**: the package API, which is the only metadata source for
  Dart dependencies, plus the package's landing page for scraping a
  license name.

Every function here swallows network and parse errors and returns
``None`` / an empty string; a failed lookup simply means "no more
information".
"""

from __future__ import annotations

import urllib.parse
from dataclasses import dataclass
from typing import Any, Final

import httpx

from licensekit.logging import get_logger
from licensekit.net import MAX_RETRIES, request_with_retry

log = get_logger('licensekit.clients.registry')

NPM_REGISTRY_URL: Final[str] = 'https://registry.npmjs.org'
PUB_DEV_URL: Final[str] = 'https://pub.dev'


@dataclass(frozen=True)
class PubPackage:
    """The parts of a pub.dev ``latest.pubspec`` we use."""

    name: str
    description: str = ''
    repository: str = ''
    homepage: str = ''


async def _get_json(client: httpx.AsyncClient, url: str, *, max_retries: int) -> Any:  # noqa: ANN401
    try:
        resp = await request_with_retry(client, 'GET', url, max_retries=max_retries)
    except httpx.HTTPError as exc:
        log.debug('registry_unreachable', url=url, error=str(exc))
        return None
    if resp.status_code != 200:
        log.debug('registry_status', url=url, status=resp.status_code)
        return None
    try:
        return resp.json()
    except ValueError:
        log.debug('registry_bad_json', url=url)
        return None


async def fetch_npm_repository(
    client: httpx.AsyncClient,
    package: str,
    *,
    base_url: str = NPM_REGISTRY_URL,
    max_retries: int = MAX_RETRIES,
) -> str | None:
    """Return the raw ``repository`` reference from the npm registry."""
    encoded = urllib.parse.quote(package, safe='@') if package.startswith('@') else package
    data = await _get_json(client, f'{base_url}/{encoded}', max_retries=max_retries)
    if not isinstance(data, dict):
        return None
    repository = data.get('repository')
    if isinstance(repository, dict):
        repository = repository.get('url')
    if isinstance(repository, str) and repository.strip():
        return repository.strip()
    return None


async def fetch_pub_package(
    client: httpx.AsyncClient,
    package: str,
    *,
    base_url: str = PUB_DEV_URL,
    max_retries: int = MAX_RETRIES,
) -> PubPackage | None:
    """Return the latest pubspec of a pub.dev package, or ``None``."""
    data = await _get_json(client, f'{base_url}/api/packages/{package}', max_retries=max_retries)
    if not isinstance(data, dict) or 'error' in data:
        return None
    latest = data.get('latest')
    pubspec = latest.get('pubspec') if isinstance(latest, dict) else None
    if not isinstance(pubspec, dict):
        return None
    return PubPackage(
        name=str(pubspec.get('name') or package),
        description=str(pubspec.get('description') or ''),
        repository=str(pubspec.get('repository') or ''),
        homepage=str(pubspec.get('homepage') or ''),
    )


def pub_landing_page_url(package: str, *, base_url: str = PUB_DEV_URL) -> str:
    """Return the pub.dev landing page URL for *package*."""
    return f'{base_url}/packages/{package}'


async def fetch_landing_page(
    client: httpx.AsyncClient,
    url: str,
    *,
    max_retries: int = MAX_RETRIES,
) -> str:
    """Return the HTML of a registry landing page, or ``''``."""
    try:
        resp = await request_with_retry(client, 'GET', url, max_retries=max_retries, follow_redirects=True)
    except httpx.HTTPError as exc:
        log.debug('landing_page_unreachable', url=url, error=str(exc))
        return ''
    if resp.status_code != 200:
        return ''
    return resp.text


__all__ = [
    'NPM_REGISTRY_URL',
    'PUB_DEV_URL',
    'PubPackage',
    'fetch_landing_page',
    'fetch_npm_repository',
    'fetch_pub_package',
    'pub_landing_page_url',
]
