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

"""Lightweight existence checks for license URLs.

:func:`probe` sends a single ``HEAD`` request and classifies the
response; :func:`ping_with_retry` layers redirect following and a
fixed-backoff retry for rate-limited hosts on top of it.

Status mapping::

    200                    → EXISTS
    301/302/307/308        → REDIRECT(Location), or EXISTS without one
    429                    → RATE_LIMITED
    any other status       → NOT_FOUND
    transport error / bad URL → NETWORK_ERROR
"""

from __future__ import annotations

import asyncio
from typing import Final
from urllib.parse import urljoin

import httpx

from licensekit._types import ProbeOutcome, ProbeResult
from licensekit.logging import get_logger

log = get_logger('licensekit.probe')

#: Total attempts against a rate-limited host.
MAX_ATTEMPTS: Final[int] = 3

#: Fixed wait between rate-limited attempts, in seconds.
RATE_LIMIT_BACKOFF: Final[float] = 2.0

#: Redirect hops followed before giving up.
MAX_REDIRECTS: Final[int] = 5

_REDIRECT_STATUSES: Final[frozenset[int]] = frozenset({301, 302, 307, 308})


async def probe(client: httpx.AsyncClient, url: str) -> ProbeResult:
    """Check whether *url* exists without transferring a body."""
    try:
        resp = await client.head(url, follow_redirects=False)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        log.debug('probe_network_error', url=url, error=str(exc) or type(exc).__name__)
        return ProbeResult(ProbeOutcome.NETWORK_ERROR)

    status = resp.status_code
    if status == 200:
        return ProbeResult(ProbeOutcome.EXISTS, status=status)
    if status in _REDIRECT_STATUSES:
        location = resp.headers.get('location')
        if location:
            try:
                target = urljoin(url, location)
            except ValueError:
                log.debug('probe_bad_location', url=url, location=location)
                return ProbeResult(ProbeOutcome.NETWORK_ERROR, status=status)
            return ProbeResult(ProbeOutcome.REDIRECT, location=target, status=status)
        return ProbeResult(ProbeOutcome.EXISTS, status=status)
    if status == 429:
        return ProbeResult(ProbeOutcome.RATE_LIMITED, status=status)
    return ProbeResult(ProbeOutcome.NOT_FOUND, status=status)


async def ping_with_retry(
    client: httpx.AsyncClient,
    url: str,
    *,
    max_attempts: int = MAX_ATTEMPTS,
    backoff: float = RATE_LIMIT_BACKOFF,
    max_redirects: int = MAX_REDIRECTS,
) -> str | None:
    """Return the URL that finally exists after redirects, or ``None``.

    Redirects are followed up to *max_redirects* hops.  A rate-limited
    target is retried after *backoff* seconds, for at most
    *max_attempts* attempts in total.  Not-found and network errors are
    not retried.
    """
    target = url
    attempts = 0
    hops = 0
    while True:
        result = await probe(client, target)
        if result.outcome is ProbeOutcome.EXISTS:
            return target
        if result.outcome is ProbeOutcome.REDIRECT and result.location:
            hops += 1
            if hops > max_redirects:
                log.debug('probe_redirect_limit', url=url, hops=hops - 1)
                return None
            target = result.location
            continue
        if result.outcome is ProbeOutcome.RATE_LIMITED:
            attempts += 1
            if attempts >= max_attempts:
                log.warning('probe_rate_limited', url=target, attempts=attempts)
                return None
            await asyncio.sleep(backoff)
            continue
        return None


__all__ = [
    'MAX_ATTEMPTS',
    'MAX_REDIRECTS',
    'RATE_LIMIT_BACKOFF',
    'ping_with_retry',
    'probe',
]
