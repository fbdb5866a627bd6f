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

"""HTTP client factory and retrying request helper.

Every network call in licensekit goes through one shared
:class:`httpx.AsyncClient` created by :func:`http_client`, so the whole
run shares a single connection pool.  Registry calls go through
:func:`request_with_retry`, which retries rate-limited (429) and server
error (5xx) responses as well as transport errors with exponential
backoff plus jitter.  License-file probes have their own fixed-backoff
policy in :mod:`licensekit.probe`.
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Final

import httpx

from licensekit.logging import get_logger

log = get_logger('licensekit.net')

#: Maximum simultaneous connections in the shared pool.
DEFAULT_POOL_SIZE: Final[int] = 16

#: Per-request timeout in seconds.
DEFAULT_TIMEOUT: Final[float] = 10.0

#: Total attempts for :func:`request_with_retry`.
MAX_RETRIES: Final[int] = 3

#: Base delay for exponential backoff, in seconds.
RETRY_BASE_DELAY: Final[float] = 1.0

USER_AGENT: Final[str] = 'licensekit/0.1'

_RETRY_STATUSES: Final[frozenset[int]] = frozenset({429, 500, 502, 503, 504})


@asynccontextmanager
async def http_client(
    *,
    pool_size: int = DEFAULT_POOL_SIZE,
    timeout: float = DEFAULT_TIMEOUT,
    headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield a configured :class:`httpx.AsyncClient`.

    Args:
        pool_size: Maximum number of concurrent connections.
        timeout: Request timeout in seconds.
        headers: Extra default headers.
        transport: Optional transport override (tests pass an
            :class:`httpx.MockTransport`).
    """
    default_headers = {'User-Agent': USER_AGENT}
    if headers:
        default_headers.update(headers)
    async with httpx.AsyncClient(
        headers=default_headers,
        timeout=timeout,
        limits=httpx.Limits(max_connections=pool_size),
        transport=transport,
    ) as client:
        yield client


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    max_retries: int = MAX_RETRIES,
    base_delay: float = RETRY_BASE_DELAY,
    **kwargs: Any,  # noqa: ANN401
) -> httpx.Response:
    """Send a request, retrying 429/5xx responses and transport errors.

    The last response is returned even if it is still a retryable
    status; callers check ``status_code`` themselves.

    Raises:
        httpx.HTTPError: If every attempt failed at the transport level.
    """
    last_exc: httpx.HTTPError | None = None
    for attempt in range(max_retries):
        try:
            resp = await client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            log.debug('request_error', url=url, attempt=attempt + 1, error=str(exc))
            last_exc = exc
        else:
            if resp.status_code not in _RETRY_STATUSES or attempt == max_retries - 1:
                return resp
            log.debug('request_retry', url=url, status=resp.status_code, attempt=attempt + 1)

        if attempt < max_retries - 1:
            delay = base_delay * (2**attempt)
            await asyncio.sleep(delay + random.uniform(0, delay / 2))  # noqa: S311

    raise last_exc  # type: ignore[misc]


__all__ = [
    'DEFAULT_POOL_SIZE',
    'DEFAULT_TIMEOUT',
    'MAX_RETRIES',
    'http_client',
    'request_with_retry',
]
