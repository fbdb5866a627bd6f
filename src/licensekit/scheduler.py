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

"""Bounded-concurrency fan-out of resolver runs.

Usage::

    scheduler = ResolutionScheduler(resolver.resolve, concurrency=4)
    scheduler.push(records)
    results = await scheduler.drain()

Records may be pushed at any point until :meth:`ResolutionScheduler.drain`
returns; each push starts work immediately, limited by a semaphore.
Results arrive in completion order; only the report sorts them.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable

from licensekit._types import DependencyRecord
from licensekit.config import DEFAULT_CONCURRENCY
from licensekit.logging import bound_package, get_logger

log = get_logger('licensekit.scheduler')

Resolve = Callable[[DependencyRecord], Awaitable[object]]


class ResolutionScheduler:
    """Runs a resolver over records with at most *concurrency* in flight.

    Args:
        resolve: Coroutine function that resolves one record in place.
        concurrency: Maximum simultaneous resolutions.
        on_result: Called with each record as it completes.
        on_complete: Called once with all results when :meth:`drain`
            finishes.
    """

    def __init__(
        self,
        resolve: Resolve,
        *,
        concurrency: int = DEFAULT_CONCURRENCY,
        on_result: Callable[[DependencyRecord], None] | None = None,
        on_complete: Callable[[list[DependencyRecord]], None] | None = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError(f'concurrency must be positive, got {concurrency}')
        self._resolve = resolve
        self._sem = asyncio.Semaphore(concurrency)
        self._on_result = on_result
        self._on_complete = on_complete
        self._pending: set[asyncio.Task[None]] = set()
        self._seen: set[str] = set()
        self.results: list[DependencyRecord] = []

    @property
    def pending(self) -> int:
        """Number of pushed records that have not completed yet."""
        return len(self._pending)

    def push(self, records: Iterable[DependencyRecord]) -> None:
        """Schedule *records*; must be called from a running event loop.

        A name is scheduled at most once per scheduler; later records
        with the same name are dropped.
        """
        for record in records:
            if record.name in self._seen:
                log.debug('duplicate_skipped', package=record.name)
                continue
            self._seen.add(record.name)
            task = asyncio.create_task(self._do_one(record), name=f'resolve:{record.name}')
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    async def _do_one(self, record: DependencyRecord) -> None:
        async with self._sem:
            with bound_package(record.name):
                try:
                    await self._resolve(record)
                except Exception:  # noqa: BLE001
                    log.exception('resolution_crashed')
                record.finalize()
        self.results.append(record)
        if self._on_result is not None:
            self._on_result(record)

    async def drain(self) -> list[DependencyRecord]:
        """Wait for every pushed record, including ones pushed meanwhile."""
        while self._pending:
            await asyncio.gather(*list(self._pending))
        if self._on_complete is not None:
            self._on_complete(self.results)
        return self.results


__all__ = [
    'ResolutionScheduler',
]
