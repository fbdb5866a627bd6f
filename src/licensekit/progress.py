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

"""Progress bar for the resolution phase."""

from __future__ import annotations

import sys
from types import TracebackType

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from licensekit._types import DependencyRecord


class ResolutionProgress:
    """Context manager around a transient :class:`rich.progress.Progress`.

    The bar is drawn on stderr and disabled in verbose mode (the log
    trace replaces it) or when stderr is not a terminal.  Pass
    :meth:`advance` as the scheduler's ``on_result`` callback.
    """

    def __init__(self, total: int, *, verbose: bool = False, console: Console | None = None) -> None:
        self.total = total
        self.completed = 0
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn('[bold blue]Resolving licenses'),
            BarColumn(bar_width=30),
            MofNCompleteColumn(),
            TextColumn('•'),
            TextColumn('[dim]{task.fields[current]}'),
            TextColumn('•'),
            TimeElapsedColumn(),
            console=console or Console(stderr=True, force_terminal=None),
            transient=True,
            disable=verbose or not sys.stderr.isatty(),
        )
        self._task: TaskID | None = None

    def __enter__(self) -> ResolutionProgress:
        self._progress.start()
        self._task = self._progress.add_task('Resolving', total=self.total, current='starting…')
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self._progress.stop()

    def advance(self, record: DependencyRecord) -> None:
        self.completed += 1
        if self._task is not None:
            self._progress.update(self._task, advance=1, current=record.name)


__all__ = [
    'ResolutionProgress',
]
