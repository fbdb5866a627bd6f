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

"""Run configuration and per-run mutable context.

:class:`RunConfig` is the immutable result of parsing the command line
and environment.  :class:`RunContext` wraps it together with the small
amount of state that workers share during a run (the hosting-API latch
and the deduplicated end-of-run messages).  A fresh context is built for
every run, so two runs in one process never see each other's state.
"""

from __future__ import annotations

import argparse
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

__all__ = [
    'DEFAULT_CONCURRENCY',
    'IGNORE_FILE_NAME',
    'REPORT_FILE_NAME',
    'ApiLatch',
    'RunConfig',
    'RunContext',
]

#: Maximum resolutions in flight at once.
DEFAULT_CONCURRENCY: Final[int] = 4

#: Report written to the project root.
REPORT_FILE_NAME: Final[str] = 'installed-packages.txt'

#: Optional ignore-patterns file in the project root.
IGNORE_FILE_NAME: Final[str] = '.licenseignore'


@dataclass(frozen=True)
class RunConfig:
    """Settings for one licensekit run.

    Attributes:
        cwd: Project root to scan.
        deep: Include transitive dependencies where supported.
        verbose: Per-dependency trace instead of a progress bar.
        quiet: Only warnings and errors in the log stream.
        json_log: Emit JSON log lines.
        github_token: Token for the GitHub API, if any.
        concurrency: Maximum resolutions in flight.
    """

    cwd: Path
    deep: bool = False
    verbose: bool = False
    quiet: bool = False
    json_log: bool = False
    github_token: str | None = None
    concurrency: int = DEFAULT_CONCURRENCY

    @property
    def report_path(self) -> Path:
        """Where the report is written."""
        return self.cwd / REPORT_FILE_NAME

    @property
    def ignore_path(self) -> Path:
        """Where the ignore-patterns file is looked for."""
        return self.cwd / IGNORE_FILE_NAME

    @classmethod
    def from_args(
        cls,
        args: argparse.Namespace,
        environ: Mapping[str, str] | None = None,
    ) -> RunConfig:
        """Build a config from parsed CLI arguments and the environment."""
        env = os.environ if environ is None else environ
        return cls(
            cwd=Path(args.cwd).resolve(),
            deep=args.deep,
            verbose=args.verbose,
            quiet=args.quiet,
            json_log=args.json_log,
            github_token=env.get('GITHUB_TOKEN') or None,
        )


class ApiLatch:
    """One-way switch for hosting-API usage.

    Starts open (or closed, if constructed so) and can only ever be
    closed.  Closing twice is harmless.
    """

    def __init__(self, enabled: bool = True) -> None:
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    def disable(self) -> None:
        self._enabled = False


@dataclass
class RunContext:
    """State shared by every worker during one run."""

    config: RunConfig
    api: ApiLatch = field(default_factory=ApiLatch)
    messages: list[str] = field(default_factory=list)

    def note(self, message: str) -> None:
        """Remember *message* for the end-of-run log, once."""
        if message and message not in self.messages:
            self.messages.append(message)
